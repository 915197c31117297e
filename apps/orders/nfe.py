"""
NF-e reader for delivery-order documents.

Extracts what the document upload needs from the invoice XML: the NF-e
number and access key, the total commercial quantity (qCom summed over
the det items) and any purchase-order or order-id reference written in
xPed / infCpl. Checks on these values produce warnings only.
"""
from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import List, Optional

PURCHASE_ORDER_PATTERNS = [
    re.compile(r'PEDIDO\s*(?:DE\s*)?COMPRA\s*[:\-]?\s*N?[ºo°]?\s*(\d+)', re.IGNORECASE),
    re.compile(r'PED(?:IDO)?\.?\s*COMPRA\s*[:\-]?\s*(\d+)', re.IGNORECASE),
    re.compile(r'ORDEM\s*(?:DE\s*)?COMPRA\s*[:\-]?\s*(\d+)', re.IGNORECASE),
    re.compile(r'\bO\.?C\.?\s*[:\-]?\s*(\d+)', re.IGNORECASE),
    re.compile(r'N[ºo°]?\s*PEDIDO\s*[:\-]?\s*(\d+)', re.IGNORECASE),
]
ORDER_ID_PATTERN = re.compile(r'\b([A-Z]{2,4}\d{10})\b', re.IGNORECASE)


@dataclass
class NfeDocument:
    """Dados extraídos do XML da NF-e."""
    has_invoice: bool
    nfe_number: str = ''
    nfe_key: str = ''
    total_quantity: Optional[Decimal] = None
    purchase_order_number: Optional[str] = None
    order_reference: Optional[str] = None
    item_count: int = 0
    warnings: List[str] = field(default_factory=list)


class NfeParser:
    """Parser de XML de NF-e."""

    NAMESPACES = [
        {'nfe': 'http://www.portalfiscal.inf.br/nfe'},
        {'nfe': ''},
    ]

    def __init__(self, xml_content: bytes):
        self.xml_content = xml_content
        self.root = None
        self.ns = None
        self.inf_nfe = None
        self._parse()

    def _parse(self) -> None:
        try:
            self.root = ET.fromstring(self.xml_content)
        except ET.ParseError as e:
            raise ValueError(f"XML inválido: {str(e)}")

        for ns in self.NAMESPACES:
            inf_nfe = self.root.find('.//nfe:infNFe', ns)
            if inf_nfe is not None:
                self.ns = ns
                self.inf_nfe = inf_nfe
                return

        inf_nfe = self.root.find('.//infNFe')
        if self.root.tag == 'infNFe':
            inf_nfe = self.root
        self.ns = {}
        self.inf_nfe = inf_nfe

    def _find(self, path: str, parent=None):
        base = parent if parent is not None else self.root
        if self.ns:
            return base.find(path, self.ns)
        return base.find(path.replace('nfe:', ''))

    def _find_text(self, path: str, parent=None, default: str = '') -> str:
        elem = self._find(path, parent)
        return elem.text.strip() if elem is not None and elem.text else default

    def _find_all(self, path: str, parent=None):
        base = parent if parent is not None else self.root
        if self.ns:
            return base.findall(path, self.ns)
        return base.findall(path.replace('nfe:', ''))

    def total_quantity(self) -> Optional[Decimal]:
        """Soma de qCom de todos os itens. None quando nenhum item tem quantidade válida."""
        total = None
        for det in self._find_all('.//nfe:det', self.inf_nfe):
            text = self._find_text('nfe:prod/nfe:qCom', det)
            if not text:
                continue
            try:
                quantity = Decimal(text)
            except InvalidOperation:
                continue
            total = quantity if total is None else total + quantity
        return total

    def nfe_key(self) -> str:
        key = self._find_text('.//nfe:chNFe')
        if key:
            return key
        return (self.inf_nfe.get('Id', '') if self.inf_nfe is not None else '').replace('NFe', '')

    def purchase_order_number(self) -> Optional[str]:
        for xped in self._find_all('.//nfe:xPed', self.inf_nfe):
            if xped.text:
                match = re.search(r'(\d+)', xped.text)
                if match:
                    return match.group(1)

        additional = self._find_text('.//nfe:infAdic/nfe:infCpl', self.inf_nfe)
        for pattern in PURCHASE_ORDER_PATTERNS:
            match = pattern.search(additional)
            if match:
                return match.group(1)
        return None

    def order_reference(self) -> Optional[str]:
        texts = [self._find_text('.//nfe:infAdic/nfe:infCpl', self.inf_nfe)]
        texts.extend(elem.text or '' for elem in self._find_all('.//nfe:xProd', self.inf_nfe))
        for text in texts:
            match = ORDER_ID_PATTERN.search(text)
            if match:
                return match.group(1).upper()
        return None

    def parse(self) -> NfeDocument:
        if self.inf_nfe is None:
            return NfeDocument(
                has_invoice=False,
                warnings=["Estrutura infNFe não encontrada no XML; quantidade não conferida"],
            )

        return NfeDocument(
            has_invoice=True,
            nfe_number=self._find_text('.//nfe:ide/nfe:nNF', self.inf_nfe),
            nfe_key=self.nfe_key(),
            total_quantity=self.total_quantity(),
            purchase_order_number=self.purchase_order_number(),
            order_reference=self.order_reference(),
            item_count=len(self._find_all('.//nfe:det', self.inf_nfe)),
        )


def _strip_zeros(value: str) -> str:
    return value.strip().lstrip('0')


def check_references(document: NfeDocument, order) -> List[str]:
    """Compares the references found in the XML with the order. Returns warnings."""
    from .models import DeliveryOrder

    warnings = list(document.warnings)
    if not document.has_invoice:
        return warnings

    if not document.nfe_number:
        warnings.append("Número da NF-e não encontrado no XML")
    if not document.nfe_key:
        warnings.append("Chave de acesso da NF-e não encontrada no XML")

    expected_po = order.purchase_order.order_number
    if document.purchase_order_number is None:
        warnings.append(f"Número da ordem de compra ({expected_po}) não encontrado no XML")
    elif _strip_zeros(document.purchase_order_number) != _strip_zeros(expected_po):
        warnings.append(
            f"Ordem de compra do XML ({document.purchase_order_number}) "
            f"diverge da ordem do pedido ({expected_po})"
        )

    if document.order_reference and document.order_reference != order.order_id.upper():
        warnings.append(
            f"O XML referencia o pedido {document.order_reference}, diferente de {order.order_id}"
        )

    if document.nfe_key:
        duplicate = (
            DeliveryOrder.objects
            .filter(nfe_key=document.nfe_key)
            .exclude(pk=order.pk)
            .values_list('order_id', flat=True)
            .first()
        )
        if duplicate:
            warnings.append(f"Esta NF-e já foi enviada para o pedido {duplicate}")

    return warnings
