"""
Orders Services - Creation and lifecycle operations of delivery orders

Every mutating operation runs inside transaction.atomic with the order row
locked, asks OrderLifecycle for the target status and writes its SystemLog
row in the same transaction, after the change.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING, Dict, List, Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.accounts.models import Capability
from apps.companies.models import Company
from apps.core.exceptions import (
    AuthorizationError,
    InsufficientBalanceError,
    NotFoundError,
    StateConflictError,
    ValidationError,
)
from apps.core.models import SystemLog
from apps.procurement.services import BalanceLedger, PurchaseOrderService, parse_non_negative_decimal, quantize
from apps.products.models import ConfirmationType, Product

from .identifiers import generate_order_id
from .lifecycle import Action, OrderLifecycle
from .models import DeliveryOrder, DocumentType, OrderDocument, OrderStatus, TrackingPoint
from .nfe import NfeParser, check_references
from .urgency import classify_urgency

if TYPE_CHECKING:
    from apps.accounts.access import AccessContext

logger = logging.getLogger(__name__)

ITEM_TYPE = 'order'
COORDINATE_PLACES = Decimal('0.000001')


@dataclass
class OrderInput:
    purchase_order_id: int
    product_id: int
    quantity: Decimal
    supplier_id: int
    delivery_date: datetime
    work_location: str = ''


@dataclass
class DocumentUploadResult:
    order: DeliveryOrder
    warnings: List[str] = field(default_factory=list)
    quantity_updated: bool = False
    previous_quantity: Optional[Decimal] = None


def _lock_order(pk) -> DeliveryOrder:
    """Fetches the order with its row locked. Must be called inside transaction.atomic."""
    try:
        return (
            DeliveryOrder.objects
            .select_for_update(of=('self',))
            .select_related('purchase_order', 'product', 'supplier')
            .get(pk=pk)
        )
    except (TypeError, ValueError):
        raise ValidationError("ID de pedido inválido")
    except DeliveryOrder.DoesNotExist:
        raise NotFoundError("Pedido não encontrado")


def _delete_file_on_commit(fieldfile):
    """Removes a stored file once the surrounding transaction commits."""
    storage, name = fieldfile.storage, fieldfile.name
    transaction.on_commit(lambda: storage.delete(name))


class DeliveryOrderService:

    @staticmethod
    def get(pk) -> DeliveryOrder:
        try:
            return DeliveryOrder.objects.select_related('purchase_order', 'product__unit', 'supplier').get(pk=pk)
        except (TypeError, ValueError):
            raise ValidationError("ID de pedido inválido")
        except DeliveryOrder.DoesNotExist:
            raise NotFoundError("Pedido não encontrado")

    @staticmethod
    @transaction.atomic
    def create(access: 'AccessContext', data: OrderInput, now=None) -> DeliveryOrder:
        """
        Creates a delivery order against a purchase-order item.

        The item row is locked before the balance is computed, so concurrent
        creations against the same item are admitted one at a time and the
        sum of non-cancelled quantities never exceeds the contracted quantity.
        """
        access.require_capability(Capability.CREATE_ORDERS)
        now = now or timezone.now()

        if data.quantity is None or data.quantity <= 0:
            raise ValidationError("A quantidade deve ser maior que zero")
        if data.delivery_date is None:
            raise ValidationError("Data de entrega é obrigatória")

        purchase_order = PurchaseOrderService.get(data.purchase_order_id)
        if not purchase_order.is_active:
            raise ValidationError(f"Ordem de compra {purchase_order.order_number} não está ativa")
        if not purchase_order.accepts_delivery_date(data.delivery_date):
            raise ValidationError(
                "A data de entrega deve estar dentro do período de validade da ordem de compra"
            )

        if not Product.objects.filter(pk=data.product_id).exists():
            raise NotFoundError("Produto não encontrado")
        supplier = Company.objects.filter(pk=data.supplier_id).first()
        if supplier is None:
            raise NotFoundError("Fornecedor não encontrado")

        item = BalanceLedger.lock_item(purchase_order.pk, data.product_id)
        balance = BalanceLedger.available_balance(purchase_order.pk, data.product_id, item=item)
        if data.quantity > balance.available:
            logger.warning(
                f"Saldo insuficiente na OC {purchase_order.order_number} produto {data.product_id}: "
                f"solicitado {data.quantity}, disponível {balance.available}"
            )
            raise InsufficientBalanceError(balance.available, requested=data.quantity)

        urgency = classify_urgency(data.delivery_date, now)
        order = DeliveryOrder.objects.create(
            order_id=generate_order_id(purchase_order, now),
            purchase_order=purchase_order,
            product_id=data.product_id,
            quantity=quantize(data.quantity),
            supplier=supplier,
            work_location=data.work_location or "Conforme ordem de compra",
            delivery_date=data.delivery_date,
            status=urgency.initial_status,
            is_urgent=urgency.is_urgent,
            created_by=access.user,
        )

        SystemLog.record(
            access.user,
            "Criou pedido",
            ITEM_TYPE,
            order.order_id,
            f"Pedido {order.order_id} criado com status {order.status}"
            f"{' (urgente)' if order.is_urgent else ''}",
        )
        logger.info(
            f"Pedido {order.order_id} criado por {access.display_name}: "
            f"{urgency.days_diff} dia(s) para entrega, urgente={urgency.is_urgent}, status={order.status}"
        )
        return order

    @staticmethod
    def _transition(access, pk, action: Action, audit_action: str, details: str = '', mutate=None):
        with transaction.atomic():
            order = _lock_order(pk)
            target = OrderLifecycle.authorize(order, action, access)
            previous = order.status
            if mutate is not None:
                mutate(order)
            order.status = target
            order.save()
            SystemLog.record(access.user, audit_action, ITEM_TYPE, order.order_id, details or f"{previous} -> {target}")
        logger.info(f"Pedido {order.order_id}: {previous} -> {target} ({action.value}) por {access.display_name}")
        return order

    @classmethod
    def approve(cls, access: 'AccessContext', pk) -> DeliveryOrder:
        return cls._transition(access, pk, Action.APPROVE, "Aprovou pedido urgente")

    @classmethod
    def reject(cls, access: 'AccessContext', pk) -> DeliveryOrder:
        return cls._transition(access, pk, Action.REJECT, "Rejeitou pedido urgente")

    @staticmethod
    def upload_documents(access: 'AccessContext', pk, files: Dict[str, object]) -> DocumentUploadResult:
        """
        Stores the three order documents and moves the order to Carregado.

        Re-uploading on a Carregado order replaces the stored files. The NF-e
        quantity replaces the order quantity only when it differs.
        """
        missing = [doc_type.value for doc_type in DocumentType if not files.get(doc_type.value)]
        if missing:
            raise ValidationError(f"Documentos obrigatórios ausentes: {', '.join(missing)}")

        max_size = getattr(settings, 'DOCUMENT_MAX_UPLOAD_SIZE', 10 * 1024 * 1024)
        for doc_type in DocumentType:
            upload = files[doc_type.value]
            if getattr(upload, 'size', 0) > max_size:
                raise ValidationError(f"Arquivo {doc_type.label} excede o tamanho máximo permitido")

        xml_upload = files[DocumentType.INVOICE_XML.value]
        xml_content = xml_upload.read()
        xml_upload.seek(0)
        try:
            nfe = NfeParser(xml_content).parse()
        except ValueError as e:
            raise ValidationError(str(e))

        with transaction.atomic():
            order = _lock_order(pk)
            target = OrderLifecycle.authorize(order, Action.LOAD_DOCUMENTS, access)
            warnings = check_references(nfe, order)

            for doc_type in DocumentType:
                upload = files[doc_type.value]
                document = OrderDocument.objects.filter(order=order, document_type=doc_type.value).first()
                if document is None:
                    document = OrderDocument(order=order, document_type=doc_type.value)
                elif document.file:
                    _delete_file_on_commit(document.file)
                original_name = os.path.basename(getattr(upload, 'name', '') or doc_type.value)
                document.original_name = original_name
                document.file_size = getattr(upload, 'size', 0) or 0
                document.uploaded_by = access.user
                document.file.save(f"{doc_type.value}_{original_name}", upload, save=False)
                document.save()

            result = DocumentUploadResult(order=order, warnings=warnings)
            if nfe.total_quantity is not None:
                new_quantity = quantize(nfe.total_quantity)
                if new_quantity != order.quantity:
                    result.previous_quantity = order.quantity
                    result.quantity_updated = True
                    order.quantity = new_quantity
                    SystemLog.record(
                        access.user,
                        "Quantidade ajustada pela NF-e",
                        ITEM_TYPE,
                        order.order_id,
                        f"Quantidade alterada de {result.previous_quantity} para {new_quantity} conforme XML",
                    )
                    logger.info(
                        f"Pedido {order.order_id}: quantidade {result.previous_quantity} -> {new_quantity} pela NF-e"
                    )

            previous = order.status
            order.documents_loaded = True
            order.nfe_number = nfe.nfe_number
            order.nfe_key = nfe.nfe_key
            order.status = target
            order.save()
            SystemLog.record(access.user, "Carregou documentos", ITEM_TYPE, order.order_id, f"{previous} -> {target}")

        for warning in warnings:
            logger.warning(f"Pedido {order.order_id}: {warning}")
        logger.info(f"Pedido {order.order_id}: documentos carregados por {access.display_name}")
        return result

    @staticmethod
    def record_tracking_point(access: 'AccessContext', pk, latitude, longitude, comment='') -> TrackingPoint:
        """Stores a GPS point. A point on a Carregado order puts it in route."""
        try:
            latitude = Decimal(str(latitude))
            longitude = Decimal(str(longitude))
        except (ArithmeticError, ValueError):
            raise ValidationError("Coordenadas inválidas")
        if not latitude.is_finite() or not -90 <= latitude <= 90:
            raise ValidationError("Latitude deve estar entre -90 e 90")
        if not longitude.is_finite() or not -180 <= longitude <= 180:
            raise ValidationError("Longitude deve estar entre -180 e 180")

        with transaction.atomic():
            order = _lock_order(pk)
            if not (access.is_super_admin or order.created_by_id == access.user_id):
                raise AuthorizationError("Apenas o criador do pedido pode enviar pontos de rastreamento")

            if order.status == OrderStatus.LOADED:
                order.status = OrderLifecycle.authorize(order, Action.DISPATCH, access)
                order.save(update_fields=['status'])
                SystemLog.record(access.user, "Pedido em rota", ITEM_TYPE, order.order_id, "Carregado -> Em Rota")
                logger.info(f"Pedido {order.order_id} entrou em rota")
            elif order.status != OrderStatus.IN_TRANSIT:
                raise StateConflictError(
                    f"Rastreamento só é aceito para pedidos carregados ou em rota. Status atual: {order.status}"
                )

            point = TrackingPoint.objects.create(
                order=order,
                status=order.status,
                comment=comment or '',
                user=access.user,
                latitude=latitude.quantize(COORDINATE_PLACES),
                longitude=longitude.quantize(COORDINATE_PLACES),
            )
        return point

    @classmethod
    def confirm_order_number(cls, access: 'AccessContext', pk, order_number) -> DeliveryOrder:
        order_number = (order_number or '').strip()
        if not order_number:
            raise ValidationError("Número do pedido é obrigatório")
        if len(order_number) > 20:
            raise ValidationError("Número do pedido deve ter no máximo 20 caracteres")

        if cls.get(pk).product.confirmation_type != ConfirmationType.NUMERO_PEDIDO:
            raise ValidationError("Este produto é confirmado por nota fiscal, não por número do pedido")

        def mutate(order):
            order.order_number_confirmation = order_number

        return cls._transition(
            access,
            pk,
            Action.CONFIRM_ORDER_NUMBER,
            "Confirmou número do pedido",
            f"Número do pedido {order_number} informado",
            mutate=mutate,
        )

    @classmethod
    def confirm_delivery(cls, access: 'AccessContext', pk, received_quantity, photo, now=None) -> DeliveryOrder:
        access.require_capability(Capability.CONFIRM_DELIVERY)
        received_text = str(received_quantity).strip() if received_quantity is not None else ''
        if parse_non_negative_decimal(received_text) is None:
            raise ValidationError("Quantidade recebida inválida")
        if photo is None:
            raise ValidationError("Foto da nota assinada é obrigatória")
        content_type = getattr(photo, 'content_type', '') or ''
        if not content_type.startswith('image/'):
            raise ValidationError("A foto da nota assinada deve ser uma imagem")

        now = now or timezone.now()

        def mutate(order):
            _, ext = os.path.splitext(getattr(photo, 'name', '') or '')
            order.received_quantity = received_text
            order.confirmation_photo.save(f"foto_nota_{order.order_id}{ext or '.jpg'}", photo, save=False)
            order.delivered_at = now

        return cls._transition(
            access,
            pk,
            Action.CONFIRM_DELIVERY,
            "Confirmou entrega",
            f"Entrega confirmada com quantidade recebida {received_text}",
            mutate=mutate,
        )

    @staticmethod
    def delete(access: 'AccessContext', pk) -> str:
        """Hard delete, super-admin only. Stored files go with the order."""
        access.require_super_admin()
        with transaction.atomic():
            order = _lock_order(pk)
            order_id = order.order_id
            for document in order.documents.all():
                if document.file:
                    _delete_file_on_commit(document.file)
            if order.confirmation_photo:
                _delete_file_on_commit(order.confirmation_photo)
            tracking_count = order.tracking_points.count()
            order.delete()
            SystemLog.record(
                access.user,
                "Excluiu pedido",
                ITEM_TYPE,
                order_id,
                f"Pedido excluído com documentos e {tracking_count} ponto(s) de rastreamento",
            )
        logger.info(f"Pedido {order_id} excluído por {access.display_name}")
        return order_id


class ReprogrammingService:
    """Destination asks to move the delivery date; the supplier accepts or rejects."""

    @staticmethod
    def request(access: 'AccessContext', pk, new_delivery_date, justification, now=None) -> DeliveryOrder:
        now = now or timezone.now()
        justification = (justification or '').strip()
        max_length = getattr(settings, 'REPROGRAMMING_JUSTIFICATION_MAX_LENGTH', 100)
        window_days = getattr(settings, 'REPROGRAMMING_WINDOW_DAYS', 7)

        if not justification:
            raise ValidationError("Justificativa é obrigatória")
        if len(justification) > max_length:
            raise ValidationError(f"Justificativa deve ter no máximo {max_length} caracteres")
        if new_delivery_date is None:
            raise ValidationError("Nova data de entrega é obrigatória")
        if new_delivery_date <= now:
            raise ValidationError("A nova data de entrega deve ser posterior à data atual")
        if new_delivery_date > now + timedelta(days=window_days):
            raise ValidationError(f"A nova data de entrega deve estar dentro dos próximos {window_days} dias")

        with transaction.atomic():
            order = _lock_order(pk)
            if new_delivery_date > order.purchase_order.valid_until:
                raise ValidationError("A nova data de entrega ultrapassa a validade da ordem de compra")

            target = OrderLifecycle.authorize(order, Action.REQUEST_REPROGRAMMING, access)
            previous = order.status
            order.new_delivery_date = new_delivery_date
            order.reprogramming_justification = justification
            order.reprogramming_requested_at = now
            order.reprogramming_requested_by = access.user
            order.status = target
            order.save()
            SystemLog.record(
                access.user,
                "Solicitou reprogramação",
                ITEM_TYPE,
                order.order_id,
                f"Nova data {timezone.localtime(new_delivery_date):%d/%m/%Y %H:%M}. Justificativa: {justification}",
            )
        logger.info(f"Pedido {order.order_id}: reprogramação solicitada por {access.display_name} ({previous} -> {target})")
        return order

    @staticmethod
    def accept(access: 'AccessContext', pk) -> DeliveryOrder:
        def mutate(order):
            order.delivery_date = order.new_delivery_date
            order.clear_reprogramming()

        return DeliveryOrderService._transition(
            access, pk, Action.ACCEPT_REPROGRAMMING, "Aprovou reprogramação", mutate=mutate,
        )

    @staticmethod
    def reject(access: 'AccessContext', pk) -> DeliveryOrder:
        def mutate(order):
            order.quantity = Decimal('0')
            order.clear_reprogramming()

        return DeliveryOrderService._transition(
            access, pk, Action.REJECT_REPROGRAMMING, "Rejeitou reprogramação", mutate=mutate,
        )
