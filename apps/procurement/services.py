"""
Procurement Services - Purchase-order balance ledger and purchase-order creation

The ledger answers, for a (purchase order, product) pair, how much was
contracted, how much non-cancelled delivery orders already committed and how
much is left. Order creation calls lock_item() inside its transaction so the
check and the insert happen under the same row lock.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, List, Optional

from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from apps.accounts.models import Capability
from apps.core.exceptions import NotFoundError, ValidationError
from apps.core.models import SystemLog

from .models import PurchaseOrder, PurchaseOrderItem, PurchaseOrderStatus

if TYPE_CHECKING:
    from apps.accounts.access import AccessContext

logger = logging.getLogger(__name__)

QUANTIZER = Decimal('0.001')


def quantize(value) -> Decimal:
    return Decimal(value or 0).quantize(QUANTIZER)


def parse_non_negative_decimal(value) -> Optional[Decimal]:
    """Accepts '12.5' and '12,5'. Returns None for blank, negative or unparseable input."""
    if value is None:
        return None
    text = str(value).strip().replace(',', '.')
    if not text:
        return None
    try:
        number = Decimal(text)
    except InvalidOperation:
        return None
    if not number.is_finite() or number < 0:
        return None
    return number


@dataclass(frozen=True)
class BalanceSnapshot:
    purchase_order_id: int
    product_id: int
    contracted: Decimal
    consumed: Decimal
    available: Decimal
    unit: str

    def as_dict(self):
        return {
            'purchase_order_id': self.purchase_order_id,
            'product_id': self.product_id,
            'contracted': str(self.contracted),
            'consumed': str(self.consumed),
            'available': str(self.available),
            'unit': self.unit,
        }


class BalanceLedger:

    @staticmethod
    def _orders_for(purchase_order_id, product_id):
        from apps.orders.models import DeliveryOrder
        return DeliveryOrder.objects.filter(purchase_order_id=purchase_order_id, product_id=product_id)

    @staticmethod
    def get_item(purchase_order_id, product_id) -> Optional[PurchaseOrderItem]:
        return (
            PurchaseOrderItem.objects
            .select_related('product__unit')
            .filter(purchase_order_id=purchase_order_id, product_id=product_id)
            .first()
        )

    @staticmethod
    def lock_item(purchase_order_id, product_id) -> Optional[PurchaseOrderItem]:
        """Row-locks the contracted item. Must be called inside transaction.atomic."""
        return (
            PurchaseOrderItem.objects
            .select_for_update()
            .filter(purchase_order_id=purchase_order_id, product_id=product_id)
            .first()
        )

    @classmethod
    def consumed_quantity(cls, purchase_order_id, product_id) -> Decimal:
        from apps.orders.models import OrderStatus
        total = (
            cls._orders_for(purchase_order_id, product_id)
            .exclude(status=OrderStatus.CANCELLED)
            .aggregate(total=Sum('quantity'))['total']
        )
        return total or Decimal('0')

    @classmethod
    def available_balance(cls, purchase_order_id, product_id, item=None) -> BalanceSnapshot:
        if item is None:
            item = cls.get_item(purchase_order_id, product_id)

        if item is None:
            from apps.products.models import Product
            product = Product.objects.select_related('unit').filter(pk=product_id).first()
            return BalanceSnapshot(
                purchase_order_id=purchase_order_id,
                product_id=product_id,
                contracted=quantize(0),
                consumed=quantize(0),
                available=quantize(0),
                unit=product.unit_display if product else '',
            )

        contracted = item.quantity
        consumed = cls.consumed_quantity(purchase_order_id, product_id)
        return BalanceSnapshot(
            purchase_order_id=purchase_order_id,
            product_id=product_id,
            contracted=quantize(contracted),
            consumed=quantize(consumed),
            available=quantize(contracted - consumed),
            unit=item.product.unit_display,
        )

    @classmethod
    def delivered_quantity(cls, purchase_order_id, product_id) -> Decimal:
        """
        Sum over delivered orders of the received quantity, falling back to the
        requested quantity when the received value is missing or unparseable.
        """
        from apps.orders.models import OrderStatus
        total = Decimal('0')
        delivered = cls._orders_for(purchase_order_id, product_id).filter(status=OrderStatus.DELIVERED)
        for quantity, received in delivered.values_list('quantity', 'received_quantity'):
            parsed = parse_non_negative_decimal(received)
            total += parsed if parsed is not None else quantity
        return quantize(total)


@dataclass
class PurchaseOrderItemInput:
    product_id: int
    quantity: Decimal


class PurchaseOrderService:

    @staticmethod
    def get(purchase_order_id) -> PurchaseOrder:
        try:
            return PurchaseOrder.objects.select_related('company').get(pk=purchase_order_id)
        except PurchaseOrder.DoesNotExist:
            raise NotFoundError("Ordem de compra não encontrada")

    @staticmethod
    @transaction.atomic
    def create(
        access: 'AccessContext',
        order_number: str,
        company,
        destination_cnpj: str,
        valid_from,
        valid_until,
        items: List[PurchaseOrderItemInput],
    ) -> PurchaseOrder:
        access.require_capability(Capability.CREATE_PURCHASE_ORDERS)

        if valid_from >= valid_until:
            raise ValidationError("A data de início da validade deve ser anterior à data de fim")
        if not items:
            raise ValidationError("A ordem de compra deve ter ao menos um produto")

        seen = set()
        for item in items:
            if item.product_id in seen:
                raise ValidationError(f"Produto {item.product_id} informado mais de uma vez")
            seen.add(item.product_id)
            if item.quantity <= 0:
                raise ValidationError("A quantidade de cada produto deve ser maior que zero")

        from apps.products.models import Product
        if Product.objects.filter(pk__in=seen).count() != len(seen):
            raise NotFoundError("Produto não encontrado")

        purchase_order = PurchaseOrder.objects.create(
            order_number=order_number,
            company=company,
            destination_cnpj=destination_cnpj,
            valid_from=valid_from,
            valid_until=valid_until,
            status=PurchaseOrderStatus.ACTIVE,
            created_by=access.user,
        )
        PurchaseOrderItem.objects.bulk_create([
            PurchaseOrderItem(purchase_order=purchase_order, product_id=item.product_id, quantity=item.quantity)
            for item in items
        ])

        SystemLog.record(
            access.user,
            "Criou ordem de compra",
            'purchase_order',
            purchase_order.pk,
            f"Ordem de compra {order_number} criada com {len(items)} produto(s)",
        )
        logger.info(f"Ordem de compra {order_number} criada por {access.display_name}")
        return purchase_order

    @staticmethod
    def expire_overdue(now=None) -> int:
        now = now or timezone.now()
        count = PurchaseOrder.objects.filter(
            status=PurchaseOrderStatus.ACTIVE,
            valid_until__lt=now,
        ).update(status=PurchaseOrderStatus.EXPIRED)
        if count:
            logger.info(f"{count} ordem(ns) de compra expirada(s)")
        return count
