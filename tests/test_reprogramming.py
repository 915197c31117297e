from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from apps.core.exceptions import AuthorizationError, StateConflictError, ValidationError
from apps.core.models import SystemLog
from apps.orders.models import OrderStatus
from apps.orders.services import ReprogrammingService
from apps.procurement.services import BalanceLedger
from tests.factories import DeliveryOrderFactory


@pytest.fixture
def approved_order(po_item, supplier, requester):
    return DeliveryOrderFactory(
        purchase_order=po_item.purchase_order,
        product=po_item.product,
        supplier=supplier,
        created_by=requester,
        quantity=Decimal('40'),
        status=OrderStatus.APPROVED,
    )


@pytest.fixture
def suspended_order(approved_order, requester, access_for):
    return ReprogrammingService.request(
        access_for(requester),
        approved_order.pk,
        timezone.now() + timedelta(days=3),
        "Chuva forte na obra",
    )


@pytest.mark.django_db
class TestReprogrammingRequest:
    def test_destination_user_requests(self, approved_order, requester, access_for):
        new_date = timezone.now() + timedelta(days=5)

        order = ReprogrammingService.request(access_for(requester), approved_order.pk, new_date, "Concretagem adiada")

        assert order.status == OrderStatus.SUSPENDED
        assert order.new_delivery_date == new_date
        assert order.reprogramming_justification == "Concretagem adiada"
        assert order.reprogramming_requested_by == requester
        assert order.reprogramming_requested_at is not None
        assert SystemLog.objects.filter(action="Solicitou reprogramação").count() == 1

    def test_justification_over_limit_is_rejected(self, approved_order, requester, access_for):
        """101 characters: rejected and the order stays Aprovado"""
        with pytest.raises(ValidationError, match="100 caracteres"):
            ReprogrammingService.request(
                access_for(requester), approved_order.pk, timezone.now() + timedelta(days=2), "x" * 101,
            )

        approved_order.refresh_from_db()
        assert approved_order.status == OrderStatus.APPROVED
        assert approved_order.reprogramming_justification == ''

    def test_justification_at_limit_is_accepted(self, approved_order, requester, access_for):
        order = ReprogrammingService.request(
            access_for(requester), approved_order.pk, timezone.now() + timedelta(days=2), "x" * 100,
        )
        assert order.status == OrderStatus.SUSPENDED

    def test_blank_justification_is_rejected(self, approved_order, requester, access_for):
        with pytest.raises(ValidationError, match="obrigatória"):
            ReprogrammingService.request(access_for(requester), approved_order.pk, timezone.now() + timedelta(days=2), "   ")

    @pytest.mark.parametrize('delta', [timedelta(days=8), timedelta(days=7, minutes=1), timedelta(0), -timedelta(days=1)])
    def test_date_outside_window_is_rejected(self, approved_order, requester, access_for, delta):
        now = timezone.now()
        with pytest.raises(ValidationError):
            ReprogrammingService.request(access_for(requester), approved_order.pk, now + delta, "Motivo", now=now)

        approved_order.refresh_from_db()
        assert approved_order.status == OrderStatus.APPROVED

    def test_date_after_purchase_order_validity_is_rejected(self, approved_order, requester, access_for):
        purchase_order = approved_order.purchase_order
        purchase_order.valid_until = timezone.now() + timedelta(days=2)
        purchase_order.save()

        with pytest.raises(ValidationError, match="validade"):
            ReprogrammingService.request(
                access_for(requester), approved_order.pk, timezone.now() + timedelta(days=4), "Motivo",
            )

    def test_supplier_cannot_request(self, approved_order, supplier_user, access_for):
        with pytest.raises(AuthorizationError):
            ReprogrammingService.request(
                access_for(supplier_user), approved_order.pk, timezone.now() + timedelta(days=2), "Motivo",
            )

        approved_order.refresh_from_db()
        assert approved_order.status == OrderStatus.APPROVED
        assert SystemLog.objects.count() == 0

    def test_loaded_order_cannot_be_reprogrammed(self, approved_order, requester, access_for):
        approved_order.status = OrderStatus.LOADED
        approved_order.save()

        with pytest.raises(StateConflictError):
            ReprogrammingService.request(
                access_for(requester), approved_order.pk, timezone.now() + timedelta(days=2), "Motivo",
            )


@pytest.mark.django_db
class TestReprogrammingResolution:
    def test_supplier_accepts(self, suspended_order, supplier_user, access_for):
        proposed = suspended_order.new_delivery_date

        order = ReprogrammingService.accept(access_for(supplier_user), suspended_order.pk)

        order.refresh_from_db()
        assert order.status == OrderStatus.APPROVED
        assert order.delivery_date == proposed
        assert order.new_delivery_date is None
        assert order.reprogramming_justification == ''
        assert order.reprogramming_requested_by is None

    def test_supplier_rejects_and_frees_balance(self, suspended_order, supplier_user, access_for):
        """Rejected reprogramming cancels the order and its quantity leaves the consumed total"""
        before = BalanceLedger.available_balance(suspended_order.purchase_order_id, suspended_order.product_id)
        assert before.consumed == Decimal('40.000')

        ReprogrammingService.reject(access_for(supplier_user), suspended_order.pk)

        suspended_order.refresh_from_db()
        assert suspended_order.status == OrderStatus.CANCELLED
        assert suspended_order.quantity == Decimal('0')
        assert suspended_order.new_delivery_date is None

        after = BalanceLedger.available_balance(suspended_order.purchase_order_id, suspended_order.product_id)
        assert after.consumed == Decimal('0.000')
        assert after.available == Decimal('100.000')

    def test_destination_cannot_resolve(self, suspended_order, requester, access_for):
        with pytest.raises(AuthorizationError):
            ReprogrammingService.accept(access_for(requester), suspended_order.pk)

    def test_super_admin_resolves(self, suspended_order, super_admin, access_for):
        order = ReprogrammingService.reject(access_for(super_admin), suspended_order.pk)
        assert order.status == OrderStatus.CANCELLED

    def test_each_step_is_audited(self, suspended_order, supplier_user, access_for):
        ReprogrammingService.accept(access_for(supplier_user), suspended_order.pk)

        actions = list(SystemLog.objects.filter(item_id=suspended_order.order_id).values_list('action', flat=True))
        assert sorted(actions) == sorted(["Solicitou reprogramação", "Aprovou reprogramação"])
