from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from apps.accounts.models import Capability
from apps.orders.models import OrderStatus
from apps.procurement.models import PurchaseOrder, PurchaseOrderStatus
from tests.factories import DeliveryOrderFactory, ProductFactory, ProfileFactory, PurchaseOrderFactory, UserRoleFactory

PURCHASE_ORDERS_URL = '/api/v1/purchase-orders/'


@pytest.fixture
def buyer(issuer):
    role = UserRoleFactory(
        category=issuer.category,
        permissions=[Capability.VIEW_PURCHASE_ORDERS.value, Capability.CREATE_PURCHASE_ORDERS.value],
    )
    return ProfileFactory(user__username='comprador', company=issuer, role=role).user


@pytest.mark.django_db
class TestPurchaseOrderAPI:
    def test_list_current_only(self, client, super_admin, purchase_order):
        PurchaseOrderFactory(
            valid_from=timezone.now() - timedelta(days=60),
            valid_until=timezone.now() - timedelta(days=1),
        )
        client.force_authenticate(user=super_admin)

        everything = client.get(PURCHASE_ORDERS_URL)
        current = client.get(f'{PURCHASE_ORDERS_URL}?vigentes=1')

        assert everything.data['count'] == 2
        assert [row['id'] for row in current.data['results']] == [purchase_order.pk]

    def test_unscoped_user_without_role_lists_all(self, client, purchase_order):
        PurchaseOrderFactory()
        client.force_authenticate(user=ProfileFactory(role=None).user)

        response = client.get(PURCHASE_ORDERS_URL)

        assert response.status_code == 200
        assert response.data['count'] == 2

    def test_create_defaults_to_own_company(self, client, buyer, issuer):
        product = ProductFactory()
        client.force_authenticate(user=buyer)

        response = client.post(PURCHASE_ORDERS_URL, {
            'order_number': '4509001',
            'destination_cnpj': '12.345.678/0001-99',
            'valid_from': timezone.now().isoformat(),
            'valid_until': (timezone.now() + timedelta(days=30)).isoformat(),
            'items': [{'product': product.pk, 'quantity': '250'}],
        }, format='json')

        assert response.status_code == 201
        assert response.data['company'] == issuer.pk
        assert response.data['destination_cnpj'] == '12345678000199'
        assert PurchaseOrder.objects.get(pk=response.data['id']).items.count() == 1

    def test_create_rejects_short_cnpj(self, client, buyer):
        client.force_authenticate(user=buyer)

        response = client.post(PURCHASE_ORDERS_URL, {
            'order_number': '4509002',
            'destination_cnpj': '123',
            'valid_from': timezone.now().isoformat(),
            'valid_until': (timezone.now() + timedelta(days=30)).isoformat(),
            'items': [{'product': ProductFactory().pk, 'quantity': '1'}],
        }, format='json')

        assert response.status_code == 400
        assert 'destination_cnpj' in response.data

    def test_requester_cannot_create(self, client, requester):
        client.force_authenticate(user=requester)

        response = client.post(PURCHASE_ORDERS_URL, {
            'order_number': '4509003',
            'destination_cnpj': '12345678000199',
            'valid_from': timezone.now().isoformat(),
            'valid_until': (timezone.now() + timedelta(days=30)).isoformat(),
            'items': [{'product': ProductFactory().pk, 'quantity': '1'}],
        }, format='json')

        assert response.status_code == 403

    def test_items_with_balances(self, client, requester, po_item, supplier):
        DeliveryOrderFactory(
            purchase_order=po_item.purchase_order, product=po_item.product, supplier=supplier, quantity=Decimal('30'),
        )
        DeliveryOrderFactory(
            purchase_order=po_item.purchase_order, product=po_item.product, supplier=supplier,
            quantity=Decimal('15'), status=OrderStatus.CANCELLED,
        )
        client.force_authenticate(user=requester)

        response = client.get(f'{PURCHASE_ORDERS_URL}{po_item.purchase_order_id}/items/')

        assert response.status_code == 200
        assert Decimal(response.data[0]['consumed']) == Decimal('30')
        assert Decimal(response.data[0]['available']) == Decimal('70')

    def test_balance_and_delivered(self, client, requester, po_item, supplier):
        DeliveryOrderFactory(
            purchase_order=po_item.purchase_order, product=po_item.product, supplier=supplier,
            quantity=Decimal('12'), status=OrderStatus.DELIVERED, received_quantity='11,5',
        )
        client.force_authenticate(user=requester)
        base = f'{PURCHASE_ORDERS_URL}{po_item.purchase_order_id}/products/{po_item.product_id}'

        balance = client.get(f'{base}/saldo/')
        delivered = client.get(f'{base}/entregue/')

        assert Decimal(balance.data['contracted']) == Decimal('100')
        assert Decimal(balance.data['available']) == Decimal('88')
        assert Decimal(delivered.data['delivered']) == Decimal('11.5')

    def test_hidden_purchase_order(self, client, supplier_user):
        other = PurchaseOrderFactory(status=PurchaseOrderStatus.ACTIVE)
        client.force_authenticate(user=supplier_user)

        response = client.get(f'{PURCHASE_ORDERS_URL}{other.pk}/')

        assert response.status_code == 404
