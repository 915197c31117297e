from datetime import timedelta
from decimal import Decimal

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from django.db import DatabaseError
from django.utils import timezone

from apps.orders.models import DeliveryOrder, OrderStatus
from apps.orders.services import DeliveryOrderService
from tests.factories import DeliveryOrderFactory, ProfileFactory
from tests.test_documents import nfe_xml

ORDERS_URL = '/api/v1/orders/'


def create_payload(po_item, supplier, quantity='10', days=30):
    return {
        'purchaseOrderId': po_item.purchase_order_id,
        'productId': po_item.product_id,
        'quantity': quantity,
        'supplierId': supplier.pk,
        'deliveryDate': (timezone.now() + timedelta(days=days)).isoformat(),
    }


@pytest.mark.django_db
class TestOrderCreationAPI:
    def test_anonymous_is_rejected(self, client):
        response = client.get(ORDERS_URL)
        assert response.status_code == 401

    def test_create_regular_order(self, client, requester, po_item, supplier):
        client.force_authenticate(user=requester)

        response = client.post(ORDERS_URL, create_payload(po_item, supplier), format='json')

        assert response.status_code == 201
        assert response.data['status'] == OrderStatus.APPROVED
        assert response.data['is_urgent'] is False
        assert response.data['order_id'].startswith('OPN')

    def test_date_only_delivery_date(self, client, requester, po_item, supplier):
        client.force_authenticate(user=requester)
        payload = create_payload(po_item, supplier)
        payload['deliveryDate'] = (timezone.localdate() + timedelta(days=20)).strftime('%Y-%m-%d')

        response = client.post(ORDERS_URL, payload, format='json')

        assert response.status_code == 201

    def test_insufficient_balance_reports_available(self, client, requester, po_item, supplier):
        client.force_authenticate(user=requester)

        response = client.post(ORDERS_URL, create_payload(po_item, supplier, quantity='150'), format='json')

        assert response.status_code == 400
        assert response.data['success'] is False
        assert Decimal(response.data['available']) == Decimal('100')
        assert DeliveryOrder.objects.count() == 0

    def test_invalid_payload(self, client, requester):
        client.force_authenticate(user=requester)

        response = client.post(ORDERS_URL, {'quantity': 'abc'}, format='json')

        assert response.status_code == 400


@pytest.mark.django_db
class TestOrderListingAPI:
    def test_list_is_scoped(self, client, supplier_user, supplier, purchase_order):
        own = DeliveryOrderFactory(purchase_order=purchase_order, supplier=supplier)
        DeliveryOrderFactory()
        client.force_authenticate(user=supplier_user)

        response = client.get(ORDERS_URL)

        assert response.status_code == 200
        assert [row['id'] for row in response.data['results']] == [own.pk]

    def test_hidden_order_detail_is_404(self, client, supplier_user):
        hidden = DeliveryOrderFactory()
        client.force_authenticate(user=supplier_user)

        response = client.get(f'{ORDERS_URL}{hidden.pk}/')

        assert response.status_code == 404

    def test_unscoped_user_without_role_sees_everything(self, client, purchase_order):
        orders = [DeliveryOrderFactory(purchase_order=purchase_order), DeliveryOrderFactory()]
        user = ProfileFactory(role=None).user
        client.force_authenticate(user=user)

        response = client.get(ORDERS_URL)

        assert response.status_code == 200
        assert {row['id'] for row in response.data['results']} == {order.pk for order in orders}

    def test_urgent_listing(self, client, approver, purchase_order, supplier):
        urgent = DeliveryOrderFactory(
            purchase_order=purchase_order, supplier=supplier, status=OrderStatus.REGISTERED, is_urgent=True,
        )
        client.force_authenticate(user=approver)

        response = client.get(f'{ORDERS_URL}urgent/')

        assert response.status_code == 200
        assert [row['order_id'] for row in response.data['results']] == [urgent.order_id]

    def test_urgent_listing_is_empty_for_non_approvers(self, client, requester, purchase_order, supplier):
        DeliveryOrderFactory(
            purchase_order=purchase_order, supplier=supplier, status=OrderStatus.REGISTERED, is_urgent=True,
        )
        client.force_authenticate(user=requester)

        response = client.get(f'{ORDERS_URL}urgent/')

        assert response.status_code == 200
        assert response.data['results'] == []


@pytest.mark.django_db
class TestTransitionsAPI:
    def test_approve_and_conflict(self, client, approver, purchase_order, supplier):
        order = DeliveryOrderFactory(purchase_order=purchase_order, supplier=supplier, status=OrderStatus.REGISTERED)
        client.force_authenticate(user=approver)

        first = client.put(f'{ORDERS_URL}{order.pk}/approve/')
        second = client.put(f'{ORDERS_URL}{order.pk}/approve/')

        assert first.status_code == 200
        assert first.data['order']['status'] == OrderStatus.APPROVED
        assert second.status_code == 409

    def test_wrong_actor_is_403(self, client, supplier_user, purchase_order, supplier):
        order = DeliveryOrderFactory(purchase_order=purchase_order, supplier=supplier, status=OrderStatus.REGISTERED)
        client.force_authenticate(user=supplier_user)

        response = client.put(f'{ORDERS_URL}{order.pk}/reject/')

        assert response.status_code == 403
        assert response.data['success'] is False

    def test_unknown_order_is_404(self, client, super_admin):
        client.force_authenticate(user=super_admin)

        response = client.put(f'{ORDERS_URL}999999/approve/')

        assert response.status_code == 404

    @pytest.mark.parametrize('method, path', [
        ('put', 'approve/'),
        ('put', 'reprogramacao/rejeitar/'),
        ('post', 'confirmar-numero-pedido/'),
        ('delete', ''),
    ])
    def test_non_numeric_order_id_is_400(self, client, super_admin, method, path):
        client.force_authenticate(user=super_admin)

        response = getattr(client, method)(f'{ORDERS_URL}abc/{path}', {'numeroPedido': '123'}, format='json')

        assert response.status_code == 400
        assert response.data['message'] == "ID de pedido inválido"

    def test_reprogramming_roundtrip(self, client, requester, supplier_user, purchase_order, supplier):
        order = DeliveryOrderFactory(purchase_order=purchase_order, supplier=supplier, status=OrderStatus.APPROVED)

        client.force_authenticate(user=requester)
        requested = client.post(f'{ORDERS_URL}{order.pk}/reprogramar/', {
            'novaDataEntrega': (timezone.now() + timedelta(days=4)).isoformat(),
            'justificativa': 'Bomba de concreto indisponível',
        }, format='json')

        client.force_authenticate(user=supplier_user)
        pending = client.get(f'{ORDERS_URL}reprogramacoes/')
        accepted = client.put(f'{ORDERS_URL}{order.pk}/reprogramacao/aprovar/')

        assert requested.status_code == 200
        assert requested.data['order']['status'] == OrderStatus.SUSPENDED
        assert [row['id'] for row in pending.data['results']] == [order.pk]
        assert accepted.status_code == 200
        assert accepted.data['order']['status'] == OrderStatus.APPROVED

    def test_reprogramming_justification_too_long(self, client, requester, purchase_order, supplier):
        order = DeliveryOrderFactory(purchase_order=purchase_order, supplier=supplier, status=OrderStatus.APPROVED)
        client.force_authenticate(user=requester)

        response = client.post(f'{ORDERS_URL}{order.pk}/reprogramar/', {
            'novaDataEntrega': (timezone.now() + timedelta(days=2)).isoformat(),
            'justificativa': 'x' * 101,
        }, format='json')

        order.refresh_from_db()
        assert response.status_code == 400
        assert order.status == OrderStatus.APPROVED

    def test_documents_then_tracking_then_confirmation(self, client, requester, supplier_user, po_item, supplier):
        order = DeliveryOrderFactory(
            purchase_order=po_item.purchase_order,
            product=po_item.product,
            supplier=supplier,
            created_by=requester,
            quantity=Decimal('8'),
            status=OrderStatus.APPROVED,
        )
        client.force_authenticate(user=requester)
        documents = client.post(f'{ORDERS_URL}{order.pk}/documents/', {
            'nota_pdf': SimpleUploadedFile('nota.pdf', b'%PDF', content_type='application/pdf'),
            'nota_xml': SimpleUploadedFile(
                'nota.xml', nfe_xml(quantities=('8',), purchase_order_number=po_item.purchase_order.order_number),
                content_type='application/xml',
            ),
            'certificado_pdf': SimpleUploadedFile('cert.pdf', b'%PDF', content_type='application/pdf'),
        }, format='multipart')
        tracking = client.post('/api/v1/tracking-points/', {
            'orderId': order.pk, 'latitude': -23.55, 'longitude': -46.63,
        }, format='json')

        client.force_authenticate(user=supplier_user)
        confirmation = client.post(f'{ORDERS_URL}{order.pk}/confirmar/', {
            'quantidadeRecebida': '8',
            'fotoNotaAssinada': SimpleUploadedFile('foto.png', b'\x89PNG', content_type='image/png'),
        }, format='multipart')

        assert documents.status_code == 200
        assert documents.data['order']['status'] == OrderStatus.LOADED
        assert documents.data['warnings'] == []
        assert tracking.status_code == 201
        assert confirmation.status_code == 200
        assert confirmation.data['order']['status'] == OrderStatus.DELIVERED

    def test_tracking_coordinates_validated(self, client, requester, purchase_order, supplier):
        order = DeliveryOrderFactory(
            purchase_order=purchase_order, supplier=supplier, created_by=requester, status=OrderStatus.LOADED,
        )
        client.force_authenticate(user=requester)

        response = client.post('/api/v1/tracking-points/', {
            'orderId': order.pk, 'latitude': 95, 'longitude': 0,
        }, format='json')

        assert response.status_code == 400

    def test_delete_is_super_admin_only(self, client, requester, super_admin, purchase_order):
        order = DeliveryOrderFactory(purchase_order=purchase_order)

        client.force_authenticate(user=requester)
        denied = client.delete(f'{ORDERS_URL}{order.pk}/')
        client.force_authenticate(user=super_admin)
        deleted = client.delete(f'{ORDERS_URL}{order.pk}/')

        assert denied.status_code == 403
        assert deleted.status_code == 200
        assert not DeliveryOrder.objects.filter(pk=order.pk).exists()

    def test_database_failure_is_redacted(self, client, super_admin, monkeypatch):
        def broken(*args, **kwargs):
            raise DatabaseError("connection to server at 10.0.0.5 lost")

        monkeypatch.setattr(DeliveryOrderService, 'approve', broken)
        client.force_authenticate(user=super_admin)

        response = client.put(f'{ORDERS_URL}1/approve/')

        assert response.status_code == 500
        assert '10.0.0.5' not in response.data['message']
