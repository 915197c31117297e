from django.db.models import Q
from django.utils import timezone
from rest_framework import mixins, status
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.companies.models import Company
from apps.core.api.views import BaseScopedViewSet
from apps.core.exceptions import NotFoundError, ValidationError
from apps.orders.visibility import scope_purchase_orders

from .models import PurchaseOrder, PurchaseOrderStatus
from .serializers import (
    PurchaseOrderCreateSerializer,
    PurchaseOrderItemBalanceSerializer,
    PurchaseOrderSerializer,
)
from .services import BalanceLedger, PurchaseOrderItemInput, PurchaseOrderService


class PurchaseOrderViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, BaseScopedViewSet):
    """
    API endpoint for purchase orders (ordens de compra) and their balances.
    Results are filtered by the same visibility rules as delivery orders.
    """
    queryset = PurchaseOrder.objects.all().select_related('company').prefetch_related('items__product__unit')
    serializer_class = PurchaseOrderSerializer

    def scope_queryset(self, queryset, access):
        if self.request.query_params.get('vigentes') in ('1', 'true'):
            now = timezone.now()
            queryset = queryset.filter(
                Q(status=PurchaseOrderStatus.ACTIVE) & Q(valid_from__lte=now) & Q(valid_until__gte=now)
            )
        return scope_purchase_orders(queryset, access)

    def create(self, request, *args, **kwargs):
        serializer = PurchaseOrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        access = self.get_access()

        company = access.company
        if data.get('company') is not None:
            company = Company.objects.filter(pk=data['company']).first()
            if company is None:
                raise NotFoundError("Empresa emissora não encontrada")
        if company is None:
            raise ValidationError("Informe a empresa emissora da ordem de compra")

        purchase_order = PurchaseOrderService.create(
            access,
            order_number=data['order_number'],
            company=company,
            destination_cnpj=data['destination_cnpj'],
            valid_from=data['valid_from'],
            valid_until=data['valid_until'],
            items=[PurchaseOrderItemInput(product_id=item['product'], quantity=item['quantity']) for item in data['items']],
        )
        return Response(PurchaseOrderSerializer(purchase_order).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['get'])
    def items(self, request, pk=None):
        purchase_order = self.get_object()
        items = purchase_order.items.select_related('product__unit')
        return Response(PurchaseOrderItemBalanceSerializer(items, many=True).data)

    @action(detail=True, methods=['get'], url_path=r'products/(?P<product_id>\d+)/saldo')
    def saldo(self, request, pk=None, product_id=None):
        purchase_order = self.get_object()
        snapshot = BalanceLedger.available_balance(purchase_order.pk, int(product_id))
        return Response(snapshot.as_dict())

    @action(detail=True, methods=['get'], url_path=r'products/(?P<product_id>\d+)/entregue')
    def entregue(self, request, pk=None, product_id=None):
        purchase_order = self.get_object()
        delivered = BalanceLedger.delivered_quantity(purchase_order.pk, int(product_id))
        return Response({
            'purchase_order_id': purchase_order.pk,
            'product_id': int(product_id),
            'delivered': str(delivered),
        })
