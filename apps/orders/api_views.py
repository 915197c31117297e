import logging

from rest_framework import mixins, status
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.api.views import AccessContextMixin, BaseScopedViewSet

from .models import DeliveryOrder, OrderStatus
from .serializers import (
    DeliveryConfirmationSerializer,
    DeliveryOrderSerializer,
    DocumentUploadSerializer,
    OrderCreateSerializer,
    OrderNumberSerializer,
    ReprogrammingRequestSerializer,
    TrackingPointCreateSerializer,
    TrackingPointSerializer,
)
from .services import DeliveryOrderService, OrderInput, ReprogrammingService
from .visibility import scope_orders, scope_urgent_orders

logger = logging.getLogger(__name__)


class DeliveryOrderViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, BaseScopedViewSet):
    """
    API endpoint for delivery orders (pedidos).

    Listing and detail are filtered by the visibility rules. State-changing
    actions look the order up directly; the lifecycle guards decide who may act.
    """
    queryset = DeliveryOrder.objects.all().select_related(
        'purchase_order', 'product__unit', 'supplier'
    ).prefetch_related('documents')
    serializer_class = DeliveryOrderSerializer
    parser_classes = [JSONParser, MultiPartParser, FormParser]

    def scope_queryset(self, queryset, access):
        status_filter = self.request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        return scope_orders(queryset, access)

    def _respond(self, order, message, http_status=status.HTTP_200_OK, **extra):
        payload = {
            'success': True,
            'message': message,
            'order': DeliveryOrderSerializer(order, context=self.get_serializer_context()).data,
        }
        payload.update(extra)
        return Response(payload, status=http_status)

    def create(self, request, *args, **kwargs):
        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        order = DeliveryOrderService.create(
            self.get_access(),
            OrderInput(
                purchase_order_id=data['purchaseOrderId'],
                product_id=data['productId'],
                quantity=data['quantity'],
                supplier_id=data['supplierId'],
                delivery_date=data['deliveryDate'],
                work_location=data.get('workLocation', ''),
            ),
        )
        return Response(
            DeliveryOrderSerializer(order, context=self.get_serializer_context()).data,
            status=status.HTTP_201_CREATED,
        )

    def destroy(self, request, pk=None):
        order_id = DeliveryOrderService.delete(self.get_access(), pk)
        return Response({'success': True, 'message': f"Pedido {order_id} excluído com sucesso"})

    @action(detail=False, methods=['get'])
    def urgent(self, request):
        queryset = scope_urgent_orders(self.queryset.all(), self.get_access())
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(self.get_serializer(page, many=True).data)
        return Response(self.get_serializer(queryset, many=True).data)

    @action(detail=False, methods=['get'])
    def reprogramacoes(self, request):
        queryset = self.get_queryset().filter(status=OrderStatus.SUSPENDED)
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(self.get_serializer(page, many=True).data)
        return Response(self.get_serializer(queryset, many=True).data)

    @action(detail=True, methods=['put'])
    def approve(self, request, pk=None):
        order = DeliveryOrderService.approve(self.get_access(), pk)
        return self._respond(order, "Pedido aprovado com sucesso")

    @action(detail=True, methods=['put'])
    def reject(self, request, pk=None):
        order = DeliveryOrderService.reject(self.get_access(), pk)
        return self._respond(order, "Pedido rejeitado")

    @action(detail=True, methods=['post'])
    def documents(self, request, pk=None):
        serializer = DocumentUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = DeliveryOrderService.upload_documents(self.get_access(), pk, serializer.validated_data)
        return self._respond(
            result.order,
            "Documentos carregados com sucesso",
            warnings=result.warnings,
            quantityUpdated=result.quantity_updated,
        )

    @action(detail=True, methods=['post'])
    def reprogramar(self, request, pk=None):
        serializer = ReprogrammingRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = ReprogrammingService.request(
            self.get_access(),
            pk,
            serializer.validated_data['novaDataEntrega'],
            serializer.validated_data['justificativa'],
        )
        return self._respond(order, "Solicitação de reprogramação enviada")

    @action(detail=True, methods=['put'], url_path='reprogramacao/aprovar')
    def aprovar_reprogramacao(self, request, pk=None):
        order = ReprogrammingService.accept(self.get_access(), pk)
        return self._respond(order, "Reprogramação aprovada")

    @action(detail=True, methods=['put'], url_path='reprogramacao/rejeitar')
    def rejeitar_reprogramacao(self, request, pk=None):
        order = ReprogrammingService.reject(self.get_access(), pk)
        return self._respond(order, "Reprogramação rejeitada. Pedido cancelado")

    @action(detail=True, methods=['post'])
    def confirmar(self, request, pk=None):
        serializer = DeliveryConfirmationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = DeliveryOrderService.confirm_delivery(
            self.get_access(),
            pk,
            serializer.validated_data['quantidadeRecebida'],
            serializer.validated_data['fotoNotaAssinada'],
        )
        return self._respond(order, "Entrega confirmada com sucesso")

    @action(detail=True, methods=['post'], url_path='confirmar-numero-pedido')
    def confirmar_numero_pedido(self, request, pk=None):
        serializer = OrderNumberSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = DeliveryOrderService.confirm_order_number(
            self.get_access(), pk, serializer.validated_data['numeroPedido']
        )
        return self._respond(order, "Número do pedido confirmado")


class TrackingPointCreateView(AccessContextMixin, APIView):
    """Receives GPS points from the driver app."""

    def post(self, request):
        serializer = TrackingPointCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        point = DeliveryOrderService.record_tracking_point(
            self.get_access(),
            data['orderId'],
            data['latitude'],
            data['longitude'],
            data.get('comment', ''),
        )
        return Response(TrackingPointSerializer(point).data, status=status.HTTP_201_CREATED)
