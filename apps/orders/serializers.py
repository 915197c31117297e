from django.conf import settings
from rest_framework import serializers

from .models import DeliveryOrder, OrderDocument, TrackingPoint

DATE_INPUT_FORMATS = ['iso-8601', '%Y-%m-%d']


class OrderDocumentSerializer(serializers.ModelSerializer):
    url = serializers.SerializerMethodField()

    class Meta:
        model = OrderDocument
        fields = ['id', 'document_type', 'original_name', 'file_size', 'uploaded_at', 'url']

    def get_url(self, obj):
        return obj.file.url if obj.file else None


class TrackingPointSerializer(serializers.ModelSerializer):
    class Meta:
        model = TrackingPoint
        fields = ['id', 'order', 'status', 'comment', 'latitude', 'longitude', 'user', 'created_at']
        read_only_fields = fields


class DeliveryOrderSerializer(serializers.ModelSerializer):
    purchase_order_number = serializers.ReadOnlyField(source='purchase_order.order_number')
    destination_cnpj = serializers.ReadOnlyField(source='purchase_order.destination_cnpj')
    product_name = serializers.ReadOnlyField(source='product.name')
    unit = serializers.ReadOnlyField(source='product.unit_display')
    supplier_name = serializers.ReadOnlyField(source='supplier.name')
    documents = OrderDocumentSerializer(many=True, read_only=True)

    class Meta:
        model = DeliveryOrder
        fields = [
            'id', 'order_id', 'purchase_order', 'purchase_order_number', 'destination_cnpj',
            'product', 'product_name', 'unit', 'quantity', 'supplier', 'supplier_name',
            'work_location', 'delivery_date', 'status', 'is_urgent', 'created_by', 'created_at',
            'documents_loaded', 'nfe_number', 'nfe_key', 'order_number_confirmation',
            'received_quantity', 'delivered_at', 'new_delivery_date', 'reprogramming_justification',
            'reprogramming_requested_at', 'reprogramming_requested_by', 'documents',
        ]
        read_only_fields = fields


class OrderCreateSerializer(serializers.Serializer):
    purchaseOrderId = serializers.IntegerField()
    productId = serializers.IntegerField()
    quantity = serializers.DecimalField(max_digits=14, decimal_places=3)
    supplierId = serializers.IntegerField()
    deliveryDate = serializers.DateTimeField(input_formats=DATE_INPUT_FORMATS)
    workLocation = serializers.CharField(max_length=255, required=False, allow_blank=True)


class ReprogrammingRequestSerializer(serializers.Serializer):
    novaDataEntrega = serializers.DateTimeField(input_formats=DATE_INPUT_FORMATS)
    justificativa = serializers.CharField(allow_blank=True, trim_whitespace=True)


class OrderNumberSerializer(serializers.Serializer):
    numeroPedido = serializers.CharField(max_length=20)


class DeliveryConfirmationSerializer(serializers.Serializer):
    quantidadeRecebida = serializers.CharField()
    fotoNotaAssinada = serializers.FileField()


class DocumentUploadSerializer(serializers.Serializer):
    nota_pdf = serializers.FileField()
    nota_xml = serializers.FileField()
    certificado_pdf = serializers.FileField()

    def validate(self, attrs):
        max_size = getattr(settings, 'DOCUMENT_MAX_UPLOAD_SIZE', 10 * 1024 * 1024)
        for name, upload in attrs.items():
            if upload.size > max_size:
                raise serializers.ValidationError({name: "Arquivo excede o tamanho máximo permitido"})
        return attrs


class TrackingPointCreateSerializer(serializers.Serializer):
    orderId = serializers.IntegerField()
    latitude = serializers.FloatField()
    longitude = serializers.FloatField()
    comment = serializers.CharField(required=False, allow_blank=True, default='')
