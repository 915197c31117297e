from rest_framework import serializers

from apps.companies.models import clean_cnpj

from .models import PurchaseOrder, PurchaseOrderItem
from .services import BalanceLedger

DATE_INPUT_FORMATS = ['iso-8601', '%Y-%m-%d']


class PurchaseOrderItemSerializer(serializers.ModelSerializer):
    product_name = serializers.ReadOnlyField(source='product.name')
    unit = serializers.ReadOnlyField(source='product.unit_display')

    class Meta:
        model = PurchaseOrderItem
        fields = ['id', 'product', 'product_name', 'unit', 'quantity']


class PurchaseOrderItemBalanceSerializer(PurchaseOrderItemSerializer):
    """Item with the quantities already committed and still available."""
    consumed = serializers.SerializerMethodField()
    available = serializers.SerializerMethodField()

    class Meta(PurchaseOrderItemSerializer.Meta):
        fields = PurchaseOrderItemSerializer.Meta.fields + ['consumed', 'available']

    def _balance(self, obj):
        cache = self.context.setdefault('_balances', {})
        if obj.pk not in cache:
            cache[obj.pk] = BalanceLedger.available_balance(obj.purchase_order_id, obj.product_id, item=obj)
        return cache[obj.pk]

    def get_consumed(self, obj):
        return str(self._balance(obj).consumed)

    def get_available(self, obj):
        return str(self._balance(obj).available)


class PurchaseOrderSerializer(serializers.ModelSerializer):
    company_name = serializers.ReadOnlyField(source='company.name')
    items = PurchaseOrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = PurchaseOrder
        fields = [
            'id', 'order_number', 'company', 'company_name', 'destination_cnpj',
            'valid_from', 'valid_until', 'status', 'created_by', 'created_at', 'items',
        ]
        read_only_fields = fields


class PurchaseOrderItemInputSerializer(serializers.Serializer):
    product = serializers.IntegerField()
    quantity = serializers.DecimalField(max_digits=14, decimal_places=3)


class PurchaseOrderCreateSerializer(serializers.Serializer):
    order_number = serializers.CharField(max_length=50)
    company = serializers.IntegerField(required=False)
    destination_cnpj = serializers.CharField(max_length=18)
    valid_from = serializers.DateTimeField(input_formats=DATE_INPUT_FORMATS)
    valid_until = serializers.DateTimeField(input_formats=DATE_INPUT_FORMATS)
    items = PurchaseOrderItemInputSerializer(many=True)

    def validate_destination_cnpj(self, value):
        cnpj = clean_cnpj(value)
        if len(cnpj) != 14:
            raise serializers.ValidationError("CNPJ deve ter 14 dígitos")
        return cnpj
