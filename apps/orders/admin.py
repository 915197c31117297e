from django.contrib import admin
from django.utils.html import format_html

from .models import DeliveryOrder, OrderDocument, OrderStatus, TrackingPoint

STATUS_COLORS = {
    OrderStatus.REGISTERED: 'orange',
    OrderStatus.APPROVED: 'blue',
    OrderStatus.LOADED: 'purple',
    OrderStatus.IN_TRANSIT: 'teal',
    OrderStatus.DELIVERED: 'green',
    OrderStatus.CANCELLED: 'red',
    OrderStatus.SUSPENDED: 'gray',
}


class OrderDocumentInline(admin.TabularInline):
    model = OrderDocument
    extra = 0
    readonly_fields = ['document_type', 'file', 'original_name', 'file_size', 'uploaded_by', 'uploaded_at']


@admin.register(DeliveryOrder)
class DeliveryOrderAdmin(admin.ModelAdmin):
    list_display = [
        'order_id', 'purchase_order', 'product', 'quantity',
        'supplier', 'delivery_date', 'status_display', 'is_urgent'
    ]
    list_filter = ['status', 'is_urgent', 'supplier']
    search_fields = ['order_id', 'purchase_order__order_number', 'nfe_key']
    date_hierarchy = 'created_at'
    # Status changes only through the services
    readonly_fields = ['order_id', 'status', 'is_urgent', 'created_by', 'created_at', 'delivered_at']
    raw_id_fields = ['purchase_order', 'product']
    inlines = [OrderDocumentInline]

    def status_display(self, obj):
        return format_html(
            '<span style="color: {};">{}</span>',
            STATUS_COLORS.get(obj.status, 'black'), obj.status
        )
    status_display.short_description = 'Status'


@admin.register(TrackingPoint)
class TrackingPointAdmin(admin.ModelAdmin):
    list_display = ['order', 'status', 'latitude', 'longitude', 'user', 'created_at']
    list_filter = ['status']
    raw_id_fields = ['order']
