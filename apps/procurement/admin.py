from django.contrib import admin

from .models import PurchaseOrder, PurchaseOrderItem


class PurchaseOrderItemInline(admin.TabularInline):
    model = PurchaseOrderItem
    extra = 0
    raw_id_fields = ['product']


@admin.register(PurchaseOrder)
class PurchaseOrderAdmin(admin.ModelAdmin):
    list_display = ['order_number', 'company', 'destination_cnpj', 'valid_from', 'valid_until', 'status']
    list_filter = ['status', 'company']
    search_fields = ['order_number', 'destination_cnpj']
    date_hierarchy = 'created_at'
    inlines = [PurchaseOrderItemInline]
