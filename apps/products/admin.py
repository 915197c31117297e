from django.contrib import admin

from .models import Product, Unit


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['name', 'unit', 'confirmation_type', 'created_at']
    search_fields = ['name']
    list_filter = ['confirmation_type', 'unit']


admin.site.register(Unit)
