from django.contrib import admin

from .models import Company, CompanyCategory


@admin.register(CompanyCategory)
class CompanyCategoryAdmin(admin.ModelAdmin):
    list_display = (
        'name', 'requires_approver', 'receives_purchase_orders',
        'requires_contract', 'can_edit_purchase_orders',
    )


@admin.register(Company)
class CompanyAdmin(admin.ModelAdmin):
    list_display = ('name', 'formatted_cnpj', 'category', 'approver', 'contract_number')
    list_filter = ('category',)
    search_fields = ('name', 'cnpj')
    raw_id_fields = ('approver',)
