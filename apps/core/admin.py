from django.contrib import admin

from .models import SystemLog, SystemSetting


@admin.register(SystemSetting)
class SystemSettingAdmin(admin.ModelAdmin):
    list_display = ['key', 'value', 'description']
    search_fields = ['key']


@admin.register(SystemLog)
class SystemLogAdmin(admin.ModelAdmin):
    list_display = ['created_at', 'action', 'item_type', 'item_id', 'user']
    list_filter = ['item_type', 'action', 'created_at']
    search_fields = ['item_id', 'details']
    date_hierarchy = 'created_at'
    readonly_fields = ['created_at', 'user', 'action', 'item_type', 'item_id', 'details']
    ordering = ['-created_at']
