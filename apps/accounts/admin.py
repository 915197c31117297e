from django.contrib import admin

from .models import Profile, UserRole


@admin.register(UserRole)
class UserRoleAdmin(admin.ModelAdmin):
    list_display = ('name', 'category')
    list_filter = ('category',)


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = (
        'user', 'company', 'role', 'is_super_admin',
        'can_create_order', 'can_confirm_delivery', 'can_create_purchase_order',
    )
    list_filter = ('is_super_admin', 'company', 'role')
    search_fields = ('user__username', 'user__email', 'company__name')
    raw_id_fields = ('user',)
