from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import User, Setting, AuditLog


@admin.register(User)
class StudioUserAdmin(BaseUserAdmin):
    list_display = ['username', 'display_name', 'email', 'role', 'email_notifications_enabled', 'is_active']
    list_filter = ['role', 'is_active', 'email_notifications_enabled']
    list_editable = ['role']
    search_fields = ['username', 'email', 'first_name', 'last_name']
    ordering = ['role', 'username']
    fieldsets = BaseUserAdmin.fieldsets + (
        ('Studio role', {'fields': ('role', 'phone', 'email_notifications_enabled')}),
    )
    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ('Studio role', {'fields': ('email', 'role')}),
    )


@admin.register(Setting)
class SettingAdmin(admin.ModelAdmin):
    list_display = ['key', 'value', 'description', 'updated_at']
    search_fields = ['key', 'description']


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    """Audit rows are written by the API only"""
    list_display = ['created_at', 'user', 'action', 'model_name', 'object_name', 'object_reference']
    list_filter = ['action', 'model_name']
    search_fields = ['user__username', 'object_name', 'object_reference', 'object_id']
    date_hierarchy = 'created_at'
    list_select_related = ['user']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
