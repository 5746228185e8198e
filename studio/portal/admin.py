from django.contrib import admin
from .models import ClientAccessToken, ClientAccessLog


@admin.register(ClientAccessToken)
class ClientAccessTokenAdmin(admin.ModelAdmin):
    list_display = ['project', 'name', 'active', 'expires_at', 'access_count', 'last_accessed_at']
    list_filter = ['active']
    search_fields = ['project__name', 'name']
    readonly_fields = ['token', 'access_count', 'last_accessed_at', 'last_accessed_ip']


@admin.register(ClientAccessLog)
class ClientAccessLogAdmin(admin.ModelAdmin):
    list_display = ['token', 'action', 'ip_address', 'created_at']
    list_filter = ['action']
    readonly_fields = ['token', 'ip_address', 'user_agent', 'action', 'metadata', 'created_at']
