from django.contrib import admin
from .models import (
    RenderingVersion, RenderingAsset, RenderingNote, ClientApprovalVersion, ClientApprovalAsset,
    ClientApprovalActivity, ClientApprovalEmailLog, ClientDecision
)


class RenderingAssetInline(admin.TabularInline):
    model = RenderingAsset
    extra = 0


@admin.register(RenderingVersion)
class RenderingVersionAdmin(admin.ModelAdmin):
    list_display = ['room', 'version', 'custom_name', 'status', 'pushed_to_client_at', 'created_at']
    list_filter = ['status']
    search_fields = ['room__name', 'room__project__name', 'custom_name']
    inlines = [RenderingAssetInline]


@admin.register(RenderingNote)
class RenderingNoteAdmin(admin.ModelAdmin):
    list_display = ['rendering_version', 'author', 'created_at']


class ClientApprovalAssetInline(admin.TabularInline):
    model = ClientApprovalAsset
    extra = 0


@admin.register(ClientApprovalVersion)
class ClientApprovalVersionAdmin(admin.ModelAdmin):
    list_display = ['stage', 'version', 'status', 'approved_internally', 'sent_to_client_at', 'client_decision', 'client_decided_at']
    list_filter = ['status', 'client_decision', 'approved_internally']
    search_fields = ['stage__room__name', 'stage__room__project__name', 'version']
    inlines = [ClientApprovalAssetInline]


@admin.register(ClientApprovalActivity)
class ClientApprovalActivityAdmin(admin.ModelAdmin):
    list_display = ['version', 'type', 'message', 'user', 'created_at']
    list_filter = ['type']
    readonly_fields = ['version', 'type', 'message', 'user', 'metadata', 'created_at']


@admin.register(ClientApprovalEmailLog)
class ClientApprovalEmailLogAdmin(admin.ModelAdmin):
    list_display = ['version', 'to', 'subject', 'sent_at', 'opened_at']
    search_fields = ['to', 'subject']
    readonly_fields = ['version', 'to', 'subject', 'html', 'tracking_id', 'sent_at', 'opened_at']


@admin.register(ClientDecision)
class ClientDecisionAdmin(admin.ModelAdmin):
    list_display = ['version', 'decision', 'decided_by', 'decided_at']
    list_filter = ['decision']
