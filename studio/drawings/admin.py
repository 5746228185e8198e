from django.contrib import admin
from .models import DrawingChecklistItem, ProjectDrawing, DrawingRevision, Transmittal, TransmittalItem


@admin.register(DrawingChecklistItem)
class DrawingChecklistItemAdmin(admin.ModelAdmin):
    list_display = ['name', 'stage', 'type', 'completed', 'completed_at']
    list_filter = ['type', 'completed']
    search_fields = ['name', 'stage__room__name', 'stage__room__project__name']


class DrawingRevisionInline(admin.TabularInline):
    model = DrawingRevision
    extra = 0


@admin.register(ProjectDrawing)
class ProjectDrawingAdmin(admin.ModelAdmin):
    list_display = ['drawing_number', 'title', 'project', 'discipline', 'drawing_type', 'status', 'current_revision']
    list_filter = ['discipline', 'drawing_type', 'status']
    search_fields = ['drawing_number', 'title', 'project__name']
    inlines = [DrawingRevisionInline]


class TransmittalItemInline(admin.TabularInline):
    model = TransmittalItem
    extra = 0


@admin.register(Transmittal)
class TransmittalAdmin(admin.ModelAdmin):
    list_display = ['transmittal_number', 'project', 'recipient_name', 'recipient_type', 'method', 'status', 'sent_at']
    list_filter = ['status', 'recipient_type', 'method']
    search_fields = ['transmittal_number', 'recipient_name', 'recipient_email', 'project__name']
    readonly_fields = ['email_message_id', 'sent_at', 'acknowledged_at']
    inlines = [TransmittalItemInline]
