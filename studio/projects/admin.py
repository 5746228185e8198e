from django.contrib import admin
from .models import Client, Project, Room, Stage, StageActivity, Notification, DesignSection


@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ['name', 'email', 'phone', 'company', 'created_at']
    search_fields = ['name', 'email', 'company']
    ordering = ['name']


class RoomInline(admin.TabularInline):
    model = Room
    extra = 0
    fields = ['type', 'name', 'order', 'status', 'current_stage']
    readonly_fields = ['status', 'current_stage']


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ['name', 'client', 'type', 'status', 'due_date', 'updated_at']
    list_filter = ['type', 'status']
    search_fields = ['name', 'client__name', 'address']
    ordering = ['-updated_at']
    inlines = [RoomInline]


class StageInline(admin.TabularInline):
    model = Stage
    extra = 0
    fields = ['type', 'status', 'assigned_to', 'due_date', 'started_at', 'completed_at']
    readonly_fields = ['started_at', 'completed_at']


@admin.register(Room)
class RoomAdmin(admin.ModelAdmin):
    list_display = ['__str__', 'type', 'status', 'current_stage', 'progress_ffe']
    list_filter = ['type', 'status', 'current_stage']
    search_fields = ['name', 'project__name']
    inlines = [StageInline]


@admin.register(Stage)
class StageAdmin(admin.ModelAdmin):
    list_display = ['room', 'type', 'status', 'assigned_to', 'due_date', 'completed_at']
    list_filter = ['type', 'status']
    search_fields = ['room__name', 'room__project__name', 'assigned_to__username']


@admin.register(StageActivity)
class StageActivityAdmin(admin.ModelAdmin):
    list_display = ['stage', 'type', 'message', 'user', 'created_at']
    list_filter = ['type', 'created_at']
    ordering = ['-created_at']
    readonly_fields = ['stage', 'type', 'message', 'user', 'created_at']


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ['user', 'type', 'title', 'is_read', 'created_at']
    list_filter = ['type', 'is_read']
    search_fields = ['user__username', 'title']


@admin.register(DesignSection)
class DesignSectionAdmin(admin.ModelAdmin):
    list_display = ['stage', 'type', 'completed', 'updated_at']
    list_filter = ['type', 'completed']
