from django.contrib import admin
from .models import Task


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    list_display = ['title', 'project', 'room', 'status', 'priority', 'assignee', 'due_date', 'completed_at']
    list_filter = ['status', 'priority']
    search_fields = ['title', 'description', 'project__name']
    readonly_fields = ['started_at', 'completed_at']
