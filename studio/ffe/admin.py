from django.contrib import admin
from .models import RoomFFESection, RoomFFEItem, FFEChangeLog


class RoomFFEItemInline(admin.TabularInline):
    model = RoomFFEItem
    extra = 0
    fields = ['name', 'state', 'visibility', 'is_required', 'quantity', 'unit_cost', 'order']


@admin.register(RoomFFESection)
class RoomFFESectionAdmin(admin.ModelAdmin):
    list_display = ['name', 'room', 'order']
    search_fields = ['name', 'room__name', 'room__project__name']
    inlines = [RoomFFEItemInline]


@admin.register(RoomFFEItem)
class RoomFFEItemAdmin(admin.ModelAdmin):
    list_display = ['name', 'room', 'section', 'state', 'visibility', 'is_required', 'quantity', 'unit_cost']
    list_filter = ['state', 'visibility', 'is_required']
    search_fields = ['name', 'room__name', 'section__name']


@admin.register(FFEChangeLog)
class FFEChangeLogAdmin(admin.ModelAdmin):
    list_display = ['item', 'field', 'old_value', 'new_value', 'user', 'created_at']
    list_filter = ['field']
    readonly_fields = ['item', 'user', 'field', 'old_value', 'new_value', 'created_at']
