"""
Signals for FFE items: change history and room progress
"""
from django.db.models.signals import post_save, pre_save, post_delete
from django.dispatch import receiver
from .models import RoomFFEItem, FFEChangeLog
from .utils import update_room_progress

TRACKED_FIELDS = ['state', 'visibility', 'is_required', 'quantity', 'unit_cost']


def _format_value(value):
    if value is None:
        return None
    return str(value)


@receiver(pre_save, sender=RoomFFEItem)
def track_item_changes(sender, instance, **kwargs):
    """Collect tracked field changes before the item is saved"""
    if not instance.pk:
        return

    try:
        old_instance = RoomFFEItem.objects.get(pk=instance.pk)
    except RoomFFEItem.DoesNotExist:
        return

    changes = []
    for field in TRACKED_FIELDS:
        old_value = getattr(old_instance, field)
        new_value = getattr(instance, field)
        if old_value != new_value:
            changes.append({
                'field': field,
                'old_value': _format_value(old_value),
                'new_value': _format_value(new_value),
            })
    instance._changes_to_log = changes


@receiver(post_save, sender=RoomFFEItem)
def log_item_changes(sender, instance, created, **kwargs):
    changes = getattr(instance, '_changes_to_log', None)
    if changes:
        FFEChangeLog.objects.bulk_create([
            FFEChangeLog(item=instance, user=getattr(instance, '_changed_by', None), **change)
            for change in changes
        ])
        del instance._changes_to_log

    update_room_progress(instance.room)


@receiver(post_delete, sender=RoomFFEItem)
def item_deleted(sender, instance, **kwargs):
    update_room_progress(instance.room)


def set_item_changed_by(item, user):
    """Attach the acting user so the change log can attribute the save"""
    item._changed_by = user if user and user.is_authenticated else None
