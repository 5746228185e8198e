"""FFE progress and completion rules"""
import logging

from django.utils import timezone

from studio.projects.models import Room

logger = logging.getLogger('studio.ffe')

DONE_STATES = ['CONFIRMED', 'COMPLETED']
RESOLVED_STATES = ['CONFIRMED', 'COMPLETED', 'NOT_NEEDED']


def ffe_stats(items):
    """
    Progress over the items being considered.

    Hidden and NOT_NEEDED items are not considered; the rest count as done
    once CONFIRMED or COMPLETED.
    """
    items = list(items)
    considered = [i for i in items if i.visibility == 'VISIBLE' and i.state != 'NOT_NEEDED']
    completed = [i for i in considered if i.state in DONE_STATES]
    by_state = {}
    for item in items:
        by_state[item.state] = by_state.get(item.state, 0) + 1
    return {
        'total': len(items),
        'considered': len(considered),
        'completed': len(completed),
        'percentage': round(len(completed) / len(considered) * 100) if considered else 0,
        'required_open': sum(
            1 for i in items
            if i.visibility == 'VISIBLE' and i.is_required and i.state not in RESOLVED_STATES
        ),
        'by_state': by_state,
    }


def room_ffe_stats(room):
    return ffe_stats(room.ffe_items.all())


def update_room_progress(room):
    """Store the FFE percentage on the room"""
    percentage = room_ffe_stats(room)['percentage']
    Room.objects.filter(pk=room.pk).update(progress_ffe=percentage, updated_at=timezone.now())
    room.progress_ffe = percentage
    logger.debug(f"Room {room.id} FFE progress now {percentage}%")
    return percentage


def ffe_completion_blockers(room):
    """Visible required items that are not confirmed, completed or marked not needed"""
    open_items = room.ffe_items.filter(
        visibility='VISIBLE', is_required=True
    ).exclude(state__in=RESOLVED_STATES).order_by('section__order', 'order', 'id')
    return [f"Required FFE item not resolved: {item.name}" for item in open_items]
