"""
Caching of the client portal payload.

The payload is cached per token and dropped for every token of a project
whenever something shown on the portal changes.
"""
import logging

from django.conf import settings
from django.core.cache import cache
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver

from studio.approvals.models import ClientApprovalVersion
from studio.ffe.models import RoomFFEItem
from studio.projects.models import Project, Room, Stage
from .models import ClientAccessToken

logger = logging.getLogger(__name__)

PROGRESS_KEY_PREFIX = 'portal:progress:'


def get_progress_cache_key(token_value):
    return f"{PROGRESS_KEY_PREFIX}{token_value}"


def get_cached_progress(token_value):
    return cache.get(get_progress_cache_key(token_value))


def cache_progress(token_value, payload):
    cache.set(get_progress_cache_key(token_value), payload, settings.PORTAL_CACHE_TTL)


def invalidate_project_progress(project_id):
    """Drop cached payloads of every token of a project"""
    if not project_id:
        return
    tokens = ClientAccessToken.objects.filter(project_id=project_id).values_list('token', flat=True)
    keys = [get_progress_cache_key(token) for token in tokens]
    if keys:
        cache.delete_many(keys)
        logger.debug(f"Portal cache invalidated for project {project_id} ({len(keys)} token(s))")


def _project_id_for(instance):
    if isinstance(instance, Project):
        return instance.pk
    if isinstance(instance, Room):
        return instance.project_id
    if isinstance(instance, RoomFFEItem):
        return Room.objects.filter(pk=instance.room_id).values_list('project_id', flat=True).first()
    if isinstance(instance, Stage):
        return Room.objects.filter(pk=instance.room_id).values_list('project_id', flat=True).first()
    if isinstance(instance, ClientApprovalVersion):
        return Stage.objects.filter(pk=instance.stage_id).values_list('room__project_id', flat=True).first()
    return None


@receiver(post_save, sender=Project)
@receiver(post_save, sender=Room)
@receiver(post_save, sender=Stage)
@receiver(post_save, sender=RoomFFEItem)
@receiver(post_save, sender=ClientApprovalVersion)
def progress_source_saved(sender, instance, **kwargs):
    invalidate_project_progress(_project_id_for(instance))


@receiver(post_delete, sender=Room)
@receiver(post_delete, sender=Stage)
@receiver(post_delete, sender=RoomFFEItem)
@receiver(post_delete, sender=ClientApprovalVersion)
def progress_source_deleted(sender, instance, **kwargs):
    invalidate_project_progress(_project_id_for(instance))
