import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db import transaction
from django.shortcuts import get_object_or_404
from studio.core.utils import CanEditStudioData
from studio.portal.cache import invalidate_project_progress
from studio.projects.models import Room
from studio.projects.workflow import log_stage_activity
from .models import RoomFFESection, RoomFFEItem
from .presets import preset_items, preset_summary
from .serializers import RoomFFESectionSerializer, RoomFFEItemSerializer, FFEChangeLogSerializer, BulkStateSerializer
from .signals import set_item_changed_by
from .utils import room_ffe_stats, ffe_completion_blockers, update_room_progress

logger = logging.getLogger('studio.ffe')


def _log_state_change(room, message, user):
    stage = room.stages.filter(type='FFE').first()
    if stage is not None:
        log_stage_activity(stage, 'FFE', message, user)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def room_ffe(request, pk):
    """Sections with their items, progress stats and open required items of a room"""
    room = get_object_or_404(Room.objects.select_related('project'), pk=pk)
    sections = RoomFFESection.objects.filter(room=room).prefetch_related('items__section')
    return Response({
        'room': {'id': room.id, 'name': room.display_name, 'progress_ffe': room.progress_ffe},
        'sections': RoomFFESectionSerializer(sections, many=True).data,
        'stats': room_ffe_stats(room),
        'completion_blockers': ffe_completion_blockers(room),
    })


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, CanEditStudioData])
def room_ffe_sections(request, pk):
    """
    List or add FFE sections of a room.

    POST accepts use_presets: true to create the section's preset items.
    """
    room = get_object_or_404(Room, pk=pk)

    if request.method == 'GET':
        sections = RoomFFESection.objects.filter(room=room).prefetch_related('items__section')
        return Response(RoomFFESectionSerializer(sections, many=True).data)

    serializer = RoomFFESectionSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    with transaction.atomic():
        order = serializer.validated_data.get('order')
        if order is None:
            order = RoomFFESection.objects.filter(room=room).count()
        section = serializer.save(room=room, order=order)
        if request.data.get('use_presets'):
            presets = preset_items(section.name)
            RoomFFEItem.objects.bulk_create([
                RoomFFEItem(room=room, section=section, **item) for item in presets
            ])
            logger.info(f"Added {len(presets)} preset item(s) to section '{section.name}' in room {room.id}")
    update_room_progress(room)
    # bulk_create sends no post_save
    invalidate_project_progress(room.project_id)

    section = RoomFFESection.objects.prefetch_related('items__section').get(pk=section.pk)
    return Response(RoomFFESectionSerializer(section).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, CanEditStudioData])
def ffe_section_detail(request, pk):
    section = get_object_or_404(RoomFFESection.objects.select_related('room').prefetch_related('items__section'), pk=pk)

    if request.method == 'GET':
        return Response(RoomFFESectionSerializer(section).data)
    elif request.method == 'PATCH':
        serializer = RoomFFESectionSerializer(section, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        room = section.room
        section.delete()
        update_room_progress(room)
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, CanEditStudioData])
def room_ffe_items(request, pk):
    """List (filters: state, section, visibility, required) or add FFE items of a room"""
    room = get_object_or_404(Room, pk=pk)

    if request.method == 'GET':
        queryset = RoomFFEItem.objects.filter(room=room).select_related('section')
        state = request.query_params.get('state')
        if state:
            queryset = queryset.filter(state=state)
        section = request.query_params.get('section')
        if section:
            queryset = queryset.filter(section_id=section)
        visibility = request.query_params.get('visibility')
        if visibility:
            queryset = queryset.filter(visibility=visibility)
        required = request.query_params.get('required')
        if required is not None:
            queryset = queryset.filter(is_required=required.lower() in ('1', 'true', 'yes'))
        return Response(RoomFFEItemSerializer(queryset, many=True).data)

    serializer = RoomFFEItemSerializer(data=request.data, context={'room': room})
    if serializer.is_valid():
        order = serializer.validated_data.get('order')
        if order is None:
            order = RoomFFEItem.objects.filter(section=serializer.validated_data['section']).count()
        item = serializer.save(room=room, order=order)
        return Response(RoomFFEItemSerializer(item).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, CanEditStudioData])
def ffe_item_detail(request, pk):
    item = get_object_or_404(RoomFFEItem.objects.select_related('room', 'section'), pk=pk)

    if request.method == 'GET':
        data = RoomFFEItemSerializer(item).data
        data['history'] = FFEChangeLogSerializer(item.change_logs.select_related('user'), many=True).data
        return Response(data)
    elif request.method == 'PATCH':
        old_state = item.state
        serializer = RoomFFEItemSerializer(item, data=request.data, partial=True)
        if serializer.is_valid():
            set_item_changed_by(item, request.user)
            item = serializer.save()
            if item.state != old_state:
                _log_state_change(item.room, f"{item.name}: {old_state} -> {item.state}", request.user)
            return Response(RoomFFEItemSerializer(item).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        item.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanEditStudioData])
def room_ffe_bulk_state(request, pk):
    """Set the same state on several items of a room ({item_ids, state})"""
    room = get_object_or_404(Room, pk=pk)
    serializer = BulkStateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    new_state = serializer.validated_data['state']
    items = list(RoomFFEItem.objects.filter(room=room, id__in=serializer.validated_data['item_ids']))
    if not items:
        return Response({'error': 'No matching items in this room'}, status=status.HTTP_404_NOT_FOUND)

    updated = 0
    with transaction.atomic():
        for item in items:
            if item.state == new_state:
                continue
            item.state = new_state
            set_item_changed_by(item, request.user)
            item.save(update_fields=['state', 'updated_at'])
            updated += 1

    if updated:
        _log_state_change(room, f"{updated} FFE item(s) set to {new_state}", request.user)
    return Response({
        'updated': updated,
        'items': RoomFFEItemSerializer(
            RoomFFEItem.objects.filter(pk__in=[i.pk for i in items]).select_related('section'), many=True
        ).data,
        'stats': room_ffe_stats(room),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def section_presets(request):
    return Response(preset_summary())
