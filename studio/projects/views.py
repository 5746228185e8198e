import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Q, ProtectedError
from django.shortcuts import get_object_or_404
from django.utils import timezone
from studio.core.utils import create_audit_log, paginate, CanEditStudioData
from .models import Client, Project, Room, Stage, Notification, DesignSection
from .serializers import (
    ClientSerializer, ProjectListSerializer, ProjectSerializer, RoomSerializer,
    StageSerializer, StageActivitySerializer, NotificationSerializer, DesignSectionSerializer
)
from . import workflow
from .workflow import WorkflowError

logger = logging.getLogger('studio.projects')
User = get_user_model()


def workflow_error_response(error):
    body = {'error': error.message}
    if error.details:
        body['details'] = error.details
    return Response(body, status=status.HTTP_400_BAD_REQUEST)


def room_queryset():
    return Room.objects.select_related('project').prefetch_related('stages__assigned_to', 'stages__completed_by')


# Client views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, CanEditStudioData])
def client_list_create(request):
    """List all clients or create a new client"""
    if request.method == 'GET':
        queryset = Client.objects.all()
        search = request.query_params.get('search')
        if search:
            queryset = queryset.filter(
                Q(name__icontains=search) | Q(email__icontains=search) | Q(company__icontains=search)
            )
        serializer = ClientSerializer(queryset, many=True)
        return Response(serializer.data)

    serializer = ClientSerializer(data=request.data)
    if serializer.is_valid():
        client = serializer.save()
        create_audit_log(request, 'create', 'Client', client.id, object_name=client.name)
        return Response(ClientSerializer(client).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, CanEditStudioData])
def client_detail(request, pk):
    """Retrieve, update or delete a client"""
    client = get_object_or_404(Client, pk=pk)

    if request.method == 'GET':
        return Response(ClientSerializer(client).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = ClientSerializer(client, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        try:
            client.delete()
        except ProtectedError:
            return Response({'error': 'Client has projects and cannot be deleted'}, status=status.HTTP_400_BAD_REQUEST)
        return Response(status=status.HTTP_204_NO_CONTENT)


# Project views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, CanEditStudioData])
def project_list_create(request):
    """List projects (paginated) or create a project with optional rooms"""
    if request.method == 'GET':
        queryset = Project.objects.select_related('client')

        status_filter = request.query_params.get('status')
        client_filter = request.query_params.get('client')
        type_filter = request.query_params.get('type')
        search = request.query_params.get('search')

        if status_filter:
            queryset = queryset.filter(status=status_filter)
        if client_filter:
            queryset = queryset.filter(client_id=client_filter)
        if type_filter:
            queryset = queryset.filter(type=type_filter)
        if search:
            queryset = queryset.filter(
                Q(name__icontains=search) | Q(client__name__icontains=search) | Q(address__icontains=search)
            )

        queryset = queryset.order_by('-updated_at', '-id')
        return Response(paginate(request, queryset, ProjectListSerializer))

    serializer = ProjectSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    rooms_data = request.data.get('rooms') or []
    if not isinstance(rooms_data, list):
        return Response({'rooms': 'Expected a list of rooms'}, status=status.HTTP_400_BAD_REQUEST)

    room_serializers = []
    for index, room_data in enumerate(rooms_data):
        room_serializer = RoomSerializer(data=room_data)
        if not room_serializer.is_valid():
            return Response({'rooms': {index: room_serializer.errors}}, status=status.HTTP_400_BAD_REQUEST)
        room_serializers.append(room_serializer)

    with transaction.atomic():
        project = serializer.save(created_by=request.user)
        for index, room_serializer in enumerate(room_serializers):
            room = room_serializer.save(project=project, order=room_serializer.validated_data.get('order', index))
            workflow.create_room_stages(room)

    logger.info(f"Project {project.id} created by {request.user.username} with {len(room_serializers)} rooms")
    create_audit_log(request, 'create', 'Project', project.id, object_name=project.name,
                     changes={'rooms': len(room_serializers)})
    project = Project.objects.prefetch_related('rooms__stages').get(pk=project.pk)
    return Response(ProjectSerializer(project).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, CanEditStudioData])
def project_detail(request, pk):
    """Retrieve a project with rooms and stages, update it or delete it"""
    project = get_object_or_404(
        Project.objects.select_related('client', 'created_by').prefetch_related(
            'rooms__stages__assigned_to', 'rooms__stages__completed_by'
        ),
        pk=pk
    )

    if request.method == 'GET':
        return Response(ProjectSerializer(project).data)
    elif request.method in ('PUT', 'PATCH'):
        old_status = project.status
        serializer = ProjectSerializer(project, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            changes = {}
            if old_status != project.status:
                changes['status'] = {'old': old_status, 'new': project.status}
            create_audit_log(request, 'update', 'Project', project.id, object_name=project.name, changes=changes)
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if not request.user.is_studio_admin:
            return Response({'error': 'Only studio admins can delete projects'}, status=status.HTTP_403_FORBIDDEN)
        create_audit_log(request, 'delete', 'Project', project.id, object_name=project.name)
        project.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Room views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, CanEditStudioData])
def project_rooms(request, pk):
    """List the rooms of a project or add a room (its stages are created with it)"""
    project = get_object_or_404(Project, pk=pk)

    if request.method == 'GET':
        rooms = room_queryset().filter(project=project)
        return Response(RoomSerializer(rooms, many=True).data)

    serializer = RoomSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    with transaction.atomic():
        order = serializer.validated_data.get('order')
        if order is None:
            order = project.rooms.count()
        room = serializer.save(project=project, order=order)
        workflow.create_room_stages(room)

    create_audit_log(request, 'create', 'Room', room.id, object_name=str(room))
    return Response(RoomSerializer(room_queryset().get(pk=room.pk)).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, CanEditStudioData])
def room_detail(request, pk):
    """Retrieve, update or delete a room"""
    room = get_object_or_404(room_queryset(), pk=pk)

    if request.method == 'GET':
        return Response(RoomSerializer(room).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = RoomSerializer(room, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(request, 'delete', 'Room', room.id, object_name=str(room))
        room.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Stage views
@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated, CanEditStudioData])
def stage_detail(request, pk):
    """Retrieve a stage or update its due date"""
    stage = get_object_or_404(Stage.objects.select_related('room__project', 'assigned_to', 'completed_by'), pk=pk)

    if request.method == 'PATCH':
        serializer = StageSerializer(stage, data={'due_date': request.data.get('due_date')}, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        serializer.save()

    data = StageSerializer(stage).data
    data['completion_blockers'] = workflow.completion_blockers(stage) if stage.status != 'COMPLETED' else []
    return Response(data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def stage_activity(request, pk):
    """Timeline of a stage"""
    stage = get_object_or_404(Stage, pk=pk)
    activities = stage.activities.select_related('user')[:200]
    return Response(StageActivitySerializer(activities, many=True).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanEditStudioData])
def stage_action(request, pk, action):
    """Run a workflow action (start, complete, reopen, hold, resume, assign, ...) on a stage"""
    stage = get_object_or_404(Stage.objects.select_related('room__project', 'assigned_to'), pk=pk)
    old_status = stage.status

    user_id = request.data.get('user_id') if action == 'assign' else None
    if user_id not in (None, ''):
        try:
            user_id = int(user_id)
        except (TypeError, ValueError):
            return Response({'error': 'user_id must be a user id'}, status=status.HTTP_400_BAD_REQUEST)

    try:
        with transaction.atomic():
            if action == 'assign':
                assignee = get_object_or_404(User, pk=user_id, is_active=True) if user_id else None
                workflow.assign_stage(stage, assignee, request.user)
                audit_action = 'stage_assign'
                changes = {'assigned_to': assignee.username if assignee else None}
            else:
                handler = workflow.STAGE_ACTIONS.get(action)
                if handler is None:
                    return Response({'error': f'Unknown stage action: {action}'}, status=status.HTTP_400_BAD_REQUEST)
                handler(stage, request.user)
                audit_action = {'start': 'stage_start', 'complete': 'stage_complete',
                                'reopen': 'stage_reopen'}.get(action, 'update')
                changes = {'status': {'old': old_status, 'new': stage.status}}
    except WorkflowError as e:
        logger.warning(f"Stage {stage.id} {action} rejected: {e.message}")
        return workflow_error_response(e)

    create_audit_log(request, audit_action, 'Stage', stage.id, object_name=str(stage), changes=changes)
    stage.refresh_from_db()
    data = StageSerializer(stage).data
    data['room'] = RoomSerializer(room_queryset().get(pk=stage.room_id)).data
    return Response(data)


# Design concept sections
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, CanEditStudioData])
def design_sections(request, pk):
    """List the design sections of a DESIGN_CONCEPT stage or upsert one by type"""
    stage = get_object_or_404(Stage, pk=pk)
    if stage.type != 'DESIGN_CONCEPT':
        return Response({'error': 'Design sections belong to the design concept stage'}, status=status.HTTP_400_BAD_REQUEST)

    if request.method == 'GET':
        sections = stage.design_sections.all()
        existing = set(s.type for s in sections)
        return Response({
            'sections': DesignSectionSerializer(sections, many=True).data,
            'required_types': DesignSection.REQUIRED_TYPES,
            'missing_types': [t for t in DesignSection.REQUIRED_TYPES if t not in existing],
        })

    section_type = request.data.get('type')
    section = stage.design_sections.filter(type=section_type).first() if section_type else None
    created = section is None
    serializer = DesignSectionSerializer(section, data=request.data, partial=section is not None)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    section = serializer.save(stage=stage)
    if stage.status == 'NOT_STARTED':
        workflow.start_stage(stage, request.user)
    return Response(DesignSectionSerializer(section).data,
                    status=status.HTTP_201_CREATED if created else status.HTTP_200_OK)


@api_view(['PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, CanEditStudioData])
def design_section_detail(request, pk):
    """Update or delete a design section"""
    section = get_object_or_404(DesignSection, pk=pk)

    if request.method == 'DELETE':
        section.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = DesignSectionSerializer(section, data=request.data, partial=True)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    completed = serializer.validated_data.get('completed')
    if completed is True and not section.completed:
        serializer.save(completed_at=timezone.now())
    elif completed is False:
        serializer.save(completed_at=None)
    else:
        serializer.save()
    return Response(serializer.data)


# Notification views
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def notification_list(request):
    """Notifications of the current user"""
    queryset = Notification.objects.filter(user=request.user)
    if request.query_params.get('unread') in ('1', 'true'):
        queryset = queryset.filter(is_read=False)
    return Response({
        'results': NotificationSerializer(queryset[:100], many=True).data,
        'unread_count': Notification.objects.filter(user=request.user, is_read=False).count(),
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def notification_mark_read(request, pk):
    notification = get_object_or_404(Notification, pk=pk, user=request.user)
    notification.is_read = True
    notification.save(update_fields=['is_read'])
    return Response(NotificationSerializer(notification).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def notification_mark_all_read(request):
    updated = Notification.objects.filter(user=request.user, is_read=False).update(is_read=True)
    return Response({'updated': updated})
