import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Count, Q
from django.shortcuts import get_object_or_404
from django.utils import timezone
from studio.core.utils import create_audit_log, paginate, CanEditStudioData
from studio.projects.models import Project, Stage
from studio.projects.views import workflow_error_response
from studio.projects.workflow import WorkflowError, EmailDeliveryError, log_stage_activity
from .filters import DrawingFilter
from .models import DrawingChecklistItem, ProjectDrawing, Transmittal, DISCIPLINE_CHOICES
from .serializers import (
    DrawingChecklistItemSerializer, ProjectDrawingSerializer, ProjectDrawingDetailSerializer,
    DrawingRevisionSerializer, TransmittalListSerializer, TransmittalSerializer, TransmittalCreateSerializer
)
from . import transmittals as transmittal_service

logger = logging.getLogger('studio.drawings')

DEFAULT_CHECKLIST = [
    ('FLOORPLAN', 'Floor plan'),
    ('LIGHTING', 'Lighting plan'),
    ('ELEVATION', 'Elevations'),
    ('MILLWORK', 'Millwork details'),
]


def transmittal_queryset():
    return Transmittal.objects.select_related('project', 'sent_by', 'created_by').prefetch_related('items__drawing')


# Drawing checklist views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, CanEditStudioData])
def stage_drawing_checklist(request, pk):
    """
    List checklist items of a drawings stage or add one.

    POST {use_defaults: true} adds the standard deliverables that are missing.
    """
    stage = get_object_or_404(Stage.objects.select_related('room__project'), pk=pk)
    if stage.type != 'DRAWINGS':
        return Response({'error': 'Drawing checklists belong to the drawings stage'}, status=status.HTTP_400_BAD_REQUEST)

    if request.method == 'GET':
        items = DrawingChecklistItem.objects.filter(stage=stage).select_related('completed_by')
        return Response(DrawingChecklistItemSerializer(items, many=True).data)

    if request.data.get('use_defaults'):
        existing = set(DrawingChecklistItem.objects.filter(stage=stage).values_list('type', flat=True))
        offset = DrawingChecklistItem.objects.filter(stage=stage).count()
        created = []
        for item_type, name in DEFAULT_CHECKLIST:
            if item_type in existing:
                continue
            created.append(DrawingChecklistItem.objects.create(
                stage=stage, type=item_type, name=name, order=offset + len(created)
            ))
        return Response(DrawingChecklistItemSerializer(created, many=True).data, status=status.HTTP_201_CREATED)

    serializer = DrawingChecklistItemSerializer(data=request.data)
    if serializer.is_valid():
        order = serializer.validated_data.get('order')
        if order is None:
            order = DrawingChecklistItem.objects.filter(stage=stage).count()
        item = serializer.save(stage=stage, order=order)
        return Response(DrawingChecklistItemSerializer(item).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, CanEditStudioData])
def drawing_checklist_detail(request, pk):
    item = get_object_or_404(DrawingChecklistItem.objects.select_related('completed_by'), pk=pk)

    if request.method == 'GET':
        return Response(DrawingChecklistItemSerializer(item).data)
    elif request.method == 'PATCH':
        serializer = DrawingChecklistItemSerializer(item, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        item.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanEditStudioData])
def drawing_checklist_toggle(request, pk):
    """Flip the completed flag of a checklist item"""
    item = get_object_or_404(DrawingChecklistItem.objects.select_related('stage__room'), pk=pk)
    item.completed = not item.completed
    if item.completed:
        item.completed_at = timezone.now()
        item.completed_by = request.user
    else:
        item.completed_at = None
        item.completed_by = None
    item.save(update_fields=['completed', 'completed_at', 'completed_by', 'updated_at'])

    state = 'completed' if item.completed else 'reopened'
    log_stage_activity(item.stage, 'CHECKLIST', f"{item.name} {state}", request.user)
    return Response(DrawingChecklistItemSerializer(item).data)


# Drawing register views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, CanEditStudioData])
def project_drawings(request, pk):
    """List (filterable) or add drawings of a project"""
    project = get_object_or_404(Project, pk=pk)

    if request.method == 'GET':
        queryset = ProjectDrawing.objects.filter(project=project).select_related('project', 'room')
        filterset = DrawingFilter(request.query_params, queryset=queryset)
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
        return Response(ProjectDrawingSerializer(filterset.qs, many=True).data)

    serializer = ProjectDrawingSerializer(data=request.data, context={'project': project})
    if serializer.is_valid():
        drawing = serializer.save(project=project, created_by=request.user)
        create_audit_log(request, 'create', 'ProjectDrawing', drawing.id, object_name=drawing.title,
                         object_reference=drawing.drawing_number or None)
        return Response(ProjectDrawingSerializer(drawing).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, CanEditStudioData])
def drawing_detail(request, pk):
    drawing = get_object_or_404(
        ProjectDrawing.objects.select_related('project', 'room').prefetch_related('revisions__created_by'), pk=pk
    )

    if request.method == 'GET':
        return Response(ProjectDrawingDetailSerializer(drawing).data)
    elif request.method in ['PUT', 'PATCH']:
        serializer = ProjectDrawingSerializer(drawing, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            create_audit_log(request, 'update', 'ProjectDrawing', drawing.id, object_name=drawing.title,
                             changes={'fields': list(request.data.keys())})
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if drawing.transmittal_items.exists():
            # Issued drawings stay in the register for the distribution history
            drawing.status = 'ARCHIVED'
            drawing.save(update_fields=['status', 'updated_at'])
            create_audit_log(request, 'update', 'ProjectDrawing', drawing.id, object_name=drawing.title,
                             changes={'status': 'ARCHIVED'})
            return Response(ProjectDrawingSerializer(drawing).data)
        create_audit_log(request, 'delete', 'ProjectDrawing', drawing.id, object_name=drawing.title)
        drawing.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, CanEditStudioData])
def drawing_revisions(request, pk):
    """List revisions of a drawing or issue a new one"""
    drawing = get_object_or_404(ProjectDrawing, pk=pk)

    if request.method == 'GET':
        return Response(DrawingRevisionSerializer(drawing.revisions.select_related('created_by'), many=True).data)

    serializer = DrawingRevisionSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        revision = transmittal_service.add_revision(drawing, request.user, **serializer.validated_data)
    except WorkflowError as e:
        return workflow_error_response(e)
    return Response(DrawingRevisionSerializer(revision).data, status=status.HTTP_201_CREATED)


# Transmittal views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, CanEditStudioData])
def project_transmittals(request, pk):
    """
    GET: paginated transmittals of a project (filters: status, recipient_type, search).
    POST: create one transmittal per recipient, optionally sending them right away.
    """
    project = get_object_or_404(Project, pk=pk)

    if request.method == 'GET':
        queryset = Transmittal.objects.filter(project=project).select_related('project').annotate(
            item_count=Count('items')
        )
        status_filter = request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        recipient_type = request.query_params.get('recipient_type')
        if recipient_type:
            queryset = queryset.filter(recipient_type=recipient_type)
        search = request.query_params.get('search')
        if search:
            queryset = queryset.filter(
                Q(recipient_name__icontains=search) | Q(recipient_email__icontains=search) |
                Q(transmittal_number__icontains=search) | Q(subject__icontains=search)
            )
        return Response(paginate(request, queryset.order_by('-created_at', '-id'), TransmittalListSerializer))

    serializer = TransmittalCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data

    try:
        created, send_results = transmittal_service.create_transmittals(
            project, request.user,
            recipients=data['recipients'],
            items=data['items'],
            subject=data['subject'],
            notes=data['notes'],
            method=data['method'],
            send_immediately=data['send_immediately'],
        )
    except WorkflowError as e:
        return workflow_error_response(e)

    for transmittal in created:
        create_audit_log(request, 'transmittal_create', 'Transmittal', transmittal.id,
                         object_name=transmittal.recipient_name, object_reference=transmittal.transmittal_number)
    for result in send_results:
        if result['sent']:
            create_audit_log(request, 'transmittal_send', 'Transmittal', result['transmittal_id'],
                             object_reference=result['transmittal_number'],
                             changes={'recipient_email': result['recipient_email']})

    body = {
        'transmittals': TransmittalSerializer(transmittal_queryset().filter(id__in=[t.id for t in created]), many=True).data,
    }
    if data['send_immediately']:
        body['send_results'] = send_results
    return Response(body, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, CanEditStudioData])
def transmittal_detail(request, pk):
    transmittal = get_object_or_404(transmittal_queryset(), pk=pk)

    if request.method == 'GET':
        return Response(TransmittalSerializer(transmittal).data)

    if transmittal.status != 'DRAFT':
        return Response({'error': 'Only draft transmittals can be changed'}, status=status.HTTP_400_BAD_REQUEST)

    if request.method == 'PATCH':
        serializer = TransmittalSerializer(transmittal, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        transmittal.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanEditStudioData])
def transmittal_send(request, pk):
    """E-mail a draft transmittal to its recipient"""
    transmittal = get_object_or_404(transmittal_queryset(), pk=pk)
    try:
        transmittal_service.send_transmittal(transmittal, request.user)
    except EmailDeliveryError as e:
        return Response({'error': e.message}, status=status.HTTP_502_BAD_GATEWAY)
    except WorkflowError as e:
        return workflow_error_response(e)

    create_audit_log(request, 'transmittal_send', 'Transmittal', transmittal.id,
                     object_name=transmittal.recipient_name, object_reference=transmittal.transmittal_number,
                     changes={'recipient_email': transmittal.recipient_email})
    return Response(TransmittalSerializer(transmittal).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanEditStudioData])
def transmittal_acknowledge(request, pk):
    transmittal = get_object_or_404(transmittal_queryset(), pk=pk)
    try:
        transmittal_service.acknowledge_transmittal(transmittal)
    except WorkflowError as e:
        return workflow_error_response(e)
    create_audit_log(request, 'update', 'Transmittal', transmittal.id,
                     object_reference=transmittal.transmittal_number, changes={'status': 'ACKNOWLEDGED'})
    return Response(TransmittalSerializer(transmittal).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanEditStudioData])
def transmittal_cancel(request, pk):
    transmittal = get_object_or_404(transmittal_queryset(), pk=pk)
    try:
        transmittal_service.cancel_transmittal(transmittal)
    except WorkflowError as e:
        return workflow_error_response(e)
    create_audit_log(request, 'transmittal_cancel', 'Transmittal', transmittal.id,
                     object_reference=transmittal.transmittal_number)
    return Response(TransmittalSerializer(transmittal).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def distribution_matrix(request, pk):
    """Which revision of each drawing every recipient last received"""
    project = get_object_or_404(Project, pk=pk)
    discipline = request.query_params.get('discipline')
    if discipline and discipline not in dict(DISCIPLINE_CHOICES):
        return Response({'error': 'Invalid discipline'}, status=status.HTTP_400_BAD_REQUEST)
    return Response(transmittal_service.distribution_matrix(project, discipline=discipline))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def project_recipients(request, pk):
    """Recipients drawings have been distributed to, for reuse in new transmittals"""
    project = get_object_or_404(Project, pk=pk)
    return Response(transmittal_service.project_recipients(project))
