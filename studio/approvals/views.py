import base64
import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET
from studio.core.utils import create_audit_log, CanEditStudioData
from studio.projects.models import Stage
from studio.projects.views import workflow_error_response
from studio.projects.workflow import WorkflowError
from .models import RenderingVersion, RenderingAsset, ClientApprovalVersion, ClientApprovalEmailLog
from .serializers import (
    RenderingVersionSerializer, RenderingAssetSerializer, RenderingNoteSerializer,
    ClientApprovalVersionSerializer, ClientApprovalActivitySerializer, ClientApprovalEmailLogSerializer
)
from . import workflow
from .workflow import EmailDeliveryError

logger = logging.getLogger('studio.approvals')

TRACKING_PIXEL = base64.b64decode('R0lGODlhAQABAIAAAAAAAP///yH5BAEAAAAALAAAAAABAAEAAAIBRAA7')


def rendering_queryset():
    return RenderingVersion.objects.select_related('room__project', 'stage', 'created_by').prefetch_related(
        'assets', 'notes__author'
    )


def approval_queryset():
    return ClientApprovalVersion.objects.select_related(
        'stage__room__project__client', 'rendering_version', 'internal_approved_by', 'sent_by'
    ).prefetch_related('assets__asset', 'decisions__decided_by')


# Rendering views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, CanEditStudioData])
def stage_renderings(request, pk):
    """List the rendering versions of a 3D stage or start a new one"""
    stage = get_object_or_404(Stage.objects.select_related('room__project'), pk=pk)
    if stage.type != 'THREE_D':
        return Response({'error': 'Renderings belong to the 3D rendering stage'}, status=status.HTTP_400_BAD_REQUEST)

    if request.method == 'GET':
        renderings = rendering_queryset().filter(stage=stage)
        return Response(RenderingVersionSerializer(renderings, many=True).data)

    try:
        rendering = workflow.create_rendering_version(stage, request.user, request.data.get('custom_name', ''))
    except WorkflowError as e:
        return workflow_error_response(e)
    create_audit_log(request, 'create', 'RenderingVersion', rendering.id, object_name=str(stage.room),
                     object_reference=rendering.version)
    return Response(RenderingVersionSerializer(rendering_queryset().get(pk=rendering.pk)).data,
                    status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, CanEditStudioData])
def rendering_detail(request, pk):
    """Retrieve, rename or delete a rendering version"""
    rendering = get_object_or_404(rendering_queryset(), pk=pk)

    if request.method == 'GET':
        return Response(RenderingVersionSerializer(rendering).data)
    elif request.method == 'PATCH':
        serializer = RenderingVersionSerializer(rendering, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if rendering.status != 'IN_PROGRESS':
            return Response({'error': 'Only renderings in progress can be deleted'}, status=status.HTTP_400_BAD_REQUEST)
        rendering.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, CanEditStudioData])
def rendering_assets(request, pk):
    """List or add assets of a rendering version"""
    rendering = get_object_or_404(RenderingVersion, pk=pk)

    if request.method == 'GET':
        return Response(RenderingAssetSerializer(rendering.assets.all(), many=True).data)

    if rendering.status == 'PUSHED_TO_CLIENT':
        return Response({'error': 'Assets cannot be added after the rendering was pushed to the client'},
                        status=status.HTTP_400_BAD_REQUEST)
    serializer = RenderingAssetSerializer(data=request.data)
    if serializer.is_valid():
        order = serializer.validated_data.get('order')
        if order is None:
            order = rendering.assets.count()
        asset = serializer.save(rendering_version=rendering, uploaded_by=request.user, order=order)
        return Response(RenderingAssetSerializer(asset).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, CanEditStudioData])
def rendering_asset_detail(request, pk):
    """Update or delete a rendering asset"""
    asset = get_object_or_404(RenderingAsset.objects.select_related('rendering_version'), pk=pk)

    if request.method == 'DELETE':
        if asset.rendering_version.status == 'PUSHED_TO_CLIENT':
            return Response({'error': 'Assets shared with the client cannot be deleted'}, status=status.HTTP_400_BAD_REQUEST)
        asset.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)

    serializer = RenderingAssetSerializer(asset, data=request.data, partial=True)
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, CanEditStudioData])
def rendering_notes(request, pk):
    """List or add notes on a rendering version"""
    rendering = get_object_or_404(RenderingVersion, pk=pk)

    if request.method == 'GET':
        return Response(RenderingNoteSerializer(rendering.notes.select_related('author'), many=True).data)

    serializer = RenderingNoteSerializer(data=request.data)
    if serializer.is_valid():
        note = serializer.save(rendering_version=rendering, author=request.user)
        return Response(RenderingNoteSerializer(note).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanEditStudioData])
def rendering_complete(request, pk):
    """Mark a rendering version as completed"""
    rendering = get_object_or_404(RenderingVersion.objects.select_related('stage'), pk=pk)
    try:
        workflow.complete_rendering(rendering, request.user)
    except WorkflowError as e:
        return workflow_error_response(e)
    return Response(RenderingVersionSerializer(rendering_queryset().get(pk=rendering.pk)).data)


# Client approval views
def _approval_stage(pk):
    return get_object_or_404(Stage.objects.select_related('room__project__client'), pk=pk, type='CLIENT_APPROVAL')


def _current_version_or_404(stage):
    version = approval_queryset().filter(stage=stage).order_by('-created_at', '-id').first()
    if version is None:
        return None, Response({'error': 'Version not found'}, status=status.HTTP_404_NOT_FOUND)
    return version, None


def _version_response(version):
    return Response(ClientApprovalVersionSerializer(approval_queryset().get(pk=version.pk)).data)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, CanEditStudioData])
def client_approval(request, pk):
    """
    GET: current approval version, history and renderings that can be pushed.
    POST: push a completed rendering version ({rendering_version_id}) to client approval.
    """
    stage = _approval_stage(pk)

    if request.method == 'GET':
        versions = list(approval_queryset().filter(stage=stage).order_by('-created_at', '-id'))
        pushable = rendering_queryset().filter(room=stage.room, status='COMPLETED')
        return Response({
            'stage': {'id': stage.id, 'status': stage.status, 'room': stage.room_id},
            'current_version': ClientApprovalVersionSerializer(versions[0]).data if versions else None,
            'history': ClientApprovalVersionSerializer(versions[1:], many=True).data,
            'pushable_renderings': RenderingVersionSerializer(pushable, many=True).data,
        })

    rendering_id = request.data.get('rendering_version_id')
    if not rendering_id:
        return Response({'error': 'rendering_version_id is required'}, status=status.HTTP_400_BAD_REQUEST)
    rendering = get_object_or_404(RenderingVersion.objects.select_related('room', 'stage'), pk=rendering_id, room=stage.room)

    try:
        version = workflow.push_to_client_approval(rendering, request.user)
    except WorkflowError as e:
        logger.warning(f"Push of rendering {rendering.id} rejected: {e.message}")
        return workflow_error_response(e)

    create_audit_log(request, 'rendering_push', 'ClientApprovalVersion', version.id,
                     object_name=str(stage.room), object_reference=version.version)
    return Response(ClientApprovalVersionSerializer(approval_queryset().get(pk=version.pk)).data,
                    status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def internal_approve(request, pk):
    """Studio owner/admin approves ({approved: true}) or sends back ({approved: false}) the current version"""
    if not request.user.is_studio_admin:
        return Response({'error': 'Only studio owners and admins can approve internally'}, status=status.HTTP_403_FORBIDDEN)

    stage = _approval_stage(pk)
    version, error = _current_version_or_404(stage)
    if error:
        return error

    approved = request.data.get('approved', True)
    if isinstance(approved, str) and approved.lower() in ('true', 'false'):
        approved = approved.lower() == 'true'
    if not isinstance(approved, bool):
        return Response({'error': 'approved must be true or false'}, status=status.HTTP_400_BAD_REQUEST)
    try:
        workflow.internal_approve(version, request.user, approved, request.data.get('notes', ''))
    except WorkflowError as e:
        return workflow_error_response(e)

    create_audit_log(request, 'internal_approval', 'ClientApprovalVersion', version.id,
                     object_name=str(stage.room), object_reference=version.version,
                     changes={'approved': approved, 'status': version.status})
    return _version_response(version)


def _selected_asset_ids(request):
    ids = request.data.get('selected_asset_ids')
    if ids is not None and not isinstance(ids, list):
        raise WorkflowError('selected_asset_ids must be a list of asset ids')
    return ids


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanEditStudioData])
def send_to_client(request, pk):
    """E-mail the current version to the client"""
    stage = _approval_stage(pk)
    version, error = _current_version_or_404(stage)
    if error:
        return error

    try:
        workflow.send_to_client(version, request.user, _selected_asset_ids(request))
    except EmailDeliveryError as e:
        return Response({'error': e.message}, status=status.HTTP_502_BAD_GATEWAY)
    except WorkflowError as e:
        return workflow_error_response(e)

    create_audit_log(request, 'client_send', 'ClientApprovalVersion', version.id,
                     object_name=str(stage.room), object_reference=version.version,
                     changes={'method': 'email'})
    return _version_response(version)


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanEditStudioData])
def mark_as_sent(request, pk):
    """Record the current version as sent without e-mailing it"""
    stage = _approval_stage(pk)
    version, error = _current_version_or_404(stage)
    if error:
        return error

    try:
        workflow.mark_as_sent(version, request.user, _selected_asset_ids(request))
    except WorkflowError as e:
        return workflow_error_response(e)

    create_audit_log(request, 'client_send', 'ClientApprovalVersion', version.id,
                     object_name=str(stage.room), object_reference=version.version,
                     changes={'method': 'manual'})
    return _version_response(version)


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanEditStudioData])
def mark_followup(request, pk):
    """Record a follow-up with the client"""
    stage = _approval_stage(pk)
    version, error = _current_version_or_404(stage)
    if error:
        return error

    try:
        workflow.mark_follow_up(version, request.user, request.data.get('notes', ''))
    except WorkflowError as e:
        return workflow_error_response(e)
    return _version_response(version)


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanEditStudioData])
def client_decision(request, pk):
    """Record the client's decision ({decision: APPROVED|REVISION_REQUESTED, notes})"""
    decision = request.data.get('decision')
    if decision not in workflow.DECISIONS:
        return Response({'error': 'Valid decision is required'}, status=status.HTTP_400_BAD_REQUEST)

    stage = _approval_stage(pk)
    version, error = _current_version_or_404(stage)
    if error:
        return error

    try:
        workflow.record_client_decision(version, request.user, decision, request.data.get('notes', ''))
    except WorkflowError as e:
        logger.warning(f"Client decision on version {version.id} rejected: {e.message}")
        return workflow_error_response(e)

    create_audit_log(request, 'client_decision', 'ClientApprovalVersion', version.id,
                     object_name=str(stage.room), object_reference=version.version,
                     changes={'decision': decision})
    return _version_response(version)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def version_activity(request, pk):
    version = get_object_or_404(ClientApprovalVersion, pk=pk)
    activities = version.activities.select_related('user')
    return Response(ClientApprovalActivitySerializer(activities, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def version_email_logs(request, pk):
    version = get_object_or_404(ClientApprovalVersion, pk=pk)
    return Response(ClientApprovalEmailLogSerializer(version.email_logs.all(), many=True).data)


@require_GET
def track_email_open(request, tracking_id):
    """Tracking pixel embedded in client approval e-mails"""
    log = ClientApprovalEmailLog.objects.select_related('version').filter(tracking_id=tracking_id).first()
    if log is not None:
        try:
            workflow.record_email_open(log)
        except Exception as e:
            logger.error(f"Failed to record e-mail open for {tracking_id}: {str(e)}", exc_info=True)
    response = HttpResponse(TRACKING_PIXEL, content_type='image/gif')
    response['Cache-Control'] = 'no-store, no-cache, must-revalidate'
    return response
