import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, authentication_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, AllowAny
from django.db.models import F
from django.http import HttpResponseRedirect
from django.shortcuts import get_object_or_404
from django.utils import timezone
from studio.approvals.models import ClientApprovalAsset
from studio.core.utils import create_audit_log, get_client_ip, CanEditStudioData
from studio.projects.models import Project
from .cache import get_cached_progress, cache_progress
from .models import ClientAccessToken, ClientAccessLog
from .progress import project_progress
from .serializers import ClientAccessTokenSerializer, ClientAccessLogSerializer

logger = logging.getLogger('studio.portal')


# Staff views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, CanEditStudioData])
def project_client_access(request, pk):
    """List or create client access links of a project"""
    project = get_object_or_404(Project, pk=pk)

    if request.method == 'GET':
        tokens = ClientAccessToken.objects.filter(project=project).select_related('created_by')
        return Response(ClientAccessTokenSerializer(tokens, many=True, context={'request': request}).data)

    serializer = ClientAccessTokenSerializer(data=request.data, context={'request': request})
    if serializer.is_valid():
        token = serializer.save(project=project, created_by=request.user)
        create_audit_log(request, 'portal_token_create', 'ClientAccessToken', token.id,
                         object_name=project.name, object_reference=token.name or None)
        logger.info(f"Client access link {token.id} created for project {project.id}")
        return Response(ClientAccessTokenSerializer(token, context={'request': request}).data,
                        status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, CanEditStudioData])
def client_access_detail(request, pk):
    token = get_object_or_404(ClientAccessToken.objects.select_related('project', 'created_by'), pk=pk)

    if request.method == 'GET':
        return Response(ClientAccessTokenSerializer(token, context={'request': request}).data)
    elif request.method == 'PATCH':
        was_active = token.active
        serializer = ClientAccessTokenSerializer(token, data=request.data, partial=True, context={'request': request})
        if serializer.is_valid():
            token = serializer.save()
            if was_active and not token.active:
                create_audit_log(request, 'portal_token_revoke', 'ClientAccessToken', token.id,
                                 object_name=token.project.name, object_reference=token.name or None)
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(request, 'portal_token_revoke', 'ClientAccessToken', token.id,
                         object_name=token.project.name, object_reference=token.name or None,
                         changes={'deleted': True})
        token.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def client_access_logs(request, pk):
    token = get_object_or_404(ClientAccessToken, pk=pk)
    return Response(ClientAccessLogSerializer(token.access_logs.all()[:200], many=True).data)


# Public views
def _resolve_token(token_value):
    """Return (token, None) or (None, error response) for a public token"""
    token = ClientAccessToken.objects.select_related('project__client').filter(token=token_value).first()
    if token is None or not token.active:
        return None, Response({'error': 'Link not found'}, status=status.HTTP_404_NOT_FOUND)
    if token.is_expired:
        return None, Response({'error': 'This link has expired'}, status=status.HTTP_403_FORBIDDEN)
    return token, None


def _record_access(request, token, action, metadata=None):
    ip_address = get_client_ip(request)
    ClientAccessToken.objects.filter(pk=token.pk).update(
        access_count=F('access_count') + 1,
        last_accessed_at=timezone.now(),
        last_accessed_ip=ip_address,
    )
    ClientAccessLog.objects.create(
        token=token,
        ip_address=ip_address,
        user_agent=request.META.get('HTTP_USER_AGENT', ''),
        action=action,
        metadata=metadata or {},
    )


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def client_progress(request, token):
    """Read-only project progress for the holder of a client link"""
    access_token, error = _resolve_token(token)
    if error:
        return error

    _record_access(request, access_token, 'VIEW_PROGRESS')

    payload = get_cached_progress(access_token.token)
    if payload is None:
        payload = project_progress(access_token.project)
        cache_progress(access_token.token, payload)
    return Response(payload)


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def client_progress_asset(request, token, asset_id):
    """Redirect to an asset of an approved rendering of the link's project"""
    access_token, error = _resolve_token(token)
    if error:
        return error

    link = ClientApprovalAsset.objects.select_related('asset').filter(
        asset_id=asset_id,
        include_in_email=True,
        version__status='CLIENT_APPROVED',
        version__stage__room__project=access_token.project,
    ).first()
    if link is None:
        return Response({'error': 'Asset not found'}, status=status.HTTP_404_NOT_FOUND)

    _record_access(request, access_token, 'VIEW_ASSET', {'asset_id': link.asset.id})
    return HttpResponseRedirect(link.asset.url)
