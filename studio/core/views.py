import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer
from rest_framework_simplejwt.exceptions import AuthenticationFailed, InvalidToken, TokenError
from django.contrib.auth import get_user_model
from django.core.exceptions import ObjectDoesNotExist
from django.shortcuts import get_object_or_404
from django.db.models import Q
from .models import Setting, AuditLog
from .serializers import (
    UserSerializer, UserCreateSerializer,
    SettingSerializer, AuditLogSerializer
)
from .utils import IsStudioAdmin, create_audit_log

logger = logging.getLogger('studio.core')
User = get_user_model()


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    def validate(self, attrs):
        data = super().validate(attrs)
        if not self.user.is_active:
            raise AuthenticationFailed('User account is disabled.')
        data['user'] = UserSerializer(self.user).data
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['username'] = user.username
        token['role'] = user.role
        return token


class CustomTokenObtainPairView(TokenObtainPairView):
    serializer_class = CustomTokenObtainPairSerializer


class CustomTokenRefreshSerializer(TokenRefreshSerializer):
    """Token refresh that reports tokens of deleted users as invalid"""
    def validate(self, attrs):
        try:
            return super().validate(attrs)
        except (InvalidToken, TokenError):
            raise InvalidToken('Token is invalid or expired.')
        except (ObjectDoesNotExist, User.DoesNotExist):
            raise InvalidToken('Token is invalid. User no longer exists.')


class CustomTokenRefreshView(TokenRefreshView):
    serializer_class = CustomTokenRefreshSerializer


# Team members
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsStudioAdmin])
def user_list_create(request):
    """List team members (?role=, ?active=) or add one"""
    if request.method == 'GET':
        users = User.objects.all().order_by('username')
        role = request.query_params.get('role')
        if role:
            users = users.filter(role=role)
        active = request.query_params.get('active')
        if active is not None:
            users = users.filter(is_active=active.lower() in ('1', 'true', 'yes'))
        serializer = UserSerializer(users, many=True)
        return Response(serializer.data)
    else:
        serializer = UserCreateSerializer(data=request.data)
        if serializer.is_valid():
            user = serializer.save()
            create_audit_log(request, 'create', 'User', user.id, object_name=user.display_name,
                             changes={'role': user.role})
            logger.info(f"Team member {user.username} ({user.role}) added by {request.user.username}")
            return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsStudioAdmin])
def user_detail(request, pk):
    """Retrieve, update or delete a user"""
    user = get_object_or_404(User, pk=pk)

    if request.method == 'GET':
        serializer = UserSerializer(user)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        old_role = user.role
        serializer = UserSerializer(user, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            user = serializer.save()
            if user.role != old_role:
                create_audit_log(request, 'update', 'User', user.id, object_name=user.display_name,
                                 changes={'role': {'from': old_role, 'to': user.role}})
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if user.pk == request.user.pk:
            return Response({'error': 'You cannot delete your own account'}, status=status.HTTP_400_BAD_REQUEST)
        create_audit_log(request, 'delete', 'User', user.id, object_name=user.display_name)
        logger.info(f"Team member {user.username} removed by {request.user.username}")
        user.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def user_me(request):
    """Current user with role-derived capabilities"""
    user = request.user
    if request.method == 'PATCH':
        # Users may only change their own profile fields
        allowed = {k: v for k, v in request.data.items()
                   if k in ('first_name', 'last_name', 'email', 'phone', 'email_notifications_enabled')}
        serializer = UserSerializer(user, data=allowed, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        serializer.save()

    user_data = UserSerializer(user).data
    user_data['is_admin'] = user.is_studio_admin
    user_data['can_approve_internally'] = user.is_studio_admin
    user_data['can_manage_portal'] = user.is_studio_admin or user.role == 'DESIGNER'
    return Response(user_data)


# Studio settings (CLIENT_APPROVAL_FOLLOW_UP_DAYS and friends)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsStudioAdmin])
def setting_list_create(request):
    """List or add runtime settings"""
    if request.method == 'GET':
        settings = Setting.objects.all().order_by('key')
        serializer = SettingSerializer(settings, many=True)
        return Response(serializer.data)
    else:
        serializer = SettingSerializer(data=request.data)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsStudioAdmin])
def setting_detail(request, pk):
    """Read, change or remove a runtime setting"""
    setting = get_object_or_404(Setting, pk=pk)

    if request.method == 'GET':
        serializer = SettingSerializer(setting)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = SettingSerializer(setting, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        setting.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Audit trail (read-only)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit_log_list(request):
    """
    Latest 500 audit rows, newest first.

    Admins see everyone and may filter by ?user=; others only see their own.
    Filters: action, model, search (object name or reference), date_from, date_to.
    """
    queryset = AuditLog.objects.select_related('user')

    if not request.user.is_studio_admin:
        queryset = queryset.filter(user=request.user)
    elif request.query_params.get('user', '').isdigit():
        queryset = queryset.filter(user_id=int(request.query_params['user']))

    action_filter = request.query_params.get('action', None)
    if action_filter:
        queryset = queryset.filter(action=action_filter)

    model_filter = request.query_params.get('model', None)
    if model_filter:
        queryset = queryset.filter(model_name=model_filter)

    search = request.query_params.get('search', '').strip()
    if search:
        queryset = queryset.filter(Q(object_name__icontains=search) | Q(object_reference__icontains=search))

    date_from = request.query_params.get('date_from', None)
    date_to = request.query_params.get('date_to', None)
    if date_from:
        queryset = queryset.filter(created_at__date__gte=date_from)
    if date_to:
        queryset = queryset.filter(created_at__date__lte=date_to)

    queryset = queryset.order_by('-created_at')
    serializer = AuditLogSerializer(queryset[:500], many=True)
    return Response(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit_log_detail(request, pk):
    """One audit row; non-admins may only read their own"""
    audit_log = get_object_or_404(AuditLog, pk=pk)

    if not request.user.is_studio_admin and audit_log.user != request.user:
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)

    serializer = AuditLogSerializer(audit_log)
    return Response(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def global_search(request):
    """Search projects, rooms, clients, drawings, transmittals and tasks"""
    query = request.query_params.get('q', '').strip()

    if not query:
        return Response({
            'projects': [],
            'rooms': [],
            'clients': [],
            'drawings': [],
            'transmittals': [],
            'tasks': [],
        })

    from studio.projects.models import Project, Room, Client
    from studio.projects.serializers import ProjectListSerializer, RoomSummarySerializer, ClientSerializer
    from studio.drawings.filters import DrawingFilter
    from studio.drawings.models import ProjectDrawing, Transmittal
    from studio.drawings.serializers import ProjectDrawingSerializer, TransmittalListSerializer
    from studio.tasks.filters import TaskFilter
    from studio.tasks.models import Task
    from studio.tasks.serializers import TaskSerializer

    results = {}

    projects = Project.objects.select_related('client').filter(
        Q(name__icontains=query) |
        Q(description__icontains=query) |
        Q(client__name__icontains=query)
    )[:20]
    results['projects'] = ProjectListSerializer(projects, many=True).data

    rooms = Room.objects.select_related('project').filter(
        Q(name__icontains=query) |
        Q(type__icontains=query)
    )[:20]
    results['rooms'] = RoomSummarySerializer(rooms, many=True).data

    clients = Client.objects.filter(
        Q(name__icontains=query) |
        Q(email__icontains=query) |
        Q(company__icontains=query)
    )[:20]
    results['clients'] = ClientSerializer(clients, many=True).data

    drawings_filter = DrawingFilter({'search': query}, queryset=ProjectDrawing.objects.select_related('project'))
    results['drawings'] = ProjectDrawingSerializer(drawings_filter.qs[:20], many=True).data

    transmittals = Transmittal.objects.select_related('project').filter(
        Q(transmittal_number__icontains=query) |
        Q(subject__icontains=query) |
        Q(recipient_name__icontains=query) |
        Q(recipient_email__icontains=query)
    )[:20]
    results['transmittals'] = TransmittalListSerializer(transmittals, many=True).data

    tasks_filter = TaskFilter({'search': query}, queryset=Task.objects.select_related('project', 'room', 'assignee'),
                              request=request)
    results['tasks'] = TaskSerializer(tasks_filter.qs[:20], many=True).data

    return Response(results)
