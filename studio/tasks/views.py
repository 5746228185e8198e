import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from studio.core.utils import create_audit_log, paginate, CanEditStudioData
from .board import build_board, GROUP_BY_OPTIONS
from .filters import TaskFilter
from .models import Task
from .serializers import TaskSerializer

logger = logging.getLogger('studio.tasks')


def task_queryset():
    return Task.objects.select_related('project', 'room__project', 'stage', 'assignee', 'created_by')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, CanEditStudioData])
def task_list_create(request):
    """List tasks (paginated, filterable) or create a task"""
    if request.method == 'GET':
        filterset = TaskFilter(request.query_params, queryset=task_queryset(), request=request)
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
        return Response(paginate(request, filterset.qs, TaskSerializer, default_limit=50))

    serializer = TaskSerializer(data=request.data)
    if serializer.is_valid():
        task = serializer.save(created_by=request.user)
        create_audit_log(request, 'create', 'Task', task.id, object_name=task.title)
        logger.info(f"Task {task.id} created by {request.user.username}")
        return Response(TaskSerializer(task_queryset().get(pk=task.pk)).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, CanEditStudioData])
def task_detail(request, pk):
    task = get_object_or_404(task_queryset(), pk=pk)

    if request.method == 'GET':
        return Response(TaskSerializer(task).data)
    elif request.method in ['PUT', 'PATCH']:
        old_status = task.status
        serializer = TaskSerializer(task, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            task = serializer.save()
            changes = {'fields': list(request.data.keys())}
            if task.status != old_status:
                changes['status'] = {'from': old_status, 'to': task.status}
            create_audit_log(request, 'update', 'Task', task.id, object_name=task.title, changes=changes)
            return Response(TaskSerializer(task_queryset().get(pk=task.pk)).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(request, 'delete', 'Task', task.id, object_name=task.title)
        task.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated, CanEditStudioData])
def task_toggle(request, pk):
    """Mark a task done, or reopen it when it already is"""
    task = get_object_or_404(task_queryset(), pk=pk)
    old_status = task.status
    task.status = 'TODO' if task.status == 'DONE' else 'DONE'
    task.save()
    create_audit_log(request, 'update', 'Task', task.id, object_name=task.title,
                     changes={'status': {'from': old_status, 'to': task.status}})
    return Response(TaskSerializer(task).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def task_board(request):
    """Tasks grouped by project, status or priority (?group_by=, same filters as the list)"""
    group_by = request.query_params.get('group_by', 'project')
    if group_by not in GROUP_BY_OPTIONS:
        return Response({'error': f"group_by must be one of: {', '.join(GROUP_BY_OPTIONS)}"},
                        status=status.HTTP_400_BAD_REQUEST)

    filterset = TaskFilter(request.query_params, queryset=task_queryset(), request=request)
    if not filterset.is_valid():
        return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)

    tasks = list(filterset.qs)
    groups = build_board(tasks, group_by, lambda items: TaskSerializer(items, many=True).data)
    return Response({
        'group_by': group_by,
        'total': len(tasks),
        'open': sum(1 for t in tasks if t.is_open),
        'groups': groups,
    })
