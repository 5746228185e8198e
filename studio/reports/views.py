import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.contrib.auth import get_user_model
from django.db.models import Count, Q
from django.shortcuts import get_object_or_404
from django.utils import timezone
from datetime import timedelta

from studio.approvals.models import ClientApprovalVersion
from studio.approvals.workflow import AWAITING_CLIENT_STATUSES
from studio.drawings.models import Transmittal
from studio.ffe.utils import ffe_stats
from studio.projects.models import Project, Room, Stage, STAGE_STATUS_CHOICES
from studio.projects.workflow import phase_sort_key, room_progress
from studio.tasks.models import Task

logger = logging.getLogger('studio.reports')
User = get_user_model()


def _open_tasks():
    return Task.objects.exclude(status__in=Task.CLOSED_STATUSES)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def project_progress(request, pk):
    """Per room progress, stage status counts, FFE stats and open tasks of a project"""
    project = get_object_or_404(Project.objects.select_related('client'), pk=pk)
    rooms = Room.objects.filter(project=project).prefetch_related('stages__assigned_to', 'ffe_items').order_by('order', 'id')

    open_tasks_by_room = dict(
        _open_tasks().filter(project=project, room__isnull=False).values_list('room').order_by().annotate(n=Count('id'))
    )

    stage_counts = {code: 0 for code, _ in STAGE_STATUS_CHOICES}
    room_rows = []
    for room in rooms:
        stages = sorted(room.stages.all(), key=phase_sort_key)
        for stage in stages:
            stage_counts[stage.status] = stage_counts.get(stage.status, 0) + 1
        room_rows.append({
            'id': room.id,
            'name': room.display_name,
            'status': room.status,
            'current_stage': room.current_stage,
            'progress': room_progress(stages),
            'stages': [
                {
                    'type': stage.type,
                    'status': stage.status,
                    'assigned_to': stage.assigned_to.display_name if stage.assigned_to else None,
                    'due_date': stage.due_date,
                    'completed_at': stage.completed_at,
                }
                for stage in stages
            ],
            'ffe': ffe_stats(room.ffe_items.all()),
            'open_tasks': open_tasks_by_room.get(room.id, 0),
        })

    project_tasks = Task.objects.filter(project=project)
    today = timezone.localdate()
    return Response({
        'project': {
            'id': project.id,
            'name': project.name,
            'status': project.status,
            'client': project.client.name if project.client_id else None,
            'due_date': project.due_date,
        },
        'overall_progress': round(sum(r['progress'] for r in room_rows) / len(room_rows)) if room_rows else 0,
        'stage_status_counts': stage_counts,
        'rooms': room_rows,
        'tasks': {
            'total': project_tasks.count(),
            'open': project_tasks.exclude(status__in=Task.CLOSED_STATUSES).count(),
            'overdue': project_tasks.exclude(status__in=Task.CLOSED_STATUSES).filter(due_date__lt=today).count(),
        },
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def workload(request):
    """
    Assigned stages and open tasks per user, grouped by project.

    ?user=<id> limits the report to one user.
    """
    users = User.objects.filter(is_active=True).order_by('first_name', 'last_name', 'username')
    user_id = request.query_params.get('user')
    if user_id:
        try:
            users = users.filter(pk=int(user_id))
        except (TypeError, ValueError):
            return Response({'error': 'Invalid user id'}, status=status.HTTP_400_BAD_REQUEST)

    today = timezone.localdate()
    stages = Stage.objects.filter(
        assigned_to__in=users, status__in=['NOT_STARTED', 'IN_PROGRESS']
    ).select_related('room__project')
    tasks = _open_tasks().filter(assignee__in=users).select_related('project')

    rows = {}
    for user in users:
        rows[user.id] = {
            'user': {'id': user.id, 'username': user.username, 'display_name': user.display_name, 'role': user.role},
            'stages_in_progress': 0,
            'stages_not_started': 0,
            'open_tasks': 0,
            'overdue_tasks': 0,
            'projects': {},
        }

    def project_entry(row, project):
        key = project.id if project else None
        if key not in row['projects']:
            row['projects'][key] = {
                'project_id': key,
                'project_name': project.name if project else 'No project',
                'stages_in_progress': 0,
                'stages_not_started': 0,
                'open_tasks': 0,
                'overdue_tasks': 0,
            }
        return row['projects'][key]

    for stage in stages:
        row = rows[stage.assigned_to_id]
        entry = project_entry(row, stage.room.project)
        field = 'stages_in_progress' if stage.status == 'IN_PROGRESS' else 'stages_not_started'
        row[field] += 1
        entry[field] += 1

    for task in tasks:
        row = rows[task.assignee_id]
        entry = project_entry(row, task.project)
        row['open_tasks'] += 1
        entry['open_tasks'] += 1
        if task.due_date and task.due_date < today:
            row['overdue_tasks'] += 1
            entry['overdue_tasks'] += 1

    results = []
    for row in rows.values():
        row['projects'] = sorted(row['projects'].values(), key=lambda p: (p['project_id'] is None, p['project_name'].lower()))
        results.append(row)
    return Response({'generated_at': timezone.now(), 'users': results})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard_kpis(request):
    """Headline numbers for the studio dashboard"""
    today = timezone.localdate()
    open_tasks = _open_tasks()
    room_counts = dict(Room.objects.values_list('status').order_by().annotate(n=Count('id')))

    return Response({
        'projects': {
            'active': Project.objects.filter(status__in=['IN_PROGRESS', 'URGENT']).count(),
            'total': Project.objects.count(),
        },
        'rooms_by_status': room_counts,
        'approvals': {
            'awaiting_internal': ClientApprovalVersion.objects.filter(status='PENDING_INTERNAL_APPROVAL').count(),
            'awaiting_client': ClientApprovalVersion.objects.filter(status__in=AWAITING_CLIENT_STATUSES).count(),
            'follow_up_required': ClientApprovalVersion.objects.filter(status='FOLLOW_UP_REQUIRED').count(),
        },
        'tasks': {
            'open': open_tasks.count(),
            'overdue': open_tasks.filter(due_date__lt=today).count(),
            'mine': open_tasks.filter(assignee=request.user).count(),
        },
        'transmittals_sent_last_30_days': Transmittal.objects.filter(
            status__in=['SENT', 'ACKNOWLEDGED'], sent_at__gte=timezone.now() - timedelta(days=30)
        ).count(),
        'stages_overdue': Stage.objects.filter(
            ~Q(status__in=['COMPLETED', 'NOT_APPLICABLE']), due_date__lt=today
        ).count(),
    })
