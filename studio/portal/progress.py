"""Read-only progress payload shown to clients through an access token"""
from studio.approvals.models import ClientApprovalVersion
from studio.ffe.utils import ffe_stats
from studio.projects.models import Room
from studio.projects.workflow import PHASE_NAMES, phase_sort_key, room_progress


def client_phase_status(status):
    """Collapse internal stage statuses into what a client sees"""
    if status == 'COMPLETED':
        return 'COMPLETED'
    if status == 'NOT_STARTED':
        return 'PENDING'
    return 'IN_PROGRESS'


def _approved_renderings(room):
    versions = ClientApprovalVersion.objects.filter(
        stage__room=room, status='CLIENT_APPROVED'
    ).select_related('rendering_version').prefetch_related('assets__asset').order_by('-client_decided_at', '-id')
    approved = []
    for version in versions:
        approved.append({
            'id': version.id,
            'version': version.version,
            'label': version.rendering_version.label if version.rendering_version else version.version,
            'approved_at': version.client_decided_at,
            'assets': [
                {
                    'id': link.asset.id,
                    'title': link.asset.title,
                    'asset_type': link.asset.asset_type,
                    'description': link.asset.description,
                }
                for link in sorted(version.assets.all(), key=lambda a: (a.display_order, a.id))
                if link.include_in_email
            ],
        })
    return approved


def room_payload(room):
    stages = sorted(room.stages.all(), key=phase_sort_key)
    items = list(room.ffe_items.all())
    return {
        'id': room.id,
        'name': room.display_name,
        'type': room.type,
        'status': room.status,
        'progress': room_progress(stages),
        'phases': [
            {
                'type': stage.type,
                'name': PHASE_NAMES.get(stage.type, stage.type),
                'status': client_phase_status(stage.status),
                'completed_at': stage.completed_at if stage.status == 'COMPLETED' else None,
            }
            for stage in stages if stage.status != 'NOT_APPLICABLE'
        ],
        'ffe_stats': ffe_stats(items) if items else None,
        'approved_renderings': _approved_renderings(room),
    }


def project_progress(project):
    rooms = Room.objects.filter(project=project).prefetch_related('stages', 'ffe_items').order_by('order', 'id')
    room_data = [room_payload(room) for room in rooms]
    overall = round(sum(r['progress'] for r in room_data) / len(room_data)) if room_data else 0
    return {
        'id': project.id,
        'name': project.name,
        'description': project.description,
        'type': project.type,
        'status': project.status,
        'client': {'name': project.client.name} if project.client_id else None,
        'rooms': room_data,
        'overall_progress': overall,
    }
