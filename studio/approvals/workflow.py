"""
Rendering versions and the client approval workflow.

An approval version moves DRAFT / PENDING_INTERNAL_APPROVAL -> READY_FOR_CLIENT
-> SENT_TO_CLIENT -> CLIENT_REVIEWING / FOLLOW_UP_REQUIRED -> CLIENT_APPROVED or
REVISION_REQUESTED. Every transition is checked here, whatever the caller.
"""
import logging
from datetime import timedelta

from django.db import transaction
from django.utils import timezone

from studio.projects import workflow as stage_workflow
from studio.projects.notifications import notify_user
from studio.projects.workflow import WorkflowError, EmailDeliveryError, log_stage_activity
from .models import (
    RenderingVersion, RenderingNote, ClientApprovalVersion, ClientApprovalAsset,
    ClientApprovalActivity, ClientDecision
)
from .emails import send_client_approval_email

logger = logging.getLogger('studio.approvals')

OPEN_STATUSES = [
    'DRAFT', 'PENDING_INTERNAL_APPROVAL', 'READY_FOR_CLIENT', 'SENT_TO_CLIENT', 'CLIENT_REVIEWING', 'FOLLOW_UP_REQUIRED',
]

AWAITING_CLIENT_STATUSES = ['SENT_TO_CLIENT', 'CLIENT_REVIEWING', 'FOLLOW_UP_REQUIRED']

VERSION_TRANSITIONS = {
    'internal_approve': ['DRAFT', 'PENDING_INTERNAL_APPROVAL'],
    'send_to_client': ['READY_FOR_CLIENT'],
    'mark_as_sent': ['READY_FOR_CLIENT'],
    'flag_follow_up': ['SENT_TO_CLIENT', 'CLIENT_REVIEWING'],
    'mark_follow_up': AWAITING_CLIENT_STATUSES,
    'client_decision': AWAITING_CLIENT_STATUSES,
}

DECISIONS = ['APPROVED', 'REVISION_REQUESTED']


class TransitionError(WorkflowError):
    """An approval version is not in a state that allows the action"""


def check_transition(version, action):
    allowed = VERSION_TRANSITIONS[action]
    if version.status not in allowed:
        raise TransitionError(
            f"Cannot {action.replace('_', ' ')} while the version is {version.get_status_display().lower()}",
            details=[f"Allowed from: {', '.join(allowed)}"],
        )


def record_activity(version, activity_type, message, user=None, metadata=None):
    ClientApprovalActivity.objects.create(
        version=version,
        type=activity_type,
        message=message,
        user=user if user and user.is_authenticated else None,
        metadata=metadata or {},
    )
    log_stage_activity(version.stage, 'CLIENT_APPROVAL', message, user)


def current_version(stage):
    return stage.client_approval_versions.order_by('-created_at', '-id').first()


def _room_stage(room, stage_type):
    return room.stages.filter(type=stage_type).first()


# Renderings

def next_rendering_label(room):
    """V1, V2, ... numbered per room"""
    highest = 0
    for label in RenderingVersion.objects.filter(room=room).values_list('version', flat=True):
        if label.startswith('V') and label[1:].isdigit():
            highest = max(highest, int(label[1:]))
    return f"V{highest + 1}"


def create_rendering_version(stage, user, custom_name=''):
    if stage.type != 'THREE_D':
        raise WorkflowError('Rendering versions belong to the 3D rendering stage')
    if stage.status == 'NOT_APPLICABLE':
        raise WorkflowError('The 3D rendering stage is not applicable for this room')

    with transaction.atomic():
        rendering = RenderingVersion.objects.create(
            room=stage.room,
            stage=stage,
            version=next_rendering_label(stage.room),
            custom_name=custom_name or '',
            created_by=user,
        )
        if stage.status == 'NOT_STARTED':
            stage_workflow.start_stage(stage, user)
        log_stage_activity(stage, 'RENDERING', f"Rendering {rendering.version} created", user)
    return rendering


def complete_rendering(rendering, user):
    if rendering.status != 'IN_PROGRESS':
        raise WorkflowError(f"Rendering {rendering.version} is not in progress")
    if not rendering.assets.exists():
        raise WorkflowError('Add at least one asset before completing the rendering')
    rendering.status = 'COMPLETED'
    rendering.completed_at = timezone.now()
    rendering.save()
    log_stage_activity(rendering.stage, 'RENDERING', f"Rendering {rendering.version} completed", user)
    return rendering


def push_to_client_approval(rendering, user):
    """Create an approval version from a completed rendering"""
    if rendering.status != 'COMPLETED':
        raise WorkflowError('Only completed renderings can be pushed to client approval')

    room = rendering.room
    approval_stage = _room_stage(room, 'CLIENT_APPROVAL')
    if approval_stage is None or approval_stage.status == 'NOT_APPLICABLE':
        raise WorkflowError('This room has no active client approval stage')
    if approval_stage.client_approval_versions.filter(status__in=OPEN_STATUSES).exists():
        raise WorkflowError('Another version is already going through client approval')

    with transaction.atomic():
        now = timezone.now()
        version = ClientApprovalVersion.objects.create(
            stage=approval_stage,
            rendering_version=rendering,
            version=rendering.version,
            status='PENDING_INTERNAL_APPROVAL',
            created_by=user,
        )
        ClientApprovalAsset.objects.bulk_create([
            ClientApprovalAsset(version=version, asset=asset, include_in_email=True, display_order=index)
            for index, asset in enumerate(rendering.assets.all())
        ])

        rendering.status = 'PUSHED_TO_CLIENT'
        rendering.pushed_to_client_at = now
        rendering.save()

        three_d = rendering.stage
        if three_d.status in stage_workflow.STAGE_TRANSITIONS['complete'][0]:
            stage_workflow.complete_stage(three_d, user)

        approval_stage.refresh_from_db()
        if approval_stage.status in ('NOT_STARTED', 'REVISION_REQUESTED', 'NEEDS_ATTENTION'):
            approval_stage.status = 'IN_PROGRESS'
            approval_stage.started_at = approval_stage.started_at or now
            approval_stage.save()
            stage_workflow.recompute_room(room)

        record_activity(version, 'PUSHED', f"Rendering {rendering.version} pushed to client approval", user,
                        {'rendering_version_id': rendering.id})

    logger.info(f"Rendering {rendering.id} pushed to client approval as version {version.id}")
    return version


# Client approval

def internal_approve(version, user, approved, notes=''):
    check_transition(version, 'internal_approve')
    if approved:
        version.status = 'READY_FOR_CLIENT'
        version.approved_internally = True
        version.internal_approved_at = timezone.now()
        version.internal_approved_by = user
        message = f"{version.version} approved internally by {user.display_name}"
        activity_type = 'INTERNAL_APPROVED'
    else:
        version.status = 'DRAFT'
        version.approved_internally = False
        version.internal_approved_at = None
        version.internal_approved_by = None
        message = f"{version.version} sent back to draft by {user.display_name}"
        activity_type = 'INTERNAL_REJECTED'
    if notes:
        version.notes = notes
    version.save()
    record_activity(version, activity_type, message, user, {'notes': notes} if notes else None)
    return version


def select_assets(version, selected_asset_ids):
    """Keep only the selected rendering assets in the client e-mail"""
    assets = list(version.assets.all())
    if selected_asset_ids is not None:
        try:
            selected = set(int(pk) for pk in selected_asset_ids)
        except (TypeError, ValueError):
            raise WorkflowError('selected_asset_ids must be a list of asset ids')
        unknown = selected - set(a.asset_id for a in assets)
        if unknown:
            raise WorkflowError('Unknown assets selected', details=[str(pk) for pk in sorted(unknown)])
        for item in assets:
            include = item.asset_id in selected
            if item.include_in_email != include:
                item.include_in_email = include
                item.save(update_fields=['include_in_email'])
    if not any(item.include_in_email for item in assets):
        raise WorkflowError('Select at least one asset to share with the client')


def _mark_sent(version, user):
    now = timezone.now()
    version.status = 'SENT_TO_CLIENT'
    version.sent_to_client_at = now
    version.sent_by = user
    version.save()

    stage = version.stage
    if stage.status in ('NOT_STARTED', 'IN_PROGRESS', 'NEEDS_ATTENTION', 'REVISION_REQUESTED'):
        stage.status = 'PENDING_APPROVAL'
        stage.started_at = stage.started_at or now
        stage.save()
        stage_workflow.recompute_room(stage.room)


def send_to_client(version, user, selected_asset_ids=None):
    """E-mail the selected assets to the project client"""
    check_transition(version, 'send_to_client')
    client = version.stage.room.project.client
    if not client.email:
        raise WorkflowError('The project client has no e-mail address')

    with transaction.atomic():
        select_assets(version, selected_asset_ids)
        try:
            log = send_client_approval_email(version, client.email)
        except Exception as e:
            raise EmailDeliveryError(f'Failed to send e-mail: {str(e)}')
        _mark_sent(version, user)
        record_activity(version, 'SENT_TO_CLIENT', f"{version.version} e-mailed to {client.email}", user,
                        {'email_log_id': log.id, 'to': client.email})
    return version


def mark_as_sent(version, user, selected_asset_ids=None):
    """Record that the client received the renderings outside the app"""
    check_transition(version, 'mark_as_sent')
    with transaction.atomic():
        select_assets(version, selected_asset_ids)
        _mark_sent(version, user)
        record_activity(version, 'MARKED_AS_SENT', f"{version.version} marked as sent by {user.display_name}", user)
    return version


def record_email_open(log):
    """Stamp the first open of a client e-mail"""
    now = timezone.now()
    if log.opened_at is None:
        log.opened_at = now
        log.save(update_fields=['opened_at'])

    version = log.version
    changed = []
    if version.email_opened_at is None:
        version.email_opened_at = now
        changed.append('email_opened_at')
    if version.status == 'SENT_TO_CLIENT':
        version.status = 'CLIENT_REVIEWING'
        changed.append('status')
    if changed:
        version.save(update_fields=changed + ['updated_at'])
        if 'status' in changed:
            record_activity(version, 'EMAIL_OPENED', f"Client opened the e-mail for {version.version}")
    return version


def flag_follow_ups(days, now=None):
    """Move versions waiting on the client longer than `days` to FOLLOW_UP_REQUIRED"""
    now = now or timezone.now()
    cutoff = now - timedelta(days=days)
    stale = ClientApprovalVersion.objects.filter(
        status__in=VERSION_TRANSITIONS['flag_follow_up'],
        sent_to_client_at__lte=cutoff,
    ).select_related('stage__room__project', 'stage__assigned_to')

    flagged = 0
    for version in stale:
        version.status = 'FOLLOW_UP_REQUIRED'
        version.save(update_fields=['status', 'updated_at'])
        record_activity(version, 'FOLLOW_UP_FLAGGED',
                        f"No client decision on {version.version} after {days} days")
        if version.stage.assigned_to:
            notify_user(
                version.stage.assigned_to,
                'PROJECT_UPDATE',
                'Client follow-up required',
                f"{version.stage.room} {version.version} was sent {days}+ days ago without a decision.",
                stage=version.stage,
            )
        flagged += 1
    if flagged:
        logger.info(f"Flagged {flagged} client approval versions for follow-up")
    return flagged


def mark_follow_up(version, user, notes=''):
    check_transition(version, 'mark_follow_up')
    version.status = 'CLIENT_REVIEWING'
    version.follow_up_completed_at = timezone.now()
    version.follow_up_notes = notes or ''
    version.save()
    record_activity(version, 'FOLLOW_UP_COMPLETED', f"Followed up with the client on {version.version}", user,
                    {'notes': notes} if notes else None)
    return version


def record_client_decision(version, user, decision, notes=''):
    """Apply the client's decision and move the room workflow accordingly"""
    if decision not in DECISIONS:
        raise WorkflowError('Valid decision is required', details=DECISIONS)
    check_transition(version, 'client_decision')

    stage = version.stage
    room = stage.room
    with transaction.atomic():
        now = timezone.now()
        version.client_decision = decision
        version.client_decided_at = now
        version.client_message = notes or ''
        version.status = 'CLIENT_APPROVED' if decision == 'APPROVED' else 'REVISION_REQUESTED'
        version.save()

        ClientDecision.objects.create(version=version, decision=decision, comments=notes or '', decided_by=user)

        if decision == 'APPROVED':
            record_activity(version, 'CLIENT_APPROVED', f"Client approved {version.version}", user)
            if stage.status != 'COMPLETED':
                if stage.status not in stage_workflow.STAGE_TRANSITIONS['complete'][0]:
                    stage.status = 'IN_PROGRESS'
                    stage.save()
                stage_workflow.complete_stage(stage, user)
        else:
            record_activity(version, 'REVISION_REQUESTED', f"Client requested revisions on {version.version}", user,
                            {'notes': notes} if notes else None)
            _reopen_rendering(version, user, notes)
            stage.status = 'REVISION_REQUESTED'
            stage.save()
            stage_workflow.recompute_room(room)

    logger.info(f"Client decision {decision} recorded on approval version {version.id}")
    return version


def _reopen_rendering(version, user, notes):
    rendering = version.rendering_version
    if rendering:
        rendering.status = 'IN_PROGRESS'
        rendering.completed_at = None
        rendering.save()
        RenderingNote.objects.create(
            rendering_version=rendering,
            content=f"REVISION REQUESTED\n\n{notes or 'Client requested revisions'}",
            author=user,
        )

    three_d = _room_stage(version.stage.room, 'THREE_D')
    if three_d is None:
        return
    three_d.status = 'IN_PROGRESS'
    three_d.completed_at = None
    three_d.completed_by = None
    three_d.save()
    log_stage_activity(three_d, 'STATUS_CHANGE', f"3D Rendering reopened: client requested revisions on {version.version}", user)

    if three_d.assigned_to:
        room = version.stage.room
        notify_user(
            three_d.assigned_to,
            'REVISION_REQUESTED',
            f"Client requested changes - {room.display_name} ({room.project.name})",
            f"{room.project.client.name} requested revisions for the 3D renderings."
            + (f"\n\nClient's feedback: {notes}" if notes else '')
            + "\n\nThe 3D Rendering stage has been reopened.",
            stage=three_d,
            send_email=True,
        )
