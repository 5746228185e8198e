"""
Room workflow: phase ordering, stage transitions and room status roll-up.

Views call these functions inside a transaction and translate WorkflowError
into a 400 response.
"""
import logging

from django.db import transaction
from django.utils import timezone

from .models import Stage, StageActivity, DesignSection, STAGE_TYPE_CHOICES
from .notifications import notify_user

logger = logging.getLogger('studio.projects')

PHASE_SEQUENCE = ['DESIGN_CONCEPT', 'THREE_D', 'CLIENT_APPROVAL', 'DRAWINGS', 'FFE']

PHASE_NAMES = dict(STAGE_TYPE_CHOICES)

PHASE_DESCRIPTIONS = {
    'DESIGN_CONCEPT': 'Develop the design concept: finishes, walls, ceiling and floor direction.',
    'THREE_D': 'Produce 3D renderings of the approved concept.',
    'CLIENT_APPROVAL': 'Present renderings to the client and record their decision.',
    'DRAWINGS': 'Prepare lighting, elevation, millwork and floor plan drawings.',
    'FFE': 'Source and confirm furniture, fixtures and equipment.',
}

# Phases that become available once a phase completes
FOLLOWING_PHASES = {
    'DESIGN_CONCEPT': ['THREE_D'],
    'THREE_D': ['CLIENT_APPROVAL'],
    'CLIENT_APPROVAL': ['DRAWINGS', 'FFE'],
    'DRAWINGS': [],
    'FFE': [],
}

ACTIVE_STATUSES = ['IN_PROGRESS', 'PENDING_APPROVAL', 'REVISION_REQUESTED', 'NEEDS_ATTENTION']

# action -> (allowed source statuses, target status)
STAGE_TRANSITIONS = {
    'start': (['NOT_STARTED', 'ON_HOLD', 'NEEDS_ATTENTION'], 'IN_PROGRESS'),
    'complete': (['IN_PROGRESS', 'PENDING_APPROVAL', 'NEEDS_ATTENTION', 'REVISION_REQUESTED'], 'COMPLETED'),
    'reopen': (['COMPLETED'], 'IN_PROGRESS'),
    'hold': (['IN_PROGRESS'], 'ON_HOLD'),
    'resume': (['ON_HOLD'], 'IN_PROGRESS'),
    'not-applicable': (['NOT_STARTED'], 'NOT_APPLICABLE'),
    'applicable': (['NOT_APPLICABLE'], 'NOT_STARTED'),
}


class WorkflowError(Exception):
    """Raised when a workflow rule rejects an operation"""

    def __init__(self, message, details=None):
        super().__init__(message)
        self.message = message
        self.details = details or []


class EmailDeliveryError(WorkflowError):
    """The mail backend rejected an outgoing e-mail"""


def phase_sequence_info(phase):
    """Position of a phase in the workflow sequence"""
    if phase not in PHASE_SEQUENCE:
        raise WorkflowError(f'Unknown phase: {phase}')
    index = PHASE_SEQUENCE.index(phase)
    return {
        'current': phase,
        'name': PHASE_NAMES[phase],
        'description': PHASE_DESCRIPTIONS[phase],
        'next': PHASE_SEQUENCE[index + 1] if index < len(PHASE_SEQUENCE) - 1 else None,
        'previous': PHASE_SEQUENCE[index - 1] if index > 0 else None,
        'is_first': index == 0,
        'is_last': index == len(PHASE_SEQUENCE) - 1,
        'order': index + 1,
    }


def phases_to_notify(completed_phase):
    """Phases whose owners should hear that completed_phase is done"""
    if completed_phase not in FOLLOWING_PHASES:
        raise WorkflowError(f'Unknown phase: {completed_phase}')
    return list(FOLLOWING_PHASES[completed_phase])


def phase_sort_key(stage):
    return PHASE_SEQUENCE.index(stage.type) if stage.type in PHASE_SEQUENCE else len(PHASE_SEQUENCE)


def create_room_stages(room):
    """Create one NOT_STARTED stage per phase for a new room"""
    existing = set(room.stages.values_list('type', flat=True))
    Stage.objects.bulk_create([
        Stage(room=room, type=phase) for phase in PHASE_SEQUENCE if phase not in existing
    ])


def room_progress(stages):
    """Percentage of applicable stages that are completed"""
    applicable = [s for s in stages if s.status != 'NOT_APPLICABLE']
    if not applicable:
        return 0
    completed = sum(1 for s in applicable if s.status == 'COMPLETED')
    return round(completed / len(applicable) * 100)


def recompute_room(room):
    """Roll stage statuses up into the room status and current stage"""
    stages = sorted(room.stages.all(), key=phase_sort_key)
    applicable = [s for s in stages if s.status != 'NOT_APPLICABLE']
    statuses = [s.status for s in applicable]

    if applicable and all(st == 'COMPLETED' for st in statuses):
        new_status = 'COMPLETED'
    elif all(st == 'NOT_STARTED' for st in statuses):
        new_status = 'NOT_STARTED'
    elif 'NEEDS_ATTENTION' in statuses:
        new_status = 'NEEDS_ATTENTION'
    elif 'ON_HOLD' in statuses and not any(st in ACTIVE_STATUSES for st in statuses):
        new_status = 'ON_HOLD'
    else:
        new_status = 'IN_PROGRESS'

    current = next((s.type for s in applicable if s.status != 'COMPLETED'), None)

    if room.status != new_status or room.current_stage != current:
        room.status = new_status
        room.current_stage = current
        room.save(update_fields=['status', 'current_stage', 'updated_at'])
    return room


def log_stage_activity(stage, activity_type, message, user=None):
    return StageActivity.objects.create(
        stage=stage,
        type=activity_type,
        message=message,
        user=user if user and user.is_authenticated else None,
    )


def _stage_label(stage):
    room = stage.room
    return f"{PHASE_NAMES.get(stage.type, stage.type)} - {room.display_name} ({room.project.name})"


def completion_blockers(stage):
    """Reasons the stage cannot be completed yet (empty list when it can)"""
    if stage.type == 'DESIGN_CONCEPT':
        existing = set(stage.design_sections.values_list('type', flat=True))
        missing = [t for t in DesignSection.REQUIRED_TYPES if t not in existing]
        if missing:
            return [f"Missing sections: {', '.join(missing)}"]
        return []

    if stage.type == 'THREE_D':
        from studio.approvals.models import RenderingVersion
        if not RenderingVersion.objects.filter(
            stage=stage, status__in=['COMPLETED', 'PUSHED_TO_CLIENT']
        ).exists():
            return ['At least one rendering version must be completed']
        return []

    if stage.type == 'CLIENT_APPROVAL':
        from studio.approvals.models import ClientApprovalVersion
        if not ClientApprovalVersion.objects.filter(stage=stage, status='CLIENT_APPROVED').exists():
            return ['The client has not approved a version yet']
        return []

    if stage.type == 'DRAWINGS':
        from studio.drawings.models import DrawingChecklistItem
        items = list(DrawingChecklistItem.objects.filter(stage=stage))
        if not items:
            return ['Add at least one drawing checklist item']
        pending = [item.name for item in items if not item.completed]
        if pending:
            return [f"Incomplete drawings: {', '.join(pending)}"]
        return []

    if stage.type == 'FFE':
        from studio.ffe.utils import ffe_completion_blockers
        return ffe_completion_blockers(stage.room)

    return []


def _check_transition(stage, action):
    allowed, target = STAGE_TRANSITIONS[action]
    if stage.status not in allowed:
        raise WorkflowError(
            f"Cannot {action.replace('-', ' ')} a stage that is {stage.get_status_display().lower()}"
        )
    return target


def _set_status(stage, status, user, message):
    stage.status = status
    stage.save()
    log_stage_activity(stage, 'STATUS_CHANGE', message, user)
    recompute_room(stage.room)
    logger.info(f"Stage {stage.id} ({stage.type}) -> {status}")
    return stage


def start_stage(stage, user=None):
    target = _check_transition(stage, 'start')
    if not stage.started_at:
        stage.started_at = timezone.now()
    return _set_status(stage, target, user, f"{PHASE_NAMES[stage.type]} started")


def _open_following_phases(stage, user):
    """Start the phases that follow a completed one and tell their owners"""
    following = phases_to_notify(stage.type)
    if not following:
        return []
    opened = []
    room_stages = stage.room.stages.filter(type__in=following).select_related('assigned_to')
    for next_stage in sorted(room_stages, key=phase_sort_key):
        if next_stage.status == 'NOT_APPLICABLE':
            continue
        if next_stage.status == 'NOT_STARTED':
            next_stage.status = 'IN_PROGRESS'
            next_stage.started_at = next_stage.started_at or timezone.now()
            next_stage.save()
            log_stage_activity(
                next_stage, 'STATUS_CHANGE',
                f"{PHASE_NAMES[next_stage.type]} started after {PHASE_NAMES[stage.type]} was completed",
                user,
            )
        if next_stage.assigned_to:
            notify_user(
                next_stage.assigned_to,
                'PHASE_READY',
                f"{PHASE_NAMES[next_stage.type]} is ready",
                f"{PHASE_NAMES[stage.type]} for {_stage_label(stage)} has been completed. "
                f"{PHASE_NAMES[next_stage.type]} is ready for you.",
                stage=next_stage,
                send_email=True,
            )
        opened.append(next_stage)
    return opened


def complete_stage(stage, user=None):
    """Complete a stage after its completion checks pass"""
    with transaction.atomic():
        target = _check_transition(stage, 'complete')
        blockers = completion_blockers(stage)
        if blockers:
            raise WorkflowError('Stage cannot be completed yet', details=blockers)

        now = timezone.now()
        if stage.type == 'DESIGN_CONCEPT':
            stage.design_sections.filter(completed=False).update(completed=True, completed_at=now)

        stage.completed_at = now
        stage.completed_by = user if user and user.is_authenticated else None
        if not stage.started_at:
            stage.started_at = now
        stage.status = target
        stage.save()
        log_stage_activity(stage, 'STATUS_CHANGE', f"{PHASE_NAMES[stage.type]} completed", user)

        opened = _open_following_phases(stage, user)
        recompute_room(stage.room)

    logger.info(f"Stage {stage.id} ({stage.type}) completed; opened {[s.type for s in opened]}")
    return stage


def reopen_stage(stage, user=None):
    target = _check_transition(stage, 'reopen')
    stage.completed_at = None
    stage.completed_by = None
    return _set_status(stage, target, user, f"{PHASE_NAMES[stage.type]} reopened")


def hold_stage(stage, user=None):
    target = _check_transition(stage, 'hold')
    return _set_status(stage, target, user, f"{PHASE_NAMES[stage.type]} put on hold")


def resume_stage(stage, user=None):
    target = _check_transition(stage, 'resume')
    return _set_status(stage, target, user, f"{PHASE_NAMES[stage.type]} resumed")


def mark_not_applicable(stage, user=None):
    target = _check_transition(stage, 'not-applicable')
    return _set_status(stage, target, user, f"{PHASE_NAMES[stage.type]} marked not applicable")


def mark_applicable(stage, user=None):
    target = _check_transition(stage, 'applicable')
    return _set_status(stage, target, user, f"{PHASE_NAMES[stage.type]} marked applicable")


def assign_stage(stage, assignee, user=None):
    """Assign (or unassign with None) a stage and notify the new owner"""
    previous = stage.assigned_to
    stage.assigned_to = assignee
    stage.save(update_fields=['assigned_to', 'updated_at'])

    if assignee:
        log_stage_activity(stage, 'ASSIGNMENT', f"Assigned to {assignee.display_name}", user)
        if not previous or previous.pk != assignee.pk:
            notify_user(
                assignee,
                'STAGE_ASSIGNED',
                f"New assignment: {PHASE_NAMES[stage.type]}",
                f"You have been assigned {_stage_label(stage)}.",
                stage=stage,
                send_email=True,
            )
    else:
        log_stage_activity(stage, 'ASSIGNMENT', 'Unassigned', user)
    return stage


STAGE_ACTIONS = {
    'start': start_stage,
    'complete': complete_stage,
    'reopen': reopen_stage,
    'hold': hold_stage,
    'resume': resume_stage,
    'not-applicable': mark_not_applicable,
    'applicable': mark_applicable,
}
