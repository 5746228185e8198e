"""
Transmittals and the drawing distribution matrix.

A transmittal is created per recipient. It moves DRAFT -> SENT -> ACKNOWLEDGED
and can be cancelled while DRAFT or SENT. The distribution matrix answers which
revision of each drawing every recipient last received.
"""
import logging
import re
from email.utils import make_msgid

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.db import transaction
from django.template.loader import render_to_string
from django.utils import timezone

from studio.projects.models import Project
from studio.projects.workflow import WorkflowError, EmailDeliveryError
from .models import (
    ProjectDrawing, DrawingRevision, Transmittal, TransmittalItem,
    DISCIPLINE_CHOICES, DISCIPLINE_SHORT_LABELS, DISCIPLINE_ORDER
)

logger = logging.getLogger('studio.drawings')

NUMBER_PATTERN = re.compile(r'^T-(\d+)$')

ISSUED_STATUSES = ['SENT', 'ACKNOWLEDGED']

TRANSMITTAL_TRANSITIONS = {
    'send': ['DRAFT'],
    'acknowledge': ['SENT'],
    'cancel': ['DRAFT', 'SENT'],
}


def check_transition(transmittal, action):
    allowed = TRANSMITTAL_TRANSITIONS[action]
    if transmittal.status not in allowed:
        if action == 'send' and transmittal.status == 'SENT':
            raise WorkflowError('Transmittal has already been sent')
        raise WorkflowError(
            f"Cannot {action} a transmittal that is {transmittal.get_status_display().lower()}",
            details=[f"Allowed from: {', '.join(allowed)}"],
        )


def next_transmittal_number(project):
    """T-001, T-002, ... per project"""
    highest = 0
    for number in Transmittal.objects.filter(project=project).values_list('transmittal_number', flat=True):
        match = NUMBER_PATTERN.match(number or '')
        if match:
            highest = max(highest, int(match.group(1)))
    return f"T-{highest + 1:03d}"


def add_revision(drawing, user, revision_number=None, **fields):
    """Record a new revision and make it the drawing's current one"""
    with transaction.atomic():
        drawing = ProjectDrawing.objects.select_for_update().get(pk=drawing.pk)
        if revision_number is None:
            latest = drawing.revisions.order_by('-revision_number').first()
            revision_number = latest.revision_number + 1 if latest else drawing.current_revision + 1
        if drawing.revisions.filter(revision_number=revision_number).exists():
            raise WorkflowError(f"Revision {revision_number} already exists for this drawing")

        revision = DrawingRevision.objects.create(
            drawing=drawing,
            revision_number=revision_number,
            created_by=user if user and user.is_authenticated else None,
            **fields,
        )
        drawing.current_revision = revision_number
        update_fields = ['current_revision', 'updated_at']
        if revision.file_path:
            drawing.file_path = revision.file_path
            update_fields.append('file_path')
        drawing.save(update_fields=update_fields)

    logger.info(f"Drawing {drawing.id} moved to revision {revision_number}")
    return revision


def _build_items(project, items):
    """Resolve item input against the project's drawings; unknown drawings are skipped"""
    drawing_ids = [item['drawing_id'] for item in items]
    drawings = ProjectDrawing.objects.filter(project=project, id__in=drawing_ids).in_bulk()

    resolved = []
    for item in items:
        drawing = drawings.get(item['drawing_id'])
        if drawing is None:
            logger.warning(f"Skipping drawing {item['drawing_id']}: not part of project {project.id}")
            continue

        revision = None
        if item.get('revision_id'):
            revision = DrawingRevision.objects.filter(pk=item['revision_id'], drawing=drawing).first()
        if revision is None:
            revision = drawing.revisions.order_by('-revision_number').first()

        resolved.append({
            'drawing': drawing,
            'revision': revision,
            'revision_number': revision.revision_number if revision else drawing.current_revision,
            'purpose': item.get('purpose') or 'FOR_INFORMATION',
            'notes': item.get('notes', ''),
        })
    return resolved


def create_transmittals(project, user, recipients, items, subject='', notes='', method='EMAIL',
                        send_immediately=False):
    """
    Create one transmittal per recipient with the same drawing items.

    Returns (transmittals, send_results). send_results is empty unless
    send_immediately is set, in which case it has one entry per recipient.
    """
    resolved = _build_items(project, items)
    if not resolved:
        raise WorkflowError('None of the selected drawings belong to this project')

    created_by = user if user and user.is_authenticated else None
    transmittals = []
    with transaction.atomic():
        # Serialises numbering per project
        Project.objects.select_for_update().get(pk=project.pk)
        for recipient in recipients:
            transmittal = Transmittal.objects.create(
                project=project,
                transmittal_number=next_transmittal_number(project),
                subject=subject,
                recipient_name=recipient['name'],
                recipient_email=recipient.get('email', ''),
                recipient_company=recipient.get('company', ''),
                recipient_type=recipient.get('type') or 'OTHER',
                method=method,
                notes=notes,
                created_by=created_by,
            )
            TransmittalItem.objects.bulk_create([
                TransmittalItem(transmittal=transmittal, **item) for item in resolved
            ])
            transmittals.append(transmittal)

    logger.info(f"Created {len(transmittals)} transmittal(s) for project {project.id} with {len(resolved)} drawing(s)")

    send_results = []
    if send_immediately:
        for transmittal in transmittals:
            result = {
                'transmittal_id': transmittal.id,
                'transmittal_number': transmittal.transmittal_number,
                'recipient_email': transmittal.recipient_email,
                'sent': False,
            }
            try:
                send_transmittal(transmittal, user)
                result['sent'] = True
            except WorkflowError as e:
                result['error'] = e.message
            send_results.append(result)
    return transmittals, send_results


def transmittal_subject(transmittal):
    project_name = transmittal.project.name
    if transmittal.subject:
        return f"{project_name} — {transmittal.subject}"
    return f"{project_name} — Drawing(s)"


def build_transmittal_email(transmittal):
    subject = transmittal_subject(transmittal)
    context = {
        'studio_name': settings.STUDIO_NAME,
        'subject': subject,
        'transmittal': transmittal,
        'project': transmittal.project,
        'items': transmittal.items.select_related('drawing').all(),
    }
    text = render_to_string('drawings/email/transmittal.txt', context)
    html = render_to_string('drawings/email/transmittal.html', context)
    return subject, text, html


def send_transmittal(transmittal, user):
    """E-mail a draft transmittal to its recipient and mark it SENT"""
    if not transmittal.recipient_email:
        raise WorkflowError('Recipient has no e-mail address')
    check_transition(transmittal, 'send')

    subject, text, html = build_transmittal_email(transmittal)
    message_id = make_msgid(domain=settings.EMAIL_MESSAGE_ID_DOMAIN)
    message = EmailMultiAlternatives(
        subject=subject,
        body=text,
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=[transmittal.recipient_email],
        headers={'Message-ID': message_id},
    )
    message.attach_alternative(html, 'text/html')
    try:
        message.send(fail_silently=False)
    except Exception as e:
        logger.error(f"Failed to send transmittal {transmittal.transmittal_number} to {transmittal.recipient_email}",
                     exc_info=True)
        raise EmailDeliveryError(f'Failed to send e-mail: {str(e)}')

    transmittal.status = 'SENT'
    transmittal.sent_at = timezone.now()
    transmittal.sent_by = user if user and user.is_authenticated else None
    transmittal.email_message_id = message_id
    transmittal.save(update_fields=['status', 'sent_at', 'sent_by', 'email_message_id', 'updated_at'])
    logger.info(f"Transmittal {transmittal.transmittal_number} sent to {transmittal.recipient_email}")
    return transmittal


def acknowledge_transmittal(transmittal):
    check_transition(transmittal, 'acknowledge')
    transmittal.status = 'ACKNOWLEDGED'
    transmittal.acknowledged_at = timezone.now()
    transmittal.save(update_fields=['status', 'acknowledged_at', 'updated_at'])
    return transmittal


def cancel_transmittal(transmittal):
    check_transition(transmittal, 'cancel')
    transmittal.status = 'CANCELLED'
    transmittal.save(update_fields=['status', 'updated_at'])
    return transmittal


# Distribution matrix
DISCIPLINE_LABELS = dict(DISCIPLINE_CHOICES)


def project_recipients(project):
    """Distinct recipients of the project's non-cancelled transmittals, in first-seen order"""
    recipients = {}
    transmittals = project.transmittals.exclude(status='CANCELLED').order_by('created_at', 'id')
    for transmittal in transmittals:
        key = transmittal.recipient_key
        entry = recipients.get(key)
        if entry is None:
            entry = recipients[key] = {
                'key': key,
                'name': transmittal.recipient_name,
                'email': transmittal.recipient_email,
                'company': transmittal.recipient_company,
                'type': transmittal.recipient_type,
                'transmittal_count': 0,
                'last_sent_at': None,
            }
        entry['transmittal_count'] += 1
        if transmittal.sent_at and (entry['last_sent_at'] is None or transmittal.sent_at > entry['last_sent_at']):
            entry['last_sent_at'] = transmittal.sent_at
    return list(recipients.values())


def _discipline_sort_key(code):
    return DISCIPLINE_ORDER.index(code) if code in DISCIPLINE_ORDER else len(DISCIPLINE_ORDER)


def distribution_matrix(project, discipline=None):
    drawings = project.drawings.exclude(status='ARCHIVED')
    if discipline:
        drawings = drawings.filter(discipline=discipline)
    drawings = sorted(drawings, key=lambda d: (_discipline_sort_key(d.discipline), d.drawing_number, d.id))

    recipients = project_recipients(project)

    # Latest issue per (drawing, recipient)
    latest = {}
    items = TransmittalItem.objects.filter(
        transmittal__project=project, transmittal__status__in=ISSUED_STATUSES
    ).select_related('transmittal')
    for item in items:
        transmittal = item.transmittal
        key = (item.drawing_id, transmittal.recipient_key)
        issued_at = transmittal.sent_at or transmittal.created_at
        current = latest.get(key)
        if current is None or (issued_at, transmittal.id) > (current[0], current[1].transmittal.id):
            latest[key] = (issued_at, item)

    groups = []
    for drawing in drawings:
        cells = {}
        outdated = 0
        for recipient in recipients:
            found = latest.get((drawing.id, recipient['key']))
            if found is None:
                cells[recipient['key']] = None
                continue
            item = found[1]
            is_current = item.revision_number == drawing.current_revision
            if not is_current:
                outdated += 1
            cells[recipient['key']] = {
                'transmittal_id': item.transmittal.id,
                'transmittal_number': item.transmittal.transmittal_number,
                'revision_number': item.revision_number,
                'purpose': item.purpose,
                'sent_at': item.transmittal.sent_at,
                'status': item.transmittal.status,
                'is_current': is_current,
            }

        row = {
            'id': drawing.id,
            'drawing_number': drawing.drawing_number,
            'title': drawing.title,
            'discipline': drawing.discipline,
            'status': drawing.status,
            'current_revision': drawing.current_revision,
            'cells': cells,
            'outdated_count': outdated,
        }
        if not groups or groups[-1]['discipline'] != drawing.discipline:
            groups.append({
                'discipline': drawing.discipline,
                'label': DISCIPLINE_LABELS.get(drawing.discipline, 'Unassigned'),
                'short_label': DISCIPLINE_SHORT_LABELS.get(drawing.discipline, ''),
                'drawings': [],
            })
        groups[-1]['drawings'].append(row)

    return {
        'project': {'id': project.id, 'name': project.name},
        'recipients': recipients,
        'disciplines': groups,
        'drawing_count': len(drawings),
        'outdated_count': sum(row['outdated_count'] for group in groups for row in group['drawings']),
    }
