"""Composition and delivery of client approval e-mails"""
import logging

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template.loader import render_to_string

from .models import ClientApprovalEmailLog

logger = logging.getLogger('studio.approvals')


def tracking_url(tracking_id):
    return f"{settings.STUDIO_BASE_URL}/api/v1/client-approval/track/{tracking_id}/"


def build_client_approval_email(version, log):
    """Render subject, text and HTML bodies for an approval version"""
    room = version.stage.room
    project = room.project
    subject = f"{project.name} - {room.display_name} renderings for your approval ({version.version})"
    context = {
        'studio_name': settings.STUDIO_NAME,
        'subject': subject,
        'project': project,
        'room': room,
        'client': project.client,
        'version': version,
        'assets': version.assets.filter(include_in_email=True).select_related('asset'),
        'tracking_url': tracking_url(log.tracking_id),
    }
    text = render_to_string('approvals/email/client_approval.txt', context)
    html = render_to_string('approvals/email/client_approval.html', context)
    return subject, text, html


def send_client_approval_email(version, to_email):
    """
    Send the approval e-mail to the client and keep a log row with its tracking id.

    Raises the mail backend's exception on failure after removing the log row.
    """
    log = ClientApprovalEmailLog(version=version, to=to_email, subject='', html='')
    subject, text, html = build_client_approval_email(version, log)
    log.subject = subject
    log.html = html
    log.save()

    message = EmailMultiAlternatives(
        subject=subject,
        body=text,
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=[to_email],
    )
    message.attach_alternative(html, 'text/html')
    try:
        message.send(fail_silently=False)
    except Exception:
        log.delete()
        logger.error(f"Failed to send client approval e-mail for version {version.id} to {to_email}", exc_info=True)
        raise

    logger.info(f"Client approval e-mail for version {version.id} sent to {to_email}")
    return log
