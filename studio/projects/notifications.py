"""In-app notifications with optional e-mail copy"""
import logging

from django.conf import settings
from django.core.mail import send_mail

from .models import Notification

logger = logging.getLogger('studio.projects')


def notify_user(user, notification_type, title, message, stage=None, send_email=False):
    """
    Create a notification for a user.

    When send_email is set and the user accepts e-mail notifications, a plain
    text copy is sent through the configured e-mail backend. Mail failures are
    logged and never propagate.
    """
    notification = Notification.objects.create(
        user=user,
        type=notification_type,
        title=title,
        message=message,
        stage=stage,
    )

    if send_email and user.email and user.email_notifications_enabled:
        try:
            send_mail(
                subject=f"[{settings.STUDIO_NAME}] {title}",
                message=message,
                from_email=settings.DEFAULT_FROM_EMAIL,
                recipient_list=[user.email],
                fail_silently=False,
            )
        except Exception as e:
            logger.error(f"Failed to e-mail notification {notification.id} to {user.email}: {str(e)}", exc_info=True)

    return notification
