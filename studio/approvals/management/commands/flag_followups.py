"""
Flag client approval versions that have waited too long for a client decision.

Usage:
    python manage.py flag_followups [--days N]
"""
from django.conf import settings
from django.core.management.base import BaseCommand
from studio.core.models import Setting
from studio.approvals.workflow import flag_follow_ups


class Command(BaseCommand):
    help = 'Move client approval versions sent more than N days ago without a decision to FOLLOW_UP_REQUIRED'

    def add_arguments(self, parser):
        parser.add_argument(
            '--days',
            type=int,
            default=None,
            help='Days to wait before flagging (defaults to the CLIENT_APPROVAL_FOLLOW_UP_DAYS setting)',
        )

    def handle(self, *args, **options):
        days = options['days']
        if days is None:
            days = Setting.get_int('CLIENT_APPROVAL_FOLLOW_UP_DAYS', settings.CLIENT_APPROVAL_FOLLOW_UP_DAYS)

        flagged = flag_follow_ups(days)
        self.stdout.write(self.style.SUCCESS(f"Flagged {flagged} version(s) for follow-up (after {days} days)"))
