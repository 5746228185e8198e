"""
Deactivate client access links whose expiry date has passed.

Usage:
    python manage.py deactivate_expired_tokens [--dry-run]
"""
from django.core.management.base import BaseCommand
from django.utils import timezone
from studio.portal.models import ClientAccessToken


class Command(BaseCommand):
    help = 'Deactivate client portal links past their expiry date'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Only report how many links would be deactivated',
        )

    def handle(self, *args, **options):
        expired = ClientAccessToken.objects.filter(active=True, expires_at__isnull=False, expires_at__lte=timezone.now())
        count = expired.count()

        if options['dry_run']:
            self.stdout.write(f"{count} expired link(s) would be deactivated")
            return

        expired.update(active=False, updated_at=timezone.now())
        self.stdout.write(self.style.SUCCESS(f"Deactivated {count} expired link(s)"))
