from django.core.management.base import BaseCommand
from django.db import transaction
from studio.projects.models import Room
from studio.projects.workflow import PHASE_SEQUENCE, create_room_stages, recompute_room
from studio.ffe.utils import update_room_progress


class Command(BaseCommand):
    help = 'Create missing workflow stages for existing rooms and recompute room status and FFE progress'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Report rooms with missing stages without changing anything',
        )
        parser.add_argument(
            '--project',
            type=int,
            default=None,
            help='Only process rooms of this project id',
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']
        rooms = Room.objects.prefetch_related('stages').order_by('project_id', 'order', 'id')
        if options['project']:
            rooms = rooms.filter(project_id=options['project'])

        total_count = rooms.count()
        missing_count = 0
        self.stdout.write(f'Found {total_count} rooms to process')
        if dry_run:
            self.stdout.write(self.style.WARNING('DRY RUN MODE - No changes will be made'))

        for room in rooms:
            existing = {stage.type for stage in room.stages.all()}
            missing = [phase for phase in PHASE_SEQUENCE if phase not in existing]
            if missing:
                missing_count += 1
                self.stdout.write(f'  {room}: missing {", ".join(missing)}')
            if dry_run:
                continue

            with transaction.atomic():
                if missing:
                    create_room_stages(room)
                room = Room.objects.prefetch_related('stages').get(pk=room.pk)
                recompute_room(room)
                update_room_progress(room)

        if dry_run:
            self.stdout.write(self.style.SUCCESS(f'{missing_count} room(s) would get missing stages'))
        else:
            self.stdout.write(self.style.SUCCESS(f'Processed {total_count} room(s), {missing_count} had missing stages'))
