# Generated manually

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

STAGE_TYPE_CHOICES = [('DESIGN_CONCEPT', 'Design Concept'), ('THREE_D', '3D Rendering'), ('CLIENT_APPROVAL', 'Client Approval'), ('DRAWINGS', 'Drawings'), ('FFE', 'FFE (Furniture, Fixtures & Equipment)')]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Client',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('email', models.EmailField(blank=True, max_length=254, null=True)),
                ('phone', models.CharField(blank=True, max_length=20, null=True)),
                ('company', models.CharField(blank=True, max_length=255, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'clients',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Project',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True)),
                ('type', models.CharField(choices=[('RESIDENTIAL', 'Residential'), ('COMMERCIAL', 'Commercial'), ('HOSPITALITY', 'Hospitality')], default='RESIDENTIAL', max_length=20)),
                ('status', models.CharField(choices=[('DRAFT', 'Draft'), ('IN_PROGRESS', 'In Progress'), ('ON_HOLD', 'On Hold'), ('URGENT', 'Urgent'), ('CANCELLED', 'Cancelled'), ('COMPLETED', 'Completed')], default='DRAFT', max_length=20)),
                ('address', models.CharField(blank=True, max_length=500)),
                ('budget', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('due_date', models.DateField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('client', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='projects', to='projects.client')),
                ('created_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='created_projects', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'projects',
                'ordering': ['-updated_at'],
                'indexes': [
                    models.Index(fields=['status'], name='projects_status_1b2f7e_idx'),
                    models.Index(fields=['client', 'status'], name='projects_client__4a8d30_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Room',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('type', models.CharField(choices=[('ENTRANCE', 'Entrance'), ('FOYER', 'Foyer'), ('LIVING_ROOM', 'Living Room'), ('DINING_ROOM', 'Dining Room'), ('KITCHEN', 'Kitchen'), ('FAMILY_ROOM', 'Family Room'), ('MASTER_BEDROOM', 'Master Bedroom'), ('BEDROOM', 'Bedroom'), ('GUEST_BEDROOM', 'Guest Bedroom'), ('GIRLS_ROOM', "Girls' Room"), ('BOYS_ROOM', "Boys' Room"), ('MASTER_BATHROOM', 'Master Bathroom'), ('BATHROOM', 'Bathroom'), ('POWDER_ROOM', 'Powder Room'), ('LAUNDRY_ROOM', 'Laundry Room'), ('OFFICE', 'Office'), ('PLAYROOM', 'Playroom'), ('STAIRCASE', 'Staircase'), ('OTHER', 'Other')], default='OTHER', max_length=30)),
                ('name', models.CharField(blank=True, max_length=255)),
                ('order', models.PositiveIntegerField(default=0)),
                ('status', models.CharField(choices=[('NOT_STARTED', 'Not Started'), ('IN_PROGRESS', 'In Progress'), ('ON_HOLD', 'On Hold'), ('COMPLETED', 'Completed'), ('NEEDS_ATTENTION', 'Needs Attention')], default='NOT_STARTED', max_length=20)),
                ('current_stage', models.CharField(blank=True, choices=STAGE_TYPE_CHOICES, max_length=20, null=True)),
                ('progress_ffe', models.PositiveIntegerField(default=0, help_text='FFE completion percentage (0-100)')),
                ('start_date', models.DateField(blank=True, null=True)),
                ('due_date', models.DateField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('project', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='rooms', to='projects.project')),
            ],
            options={
                'db_table': 'rooms',
                'ordering': ['order', 'id'],
                'indexes': [
                    models.Index(fields=['project', 'order'], name='rooms_project_9c3e51_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Stage',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('type', models.CharField(choices=STAGE_TYPE_CHOICES, max_length=20)),
                ('status', models.CharField(choices=[('NOT_STARTED', 'Not Started'), ('IN_PROGRESS', 'In Progress'), ('COMPLETED', 'Completed'), ('ON_HOLD', 'On Hold'), ('NEEDS_ATTENTION', 'Needs Attention'), ('PENDING_APPROVAL', 'Pending Approval'), ('REVISION_REQUESTED', 'Revision Requested'), ('NOT_APPLICABLE', 'Not Applicable')], default='NOT_STARTED', max_length=20)),
                ('due_date', models.DateField(blank=True, null=True)),
                ('started_at', models.DateTimeField(blank=True, null=True)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('assigned_to', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='assigned_stages', to=settings.AUTH_USER_MODEL)),
                ('completed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='completed_stages', to=settings.AUTH_USER_MODEL)),
                ('room', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='stages', to='projects.room')),
            ],
            options={
                'db_table': 'stages',
                'ordering': ['room', 'id'],
                'indexes': [
                    models.Index(fields=['assigned_to', 'status'], name='stages_assigne_6e0b2d_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('room', 'type'), name='unique_stage_type_per_room'),
                ],
            },
        ),
        migrations.CreateModel(
            name='StageActivity',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('type', models.CharField(choices=[('STATUS_CHANGE', 'Status Change'), ('ASSIGNMENT', 'Assignment'), ('RENDERING', 'Rendering'), ('CLIENT_APPROVAL', 'Client Approval'), ('CHECKLIST', 'Checklist'), ('FFE', 'FFE'), ('NOTE', 'Note')], max_length=20)),
                ('message', models.TextField()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('stage', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='activities', to='projects.stage')),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='stage_activities', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'stage_activities',
                'ordering': ['-created_at', '-id'],
            },
        ),
        migrations.CreateModel(
            name='Notification',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('type', models.CharField(choices=[('STAGE_ASSIGNED', 'Stage Assigned'), ('STAGE_COMPLETED', 'Stage Completed'), ('PHASE_READY', 'Phase Ready'), ('REVISION_REQUESTED', 'Revision Requested'), ('PROJECT_UPDATE', 'Project Update')], max_length=30)),
                ('title', models.CharField(max_length=255)),
                ('message', models.TextField()),
                ('is_read', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('stage', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='notifications', to='projects.stage')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='notifications', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'notifications',
                'ordering': ['-created_at', '-id'],
                'indexes': [
                    models.Index(fields=['user', 'is_read'], name='notificatio_user_id_8f5a2c_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='DesignSection',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('type', models.CharField(choices=[('GENERAL', 'General'), ('WALL_COVERING', 'Wall Covering'), ('CEILING', 'Ceiling'), ('FLOOR', 'Floor'), ('LIGHTING', 'Lighting'), ('FURNITURE', 'Furniture'), ('CUSTOM', 'Custom')], max_length=20)),
                ('content', models.TextField(blank=True)),
                ('completed', models.BooleanField(default=False)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('stage', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='design_sections', to='projects.stage')),
            ],
            options={
                'db_table': 'design_sections',
                'ordering': ['stage', 'id'],
                'constraints': [
                    models.UniqueConstraint(fields=('stage', 'type'), name='unique_design_section_type_per_stage'),
                ],
            },
        ),
    ]
