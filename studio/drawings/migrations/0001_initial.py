# Generated manually

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

DISCIPLINE_CHOICES = [
    ('ARCHITECTURAL', 'Architectural'), ('ELECTRICAL', 'Electrical'), ('RCP', 'Reflected Ceiling Plan'),
    ('PLUMBING', 'Plumbing'), ('MECHANICAL', 'Mechanical'), ('INTERIOR_DESIGN', 'Interior Design'),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('projects', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='DrawingChecklistItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('type', models.CharField(choices=[('LIGHTING', 'Lighting'), ('ELEVATION', 'Elevation'), ('MILLWORK', 'Millwork'), ('FLOORPLAN', 'Floor Plan'), ('CUSTOM', 'Custom')], default='CUSTOM', max_length=20)),
                ('name', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True)),
                ('completed', models.BooleanField(default=False)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('order', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('completed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='completed_drawing_items', to=settings.AUTH_USER_MODEL)),
                ('stage', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='drawing_checklist_items', to='projects.stage')),
            ],
            options={
                'db_table': 'drawing_checklist_items',
                'ordering': ['order', 'id'],
            },
        ),
        migrations.CreateModel(
            name='ProjectDrawing',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('drawing_number', models.CharField(blank=True, max_length=50)),
                ('title', models.CharField(max_length=255)),
                ('discipline', models.CharField(blank=True, choices=DISCIPLINE_CHOICES, max_length=20)),
                ('drawing_type', models.CharField(choices=[('FLOOR_PLAN', 'Floor Plan'), ('REFLECTED_CEILING', 'Reflected Ceiling'), ('ELEVATION', 'Elevation'), ('DETAIL', 'Detail'), ('SECTION', 'Section'), ('TITLE_BLOCK', 'Title Block'), ('XREF', 'XREF'), ('SCHEDULE', 'Schedule'), ('OTHER', 'Other')], default='OTHER', max_length=20)),
                ('status', models.CharField(choices=[('ACTIVE', 'Active'), ('DRAFT', 'Draft'), ('SUPERSEDED', 'Superseded'), ('ARCHIVED', 'Archived')], default='ACTIVE', max_length=20)),
                ('current_revision', models.PositiveIntegerField(default=0)),
                ('file_path', models.CharField(blank=True, max_length=1000)),
                ('description', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='created_drawings', to=settings.AUTH_USER_MODEL)),
                ('project', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='drawings', to='projects.project')),
                ('room', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='drawings', to='projects.room')),
            ],
            options={
                'db_table': 'project_drawings',
                'ordering': ['discipline', 'drawing_number', 'id'],
                'indexes': [
                    models.Index(fields=['project', 'discipline'], name='project_dra_project_0c4d9e_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('drawing_number', ''), _negated=True), fields=('project', 'drawing_number'), name='unique_drawing_number_per_project'),
                ],
            },
        ),
        migrations.CreateModel(
            name='DrawingRevision',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('revision_number', models.PositiveIntegerField()),
                ('description', models.TextField(blank=True)),
                ('issued_date', models.DateField(blank=True, null=True)),
                ('file_path', models.CharField(blank=True, max_length=1000)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('created_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='drawing_revisions', to=settings.AUTH_USER_MODEL)),
                ('drawing', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='revisions', to='drawings.projectdrawing')),
            ],
            options={
                'db_table': 'drawing_revisions',
                'ordering': ['drawing', '-revision_number'],
                'constraints': [
                    models.UniqueConstraint(fields=('drawing', 'revision_number'), name='unique_revision_per_drawing'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Transmittal',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('transmittal_number', models.CharField(max_length=20)),
                ('subject', models.CharField(blank=True, max_length=255)),
                ('recipient_name', models.CharField(max_length=255)),
                ('recipient_email', models.EmailField(blank=True, max_length=254)),
                ('recipient_company', models.CharField(blank=True, max_length=255)),
                ('recipient_type', models.CharField(choices=[('CLIENT', 'Client'), ('CONTRACTOR', 'Contractor'), ('SUBCONTRACTOR', 'Subcontractor'), ('CONSULTANT', 'Consultant'), ('SUPPLIER', 'Supplier'), ('OTHER', 'Other')], default='OTHER', max_length=20)),
                ('method', models.CharField(choices=[('EMAIL', 'Email'), ('HAND_DELIVERY', 'Hand Delivery'), ('COURIER', 'Courier'), ('FTP', 'FTP'), ('OTHER', 'Other')], default='EMAIL', max_length=20)),
                ('status', models.CharField(choices=[('DRAFT', 'Draft'), ('SENT', 'Sent'), ('ACKNOWLEDGED', 'Acknowledged'), ('CANCELLED', 'Cancelled')], default='DRAFT', max_length=20)),
                ('notes', models.TextField(blank=True)),
                ('sent_at', models.DateTimeField(blank=True, null=True)),
                ('acknowledged_at', models.DateTimeField(blank=True, null=True)),
                ('email_message_id', models.CharField(blank=True, max_length=255)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='created_transmittals', to=settings.AUTH_USER_MODEL)),
                ('project', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='transmittals', to='projects.project')),
                ('sent_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='sent_transmittals', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'transmittals',
                'ordering': ['-created_at', '-id'],
                'indexes': [
                    models.Index(fields=['project', 'status'], name='transmittal_project_7e21b3_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('project', 'transmittal_number'), name='unique_transmittal_number_per_project'),
                ],
            },
        ),
        migrations.CreateModel(
            name='TransmittalItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('revision_number', models.PositiveIntegerField(blank=True, null=True)),
                ('purpose', models.CharField(choices=[('FOR_INFORMATION', 'For Information'), ('FOR_APPROVAL', 'For Approval'), ('FOR_REVIEW', 'For Review'), ('FOR_CONSTRUCTION', 'For Construction'), ('FOR_PRICING', 'For Pricing')], default='FOR_INFORMATION', max_length=20)),
                ('notes', models.TextField(blank=True)),
                ('drawing', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='transmittal_items', to='drawings.projectdrawing')),
                ('revision', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='transmittal_items', to='drawings.drawingrevision')),
                ('transmittal', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='drawings.transmittal')),
            ],
            options={
                'db_table': 'transmittal_items',
                'ordering': ['id'],
            },
        ),
    ]
