# Generated manually

import uuid
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

DECISION_CHOICES = [('PENDING', 'Pending'), ('APPROVED', 'Approved'), ('REVISION_REQUESTED', 'Revision Requested')]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('projects', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='RenderingVersion',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('version', models.CharField(max_length=20)),
                ('custom_name', models.CharField(blank=True, max_length=255)),
                ('status', models.CharField(choices=[('IN_PROGRESS', 'In Progress'), ('COMPLETED', 'Completed'), ('PUSHED_TO_CLIENT', 'Pushed to Client')], default='IN_PROGRESS', max_length=20)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('pushed_to_client_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='rendering_versions', to=settings.AUTH_USER_MODEL)),
                ('room', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='rendering_versions', to='projects.room')),
                ('stage', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='rendering_versions', to='projects.stage')),
            ],
            options={
                'db_table': 'rendering_versions',
                'ordering': ['room', 'created_at', 'id'],
                'constraints': [
                    models.UniqueConstraint(fields=('room', 'version'), name='unique_rendering_version_per_room'),
                ],
            },
        ),
        migrations.CreateModel(
            name='RenderingAsset',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=255)),
                ('url', models.URLField(max_length=1000)),
                ('asset_type', models.CharField(choices=[('IMAGE', 'Image'), ('RENDER', 'Render'), ('PDF', 'PDF'), ('DOCUMENT', 'Document'), ('LINK', 'Link'), ('OTHER', 'Other')], default='IMAGE', max_length=20)),
                ('description', models.TextField(blank=True)),
                ('order', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('rendering_version', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='assets', to='approvals.renderingversion')),
                ('uploaded_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='rendering_assets', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'rendering_assets',
                'ordering': ['order', 'id'],
            },
        ),
        migrations.CreateModel(
            name='RenderingNote',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('content', models.TextField()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('author', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='rendering_notes', to=settings.AUTH_USER_MODEL)),
                ('rendering_version', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='notes', to='approvals.renderingversion')),
            ],
            options={
                'db_table': 'rendering_notes',
                'ordering': ['-created_at', '-id'],
            },
        ),
        migrations.CreateModel(
            name='ClientApprovalVersion',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('version', models.CharField(max_length=20)),
                ('status', models.CharField(choices=[('DRAFT', 'Draft'), ('PENDING_INTERNAL_APPROVAL', 'Pending Internal Approval'), ('READY_FOR_CLIENT', 'Ready for Client'), ('SENT_TO_CLIENT', 'Sent to Client'), ('CLIENT_REVIEWING', 'Client Reviewing'), ('FOLLOW_UP_REQUIRED', 'Follow-up Required'), ('CLIENT_APPROVED', 'Client Approved'), ('REVISION_REQUESTED', 'Revision Requested')], default='DRAFT', max_length=30)),
                ('approved_internally', models.BooleanField(default=False)),
                ('internal_approved_at', models.DateTimeField(blank=True, null=True)),
                ('sent_to_client_at', models.DateTimeField(blank=True, null=True)),
                ('email_opened_at', models.DateTimeField(blank=True, null=True)),
                ('follow_up_completed_at', models.DateTimeField(blank=True, null=True)),
                ('follow_up_notes', models.TextField(blank=True)),
                ('client_decision', models.CharField(choices=DECISION_CHOICES, default='PENDING', max_length=30)),
                ('client_decided_at', models.DateTimeField(blank=True, null=True)),
                ('client_message', models.TextField(blank=True)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='client_approval_versions', to=settings.AUTH_USER_MODEL)),
                ('internal_approved_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='internal_approvals', to=settings.AUTH_USER_MODEL)),
                ('rendering_version', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='client_approval_versions', to='approvals.renderingversion')),
                ('sent_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='client_approval_sends', to=settings.AUTH_USER_MODEL)),
                ('stage', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='client_approval_versions', to='projects.stage')),
            ],
            options={
                'db_table': 'client_approval_versions',
                'ordering': ['-created_at', '-id'],
                'indexes': [
                    models.Index(fields=['stage', '-created_at'], name='client_appr_stage_i_2d7c91_idx'),
                    models.Index(fields=['status'], name='client_appr_status_58e0af_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ClientApprovalAsset',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('include_in_email', models.BooleanField(default=True)),
                ('display_order', models.PositiveIntegerField(default=0)),
                ('asset', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='client_approval_assets', to='approvals.renderingasset')),
                ('version', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='assets', to='approvals.clientapprovalversion')),
            ],
            options={
                'db_table': 'client_approval_assets',
                'ordering': ['display_order', 'id'],
                'constraints': [
                    models.UniqueConstraint(fields=('version', 'asset'), name='unique_asset_per_approval_version'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ClientApprovalActivity',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('type', models.CharField(choices=[('PUSHED', 'Pushed to Client Approval'), ('INTERNAL_APPROVED', 'Approved Internally'), ('INTERNAL_REJECTED', 'Rejected Internally'), ('SENT_TO_CLIENT', 'Sent to Client'), ('MARKED_AS_SENT', 'Marked as Sent'), ('EMAIL_OPENED', 'Email Opened'), ('FOLLOW_UP_FLAGGED', 'Follow-up Flagged'), ('FOLLOW_UP_COMPLETED', 'Follow-up Completed'), ('CLIENT_APPROVED', 'Client Approved'), ('REVISION_REQUESTED', 'Revision Requested')], max_length=30)),
                ('message', models.TextField()),
                ('metadata', models.JSONField(blank=True, default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='client_approval_activities', to=settings.AUTH_USER_MODEL)),
                ('version', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='activities', to='approvals.clientapprovalversion')),
            ],
            options={
                'db_table': 'client_approval_activities',
                'ordering': ['-created_at', '-id'],
            },
        ),
        migrations.CreateModel(
            name='ClientApprovalEmailLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('to', models.EmailField(max_length=254)),
                ('subject', models.CharField(max_length=500)),
                ('html', models.TextField()),
                ('tracking_id', models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ('sent_at', models.DateTimeField(auto_now_add=True)),
                ('opened_at', models.DateTimeField(blank=True, null=True)),
                ('version', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='email_logs', to='approvals.clientapprovalversion')),
            ],
            options={
                'db_table': 'client_approval_email_logs',
                'ordering': ['-sent_at', '-id'],
            },
        ),
        migrations.CreateModel(
            name='ClientDecision',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('decision', models.CharField(choices=DECISION_CHOICES, max_length=30)),
                ('comments', models.TextField(blank=True)),
                ('decided_at', models.DateTimeField(auto_now_add=True)),
                ('decided_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='recorded_client_decisions', to=settings.AUTH_USER_MODEL)),
                ('version', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='decisions', to='approvals.clientapprovalversion')),
            ],
            options={
                'db_table': 'client_decisions',
                'ordering': ['-decided_at', '-id'],
            },
        ),
    ]
