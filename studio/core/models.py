from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Studio team member"""
    ROLE_CHOICES = [
        ('OWNER', 'Owner'),
        ('ADMIN', 'Admin'),
        ('DESIGNER', 'Designer'),
        ('RENDERER', 'Renderer'),
        ('DRAFTER', 'Drafter'),
        ('FFE', 'FFE Specialist'),
        ('VIEWER', 'Viewer'),
    ]

    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default='DESIGNER')
    phone = models.CharField(max_length=20, blank=True, null=True)
    email_notifications_enabled = models.BooleanField(default=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'users'

    @property
    def display_name(self):
        full_name = self.get_full_name()
        return full_name or self.username

    @property
    def is_studio_admin(self):
        """Owners and admins may approve work on behalf of the studio"""
        return self.is_superuser or self.is_staff or self.role in ('OWNER', 'ADMIN')


class Setting(models.Model):
    """Runtime settings editable by studio admins"""
    key = models.CharField(max_length=100, unique=True)
    value = models.TextField()
    description = models.TextField(blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.key

    class Meta:
        db_table = 'settings'

    @classmethod
    def get_int(cls, key, default):
        """Read an integer setting, falling back to default when missing or malformed"""
        value = cls.objects.filter(key=key).values_list('value', flat=True).first()
        if value is None:
            return default
        try:
            return int(value)
        except (TypeError, ValueError):
            return default


class AuditLog(models.Model):
    """Audit log for critical operations"""
    ACTION_CHOICES = [
        ('create', 'Create'),
        ('update', 'Update'),
        ('delete', 'Delete'),
        ('view', 'View'),
        ('stage_start', 'Stage Started'),
        ('stage_complete', 'Stage Completed'),
        ('stage_reopen', 'Stage Reopened'),
        ('stage_assign', 'Stage Assigned'),
        ('rendering_push', 'Rendering Pushed to Client Approval'),
        ('internal_approval', 'Internal Approval'),
        ('client_send', 'Sent to Client'),
        ('client_decision', 'Client Decision'),
        ('transmittal_create', 'Transmittal Created'),
        ('transmittal_send', 'Transmittal Sent'),
        ('transmittal_cancel', 'Transmittal Cancelled'),
        ('portal_token_create', 'Client Access Token Created'),
        ('portal_token_revoke', 'Client Access Token Revoked'),
    ]

    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='audit_logs')
    action = models.CharField(max_length=50, choices=ACTION_CHOICES)
    model_name = models.CharField(max_length=100)
    object_id = models.CharField(max_length=100)
    object_name = models.CharField(max_length=255, blank=True, null=True, help_text="Human-readable name of the object (e.g., project name, room name)")
    object_reference = models.CharField(max_length=255, blank=True, null=True, help_text="Reference identifier (e.g., transmittal number, rendering version)")
    changes = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['-created_at'], name='audit_logs_created_5a6e2b_idx'),
            models.Index(fields=['action'], name='audit_logs_action_7c1d0f_idx'),
            models.Index(fields=['model_name'], name='audit_logs_model_n_3e9a41_idx'),
            models.Index(fields=['object_reference'], name='audit_logs_object__b82c6d_idx'),
        ]
