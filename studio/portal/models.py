import secrets

from django.conf import settings
from django.db import models
from django.utils import timezone
from studio.projects.models import Project


def generate_token():
    return secrets.token_urlsafe(32)


class ClientAccessToken(models.Model):
    """Shareable link giving a client read-only access to project progress"""
    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name='client_access_tokens')
    token = models.CharField(max_length=64, unique=True, default=generate_token)
    name = models.CharField(max_length=255, blank=True)
    active = models.BooleanField(default=True)
    expires_at = models.DateTimeField(null=True, blank=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name='client_access_tokens')
    last_accessed_at = models.DateTimeField(null=True, blank=True)
    last_accessed_ip = models.GenericIPAddressField(null=True, blank=True)
    access_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.project.name} - {self.name or 'Client link'}"

    @property
    def is_expired(self):
        return self.expires_at is not None and self.expires_at <= timezone.now()

    class Meta:
        db_table = 'client_access_tokens'
        ordering = ['-created_at', '-id']


class ClientAccessLog(models.Model):
    ACTION_CHOICES = [
        ('VIEW_PROGRESS', 'View Progress'),
        ('VIEW_ASSET', 'View Asset'),
    ]

    token = models.ForeignKey(ClientAccessToken, on_delete=models.CASCADE, related_name='access_logs')
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(blank=True)
    action = models.CharField(max_length=20, choices=ACTION_CHOICES, default='VIEW_PROGRESS')
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'client_access_logs'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['token', '-created_at'], name='client_acce_token_i_9b7e4d_idx'),
        ]
