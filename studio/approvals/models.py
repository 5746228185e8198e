import uuid
from django.conf import settings
from django.db import models
from studio.projects.models import Room, Stage


class RenderingVersion(models.Model):
    """A numbered set of 3D renderings for a room"""
    STATUS_CHOICES = [
        ('IN_PROGRESS', 'In Progress'),
        ('COMPLETED', 'Completed'),
        ('PUSHED_TO_CLIENT', 'Pushed to Client'),
    ]

    room = models.ForeignKey(Room, on_delete=models.CASCADE, related_name='rendering_versions')
    stage = models.ForeignKey(Stage, on_delete=models.CASCADE, related_name='rendering_versions')
    version = models.CharField(max_length=20)
    custom_name = models.CharField(max_length=255, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='IN_PROGRESS')
    completed_at = models.DateTimeField(null=True, blank=True)
    pushed_to_client_at = models.DateTimeField(null=True, blank=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name='rendering_versions')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.room} {self.version}"

    @property
    def label(self):
        return f"{self.version} - {self.custom_name}" if self.custom_name else self.version

    class Meta:
        db_table = 'rendering_versions'
        ordering = ['room', 'created_at', 'id']
        constraints = [
            models.UniqueConstraint(fields=['room', 'version'], name='unique_rendering_version_per_room'),
        ]


class RenderingAsset(models.Model):
    """A rendering image or document referenced by URL"""
    TYPE_CHOICES = [
        ('IMAGE', 'Image'),
        ('RENDER', 'Render'),
        ('PDF', 'PDF'),
        ('DOCUMENT', 'Document'),
        ('LINK', 'Link'),
        ('OTHER', 'Other'),
    ]

    rendering_version = models.ForeignKey(RenderingVersion, on_delete=models.CASCADE, related_name='assets')
    title = models.CharField(max_length=255)
    url = models.URLField(max_length=1000)
    asset_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='IMAGE')
    description = models.TextField(blank=True)
    order = models.PositiveIntegerField(default=0)
    uploaded_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='rendering_assets')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.title

    class Meta:
        db_table = 'rendering_assets'
        ordering = ['order', 'id']


class RenderingNote(models.Model):
    rendering_version = models.ForeignKey(RenderingVersion, on_delete=models.CASCADE, related_name='notes')
    content = models.TextField()
    author = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='rendering_notes')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'rendering_notes'
        ordering = ['-created_at', '-id']


class ClientApprovalVersion(models.Model):
    """A rendering version going through internal and client approval"""
    STATUS_CHOICES = [
        ('DRAFT', 'Draft'),
        ('PENDING_INTERNAL_APPROVAL', 'Pending Internal Approval'),
        ('READY_FOR_CLIENT', 'Ready for Client'),
        ('SENT_TO_CLIENT', 'Sent to Client'),
        ('CLIENT_REVIEWING', 'Client Reviewing'),
        ('FOLLOW_UP_REQUIRED', 'Follow-up Required'),
        ('CLIENT_APPROVED', 'Client Approved'),
        ('REVISION_REQUESTED', 'Revision Requested'),
    ]

    DECISION_CHOICES = [
        ('PENDING', 'Pending'),
        ('APPROVED', 'Approved'),
        ('REVISION_REQUESTED', 'Revision Requested'),
    ]

    stage = models.ForeignKey(Stage, on_delete=models.CASCADE, related_name='client_approval_versions')
    rendering_version = models.ForeignKey(RenderingVersion, on_delete=models.SET_NULL, null=True, blank=True, related_name='client_approval_versions')
    version = models.CharField(max_length=20)
    status = models.CharField(max_length=30, choices=STATUS_CHOICES, default='DRAFT')
    approved_internally = models.BooleanField(default=False)
    internal_approved_at = models.DateTimeField(null=True, blank=True)
    internal_approved_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='internal_approvals')
    sent_to_client_at = models.DateTimeField(null=True, blank=True)
    sent_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='client_approval_sends')
    email_opened_at = models.DateTimeField(null=True, blank=True)
    follow_up_completed_at = models.DateTimeField(null=True, blank=True)
    follow_up_notes = models.TextField(blank=True)
    client_decision = models.CharField(max_length=30, choices=DECISION_CHOICES, default='PENDING')
    client_decided_at = models.DateTimeField(null=True, blank=True)
    client_message = models.TextField(blank=True)
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name='client_approval_versions')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.stage.room} {self.version}"

    class Meta:
        db_table = 'client_approval_versions'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['stage', '-created_at'], name='client_appr_stage_i_2d7c91_idx'),
            models.Index(fields=['status'], name='client_appr_status_58e0af_idx'),
        ]


class ClientApprovalAsset(models.Model):
    """Rendering asset attached to an approval version"""
    version = models.ForeignKey(ClientApprovalVersion, on_delete=models.CASCADE, related_name='assets')
    asset = models.ForeignKey(RenderingAsset, on_delete=models.CASCADE, related_name='client_approval_assets')
    include_in_email = models.BooleanField(default=True)
    display_order = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = 'client_approval_assets'
        ordering = ['display_order', 'id']
        constraints = [
            models.UniqueConstraint(fields=['version', 'asset'], name='unique_asset_per_approval_version'),
        ]


class ClientApprovalActivity(models.Model):
    TYPE_CHOICES = [
        ('PUSHED', 'Pushed to Client Approval'),
        ('INTERNAL_APPROVED', 'Approved Internally'),
        ('INTERNAL_REJECTED', 'Rejected Internally'),
        ('SENT_TO_CLIENT', 'Sent to Client'),
        ('MARKED_AS_SENT', 'Marked as Sent'),
        ('EMAIL_OPENED', 'Email Opened'),
        ('FOLLOW_UP_FLAGGED', 'Follow-up Flagged'),
        ('FOLLOW_UP_COMPLETED', 'Follow-up Completed'),
        ('CLIENT_APPROVED', 'Client Approved'),
        ('REVISION_REQUESTED', 'Revision Requested'),
    ]

    version = models.ForeignKey(ClientApprovalVersion, on_delete=models.CASCADE, related_name='activities')
    type = models.CharField(max_length=30, choices=TYPE_CHOICES)
    message = models.TextField()
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='client_approval_activities')
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'client_approval_activities'
        ordering = ['-created_at', '-id']


class ClientApprovalEmailLog(models.Model):
    version = models.ForeignKey(ClientApprovalVersion, on_delete=models.CASCADE, related_name='email_logs')
    to = models.EmailField()
    subject = models.CharField(max_length=500)
    html = models.TextField()
    tracking_id = models.UUIDField(default=uuid.uuid4, unique=True, editable=False)
    sent_at = models.DateTimeField(auto_now_add=True)
    opened_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'client_approval_email_logs'
        ordering = ['-sent_at', '-id']


class ClientDecision(models.Model):
    """Record of a client decision on an approval version"""
    version = models.ForeignKey(ClientApprovalVersion, on_delete=models.CASCADE, related_name='decisions')
    decision = models.CharField(max_length=30, choices=ClientApprovalVersion.DECISION_CHOICES)
    comments = models.TextField(blank=True)
    decided_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='recorded_client_decisions')
    decided_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'client_decisions'
        ordering = ['-decided_at', '-id']
