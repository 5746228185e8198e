from django.conf import settings
from django.db import models


STAGE_TYPE_CHOICES = [
    ('DESIGN_CONCEPT', 'Design Concept'),
    ('THREE_D', '3D Rendering'),
    ('CLIENT_APPROVAL', 'Client Approval'),
    ('DRAWINGS', 'Drawings'),
    ('FFE', 'FFE (Furniture, Fixtures & Equipment)'),
]

STAGE_STATUS_CHOICES = [
    ('NOT_STARTED', 'Not Started'),
    ('IN_PROGRESS', 'In Progress'),
    ('COMPLETED', 'Completed'),
    ('ON_HOLD', 'On Hold'),
    ('NEEDS_ATTENTION', 'Needs Attention'),
    ('PENDING_APPROVAL', 'Pending Approval'),
    ('REVISION_REQUESTED', 'Revision Requested'),
    ('NOT_APPLICABLE', 'Not Applicable'),
]


class Client(models.Model):
    """Studio client who owns one or more projects"""
    name = models.CharField(max_length=255)
    email = models.EmailField(blank=True, null=True)
    phone = models.CharField(max_length=20, blank=True, null=True)
    company = models.CharField(max_length=255, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'clients'
        ordering = ['name']


class Project(models.Model):
    """Interior design project"""
    TYPE_CHOICES = [
        ('RESIDENTIAL', 'Residential'),
        ('COMMERCIAL', 'Commercial'),
        ('HOSPITALITY', 'Hospitality'),
    ]

    STATUS_CHOICES = [
        ('DRAFT', 'Draft'),
        ('IN_PROGRESS', 'In Progress'),
        ('ON_HOLD', 'On Hold'),
        ('URGENT', 'Urgent'),
        ('CANCELLED', 'Cancelled'),
        ('COMPLETED', 'Completed'),
    ]

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='RESIDENTIAL')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='DRAFT')
    client = models.ForeignKey(Client, on_delete=models.PROTECT, related_name='projects')
    address = models.CharField(max_length=500, blank=True)
    budget = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    due_date = models.DateField(null=True, blank=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name='created_projects')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'projects'
        ordering = ['-updated_at']
        indexes = [
            models.Index(fields=['status'], name='projects_status_1b2f7e_idx'),
            models.Index(fields=['client', 'status'], name='projects_client__4a8d30_idx'),
        ]


class Room(models.Model):
    """A room inside a project; each room runs its own stage workflow"""
    TYPE_CHOICES = [
        ('ENTRANCE', 'Entrance'),
        ('FOYER', 'Foyer'),
        ('LIVING_ROOM', 'Living Room'),
        ('DINING_ROOM', 'Dining Room'),
        ('KITCHEN', 'Kitchen'),
        ('FAMILY_ROOM', 'Family Room'),
        ('MASTER_BEDROOM', 'Master Bedroom'),
        ('BEDROOM', 'Bedroom'),
        ('GUEST_BEDROOM', 'Guest Bedroom'),
        ('GIRLS_ROOM', "Girls' Room"),
        ('BOYS_ROOM', "Boys' Room"),
        ('MASTER_BATHROOM', 'Master Bathroom'),
        ('BATHROOM', 'Bathroom'),
        ('POWDER_ROOM', 'Powder Room'),
        ('LAUNDRY_ROOM', 'Laundry Room'),
        ('OFFICE', 'Office'),
        ('PLAYROOM', 'Playroom'),
        ('STAIRCASE', 'Staircase'),
        ('OTHER', 'Other'),
    ]

    STATUS_CHOICES = [
        ('NOT_STARTED', 'Not Started'),
        ('IN_PROGRESS', 'In Progress'),
        ('ON_HOLD', 'On Hold'),
        ('COMPLETED', 'Completed'),
        ('NEEDS_ATTENTION', 'Needs Attention'),
    ]

    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name='rooms')
    type = models.CharField(max_length=30, choices=TYPE_CHOICES, default='OTHER')
    name = models.CharField(max_length=255, blank=True)
    order = models.PositiveIntegerField(default=0)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='NOT_STARTED')
    current_stage = models.CharField(max_length=20, choices=STAGE_TYPE_CHOICES, null=True, blank=True)
    progress_ffe = models.PositiveIntegerField(default=0, help_text="FFE completion percentage (0-100)")
    start_date = models.DateField(null=True, blank=True)
    due_date = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.project.name} - {self.display_name}"

    @property
    def display_name(self):
        return self.name or self.get_type_display()

    class Meta:
        db_table = 'rooms'
        ordering = ['order', 'id']
        indexes = [
            models.Index(fields=['project', 'order'], name='rooms_project_9c3e51_idx'),
        ]


class Stage(models.Model):
    """One workflow phase of a room"""
    room = models.ForeignKey(Room, on_delete=models.CASCADE, related_name='stages')
    type = models.CharField(max_length=20, choices=STAGE_TYPE_CHOICES)
    status = models.CharField(max_length=20, choices=STAGE_STATUS_CHOICES, default='NOT_STARTED')
    assigned_to = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='assigned_stages')
    due_date = models.DateField(null=True, blank=True)
    started_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    completed_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='completed_stages')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.room} - {self.get_type_display()}"

    class Meta:
        db_table = 'stages'
        ordering = ['room', 'id']
        constraints = [
            models.UniqueConstraint(fields=['room', 'type'], name='unique_stage_type_per_room'),
        ]
        indexes = [
            models.Index(fields=['assigned_to', 'status'], name='stages_assigne_6e0b2d_idx'),
        ]


class StageActivity(models.Model):
    """Timeline entry for a stage"""
    TYPE_CHOICES = [
        ('STATUS_CHANGE', 'Status Change'),
        ('ASSIGNMENT', 'Assignment'),
        ('RENDERING', 'Rendering'),
        ('CLIENT_APPROVAL', 'Client Approval'),
        ('CHECKLIST', 'Checklist'),
        ('FFE', 'FFE'),
        ('NOTE', 'Note'),
    ]

    stage = models.ForeignKey(Stage, on_delete=models.CASCADE, related_name='activities')
    type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    message = models.TextField()
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='stage_activities')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'stage_activities'
        ordering = ['-created_at', '-id']


class Notification(models.Model):
    """In-app notification for a team member"""
    TYPE_CHOICES = [
        ('STAGE_ASSIGNED', 'Stage Assigned'),
        ('STAGE_COMPLETED', 'Stage Completed'),
        ('PHASE_READY', 'Phase Ready'),
        ('REVISION_REQUESTED', 'Revision Requested'),
        ('PROJECT_UPDATE', 'Project Update'),
    ]

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='notifications')
    type = models.CharField(max_length=30, choices=TYPE_CHOICES)
    title = models.CharField(max_length=255)
    message = models.TextField()
    stage = models.ForeignKey(Stage, on_delete=models.CASCADE, null=True, blank=True, related_name='notifications')
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.title

    class Meta:
        db_table = 'notifications'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['user', 'is_read'], name='notificatio_user_id_8f5a2c_idx'),
        ]


class DesignSection(models.Model):
    """Design concept content block for a DESIGN_CONCEPT stage"""
    TYPE_CHOICES = [
        ('GENERAL', 'General'),
        ('WALL_COVERING', 'Wall Covering'),
        ('CEILING', 'Ceiling'),
        ('FLOOR', 'Floor'),
        ('LIGHTING', 'Lighting'),
        ('FURNITURE', 'Furniture'),
        ('CUSTOM', 'Custom'),
    ]

    REQUIRED_TYPES = ['GENERAL', 'WALL_COVERING', 'CEILING', 'FLOOR']

    stage = models.ForeignKey(Stage, on_delete=models.CASCADE, related_name='design_sections')
    type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    content = models.TextField(blank=True)
    completed = models.BooleanField(default=False)
    completed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'design_sections'
        ordering = ['stage', 'id']
        constraints = [
            models.UniqueConstraint(fields=['stage', 'type'], name='unique_design_section_type_per_stage'),
        ]
