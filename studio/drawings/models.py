from django.conf import settings
from django.db import models
from studio.projects.models import Project, Room, Stage


DISCIPLINE_CHOICES = [
    ('ARCHITECTURAL', 'Architectural'),
    ('ELECTRICAL', 'Electrical'),
    ('RCP', 'Reflected Ceiling Plan'),
    ('PLUMBING', 'Plumbing'),
    ('MECHANICAL', 'Mechanical'),
    ('INTERIOR_DESIGN', 'Interior Design'),
]

# Short labels used on drawing registers and transmittals
DISCIPLINE_SHORT_LABELS = {
    'ARCHITECTURAL': 'ARCH',
    'ELECTRICAL': 'ELEC',
    'RCP': 'RCP',
    'PLUMBING': 'PLMB',
    'MECHANICAL': 'MECH',
    'INTERIOR_DESIGN': 'INT',
}

DISCIPLINE_ORDER = [code for code, _ in DISCIPLINE_CHOICES]


class DrawingChecklistItem(models.Model):
    """Deliverable tracked inside a room's DRAWINGS stage"""
    TYPE_CHOICES = [
        ('LIGHTING', 'Lighting'),
        ('ELEVATION', 'Elevation'),
        ('MILLWORK', 'Millwork'),
        ('FLOORPLAN', 'Floor Plan'),
        ('CUSTOM', 'Custom'),
    ]

    stage = models.ForeignKey(Stage, on_delete=models.CASCADE, related_name='drawing_checklist_items')
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='CUSTOM')
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    completed = models.BooleanField(default=False)
    completed_at = models.DateTimeField(null=True, blank=True)
    completed_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='completed_drawing_items')
    order = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'drawing_checklist_items'
        ordering = ['order', 'id']


class ProjectDrawing(models.Model):
    """A drawing in the project register"""
    TYPE_CHOICES = [
        ('FLOOR_PLAN', 'Floor Plan'),
        ('REFLECTED_CEILING', 'Reflected Ceiling'),
        ('ELEVATION', 'Elevation'),
        ('DETAIL', 'Detail'),
        ('SECTION', 'Section'),
        ('TITLE_BLOCK', 'Title Block'),
        ('XREF', 'XREF'),
        ('SCHEDULE', 'Schedule'),
        ('OTHER', 'Other'),
    ]

    STATUS_CHOICES = [
        ('ACTIVE', 'Active'),
        ('DRAFT', 'Draft'),
        ('SUPERSEDED', 'Superseded'),
        ('ARCHIVED', 'Archived'),
    ]

    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name='drawings')
    room = models.ForeignKey(Room, on_delete=models.SET_NULL, null=True, blank=True, related_name='drawings')
    drawing_number = models.CharField(max_length=50, blank=True)
    title = models.CharField(max_length=255)
    discipline = models.CharField(max_length=20, choices=DISCIPLINE_CHOICES, blank=True)
    drawing_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='OTHER')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='ACTIVE')
    current_revision = models.PositiveIntegerField(default=0)
    file_path = models.CharField(max_length=1000, blank=True)
    description = models.TextField(blank=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name='created_drawings')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.drawing_number} {self.title}".strip()

    @property
    def discipline_short(self):
        return DISCIPLINE_SHORT_LABELS.get(self.discipline, '')

    class Meta:
        db_table = 'project_drawings'
        ordering = ['discipline', 'drawing_number', 'id']
        constraints = [
            models.UniqueConstraint(
                fields=['project', 'drawing_number'],
                condition=~models.Q(drawing_number=''),
                name='unique_drawing_number_per_project',
            ),
        ]
        indexes = [
            models.Index(fields=['project', 'discipline'], name='project_dra_project_0c4d9e_idx'),
        ]


class DrawingRevision(models.Model):
    drawing = models.ForeignKey(ProjectDrawing, on_delete=models.CASCADE, related_name='revisions')
    revision_number = models.PositiveIntegerField()
    description = models.TextField(blank=True)
    issued_date = models.DateField(null=True, blank=True)
    file_path = models.CharField(max_length=1000, blank=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name='drawing_revisions')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.drawing} rev {self.revision_number}"

    class Meta:
        db_table = 'drawing_revisions'
        ordering = ['drawing', '-revision_number']
        constraints = [
            models.UniqueConstraint(fields=['drawing', 'revision_number'], name='unique_revision_per_drawing'),
        ]


class Transmittal(models.Model):
    """Formal record of drawings issued to one recipient"""
    RECIPIENT_TYPE_CHOICES = [
        ('CLIENT', 'Client'),
        ('CONTRACTOR', 'Contractor'),
        ('SUBCONTRACTOR', 'Subcontractor'),
        ('CONSULTANT', 'Consultant'),
        ('SUPPLIER', 'Supplier'),
        ('OTHER', 'Other'),
    ]

    METHOD_CHOICES = [
        ('EMAIL', 'Email'),
        ('HAND_DELIVERY', 'Hand Delivery'),
        ('COURIER', 'Courier'),
        ('FTP', 'FTP'),
        ('OTHER', 'Other'),
    ]

    STATUS_CHOICES = [
        ('DRAFT', 'Draft'),
        ('SENT', 'Sent'),
        ('ACKNOWLEDGED', 'Acknowledged'),
        ('CANCELLED', 'Cancelled'),
    ]

    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name='transmittals')
    transmittal_number = models.CharField(max_length=20)
    subject = models.CharField(max_length=255, blank=True)
    recipient_name = models.CharField(max_length=255)
    recipient_email = models.EmailField(blank=True)
    recipient_company = models.CharField(max_length=255, blank=True)
    recipient_type = models.CharField(max_length=20, choices=RECIPIENT_TYPE_CHOICES, default='OTHER')
    method = models.CharField(max_length=20, choices=METHOD_CHOICES, default='EMAIL')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='DRAFT')
    notes = models.TextField(blank=True)
    sent_at = models.DateTimeField(null=True, blank=True)
    sent_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='sent_transmittals')
    acknowledged_at = models.DateTimeField(null=True, blank=True)
    email_message_id = models.CharField(max_length=255, blank=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name='created_transmittals')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.transmittal_number} - {self.recipient_name}"

    @property
    def recipient_key(self):
        """Identity of the recipient across transmittals"""
        if self.recipient_email:
            return self.recipient_email.strip().lower()
        return f"name:{self.recipient_name.strip().lower()}"

    class Meta:
        db_table = 'transmittals'
        ordering = ['-created_at', '-id']
        constraints = [
            models.UniqueConstraint(fields=['project', 'transmittal_number'], name='unique_transmittal_number_per_project'),
        ]
        indexes = [
            models.Index(fields=['project', 'status'], name='transmittal_project_7e21b3_idx'),
        ]


class TransmittalItem(models.Model):
    PURPOSE_CHOICES = [
        ('FOR_INFORMATION', 'For Information'),
        ('FOR_APPROVAL', 'For Approval'),
        ('FOR_REVIEW', 'For Review'),
        ('FOR_CONSTRUCTION', 'For Construction'),
        ('FOR_PRICING', 'For Pricing'),
    ]

    transmittal = models.ForeignKey(Transmittal, on_delete=models.CASCADE, related_name='items')
    drawing = models.ForeignKey(ProjectDrawing, on_delete=models.CASCADE, related_name='transmittal_items')
    revision = models.ForeignKey(DrawingRevision, on_delete=models.SET_NULL, null=True, blank=True, related_name='transmittal_items')
    revision_number = models.PositiveIntegerField(null=True, blank=True)
    purpose = models.CharField(max_length=20, choices=PURPOSE_CHOICES, default='FOR_INFORMATION')
    notes = models.TextField(blank=True)

    class Meta:
        db_table = 'transmittal_items'
        ordering = ['id']
