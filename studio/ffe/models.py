from django.conf import settings
from django.db import models
from studio.projects.models import Room


class RoomFFESection(models.Model):
    """Group of FFE items in a room (Lighting, Furniture, ...)"""
    room = models.ForeignKey(Room, on_delete=models.CASCADE, related_name='ffe_sections')
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    order = models.PositiveIntegerField(default=0)
    is_expanded = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.room} - {self.name}"

    class Meta:
        db_table = 'room_ffe_sections'
        ordering = ['order', 'id']


class RoomFFEItem(models.Model):
    STATE_CHOICES = [
        ('PENDING', 'Pending'),
        ('UNDECIDED', 'Undecided'),
        ('SELECTED', 'Selected'),
        ('CONFIRMED', 'Confirmed'),
        ('NOT_NEEDED', 'Not Needed'),
        ('COMPLETED', 'Completed'),
    ]

    VISIBILITY_CHOICES = [
        ('VISIBLE', 'Visible'),
        ('HIDDEN', 'Hidden'),
    ]

    room = models.ForeignKey(Room, on_delete=models.CASCADE, related_name='ffe_items')
    section = models.ForeignKey(RoomFFESection, on_delete=models.CASCADE, related_name='items')
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    state = models.CharField(max_length=20, choices=STATE_CHOICES, default='PENDING')
    visibility = models.CharField(max_length=10, choices=VISIBILITY_CHOICES, default='VISIBLE')
    is_required = models.BooleanField(default=False)
    quantity = models.PositiveIntegerField(default=1)
    notes = models.TextField(blank=True)
    supplier_link = models.URLField(max_length=1000, blank=True)
    unit_cost = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    order = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    @property
    def total_cost(self):
        if self.unit_cost is None:
            return None
        return self.unit_cost * self.quantity

    class Meta:
        db_table = 'room_ffe_items'
        ordering = ['section__order', 'order', 'id']
        indexes = [
            models.Index(fields=['room', 'state'], name='room_ffe_it_room_id_5f3a8c_idx'),
        ]


class FFEChangeLog(models.Model):
    """History of changes to an FFE item"""
    item = models.ForeignKey(RoomFFEItem, on_delete=models.CASCADE, related_name='change_logs')
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='ffe_changes')
    field = models.CharField(max_length=50)
    old_value = models.TextField(blank=True, null=True)
    new_value = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.item} {self.field}: {self.old_value} -> {self.new_value}"

    class Meta:
        db_table = 'ffe_change_logs'
        ordering = ['-created_at', '-id']
