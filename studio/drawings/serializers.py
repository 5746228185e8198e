from rest_framework import serializers
from studio.core.serializers import UserSummarySerializer
from .models import DrawingChecklistItem, ProjectDrawing, DrawingRevision, Transmittal, TransmittalItem


class DrawingChecklistItemSerializer(serializers.ModelSerializer):
    completed_by = UserSummarySerializer(read_only=True)

    class Meta:
        model = DrawingChecklistItem
        fields = ['id', 'stage', 'type', 'name', 'description', 'completed', 'completed_at', 'completed_by',
                  'order', 'created_at', 'updated_at']
        read_only_fields = ['stage', 'completed', 'completed_at', 'completed_by', 'created_at', 'updated_at']


class DrawingRevisionSerializer(serializers.ModelSerializer):
    created_by = UserSummarySerializer(read_only=True)
    revision_number = serializers.IntegerField(required=False, min_value=0)

    class Meta:
        model = DrawingRevision
        fields = ['id', 'drawing', 'revision_number', 'description', 'issued_date', 'file_path',
                  'created_by', 'created_at']
        read_only_fields = ['drawing', 'created_by', 'created_at']


class ProjectDrawingSerializer(serializers.ModelSerializer):
    project_name = serializers.CharField(source='project.name', read_only=True)
    discipline_short = serializers.CharField(read_only=True)
    room_name = serializers.SerializerMethodField()

    class Meta:
        model = ProjectDrawing
        fields = ['id', 'project', 'project_name', 'room', 'room_name', 'drawing_number', 'title', 'discipline',
                  'discipline_short', 'drawing_type', 'status', 'current_revision', 'file_path', 'description',
                  'created_at', 'updated_at']
        read_only_fields = ['project', 'current_revision', 'created_at', 'updated_at']

    def get_room_name(self, obj):
        return obj.room.display_name if obj.room_id else None

    def validate(self, attrs):
        project = self.context.get('project') or (self.instance.project if self.instance else None)
        drawing_number = attrs.get('drawing_number')
        if project and drawing_number:
            duplicates = ProjectDrawing.objects.filter(project=project, drawing_number=drawing_number)
            if self.instance:
                duplicates = duplicates.exclude(pk=self.instance.pk)
            if duplicates.exists():
                raise serializers.ValidationError({'drawing_number': 'This drawing number is already used in the project.'})
        room = attrs.get('room')
        if project and room and room.project_id != project.id:
            raise serializers.ValidationError({'room': 'Room does not belong to this project.'})
        return attrs


class ProjectDrawingDetailSerializer(ProjectDrawingSerializer):
    revisions = DrawingRevisionSerializer(many=True, read_only=True)

    class Meta(ProjectDrawingSerializer.Meta):
        fields = ProjectDrawingSerializer.Meta.fields + ['revisions']


class TransmittalItemSerializer(serializers.ModelSerializer):
    drawing_number = serializers.CharField(source='drawing.drawing_number', read_only=True)
    drawing_title = serializers.CharField(source='drawing.title', read_only=True)
    discipline = serializers.CharField(source='drawing.discipline', read_only=True)

    class Meta:
        model = TransmittalItem
        fields = ['id', 'drawing', 'drawing_number', 'drawing_title', 'discipline', 'revision', 'revision_number',
                  'purpose', 'notes']


class TransmittalListSerializer(serializers.ModelSerializer):
    project_name = serializers.CharField(source='project.name', read_only=True)
    item_count = serializers.SerializerMethodField()

    class Meta:
        model = Transmittal
        fields = ['id', 'project', 'project_name', 'transmittal_number', 'subject', 'recipient_name',
                  'recipient_email', 'recipient_company', 'recipient_type', 'method', 'status', 'sent_at',
                  'item_count', 'created_at']

    def get_item_count(self, obj):
        count = getattr(obj, 'item_count', None)
        if count is not None:
            return count
        return obj.items.count()


class TransmittalSerializer(serializers.ModelSerializer):
    project_name = serializers.CharField(source='project.name', read_only=True)
    items = TransmittalItemSerializer(many=True, read_only=True)
    sent_by = UserSummarySerializer(read_only=True)
    created_by = UserSummarySerializer(read_only=True)

    class Meta:
        model = Transmittal
        fields = ['id', 'project', 'project_name', 'transmittal_number', 'subject', 'recipient_name',
                  'recipient_email', 'recipient_company', 'recipient_type', 'method', 'status', 'notes',
                  'sent_at', 'sent_by', 'acknowledged_at', 'email_message_id', 'created_by', 'items',
                  'created_at', 'updated_at']
        read_only_fields = ['project', 'transmittal_number', 'status', 'sent_at', 'sent_by', 'acknowledged_at',
                            'email_message_id', 'created_by', 'created_at', 'updated_at']


class TransmittalRecipientSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    email = serializers.EmailField(required=False, allow_blank=True, default='')
    company = serializers.CharField(required=False, allow_blank=True, default='')
    type = serializers.ChoiceField(choices=Transmittal.RECIPIENT_TYPE_CHOICES, required=False, default='OTHER')


class TransmittalItemInputSerializer(serializers.Serializer):
    drawing_id = serializers.IntegerField()
    revision_id = serializers.IntegerField(required=False, allow_null=True)
    purpose = serializers.ChoiceField(choices=TransmittalItem.PURPOSE_CHOICES, required=False, default='FOR_INFORMATION')
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class TransmittalCreateSerializer(serializers.Serializer):
    recipients = TransmittalRecipientSerializer(many=True)
    items = TransmittalItemInputSerializer(many=True)
    subject = serializers.CharField(required=False, allow_blank=True, default='', max_length=255)
    notes = serializers.CharField(required=False, allow_blank=True, default='')
    method = serializers.ChoiceField(choices=Transmittal.METHOD_CHOICES, required=False, default='EMAIL')
    send_immediately = serializers.BooleanField(required=False, default=False)

    def validate_recipients(self, value):
        if not value:
            raise serializers.ValidationError('At least one recipient is required.')
        return value

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError('At least one drawing is required.')
        return value
