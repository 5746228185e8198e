from rest_framework import serializers
from studio.core.serializers import UserSummarySerializer
from .models import Client, Project, Room, Stage, StageActivity, Notification, DesignSection
from .workflow import phase_sequence_info, room_progress, phase_sort_key


class ClientSerializer(serializers.ModelSerializer):
    project_count = serializers.SerializerMethodField()

    class Meta:
        model = Client
        fields = ['id', 'name', 'email', 'phone', 'company', 'project_count', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def get_project_count(self, obj):
        return obj.projects.count()


class StageSerializer(serializers.ModelSerializer):
    type_display = serializers.CharField(source='get_type_display', read_only=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    assigned_to = UserSummarySerializer(read_only=True)
    completed_by = UserSummarySerializer(read_only=True)
    phase = serializers.SerializerMethodField()

    class Meta:
        model = Stage
        fields = ['id', 'room', 'type', 'type_display', 'status', 'status_display', 'assigned_to',
                  'due_date', 'started_at', 'completed_at', 'completed_by', 'phase', 'created_at', 'updated_at']
        read_only_fields = ['room', 'type', 'status', 'started_at', 'completed_at', 'created_at', 'updated_at']

    def get_phase(self, obj):
        return phase_sequence_info(obj.type)


class RoomSerializer(serializers.ModelSerializer):
    display_name = serializers.CharField(read_only=True)
    stages = serializers.SerializerMethodField()
    progress = serializers.SerializerMethodField()

    class Meta:
        model = Room
        fields = ['id', 'project', 'type', 'name', 'display_name', 'order', 'status', 'current_stage',
                  'progress', 'progress_ffe', 'start_date', 'due_date', 'stages', 'created_at', 'updated_at']
        read_only_fields = ['project', 'status', 'current_stage', 'progress_ffe', 'created_at', 'updated_at']

    def get_stages(self, obj):
        stages = sorted(obj.stages.all(), key=phase_sort_key)
        return StageSerializer(stages, many=True).data

    def get_progress(self, obj):
        return room_progress(obj.stages.all())


class RoomSummarySerializer(serializers.ModelSerializer):
    display_name = serializers.CharField(read_only=True)
    project_name = serializers.CharField(source='project.name', read_only=True)

    class Meta:
        model = Room
        fields = ['id', 'project', 'project_name', 'type', 'name', 'display_name', 'status', 'current_stage']


class ProjectListSerializer(serializers.ModelSerializer):
    client_name = serializers.CharField(source='client.name', read_only=True)
    room_count = serializers.SerializerMethodField()

    class Meta:
        model = Project
        fields = ['id', 'name', 'type', 'status', 'client', 'client_name', 'due_date', 'room_count',
                  'created_at', 'updated_at']

    def get_room_count(self, obj):
        return obj.rooms.count()


class ProjectSerializer(serializers.ModelSerializer):
    client_detail = ClientSerializer(source='client', read_only=True)
    created_by = UserSummarySerializer(read_only=True)
    rooms = RoomSerializer(many=True, read_only=True)
    progress = serializers.SerializerMethodField()

    class Meta:
        model = Project
        fields = ['id', 'name', 'description', 'type', 'status', 'client', 'client_detail', 'address',
                  'budget', 'due_date', 'created_by', 'rooms', 'progress', 'created_at', 'updated_at']
        read_only_fields = ['created_by', 'created_at', 'updated_at']

    def get_progress(self, obj):
        rooms = list(obj.rooms.all())
        if not rooms:
            return 0
        return round(sum(room_progress(room.stages.all()) for room in rooms) / len(rooms))


class StageActivitySerializer(serializers.ModelSerializer):
    user = UserSummarySerializer(read_only=True)

    class Meta:
        model = StageActivity
        fields = ['id', 'stage', 'type', 'message', 'user', 'created_at']


class NotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Notification
        fields = ['id', 'type', 'title', 'message', 'stage', 'is_read', 'created_at']
        read_only_fields = fields


class DesignSectionSerializer(serializers.ModelSerializer):
    class Meta:
        model = DesignSection
        fields = ['id', 'stage', 'type', 'content', 'completed', 'completed_at', 'created_at', 'updated_at']
        read_only_fields = ['stage', 'completed_at', 'created_at', 'updated_at']
