from django.contrib.auth import get_user_model
from rest_framework import serializers
from studio.core.serializers import UserSummarySerializer
from .models import Task

User = get_user_model()


class TaskSerializer(serializers.ModelSerializer):
    assignee_detail = UserSummarySerializer(source='assignee', read_only=True)
    created_by = UserSummarySerializer(read_only=True)
    project_name = serializers.CharField(source='project.name', read_only=True, default=None)
    room_name = serializers.SerializerMethodField()
    is_overdue = serializers.BooleanField(read_only=True)
    assignee = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.filter(is_active=True), required=False, allow_null=True
    )

    class Meta:
        model = Task
        fields = ['id', 'title', 'description', 'status', 'priority', 'project', 'project_name', 'room',
                  'room_name', 'stage', 'assignee', 'assignee_detail', 'created_by', 'due_date', 'started_at',
                  'completed_at', 'order', 'is_overdue', 'created_at', 'updated_at']
        read_only_fields = ['created_by', 'started_at', 'completed_at', 'created_at', 'updated_at']

    def get_room_name(self, obj):
        return obj.room.display_name if obj.room_id else None

    def validate(self, attrs):
        instance = self.instance
        project = attrs.get('project', instance.project if instance else None)
        room = attrs.get('room', instance.room if instance else None)
        stage = attrs.get('stage', instance.stage if instance else None)

        if stage is not None:
            if room is None:
                room = stage.room
                attrs['room'] = room
            elif stage.room_id != room.id:
                raise serializers.ValidationError({'stage': 'Stage does not belong to the selected room.'})
        if room is not None:
            if project is None:
                project = room.project
                attrs['project'] = project
            elif room.project_id != project.id:
                raise serializers.ValidationError({'room': 'Room does not belong to the selected project.'})
        return attrs
