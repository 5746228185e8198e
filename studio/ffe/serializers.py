from rest_framework import serializers
from studio.core.serializers import UserSummarySerializer
from .models import RoomFFESection, RoomFFEItem, FFEChangeLog


class RoomFFEItemSerializer(serializers.ModelSerializer):
    section_name = serializers.CharField(source='section.name', read_only=True)
    total_cost = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = RoomFFEItem
        fields = ['id', 'room', 'section', 'section_name', 'name', 'description', 'state', 'visibility',
                  'is_required', 'quantity', 'notes', 'supplier_link', 'unit_cost', 'total_cost', 'order',
                  'created_at', 'updated_at']
        read_only_fields = ['room', 'created_at', 'updated_at']

    def validate_section(self, value):
        room = self.context.get('room') or (self.instance.room if self.instance else None)
        if room and value.room_id != room.id:
            raise serializers.ValidationError('Section does not belong to this room.')
        return value


class RoomFFESectionSerializer(serializers.ModelSerializer):
    items = RoomFFEItemSerializer(many=True, read_only=True)

    class Meta:
        model = RoomFFESection
        fields = ['id', 'room', 'name', 'description', 'order', 'is_expanded', 'items', 'created_at', 'updated_at']
        read_only_fields = ['room', 'created_at', 'updated_at']


class FFEChangeLogSerializer(serializers.ModelSerializer):
    user = UserSummarySerializer(read_only=True)

    class Meta:
        model = FFEChangeLog
        fields = ['id', 'item', 'user', 'field', 'old_value', 'new_value', 'created_at']


class BulkStateSerializer(serializers.Serializer):
    item_ids = serializers.ListField(child=serializers.IntegerField(), allow_empty=False)
    state = serializers.ChoiceField(choices=RoomFFEItem.STATE_CHOICES)
