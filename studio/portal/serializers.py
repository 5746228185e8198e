from rest_framework import serializers
from studio.core.serializers import UserSummarySerializer
from .models import ClientAccessToken, ClientAccessLog


class ClientAccessTokenSerializer(serializers.ModelSerializer):
    created_by = UserSummarySerializer(read_only=True)
    is_expired = serializers.BooleanField(read_only=True)
    url = serializers.SerializerMethodField()

    class Meta:
        model = ClientAccessToken
        fields = ['id', 'project', 'token', 'url', 'name', 'active', 'expires_at', 'is_expired', 'created_by',
                  'last_accessed_at', 'last_accessed_ip', 'access_count', 'created_at', 'updated_at']
        read_only_fields = ['project', 'token', 'created_by', 'last_accessed_at', 'last_accessed_ip',
                            'access_count', 'created_at', 'updated_at']

    def get_url(self, obj):
        request = self.context.get('request')
        path = f"/api/v1/client-progress/{obj.token}/"
        return request.build_absolute_uri(path) if request else path


class ClientAccessLogSerializer(serializers.ModelSerializer):
    class Meta:
        model = ClientAccessLog
        fields = ['id', 'token', 'ip_address', 'user_agent', 'action', 'metadata', 'created_at']
