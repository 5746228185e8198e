from rest_framework import serializers
from studio.core.serializers import UserSummarySerializer
from .models import (
    RenderingVersion, RenderingAsset, RenderingNote, ClientApprovalVersion, ClientApprovalAsset,
    ClientApprovalActivity, ClientApprovalEmailLog, ClientDecision
)


class RenderingAssetSerializer(serializers.ModelSerializer):
    class Meta:
        model = RenderingAsset
        fields = ['id', 'rendering_version', 'title', 'url', 'asset_type', 'description', 'order', 'uploaded_by', 'created_at']
        read_only_fields = ['rendering_version', 'uploaded_by', 'created_at']


class RenderingNoteSerializer(serializers.ModelSerializer):
    author = UserSummarySerializer(read_only=True)

    class Meta:
        model = RenderingNote
        fields = ['id', 'rendering_version', 'content', 'author', 'created_at']
        read_only_fields = ['rendering_version', 'author', 'created_at']


class RenderingVersionSerializer(serializers.ModelSerializer):
    label = serializers.CharField(read_only=True)
    assets = RenderingAssetSerializer(many=True, read_only=True)
    notes = RenderingNoteSerializer(many=True, read_only=True)
    created_by = UserSummarySerializer(read_only=True)

    class Meta:
        model = RenderingVersion
        fields = ['id', 'room', 'stage', 'version', 'custom_name', 'label', 'status', 'completed_at',
                  'pushed_to_client_at', 'created_by', 'assets', 'notes', 'created_at', 'updated_at']
        read_only_fields = ['room', 'stage', 'version', 'status', 'completed_at', 'pushed_to_client_at',
                            'created_by', 'created_at', 'updated_at']


class ClientApprovalAssetSerializer(serializers.ModelSerializer):
    asset = RenderingAssetSerializer(read_only=True)

    class Meta:
        model = ClientApprovalAsset
        fields = ['id', 'asset', 'include_in_email', 'display_order']


class ClientDecisionSerializer(serializers.ModelSerializer):
    decided_by = UserSummarySerializer(read_only=True)

    class Meta:
        model = ClientDecision
        fields = ['id', 'decision', 'comments', 'decided_by', 'decided_at']


class ClientApprovalVersionSerializer(serializers.ModelSerializer):
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    assets = ClientApprovalAssetSerializer(many=True, read_only=True)
    decisions = ClientDecisionSerializer(many=True, read_only=True)
    internal_approved_by = UserSummarySerializer(read_only=True)
    sent_by = UserSummarySerializer(read_only=True)
    rendering_version_label = serializers.CharField(source='rendering_version.label', read_only=True, default=None)

    class Meta:
        model = ClientApprovalVersion
        fields = ['id', 'stage', 'rendering_version', 'rendering_version_label', 'version', 'status', 'status_display',
                  'approved_internally', 'internal_approved_at', 'internal_approved_by', 'sent_to_client_at',
                  'sent_by', 'email_opened_at', 'follow_up_completed_at', 'follow_up_notes', 'client_decision',
                  'client_decided_at', 'client_message', 'notes', 'assets', 'decisions', 'created_at', 'updated_at']
        read_only_fields = fields


class ClientApprovalActivitySerializer(serializers.ModelSerializer):
    user = UserSummarySerializer(read_only=True)

    class Meta:
        model = ClientApprovalActivity
        fields = ['id', 'version', 'type', 'message', 'user', 'metadata', 'created_at']


class ClientApprovalEmailLogSerializer(serializers.ModelSerializer):
    class Meta:
        model = ClientApprovalEmailLog
        fields = ['id', 'version', 'to', 'subject', 'html', 'tracking_id', 'sent_at', 'opened_at']
