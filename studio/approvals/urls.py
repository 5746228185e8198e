from django.urls import path
from .views import (
    stage_renderings, rendering_detail, rendering_assets, rendering_asset_detail, rendering_notes, rendering_complete,
    client_approval, internal_approve, send_to_client, mark_as_sent, mark_followup, client_decision,
    version_activity, version_email_logs, track_email_open
)

urlpatterns = [
    # Rendering endpoints
    path('stages/<int:pk>/renderings/', stage_renderings, name='stage-renderings'),
    path('renderings/<int:pk>/', rendering_detail, name='rendering-detail'),
    path('renderings/<int:pk>/assets/', rendering_assets, name='rendering-assets'),
    path('renderings/<int:pk>/notes/', rendering_notes, name='rendering-notes'),
    path('renderings/<int:pk>/complete/', rendering_complete, name='rendering-complete'),
    path('rendering-assets/<int:pk>/', rendering_asset_detail, name='rendering-asset-detail'),

    # Client approval endpoints
    path('stages/<int:pk>/client-approval/', client_approval, name='client-approval'),
    path('stages/<int:pk>/client-approval/internal-approve/', internal_approve, name='client-approval-internal-approve'),
    path('stages/<int:pk>/client-approval/send-to-client/', send_to_client, name='client-approval-send'),
    path('stages/<int:pk>/client-approval/mark-as-sent/', mark_as_sent, name='client-approval-mark-sent'),
    path('stages/<int:pk>/client-approval/mark-followup/', mark_followup, name='client-approval-mark-followup'),
    path('stages/<int:pk>/client-approval/client-decision/', client_decision, name='client-approval-decision'),
    path('client-approval/versions/<int:pk>/activity/', version_activity, name='client-approval-activity'),
    path('client-approval/versions/<int:pk>/email-logs/', version_email_logs, name='client-approval-email-logs'),

    # Public e-mail open tracking
    path('client-approval/track/<uuid:tracking_id>/', track_email_open, name='client-approval-track'),
]
