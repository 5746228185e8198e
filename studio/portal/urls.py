from django.urls import path
from .views import (
    project_client_access, client_access_detail, client_access_logs, client_progress, client_progress_asset
)

urlpatterns = [
    # Staff endpoints
    path('projects/<int:pk>/client-access/', project_client_access, name='project-client-access'),
    path('client-access/<int:pk>/', client_access_detail, name='client-access-detail'),
    path('client-access/<int:pk>/logs/', client_access_logs, name='client-access-logs'),

    # Public endpoints
    path('client-progress/<str:token>/', client_progress, name='client-progress'),
    path('client-progress/<str:token>/assets/<int:asset_id>/', client_progress_asset, name='client-progress-asset'),
]
