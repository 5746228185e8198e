from django.urls import path, re_path
from .views import (
    client_list_create, client_detail,
    project_list_create, project_detail, project_rooms, room_detail,
    stage_detail, stage_activity, stage_action,
    design_sections, design_section_detail,
    notification_list, notification_mark_read, notification_mark_all_read
)

urlpatterns = [
    # Client endpoints
    path('clients/', client_list_create, name='client-list-create'),
    path('clients/<int:pk>/', client_detail, name='client-detail'),

    # Project and room endpoints
    path('projects/', project_list_create, name='project-list-create'),
    path('projects/<int:pk>/', project_detail, name='project-detail'),
    path('projects/<int:pk>/rooms/', project_rooms, name='project-rooms'),
    path('rooms/<int:pk>/', room_detail, name='room-detail'),

    # Stage endpoints
    path('stages/<int:pk>/', stage_detail, name='stage-detail'),
    path('stages/<int:pk>/activity/', stage_activity, name='stage-activity'),
    re_path(
        r'^stages/(?P<pk>\d+)/(?P<action>start|complete|reopen|hold|resume|not-applicable|applicable|assign)/$',
        stage_action,
        name='stage-action'
    ),

    # Design concept endpoints
    path('stages/<int:pk>/design-sections/', design_sections, name='design-sections'),
    path('design-sections/<int:pk>/', design_section_detail, name='design-section-detail'),

    # Notification endpoints
    path('notifications/', notification_list, name='notification-list'),
    path('notifications/read-all/', notification_mark_all_read, name='notification-read-all'),
    path('notifications/<int:pk>/read/', notification_mark_read, name='notification-read'),
]
