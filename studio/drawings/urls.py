from django.urls import path
from .views import (
    stage_drawing_checklist, drawing_checklist_detail, drawing_checklist_toggle,
    project_drawings, drawing_detail, drawing_revisions,
    project_transmittals, transmittal_detail, transmittal_send, transmittal_acknowledge, transmittal_cancel,
    distribution_matrix, project_recipients
)

urlpatterns = [
    # Drawing checklist endpoints
    path('stages/<int:pk>/drawing-checklist/', stage_drawing_checklist, name='stage-drawing-checklist'),
    path('drawing-checklist/<int:pk>/', drawing_checklist_detail, name='drawing-checklist-detail'),
    path('drawing-checklist/<int:pk>/toggle/', drawing_checklist_toggle, name='drawing-checklist-toggle'),

    # Drawing register endpoints
    path('projects/<int:pk>/drawings/', project_drawings, name='project-drawings'),
    path('drawings/<int:pk>/', drawing_detail, name='drawing-detail'),
    path('drawings/<int:pk>/revisions/', drawing_revisions, name='drawing-revisions'),

    # Transmittal endpoints
    path('projects/<int:pk>/transmittals/', project_transmittals, name='project-transmittals'),
    path('transmittals/<int:pk>/', transmittal_detail, name='transmittal-detail'),
    path('transmittals/<int:pk>/send/', transmittal_send, name='transmittal-send'),
    path('transmittals/<int:pk>/acknowledge/', transmittal_acknowledge, name='transmittal-acknowledge'),
    path('transmittals/<int:pk>/cancel/', transmittal_cancel, name='transmittal-cancel'),
    path('projects/<int:pk>/distribution-matrix/', distribution_matrix, name='distribution-matrix'),
    path('projects/<int:pk>/recipients/', project_recipients, name='project-recipients'),
]
