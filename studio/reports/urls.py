from django.urls import path
from . import views

urlpatterns = [
    path('reports/projects/<int:pk>/progress/', views.project_progress, name='project-progress-report'),
    path('reports/workload/', views.workload, name='workload-report'),
    path('reports/dashboard-kpis/', views.dashboard_kpis, name='dashboard-kpis'),
]
