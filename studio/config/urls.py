"""
URL configuration for the studio project.

Every app contributes its routes under /api/v1/.
"""
from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "Studio Management Admin Panel"
admin.site.site_title = "Studio Management Admin Portal"
admin.site.index_title = "Welcome to the Studio Admin Portal"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('studio.core.urls')),
    path('api/v1/', include('studio.projects.urls')),
    path('api/v1/', include('studio.approvals.urls')),
    path('api/v1/', include('studio.drawings.urls')),
    path('api/v1/', include('studio.ffe.urls')),
    path('api/v1/', include('studio.portal.urls')),
    path('api/v1/', include('studio.tasks.urls')),
    path('api/v1/', include('studio.reports.urls')),
]
