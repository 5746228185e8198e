from django.urls import path
from . import views

urlpatterns = [
    path('auth/login/', views.CustomTokenObtainPairView.as_view(), name='auth-login'),
    path('auth/refresh/', views.CustomTokenRefreshView.as_view(), name='auth-refresh'),
    path('auth/me/', views.user_me, name='auth-me'),

    # Team members and studio settings (admins)
    path('users/', views.user_list_create, name='user-list-create'),
    path('users/<int:pk>/', views.user_detail, name='user-detail'),
    path('settings/', views.setting_list_create, name='setting-list-create'),
    path('settings/<int:pk>/', views.setting_detail, name='setting-detail'),

    path('audit-logs/', views.audit_log_list, name='audit-log-list'),
    path('audit-logs/<int:pk>/', views.audit_log_detail, name='audit-log-detail'),
    path('search/', views.global_search, name='global-search'),
]
