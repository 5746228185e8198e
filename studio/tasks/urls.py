from django.urls import path
from .views import task_list_create, task_detail, task_toggle, task_board

urlpatterns = [
    path('tasks/', task_list_create, name='task-list-create'),
    path('tasks/board/', task_board, name='task-board'),
    path('tasks/<int:pk>/', task_detail, name='task-detail'),
    path('tasks/<int:pk>/toggle/', task_toggle, name='task-toggle'),
]
