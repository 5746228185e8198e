import django_filters
from django.db.models import Q
from django.utils import timezone
from .models import Task


class TaskFilter(django_filters.FilterSet):
    """Filter for the task list and board"""

    search = django_filters.CharFilter(method='filter_search', label='Search')

    project = django_filters.NumberFilter(field_name='project_id', lookup_expr='exact')
    room = django_filters.NumberFilter(field_name='room_id', lookup_expr='exact')
    stage = django_filters.NumberFilter(field_name='stage_id', lookup_expr='exact')
    assignee = django_filters.NumberFilter(field_name='assignee_id', lookup_expr='exact')
    status = django_filters.MultipleChoiceFilter(choices=Task.STATUS_CHOICES)
    priority = django_filters.MultipleChoiceFilter(choices=Task.PRIORITY_CHOICES)

    # Tasks assigned to the requesting user
    mine = django_filters.BooleanFilter(method='filter_mine', label='Mine')
    # Open tasks past their due date
    overdue = django_filters.BooleanFilter(method='filter_overdue', label='Overdue')

    class Meta:
        model = Task
        fields = ['search', 'project', 'room', 'stage', 'assignee', 'status', 'priority', 'mine', 'overdue']

    def filter_search(self, queryset, name, value):
        if not value or not value.strip():
            return queryset
        search = value.strip()
        return queryset.filter(Q(title__icontains=search) | Q(description__icontains=search))

    def filter_mine(self, queryset, name, value):
        if not value:
            return queryset
        user = getattr(self.request, 'user', None)
        if user is None or not user.is_authenticated:
            return queryset.none()
        return queryset.filter(assignee=user)

    def filter_overdue(self, queryset, name, value):
        if value is None:
            return queryset
        overdue = Q(due_date__lt=timezone.localdate()) & ~Q(status__in=Task.CLOSED_STATUSES)
        return queryset.filter(overdue) if value else queryset.exclude(overdue)
