import django_filters
from django.db.models import Q
from .models import ProjectDrawing, DISCIPLINE_CHOICES


class DrawingFilter(django_filters.FilterSet):
    """Filter for the project drawing register"""

    # Searches drawing number, title, description and project name
    search = django_filters.CharFilter(method='filter_search', label='Search')

    discipline = django_filters.ChoiceFilter(choices=DISCIPLINE_CHOICES)
    drawing_type = django_filters.ChoiceFilter(choices=ProjectDrawing.TYPE_CHOICES)
    status = django_filters.ChoiceFilter(choices=ProjectDrawing.STATUS_CHOICES)
    room = django_filters.NumberFilter(field_name='room_id', lookup_expr='exact')

    class Meta:
        model = ProjectDrawing
        fields = ['search', 'discipline', 'drawing_type', 'status', 'room']

    def filter_search(self, queryset, name, value):
        if not value:
            return queryset
        search = value.strip()
        if not search:
            return queryset

        # Every word has to appear in one of the fields
        query = Q()
        for word in search.split():
            query &= (
                Q(drawing_number__icontains=word) |
                Q(title__icontains=word) |
                Q(description__icontains=word) |
                Q(project__name__icontains=word)
            )
        return queryset.filter(query).distinct()
