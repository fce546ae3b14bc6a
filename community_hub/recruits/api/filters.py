import django_filters

from community_hub.recruits.models import Recruit

ALL = "all"


class RecruitFilter(django_filters.FilterSet):
    # "all" is what the board sends when no tab is selected.
    category = django_filters.CharFilter(method="filter_choice")
    status = django_filters.CharFilter(method="filter_choice")
    author = django_filters.NumberFilter(field_name="author__id")

    class Meta:
        model = Recruit
        fields = ["category", "status", "author"]

    def filter_choice(self, queryset, name, value):
        if not value or value == ALL:
            return queryset
        return queryset.filter(**{name: value})
