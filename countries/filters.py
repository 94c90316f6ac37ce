# countries/filters.py
from django_filters import rest_framework as filters
from rest_framework.filters import OrderingFilter

from .models import Country


class CountryFilter(filters.FilterSet):
    """
    Filters for the Country list endpoint.
    `?region=Africa` and `?currency=NGN` both match case-insensitively.
    """
    region = filters.CharFilter(field_name='region', lookup_expr='iexact')
    # The query parameter is `currency`, the column is `currency_code`.
    currency = filters.CharFilter(field_name='currency_code', lookup_expr='iexact')

    class Meta:
        model = Country
        fields = ['region', 'currency']


class SortOrderingFilter(OrderingFilter):
    """
    Ordering read from `?sort=` instead of `?ordering=`.
    `gdp_desc` is accepted as an alias for `-estimated_gdp`.
    """
    ordering_param = "sort"
    aliases = {
        'gdp_desc': '-estimated_gdp',
        'gdp_asc': 'estimated_gdp',
    }

    def get_ordering(self, request, queryset, view):
        params = request.query_params.get(self.ordering_param)
        if params:
            fields = [self.aliases.get(param.strip(), param.strip()) for param in params.split(',')]
            ordering = self.remove_invalid_fields(queryset, fields, view, request)
            if ordering:
                # Ties keep a stable order.
                return ordering + ['id']

        return self.get_default_ordering(view)
