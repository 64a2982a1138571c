import django_filters
from django.db import connections

from .models import Product


class ProductFilter(django_filters.FilterSet):
    category = django_filters.CharFilter(field_name='main_category')
    subCategory = django_filters.CharFilter(field_name='sub_category')
    minPrice = django_filters.NumberFilter(field_name='new_price', lookup_expr='gte')
    maxPrice = django_filters.NumberFilter(field_name='new_price', lookup_expr='lte')
    status = django_filters.ChoiceFilter(choices=Product.STATUS_CHOICES)
    size = django_filters.CharFilter(field_name='sizes', method='filter_member')
    color = django_filters.CharFilter(field_name='colors', method='filter_member')
    tag = django_filters.CharFilter(field_name='tags', method='filter_member')

    class Meta:
        model = Product
        fields = []

    def filter_member(self, queryset, name, value):
        if connections[queryset.db].features.supports_json_field_contains:
            return queryset.filter(**{f'{name}__contains': [value]})
        # SQLite has no JSON containment lookup; match the lists in Python
        matching = [
            pk for pk, values in queryset.values_list('pk', name)
            if isinstance(values, list) and value in values
        ]
        return queryset.filter(pk__in=matching)
