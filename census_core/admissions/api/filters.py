# census_core/admissions/api/filters.py
"""
Query-string parsing for the census and mortality lists.

Filtering happens on the queryset; ordering is only validated here and
applied afterwards by selectors.sort_records().
"""
import django_filters

from census_core.admissions import selectors
from census_core.admissions.constants import PatientStatus
from census_core.admissions.models import CensusRecord, MortalityRecord

ORDERING_CHOICES = [(k, k) for k in selectors.SORT_KEYS] + [(f"-{k}", f"-{k}") for k in selectors.SORT_KEYS]


class _OrderedFilterSet(django_filters.FilterSet):
    ordering = django_filters.ChoiceFilter(choices=ORDERING_CHOICES, method="keep")

    default_ordering = ""

    def keep(self, queryset, name, value):
        return queryset

    @property
    def ordering_value(self) -> str:
        return self.form.cleaned_data.get("ordering") or self.default_ordering


class CensusFilter(_OrderedFilterSet):
    q = django_filters.CharFilter(method="search")
    status = django_filters.ChoiceFilter(choices=[(s, s) for s in PatientStatus.LIVE])
    admitted_from = django_filters.DateFilter(field_name="admission_date", lookup_expr="gte")
    admitted_to = django_filters.DateFilter(field_name="admission_date", lookup_expr="lte")

    default_ordering = selectors.DEFAULT_CENSUS_ORDERING

    class Meta:
        model = CensusRecord
        fields = ["q", "status", "admitted_from", "admitted_to", "ordering"]

    def search(self, queryset, name, value):
        return selectors.search_tokens(queryset, value, selectors.CENSUS_SEARCH_FIELDS)


class MortalityFilter(_OrderedFilterSet):
    q = django_filters.CharFilter(method="search")
    died_from = django_filters.DateFilter(field_name="discharge_date", lookup_expr="gte")
    died_to = django_filters.DateFilter(field_name="discharge_date", lookup_expr="lte")

    default_ordering = selectors.DEFAULT_MORTALITY_ORDERING

    class Meta:
        model = MortalityRecord
        fields = ["q", "died_from", "died_to", "ordering"]

    def search(self, queryset, name, value):
        return selectors.search_tokens(queryset, value, selectors.MORTALITY_SEARCH_FIELDS)
