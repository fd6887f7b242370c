from typing import Iterable, List

from pydantic import BaseModel

from advocates_api.models.advocate_model import Advocate
from advocates_api.search.query_builder import AdvocatePredicate, ALL


class FilterOptions(BaseModel):
    cities: List[str] = [ALL]
    specialties: List[str] = [ALL]


def filter_advocates(predicate: AdvocatePredicate, advocates: Iterable[Advocate]) -> List[Advocate]:
    """Stable filter: matching records keep their original order."""
    if predicate.is_empty:
        return list(advocates)
    return [advocate for advocate in advocates if predicate.matches(advocate)]


def build_filter_options(cities: Iterable[str], specialties: Iterable[str]) -> FilterOptions:
    # dict.fromkeys keeps first-seen order while dropping duplicates
    return FilterOptions(
        cities=[ALL, *dict.fromkeys(city for city in cities if city and city != ALL)],
        specialties=[ALL, *dict.fromkeys(s for s in specialties if s and s != ALL)],
    )


def derive_filter_options(advocates: Iterable[Advocate]) -> FilterOptions:
    advocates = list(advocates)
    return build_filter_options(
        (advocate.city for advocate in advocates),
        (specialty for advocate in advocates for specialty in advocate.specialties),
    )
