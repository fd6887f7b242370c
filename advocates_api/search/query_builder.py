"""
Translate a user-facing query description into a predicate over Advocate records.

The same predicate renders two ways: an in-memory test used by the filter engine,
and SQL conditions used by the SQLite record store. Both must select the same rows.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from advocates_api.models.advocate_model import Advocate

logger = logging.getLogger(__name__)

ALL = "All"

LIKE_ESCAPE = "\\"


@dataclass(frozen=True)
class QueryDescription:
    search_term: str = ""
    selected_city: str = ALL
    selected_specialty: str = ALL

    def with_search_term(self, search_term: str) -> "QueryDescription":
        return QueryDescription(search_term, self.selected_city, self.selected_specialty)

    def with_city(self, city: str) -> "QueryDescription":
        return QueryDescription(self.search_term, city, self.selected_specialty)

    def with_specialty(self, specialty: str) -> "QueryDescription":
        return QueryDescription(self.search_term, self.selected_city, specialty)


def _active_filter(value: Optional[str]) -> Optional[str]:
    """Blank values and the 'All' sentinel mean no filter."""
    if value is None:
        return None
    value = value.strip()
    if not value or value == ALL:
        return None
    return value


def escape_like(value: str) -> str:
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


@dataclass(frozen=True)
class AdvocatePredicate:
    """Logical AND of the active text, city and specialty clauses."""
    term: Optional[str] = None
    city: Optional[str] = None
    specialty: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.term is None and self.city is None and self.specialty is None

    def matches(self, advocate: Advocate) -> bool:
        if self.term is not None:
            haystack = [advocate.first_name, advocate.last_name, advocate.city, *advocate.specialties]
            if not any(self.term in value.lower() for value in haystack):
                return False

        if self.city is not None and advocate.city != self.city:
            return False

        # Exact membership; a label that merely contains the selection does not count
        if self.specialty is not None and self.specialty not in advocate.specialties:
            return False

        return True

    def to_sql(self, alias: str = "a") -> Tuple[List[str], List]:
        """Build filter conditions and parameters for the advocates table"""
        conditions = []
        params = []

        if self.term is not None:
            pattern = f"%{escape_like(self.term)}%"
            conditions.append(
                f"(py_lower({alias}.first_name) LIKE ? ESCAPE '\\'"
                f" OR py_lower({alias}.last_name) LIKE ? ESCAPE '\\'"
                f" OR py_lower({alias}.city) LIKE ? ESCAPE '\\'"
                f" OR EXISTS (SELECT 1 FROM json_each({alias}.specialties) js"
                f" WHERE py_lower(js.value) LIKE ? ESCAPE '\\'))"
            )
            params.extend([pattern] * 4)

        if self.city is not None:
            conditions.append(f"{alias}.city = ?")
            params.append(self.city)

        if self.specialty is not None:
            conditions.append(
                f"EXISTS (SELECT 1 FROM json_each({alias}.specialties) js WHERE js.value = ?)"
            )
            params.append(self.specialty)

        return conditions, params

    def where_clause(self, alias: str = "a") -> Tuple[str, List]:
        conditions, params = self.to_sql(alias)
        where_clause = "WHERE " + " AND ".join(conditions) if conditions else ""
        return where_clause, params


def build_predicate(description: QueryDescription) -> AdvocatePredicate:
    term = _active_filter(description.search_term)
    predicate = AdvocatePredicate(
        term=term.lower() if term else None,
        city=_active_filter(description.selected_city),
        specialty=_active_filter(description.selected_specialty),
    )
    logger.debug(f"🧩 Built predicate {predicate} from {description}")
    return predicate
