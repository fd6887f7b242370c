import asyncio
import logging
import sqlite3
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Tuple

from advocates_api.db.schema import row_to_advocate
from advocates_api.db.session import get_db_connection
from advocates_api.models.advocate_model import Advocate
from advocates_api.search.filter_engine import filter_advocates
from advocates_api.search.query_builder import AdvocatePredicate
from advocates_api.utils.pagination import PAGE_SIZE, page_offset, paginate

logger = logging.getLogger(__name__)


class RecordStoreError(Exception):
    """Raised when the record store cannot execute a read."""


class AdvocateStore(ABC):
    """Read-only, predicate-filtered, counted, offset-paged access to advocate records.

    Records come back ordered by id. The total is always computed for the same
    predicate as the page itself.
    """

    @abstractmethod
    async def fetch_page(
        self, predicate: AdvocatePredicate, page: int, page_size: int = PAGE_SIZE
    ) -> Tuple[List[Advocate], int]:
        pass

    @abstractmethod
    async def distinct_filter_values(self) -> Tuple[List[str], List[str]]:
        """City and specialty values over the whole, unfiltered store, in record order. May repeat."""
        pass


class SqliteAdvocateStore(AdvocateStore):

    def __init__(self, database_path: Optional[str] = None):
        self.database_path = database_path

    async def fetch_page(
        self, predicate: AdvocatePredicate, page: int, page_size: int = PAGE_SIZE
    ) -> Tuple[List[Advocate], int]:
        where_clause, params = predicate.where_clause("a")
        logger.info(f"📝 Final WHERE clause: {where_clause or '(none)'}")
        logger.info(f"🔢 Params count: {len(params)}")

        try:
            async with get_db_connection(self.database_path) as conn:
                # Count and page share one connection and one set of conditions
                count_query = f"SELECT COUNT(*) FROM advocates a {where_clause}"
                count_start = asyncio.get_event_loop().time()
                count_cursor = await conn.execute(count_query, params)
                total_count_row = await count_cursor.fetchone()
                total_count = total_count_row[0] if total_count_row else 0
                count_time = asyncio.get_event_loop().time() - count_start

                logger.info(f"📊 Total count: {total_count} (query took {count_time:.2f}s)")

                if total_count == 0:
                    logger.info("❌ No results found for the given filters")
                    return [], 0

                page_query = f"""
                    SELECT
                        a.id,
                        a.first_name,
                        a.last_name,
                        a.city,
                        a.degree,
                        a.specialties,
                        a.years_of_experience,
                        a.phone_number
                    FROM advocates a
                    {where_clause}
                    ORDER BY a.id ASC
                    LIMIT ? OFFSET ?
                """
                cursor = await conn.execute(page_query, params + [page_size, page_offset(page, page_size)])
                rows = await cursor.fetchall()
                records = [row_to_advocate(row) for row in rows]

                logger.info(f"✅ Page {page} query returned {len(records)} advocates")
                return records, total_count

        except (sqlite3.Error, ValueError) as e:
            logger.error(f"💥 Record store error: {str(e)}")
            raise RecordStoreError("Failed to read advocates") from e

    async def distinct_filter_values(self) -> Tuple[List[str], List[str]]:
        try:
            async with get_db_connection(self.database_path) as conn:
                city_cursor = await conn.execute(
                    "SELECT city FROM advocates GROUP BY city ORDER BY MIN(id)"
                )
                cities = [row[0] for row in await city_cursor.fetchall()]

                specialty_cursor = await conn.execute(
                    """
                    SELECT js.value
                    FROM advocates a, json_each(a.specialties) js
                    ORDER BY a.id ASC, js.key ASC
                    """
                )
                specialties = [row[0] for row in await specialty_cursor.fetchall()]

                logger.info(f"🏷️ Loaded {len(cities)} cities and {len(specialties)} specialty labels")
                return cities, specialties

        except sqlite3.Error as e:
            logger.error(f"💥 Record store error: {str(e)}")
            raise RecordStoreError("Failed to read filter options") from e


class InMemoryAdvocateStore(AdvocateStore):
    """Load-everything-once store: filter engine plus in-memory slicing."""

    def __init__(self, advocates: Sequence[Advocate]):
        self.advocates = sorted(advocates, key=lambda advocate: advocate.id)

    async def fetch_page(
        self, predicate: AdvocatePredicate, page: int, page_size: int = PAGE_SIZE
    ) -> Tuple[List[Advocate], int]:
        result = paginate(filter_advocates(predicate, self.advocates), page, page_size)
        return result["items"], result["total_items"]

    async def distinct_filter_values(self) -> Tuple[List[str], List[str]]:
        cities = [advocate.city for advocate in self.advocates]
        specialties = [s for advocate in self.advocates for s in advocate.specialties]
        return cities, specialties
