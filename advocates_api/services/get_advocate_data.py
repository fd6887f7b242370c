import asyncio
import logging

from advocates_api.models.advocate_model import PaginatedAdvocateResponse, FilterOptionsResponse
from advocates_api.search.filter_engine import build_filter_options
from advocates_api.search.query_builder import QueryDescription, build_predicate
from advocates_api.services.record_store import AdvocateStore
from advocates_api.utils.pagination import PAGE_SIZE, page_count

logger = logging.getLogger(__name__)


async def get_advocates_data(
    store: AdvocateStore,
    description: QueryDescription,
    page: int = 1,
    per_page: int = PAGE_SIZE,
) -> PaginatedAdvocateResponse:
    """
    Fetch one page of advocates matching the query description, plus the total match count.
    """
    logger.info("🔍 get_advocates_data called")
    logger.info(f"🔎 Query: {description}, page={page}")

    predicate = build_predicate(description)
    start = asyncio.get_event_loop().time()
    records, total_count = await store.fetch_page(predicate, page, per_page)
    elapsed = asyncio.get_event_loop().time() - start

    total_pages = page_count(total_count, per_page)
    logger.info(f"🎉 Query completed successfully in {elapsed:.2f}s")
    logger.info(f"📊 Final result: {len(records)} advocates, {total_count} total, {total_pages} pages")

    return PaginatedAdvocateResponse(
        data=records,
        total=total_count,
        page=page,
        per_page=per_page,
        total_pages=total_pages,
    )


async def get_filter_options_data(store: AdvocateStore) -> FilterOptionsResponse:
    """Filter options over every stored advocate, not only the current page."""
    cities, specialties = await store.distinct_filter_values()
    options = build_filter_options(cities, specialties)
    return FilterOptionsResponse(cities=options.cities, specialties=options.specialties)
