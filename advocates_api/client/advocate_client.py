import logging
from dataclasses import dataclass, field
from typing import List, Optional

import httpx
from pydantic import ValidationError

from advocates_api.config import settings
from advocates_api.models.advocate_model import Advocate
from advocates_api.search.filter_engine import FilterOptions
from advocates_api.search.query_builder import QueryDescription
from advocates_api.utils.pagination import PAGE_SIZE

logger = logging.getLogger(__name__)


class AdvocateFetchError(Exception):
    """Raised when the advocates API is unreachable or answers with an error status."""


@dataclass(frozen=True)
class ResultPage:
    records: List[Advocate] = field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = PAGE_SIZE


class AdvocateClient:
    """Async client for the advocates search endpoint."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout if timeout is not None else settings.fetch_timeout_seconds,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def _get_json(self, path: str, params: Optional[dict] = None):
        try:
            r = await self._client.get(path, params=params)
            r.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise AdvocateFetchError(
                f"Advocates API returned {e.response.status_code}."
            ) from e
        except httpx.RequestError as e:
            raise AdvocateFetchError(
                "Advocates API unavailable (timeout or connection error)."
            ) from e

        try:
            return r.json()
        except ValueError:
            logger.warning(f"⚠️ Non-JSON payload from {path}")
            return None

    async def fetch_page(self, description: QueryDescription, page: int) -> ResultPage:
        params = {
            "page": page,
            "searchTerm": description.search_term.strip(),
            "selectedCity": description.selected_city,
            "selectedSpecialty": description.selected_specialty,
        }
        payload = await self._get_json("/api/advocates", params)

        # Malformed or missing payloads count as an empty result, not a failure
        if not isinstance(payload, dict) or not isinstance(payload.get("data"), list):
            logger.warning(f"⚠️ Malformed advocates payload, treating as zero results: {payload!r}")
            return ResultPage(page=page)

        try:
            records = [Advocate.model_validate(item) for item in payload["data"]]
            total = int(payload.get("total", len(records)))
        except (ValidationError, TypeError, ValueError) as e:
            logger.warning(f"⚠️ Invalid advocate records in payload, treating as zero results: {e}")
            return ResultPage(page=page)

        return ResultPage(records=records, total=max(total, 0), page=page)

    async def fetch_filter_options(self) -> FilterOptions:
        payload = await self._get_json("/api/advocates/filters")
        if not isinstance(payload, dict):
            logger.warning("⚠️ Malformed filter options payload, using defaults")
            return FilterOptions()

        try:
            return FilterOptions.model_validate(payload)
        except ValidationError as e:
            logger.warning(f"⚠️ Invalid filter options payload, using defaults: {e}")
            return FilterOptions()
