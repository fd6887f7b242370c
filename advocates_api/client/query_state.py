"""
Client-side query state.

QueryStateController owns the current query description and page number and is the
only writer of the visible result. Every outgoing request carries a sequence token;
a response is applied only if its token is still the latest one issued, so a slow
answer to a superseded request can never overwrite a newer one.
"""
import asyncio
import logging
import traceback
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Set

from advocates_api.client.advocate_client import AdvocateClient, AdvocateFetchError, ResultPage
from advocates_api.config import settings
from advocates_api.search.filter_engine import FilterOptions, derive_filter_options
from advocates_api.search.query_builder import QueryDescription
from advocates_api.utils.pagination import page_numbers

logger = logging.getLogger(__name__)


class QueryStatus(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    READY = "ready"
    ERROR = "error"


@dataclass(frozen=True)
class ViewState:
    """Everything the rendering layer needs for one frame."""
    description: QueryDescription
    page: int
    status: QueryStatus
    result: ResultPage
    filter_options: FilterOptions
    page_numbers: List[int] = field(default_factory=list)
    last_error: Optional[str] = None


class Debouncer:
    """Cancel-and-restart timer: only the last value pushed within the quiet period fires."""

    def __init__(self, delay_seconds: float, callback: Callable[[str], None]):
        self.delay_seconds = delay_seconds
        self.callback = callback
        self._handle: Optional[asyncio.TimerHandle] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def remaining(self) -> float:
        if self._handle is None:
            return 0.0
        return max(0.0, self._handle.when() - asyncio.get_running_loop().time())

    def push(self, value: str) -> None:
        self.cancel()
        self._handle = asyncio.get_running_loop().call_later(self.delay_seconds, self._fire, value)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, value: str) -> None:
        self._handle = None
        self.callback(value)


class QueryStateController:

    def __init__(
        self,
        client: AdvocateClient,
        debounce_ms: Optional[int] = None,
        fetch_timeout: Optional[float] = None,
    ):
        self.client = client
        self.fetch_timeout = fetch_timeout if fetch_timeout is not None else settings.fetch_timeout_seconds
        debounce_ms = debounce_ms if debounce_ms is not None else settings.search_debounce_ms

        self.description = QueryDescription()
        self.page = 1
        self.status = QueryStatus.IDLE
        self.result = ResultPage()
        self.filter_options = FilterOptions()
        self.last_error: Optional[str] = None
        self.pending_search_term = ""

        self._sequence = 0
        self._options_from_server = False
        self._flush_handle: Optional[asyncio.Handle] = None
        self._tasks: Set[asyncio.Task] = set()
        self._listeners: List[Callable[[ViewState], None]] = []
        self._debouncer = Debouncer(debounce_ms / 1000, self._commit_search_term)

    # -----------------------------------------------------------------------
    # Observation
    # -----------------------------------------------------------------------
    @property
    def sequence(self) -> int:
        """Token of the most recently issued request."""
        return self._sequence

    def snapshot(self) -> ViewState:
        return ViewState(
            description=self.description,
            page=self.page,
            status=self.status,
            result=self.result,
            filter_options=self.filter_options,
            page_numbers=page_numbers(self.result.total, self.result.page_size),
            last_error=self.last_error,
        )

    def subscribe(self, listener: Callable[[ViewState], None]) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _notify(self) -> None:
        state = self.snapshot()
        for listener in list(self._listeners):
            listener(state)

    # -----------------------------------------------------------------------
    # Input events
    # -----------------------------------------------------------------------
    async def start(self) -> None:
        """Initial mount: fetch the first page and the unfiltered filter options."""
        self._schedule_fetch()
        try:
            self.filter_options = await self.client.fetch_filter_options()
            self._options_from_server = True
            self._notify()
        except AdvocateFetchError as e:
            logger.warning(f"⚠️ Could not load filter options, deriving from results: {e}")

    def set_search_term(self, value: str) -> None:
        self.pending_search_term = value
        self._debouncer.push(value)

    def set_city(self, city: str) -> None:
        self._commit(self.description.with_city(city))

    def set_specialty(self, specialty: str) -> None:
        self._commit(self.description.with_specialty(specialty))

    def set_page(self, page: int) -> None:
        if page < 1:
            raise ValueError(f"page must be >= 1, got {page}")
        if page == self.page:
            return
        self.page = page
        self._schedule_fetch()
        self._notify()

    def _commit_search_term(self, value: str) -> None:
        self._commit(self.description.with_search_term(value.strip()))

    def _commit(self, description: QueryDescription) -> None:
        if description == self.description:
            return
        logger.info(f"🔎 Query changed: {description}")
        self.description = description
        # A new query always starts from the first page
        self.page = 1
        self._schedule_fetch()
        self._notify()

    # -----------------------------------------------------------------------
    # Fetching
    # -----------------------------------------------------------------------
    def _schedule_fetch(self) -> None:
        # Changes made in the same loop iteration share one request
        if self._flush_handle is None:
            self._flush_handle = asyncio.get_running_loop().call_soon(self._flush)

    def _flush(self) -> None:
        self._flush_handle = None
        self._sequence += 1
        token = self._sequence
        self.status = QueryStatus.FETCHING
        logger.info(f"🔄 Issuing request #{token}: {self.description}, page={self.page}")

        task = asyncio.ensure_future(self._run_fetch(token, self.description, self.page))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        self._notify()

    async def _run_fetch(self, token: int, description: QueryDescription, page: int) -> None:
        try:
            result = await asyncio.wait_for(self.client.fetch_page(description, page), self.fetch_timeout)
        except asyncio.TimeoutError:
            self._apply_failure(token, f"Request timed out after {self.fetch_timeout}s")
        except AdvocateFetchError as e:
            self._apply_failure(token, str(e))
        except Exception as e:
            logger.error(f"📋 Traceback: {traceback.format_exc()}")
            self._apply_failure(token, f"Unexpected error: {e}")
        else:
            self._apply_result(token, result)

    def _is_stale(self, token: int) -> bool:
        if token != self._sequence:
            logger.info(f"🗑️ Discarding stale response #{token} (latest is #{self._sequence})")
            return True
        return False

    def _apply_result(self, token: int, result: ResultPage) -> None:
        if self._is_stale(token):
            return
        self.status = QueryStatus.READY
        self.result = result
        self.last_error = None
        if not self._options_from_server:
            self.filter_options = derive_filter_options(result.records)
        logger.info(f"✅ Request #{token} applied: {len(result.records)} of {result.total}")
        self._notify()

    def _apply_failure(self, token: int, message: str) -> None:
        if self._is_stale(token):
            return
        # Last good result stays visible
        self.status = QueryStatus.ERROR
        self.last_error = message
        logger.warning(f"⚠️ Request #{token} failed: {message}")
        self._notify()

    # -----------------------------------------------------------------------
    # Lifecycle
    # -----------------------------------------------------------------------
    async def settle(self) -> ViewState:
        """Wait until no edit is buffered and no request is scheduled or in flight."""
        while True:
            in_flight = [task for task in self._tasks if not task.done()]
            if in_flight:
                await asyncio.wait(in_flight)
            elif self._tasks or self._flush_handle is not None:
                await asyncio.sleep(0)
            elif self._debouncer.pending:
                await asyncio.sleep(self._debouncer.remaining())
            else:
                return self.snapshot()

    async def close(self) -> None:
        self._debouncer.cancel()
        if self._flush_handle is not None:
            self._flush_handle.cancel()
            self._flush_handle = None
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
