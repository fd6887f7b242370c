"""
Tests for the client-side query state controller: debouncing, coalescing,
page resets, stale-response discard and timeouts.
"""

import asyncio
import unittest

from advocates_api.client.advocate_client import AdvocateFetchError, ResultPage
from advocates_api.client.query_state import Debouncer, QueryStateController, QueryStatus
from advocates_api.models.advocate_model import Advocate
from advocates_api.search.filter_engine import FilterOptions
from advocates_api.search.query_builder import ALL, QueryDescription

DEBOUNCE_MS = 100


def make_advocate(id, city="Denver"):
    return Advocate(
        id=id,
        first_name=f"First{id}",
        last_name=f"Last{id}",
        city=city,
        degree="MD",
        specialties=["Bipolar"],
        years_of_experience=1,
        phone_number="5550000000",
    )


class FakeClient:
    """Records every request; each response is resolved by the test (or immediately)."""

    def __init__(self, auto_resolve=True, options=None):
        self.auto_resolve = auto_resolve
        self.options = options
        self.requests = []

    async def fetch_page(self, description, page):
        future = asyncio.get_running_loop().create_future()
        self.requests.append((description, page, future))
        if self.auto_resolve:
            future.set_result(ResultPage(records=[make_advocate(page)], total=13, page=page))
        return await future

    async def fetch_filter_options(self):
        if self.options is None:
            raise AdvocateFetchError("filters unavailable")
        return self.options

    def resolve(self, index, result):
        self.requests[index][2].set_result(result)

    def fail(self, index, error):
        self.requests[index][2].set_exception(error)


class ControllerTestBase(unittest.IsolatedAsyncioTestCase):

    client_kwargs = {}

    async def asyncSetUp(self):
        self.client = FakeClient(**self.client_kwargs)
        self.controller = QueryStateController(self.client, debounce_ms=DEBOUNCE_MS, fetch_timeout=1.0)
        self.states = []
        self.controller.subscribe(self.states.append)

    async def asyncTearDown(self):
        await self.controller.close()

    async def wait_for_requests(self, count):
        for _ in range(100):
            if len(self.client.requests) >= count:
                return
            await asyncio.sleep(0)
        self.fail(f"expected {count} requests, saw {len(self.client.requests)}")

    def request_args(self):
        return [(description, page) for description, page, _ in self.client.requests]


class TestInitialLoad(ControllerTestBase):

    async def test_starts_idle(self):
        self.assertEqual(self.controller.status, QueryStatus.IDLE)

    async def test_start_fetches_first_page(self):
        await self.controller.start()
        state = await self.controller.settle()
        self.assertEqual(self.request_args(), [(QueryDescription(), 1)])
        self.assertEqual(state.status, QueryStatus.READY)
        self.assertEqual(state.page_numbers, [1, 2, 3])
        self.assertIn(QueryStatus.FETCHING, [s.status for s in self.states])

    async def test_options_derived_from_results_when_endpoint_fails(self):
        await self.controller.start()
        state = await self.controller.settle()
        self.assertEqual(state.filter_options.cities, [ALL, "Denver"])

    async def test_server_options_are_kept(self):
        self.client.options = FilterOptions(cities=[ALL, "Austin", "Denver"], specialties=[ALL])
        await self.controller.start()
        state = await self.controller.settle()
        self.assertEqual(state.filter_options.cities, [ALL, "Austin", "Denver"])


class TestDebounce(ControllerTestBase):

    async def test_rapid_edits_commit_once_with_last_value(self):
        self.controller.set_search_term("J")
        await asyncio.sleep(0.005)
        self.controller.set_search_term("Jo")
        await asyncio.sleep(0.005)
        self.controller.set_search_term("John")
        self.assertEqual(self.client.requests, [])

        await self.controller.settle()
        self.assertEqual(self.request_args(), [(QueryDescription("John"), 1)])
        self.assertEqual(self.controller.description.search_term, "John")

    async def test_nothing_committed_before_quiet_period(self):
        self.controller.set_search_term("Jo")
        await asyncio.sleep(0)
        self.assertEqual(self.controller.description, QueryDescription())
        self.assertEqual(self.controller.pending_search_term, "Jo")

    async def test_unchanged_term_issues_no_request(self):
        self.controller.set_search_term("  ")
        await self.controller.settle()
        self.assertEqual(self.client.requests, [])


class TestDebouncer(unittest.IsolatedAsyncioTestCase):

    async def test_cancel_and_restart(self):
        fired = []
        debouncer = Debouncer(0.02, fired.append)
        debouncer.push("a")
        debouncer.push("b")
        self.assertTrue(debouncer.pending)
        await asyncio.sleep(0.05)
        self.assertEqual(fired, ["b"])
        self.assertFalse(debouncer.pending)

    async def test_cancel(self):
        fired = []
        debouncer = Debouncer(0.01, fired.append)
        debouncer.push("a")
        debouncer.cancel()
        await asyncio.sleep(0.03)
        self.assertEqual(fired, [])


class TestPageAndQueryChanges(ControllerTestBase):

    async def test_query_change_resets_page(self):
        self.controller.set_page(3)
        await self.controller.settle()
        self.assertEqual(self.request_args()[-1][1], 3)

        self.controller.set_search_term("new")
        await self.controller.settle()
        self.assertEqual(self.request_args()[-1], (QueryDescription("new"), 1))
        self.assertEqual(self.controller.page, 1)

    async def test_select_change_resets_page(self):
        self.controller.set_page(2)
        await self.controller.settle()
        self.controller.set_specialty("Bipolar")
        await self.controller.settle()
        self.assertEqual(self.request_args()[-1], (QueryDescription(selected_specialty="Bipolar"), 1))

    async def test_page_change_keeps_description(self):
        self.controller.set_city("Denver")
        await self.controller.settle()
        self.controller.set_page(2)
        await self.controller.settle()
        self.assertEqual(self.request_args()[-1], (QueryDescription(selected_city="Denver"), 2))

    async def test_same_tick_changes_coalesce(self):
        self.controller.set_page(3)
        self.controller.set_city("Chicago")
        await self.controller.settle()
        self.assertEqual(self.request_args(), [(QueryDescription(selected_city="Chicago"), 1)])

    async def test_same_tick_query_then_page_carries_both(self):
        self.controller.set_city("Chicago")
        self.controller.set_page(2)
        await self.controller.settle()
        self.assertEqual(self.request_args(), [(QueryDescription(selected_city="Chicago"), 2)])

    async def test_same_page_is_a_no_op(self):
        self.controller.set_page(1)
        await self.controller.settle()
        self.assertEqual(self.client.requests, [])

    async def test_invalid_page(self):
        with self.assertRaises(ValueError):
            self.controller.set_page(0)


class TestStaleResponses(ControllerTestBase):

    client_kwargs = {"auto_resolve": False}

    async def test_superseded_response_is_discarded(self):
        await self.controller.start()
        await self.wait_for_requests(1)
        self.controller.set_page(2)
        await self.wait_for_requests(2)
        self.assertEqual([page for _, page in self.request_args()], [1, 2])

        result_b = ResultPage(records=[make_advocate(7)], total=13, page=2)
        result_a = ResultPage(records=[make_advocate(1)], total=13, page=1)
        self.client.resolve(1, result_b)
        self.client.resolve(0, result_a)
        state = await self.controller.settle()

        self.assertEqual(state.result, result_b)
        self.assertEqual(state.page, 2)
        self.assertEqual(state.status, QueryStatus.READY)

    async def test_stale_failure_is_discarded(self):
        self.controller.set_page(2)
        await self.wait_for_requests(1)
        self.controller.set_page(3)
        await self.wait_for_requests(2)

        result = ResultPage(records=[make_advocate(13)], total=13, page=3)
        self.client.resolve(1, result)
        self.client.fail(0, AdvocateFetchError("boom"))
        state = await self.controller.settle()

        self.assertEqual(state.status, QueryStatus.READY)
        self.assertIsNone(state.last_error)
        self.assertEqual(state.result, result)

    async def test_sequence_is_monotonic(self):
        self.controller.set_page(2)
        await self.wait_for_requests(1)
        self.controller.set_page(3)
        await self.wait_for_requests(2)
        self.assertEqual(self.controller.sequence, 2)


class TestErrors(ControllerTestBase):

    client_kwargs = {"auto_resolve": False}

    async def test_failure_keeps_last_good_result(self):
        self.controller.set_page(2)
        await self.wait_for_requests(1)
        good = ResultPage(records=[make_advocate(7)], total=13, page=2)
        self.client.resolve(0, good)
        await self.controller.settle()

        self.controller.set_page(3)
        await self.wait_for_requests(2)
        self.client.fail(1, AdvocateFetchError("Advocates API returned 500."))
        state = await self.controller.settle()

        self.assertEqual(state.status, QueryStatus.ERROR)
        self.assertEqual(state.last_error, "Advocates API returned 500.")
        self.assertEqual(state.result, good)

    async def test_fetch_that_never_resolves_times_out(self):
        self.controller.fetch_timeout = 0.02
        self.controller.set_page(2)
        state = await self.controller.settle()
        self.assertEqual(state.status, QueryStatus.ERROR)
        self.assertIn("timed out", state.last_error)

    async def test_recovers_after_error(self):
        self.controller.set_page(2)
        await self.wait_for_requests(1)
        self.client.fail(0, AdvocateFetchError("down"))
        await self.controller.settle()

        self.controller.set_page(3)
        await self.wait_for_requests(2)
        self.client.resolve(1, ResultPage(records=[], total=0, page=3))
        state = await self.controller.settle()
        self.assertEqual(state.status, QueryStatus.READY)
        self.assertIsNone(state.last_error)


if __name__ == "__main__":
    unittest.main()
