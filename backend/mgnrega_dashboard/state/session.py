import asyncio
import logging

from mgnrega_dashboard.core.config import settings
from mgnrega_dashboard.engine.aggregation import list_districts
from mgnrega_dashboard.services import data_fetcher, geolocation
from mgnrega_dashboard.state import store

logger = logging.getLogger("session")


async def _fetch_in_thread(selector):
    return await asyncio.to_thread(data_fetcher.fetch_performance, selector)


async def _locate_in_thread(latitude, longitude, known):
    return await asyncio.to_thread(geolocation.locate, latitude, longitude, known)


class DashboardSession:
    """Runs fetches and location lookups for one dashboard against a DashboardState.

    ``fetch`` and ``locate`` are coroutine functions; the defaults run the
    blocking HTTP clients in a worker thread.
    """

    def __init__(self, fetch=None, locate=None, timeout=None, state=None):
        self.fetch = fetch or _fetch_in_thread
        self.locate_fn = locate or _locate_in_thread
        self.timeout = timeout or settings.REQUEST_TIMEOUT
        self.state = state or store.DashboardState()

    def view(self, top_n=None):
        return store.build_view(self.state, top_n or settings.TOP_N)

    async def select_state(self, selector):
        self.state = store.state_selected(self.state, selector)
        token = self.state.request_token
        try:
            result = await asyncio.wait_for(self.fetch(self.state.selected_state), self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Fetch for {selector!r} timed out after {self.timeout}s")
            self.state = store.fetch_failed(self.state, token, "Request timed out")
            return self.state
        except Exception as e:
            logger.exception(f"Fetch for {selector!r} failed")
            self.state = store.fetch_failed(self.state, token, str(e))
            return self.state

        if token != self.state.request_token:
            logger.info(f"Discarding stale response for {selector!r}")
        if result.ok:
            self.state = store.fetch_succeeded(self.state, token, result.records, result.source)
        else:
            self.state = store.fetch_failed(self.state, token, result.error)
        return self.state

    def select_district(self, district):
        self.state = store.district_selected(self.state, district)
        return self.state

    async def locate(self, latitude, longitude, denied=False):
        if denied:
            self.state = store.location_denied(self.state)
            return self.state

        self.state = store.location_started(self.state)
        known = list_districts(self.state.records)
        try:
            result = await asyncio.wait_for(self.locate_fn(latitude, longitude, known), self.timeout)
        except asyncio.TimeoutError:
            result = geolocation.LocationResult(status=geolocation.STATUS_LOOKUP_FAILED)
        except Exception:
            logger.exception("Location lookup failed")
            result = geolocation.LocationResult(status=geolocation.STATUS_LOOKUP_FAILED)
        self.state = store.location_resolved(self.state, result)
        return self.state
