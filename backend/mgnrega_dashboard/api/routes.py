import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Query
from mgnrega_dashboard.core.config import settings
from mgnrega_dashboard.engine import aggregation as agg
from mgnrega_dashboard.services.cache import cache_get, cache_set
from mgnrega_dashboard.services.data_fetcher import fetch_district, fetch_districts, fetch_performance
from mgnrega_dashboard.services.geolocation import STATUS_DENIED, locate
from mgnrega_dashboard.state import store


router = APIRouter()
logger = logging.getLogger("api")


def _now():
    return datetime.now(timezone.utc).isoformat()


# ---------- HELPERS ----------
def _load(state=None):
    """Performance records for ``state`` (None for all), served from cache when fresh."""
    state = None if agg.is_all(state) else state.strip()
    cache_key = f"performance:{(state or agg.ALL_STATES).upper()}"

    if cached := cache_get(cache_key):
        return cached, True

    result = fetch_performance(state)
    if result.ok:
        cache_set(cache_key, result)
    else:
        logger.warning(f"Serving empty dataset for {cache_key}: {result.error}")
    return result, False


def _session_state(result, selector="All", district=""):
    state = store.state_selected(store.DashboardState(selected_district=district), selector)
    if result.ok:
        return store.fetch_succeeded(state, state.request_token, result.records, result.source)
    return store.fetch_failed(state, state.request_token, result.error)


# ---------- HEALTH ----------
@router.get("/api/v1/health")
def health():
    return {"status": "ok", "time": _now()}


# ---------- STATES ----------
@router.get("/api/v1/states")
def list_states():
    result, from_cache = _load()
    return {
        "states": agg.list_states(result.records),
        "source": result.source,
        "from_cache": from_cache,
        "error": result.error,
    }


# ---------- DASHBOARD ----------
@router.get("/api/v1/dashboard")
def dashboard(state: str = Query(agg.ALL_STATES), top: Optional[int] = Query(None, ge=1, le=100)):
    result, from_cache = _load(state)
    view = store.build_view(_session_state(result, state), top or settings.TOP_N)
    view.pop("performance")
    view.pop("location_status")
    view.update({"last_updated": _now(), "from_cache": from_cache})
    return view


# ---------- PERFORMANCE ----------
@router.get("/api/v1/performance")
def performance(district: str = Query("")):
    result, from_cache = _load()
    view = store.build_view(_session_state(result, district=district))
    payload = view["performance"]
    payload.update({
        "source": view["source"],
        "error": view["error"],
        "from_cache": from_cache,
        "last_updated": _now(),
    })
    return payload


# ---------- INSIGHTS ----------
@router.get("/api/v1/insights")
def insights(state: str = Query(agg.ALL_STATES)):
    result, _ = _load(state)
    filtered = agg.filter_records(result.records, state)
    return {"state": state, "source": result.source, "insights": agg.wage_insights(filtered)}


# ---------- LOCATION ----------
@router.get("/api/v1/locate")
def locate_district(
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lon: Optional[float] = Query(None, ge=-180, le=180),
    denied: bool = False,
):
    if denied:
        return {"status": STATUS_DENIED, "detected": None, "matched": None}

    result, _ = _load()
    found = locate(lat, lon, agg.list_districts(result.records))
    return {"status": found.status, "detected": found.detected, "matched": found.matched}


# ---------- DISTRICTS ----------
@router.get("/api/v1/districts")
def list_districts():
    cache_key = "districts:list"

    if cached := cache_get(cache_key):
        return {"districts": cached, "from_cache": True}

    districts = fetch_districts()
    if districts:
        cache_set(cache_key, districts)
    return {"districts": districts, "from_cache": False}


@router.get("/api/v1/district/{name}")
def district_detail(name: str):
    result = fetch_district(name)
    return {
        "district": name,
        "source": result.source,
        "error": result.error,
        "kpis": agg.summarize(result.records).as_dict(),
        "table": agg.table_rows(result.records),
        "performance": [r.as_dict() for r in agg.normalize_all(result.records)],
    }
