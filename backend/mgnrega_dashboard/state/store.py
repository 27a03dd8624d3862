# backend/mgnrega_dashboard/state/store.py
"""Dashboard state and its pure transitions.

Each fetch is tagged with the request token current when it was issued.
Results carrying an older token are dropped, so a slow response for a
previous selection can never replace the data of the latest one.
"""
from dataclasses import asdict, dataclass, field, replace
from typing import Optional, Tuple

from mgnrega_dashboard.engine import aggregation as agg
from mgnrega_dashboard.services.data_fetcher import ERROR_SOURCE
from mgnrega_dashboard.services.geolocation import STATUS_DENIED, STATUS_DETECTING, LocationResult
from mgnrega_dashboard.services.speech import build_announcement


@dataclass(frozen=True)
class DashboardState:
    selected_state: str = agg.ALL_STATES
    records: Tuple[dict, ...] = field(default_factory=tuple)
    source: str = ""
    loading: bool = False
    error: Optional[str] = None
    request_token: int = 0
    selected_district: str = ""
    location_status: str = ""


def state_selected(state, selector):
    """Start a new fetch cycle; the returned state carries the token to fetch under."""
    return replace(
        state,
        selected_state=selector or agg.ALL_STATES,
        loading=True,
        error=None,
        request_token=state.request_token + 1,
    )


def fetch_succeeded(state, token, records, source):
    if token != state.request_token:
        return state
    return replace(
        state,
        records=tuple(records),
        source=source or "Unknown",
        loading=False,
        error=None,
    )


def fetch_failed(state, token, message):
    if token != state.request_token:
        return state
    return replace(state, records=(), source=ERROR_SOURCE, loading=False, error=message)


def district_selected(state, district):
    return replace(state, selected_district=district or "")


def location_started(state):
    return replace(state, location_status=STATUS_DETECTING)


def location_denied(state):
    return replace(state, location_status=STATUS_DENIED)


def location_resolved(state, result: LocationResult):
    state = replace(state, location_status=result.status)
    if result.matched:
        state = district_selected(state, result.matched)
    return state


def build_view(state, top_n=agg.DEFAULT_TOP_N):
    """Everything the wage and performance screens render, derived from ``state``."""
    filtered = agg.filter_records(state.records, state.selected_state)
    chart = agg.top_by_wage(filtered, top_n)
    normalized = agg.normalize_all(state.records)
    performance_rows = agg.filter_by_district(normalized, state.selected_district)
    announcement = build_announcement(chart)

    return {
        "state": state.selected_state,
        "source": state.source or "Unknown",
        "loading": state.loading,
        "error": state.error,
        "states": agg.list_states(state.records),
        "kpis": agg.summarize(filtered).as_dict(),
        "chart": [p.as_dict() for p in chart],
        "table": agg.table_rows(filtered),
        "announcement": asdict(announcement) if announcement else None,
        "performance": {
            "district": state.selected_district,
            "districts": agg.list_districts(state.records),
            "summary": agg.summarize_performance(performance_rows),
            "rows": [r.as_dict() for r in performance_rows],
        },
        "location_status": state.location_status,
    }
