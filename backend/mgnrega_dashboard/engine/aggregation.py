# backend/mgnrega_dashboard/engine/aggregation.py
"""KPI aggregation, chart ranking and per-household rates over raw MGNREGA records.

Nothing here raises on malformed records: numbers fall back to 0 and names
to "Unknown", and an empty input gives zero-valued aggregates.
"""
import math
from dataclasses import asdict, dataclass
from typing import Iterable, List, Optional

from mgnrega_dashboard.engine.fields import ALIASES, field, resolve_text

ALL_STATES = "All"
DEFAULT_TOP_N = 12
PER_HOUSEHOLDS = 1000


@dataclass(frozen=True)
class CanonicalMetrics:
    district_name: str
    state_name: str
    total_workers: float
    total_households: float
    total_expenditure: float
    completed_works: float
    average_wage_rate: float
    active_workers: float = 0.0
    ongoing_works: float = 0.0


@dataclass(frozen=True)
class SummaryStatistics:
    total_workers: float = 0.0
    total_households: float = 0.0
    total_expenditure: float = 0.0
    completed_works: float = 0.0
    average_wage: float = 0.0

    def as_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class ChartPoint:
    district: str
    wage: float

    @property
    def label(self):
        return self.district

    @property
    def value(self):
        return self.wage

    def as_dict(self):
        return {"district": self.district, "wage": self.wage}


@dataclass(frozen=True)
class NormalizedRecord(CanonicalMetrics):
    active_workers_per_1000_hh: float = 0.0
    ongoing_works_per_1000_hh: float = 0.0
    completed_works_per_1000_hh: float = 0.0

    def as_dict(self):
        return asdict(self)


def round_half_up(v):
    return int(math.floor(v + 0.5))


def state_of(record):
    return resolve_text(record, ALIASES["state_name"], fallback="")


def district_of(record):
    return resolve_text(record, ALIASES["district_name"])


def canonicalize(record) -> CanonicalMetrics:
    def amount(name):
        return max(field(record, name), 0.0)

    return CanonicalMetrics(
        district_name=district_of(record),
        state_name=state_of(record) or "Unknown",
        total_workers=amount("total_workers"),
        total_households=amount("total_households"),
        total_expenditure=amount("total_expenditure"),
        completed_works=amount("completed_works"),
        average_wage_rate=amount("average_wage"),
        active_workers=amount("active_workers"),
        ongoing_works=amount("ongoing_works"),
    )


def is_all(selector):
    """True for the "All" sentinel in any casing, and for an empty selector."""
    return not selector or not str(selector).strip() or str(selector).strip().casefold() == ALL_STATES.casefold()


def filter_records(records: Iterable, selector: Optional[str]) -> List:
    """Records of one state, or every record for "All" / an empty selector."""
    records = list(records)
    if is_all(selector):
        return records
    wanted = str(selector).strip().casefold()
    return [r for r in records if state_of(r).casefold() == wanted]


def list_states(records: Iterable) -> List[str]:
    states = {state_of(r) for r in records}
    states.discard("")
    return [ALL_STATES] + sorted(states)


def list_districts(records: Iterable) -> List[str]:
    seen = []
    for r in records:
        name = resolve_text(r, ALIASES["district_name"], fallback="")
        if name and name not in seen:
            seen.append(name)
    return seen


def summarize(records: Iterable) -> SummaryStatistics:
    """Sums of the KPI fields plus the mean of the districts that report a wage.

    Zero or missing wages are left out of both numerator and denominator.
    """
    metrics = [canonicalize(r) for r in records]
    if not metrics:
        return SummaryStatistics()

    wages = [m.average_wage_rate for m in metrics if m.average_wage_rate > 0]
    return SummaryStatistics(
        total_workers=sum(m.total_workers for m in metrics),
        total_households=sum(m.total_households for m in metrics),
        total_expenditure=sum(m.total_expenditure for m in metrics),
        completed_works=sum(m.completed_works for m in metrics),
        average_wage=sum(wages) / len(wages) if wages else 0.0,
    )


def top_by_wage(records: Iterable, n: int = DEFAULT_TOP_N) -> List[ChartPoint]:
    points = [ChartPoint(district=district_of(r), wage=field(r, "average_wage")) for r in records]
    if n <= 0:
        return []
    # sorted() is stable, ties keep upstream order
    return sorted(points, key=lambda p: p.wage, reverse=True)[:n]


def _per_households(count, households):
    # without a household count the rate is the raw count
    if households < 1:
        return count
    return count / households * PER_HOUSEHOLDS


def normalize(record) -> NormalizedRecord:
    m = canonicalize(record)
    return NormalizedRecord(
        **asdict(m),
        active_workers_per_1000_hh=_per_households(m.active_workers, m.total_households),
        ongoing_works_per_1000_hh=_per_households(m.ongoing_works, m.total_households),
        completed_works_per_1000_hh=_per_households(m.completed_works, m.total_households),
    )


def normalize_all(records: Iterable) -> List[NormalizedRecord]:
    return [normalize(r) for r in records]


def filter_by_district(rows: Iterable[NormalizedRecord], district: Optional[str]) -> List[NormalizedRecord]:
    rows = list(rows)
    if not district:
        return rows
    return [r for r in rows if r.district_name == district]


def summarize_performance(rows: Iterable[NormalizedRecord]):
    """Totals for the performance view.

    Unlike ``summarize`` the wage average runs over every row, zeros included.
    """
    rows = list(rows)
    return {
        "total_active_workers": sum(r.active_workers for r in rows),
        "total_ongoing_works": sum(r.ongoing_works for r in rows),
        "total_completed_works": sum(r.completed_works for r in rows),
        "average_wage": round(sum(r.average_wage_rate for r in rows) / max(len(rows), 1), 2),
    }


def table_rows(records: Iterable):
    rows = []
    for r in records:
        m = canonicalize(r)
        rows.append({
            "district": m.district_name,
            "wage": round_half_up(m.average_wage_rate),
            "workers": m.total_workers,
            "households": m.total_households,
            "expenditure": round_half_up(m.total_expenditure),
        })
    return rows


def wage_insights(records: Iterable):
    """Highest, lowest and average wage across districts, or None without data."""
    metrics = [canonicalize(r) for r in records]
    if not metrics:
        return None

    # max/min return the first extreme, matching the district shown first
    highest = max(metrics, key=lambda m: m.average_wage_rate)
    lowest = min(metrics, key=lambda m: m.average_wage_rate)
    average = sum(m.average_wage_rate for m in metrics) / len(metrics)

    def _entry(m):
        return {"wage": m.average_wage_rate, "district": m.district_name, "state": m.state_name}

    return {
        "highest": _entry(highest),
        "lowest": _entry(lowest),
        "average": round_half_up(average),
        "districts": len(metrics),
    }


def match_district(detected: Optional[str], known: Iterable[str]) -> Optional[str]:
    """Loose two-way substring match of a geocoded name against known districts.

    "Delhi" matches "New Delhi" and "New Delhi District" matches "Delhi". The
    first known district that satisfies either direction wins.
    """
    if not detected or not detected.strip():
        return None
    needle = detected.strip().casefold()
    for name in known:
        if not name or not str(name).strip():
            continue
        candidate = str(name).strip().casefold()
        if needle in candidate or candidate in needle:
            return name
    return None
