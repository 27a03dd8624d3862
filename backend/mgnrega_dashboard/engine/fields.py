# backend/mgnrega_dashboard/engine/fields.py
"""Field lookup for upstream records whose key spelling changes between responses.

data.gov.in resources mix snake_case, spaced and CamelCase keys for the same
quantity, so every logical field is looked up through an ordered alias chain.
"""
import math
from typing import Any, Mapping, Sequence

# canonical field -> accepted source keys, highest priority first
ALIASES = {
    "state_name": ("State Name", "StateName", "state_name"),
    "district_name": ("District Name", "DistrictName", "district_name", "district"),
    "total_workers": ("Total_No_of_Workers", "Total No of Workers", "TotalWorkers"),
    "total_households": (
        "Total_Households_Worked",
        "Total Households Worked",
        "TotalHouseholdsWorked",
        "total_households_worked",
    ),
    "total_expenditure": ("Total_Exp", "Total Exp", "TotalExp", "total_expenditure"),
    "completed_works": (
        "Number_of_Completed_Works",
        "Number of Completed Works",
        "CompletedWorks",
    ),
    "ongoing_works": (
        "Number_of_Ongoing_Works",
        "Number of Ongoing Works",
        "OngoingWorks",
    ),
    "active_workers": (
        "Total_No_of_Active_Workers",
        "Total No of Active Workers",
        "TotalActiveWorkers",
    ),
    "average_wage": (
        "Average_Wage_rate_per_day_per_person",
        "Average Wage Rate Per Day Per Person",
        "AverageWageRatePerDay",
        "avg_wage",
    ),
}


def _is_blank(v) -> bool:
    return v is None or (isinstance(v, str) and not v.strip())


def to_number(v):
    """Coerce an upstream value to a finite float, or None when it is not numeric."""
    if isinstance(v, bool):
        return None
    if isinstance(v, (int, float)):
        n = float(v)
    elif isinstance(v, str):
        try:
            n = float(v.replace(",", "").strip())
        except ValueError:
            return None
    else:
        return None
    return n if math.isfinite(n) else None


def resolve_number(record: Mapping[str, Any], aliases: Sequence[str], fallback: float = 0) -> float:
    """Return the first numeric value found under ``aliases``.

    A present ``0`` counts as a match. Absent keys, ``None`` and blank strings
    are skipped, and so are values that do not parse as numbers.
    """
    if not isinstance(record, Mapping):
        return fallback
    for key in aliases:
        if key not in record:
            continue
        value = record[key]
        if _is_blank(value):
            continue
        n = to_number(value)
        if n is not None:
            return n
    return fallback


def resolve_text(record: Mapping[str, Any], aliases: Sequence[str], fallback: str = "Unknown") -> str:
    if not isinstance(record, Mapping):
        return fallback
    for key in aliases:
        value = record.get(key)
        if _is_blank(value):
            continue
        text = str(value).strip()
        if text:
            return text
    return fallback


def field(record, name, fallback=0):
    """Shorthand for ``resolve_number`` against a canonical field from ``ALIASES``."""
    return resolve_number(record, ALIASES[name], fallback)
