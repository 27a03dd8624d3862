import logging
from dataclasses import dataclass
from typing import Optional

import requests
from mgnrega_dashboard.core.config import settings
from mgnrega_dashboard.engine.aggregation import match_district
from mgnrega_dashboard.services.data_fetcher import get_session_with_retries

logger = logging.getLogger("geo")

STATUS_UNSUPPORTED = "Geolocation not supported by your browser."
STATUS_DETECTING = "Detecting your location..."
STATUS_DENIED = "Location permission denied."
STATUS_UNDETERMINED = "Could not determine district name."
STATUS_LOOKUP_FAILED = "Failed to fetch district name."


class GeocodingError(Exception):
    pass


@dataclass
class LocationResult:
    status: str
    detected: Optional[str] = None
    matched: Optional[str] = None


def district_from_address(location):
    """Pick the most specific admin name from a reverse-geocoding response."""
    if not isinstance(location, dict):
        return ""
    address = location.get("address") or {}
    if not isinstance(address, dict):
        return ""
    for key in ("district", "city", "county"):
        value = address.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return ""


def reverse_geocode(latitude, longitude, timeout=None):
    params = {"format": "jsonv2", "lat": latitude, "lon": longitude}
    try:
        with get_session_with_retries(total=1) as s:
            response = s.get(settings.GEOCODER_URL, params=params, timeout=timeout or settings.REQUEST_TIMEOUT)
            response.raise_for_status()
            return response.json()
    except (requests.exceptions.RequestException, ValueError) as e:
        raise GeocodingError(str(e)) from e


def resolve_location(detected, known_districts):
    if not detected:
        return LocationResult(status=STATUS_UNDETERMINED)

    matched = match_district(detected, known_districts)
    if matched:
        return LocationResult(status=f"Auto-selected district: {matched}", detected=detected, matched=matched)
    return LocationResult(status=f'District "{detected}" not found in data.', detected=detected)


def locate(latitude, longitude, known_districts, timeout=None):
    """Reverse-geocode coordinates and match them to one of ``known_districts``.

    Failures only change the status text; they never raise.
    """
    if latitude is None or longitude is None:
        return LocationResult(status=STATUS_UNSUPPORTED)

    logger.info(f"Detected coordinates: {latitude}, {longitude}")
    try:
        location = reverse_geocode(latitude, longitude, timeout=timeout)
    except GeocodingError as e:
        logger.error(f"Reverse geocode error: {e}")
        return LocationResult(status=STATUS_LOOKUP_FAILED)

    return resolve_location(district_from_address(location), known_districts)
