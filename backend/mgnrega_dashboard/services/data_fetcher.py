import logging
from dataclasses import dataclass, field
from typing import List, Optional
from urllib.parse import quote

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry
from mgnrega_dashboard.core.config import settings
from mgnrega_dashboard.engine.aggregation import is_all

logger = logging.getLogger("fetch")

ERROR_SOURCE = "Error / Fallback"


@dataclass
class FetchResult:
    records: List[dict] = field(default_factory=list)
    source: str = "Unknown"
    error: Optional[str] = None

    @property
    def ok(self):
        return self.error is None


def get_session_with_retries(total=3, backoff=1.0):
    s = requests.Session()
    retries = Retry(
        total=total,
        backoff_factor=backoff,
        status_forcelist=[429, 500, 502, 503, 504],
        allowed_methods=["GET"]
    )
    s.mount("https://", HTTPAdapter(max_retries=retries))
    s.mount("http://", HTTPAdapter(max_retries=retries))
    s.headers.update({"User-Agent": settings.USER_AGENT, "Accept": "application/json"})
    return s


def unwrap_payload(body):
    """Split a performance response into (source, records).

    The backend answers either with a bare list or with a
    ``{"source": ..., "data": [...]}`` envelope.
    """
    if isinstance(body, list):
        source, data = "API/Array", body
    elif isinstance(body, dict) and "data" in body:
        source, data = body.get("source") or "Unknown", body["data"]
    elif isinstance(body, dict):
        source, data = body.get("source") or "API", None
    else:
        source, data = "Unknown", None

    if not isinstance(data, list):
        return source, []
    return source, [r for r in data if isinstance(r, dict)]


def _get_json(path, params=None, timeout=None):
    url = f"{settings.API_BASE_URL}/{path.lstrip('/')}"
    with get_session_with_retries() as s:
        response = s.get(url, params=params, timeout=timeout or settings.REQUEST_TIMEOUT)
        response.raise_for_status()
        return response.json()


def fetch_performance(state=None, timeout=None):
    """Fetch MGNREGA performance records, optionally narrowed to one state upstream."""
    params = None if is_all(state) else {"state": state.strip()}
    try:
        source, records = unwrap_payload(_get_json("mgnrega/performance", params, timeout))
    except requests.exceptions.RequestException as e:
        logger.error(f"Performance request failed: {e}")
        return FetchResult(source=ERROR_SOURCE, error=str(e))
    except ValueError as e:
        # body was not JSON
        logger.error(f"Performance response could not be decoded: {e}")
        return FetchResult(source=ERROR_SOURCE, error=str(e))

    logger.info(f"Fetched {len(records)} performance records from {source}")
    return FetchResult(records=records, source=source)


def fetch_districts(timeout=None):
    try:
        body = _get_json("districts", timeout=timeout)
    except (requests.exceptions.RequestException, ValueError) as e:
        logger.error(f"District list request failed: {e}")
        return []
    if isinstance(body, dict):
        body = body.get("districts") or body.get("data") or []
    return body if isinstance(body, list) else []


def fetch_district(name, timeout=None):
    try:
        body = _get_json(f"district/{quote(name, safe='')}", timeout=timeout)
    except (requests.exceptions.RequestException, ValueError) as e:
        logger.error(f"District request for {name!r} failed: {e}")
        return FetchResult(source=ERROR_SOURCE, error=str(e))
    if isinstance(body, dict) and "data" not in body:
        # single-record response
        return FetchResult(records=[body], source=body.get("source") or "API")
    source, records = unwrap_payload(body)
    return FetchResult(records=records, source=source)
