import os
from dotenv import load_dotenv, find_dotenv
from functools import lru_cache

# Load environment
load_dotenv(find_dotenv())


def _float_env(name, default):
    try:
        return float(os.getenv(name, default))
    except (TypeError, ValueError):
        return float(default)


def _int_env(name, default):
    try:
        return int(os.getenv(name, default))
    except (TypeError, ValueError):
        return int(default)


@lru_cache
def get_settings():
    API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:5000/api").rstrip("/")
    GEOCODER_URL = os.getenv(
        "GEOCODER_URL",
        "https://nominatim.openstreetmap.org/reverse"
    )

    # Upstream calls are unbounded in the browser; cap them here
    REQUEST_TIMEOUT = _float_env("REQUEST_TIMEOUT", 10)
    CACHE_TTL = _int_env("CACHE_TTL", 600)
    TOP_N = _int_env("TOP_N", 12)

    SPEECH_LOCALE = os.getenv("SPEECH_LOCALE", "en-IN")
    USER_AGENT = os.getenv("USER_AGENT", "MgnregaDashboard/1.0")
    CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

    return type(
        "Settings",
        (),
        {
            "API_BASE_URL": API_BASE_URL,
            "GEOCODER_URL": GEOCODER_URL,
            "REQUEST_TIMEOUT": REQUEST_TIMEOUT,
            "CACHE_TTL": CACHE_TTL,
            "TOP_N": TOP_N,
            "SPEECH_LOCALE": SPEECH_LOCALE,
            "USER_AGENT": USER_AGENT,
            "CORS_ORIGINS": CORS_ORIGINS,
        },
    )()

settings = get_settings()
