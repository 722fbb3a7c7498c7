import logging
import os

logger = logging.getLogger(__name__)


def _canon_prefix(val):
    """
    Normalize API prefix to always be exactly like '/api':
      - defaults to '/api' when unset/empty
      - ensures a single leading slash
      - removes any trailing slash (except for root)
    """
    val = (val or "/api").strip()
    if not val.startswith("/"):
        val = "/" + val
    if len(val) > 1 and val.endswith("/"):
        val = val[:-1]
    return val


def _parse_ttl(env_var: str, default: float) -> float:
    raw_value = os.getenv(env_var)
    if raw_value is None or not raw_value.strip():
        return default
    try:
        value = float(raw_value)
    except ValueError:
        logger.warning(
            "%s is not a valid number (got %r); defaulting to %.0f",
            env_var,
            raw_value,
            default,
        )
        return default
    return max(value, 0.0)


API_PREFIX = _canon_prefix(os.getenv("API_PREFIX"))

# Stroke bounds for a single hole; 0 means "no score entered".
MIN_STROKES = 0
MAX_STROKES = 15

CLUBHOUSE_SESSION_HEADER = "X-Clubhouse-Session"
CLUBHOUSE_DISPLAY_NAME_MAX = 50

HOLE_CACHE_TTL_SECONDS = _parse_ttl("HOLE_CACHE_TTL_SECONDS", 300.0)
