"""Best-effort coercion of loosely-typed listing fields.

Every function here returns a documented default instead of raising:
``None`` for prices and ratings, ``[]`` for amenities, ``False`` for the
superhost flag and ``""`` for truncated text.
"""

import json
import logging
import math
import re
from typing import Any

log = logging.getLogger(__name__)

ELLIPSIS = "…"

_NON_PRICE_CHARS = re.compile(r"[^0-9.]")


def coerce_price(raw: Any) -> float | None:
    """Parse a currency string such as ``"$1,234.50"`` into a number.

    Everything that is not a digit or a dot is discarded first.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
        return value if math.isfinite(value) else None
    cleaned = _NON_PRICE_CHARS.sub("", str(raw))
    if not cleaned:
        return None
    try:
        value = float(cleaned)
    except ValueError:
        log.debug(f"Unparseable price {raw!r}")
        return None
    return value if math.isfinite(value) else None


def coerce_amenities(raw: Any) -> list[str]:
    """Decode the JSON array of amenity names embedded in a string field."""
    if not isinstance(raw, str) or not raw:
        return []
    try:
        decoded = json.loads(raw)
    except (ValueError, RecursionError):
        log.debug(f"Amenities field is not valid JSON: {raw[:40]!r}")
        return []
    if not isinstance(decoded, list):
        return []
    if not all(isinstance(item, str) for item in decoded):
        return []
    return decoded


def coerce_superhost(raw: Any) -> bool:
    return raw is True or raw == "t"


def coerce_rating(raw: Any) -> float | None:
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
    elif isinstance(raw, str):
        try:
            value = float(raw.strip())
        except ValueError:
            return None
    else:
        return None
    return value if math.isfinite(value) else None


def truncate(text: Any, max_chars: int) -> str:
    """Trim *text* and cut it at *max_chars*, marking the cut with an ellipsis."""
    if text is None:
        return ""
    trimmed = str(text).strip()
    if not trimmed:
        return ""
    if len(trimmed) <= max_chars:
        return trimmed
    return trimmed[:max_chars].rstrip() + ELLIPSIS
