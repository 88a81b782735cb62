"""Time-limit parsing — pure business logic.

Converts the stored limit strings ("Sin límite", "08:00 - 09:00", legacy
"Limites: 8:00 - 9:00") into LimitWindow variants and back.

Parsing is fail-open: anything unreadable becomes NO_LIMIT and is logged,
so one bad record never blocks the expiry scan.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime

from src.data.models import NO_LIMIT, LimitWindow, Unlimited, Window

logger = logging.getLogger(__name__)

NO_LIMIT_LABEL = "Sin límite"

_WINDOW_RE = re.compile(r"(\d{1,2}:\d{2})\s*-\s*(\d{1,2}:\d{2})")
_SINGLE_RE = re.compile(r"^\s*(\d{1,2}:\d{2})\s*$")


def time_str_to_minutes(time_str: str) -> int | None:
    """Convert an HH:MM string to minutes from midnight, or None."""
    if not time_str:
        return None
    try:
        t = datetime.strptime(time_str.strip(), "%H:%M").time()
    except (ValueError, TypeError):
        return None
    return t.hour * 60 + t.minute


def minutes_to_time_str(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def parse_limit(raw: str | None) -> LimitWindow:
    """Parse a stored limit string into Unlimited or Window.

    Accepts "HH:MM - HH:MM" anywhere in the string, or a bare "HH:MM"
    which is read as a deadline (window from midnight).
    """
    if raw is None:
        return NO_LIMIT
    text = raw.strip()
    if not text or text.lower() == NO_LIMIT_LABEL.lower():
        return NO_LIMIT

    match = _WINDOW_RE.search(text)
    if match:
        start = time_str_to_minutes(match.group(1))
        end = time_str_to_minutes(match.group(2))
        if start is not None and end is not None:
            return Window(start=start, end=end)
    else:
        match = _SINGLE_RE.match(text)
        if match:
            end = time_str_to_minutes(match.group(1))
            if end is not None:
                return Window(start=0, end=end)

    logger.warning("Unparseable time limit %r, treating as no limit", raw)
    return NO_LIMIT


def format_limit(limits: LimitWindow) -> str:
    """Render a LimitWindow the way it is stored and displayed."""
    if isinstance(limits, Unlimited):
        return NO_LIMIT_LABEL
    return f"{minutes_to_time_str(limits.start)} - {minutes_to_time_str(limits.end)}"


def is_past_limit(limits: LimitWindow, now_minutes: int) -> bool:
    """True if now_minutes is strictly after the window's end."""
    if isinstance(limits, Window):
        return limits.end < now_minutes
    return False
