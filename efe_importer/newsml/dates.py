from __future__ import annotations

from datetime import datetime, timezone

# NewsML uses the ISO 8601 basic format ("20210525T103000+0200"); some
# elements carry the extended form instead.
_FORMATS = (
    "%Y%m%dT%H%M%S%z",
    "%Y%m%dT%H%M%S",
    "%Y%m%dT%H%M%z",
    "%Y%m%dT%H%M",
    "%Y%m%d",
)


def parse_newsml_datetime(value: str) -> datetime:
    """Parse a NewsML date-time string into an aware datetime.

    Values without an offset are taken as UTC. Raises ValueError if no
    known format matches.
    """
    text = (value or "").strip()
    if not text:
        raise ValueError("Empty date-time value")

    parsed = None
    for fmt in _FORMATS:
        try:
            parsed = datetime.strptime(text, fmt)
            break
        except ValueError:
            continue
    if parsed is None:
        # Extended ISO 8601, e.g. 2021-05-25T10:30:00+02:00 or ...Z
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
