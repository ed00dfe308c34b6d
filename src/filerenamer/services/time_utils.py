from __future__ import annotations

import time
from datetime import datetime


def epoch_millis() -> int:
    return int(time.time() * 1000)


def local_date_yyyy_mm_dd(value: datetime | str | None) -> str | None:
    """Calendar date of `value` in local time, or None when it cannot be read."""

    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return None
    if not isinstance(value, datetime):
        return None
    moment = value.astimezone() if value.tzinfo else value
    return moment.date().isoformat()
