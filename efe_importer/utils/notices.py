from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime, timedelta, timezone
from typing import List, Literal, Optional

from .logging import get_logger
from .settings_store import LAST_SUCCESSFUL_RUN, NOTICES, SettingsStore

logger = get_logger("efe.notices")

NoticeType = Literal["error", "warning", "success", "info"]

# A failed refresh only raises a notice once the last good run is older than this.
FRESHNESS_THRESHOLD = timedelta(minutes=179)


@dataclass(slots=True)
class Notice:
    key: str
    message: str
    type: NoticeType = "error"


class Notices:
    """Standing warnings shown to whoever operates the importer.

    Notices are keyed so that repeated failures replace each other instead of
    piling up, and are persisted in the settings store between runs.
    """

    def __init__(self, store: SettingsStore) -> None:
        self.store = store

    def all(self) -> List[Notice]:
        rows = self.store.get(NOTICES) or []
        notices: List[Notice] = []
        for row in rows:
            if isinstance(row, dict) and row.get("key") and row.get("message"):
                notices.append(Notice(key=row["key"], message=row["message"], type=row.get("type", "error")))
        return notices

    def add(self, message: str | BaseException, key: str, type: NoticeType = "error") -> None:
        text = str(message)
        kept = [n for n in self.all() if n.key != key]
        kept.append(Notice(key=key, message=text, type=type))
        self.store.set(NOTICES, [asdict(n) for n in kept])

    def clear(self) -> None:
        self.store.set(NOTICES, [])


def is_stale(store: SettingsStore, *, now: Optional[datetime] = None) -> bool:
    """True when there was never a successful run, or the last one is too old."""
    now = now or datetime.now(timezone.utc)
    last_run = store.get_datetime(LAST_SUCCESSFUL_RUN)
    return last_run is None or last_run < now - FRESHNESS_THRESHOLD


def report_refresh_failure(store: SettingsStore, error: str | BaseException, *, now: Optional[datetime] = None) -> bool:
    """Record a failed refresh as a standing notice if the data has gone stale.

    Returns True if a notice was added.
    """
    if not is_stale(store, now=now):
        logger.info("Refresh failed but last successful run is recent; not raising a notice: %s", error)
        return False
    Notices(store).add(error, "refresh-error", "error")
    return True
