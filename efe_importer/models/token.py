from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Mapping, Optional

from ..utils.settings_store import coerce_datetime

# The API issues tokens valid for 24 hours; ours expire an hour early.
TOKEN_LIFETIME = timedelta(hours=23)


@dataclass(slots=True)
class AccessToken:
    value: str
    expiration: datetime

    @classmethod
    def issue(cls, value: str, *, now: datetime) -> "AccessToken":
        return cls(value=value, expiration=now + TOKEN_LIFETIME)

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expiration

    def to_dict(self) -> dict:
        return {"value": self.value, "expiration": self.expiration.isoformat()}

    @classmethod
    def from_dict(cls, data: Any) -> Optional["AccessToken"]:
        """Rebuild a stored token; returns None for anything incomplete."""
        if not isinstance(data, Mapping):
            return None
        value = data.get("value")
        expiration = data.get("expiration")
        if not value or not expiration:
            return None
        expiration = coerce_datetime(expiration)
        if expiration is None:
            return None
        return cls(value=str(value), expiration=expiration)
