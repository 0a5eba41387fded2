from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(slots=True)
class Image:
    """An image referenced by a feed article and, once resolved, its local copy.

    ``publish_date`` selects the ``<year>/<month>`` upload subdirectory.
    ``local_url`` stays ``None`` until the image has been resolved by
    :class:`efe_importer.processors.ImageResolver`.
    """

    download_url: Optional[str]
    filename: Optional[str]
    filesize: int = 0
    width: int = 0
    height: int = 0
    mime_type: Optional[str] = None
    caption: Optional[str] = None
    publish_date: Optional[datetime] = None
    local_url: Optional[str] = None
    download_failed: bool = False

    @property
    def is_valid(self) -> bool:
        return bool(self.download_url and self.filename) and not self.download_failed
