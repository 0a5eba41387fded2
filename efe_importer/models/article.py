from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Literal, Optional

from .image import Image

# One value per supported wire format. Renderers branch on this tag.
ArticleFormat = Literal["newsml"]


@dataclass(slots=True)
class Article:
    """An article normalized from one item of a provider feed.

    ``is_valid`` is False when the source item could not be turned into an
    article (unsupported provider type, missing text content, unexpected
    structure). Invalid articles are never rendered into the output feed.
    """

    guid: str = ""
    title: str = ""
    publish_date: Optional[datetime] = None
    last_updated: Optional[datetime] = None
    description: Optional[str] = None
    body: str = ""
    subject_codes: List[str] = field(default_factory=list)
    featured_image: Optional[Image] = None
    is_valid: bool = True

    format: ArticleFormat = "newsml"
    feed_source: str = ""
    provider_id: Optional[str] = None
    # urn:newsml:<provider>:<date>:<guid>:<revision>
    public_identifier: Optional[str] = None

    @classmethod
    def invalid(cls, *, guid: str = "", format: ArticleFormat = "newsml", feed_source: str = "") -> "Article":
        return cls(guid=guid, is_valid=False, format=format, feed_source=feed_source)
