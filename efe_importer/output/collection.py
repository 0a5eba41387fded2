from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import List, Literal, Optional

from lxml import etree

from ..errors import SaveError, ValidationError
from ..models import Article
from ..processors.images import ImageResolver
from ..utils.logging import get_logger
from .renderers import ATOM_NS, CONTENT_NS, atom_date, render_atom_entry, render_rss_item, rss_date

logger = get_logger("efe.output.collection")

FeedFormat = Literal["rss", "atom"]

CHANNEL_TITLE = "EFE Importer Articles"
CHANNEL_DESCRIPTION = "Document created by the EFE Importer"
CHANNEL_LANGUAGE = "ES"


class ArticleCollection:
    """Articles from one ingestion run, in source document order.

    Serializing is a two step affair: :meth:`resolve_images` downloads any
    pending images, then the document is rendered from the articles without
    further side effects. :meth:`serialize` does both unless told otherwise.
    """

    def __init__(
        self,
        *,
        publication_date: Optional[datetime] = None,
        resolver: Optional[ImageResolver] = None,
    ) -> None:
        self.publication_date = publication_date or datetime.now(timezone.utc)
        self.resolver = resolver
        self.articles: List[Article] = []

    def __len__(self) -> int:
        return len(self.articles)

    def add_article(self, article: Article) -> None:
        self.articles.append(article)

    @property
    def valid_articles(self) -> List[Article]:
        return [a for a in self.articles if a.is_valid]

    def has_articles(self) -> bool:
        return bool(self.valid_articles)

    def is_valid(self) -> bool:
        return self.has_articles()

    # ---------------- Images -----------------
    def resolve_images(self) -> int:
        """Resolve the featured image of each valid article; returns how many are local."""
        if self.resolver is None:
            return 0
        resolved = 0
        for article in self.valid_articles:
            image = article.featured_image
            if image is None:
                continue
            if self.resolver.get_local_url(image, article.feed_source):
                resolved += 1
        logger.info("Resolved %d image(s) for %d article(s)", resolved, len(self.valid_articles))
        return resolved

    # ---------------- Documents -----------------
    def to_rss(self) -> etree._Element:
        rss = etree.Element("rss", version="2.0", nsmap={"content": CONTENT_NS})
        channel = etree.SubElement(rss, "channel")
        etree.SubElement(channel, "title").text = CHANNEL_TITLE
        etree.SubElement(channel, "description").text = CHANNEL_DESCRIPTION
        etree.SubElement(channel, "language").text = CHANNEL_LANGUAGE
        etree.SubElement(channel, "pubDate").text = rss_date(self.publication_date)
        for article in self.articles:
            item = render_rss_item(article)
            if item is not None:
                channel.append(item)
        return rss

    def to_atom(self) -> etree._Element:
        ns = f"{{{ATOM_NS}}}"
        feed = etree.Element(f"{ns}feed", nsmap={None: ATOM_NS})
        etree.SubElement(feed, f"{ns}title").text = CHANNEL_TITLE
        etree.SubElement(feed, f"{ns}subtitle").text = CHANNEL_DESCRIPTION
        etree.SubElement(feed, f"{ns}updated").text = atom_date(self.publication_date)
        for article in self.articles:
            entry = render_atom_entry(article)
            if entry is not None:
                feed.append(entry)
        return feed

    def serialize(self, feed_format: FeedFormat = "rss", *, resolve: bool = True) -> str:
        """The collection as an XML document string.

        Raises ValidationError when the collection holds no valid article.
        """
        if not self.is_valid():
            raise ValidationError("No valid articles were able to be generated from the EFE feed.")
        if resolve:
            self.resolve_images()
        root = self.to_atom() if feed_format == "atom" else self.to_rss()
        return etree.tostring(root, encoding="UTF-8", xml_declaration=True, pretty_print=True).decode("utf-8")


def save_feed_file(document: str, path: Path | str) -> Path:
    """Write a serialized feed document, replacing any previous one."""
    target = Path(path)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(document, encoding="utf-8")
    except OSError as exc:
        raise SaveError(f"Error attempting to save rss file with EFE articles to {target}: {exc}") from exc
    logger.info("Wrote feed document to %s", target)
    return target
