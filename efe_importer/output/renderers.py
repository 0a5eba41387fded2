"""Rendering of single articles as RSS items and Atom entries.

Renderers are pure: they read ``image.local_url`` but never resolve images.
An enclosure is only written for an image that has already been resolved by
:meth:`ArticleCollection.resolve_images`.
"""

from __future__ import annotations

from datetime import datetime
from email.utils import format_datetime
from typing import Callable, Dict, Optional

from lxml import etree

from ..models import Article
from ..models.article import ArticleFormat

CONTENT_NS = "http://purl.org/rss/1.0/modules/content/"
ATOM_NS = "http://www.w3.org/2005/Atom"


def rss_date(value: datetime) -> str:
    """RFC 822 date as used by RSS 2.0, e.g. ``Tue, 25 May 2021 10:30:00 +0000``."""
    return format_datetime(value)


def atom_date(value: datetime) -> str:
    return value.isoformat(timespec="seconds")


def _sub(parent: etree._Element, tag: str, text: Optional[str] = None, **attrib: str) -> etree._Element:
    element = etree.SubElement(parent, tag, attrib)
    if text is not None:
        element.text = text
    return element


def _set_markup(element: etree._Element, markup: str) -> None:
    # A CDATA section cannot contain its own terminator; fall back to escaped text.
    element.text = etree.CDATA(markup) if "]]>" not in markup else markup


def render_rss_item(article: Article) -> Optional[etree._Element]:
    """The article as an RSS ``<item>``, or None if the article is invalid."""
    if not article.is_valid:
        return None

    item = etree.Element("item", nsmap={"content": CONTENT_NS})
    _sub(item, "title", article.title)
    if article.publish_date is not None:
        _sub(item, "pubDate", rss_date(article.publish_date))
    _sub(item, "guid", article.guid, isPermaLink="false")
    if article.description:
        _sub(item, "description", article.description)
    _set_markup(_sub(item, f"{{{CONTENT_NS}}}encoded"), article.body or "")

    image = article.featured_image
    if image is not None and image.is_valid and image.local_url:
        _sub(
            item,
            "enclosure",
            url=image.local_url,
            length=str(image.filesize or 0),
            type=image.mime_type or "application/octet-stream",
        )
    return item


def _render_base_atom_entry(article: Article) -> etree._Element:
    ns = f"{{{ATOM_NS}}}"
    entry = etree.Element(f"{ns}entry", nsmap={None: ATOM_NS})
    _sub(entry, f"{ns}title", article.title)
    _sub(entry, f"{ns}id", article.guid)
    updated = article.last_updated or article.publish_date
    if updated is not None:
        _sub(entry, f"{ns}updated", atom_date(updated))
    if article.publish_date is not None:
        _sub(entry, f"{ns}published", atom_date(article.publish_date))
    _sub(entry, f"{ns}guid", article.guid, isPermaLink="false")
    _set_markup(_sub(entry, f"{ns}content", type="html"), article.body or "")
    return entry


def _render_newsml_atom_entry(article: Article) -> etree._Element:
    entry = _render_base_atom_entry(article)
    if article.public_identifier:
        _sub(entry, f"{{{ATOM_NS}}}id", article.public_identifier)
    return entry


_ATOM_RENDERERS: Dict[ArticleFormat, Callable[[Article], etree._Element]] = {
    "newsml": _render_newsml_atom_entry,
}


def render_atom_entry(article: Article) -> Optional[etree._Element]:
    """The article as an Atom ``<entry>``, or None if the article is invalid."""
    if not article.is_valid:
        return None
    renderer = _ATOM_RENDERERS.get(article.format, _render_base_atom_entry)
    return renderer(article)
