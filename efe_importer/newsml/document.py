"""Parsed NewsML documents and their identifier index.

NewsML nests NewsComponents to no fixed depth. Components are identified by
their ``Duid`` attribute, and nested components extend their parent's Duid
(``<main>.texts``, ``<main>.photos.<euid>.file`` ...). Rather than scanning
the tree for every lookup, :class:`DuidIndex` is built once per document and
answers exact and prefix lookups.
"""

from __future__ import annotations

from bisect import bisect_left
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from lxml import etree

from ..errors import ParseError
from ..utils.logging import get_logger
from .dates import parse_newsml_datetime

logger = get_logger("efe.newsml.document")

FEED_TYPE = "NewsML"


def is_descendant(element: etree._Element, ancestor: etree._Element) -> bool:
    return any(parent is ancestor for parent in element.iterancestors())


class DuidIndex:
    """Exact and prefix lookup of NewsComponents by Duid, in document order."""

    def __init__(self, root: etree._Element) -> None:
        self._by_duid: Dict[str, etree._Element] = {}
        entries: List[Tuple[str, int, etree._Element]] = []
        for order, element in enumerate(root.iter("NewsComponent")):
            duid = element.get("Duid")
            if not duid:
                continue
            self._by_duid.setdefault(duid, element)
            entries.append((duid, order, element))
        entries.sort(key=lambda e: (e[0], e[1]))
        self._sorted_duids = [e[0] for e in entries]
        self._entries = entries

    def get(self, duid: str, *, within: Optional[etree._Element] = None) -> Optional[etree._Element]:
        if within is None:
            return self._by_duid.get(duid)
        return self.first_with_prefix(duid, within=within, exact=True)

    def with_prefix(
        self,
        prefix: str,
        *,
        within: Optional[etree._Element] = None,
        require_attr: Optional[str] = None,
        exact: bool = False,
    ) -> List[etree._Element]:
        """All components whose Duid starts with ``prefix``, in document order."""
        start = bisect_left(self._sorted_duids, prefix)
        matches: List[Tuple[int, etree._Element]] = []
        for duid, order, element in self._entries[start:]:
            if not duid.startswith(prefix):
                break
            if exact and duid != prefix:
                continue
            if require_attr is not None and element.get(require_attr) is None:
                continue
            if within is not None and not is_descendant(element, within):
                continue
            matches.append((order, element))
        matches.sort(key=lambda m: m[0])
        return [element for _, element in matches]

    def first_with_prefix(self, prefix: str, **kwargs) -> Optional[etree._Element]:
        matches = self.with_prefix(prefix, **kwargs)
        return matches[0] if matches else None


class FeedDocument:
    """Raw feed bytes and, once requested, their parsed XML tree.

    Parsing happens on first access and is memoized for the instance.
    """

    def __init__(self, raw_feed: bytes | str) -> None:
        self.raw_feed = raw_feed.encode("utf-8") if isinstance(raw_feed, str) else raw_feed
        self._root: Optional[etree._Element] = None
        self._index: Optional[DuidIndex] = None

    def parse(self) -> etree._Element:
        if self._root is None:
            self._root = parse(self.raw_feed)
        return self._root

    @property
    def root(self) -> etree._Element:
        return self.parse()

    @property
    def index(self) -> DuidIndex:
        if self._index is None:
            self._index = DuidIndex(self.parse())
        return self._index

    @property
    def feed_type(self) -> str:
        return etree.QName(self.parse()).localname

    def ensure_newsml(self) -> None:
        if self.feed_type != FEED_TYPE:
            raise ParseError(f"Unable to process NewsML feed: invalid feed type: {self.feed_type}")

    def news_items(self) -> List[etree._Element]:
        return self.parse().findall("NewsItem")

    def created_at(self) -> Optional[datetime]:
        """Date the provider generated the document, from its NewsEnvelope."""
        value = self.parse().findtext("NewsEnvelope/DateAndTime")
        if not value:
            return None
        try:
            return parse_newsml_datetime(value)
        except ValueError:
            logger.warning("Ignoring unparseable NewsEnvelope date: %s", value)
            return None


def parse(raw_feed: bytes) -> etree._Element:
    """Parse raw feed bytes into an element tree, raising ParseError when malformed."""
    if not raw_feed or not raw_feed.strip():
        raise ParseError("Unable to process NewsML feed: the document is empty")
    parser = etree.XMLParser(resolve_entities=False, no_network=True, remove_blank_text=False)
    try:
        return etree.fromstring(raw_feed, parser=parser)
    except etree.XMLSyntaxError as exc:
        raise ParseError(f"Unable to process NewsML feed: {exc}") from exc
