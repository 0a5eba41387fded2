"""Text content of a NewsML NewsItem.

The main NewsComponent of an item holds a "text collection" component whose
Duid is the main component's Duid followed by ``.texts``. Inside it, the
component carrying the article text also has an ``Euid`` attribute:

    NewsItem
      NewsComponent (main)
        NewsComponent[Duid="<main>.texts"]
          NewsComponent[Duid="<main>.texts.<euid>" Euid="<euid>"]
            NewsLines/HeadLine                               -> title
            DescriptiveMetadata/DateLineDate                 -> publish date
            ContentItem/DataContent/nitf/body/body.head/abstract/p  -> description
            ContentItem/DataContent/nitf/body/body.content/*        -> body

Multiple text components are possible; the first one in document order is
used.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from lxml import etree

from ..errors import ExtractionError
from ..processors.normalize import normalize_plain_text
from ..utils.logging import get_logger
from .dates import parse_newsml_datetime
from .document import DuidIndex

logger = get_logger("efe.newsml.texts")

_NITF_BODY = "ContentItem/DataContent/nitf/body"


@dataclass(slots=True)
class TextContent:
    title: str
    publish_date: datetime
    description: Optional[str]
    body: str


def main_component(news_item: etree._Element) -> Optional[etree._Element]:
    return news_item.find("NewsComponent")


def element_text(element: Optional[etree._Element]) -> str:
    if element is None:
        return ""
    return normalize_plain_text("".join(element.itertext()))


def serialize_children(container: etree._Element) -> str:
    """Concatenate the markup of each child element, keeping inline tags."""
    parts = []
    for child in container:
        if not isinstance(child.tag, str):
            continue  # comments and processing instructions
        parts.append(etree.tostring(child, encoding="unicode", with_tail=False))
    return "".join(parts)


class TextExtractor:
    def __init__(self, index: DuidIndex, *, clock: Optional[Callable[[], datetime]] = None) -> None:
        self.index = index
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def find_text_component(self, news_item: etree._Element) -> Optional[etree._Element]:
        main = main_component(news_item)
        if main is None or not main.get("Duid"):
            return None
        return self.index.first_with_prefix(f"{main.get('Duid')}.texts", within=main, require_attr="Euid")

    def extract(self, news_item: etree._Element) -> TextContent:
        duid = news_item.get("Duid", "")
        component = self.find_text_component(news_item)
        if component is None:
            raise ExtractionError(
                f"Unable to process EFE article with Duid {duid}. An error occurred processing its Text Collection section."
            )

        title = element_text(component.find("NewsLines/HeadLine"))

        date_value = (component.findtext("DescriptiveMetadata/DateLineDate") or "").strip()
        if date_value:
            try:
                publish_date = parse_newsml_datetime(date_value)
            except ValueError as exc:
                raise ExtractionError(f"EFE article with Duid {duid} has an invalid DateLineDate '{date_value}'") from exc
        else:
            logger.info("EFE article with Duid %s has no DateLineDate; using the current time", duid)
            publish_date = self._clock()

        abstract = component.xpath(f"{_NITF_BODY}/body.head/abstract/p")
        description = element_text(abstract[0]) if abstract else ""

        body_content = component.xpath(f"{_NITF_BODY}/body.content")

        return TextContent(
            title=title,
            publish_date=publish_date,
            description=description or None,
            body=serialize_children(body_content[0]) if body_content else "",
        )
