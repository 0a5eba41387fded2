"""Photo content of a NewsML NewsItem.

    NewsItem
      NewsComponent (main)
        NewsComponent[Duid="<main>.photos"]                  photo collection
          NewsComponent[Duid="<main>.photos.<a>" Euid="<a>"]  photo 1
            NewsComponent[Duid="<photo 1>.file"]              file component
              ContentItem[Href=...]                           one per size
                MimeType[FormalName=...]
                Characteristics
                  SizeInBytes
                  Property[FormalName="Width" Value=...]
                  Property[FormalName="Height" Value=...]
                  Property[FormalName="EFE_Filename" Value=...]
            NewsComponent[Duid="<photo 1>.text"]              caption
          NewsComponent[...] photo 2 (ignored)

Only the first photo is extracted, and of its sizes the largest file wins.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Sequence, TypeVar

from lxml import etree

from ..utils.logging import get_logger
from .document import DuidIndex
from .texts import element_text, main_component

logger = get_logger("efe.newsml.photos")

T = TypeVar("T")


@dataclass(slots=True)
class ImageProperties:
    filesize: int
    url: Optional[str]
    mime_type: Optional[str]
    width: int = 0
    height: int = 0
    filename: Optional[str] = None
    caption: Optional[str] = None


def _to_int(value: Optional[str]) -> int:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return 0


def select_largest(candidates: Iterable[T], size_of: Callable[[T], int]) -> Optional[T]:
    """Return the candidate with the strictly largest size.

    Ties keep the earliest candidate; candidates with no positive size are
    never selected.
    """
    largest_size = 0
    largest: Optional[T] = None
    for candidate in candidates:
        size = size_of(candidate)
        if size > largest_size:
            largest_size = size
            largest = candidate
    return largest


def declared_size(content_item: etree._Element) -> int:
    return _to_int(content_item.findtext("Characteristics/SizeInBytes"))


class PhotoExtractor:
    def __init__(self, index: DuidIndex) -> None:
        self.index = index

    def first_photo_component(self, news_item: etree._Element) -> Optional[etree._Element]:
        main = main_component(news_item)
        if main is None or not main.get("Duid"):
            return None
        return self.index.first_with_prefix(f"{main.get('Duid')}.photos", within=main, require_attr="Euid")

    def extract(self, news_item: etree._Element) -> Optional[ImageProperties]:
        """Properties of the largest file of the item's first photo, or None."""
        duid = news_item.get("Duid", "")
        photo = self.first_photo_component(news_item)
        if photo is None:
            logger.info(
                "The EFE article with Duid %s does not have a Photo Collection. "
                "Investigate further if this starts to occur regularly.",
                duid,
            )
            return None

        file_component = self.index.get(f"{photo.get('Duid')}.file", within=photo)
        if file_component is None:
            logger.info(
                "The EFE article with Duid %s does not have a File Component in its Photo Component. "
                "Investigate further if this starts to occur regularly.",
                duid,
            )
            return None

        content_item = select_largest(file_component.findall("ContentItem"), declared_size)
        if content_item is None:
            logger.info(
                "Error trying to determine the largest image for EFE article with Duid %s. "
                "Investigate further if this starts to occur regularly.",
                duid,
            )
            return None

        properties = self.image_properties(content_item)
        properties.caption = self.caption(photo)
        return properties

    @staticmethod
    def image_properties(content_item: etree._Element) -> ImageProperties:
        mime_type = content_item.find("MimeType")
        properties = ImageProperties(
            filesize=declared_size(content_item),
            url=content_item.get("Href"),
            mime_type=mime_type.get("FormalName") if mime_type is not None else None,
        )
        characteristics = content_item.find("Characteristics")
        children: Sequence[etree._Element] = list(characteristics) if characteristics is not None else []
        for characteristic in children:
            name = characteristic.get("FormalName")
            value = characteristic.get("Value")
            if name == "Width":
                properties.width = _to_int(value)
            elif name == "Height":
                properties.height = _to_int(value)
            elif name == "EFE_Filename":
                properties.filename = (value or "").strip() or None
        return properties

    def caption(self, photo: etree._Element) -> Optional[str]:
        caption_component = self.index.get(f"{photo.get('Duid')}.text", within=photo)
        if caption_component is None:
            return None
        paragraph = caption_component.xpath("ContentItem/DataContent/nitf/body/body.content/p")
        caption = element_text(paragraph[0]) if paragraph else ""
        return caption or None
