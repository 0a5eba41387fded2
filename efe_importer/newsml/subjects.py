"""IPTC subject codes of a NewsML NewsItem.

Subject codes sit in the main component's DescriptiveMetadata, as the
FormalName of SubjectMatter/SubjectDetail elements in the IPTC scheme:

    NewsComponent (main)
      DescriptiveMetadata
        SubjectCode
          SubjectMatter[FormalName="15000000" Scheme="IptcSubjectCodes"]
"""

from __future__ import annotations

from typing import List

from lxml import etree

from ..utils.logging import get_logger
from .texts import main_component

logger = get_logger("efe.newsml.subjects")

IPTC_SCHEME = "IptcSubjectCodes"


class SubjectCodeExtractor:
    def __init__(self, scheme: str = IPTC_SCHEME) -> None:
        self.scheme = scheme

    def extract(self, news_item: etree._Element) -> List[str]:
        main = main_component(news_item)
        subjects = []
        if main is not None:
            subjects = main.xpath(
                ".//DescriptiveMetadata/SubjectCode/*[@FormalName and @Scheme=$scheme]",
                scheme=self.scheme,
            )
        if not subjects:
            logger.info(
                "No IPTC subject codes found for the EFE article with Duid %s.",
                news_item.get("Duid", ""),
            )
            return []
        return [subject.get("FormalName") for subject in subjects]
