"""Decoding of EFE NewsML documents into articles."""

from .document import DuidIndex, FeedDocument, parse
from .dates import parse_newsml_datetime
from .texts import TextContent, TextExtractor
from .photos import ImageProperties, PhotoExtractor, select_largest
from .subjects import SubjectCodeExtractor
from .article import SUPPORTED_PROVIDER_ID, ArticleExtractor, build_articles

__all__ = [
    "DuidIndex",
    "FeedDocument",
    "parse",
    "parse_newsml_datetime",
    "TextContent",
    "TextExtractor",
    "ImageProperties",
    "PhotoExtractor",
    "select_largest",
    "SubjectCodeExtractor",
    "SUPPORTED_PROVIDER_ID",
    "ArticleExtractor",
    "build_articles",
]
