"""Build articles from NewsItems of an EFE "multimedia" NewsML feed.

Every NewsItem has the same outer structure:

    NewsItem[Duid]                          Duid -> article guid
      Identification/NewsIdentifier
        ProviderId                          schema of the item's content
        PublicIdentifier                    urn:newsml:<provider>:<date>:<guid>:<revision>
      NewsManagement/ThisRevisionCreated    -> last updated
      NewsComponent (main)
        NewsLines, AdministrativeMetadata, DescriptiveMetadata
        ... provider specific components ...

Only the ``multimedia.efeservicios.com`` provider is supported. Items from
other providers (audio, foto, texto, video ...) are built as invalid
articles and skipped.
"""

from __future__ import annotations

from typing import Iterator

from lxml import etree

from ..errors import ExtractionError
from ..models import Article, Image
from ..utils.logging import get_logger
from .dates import parse_newsml_datetime
from .document import DuidIndex, FeedDocument
from .photos import PhotoExtractor
from .subjects import SubjectCodeExtractor
from .texts import TextExtractor

logger = get_logger("efe.newsml.article")

SUPPORTED_PROVIDER_ID = "multimedia.efeservicios.com"


class ArticleExtractor:
    """Turns one NewsItem into an :class:`Article`; never raises."""

    format = "newsml"

    def __init__(self, index: DuidIndex, *, feed_source: str = "") -> None:
        self.index = index
        self.feed_source = feed_source
        self.texts = TextExtractor(index)
        self.photos = PhotoExtractor(index)
        self.subjects = SubjectCodeExtractor()

    def build(self, news_item: etree._Element) -> Article:
        guid = news_item.get("Duid", "")
        try:
            return self._build(news_item)
        except ExtractionError as exc:
            logger.warning("%s", exc)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected error building EFE article with Duid %s: %s", guid, exc)
        return Article.invalid(guid=guid, format=self.format, feed_source=self.feed_source)

    def _build(self, news_item: etree._Element) -> Article:
        provider_id = (news_item.findtext("Identification/NewsIdentifier/ProviderId") or "").strip()
        if provider_id != SUPPORTED_PROVIDER_ID:
            logger.warning(
                'Unable to process EFE article. The NewsItem contains an unsupported ProviderId, %s. '
                '"%s" is the only ProviderId supported.',
                provider_id or "(none)",
                SUPPORTED_PROVIDER_ID,
            )
            article = Article.invalid(guid=news_item.get("Duid", ""), format=self.format, feed_source=self.feed_source)
            article.provider_id = provider_id or None
            return article

        guid = news_item.get("Duid", "")
        text = self.texts.extract(news_item)

        public_identifier = (news_item.findtext("Identification/NewsIdentifier/PublicIdentifier") or "").strip()
        revision_created = news_item.findtext("NewsManagement/ThisRevisionCreated")
        last_updated = parse_newsml_datetime(revision_created) if revision_created else text.publish_date

        article = Article(
            guid=guid,
            title=text.title,
            publish_date=text.publish_date,
            last_updated=last_updated,
            description=text.description,
            body=text.body,
            subject_codes=self.subjects.extract(news_item),
            format=self.format,
            feed_source=self.feed_source,
            provider_id=provider_id,
            public_identifier=public_identifier or None,
        )

        properties = self.photos.extract(news_item)
        if properties is not None:
            article.featured_image = Image(
                download_url=properties.url,
                filename=properties.filename,
                filesize=properties.filesize,
                width=properties.width,
                height=properties.height,
                mime_type=properties.mime_type,
                caption=properties.caption,
                publish_date=text.publish_date,
            )
        return article


def build_articles(document: FeedDocument, *, feed_source: str = "") -> Iterator[Article]:
    """Yield one article per NewsItem of ``document``, valid or not, in document order."""
    extractor = ArticleExtractor(document.index, feed_source=feed_source)
    for news_item in document.news_items():
        yield extractor.build(news_item)
