"""One refresh run: fetch the EFE feed, build articles, write the RSS file.

This is the job the scheduler triggers (hourly in production) and the one
the CLI runs by hand. Feed-level failures abort the run and come back as a
:class:`RefreshResult` carrying the error; per-article failures only drop
that article or its image.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, Iterator, Optional

from .errors import EfeError, ValidationError
from .fetchers import EfeApiClient, FileDownloader
from .models import Article
from .models.article import ArticleFormat
from .newsml import FeedDocument, build_articles
from .output import ArticleCollection, save_feed_file
from .output.collection import FeedFormat
from .processors import ImageResolver, UploadsDir
from .utils.config_loader import is_active, output_file, uploads_dir
from .utils.logging import get_logger
from .utils.notices import Notices, report_refresh_failure
from .utils.settings_store import LAST_SUCCESSFUL_RUN, UPLOADS_URL, SettingsStore

logger = get_logger("efe.orchestrator")

ArticleBuilder = Callable[..., Iterator[Article]]

# One builder per supported wire format.
ARTICLE_BUILDERS: Dict[ArticleFormat, ArticleBuilder] = {
    "newsml": build_articles,
}


@dataclass(slots=True)
class RefreshResult:
    collection: Optional[ArticleCollection] = None
    error: Optional[EfeError] = None
    document: Optional[str] = None
    output_path: Optional[Path] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class Refresher:
    def __init__(
        self,
        store: SettingsStore,
        *,
        dry_run: bool = False,
        feed_format: FeedFormat = "rss",
        client: Optional[EfeApiClient] = None,
        downloader: Optional[FileDownloader] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.store = store
        self.dry_run = dry_run
        self.feed_format = feed_format
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self.client = client or EfeApiClient(store, clock=self._clock)
        self.uploads = UploadsDir(uploads_dir(store), store.get(UPLOADS_URL))
        if downloader is None:
            downloader = FileDownloader()
            downloader.register(EfeApiClient.SOURCE_TAG, self.client.session)
        self.resolver = ImageResolver(self.uploads, downloader)

    def fetch_articles(self) -> ArticleCollection:
        """Build the collection of valid articles from all active feeds.

        Raises an EfeError for failures that affect the whole feed.
        """
        if not is_active(self.store):
            logger.warning("The EFE API feed is not enabled or not configured; no articles fetched")
            return ArticleCollection(resolver=self.resolver)

        raw = self.client.get_feed_data()
        document = FeedDocument(raw)
        document.ensure_newsml()

        collection = ArticleCollection(publication_date=document.created_at(), resolver=self.resolver)
        skipped = 0
        for article in ARTICLE_BUILDERS["newsml"](document, feed_source=EfeApiClient.SOURCE_TAG):
            if article.is_valid:
                collection.add_article(article)
            else:
                skipped += 1
        logger.info("Built %d valid article(s) from the EFE feed; skipped %d", len(collection), skipped)
        return collection

    def run(self) -> RefreshResult:
        """Rebuild the output feed file with the latest articles."""
        Notices(self.store).clear()
        try:
            collection = self.fetch_articles()
            if not collection.is_valid():
                raise ValidationError(
                    "No valid articles were able to be generated from the EFE feed. "
                    "You may need to review the log to determine the cause."
                )

            # Dry runs never download images or write files.
            document = collection.serialize(self.feed_format, resolve=not self.dry_run)
            output_path = None
            if not self.dry_run:
                output_path = save_feed_file(document, self.uploads.file_path(output_file(self.store)))
        except EfeError as exc:
            return self._failed(exc)
        except Exception as exc:  # noqa: BLE001 - top-level run guard
            logger.exception("Unexpected error refreshing EFE data: %s", exc)
            return self._failed(EfeError(f"Unable to process feeds: {exc}"))

        self.store.set_datetime(LAST_SUCCESSFUL_RUN, self._clock())
        logger.info("Refresh finished: articles=%d dry_run=%s", len(collection), self.dry_run)
        return RefreshResult(collection=collection, document=document, output_path=output_path)

    def _failed(self, error: EfeError) -> RefreshResult:
        logger.error("Refresh failed (%s): %s", error.kind, error)
        report_refresh_failure(self.store, error, now=self._clock())
        return RefreshResult(error=error)
