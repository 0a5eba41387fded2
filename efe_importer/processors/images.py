"""Resolution of feed images to local, deduplicated files.

Images are stored under ``<uploads>/<year>/<month>/<filename>``, with the
year and month taken from the article's publish date. A file already present
at that path counts as downloaded: nothing is fetched and its URL is reused.
Files are matched by name only; their content is never compared.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path, PurePosixPath
from typing import Optional
from urllib.parse import quote

from ..errors import DownloadError
from ..fetchers.http import FileDownloader
from ..models import Image
from ..utils.logging import get_logger

logger = get_logger("efe.processors.images")


class UploadsDir:
    """Maps an upload subdirectory and filename to a local path and a public URL."""

    def __init__(self, base_dir: str | Path, base_url: Optional[str] = None) -> None:
        self.base_dir = Path(base_dir)
        self.base_url = base_url.rstrip("/") if base_url else None

    @staticmethod
    def subdir(when: Optional[datetime] = None) -> str:
        when = when or datetime.now(timezone.utc)
        return f"{when.year:04d}/{when.month:02d}"

    def path_for(self, filename: str, when: Optional[datetime] = None) -> Path:
        return self.base_dir / self.subdir(when) / filename

    def url_for(self, filename: str, when: Optional[datetime] = None) -> str:
        if self.base_url:
            return f"{self.base_url}/{self.subdir(when)}/{quote(filename)}"
        return self.path_for(filename, when).resolve().as_uri()

    def file_path(self, name: str) -> Path:
        return self.base_dir / name


def _safe_filename(filename: Optional[str]) -> Optional[str]:
    """Basename of a feed-supplied filename; None if it tries to leave its directory."""
    if not filename:
        return None
    name = PurePosixPath(filename.replace("\\", "/")).name
    if not name or name in (".", "..") or name != filename:
        return None
    return name


class ImageResolver:
    def __init__(self, uploads: UploadsDir, downloader: FileDownloader) -> None:
        self.uploads = uploads
        self.downloader = downloader

    @staticmethod
    def is_valid(image: Image) -> bool:
        return image.is_valid

    def get_local_url(self, image: Image, source_tag: str = "") -> Optional[str]:
        """Local URL of the image, downloading it on first use.

        Returns None if the image is invalid or its download failed.
        """
        if image.local_url:
            return image.local_url
        if not self.is_valid(image):
            return None
        self.download(image, source_tag)
        return image.local_url

    def download(self, image: Image, source_tag: str = "") -> None:
        """Fetch the image unless a file with its name is already stored.

        Failures mark the image invalid and are logged; they never propagate.
        """
        if not self.is_valid(image):
            return

        filename = _safe_filename(image.filename)
        if filename is None:
            image.download_failed = True
            logger.warning("Refusing to store image with unsafe filename %r", image.filename)
            return

        target = self.uploads.path_for(filename, image.publish_date)
        local_url = self.uploads.url_for(filename, image.publish_date)
        if target.exists():
            logger.debug("Image %s already downloaded; reusing it", target)
            image.local_url = local_url
            return

        try:
            self.downloader.download_feed_file(image.download_url, target, source_tag)
        except DownloadError as exc:
            image.download_failed = True
            logger.warning("Failed to download image %s: %s", image.download_url, exc)
            return

        image.local_url = local_url
