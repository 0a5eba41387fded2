from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional
from urllib.parse import urlparse

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.ssl_ import create_urllib3_context

from ..errors import DownloadError
from ..utils.logging import get_logger

logger = get_logger("efe.fetchers.http")

# EFE's servers only negotiate this legacy suite with modern OpenSSL defaults.
EFE_CIPHERS = "ECDHE-RSA-AES256-GCM-SHA384"

_DEFAULT_HEADERS: Dict[str, str] = {
    "User-Agent": "efe-importer/0.1",
}


class CipherAdapter(HTTPAdapter):
    """Transport adapter that pins the TLS cipher list for its connections."""

    def __init__(self, ciphers: str, **kwargs) -> None:
        self.ciphers = ciphers
        super().__init__(**kwargs)

    def init_poolmanager(self, *args, **kwargs):
        kwargs["ssl_context"] = create_urllib3_context(ciphers=self.ciphers)
        return super().init_poolmanager(*args, **kwargs)

    def proxy_manager_for(self, *args, **kwargs):
        kwargs["ssl_context"] = create_urllib3_context(ciphers=self.ciphers)
        return super().proxy_manager_for(*args, **kwargs)


def build_provider_session(ciphers: str = EFE_CIPHERS) -> requests.Session:
    """Session for calls against the EFE provider only.

    The cipher workaround lives on this session's adapter, so no other
    HTTP traffic in the process is affected by it.
    """
    session = requests.Session()
    session.headers.update(_DEFAULT_HEADERS)
    session.mount("https://", CipherAdapter(ciphers))
    return session


def _validated_url(url: str) -> str:
    parsed = urlparse(url or "")
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise DownloadError(f"Invalid URL for file download: {url}")
    return url


class FileDownloader:
    """Fetches remote files referenced in a feed and saves them locally.

    Each feed can register its own session under its source tag; downloads
    tagged with that source go through it (e.g. images from the EFE API need
    the provider session). Untagged downloads use a plain session.
    """

    def __init__(self, *, session: Optional[requests.Session] = None, timeout: int = 60) -> None:
        self._default_session = session or requests.Session()
        self._sessions: Dict[str, requests.Session] = {}
        self.timeout = timeout

    def register(self, feed_source: str, session: requests.Session) -> None:
        self._sessions[feed_source] = session

    def session_for(self, feed_source: str = "") -> requests.Session:
        return self._sessions.get(feed_source, self._default_session)

    def fetch(self, url: str, feed_source: str = "") -> bytes:
        """Return the body of a GET request, raising DownloadError on any failure."""
        url = _validated_url(url)
        session = self.session_for(feed_source)
        logger.debug("Downloading %s (source=%s)", url, feed_source or "default")
        try:
            resp = session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            raise DownloadError(f"Error downloading file: {type(exc).__name__} {exc}.") from exc

        if resp.status_code != 200:
            raise DownloadError(f"Error downloading file: {resp.status_code} {resp.reason}.")
        return resp.content

    def download_feed_file(self, url: str, save_to: Path | str, feed_source: str = "") -> Path:
        """Download ``url`` and write it to ``save_to``; returns the written path."""
        data = self.fetch(url, feed_source)
        path = Path(save_to)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as exc:
            raise DownloadError(f"Failed to save a file to the local filesystem: {exc}") from exc
        logger.info("Saved %d bytes from %s to %s", len(data), url, path)
        return path
