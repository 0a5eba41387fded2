from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import Mock

import pytest

from efe_importer.errors import DownloadError
from efe_importer.fetchers import FileDownloader
from efe_importer.models import Image
from efe_importer.processors import ImageResolver, UploadsDir

PUBLISHED = datetime(2021, 5, 25, 10, 30, tzinfo=timezone.utc)


def _image(filename="foto.jpg", url="https://fotos.efe.test/foto.jpg"):
    return Image(download_url=url, filename=filename, filesize=10, mime_type="image/jpeg", publish_date=PUBLISHED)


@pytest.fixture
def uploads(tmp_path):
    return UploadsDir(tmp_path / "uploads", "https://example.test/uploads/")


@pytest.fixture
def downloader():
    fake = Mock(spec=FileDownloader)

    def _download(url, save_to, feed_source=""):
        save_to.parent.mkdir(parents=True, exist_ok=True)
        save_to.write_bytes(b"jpeg")
        return save_to

    fake.download_feed_file.side_effect = _download
    return fake


class TestUploadsDir:
    def test_year_month_layout(self, uploads, tmp_path):
        assert uploads.path_for("a.jpg", PUBLISHED) == tmp_path / "uploads" / "2021" / "05" / "a.jpg"
        assert uploads.url_for("a b.jpg", PUBLISHED) == "https://example.test/uploads/2021/05/a%20b.jpg"

    def test_file_url_without_base_url(self, tmp_path):
        url = UploadsDir(tmp_path).url_for("a.jpg", PUBLISHED)
        assert url.startswith("file://")
        assert url.endswith("/2021/05/a.jpg")


class TestImageResolver:
    def test_downloads_once_then_reuses_file(self, uploads, downloader):
        resolver = ImageResolver(uploads, downloader)
        first, second = _image(), _image()

        url_1 = resolver.get_local_url(first, "efe_api")
        url_2 = resolver.get_local_url(second, "efe_api")

        assert url_1 == url_2 == "https://example.test/uploads/2021/05/foto.jpg"
        downloader.download_feed_file.assert_called_once()
        args = downloader.download_feed_file.call_args.args
        assert args[0] == "https://fotos.efe.test/foto.jpg"
        assert args[2] == "efe_api"

    def test_resolved_image_is_not_downloaded_again(self, uploads, downloader):
        resolver = ImageResolver(uploads, downloader)
        image = _image()
        resolver.get_local_url(image)
        resolver.get_local_url(image)
        assert downloader.download_feed_file.call_count == 1

    def test_existing_file_is_reused(self, uploads, downloader):
        existing = uploads.path_for("foto.jpg", PUBLISHED)
        existing.parent.mkdir(parents=True)
        existing.write_bytes(b"already here")

        image = _image()
        assert ImageResolver(uploads, downloader).get_local_url(image) == uploads.url_for("foto.jpg", PUBLISHED)
        downloader.download_feed_file.assert_not_called()

    def test_failed_download_marks_image_invalid(self, uploads, downloader):
        downloader.download_feed_file.side_effect = DownloadError("Error downloading file: 500 Server Error.")
        image = _image()

        assert ImageResolver(uploads, downloader).get_local_url(image) is None
        assert image.download_failed
        assert not image.is_valid
        assert image.local_url is None

    @pytest.mark.parametrize(
        "image",
        [
            Image(download_url=None, filename="a.jpg"),
            Image(download_url="https://fotos.efe.test/a.jpg", filename=None),
            Image(download_url="https://fotos.efe.test/a.jpg", filename=""),
        ],
    )
    def test_invalid_images_are_skipped(self, uploads, downloader, image):
        assert ImageResolver(uploads, downloader).get_local_url(image) is None
        downloader.download_feed_file.assert_not_called()

    @pytest.mark.parametrize("filename", ["../escape.jpg", "a/b.jpg", ".."])
    def test_unsafe_filenames_are_refused(self, uploads, downloader, filename):
        image = _image(filename=filename)
        assert ImageResolver(uploads, downloader).get_local_url(image) is None
        assert image.download_failed
        downloader.download_feed_file.assert_not_called()
