"""Shared fixtures: NewsML sample builders, an in-memory settings store, a fake clock."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional, Sequence
from unittest.mock import Mock

import pytest

from efe_importer.models import Article, Image
from efe_importer.newsml import FeedDocument
from efe_importer.utils.settings_store import SettingsStore

MULTIMEDIA = "multimedia.efeservicios.com"


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


def _photo_xml(main: str, euid: str, sizes: Sequence[int], caption: Optional[str], with_file: bool = True) -> str:
    photo = f"{main}.photos.{euid}"
    items = "".join(
        f"""
          <ContentItem Href="https://fotos.efe.test/{euid}_{i}.jpg">
            <MediaType FormalName="Photo"/>
            <MimeType FormalName="image/jpeg"/>
            <Characteristics>
              <SizeInBytes>{size}</SizeInBytes>
              <Property FormalName="Width" Value="{(i + 1) * 400}"/>
              <Property FormalName="Height" Value="{(i + 1) * 300}"/>
              <Property FormalName="EFE_Filename" Value="{euid}_{i}.jpg"/>
            </Characteristics>
          </ContentItem>"""
        for i, size in enumerate(sizes)
    )
    file_component = f'<NewsComponent Duid="{photo}.file">{items}</NewsComponent>' if with_file else ""
    caption_component = (
        f"""<NewsComponent Duid="{photo}.text">
              <ContentItem><DataContent><nitf><body><body.content><p>{caption}</p></body.content></body></nitf></DataContent></ContentItem>
            </NewsComponent>"""
        if caption is not None
        else ""
    )
    return f'<NewsComponent Duid="{photo}" Euid="{euid}">{file_component}{caption_component}</NewsComponent>'


def make_news_item(
    duid: str = "12345",
    *,
    provider: str = MULTIMEDIA,
    title: str = "Titular de prueba",
    date_line: str = "20210525T103000+0200",
    revision_created: str = "20210525T113000+0000",
    abstract: Optional[str] = "Resumen de la noticia",
    body: str = "<p>Primer <b>párrafo</b>.</p><p>Segundo párrafo.</p>",
    with_texts: bool = True,
    photos: Iterable[Sequence[int]] = ((1000, 5000, 3000),),
    caption: Optional[str] = "Pie de foto",
    with_file: bool = True,
    subject_codes: Sequence[str] = ("15000000", "15054000"),
) -> str:
    main = f"{duid}.multimedia"
    abstract_xml = f"<body.head><abstract><p>{abstract}</p></abstract></body.head>" if abstract is not None else ""
    texts = (
        f"""<NewsComponent Duid="{main}.texts">
          <NewsComponent Duid="{main}.texts.{duid}" Euid="{duid}">
            <NewsLines><HeadLine>{title}</HeadLine></NewsLines>
            <DescriptiveMetadata><DateLineDate>{date_line}</DateLineDate></DescriptiveMetadata>
            <ContentItem>
              <MediaType FormalName="Text"/>
              <DataContent><nitf><body>{abstract_xml}<body.content>{body}</body.content></body></nitf></DataContent>
            </ContentItem>
          </NewsComponent>
        </NewsComponent>"""
        if with_texts
        else ""
    )
    photo_list = list(photos)
    photos_xml = ""
    if photo_list:
        inner = "".join(
            _photo_xml(main, f"foto{n}", sizes, caption, with_file) for n, sizes in enumerate(photo_list, start=1)
        )
        photos_xml = f'<NewsComponent Duid="{main}.photos">{inner}</NewsComponent>'
    subjects = "".join(
        f'<SubjectCode><SubjectMatter FormalName="{code}" Scheme="IptcSubjectCodes"/></SubjectCode>'
        for code in subject_codes
    )
    return f"""<NewsItem Duid="{duid}">
      <Identification>
        <NewsIdentifier>
          <ProviderId>{provider}</ProviderId>
          <DateId>20210525</DateId>
          <NewsItemId>{duid}</NewsItemId>
          <PublicIdentifier>urn:newsml:{provider}:20210525:{duid}:2</PublicIdentifier>
        </NewsIdentifier>
      </Identification>
      <NewsManagement><ThisRevisionCreated>{revision_created}</ThisRevisionCreated></NewsManagement>
      <NewsComponent Duid="{main}">
        <NewsLines><HeadLine>{title}</HeadLine></NewsLines>
        <DescriptiveMetadata>
          {subjects}
          <SubjectCode><SubjectMatter FormalName="DEP" Scheme="EFECategories"/></SubjectCode>
        </DescriptiveMetadata>
        {texts}
        {photos_xml}
      </NewsComponent>
    </NewsItem>"""


def make_feed(*items: str, envelope_date: str = "20210525T120000+0000") -> bytes:
    body = "".join(items)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        f"<NewsML><NewsEnvelope><DateAndTime>{envelope_date}</DateAndTime></NewsEnvelope>{body}</NewsML>"
    ).encode("utf-8")


@pytest.fixture
def news_item_xml():
    return make_news_item


@pytest.fixture
def feed_bytes():
    return make_feed


@pytest.fixture
def parse_item():
    """Parse a single NewsItem inside a feed; returns (document, news_item element)."""

    def _parse(item_xml: str):
        document = FeedDocument(make_feed(item_xml))
        return document, document.news_items()[0]

    return _parse


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2021, 5, 25, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def store(tmp_path) -> SettingsStore:
    return SettingsStore(
        data={
            "client_id": "client",
            "client_secret": "secret",
            "product_id": "42",
            "is_enabled": True,
            "uploads_dir": str(tmp_path / "uploads"),
            "uploads_url": "https://example.test/uploads",
        }
    )


@pytest.fixture(autouse=True)
def _no_efe_env(monkeypatch):
    for name in (
        "EFE_CLIENT_ID",
        "EFE_CLIENT_SECRET",
        "EFE_PRODUCT_ID",
        "EFE_OUTPUT_FILE",
        "EFE_UPLOADS_DIR",
        "EFE_UPLOADS_URL",
        "EFE_API_URL",
        "EFE_SETTINGS_PATH",
    ):
        monkeypatch.delenv(name, raising=False)


def make_response(status_code: int = 200, content: bytes = b"", reason: str = "OK") -> Mock:
    resp = Mock()
    resp.status_code = status_code
    resp.content = content
    resp.text = content.decode("utf-8", errors="replace")
    resp.reason = reason
    return resp


@pytest.fixture
def response():
    return make_response


@pytest.fixture
def article_factory():
    def _make(guid: str = "X", title: str = "T", body: str = "<p>B</p>", image: Optional[Image] = None, **kwargs) -> Article:
        published = datetime(2021, 5, 25, 10, 30, tzinfo=timezone.utc)
        return Article(
            guid=guid,
            title=title,
            body=body,
            publish_date=published,
            last_updated=kwargs.pop("last_updated", published),
            featured_image=image,
            **kwargs,
        )

    return _make
