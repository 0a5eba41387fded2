from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from efe_importer.models import AccessToken, Article, Image

NOW = datetime(2021, 5, 25, 12, 0, tzinfo=timezone.utc)


class TestAccessToken:
    def test_issue_sets_expiration(self):
        token = AccessToken.issue("abc", now=NOW)
        assert token.expiration == NOW + timedelta(hours=23)
        assert not token.is_expired(NOW + timedelta(hours=22, minutes=59))
        assert token.is_expired(NOW + timedelta(hours=23))

    def test_from_dict_accepts_iso_and_datetime(self):
        token = AccessToken.issue("abc", now=NOW)
        assert AccessToken.from_dict(token.to_dict()) == token
        assert AccessToken.from_dict({"value": "abc", "expiration": token.expiration}) == token

    @pytest.mark.parametrize("expiration", ["2021-05-26T11:00:00", datetime(2021, 5, 26, 11, 0)])
    def test_naive_expiration_is_taken_as_utc(self, expiration):
        token = AccessToken.from_dict({"value": "abc", "expiration": expiration})
        assert token.expiration == datetime(2021, 5, 26, 11, 0, tzinfo=timezone.utc)
        assert not token.is_expired(NOW)
        assert token.is_expired(NOW + timedelta(days=1))

    @pytest.mark.parametrize(
        "data",
        [None, "", "abc", {}, {"value": "abc"}, {"value": "", "expiration": "2021-05-25T12:00:00"},
         {"value": "abc", "expiration": "never"}],
    )
    def test_from_dict_rejects_incomplete_data(self, data):
        assert AccessToken.from_dict(data) is None


class TestImage:
    def test_validity(self):
        image = Image(download_url="https://fotos.efe.test/a.jpg", filename="a.jpg")
        assert image.is_valid
        assert image.local_url is None

        image.download_failed = True
        assert not image.is_valid

    def test_invalid_article(self):
        article = Article.invalid(guid="1", feed_source="efe_api")
        assert not article.is_valid
        assert article.format == "newsml"
