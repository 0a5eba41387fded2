"""Client for the EFE news API.

The API hands out bearer tokens from ``/account/token`` that are valid for
24 hours, and serves the product's articles from
``/content/items_ByProductId``. Every call goes through :meth:`EfeApiClient._get`,
which turns transport failures and unexpected status codes into the
importer's error types.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Dict, Literal, Optional

import requests

from ..errors import (
    AuthConfigError,
    AuthExpiredError,
    ConfigError,
    NetworkError,
    NoDataError,
    ServerError,
)
from ..models import AccessToken
from ..utils.config_loader import api_url, is_configured
from ..utils.logging import get_logger
from ..utils.settings_store import CLIENT_ID, CLIENT_SECRET, PRODUCT_ID, TOKEN, SettingsStore
from .http import build_provider_session

logger = get_logger("efe.fetchers.api")

Endpoint = Literal["token", "content"]

NEWSML_FORMAT = "newsml"

_TEMPORARY_HINT = "This may be a temporary problem. Contact support if this message does not go away within 24 hours."


class EfeApiClient:
    """Fetches NewsML content from the EFE API, managing the access token.

    The cached token is kept in the settings store so it survives between
    runs; it is replaced when it expires or when the API rejects it.
    """

    SOURCE_TAG = "efe_api"

    def __init__(
        self,
        store: SettingsStore,
        *,
        session: Optional[requests.Session] = None,
        clock: Optional[Callable[[], datetime]] = None,
        timeout: int = 60,
    ) -> None:
        self.store = store
        self.session = session or build_provider_session()
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self.timeout = timeout

    @property
    def base_url(self) -> str:
        return api_url(self.store)

    # ---------------- Content -----------------
    def get_feed_data(self, feed_format: str = NEWSML_FORMAT) -> bytes:
        """Return the raw body of the product's content feed."""
        if not is_configured(self.store):
            raise ConfigError("Unable to get articles from the EFE API due to missing configuration options.")

        token = self.get_token()
        headers = {
            "accept": "text/plain; version=1.0",
            "Authorization": f"Bearer {token.value}",
        }
        params = {"product_id": str(self.store.get(PRODUCT_ID)), "format": feed_format}
        url = f"{self.base_url}/content/items_ByProductId"
        logger.debug("Requesting %s content for product %s", feed_format, params["product_id"])
        resp = self._get(url, headers=headers, params=params, endpoint="content")
        if not resp.content:
            raise NoDataError("No data was returned from the EFE API")
        logger.info("Received %d bytes of %s from the EFE API", len(resp.content), feed_format)
        return resp.content

    # ---------------- Token lifecycle -----------------
    def get_token(self) -> AccessToken:
        """Return the cached token, or a fresh one if missing or expired."""
        token = AccessToken.from_dict(self.store.get(TOKEN))
        if token is not None and not token.is_expired(self._clock()):
            return token
        return self.refresh_token()

    def refresh_token(self) -> AccessToken:
        """Request a new token from the API and store it."""
        if not is_configured(self.store):
            raise ConfigError("Unable to get articles from EFE due to missing configuration options.")

        params = {
            "clientId": str(self.store.get(CLIENT_ID)),
            "clientSecret": str(self.store.get(CLIENT_SECRET)),
        }
        url = f"{self.base_url}/account/token"
        resp = self._get(url, headers={"accept": "application/json"}, params=params, endpoint="token")
        value = resp.text.strip().strip('"')
        if not value:
            raise NoDataError("The EFE API returned an empty access token")

        token = AccessToken.issue(value, now=self._clock())
        self.store.set(TOKEN, token.to_dict())
        logger.info("Obtained new EFE API token valid until %s", token.expiration.isoformat())
        return token

    def reset_auth(self) -> None:
        """Forget the cached token so the next call requests a new one."""
        self.store.set(TOKEN, "")

    # ---------------- Transport -----------------
    def _get(
        self,
        url: str,
        *,
        headers: Dict[str, str],
        params: Dict[str, str],
        endpoint: Endpoint,
    ) -> requests.Response:
        try:
            resp = self.session.get(url, headers=headers, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("EFE API request to %s failed: %s", endpoint, exc)
            raise NetworkError(f"Error retrieving articles from EFE: {type(exc).__name__} {exc}. {_TEMPORARY_HINT}") from exc

        status = resp.status_code
        if status == 200:
            return resp

        logger.warning("EFE API %s endpoint responded with status %s", endpoint, status)
        if status == 400 and endpoint == "token":
            # The API answers 400 when the client id or secret is wrong.
            raise AuthConfigError(
                "Authentication error received when getting articles from EFE. "
                "Please verify that the settings for connecting to the EFE API are correct."
            )
        if status == 401 and endpoint == "content":
            self.reset_auth()
            raise AuthExpiredError(
                "Error retrieving articles from EFE: Invalid or expired authentication token. "
                "This is probably a temporary problem. Contact support if this message does not go away "
                "within 24 hours, or comes and goes several times a day"
            )
        raise ServerError(
            f"Error retrieving articles from EFE: EFE's server responded with status code {status}. {_TEMPORARY_HINT}",
            status_code=status,
        )
