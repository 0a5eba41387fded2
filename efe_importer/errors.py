"""Error taxonomy shared by the importer.

Feed-level errors abort a refresh run and are returned to the caller.
Article-level errors (``ExtractionError``, ``DownloadError``) are caught at
the article boundary and only exclude that article or its image.
"""

from __future__ import annotations

from typing import Optional


class EfeError(Exception):
    """Base class for all importer errors."""

    kind = "unexpected"


class ConfigError(EfeError):
    """Raised when required settings are missing or the settings file is invalid."""

    kind = "missing_options"


class AuthConfigError(EfeError):
    """The API rejected the client id/secret when requesting a token."""

    kind = "api_auth_error"


class AuthExpiredError(EfeError):
    """The API rejected the bearer token while requesting content."""

    kind = "api_token_expired"


class NetworkError(EfeError):
    kind = "network_error"


class ServerError(EfeError):
    kind = "api_get_error"

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NoDataError(EfeError):
    kind = "no_articles"


class ParseError(EfeError):
    kind = "parse_error"


class ExtractionError(EfeError):
    kind = "extraction_error"


class DownloadError(EfeError):
    kind = "download_file"


class ValidationError(EfeError):
    kind = "no_valid_articles"


class SaveError(EfeError):
    kind = "save_file"
