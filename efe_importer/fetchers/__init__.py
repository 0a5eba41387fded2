"""HTTP layer: the EFE API client and the generic file download primitive."""

from .http import FileDownloader, build_provider_session
from .efe_api import EfeApiClient

__all__ = ["FileDownloader", "build_provider_session", "EfeApiClient"]
