"""Top-level package for the EFE NewsML importer.

This package fetches articles from the EFE news agency API in the NewsML
format, normalizes them, resolves their images to local files, and writes the
result as an RSS document that feed reader plugins can import.
"""

__all__ = []
