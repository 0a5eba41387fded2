"""Typed models used across the application."""

from .article import Article, ArticleFormat
from .image import Image
from .token import AccessToken

__all__ = ["Article", "ArticleFormat", "Image", "AccessToken"]
