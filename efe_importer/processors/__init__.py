"""Processing steps applied to extracted articles: text normalization, image resolution."""

from .normalize import normalize_plain_text
from .images import ImageResolver, UploadsDir

__all__ = ["normalize_plain_text", "ImageResolver", "UploadsDir"]
