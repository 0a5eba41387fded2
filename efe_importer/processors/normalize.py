from __future__ import annotations

import re
import unicodedata

_whitespace_re = re.compile(r"\s+")
_control_chars_re = re.compile(r"[\u0000-\u0008\u000B\u000C\u000E-\u001F\u007F]")


def normalize_plain_text(text: str | None) -> str:
    """Normalize text pulled out of XML elements (headlines, abstracts, captions).

    - Strip BOM
    - Unicode normalize (NFC, keeping Spanish accents composed)
    - Turn non-breaking spaces into plain spaces
    - Remove control characters
    - Collapse whitespace
    """
    if not text:
        return ""

    if text.startswith("\ufeff"):
        text = text.lstrip("\ufeff")

    text = unicodedata.normalize("NFC", text).replace("\u00a0", " ")
    text = _control_chars_re.sub(" ", text)
    return _whitespace_re.sub(" ", text).strip()
