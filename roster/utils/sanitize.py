"""
Write-time Text Sanitization.

Free-text fields are stripped of markup and HTML-escaped *before* they are
stored, so every value read back from the ``users`` table is already safe
to drop into an HTML page.  Renderers must therefore not escape a second
time.
"""

from __future__ import annotations

import html
import re
from typing import Optional

__all__ = [
    "strip_tags",
    "escape_html",
    "sanitize_text",
    "sanitize_optional_text",
]

# ---------------------------------------------------------------------------
# Pre-compiled regex patterns
# ---------------------------------------------------------------------------

# HTML comments may themselves contain ``>``; remove them first.
_RE_COMMENT = re.compile(r"<!--.*?(?:-->|$)", re.DOTALL)

# A tag opens with ``<`` followed by a name, ``/``, ``!`` or ``?`` and runs to
# the next ``>``; an unterminated tag swallows the rest of the string.  A
# ``<`` followed by anything else ("a < b", "<3") is text.
_RE_TAG = re.compile(r"<(?=[A-Za-z/!?])[^>]*(?:>|$)")


def strip_tags(value: str) -> str:
    """Remove HTML/XML tags and comments from *value*.

    ::

        "<b>Jean</b>"           -> "Jean"
        "Dupont<script>x"       -> "Dupont"
        "Smith < Jones"         -> "Smith < Jones"
        "a <!-- > b --> c"      -> "a  c"
    """
    return _RE_TAG.sub("", _RE_COMMENT.sub("", value))


def escape_html(value: str) -> str:
    """Escape ``& < > " '`` as HTML entities (single quote as ``&#039;``)."""
    return html.escape(value, quote=True).replace("&#x27;", "&#039;")


def sanitize_text(value: str) -> str:
    """Strip markup, then HTML-escape what is left."""
    return escape_html(strip_tags(value))


def sanitize_optional_text(value: Optional[str]) -> Optional[str]:
    """:func:`sanitize_text` for nullable fields; empty results become ``None``."""
    if value is None:
        return None
    cleaned = sanitize_text(value).strip()
    return cleaned or None
