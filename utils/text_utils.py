"""
Text utilities for sanitizing CSV input before it is stored.

Used for custom-field keys, custom-field values and asset filenames.
"""

import html
import re
import unicodedata
from typing import Optional

import nh3


STRIPPED_CONTENT_TAGS = {"script", "style"}

_OCTET_RE = re.compile(r"%[a-fA-F0-9]{2}")
_WHITESPACE_RE = re.compile(r"[\r\n\t ]+")
_KEY_RE = re.compile(r"[^a-z0-9_\-]")
_FILENAME_SPECIAL_RE = re.compile(r"[?\[\]/\\=<>:;,'\"&$#*()|~`!{}%+’«»”“\x00]")


def sanitize_key(key: Optional[str]) -> str:
    """
    Restrict a custom-field key to a safe identifier charset.

    - "Color" → "color"
    - "Size (cm)" → "sizecm"
    - "shelf-life_days" → "shelf-life_days"

    Args:
        key: Raw column name from the CSV header

    Returns:
        Lowercase key with only a-z, 0-9, "_" and "-", possibly empty
    """
    if not key:
        return ""
    return _KEY_RE.sub("", key.lower())


def sanitize_text_field(value: Optional[str]) -> str:
    """
    Clean a free-text value for storage.

    - Removes control characters
    - Drops <script>/<style> blocks with their content, strips all other
      tags and escapes stray "<", ">" and "&" (nh3)
    - Removes percent-encoded octets
    - Collapses whitespace and trims

    Examples:
        "  <script>x</script> foo  " → "foo"
        "Size < 10cm" → "Size &lt; 10cm"
    """
    if not value:
        return ""

    text = "".join(
        c for c in value
        if c in "\r\n\t" or unicodedata.category(c) != "Cc"
    )
    text = nh3.clean(
        text,
        tags=set(),
        clean_content_tags=STRIPPED_CONTENT_TAGS,
        attributes={},
    )

    # Octets are removed until none are left ("%2%41" → "%2" → kept)
    while True:
        stripped = _OCTET_RE.sub("", text)
        if stripped == text:
            break
        text = stripped

    return _WHITESPACE_RE.sub(" ", text).strip()


def sanitize_file_name(name: Optional[str]) -> str:
    """
    Make a filename safe for the object store.

    Special characters are removed, whitespace becomes "-",
    leading/trailing dots, dashes and underscores are trimmed.

    Args:
        name: Raw filename (e.g. URL basename, possibly percent-encoded)

    Returns:
        Safe filename, possibly empty
    """
    if not name:
        return ""

    name = html.unescape(name)
    name = _FILENAME_SPECIAL_RE.sub("", name)
    name = re.sub(r"\s+", "-", name)
    name = re.sub(r"-+", "-", name)
    return name.strip(".-_")
