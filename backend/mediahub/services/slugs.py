import re
import unicodedata
from typing import Optional
from slugify import slugify
from mediahub.core.config import settings
from mediahub.core.exceptions import ValidationError

COMBINING_MARKS = re.compile("[\u0300-\u036f]")
DISALLOWED_CHARS = r"[^a-z0-9]+"


def strip_marks(text: str) -> str:
    """Decompose ``text`` and drop combining diacritical marks (é -> e)."""
    return COMBINING_MARKS.sub("", unicodedata.normalize("NFKD", text))


def normalize_slug(text: Optional[str], max_length: Optional[int] = None) -> str:
    """
    Turn free text into a URL-safe token.

    Lowercases, strips diacritical marks, collapses runs of anything outside
    ``[a-z0-9]`` into a single hyphen and trims leading and trailing hyphens.
    Nothing is transliterated: letters without an ASCII base (ß, Ø, Cyrillic)
    become separators. Returns an empty string when nothing usable is left.
    """
    if not text:
        return ""
    if max_length is None:
        max_length = settings.PUBLICATION_SLUG_MAX_LENGTH
    return slugify(
        strip_marks(text),
        allow_unicode=True,
        regex_pattern=DISALLOWED_CHARS,
        max_length=max_length,
        word_boundary=False,
    )


def require_slug(text: Optional[str], field: str = "slug") -> str:
    """Normalize ``text`` or raise ValidationError when the result is empty."""
    slug = normalize_slug(text)
    if not slug:
        raise ValidationError(f"{field} is required", field=field, value=text)
    return slug
