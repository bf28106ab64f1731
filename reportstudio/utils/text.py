"""
Text helpers shared by the renderers

Filename sanitization, markup escaping, slug generation and the French
literal formatting used in cover pages and summaries.
"""

import re
import unicodedata
from datetime import date, datetime
from typing import Optional, Union

_FORBIDDEN_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*]')
_WHITESPACE = re.compile(r"\s+")
_NON_ALNUM = re.compile(r"[^a-z0-9]+")

MAX_FILENAME_LENGTH = 100

_HTML_ENTITIES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#39;",
}
_HTML_RESERVED = re.compile(r"[&<>\"']")

_FRENCH_MONTHS = [
    "janvier", "février", "mars", "avril", "mai", "juin",
    "juillet", "août", "septembre", "octobre", "novembre", "décembre",
]


def sanitize_filename(filename: str) -> str:
    """
    Turn a report title into a safe filename stem

    Strips ``< > : " / \\ | ? *``, collapses whitespace runs into a single
    underscore and caps the result at 100 characters.
    """
    cleaned = _FORBIDDEN_FILENAME_CHARS.sub("", filename)
    cleaned = _WHITESPACE.sub("_", cleaned)
    return cleaned[:MAX_FILENAME_LENGTH]


def escape_html(text: Optional[str]) -> str:
    """Escape the five markup-reserved characters"""
    if text is None:
        return ""
    return _HTML_RESERVED.sub(lambda m: _HTML_ENTITIES[m.group(0)], str(text))


def slugify(text: str) -> str:
    """Lowercase, accent-free, hyphen-separated anchor slug"""
    normalized = unicodedata.normalize("NFD", text.lower())
    stripped = "".join(c for c in normalized if unicodedata.category(c) != "Mn")
    return _NON_ALNUM.sub("-", stripped).strip("-")


def format_number(value: Union[int, float, str, None]) -> str:
    """Render a number the way the authoring tool displays it (3.0 -> 3)"""
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_change(change: float) -> str:
    """Signed percentage: ``+`` for zero and positive values"""
    sign = "+" if change >= 0 else ""
    return f"{sign}{format_number(change)}%"


def format_date_long(value: Union[date, datetime]) -> str:
    """French long date, e.g. ``17 octobre 2026``"""
    return f"{value.day} {_FRENCH_MONTHS[value.month - 1]} {value.year}"


def format_date_short(value: Union[date, datetime]) -> str:
    """French numeric date, e.g. ``17/10/2026``"""
    return value.strftime("%d/%m/%Y")
