"""Shared helpers"""

from .text import (
    sanitize_filename,
    escape_html,
    slugify,
    format_number,
    format_change,
    format_date_long,
    format_date_short,
)

__all__ = [
    'sanitize_filename',
    'escape_html',
    'slugify',
    'format_number',
    'format_change',
    'format_date_long',
    'format_date_short',
]
