#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Design theme

Brand colours and base font size resolved from a report's design settings.
"""

import re
from typing import Dict, NamedTuple, Optional, Tuple

from .model.schema import Report

RGB = Tuple[int, int, int]

DEFAULT_PRIMARY: RGB = (28, 49, 99)
DEFAULT_TEXT: RGB = (51, 51, 51)
DEFAULT_BACKGROUND: RGB = (255, 255, 255)
DEFAULT_BASE_FONT_SIZE = 11.0

MUTED: RGB = (100, 100, 100)
LIGHT_BG: RGB = (245, 245, 245)

CALLOUT_COLORS: Dict[str, RGB] = {
    "info": (59, 130, 246),
    "warning": (245, 158, 11),
    "success": (34, 197, 94),
    "error": (239, 68, 68),
    "tip": (168, 85, 247),
}

TREND_COLORS: Dict[str, RGB] = {
    "positive": (34, 197, 94),
    "negative": (239, 68, 68),
    "neutral": MUTED,
}

_HEX_COLOR = re.compile(r"^#?([a-f\d]{2})([a-f\d]{2})([a-f\d]{2})$", re.IGNORECASE)


def hex_to_rgb(value: Optional[str], fallback: RGB) -> RGB:
    """Parse ``#RRGGBB`` (hash optional); malformed input yields ``fallback``"""
    if not value:
        return fallback
    match = _HEX_COLOR.match(value.strip())
    if not match:
        return fallback
    return tuple(int(part, 16) for part in match.groups())


def rgb_to_hex(color: RGB) -> str:
    """``(28, 49, 99)`` -> ``1C3163``"""
    return "".join(f"{channel:02X}" for channel in color)


class DesignTheme(NamedTuple):
    primary: RGB
    text: RGB
    background: RGB
    base_font_size: float
    footer_text: Optional[str]

    @property
    def primary_hex(self) -> str:
        return rgb_to_hex(self.primary)

    @property
    def text_hex(self) -> str:
        return rgb_to_hex(self.text)


def get_design_theme(report: Report, default_footer: Optional[str] = None) -> DesignTheme:
    """Resolve the theme of a report, falling back to the corporate defaults"""
    settings = report.design_settings
    colors = settings.colors if settings else None
    typography = settings.typography if settings else None

    footer = settings.footer_text if settings else None
    return DesignTheme(
        primary=hex_to_rgb(colors.primary if colors else None, DEFAULT_PRIMARY),
        text=hex_to_rgb(colors.text if colors else None, DEFAULT_TEXT),
        background=hex_to_rgb(colors.background if colors else None, DEFAULT_BACKGROUND),
        base_font_size=(typography.base_font_size if typography else None) or DEFAULT_BASE_FONT_SIZE,
        footer_text=footer or default_footer,
    )
