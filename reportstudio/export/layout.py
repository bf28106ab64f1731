#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Layout metrics

Paper sizes and margin profiles (millimetres) shared by the page-based
renderers, plus the vertical cursor used for pagination.
"""

from typing import Dict, NamedTuple

from .model.schema import ExportOptions


class PageSize(NamedTuple):
    width: float
    height: float


class Margins(NamedTuple):
    top: float
    right: float
    bottom: float
    left: float


PAGE_SIZES: Dict[str, PageSize] = {
    "A4": PageSize(210, 297),
    "A3": PageSize(297, 420),
    "Letter": PageSize(216, 279),
}

MARGINS: Dict[str, Margins] = {
    "normal": Margins(25, 25, 25, 25),
    "narrow": Margins(15, 15, 15, 15),
    "wide": Margins(35, 35, 35, 35),
}


class PageGeometry(NamedTuple):
    """Resolved page dimensions for one export"""
    width: float
    height: float
    margins: Margins

    @property
    def content_width(self) -> float:
        return self.width - self.margins.left - self.margins.right

    @property
    def content_bottom(self) -> float:
        """Lowest cursor position content may reach"""
        return self.height - self.margins.bottom


def resolve_geometry(options: ExportOptions) -> PageGeometry:
    """Look up paper size and margins, swapping axes for landscape"""
    size = PAGE_SIZES[options.page_size]
    margins = MARGINS[options.margins]
    if options.orientation == "landscape":
        return PageGeometry(size.height, size.width, margins)
    return PageGeometry(size.width, size.height, margins)


class PageCursor:
    """Vertical position measured from the top edge of the current page

    One cursor lives for exactly one render call. ``ensure_space`` is the
    only place a page break is decided, so every block is checked before
    it is drawn.
    """

    def __init__(self, geometry: PageGeometry, on_new_page=None):
        self.geometry = geometry
        self.y = geometry.margins.top
        self.page = 1
        self._on_new_page = on_new_page

    @property
    def at_top(self) -> bool:
        return self.y <= self.geometry.margins.top

    @property
    def remaining(self) -> float:
        return self.geometry.content_bottom - self.y

    def fits(self, height: float) -> bool:
        return height <= self.remaining

    def ensure_space(self, height: float) -> bool:
        """Break the page if ``height`` does not fit; returns True on a break

        A block taller than a whole page is drawn from the top of a fresh
        page rather than looping forever.
        """
        if self.fits(height) or self.at_top:
            return False
        self.new_page()
        return True

    def new_page(self):
        if self._on_new_page is not None:
            self._on_new_page()
        self.page += 1
        self.y = self.geometry.margins.top

    def advance(self, height: float):
        self.y += height
