"""
Tests for layout metrics and the page cursor
"""

from reportstudio.export.layout import MARGINS, PAGE_SIZES, PageCursor, resolve_geometry
from reportstudio.export.model import ExportOptions
from reportstudio.export.theme import DEFAULT_PRIMARY, get_design_theme, hex_to_rgb, rgb_to_hex


class TestGeometry:
    """Test page geometry resolution"""

    def test_tables(self):
        assert PAGE_SIZES["A4"] == (210, 297)
        assert PAGE_SIZES["A3"] == (297, 420)
        assert PAGE_SIZES["Letter"] == (216, 279)
        assert MARGINS["narrow"].left == 15
        assert MARGINS["wide"].top == 35

    def test_portrait(self):
        geometry = resolve_geometry(ExportOptions())
        assert (geometry.width, geometry.height) == (210, 297)
        assert geometry.content_width == 160
        assert geometry.content_bottom == 272

    def test_landscape_swaps_axes(self):
        geometry = resolve_geometry(ExportOptions(page_size="Letter", orientation="landscape", margins="narrow"))
        assert (geometry.width, geometry.height) == (279, 216)
        assert geometry.content_width == 249


class TestPageCursor:
    """Test the vertical pagination cursor"""

    def test_starts_at_top_margin(self):
        cursor = PageCursor(resolve_geometry(ExportOptions()))
        assert cursor.y == 25
        assert cursor.page == 1
        assert cursor.at_top

    def test_break_before_overflow(self):
        breaks = []
        cursor = PageCursor(resolve_geometry(ExportOptions()), on_new_page=lambda: breaks.append(True))
        cursor.advance(240)
        assert cursor.remaining == 7

        assert cursor.ensure_space(5) is False
        assert cursor.ensure_space(8) is True
        assert breaks == [True]
        assert cursor.page == 2
        assert cursor.y == 25

    def test_no_break_at_top_for_oversized_block(self):
        """A block taller than the page is drawn from the top instead of looping"""
        cursor = PageCursor(resolve_geometry(ExportOptions()))
        assert cursor.ensure_space(500) is False
        assert cursor.page == 1


class TestTheme:
    """Test brand colour resolution"""

    def test_hex_parsing(self):
        assert hex_to_rgb("#1C3163", (0, 0, 0)) == (28, 49, 99)
        assert hex_to_rgb("ff0000", (0, 0, 0)) == (255, 0, 0)

    def test_malformed_hex_falls_back(self):
        assert hex_to_rgb("#12", (1, 2, 3)) == (1, 2, 3)
        assert hex_to_rgb(None, (1, 2, 3)) == (1, 2, 3)

    def test_rgb_to_hex(self):
        assert rgb_to_hex((28, 49, 99)) == "1C3163"

    def test_defaults(self, report):
        theme = get_design_theme(report, default_footer="Internal")
        assert theme.primary == DEFAULT_PRIMARY
        assert theme.base_font_size == 11
        assert theme.footer_text == "Internal"

    def test_design_colors(self, report_data):
        from reportstudio.export.model import Report

        report_data["designSettings"] = {
            "colors": {"primary": "#FF0000", "text": "bogus"},
            "typography": {"baseFontSize": 12},
            "branding": {"footerText": "ACME"},
        }
        theme = get_design_theme(Report.model_validate(report_data), default_footer="Internal")
        assert theme.primary == (255, 0, 0)
        assert theme.text == (51, 51, 51)
        assert theme.base_font_size == 12
        assert theme.footer_text == "ACME"
