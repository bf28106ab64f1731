"""
Tests for the HTML renderer
"""

import pytest

from reportstudio.export.model import Content, Report
from reportstudio.export.renderers import HTMLRenderer


@pytest.fixture
def renderer(test_config):
    return HTMLRenderer(config=test_config)


def _html(rendered) -> str:
    return rendered.content.decode("utf-8")


class TestHTMLRenderer:
    """Test HTMLRenderer"""

    def test_document_shell(self, renderer, report, content, options):
        rendered = renderer.render(report, content, options)
        html = _html(rendered)

        assert rendered.media_type == "text/html;charset=utf-8"
        assert rendered.extension == ".html"
        assert html.startswith("<!DOCTYPE html>")
        assert '<html lang="fr">' in html
        assert "<title>Q1 Report: Sales/Ops</title>" in html
        assert html.rstrip().endswith("</html>")

    def test_cover(self, renderer, report, content, options):
        html = _html(renderer.render(report, content, options))
        assert '<div class="cover">' in html
        assert "<strong>Période:</strong> Q1 2026" in html
        assert "<strong>Date:</strong> 17 octobre 2026" in html

    def test_toc_links_match_section_anchors(self, renderer, report, content, options):
        html = _html(renderer.render(report, content, options))
        assert '<a href="#section-0">1. Sales Overview</a>' in html
        assert '<div class="section" id="section-0">' in html
        assert '<div class="section" id="section-0-0">' in html

    def test_section_heading_depth(self, renderer, report, content, bare_options):
        html = _html(renderer.render(report, content, bare_options))
        assert "<h2>Sales Overview</h2>" in html
        assert "<h3>Regional Detail</h3>" in html

    def test_without_front_matter(self, renderer, report, content, bare_options):
        html = _html(renderer.render(report, content, bare_options))
        assert 'class="cover"' not in html
        assert 'class="toc"' not in html

    def test_escaping(self, renderer, report_data, bare_options, section_factory):
        report = Report.model_validate({**report_data, "title": "R&D <2026>"})
        blocks = [{"type": "paragraph", "content": "<script>alert('x')</script>"}]
        content = Content.model_validate({"sections": [section_factory(blocks, title='A "quoted" title')]})
        html = _html(renderer.render(report, content, bare_options))

        assert "<script>" not in html
        assert "&lt;script&gt;alert(&#39;x&#39;)&lt;/script&gt;" in html
        assert "<title>R&amp;D &lt;2026&gt;</title>" in html
        assert "A &quot;quoted&quot; title" in html

    def test_blocks(self, renderer, report, content, bare_options):
        html = _html(renderer.render(report, content, bare_options))

        assert "<th>Region</th><th>Revenue</th>" in html
        assert "<td>South</td><td>95 kEUR</td>" in html
        assert "<td>West</td><td>0</td>" in html
        assert '<div class="kpi-value">215k</div>' in html
        assert '<div class="kpi-change positive">+12.5%</div>' in html
        assert "<ul><li>North</li>" in html
        assert '<div class="callout warning">' in html
        assert '<div class="callout-title">Watch</div>' in html
        assert "<footer>— CEO</footer>" in html
        assert "[Graphique: Monthly Sales]" in html

    def test_kpi_trend_follows_change_sign(self, renderer, report, bare_options, section_factory):
        blocks = [{"type": "kpi_card", "label": "Churn", "value": 3, "change": -1.5}]
        content = Content.model_validate({"sections": [section_factory(blocks)]})
        html = _html(renderer.render(report, content, bare_options))
        assert '<div class="kpi-change negative">-1.5%</div>' in html

    @pytest.mark.parametrize("style,expected", [
        ("solid", '<hr class="divider">'),
        ("dashed", '<hr class="divider dashed">'),
        ("dotted", '<hr class="divider dotted">'),
    ])
    def test_divider_styles(self, renderer, report, bare_options, section_factory, style, expected):
        content = Content.model_validate({"sections": [section_factory([{"type": "divider", "style": style}])]})
        assert expected in _html(renderer.render(report, content, bare_options))

    def test_images(self, renderer, report, bare_options, section_factory, png_data_uri):
        blocks = [
            {"type": "image", "src": png_data_uri, "alt": "Pixel", "caption": "Tiny"},
            {"type": "image", "src": "", "alt": "Missing"},
        ]
        content = Content.model_validate({"sections": [section_factory(blocks)]})
        html = _html(renderer.render(report, content, bare_options))

        assert f'<img src="{png_data_uri}" alt="Pixel"' in html
        assert "<figcaption>Tiny</figcaption>" in html
        assert "[Image: Missing]" in html

    def test_deterministic_with_pinned_date(self, renderer, report, content, options):
        assert renderer.render(report, content, options).content == renderer.render(report, content, options).content
