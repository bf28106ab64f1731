"""
Tests for the PPTX renderer
Output is re-opened with python-pptx to check slides and shapes
"""

from io import BytesIO

import pytest
from pptx import Presentation
from pptx.dml.color import RGBColor
from pptx.enum.chart import XL_CHART_TYPE
from pptx.enum.shapes import MSO_SHAPE_TYPE

from reportstudio.config import Config, SlideLayoutConfig
from reportstudio.export.model import Content
from reportstudio.export.renderers import PPTXRenderer
from reportstudio.export.renderers.pptx_renderer import SlideCursor, chart_type_for


@pytest.fixture
def renderer(test_config):
    return PPTXRenderer(config=test_config)


def _open(rendered):
    return Presentation(BytesIO(rendered.content))


def _texts(slide):
    return [shape.text_frame.text for shape in slide.shapes if shape.has_text_frame]


def _paragraphs(count):
    return [{"type": "paragraph", "content": f"Paragraph {i}"} for i in range(count)]


class TestSlideCursor:
    """Test the slide overflow rules"""

    def test_no_slide_open(self):
        assert SlideCursor(SlideLayoutConfig(), "T").needs_new_slide(0.6)

    def test_block_cap(self):
        cursor = SlideCursor(SlideLayoutConfig(), "T")
        cursor.open(object())
        for _ in range(5):
            cursor.place(0.1)
        assert cursor.needs_new_slide(0.1)

    def test_overflow_only_when_slide_has_content(self):
        cursor = SlideCursor(SlideLayoutConfig(), "T")
        cursor.open(object())
        assert not cursor.needs_new_slide(10)
        cursor.place(3.0)
        assert cursor.needs_new_slide(1.5)
        assert not cursor.needs_new_slide(1.0)


class TestPPTXRenderer:
    """Test PPTXRenderer"""

    def test_slide_count(self, renderer, report, content, options):
        """Cover, contents, and a divider plus two content slides per section"""
        rendered = renderer.render(report, content, options)
        prs = _open(rendered)

        assert rendered.slide_count == len(prs.slides) == 8
        assert rendered.extension == ".pptx"

    def test_cover_and_toc(self, renderer, report, content, options):
        slides = list(_open(renderer.render(report, content, options)).slides)
        assert "Q1 Report: Sales/Ops" in _texts(slides[0])
        assert "Date: 17/10/2026" in "\n".join(_texts(slides[0]))
        assert "Table des matières" in _texts(slides[1])
        assert "1. Sales Overview" in _texts(slides[1])

    def test_empty_document_yields_title_slide(self, renderer, report, bare_options):
        rendered = renderer.render(report, Content(), bare_options)
        assert rendered.slide_count == 1
        assert "Q1 Report: Sales/Ops" in _texts(_open(rendered).slides[0])

    def test_block_cap_opens_continuation_slide(self, renderer, report, bare_options, section_factory):
        content = Content.model_validate({"sections": [section_factory(_paragraphs(7), title="Intro")]})
        slides = list(_open(renderer.render(report, content, bare_options)).slides)

        assert len(slides) == 3
        assert _texts(slides[1])[0] == "Intro"
        assert _texts(slides[2])[0] == "Intro"
        assert len(_texts(slides[1])) == 6
        assert len(_texts(slides[2])) == 3

    def test_configurable_cap(self, report, bare_options, section_factory):
        config = Config(slides=SlideLayoutConfig(max_blocks_per_slide=2, section_divider_slides=False))
        content = Content.model_validate({"sections": [section_factory(_paragraphs(5))]})
        rendered = PPTXRenderer(config=config).render(report, content, bare_options)
        assert rendered.slide_count == 3

    def test_height_overflow(self, renderer, report, bare_options, section_factory):
        rows = [{"a": i} for i in range(8)]
        table = {"type": "table", "headers": [{"label": "A", "key": "a"}], "rows": rows}
        content = Content.model_validate({"sections": [section_factory([table, table, table])]})
        rendered = renderer.render(report, content, bare_options)
        assert rendered.slide_count == 4

    @pytest.mark.parametrize("blocks,expected", [
        ([{"type": "paragraph", "content": "a"}, {"type": "pagebreak"}, {"type": "paragraph", "content": "b"}], 3),
        ([{"type": "paragraph", "content": "a"}, {"type": "pagebreak"}], 2),
        ([{"type": "pagebreak"}, {"type": "paragraph", "content": "a"}], 2),
        ([{"type": "pagebreak"}], 1),
    ])
    def test_pagebreak(self, renderer, report, bare_options, section_factory, blocks, expected):
        content = Content.model_validate({"sections": [section_factory(blocks)]})
        assert renderer.render(report, content, bare_options).slide_count == expected

    def test_table_truncation(self, renderer, report, bare_options, section_factory):
        rows = [{"a": f"row {i}"} for i in range(11)]
        table = {"type": "table", "headers": [{"label": "A", "key": "a"}], "rows": rows}
        content = Content.model_validate({"sections": [section_factory([table])]})
        slide = _open(renderer.render(report, content, bare_options)).slides[1]

        shape = next(shape for shape in slide.shapes if shape.has_table)
        table_rows = list(shape.table.rows)
        assert len(table_rows) == 10
        assert table_rows[0].cells[0].text == "A"
        assert table_rows[8].cells[0].text == "row 7"
        assert table_rows[9].cells[0].text == "... et 3 lignes supplémentaires"

    def test_native_chart(self, renderer, report, content, bare_options):
        prs = _open(renderer.render(report, content, bare_options))
        charts = [shape.chart for slide in prs.slides for shape in slide.shapes if shape.has_chart]

        assert len(charts) == 1
        assert charts[0].chart_type == XL_CHART_TYPE.COLUMN_CLUSTERED
        assert charts[0].chart_title.text_frame.text == "Monthly Sales"
        assert list(charts[0].plots[0].categories) == ["Jan", "Feb", "Mar"]

    def test_chart_placeholder(self, renderer, report, bare_options, section_factory):
        chart = {"type": "chart", "chartType": "pie", "data": {"labels": [], "datasets": []}}
        content = Content.model_validate({"sections": [section_factory([chart])]})
        slide = _open(renderer.render(report, content, bare_options)).slides[1]
        assert "[Graphique: Graphique]" in _texts(slide)

    def test_images(self, renderer, report, bare_options, section_factory, png_data_uri):
        blocks = [
            {"type": "image", "src": png_data_uri, "caption": "Pixel"},
            {"type": "image", "src": "https://example.com/a.png", "alt": "Remote"},
        ]
        content = Content.model_validate({"sections": [section_factory(blocks)]})
        slide = _open(renderer.render(report, content, bare_options)).slides[1]

        pictures = [shape for shape in slide.shapes if shape.shape_type == MSO_SHAPE_TYPE.PICTURE]
        assert len(pictures) == 1
        assert "Pixel" in _texts(slide)
        assert "[Image: Remote]" in _texts(slide)

    def test_kpi_change_text(self, renderer, report, content, bare_options):
        prs = _open(renderer.render(report, content, bare_options))
        texts = [text for slide in prs.slides for text in _texts(slide)]
        assert "215k" in texts
        assert "+12.5%" in texts

    def test_negative_kpi_change(self, renderer, report, bare_options, section_factory):
        blocks = [{"type": "kpi_card", "label": "Churn", "value": 3, "change": -1.5}]
        content = Content.model_validate({"sections": [section_factory(blocks)]})
        slide = _open(renderer.render(report, content, bare_options)).slides[1]

        runs = [
            run
            for shape in slide.shapes if shape.has_text_frame
            for paragraph in shape.text_frame.paragraphs
            for run in paragraph.runs
            if run.text == "-1.5%"
        ]
        assert len(runs) == 1
        assert runs[0].font.color.rgb == RGBColor(239, 68, 68)

    @pytest.mark.parametrize("chart_type,expected", [
        ("bar", XL_CHART_TYPE.COLUMN_CLUSTERED),
        ("horizontal_bar", XL_CHART_TYPE.BAR_CLUSTERED),
        ("stacked_bar", XL_CHART_TYPE.COLUMN_STACKED),
        ("donut", XL_CHART_TYPE.DOUGHNUT),
        ("radar", XL_CHART_TYPE.COLUMN_CLUSTERED),
    ])
    def test_chart_type_mapping(self, chart_type, expected):
        assert chart_type_for(chart_type) == expected
