"""
Tests for the export engine
"""

from io import BytesIO

import pytest
from openpyxl import load_workbook

from reportstudio.config import Config, ExportDefaultsConfig
from reportstudio.export import ExportEngine, PDFRenderer, UnsupportedFormatError
from reportstudio.export.model import ExportOptions


class TestRendererSelection:
    """Test format lookup"""

    def test_supported_formats(self):
        assert ExportEngine.supported_formats() == ["pdf", "docx", "xlsx", "html", "markdown", "pptx"]

    def test_get_renderer_is_cached(self, engine):
        renderer = engine.get_renderer("pdf")
        assert isinstance(renderer, PDFRenderer)
        assert engine.get_renderer("pdf") is renderer

    def test_unknown_format_raises(self, engine):
        with pytest.raises(UnsupportedFormatError, match="Format non supporté: odt"):
            engine.get_renderer("odt")

    def test_unsupported_format_result(self, engine, report_data, content_data):
        result = engine.export(report_data, content_data, "docx2")
        assert not result.success
        assert result.error == "Format non supporté: docx2"
        assert result.content is None


class TestExport:
    """Test ExportEngine.export"""

    @pytest.mark.parametrize("export_format,media_type,extension", [
        ("pdf", "application/pdf", ".pdf"),
        ("docx", "application/vnd.openxmlformats-officedocument.wordprocessingml.document", ".docx"),
        ("xlsx", "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet", ".xlsx"),
        ("html", "text/html;charset=utf-8", ".html"),
        ("markdown", "text/markdown;charset=utf-8", ".md"),
        ("pptx", "application/vnd.openxmlformats-officedocument.presentationml.presentation", ".pptx"),
    ])
    def test_every_format(self, engine, report_data, content_data, options, export_format, media_type,
                          extension):
        result = engine.export(report_data, content_data, export_format, options)

        assert result.success, result.error
        assert result.media_type == media_type
        assert result.filename == f"Q1_Report_SalesOps{extension}"
        assert result.content

    def test_quarterly_pdf(self, engine, q1_report_data, q1_content_data):
        result = engine.export(q1_report_data, q1_content_data, "pdf", {"includeTableOfContents": False})

        assert result.success
        assert result.filename == "Q1_Report_SalesOps.pdf"
        assert result.content.startswith(b"%PDF")
        assert result.page_count == 2

    def test_quarterly_workbook(self, engine, q1_report_data, q1_content_data):
        result = engine.export(q1_report_data, q1_content_data, "xlsx")
        book = load_workbook(BytesIO(result.content))

        assert result.sheet_count == 2
        assert book.sheetnames == ["Résumé", "Tableau 1"]
        rows = list(book["Tableau 1"].iter_rows(values_only=True))
        assert rows[0] == ("Team", "Deals")
        assert len(rows) == 4
        assert all(len(row) == 2 for row in rows)

    def test_counts_per_format(self, engine, report_data, content_data, options):
        pptx = engine.export(report_data, content_data, "pptx", options)
        assert pptx.slide_count == 8
        assert pptx.page_count is None

        html = engine.export(report_data, content_data, "html", options)
        assert html.page_count is None and html.slide_count is None and html.sheet_count is None

    def test_invalid_document_is_a_failure(self, engine, report_data):
        bad_content = {"sections": [{"id": "s", "title": "S", "blocks": [{"type": "sparkline"}]}]}
        result = engine.export(report_data, bad_content, "html")

        assert not result.success
        assert result.error

    @pytest.mark.parametrize("title", ["???", "<*>", "//"])
    def test_title_without_safe_characters(self, engine, report_data, content_data, options, title):
        result = engine.export({**report_data, "title": title}, content_data, "pdf", options)

        assert result.success, result.error
        assert result.filename == "rapport.pdf"

    def test_missing_title_is_a_failure(self, engine, report_data, content_data):
        result = engine.export({**report_data, "title": ""}, content_data, "markdown")
        assert not result.success

    def test_design_settings_win_over_options(self, engine, report_data, content_data):
        report_data = {
            **report_data,
            "designSettings": {
                "cover": {"enabled": False, "title": "Ignored"},
                "tableOfContents": {"enabled": False},
            },
        }
        result = engine.export(report_data, content_data, "markdown",
                               ExportOptions(include_cover_page=True, include_table_of_contents=True))
        text = result.content.decode("utf-8")

        assert text.startswith("## Sales Overview")
        assert "Table des matières" not in text

    def test_design_settings_cover_title(self, engine, report_data, content_data, options):
        report_data = {**report_data, "designSettings": {"cover": {"title": "Board Pack"}}}
        result = engine.export(report_data, content_data, "markdown", options)

        assert result.content.decode("utf-8").startswith("# Board Pack\n")
        assert result.filename == "Q1_Report_SalesOps.md"

    def test_defaults_come_from_config(self, report_data, content_data):
        config = Config(defaults=ExportDefaultsConfig(include_cover_page=False, include_table_of_contents=False))
        result = ExportEngine(config=config).export(report_data, content_data, "markdown")
        assert result.content.decode("utf-8").startswith("## Sales Overview")


class TestStrictMode:
    """Test document validation in strict mode"""

    @pytest.fixture
    def duplicate_content(self, section_factory):
        return {
            "sections": [
                section_factory([{"type": "divider"}], section_id="dup"),
                section_factory([{"type": "divider"}], section_id="dup"),
            ]
        }

    def test_lenient_engine_renders(self, engine, report_data, duplicate_content):
        assert engine.export(report_data, duplicate_content, "html").success

    def test_strict_engine_aborts(self, test_config, report_data, duplicate_content):
        result = ExportEngine(config=test_config, strict_mode=True).export(report_data, duplicate_content, "html")

        assert not result.success
        assert result.error.startswith("Document invalide: ")
        assert "Duplicate section id: dup" in result.error


class TestExportAsync:
    """Test ExportEngine.export_async"""

    @pytest.mark.asyncio
    async def test_export_async(self, engine, report_data, content_data, options):
        result = await engine.export_async(report_data, content_data, "html", options)
        assert result.success
        assert result.filename == "Q1_Report_SalesOps.html"

    @pytest.mark.asyncio
    async def test_export_async_failure(self, engine, report_data, content_data):
        result = await engine.export_async(report_data, content_data, "rtf")
        assert not result.success
        assert result.error == "Format non supporté: rtf"
