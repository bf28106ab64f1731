"""
Tests for configuration management
Tests Config class, sub-configurations, and environment variable loading
"""

import pytest
from pathlib import Path
from pydantic import ValidationError

from reportstudio.config import (
    Config,
    ExportDefaultsConfig,
    PDFLayoutConfig,
    SlideLayoutConfig,
    WorkbookConfig,
)


class TestPDFLayoutConfig:
    """Test PDFLayoutConfig class"""

    def test_default_values(self):
        """Test default configuration values"""
        config = PDFLayoutConfig()
        assert config.line_height == 5.0
        assert config.table_row_height == 8.0
        assert config.section_keep_with_next == 30.0
        assert config.compress is True
        assert config.footer_text is None

    def test_validation(self):
        """Test configuration validation"""
        with pytest.raises(ValidationError):
            PDFLayoutConfig(line_height=0)

        with pytest.raises(ValidationError):
            PDFLayoutConfig(block_spacing=-1)


class TestSlideLayoutConfig:
    """Test SlideLayoutConfig class"""

    def test_default_values(self):
        config = SlideLayoutConfig()
        assert (config.slide_width, config.slide_height) == (10.0, 5.625)
        assert config.max_blocks_per_slide == 5
        assert config.max_table_rows == 8
        assert config.max_y == 5.0

    def test_block_cap_validation(self):
        with pytest.raises(ValidationError):
            SlideLayoutConfig(max_blocks_per_slide=0)


class TestWorkbookConfig:
    """Test WorkbookConfig class"""

    def test_default_values(self):
        config = WorkbookConfig()
        assert config.sheet_name_limit == 31
        assert config.summary_sheet == "Résumé"
        assert config.indicators_sheet == "Indicateurs"


class TestConfig:
    """Test main Config class"""

    def test_default_config(self):
        config = Config()
        assert config.debug is False
        assert config.log_level == "INFO"
        assert isinstance(config.pdf, PDFLayoutConfig)
        assert isinstance(config.slides, SlideLayoutConfig)
        assert isinstance(config.workbook, WorkbookConfig)
        assert isinstance(config.defaults, ExportDefaultsConfig)
        assert config.defaults.page_size == "A4"
        assert config.defaults.output_dir == Path("exports")

    def test_env_override(self, monkeypatch):
        """Nested settings are read from REPORTSTUDIO_ variables"""
        monkeypatch.setenv("REPORTSTUDIO_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("REPORTSTUDIO_PDF__COMPRESS", "false")
        monkeypatch.setenv("REPORTSTUDIO_SLIDES__MAX_BLOCKS_PER_SLIDE", "3")

        config = Config()
        assert config.log_level == "DEBUG"
        assert config.pdf.compress is False
        assert config.slides.max_blocks_per_slide == 3

    def test_from_file(self, temp_dir):
        """Test loading a YAML configuration file"""
        config_file = temp_dir / "reportstudio.yaml"
        config_file.write_text(
            "log_level: WARNING\n"
            "pdf:\n"
            "  footer_text: Confidential\n"
            "workbook:\n"
            "  table_sheet_prefix: Table\n"
            "defaults:\n"
            "  orientation: landscape\n",
            encoding="utf-8",
        )

        config = Config.from_file(str(config_file))
        assert config.log_level == "WARNING"
        assert config.pdf.footer_text == "Confidential"
        assert config.workbook.table_sheet_prefix == "Table"
        assert config.defaults.orientation == "landscape"

    def test_empty_file(self, temp_dir):
        config_file = temp_dir / "empty.yaml"
        config_file.write_text("", encoding="utf-8")
        assert Config.from_file(str(config_file)).log_level == "INFO"

    def test_log_directory_created(self, temp_dir):
        log_file = temp_dir / "logs" / "reportstudio.log"
        Config(log_file=str(log_file))
        assert log_file.parent.is_dir()
