"""
Configuration management for reportstudio
支持环境变量、配置文件、运行时配置的统一管理
"""

from pathlib import Path
from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PDFLayoutConfig(BaseSettings):
    """Paginated canvas layout configuration (millimetres unless noted)"""
    line_height: float = Field(default=5.0, gt=0, description="Height of one wrapped text line")
    block_spacing: float = Field(default=5.0, ge=0, description="Space added after a text block")
    table_row_height: float = Field(default=8.0, gt=0, description="Height of one table row")
    table_cell_padding: float = Field(default=3.0, ge=0, description="Left padding inside a table cell")
    list_item_height: float = Field(default=6.0, gt=0, description="Height of one list item")
    section_spacing: float = Field(default=10.0, ge=0, description="Space added after a section")
    section_keep_with_next: float = Field(default=30.0, ge=0, description="Room required below a section title")
    image_max_height: float = Field(default=80.0, gt=0, description="Tallest embedded image")
    chart_placeholder_height: float = Field(default=40.0, gt=0, description="Advance for a chart placeholder")
    image_placeholder_height: float = Field(default=20.0, gt=0, description="Advance for an image placeholder")
    footer_font_size: int = Field(default=9, gt=0, description="Font size of the page footer (pt)")
    compress: bool = Field(default=True, description="Compress page content streams")
    footer_text: Optional[str] = Field(default=None, description="Branding text stamped under page numbers")


class SlideLayoutConfig(BaseSettings):
    """Slide deck layout configuration (inches)

    The height estimates are empirical values carried over from the
    authoring tool; they are exposed so a deployment can tune them.
    """
    slide_width: float = Field(default=10.0, gt=0, description="Slide width")
    slide_height: float = Field(default=5.625, gt=0, description="Slide height")
    left_margin: float = Field(default=0.5, ge=0, description="Left margin of content")
    content_width: float = Field(default=9.0, gt=0, description="Width of the content column")
    content_top: float = Field(default=1.0, ge=0, description="Cursor start on a content slide")
    max_y: float = Field(default=5.0, gt=0, description="Cursor limit before overflow")
    max_blocks_per_slide: int = Field(default=5, ge=1, description="Hard cap of blocks on one slide")
    max_table_rows: int = Field(default=8, ge=1, description="Rows shown before a table is truncated")
    section_divider_slides: bool = Field(default=True, description="Open each section with a title slide")

    paragraph_height: float = Field(default=0.6, gt=0)
    heading_height: float = Field(default=0.8, gt=0)
    list_item_height: float = Field(default=0.35, gt=0)
    list_padding: float = Field(default=0.2, ge=0)
    table_row_height: float = Field(default=0.35, gt=0)
    table_padding: float = Field(default=0.3, ge=0)
    table_max_rows_height: int = Field(default=10, ge=1)
    chart_height: float = Field(default=2.8, gt=0)
    chart_placeholder_height: float = Field(default=1.2, gt=0)
    kpi_height: float = Field(default=1.4, gt=0)
    callout_height: float = Field(default=1.0, gt=0)
    quote_height: float = Field(default=0.7, gt=0)
    quote_with_author_height: float = Field(default=0.9, gt=0)
    divider_height: float = Field(default=0.4, gt=0)
    image_height: float = Field(default=2.9, gt=0)
    image_placeholder_height: float = Field(default=0.6, gt=0)


class WorkbookConfig(BaseSettings):
    """Spreadsheet workbook configuration"""
    sheet_name_limit: int = Field(default=31, ge=1, description="Maximum sheet name length")
    summary_sheet: str = Field(default="Résumé", description="Name of the metadata sheet")
    table_sheet_prefix: str = Field(default="Tableau", description="Prefix of table sheets")
    chart_sheet_prefix: str = Field(default="Données", description="Prefix of chart data sheets")
    indicators_sheet: str = Field(default="Indicateurs", description="Name of the KPI sheet")
    max_column_width: int = Field(default=60, ge=8, description="Upper bound of fitted column widths")


class ExportDefaultsConfig(BaseSettings):
    """Default export options"""
    page_size: str = Field(default="A4", description="Default paper size (A4/A3/Letter)")
    margins: str = Field(default="normal", description="Default margin profile (normal/narrow/wide)")
    orientation: str = Field(default="portrait", description="Default orientation")
    include_cover_page: bool = Field(default=True, description="Emit a cover page by default")
    include_table_of_contents: bool = Field(default=True, description="Emit a table of contents by default")
    output_dir: Path = Field(default=Path("exports"), description="Directory used by the CLI")


class Config(BaseSettings):
    """Main configuration for reportstudio"""
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="REPORTSTUDIO_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # Basic settings
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Log level")
    log_file: Optional[str] = Field(default=None, description="Log file path (console only when unset)")

    # Sub-configurations
    pdf: PDFLayoutConfig = Field(default_factory=PDFLayoutConfig)
    slides: SlideLayoutConfig = Field(default_factory=SlideLayoutConfig)
    workbook: WorkbookConfig = Field(default_factory=WorkbookConfig)
    defaults: ExportDefaultsConfig = Field(default_factory=ExportDefaultsConfig)

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._ensure_directories()

    def _ensure_directories(self):
        """Ensure the log directory exists"""
        if self.log_file:
            Path(self.log_file).parent.mkdir(parents=True, exist_ok=True)

    @classmethod
    def from_file(cls, config_file: str) -> "Config":
        """Load configuration from file"""
        import yaml
        with open(config_file, "r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f) or {}
        return cls(**config_data)


# Global configuration instance
config = Config()
