#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Document model schema

Report metadata, the section/block tree and the export option records.
Every renderer consumes these models read-only.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Dict, Iterator, List, Literal, Optional, Tuple, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from ...utils.text import format_number

MAX_MARKUP_DEPTH = 6


def markup_depth(level: int, offset: int = 1) -> int:
    """Heading depth for a nesting level, capped at 6"""
    return max(1, min(level + offset, MAX_MARKUP_DEPTH))


class StudioModel(BaseModel):
    """Immutable model accepting both snake_case and camelCase keys"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class BlockType(str, Enum):
    """块类型枚举"""
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    LIST = "list"
    TABLE = "table"
    KPI_CARD = "kpi_card"
    CALLOUT = "callout"
    DIVIDER = "divider"
    PAGEBREAK = "pagebreak"
    QUOTE = "quote"
    CHART = "chart"
    IMAGE = "image"


class ExportFormat(str, Enum):
    """Supported export encodings"""
    PDF = "pdf"
    DOCX = "docx"
    XLSX = "xlsx"
    HTML = "html"
    MARKDOWN = "markdown"
    PPTX = "pptx"


# ==================== Blocks ====================

class BaseBlock(StudioModel):
    """Fields shared by every block variant"""
    id: Optional[str] = None

    @property
    def block_type(self) -> BlockType:
        return BlockType(self.type)


class ParagraphBlock(BaseBlock):
    type: Literal["paragraph"] = "paragraph"
    content: str = ""


class HeadingBlock(BaseBlock):
    type: Literal["heading"] = "heading"
    level: int = Field(2, ge=1, le=MAX_MARKUP_DEPTH)
    content: str = ""


class ListItem(StudioModel):
    id: Optional[str] = None
    content: str = ""


class ListBlock(BaseBlock):
    type: Literal["list"] = "list"
    list_type: Literal["bullet", "numbered"] = "bullet"
    items: List[ListItem] = Field(default_factory=list)

    @field_validator("list_type", mode="before")
    @classmethod
    def normalize_list_type(cls, v):
        if v == "bulleted":
            return "bullet"
        return v

    @property
    def numbered(self) -> bool:
        return self.list_type == "numbered"


class TableHeader(StudioModel):
    id: Optional[str] = None
    label: str
    key: str
    sortable: Optional[bool] = None
    width: Optional[float] = None
    align: Optional[Literal["left", "center", "right"]] = None
    format: Optional[str] = None


class TableCell(StudioModel):
    value: Optional[Union[int, float, str]] = None
    formatted: Optional[str] = None

    @property
    def display(self) -> str:
        """Formatted text when present, otherwise the raw value"""
        if self.formatted:
            return self.formatted
        return format_number(self.value)


class TableBlock(BaseBlock):
    type: Literal["table"] = "table"
    headers: List[TableHeader] = Field(..., min_length=1)
    rows: List[Dict[str, TableCell]] = Field(default_factory=list)

    @field_validator("rows", mode="before")
    @classmethod
    def wrap_scalar_cells(cls, v):
        """Accept ``{"region": "Nord"}`` as shorthand for ``{"region": {"value": "Nord"}}``"""
        if not isinstance(v, list):
            return v
        wrapped = []
        for row in v:
            if isinstance(row, dict):
                row = {
                    key: cell if isinstance(cell, (dict, TableCell)) else {"value": cell}
                    for key, cell in row.items()
                }
            wrapped.append(row)
        return wrapped

    @model_validator(mode="after")
    def check_row_keys(self):
        keys = {header.key for header in self.headers}
        for index, row in enumerate(self.rows):
            unknown = set(row) - keys
            if unknown:
                raise ValueError(
                    f"Table row {index + 1} has keys not declared in headers: {sorted(unknown)}"
                )
        return self

    def cell_text(self, row: Dict[str, TableCell], key: str) -> str:
        cell = row.get(key)
        return cell.display if cell is not None else ""

    def row_values(self, row: Dict[str, TableCell]) -> List[str]:
        """Cell texts of one row in header order"""
        return [self.cell_text(row, header.key) for header in self.headers]


class KPICardBlock(BaseBlock):
    type: Literal["kpi_card"] = "kpi_card"
    label: str = ""
    value: Union[int, float, str] = 0
    unit: Optional[str] = None
    change: Optional[float] = None
    change_type: Literal["positive", "negative", "neutral"] = "neutral"

    @model_validator(mode="after")
    def check_change_sign(self):
        if self.change is None:
            return self
        if self.change_type == "positive" and self.change < 0:
            raise ValueError(f"KPI '{self.label}': positive change type with negative change {self.change}")
        if self.change_type == "negative" and self.change >= 0:
            raise ValueError(f"KPI '{self.label}': negative change type with non-negative change {self.change}")
        return self

    @property
    def trend(self) -> str:
        """Style tag: derived from the sign when a change is present"""
        if self.change is None:
            return self.change_type
        return "positive" if self.change >= 0 else "negative"

    @property
    def display_value(self) -> str:
        return f"{format_number(self.value)}{self.unit or ''}"


class CalloutBlock(BaseBlock):
    type: Literal["callout"] = "callout"
    variant: Literal["info", "warning", "success", "error", "tip"] = "info"
    title: Optional[str] = None
    content: str = ""


class DividerBlock(BaseBlock):
    type: Literal["divider"] = "divider"
    style: Literal["solid", "dashed", "dotted"] = "solid"


class PagebreakBlock(BaseBlock):
    type: Literal["pagebreak"] = "pagebreak"


class QuoteBlock(BaseBlock):
    type: Literal["quote"] = "quote"
    content: str = ""
    author: Optional[str] = None


class ChartDataset(StudioModel):
    label: str = ""
    data: List[Optional[float]] = Field(default_factory=list)
    color: Optional[Union[str, List[str]]] = Field(
        default=None, validation_alias=AliasChoices("color", "backgroundColor")
    )


class ChartData(StudioModel):
    labels: List[str] = Field(default_factory=list)
    datasets: List[ChartDataset] = Field(default_factory=list)

    @field_validator("labels", mode="before")
    @classmethod
    def stringify_labels(cls, v):
        if isinstance(v, list):
            return [format_number(label) for label in v]
        return v

    @property
    def has_series(self) -> bool:
        return bool(self.labels) and bool(self.datasets)


class ChartLegend(StudioModel):
    show: bool = True
    position: Literal["top", "bottom", "left", "right"] = "top"


class ChartConfig(StudioModel):
    title: Optional[str] = None
    subtitle: Optional[str] = None
    source: Optional[str] = None
    legend: Optional[ChartLegend] = None


class ChartBlock(BaseBlock):
    type: Literal["chart"] = "chart"
    chart_type: str = "bar"
    data: ChartData = Field(default_factory=ChartData)
    chart_config: ChartConfig = Field(default_factory=ChartConfig, alias="config")

    def display_title(self, default: str = "Graphique") -> str:
        return self.chart_config.title or default


class ImageBlock(BaseBlock):
    type: Literal["image"] = "image"
    src: str = ""
    alt: Optional[str] = None
    caption: Optional[str] = None

    @property
    def label(self) -> str:
        return self.alt or self.caption or "Image"


Block = Annotated[
    Union[
        ParagraphBlock,
        HeadingBlock,
        ListBlock,
        TableBlock,
        KPICardBlock,
        CalloutBlock,
        DividerBlock,
        PagebreakBlock,
        QuoteBlock,
        ChartBlock,
        ImageBlock,
    ],
    Field(discriminator="type"),
]


# ==================== Document tree ====================

class Section(StudioModel):
    """章节"""
    id: str
    title: str
    level: int = Field(1, ge=1)
    blocks: List[Block] = Field(default_factory=list)
    children: List["Section"] = Field(default_factory=list)
    status: Literal["generated", "edited", "manual"] = "manual"
    is_locked: bool = False
    is_collapsed: bool = False

    @model_validator(mode="after")
    def check_child_levels(self):
        for child in self.children:
            if child.level != self.level + 1:
                raise ValueError(
                    f"Section '{child.title}' has level {child.level}, "
                    f"expected {self.level + 1} under '{self.title}'"
                )
        return self


class Content(StudioModel):
    """Ordered section tree of a report"""
    sections: List[Section] = Field(default_factory=list)

    def iter_sections(self) -> Iterator[Section]:
        """Depth-first walk in document order"""
        def walk(sections: List[Section]) -> Iterator[Section]:
            for section in sections:
                yield section
                yield from walk(section.children)

        return walk(self.sections)

    def iter_blocks(self) -> Iterator[Tuple[Section, Any]]:
        """Every (section, block) pair in document order"""
        for section in self.iter_sections():
            for block in section.blocks:
                yield section, block


# ==================== Design settings ====================

class PageFormat(StudioModel):
    size: Optional[Literal["A4", "A3", "Letter"]] = None
    orientation: Optional[Literal["portrait", "landscape"]] = None
    margins: Optional[Literal["normal", "narrow", "wide"]] = None


class Typography(StudioModel):
    heading_font: Optional[str] = None
    body_font: Optional[str] = None
    base_font_size: Optional[float] = Field(default=None, gt=0)


class BrandColors(StudioModel):
    primary: Optional[str] = None
    secondary: Optional[str] = None
    accent: Optional[str] = None
    text: Optional[str] = None
    background: Optional[str] = None


class Branding(StudioModel):
    show_footer: bool = True
    footer_text: Optional[str] = None


class CoverSettings(StudioModel):
    enabled: Optional[bool] = None
    title: Optional[str] = None
    subtitle: Optional[str] = None


class TableOfContentsSettings(StudioModel):
    enabled: Optional[bool] = None


class DesignSettings(StudioModel):
    """Per-report overrides set by the author"""
    page_format: Optional[PageFormat] = None
    typography: Optional[Typography] = None
    colors: Optional[BrandColors] = None
    branding: Optional[Branding] = None
    cover: Optional[CoverSettings] = None
    table_of_contents: Optional[TableOfContentsSettings] = None

    @property
    def footer_text(self) -> Optional[str]:
        if self.branding and self.branding.show_footer:
            return self.branding.footer_text
        return None


class Report(StudioModel):
    """报告元数据"""
    id: str
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    author: str = ""
    period_label: Optional[str] = None
    status: Literal["draft", "generating", "review", "approved", "published", "archived"] = "draft"
    version: int = 1
    created_at: datetime
    updated_at: datetime
    published_at: Optional[datetime] = None
    design_settings: Optional[DesignSettings] = None

    @property
    def cover_title(self) -> str:
        cover = self.design_settings.cover if self.design_settings else None
        return (cover.title if cover and cover.title else None) or self.title

    @property
    def cover_subtitle(self) -> Optional[str]:
        cover = self.design_settings.cover if self.design_settings else None
        return (cover.subtitle if cover and cover.subtitle else None) or self.description


# ==================== Export records ====================

class ExportOptions(StudioModel):
    """导出选项"""
    page_size: Literal["A4", "A3", "Letter"] = "A4"
    margins: Literal["normal", "narrow", "wide"] = "normal"
    orientation: Literal["portrait", "landscape"] = "portrait"
    include_cover_page: bool = True
    include_table_of_contents: bool = True
    generated_at: Optional[datetime] = None

    def merged_with(self, settings: Optional[DesignSettings]) -> "ExportOptions":
        """Apply the report's design settings, which win over the caller's options"""
        if settings is None:
            return self
        update: Dict[str, Any] = {}
        page_format = settings.page_format
        if page_format:
            if page_format.size:
                update["page_size"] = page_format.size
            if page_format.margins:
                update["margins"] = page_format.margins
            if page_format.orientation:
                update["orientation"] = page_format.orientation
        if settings.cover and settings.cover.enabled is not None:
            update["include_cover_page"] = settings.cover.enabled
        if settings.table_of_contents and settings.table_of_contents.enabled is not None:
            update["include_table_of_contents"] = settings.table_of_contents.enabled
        return self.model_copy(update=update) if update else self

    def generation_time(self) -> datetime:
        return self.generated_at or datetime.now()


class RenderedDocument(BaseModel):
    """Output of a single renderer"""
    content: bytes
    media_type: str
    extension: str
    page_count: Optional[int] = None
    slide_count: Optional[int] = None
    sheet_count: Optional[int] = None


class ExportResult(BaseModel):
    """Uniform outcome of an export call"""
    success: bool
    content: Optional[bytes] = None
    filename: Optional[str] = None
    media_type: Optional[str] = None
    error: Optional[str] = None
    page_count: Optional[int] = None
    slide_count: Optional[int] = None
    sheet_count: Optional[int] = None

    @classmethod
    def failure(cls, error: str) -> "ExportResult":
        return cls(success=False, error=error)
