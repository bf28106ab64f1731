#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
PPTX Renderer

使用python-pptx生成16:9演示文稿，块按估算高度分配到幻灯片
"""

from io import BytesIO
from typing import Optional

from loguru import logger
from pptx import Presentation
from pptx.chart.data import CategoryChartData
from pptx.dml.color import RGBColor
from pptx.enum.chart import XL_CHART_TYPE, XL_LEGEND_POSITION
from pptx.enum.dml import MSO_LINE_DASH_STYLE
from pptx.enum.shapes import MSO_CONNECTOR, MSO_SHAPE
from pptx.enum.text import PP_ALIGN
from pptx.exc import PythonPptxError
from pptx.util import Inches, Pt

from .base import BaseRenderer
from .embedding import EmbedResult, decode_data_uri
from ..model.schema import (
    BlockType,
    CalloutBlock,
    ChartBlock,
    Content,
    DividerBlock,
    ExportOptions,
    HeadingBlock,
    ImageBlock,
    KPICardBlock,
    ListBlock,
    PagebreakBlock,
    ParagraphBlock,
    QuoteBlock,
    RenderedDocument,
    Report,
    Section,
    TableBlock,
)
from ..theme import CALLOUT_COLORS, LIGHT_BG, RGB, TREND_COLORS, DesignTheme, get_design_theme
from ...utils.text import format_change, format_date_short

BLANK_LAYOUT = 6

WHITE = RGBColor(0xFF, 0xFF, 0xFF)
GREY = RGBColor(0x66, 0x66, 0x66)
LIGHT_GREY = RGBColor(0x88, 0x88, 0x88)
BORDER_GREY = RGBColor(0xCC, 0xCC, 0xCC)
CARD_BORDER = RGBColor(0xDD, 0xDD, 0xDD)

HEADING_SIZES = {1: 28, 2: 24, 3: 20, 4: 18, 5: 16, 6: 14}

CHART_TYPES = {
    "bar": XL_CHART_TYPE.COLUMN_CLUSTERED,
    "horizontal_bar": XL_CHART_TYPE.BAR_CLUSTERED,
    "stacked_bar": XL_CHART_TYPE.COLUMN_STACKED,
    "line": XL_CHART_TYPE.LINE,
    "area": XL_CHART_TYPE.AREA,
    "pie": XL_CHART_TYPE.PIE,
    "donut": XL_CHART_TYPE.DOUGHNUT,
    "doughnut": XL_CHART_TYPE.DOUGHNUT,
}

LEGEND_POSITIONS = {
    "top": XL_LEGEND_POSITION.TOP,
    "bottom": XL_LEGEND_POSITION.BOTTOM,
    "left": XL_LEGEND_POSITION.LEFT,
    "right": XL_LEGEND_POSITION.RIGHT,
}


def chart_type_for(chart_type: str):
    """Native chart kind for a block's chart type, clustered columns by default"""
    return CHART_TYPES.get(chart_type, XL_CHART_TYPE.COLUMN_CLUSTERED)


def _rgb(color: RGB) -> RGBColor:
    return RGBColor(*color)


class SlideCursor:
    """Position inside the current content slide

    Created once per section, so continuation slides re-use the section
    title and a page break only takes effect when another block follows.
    """

    def __init__(self, layout, title: str):
        self.layout = layout
        self.title = title
        self.slide = None
        self.y = layout.content_top
        self.blocks = 0
        self.break_requested = False

    @property
    def empty(self) -> bool:
        return self.blocks == 0

    def needs_new_slide(self, height: float) -> bool:
        if self.slide is None or self.break_requested:
            return True
        if self.blocks >= self.layout.max_blocks_per_slide:
            return True
        return not self.empty and self.y + height > self.layout.max_y

    def open(self, slide):
        self.slide = slide
        self.y = self.layout.content_top
        self.blocks = 0
        self.break_requested = False

    def place(self, height: float):
        self.y += height
        self.blocks += 1


class PPTXRenderer(BaseRenderer):
    """PPTX渲染器"""

    media_type = "application/vnd.openxmlformats-officedocument.presentationml.presentation"
    extension = ".pptx"
    block_handlers = {
        BlockType.PARAGRAPH: "_render_paragraph",
        BlockType.HEADING: "_render_heading",
        BlockType.LIST: "_render_list",
        BlockType.TABLE: "_render_table",
        BlockType.KPI_CARD: "_render_kpi",
        BlockType.CALLOUT: "_render_callout",
        BlockType.DIVIDER: "_render_divider",
        BlockType.PAGEBREAK: "_render_pagebreak",
        BlockType.QUOTE: "_render_quote",
        BlockType.CHART: "_render_chart",
        BlockType.IMAGE: "_render_image",
    }

    def render(self, report: Report, content: Content, options: ExportOptions) -> RenderedDocument:
        """渲染为PPTX"""
        logger.info(f"Rendering document to PPTX: {report.title}")

        layout = self.config.slides
        theme = get_design_theme(report)

        prs = Presentation()
        prs.slide_width = Inches(layout.slide_width)
        prs.slide_height = Inches(layout.slide_height)

        properties = prs.core_properties
        properties.title = report.title
        properties.author = report.author
        properties.subject = report.description or ""
        properties.revision = report.version
        properties.created = report.created_at
        properties.modified = report.updated_at
        properties.last_modified_by = report.author

        if options.include_cover_page:
            self._render_cover(prs, report, options, theme)

        if options.include_table_of_contents and content.sections:
            self._render_toc(prs, content, theme)

        for section in content.sections:
            self._render_section(prs, section, theme)

        if len(prs.slides) == 0:
            self._render_title_slide(prs, report.cover_title, theme)

        buffer = BytesIO()
        prs.save(buffer)

        slide_count = len(prs.slides)
        logger.debug(f"Deck built with {slide_count} slide(s)")
        return self.document(buffer.getvalue(), slide_count=slide_count)

    # ==================== Shape helpers ====================

    def _new_slide(self, prs):
        return prs.slides.add_slide(prs.slide_layouts[BLANK_LAYOUT])

    def _add_text(self, slide, text: str, x: float, y: float, w: float, h: float, size: int,
                  color: RGBColor, bold: bool = False, italic: bool = False,
                  align: Optional[int] = None):
        box = slide.shapes.add_textbox(Inches(x), Inches(y), Inches(w), Inches(h))
        frame = box.text_frame
        frame.word_wrap = True
        for index, line in enumerate(text.split("\n")):
            paragraph = frame.paragraphs[0] if index == 0 else frame.add_paragraph()
            if align is not None:
                paragraph.alignment = align
            run = paragraph.add_run()
            run.text = line
            run.font.size = Pt(size)
            run.font.bold = bold
            run.font.italic = italic
            run.font.color.rgb = color
        return box

    def _add_band(self, slide, y: float, h: float, color: RGB, width: float):
        shape = slide.shapes.add_shape(MSO_SHAPE.RECTANGLE, 0, Inches(y), Inches(width), Inches(h))
        shape.fill.solid()
        shape.fill.fore_color.rgb = _rgb(color)
        shape.line.fill.background()
        return shape

    # ==================== Fixed slides ====================

    def _render_cover(self, prs, report: Report, options: ExportOptions, theme: DesignTheme):
        """封面幻灯片"""
        layout = self.config.slides
        slide = self._new_slide(prs)
        width = layout.slide_width * 0.9

        self._add_band(slide, 0, layout.slide_height * 0.4, theme.primary, layout.slide_width)
        self._add_text(slide, report.cover_title, 0.5, 1.5, width, 1, 36, WHITE, bold=True,
                       align=PP_ALIGN.CENTER)
        if report.cover_subtitle:
            self._add_text(slide, report.cover_subtitle, 0.5, 2.5, width, 0.5, 16, WHITE,
                           align=PP_ALIGN.CENTER)

        meta = []
        if report.period_label:
            meta.append(f"Période: {report.period_label}")
        meta.append(f"Auteur: {report.author}")
        meta.append(f"Date: {format_date_short(options.generation_time())}")
        self._add_text(slide, "\n".join(meta), 0.5, 4, width, 1, 14, _rgb(theme.text),
                       align=PP_ALIGN.CENTER)

    def _render_toc(self, prs, content: Content, theme: DesignTheme):
        """目录幻灯片"""
        layout = self.config.slides
        slide = self._new_slide(prs)
        width = layout.slide_width * 0.9

        self._add_text(slide, "Table des matières", 0.5, 0.3, width, 0.6, 28, _rgb(theme.primary),
                       bold=True)
        entries = [f"{index}. {section.title}" for index, section in enumerate(content.sections, 1)]
        self._add_text(slide, "\n".join(entries), 0.5, 1.2, width, 4, 16, _rgb(theme.text))

    def _render_title_slide(self, prs, title: str, theme: DesignTheme):
        """Title on a primary band; opens a section and stands in for an empty deck"""
        layout = self.config.slides
        slide = self._new_slide(prs)
        self._add_band(slide, 2, 1.5, theme.primary, layout.slide_width)
        self._add_text(slide, title, 0.5, 2.2, layout.slide_width * 0.9, 1, 32, WHITE, bold=True,
                       align=PP_ALIGN.CENTER)

    # ==================== Sections ====================

    def _render_section(self, prs, section: Section, theme: DesignTheme):
        """渲染章节"""
        layout = self.config.slides

        if layout.section_divider_slides:
            self._render_title_slide(prs, section.title, theme)

        cursor = SlideCursor(layout, section.title)
        for block in section.blocks:
            if block.block_type == BlockType.PAGEBREAK:
                self.dispatch_block(block, cursor, theme)
                continue

            estimate = self._estimate_height(block)
            if cursor.needs_new_slide(estimate):
                cursor.open(self._new_content_slide(prs, cursor.title, theme))

            height = self.dispatch_block(block, cursor, theme)
            cursor.place(height)

        for child in section.children:
            self._render_section(prs, child, theme)

    def _new_content_slide(self, prs, title: str, theme: DesignTheme):
        layout = self.config.slides
        slide = self._new_slide(prs)
        self._add_text(slide, title, 0.3, 0.2, layout.slide_width * 0.95, 0.5, 14,
                       _rgb(theme.primary), bold=True)
        return slide

    def _estimate_height(self, block) -> float:
        """Height a block is expected to take before it is drawn"""
        layout = self.config.slides
        block_type = block.block_type
        if block_type == BlockType.PARAGRAPH:
            return layout.paragraph_height
        if block_type == BlockType.HEADING:
            return layout.heading_height
        if block_type == BlockType.LIST:
            return len(block.items) * layout.list_item_height + layout.list_padding
        if block_type == BlockType.TABLE:
            return self._table_height(block)
        if block_type == BlockType.KPI_CARD:
            return layout.kpi_height
        if block_type == BlockType.CALLOUT:
            return layout.callout_height
        if block_type == BlockType.QUOTE:
            return layout.quote_with_author_height if block.author else layout.quote_height
        if block_type == BlockType.DIVIDER:
            return layout.divider_height
        if block_type == BlockType.CHART:
            return layout.chart_height if block.data.has_series else layout.chart_placeholder_height
        if block_type == BlockType.IMAGE:
            embeddable = decode_data_uri(block.src) is not None
            return layout.image_height if embeddable else layout.image_placeholder_height
        return 0.0

    def _table_height(self, block: TableBlock) -> float:
        layout = self.config.slides
        shown = min(len(block.rows), layout.max_table_rows)
        return min(shown + 2, layout.table_max_rows_height) * layout.table_row_height + layout.table_padding

    # ==================== Blocks ====================
    # Each handler draws on ``cursor.slide`` at ``cursor.y`` and returns the height used.

    def _render_paragraph(self, block: ParagraphBlock, cursor: SlideCursor, theme: DesignTheme) -> float:
        layout = self.config.slides
        self._add_text(cursor.slide, block.content, layout.left_margin, cursor.y, layout.content_width,
                       0.5, 14, _rgb(theme.text))
        return layout.paragraph_height

    def _render_heading(self, block: HeadingBlock, cursor: SlideCursor, theme: DesignTheme) -> float:
        layout = self.config.slides
        self._add_text(cursor.slide, block.content, layout.left_margin, cursor.y, layout.content_width,
                       0.6, HEADING_SIZES.get(block.level, 18), _rgb(theme.primary), bold=True)
        return layout.heading_height

    def _render_list(self, block: ListBlock, cursor: SlideCursor, theme: DesignTheme) -> float:
        layout = self.config.slides
        lines = []
        for index, item in enumerate(block.items, 1):
            lines.append(f"{index}. {item.content}" if block.numbered else f"• {item.content}")
        height = len(block.items) * layout.list_item_height
        self._add_text(cursor.slide, "\n".join(lines), layout.left_margin, cursor.y, layout.content_width,
                       max(height, layout.list_item_height), 14, _rgb(theme.text))
        return height + layout.list_padding

    def _render_table(self, block: TableBlock, cursor: SlideCursor, theme: DesignTheme) -> float:
        layout = self.config.slides
        shown = block.rows[:layout.max_table_rows]
        hidden = len(block.rows) - len(shown)
        row_count = 1 + len(shown) + (1 if hidden > 0 else 0)
        col_count = len(block.headers)

        shape = cursor.slide.shapes.add_table(
            row_count, col_count,
            Inches(layout.left_margin), Inches(cursor.y),
            Inches(layout.content_width), Inches(row_count * layout.table_row_height),
        )
        table = shape.table
        col_width = Inches(layout.content_width / col_count)
        for column in table.columns:
            column.width = col_width

        for col_index, header in enumerate(block.headers):
            self._fill_cell(table.cell(0, col_index), header.label, 11, theme.primary, WHITE,
                            bold=True, align=PP_ALIGN.CENTER)

        for row_index, row in enumerate(shown):
            background = (255, 255, 255) if row_index % 2 == 0 else LIGHT_BG
            for col_index, value in enumerate(block.row_values(row)):
                self._fill_cell(table.cell(row_index + 1, col_index), value, 10, background,
                                _rgb(theme.text), align=PP_ALIGN.LEFT)

        if hidden > 0:
            last = row_count - 1
            for col_index in range(col_count):
                text = f"... et {hidden} lignes supplémentaires" if col_index == 0 else ""
                self._fill_cell(table.cell(last, col_index), text, 9, (255, 255, 255), GREY, italic=True)

        return self._table_height(block)

    def _fill_cell(self, cell, text: str, size: int, background: RGB, color: RGBColor,
                   bold: bool = False, italic: bool = False, align: Optional[int] = None):
        cell.fill.solid()
        cell.fill.fore_color.rgb = _rgb(background)
        paragraph = cell.text_frame.paragraphs[0]
        if align is not None:
            paragraph.alignment = align
        run = paragraph.add_run()
        run.text = text
        run.font.size = Pt(size)
        run.font.bold = bold
        run.font.italic = italic
        run.font.color.rgb = color

    def _render_kpi(self, block: KPICardBlock, cursor: SlideCursor, theme: DesignTheme) -> float:
        layout = self.config.slides
        slide = cursor.slide
        x, y = layout.left_margin, cursor.y

        card = slide.shapes.add_shape(MSO_SHAPE.ROUNDED_RECTANGLE, Inches(x), Inches(y), Inches(3), Inches(1.2))
        card.fill.solid()
        card.fill.fore_color.rgb = _rgb(LIGHT_BG)
        card.line.color.rgb = CARD_BORDER
        card.line.width = Pt(1)

        self._add_text(slide, block.label, x + 0.15, y + 0.1, 2.7, 0.3, 10, GREY)
        self._add_text(slide, block.display_value, x + 0.15, y + 0.4, 2.7, 0.5, 24, _rgb(theme.primary),
                       bold=True)
        if block.change is not None:
            self._add_text(slide, format_change(block.change), x + 0.15, y + 0.85, 2.7, 0.25, 11,
                           _rgb(TREND_COLORS[block.trend]))
        return layout.kpi_height

    def _render_callout(self, block: CalloutBlock, cursor: SlideCursor, theme: DesignTheme) -> float:
        layout = self.config.slides
        color = CALLOUT_COLORS.get(block.variant, CALLOUT_COLORS["info"])

        box = cursor.slide.shapes.add_shape(
            MSO_SHAPE.RECTANGLE, Inches(layout.left_margin), Inches(cursor.y),
            Inches(layout.content_width), Inches(0.8),
        )
        box.fill.solid()
        box.fill.fore_color.rgb = _rgb(tuple(round(255 - (255 - c) * 0.1) for c in color))
        box.line.color.rgb = _rgb(color)
        box.line.width = Pt(2)

        text = f"{block.title}: {block.content}" if block.title else block.content
        self._add_text(cursor.slide, text, layout.left_margin + 0.15, cursor.y + 0.15,
                       layout.content_width - 0.3, 0.5, 12, _rgb(theme.text))
        return layout.callout_height

    def _render_divider(self, block: DividerBlock, cursor: SlideCursor, theme: DesignTheme) -> float:
        layout = self.config.slides
        y = Inches(cursor.y + 0.15)
        line = cursor.slide.shapes.add_connector(
            MSO_CONNECTOR.STRAIGHT, Inches(layout.left_margin), y,
            Inches(layout.left_margin + layout.content_width), y,
        )
        line.line.color.rgb = BORDER_GREY
        line.line.width = Pt(1)
        if block.style == "dashed":
            line.line.dash_style = MSO_LINE_DASH_STYLE.DASH
        elif block.style == "dotted":
            line.line.dash_style = MSO_LINE_DASH_STYLE.ROUND_DOT
        return layout.divider_height

    def _render_pagebreak(self, block: PagebreakBlock, cursor: SlideCursor, theme: DesignTheme) -> float:
        if cursor.slide is not None and not cursor.empty:
            cursor.break_requested = True
        return 0.0

    def _render_quote(self, block: QuoteBlock, cursor: SlideCursor, theme: DesignTheme) -> float:
        layout = self.config.slides
        x, width = layout.left_margin + 0.3, layout.content_width - 0.6
        self._add_text(cursor.slide, f'"{block.content}"', x, cursor.y, width, 0.6, 14, GREY, italic=True)
        if block.author:
            self._add_text(cursor.slide, f"— {block.author}", x, cursor.y + 0.5, width, 0.3, 11, LIGHT_GREY)
            return layout.quote_with_author_height
        return layout.quote_height

    def _placeholder(self, cursor: SlideCursor, text: str):
        layout = self.config.slides
        self._add_text(cursor.slide, text, layout.left_margin, cursor.y, layout.content_width, 1, 12, GREY,
                       italic=True, align=PP_ALIGN.CENTER)

    def _embed_chart(self, block: ChartBlock, cursor: SlideCursor, theme: DesignTheme) -> EmbedResult:
        layout = self.config.slides
        if not block.data.has_series:
            return EmbedResult.failure("chart has no labels or datasets")

        chart_data = CategoryChartData()
        chart_data.categories = block.data.labels
        for dataset in block.data.datasets:
            values = [value if value is not None else 0 for value in dataset.data]
            chart_data.add_series(dataset.label or "Série", values)

        try:
            graphic = cursor.slide.shapes.add_chart(
                chart_type_for(block.chart_type),
                Inches(layout.left_margin), Inches(cursor.y),
                Inches(layout.content_width), Inches(2.5),
                chart_data,
            )
        except (PythonPptxError, ValueError, KeyError, TypeError) as e:
            return EmbedResult.failure(str(e))

        chart = graphic.chart
        title = block.chart_config.title
        chart.has_title = bool(title)
        if title:
            chart.chart_title.text_frame.text = title
            font = chart.chart_title.text_frame.paragraphs[0].runs[0].font
            font.size = Pt(12)
            font.color.rgb = _rgb(theme.primary)

        legend = block.chart_config.legend
        chart.has_legend = legend.show if legend else True
        if chart.has_legend:
            position = legend.position if legend else "top"
            chart.legend.position = LEGEND_POSITIONS[position]
            chart.legend.include_in_layout = False
        return EmbedResult.ok(layout.chart_height)

    def _render_chart(self, block: ChartBlock, cursor: SlideCursor, theme: DesignTheme) -> float:
        result = self._embed_chart(block, cursor, theme)
        if result.embedded:
            return result.height

        logger.debug(f"Chart placeholder used: {result.reason}")
        default = "Données" if block.data.has_series else "Graphique"
        self._placeholder(cursor, f"[Graphique: {block.display_title(default)}]")
        return self.config.slides.chart_placeholder_height

    def _embed_image(self, block: ImageBlock, cursor: SlideCursor) -> EmbedResult:
        layout = self.config.slides
        data = decode_data_uri(block.src)
        if data is None:
            return EmbedResult.failure("image source is not an embedded data URI")
        try:
            cursor.slide.shapes.add_picture(
                BytesIO(data), Inches(layout.left_margin), Inches(cursor.y), Inches(4), Inches(2.5)
            )
        except (OSError, ValueError, PythonPptxError) as e:
            return EmbedResult.failure(str(e))

        if block.caption:
            self._add_text(cursor.slide, block.caption, layout.left_margin, cursor.y + 2.5, 4, 0.3, 10, GREY,
                           italic=True, align=PP_ALIGN.CENTER)
        return EmbedResult.ok(layout.image_height)

    def _render_image(self, block: ImageBlock, cursor: SlideCursor, theme: DesignTheme) -> float:
        result = self._embed_image(block, cursor)
        if result.embedded:
            return result.height

        logger.debug(f"Image placeholder used: {result.reason}")
        self._placeholder(cursor, f"[Image: {block.label}]")
        return self.config.slides.image_placeholder_height
