#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
PDF Renderer

使用ReportLab画布逐块绘制并手动分页
"""

from io import BytesIO
from typing import List, Optional

from loguru import logger
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from .base import BaseRenderer
from .embedding import EmbedResult, decode_data_uri
from ..layout import PageCursor, PageGeometry, resolve_geometry
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
from ..theme import CALLOUT_COLORS, LIGHT_BG, MUTED, RGB, TREND_COLORS, DesignTheme, get_design_theme
from ...utils.text import format_change, format_date_long

FONT = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
FONT_ITALIC = "Helvetica-Oblique"

WHITE: RGB = (255, 255, 255)
FOOTER_GREY: RGB = (150, 150, 150)
DIVIDER_GREY: RGB = (200, 200, 200)


class NumberedCanvas(canvas.Canvas):
    """Canvas that stamps ``Page N / total`` once every page is known"""

    def __init__(self, *args, geometry: PageGeometry, footer_text: Optional[str] = None,
                 footer_font_size: int = 9, **kwargs):
        super().__init__(*args, **kwargs)
        self._saved_page_states = []
        self._geometry = geometry
        self._footer_text = footer_text
        self._footer_font_size = footer_font_size

    @property
    def page_count(self) -> int:
        return len(self._saved_page_states)

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        total = len(self._saved_page_states)
        for number, state in enumerate(self._saved_page_states, 1):
            self.__dict__.update(state)
            self._draw_footer(number, total)
            canvas.Canvas.showPage(self)
        canvas.Canvas.save(self)

    def _draw_footer(self, number: int, total: int):
        geometry = self._geometry
        center = geometry.width / 2 * mm
        baseline = geometry.margins.bottom / 2

        self.saveState()
        self.setFont(FONT, self._footer_font_size)
        self.setFillColorRGB(*[c / 255 for c in FOOTER_GREY])
        self.drawCentredString(center, baseline * mm, f"Page {number} / {total}")
        if self._footer_text:
            self.drawCentredString(center, (baseline - 5) * mm, self._footer_text)
        self.restoreState()


class _CanvasContext:
    """Per-export drawing state: canvas, geometry, theme and cursor"""

    def __init__(self, canv: NumberedCanvas, geometry: PageGeometry, theme: DesignTheme, layout):
        self.canv = canv
        self.geometry = geometry
        self.theme = theme
        self.layout = layout
        self.cursor = PageCursor(geometry, on_new_page=canv.showPage)

    @property
    def left(self) -> float:
        return self.geometry.margins.left

    @property
    def content_width(self) -> float:
        return self.geometry.content_width

    def to_pt_y(self, y: float) -> float:
        """Top-down millimetres to ReportLab's bottom-up points"""
        return (self.geometry.height - y) * mm

    def set_fill(self, color: RGB):
        self.canv.setFillColorRGB(*[c / 255 for c in color])

    def set_stroke(self, color: RGB):
        self.canv.setStrokeColorRGB(*[c / 255 for c in color])

    def text(self, x: float, y: float, value: str, font: str, size: float, color: RGB,
             align: str = "left"):
        self.canv.setFont(font, size)
        self.set_fill(color)
        if align == "center":
            self.canv.drawCentredString(x * mm, self.to_pt_y(y), value)
        else:
            self.canv.drawString(x * mm, self.to_pt_y(y), value)

    def rect(self, x: float, top: float, width: float, height: float, fill: RGB,
             stroke: Optional[RGB] = None, radius: float = 0):
        """Rectangle given by its top edge in top-down millimetres"""
        self.set_fill(fill)
        if stroke is not None:
            self.set_stroke(stroke)
        args = (x * mm, self.to_pt_y(top + height), width * mm, height * mm)
        if radius:
            self.canv.roundRect(*args, radius * mm, stroke=1 if stroke else 0, fill=1)
        else:
            self.canv.rect(*args, stroke=1 if stroke else 0, fill=1)

    def wrap(self, value: str, font: str, size: float, width: float) -> List[str]:
        lines = simpleSplit(value or "", font, size, width * mm)
        return lines or [""]

    def clip(self, value: str, font: str, size: float, width: float) -> str:
        """Trim text so it fits in ``width`` millimetres"""
        limit = width * mm
        if stringWidth(value, font, size) <= limit:
            return value
        while value and stringWidth(value + "...", font, size) > limit:
            value = value[:-1]
        return value + "..." if value else ""


def _tint(color: RGB, strength: float = 0.1) -> RGB:
    """Blend a colour towards white"""
    return tuple(round(255 - (255 - c) * strength) for c in color)


class PDFRenderer(BaseRenderer):
    """PDF渲染器"""

    media_type = "application/pdf"
    extension = ".pdf"
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
        """渲染为PDF"""
        logger.info(f"Rendering document to PDF: {report.title}")

        layout = self.config.pdf
        geometry = resolve_geometry(options)
        theme = get_design_theme(report, default_footer=layout.footer_text)

        buffer = BytesIO()
        canv = NumberedCanvas(
            buffer,
            pagesize=(geometry.width * mm, geometry.height * mm),
            pageCompression=1 if layout.compress else 0,
            # a pinned generation date also pins the PDF creation date and file id
            invariant=1 if options.generated_at else 0,
            geometry=geometry,
            footer_text=theme.footer_text,
            footer_font_size=layout.footer_font_size,
        )
        canv.setTitle(report.title)
        canv.setAuthor(report.author)
        if report.description:
            canv.setSubject(report.description)

        ctx = _CanvasContext(canv, geometry, theme, layout)

        if options.include_cover_page:
            self._render_cover(ctx, report, options)
            ctx.cursor.new_page()

        if options.include_table_of_contents:
            self._render_toc(ctx, content)
            ctx.cursor.new_page()

        for section in content.sections:
            self._render_section(ctx, section)

        # an untouched page opened by the last break is dropped
        if not ctx.cursor.at_top or canv.page_count == 0:
            canv.showPage()
        canv.save()

        page_count = canv.page_count
        logger.debug(f"PDF laid out on {page_count} page(s)")
        return self.document(buffer.getvalue(), page_count=page_count)

    # ==================== Front matter ====================

    def _render_cover(self, ctx: _CanvasContext, report: Report, options: ExportOptions):
        """封面"""
        width, height = ctx.geometry.width, ctx.geometry.height
        ctx.rect(0, 0, width, height / 3, fill=ctx.theme.primary)

        ctx.text(width / 2, height / 6, report.cover_title, FONT_BOLD, 32, WHITE, align="center")

        subtitle = report.cover_subtitle
        if subtitle:
            y = height / 6 + 20
            for line in ctx.wrap(subtitle, FONT, 14, width - 60):
                ctx.text(width / 2, y, line, FONT, 14, WHITE, align="center")
                y += 7

        text_color = ctx.theme.text
        y = height / 2
        if report.period_label:
            ctx.text(ctx.left, y, f"Période: {report.period_label}", FONT, 12, text_color)
        ctx.text(ctx.left, y + 10, f"Auteur: {report.author}", FONT, 12, text_color)
        generated = format_date_long(options.generation_time())
        ctx.text(ctx.left, y + 20, f"Généré le: {generated}", FONT, 12, text_color)

    def _render_toc(self, ctx: _CanvasContext, content: Content):
        """目录页"""
        ctx.text(ctx.left, ctx.cursor.y, "Table des matières", FONT_BOLD, 20, ctx.theme.primary)
        ctx.cursor.advance(15)

        for index, section in enumerate(content.sections, 1):
            ctx.cursor.ensure_space(8)
            indent = (section.level - 1) * 5
            ctx.text(ctx.left + indent, ctx.cursor.y, f"{index}. {section.title}", FONT, 12, ctx.theme.text)
            ctx.cursor.advance(8)

    # ==================== Sections ====================

    def _render_section(self, ctx: _CanvasContext, section: Section):
        """渲染章节"""
        font_size = max(20 - (section.level - 1) * 4, 12)
        advance = font_size / 2 + 5

        ctx.cursor.ensure_space(max(advance, ctx.layout.section_keep_with_next))
        ctx.text(ctx.left, ctx.cursor.y, section.title, FONT_BOLD, font_size, ctx.theme.primary)
        ctx.cursor.advance(advance)

        for block in section.blocks:
            self.dispatch_block(block, ctx)

        for child in section.children:
            self._render_section(ctx, child)

        # a section ending on a page break leaves the next page untouched
        if not ctx.cursor.at_top:
            ctx.cursor.advance(ctx.layout.section_spacing)

    def _flow_lines(self, ctx: _CanvasContext, lines: List[str], x: float, font: str, size: float,
                    color: RGB, line_height: float, trailing: float):
        """Draw lines, keeping them together when they fit on one page"""
        total = len(lines) * line_height + trailing
        page_room = ctx.geometry.content_bottom - ctx.geometry.margins.top
        if total <= page_room:
            ctx.cursor.ensure_space(total)
        for line in lines:
            ctx.cursor.ensure_space(line_height)
            ctx.text(x, ctx.cursor.y, line, font, size, color)
            ctx.cursor.advance(line_height)
        ctx.cursor.advance(trailing)

    # ==================== Blocks ====================

    def _render_paragraph(self, block: ParagraphBlock, ctx: _CanvasContext):
        size = ctx.theme.base_font_size
        lines = ctx.wrap(block.content, FONT, size, ctx.content_width)
        self._flow_lines(ctx, lines, ctx.left, FONT, size, ctx.theme.text,
                         ctx.layout.line_height, ctx.layout.block_spacing)

    def _render_heading(self, block: HeadingBlock, ctx: _CanvasContext):
        size = max(18 - (block.level - 1) * 2, 12)
        height = size / 2 + 8
        ctx.cursor.ensure_space(height)
        ctx.text(ctx.left, ctx.cursor.y, block.content, FONT_BOLD, size, ctx.theme.text)
        ctx.cursor.advance(height)

    def _render_list(self, block: ListBlock, ctx: _CanvasContext):
        lines = []
        for index, item in enumerate(block.items, 1):
            bullet = f"{index}." if block.numbered else "•"
            wrapped = ctx.wrap(f"{bullet} {item.content}", FONT, 11, ctx.content_width - 5)
            lines.extend(wrapped)
        self._flow_lines(ctx, lines, ctx.left + 5, FONT, 11, ctx.theme.text,
                         ctx.layout.list_item_height, ctx.layout.block_spacing)

    def _table_header(self, ctx: _CanvasContext, block: TableBlock, col_width: float):
        row_height = ctx.layout.table_row_height
        padding = ctx.layout.table_cell_padding
        # header plus at least one data row
        ctx.cursor.ensure_space(row_height * 2)
        y = ctx.cursor.y
        ctx.rect(ctx.left, y - 5, ctx.content_width, row_height, fill=ctx.theme.primary)
        for index, header in enumerate(block.headers):
            label = ctx.clip(header.label, FONT_BOLD, 9, col_width - 2 * padding)
            ctx.text(ctx.left + index * col_width + padding, y, label, FONT_BOLD, 9, WHITE)
        ctx.cursor.advance(row_height)

    def _render_table(self, block: TableBlock, ctx: _CanvasContext):
        row_height = ctx.layout.table_row_height
        padding = ctx.layout.table_cell_padding
        col_width = ctx.content_width / len(block.headers)

        self._table_header(ctx, block, col_width)

        for row_index, row in enumerate(block.rows):
            if ctx.cursor.ensure_space(row_height):
                self._table_header(ctx, block, col_width)

            y = ctx.cursor.y
            if row_index % 2 == 1:
                ctx.rect(ctx.left, y - 5, ctx.content_width, row_height, fill=LIGHT_BG)

            for col_index, value in enumerate(block.row_values(row)):
                text = ctx.clip(value, FONT, 9, col_width - 2 * padding)
                ctx.text(ctx.left + col_index * col_width + padding, y, text, FONT, 9, ctx.theme.text)

            ctx.cursor.advance(row_height)

        ctx.cursor.advance(ctx.layout.block_spacing)

    def _render_kpi(self, block: KPICardBlock, ctx: _CanvasContext):
        ctx.cursor.ensure_space(21)
        ctx.text(ctx.left, ctx.cursor.y, block.label, FONT, 10, MUTED)
        ctx.cursor.advance(6)

        ctx.text(ctx.left, ctx.cursor.y, block.display_value, FONT_BOLD, 18, ctx.theme.primary)
        if block.change is not None:
            ctx.text(ctx.left + 50, ctx.cursor.y, format_change(block.change), FONT, 10,
                     TREND_COLORS[block.trend])
        ctx.cursor.advance(15)

    def _render_callout(self, block: CalloutBlock, ctx: _CanvasContext):
        """Draw a tinted box; a callout taller than a page continues in a new box on the next page"""
        color = CALLOUT_COLORS.get(block.variant, CALLOUT_COLORS["info"])
        line_height = ctx.layout.line_height
        lines = ctx.wrap(block.content, FONT, 10, ctx.content_width - 10)
        title = block.title
        title_height = 8 if title else 0
        box_height = max(20, title_height + len(lines) * line_height + 10)

        page_room = ctx.geometry.content_bottom - ctx.geometry.margins.top
        if box_height + 5 <= page_room:
            ctx.cursor.ensure_space(box_height + 5)

        start = 0
        while start < len(lines):
            title_height = 8 if title else 0
            fit = int((ctx.cursor.remaining - title_height - 5) // line_height)
            if fit < 1 and not ctx.cursor.at_top:
                ctx.cursor.new_page()
                continue
            segment = lines[start:start + max(fit, 1)]
            whole = start == 0 and len(segment) == len(lines)
            start += len(segment)

            height = box_height if whole else title_height + len(segment) * line_height + 10
            ctx.rect(ctx.left, ctx.cursor.y - 5, ctx.content_width, height, fill=_tint(color), stroke=color,
                     radius=2)

            y = ctx.cursor.y + 2
            if title:
                ctx.text(ctx.left + 5, y, title, FONT_BOLD, 11, color)
                y += title_height
                title = None
            for line in segment:
                ctx.text(ctx.left + 5, y, line, FONT, 10, ctx.theme.text)
                y += line_height

            if start < len(lines):
                ctx.cursor.new_page()
            else:
                ctx.cursor.advance(height + 5)

    def _render_divider(self, block: DividerBlock, ctx: _CanvasContext):
        ctx.cursor.ensure_space(10)
        canv = ctx.canv
        canv.saveState()
        ctx.set_stroke(DIVIDER_GREY)
        if block.style == "dashed":
            canv.setDash(6, 3)
        elif block.style == "dotted":
            canv.setDash(1, 2)
        y = ctx.to_pt_y(ctx.cursor.y)
        canv.line(ctx.left * mm, y, (ctx.left + ctx.content_width) * mm, y)
        canv.restoreState()
        ctx.cursor.advance(10)

    def _render_pagebreak(self, block: PagebreakBlock, ctx: _CanvasContext):
        if not ctx.cursor.at_top:
            ctx.cursor.new_page()

    def _render_quote(self, block: QuoteBlock, ctx: _CanvasContext):
        lines = ctx.wrap(f'"{block.content}"', FONT_ITALIC, 11, ctx.content_width - 20)
        self._flow_lines(ctx, lines, ctx.left + 10, FONT_ITALIC, 11, MUTED, ctx.layout.line_height, 0)

        if block.author:
            ctx.cursor.ensure_space(10)
            ctx.text(ctx.left + 10, ctx.cursor.y + 5, f"— {block.author}", FONT, 11, MUTED)
            ctx.cursor.advance(10)
        ctx.cursor.advance(5)

    def _render_chart(self, block: ChartBlock, ctx: _CanvasContext):
        height = ctx.layout.chart_placeholder_height
        ctx.cursor.ensure_space(height)
        ctx.text(ctx.left, ctx.cursor.y, f"[Graphique: {block.display_title()}]", FONT, 10, MUTED)
        ctx.cursor.advance(height)

    def _embed_image(self, block: ImageBlock, ctx: _CanvasContext) -> EmbedResult:
        data = decode_data_uri(block.src)
        if data is None:
            return EmbedResult.failure("image source is not an embedded data URI")
        try:
            reader = ImageReader(BytesIO(data))
            pixel_width, pixel_height = reader.getSize()
        except (OSError, ValueError, TypeError) as e:
            return EmbedResult.failure(str(e))
        if not pixel_width or not pixel_height:
            return EmbedResult.failure("image has no size")

        width = ctx.content_width
        height = width * pixel_height / pixel_width
        if height > ctx.layout.image_max_height:
            height = ctx.layout.image_max_height
            width = height * pixel_width / pixel_height
        caption_height = ctx.layout.line_height if block.caption else 0

        ctx.cursor.ensure_space(height + caption_height + ctx.layout.block_spacing)
        top = ctx.cursor.y
        ctx.canv.drawImage(reader, ctx.left * mm, ctx.to_pt_y(top + height), width * mm, height * mm,
                           preserveAspectRatio=True, mask="auto")
        if block.caption:
            ctx.text(ctx.left + width / 2, top + height + 4, block.caption, FONT_ITALIC, 9, MUTED,
                     align="center")
        return EmbedResult.ok(height + caption_height + ctx.layout.block_spacing)

    def _render_image(self, block: ImageBlock, ctx: _CanvasContext):
        result = self._embed_image(block, ctx)
        if result.embedded:
            ctx.cursor.advance(result.height)
            return

        logger.debug(f"Image placeholder used: {result.reason}")
        height = ctx.layout.image_placeholder_height
        ctx.cursor.ensure_space(height)
        ctx.text(ctx.left, ctx.cursor.y, f"[Image: {block.label}]", FONT, 10, MUTED)
        ctx.cursor.advance(height)
