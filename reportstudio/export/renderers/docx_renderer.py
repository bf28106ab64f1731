#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
DOCX Renderer

使用python-docx生成Word文档，分页交给文字处理软件
"""

from io import BytesIO

from docx import Document
from docx.enum.section import WD_ORIENT
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.image.exceptions import InvalidImageStreamError, UnexpectedEndOfFileError, UnrecognizedImageError
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Mm, Pt, RGBColor
from loguru import logger

from .base import BaseRenderer
from .embedding import EmbedResult, decode_data_uri
from ..layout import PageGeometry, resolve_geometry
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
    markup_depth,
)
from ..theme import CALLOUT_COLORS, MUTED, RGB, TREND_COLORS, DesignTheme, get_design_theme, rgb_to_hex
from ...utils.text import format_change, format_date_long

DIVIDER_STYLES = {"solid": "single", "dashed": "dashed", "dotted": "dotted"}


def _color(color: RGB) -> RGBColor:
    return RGBColor(*color)


def _shade(element_pr, hex_color: str):
    """Solid background fill on a paragraph or cell property element"""
    shading = OxmlElement("w:shd")
    shading.set(qn("w:fill"), hex_color)
    shading.set(qn("w:val"), "clear")
    shading.set(qn("w:color"), "auto")
    element_pr.append(shading)


def _add_bottom_border(paragraph, style: str = "single", color: str = "C8C8C8"):
    p_pr = paragraph._p.get_or_add_pPr()
    p_bdr = OxmlElement("w:pBdr")
    bottom = OxmlElement("w:bottom")
    bottom.set(qn("w:val"), style)
    bottom.set(qn("w:sz"), "8")  # 1/8 pt units
    bottom.set(qn("w:space"), "1")
    bottom.set(qn("w:color"), color)
    p_bdr.append(bottom)
    p_pr.append(p_bdr)


def _add_page_field(paragraph):
    """Append a PAGE field that the word processor fills in"""
    field = OxmlElement("w:fldSimple")
    field.set(qn("w:instr"), " PAGE ")
    run = OxmlElement("w:r")
    text = OxmlElement("w:t")
    text.text = "1"
    run.append(text)
    field.append(run)
    paragraph._p.append(field)


class DOCXRenderer(BaseRenderer):
    """DOCX渲染器"""

    media_type = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
    extension = ".docx"
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
        """渲染为DOCX"""
        logger.info(f"Rendering document to DOCX: {report.title}")

        theme = get_design_theme(report, default_footer=self.config.pdf.footer_text)
        geometry = resolve_geometry(options)

        doc = Document()
        self._setup_page(doc, geometry, options)
        self._setup_footer(doc, theme)

        properties = doc.core_properties
        properties.title = report.title
        properties.author = report.author
        properties.subject = report.description or ""
        properties.revision = report.version
        properties.created = report.created_at
        properties.modified = report.updated_at

        body_style = doc.styles["Normal"]
        body_style.font.size = Pt(theme.base_font_size)
        body_style.font.color.rgb = _color(theme.text)

        if options.include_cover_page:
            self._render_cover(doc, report, options, theme)

        if options.include_table_of_contents:
            self._render_toc(doc, content)

        for section in content.sections:
            self._render_section(doc, section, theme, geometry)

        buffer = BytesIO()
        doc.save(buffer)
        return self.document(buffer.getvalue())

    def _setup_page(self, doc, geometry: PageGeometry, options: ExportOptions):
        section = doc.sections[0]
        section.orientation = WD_ORIENT.LANDSCAPE if options.orientation == "landscape" else WD_ORIENT.PORTRAIT
        section.page_width = Mm(geometry.width)
        section.page_height = Mm(geometry.height)
        section.top_margin = Mm(geometry.margins.top)
        section.bottom_margin = Mm(geometry.margins.bottom)
        section.left_margin = Mm(geometry.margins.left)
        section.right_margin = Mm(geometry.margins.right)

    def _setup_footer(self, doc, theme: DesignTheme):
        """页脚：页码与品牌文字"""
        footer = doc.sections[0].footer
        paragraph = footer.paragraphs[0]
        paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER
        paragraph.add_run("Page ")
        _add_page_field(paragraph)

        if theme.footer_text:
            branding = footer.add_paragraph(theme.footer_text)
            branding.alignment = WD_ALIGN_PARAGRAPH.CENTER

    def _render_cover(self, doc, report: Report, options: ExportOptions, theme: DesignTheme):
        """封面"""
        title = doc.add_paragraph(report.cover_title, style="Title")
        title.alignment = WD_ALIGN_PARAGRAPH.CENTER
        for run in title.runs:
            run.font.color.rgb = _color(theme.primary)

        if report.cover_subtitle:
            subtitle = doc.add_paragraph(report.cover_subtitle, style="Subtitle")
            subtitle.alignment = WD_ALIGN_PARAGRAPH.CENTER

        meta = doc.add_paragraph()
        meta.alignment = WD_ALIGN_PARAGRAPH.CENTER
        if report.period_label:
            meta.add_run("Période: ").bold = True
            meta.add_run(report.period_label).add_break()
        meta.add_run("Auteur: ").bold = True
        meta.add_run(report.author).add_break()
        meta.add_run("Généré le: ").bold = True
        meta.add_run(format_date_long(options.generation_time()))

        doc.add_page_break()

    def _render_toc(self, doc, content: Content):
        """目录"""
        doc.add_paragraph("Table des matières", style="Title")
        for index, section in enumerate(content.sections, 1):
            doc.add_paragraph(f"{index}. {section.title}")
        doc.add_page_break()

    def _render_section(self, doc, section: Section, theme: DesignTheme, geometry: PageGeometry):
        """渲染章节"""
        heading = doc.add_heading(section.title, level=markup_depth(section.level, offset=0))
        for run in heading.runs:
            run.font.color.rgb = _color(theme.primary)

        for block in section.blocks:
            self.dispatch_block(block, doc, theme, geometry)

        for child in section.children:
            self._render_section(doc, child, theme, geometry)

    # ==================== Blocks ====================

    def _render_paragraph(self, block: ParagraphBlock, doc, theme: DesignTheme, geometry: PageGeometry):
        doc.add_paragraph(block.content)

    def _render_heading(self, block: HeadingBlock, doc, theme: DesignTheme, geometry: PageGeometry):
        doc.add_heading(block.content, level=markup_depth(block.level))

    def _render_list(self, block: ListBlock, doc, theme: DesignTheme, geometry: PageGeometry):
        style = "List Number" if block.numbered else "List Bullet"
        for item in block.items:
            doc.add_paragraph(item.content, style=style)

    def _render_table(self, block: TableBlock, doc, theme: DesignTheme, geometry: PageGeometry):
        table = doc.add_table(rows=1, cols=len(block.headers))
        table.style = "Table Grid"

        for cell, header in zip(table.rows[0].cells, block.headers):
            cell.text = ""
            run = cell.paragraphs[0].add_run(header.label)
            run.bold = True
            run.font.color.rgb = RGBColor(0xFF, 0xFF, 0xFF)
            _shade(cell._tc.get_or_add_tcPr(), theme.primary_hex)

        for row in block.rows:
            cells = table.add_row().cells
            for cell, value in zip(cells, block.row_values(row)):
                cell.text = value

        doc.add_paragraph()

    def _render_kpi(self, block: KPICardBlock, doc, theme: DesignTheme, geometry: PageGeometry):
        paragraph = doc.add_paragraph()
        label = paragraph.add_run(f"{block.label}: ")
        label.font.color.rgb = _color(MUTED)

        value = paragraph.add_run(block.display_value)
        value.bold = True
        value.font.size = Pt(16)
        value.font.color.rgb = _color(theme.primary)

        if block.change is not None:
            change = paragraph.add_run(f"  {format_change(block.change)}")
            change.font.color.rgb = _color(TREND_COLORS[block.trend])

    def _render_callout(self, block: CalloutBlock, doc, theme: DesignTheme, geometry: PageGeometry):
        color = CALLOUT_COLORS.get(block.variant, CALLOUT_COLORS["info"])
        paragraph = doc.add_paragraph()
        _shade(paragraph._p.get_or_add_pPr(), rgb_to_hex(tuple(round(255 - (255 - c) * 0.1) for c in color)))

        if block.title:
            title = paragraph.add_run(block.title)
            title.bold = True
            title.font.color.rgb = _color(color)
            title.add_break()
        paragraph.add_run(block.content)

    def _render_divider(self, block: DividerBlock, doc, theme: DesignTheme, geometry: PageGeometry):
        _add_bottom_border(doc.add_paragraph(), style=DIVIDER_STYLES[block.style])

    def _render_pagebreak(self, block: PagebreakBlock, doc, theme: DesignTheme, geometry: PageGeometry):
        doc.add_page_break()

    def _render_quote(self, block: QuoteBlock, doc, theme: DesignTheme, geometry: PageGeometry):
        paragraph = doc.add_paragraph(f'"{block.content}"', style="Quote")
        if block.author:
            paragraph.add_run().add_break()
            paragraph.add_run(f"— {block.author}")

    def _placeholder(self, doc, text: str):
        paragraph = doc.add_paragraph()
        paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER
        run = paragraph.add_run(text)
        run.italic = True
        run.font.color.rgb = _color(MUTED)

    def _render_chart(self, block: ChartBlock, doc, theme: DesignTheme, geometry: PageGeometry):
        self._placeholder(doc, f"[Graphique: {block.display_title()}]")

    def _embed_image(self, block: ImageBlock, doc, geometry: PageGeometry) -> EmbedResult:
        data = decode_data_uri(block.src)
        if data is None:
            return EmbedResult.failure("image source is not an embedded data URI")
        try:
            shape = doc.add_picture(BytesIO(data), width=Mm(geometry.content_width))
        except (InvalidImageStreamError, UnexpectedEndOfFileError, UnrecognizedImageError) as e:
            return EmbedResult.failure(str(e) or e.__class__.__name__)

        doc.paragraphs[-1].alignment = WD_ALIGN_PARAGRAPH.CENTER
        if block.caption:
            doc.add_paragraph(block.caption, style="Caption").alignment = WD_ALIGN_PARAGRAPH.CENTER
        return EmbedResult.ok(shape.height.mm)

    def _render_image(self, block: ImageBlock, doc, theme: DesignTheme, geometry: PageGeometry):
        result = self._embed_image(block, doc, geometry)
        if not result.embedded:
            logger.debug(f"Image placeholder used: {result.reason}")
            self._placeholder(doc, f"[Image: {block.label}]")
