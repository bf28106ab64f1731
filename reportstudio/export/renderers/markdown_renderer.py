#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Markdown Renderer

将报告渲染为Markdown格式
"""

from loguru import logger

from .base import BaseRenderer
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
from ...utils.text import format_change, format_date_short, slugify

CALLOUT_ICONS = {
    "info": "ℹ️",
    "warning": "⚠️",
    "success": "✅",
    "error": "❌",
    "tip": "💡",
}


def _table_cell(text: str) -> str:
    return text.replace("|", "\\|").replace("\n", " ")


class MarkdownRenderer(BaseRenderer):
    """Markdown渲染器"""

    media_type = "text/markdown;charset=utf-8"
    extension = ".md"
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
        """渲染为Markdown"""
        logger.info(f"Rendering document to Markdown: {report.title}")

        md_parts = []

        # 封面
        if options.include_cover_page:
            md_parts.append(self._render_cover(report, options))

        # 目录
        if options.include_table_of_contents:
            md_parts.append(self._render_toc(content))

        # 章节内容
        for section in content.sections:
            md_parts.append(self._render_section(section))

        return self.document("".join(md_parts).encode("utf-8"))

    def _render_cover(self, report: Report, options: ExportOptions) -> str:
        """渲染封面"""
        lines = [f"# {report.cover_title}\n\n"]
        if report.cover_subtitle:
            lines.append(f"> {report.cover_subtitle}\n\n")
        lines.append(f"**Auteur:** {report.author}  \n")
        if report.period_label:
            lines.append(f"**Période:** {report.period_label}  \n")
        lines.append(f"**Date:** {format_date_short(options.generation_time())}\n\n")
        lines.append("---\n\n")
        return "".join(lines)

    def _render_toc(self, content: Content) -> str:
        """渲染目录"""
        toc_lines = ["## Table des matières\n\n"]
        for index, section in enumerate(content.sections, 1):
            indent = "  " * (section.level - 1)
            toc_lines.append(f"{indent}{index}. [{section.title}](#{slugify(section.title)})\n")
        toc_lines.append("\n---\n\n")
        return "".join(toc_lines)

    def _render_section(self, section: Section) -> str:
        """渲染章节"""
        md_parts = [f"{'#' * markup_depth(section.level)} {section.title}\n\n"]

        for block in section.blocks:
            md_parts.append(self.dispatch_block(block))

        # 子章节
        for child in section.children:
            md_parts.append(self._render_section(child))

        return "".join(md_parts)

    # ==================== Blocks ====================

    def _render_paragraph(self, block: ParagraphBlock) -> str:
        return f"{block.content}\n\n"

    def _render_heading(self, block: HeadingBlock) -> str:
        return f"{'#' * markup_depth(block.level)} {block.content}\n\n"

    def _render_list(self, block: ListBlock) -> str:
        lines = []
        for index, item in enumerate(block.items, 1):
            bullet = f"{index}." if block.numbered else "-"
            lines.append(f"{bullet} {item.content}")
        return "\n".join(lines) + "\n\n"

    def _render_table(self, block: TableBlock) -> str:
        lines = [
            "| " + " | ".join(_table_cell(header.label) for header in block.headers) + " |",
            "| " + " | ".join("---" for _ in block.headers) + " |",
        ]
        for row in block.rows:
            lines.append("| " + " | ".join(_table_cell(value) for value in block.row_values(row)) + " |")
        return "\n".join(lines) + "\n\n"

    def _render_kpi(self, block: KPICardBlock) -> str:
        change = f" ({format_change(block.change)})" if block.change is not None else ""
        return f"**{block.label}:** {block.display_value}{change}\n\n"

    def _render_callout(self, block: CalloutBlock) -> str:
        icon = CALLOUT_ICONS.get(block.variant, CALLOUT_ICONS["info"])
        title = block.title or block.variant.upper()
        return f"> {icon} **{title}**\n> \n> {block.content}\n\n"

    def _render_divider(self, block: DividerBlock) -> str:
        return "---\n\n"

    def _render_pagebreak(self, block: PagebreakBlock) -> str:
        return '\n---\n<div style="page-break-after: always;"></div>\n\n'

    def _render_quote(self, block: QuoteBlock) -> str:
        quote = f'> "{block.content}"\n'
        if block.author:
            quote += f"> — *{block.author}*\n"
        return quote + "\n"

    def _render_chart(self, block: ChartBlock) -> str:
        return f"*[Graphique: {block.display_title()}]*\n\n"

    def _render_image(self, block: ImageBlock) -> str:
        if not block.src:
            return f"*[Image: {block.label}]*\n\n"
        caption = f"*{block.caption}*\n" if block.caption else ""
        return f"![{block.alt or 'Image'}]({block.src})\n{caption}\n"
