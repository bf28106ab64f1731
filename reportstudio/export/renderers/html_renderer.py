#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HTML Renderer

将报告渲染为单个自包含的HTML页面
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
from ..theme import DesignTheme, get_design_theme
from ...utils.text import escape_html, format_change, format_date_long


class HTMLRenderer(BaseRenderer):
    """HTML渲染器"""

    media_type = "text/html;charset=utf-8"
    extension = ".html"
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
        """渲染为HTML"""
        logger.info(f"Rendering document to HTML: {report.title}")

        theme = get_design_theme(report)
        html_parts = []

        # HTML头部
        html_parts.append(self._render_html_head(report, theme))

        # 封面
        if options.include_cover_page:
            html_parts.append(self._render_cover(report, options))

        # 目录
        if options.include_table_of_contents:
            html_parts.append(self._render_toc(content))

        # 章节内容
        for index, section in enumerate(content.sections):
            html_parts.append(self._render_section(section, f"section-{index}"))

        # HTML尾部
        html_parts.append(self._render_html_footer())

        return self.document("\n".join(html_parts).encode("utf-8"))

    def _render_html_head(self, report: Report, theme: DesignTheme) -> str:
        """渲染HTML头部"""
        return f"""<!DOCTYPE html>
<html lang="fr">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{escape_html(report.title)}</title>
    <style>
        {self._get_css_styles(theme)}
    </style>
</head>
<body>"""

    def _get_css_styles(self, theme: DesignTheme) -> str:
        """获取CSS样式"""
        return f"""
        :root {{ --primary: #{theme.primary_hex}; --text: #{theme.text_hex}; --text-light: #666; --border: #e5e5e5; --bg-light: #f9fafb; }}
        * {{ box-sizing: border-box; margin: 0; padding: 0; }}
        body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, 'Helvetica Neue', Arial, sans-serif; font-size: {theme.base_font_size:g}pt; line-height: 1.6; color: var(--text); max-width: 900px; margin: 0 auto; padding: 40px 20px; }}
        .cover {{ text-align: center; padding: 60px 0; margin-bottom: 40px; border-bottom: 2px solid var(--primary); }}
        .cover h1 {{ font-size: 2.5rem; color: var(--primary); margin-bottom: 16px; }}
        .cover p {{ color: var(--text-light); }}
        .toc {{ margin: 40px 0; padding: 24px; background: var(--bg-light); border-radius: 8px; }}
        .toc h2 {{ margin-bottom: 16px; color: var(--primary); }}
        .toc ul {{ list-style: none; }}
        .toc li {{ padding: 8px 0; border-bottom: 1px solid var(--border); }}
        .toc a {{ color: var(--primary); text-decoration: none; }}
        .section {{ margin: 40px 0; }}
        h1, h2, h3, h4, h5, h6 {{ color: var(--primary); margin: 24px 0 16px; }}
        h2 {{ font-size: 1.75rem; padding-bottom: 8px; border-bottom: 2px solid var(--primary); }}
        h3 {{ font-size: 1.5rem; }}
        h4 {{ font-size: 1.25rem; }}
        p {{ margin: 12px 0; }}
        table {{ width: 100%; border-collapse: collapse; margin: 20px 0; }}
        th {{ background: var(--primary); color: white; padding: 12px; text-align: left; }}
        td {{ border: 1px solid var(--border); padding: 12px; }}
        tr:nth-child(even) {{ background: var(--bg-light); }}
        .callout {{ padding: 16px 20px; margin: 20px 0; border-radius: 8px; border-left: 4px solid; }}
        .callout.info {{ background: #eff6ff; border-color: #3b82f6; }}
        .callout.warning {{ background: #fefce8; border-color: #f59e0b; }}
        .callout.success {{ background: #f0fdf4; border-color: #22c55e; }}
        .callout.error {{ background: #fef2f2; border-color: #ef4444; }}
        .callout.tip {{ background: #faf5ff; border-color: #a855f7; }}
        .callout-title {{ font-weight: 600; margin-bottom: 8px; }}
        .kpi-card {{ display: inline-block; padding: 20px; margin: 10px; background: var(--bg-light); border-radius: 12px; min-width: 180px; }}
        .kpi-label {{ font-size: 0.875rem; color: var(--text-light); }}
        .kpi-value {{ font-size: 2rem; font-weight: 700; color: var(--primary); }}
        .kpi-change {{ font-size: 0.875rem; }}
        .kpi-change.positive {{ color: #22c55e; }}
        .kpi-change.negative {{ color: #ef4444; }}
        .kpi-change.neutral {{ color: var(--text-light); }}
        blockquote {{ font-style: italic; color: var(--text-light); border-left: 3px solid var(--border); padding-left: 16px; margin: 20px 0; }}
        .divider {{ border: none; border-top: 1px solid var(--border); margin: 30px 0; }}
        .divider.dashed {{ border-top-style: dashed; }}
        .divider.dotted {{ border-top-style: dotted; }}
        .chart-placeholder {{ background: var(--bg-light); padding: 40px; text-align: center; border-radius: 8px; color: var(--text-light); margin: 20px 0; }}
        ul, ol {{ margin: 12px 0; padding-left: 24px; }}
        li {{ margin: 6px 0; }}
        @media print {{ body {{ max-width: 100%; padding: 0; }} .pagebreak {{ page-break-after: always; }} }}
        """

    def _render_cover(self, report: Report, options: ExportOptions) -> str:
        """渲染封面"""
        subtitle = report.cover_subtitle
        subtitle_html = f"<p>{escape_html(subtitle)}</p>" if subtitle else ""
        period_html = (
            f"<strong>Période:</strong> {escape_html(report.period_label)}<br>" if report.period_label else ""
        )
        generated = format_date_long(options.generation_time())

        return f"""
<div class="cover">
    <h1>{escape_html(report.cover_title)}</h1>
    {subtitle_html}
    <p style="margin-top: 24px;">
        {period_html}
        <strong>Auteur:</strong> {escape_html(report.author)}<br>
        <strong>Date:</strong> {generated}
    </p>
</div>"""

    def _render_toc(self, content: Content) -> str:
        """渲染目录"""
        toc_items = [
            f'<li><a href="#section-{index}">{index + 1}. {escape_html(section.title)}</a></li>'
            for index, section in enumerate(content.sections)
        ]
        return f"""
<div class="toc">
    <h2>Table des matières</h2>
    <ul>{''.join(toc_items)}</ul>
</div>"""

    def _render_section(self, section: Section, anchor: str) -> str:
        """渲染章节"""
        tag = f"h{markup_depth(section.level)}"
        blocks_html = "\n".join(self.dispatch_block(block) for block in section.blocks)

        # 递归渲染子章节
        children_html = "\n".join(
            self._render_section(child, f"{anchor}-{index}") for index, child in enumerate(section.children)
        )

        return f"""
<div class="section" id="{anchor}">
    <{tag}>{escape_html(section.title)}</{tag}>
    {blocks_html}
    {children_html}
</div>"""

    def _render_html_footer(self) -> str:
        return """
</body>
</html>"""

    # ==================== Blocks ====================

    def _render_paragraph(self, block: ParagraphBlock) -> str:
        return f"<p>{escape_html(block.content)}</p>"

    def _render_heading(self, block: HeadingBlock) -> str:
        tag = f"h{markup_depth(block.level)}"
        return f"<{tag}>{escape_html(block.content)}</{tag}>"

    def _render_list(self, block: ListBlock) -> str:
        tag = "ol" if block.numbered else "ul"
        items = "\n".join(f"<li>{escape_html(item.content)}</li>" for item in block.items)
        return f"<{tag}>{items}</{tag}>"

    def _render_table(self, block: TableBlock) -> str:
        headers = "".join(f"<th>{escape_html(header.label)}</th>" for header in block.headers)
        rows = []
        for row in block.rows:
            cells = "".join(f"<td>{escape_html(value)}</td>" for value in block.row_values(row))
            rows.append(f"<tr>{cells}</tr>")
        return f"<table><thead><tr>{headers}</tr></thead><tbody>{''.join(rows)}</tbody></table>"

    def _render_kpi(self, block: KPICardBlock) -> str:
        change_html = ""
        if block.change is not None:
            change_html = f'<div class="kpi-change {block.trend}">{format_change(block.change)}</div>'
        return f"""
<div class="kpi-card">
    <div class="kpi-label">{escape_html(block.label)}</div>
    <div class="kpi-value">{escape_html(block.display_value)}</div>
    {change_html}
</div>"""

    def _render_callout(self, block: CalloutBlock) -> str:
        title_html = f'<div class="callout-title">{escape_html(block.title)}</div>' if block.title else ""
        return f"""
<div class="callout {block.variant}">
    {title_html}
    <div>{escape_html(block.content)}</div>
</div>"""

    def _render_divider(self, block: DividerBlock) -> str:
        if block.style == "solid":
            return '<hr class="divider">'
        return f'<hr class="divider {block.style}">'

    def _render_pagebreak(self, block: PagebreakBlock) -> str:
        return '<div class="pagebreak"></div>'

    def _render_quote(self, block: QuoteBlock) -> str:
        author_html = f"<footer>— {escape_html(block.author)}</footer>" if block.author else ""
        return f"""
<blockquote>
    "{escape_html(block.content)}"
    {author_html}
</blockquote>"""

    def _render_chart(self, block: ChartBlock) -> str:
        return f'<div class="chart-placeholder">[Graphique: {escape_html(block.display_title())}]</div>'

    def _render_image(self, block: ImageBlock) -> str:
        if not block.src:
            return f'<div class="chart-placeholder">[Image: {escape_html(block.label)}]</div>'

        caption_html = f"<figcaption>{escape_html(block.caption)}</figcaption>" if block.caption else ""
        return f"""
<figure>
    <img src="{escape_html(block.src)}" alt="{escape_html(block.alt or '')}" style="max-width: 100%; height: auto;">
    {caption_html}
</figure>"""
