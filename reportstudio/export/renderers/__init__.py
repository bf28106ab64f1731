#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Report Renderers

将报告渲染为不同格式（PDF, DOCX, XLSX, HTML, Markdown, PPTX）
"""

from typing import Dict, Type

from .base import BaseRenderer
from .embedding import EmbedResult, EmbeddingFailure
from .pdf_renderer import PDFRenderer
from .docx_renderer import DOCXRenderer
from .xlsx_renderer import XLSXRenderer
from .html_renderer import HTMLRenderer
from .markdown_renderer import MarkdownRenderer
from .pptx_renderer import PPTXRenderer
from ..model.schema import ExportFormat

RENDERERS: Dict[ExportFormat, Type[BaseRenderer]] = {
    ExportFormat.PDF: PDFRenderer,
    ExportFormat.DOCX: DOCXRenderer,
    ExportFormat.XLSX: XLSXRenderer,
    ExportFormat.HTML: HTMLRenderer,
    ExportFormat.MARKDOWN: MarkdownRenderer,
    ExportFormat.PPTX: PPTXRenderer,
}

__all__ = [
    'RENDERERS',
    'BaseRenderer',
    'EmbedResult',
    'EmbeddingFailure',
    'PDFRenderer',
    'DOCXRenderer',
    'XLSXRenderer',
    'HTMLRenderer',
    'MarkdownRenderer',
    'PPTXRenderer',
]
