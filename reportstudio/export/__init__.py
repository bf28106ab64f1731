#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Report Export

多格式报告导出，包括：
- 文档模型（报告元数据、章节/块树、导出选项）
- 分页、幻灯片与工作表布局
- 六种格式渲染器（PDF/DOCX/XLSX/HTML/Markdown/PPTX）
- 统一的导出引擎
"""

from .engine import ExportEngine
from .errors import ExportError, RenderError, UnsupportedFormatError
from .model import Content, DocumentValidator, ExportFormat, ExportOptions, ExportResult, Report, Section
from .renderers import (
    RENDERERS,
    BaseRenderer,
    PDFRenderer,
    DOCXRenderer,
    XLSXRenderer,
    HTMLRenderer,
    MarkdownRenderer,
    PPTXRenderer,
)

__all__ = [
    'ExportEngine',
    'ExportError',
    'RenderError',
    'UnsupportedFormatError',
    'Content',
    'DocumentValidator',
    'ExportFormat',
    'ExportOptions',
    'ExportResult',
    'Report',
    'Section',
    'RENDERERS',
    'BaseRenderer',
    'PDFRenderer',
    'DOCXRenderer',
    'XLSXRenderer',
    'HTMLRenderer',
    'MarkdownRenderer',
    'PPTXRenderer',
]
