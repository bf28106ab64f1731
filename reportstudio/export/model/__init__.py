#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Document model

报告导出的共享输入模型：
- 报告元数据与章节/块树
- 导出选项与结果
- 文档校验器
"""

from .schema import (
    MAX_MARKUP_DEPTH,
    markup_depth,
    BlockType,
    ExportFormat,
    Block,
    ParagraphBlock,
    HeadingBlock,
    ListBlock,
    ListItem,
    TableBlock,
    TableHeader,
    TableCell,
    KPICardBlock,
    CalloutBlock,
    DividerBlock,
    PagebreakBlock,
    QuoteBlock,
    ChartBlock,
    ChartData,
    ChartDataset,
    ChartConfig,
    ImageBlock,
    Section,
    Content,
    DesignSettings,
    Report,
    ExportOptions,
    RenderedDocument,
    ExportResult,
)
from .validator import DocumentValidator

__all__ = [
    'MAX_MARKUP_DEPTH',
    'markup_depth',
    'BlockType',
    'ExportFormat',
    'Block',
    'ParagraphBlock',
    'HeadingBlock',
    'ListBlock',
    'ListItem',
    'TableBlock',
    'TableHeader',
    'TableCell',
    'KPICardBlock',
    'CalloutBlock',
    'DividerBlock',
    'PagebreakBlock',
    'QuoteBlock',
    'ChartBlock',
    'ChartData',
    'ChartDataset',
    'ChartConfig',
    'ImageBlock',
    'Section',
    'Content',
    'DesignSettings',
    'Report',
    'ExportOptions',
    'RenderedDocument',
    'ExportResult',
    'DocumentValidator',
]
