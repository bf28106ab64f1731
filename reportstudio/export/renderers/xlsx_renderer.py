#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
XLSX Renderer

使用openpyxl生成工作簿：摘要、每个表格/图表一个工作表、指标汇总
"""

from io import BytesIO
from typing import Any, List

from loguru import logger
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter

from .base import BaseRenderer
from ..model.schema import (
    BlockType,
    ChartBlock,
    Content,
    ExportOptions,
    KPICardBlock,
    RenderedDocument,
    Report,
    TableBlock,
)
from ..theme import get_design_theme
from ...utils.text import format_date_short

KPI_HEADERS = ["Indicateur", "Valeur", "Unité", "Variation", "Tendance"]


class _WorkbookState:
    """Per-export sheet counter and collected indicators"""

    def __init__(self, book: Workbook, header_font: Font, header_fill: PatternFill):
        self.book = book
        self.header_font = header_font
        self.header_fill = header_fill
        self.counter = 0
        self.kpi_rows: List[List[Any]] = []

    def next_index(self) -> int:
        self.counter += 1
        return self.counter


class XLSXRenderer(BaseRenderer):
    """XLSX渲染器

    Only tables, charts and KPI cards carry tabular data; every other
    block kind is deliberately skipped.
    """

    media_type = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    extension = ".xlsx"
    block_handlers = {
        BlockType.PARAGRAPH: "_skip",
        BlockType.HEADING: "_skip",
        BlockType.LIST: "_skip",
        BlockType.TABLE: "_render_table",
        BlockType.KPI_CARD: "_collect_kpi",
        BlockType.CALLOUT: "_skip",
        BlockType.DIVIDER: "_skip",
        BlockType.PAGEBREAK: "_skip",
        BlockType.QUOTE: "_skip",
        BlockType.CHART: "_render_chart",
        BlockType.IMAGE: "_skip",
    }

    def render(self, report: Report, content: Content, options: ExportOptions) -> RenderedDocument:
        """渲染为XLSX"""
        logger.info(f"Rendering document to XLSX: {report.title}")

        theme = get_design_theme(report)
        book = Workbook()
        book.properties.title = report.title
        book.properties.creator = report.author
        book.properties.created = report.created_at
        book.properties.modified = report.updated_at

        state = _WorkbookState(
            book,
            header_font=Font(bold=True, color="FFFFFF"),
            header_fill=PatternFill(fill_type="solid", start_color=theme.primary_hex, end_color=theme.primary_hex),
        )

        self._render_summary(book.active, report)

        for _, block in content.iter_blocks():
            self.dispatch_block(block, state)

        if state.kpi_rows:
            sheet = book.create_sheet(self._sheet_name(self.config.workbook.indicators_sheet))
            self._write_rows(sheet, KPI_HEADERS, state.kpi_rows, state)

        buffer = BytesIO()
        book.save(buffer)

        sheet_count = len(book.sheetnames)
        logger.debug(f"Workbook built with {sheet_count} sheet(s)")
        return self.document(buffer.getvalue(), sheet_count=sheet_count)

    def _sheet_name(self, name: str) -> str:
        return name[:self.config.workbook.sheet_name_limit]

    def _render_summary(self, sheet, report: Report):
        """摘要工作表"""
        sheet.title = self._sheet_name(self.config.workbook.summary_sheet)
        rows = [
            ("Rapport", report.title),
            ("Description", report.description or ""),
            ("Auteur", report.author),
            ("Période", report.period_label or ""),
            ("Statut", report.status),
            ("Version", report.version),
            ("Créé le", format_date_short(report.created_at)),
            ("Modifié le", format_date_short(report.updated_at)),
        ]
        for label, value in rows:
            sheet.append([label, value])
        for cell in sheet["A"]:
            cell.font = Font(bold=True)
        self._fit_columns(sheet)

    def _write_rows(self, sheet, headers: List[str], rows: List[List[Any]], state: _WorkbookState):
        sheet.append(headers)
        for cell in sheet[1]:
            cell.font = state.header_font
            cell.fill = state.header_fill
        for row in rows:
            sheet.append(row)
        sheet.freeze_panes = "A2"
        self._fit_columns(sheet)

    def _fit_columns(self, sheet):
        """Size each column to its longest value"""
        limit = self.config.workbook.max_column_width
        for index, column in enumerate(sheet.iter_cols(values_only=True), 1):
            longest = max((len(str(value)) for value in column if value is not None), default=0)
            sheet.column_dimensions[get_column_letter(index)].width = min(longest + 2, limit)

    # ==================== Blocks ====================

    def _skip(self, block, state: _WorkbookState):
        pass

    def _render_table(self, block: TableBlock, state: _WorkbookState):
        prefix = self.config.workbook.table_sheet_prefix
        sheet = state.book.create_sheet(self._sheet_name(f"{prefix} {state.next_index()}"))

        rows = []
        for row in block.rows:
            values = []
            for header in block.headers:
                cell = row.get(header.key)
                if cell is None:
                    values.append("")
                elif cell.formatted:
                    values.append(cell.formatted)
                else:
                    values.append(cell.value if cell.value is not None else "")
            rows.append(values)

        self._write_rows(sheet, [header.label for header in block.headers], rows, state)

    def _render_chart(self, block: ChartBlock, state: _WorkbookState):
        data = block.data
        if not data.has_series:
            return

        prefix = self.config.workbook.chart_sheet_prefix
        sheet = state.book.create_sheet(self._sheet_name(f"{prefix} {state.next_index()}"))

        headers = ["Label"] + [dataset.label for dataset in data.datasets]
        rows = []
        for index, label in enumerate(data.labels):
            row = [label]
            for dataset in data.datasets:
                row.append(dataset.data[index] if index < len(dataset.data) else None)
            rows.append(row)

        self._write_rows(sheet, headers, rows, state)

    def _collect_kpi(self, block: KPICardBlock, state: _WorkbookState):
        state.kpi_rows.append([
            block.label,
            block.value,
            block.unit or "",
            block.change if block.change is not None else "",
            block.trend,
        ])
