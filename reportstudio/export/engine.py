#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Export Engine

导出引擎 - 按格式选择渲染器并统一导出结果
"""

import asyncio
from typing import Any, Dict, List, Optional, Union

from loguru import logger

from .errors import UNKNOWN_ERROR_MESSAGE, RenderError, UnsupportedFormatError
from .model import Content, DocumentValidator, ExportFormat, ExportOptions, ExportResult, Report
from .renderers import RENDERERS, BaseRenderer
from ..config import Config, config as global_config
from ..utils.text import sanitize_filename

ReportInput = Union[Report, Dict[str, Any]]
ContentInput = Union[Content, Dict[str, Any]]
OptionsInput = Union[ExportOptions, Dict[str, Any], None]

# used when nothing of the title survives sanitizing
DEFAULT_FILENAME_STEM = "rapport"


class ExportEngine:
    """导出引擎

    Parses the caller's input, picks exactly one renderer and turns every
    outcome into an ``ExportResult``. Nothing raised while parsing or
    rendering escapes ``export``.
    """

    def __init__(self, config: Optional[Config] = None, strict_mode: bool = False):
        """
        初始化导出引擎

        Args:
            config: 全局配置，默认使用模块级配置
            strict_mode: 严格模式，文档校验错误会中止导出
        """
        self.config = config or global_config
        self.strict_mode = strict_mode
        self._renderers: Dict[ExportFormat, BaseRenderer] = {}

        logger.info("ExportEngine initialized")

    @staticmethod
    def supported_formats() -> List[str]:
        """支持的导出格式"""
        return [export_format.value for export_format in ExportFormat]

    def get_renderer(self, export_format: Union[ExportFormat, str]) -> BaseRenderer:
        """
        获取格式对应的渲染器

        Raises:
            UnsupportedFormatError: 格式没有对应的渲染器
        """
        try:
            export_format = ExportFormat(export_format)
        except ValueError:
            raise UnsupportedFormatError(str(export_format)) from None

        if export_format not in self._renderers:
            self._renderers[export_format] = RENDERERS[export_format](config=self.config)
        return self._renderers[export_format]

    def default_options(self) -> ExportOptions:
        defaults = self.config.defaults
        return ExportOptions(
            page_size=defaults.page_size,
            margins=defaults.margins,
            orientation=defaults.orientation,
            include_cover_page=defaults.include_cover_page,
            include_table_of_contents=defaults.include_table_of_contents,
        )

    def _parse_options(self, options: OptionsInput) -> ExportOptions:
        if options is None:
            return self.default_options()
        if isinstance(options, ExportOptions):
            return options
        return ExportOptions.model_validate(options)

    def _check_document(self, content: Content):
        """Log validator findings; in strict mode errors abort the export"""
        is_valid, errors, warnings = DocumentValidator().validate(content)
        for warning in warnings:
            logger.warning(f"Document: {warning}")
        if is_valid:
            return
        for error in errors:
            logger.warning(f"Document: {error}")
        if self.strict_mode:
            raise RenderError(f"Document invalide: {'; '.join(errors)}")

    def export(
        self,
        report: ReportInput,
        content: ContentInput,
        export_format: Union[ExportFormat, str],
        options: OptionsInput = None,
    ) -> ExportResult:
        """
        导出报告

        Args:
            report: 报告元数据（模型或字典）
            content: 章节树（模型或字典）
            export_format: 导出格式 (pdf/docx/xlsx/html/markdown/pptx)
            options: 导出选项（可选）

        Returns:
            导出结果，失败时 success=False 并带有错误信息
        """
        try:
            renderer = self.get_renderer(export_format)
        except UnsupportedFormatError as e:
            logger.error(f"Export failed: {e}")
            return ExportResult.failure(str(e))

        try:
            report = Report.model_validate(report)
            content = Content.model_validate(content)
            options = self._parse_options(options).merged_with(report.design_settings)

            logger.info(f"Exporting '{report.title}' to {renderer.extension}")
            self._check_document(content)

            rendered = renderer.render(report, content, options)

        except Exception as e:
            error = RenderError.from_exception(e)
            logger.error(f"Export failed: {error}")
            return ExportResult.failure(str(error) or UNKNOWN_ERROR_MESSAGE)

        filename = f"{sanitize_filename(report.title) or DEFAULT_FILENAME_STEM}{rendered.extension}"
        logger.success(f"Export completed: {filename} ({len(rendered.content)} bytes)")

        return ExportResult(
            success=True,
            content=rendered.content,
            filename=filename,
            media_type=rendered.media_type,
            page_count=rendered.page_count,
            slide_count=rendered.slide_count,
            sheet_count=rendered.sheet_count,
        )

    async def export_async(
        self,
        report: ReportInput,
        content: ContentInput,
        export_format: Union[ExportFormat, str],
        options: OptionsInput = None,
    ) -> ExportResult:
        """在工作线程中执行导出"""
        return await asyncio.to_thread(self.export, report, content, export_format, options)
