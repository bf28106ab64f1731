#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Base Renderer

渲染器基类
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import ClassVar, Dict, Optional
from loguru import logger

from ...config import Config, config as global_config
from ..model.schema import BlockType, Content, ExportOptions, RenderedDocument, Report


class BaseRenderer(ABC):
    """渲染器基类

    Subclasses map every ``BlockType`` to a handler method name in
    ``block_handlers``. The mapping is checked when the subclass is
    created, so a new block kind cannot be added without every renderer
    handling it.
    """

    media_type: ClassVar[str] = "application/octet-stream"
    extension: ClassVar[str] = ""
    block_handlers: ClassVar[Dict[BlockType, str]] = {}

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        handlers = cls.__dict__.get("block_handlers")
        if handlers is None:
            return
        missing = [block_type.value for block_type in BlockType if block_type not in handlers]
        if missing:
            raise TypeError(f"{cls.__name__} does not handle block types: {missing}")
        for block_type, method_name in handlers.items():
            if not callable(getattr(cls, method_name, None)):
                raise TypeError(
                    f"{cls.__name__} maps '{block_type.value}' to missing method '{method_name}'"
                )

    def __init__(self, config: Optional[Config] = None):
        """
        初始化渲染器

        Args:
            config: 全局配置，默认使用模块级配置
        """
        self.config = config or global_config
        self.name = self.__class__.__name__

    @abstractmethod
    def render(self, report: Report, content: Content, options: ExportOptions) -> RenderedDocument:
        """
        渲染文档

        Args:
            report: 报告元数据
            content: 章节树
            options: 导出选项（已合并设计设置）

        Returns:
            渲染结果
        """
        pass

    def dispatch_block(self, block, *args, **kwargs):
        """Call the handler registered for the block's type"""
        handler = getattr(self, self.block_handlers[block.block_type])
        return handler(block, *args, **kwargs)

    def document(self, content: bytes, **counts) -> RenderedDocument:
        return RenderedDocument(
            content=content,
            media_type=self.media_type,
            extension=self.extension,
            **counts,
        )

    def render_to_file(
        self,
        report: Report,
        content: Content,
        options: ExportOptions,
        output_path: str,
    ) -> str:
        """
        渲染并保存到文件

        Args:
            report: 报告元数据
            content: 章节树
            options: 导出选项
            output_path: 输出文件路径

        Returns:
            输出文件路径
        """
        logger.info(f"[{self.name}] Rendering to {output_path}")

        try:
            rendered = self.render(report, content, options)

            output_file = Path(output_path)
            output_file.parent.mkdir(parents=True, exist_ok=True)
            output_file.write_bytes(rendered.content)

            logger.success(f"[{self.name}] Rendered to {output_path}")
            return str(output_file)

        except Exception as e:
            logger.error(f"[{self.name}] Render failed: {e}")
            raise
