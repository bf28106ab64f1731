#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Document Validator

检查文档树中不会阻止导出、但值得提示作者的问题
"""

from typing import List, Set, Tuple
from loguru import logger

from .schema import (
    Content,
    Section,
    BlockType,
    ChartBlock,
    ImageBlock,
    TableBlock,
)


class DocumentValidator:
    """文档校验器

    Structural invariants are already enforced by the schema; this pass
    collects softer findings (empty sections, duplicate ids, charts with
    no series) so the engine can log them before rendering.
    """

    def __init__(self, strict_mode: bool = False):
        """
        初始化校验器

        Args:
            strict_mode: 严格模式，警告也视为错误
        """
        self.strict_mode = strict_mode
        self.errors: List[str] = []
        self.warnings: List[str] = []

    def validate(self, content: Content) -> Tuple[bool, List[str], List[str]]:
        """
        校验完整文档

        Args:
            content: 文档树

        Returns:
            (是否通过, 错误列表, 警告列表)
        """
        self.errors = []
        self.warnings = []
        seen_ids: Set[str] = set()

        if not content.sections:
            self.warnings.append("Document has no sections")

        for i, section in enumerate(content.sections):
            self._validate_section(section, f"Section {i + 1}", seen_ids)

        if self.strict_mode:
            self.errors.extend(self.warnings)

        is_valid = len(self.errors) == 0
        if self.warnings:
            logger.debug(f"Document validation warnings: {self.warnings}")
        return is_valid, self.errors, self.warnings

    def _validate_section(self, section: Section, context: str, seen_ids: Set[str]):
        """校验章节"""
        if section.id in seen_ids:
            self.errors.append(f"{context}: Duplicate section id: {section.id}")
        seen_ids.add(section.id)

        if not section.title.strip():
            self.warnings.append(f"{context}: Section title is empty")

        if not section.blocks and not section.children:
            self.warnings.append(f"{context}: Section has no blocks or children")

        for i, block in enumerate(section.blocks):
            self._validate_block(block, f"{context}, Block {i + 1}")

        for i, child in enumerate(section.children):
            self._validate_section(child, f"{context}.{i + 1}", seen_ids)

    def _validate_block(self, block, context: str):
        """校验块"""
        if block.block_type == BlockType.TABLE:
            self._validate_table(block, context)
        elif block.block_type == BlockType.CHART:
            self._validate_chart(block, context)
        elif block.block_type == BlockType.IMAGE:
            self._validate_image(block, context)

    def _validate_table(self, block: TableBlock, context: str):
        """校验表格"""
        if not block.rows:
            self.warnings.append(f"{context}: Table has no rows")
        keys = [header.key for header in block.headers]
        if len(keys) != len(set(keys)):
            self.errors.append(f"{context}: Table header keys are not unique")

    def _validate_chart(self, block: ChartBlock, context: str):
        """校验图表"""
        if not block.data.has_series:
            self.warnings.append(f"{context}: Chart has no labels or datasets, a placeholder will be used")
            return
        expected = len(block.data.labels)
        for dataset in block.data.datasets:
            if len(dataset.data) != expected:
                self.warnings.append(
                    f"{context}: Dataset '{dataset.label}' has {len(dataset.data)} points "
                    f"for {expected} labels"
                )

    def _validate_image(self, block: ImageBlock, context: str):
        """校验图片"""
        if not block.src:
            self.warnings.append(f"{context}: Image has no source, a placeholder will be used")
