#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Export errors
"""

from typing import Optional

UNKNOWN_ERROR_MESSAGE = "Erreur inconnue lors de l'export"


class ExportError(Exception):
    """导出错误基类"""
    pass


class UnsupportedFormatError(ExportError):
    """Requested format has no renderer"""

    def __init__(self, export_format: str):
        self.export_format = export_format
        super().__init__(f"Format non supporté: {export_format}")


class RenderError(ExportError):
    """Failure while parsing or rendering a document"""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message or UNKNOWN_ERROR_MESSAGE)

    @classmethod
    def from_exception(cls, exc: BaseException) -> "RenderError":
        if isinstance(exc, RenderError):
            return exc
        return cls(str(exc), cause=exc)
