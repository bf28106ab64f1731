"""
reportstudio - Multi-format report export engine
报告多格式导出引擎

License: MIT
"""

__version__ = "1.0.0"
__license__ = "MIT"

from reportstudio.config import Config
from reportstudio.export import ExportEngine, ExportOptions, ExportResult

__all__ = ["ExportEngine", "ExportOptions", "ExportResult", "Config"]
