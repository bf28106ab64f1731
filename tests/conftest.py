"""
Pytest configuration and fixtures for the reportstudio test suite
Provides shared sample documents, configuration and engine fixtures
"""

import copy
import shutil
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any, Dict

import pytest

from reportstudio.config import Config, PDFLayoutConfig
from reportstudio.export import ExportEngine
from reportstudio.export.model import Content, ExportOptions, Report

PIXEL_PNG = (
    "data:image/png;base64,"
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)


# ==================== Pytest Configuration ====================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")


# ==================== Configuration Fixtures ====================

@pytest.fixture
def temp_dir():
    """Create temporary directory for tests"""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config():
    """Configuration with uncompressed PDF streams so page text can be inspected"""
    return Config(debug=True, log_level="DEBUG", pdf=PDFLayoutConfig(compress=False))


@pytest.fixture
def engine(test_config):
    """Export engine bound to the test configuration"""
    return ExportEngine(config=test_config)


# ==================== Document Fixtures ====================

@pytest.fixture
def report_data() -> Dict[str, Any]:
    """Report metadata as sent by the authoring front end (camelCase keys)"""
    return {
        "id": "rpt-q1",
        "title": "Q1 Report: Sales/Ops",
        "description": "Quarterly performance review",
        "author": "Analytics Team",
        "periodLabel": "Q1 2026",
        "status": "review",
        "version": 3,
        "createdAt": "2026-01-05T09:00:00",
        "updatedAt": "2026-04-02T17:30:00",
    }


@pytest.fixture
def content_data() -> Dict[str, Any]:
    """One top-level section with a nested child covering the common block kinds"""
    return {
        "sections": [
            {
                "id": "sec-1",
                "title": "Sales Overview",
                "level": 1,
                "blocks": [
                    {"type": "paragraph", "content": "Revenue grew across all regions."},
                    {
                        "type": "table",
                        "headers": [
                            {"label": "Region", "key": "region"},
                            {"label": "Revenue", "key": "revenue"},
                        ],
                        "rows": [
                            {"region": {"value": "North"}, "revenue": {"value": 120}},
                            {"region": {"value": "South"}, "revenue": {"value": 95, "formatted": "95 kEUR"}},
                            {"region": {"value": "West"}, "revenue": {"value": 0}},
                        ],
                    },
                    {
                        "type": "kpi_card",
                        "label": "Revenue",
                        "value": 215,
                        "unit": "k",
                        "change": 12.5,
                        "changeType": "positive",
                    },
                ],
                "children": [
                    {
                        "id": "sec-1-1",
                        "title": "Regional Detail",
                        "level": 2,
                        "blocks": [
                            {"type": "list", "listType": "bullet", "items": [{"content": "North"}, {"content": "South"}]},
                            {
                                "type": "chart",
                                "chartType": "bar",
                                "data": {
                                    "labels": ["Jan", "Feb", "Mar"],
                                    "datasets": [{"label": "Sales", "data": [10, 20, 30]}],
                                },
                                "config": {"title": "Monthly Sales"},
                            },
                            {"type": "callout", "variant": "warning", "title": "Watch", "content": "Costs are rising."},
                            {"type": "quote", "content": "Great quarter.", "author": "CEO"},
                        ],
                    }
                ],
            }
        ]
    }


@pytest.fixture
def report(report_data) -> Report:
    return Report.model_validate(report_data)


@pytest.fixture
def content(content_data) -> Content:
    return Content.model_validate(content_data)


@pytest.fixture
def options() -> ExportOptions:
    """Options with the generation date pinned"""
    return ExportOptions(generated_at=datetime(2026, 10, 17, 12, 0, 0))


@pytest.fixture
def bare_options() -> ExportOptions:
    """No cover page and no table of contents"""
    return ExportOptions(
        include_cover_page=False,
        include_table_of_contents=False,
        generated_at=datetime(2026, 10, 17, 12, 0, 0),
    )


@pytest.fixture
def q1_report_data(report_data) -> Dict[str, Any]:
    """Report from the quarterly scenario, without a description"""
    data = copy.deepcopy(report_data)
    data.pop("description")
    return data


@pytest.fixture
def q1_content_data() -> Dict[str, Any]:
    """Single section holding a paragraph and a 2 x 3 table"""
    return {
        "sections": [
            {
                "id": "s1",
                "title": "Summary",
                "level": 1,
                "blocks": [
                    {"type": "paragraph", "content": "Quarter closed above target."},
                    {
                        "type": "table",
                        "headers": [
                            {"label": "Team", "key": "team"},
                            {"label": "Deals", "key": "deals"},
                        ],
                        "rows": [
                            {"team": "Alpha", "deals": 4},
                            {"team": "Beta", "deals": 7},
                            {"team": "Gamma", "deals": 2},
                        ],
                    },
                ],
            }
        ]
    }


def make_section(blocks, title="Section", section_id="s", level=1, children=None) -> Dict[str, Any]:
    """Build a section dict for tests that need a custom block list"""
    return {
        "id": section_id,
        "title": title,
        "level": level,
        "blocks": blocks,
        "children": children or [],
    }


@pytest.fixture
def section_factory():
    """Factory for section dicts with a custom block list"""
    return make_section


@pytest.fixture
def png_data_uri():
    """A 1 x 1 PNG embedded as a data URI"""
    return PIXEL_PNG
