import json
import sys
from pathlib import Path

import pytest

# Ensure project root is on sys.path so `import slide_spec` works
project_root = Path(__file__).resolve().parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

# 1x1 transparent PNG
PNG_DATA_URL = (
    "data:image/png;base64,"
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)


class FakeProducer:
    """Scripted producer: returns (or raises) the queued responses in order."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def complete(self, messages, temperature):
        self.calls.append({"messages": [dict(m) for m in messages], "temperature": temperature})
        response = self.responses[min(len(self.calls), len(self.responses)) - 1]
        if isinstance(response, Exception):
            raise response
        if not isinstance(response, str):
            response = json.dumps(response)
        return response


@pytest.fixture
def fake_producer():
    return FakeProducer


@pytest.fixture
def png_data_url():
    return PNG_DATA_URL


@pytest.fixture
def positioned_doc():
    return {
        "meta": {"title": "Quarterly review", "author": "Ops", "layout": "LAYOUT_WIDE"},
        "slides": [
            {
                "title": "Overview",
                "backgroundColor": "F0F0F0",
                "objects": [
                    {
                        "kind": "text",
                        "text": "Overview",
                        "box": {"x": 0.6, "y": 0.6, "w": 12.133, "h": 0.7},
                        "options": {"fontSize": 28, "bold": True, "color": "222222"},
                    },
                    {
                        "kind": "bullets",
                        "items": ["Revenue up", "  Costs flat", "Hiring paused"],
                        "box": {"x": 0.6, "y": 1.5, "w": 6, "h": 3},
                        "options": {"fontSize": 18},
                    },
                    {
                        "kind": "table",
                        "rows": [["Region", "Sales"], ["North", "10"], ["South", "12"]],
                        "box": {"x": 7, "y": 1.5, "w": 5.5, "h": 2},
                        "options": {"fontSize": 12, "border": {"type": "solid", "pt": "1", "color": "999999"}},
                    },
                    {
                        "kind": "chart",
                        "chartType": "bar",
                        "data": [{"name": "Sales", "labels": ["Q1", "Q2"], "values": [10, 12]}],
                        "box": {"x": 7, "y": 4, "w": 5.5, "h": 2.8},
                        "options": {"title": "Sales", "showLegend": True, "legendPos": "b"},
                    },
                ],
            }
        ],
    }


@pytest.fixture
def intent_doc():
    return {
        "meta": {"title": "Plan"},
        "slides": [
            {
                "title": "Q1",
                "bullets": ["A", "B"],
                "bulletSections": [{"title": "Notes", "items": ["x"]}],
            }
        ],
    }


@pytest.fixture
def deck_doc():
    return {
        "meta": {"title": "Launch", "lang": "en"},
        "theme": {
            "layout": "LAYOUT_WIDE",
            "fonts": {"head": "Arial", "body": "Arial"},
            "colors": {"bg": "101820", "text": "FEE715"},
        },
        "assets": {"images": [{"id": "hero", "src": PNG_DATA_URL}]},
        "slides": [
            {"id": "s1", "layout_type": "title", "title": "Launch", "subtitle": "2025 plan"},
            {
                "id": "s2",
                "layout_type": "title_bullets",
                "title": "Goals",
                "bullets": [{"text": "Ship"}, {"text": "Measure", "level": 1}],
            },
            {
                "id": "s3",
                "layout_type": "table",
                "title": "Numbers",
                "table": {"columns": ["A", "B"], "rows": [["1", "2"]]},
            },
        ],
    }
