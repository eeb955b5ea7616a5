import json
from unittest.mock import MagicMock

import pytest

from medmap.app.schemas.graph import MindMapDocument
from medmap.app.schemas.verification import EvidenceResult, Source


def radial_graph(count=10):
    """One hub node ("1") with count - 1 children around it."""
    nodes = [{
        "id": "1",
        "type": "default",
        "position": {"x": 0, "y": 0},
        "data": {"label": "Diabetes Mellitus"},
    }]
    edges = []
    for i in range(2, count + 1):
        nodes.append({
            "id": str(i),
            "type": "default",
            "position": {"x": 250 * (i % 3), "y": 250 * (i // 3)},
            "data": {"label": f"Concept {i}"},
        })
        edges.append({"id": f"e1-{i}", "source": "1", "target": str(i), "type": "smoothstep"})
    return {"nodes": nodes, "edges": edges}


def verdict_json(verified=True, explanation="Consistent with NIH guidance", confidence="high"):
    return json.dumps({"verified": verified, "explanation": explanation, "confidence": confidence})


@pytest.fixture
def sources():
    return [
        Source(title="Diabetes - NIDDK", url="https://www.niddk.nih.gov/diabetes", snippet="Diabetes is a disease..."),
        Source(title="Diabetes Basics | CDC", url="https://www.cdc.gov/diabetes/basics", snippet="Diabetes is a chronic..."),
    ]


@pytest.fixture
def evidence(sources):
    fetcher = MagicMock()
    fetcher.search.return_value = EvidenceResult(sources=sources, status="ok")
    return fetcher


@pytest.fixture
def no_evidence():
    fetcher = MagicMock()
    fetcher.search.return_value = EvidenceResult(sources=[], status="empty")
    return fetcher


@pytest.fixture
def llm():
    return MagicMock()


@pytest.fixture
def document():
    return MindMapDocument.model_validate({**radial_graph(), "verifications": {}})
