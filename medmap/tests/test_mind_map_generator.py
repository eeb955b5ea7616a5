import json

import pytest

from medmap.app.exceptions import MalformedModelOutputError, UpstreamModelError
from medmap.app.services.mind_map_generator import MindMapGenerator
from medmap.app.utils.layout import apply_radial_layout, find_center_node, has_collapsed_layout
from medmap.app.schemas.graph import GraphData

from conftest import radial_graph


def test_generate_parses_fenced_graph(llm):
    llm.complete.return_value = f"```json\n{json.dumps(radial_graph(10))}\n```"

    document = MindMapGenerator(llm=llm).generate("Diabetes is a chronic condition affecting insulin...")

    assert len(document.nodes) == 10
    assert len(document.edges) == 9
    assert document.verifications == {}
    assert document.nodes[0].data.label == "Diabetes Mellitus"
    _, kwargs = llm.complete.call_args
    assert kwargs["max_tokens"] == 4096


def test_document_is_truncated(llm):
    llm.complete.return_value = json.dumps(radial_graph(8))
    text = "A" * 10000 + "TAIL-MARKER"

    MindMapGenerator(llm=llm).generate(text)

    prompt = llm.complete.call_args[0][0]
    assert "A" * 10000 in prompt
    assert "TAIL-MARKER" not in prompt
    assert "Include 8-15 key concepts total" in prompt


def test_invalid_json_raises(llm):
    llm.complete.return_value = "Sorry, I cannot help with that."
    with pytest.raises(MalformedModelOutputError):
        MindMapGenerator(llm=llm).generate("text")


def test_missing_nodes_raises(llm):
    llm.complete.return_value = json.dumps({"edges": []})
    with pytest.raises(MalformedModelOutputError):
        MindMapGenerator(llm=llm).generate("text")


def test_upstream_error_propagates(llm):
    llm.complete.side_effect = UpstreamModelError("No text response from AI")
    with pytest.raises(UpstreamModelError):
        MindMapGenerator(llm=llm).generate("text")


def test_collapsed_layout_is_repaired(llm):
    graph = radial_graph(9)
    for node in graph["nodes"]:
        node["position"] = {"x": 0, "y": 0}
    llm.complete.return_value = json.dumps(graph)

    document = MindMapGenerator(llm=llm).generate("text")

    positions = {(n.position.x, n.position.y) for n in document.nodes}
    assert len(positions) == 9
    hub = next(n for n in document.nodes if n.id == "1")
    assert (hub.position.x, hub.position.y) == (0, 0)


def test_model_positions_are_kept(llm):
    llm.complete.return_value = json.dumps(radial_graph(8))
    document = MindMapGenerator(llm=llm).generate("text")
    assert document.nodes[1].position.x == 500
    assert document.nodes[1].position.y == 0


def test_center_is_highest_degree_node():
    graph = GraphData.model_validate({
        "nodes": [{"id": "a"}, {"id": "b"}, {"id": "c"}],
        "edges": [
            {"id": "1", "source": "a", "target": "c"},
            {"id": "2", "source": "b", "target": "c"},
        ],
    })
    assert find_center_node(graph).id == "c"
    assert has_collapsed_layout(graph.nodes)

    apply_radial_layout(graph, radius=100)
    c = graph.nodes[2]
    assert (c.position.x, c.position.y) == (0, 0)
    assert (graph.nodes[0].position.x, graph.nodes[0].position.y) == (100, 0)
    assert not has_collapsed_layout(graph.nodes)
