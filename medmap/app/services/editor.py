import logging
import threading
from contextlib import contextmanager
from typing import Dict, List, Tuple

from ..exceptions import NodeBusyError, NodeChangedError, NodeNotFoundError
from ..schemas.graph import GraphEdge, GraphNode, MindMapDocument
from ..schemas.verification import Source, Verification

logger = logging.getLogger("medmap.editor")


def status_class(verification: Verification) -> str:
    return "verified" if verification.verified else "unverified"


class MindMapEditor:
    """
    Holds one mind map being edited: nodes, edges and the verification
    record of each node.

    Verify and regenerate calls are guarded per node; a second call for a
    node whose previous call has not finished raises NodeBusyError, while
    other nodes stay available. A result whose node was removed, or whose
    label was edited in the meantime, is dropped with NodeChangedError.
    """

    def __init__(self, document: MindMapDocument, fact_checker=None):
        self.nodes: List[GraphNode] = [n.model_copy(deep=True) for n in document.nodes]
        self.edges: List[GraphEdge] = [e.model_copy(deep=True) for e in document.edges]
        self.verifications: Dict[str, Verification] = dict(document.verifications)
        self.fact_checker = fact_checker
        self._pending = set()
        self._lock = threading.Lock()

    # --- Graph state ---

    def get_node(self, node_id: str) -> GraphNode:
        for node in self.nodes:
            if node.id == node_id:
                return node
        raise NodeNotFoundError(f"Node not found: {node_id}")

    def connect(self, source: str, target: str) -> GraphEdge:
        self.get_node(source)
        self.get_node(target)
        with self._lock:
            for edge in self.edges:
                if edge.source == source and edge.target == target:
                    return edge
            edge = GraphEdge(id=f"reactflow__edge-{source}-{target}", source=source, target=target)
            self.edges.append(edge)
        return edge

    def edit_label(self, node_id: str, label: str) -> GraphNode:
        node = self.get_node(node_id)
        with self._lock:
            if node.data.label != label:
                node.data.label = label
                # A verdict about the old wording no longer applies.
                self.verifications.pop(node_id, None)
                node.className = None
        return node

    def remove_node(self, node_id: str):
        self.get_node(node_id)
        with self._lock:
            self.nodes = [n for n in self.nodes if n.id != node_id]
            self.edges = [e for e in self.edges if e.source != node_id and e.target != node_id]
            self.verifications.pop(node_id, None)

    # --- Verification round-trips ---

    def is_pending(self, node_id: str) -> bool:
        with self._lock:
            return node_id in self._pending

    @contextmanager
    def _node_request(self, node_id: str):
        with self._lock:
            if node_id in self._pending:
                raise NodeBusyError(f"A request for node {node_id} is already running")
            self._pending.add(node_id)
        try:
            yield
        finally:
            with self._lock:
                self._pending.discard(node_id)

    def _check_unchanged(self, node: GraphNode, label: str):
        """Called with the lock held, before a result is written back."""
        if not any(n is node for n in self.nodes):
            raise NodeChangedError(f"Node {node.id} was removed while the request was running")
        if node.data.label != label:
            raise NodeChangedError(f"Node {node.id} was edited while the request was running")

    def verify_node(self, node_id: str) -> Verification:
        node = self.get_node(node_id)
        with self._node_request(node_id):
            label = node.data.label
            verification, _ = self.fact_checker.verify_or_degrade(label)
            with self._lock:
                self._check_unchanged(node, label)
                self.verifications[node_id] = verification
                node.className = status_class(verification)
        return verification

    def regenerate_node(self, node_id: str):
        node = self.get_node(node_id)
        with self._node_request(node_id):
            label = node.data.label
            result = self.fact_checker.regenerate(label)
            with self._lock:
                self._check_unchanged(node, label)
                node.data.label = result.content
                self.verifications[node_id] = result.verification
                node.className = status_class(result.verification)
        return result

    # --- Export helpers ---

    def citations(self) -> List[Tuple[str, List[Source]]]:
        return build_citations(self.snapshot())

    def snapshot(self) -> MindMapDocument:
        with self._lock:
            return MindMapDocument(
                nodes=[n.model_copy(deep=True) for n in self.nodes],
                edges=[e.model_copy(deep=True) for e in self.edges],
                verifications=dict(self.verifications),
            )


def build_citations(document: MindMapDocument) -> List[Tuple[str, List[Source]]]:
    """(label, sources) for every node whose verification carries sources."""
    labels = {n.id: n.data.label for n in document.nodes}
    citations = []
    for node_id, verification in document.verifications.items():
        if verification.sources:
            citations.append((labels.get(node_id, node_id), list(verification.sources)))
    return citations
