from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Dict

from .verification import Verification


class Position(BaseModel):
    x: float = 0
    y: float = 0


class NodeData(BaseModel):
    model_config = ConfigDict(extra="allow")

    label: str = ""


class GraphNode(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    type: str = "default"
    position: Position = Field(default_factory=Position)
    data: NodeData = Field(default_factory=NodeData)
    className: Optional[str] = None  # "verified" / "unverified"


class GraphEdge(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    source: str
    target: str
    type: str = "smoothstep"
    label: Optional[str] = None


class GraphData(BaseModel):
    nodes: List[GraphNode]
    edges: List[GraphEdge] = []


class MindMapDocument(GraphData):
    verifications: Dict[str, Verification] = {}


class LabelUpdate(BaseModel):
    label: str


class EdgeCreate(BaseModel):
    source: str
    target: str
