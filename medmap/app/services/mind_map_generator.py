import logging

from .. import config
from ..prompts import build_mind_map_prompt
from ..schemas.graph import GraphData, MindMapDocument
from ..utils.layout import apply_radial_layout, has_collapsed_layout
from ..utils.response_parser import parse_model_reply
from .llm_client import LLMClient

logger = logging.getLogger("medmap.generator")


class MindMapGenerator:
    def __init__(self, llm=None, max_chars=None):
        self.llm = llm or LLMClient()
        self.max_chars = max_chars or config.MAX_DOCUMENT_CHARS

    def generate(self, text: str) -> MindMapDocument:
        """
        Asks the model for a radial mind map of the document.
        Raises UpstreamModelError or MalformedModelOutputError; nothing is retried.
        """
        if len(text) > self.max_chars:
            logger.info("Truncating document from %d to %d characters", len(text), self.max_chars)
        prompt = build_mind_map_prompt(text, self.max_chars)

        reply = self.llm.complete(prompt, max_tokens=config.GENERATION_MAX_TOKENS)
        graph = parse_model_reply(reply, GraphData)

        if has_collapsed_layout(graph.nodes):
            logger.info("Model returned overlapping positions, applying radial layout")
            apply_radial_layout(graph)

        logger.info("Generated mind map with %d nodes and %d edges", len(graph.nodes), len(graph.edges))
        return MindMapDocument(nodes=graph.nodes, edges=graph.edges, verifications={})
