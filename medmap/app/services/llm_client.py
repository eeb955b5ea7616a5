import logging
from litellm import completion

from .. import config
from ..exceptions import UpstreamModelError

logger = logging.getLogger("medmap.llm")


class LLMClient:
    """Single-turn text completion against the configured model."""

    def __init__(self, model=None, api_base=None, api_key=None):
        self.model = model or config.LLM_MODEL
        self.api_base = api_base or config.LLM_API_BASE
        self.api_key = api_key or config.LLM_API_KEY

    def complete(self, prompt: str, max_tokens: int) -> str:
        """
        Sends one user message and returns the reply text.
        Raises UpstreamModelError when the call fails or the reply has no text.
        """
        kwargs = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": max_tokens,
        }
        if self.api_base:
            kwargs["api_base"] = self.api_base
        if self.api_key:
            kwargs["api_key"] = self.api_key

        logger.debug("Calling %s (max_tokens=%d)", self.model, max_tokens)
        try:
            response = completion(**kwargs)
        except Exception as e:
            raise UpstreamModelError(f"Model call failed: {e}") from e

        try:
            text = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError):
            text = None

        if not isinstance(text, str) or not text.strip():
            raise UpstreamModelError("No text response from AI")
        return text
