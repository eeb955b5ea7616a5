import logging
from typing import Tuple

from .. import config
from ..prompts import (
    build_regeneration_prompt,
    build_short_verification_prompt,
    build_verification_prompt,
)
from ..schemas.verification import (
    EvidenceResult,
    RegenerationResult,
    Verdict,
    Verification,
)
from ..utils.response_parser import parse_model_reply
from .evidence import EvidenceFetcher
from .llm_client import LLMClient

logger = logging.getLogger("medmap.fact_checker")


class FactChecker:
    """Verifies and corrects short medical statements against web evidence."""

    def __init__(self, llm=None, evidence=None):
        self.llm = llm or LLMClient()
        self.evidence = evidence or EvidenceFetcher()

    def verify_with_evidence(self, content: str) -> Tuple[Verification, EvidenceResult]:
        evidence = self.evidence.search(content)
        return self._judge(content, evidence), evidence

    def _judge(self, content: str, evidence: EvidenceResult) -> Verification:
        prompt = build_verification_prompt(content, evidence.sources)
        reply = self.llm.complete(prompt, max_tokens=config.VERIFICATION_MAX_TOKENS)
        verdict = parse_model_reply(reply, Verdict)
        return Verification(**verdict.model_dump(), sources=evidence.sources)

    def verify(self, content: str) -> Verification:
        verification, _ = self.verify_with_evidence(content)
        return verification

    def verify_or_degrade(self, content: str) -> Tuple[Verification, EvidenceResult]:
        """
        Same as verify_with_evidence, but a failed model call or reply yields
        the degraded "Unable to verify" record instead of an exception. The
        evidence status still reports what the search returned.
        """
        # search() never raises
        evidence = self.evidence.search(content)
        try:
            return self._judge(content, evidence), evidence
        except Exception:
            logger.exception("Error verifying content %r", content)
            return Verification.degraded(), evidence

    def regenerate_with_evidence(self, content: str) -> Tuple[RegenerationResult, EvidenceResult]:
        evidence = self.evidence.search(content)

        prompt = build_regeneration_prompt(content, evidence.sources)
        improved = self.llm.complete(prompt, max_tokens=config.REGENERATION_MAX_TOKENS).strip()

        # The corrected text is checked against the evidence already fetched.
        verify_prompt = build_short_verification_prompt(improved, evidence.sources)
        reply = self.llm.complete(verify_prompt, max_tokens=config.REGENERATION_VERIFY_MAX_TOKENS)
        verdict = parse_model_reply(reply, Verdict)

        logger.info("Regenerated %r as %r (verified=%s)", content, improved, verdict.verified)
        result = RegenerationResult(
            content=improved,
            verification=Verification(**verdict.model_dump(), sources=evidence.sources),
        )
        return result, evidence

    def regenerate(self, content: str) -> RegenerationResult:
        result, _ = self.regenerate_with_evidence(content)
        return result
