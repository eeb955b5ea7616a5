from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Literal

Confidence = Literal["high", "medium", "low"]
EvidenceStatus = Literal["ok", "empty", "unavailable", "disabled"]


class Source(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str = ""
    url: str = ""
    snippet: str = ""


class Verdict(BaseModel):
    """Structure a model must return for a fact-check prompt."""

    verified: bool
    explanation: str = ""
    confidence: Confidence = "low"

    @field_validator("confidence", mode="before")
    @classmethod
    def normalize_confidence(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value


class Verification(Verdict):
    sources: List[Source] = Field(default_factory=list, max_length=3)

    @classmethod
    def degraded(cls) -> "Verification":
        return cls(
            verified=False,
            explanation="Unable to verify at this time",
            confidence="low",
            sources=[],
        )


class EvidenceResult(BaseModel):
    sources: List[Source] = []
    status: EvidenceStatus = "ok"


class RegenerationResult(BaseModel):
    content: str
    verification: Verification
