import json
from typing import Type, TypeVar

from pydantic import BaseModel, ValidationError

from ..exceptions import MalformedModelOutputError

ModelT = TypeVar("ModelT", bound=BaseModel)

TAGGED_FENCE = "```json"
FENCE = "```"


def strip_code_fences(text: str) -> str:
    """
    Removes the markdown fence a model tends to wrap JSON in.

    Only a leading fence (tagged or bare) and a trailing bare fence are
    removed; fences anywhere else in the reply are left alone.
    """
    if not text:
        return ""
    cleaned = text.strip()
    if cleaned.startswith(TAGGED_FENCE):
        cleaned = cleaned[len(TAGGED_FENCE):]
    elif cleaned.startswith(FENCE):
        cleaned = cleaned[len(FENCE):]
    if cleaned.endswith(FENCE):
        cleaned = cleaned[:-len(FENCE)]
    return cleaned.strip()


def parse_json_reply(text: str):
    cleaned = strip_code_fences(text)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise MalformedModelOutputError(f"Model reply is not valid JSON: {e}", raw_text=text) from e


def parse_model_reply(text: str, schema: Type[ModelT]) -> ModelT:
    """Parses a fenced JSON reply and validates it against a pydantic schema."""
    payload = parse_json_reply(text)
    try:
        return schema.model_validate(payload)
    except ValidationError as e:
        raise MalformedModelOutputError(
            f"Model reply does not match {schema.__name__}: {e.error_count()} error(s)",
            raw_text=text,
        ) from e
