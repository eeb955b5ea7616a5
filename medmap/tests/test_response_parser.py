import pytest

from medmap.app.exceptions import MalformedModelOutputError
from medmap.app.schemas.verification import Verdict
from medmap.app.utils.response_parser import (
    parse_json_reply,
    parse_model_reply,
    strip_code_fences,
)

PAYLOAD = '{"verified": false, "explanation": "Insulin manages diabetes", "confidence": "high"}'
EXPECTED = {"verified": False, "explanation": "Insulin manages diabetes", "confidence": "high"}


@pytest.mark.parametrize("reply", [
    PAYLOAD,
    f"```json\n{PAYLOAD}\n```",
    f"```\n{PAYLOAD}\n```",
    f"```json{PAYLOAD}",
    f"{PAYLOAD}\n```",
    f"  \n```json\n{PAYLOAD}\n```  \n",
])
def test_fence_variants_parse_to_same_object(reply):
    assert parse_json_reply(reply) == EXPECTED


def test_clean_json_is_unchanged():
    assert strip_code_fences(PAYLOAD) == PAYLOAD
    assert strip_code_fences(strip_code_fences(f"```json\n{PAYLOAD}\n```")) == PAYLOAD


def test_tagged_fence_checked_before_bare_fence():
    # A bare-fence strip would leave "json" in front of the payload.
    assert strip_code_fences("```json{}```") == "{}"


def test_fences_in_the_middle_are_left_alone():
    reply = f"Here you go:\n```json\n{PAYLOAD}\n```"
    with pytest.raises(MalformedModelOutputError):
        parse_json_reply(reply)


def test_empty_reply():
    assert strip_code_fences("") == ""
    with pytest.raises(MalformedModelOutputError):
        parse_json_reply("")


def test_malformed_json_keeps_raw_text():
    with pytest.raises(MalformedModelOutputError) as exc_info:
        parse_json_reply("```json\n{not json}\n```")
    assert exc_info.value.raw_text == "```json\n{not json}\n```"


def test_schema_validation():
    verdict = parse_model_reply(f"```json\n{PAYLOAD}\n```", Verdict)
    assert verdict.verified is False
    assert verdict.confidence == "high"

    with pytest.raises(MalformedModelOutputError):
        parse_model_reply('{"verified": true, "confidence": "certain"}', Verdict)
    with pytest.raises(MalformedModelOutputError):
        parse_model_reply('["not", "an", "object"]', Verdict)
