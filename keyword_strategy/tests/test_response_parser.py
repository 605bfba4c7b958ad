"""
Unit Tests for Response Parsing
===============================
Fence stripping and validation of provider text.

Test Coverage:
- Code-fence stripping (with/without language tag, idempotent)
- Fenced and unfenced payloads parse identically
- Serialize -> parse round trip
- Malformed JSON and missing fields raise ResponseFormatError
- Error messages do not leak parser internals
"""

import json

import pytest

from keyword_strategy.app.schemas.strategy import Level, SearchIntent, StrategyResult
from keyword_strategy.services.llm_service import ResponseFormatError
from keyword_strategy.services.strategy_service import (
    parse_strategy_response,
    strip_code_fences,
)


# =============================================================================
# FENCE STRIPPING TESTS
# =============================================================================


class TestStripCodeFences:
    """Tests for strip_code_fences."""

    @pytest.mark.parametrize("raw", [
        '```json\n{"a": 1}\n```',
        '```JSON\n{"a": 1}\n```',
        '```\n{"a": 1}\n```',
        '```json {"a": 1}```',
        '  \n```json\n{"a": 1}\n```\n  ',
        '{"a": 1}',
        '  {"a": 1}\n',
    ])
    def test_strips_fences(self, raw):
        assert strip_code_fences(raw) == '{"a": 1}'

    def test_idempotent(self):
        once = strip_code_fences('```json\n{"a": 1}\n```')
        assert strip_code_fences(once) == once

    def test_keeps_inner_backticks(self):
        """Backticks inside string values are untouched."""
        raw = '```json\n{"a": "use ``` fences"}\n```'
        assert strip_code_fences(raw) == '{"a": "use ``` fences"}'


# =============================================================================
# PARSE TESTS
# =============================================================================


class TestParseStrategyResponse:
    """Tests for parse_strategy_response."""

    def test_parses_plain_json(self, strategy_json):
        result = parse_strategy_response(strategy_json)

        assert isinstance(result, StrategyResult)
        assert result.topic == "قهوه ارگانیک"
        assert len(result.keywords) == 4

    def test_fenced_equals_unfenced(self, strategy_json):
        fenced = f"```json\n{strategy_json}\n```"
        assert parse_strategy_response(fenced) == parse_strategy_response(strategy_json)

    def test_round_trip(self, strategy_result):
        """Serialized result parses back to an equal value."""
        text = strategy_result.model_dump_json(by_alias=True)
        assert parse_strategy_response(text) == strategy_result

    def test_round_trip_without_optional_fields(self):
        result = StrategyResult.model_validate({
            "topic": "t",
            "summary": "s",
            "keywords": [{
                "keyword": "k",
                "searchVolume": "Low",
                "commercialValue": "Medium",
                "intent": "Navigational",
                "competition": "High",
                "difficultyIndex": 0,
                "rationale": "r",
            }],
        })

        assert parse_strategy_response(result.model_dump_json(by_alias=True)) == result

    def test_concrete_scenario(self):
        """Single-keyword reply from the provider."""
        raw = (
            '{"topic":"قهوه ارگانیک","summary":"...","keywords":[{"keyword":"خرید قهوه ارگانیک",'
            '"searchVolume":"High","commercialValue":"High","intent":"Transactional",'
            '"competition":"Medium","difficultyIndex":55,"rationale":"...",'
            '"contentFormat":"Product Page","suggestedTitle":"..."}]}'
        )

        result = parse_strategy_response(raw)

        assert len(result.keywords) == 1
        assert result.keywords[0].difficulty_index == 55
        assert result.keywords[0].search_volume == Level.HIGH
        assert result.keywords[0].intent == SearchIntent.TRANSACTIONAL

    def test_integral_float_difficulty_accepted(self, strategy_payload):
        """JSON numbers like 55.0 are accepted as integers."""
        strategy_payload["keywords"][0]["difficultyIndex"] = 55.0
        result = parse_strategy_response(json.dumps(strategy_payload))
        assert result.keywords[0].difficulty_index == 55

    def test_empty_keyword_list(self):
        result = parse_strategy_response('{"topic": "t", "summary": "s", "keywords": []}')
        assert result.is_empty

    def test_extra_fields_ignored(self, strategy_payload):
        strategy_payload["confidence"] = "high"
        result = parse_strategy_response(json.dumps(strategy_payload))
        assert len(result.keywords) == 4

    @pytest.mark.parametrize("raw", [
        '{ "topic": "x"',
        "",
        "```json\n```",
        "not json at all",
        "[]",
        "null",
    ])
    def test_malformed_raises(self, raw):
        with pytest.raises(ResponseFormatError):
            parse_strategy_response(raw)

    @pytest.mark.parametrize("field", ["keywords", "topic", "summary"])
    def test_missing_required_field(self, strategy_payload, field):
        del strategy_payload[field]

        with pytest.raises(ResponseFormatError):
            parse_strategy_response(json.dumps(strategy_payload))

    def test_invalid_enum_literal(self, strategy_payload):
        strategy_payload["keywords"][1]["intent"] = "informational"

        with pytest.raises(ResponseFormatError):
            parse_strategy_response(json.dumps(strategy_payload))

    def test_out_of_range_difficulty(self, strategy_payload):
        strategy_payload["keywords"][2]["difficultyIndex"] = 140

        with pytest.raises(ResponseFormatError):
            parse_strategy_response(json.dumps(strategy_payload))

    @pytest.mark.parametrize("value", [True, "55", "  ", None])
    def test_non_numeric_difficulty(self, strategy_payload, value):
        """Booleans and numeric strings are not scores."""
        strategy_payload["keywords"][0]["difficultyIndex"] = value

        with pytest.raises(ResponseFormatError):
            parse_strategy_response(json.dumps(strategy_payload))

    @pytest.mark.parametrize("field", ["keyword", "rationale"])
    def test_blank_keyword_text(self, strategy_payload, field):
        strategy_payload["keywords"][1][field] = "   "

        with pytest.raises(ResponseFormatError):
            parse_strategy_response(json.dumps(strategy_payload))

    def test_no_partial_result(self, strategy_payload):
        """One bad keyword fails the whole response."""
        strategy_payload["keywords"].append({"keyword": "ناقص"})

        with pytest.raises(ResponseFormatError):
            parse_strategy_response(json.dumps(strategy_payload))

    def test_error_message_is_generic(self):
        with pytest.raises(ResponseFormatError) as exc_info:
            parse_strategy_response('{ "topic": "x"')

        assert exc_info.value.message == "Invalid response format from AI"
        assert "json_invalid" not in str(exc_info.value)
        assert exc_info.value.__cause__ is not None
