"""
Unit tests for pulling the JSON payload out of a completion.
"""

import sys

import pytest

from errors import FailureKind, MalformedPayload, NoPayloadFound, PayloadError
from utils.extraction import extract_structured_payload


class TestExtractStructuredPayload:

    def test_extract_when_surrounded_by_noise_then_returns_object(self):
        assert extract_structured_payload('noise {"a":1} noise') == {"a": 1}

    def test_extract_when_no_braces_then_raises_no_payload(self):
        with pytest.raises(NoPayloadFound) as excinfo:
            extract_structured_payload("no braces here")
        assert excinfo.value.kind == FailureKind.NO_PAYLOAD_FOUND

    def test_extract_when_unclosed_then_raises_malformed(self):
        with pytest.raises(MalformedPayload) as excinfo:
            extract_structured_payload("{broken")
        assert excinfo.value.kind == FailureKind.MALFORMED_PAYLOAD

    def test_extract_when_empty_or_none_then_raises_no_payload(self):
        for raw in ("", "   ", None):
            with pytest.raises(NoPayloadFound):
                extract_structured_payload(raw)

    def test_extract_from_markdown_fence(self):
        raw = '```json\n{"questions": [{"text": "Q?"}]}\n```'
        assert extract_structured_payload(raw) == {"questions": [{"text": "Q?"}]}

    def test_extract_keeps_nested_objects(self):
        """The span is greedy, so nested braces stay inside the payload."""
        raw = 'Result: {"outer": {"inner": 2}, "list": [1, 2]} done'
        assert extract_structured_payload(raw) == {"outer": {"inner": 2}, "list": [1, 2]}

    def test_extract_when_two_objects_then_malformed(self):
        """Nothing is repaired: two separate objects do not parse as one."""
        with pytest.raises(PayloadError):
            extract_structured_payload('{"a": 1} and {"b": 2}')

    def test_extract_when_trailing_comma_then_malformed(self):
        with pytest.raises(MalformedPayload):
            extract_structured_payload('{"a": 1,}')


class TestExtractUnparsableNumbersAndNesting:
    """Every way json.loads can refuse the span surfaces as MalformedPayload."""

    @pytest.mark.skipif(not hasattr(sys, "get_int_max_str_digits"), reason="no integer digit limit")
    def test_extract_when_integer_too_long_then_malformed(self):
        with pytest.raises(MalformedPayload) as excinfo:
            extract_structured_payload('{"n": ' + "9" * 5000 + "}")
        assert excinfo.value.kind == FailureKind.MALFORMED_PAYLOAD

    def test_extract_when_nested_too_deep_then_malformed(self):
        raw = '{"a": ' + "[" * 200000 + "]" * 200000 + "}"
        with pytest.raises(MalformedPayload):
            extract_structured_payload(raw)
