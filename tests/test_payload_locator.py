"""Tests for locating the JSON payload inside provider text."""

import pytest

from app.services.payload_locator import PayloadKind, extract_candidate, locate
from app.services.recovery_errors import NoPayloadFound


class TestLocate:
    """Span selection rules."""

    def test_object_surrounded_by_prose(self):
        raw = 'Sure! Here is the analysis: {"a": {"b": 1}} Hope this helps.'
        span = locate(raw)

        assert span.kind is PayloadKind.OBJECT
        assert span.extract(raw) == '{"a": {"b": 1}}'
        assert not span.truncated

    def test_earliest_opener_decides_kind(self):
        raw = 'Results: [1, 2] and also {"x": 1}'
        span = locate(raw)

        assert span.kind is PayloadKind.ARRAY
        assert span.extract(raw) == "[1, 2]"

    def test_last_matching_closer_ends_span(self):
        raw = '{"a": 1} then {"b": 2} done'
        assert extract_candidate(raw) == '{"a": 1} then {"b": 2}'

    def test_search_restricted_to_fenced_block(self):
        raw = 'Plan below\n```json\n{"a": 1}\n```\nNotes: {not json}'
        assert extract_candidate(raw) == '{"a": 1}'

    def test_fence_without_payload_is_ignored(self):
        raw = "```\nno json here\n```\nActual: {\"a\": 1}"
        assert extract_candidate(raw) == '{"a": 1}'

    def test_missing_closer_runs_to_end(self):
        raw = 'Here you go: {"a": [1, 2'
        span = locate(raw)

        assert span.truncated
        assert span.extract(raw) == '{"a": [1, 2'
        assert len(span) == len('{"a": [1, 2')

    def test_dangling_closing_fence_is_dropped(self):
        raw = '```json\n{"a": [1, 2\n```'
        # Fenced block holds the payload; the span stops before the closing fence
        assert extract_candidate(raw).rstrip() == '{"a": [1, 2'


class TestLocateFailures:
    """Inputs without a usable payload."""

    def test_empty_text(self):
        with pytest.raises(NoPayloadFound):
            locate("")

    def test_prose_only(self):
        raw = "I'm sorry, I can't help with that request."
        with pytest.raises(NoPayloadFound) as exc_info:
            locate(raw)

        assert exc_info.value.raw_prefix == raw
        assert exc_info.value.to_detail()["error"] == "no_payload_found"

    def test_closer_only_before_opener(self):
        with pytest.raises(NoPayloadFound):
            locate("] then [1, 2")

    def test_raw_prefix_is_bounded(self):
        raw = "x" * 1000
        with pytest.raises(NoPayloadFound) as exc_info:
            locate(raw, prefix_chars=40)

        assert exc_info.value.raw_prefix == "x" * 40
