"""
Integration tests for the orchestrator across the remote and fallback paths.
"""

import random

import pytest

from agents.pipeline import PipelineOrchestrator, check_preconditions, cognitive_distribution
from config import GatewaySettings
from conftest import EN_PROGRAMMING_TEXT, StubGateway, as_completion, failed
from errors import FailureKind, PreconditionViolation
from models import COGNITIVE_LEVELS, Content, GenerationOptions
from utils.gateway import CompletionGateway


def _orchestrator(gateway, seed=0):
    return PipelineOrchestrator(gateway, rng=random.Random(seed))


class TestPreconditions:
    """Malformed options are rejected before any stage runs."""

    def test_zero_questions_rejected(self):
        gateway = StubGateway("unused")
        content = Content(raw_text="text", options=GenerationOptions(question_count=0))

        with pytest.raises(PreconditionViolation):
            _orchestrator(gateway).run(content)
        assert gateway.calls == []

    def test_empty_question_types_rejected(self):
        content = Content(raw_text="text", options=GenerationOptions(question_types=set()))
        with pytest.raises(PreconditionViolation):
            check_preconditions(content)

    def test_mapping_input_validated(self):
        content = check_preconditions({"raw_text": "text", "options": {"question_count": 3, "language": "en"}})
        assert content.options.question_count == 3

    def test_mapping_with_bad_difficulty_rejected(self):
        with pytest.raises(PreconditionViolation):
            check_preconditions({"raw_text": "text", "options": {"difficulty": "impossible"}})

    def test_precondition_is_a_value_error(self):
        with pytest.raises(ValueError):
            check_preconditions({"options": {}})


class TestPipelinePaths:
    """generation_type, provenance and failures reflect the path taken."""

    def test_remote_path(self, english_content, understanding_payload, questions_payload):
        gateway = StubGateway(as_completion(understanding_payload), as_completion(questions_payload))
        result = _orchestrator(gateway).run(english_content)

        assert len(gateway.calls) == 2
        assert result.understanding.provenance == "remote"
        assert result.metadata.generation_type == "remote"
        assert result.metadata.failures == []
        assert len(result.questions) == 2

    def test_heuristic_from_understanding_path(self, english_content):
        gateway = StubGateway("no structured data", failed(FailureKind.REMOTE_SERVER_ERROR))
        result = _orchestrator(gateway).run(english_content)

        assert result.understanding.provenance == "heuristic"
        assert result.metadata.generation_type == "heuristic_from_understanding"
        assert result.metadata.failures == [FailureKind.NO_PAYLOAD_FOUND, FailureKind.REMOTE_SERVER_ERROR]
        assert 1 <= len(result.questions) <= 5
        for question in result.questions:
            assert len(question.options) == 4
            assert question.correct_answer == 0

    def test_direct_path_when_gateway_raises(self, english_content):
        gateway = StubGateway(RuntimeError("contract breach"))
        result = _orchestrator(gateway).run(english_content)

        assert len(gateway.calls) == 1
        assert result.metadata.generation_type == "direct_heuristic"
        assert result.metadata.failures == [FailureKind.REMOTE_UNKNOWN_ERROR]
        assert result.metadata.domain == "programming"
        assert result.understanding.provenance == "heuristic"
        assert len(result.questions) == 5
        assert all(q.provenance == "heuristic" for q in result.questions)

    def test_direct_path_when_api_key_missing(self, english_content):
        result = _orchestrator(CompletionGateway(GatewaySettings(api_key=None))).run(english_content)

        assert result.metadata.generation_type == "direct_heuristic"
        assert result.metadata.failures == [FailureKind.CONFIGURATION_ERROR]

    def test_remote_understanding_with_failed_questions(self, english_content, understanding_payload):
        gateway = StubGateway(as_completion(understanding_payload), failed(FailureKind.REMOTE_RATE_LIMITED))
        result = _orchestrator(gateway).run(english_content)

        assert result.understanding.provenance == "remote"
        assert result.metadata.generation_type == "heuristic_from_understanding"
        assert result.metadata.failures == [FailureKind.REMOTE_RATE_LIMITED]

    def test_deeply_nested_understanding_falls_back(self, english_content):
        raw = '{"summary": "x", "concepts": ' + "[" * 200000 + "]" * 200000 + "}"
        gateway = StubGateway(raw, failed(FailureKind.REMOTE_SERVER_ERROR))
        result = _orchestrator(gateway).run(english_content)

        assert result.understanding.provenance == "heuristic"
        assert result.metadata.generation_type == "heuristic_from_understanding"
        assert result.metadata.failures == [FailureKind.MALFORMED_PAYLOAD, FailureKind.REMOTE_SERVER_ERROR]

    def test_non_decimal_answer_digit_falls_back(self, english_content, understanding_payload):
        questions = {"questions": [{"questionText": "Q?", "options": ["a", "b", "c", "d"], "correctAnswer": "²"}]}
        gateway = StubGateway(as_completion(understanding_payload), as_completion(questions))
        result = _orchestrator(gateway).run(english_content)

        assert result.understanding.provenance == "remote"
        assert result.metadata.generation_type == "heuristic_from_understanding"
        assert result.metadata.failures == [FailureKind.VALIDATION_FAILED]

    def test_question_count_is_an_upper_bound(self, understanding_payload, questions_payload):
        questions_payload["questions"] = questions_payload["questions"] * 4
        gateway = StubGateway(as_completion(understanding_payload), as_completion(questions_payload))
        content = Content(raw_text=EN_PROGRAMMING_TEXT, options=GenerationOptions(question_count=3))

        assert len(_orchestrator(gateway).run(content).questions) == 3

    def test_run_accepts_mapping(self):
        gateway = StubGateway(failed())
        result = _orchestrator(gateway).run({"raw_text": EN_PROGRAMMING_TEXT, "options": {"question_count": 2}})
        assert len(result.questions) == 2


class TestMetadata:

    def test_distribution_covers_all_levels(self, english_content):
        result = _orchestrator(StubGateway(failed())).run(english_content)
        distribution = result.metadata.cognitive_distribution

        assert set(distribution) == set(COGNITIVE_LEVELS)
        assert sum(distribution.values()) == len(result.questions)

    def test_cognitive_distribution_of_nothing(self):
        assert cognitive_distribution([]) == {level: 0 for level in COGNITIVE_LEVELS}

    def test_timings_recorded(self, english_content):
        metadata = _orchestrator(StubGateway(failed())).run(english_content).metadata
        assert metadata.understanding_time_ms >= 0
        assert metadata.generation_time_ms >= 0
