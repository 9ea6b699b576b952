"""
Unit tests for remote question synthesis and its fallback.
"""

import pytest

from agents.question_synthesis import QuestionSynthesisStage, build_question_prompt, parse_question
from config import GatewaySettings
from conftest import StubGateway, as_completion, failed
from errors import FailureKind, ValidationFailed
from models import GenerationOptions
from utils.gateway import CompletionGateway


@pytest.fixture
def options():
    return GenerationOptions(question_count=5, difficulty="medium", language="en")


class TestQuestionPrompt:

    def test_prompt_lists_concepts_and_points(self, sample_understanding, options):
        prompt = build_question_prompt(sample_understanding, options)

        assert "function (high)" in prompt
        assert "Calling a function (application)" in prompt
        assert "Create 5 intelligent questions" in prompt
        assert "multiple_choice" in prompt

    def test_prompt_in_arabic_for_arabic_understanding(self, sample_understanding):
        understanding = sample_understanding.model_copy(update={"detected_language": "ar"})
        prompt = build_question_prompt(understanding, GenerationOptions(difficulty="hard"))

        assert "أنشئ 5 سؤال ذكي" in prompt
        assert "متقدم" in prompt


class TestRemoteQuestions:
    """Valid remote questions are normalized and tagged remote."""

    def test_run_when_payload_valid_then_remote(self, sample_understanding, options, questions_payload):
        gateway = StubGateway(as_completion(questions_payload))
        result = QuestionSynthesisStage(gateway).run(sample_understanding, options)

        assert result.generation_type == "remote"
        assert result.failure is None
        first, second = result.questions
        assert first.type == "multiple_choice"
        assert first.correct_answer == 0
        assert first.cognitive_level == "knowledge"
        assert first.related_concept == "function"
        assert first.provenance == "remote"
        assert second.type == "open_ended"
        assert second.options == []
        assert second.correct_answer is None

    def test_run_uses_question_budget(self, sample_understanding, options, questions_payload):
        gateway = StubGateway(as_completion(questions_payload))
        QuestionSynthesisStage(gateway).run(sample_understanding, options)

        assert gateway.calls[0]["model_alias"] == "analysis"
        assert gateway.calls[0]["options"].max_tokens == 3000
        assert gateway.calls[0]["options"].temperature == 0.3

    def test_run_truncates_to_question_count(self, sample_understanding, questions_payload):
        questions_payload["questions"] = questions_payload["questions"][:1] * 8
        gateway = StubGateway(as_completion(questions_payload))
        result = QuestionSynthesisStage(gateway).run(sample_understanding, GenerationOptions(question_count=3))

        assert len(result.questions) == 3

    def test_parse_maps_answer_text_to_index(self, sample_understanding, options):
        item = {"text": "Pick one", "options": ["a", "b", "c", "d"], "correctAnswer": "c"}
        assert parse_question(item, sample_understanding, options).correct_answer == 2

    def test_parse_accepts_numeric_string_answer(self, sample_understanding, options):
        item = {"text": "Pick one", "options": ["a", "b", "c", "d"], "correctAnswer": "3"}
        assert parse_question(item, sample_understanding, options).correct_answer == 3

    def test_parse_defaults_from_understanding_and_options(self, sample_understanding, options):
        item = {"questionText": "Pick one", "options": ["a", "b", "c", "d"], "correctAnswer": 1}
        question = parse_question(item, sample_understanding, options)

        assert question.category == "programming"
        assert question.difficulty == "medium"
        assert question.cognitive_level == "comprehension"

    @pytest.mark.parametrize(
        "item",
        [
            {"options": ["a", "b", "c", "d"], "correctAnswer": 0},
            {"text": "Q", "options": ["a", "b", "c"], "correctAnswer": 0},
            {"text": "Q", "options": ["a", "b", "c", "d"]},
            {"text": "Q", "options": ["a", "b", "c", "d"], "correctAnswer": 7},
            {"text": "Q", "options": ["a", "b", "c", "d"], "correctAnswer": "e"},
            {"text": "Q", "options": ["a", "b", "c", "d"], "correctAnswer": "\u00b2"},
            {"text": "Q", "options": ["a", "b", "c", "d"], "correctAnswer": "\u2460"},
            "just a string",
        ],
    )
    def test_parse_rejects_invalid_items(self, sample_understanding, options, item):
        with pytest.raises(ValidationFailed):
            parse_question(item, sample_understanding, options)


class TestQuestionFallback:
    """Any failure hands over to the template generator."""

    def test_run_when_gateway_fails_then_heuristic(self, sample_understanding):
        options = GenerationOptions(question_count=10, language="en")
        result = QuestionSynthesisStage(StubGateway(failed())).run(sample_understanding, options)

        assert result.generation_type == "heuristic_from_understanding"
        assert result.failure == FailureKind.REMOTE_UNAVAILABLE
        # 3 concept questions, 2 point questions and one comparison
        assert len(result.questions) == 6
        assert all(q.provenance == "heuristic" for q in result.questions)

    def test_run_when_empty_question_list_then_validation_failed(self, sample_understanding, options):
        result = QuestionSynthesisStage(StubGateway('{"questions": []}')).run(sample_understanding, options)

        assert result.generation_type == "heuristic_from_understanding"
        assert result.failure == FailureKind.VALIDATION_FAILED

    def test_run_when_one_item_invalid_then_whole_payload_rejected(self, sample_understanding, options, questions_payload):
        questions_payload["questions"].append({"text": "Q", "options": ["a", "b"], "correctAnswer": 0})
        result = QuestionSynthesisStage(StubGateway(as_completion(questions_payload))).run(sample_understanding, options)

        assert result.failure == FailureKind.VALIDATION_FAILED

    def test_run_when_gateway_raises_then_heuristic(self, sample_understanding, options):
        result = QuestionSynthesisStage(StubGateway(RuntimeError("boom"))).run(sample_understanding, options)

        assert result.generation_type == "heuristic_from_understanding"
        assert result.failure == FailureKind.REMOTE_UNKNOWN_ERROR
        assert len(result.questions) == 5

    def test_run_when_unparsable_then_malformed(self, sample_understanding, options):
        result = QuestionSynthesisStage(StubGateway("{not json at all")).run(sample_understanding, options)
        assert result.failure == FailureKind.MALFORMED_PAYLOAD

    def test_run_when_answer_is_superscript_digit_then_validation_failed(self, sample_understanding, options):
        payload = {"questions": [{"questionText": "Q?", "options": ["a", "b", "c", "d"], "correctAnswer": "²"}]}
        result = QuestionSynthesisStage(StubGateway(as_completion(payload))).run(sample_understanding, options)

        assert result.generation_type == "heuristic_from_understanding"
        assert result.failure == FailureKind.VALIDATION_FAILED

    def test_run_when_client_cannot_be_built_then_configuration_error(self, sample_understanding, options):
        gateway = CompletionGateway(GatewaySettings(api_key=None))
        result = QuestionSynthesisStage(gateway).run(sample_understanding, options)

        assert result.generation_type == "heuristic_from_understanding"
        assert result.failure == FailureKind.CONFIGURATION_ERROR
