import logging
from typing import Any, Dict, List, Optional

from agents.fallback_questions import FallbackQuestionGenerator
from agents.prompts import DIFFICULTY_LABELS, render_prompt
from analysis.text_analyzer import resolve_output_language
from config import QUESTION_MAX_TOKENS, QUESTION_TEMPERATURE
from errors import FailureKind, GatewayConfigurationError, PayloadError, ValidationFailed
from models import (
    COGNITIVE_LEVELS,
    OPTION_COUNT,
    CompletionOptions,
    GenerationOptions,
    Question,
    QuestionSynthesisResult,
    Understanding,
)
from utils.extraction import extract_structured_payload

logger = logging.getLogger(__name__)

NONE_LISTED = {"ar": "لا يوجد", "en": "none"}
QUESTION_TYPE_ALIASES = {
    "multiple_choice": "multiple_choice",
    "mcq": "multiple_choice",
    "open_ended": "open_ended",
    "open": "open_ended",
}


def build_question_prompt(understanding: Understanding, options: GenerationOptions) -> str:
    language = resolve_output_language(understanding.detected_language, options.language)
    separator = "، " if language == "ar" else ", "
    none = NONE_LISTED[language]

    concepts = separator.join(f"{c.name} ({c.importance})" for c in understanding.concepts)
    points = separator.join(f"{p.point} ({p.type})" for p in understanding.testable_points)
    return render_prompt(
        "questions",
        language,
        main_topic=understanding.main_topic,
        summary=understanding.summary,
        key_points=separator.join(understanding.key_points) or none,
        concepts=concepts or none,
        testable_points=points or none,
        complexity=understanding.complexity,
        question_count=options.question_count,
        difficulty=DIFFICULTY_LABELS[language][options.difficulty],
        question_types=", ".join(sorted(options.question_types)),
    )


def _correct_index(value: Any, choices: List[str]) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        if stripped.isdecimal():
            return int(stripped)
        if stripped in choices:
            return choices.index(stripped)
    return None


def _related_concept(item: Dict[str, Any]) -> Optional[str]:
    for key in ("basedOnConcept", "relatedConcept"):
        if isinstance(item.get(key), str) and item[key].strip():
            return item[key].strip()
    related = item.get("relatedConcepts")
    if isinstance(related, list) and related and isinstance(related[0], str):
        return related[0]
    return None


def parse_question(item: Any, understanding: Understanding, options: GenerationOptions) -> Question:
    """Validate one remote question item and normalize it; raises ValidationFailed."""
    if not isinstance(item, dict):
        raise ValidationFailed("Question item is not an object")

    text = item.get("text") or item.get("questionText")
    if not isinstance(text, str) or not text.strip():
        raise ValidationFailed("Question item has no text")

    choices = item.get("options") or []
    if not isinstance(choices, list) or len(choices) not in (0, OPTION_COUNT):
        raise ValidationFailed(f"Question needs 0 or {OPTION_COUNT} options")
    choices = [str(choice) for choice in choices]

    if "correctAnswer" not in item:
        raise ValidationFailed("Question item has no correctAnswer")

    declared = item.get("questionType") or item.get("type")
    if not isinstance(declared, str):
        declared = None
    question_type = QUESTION_TYPE_ALIASES.get(declared, "multiple_choice" if choices else "open_ended")

    correct = None
    if question_type == "multiple_choice":
        correct = _correct_index(item["correctAnswer"], choices)
        if correct is None or not 0 <= correct < len(choices):
            raise ValidationFailed(f"Invalid correctAnswer: {item['correctAnswer']!r}")

    level = item.get("cognitiveLevel")
    difficulty = item.get("difficulty")
    category = item.get("category")

    try:
        return Question(
            text=text.strip(),
            type=question_type,
            options=choices if question_type == "multiple_choice" else [],
            correct_answer=correct,
            explanation=item.get("explanation") if isinstance(item.get("explanation"), str) else "",
            difficulty=difficulty if isinstance(difficulty, str) and difficulty else options.difficulty,
            category=category if isinstance(category, str) and category else understanding.domain,
            cognitive_level=level if level in COGNITIVE_LEVELS else "comprehension",
            related_concept=_related_concept(item),
            provenance="remote",
        )
    except ValueError as e:
        raise ValidationFailed(f"Question failed validation: {e}") from e


def parse_questions(payload: Dict[str, Any], understanding: Understanding, options: GenerationOptions) -> List[Question]:
    items = payload.get("questions")
    if not isinstance(items, list) or not items:
        raise ValidationFailed("Payload has no questions")
    questions = [parse_question(item, understanding, options) for item in items]
    return questions[:options.question_count]


class QuestionSynthesisStage:
    """Remote question generation from an Understanding, falling back to templates."""

    def __init__(self, gateway, fallback_generator: Optional[FallbackQuestionGenerator] = None):
        self.gateway = gateway
        self.fallback_generator = fallback_generator or FallbackQuestionGenerator()

    def run(self, understanding: Understanding, options: GenerationOptions) -> QuestionSynthesisResult:
        prompt = build_question_prompt(understanding, options)
        logger.info(f"Requesting {options.question_count} questions ({options.difficulty})")

        failure: Optional[FailureKind] = None
        try:
            result = self.gateway.send_completion(
                prompt,
                "analysis",
                CompletionOptions(max_tokens=QUESTION_MAX_TOKENS, temperature=QUESTION_TEMPERATURE),
            )
        except GatewayConfigurationError as e:
            logger.error(f"Completion gateway is not configured, using fallback questions: {e}")
            failure = e.kind
            result = None
        except Exception as e:
            logger.exception(f"Question request raised, using fallback questions: {e}")
            failure = FailureKind.REMOTE_UNKNOWN_ERROR
            result = None

        if result is not None and result.success:
            try:
                questions = parse_questions(extract_structured_payload(result.content), understanding, options)
            except (PayloadError, ValidationFailed) as e:
                failure = e.kind
                logger.warning(f"Remote questions rejected ({failure.value}): {e}")
            else:
                logger.info(f"Received {len(questions)} remote questions")
                return QuestionSynthesisResult(questions=questions, generation_type="remote")
        elif result is not None:
            failure = result.error_kind or FailureKind.REMOTE_UNKNOWN_ERROR
            logger.warning(f"Question request failed ({failure.value}), using fallback questions")

        questions = self.fallback_generator.generate(understanding, options)
        return QuestionSynthesisResult(
            questions=questions,
            generation_type="heuristic_from_understanding",
            failure=failure,
        )
