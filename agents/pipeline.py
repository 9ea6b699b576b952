import logging
import random
import time
from typing import Any, List, Mapping, Optional, Union

from pydantic import ValidationError

from agents.direct_fallback import DirectFallbackGenerator
from agents.fallback_questions import FallbackQuestionGenerator, OptionOrdering
from agents.question_synthesis import QuestionSynthesisStage
from agents.understanding import UnderstandingStage
from errors import FailureKind, PreconditionViolation, UnderstandingFault
from models import COGNITIVE_LEVELS, Content, PipelineMetadata, PipelineResult, Question

logger = logging.getLogger(__name__)


def cognitive_distribution(questions: List[Question]) -> dict:
    distribution = {level: 0 for level in COGNITIVE_LEVELS}
    for question in questions:
        distribution[question.cognitive_level] += 1
    return distribution


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


def check_preconditions(content: Union[Content, Mapping[str, Any]]) -> Content:
    """Coerce the input into Content and reject malformed generation options."""
    if not isinstance(content, Content):
        try:
            content = Content.model_validate(content)
        except ValidationError as e:
            raise PreconditionViolation(f"Invalid pipeline input: {e}") from e

    options = content.options
    if options.question_count < 1:
        raise PreconditionViolation(f"question_count must be at least 1, got {options.question_count}")
    if not options.question_types:
        raise PreconditionViolation("question_types must not be empty")
    return content


class PipelineOrchestrator:
    """Understanding, then question synthesis, with a direct fallback when understanding cannot complete.

    Always returns a PipelineResult; the only exception reaching the caller is
    PreconditionViolation, raised before any stage runs.
    """

    def __init__(
        self,
        gateway,
        *,
        rng: Optional[random.Random] = None,
        option_ordering: Optional[OptionOrdering] = None,
    ):
        rng = rng or random.Random()
        self.understanding_stage = UnderstandingStage(gateway)
        self.question_stage = QuestionSynthesisStage(gateway, FallbackQuestionGenerator(rng, option_ordering))
        self.direct_fallback = DirectFallbackGenerator(rng, option_ordering)

    def run(self, content: Union[Content, Mapping[str, Any]]) -> PipelineResult:
        content = check_preconditions(content)
        failures: List[FailureKind] = []

        started = time.perf_counter()
        try:
            stage_result = self.understanding_stage.run(content)
        except UnderstandingFault as e:
            understanding_ms = _elapsed_ms(started)
            logger.warning(f"Understanding could not complete, generating questions directly: {e}")
            failures.append(e.kind)

            started = time.perf_counter()
            understanding = self.direct_fallback.minimal_understanding(content)
            questions = self.direct_fallback.generate(content)
            generation_type = "direct_heuristic"
        else:
            understanding_ms = _elapsed_ms(started)
            understanding = stage_result.understanding
            if stage_result.failure is not None:
                failures.append(stage_result.failure)

            started = time.perf_counter()
            synthesis = self.question_stage.run(understanding, content.options)
            questions = synthesis.questions
            generation_type = synthesis.generation_type
            if synthesis.failure is not None:
                failures.append(synthesis.failure)
        generation_ms = _elapsed_ms(started)

        questions = questions[:content.options.question_count]
        logger.info(
            f"Pipeline finished: {len(questions)} questions, generation_type={generation_type}, "
            f"domain={understanding.domain}, failures={[f.value for f in failures]}"
        )
        return PipelineResult(
            understanding=understanding,
            questions=questions,
            metadata=PipelineMetadata(
                domain=understanding.domain,
                generation_type=generation_type,
                cognitive_distribution=cognitive_distribution(questions),
                failures=failures,
                understanding_time_ms=understanding_ms,
                generation_time_ms=generation_ms,
            ),
        )
