import logging
from typing import Any, Dict, List, Optional, get_args

from agents.prompts import render_prompt
from analysis.text_analyzer import (
    IMPORTANT_SENTENCE_LENGTH,
    assess_complexity,
    assess_concept_importance,
    classify_domain,
    detect_language,
    extract_concept_definition,
    extract_concepts,
    extract_key_points,
    extract_main_topic,
    resolve_output_language,
    split_sentences,
)
from analysis.vocabulary import DOMAIN_TESTABLE_POINTS
from config import UNDERSTANDING_MAX_TOKENS, UNDERSTANDING_TEMPERATURE
from errors import FailureKind, GatewayConfigurationError, PayloadError, UnderstandingFault, ValidationFailed
from models import (
    MAX_CONCEPTS,
    MAX_TESTABLE_POINTS,
    Complexity,
    CompletionOptions,
    Concept,
    Content,
    DetectedLanguage,
    Difficulty,
    Domain,
    FileMetadata,
    Importance,
    PointType,
    TestablePoint,
    Understanding,
    UnderstandingResult,
    UnderstandingState,
)
from utils.extraction import extract_structured_payload

logger = logging.getLogger(__name__)

SUMMARY_INTRO = {"ar": "يتناول هذا المحتوى {subject}.", "en": "This content discusses {subject}."}
SUMMARY_CLOSING = {
    "ar": "تغطي المادة المفاهيم الأساسية وتطبيقاتها.",
    "en": "The material covers key concepts and their applications.",
}
LIST_SEPARATOR = {"ar": "، ", "en": ", "}

UNDERSTAND_POINT = {
    "ar": ("فهم مفهوم {concept}", "{concept} مفهوم أساسي في المحتوى"),
    "en": ("Understanding the concept of {concept}", "{concept} is a core concept in the content"),
}
COMPARISON_POINT = {
    "ar": ("مقارنة بين {first} و {second}", "المقارنة تعمق الفهم"),
    "en": ("Comparing {first} and {second}", "Comparison deepens understanding"),
}


def prompt_language(detected: str, requested: str) -> str:
    """Arabic prompts for Arabic or mixed content, English for English, the request's otherwise."""
    if detected == "en":
        return "en"
    if detected in ("ar", "mixed"):
        return "ar"
    return requested


def _file_info(metadata: Optional[FileMetadata], language: str) -> str:
    if metadata is None:
        return ""
    return render_prompt(
        "file_info",
        language,
        word_count=metadata.word_count,
        sentence_count=metadata.sentence_count,
        paragraph_count=metadata.paragraph_count,
        complexity=metadata.complexity,
        headings=len(metadata.structure.headings),
        lists=len(metadata.structure.lists),
        tables=len(metadata.structure.tables),
    )


def build_understanding_prompt(content: Content) -> str:
    detected = detect_language(content.raw_text)
    language = prompt_language(detected, content.options.language)
    return render_prompt(
        "understanding",
        language,
        content=content.raw_text,
        file_info=_file_info(content.file_metadata, language),
        detected_language=detected,
    )


def _pick(value: Any, allowed, default):
    return value if value in get_args(allowed) else default


def _coerce_concept(item: Any) -> Optional[Concept]:
    if isinstance(item, str) and item.strip():
        return Concept(name=item.strip())
    if not isinstance(item, dict) or not isinstance(item.get("name"), str) or not item["name"].strip():
        return None
    related = item.get("relatedTo") or item.get("related_to") or []
    return Concept(
        name=item["name"].strip(),
        definition=item.get("definition") if isinstance(item.get("definition"), str) else "",
        importance=_pick(item.get("importance"), Importance, "medium"),
        related_to=[r for r in related if isinstance(r, str)] if isinstance(related, list) else [],
    )


def _coerce_point(item: Any) -> Optional[TestablePoint]:
    if not isinstance(item, dict) or not isinstance(item.get("point"), str) or not item["point"].strip():
        return None
    return TestablePoint(
        point=item["point"].strip(),
        type=_pick(item.get("type"), PointType, "understanding"),
        difficulty=_pick(item.get("difficulty"), Difficulty, "medium"),
        why=item.get("why") if isinstance(item.get("why"), str) else "",
    )


def parse_understanding(payload: Dict[str, Any], content: Content) -> Understanding:
    """Validate a remote understanding payload and normalize it.

    Requires a summary plus at least one usable concept or testable point;
    anything the payload omits is filled in from the local analyzers.
    """
    summary = payload.get("summary")
    if not isinstance(summary, str) or not summary.strip():
        raise ValidationFailed("Understanding payload has no summary")

    raw_concepts = payload.get("concepts") or []
    raw_points = payload.get("testablePoints") or payload.get("testable_points") or []
    if not isinstance(raw_concepts, list) or not isinstance(raw_points, list):
        raise ValidationFailed("concepts and testablePoints must be lists")

    concepts = [c for c in (_coerce_concept(item) for item in raw_concepts) if c is not None]
    points = [p for p in (_coerce_point(item) for item in raw_points) if p is not None]
    if not concepts and not points:
        raise ValidationFailed("Understanding payload has neither concepts nor testable points")

    text = content.raw_text
    detected = _pick(payload.get("detectedLanguage"), DetectedLanguage, None) or detect_language(text)
    domain = _pick(payload.get("domain"), Domain, None) or classify_domain(text).domain
    complexity = _pick(payload.get("complexity"), Complexity, None) or assess_complexity(text)

    main_topic = payload.get("mainTopic")
    if not isinstance(main_topic, str) or not main_topic.strip():
        main_topic = extract_main_topic(text, resolve_output_language(detected, content.options.language))

    key_points = payload.get("keyPoints") or []
    if not isinstance(key_points, list):
        key_points = []

    return Understanding(
        summary=summary.strip(),
        main_topic=main_topic.strip(),
        key_points=[p.strip() for p in key_points if isinstance(p, str) and p.strip()],
        concepts=concepts,
        testable_points=points,
        detected_language=detected,
        complexity=complexity,
        domain=domain,
        provenance="remote",
    )


def _summarize(concept_names: List[str], sentences: List[str], main_topic: str, language: str) -> str:
    subject = LIST_SEPARATOR[language].join(concept_names[:3]) or main_topic
    parts = [SUMMARY_INTRO[language].format(subject=subject)]
    if sentences:
        parts.append(f"{sentences[0][:100]}.")
    parts.append(SUMMARY_CLOSING[language])
    return " ".join(parts)


def identify_testable_points(concept_names: List[str], domain: str, language: str) -> List[TestablePoint]:
    points = []
    point_text, why = UNDERSTAND_POINT[language]
    for concept in concept_names[:3]:
        points.append(TestablePoint(
            point=point_text.format(concept=concept),
            type="understanding",
            difficulty="medium",
            why=why.format(concept=concept),
        ))

    domain_point = DOMAIN_TESTABLE_POINTS.get(domain, DOMAIN_TESTABLE_POINTS["general"])
    point_text, why = domain_point[language]
    points.append(TestablePoint(
        point=point_text,
        type=domain_point["type"],
        difficulty=domain_point["difficulty"],
        why=why,
    ))

    if len(concept_names) > 1:
        point_text, why = COMPARISON_POINT[language]
        points.append(TestablePoint(
            point=point_text.format(first=concept_names[0], second=concept_names[1]),
            type="analysis",
            difficulty="medium",
            why=why,
        ))

    return points[:MAX_TESTABLE_POINTS]


def build_fallback_understanding(content: Content) -> Understanding:
    """Deterministic Understanding built only from the local text analyzers."""
    text = content.raw_text
    detected = detect_language(text)
    language = resolve_output_language(detected, content.options.language)
    domain = classify_domain(text).domain

    important_sentences = split_sentences(text, IMPORTANT_SENTENCE_LENGTH)[:5]
    concept_names = extract_concepts(text, domain)[:MAX_CONCEPTS]
    concepts = [
        Concept(
            name=name,
            definition=extract_concept_definition(text, name, language),
            importance=assess_concept_importance(text, name),
            related_to=[other for other in concept_names if other != name][:2],
        )
        for name in concept_names
    ]
    main_topic = extract_main_topic(text, language)

    return Understanding(
        summary=_summarize(concept_names, important_sentences, main_topic, language),
        main_topic=main_topic,
        key_points=extract_key_points(text, important_sentences),
        concepts=concepts,
        testable_points=identify_testable_points(concept_names, domain, language),
        detected_language=detected,
        complexity=assess_complexity(text),
        domain=domain,
        provenance="heuristic",
    )


class UnderstandingStage:
    """One remote attempt at a deep understanding, with a deterministic local fallback.

    Every classified failure (gateway error kinds, missing or malformed
    payloads, failed validation) ends in a heuristic Understanding. Only an
    exception escaping the gateway or the local builder is raised, as
    UnderstandingFault.
    """

    def __init__(self, gateway):
        self.gateway = gateway

    def run(self, content: Content) -> UnderstandingResult:
        trace = [UnderstandingState.INIT]
        logger.info(f"Requesting deep understanding ({len(content.raw_text)} chars)")

        try:
            prompt = build_understanding_prompt(content)
            result = self.gateway.send_completion(
                prompt,
                "analysis",
                CompletionOptions(max_tokens=UNDERSTANDING_MAX_TOKENS, temperature=UNDERSTANDING_TEMPERATURE),
            )
        except GatewayConfigurationError as e:
            logger.error(f"Completion gateway is not configured: {e}")
            raise UnderstandingFault(f"Completion gateway is not configured: {e}", kind=e.kind) from e
        except Exception as e:
            logger.error(f"Understanding request raised instead of returning a result: {e}")
            raise UnderstandingFault(f"Understanding request failed: {e}") from e
        trace.append(UnderstandingState.REMOTE_ATTEMPTED)

        failure: Optional[FailureKind] = None
        if result.success:
            try:
                understanding = parse_understanding(extract_structured_payload(result.content), content)
            except (PayloadError, ValidationFailed) as e:
                failure = e.kind
                logger.warning(f"Remote understanding rejected ({failure.value}): {e}")
            else:
                trace.extend([UnderstandingState.REMOTE_SUCCEEDED, UnderstandingState.DONE])
                logger.info(
                    f"Remote understanding: {len(understanding.concepts)} concepts, "
                    f"{len(understanding.testable_points)} testable points"
                )
                return UnderstandingResult(understanding=understanding, outcome="remote", trace=trace)
        else:
            failure = result.error_kind or FailureKind.REMOTE_UNKNOWN_ERROR
            logger.warning(f"Understanding request failed ({failure.value}), building fallback understanding")

        trace.append(UnderstandingState.REMOTE_FAILED)
        try:
            understanding = build_fallback_understanding(content)
        except Exception as e:
            logger.error(f"Fallback understanding failed: {e}")
            raise UnderstandingFault(f"Fallback understanding failed: {e}") from e
        trace.extend([UnderstandingState.FALLBACK_BUILT, UnderstandingState.DONE])

        logger.info(
            f"Fallback understanding: domain={understanding.domain}, {len(understanding.concepts)} concepts, "
            f"{len(understanding.testable_points)} testable points"
        )
        return UnderstandingResult(understanding=understanding, outcome="fallback", failure=failure, trace=trace)
