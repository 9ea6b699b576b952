import logging
import math
import random
from typing import Callable, List, Optional, Tuple

from analysis.text_analyzer import resolve_output_language
from models import Concept, GenerationOptions, Question, TestablePoint, Understanding

logger = logging.getLogger(__name__)

CONCEPT_SHARE = 0.6
POINT_SHARE = 0.4
DIFFICULTIES = ("easy", "medium", "hard")

# Receives options with the correct one first, returns (ordered options, index of the correct one).
OptionOrdering = Callable[[List[str]], Tuple[List[str], int]]


def correct_first(options: List[str]) -> Tuple[List[str], int]:
    return list(options), 0


def shuffled_options(rng: random.Random) -> OptionOrdering:
    def order(options: List[str]) -> Tuple[List[str], int]:
        positions = list(range(len(options)))
        rng.shuffle(positions)
        return [options[i] for i in positions], positions.index(0)
    return order


def resolve_difficulty(requested: str, rng: random.Random) -> str:
    return rng.choice(DIFFICULTIES) if requested == "mixed" else requested


CONCEPT_QUESTION_TEMPLATES = {
    "ar": {
        "definition": 'ما هو المقصود بـ "{name}" كما ورد في المحتوى؟',
        "purpose": 'ما هو الغرض الأساسي من "{name}" في هذا السياق؟',
        "application": 'كيف يتم تطبيق مفهوم "{name}" عملياً؟',
        "importance": 'لماذا يعتبر "{name}" مهماً في {topic}؟',
    },
    "en": {
        "definition": 'What is meant by "{name}" as mentioned in the content?',
        "purpose": 'What is the main purpose of "{name}" in this context?',
        "application": 'How is the concept of "{name}" applied practically?',
        "importance": 'Why is "{name}" important in {topic}?',
    },
}

CONCEPT_OPTIONS = {
    "ar": [
        "{name} مفهوم أساسي مذكور في المحتوى بوضوح",
        "{name} مصطلح ثانوي وليس له أهمية كبيرة",
        "{name} يشير إلى شيء مختلف تماماً عن السياق",
        "{name} غير مرتبط بموضوع {topic}",
    ],
    "en": [
        "{name} is a fundamental concept clearly mentioned in the content",
        "{name} is a secondary term with no significant importance",
        "{name} refers to something completely different from the context",
        "{name} is unrelated to the topic of {topic}",
    ],
}

CONCEPT_EXPLANATION = {"ar": "بناءً على المحتوى: {definition}", "en": "Based on the content: {definition}"}

POINT_QUESTION_TEMPLATES = {
    "ar": {
        "understanding": "بناءً على المحتوى، {point}؟",
        "application": "كيف يمكن تطبيق {point} في الممارسة العملية؟",
        "analysis": "حلل العلاقة بين {point} والمفاهيم الأخرى في المحتوى؟",
    },
    "en": {
        "understanding": "Based on the content, {point}?",
        "application": "How can {point} be applied in practice?",
        "analysis": "Analyze the relationship between {point} and other concepts in the content?",
    },
}

POINT_OPTIONS = {
    "ar": [
        "{point} نقطة مهمة ومرتبطة بالمحتوى المعروض",
        "{point} نقطة ثانوية وليست ذات أهمية",
        "{point} غير مذكورة في المحتوى",
        "{point} تتعارض مع المحتوى المعروض",
    ],
    "en": [
        "{point} is an important point related to the presented content",
        "{point} is a secondary point with no importance",
        "{point} is not mentioned in the content",
        "{point} contradicts the presented content",
    ],
}

POINT_EXPLANATION = {
    "ar": ("هذا السؤال يختبر {why}", "فهم المفهوم المهم"),
    "en": ("This question tests {why}", "understanding of the important concept"),
}

COMPARISON_QUESTION = {
    "ar": 'ما هو الفرق الأساسي بين "{first}" و "{second}" كما ورد في المحتوى؟',
    "en": 'What is the main difference between "{first}" and "{second}" as mentioned in the content?',
}

COMPARISON_OPTIONS = {
    "ar": [
        "{first} و {second} لهما خصائص وتطبيقات مختلفة كما هو موضح في المحتوى",
        "{first} و {second} متطابقان تماماً في الوظيفة",
        "{second} أهم من {first} في جميع الحالات",
        "لا يوجد فرق بين {first} و {second}",
    ],
    "en": [
        "{first} and {second} have different characteristics and applications as shown in the content",
        "{first} and {second} are exactly the same in function",
        "{second} is more important than {first} in all cases",
        "There is no difference between {first} and {second}",
    ],
}

COMPARISON_EXPLANATION = {
    "ar": "المقارنة بين المفاهيم تساعد على فهم خصائص كل منها",
    "en": "Comparing concepts helps understand the characteristics of each",
}

POINT_COGNITIVE_LEVEL = {
    "understanding": "comprehension",
    "application": "application",
    "analysis": "analysis",
}


class FallbackQuestionGenerator:
    """Template-driven questions built from an Understanding's concepts and testable points."""

    def __init__(self, rng: Optional[random.Random] = None, option_ordering: Optional[OptionOrdering] = None):
        self.rng = rng or random.Random()
        self.order_options = option_ordering or correct_first

    def generate(self, understanding: Understanding, options: GenerationOptions) -> List[Question]:
        count = options.question_count
        language = resolve_output_language(understanding.detected_language, options.language)
        concept_quota = math.ceil(count * CONCEPT_SHARE)
        point_quota = math.ceil(count * POINT_SHARE)

        questions = [
            self._concept_question(concept, understanding, language, options.difficulty)
            for concept in understanding.concepts[:concept_quota]
        ]
        questions.extend(
            self._point_question(point, understanding, language)
            for point in understanding.testable_points[:point_quota]
        )
        if len(understanding.concepts) > 1:
            questions.append(self._comparison_question(
                understanding.concepts[0], understanding.concepts[1], understanding, language, options.difficulty
            ))

        logger.info(f"Generated {min(len(questions), count)} fallback questions from understanding (requested {count})")
        return questions[:count]

    def _multiple_choice(self, text: str, options: List[str], **fields) -> Question:
        ordered, correct = self.order_options(options)
        return Question(
            text=text,
            type="multiple_choice",
            options=ordered,
            correct_answer=correct,
            provenance="heuristic",
            **fields,
        )

    def _concept_question(self, concept: Concept, understanding: Understanding, language: str, difficulty: str) -> Question:
        templates = CONCEPT_QUESTION_TEMPLATES[language]
        template = templates[self.rng.choice(list(templates))]
        values = {"name": concept.name, "topic": understanding.main_topic}

        options = [option.format(**values) for option in CONCEPT_OPTIONS[language]]
        if concept.definition:
            options[0] = concept.definition

        return self._multiple_choice(
            template.format(**values),
            options,
            explanation=CONCEPT_EXPLANATION[language].format(definition=concept.definition or options[0]),
            difficulty=resolve_difficulty(difficulty, self.rng),
            category=understanding.domain,
            cognitive_level="comprehension",
            related_concept=concept.name,
        )

    def _point_question(self, point: TestablePoint, understanding: Understanding, language: str) -> Question:
        templates = POINT_QUESTION_TEMPLATES[language]
        template = templates.get(point.type, templates["understanding"])
        explanation, default_why = POINT_EXPLANATION[language]

        return self._multiple_choice(
            template.format(point=point.point),
            [option.format(point=point.point) for option in POINT_OPTIONS[language]],
            explanation=explanation.format(why=point.why or default_why),
            difficulty=point.difficulty,
            category=understanding.domain,
            cognitive_level=POINT_COGNITIVE_LEVEL[point.type],
            related_concept=point.point,
        )

    def _comparison_question(
        self, first: Concept, second: Concept, understanding: Understanding, language: str, difficulty: str
    ) -> Question:
        values = {"first": first.name, "second": second.name}
        return self._multiple_choice(
            COMPARISON_QUESTION[language].format(**values),
            [option.format(**values) for option in COMPARISON_OPTIONS[language]],
            explanation=COMPARISON_EXPLANATION[language],
            difficulty=resolve_difficulty(difficulty, self.rng),
            category=understanding.domain,
            cognitive_level="analysis",
            related_concept=f"{first.name} vs {second.name}",
        )
