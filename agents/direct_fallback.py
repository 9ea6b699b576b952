import logging
import random
from typing import List, Optional

from agents.fallback_questions import OptionOrdering, correct_first, resolve_difficulty
from analysis.text_analyzer import (
    PLACEHOLDER_TOPIC,
    assess_complexity,
    classify_domain,
    detect_language,
    determine_cognitive_level,
    extract_important_terms,
    resolve_output_language,
    split_sentences,
)
from models import Content, Question, Understanding

logger = logging.getLogger(__name__)

CONTEXT_SENTENCE_LENGTH = 30
MULTIPLE_CHOICE_LIMIT = 3

DOMAIN_QUESTION_TEMPLATES = {
    "programming": {
        "ar": [
            "ما هو الغرض الأساسي من {term} في البرمجة؟",
            "كيف يتم استخدام {term} في تطوير البرمجيات؟",
            "ما هي الخصائص المميزة لـ {term}؟",
            "متى نحتاج لاستخدام {term} في الكود؟",
        ],
        "en": [
            "What is the main purpose of {term} in programming?",
            "How is {term} used in software development?",
            "What are the key characteristics of {term}?",
            "When do we need to use {term} in code?",
        ],
    },
    "science": {
        "ar": [
            "ما هو التفسير العلمي لـ {term}؟",
            "كيف يؤثر {term} على النتائج التجريبية؟",
            "ما هي العلاقة بين {term} والمفاهيم الأخرى؟",
            "ما أهمية {term} في البحث العلمي؟",
        ],
        "en": [
            "What is the scientific explanation for {term}?",
            "How does {term} affect experimental results?",
            "What is the relationship between {term} and other concepts?",
            "What is the importance of {term} in scientific research?",
        ],
    },
    "general": {
        "ar": [
            "ما المقصود بـ {term} في هذا السياق؟",
            "كيف يرتبط {term} بالموضوع الرئيسي؟",
            "ما أهمية فهم {term}؟",
            "ما هي التطبيقات العملية لـ {term}؟",
        ],
        "en": [
            "What is meant by {term} in this context?",
            "How does {term} relate to the main topic?",
            "What is the importance of understanding {term}?",
            "What are the practical applications of {term}?",
        ],
    },
}

TERM_OPTIONS = {
    "ar": [
        "{term} مفهوم أساسي مذكور في النص ويلعب دوراً مهماً في الموضوع",
        "{term} مصطلح ثانوي وليس له تأثير كبير على الفهم العام",
        "{term} يشير إلى شيء مختلف تماماً عن السياق المذكور",
        "{term} غير مرتبط بالموضوع الرئيسي ولا يحتاج لفهمه",
    ],
    "en": [
        "{term} is a fundamental concept mentioned in the text and plays an important role in the topic",
        "{term} is a secondary term with no significant impact on general understanding",
        "{term} refers to something completely different from the mentioned context",
        "{term} is unrelated to the main topic and doesn't need to be understood",
    ],
}

CONTEXT_EXPLANATION = {"ar": 'بناءً على السياق: "{context}..."', "en": 'Based on the context: "{context}..."'}
OPEN_EXPLANATION = {
    "ar": "هذا سؤال مفتوح للتفكير والتأمل في المحتوى",
    "en": "This is an open-ended question for reflection on the content",
}
MINIMAL_SUMMARY = {
    "ar": "تم توليد الأسئلة مباشرة من المحتوى دون فهم مسبق.",
    "en": "Questions were generated directly from the content without a prior understanding.",
}


def _related_sentence(term: str, sentences: List[str], index: int) -> str:
    needle = term.lower()
    for sentence in sentences:
        if needle in sentence.lower():
            return sentence
    return sentences[index % len(sentences)] if sentences else ""


class DirectFallbackGenerator:
    """Questions straight from the raw text, used when no Understanding could be produced."""

    def __init__(self, rng: Optional[random.Random] = None, option_ordering: Optional[OptionOrdering] = None):
        self.rng = rng or random.Random()
        self.order_options = option_ordering or correct_first

    def minimal_understanding(self, content: Content) -> Understanding:
        text = content.raw_text
        detected = detect_language(text)
        language = resolve_output_language(detected, content.options.language)
        return Understanding(
            summary=MINIMAL_SUMMARY[language],
            main_topic=PLACEHOLDER_TOPIC[language],
            detected_language=detected,
            complexity=assess_complexity(text),
            domain=classify_domain(text).domain,
            provenance="heuristic",
        )

    def generate(self, content: Content) -> List[Question]:
        text = content.raw_text
        options = content.options
        language = resolve_output_language(detect_language(text), options.language)
        domain = classify_domain(text).domain

        sentences = split_sentences(text, CONTEXT_SENTENCE_LENGTH)
        terms = extract_important_terms(text, domain)
        templates = DOMAIN_QUESTION_TEMPLATES.get(domain, DOMAIN_QUESTION_TEMPLATES["general"])[language]

        questions = []
        for index, term in enumerate(terms[:options.question_count]):
            question_text = self.rng.choice(templates).format(term=term)
            fields = dict(
                text=question_text,
                difficulty=resolve_difficulty(options.difficulty, self.rng),
                category=domain,
                cognitive_level=determine_cognitive_level(question_text),
                related_concept=term,
                provenance="heuristic",
            )

            if index < MULTIPLE_CHOICE_LIMIT:
                context = _related_sentence(term, sentences, index)
                ordered, correct = self.order_options([option.format(term=term) for option in TERM_OPTIONS[language]])
                questions.append(Question(
                    type="multiple_choice",
                    options=ordered,
                    correct_answer=correct,
                    explanation=CONTEXT_EXPLANATION[language].format(context=context[:100]),
                    **fields,
                ))
            else:
                questions.append(Question(type="open_ended", explanation=OPEN_EXPLANATION[language], **fields))

        logger.info(f"Direct fallback produced {len(questions)} questions from {len(terms)} terms (domain={domain})")
        return questions
