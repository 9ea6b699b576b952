import re
from collections import Counter
from typing import List

from analysis.vocabulary import (
    COGNITIVE_LEVEL_RULES,
    DOMAIN_KEYWORDS,
    DOMAIN_ORDER,
    DOMAIN_VOCABULARY,
    IMPORTANT_TERMS,
)
from models import (
    CodeFence,
    DomainClassification,
    FileMetadata,
    Heading,
    ListItem,
    Quote,
    TableRow,
    TextStructure,
)

ARABIC_CHAR = re.compile(r"[\u0600-\u06FF]")
LATIN_CHAR = re.compile(r"[A-Za-z]")
SENTENCE_BOUNDARY = re.compile(r"[.!?؟]+")
WORD = re.compile(r"[\w\u064B-\u065F\u0670]+")

HEADING_LINE = re.compile(r"^(#{1,6})\s+(.+)$")
BULLET_LINE = re.compile(r"^[-*+•]\s+")
NUMBERED_LINE = re.compile(r"^\d+[.)]\s+")
CODE_FENCE_LINE = re.compile(r"^`{3,}")
QUOTE_LINE = re.compile(r"^>\s+")
KEY_POINT_LINE = re.compile(r"^\s*(?:[-*•]|\d+\.)\s+(.+)$")
FIRST_HEADING = re.compile(r"^#+\s+(.+)$", re.MULTILINE)

IMPORTANT_SENTENCE_LENGTH = 20
LONG_WORD_LENGTH = 6
CONCEPT_WORD_MIN_LENGTH = 5

PLACEHOLDER_TOPIC = {"ar": "موضوع علمي", "en": "Scientific topic"}
DEFINITION_PLACEHOLDER = {
    "ar": "مفهوم {concept} مذكور في المحتوى",
    "en": "The concept {concept} is mentioned in the content",
}


def detect_language(text: str) -> str:
    """Classify text as ar / en / mixed / unknown from its Arabic vs. Latin letter ratio."""
    arabic = len(ARABIC_CHAR.findall(text))
    latin = len(LATIN_CHAR.findall(text))
    total = arabic + latin
    if total == 0:
        return "unknown"

    arabic_ratio = arabic / total
    latin_ratio = latin / total
    if arabic_ratio > 0.7:
        return "ar"
    if latin_ratio > 0.7:
        return "en"
    if arabic_ratio > 0.3 and latin_ratio > 0.3:
        return "mixed"
    return "ar" if arabic_ratio >= latin_ratio else "en"


def resolve_output_language(detected: str, requested: str) -> str:
    """Language questions and summaries are written in: the content's, unless it is mixed or unknown."""
    return detected if detected in ("ar", "en") else requested


def split_sentences(text: str, min_length: int = 0) -> List[str]:
    sentences = []
    for raw in SENTENCE_BOUNDARY.split(text):
        sentence = " ".join(raw.split())
        if len(sentence) > min_length:
            sentences.append(sentence)
    return sentences


def word_frequencies(text: str, min_length: int = CONCEPT_WORD_MIN_LENGTH) -> Counter:
    """Lower-cased word counts, in first-occurrence order."""
    counts = Counter()
    for word in WORD.findall(text.lower()):
        if len(word) >= min_length and not word.isdigit():
            counts[word] += 1
    return counts


def classify_domain(text: str) -> DomainClassification:
    lowered = text.lower()
    weights = {
        domain: sum(lowered.count(keyword.lower()) for keyword in DOMAIN_KEYWORDS[domain])
        for domain in DOMAIN_ORDER
    }

    dominant, max_weight = "general", 0
    for domain in DOMAIN_ORDER:
        if weights[domain] > max_weight:
            dominant, max_weight = domain, weights[domain]

    word_count = len(text.split())
    confidence = max_weight / (word_count / 100) if word_count else 0.0
    return DomainClassification(domain=dominant, confidence=confidence, weights=weights)


def assess_complexity(text: str) -> str:
    words = text.split()
    sentences = split_sentences(text)
    if not words or not sentences:
        return "beginner"

    avg_word_length = sum(len(word) for word in words) / len(words)
    avg_sentence_length = len(words) / len(sentences)
    long_word_ratio = sum(1 for word in words if len(word) > LONG_WORD_LENGTH) / len(words)

    score = 0
    if avg_word_length > 6:
        score += 1
    if avg_sentence_length > 20:
        score += 1
    if long_word_ratio > 0.3:
        score += 1

    if score >= 2:
        return "advanced"
    if score == 1:
        return "intermediate"
    return "beginner"


def extract_concepts(text: str, domain: str, cap: int = 15) -> List[str]:
    """Domain vocabulary hits (vocabulary order), then the most frequent long words."""
    lowered = text.lower()
    concepts = [term for term in DOMAIN_VOCABULARY.get(domain, []) if term.lower() in lowered]
    seen = {concept.lower() for concept in concepts}

    for word, _ in word_frequencies(text).most_common():
        if len(concepts) >= cap:
            break
        if word not in seen:
            concepts.append(word)
            seen.add(word)

    return concepts[:cap]


def extract_important_terms(text: str, domain: str, cap: int = 10) -> List[str]:
    lowered = text.lower()
    terms = [term for term in IMPORTANT_TERMS.get(domain, []) if term.lower() in lowered]
    frequent = [word for word, _ in word_frequencies(text).most_common(10)]
    for word in frequent:
        if word not in terms:
            terms.append(word)
    return terms[:cap]


def extract_structure(text: str) -> TextStructure:
    """Line-by-line syntactic scan for headings, lists, tables, code fences and quotes."""
    structure = TextStructure()

    for index, line in enumerate(text.split("\n")):
        stripped = line.strip()
        line_number = index + 1
        if not stripped:
            continue

        heading = HEADING_LINE.match(stripped)
        if heading:
            structure.headings.append(
                Heading(text=heading.group(2).strip(), level=len(heading.group(1)), line=line_number)
            )

        if BULLET_LINE.match(stripped):
            structure.lists.append(ListItem(text=stripped, type="unordered", line=line_number))
        elif NUMBERED_LINE.match(stripped):
            structure.lists.append(ListItem(text=stripped, type="ordered", line=line_number))

        if "|" in stripped:
            cells = stripped.strip("|").split("|")
            if len(cells) > 2:
                structure.tables.append(TableRow(text=stripped, columns=len(cells), line=line_number))

        if CODE_FENCE_LINE.match(stripped):
            structure.code_blocks.append(CodeFence(language=stripped.lstrip("`").strip(), line=line_number))

        if QUOTE_LINE.match(stripped):
            structure.quotes.append(Quote(text=QUOTE_LINE.sub("", stripped), line=line_number))

    return structure


def extract_main_topic(text: str, language: str = "ar") -> str:
    heading = FIRST_HEADING.search(text)
    if heading:
        return heading.group(1).strip()

    sentences = split_sentences(text, IMPORTANT_SENTENCE_LENGTH)
    if sentences:
        return sentences[0][:50]

    return PLACEHOLDER_TOPIC.get(language, PLACEHOLDER_TOPIC["ar"])


def extract_key_points(text: str, sentences: List[str]) -> List[str]:
    points = []
    for line in text.split("\n"):
        match = KEY_POINT_LINE.match(line)
        if match and len(match.group(1).strip()) > 10:
            points.append(match.group(1).strip())

    if not points:
        points = [sentence[:100] for sentence in sentences[:4] if len(sentence) > IMPORTANT_SENTENCE_LENGTH]

    return points[:5]


def extract_concept_definition(text: str, concept: str, language: str = "ar") -> str:
    needle = concept.lower()
    for sentence in split_sentences(text):
        if needle in sentence.lower() and 20 < len(sentence) < 200:
            return sentence
    template = DEFINITION_PLACEHOLDER.get(language, DEFINITION_PLACEHOLDER["ar"])
    return template.format(concept=concept)


def assess_concept_importance(text: str, concept: str) -> str:
    lowered = text.lower()
    needle = concept.lower()
    frequency = lowered.count(needle)
    if frequency > 3 or needle in lowered[:200]:
        return "high"
    if frequency > 1:
        return "medium"
    return "low"


def determine_cognitive_level(question_text: str) -> str:
    lowered = question_text.lower()
    for level, markers in COGNITIVE_LEVEL_RULES:
        if any(marker in lowered for marker in markers):
            return level
    return "comprehension"


def profile_text(raw_text: str) -> FileMetadata:
    """Normalize whitespace and compute the metadata an extraction collaborator would supply."""
    text = raw_text.replace("\r\n", "\n").replace("\r", "\n")
    text = re.sub(r"\n{3,}", "\n\n", text)
    text = re.sub(r"[ \t]+", " ", text).strip()

    words = text.split()
    sentences = split_sentences(text)
    paragraphs = [p for p in re.split(r"\n\s*\n", text) if p.strip()]

    return FileMetadata(
        word_count=len(words),
        sentence_count=len(sentences),
        paragraph_count=len(paragraphs),
        char_count=len(text),
        detected_language=detect_language(text),
        complexity=assess_complexity(text),
        structure=extract_structure(text),
        average_words_per_sentence=round(len(words) / len(sentences)) if sentences else 0,
    )
