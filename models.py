from enum import Enum
from typing import Dict, List, Literal, Optional, Set

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from config import DEFAULT_MAX_TOKENS, DEFAULT_QUESTION_COUNT, DEFAULT_TEMPERATURE, DEFAULT_TOP_P, MAX_QUESTION_COUNT
from errors import FailureKind

Language = Literal["ar", "en"]
DetectedLanguage = Literal["ar", "en", "mixed", "unknown"]
Difficulty = Literal["easy", "medium", "hard"]
RequestedDifficulty = Literal["easy", "medium", "hard", "mixed"]
Complexity = Literal["beginner", "intermediate", "advanced"]
Domain = Literal["programming", "mathematics", "science", "literature", "history", "business", "general"]
Importance = Literal["high", "medium", "low"]
PointType = Literal["understanding", "application", "analysis"]
QuestionType = Literal["multiple_choice", "open_ended"]
RequestedQuestionType = Literal["multiple_choice", "open_ended", "true_false", "short_answer"]
CognitiveLevel = Literal["knowledge", "comprehension", "application", "analysis", "synthesis", "evaluation"]
Provenance = Literal["remote", "heuristic"]
GenerationType = Literal["remote", "heuristic_from_understanding", "direct_heuristic"]
ModelAlias = Literal["text", "chat", "analysis", "coding"]

COGNITIVE_LEVELS = ("knowledge", "comprehension", "application", "analysis", "synthesis", "evaluation")

MAX_KEY_POINTS = 5
MAX_CONCEPTS = 8
MAX_TESTABLE_POINTS = 6
OPTION_COUNT = 4


class GenerationOptions(BaseModel):
    question_count: int = DEFAULT_QUESTION_COUNT
    difficulty: RequestedDifficulty = "medium"
    language: Language = "ar"
    question_types: Set[RequestedQuestionType] = Field(default_factory=lambda: {"multiple_choice"})


class Heading(BaseModel):
    text: str
    level: int
    line: int


class ListItem(BaseModel):
    text: str
    type: Literal["ordered", "unordered"]
    line: int


class TableRow(BaseModel):
    text: str
    columns: int
    line: int


class CodeFence(BaseModel):
    language: str
    line: int


class Quote(BaseModel):
    text: str
    line: int


class TextStructure(BaseModel):
    headings: List[Heading] = Field(default_factory=list)
    lists: List[ListItem] = Field(default_factory=list)
    tables: List[TableRow] = Field(default_factory=list)
    code_blocks: List[CodeFence] = Field(default_factory=list)
    quotes: List[Quote] = Field(default_factory=list)


class FileMetadata(BaseModel):
    word_count: int = 0
    sentence_count: int = 0
    paragraph_count: int = 0
    char_count: int = 0
    detected_language: DetectedLanguage = "unknown"
    complexity: Complexity = "beginner"
    structure: TextStructure = Field(default_factory=TextStructure)
    average_words_per_sentence: int = 0


class Content(BaseModel):
    model_config = ConfigDict(frozen=True)

    raw_text: str
    file_metadata: Optional[FileMetadata] = None
    options: GenerationOptions = Field(default_factory=GenerationOptions)


class DomainClassification(BaseModel):
    domain: Domain
    confidence: float
    weights: Dict[str, int]


class Concept(BaseModel):
    name: str
    definition: str = ""
    importance: Importance = "medium"
    related_to: List[str] = Field(default_factory=list)


class TestablePoint(BaseModel):
    __test__ = False

    point: str
    type: PointType = "understanding"
    difficulty: Difficulty = "medium"
    why: str = ""


class Understanding(BaseModel):
    summary: str
    main_topic: str
    key_points: List[str] = Field(default_factory=list)
    concepts: List[Concept] = Field(default_factory=list)
    testable_points: List[TestablePoint] = Field(default_factory=list)
    detected_language: DetectedLanguage = "unknown"
    complexity: Complexity = "beginner"
    domain: Domain = "general"
    provenance: Provenance

    @field_validator("key_points")
    @classmethod
    def _bound_key_points(cls, value: List[str]) -> List[str]:
        return value[:MAX_KEY_POINTS]

    @field_validator("concepts")
    @classmethod
    def _bound_concepts(cls, value: List[Concept]) -> List[Concept]:
        return value[:MAX_CONCEPTS]

    @field_validator("testable_points")
    @classmethod
    def _bound_testable_points(cls, value: List[TestablePoint]) -> List[TestablePoint]:
        return value[:MAX_TESTABLE_POINTS]


class Question(BaseModel):
    text: str
    type: QuestionType
    options: List[str] = Field(default_factory=list)
    correct_answer: Optional[int] = None
    explanation: str = ""
    difficulty: str = "medium"
    category: str = "general"
    cognitive_level: CognitiveLevel = "comprehension"
    related_concept: Optional[str] = None
    provenance: Provenance

    @model_validator(mode="after")
    def _check_shape(self) -> "Question":
        if self.type == "multiple_choice":
            if len(self.options) != OPTION_COUNT:
                raise ValueError(f"multiple_choice questions need {OPTION_COUNT} options, got {len(self.options)}")
            if self.correct_answer is None or not 0 <= self.correct_answer < OPTION_COUNT:
                raise ValueError(f"correct_answer out of range: {self.correct_answer}")
        elif self.options:
            raise ValueError("open_ended questions carry no options")
        return self


class CompletionOptions(BaseModel):
    max_tokens: int = DEFAULT_MAX_TOKENS
    temperature: float = DEFAULT_TEMPERATURE
    top_p: float = DEFAULT_TOP_P
    frequency_penalty: float = 0.0
    presence_penalty: float = 0.0


class Usage(BaseModel):
    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0


class CompletionResult(BaseModel):
    success: bool
    content: Optional[str] = None
    usage: Optional[Usage] = None
    model: Optional[str] = None
    error_kind: Optional[FailureKind] = None
    error_message: Optional[str] = None


class UnderstandingState(str, Enum):
    INIT = "init"
    REMOTE_ATTEMPTED = "remote_attempted"
    REMOTE_SUCCEEDED = "remote_succeeded"
    REMOTE_FAILED = "remote_failed"
    FALLBACK_BUILT = "fallback_built"
    DONE = "done"


class UnderstandingResult(BaseModel):
    understanding: Understanding
    outcome: Literal["remote", "fallback"]
    failure: Optional[FailureKind] = None
    trace: List[UnderstandingState] = Field(default_factory=list)


class QuestionSynthesisResult(BaseModel):
    questions: List[Question]
    generation_type: GenerationType
    failure: Optional[FailureKind] = None


class PipelineMetadata(BaseModel):
    domain: Domain
    generation_type: GenerationType
    cognitive_distribution: Dict[str, int]
    failures: List[FailureKind] = Field(default_factory=list)
    understanding_time_ms: int = 0
    generation_time_ms: int = 0


class PipelineResult(BaseModel):
    understanding: Understanding
    questions: List[Question]
    metadata: PipelineMetadata


class GenerateRequest(BaseModel):
    text: str = Field(..., min_length=1, description="Plain text produced by the extraction collaborator")
    file_metadata: Optional[FileMetadata] = None
    question_count: int = Field(DEFAULT_QUESTION_COUNT, ge=1, le=MAX_QUESTION_COUNT)
    difficulty: RequestedDifficulty = "medium"
    language: Language = "ar"
    question_types: Set[RequestedQuestionType] = Field(default_factory=lambda: {"multiple_choice"})


class GenerateResponse(BaseModel):
    request_id: str
    result: PipelineResult
    notices: List[str] = Field(default_factory=list)


class AnalyzeRequest(BaseModel):
    text: str = Field(..., min_length=1)


class AnalyzeResponse(BaseModel):
    profile: FileMetadata
    classification: DomainClassification
    concepts: List[str]


class RemoteHealth(BaseModel):
    success: bool
    model: Optional[str] = None
    message: str
