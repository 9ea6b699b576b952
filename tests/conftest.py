import json

import pytest

from config import GatewaySettings
from errors import FailureKind
from models import CompletionResult, Concept, Content, GenerationOptions, TestablePoint, Understanding
from utils.gateway import CompletionGateway

EN_PROGRAMMING_TEXT = (
    "# Functions in Python\n\n"
    "A function is a reusable block of code that performs one specific task. "
    "Each function receives a variable as input and returns a value to the caller. "
    "A loop repeats a group of statements until a condition becomes false. "
    "An algorithm combines every function and loop into a complete solution.\n"
)

# "دالة" five times and "متغير" twice, no other domain keyword as a substring
AR_PROGRAMMING_TEXT = (
    "الدالة في البرمجة كتلة من التعليمات. "
    "نكتب الدالة مرة واحدة ثم نستدعي الدالة عند الحاجة. "
    "تستقبل الدالة متغير واحد أو أكثر. "
    "تعيد الدالة قيمة المتغير بعد المعالجة."
)

SHORT_TEXT = "Hi there. Short one. Tiny note."


class FakeMessage:
    def __init__(self, content, usage_metadata=None):
        self.content = content
        self.usage_metadata = usage_metadata


class FakeChatModel:
    """Stands in for ChatGoogleGenerativeAI: records prompts, replies or raises."""

    def __init__(self, reply="", error=None):
        self.reply = reply
        self.error = error
        self.prompts = []

    def invoke(self, prompt):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return FakeMessage(self.reply, {"input_tokens": 12, "output_tokens": 8, "total_tokens": 20})


class StubGateway:
    """Gateway double returning scripted results in order; the last one repeats."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def send_completion(self, prompt, model_alias="chat", options=None):
        self.calls.append({"prompt": prompt, "model_alias": model_alias, "options": options})
        response = self.responses[min(len(self.calls), len(self.responses)) - 1]
        if isinstance(response, Exception):
            raise response
        if isinstance(response, str):
            return CompletionResult(success=True, content=response, model="fake-model")
        return response

    def ping(self):
        return self.send_completion("ping")


def failed(kind=FailureKind.REMOTE_UNAVAILABLE):
    return CompletionResult(success=False, model="fake-model", error_kind=kind, error_message=kind.value)


@pytest.fixture
def settings():
    return GatewaySettings(api_key="test-key")


@pytest.fixture
def make_gateway(settings):
    """Build a real CompletionGateway around a FakeChatModel; returns (gateway, model, factory calls)."""

    def _make(reply="", error=None):
        model = FakeChatModel(reply, error)
        calls = []

        def factory(model_name, options, gateway_settings):
            calls.append((model_name, options, gateway_settings))
            return model

        return CompletionGateway(settings, llm_factory=factory), model, calls

    return _make


@pytest.fixture
def english_content():
    return Content(raw_text=EN_PROGRAMMING_TEXT, options=GenerationOptions(question_count=5, language="en"))


@pytest.fixture
def arabic_content():
    return Content(raw_text=AR_PROGRAMMING_TEXT, options=GenerationOptions(question_count=5, language="ar"))


@pytest.fixture
def understanding_payload():
    return {
        "summary": "Functions package reusable code. Loops repeat statements.",
        "mainTopic": "Functions in Python",
        "keyPoints": ["Functions are reusable", "Loops repeat statements"],
        "concepts": [
            {"name": "function", "definition": "A reusable block of code", "importance": "high"},
            {"name": "loop", "definition": "Repeats statements", "importance": "medium"},
        ],
        "testablePoints": [
            {"point": "Calling a function", "type": "application", "difficulty": "medium"},
        ],
        "detectedLanguage": "en",
        "complexity": "beginner",
    }


@pytest.fixture
def questions_payload():
    return {
        "questions": [
            {
                "questionText": "What does a function return to its caller?",
                "questionType": "multiple_choice",
                "options": ["A value", "A loop", "A class", "Nothing ever"],
                "correctAnswer": 0,
                "explanation": "Functions return values.",
                "difficulty": "easy",
                "category": "functions",
                "cognitiveLevel": "knowledge",
                "basedOnConcept": "function",
            },
            {
                "questionText": "Explain how a loop terminates.",
                "questionType": "open_ended",
                "options": [],
                "correctAnswer": None,
                "cognitiveLevel": "comprehension",
            },
        ]
    }


def as_completion(payload):
    """Wrap a payload the way models usually answer: prose around a JSON object."""
    return f"Here is the result:\n{json.dumps(payload, ensure_ascii=False)}\nHope this helps."


@pytest.fixture
def sample_understanding():
    return Understanding(
        summary="Functions and loops.",
        main_topic="Functions in Python",
        concepts=[
            Concept(name="function", definition="A reusable block of code", importance="high"),
            Concept(name="loop", definition="Repeats statements"),
            Concept(name="variable"),
        ],
        testable_points=[
            TestablePoint(point="Calling a function", type="application", difficulty="hard"),
            TestablePoint(point="Comparing loops", type="analysis", difficulty="medium"),
        ],
        detected_language="en",
        domain="programming",
        provenance="heuristic",
    )
