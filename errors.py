from enum import Enum


class FailureKind(str, Enum):
    REMOTE_UNAVAILABLE = "remote_unavailable"
    REMOTE_UNAUTHORIZED = "remote_unauthorized"
    REMOTE_RATE_LIMITED = "remote_rate_limited"
    REMOTE_SERVER_ERROR = "remote_server_error"
    REMOTE_UNKNOWN_ERROR = "remote_unknown_error"
    NO_PAYLOAD_FOUND = "no_payload_found"
    MALFORMED_PAYLOAD = "malformed_payload"
    VALIDATION_FAILED = "validation_failed"
    CONFIGURATION_ERROR = "configuration_error"


class PipelineError(Exception):
    """Base class for errors raised inside the generation pipeline."""


class PayloadError(PipelineError):
    kind = FailureKind.MALFORMED_PAYLOAD


class NoPayloadFound(PayloadError):
    kind = FailureKind.NO_PAYLOAD_FOUND


class MalformedPayload(PayloadError):
    kind = FailureKind.MALFORMED_PAYLOAD


class ValidationFailed(PipelineError):
    """Payload parsed but is missing required fields or has an empty question list."""

    kind = FailureKind.VALIDATION_FAILED


class GatewayConfigurationError(PipelineError):
    """The completion client could not be built (missing credentials, bad model table)."""

    kind = FailureKind.CONFIGURATION_ERROR


class UnderstandingFault(PipelineError):
    """The understanding stage could not complete at all (hard fault)."""

    def __init__(self, message: str, kind: FailureKind = FailureKind.REMOTE_UNKNOWN_ERROR):
        super().__init__(message)
        self.kind = kind


class PreconditionViolation(PipelineError, ValueError):
    """Invalid generation request, rejected before any stage runs."""


FAILURE_MESSAGES = {
    FailureKind.REMOTE_UNAVAILABLE: {
        "ar": "لا يمكن الوصول لخدمة الذكاء الاصطناعي. تحقق من الاتصال بالإنترنت.",
        "en": "The AI service could not be reached. Check the network connection.",
    },
    FailureKind.REMOTE_UNAUTHORIZED: {
        "ar": "مفتاح API غير صحيح أو منتهي الصلاحية.",
        "en": "The API key is invalid or has expired.",
    },
    FailureKind.REMOTE_RATE_LIMITED: {
        "ar": "تم تجاوز الحد المسموح من الطلبات. حاول مرة أخرى لاحقاً.",
        "en": "The request limit was exceeded. Try again later.",
    },
    FailureKind.REMOTE_SERVER_ERROR: {
        "ar": "خطأ في خادم الذكاء الاصطناعي. حاول مرة أخرى.",
        "en": "The AI server returned an error. Try again.",
    },
    FailureKind.REMOTE_UNKNOWN_ERROR: {
        "ar": "حدث خطأ في الاتصال بخدمة الذكاء الاصطناعي.",
        "en": "An error occurred while contacting the AI service.",
    },
    FailureKind.NO_PAYLOAD_FOUND: {
        "ar": "لم يتضمن رد الذكاء الاصطناعي بيانات منظمة، تم استخدام التحليل المحلي.",
        "en": "The AI response contained no structured data; local analysis was used.",
    },
    FailureKind.MALFORMED_PAYLOAD: {
        "ar": "تعذر تحليل رد الذكاء الاصطناعي، تم استخدام التحليل المحلي.",
        "en": "The AI response could not be parsed; local analysis was used.",
    },
    FailureKind.VALIDATION_FAILED: {
        "ar": "رد الذكاء الاصطناعي غير مكتمل، تم استخدام التحليل المحلي.",
        "en": "The AI response was incomplete; local analysis was used.",
    },
    FailureKind.CONFIGURATION_ERROR: {
        "ar": "خدمة الذكاء الاصطناعي غير مهيأة. تحقق من مفتاح API.",
        "en": "The AI service is not configured. Check the API key.",
    },
}


def describe_failure(kind: FailureKind, language: str = "ar") -> str:
    """Localized, user-facing message for a failure kind."""
    messages = FAILURE_MESSAGES[FailureKind(kind)]
    return messages.get(language, messages["ar"])
