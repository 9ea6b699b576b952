import json
import logging
from typing import Any, Dict

from errors import MalformedPayload, NoPayloadFound

logger = logging.getLogger(__name__)


def extract_structured_payload(raw_text: str) -> Dict[str, Any]:
    """Parse the JSON object embedded in a completion.

    Takes the greedy span from the first "{" to the last "}" and parses it.
    Nothing is repaired: text without a "{" raises NoPayloadFound, a span that
    does not parse to an object raises MalformedPayload.
    """
    content = (raw_text or "").strip()
    start = content.find("{")
    if start == -1:
        raise NoPayloadFound("No JSON object found in completion")

    end = content.rfind("}")
    span = content[start:end + 1] if end > start else content[start:]

    try:
        payload = json.loads(span)
    except (ValueError, RecursionError) as e:
        logger.warning(f"Completion payload is not valid JSON: {e}")
        raise MalformedPayload(f"Invalid JSON payload: {e}") from e

    if not isinstance(payload, dict):
        raise MalformedPayload(f"Expected a JSON object, got {type(payload).__name__}")
    return payload
