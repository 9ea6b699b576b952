import os
from typing import Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

load_dotenv()

# Google AI configuration
GEMINI_LLM_MODEL = "gemini-2.5-flash"
REQUEST_TIMEOUT_SECONDS = 60

# Model aliases used by the pipeline
DEFAULT_MODELS = {
    "text": GEMINI_LLM_MODEL,
    "chat": GEMINI_LLM_MODEL,
    "analysis": GEMINI_LLM_MODEL,
    "coding": GEMINI_LLM_MODEL,
}

# Generation configuration
DEFAULT_MAX_TOKENS = 2000
DEFAULT_TEMPERATURE = 0.7
DEFAULT_TOP_P = 0.9

UNDERSTANDING_MAX_TOKENS = 3000
UNDERSTANDING_TEMPERATURE = 0.2

QUESTION_MAX_TOKENS = 3000
QUESTION_TEMPERATURE = 0.3

# Request limits
MAX_QUESTION_COUNT = 50
DEFAULT_QUESTION_COUNT = 5

# Logging configuration
LOG_DIR = "./logs"


class GatewaySettings(BaseModel):
    """Read-only provider configuration, built once at startup and handed to the gateway."""

    model_config = ConfigDict(frozen=True)

    api_key: Optional[str] = None
    models: Dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_MODELS))
    timeout: float = REQUEST_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls) -> "GatewaySettings":
        models = {
            alias: os.getenv(f"AI_MODEL_{alias.upper()}", default)
            for alias, default in DEFAULT_MODELS.items()
        }
        return cls(
            api_key=os.getenv("GOOGLE_API_KEY"),
            models=models,
            timeout=float(os.getenv("AI_REQUEST_TIMEOUT", REQUEST_TIMEOUT_SECONDS)),
        )
