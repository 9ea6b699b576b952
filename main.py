import uuid
import logging
from functools import lru_cache

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from config import GatewaySettings
from errors import FailureKind, PreconditionViolation, describe_failure
from models import (
    AnalyzeRequest,
    AnalyzeResponse,
    Content,
    GenerateRequest,
    GenerateResponse,
    GenerationOptions,
    RemoteHealth,
)
from analysis.text_analyzer import classify_domain, extract_concepts, profile_text
from agents.pipeline import PipelineOrchestrator
from utils.gateway import CompletionGateway
from utils.log_handler import request_logger

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Question Generation Service",
    description="Content understanding and question generation with graceful local fallbacks",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@lru_cache
def get_gateway() -> CompletionGateway:
    return CompletionGateway(GatewaySettings.from_env())


def get_orchestrator(gateway: CompletionGateway = Depends(get_gateway)) -> PipelineOrchestrator:
    return PipelineOrchestrator(gateway)


@app.get("/")
async def root():
    return {"status": "healthy", "service": "Question Generation Service", "version": "1.0.0"}


@app.get("/health/remote", response_model=RemoteHealth)
def remote_health(language: str = "ar", gateway: CompletionGateway = Depends(get_gateway)):
    """Ping the completion provider and report in the caller's language."""
    try:
        result = gateway.ping()
    except Exception as e:
        logger.error(f"Remote health check could not run: {e}")
        return RemoteHealth(success=False, message=str(e))

    if result.success:
        return RemoteHealth(success=True, model=result.model, message=result.content)
    kind = result.error_kind or FailureKind.REMOTE_UNKNOWN_ERROR
    return RemoteHealth(success=False, model=result.model, message=describe_failure(kind, language))


@app.post("/analyze", response_model=AnalyzeResponse)
def analyze_text(request: AnalyzeRequest):
    """Local-only profile of a text: metadata, domain and candidate concepts."""
    classification = classify_domain(request.text)
    return AnalyzeResponse(
        profile=profile_text(request.text),
        classification=classification,
        concepts=extract_concepts(request.text, classification.domain),
    )


@app.post("/generate", response_model=GenerateResponse)
def generate_questions(request: GenerateRequest, orchestrator: PipelineOrchestrator = Depends(get_orchestrator)):
    """Understand the text, then generate questions; degrades to local heuristics on any remote failure."""
    request_id = str(uuid.uuid4())

    with request_logger(request_id):
        logger.info(f"=== GENERATE START: request_id={request_id} | {len(request.text)} chars ===")

        content = Content(
            raw_text=request.text,
            file_metadata=request.file_metadata or profile_text(request.text),
            options=GenerationOptions(
                question_count=request.question_count,
                difficulty=request.difficulty,
                language=request.language,
                question_types=request.question_types,
            ),
        )

        try:
            result = orchestrator.run(content)
        except PreconditionViolation as e:
            logger.error(f"Rejected generation request: {e}")
            raise HTTPException(status_code=400, detail=str(e))

        notices = [describe_failure(kind, request.language) for kind in result.metadata.failures]
        logger.info(
            f"=== GENERATE COMPLETE: {request_id} | {len(result.questions)} questions, "
            f"type={result.metadata.generation_type}, understanding={result.metadata.understanding_time_ms}ms, "
            f"generation={result.metadata.generation_time_ms}ms ==="
        )
        return GenerateResponse(request_id=request_id, result=result, notices=notices)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
