import logging
import uvicorn
from contextlib import asynccontextmanager
from typing import Dict, Optional
from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from utils.config import AppConfig
from utils.errors import AppError, InputValidationError, RateLimitError, UpstreamError
from utils.logging import log_error, log_rate_limited, get_request_stats
from utils.rate_limiter import MinIntervalRateLimiter
from utils.request_middleware import RequestLoggingMiddleware, ResponseTimeMiddleware

from llm.vertex_client import ModelClient, VertexAIClient
from agents.quiz_agent import QuizAgent
from agents.planner_agent import PlannerAgent
from agents.summarizer_agent import SummarizerAgent
from models.quiz_models import QuizRequest
from models.schedule_models import ScheduleRequest
from models.summary_models import SummarizeRequest, SummaryResponse
from models.api_models import ErrorResponse, RateLimitResponse, HealthResponse, ServiceIndexResponse

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Study assistant API starting")
    yield
    logger.info(f"Study assistant API stopped | Stats: {get_request_stats()}")


def error_response(summary: str, error: Exception, endpoint: str, context: Optional[Dict] = None) -> JSONResponse:
    log_error(error, endpoint, context)
    status_code = error.status_code if isinstance(error, AppError) else 500
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=summary, details=str(error)).model_dump()
    )


def rate_limited_response(error: RateLimitError) -> JSONResponse:
    return JSONResponse(
        status_code=error.status_code,
        content=RateLimitResponse(error=error.message, retryAfter=error.retry_after_ms).model_dump(),
        headers={"Retry-After": str(error.retry_after_seconds)}
    )


def get_quiz_agent(request: Request) -> QuizAgent:
    return request.app.state.quiz_agent

def get_planner_agent(request: Request) -> PlannerAgent:
    return request.app.state.planner_agent

def get_summarizer_agent(request: Request) -> SummarizerAgent:
    return request.app.state.summarizer_agent

def get_summarizer_limiter(request: Request) -> MinIntervalRateLimiter:
    return request.app.state.summarizer_limiter


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    messages = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        messages.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    error = InputValidationError("; ".join(messages) or "Request body is invalid")
    logger.warning(f"Rejected {request.method} {request.url.path}: {error}")
    return JSONResponse(
        status_code=error.status_code,
        content=ErrorResponse(error=error.summary, details=str(error)).model_dump()
    )


async def quiz(
    data: QuizRequest,
    agent: QuizAgent = Depends(get_quiz_agent)
):
    if data.action == "feedback":
        try:
            feedback = await agent.give_feedback(data.topic, data.userAnswers)
        except Exception as e:
            return error_response("Failed to generate quiz feedback", e, "quiz_feedback", {
                "topic": data.topic,
                "answers": len(data.userAnswers)
            })
        return feedback.model_dump(exclude_unset=True)

    try:
        questions = await agent.generate_quiz(data.topic, data.difficulty)
    except Exception as e:
        return error_response("Failed to generate quiz", e, "quiz_generation", {
            "topic": data.topic,
            "difficulty": data.difficulty
        })
    return [question.model_dump(exclude_unset=True) for question in questions]


async def scheduler(
    req: ScheduleRequest,
    agent: PlannerAgent = Depends(get_planner_agent)
):
    try:
        schedule = await agent.generate_schedule(req.topics, req.scheduleType)
    except Exception as e:
        return error_response("Failed to generate schedule", e, "scheduler", {
            "topics": [topic.subject for topic in req.topics],
            "schedule_type": req.scheduleType
        })
    return schedule.model_dump()


async def summarizer(
    req: SummarizeRequest,
    agent: SummarizerAgent = Depends(get_summarizer_agent),
    limiter: MinIntervalRateLimiter = Depends(get_summarizer_limiter)
):
    retry_after_ms = limiter.try_acquire()
    if retry_after_ms is not None:
        log_rate_limited("summarizer", retry_after_ms)
        return rate_limited_response(
            RateLimitError("Please wait a moment before making another request", retry_after_ms)
        )

    try:
        summary = await agent.summarize(req.text)
    except UpstreamError as e:
        if e.rate_limited:
            log_error(e, "summarizer", {"text_length": len(req.text)})
            return rate_limited_response(RateLimitError(
                "Service is busy, please retry shortly",
                AppConfig.SUMMARIZER_UPSTREAM_RETRY_AFTER_MS
            ))
        return error_response("Failed to process request", e, "summarizer", {"text_length": len(req.text)})
    except Exception as e:
        return error_response("Failed to process request", e, "summarizer", {"text_length": len(req.text)})

    return SummaryResponse(summary=summary)


async def health_check():
    return HealthResponse(status="healthy", message="AI Study Assistant API is running")


async def root():
    return ServiceIndexResponse(
        message="AI Study Assistant API",
        version=VERSION,
        docs="/docs",
        openapi="/openapi.json",
        endpoints={
            "quiz": "/quiz",
            "scheduler": "/scheduler",
            "summarizer": "/summarizer"
        }
    )


def create_app(
    model_client: Optional[ModelClient] = None,
    summarizer_limiter: Optional[MinIntervalRateLimiter] = None
) -> FastAPI:
    """
    Build the API. Tests pass a stub ``model_client`` and a limiter with a
    fake clock; production uses Vertex AI and the real clock.
    """
    app = FastAPI(
        title="AI Study Assistant API",
        description="Quiz generation, summarization and study scheduling backed by Vertex AI",
        version=VERSION,
        lifespan=lifespan
    )

    client = model_client or VertexAIClient()
    app.state.quiz_agent = QuizAgent(client)
    app.state.planner_agent = PlannerAgent(client)
    app.state.summarizer_agent = SummarizerAgent(client)
    app.state.summarizer_limiter = summarizer_limiter or MinIntervalRateLimiter(
        min_interval_ms=AppConfig.SUMMARIZER_MIN_INTERVAL_MS
    )

    app.add_middleware(ResponseTimeMiddleware, slow_request_threshold_ms=10000)
    app.add_middleware(RequestLoggingMiddleware, stats_interval_s=300)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=AppConfig.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Retry-After"],
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    app.add_api_route("/quiz", quiz, methods=["POST"])
    app.add_api_route("/scheduler", scheduler, methods=["POST"])
    app.add_api_route("/summarizer", summarizer, methods=["POST"], response_model=SummaryResponse)
    app.add_api_route("/health", health_check, methods=["GET"], response_model=HealthResponse)
    app.add_api_route("/", root, methods=["GET"], response_model=ServiceIndexResponse)

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("api_server.main:app", host="0.0.0.0", port=AppConfig.PORT)
