"""
FastAPI application factory and configuration
"""

import uuid
from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware

from logging_config import bind_request_context, clear_request_context, configure_logging
from core.config import get_allowed_hosts, get_cors_origins, get_environment, is_production
from core.error_handlers import (
    general_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    vision_exception_handler,
)
from core.exceptions import VisionError
from routes import list_routes_summary, register_all_routers
from services.category_aggregator import CategoryAggregator
from services.llm_client import LLMClient
from services.providers import MeditationAudioGenerator
from services.question_controller import QuestionController
from services.response_analyzer import ResponseAnalyzer
from services.task_registry import TaskRegistry
from services.vision_service import VisionService
from services.vision_store import VisionStore
from services.vision_synthesis import VisionSynthesizer
from utils.date_utils import get_current_iso

configure_logging()
logger = structlog.get_logger(__name__)

API_VERSION = "1.0.0"


def build_vision_service(
    store: VisionStore,
    llm: LLMClient,
    tasks: TaskRegistry,
    audio_generator: Optional[MeditationAudioGenerator] = None,
) -> VisionService:
    """Wire the scoring and questioning services around one shared client."""
    return VisionService(
        store=store,
        aggregator=CategoryAggregator(ResponseAnalyzer(llm)),
        controller=QuestionController(llm),
        synthesizer=VisionSynthesizer(llm),
        tasks=tasks,
        audio_generator=audio_generator,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle"""
    logger.info("🚀 Starting Lucid Vision API...")

    if getattr(app.state, "vision_service", None) is None:
        store = VisionStore()
        await store.initialize()
        logger.info("✓ Vision store initialized", **store.info())

        from services.llm_client import initialise_llm_client, llm_client
        llm_ok = await initialise_llm_client()
        app.state.llm_initialized = bool(llm_ok)
        app.state.llm_backend = llm_client.get_active_backend_info()
        if not llm_ok:
            logger.warning(
                "LLM client not initialized – set AZURE_OPENAI_* or OPENAI_API_KEY. "
                "Answers will be scored with fallback analysis and questions will fail."
            )

        tasks = TaskRegistry()
        app.state.vision_store = store
        app.state.task_registry = tasks
        app.state.vision_service = build_vision_service(store, llm_client, tasks)
        logger.info("🚀 Lucid Vision API ready")

    yield

    logger.info("🛑 Shutting down Lucid Vision API...")
    try:
        tasks = getattr(app.state, "task_registry", None)
        if tasks is not None:
            await tasks.graceful_shutdown(timeout=30.0)
            logger.info("✓ Background tasks shutdown complete")
        store = getattr(app.state, "vision_store", None)
        if store is not None:
            await store.close()
    except Exception as e:
        logger.error("Error during shutdown", error=str(e))

    logger.info("👋 Shutdown complete")


def create_app(vision_service: Optional[VisionService] = None) -> FastAPI:
    """Create and configure FastAPI application

    Passing ``vision_service`` skips the default wiring in ``lifespan``.
    """
    app = FastAPI(
        title="Lucid Vision API",
        version=API_VERSION,
        description="Adaptive vision-building loop driven by context sufficiency scoring",
        lifespan=lifespan,
    )
    if vision_service is not None:
        app.state.vision_service = vision_service
        app.state.task_registry = vision_service.tasks
        app.state.vision_store = vision_service.store

    setup_middleware(app)
    setup_exception_handlers(app)
    register_all_routers(app, version_prefix="/v1")
    setup_custom_endpoints(app)
    return app


def setup_middleware(app: FastAPI):
    """Configure middleware"""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_cors_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "Accept", "Origin"],
        max_age=600,
    )

    # Request ID middleware
    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        clear_request_context()
        bind_request_context(request_id=request_id)
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    # Trusted host middleware (production only)
    if is_production():
        app.add_middleware(
            TrustedHostMiddleware,
            allowed_hosts=get_allowed_hosts()
        )

    # Gzip middleware
    app.add_middleware(GZipMiddleware, minimum_size=1000)


def setup_exception_handlers(app: FastAPI):
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(VisionError, vision_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)


def setup_custom_endpoints(app: FastAPI):
    """Setup custom endpoints"""

    @app.get("/")
    async def root():
        """API root endpoint"""
        return {
            "message": "Lucid Vision API",
            "version": API_VERSION,
            "routes": [prefix for prefix, _ in list_routes_summary()],
            "documentation": {
                "swagger": "/docs",
                "redoc": "/redoc",
                "openapi": "/openapi.json",
            },
        }

    @app.get("/health")
    async def health_check():
        """System health check"""
        store = getattr(app.state, "vision_store", None)
        tasks = getattr(app.state, "task_registry", None)
        ready = getattr(app.state, "vision_service", None) is not None
        llm_ok = getattr(app.state, "llm_initialized", None)
        return {
            "status": "healthy" if ready else "degraded",
            "environment": get_environment(),
            "timestamp": get_current_iso(),
            "components": {
                "store": store.info() if store is not None else {"backend": "uninitialized"},
                "llm": "unknown" if llm_ok is None else ("healthy" if llm_ok else "degraded"),
                "llm_backend": getattr(app.state, "llm_backend", None),
                "background_tasks": len(tasks.get_active_tasks()) if tasks is not None else 0,
            },
        }
