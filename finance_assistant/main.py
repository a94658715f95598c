# main.py - FastAPI app: auth, expenses, budgets and the Gemini-backed finance assistant
import os
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import select
from starlette.exceptions import HTTPException as StarletteHTTPException

from finance_assistant.api import assistant, auth, budgets, expenses, users
from finance_assistant.config import Settings
from finance_assistant.database import (
    create_engine_for, create_session_factory, init_models, verify_database,
)
from finance_assistant.errors import AppError
from finance_assistant.services.relay import create_relay

VERSION = "1.0.0"

# Configure logging first
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    if first.get("type") == "missing" and field:
        return f"{field.capitalize()} is required"
    if first.get("type") == "value_error" and "error" in first.get("ctx", {}):
        return str(first["ctx"]["error"])
    return f"{field}: {first.get('msg')}" if field else first.get("msg", "Invalid request")


def register_exception_handlers(app: FastAPI):
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        message = _validation_message(exc)
        logger.warning(f"{request.method} {request.url.path} -> 400: {message}")
        return JSONResponse(status_code=400, content={"error": message})

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        logger.warning(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.detail}")
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception(f"❌ Unhandled error on {request.method} {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    logging.getLogger().setLevel(settings.log_level)

    # Lifespan manager
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("🚀 Starting up application...")
        engine = create_engine_for(settings.database_url)
        app.state.engine = engine
        app.state.session_factory = create_session_factory(engine)
        try:
            await init_models(engine)
            await verify_database(app.state.session_factory)
            app.state.relay = create_relay(settings)
            logger.info("✅ Application startup complete")
        except Exception as e:
            logger.error(f"❌ Startup failed: {e}")
            await engine.dispose()
            raise

        yield

        logger.info("🔌 Shutting down application...")
        await engine.dispose()

    app = FastAPI(
        title="Personal Finance Assistant API",
        description="Expense tracking, monthly budgets and an AI assistant grounded in your own data",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.relay = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    for module in (auth, expenses, budgets, assistant, users):
        app.include_router(module.router)

    @app.get("/")
    async def root():
        return {
            "message": "🚀 Personal Finance Assistant API is running!",
            "version": VERSION,
            "status": "healthy",
            "endpoints": {
                "auth": "/api/auth",
                "expenses": "/api/expenses",
                "budgets": "/api/budgets",
                "assistant": "/api/ai",
                "docs": "/docs",
                "health": "/health",
            },
        }

    # Health check
    @app.get("/health")
    async def health_check():
        try:
            async with app.state.session_factory() as session:
                await session.execute(select(1))
        except Exception as e:
            logger.error(f"❌ Health check failed: {e}")
            return JSONResponse(
                status_code=503,
                content={
                    "status": "unhealthy",
                    "error": str(e),
                    "timestamp": datetime.now().isoformat(),
                },
            )

        return {
            "status": "healthy",
            "database": "connected",
            "ai_system": "available" if app.state.relay else "disabled",
            "version": VERSION,
            "timestamp": datetime.now().isoformat(),
        }

    return app


if __name__ == "__main__":
    import uvicorn

    host = os.getenv("API_HOST", "0.0.0.0")
    port = int(os.getenv("API_PORT", 8000))

    logger.info(f"🚀 Starting server on {host}:{port}")

    uvicorn.run(
        "finance_assistant.main:create_app",
        factory=True,
        host=host,
        port=port,
        reload=True,
        log_level="info"
    )
