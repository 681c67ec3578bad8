"""
FastAPI application initialization for the Meet Recorder API.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from meet_recorder.api.router import api_router
from meet_recorder.config import settings, get_logger
from meet_recorder.meeting_handler.meeting_orchestrator import MeetingOrchestrator

logger = get_logger("app")


def create_app(orchestrator: Optional[MeetingOrchestrator] = None) -> FastAPI:
    """
    Build the application.

    Args:
        orchestrator: Pre-built orchestrator (tests); one is created from
            settings at startup otherwise
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting Meet Recorder API...")
        app.state.orchestrator = orchestrator or MeetingOrchestrator(settings)
        await app.state.orchestrator.start()
        logger.info(f"Meet Recorder API started (environment: {settings.environment})")
        try:
            yield
        finally:
            logger.info("Shutting down Meet Recorder API...")
            await app.state.orchestrator.shutdown()
            logger.info("Meet Recorder API shutdown complete")

    app = FastAPI(
        title=settings.project_name,
        version=settings.version,
        description="Joins meetings as a silent participant and records their audio",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        # Malformed bodies get the same 400 as missing fields
        logger.warning(f"Invalid request to {request.url.path}: {exc.errors()}")
        return JSONResponse(status_code=400, content={"detail": "meetingId and meetLink are required"})

    app.include_router(api_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "meet_recorder.main:app",
        host=settings.server.host,
        port=settings.server.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
