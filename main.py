"""
StreamChat - Main Application Entry Point

Chat backend that streams LLM responses into persistent conversations.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from streamchat.core.config import get_settings
from streamchat.core.logger import logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    # Startup
    settings = get_settings()
    logger.info(f"Starting StreamChat in {settings.ENVIRONMENT} mode...")

    from streamchat.infrastructure.local.database import init_db

    await init_db()

    # Start background scheduler for periodic jobs
    from streamchat.services.background_scheduler import (
        start_background_scheduler,
        stop_background_scheduler,
    )

    await start_background_scheduler()

    yield

    # Shutdown
    logger.info("Shutting down StreamChat...")
    await stop_background_scheduler()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="StreamChat",
        description="Streaming LLM chat backend",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Retry-After"],
    )

    # Include routers
    from streamchat.api import chat, conversations, messages, models, users

    app.include_router(chat.router, prefix="/api/chat", tags=["chat"])
    app.include_router(conversations.router, prefix="/api/conversations", tags=["conversations"])
    app.include_router(messages.router, prefix="/api/messages", tags=["messages"])
    app.include_router(models.router, prefix="/api/models", tags=["models"])
    app.include_router(users.router, prefix="/api/users", tags=["users"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "environment": settings.ENVIRONMENT,
            "version": "0.1.0"
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
