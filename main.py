"""Main entry point for the Compose Draft Service FastAPI application.

This module creates and configures the FastAPI app instance that serves the
REST API for compose drafts, suggestion review and dispatch.

To run the development server:
    uv run uvicorn main:app --reload

To run in production:
    uv run uvicorn main:app --host 0.0.0.0 --port 8000
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from pydantic import ValidationError

from api.dependencies import initialize_compose_session, shutdown_compose_session
from api.exceptions import (
    compose_error_handler,
    dispatch_in_progress_handler,
    draft_not_found_handler,
    draft_validation_handler,
    generic_exception_handler,
    message_not_found_handler,
    suggestion_conflict_handler,
    upstream_error_handler,
    validation_exception_handler,
    value_error_handler,
)
from api.routes import drafts as drafts_routes
from api.routes import messages as messages_routes
from api.routes import suggestions as suggestions_routes
from api.settings import settings
from models.errors import (
    ComposeError,
    DispatchInProgressError,
    DispatchTransportError,
    DraftNotFoundError,
    DraftValidationError,
    MessageNotFoundError,
    NoPendingSuggestionError,
    SuggestionFetchError,
    SuggestionPendingError,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan events.

    Configures logging and creates the compose session at startup, then
    cancels in-flight suggestion fetches at shutdown.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control back to FastAPI to handle requests.
    """
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Starting Compose Draft Service")
    initialize_compose_session(settings)

    yield  # App runs and handles requests here

    logger.info("Shutting down Compose Draft Service")
    await shutdown_compose_session()


# Create the FastAPI application instance
app = FastAPI(
    title="Compose Draft Service",
    description="API for compose drafts with reviewed AI suggestions",
    version="0.1.0",
    lifespan=lifespan,
)

# Register exception handlers
# Order matters: specific exceptions before general ones
app.add_exception_handler(DraftNotFoundError, draft_not_found_handler)
app.add_exception_handler(MessageNotFoundError, message_not_found_handler)
app.add_exception_handler(DraftValidationError, draft_validation_handler)
app.add_exception_handler(NoPendingSuggestionError, suggestion_conflict_handler)
app.add_exception_handler(SuggestionPendingError, suggestion_conflict_handler)
app.add_exception_handler(DispatchInProgressError, dispatch_in_progress_handler)
app.add_exception_handler(SuggestionFetchError, upstream_error_handler)
app.add_exception_handler(DispatchTransportError, upstream_error_handler)
app.add_exception_handler(ComposeError, compose_error_handler)
app.add_exception_handler(ValidationError, validation_exception_handler)
app.add_exception_handler(ValueError, value_error_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# Register route modules
app.include_router(drafts_routes.router)
app.include_router(suggestions_routes.router)
app.include_router(messages_routes.router)


@app.get("/")
async def root():
    """Root endpoint - returns a welcome message."""
    return {
        "message": "Welcome to the Compose Draft Service API",
        "version": "0.1.0",
        "docs_url": "/docs",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring.

    Returns:
        A dictionary indicating the service is healthy.
    """
    return {"status": "healthy"}
