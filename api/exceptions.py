"""Exception handlers for the compose FastAPI application.

This module converts compose core errors and other Python exceptions into
consistent JSON responses of the form {"error", "detail", "type", ...}.
"""

import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

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


async def draft_not_found_handler(request: Request, exc: DraftNotFoundError):
    """Handle DraftNotFoundError with a 404."""
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={
            "error": "Draft Not Found",
            "detail": exc.message,
            "type": "DraftNotFoundError",
            "draft_id": exc.draft_id,
        },
    )


async def message_not_found_handler(request: Request, exc: MessageNotFoundError):
    """Handle MessageNotFoundError with a 404."""
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={
            "error": "Message Not Found",
            "detail": exc.message,
            "type": "MessageNotFoundError",
            "message_id": exc.message_id,
        },
    )


async def draft_validation_handler(request: Request, exc: DraftValidationError):
    """Handle DraftValidationError.

    Returns a 422 listing the fields the user still has to fill in. The
    draft itself is left untouched.

    Args:
        request: The incoming request that triggered the error.
        exc: The DraftValidationError exception.

    Returns:
        JSONResponse with 422 status and the missing fields.
    """
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "Draft Incomplete",
            "detail": exc.message,
            "type": "DraftValidationError",
            "draft_id": exc.draft_id,
            "details": {"missing_fields": exc.missing_fields},
        },
    )


async def suggestion_conflict_handler(
    request: Request, exc: NoPendingSuggestionError | SuggestionPendingError
):
    """Handle diff-state conflicts with a 409.

    Raised for accept/reject without a pending suggestion, and for
    operations refused while a suggestion is still pending.
    """
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={
            "error": "Suggestion Conflict",
            "detail": exc.message,
            "type": type(exc).__name__,
            "draft_id": exc.draft_id,
        },
    )


async def dispatch_in_progress_handler(request: Request, exc: DispatchInProgressError):
    """Handle DispatchInProgressError with a 409."""
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={
            "error": "Dispatch In Progress",
            "detail": exc.message,
            "type": "DispatchInProgressError",
            "draft_id": exc.draft_id,
        },
    )


async def upstream_error_handler(
    request: Request, exc: SuggestionFetchError | DispatchTransportError
):
    """Handle failures of the suggestion service or the mail-send sink.

    Returns a 502 (Bad Gateway). Both failures are recoverable: the draft
    keeps its content and stays open.

    Args:
        request: The incoming request that triggered the error.
        exc: The upstream failure.

    Returns:
        JSONResponse with 502 status.
    """
    logger.warning(f"Upstream failure on {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={
            "error": "Upstream Service Error",
            "detail": exc.message,
            "type": type(exc).__name__,
            "draft_id": exc.draft_id,
            "details": {"reason": exc.reason},
        },
    )


async def compose_error_handler(request: Request, exc: ComposeError):
    """Handle any other ComposeError with a 400."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "Compose Error",
            "detail": exc.message,
            "type": type(exc).__name__,
        },
    )


async def validation_exception_handler(request: Request, exc: ValidationError):
    """Handle Pydantic validation errors raised inside route handlers.

    Args:
        request: The incoming request that triggered the error.
        exc: The ValidationError exception.

    Returns:
        JSONResponse with validation error details.
    """
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "Validation Error",
            "detail": "The request data failed validation",
            "type": "ValidationError",
            "validation_errors": exc.errors(include_url=False, include_context=False),
        },
    )


async def value_error_handler(request: Request, exc: ValueError):
    """Handle ValueError exceptions as 400 Bad Request."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "Invalid Value",
            "detail": str(exc),
            "type": "ValueError",
        },
    )


async def generic_exception_handler(request: Request, exc: Exception):
    """Handle any unhandled exceptions.

    This is a catch-all handler for unexpected errors. It prevents stack
    traces from being exposed to clients and logs them instead.
    """
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal Server Error",
            "detail": "An unexpected error occurred",
            "type": type(exc).__name__,
        },
    )
