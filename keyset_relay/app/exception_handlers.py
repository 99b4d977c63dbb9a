"""Exception handlers rendering pagination errors as RFC 7807 problems."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from keyset_relay.core.exceptions import AppException
from keyset_relay.core.schemas import ProblemDetails

logger = logging.getLogger(__name__)

PROBLEM_JSON = "application/problem+json"


def _create_problem_detail(exc: AppException, instance: str) -> dict[str, Any]:
    problem = ProblemDetails(
        type=exc.type,
        title=exc.title,
        status=exc.status_code,
        detail=exc.detail,
        instance=exc.instance or instance,
    )
    response_data = problem.model_dump(exclude_none=True)
    if exc.extra:
        response_data.update({k: v for k, v in exc.extra.items() if k not in response_data})
    return response_data


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Convert an ``AppException`` into a problem+json response.

    Args:
        request: The FastAPI request object.
        exc: The application exception that was raised.

    Returns:
        JSONResponse with RFC 7807 Problem Details format.
    """
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "Application exception occurred",
        extra={
            "path": request.url.path,
            "method": request.method,
            "exception_type": exc.type,
            "status_code": exc.status_code,
            "detail": exc.detail,
        },
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=_create_problem_detail(exc, str(request.url)),
        media_type=PROBLEM_JSON,
    )


def configure_exception_handlers(app: FastAPI) -> None:
    """Register the problem-detail handler for every ``AppException``.

    Example:
        app = FastAPI()
        configure_exception_handlers(app)
    """
    app.add_exception_handler(AppException, app_exception_handler)
    logger.debug("Exception handlers configured")
