"""Outermost error responders.

Every failed request is logged once with its path, method, token fragment,
message, status and pipeline stage, then serialised as a flat
``{message, status}`` body.  Stack traces never reach the caller.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from gradarchive.api.pipeline import REQUEST_ID_HEADER, RequestPipeline, current_pipeline
from gradarchive.auth.deps import bearer_token, token_fragment
from gradarchive.config import settings
from gradarchive.errors import HttpError, InternalServerError, ValidationError

logger = logging.getLogger("gradarchive.api")

INVALID_ROUTE_BODY = {"success": False, "isExistingRoute": False, "message": "Invalid route"}


def _violations(exc: RequestValidationError) -> list[dict[str, str]]:
    out: list[dict[str, str]] = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ())]
        out.append({"path": ".".join(loc), "message": err.get("msg", "Invalid value")})
    return out


def log_failure(request: Request, status: int, message: str, exc: BaseException | None = None) -> None:
    pipeline: RequestPipeline | None = current_pipeline(request)
    token = pipeline.token if pipeline else bearer_token(request.headers.get("authorization"))
    context: dict[str, Any] = {
        "path": request.url.path,
        "method": request.method,
        "token": token_fragment(token),
        "status": status,
        "error_message": message,
    }
    if pipeline is not None:
        context["request_id"] = pipeline.request_id
        context["failed_at"] = pipeline.failed_at.value if pipeline.failed_at else None
        context["outcome"] = pipeline.stage.value

    line = "%s %s -> %d %s (token=%s, failed_at=%s, outcome=%s)"
    args = (
        context["method"],
        context["path"],
        status,
        message,
        context["token"],
        context.get("failed_at"),
        context.get("outcome"),
    )
    if status >= 500:
        logger.error(line, *args, extra=context, exc_info=exc)
    else:
        logger.warning(line, *args, extra=context)


def _json(request: Request, status: int, body: dict[str, Any]) -> JSONResponse:
    response = JSONResponse(status_code=status, content=body)
    pipeline = current_pipeline(request)
    if pipeline is not None:
        response.headers[REQUEST_ID_HEADER] = pipeline.request_id
    return response


async def http_error_handler(request: Request, exc: HttpError) -> JSONResponse:
    log_failure(request, exc.status_code, exc.message, exc.__cause__)
    body = exc.to_body()
    if isinstance(exc, InternalServerError) and not settings.EXPOSE_INTERNAL_ERRORS:
        body["message"] = InternalServerError.default_message
    return _json(request, exc.status_code, body)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    err = ValidationError(_violations(exc))
    log_failure(request, err.status_code, err.message)
    return _json(request, err.status_code, err.to_body())


async def starlette_http_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        log_failure(request, 404, INVALID_ROUTE_BODY["message"])
        return JSONResponse(status_code=404, content=INVALID_ROUTE_BODY)
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    log_failure(request, exc.status_code, message)
    return _json(request, exc.status_code, {"message": message, "status": exc.status_code})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    message = str(exc) or InternalServerError.default_message
    log_failure(request, 500, message, exc)
    if not settings.EXPOSE_INTERNAL_ERRORS:
        message = InternalServerError.default_message
    return _json(request, 500, {"message": message, "status": 500})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(HttpError, http_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, request_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, starlette_http_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_error_handler)
