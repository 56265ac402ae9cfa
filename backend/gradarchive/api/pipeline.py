"""Per-request gate pipeline.

Every resource route is registered with exactly one chain dependency:

* :func:`public`         no gates
* :func:`authenticated`  authentication gate
* :func:`guarded`        authentication gate, then authorization gate for a
                         fixed (doc_type, permission_type) pair

FastAPI resolves route-level dependencies before it validates the endpoint's
own path, query and body parameters, so the fixed order is

    Received → Authenticating → Authorizing → Validating → Executing → Responded

with ``Rejected`` reachable from any gate or from validation, and ``Errored``
reachable from the business action.  :class:`PipelineRoute` creates the
:class:`RequestPipeline` record for each request and closes it.

Usage::

    router = APIRouter(route_class=PipelineRoute)

    @router.post("", dependencies=[Depends(guarded(DocType.COLLEGE, PermissionType.CREATE))])
    async def create_college(...): ...
"""

from __future__ import annotations

import enum
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Coroutine

from fastapi import Depends, Header, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.routing import APIRoute
from sqlalchemy.ext.asyncio import AsyncSession

from gradarchive.auth.deps import authenticate, bearer_token
from gradarchive.auth.permissions import authorize
from gradarchive.db.engine import get_db
from gradarchive.db.models import DocType, PermissionType
from gradarchive.utils.logger import ctx_request_id, ctx_stage, ctx_username

logger = logging.getLogger("gradarchive.pipeline")

REQUEST_ID_HEADER = "X-Request-ID"


class RequestStage(str, enum.Enum):
    RECEIVED = "received"
    AUTHENTICATING = "authenticating"
    AUTHORIZING = "authorizing"
    VALIDATING = "validating"
    EXECUTING = "executing"
    RESPONDED = "responded"
    REJECTED = "rejected"
    ERRORED = "errored"


_ORDER = [
    RequestStage.RECEIVED,
    RequestStage.AUTHENTICATING,
    RequestStage.AUTHORIZING,
    RequestStage.VALIDATING,
    RequestStage.EXECUTING,
    RequestStage.RESPONDED,
]
TERMINAL_STAGES = frozenset({RequestStage.RESPONDED, RequestStage.REJECTED, RequestStage.ERRORED})
GATE_STAGES = frozenset({RequestStage.AUTHENTICATING, RequestStage.AUTHORIZING})


@dataclass
class RequestPipeline:
    """State of one request travelling through the gates."""

    method: str
    path: str
    token: str | None = None
    # Set by the authentication gate.
    username: str | None = None
    request_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    stage: RequestStage = RequestStage.RECEIVED
    # Stage the request was in when it was rejected or errored.
    failed_at: RequestStage | None = None
    history: list[RequestStage] = field(default_factory=lambda: [RequestStage.RECEIVED])

    @property
    def finished(self) -> bool:
        return self.stage in TERMINAL_STAGES

    def _enter(self, stage: RequestStage) -> None:
        self.stage = stage
        self.history.append(stage)
        ctx_stage.set(stage.value)

    def advance(self, stage: RequestStage) -> None:
        """Move forward along the happy path.  Stages may be skipped, never revisited."""
        if self.finished:
            raise RuntimeError(f"Request already {self.stage.value}")
        if stage in (RequestStage.REJECTED, RequestStage.ERRORED):
            raise ValueError("Use fail() to end a request unsuccessfully")
        if _ORDER.index(stage) <= _ORDER.index(self.stage):
            raise RuntimeError(f"Cannot move from {self.stage.value} back to {stage.value}")
        self._enter(stage)

    def respond(self) -> None:
        if self.stage is not RequestStage.EXECUTING:
            self.advance(RequestStage.EXECUTING)
        self.advance(RequestStage.RESPONDED)

    def fail(self, exc: BaseException) -> RequestStage:
        """Close the pipeline after *exc*; returns the terminal stage.

        Failures raised by a gate or by request validation reject the request.
        Anything raised once the gates and validation have passed belongs to
        the business action and errors it.
        """
        if self.finished:
            return self.stage
        if isinstance(exc, RequestValidationError) or self.stage is not RequestStage.VALIDATING:
            self.failed_at = self.stage
            self._enter(RequestStage.REJECTED)
        else:
            self._enter(RequestStage.EXECUTING)
            self.failed_at = RequestStage.EXECUTING
            self._enter(RequestStage.ERRORED)
        return self.stage


def current_pipeline(request: Request) -> RequestPipeline | None:
    return getattr(request.state, "pipeline", None)


def acting_username(request: Request) -> str | None:
    """Username of the authenticated caller, for routes behind an authenticating chain."""
    pipeline = current_pipeline(request)
    return pipeline.username if pipeline is not None else None


class PipelineRoute(APIRoute):
    """APIRoute that tracks every request with a :class:`RequestPipeline`."""

    def get_route_handler(self) -> Callable[[Request], Coroutine[Any, Any, Response]]:
        handler = super().get_route_handler()

        async def pipeline_handler(request: Request) -> Response:
            pipeline = RequestPipeline(
                method=request.method,
                path=request.url.path,
                token=bearer_token(request.headers.get("authorization")),
            )
            request.state.pipeline = pipeline
            ctx_request_id.set(pipeline.request_id)
            ctx_username.set(None)
            ctx_stage.set(pipeline.stage.value)
            try:
                response = await handler(request)
            except Exception as exc:
                pipeline.fail(exc)
                raise
            pipeline.respond()
            response.headers[REQUEST_ID_HEADER] = pipeline.request_id
            logger.debug("%s %s -> %s", pipeline.method, pipeline.path, response.status_code)
            return response

        return pipeline_handler


# ── Chains ──────────────────────────────────────────────────────


def _pipeline_of(request: Request) -> RequestPipeline:
    pipeline = current_pipeline(request)
    if pipeline is None:
        # Route registered without PipelineRoute (e.g. in a bare test app).
        pipeline = RequestPipeline(method=request.method, path=request.url.path)
        request.state.pipeline = pipeline
    return pipeline


def public():
    """Chain for open endpoints: straight to validation."""

    async def _chain(request: Request) -> None:
        _pipeline_of(request).advance(RequestStage.VALIDATING)

    return _chain


def authenticated():
    """Chain for endpoints that only need a valid token."""

    async def _chain(
        request: Request,
        authorization: str | None = Header(default=None),
    ) -> None:
        pipeline = _pipeline_of(request)
        pipeline.advance(RequestStage.AUTHENTICATING)
        pipeline.username = authenticate(authorization).username
        pipeline.advance(RequestStage.VALIDATING)

    return _chain


def guarded(doc_type: DocType, permission_type: PermissionType):
    """Chain for endpoints that need a grant for (*doc_type*, *permission_type*)."""

    async def _chain(
        request: Request,
        authorization: str | None = Header(default=None),
        db: AsyncSession = Depends(get_db),
    ) -> None:
        pipeline = _pipeline_of(request)
        pipeline.advance(RequestStage.AUTHENTICATING)
        pipeline.username = authenticate(authorization).username
        pipeline.advance(RequestStage.AUTHORIZING)
        await authorize(db, authorization, doc_type, permission_type)
        pipeline.advance(RequestStage.VALIDATING)

    return _chain
