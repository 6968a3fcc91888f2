"""FastAPI application factory and HTTP schemas for the inquiry service.

This module provides the REST interface in front of the submission
pipeline:

- ``POST /inquiries``: store a contact-form submission and notify the operator
- ``GET /inquiries/{id}``: read back one stored inquiry (token protected)
- ``GET /health``: liveness probe, also tells whether mail is enabled
- ``GET /metrics``: Prometheus metrics (token protected)

Outcomes map to status codes: ``201`` when the inquiry was stored and the
operator notified, ``202`` when it was stored but the notification failed,
``503`` when nothing was stored and ``422`` for invalid drafts.

Example:
    Creating and running the API application::

        from inquiry_service.api import create_app

        app = create_app(orchestrator, store, metrics=metrics, api_token="secret")
        uvicorn.run(app, host="0.0.0.0", port=8000)
"""

from typing import AsyncContextManager, Callable, Optional
import logging

from fastapi import Depends, FastAPI, HTTPException, Request, Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.security import APIKeyHeader
from pydantic import BaseModel

from .errors import StorageUnavailable, ValidationError
from .models import Inquiry, InquiryDraft, SubmissionOutcome
from .orchestrator import SubmissionOrchestrator
from .prometheus import SubmissionMetrics
from .store import InquiryStore

logger = logging.getLogger(__name__)

API_TOKEN_HEADER_NAME = "X-API-Token"
api_key_scheme = APIKeyHeader(name=API_TOKEN_HEADER_NAME, auto_error=False)

RECEIVED_MESSAGE = "Thank you for your inquiry. We'll be in touch shortly."


async def require_token(request: Request, api_token: str | None = Depends(api_key_scheme)) -> None:
    """Validate the API token carried in the ``X-API-Token`` header.

    If a token has been configured through :func:`create_app` and a request
    provides either a missing or different value, a ``401`` error is raised.
    When no token is configured the dependency is effectively bypassed.
    """
    expected = getattr(request.app.state, "api_token", None)
    if expected is None:
        return
    if not api_token or api_token != expected:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid or missing API token")


auth_dependency = Depends(require_token)


class SubmissionResponse(BaseModel):
    """Response returned by ``POST /inquiries``."""
    ok: bool
    outcome: SubmissionOutcome
    id: Optional[str] = None
    notified: bool = False
    message: str
    message_id: Optional[str] = None
    notification_error: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    mail: str


def create_app(
    orchestrator: SubmissionOrchestrator,
    store: InquiryStore,
    *,
    metrics: SubmissionMetrics | None = None,
    api_token: str | None = None,
    lifespan: Callable[[FastAPI], AsyncContextManager] | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Parameters
    ----------
    orchestrator:
        The :class:`SubmissionOrchestrator` that handles each submission.
    store:
        The :class:`InquiryStore` used for read-back.
    metrics:
        Optional metrics collector served on ``/metrics``.
    api_token:
        Optional secret protecting the admin endpoints. When provided, the
        ``X-API-Token`` header must match this value.
    lifespan:
        Optional lifespan context manager for startup/shutdown events.

    Returns
    -------
    FastAPI
        A configured application ready to be served by Uvicorn or any ASGI
        server.
    """
    api = FastAPI(title="Inquiry Service", lifespan=lifespan)
    api.state.api_token = api_token
    api.state.orchestrator = orchestrator
    api.state.store = store
    api.state.metrics = metrics

    @api.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Log validation errors without echoing the submitted values."""
        fields = [".".join(str(part) for part in err.get("loc", ())) for err in exc.errors()]
        logger.warning(f"Validation error on {request.method} {request.url.path}: {fields}")
        return JSONResponse(status_code=422, content={"detail": jsonable_encoder(exc.errors())})

    @api.exception_handler(ValidationError)
    async def draft_validation_handler(request: Request, exc: ValidationError):
        return JSONResponse(status_code=422, content={"detail": str(exc), "fields": list(exc.fields)})

    @api.get("/health", response_model=HealthResponse)
    async def health():
        """Health check endpoint for container monitoring (no authentication required)."""
        dispatcher = api.state.orchestrator.dispatcher
        enabled = getattr(dispatcher, "enabled", True)
        return HealthResponse(status="ok", mail="enabled" if enabled else "disabled")

    @api.post(
        "/inquiries",
        response_model=SubmissionResponse,
        response_model_exclude_none=True,
        status_code=status.HTTP_201_CREATED,
    )
    async def submit_inquiry(draft: InquiryDraft, response: Response):
        """Store a contact-form submission and notify the operator."""
        result = await api.state.orchestrator.submit(draft)

        if result.outcome is SubmissionOutcome.FAILURE:
            raise HTTPException(
                status.HTTP_503_SERVICE_UNAVAILABLE,
                "Your inquiry could not be saved. Please try again later.",
            )

        if result.outcome is SubmissionOutcome.PARTIAL_SUCCESS:
            response.status_code = status.HTTP_202_ACCEPTED
            return SubmissionResponse(
                ok=True,
                outcome=result.outcome,
                id=result.inquiry.id,
                notified=False,
                message=RECEIVED_MESSAGE,
                notification_error=result.error_type,
            )

        return SubmissionResponse(
            ok=True,
            outcome=result.outcome,
            id=result.inquiry.id,
            notified=True,
            message=RECEIVED_MESSAGE,
            message_id=result.dispatch.message_id,
        )

    @api.get("/inquiries/{inquiry_id}", response_model=Inquiry, dependencies=[auth_dependency])
    async def get_inquiry(inquiry_id: str):
        """Read back one stored inquiry."""
        try:
            inquiry = await api.state.store.get(inquiry_id)
        except StorageUnavailable:
            raise HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, "Inquiry storage unavailable")
        if inquiry is None:
            raise HTTPException(404, f"Inquiry '{inquiry_id}' not found")
        return inquiry

    @api.get("/metrics", dependencies=[auth_dependency])
    async def metrics_endpoint():
        """Expose Prometheus metrics collected by the pipeline."""
        if api.state.metrics is None:
            raise HTTPException(404, "Metrics not enabled")
        return Response(content=api.state.metrics.generate_latest(), media_type="text/plain; version=0.0.4")

    return api
