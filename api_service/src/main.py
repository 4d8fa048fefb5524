"""
FastAPI front end for the attestation document service.

Endpoints:
    GET  /                     Banner
    GET  /healthz              Health check (503 once shutdown has begun)
    GET  /attestation          Attestation PDF, from cache or FTP archive
    GET  /sampleIdToBarCode    Generate a Code 128 PNG label for a key
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import FileResponse, HTMLResponse, PlainTextResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from api_service.src.lifecycle import HealthState
from api_service.src.middleware import (
    AccessLogMiddleware,
    HandlerTimeoutMiddleware,
    RequestIdMiddleware,
    request_id_from_scope,
)
from domain.models import DocumentKind
from shared_utils.config_loader import get_settings
from shared_utils.constants import APIEndpoints, Headers, LogScope, ResponseText
from shared_utils.di_container import get_di_container
from shared_utils.error_handler import (
    ArchiveUnavailableError,
    DocumentNotFoundError,
    ValidationError,
    log_exception,
)
from shared_utils.logging_utils import ContextualLogger, configure_logging
from shared_utils.validation import InputValidator


# ---------------------------------------------------------------------------
# Application bootstrap
# ---------------------------------------------------------------------------

settings = get_settings()
configure_logging(settings.log_level)
logger = ContextualLogger(scope=LogScope.API)

health_state = HealthState()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Mark the process healthy while it is serving."""
    health_state.mark_healthy()
    logger.info(
        "server_ready",
        listen_addr=settings.listen_addr,
        document_directory=str(settings.document_directory),
        environment=settings.environment,
    )
    yield
    health_state.mark_unhealthy()
    logger.info("server_stopped")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description=settings.app_description,
    lifespan=lifespan,
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
)

# Outermost last: request id → access log → handler timeout → routes
app.add_middleware(HandlerTimeoutMiddleware, timeout_seconds=settings.write_timeout)
app.add_middleware(AccessLogMiddleware)
app.add_middleware(RequestIdMiddleware)


@app.exception_handler(StarletteHTTPException)
async def plain_http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> PlainTextResponse:
    """Answer routing errors (unknown path, wrong method) in plain text."""
    body = ResponseText.NOT_FOUND if exc.status_code == 404 else f"{exc.detail}\n"
    return PlainTextResponse(body, status_code=exc.status_code, headers=exc.headers)


def _request_key(request: Request) -> str:
    """First ``key`` query parameter, validated."""
    return InputValidator.validate_document_key(
        InputValidator.first_value(request.query_params.getlist("key"))
    )


def _internal_error(exc: Exception) -> Response:
    log_exception(exc, scope=LogScope.API)
    return PlainTextResponse(
        ResponseText.INTERNAL_ERROR,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


# ---------------------------------------------------------------------------
# Banner and health
# ---------------------------------------------------------------------------

@app.get(APIEndpoints.INDEX)
def index() -> PlainTextResponse:
    """Banner endpoint."""
    return PlainTextResponse(
        ResponseText.INDEX,
        headers={Headers.CONTENT_TYPE_OPTIONS: "nosniff"},
    )


@app.get(APIEndpoints.HEALTH)
def health_check() -> Response:
    """Health check endpoint."""
    if health_state.is_healthy:
        return PlainTextResponse(ResponseText.HEALTHY)
    return Response(status_code=status.HTTP_503_SERVICE_UNAVAILABLE)


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------

@app.get(APIEndpoints.ATTESTATION)
def attestation(request: Request) -> Response:
    """Serve ``<key>.pdf``, fetching it from the archive on a cache miss.

    Absent documents and an unreachable archive both answer 200 with the
    fixed not-found page; the distinction is only visible in the logs.
    """
    request_id = request_id_from_scope(request.scope)
    try:
        key = _request_key(request)
    except ValidationError as e:
        logger.warning("attestation_rejected", request_id=request_id, error=e.message)
        return Response(status_code=status.HTTP_400_BAD_REQUEST)

    logger.info("attestation_requested", request_id=request_id, key=key)

    try:
        resolver = get_di_container().get_document_resolver()
        path = resolver.resolve(key, DocumentKind.PDF.extension, request_id=request_id)
    except (DocumentNotFoundError, ArchiveUnavailableError) as e:
        logger.warning(
            "attestation_not_found",
            request_id=request_id,
            key=key,
            error_code=e.error_code,
        )
        return HTMLResponse(ResponseText.PDF_NOT_FOUND_HTML)
    except Exception as e:
        return _internal_error(e)

    return FileResponse(path, media_type=DocumentKind.PDF.media_type)


@app.get(APIEndpoints.BARCODE)
def sample_id_to_barcode(request: Request) -> Response:
    """Render ``key`` as a Code 128 label and report where it was written."""
    request_id = request_id_from_scope(request.scope)
    key: Optional[str] = None
    try:
        key = _request_key(request)
        path = get_di_container().get_barcode_service().generate(key, request_id=request_id)
    except ValidationError as e:
        logger.warning("barcode_rejected", request_id=request_id, key=key, error=e.message)
        return Response(status_code=status.HTTP_400_BAD_REQUEST)
    except Exception as e:
        return _internal_error(e)

    return PlainTextResponse(ResponseText.BARCODE_WRITTEN.format(path=path))
