"""
HTTP API for the DA gateway (FastAPI).

Endpoints
---------
POST /da/dispatch
    Body : {"batch_number": <int>, "data": "<hex>"}
    Resp : {"blob_id": "<hex>"}

GET /da/inclusion/{blob_id}
    Resp : {"data": "<hex>"}, 404 when the blob id is unknown

GET /health
    Resp : {"da": {"status": <bool>, "message": "<str>"}}

Client errors come back as ``{"detail": ..., "retriable": ...}``. Retriable
failures use 503 so callers can tell them apart from fatal 500s.
"""

import logging
import time
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from dagateway.core.da.client import make_da_client
from dagateway.core.da.codec import hex_to_bytes
from dagateway.core.da.errors import DAError, DecodeError
from dagateway.core.da.types import DispatchResponse
from dagateway.core.metrics import DaMetrics
from dagateway.services.da import DaService
from dagateway.services.health import HealthCheckResponse, HealthCheckService

logger = logging.getLogger(__name__)


class DispatchRequest(BaseModel):
    batch_number: int = Field(..., ge=0, description="Batch the blob belongs to")
    data: str = Field(..., description="Blob content as a hex string")


class InclusionResponse(BaseModel):
    data: str = Field(..., description="Blob content as a hex string")


class ErrorPayload(BaseModel):
    detail: str
    retriable: bool = False


def _error(status_code: int, detail: str, retriable: bool = False) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorPayload(detail=detail, retriable=retriable).model_dump(),
    )


def _status_for(error: DAError) -> int:
    if error.retriable:
        return 503
    if isinstance(error, DecodeError):
        return 400
    return 500


def create_app(da_service: DaService, health_service: HealthCheckService) -> FastAPI:
    """Build the FastAPI app serving the DA endpoints."""
    app = FastAPI(
        title="DA Gateway",
        description="Dispatch blobs to a data availability layer and fetch them back.",
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        logger.info(f"Started processing request {request.method} {request.url.path}")
        response = await call_next(request)
        took_ms = int((time.perf_counter() - start) * 1000)
        logger.info(
            f"Finished processing request {request.method} {request.url.path}: "
            f"status={response.status_code} took_ms={took_ms}"
        )
        return response

    @app.exception_handler(RequestValidationError)
    async def invalid_body(request: Request, exc: RequestValidationError):
        logger.error(f"Invalid JSON: {exc.errors()}")
        return _error(400, "Invalid JSON body")

    @app.exception_handler(DAError)
    async def da_error(request: Request, exc: DAError):
        return _error(_status_for(exc), str(exc), exc.retriable)

    @app.post(
        "/da/dispatch",
        response_model=DispatchResponse,
        responses={400: {"model": ErrorPayload}, 500: {"model": ErrorPayload}, 503: {"model": ErrorPayload}},
    )
    def dispatch(payload: DispatchRequest):
        try:
            data = hex_to_bytes(payload.data)
        except DecodeError:
            logger.error("Invalid data format")
            return _error(400, "Invalid data format, must be a hex string")

        try:
            return da_service.dispatch_blob(payload.batch_number, data)
        except DAError as e:
            logger.error(f"Error to dispatch the blob data: {str(e)}")
            raise

    @app.get(
        "/da/inclusion/{blob_id}",
        response_model=InclusionResponse,
        responses={400: {"model": ErrorPayload}, 404: {}, 500: {"model": ErrorPayload}, 503: {"model": ErrorPayload}},
    )
    def inclusion(blob_id: str):
        try:
            inclusion_data = da_service.get_inclusion_data(blob_id)
        except DAError as e:
            logger.error(f"Error to fetch blob data: {str(e)}")
            raise

        if inclusion_data is None:
            return _error(404, f"Blob {blob_id} not found")
        return InclusionResponse(data=inclusion_data.data.hex())

    @app.get("/health", response_model=HealthCheckResponse)
    def health():
        return health_service.health_check()

    return app


def build_app(config, metrics: Optional[DaMetrics] = None) -> FastAPI:
    """Wire the configured DA client and services into an app.

    Raises:
        ConnectivityError: If the configured backend cannot be reached
    """
    da_client = make_da_client(config)

    da_service = DaService(da_client.clone(), metrics)
    health_service = HealthCheckService(da_client.clone())

    app = create_app(da_service, health_service)
    app.state.config = config
    app.state.metrics = da_service.metrics
    return app
