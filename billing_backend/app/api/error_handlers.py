"""Map domain exceptions to JSON error responses."""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm.exc import StaleDataError

from billing_backend.app.core.exceptions import (
    BillingError,
    ConfigurationError,
    ConflictError,
    InvalidStateTransition,
    NotFoundError,
    TransportError,
    ValidationError,
)
from billing_backend.app.core.logging import get_logger

logger = get_logger(__name__)

EXCEPTION_STATUS_MAP: dict[type[BillingError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidStateTransition: status.HTTP_409_CONFLICT,
    ConflictError: status.HTTP_409_CONFLICT,
    TransportError: status.HTTP_502_BAD_GATEWAY,
    ConfigurationError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def status_for(exc: BillingError) -> int:
    for exc_type, code in EXCEPTION_STATUS_MAP.items():
        if isinstance(exc, exc_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def setup_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(BillingError)
    async def billing_error_handler(request: Request, exc: BillingError) -> JSONResponse:
        status_code = status_for(exc)
        log = logger.error if status_code >= 500 else logger.info
        log("request_failed", path=request.url.path, error_code=exc.code, error=exc.message, status_code=status_code)
        content = exc.to_dict()
        if isinstance(exc, ConfigurationError):
            content["missing"] = exc.details.get("missing", [])
        return JSONResponse(status_code=status_code, content=content)

    @app.exception_handler(StaleDataError)
    async def stale_data_handler(request: Request, exc: StaleDataError) -> JSONResponse:
        logger.info("stale_write_rejected", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=status.HTTP_409_CONFLICT, content=ConflictError().to_dict())
