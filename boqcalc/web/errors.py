"""Maps BOQCalc business errors onto HTTP responses."""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from boqcalc.errors import (
    BOQCalcError,
    NotFound,
    PreconditionFailed,
    TransientIOFailure,
    ValidationFailed,
)

logger = structlog.get_logger(__name__)

STATUS_CODES: dict[type[BOQCalcError], int] = {
    PreconditionFailed: 409,
    NotFound: 404,
    ValidationFailed: 422,
    TransientIOFailure: 503,
}


def status_code_for(exc: BOQCalcError) -> int:
    for error_type, code in STATUS_CODES.items():
        if isinstance(exc, error_type):
            return code
    return 500


async def boqcalc_error_handler(request: Request, exc: BOQCalcError) -> JSONResponse:
    code = status_code_for(exc)
    if code >= 500:
        logger.error("request_error", path=request.url.path, error=str(exc), exc_info=exc)
    else:
        logger.info("request_rejected", path=request.url.path, status_code=code, error=str(exc))
    return JSONResponse(status_code=code, content={"detail": str(exc)})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BOQCalcError, boqcalc_error_handler)
