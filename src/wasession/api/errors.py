"""Map ServiceError and request validation failures to JSON error bodies."""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from wasession.errors import ErrorKind, ServiceError
from wasession.observability.logging import get_logger
from wasession.observability.redaction import safe_log_context

logger = get_logger(__name__)


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    logger.warning(
        "request failed",
        extra={
            "extra_fields": safe_log_context(
                method=request.method,
                path=request.url.path,
                status=exc.status_code,
                kind=exc.kind.value,
            )
        },
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return await service_error_handler(
        request, ServiceError(ErrorKind.VALIDATION, "Invalid request body")
    )


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
