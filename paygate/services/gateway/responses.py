"""JSON responses, failure reporting and request body parsing for handlers."""

import json
from typing import Any

from pydantic import BaseModel, ValidationError
from starlette.requests import Request
from starlette.responses import JSONResponse

from paygate.common.errors import (
    ClassifiedError,
    Failure,
    InvalidBodyError,
    ProviderFailure,
    Result,
    SchemaError,
    classify,
    failure_kind_for,
)
from paygate.common.logging import logger
from paygate.common.metrics import gateway_errors_total


def json_response(data: Any, status: int = 200) -> JSONResponse:
    return JSONResponse(data, status_code=status)


def error_response(message: str, status: int = 400) -> JSONResponse:
    """Error body shape shared by every failure path: `{"error": message}`."""

    return JSONResponse({"error": message}, status_code=status)


def count_error(service_name: str, kind: str, status: int) -> None:
    gateway_errors_total.labels(service=service_name, kind=kind, status_code=str(status)).inc()


def report_failure(error: Any, *, service_name: str, method: str, route: str) -> ClassifiedError:
    """Classify a failure, log it once and count it in `gateway_errors_total`.

    5xx failures are logged as errors with the traceback; client-side ones as
    warnings with the kind and status only.
    """

    classified = classify(error)
    if isinstance(error, Failure):
        kind = error.kind.value
    elif isinstance(error, BaseException):
        kind = failure_kind_for(error).value
    else:
        kind = "unknown"

    if classified.status >= 500:
        exc_info = error if isinstance(error, BaseException) else None
        logger.error("request_failed method=%s route=%s kind=%s", method, route, kind, exc_info=exc_info)
    else:
        logger.warning("request_failed method=%s route=%s kind=%s status=%s", method, route, kind, classified.status)
    count_error(service_name, kind, classified.status)
    return classified


def render(result: Result, status: int = 200) -> JSONResponse:
    """Serialize a provider result.

    A `Failure` is raised as `ProviderFailure` so the dispatcher boundary
    reports it like any other handler failure.
    """

    if isinstance(result, Failure):
        raise ProviderFailure(result)
    return json_response(result.value, status)


async def parse_body(request: Request) -> dict[str, Any]:
    """Read and decode a JSON object body, raising `InvalidBodyError` otherwise."""

    raw = await request.body()
    try:
        data = json.loads(raw)
    except ValueError as exc:
        raise InvalidBodyError(str(exc)) from exc
    if not isinstance(data, dict):
        raise InvalidBodyError(f"expected a JSON object, got {type(data).__name__}")
    return data


def validate_body(model: type[BaseModel], data: dict[str, Any]) -> dict[str, Any]:
    """Check `data` against `model` and return only the keys the client sent."""

    try:
        return model.model_validate(data).model_dump(exclude_unset=True)
    except ValidationError as exc:
        details = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or 'body'}: {error['msg']}" for error in exc.errors()
        )
        raise SchemaError(f"Invalid request body: {details}") from exc
