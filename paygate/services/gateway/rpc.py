"""Fallback protocol surface for requests no REST route claims.

The dispatcher only knows `FallbackAdapter`: a callable that resolves the
current fallback handler and hands it the untouched request. The default
handler is a JSON-RPC 2.0 endpoint over the provider capability, used by typed
SDK clients.
"""

import json
from collections.abc import Callable
from typing import Any, Protocol

from starlette.requests import Request
from starlette.responses import Response

from paygate.common.errors import Failure
from paygate.common.logging import logger
from paygate.services.gateway.provider import StripeProvider
from paygate.services.gateway.responses import error_response, json_response, report_failure


PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
PROVIDER_ERROR = -32000


class FallbackHandler(Protocol):
    async def handle(self, request: Request) -> Response: ...


class FallbackAdapter:
    """Invoke whatever fallback handler `resolve` returns.

    Resolution happens per request so that a missing configuration surfaces
    as a failure of this call rather than at startup.
    """

    def __init__(self, resolve: Callable[[], FallbackHandler]) -> None:
        self._resolve = resolve

    async def __call__(self, request: Request) -> Response:
        handler = self._resolve()
        return await handler.handle(request)


def _rpc_result(request_id: Any, result: Any) -> Response:
    return json_response({"jsonrpc": "2.0", "id": request_id, "result": result})


def _rpc_error(request_id: Any, code: int, message: str, data: dict | None = None, status: int = 200) -> Response:
    error: dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return json_response({"jsonrpc": "2.0", "id": request_id, "error": error}, status)


class ProviderRpcHandler:
    """JSON-RPC 2.0 binding of the provider's allowlisted operations.

    Request::

        POST /rpc
        {"jsonrpc": "2.0", "id": 1, "method": "customers.retrieve", "params": ["cus_1"]}

    List params are passed positionally, object params as keyword arguments.
    """

    def __init__(self, provider: StripeProvider) -> None:
        self.provider = provider

    async def handle(self, request: Request) -> Response:
        if request.method != "POST":
            return error_response(f"No route for {request.method} {request.url.path}", 405)

        try:
            envelope = json.loads(await request.body())
        except ValueError:
            return _rpc_error(None, PARSE_ERROR, "Parse error", status=400)

        if not isinstance(envelope, dict) or not isinstance(envelope.get("method"), str):
            return _rpc_error(None, INVALID_REQUEST, "Invalid Request", status=400)

        request_id = envelope.get("id")
        operation = envelope["method"]
        params = envelope.get("params", [])
        if not isinstance(params, (list, dict)):
            return _rpc_error(request_id, INVALID_REQUEST, "Invalid Request", status=400)
        if not self.provider.supports(operation):
            return _rpc_error(request_id, METHOD_NOT_FOUND, f"Method not found: {operation}")

        logger.info("rpc_call method=%s", operation)
        if isinstance(params, list):
            result = await self.provider.call(operation, *params)
        else:
            result = await self.provider.call(operation, **params)

        if isinstance(result, Failure):
            classified = report_failure(
                result,
                service_name=self.provider.service_name,
                method=request.method,
                route=f"rpc:{operation}",
            )
            return _rpc_error(
                request_id,
                PROVIDER_ERROR,
                classified.message,
                data={"kind": result.kind.value, "status": classified.status},
            )
        return _rpc_result(request_id, result.value)
