"""Request dispatch: route table first, fallback handler second.

Every handler runs inside one failure boundary. Body-parse failures get a fixed
400; everything else is classified into a redacted message and status. Nothing
raised by a single request escapes into the ASGI server.
"""

from collections.abc import Awaitable, Callable

from starlette.requests import Request
from starlette.responses import Response

from paygate.common.errors import INVALID_BODY_MESSAGE, InvalidBodyError, NotConfiguredError, find_in_chain
from paygate.common.logging import logger
from paygate.common.metrics import fallback_requests_total
from paygate.services.gateway.responses import count_error, error_response, report_failure
from paygate.services.gateway.routing import RouteTable


Fallback = Callable[[Request], Awaitable[Response]]


class Dispatcher:
    """Routes one request to a REST handler or the fallback handler."""

    def __init__(self, routes: RouteTable, fallback: Fallback, service_name: str = "paygate") -> None:
        self.routes = routes
        self.fallback = fallback
        self.service_name = service_name

    async def dispatch(self, request: Request) -> Response:
        method = request.method
        path = request.url.path

        matched = self.routes.match(method, path)
        if matched is not None:
            request.state.route = matched.route.template
            try:
                return await matched.route.handler(request, matched.params)
            except InvalidBodyError as exc:
                logger.warning("invalid_body method=%s route=%s detail=%s", method, matched.route.template, exc.detail)
                count_error(self.service_name, "invalid_body", 400)
                return error_response(INVALID_BODY_MESSAGE, 400)
            except Exception as exc:
                return self._failure_response(exc, method, matched.route.template)

        request.state.route = "fallback"
        try:
            response = await self.fallback(request)
        except Exception as exc:
            fallback_requests_total.labels(service=self.service_name, outcome="error").inc()
            not_configured = find_in_chain(exc, NotConfiguredError)
            if not_configured is not None:
                logger.error("fallback_unavailable method=%s path=%s reason=not_configured", method, path)
                count_error(self.service_name, "configuration", 503)
                return error_response(str(not_configured), 503)
            return self._failure_response(exc, method, "fallback")
        fallback_requests_total.labels(service=self.service_name, outcome="ok").inc()
        return response

    def _failure_response(self, exc: Exception, method: str, route: str) -> Response:
        classified = report_failure(exc, service_name=self.service_name, method=method, route=route)
        return error_response(classified.message, classified.status)
