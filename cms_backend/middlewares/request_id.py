"""Middleware Starlette pour attribuer un identifiant de requête et l'exposer aux logs.

L'identifiant (repris de l'en-tête entrant s'il existe) est lié au contexte structlog pour toute la
durée de la requête, posé sur `request.state.request_id` et renvoyé dans l'en-tête de réponse.
"""

from collections.abc import Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from cms_backend.domain.identifiers import new_id


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Middleware pour corréler les logs d'une même requête."""

    def __init__(self, app: ASGIApp, header_name: str = "X-Request-ID") -> None:
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request, call_next: Callable):
        request_id = request.headers.get(self.header_name) or new_id()
        request.state.request_id = request_id
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id, method=request.method, path=request.url.path
        )
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.clear_contextvars()
        response.headers[self.header_name] = request_id
        return response
