"""Middleware Starlette pour mesurer le temps de traitement des requêtes.

Ajoute l'en-tête `X-Process-Time-ms` et journalise les requêtes plus lentes que le seuil configuré.
"""

import time
from collections.abc import Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

log = structlog.get_logger(__name__)


class TimingMiddleware(BaseHTTPMiddleware):
    """Middleware pour mesurer le temps de traitement des requêtes."""

    def __init__(
        self,
        app: ASGIApp,
        header_name: str = "X-Process-Time-ms",
        slow_threshold_ms: float = 500.0,
    ) -> None:
        super().__init__(app)
        self.header_name = header_name
        self.slow_threshold_ms = slow_threshold_ms

    async def dispatch(self, request, call_next: Callable):
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        response.headers[self.header_name] = f"{duration_ms:.3f}"
        if duration_ms >= self.slow_threshold_ms:
            log.warning(
                "http.slow_request",
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round(duration_ms, 3),
            )
        return response
