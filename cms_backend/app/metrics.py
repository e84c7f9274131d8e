"""
Métriques Prometheus pour l'application.

Ce module définit les métriques HTTP et les métriques du moteur de contenus (compilation de schéma,
validation, fusion des traductions), ainsi que l'endpoint `/metrics`.
"""

import time

from fastapi import APIRouter, Request
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Histogram,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

metrics_router = APIRouter()

REQUEST_COUNT = Counter(
    "http_requests_total", "Total HTTP requests", ["method", "route", "status"]
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds", "Latency of HTTP requests", ["route"]
)

# Moteur de schéma / contenus
SCHEMA_COMPILE_SECONDS = Histogram(
    "cms_schema_compile_seconds",
    "Latency of schema compilation for a content collection",
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0],
)
CONTENT_VALIDATION_TOTAL = Counter(
    "cms_content_validation_total",
    "Content payload validations",
    ["outcome"],
)
TRANSLATION_MERGE_TOTAL = Counter(
    "cms_translation_merge_total",
    "Base/translation merges performed for read views",
)


def normalize_route(request: Request) -> str:
    """Gabarit de route (`/contents/{content_id}/get`) plutôt que le chemin brut."""
    route = request.scope.get("route")
    path = getattr(route, "path", None)
    return path or request.scope.get("path", "unknown")


@metrics_router.get("/metrics")
def metrics():
    """
    Expose les métriques Prometheus au format texte.

    Returns:
        Response: Réponse HTTP contenant les métriques au format Prometheus.
    """
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """
    Middleware Prometheus pour mesurer les métriques HTTP.

    Collecte le nombre de requêtes et la latence par gabarit de route.
    """

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response: Response = await call_next(request)
        route = normalize_route(request)
        REQUEST_COUNT.labels(request.method, route, str(response.status_code)).inc()
        REQUEST_LATENCY.labels(route).observe(time.perf_counter() - start)
        return response
