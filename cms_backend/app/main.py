"""
Application principale FastAPI.

Ce module assemble les composants de l'application : middlewares, gestionnaires d'erreurs, routes
métier, santé et métriques.

Responsabilités du module:
- Initialiser le logging structuré et le tracing
- Attacher le conteneur de services à l'application
- Ajouter les middlewares (request id, timing, Prometheus)
- Monter les routers
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from cms_backend.api.routes_attributes import router as attributes_router
from cms_backend.api.routes_collections import router as collections_router
from cms_backend.api.routes_components import router as components_router
from cms_backend.api.routes_contents import router as contents_router
from cms_backend.api.routes_health import router as health_router
from cms_backend.api.routes_locales import router as locales_router
from cms_backend.api.routes_translations import router as translations_router
from cms_backend.apigw.errors import register_error_handlers
from cms_backend.app.metrics import PrometheusMiddleware, metrics_router
from cms_backend.app.tracing import setup_tracing
from cms_backend.core.container import Container
from cms_backend.core.container import container as default_container
from cms_backend.core.logging import setup_logging
from cms_backend.middlewares.request_id import RequestIDMiddleware
from cms_backend.middlewares.timing import TimingMiddleware


def create_app(container: Container | None = None) -> FastAPI:
    """
    Construit et retourne l'application FastAPI prête à l'usage.

    Étapes:
    - Configure le logging structuré (structlog) et le tracing OTLP éventuel
    - Attache le conteneur (`app.state.container`) et ses hooks de démarrage/arrêt
    - Ajoute les middlewares utiles au debug/traçabilité
    - Publie les routes métier, de santé et de métriques
    """
    container = container or default_container
    settings = container.settings
    setup_logging(settings.LOG_LEVEL, settings.APP_ENV)
    setup_tracing(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await container.startup()
        yield
        await container.shutdown()

    app = FastAPI(title=settings.APP_NAME, debug=settings.APP_DEBUG, lifespan=lifespan)
    app.state.container = container
    register_error_handlers(app)
    app.add_middleware(PrometheusMiddleware)
    app.add_middleware(TimingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.include_router(health_router)
    app.include_router(metrics_router)
    app.include_router(collections_router)
    app.include_router(components_router)
    app.include_router(attributes_router)
    app.include_router(contents_router)
    app.include_router(translations_router)
    app.include_router(locales_router)
    return app


app = create_app()
