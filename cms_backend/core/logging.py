"""Configuration de logging basée sur structlog.

Objectif du module
------------------
- Fournir des logs structurés lisibles en développement, JSON ailleurs.
- Fusionner le contexte de requête (`request_id`) lié via `structlog.contextvars`.
"""

import logging
import sys

import structlog


def setup_logging(level: str = "INFO", env: str = "dev") -> None:
    """Configure structlog pour produire des logs détaillés et filtrables."""
    timestamper = structlog.processors.TimeStamper(fmt="ISO")
    renderer = (
        structlog.dev.ConsoleRenderer()
        if env == "dev"
        else structlog.processors.JSONRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            timestamper,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level.upper())),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )
