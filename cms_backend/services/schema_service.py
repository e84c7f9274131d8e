# ============================================================
# Module : cms_backend/services/schema_service.py
# Objet  : Compilation instrumentée du schéma + validation des payloads.
# Contexte : Partagé par ContentService et ContentTranslationService.
# Invariants :
#  - Compilation avant validation, validation avant écriture.
#  - Le schéma compilé est une valeur de requête, jamais mise en cache ici.
# ============================================================

from __future__ import annotations

import time
from typing import Any

import structlog

from cms_backend.app.metrics import CONTENT_VALIDATION_TOTAL, SCHEMA_COMPILE_SECONDS
from cms_backend.app.tracing import tracer
from cms_backend.domain.entities import ContentCollection
from cms_backend.domain.errors import ValidationError
from cms_backend.domain.schema import CompiledSchema
from cms_backend.domain.schema_compiler import SchemaCompiler
from cms_backend.domain.validator import validate


class SchemaService:
    """Façade du compilateur et du validateur pour les services d'orchestration."""

    def __init__(self, compiler: SchemaCompiler) -> None:
        self.compiler = compiler
        self._log = structlog.get_logger(__name__).bind(component="schema_service")

    async def compile(self, collection: ContentCollection) -> CompiledSchema:
        start = time.perf_counter()
        with tracer.start_as_current_span("schema.compile") as span:
            span.set_attribute("cms.collection_id", collection.id)
            schema = await self.compiler.compile_collection(collection.id)
        elapsed = time.perf_counter() - start
        SCHEMA_COMPILE_SECONDS.observe(elapsed)
        self._log.debug(
            "schema.compiled",
            collection_id=collection.id,
            keys=len(schema),
            duration_ms=round(elapsed * 1000, 3),
        )
        return schema

    def validate(
        self,
        schema: CompiledSchema,
        data: Any,
        partial: bool = False,
        **context: Any,
    ) -> dict[str, Any]:
        """Valide `data` ; journalise les chemins fautifs (jamais les valeurs)."""
        try:
            sanitized = validate(schema, data, partial=partial)
        except ValidationError as err:
            CONTENT_VALIDATION_TOTAL.labels(outcome="invalid").inc()
            self._log.info(
                "content.validation_failed",
                violations=[f"{v.path}:{v.code}" for v in err.violations],
                **context,
            )
            raise
        CONTENT_VALIDATION_TOTAL.labels(outcome="valid").inc()
        return sanitized
