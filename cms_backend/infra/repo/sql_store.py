# ============================================================
# Module : cms_backend/infra/repo/sql_store.py
# Objet  : DocumentStore adossé à SQLAlchemy (table `documents`).
# ============================================================

from __future__ import annotations

import copy
from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from cms_backend.domain.errors import ConflictError

from .db import get_session_factory, session_scope
from .models import DocumentORM
from .store import Filter, Sort, apply_sort, apply_update, matches, unique_key


class SqlDocumentStore:
    """DocumentStore persistant : une ligne par document, corps JSON.

    Les égalités sur des chaînes sont poussées en SQL comme pré-filtre ; le filtre complet est
    ensuite réévalué côté Python pour garantir la même sémantique que le store en mémoire.
    L'unicité déclarée (`unique_fields`) est garantie par la contrainte
    `uq_documents_kind_unique_key` ; une violation devient une `ConflictError`.
    """

    def __init__(
        self, engine: AsyncEngine, kind: str, unique_fields: Sequence[str] = ()
    ) -> None:
        self.kind = kind
        self.unique_fields = tuple(unique_fields)
        self._sessions = get_session_factory(engine)

    def _select(self, filter: Filter):
        stmt = select(DocumentORM).where(DocumentORM.kind == self.kind)
        for key, cond in filter.items():
            if not isinstance(cond, str):
                continue
            if key == "id":
                stmt = stmt.where(DocumentORM.id == cond)
            else:
                stmt = stmt.where(DocumentORM.body[key].as_string() == cond)
        return stmt.order_by(DocumentORM.created_at, DocumentORM.id)

    async def _matching_rows(self, session: AsyncSession, filter: Filter) -> list[DocumentORM]:
        rows = (await session.execute(self._select(filter))).scalars().all()
        return [r for r in rows if matches(r.body or {}, filter)]

    def _conflict(self) -> ConflictError:
        fields = ", ".join(self.unique_fields) or "id"
        return ConflictError(
            f"duplicate {self.kind} for {fields}",
            {"unique_fields": list(self.unique_fields)},
        )

    async def find_one(self, filter: Filter) -> dict[str, Any] | None:
        async with session_scope(self._sessions) as session:
            rows = await self._matching_rows(session, filter)
            return copy.deepcopy(rows[0].body) if rows else None

    async def find_many(
        self,
        filter: Filter,
        sort: Sort | None = None,
        limit: int | None = None,
        skip: int = 0,
    ) -> list[dict[str, Any]]:
        async with session_scope(self._sessions) as session:
            rows = await self._matching_rows(session, filter)
            docs = [copy.deepcopy(r.body) for r in rows]
        docs = apply_sort(docs, sort)[skip:]
        return docs if limit is None else docs[:limit]

    async def insert_one(self, doc: Mapping[str, Any]) -> dict[str, Any]:
        if "id" not in doc:
            raise ValueError("document requires an 'id'")
        body = copy.deepcopy(dict(doc))
        row = DocumentORM(
            kind=self.kind,
            id=body["id"],
            body=body,
            unique_key=unique_key(body, self.unique_fields),
        )
        try:
            async with session_scope(self._sessions) as session:
                session.add(row)
        except IntegrityError as err:
            raise self._conflict() from err
        return copy.deepcopy(body)

    async def find_one_and_update(
        self, filter: Filter, update: Mapping[str, Any]
    ) -> dict[str, Any] | None:
        try:
            async with session_scope(self._sessions) as session:
                rows = await self._matching_rows(session, filter)
                if not rows:
                    return None
                row = rows[0]
                new_body = apply_update(row.body or {}, update)
                row.body = new_body
                row.unique_key = unique_key(new_body, self.unique_fields)
        except IntegrityError as err:
            raise self._conflict() from err
        return copy.deepcopy(new_body)

    async def delete_one(self, filter: Filter) -> int:
        async with session_scope(self._sessions) as session:
            rows = await self._matching_rows(session, filter)
            if not rows:
                return 0
            await session.delete(rows[0])
            return 1

    async def delete_many(self, filter: Filter) -> int:
        async with session_scope(self._sessions) as session:
            rows = await self._matching_rows(session, filter)
            for row in rows:
                await session.delete(row)
            return len(rows)

    async def count(self, filter: Filter) -> int:
        async with session_scope(self._sessions) as session:
            return len(await self._matching_rows(session, filter))
