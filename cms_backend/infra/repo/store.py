"""
Contrat d'accès aux documents et implémentation en mémoire.

Le cœur ne connaît que ce contrat minimal (`find_one`, `find_many`, `insert_one`,
`find_one_and_update`, `delete_one`...). Les filtres sont des mappings à correspondance exacte,
avec les opérateurs `$in`, `$ne` et `$exists` ; les mises à jour utilisent `$set` / `$unset`.

Toutes les méthodes sont asynchrones : chaque accès à la persistance est un point de suspension de
la boucle d'événements.
"""

from __future__ import annotations

import copy
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Protocol

from cms_backend.domain.errors import ConflictError

Filter = Mapping[str, Any]
Sort = Sequence[tuple[str, int]]

_MISSING = object()


class DocumentStore(Protocol):
    """Accès asynchrone à une famille de documents (`kind`)."""

    kind: str

    async def find_one(self, filter: Filter) -> dict[str, Any] | None: ...

    async def find_many(
        self,
        filter: Filter,
        sort: Sort | None = None,
        limit: int | None = None,
        skip: int = 0,
    ) -> list[dict[str, Any]]: ...

    async def insert_one(self, doc: Mapping[str, Any]) -> dict[str, Any]: ...

    async def find_one_and_update(
        self, filter: Filter, update: Mapping[str, Any]
    ) -> dict[str, Any] | None: ...

    async def delete_one(self, filter: Filter) -> int: ...

    async def delete_many(self, filter: Filter) -> int: ...

    async def count(self, filter: Filter) -> int: ...


def _match_condition(value: Any, cond: Any) -> bool:
    if isinstance(cond, Mapping) and cond and all(str(k).startswith("$") for k in cond):
        for op, arg in cond.items():
            if op == "$in":
                if value is _MISSING or value not in list(arg):
                    return False
            elif op == "$ne":
                if value is not _MISSING and value == arg:
                    return False
            elif op == "$exists":
                if bool(arg) != (value is not _MISSING):
                    return False
            else:
                raise ValueError(f"unsupported filter operator: {op}")
        return True
    if value is _MISSING:
        return cond is None
    return value == cond


def matches(doc: Mapping[str, Any], filter: Filter) -> bool:
    """Indique si `doc` satisfait `filter`."""
    return all(_match_condition(doc.get(key, _MISSING), cond) for key, cond in filter.items())


def _sort_key(field: str):
    def key(doc: Mapping[str, Any]) -> tuple[int, Any]:
        value = doc.get(field)
        # None en premier, puis valeurs comparables entre elles
        return (0, "") if value is None else (1, value)

    return key


def apply_sort(docs: list[dict[str, Any]], sort: Sort | None) -> list[dict[str, Any]]:
    """Trie une liste de documents selon `[(champ, 1|-1), ...]` (tri stable, clé la plus à droite en premier)."""
    if not sort:
        return docs
    for field, direction in reversed(list(sort)):
        docs.sort(key=_sort_key(field), reverse=direction < 0)
    return docs


def apply_update(doc: dict[str, Any], update: Mapping[str, Any]) -> dict[str, Any]:
    """Applique une mise à jour `$set` / `$unset` et retourne le nouveau document."""
    unknown = set(update) - {"$set", "$unset"}
    if unknown:
        raise ValueError(f"unsupported update operators: {sorted(unknown)}")
    new_doc = copy.deepcopy(doc)
    for key, value in (update.get("$set") or {}).items():
        new_doc[key] = copy.deepcopy(value)
    for key in update.get("$unset") or {}:
        new_doc.pop(key, None)
    return new_doc


def unique_key(doc: Mapping[str, Any], fields: Iterable[str]) -> str | None:
    """Clé d'unicité composite, ou None si le store n'en déclare pas."""
    fields = tuple(fields)
    if not fields:
        return None
    return "|".join(str(doc.get(f)) for f in fields)


class InMemoryDocumentStore:
    """
    Store de documents en mémoire (utilisé pour dev/tests).

    Les documents sont copiés en entrée et en sortie pour éviter tout partage de références avec
    l'appelant. `unique_fields` matérialise une contrainte d'unicité équivalente à celle du store
    SQL.
    """

    def __init__(self, kind: str, unique_fields: Sequence[str] = ()) -> None:
        self.kind = kind
        self.unique_fields = tuple(unique_fields)
        self._docs: dict[str, dict[str, Any]] = {}

    def _check_unique(self, doc: Mapping[str, Any], exclude_id: str | None = None) -> None:
        key = unique_key(doc, self.unique_fields)
        if key is None:
            return
        for other in self._docs.values():
            if other["id"] != exclude_id and unique_key(other, self.unique_fields) == key:
                raise ConflictError(
                    f"duplicate {self.kind} for {', '.join(self.unique_fields)}",
                    {"unique_fields": list(self.unique_fields)},
                )

    async def find_one(self, filter: Filter) -> dict[str, Any] | None:
        for doc in self._docs.values():
            if matches(doc, filter):
                return copy.deepcopy(doc)
        return None

    async def find_many(
        self,
        filter: Filter,
        sort: Sort | None = None,
        limit: int | None = None,
        skip: int = 0,
    ) -> list[dict[str, Any]]:
        found = [copy.deepcopy(d) for d in self._docs.values() if matches(d, filter)]
        found = apply_sort(found, sort)[skip:]
        return found if limit is None else found[:limit]

    async def insert_one(self, doc: Mapping[str, Any]) -> dict[str, Any]:
        if "id" not in doc:
            raise ValueError("document requires an 'id'")
        if doc["id"] in self._docs:
            raise ConflictError(f"{self.kind} {doc['id']} already exists")
        self._check_unique(doc)
        self._docs[doc["id"]] = copy.deepcopy(dict(doc))
        return copy.deepcopy(self._docs[doc["id"]])

    async def find_one_and_update(
        self, filter: Filter, update: Mapping[str, Any]
    ) -> dict[str, Any] | None:
        for doc_id, doc in self._docs.items():
            if matches(doc, filter):
                new_doc = apply_update(doc, update)
                self._check_unique(new_doc, exclude_id=doc_id)
                self._docs[doc_id] = new_doc
                return copy.deepcopy(new_doc)
        return None

    async def delete_one(self, filter: Filter) -> int:
        for doc_id, doc in list(self._docs.items()):
            if matches(doc, filter):
                del self._docs[doc_id]
                return 1
        return 0

    async def delete_many(self, filter: Filter) -> int:
        doomed = [doc_id for doc_id, doc in self._docs.items() if matches(doc, filter)]
        for doc_id in doomed:
            del self._docs[doc_id]
        return len(doomed)

    async def count(self, filter: Filter) -> int:
        return sum(1 for doc in self._docs.values() if matches(doc, filter))
