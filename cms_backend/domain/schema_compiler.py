"""
Compilation récursive des définitions d'attributs en schéma de validation.

Objectif du module
------------------
- Charger les définitions d'une collection (ordonnées par `position`).
- Résoudre chaque attribut `component` en compilant récursivement les définitions du composant
  référencé, puis l'embarquer sous la clé parente.
- Détecter les cycles : l'ensemble des composants visités est passé par valeur (frozenset) le long
  de la récursion ; un composant déjà présent produit une `SchemaCycleError`.

La récursion interne ne lève pas : elle renvoie un résultat étiqueté (`CompiledSchema` ou
`CompileFailure`) remonté tel quel jusqu'au point d'entrée public, qui lève l'erreur portée.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

from cms_backend.domain.entities import AttributeComponent, AttributeDefinition, AttributeKind
from cms_backend.domain.errors import SchemaCycleError, SchemaError, SchemaReferenceError
from cms_backend.domain.schema import CompiledSchema, SchemaNode

DEFAULT_MAX_DEPTH = 32


class AttributeSource(Protocol):
    """Lecture des définitions nécessaires au compilateur."""

    async def list_for_collection(self, collection_id: str) -> list[AttributeDefinition]: ...

    async def list_for_component(self, component_id: str) -> list[AttributeDefinition]: ...

    async def get_component(self, component_id: str) -> AttributeComponent | None: ...


@dataclass(frozen=True)
class CompileFailure:
    error: SchemaError


CompileResult = CompiledSchema | CompileFailure


class SchemaCompiler:
    """Compile le schéma d'une collection ou d'un composant.

    Le résultat est une fonction pure de l'état courant des définitions ; aucun cache n'est
    conservé entre deux appels.
    """

    def __init__(self, source: AttributeSource, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        self._source = source
        self._max_depth = max_depth

    async def compile_collection(self, collection_id: str) -> CompiledSchema:
        """Compile le schéma d'une collection. Une collection vide donne un schéma vide."""
        definitions = await self._source.list_for_collection(collection_id)
        return _unwrap(await self._compile_definitions(definitions, frozenset(), ()))

    async def compile_component(
        self, component_id: str, visited: Iterable[str] = ()
    ) -> CompiledSchema:
        """Compile le sous-schéma d'un composant.

        `visited` permet de pré-charger des composants considérés comme déjà ouverts : c'est ce qui
        sert à refuser, au moment de la définition, un attribut qui fermerait un cycle.
        """
        chain = tuple(visited)
        return _unwrap(await self._compile_component(component_id, frozenset(chain), chain))

    async def _compile_component(
        self, component_id: str, visited: frozenset[str], chain: tuple[str, ...]
    ) -> CompileResult:
        if component_id in visited:
            cycle = [*chain, component_id]
            return CompileFailure(
                SchemaCycleError(
                    f"component cycle detected: {' -> '.join(cycle)}", chain=cycle
                )
            )
        if len(chain) >= self._max_depth:
            return CompileFailure(
                SchemaCycleError(
                    f"component nesting exceeds {self._max_depth} levels",
                    chain=[*chain, component_id],
                )
            )
        component = await self._source.get_component(component_id)
        if component is None:
            return CompileFailure(
                SchemaReferenceError(
                    f"referenced component {component_id} not found", component_id=component_id
                )
            )
        definitions = await self._source.list_for_component(component_id)
        return await self._compile_definitions(
            definitions, visited | {component_id}, (*chain, component_id)
        )

    async def _compile_definitions(
        self,
        definitions: list[AttributeDefinition],
        visited: frozenset[str],
        chain: tuple[str, ...],
    ) -> CompileResult:
        nodes: list[SchemaNode] = []
        for definition in sorted(definitions, key=lambda d: d.position):
            children: CompiledSchema | None = None
            if definition.kind == AttributeKind.COMPONENT:
                if not definition.component_ref_id:
                    return CompileFailure(
                        SchemaReferenceError(
                            f"component attribute '{definition.key}' has no component reference"
                        )
                    )
                sub = await self._compile_component(definition.component_ref_id, visited, chain)
                if isinstance(sub, CompileFailure):
                    return sub
                children = sub
            nodes.append(SchemaNode.from_definition(definition, children))
        return CompiledSchema(tuple(nodes))


def _unwrap(result: CompileResult) -> CompiledSchema:
    if isinstance(result, CompileFailure):
        raise result.error
    return result
