"""
Schéma compilé d'une collection de contenus.

Un `CompiledSchema` est une suite ordonnée (par `position`) de `SchemaNode`. Un nœud décrit soit
une feuille primitive (type, format, enum, règles), soit un composant dont les enfants forment un
sous-schéma de même nature. Les deux peuvent être répétables (`is_array`).

Le schéma est dérivé, jamais persisté : il est recalculé à la demande à partir des définitions
d'attributs.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field, replace
from typing import Any

from cms_backend.domain.entities import (
    AttributeDefinition,
    AttributeFormat,
    AttributeKind,
    AttributeType,
    SchemaType,
    ValidationRules,
)


@dataclass(frozen=True)
class SchemaNode:
    key: str
    label: str
    kind: AttributeKind
    is_array: bool = False
    attribute_type: AttributeType | None = None
    attribute_format: AttributeFormat | None = None
    required: bool = False
    enum_values: tuple[str, ...] | None = None
    validation: ValidationRules | None = None
    default_value: Any = None
    inherit_default: bool = False
    translatable: bool = True
    position: int = 0
    children: CompiledSchema | None = None

    @property
    def is_component(self) -> bool:
        return self.children is not None

    @property
    def has_default(self) -> bool:
        return self.default_value is not None

    @classmethod
    def from_definition(
        cls, definition: AttributeDefinition, children: CompiledSchema | None = None
    ) -> SchemaNode:
        """Construit un nœud à partir d'une définition (et du sous-schéma déjà compilé)."""
        enum = tuple(definition.enum_values) if definition.enum_values else None
        validation = definition.validation
        if validation is not None and validation.is_empty():
            validation = None
        return cls(
            key=definition.key,
            label=definition.label,
            kind=definition.kind,
            is_array=definition.schema_type == SchemaType.ARRAY,
            attribute_type=definition.attribute_type,
            attribute_format=definition.attribute_format,
            required=definition.required,
            enum_values=enum,
            validation=validation,
            default_value=definition.default_value,
            inherit_default=definition.inherit_default,
            translatable=definition.translatable,
            position=definition.position,
            children=children,
        )

    def has_translatable_leaf(self) -> bool:
        """Vrai si ce nœud (ou un descendant) peut être surchargé par une traduction."""
        if not self.translatable:
            return False
        if self.children is None:
            return True
        return any(child.has_translatable_leaf() for child in self.children)

    def to_json_schema(self, partial: bool = False) -> dict[str, Any]:
        """Rendu JSON Schema (Draft 7, avec extensions `x-*`) utilisé par le validateur et l'API.

        En mode `partial`, les listes `required` sont omises (overlay de traduction).
        """
        if self.children is not None:
            item: dict[str, Any] = self.children.to_json_schema(partial)
        else:
            item = {}
            if self.attribute_type:
                item["type"] = self.attribute_type.value
            if self.attribute_format:
                item["format"] = self.attribute_format.value
            if self.enum_values:
                item["enum"] = list(self.enum_values)
            if self.validation:
                item.update(self.validation.model_dump(by_alias=True, exclude_none=True))
        item["x-translatable"] = self.translatable
        if self.inherit_default:
            item["x-inheritDefault"] = True
        rendered = item
        if self.is_array:
            rendered = {"type": "array", "items": item, "x-translatable": self.translatable}
        if self.has_default:
            rendered["default"] = self.default_value
        return rendered


@dataclass(frozen=True)
class CompiledSchema:
    nodes: tuple[SchemaNode, ...] = field(default_factory=tuple)

    def __iter__(self) -> Iterator[SchemaNode]:
        return iter(self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, key: object) -> bool:
        return any(node.key == key for node in self.nodes)

    def keys(self) -> list[str]:
        return [node.key for node in self.nodes]

    def get(self, key: str) -> SchemaNode | None:
        return next((node for node in self.nodes if node.key == key), None)

    @property
    def required_keys(self) -> list[str]:
        return [node.key for node in self.nodes if node.required]

    def translatable_view(self) -> CompiledSchema:
        """Sous-schéma restreint aux nœuds surchargeables par une traduction.

        Les composants sont conservés s'ils ont au moins un descendant traduisible, avec leurs
        seuls enfants traduisibles.
        """
        kept: list[SchemaNode] = []
        for node in self.nodes:
            if not node.has_translatable_leaf():
                continue
            if node.children is not None:
                node = replace(node, children=node.children.translatable_view())
            kept.append(node)
        return CompiledSchema(tuple(kept))

    def to_json_schema(self, partial: bool = False) -> dict[str, Any]:
        rendered: dict[str, Any] = {
            "type": "object",
            "properties": {node.key: node.to_json_schema(partial) for node in self.nodes},
            "additionalProperties": False,
        }
        if not partial:
            rendered["required"] = self.required_keys
        return rendered
