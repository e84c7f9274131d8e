"""
Fusion d'un contenu de base avec un overlay de traduction.

Règle appliquée clé par clé, en profondeur :
- nœud traduisible et valeur présente dans la traduction → valeur traduite ;
- sinon valeur de base ;
- base absente aussi → `default_value` si `inherit_default`, sinon clé omise.

Les composants sont fusionnés clé par clé (une traduction peut ne surcharger qu'une feuille
imbriquée). Les tableaux de composants sont alignés par index : les éléments de base en surplus sont
conservés, les éléments de traduction en surplus sont repris tels quels.

Fonctions pures, sans effet de bord.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

from cms_backend.domain.schema import CompiledSchema, SchemaNode

_ABSENT = object()


def merge_translation(
    base: Mapping[str, Any] | None,
    translation: Mapping[str, Any] | None,
    schema: CompiledSchema,
) -> dict[str, Any]:
    """Vue fusionnée `base` + `translation`, de même forme que le schéma."""
    return _merge_object(base or {}, translation or {}, schema)


def _merge_object(
    base: Mapping[str, Any], translation: Mapping[str, Any], schema: CompiledSchema
) -> dict[str, Any]:
    merged: dict[str, Any] = {}
    for node in schema:
        value = _merge_node(
            node,
            base.get(node.key, _ABSENT),
            translation.get(node.key, _ABSENT) if node.translatable else _ABSENT,
        )
        if value is not _ABSENT:
            merged[node.key] = value
    return merged


def _merge_node(node: SchemaNode, base: Any, translated: Any) -> Any:
    if node.children is not None:
        if node.is_array:
            return _merge_component_array(node.children, base, translated)
        if isinstance(base, Mapping) or isinstance(translated, Mapping):
            return _merge_object(
                base if isinstance(base, Mapping) else {},
                translated if isinstance(translated, Mapping) else {},
                node.children,
            )
    if translated is not _ABSENT:
        return copy.deepcopy(translated)
    if base is not _ABSENT:
        return copy.deepcopy(base)
    if node.inherit_default and node.has_default:
        return copy.deepcopy(node.default_value)
    return _ABSENT


def _merge_component_array(children: CompiledSchema, base: Any, translated: Any) -> Any:
    if not isinstance(translated, list):
        if base is _ABSENT:
            return _ABSENT
        if not isinstance(base, list):
            return copy.deepcopy(base)
        return [_merge_element(children, item, _ABSENT) for item in base]
    if not isinstance(base, list):
        return copy.deepcopy(translated)
    merged = []
    for index in range(max(len(base), len(translated))):
        item = base[index] if index < len(base) else _ABSENT
        over = translated[index] if index < len(translated) else _ABSENT
        if item is _ABSENT:
            merged.append(copy.deepcopy(over))
        else:
            merged.append(_merge_element(children, item, over))
    return merged


def _merge_element(children: CompiledSchema, item: Any, over: Any) -> Any:
    if not isinstance(item, Mapping):
        return copy.deepcopy(item)
    return _merge_object(item, over if isinstance(over, Mapping) else {}, children)


def deep_merge(target: Mapping[str, Any], patch: Mapping[str, Any]) -> dict[str, Any]:
    """Applique `patch` sur `target` : objets fusionnés clé par clé, tableaux et scalaires remplacés."""
    result = copy.deepcopy(dict(target))
    for key, value in patch.items():
        current = result.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            result[key] = deep_merge(current, value)
        else:
            result[key] = copy.deepcopy(value)
    return result
