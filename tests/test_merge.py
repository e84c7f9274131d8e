"""
Tests du moteur de fusion base + traduction.

Vérifie la priorité des valeurs traduites, l'idempotence, la fusion en profondeur des composants,
l'alignement positionnel des tableaux et l'héritage des valeurs par défaut.
"""

from __future__ import annotations

import copy

from cms_backend.domain.entities import AttributeKind, AttributeType
from cms_backend.domain.merge import deep_merge, merge_translation
from cms_backend.domain.schema import CompiledSchema, SchemaNode


def leaf(key: str, **fields) -> SchemaNode:
    fields.setdefault("attribute_type", AttributeType.STRING)
    return SchemaNode(key=key, label=key, kind=AttributeKind.PRIMITIVE, **fields)


def component(key: str, *children: SchemaNode, **fields) -> SchemaNode:
    return SchemaNode(
        key=key,
        label=key,
        kind=AttributeKind.COMPONENT,
        children=CompiledSchema(children),
        **fields,
    )


PAGE = CompiledSchema(
    (
        leaf("title"),
        leaf("body"),
        leaf("slug", translatable=False),
        component("address", leaf("city"), leaf("zip", translatable=False)),
        component("items", leaf("title"), leaf("rank", translatable=False), is_array=True),
    )
)


def test_translated_title_overrides_base() -> None:
    schema = CompiledSchema((leaf("title"), leaf("body")))
    merged = merge_translation({"title": "Hello", "body": "World"}, {"title": "Bonjour"}, schema)
    assert merged == {"title": "Bonjour", "body": "World"}


def test_empty_translation_returns_base_restricted_to_schema() -> None:
    base = {"title": "Hello", "slug": "hello", "legacy": "dropped"}
    assert merge_translation(base, {}, PAGE) == {"title": "Hello", "slug": "hello"}
    assert merge_translation(base, None, PAGE) == {"title": "Hello", "slug": "hello"}


def test_merging_twice_equals_merging_once() -> None:
    base = {"title": "Hello", "body": "World", "address": {"city": "London", "zip": "E1"}}
    translation = {"title": "Bonjour", "address": {"city": "Londres"}}
    once = merge_translation(base, translation, PAGE)
    assert merge_translation(once, translation, PAGE) == once


def test_non_translatable_keys_keep_base_value() -> None:
    merged = merge_translation(
        {"title": "Hello", "slug": "hello"}, {"title": "Salut", "slug": "salut"}, PAGE
    )
    assert merged == {"title": "Salut", "slug": "hello"}


def test_component_is_merged_leaf_by_leaf() -> None:
    merged = merge_translation(
        {"address": {"city": "London", "zip": "E1"}},
        {"address": {"city": "Londres", "zip": "75000"}},
        PAGE,
    )
    assert merged == {"address": {"city": "Londres", "zip": "E1"}}


def test_non_translatable_component_ignores_translation() -> None:
    schema = CompiledSchema((component("seo", leaf("title"), translatable=False),))
    merged = merge_translation({"seo": {"title": "Base"}}, {"seo": {"title": "Traduit"}}, schema)
    assert merged == {"seo": {"title": "Base"}}


def test_shorter_translation_array_keeps_trailing_base_items() -> None:
    base = {"items": [{"title": "one", "rank": 1}, {"title": "two", "rank": 2}]}
    merged = merge_translation(base, {"items": [{"title": "un", "rank": 9}]}, PAGE)
    assert merged == {"items": [{"title": "un", "rank": 1}, {"title": "two", "rank": 2}]}


def test_longer_translation_array_appends_extra_items_verbatim() -> None:
    base = {"items": [{"title": "one", "rank": 1}]}
    translation = {"items": [{"title": "un"}, {"title": "deux", "rank": 2}]}
    merged = merge_translation(base, translation, PAGE)
    assert merged == {"items": [{"title": "un", "rank": 1}, {"title": "deux", "rank": 2}]}


def test_inherit_default_fills_keys_absent_everywhere() -> None:
    schema = CompiledSchema(
        (
            leaf("theme", default_value="light", inherit_default=True),
            leaf("footer", default_value="(c)"),
        )
    )
    assert merge_translation({}, {}, schema) == {"theme": "light"}


def test_merge_does_not_mutate_inputs() -> None:
    base = {"address": {"city": "London", "zip": "E1"}, "items": [{"title": "one"}]}
    translation = {"address": {"city": "Londres"}, "items": [{"title": "un"}]}
    snapshot = (copy.deepcopy(base), copy.deepcopy(translation))
    merged = merge_translation(base, translation, PAGE)
    merged["address"]["city"] = "changed"
    assert (base, translation) == snapshot


def test_deep_merge_merges_objects_and_replaces_arrays() -> None:
    target = {"title": "Hi", "seo": {"title": "t", "robots": "index"}, "tags": ["a", "b"]}
    patch = {"seo": {"robots": "noindex"}, "tags": ["c"], "body": "new"}
    assert deep_merge(target, patch) == {
        "title": "Hi",
        "seo": {"title": "t", "robots": "noindex"},
        "tags": ["c"],
        "body": "new",
    }
    assert target["seo"]["robots"] == "index"
