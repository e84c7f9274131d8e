"""
Validation des payloads de contenu contre un schéma compilé.

Contrat
-------
- Entrée : `CompiledSchema` + mapping `data` candidat.
- Sortie : données assainies restreintes aux clés du schéma (les clés inconnues sont ignorées),
  ou `ValidationError` listant *toutes* les violations (pas d'arrêt à la première).
- Les chemins de violation sont pointés : `address.zip`, `items.0.title`.

Le contrôle lui-même est délégué à `jsonschema` (Draft 7) sur `CompiledSchema.to_json_schema()`.
Restent locaux : le filtrage des clés inconnues, l'injection des valeurs par défaut (avant
validation, elles sont donc contrôlées comme le reste) et le mode partiel.

Le mode `partial=True` sert aux traductions : les champs requis ne sont pas exigés et aucune valeur
par défaut n'est injectée (le document est un overlay, pas un contenu complet).
"""

from __future__ import annotations

import copy
import re
from collections.abc import Iterable, Iterator, Mapping
from datetime import date
from typing import Any

from jsonschema import Draft7Validator, FormatChecker, validators
from jsonschema.exceptions import ValidationError as JsonSchemaError

from cms_backend.domain.entities import AttributeType
from cms_backend.domain.errors import ValidationError, Violation
from cms_backend.domain.schema import CompiledSchema, SchemaNode

MEDIA_URI_PREFIXES = ("/uploads/", "http://", "https://")

# mot-clé jsonschema -> code de violation
VIOLATION_CODES = {
    "required": "required",
    "type": "type",
    "enum": "enum",
    "format": "format",
    "minLength": "validation",
    "maxLength": "validation",
    "pattern": "validation",
    "minimum": "validation",
    "maximum": "validation",
}

# RFC 3339 (full-date / partial-time + time-offset)
_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")
_TIME_RE = re.compile(r"(\d{2}):(\d{2}):(\d{2})(?:\.\d+)?(z|[+-]\d{2}:\d{2})?", re.IGNORECASE)
_DATE_TIME_SEPARATOR = re.compile(r"[Tt ]")

CONTENT_FORMATS = FormatChecker()


@CONTENT_FORMATS.checks("date", raises=ValueError)
def is_date(value: object) -> bool:
    if not isinstance(value, str):
        return True
    return _DATE_RE.fullmatch(value) is not None and bool(date.fromisoformat(value))


@CONTENT_FORMATS.checks("time")
def is_time(value: object) -> bool:
    if not isinstance(value, str):
        return True
    return _time_matches(value, require_offset=False)


@CONTENT_FORMATS.checks("date-time", raises=ValueError)
def is_date_time(value: object) -> bool:
    if not isinstance(value, str):
        return True
    parts = _DATE_TIME_SEPARATOR.split(value)
    if len(parts) != 2:
        return False
    return is_date(parts[0]) and _time_matches(parts[1], require_offset=True)


@CONTENT_FORMATS.checks("media-uri")
def is_media_uri(value: object) -> bool:
    if not isinstance(value, str):
        return True
    return any(
        value.startswith(prefix) and len(value) > len(prefix) for prefix in MEDIA_URI_PREFIXES
    )


def _time_matches(value: str, require_offset: bool) -> bool:
    match = _TIME_RE.fullmatch(value)
    if match is None:
        return False
    hour, minute, second, offset = match.groups()
    if offset is None:
        return not require_offset
    if offset.lower() != "z" and (int(offset[1:3]) > 23 or int(offset[4:6]) > 59):
        return False
    # 60 : seconde intercalaire
    return int(hour) <= 23 and int(minute) <= 59 and int(second) <= 60


def _pattern_fullmatch(validator, pattern, instance, schema) -> Iterator[JsonSchemaError]:
    # `pattern` porte sur la valeur entière, pas sur une sous-chaîne
    if validator.is_type(instance, "string") and re.fullmatch(pattern, instance) is None:
        yield JsonSchemaError(f"does not match {pattern!r}")


ContentValidator = validators.extend(Draft7Validator, {"pattern": _pattern_fullmatch})


def validate(schema: CompiledSchema, data: Any, partial: bool = False) -> dict[str, Any]:
    """Valide `data` et retourne la version assainie.

    Lève `ValidationError` avec la liste complète des violations.
    """
    if not isinstance(data, Mapping):
        raise ValidationError([Violation("", "type", "data must be an object")])
    sanitized = _restrict(schema, data, partial)
    validator = ContentValidator(
        schema.to_json_schema(partial=partial), format_checker=CONTENT_FORMATS
    )
    violations = _to_violations(schema, validator.iter_errors(sanitized))
    if violations:
        raise ValidationError(violations)
    return sanitized


def type_matches(attribute_type: AttributeType | None, value: Any) -> bool:
    if attribute_type is None:
        return False
    return ContentValidator({}).is_type(value, attribute_type.value)


# --- Assainissement ---


def _restrict(schema: CompiledSchema, data: Mapping[str, Any], partial: bool) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for node in schema:
        if node.key in data:
            out[node.key] = _restrict_value(node, data[node.key], partial)
        elif not partial and not node.required and node.has_default:
            out[node.key] = copy.deepcopy(node.default_value)
    return out


def _restrict_value(node: SchemaNode, value: Any, partial: bool) -> Any:
    if node.children is None:
        return value
    if node.is_array:
        if not isinstance(value, list):
            return value
        return [_restrict_component(node.children, item, partial) for item in value]
    return _restrict_component(node.children, value, partial)


def _restrict_component(children: CompiledSchema, value: Any, partial: bool) -> Any:
    if not isinstance(value, Mapping):
        return value
    return _restrict(children, value, partial)


# --- Traduction des erreurs jsonschema ---


def _to_violations(schema: CompiledSchema, errors: Iterable[JsonSchemaError]) -> list[Violation]:
    found: list[tuple[tuple[int, ...], Violation]] = []
    seen_required: set[tuple[Any, ...]] = set()
    for error in errors:
        parts = tuple(error.absolute_path)
        if error.validator == "required":
            if parts in seen_required:
                continue
            seen_required.add(parts)
            for key in error.validator_value:
                if key in error.instance:
                    continue
                path = (*parts, key)
                violation = Violation(_dotted(path), "required", f"'{key}' is required")
                found.append((_sort_key(schema, path), violation))
            continue
        code = VIOLATION_CODES.get(str(error.validator), "validation")
        found.append(
            (_sort_key(schema, parts), Violation(_dotted(parts), code, _message(error)))
        )

    # une valeur mal typée ne remonte que sa violation `type`
    mistyped = {v.path for _, v in found if v.code == "type"}
    found = [(k, v) for k, v in found if v.code == "type" or v.path not in mistyped]
    found.sort(key=lambda item: item[0])
    return [violation for _, violation in found]


def _dotted(parts: tuple[Any, ...]) -> str:
    return ".".join(str(part) for part in parts)


def _sort_key(schema: CompiledSchema, parts: tuple[Any, ...]) -> tuple[int, ...]:
    """Ordre des violations : position des nœuds dans le schéma, puis index des tableaux."""
    key: list[int] = []
    current: CompiledSchema | None = schema
    for part in parts:
        if isinstance(part, int):
            key.append(part)
            continue
        nodes = current.nodes if current is not None else ()
        index = next((i for i, node in enumerate(nodes) if node.key == part), len(nodes))
        key.append(index)
        current = nodes[index].children if index < len(nodes) else None
    return tuple(key)


def _message(error: JsonSchemaError) -> str:
    keyword, expected = error.validator, error.validator_value
    if keyword == "type":
        return f"must be of type {expected}"
    if keyword == "enum":
        return f"must be one of: {', '.join(str(v) for v in expected)}"
    if keyword == "format":
        return f"must be a valid {expected}"
    if keyword == "minLength":
        return f"length must be >= {expected}"
    if keyword == "maxLength":
        return f"length must be <= {expected}"
    if keyword == "minimum":
        return f"must be >= {expected}"
    if keyword == "maximum":
        return f"must be <= {expected}"
    if keyword == "pattern":
        return f"must match pattern {expected}"
    return error.message
