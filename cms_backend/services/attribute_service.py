# ============================================================
# Module : cms_backend/services/attribute_service.py
# Objet  : Définition des attributs d'une collection ou d'un composant.
# Contexte : Les contrôles faits ici garantissent qu'un schéma compilé est toujours
#            cohérent (types, règles, défauts, références de composants).
# Invariants :
#  - clé unique par propriétaire (collection ou composant).
#  - positions uniques et croissantes (ajout en fin, recompactage à la suppression).
#  - aucune référence de composant ne ferme de cycle.
# ============================================================

from __future__ import annotations

import re
from typing import Any

import structlog

from cms_backend.domain.entities import (
    AttributeComponent,
    AttributeDefinition,
    AttributeKind,
    AttributeType,
    ContentCollection,
    CreateComponentAttributeInput,
    CreatePrimitiveAttributeInput,
    SchemaType,
    UpdateAttributeInput,
)
from cms_backend.domain.errors import (
    BadRequestError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from cms_backend.domain.identifiers import validate_id
from cms_backend.domain.schema_compiler import SchemaCompiler
from cms_backend.domain.validator import type_matches
from cms_backend.infra.repositories import AttributeRepository, ComponentRepository

KEY_RE = re.compile(r"^[A-Za-z0-9]+$")

# Champs modifiables sur un attribut de type composant
COMPONENT_UPDATE_FIELDS = frozenset({"label", "required", "translatable"})


def check_primitive_definition(definition: AttributeDefinition) -> None:
    """
    Vérifie la cohérence d'une définition primitive.

    Raises:
        ValidationError: enum vide, défaut mal typé, règles incompatibles avec le type...
    """
    attribute_type = definition.attribute_type
    if attribute_type is None:
        raise ValidationError("attributeType is required for a primitive attribute")

    if definition.enum_values is not None:
        if not definition.enum_values:
            raise ValidationError("enumValues must be a non-empty array of strings")
        if any(not isinstance(v, str) or not v.strip() for v in definition.enum_values):
            raise ValidationError("enumValues must contain only non-empty strings")
        if attribute_type != AttributeType.STRING:
            raise ValidationError("enumValues can only be used for type=string")

    if definition.default_value is not None:
        defaults = [definition.default_value]
        if definition.schema_type == SchemaType.ARRAY:
            if not isinstance(definition.default_value, list):
                raise ValidationError("defaultValue must be an array for schemaType=array")
            defaults = definition.default_value
        for value in defaults:
            if not type_matches(attribute_type, value):
                raise ValidationError(f"defaultValue must be a {attribute_type.value}")
            if definition.enum_values and value not in definition.enum_values:
                raise ValidationError("defaultValue must be one of enumValues")

    if attribute_type != AttributeType.STRING and definition.attribute_format is not None:
        raise ValidationError(f"format cannot be set for type={attribute_type.value}")

    rules = definition.validation
    if rules is None:
        return
    has_length = rules.min_length is not None or rules.max_length is not None
    has_bounds = rules.minimum is not None or rules.maximum is not None
    has_pattern = bool(rules.pattern and rules.pattern.strip())

    if attribute_type == AttributeType.STRING:
        if has_length and has_pattern:
            raise ValidationError(
                "You cannot provide both (minLength / maxLength) and pattern. "
                "Choose one validation strategy."
            )
        if has_bounds:
            raise ValidationError("minimum/maximum cannot be used for type=string")
        if (
            rules.min_length is not None
            and rules.max_length is not None
            and rules.min_length > rules.max_length
        ):
            raise ValidationError("minLength cannot be greater than maxLength")
        if has_pattern:
            try:
                re.compile(rules.pattern or "")
            except re.error as err:
                raise ValidationError(f"pattern is not a valid regex: {err}") from err
    elif attribute_type == AttributeType.NUMBER:
        if has_length or rules.pattern is not None:
            raise ValidationError("minLength/maxLength/pattern cannot be used for type=number")
        if (
            rules.minimum is not None
            and rules.maximum is not None
            and rules.minimum > rules.maximum
        ):
            raise ValidationError("minimum cannot be greater than maximum")
    elif has_length or has_bounds or rules.pattern is not None:
        raise ValidationError(f"validation is not supported for type={attribute_type.value}")


class AttributeService:
    """Création, modification et suppression des définitions d'attributs."""

    def __init__(
        self,
        attributes: AttributeRepository,
        components: ComponentRepository,
        compiler: SchemaCompiler,
    ) -> None:
        self.attributes = attributes
        self.components = components
        self.compiler = compiler
        self._log = structlog.get_logger(__name__).bind(component="attribute_service")

    # --- Création ---

    async def create_primitive(
        self,
        data: CreatePrimitiveAttributeInput,
        collection: ContentCollection,
        created_by: str | None = None,
    ) -> AttributeDefinition:
        definition = self._primitive(data, tenant_id=collection.tenant_id)
        definition.content_collection_id = collection.id
        return await self._insert(definition, created_by)

    async def create_component_attribute(
        self,
        data: CreateComponentAttributeInput,
        collection: ContentCollection,
        created_by: str | None = None,
    ) -> AttributeDefinition:
        definition = await self._component_ref(data, collection.tenant_id, owner_component=None)
        definition.content_collection_id = collection.id
        return await self._insert(definition, created_by)

    async def add_to_component(
        self,
        data: CreatePrimitiveAttributeInput | CreateComponentAttributeInput,
        component: AttributeComponent,
        created_by: str | None = None,
    ) -> AttributeDefinition:
        """Ajoute un attribut (primitif ou composant imbriqué) dans un composant."""
        if isinstance(data, CreateComponentAttributeInput):
            definition = await self._component_ref(data, component.tenant_id, component.id)
        else:
            definition = self._primitive(data, tenant_id=component.tenant_id)
        definition.component_id = component.id
        return await self._insert(definition, created_by)

    def _primitive(self, data: CreatePrimitiveAttributeInput, tenant_id: str) -> AttributeDefinition:
        self._check_identity(data.key, data.label)
        definition = AttributeDefinition(
            tenant_id=tenant_id,
            key=data.key.strip(),
            label=data.label.strip(),
            kind=AttributeKind.PRIMITIVE,
            schema_type=data.schema_type,
            attribute_type=data.attribute_type,
            attribute_format=data.attribute_format,
            required=data.required,
            enum_values=data.enum_values,
            validation=data.validation,
            default_value=data.default_value,
            inherit_default=data.inherit_default,
            translatable=data.translatable,
        )
        check_primitive_definition(definition)
        return definition

    async def _component_ref(
        self,
        data: CreateComponentAttributeInput,
        tenant_id: str,
        owner_component: str | None,
    ) -> AttributeDefinition:
        self._check_identity(data.key, data.label)
        ref_id = validate_id(data.component_ref_id, "componentRefId")
        referenced = await self.components.get(ref_id)
        if referenced is None or referenced.tenant_id != tenant_id:
            raise NotFoundError("attribute component not found")
        # Compile le composant référencé comme s'il était ouvert sous le propriétaire
        visited = (owner_component,) if owner_component else ()
        await self.compiler.compile_component(ref_id, visited=visited)
        return AttributeDefinition(
            tenant_id=tenant_id,
            key=data.key.strip(),
            label=data.label.strip(),
            kind=AttributeKind.COMPONENT,
            schema_type=data.schema_type,
            component_ref_id=ref_id,
            required=data.required,
            translatable=data.translatable,
        )

    @staticmethod
    def _check_identity(key: str, label: str) -> None:
        if not KEY_RE.match(key.strip()):
            raise ValidationError("key may only contain letters and numbers (no spaces or symbols)")
        if not label.strip():
            raise ValidationError("label must be a non-empty string")

    async def _insert(
        self, definition: AttributeDefinition, created_by: str | None
    ) -> AttributeDefinition:
        owner = AttributeRepository.owner_filter(
            definition.content_collection_id, definition.component_id
        )
        if await self.attributes.find_one({**owner, "key": definition.key}):
            raise ConflictError(f"key '{definition.key}' already exists for this owner")
        definition.position = await self.attributes.count(owner)
        definition.created_by = created_by
        created = await self.attributes.insert(definition)
        self._log.info(
            "attribute.created",
            attribute_id=created.id,
            key=created.key,
            kind=created.kind.value,
            position=created.position,
        )
        return created

    # --- Lecture ---

    async def get(self, attribute_id: str) -> AttributeDefinition:
        validate_id(attribute_id, "attributeId")
        attribute = await self.attributes.get(attribute_id)
        if attribute is None:
            raise NotFoundError("attribute not found")
        return attribute

    async def list(
        self, collection_id: str | None = None, component_id: str | None = None
    ) -> list[AttributeDefinition]:
        if collection_id is None and component_id is None:
            raise BadRequestError("contentCollectionId or componentId is required")
        return await self.attributes.list_for_owner(collection_id, component_id)

    # --- Modification / suppression ---

    async def update(
        self, attribute: AttributeDefinition, data: UpdateAttributeInput
    ) -> AttributeDefinition:
        changes: dict[str, Any] = {f: getattr(data, f) for f in data.model_fields_set}
        if not changes:
            raise BadRequestError("No valid fields provided for update")
        if attribute.kind == AttributeKind.COMPONENT:
            forbidden = set(changes) - COMPONENT_UPDATE_FIELDS
            if forbidden:
                raise BadRequestError(
                    f"fields not updatable on a component attribute: {sorted(forbidden)}"
                )
        for flag in ("required", "inherit_default", "translatable"):
            if flag in changes and changes[flag] is None:
                raise ValidationError(f"{flag} must be a boolean")
        if "label" in changes:
            if not (changes["label"] or "").strip():
                raise ValidationError("label must be a non-empty string")
            changes["label"] = changes["label"].strip()
        candidate = attribute.model_copy(update=changes)
        if candidate.kind == AttributeKind.PRIMITIVE:
            check_primitive_definition(candidate)
        updated = await self.attributes.save(candidate)
        if updated is None:
            raise NotFoundError("attribute not found")
        self._log.info("attribute.updated", attribute_id=updated.id, fields=sorted(changes))
        return updated

    async def delete(self, attribute: AttributeDefinition) -> AttributeDefinition:
        """Supprime l'attribut puis recompacte les positions restantes du propriétaire."""
        if not await self.attributes.delete(attribute.id):
            raise NotFoundError("attribute not found")
        remaining = await self.attributes.list_for_owner(
            attribute.content_collection_id, attribute.component_id
        )
        for index, other in enumerate(remaining):
            if other.position != index:
                await self.attributes.set_fields(other.id, position=index)
        self._log.info("attribute.deleted", attribute_id=attribute.id, key=attribute.key)
        return attribute
