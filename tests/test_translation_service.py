"""
Tests du service de traductions et de la lecture localisée des contenus.
"""

from __future__ import annotations

import pytest

from cms_backend.domain.entities import CreateContentInput, CreateTranslationInput
from cms_backend.domain.errors import (
    BadRequestError,
    ConflictError,
    NotFoundError,
    ValidationError,
)


async def _setup(build, container):
    collection = await build.collection()
    await build.primitive(collection, "title", required=True)
    await build.primitive(collection, "body")
    await build.primitive(collection, "slug", translatable=False)
    await build.locale("en")
    await build.locale("fr")
    content = await container.content_service.create(
        CreateContentInput(data={"title": "Hello", "body": "World", "slug": "hello"}), collection
    )
    return collection, content


@pytest.mark.asyncio
async def test_second_translation_for_same_locale_conflicts(container, build) -> None:
    collection, content = await _setup(build, container)
    service = container.translation_service

    created = await service.create(
        CreateTranslationInput(locale="fr", data={"title": "Bonjour"}), collection, content
    )
    assert created.content_id == content.id and created.locale == "fr"

    with pytest.raises(ConflictError):
        await service.create(
            CreateTranslationInput(locale="fr", data={"title": "Salut"}), collection, content
        )


@pytest.mark.asyncio
async def test_translation_keeps_only_translatable_keys(container, build) -> None:
    collection, content = await _setup(build, container)
    translation = await container.translation_service.create(
        CreateTranslationInput(locale="fr", data={"body": "Monde", "slug": "bonjour", "x": 1}),
        collection,
        content,
    )
    # title requis côté base mais pas dans un overlay
    assert translation.data == {"body": "Monde"}


@pytest.mark.asyncio
async def test_translation_values_are_type_checked(container, build) -> None:
    collection, content = await _setup(build, container)
    with pytest.raises(ValidationError) as excinfo:
        await container.translation_service.create(
            CreateTranslationInput(locale="fr", data={"title": 12}), collection, content
        )
    assert [(v.path, v.code) for v in excinfo.value.violations] == [("title", "type")]


@pytest.mark.asyncio
async def test_undeclared_locale_is_not_found(container, build) -> None:
    collection, content = await _setup(build, container)
    with pytest.raises(NotFoundError):
        await container.translation_service.create(
            CreateTranslationInput(locale="de", data={"title": "Hallo"}), collection, content
        )


@pytest.mark.asyncio
async def test_blank_locale_and_foreign_content_are_bad_requests(container, build) -> None:
    collection, content = await _setup(build, container)
    other = await build.collection("news")
    service = container.translation_service
    with pytest.raises(BadRequestError):
        await service.create(CreateTranslationInput(locale="  "), collection, content)
    with pytest.raises(BadRequestError):
        await service.create(CreateTranslationInput(locale="fr"), other, content)


@pytest.mark.asyncio
async def test_list_filters_and_lookups(container, build) -> None:
    collection, content = await _setup(build, container)
    service = container.translation_service
    await service.create(
        CreateTranslationInput(locale="fr", data={"title": "Bonjour"}), collection, content
    )
    await service.create(CreateTranslationInput(locale="en", data={}), collection, content)

    french = await service.list({"locale": "fr"}, ["content", "contentCollection"])
    assert len(french) == 1
    assert french[0].content.id == content.id
    assert french[0].content_collection.slug == "articles"

    everything = await service.list({"content_id": content.id})
    assert sorted(t.locale for t in everything) == ["en", "fr"]
    assert everything[0].content is None

    with pytest.raises(BadRequestError):
        await service.list({}, ["author"])


@pytest.mark.asyncio
async def test_get_and_delete(container, build) -> None:
    collection, content = await _setup(build, container)
    service = container.translation_service
    translation = await service.create(
        CreateTranslationInput(locale="fr", data={"title": "Bonjour"}), collection, content
    )
    assert (await service.get(translation.id)).id == translation.id

    await service.delete(translation)

    with pytest.raises(NotFoundError):
        await service.get(translation.id)
    # la locale est de nouveau libre
    await service.create(CreateTranslationInput(locale="fr"), collection, content)


@pytest.mark.asyncio
async def test_list_full_merges_requested_locale(container, build) -> None:
    collection, content = await _setup(build, container)
    await container.translation_service.create(
        CreateTranslationInput(locale="fr", data={"title": "Bonjour", "slug": "ignored"}),
        collection,
        content,
    )

    [full] = await container.content_service.list_full(collection, "fr")

    assert full.full_data == {"title": "Bonjour", "body": "World", "slug": "hello"}
    assert full.data == {"title": "Hello", "body": "World", "slug": "hello"}
    assert (full.requested_locale, full.resolved_locale) == ("fr", "fr")
    assert full.locale_not_found is False


@pytest.mark.asyncio
async def test_list_full_defaults_to_tenant_default_locale(container, build) -> None:
    collection, content = await _setup(build, container)

    [full] = await container.content_service.list_full(collection)

    # "en" a été déclarée en premier : locale par défaut, sans traduction
    assert full.requested_locale is None
    assert full.resolved_locale == "en"
    assert full.locale_not_found is True
    assert full.full_data == content.data


@pytest.mark.asyncio
async def test_list_full_with_undeclared_locale_is_empty(container, build) -> None:
    collection, _ = await _setup(build, container)
    assert await container.content_service.list_full(collection, "de") == []


@pytest.mark.asyncio
async def test_list_full_without_any_tenant_locale_is_empty(container, build) -> None:
    collection = await build.collection()
    await build.primitive(collection, "title")
    await container.content_service.create(CreateContentInput(data={"title": "x"}), collection)
    assert await container.content_service.list_full(collection) == []
