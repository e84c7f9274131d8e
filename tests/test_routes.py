"""
Tests HTTP de bout en bout (TestClient) sur une application câblée à des stores en mémoire.

Vérifie l'authentification, les permissions, l'enveloppe d'erreur standard et le parcours complet
collection → attributs → contenu → traduction → lecture localisée.
"""

from __future__ import annotations

import asyncio

import pytest
from fastapi.testclient import TestClient

from cms_backend.app.main import create_app
from cms_backend.core.http_constants import (
    HTTP_BAD_REQUEST,
    HTTP_CONFLICT,
    HTTP_CREATED,
    HTTP_FORBIDDEN,
    HTTP_INTERNAL_SERVER_ERROR,
    HTTP_NOT_FOUND,
    HTTP_OK,
    HTTP_UNAUTHORIZED,
    HTTP_UNPROCESSABLE_ENTITY,
)
from cms_backend.domain.entities import AttributeDefinition, AttributeKind
from cms_backend.domain.identifiers import new_id

TENANT = "tenant-a"


@pytest.fixture
def client(container) -> TestClient:
    return TestClient(create_app(container))


@pytest.fixture
def admin(make_token) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(role='admin')}"}


def _collection(client: TestClient, headers, slug: str = "articles") -> dict:
    r = client.post(
        "/collections/create",
        json={"tenantId": TENANT, "slug": slug, "displayName": "Articles"},
        headers=headers,
    )
    assert r.status_code == HTTP_CREATED, r.text
    return r.json()


def _attribute(client: TestClient, headers, collection_id: str, **body) -> dict:
    r = client.post(
        "/attributes/create-primitive",
        json={"contentCollectionId": collection_id, "attributeType": "string", **body},
        headers=headers,
    )
    assert r.status_code == HTTP_CREATED, r.text
    return r.json()


def _content(client: TestClient, headers, collection_id: str, data: dict) -> dict:
    r = client.post(
        "/contents/create",
        json={"contentCollectionId": collection_id, "data": data},
        headers=headers,
    )
    assert r.status_code == HTTP_CREATED, r.text
    return r.json()


def test_missing_token_is_unauthorized(client: TestClient) -> None:
    r = client.post("/collections/list", json={"tenantId": TENANT})
    assert r.status_code == HTTP_UNAUTHORIZED
    body = r.json()
    assert body["code"] == "UNAUTHORIZED"
    assert body["trace_id"] == r.headers["X-Request-ID"]


def test_invalid_token_is_unauthorized(client: TestClient) -> None:
    r = client.post(
        "/collections/list",
        json={"tenantId": TENANT},
        headers={"Authorization": "Bearer not-a-jwt"},
    )
    assert r.status_code == HTTP_UNAUTHORIZED


def test_token_is_also_read_from_cookie(client: TestClient, make_token) -> None:
    client.cookies.set("access_token", make_token(permissions=["collection:read"]))
    r = client.post("/collections/list", json={"tenantId": TENANT})
    assert r.status_code == HTTP_OK
    assert r.json() == []


def test_missing_permission_is_forbidden(client: TestClient, make_token) -> None:
    headers = {"Authorization": f"Bearer {make_token(permissions=['collection:read'])}"}
    r = client.post(
        "/collections/create",
        json={"tenantId": TENANT, "slug": "news", "displayName": "News"},
        headers=headers,
    )
    assert r.status_code == HTTP_FORBIDDEN
    assert r.json()["details"] == {"permission": "collection:create"}


def test_full_localized_flow(client: TestClient, admin) -> None:
    for locale in ("en", "fr"):
        r = client.post(
            "/locales/create",
            json={"tenantId": TENANT, "locale": locale, "displayName": locale.upper()},
            headers=admin,
        )
        assert r.status_code == HTTP_CREATED
    collection = _collection(client, admin)
    _attribute(client, admin, collection["id"], key="title", label="Title", required=True)
    _attribute(client, admin, collection["id"], key="body", label="Body")
    content = _content(client, admin, collection["id"], {"title": "Hello", "body": "World"})
    assert content["createdBy"] == "profile-user-1"

    r = client.post(
        "/content-translations/create",
        json={
            "contentCollectionId": collection["id"],
            "contentId": content["id"],
            "locale": "fr",
            "data": {"title": "Bonjour"},
        },
        headers=admin,
    )
    assert r.status_code == HTTP_CREATED, r.text

    r = client.post(
        "/contents/list",
        json={"contentCollectionId": collection["id"], "locale": "fr"},
        headers=admin,
    )
    assert r.status_code == HTTP_OK
    [full] = r.json()
    assert full["fullData"] == {"title": "Bonjour", "body": "World"}
    assert full["resolvedLocale"] == "fr"
    assert full["localeNotFound"] is False

    r = client.post(
        "/contents/list",
        json={"contentCollectionId": collection["id"], "locale": "de"},
        headers=admin,
    )
    assert r.status_code == HTTP_OK
    assert r.json() == []

    r = client.post(
        "/content-translations/list",
        json={"filter": {"contentId": content["id"]}, "lookup": ["content"]},
        headers=admin,
    )
    assert [t["content"]["id"] for t in r.json()] == [content["id"]]

    r = client.post(f"/collections/{collection['id']}/schema", headers=admin)
    schema = r.json()
    assert schema["required"] == ["title"]
    assert list(schema["properties"]) == ["title", "body"]


def test_invalid_content_returns_every_violation(client: TestClient, admin) -> None:
    collection = _collection(client, admin)
    _attribute(client, admin, collection["id"], key="title", label="Title", required=True)
    _attribute(
        client, admin, collection["id"], key="color", label="Color", enumValues=["red", "blue"]
    )

    r = client.post(
        "/contents/create",
        json={"contentCollectionId": collection["id"], "data": {"color": "green"}},
        headers=admin,
    )

    assert r.status_code == HTTP_UNPROCESSABLE_ENTITY
    body = r.json()
    assert body["code"] == "VALIDATION_ERROR"
    assert [(v["path"], v["code"]) for v in body["details"]["violations"]] == [
        ("title", "required"),
        ("color", "enum"),
    ]


def test_update_content_deep_merges(client: TestClient, admin) -> None:
    collection = _collection(client, admin)
    _attribute(client, admin, collection["id"], key="title", label="Title")
    _attribute(client, admin, collection["id"], key="body", label="Body")
    content = _content(client, admin, collection["id"], {"title": "a", "body": "b"})

    r = client.post(
        f"/contents/{content['id']}/update",
        json={"data": {"body": "c"}, "status": "published"},
        headers=admin,
    )

    assert r.status_code == HTTP_OK, r.text
    assert r.json()["data"] == {"title": "a", "body": "c"}
    assert r.json()["status"] == "published"


def test_duplicate_slug_conflicts(client: TestClient, admin) -> None:
    _collection(client, admin)
    r = client.post(
        "/collections/create",
        json={"tenantId": TENANT, "slug": "articles", "displayName": "Again"},
        headers=admin,
    )
    assert r.status_code == HTTP_CONFLICT
    assert r.json()["code"] == "CONFLICT"


def test_unknown_and_malformed_ids(client: TestClient, admin) -> None:
    r = client.post(f"/collections/{new_id()}/get", headers=admin)
    assert r.status_code == HTTP_NOT_FOUND
    assert r.json()["code"] == "NOT_FOUND"

    r = client.post("/collections/not-an-id/get", headers=admin)
    assert r.status_code == HTTP_BAD_REQUEST


def test_malformed_request_body_is_unprocessable(client: TestClient, admin) -> None:
    r = client.post("/collections/create", json={"slug": "x"}, headers=admin)
    assert r.status_code == HTTP_UNPROCESSABLE_ENTITY
    paths = {v["path"] for v in r.json()["details"]["violations"]}
    assert {"tenantId", "displayName"} <= paths


def test_reorder_with_foreign_id_conflicts(client: TestClient, admin) -> None:
    collection = _collection(client, admin)
    _attribute(client, admin, collection["id"], key="title", label="Title")
    a = _content(client, admin, collection["id"], {"title": "a"})
    b = _content(client, admin, collection["id"], {"title": "b"})
    stranger = new_id()

    r = client.post(
        "/contents/update-position",
        json={"contentCollectionId": collection["id"], "ids": [b["id"], stranger]},
        headers=admin,
    )
    assert r.status_code == HTTP_CONFLICT
    assert r.json()["code"] == "POSITION_CONFLICT"
    assert r.json()["details"] == {"foreign_ids": [stranger]}

    r = client.post(
        "/contents/update-position",
        json={"contentCollectionId": collection["id"], "ids": [b["id"], a["id"]]},
        headers=admin,
    )
    assert [(c["id"], c["position"]) for c in r.json()] == [(b["id"], 0), (a["id"], 1)]


def test_broken_schema_is_a_server_fault(client: TestClient, admin, container) -> None:
    collection = _collection(client, admin)
    missing = new_id()
    asyncio.run(
        container.attribute_repo.insert(
            AttributeDefinition(
                tenant_id=TENANT,
                content_collection_id=collection["id"],
                key="block",
                label="Block",
                kind=AttributeKind.COMPONENT,
                component_ref_id=missing,
            )
        )
    )

    r = client.post(
        "/contents/create",
        json={"contentCollectionId": collection["id"], "data": {}},
        headers=admin,
    )
    assert r.status_code == HTTP_INTERNAL_SERVER_ERROR
    assert r.json()["code"] == "SCHEMA_REFERENCE"
    assert r.json()["details"] == {"component_id": missing}


def test_component_routes(client: TestClient, admin) -> None:
    r = client.post(
        "/components/create",
        json={"tenantId": TENANT, "key": "address", "label": "Address", "category": "blocks"},
        headers=admin,
    )
    assert r.status_code == HTTP_CREATED
    component = r.json()

    r = client.post(
        f"/components/{component['id']}/attributes/create-primitive",
        json={"key": "city", "label": "City", "attributeType": "string", "required": True},
        headers=admin,
    )
    assert r.status_code == HTTP_CREATED
    assert r.json()["componentId"] == component["id"]

    r = client.post(
        f"/components/{component['id']}/attributes/create-component",
        json={"key": "self", "label": "Self", "componentRefId": component["id"]},
        headers=admin,
    )
    assert r.status_code == HTTP_INTERNAL_SERVER_ERROR
    assert r.json()["code"] == "SCHEMA_CYCLE"

    collection = _collection(client, admin)
    r = client.post(
        "/attributes/create-component",
        json={
            "contentCollectionId": collection["id"],
            "key": "address",
            "label": "Address",
            "componentRefId": component["id"],
        },
        headers=admin,
    )
    assert r.status_code == HTTP_CREATED

    r = client.post(
        "/contents/create",
        json={"contentCollectionId": collection["id"], "data": {"address": {"city": 3}}},
        headers=admin,
    )
    assert r.status_code == HTTP_UNPROCESSABLE_ENTITY
    assert r.json()["details"]["violations"][0]["path"] == "address.city"

    r = client.post(f"/components/{component['id']}/delete", headers=admin)
    assert r.status_code == HTTP_CONFLICT


def test_trace_id_header_is_echoed_in_errors(client: TestClient) -> None:
    r = client.post(
        "/collections/list", json={"tenantId": TENANT}, headers={"X-Trace-ID": "trace-123"}
    )
    assert r.json()["trace_id"] == "trace-123"
