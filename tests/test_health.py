"""Tests pour l'endpoint de santé, les métriques et les middlewares transverses."""

from fastapi.testclient import TestClient

from cms_backend.app.main import create_app
from cms_backend.core.http_constants import HTTP_OK


def test_health(container):
    """Teste que l'endpoint de santé retourne un statut OK et le backend de stockage."""
    client = TestClient(create_app(container))
    r = client.get("/health")
    assert r.status_code == HTTP_OK
    assert r.json() == {"status": "ok", "storage": "memory", "env": "test"}


def test_request_id_and_timing_headers(container):
    client = TestClient(create_app(container))
    r = client.get("/health", headers={"X-Request-ID": "req-42"})
    assert r.headers["X-Request-ID"] == "req-42"
    assert float(r.headers["X-Process-Time-ms"]) >= 0

    generated = client.get("/health").headers["X-Request-ID"]
    assert len(generated) == 32


def test_metrics_expose_engine_counters(container, make_token):
    client = TestClient(create_app(container))
    headers = {"Authorization": f"Bearer {make_token(role='admin')}"}
    r = client.post(
        "/collections/create",
        json={"tenantId": "t", "slug": "blog", "displayName": "Blog"},
        headers=headers,
    )
    client.post(
        "/contents/create",
        json={"contentCollectionId": r.json()["id"], "data": {}},
        headers=headers,
    )

    body = client.get("/metrics").text
    assert "cms_schema_compile_seconds" in body
    assert 'cms_content_validation_total{outcome="valid"}' in body
    assert "cms_translation_merge_total" in body
    assert 'route="/contents/create"' in body
