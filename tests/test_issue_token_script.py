"""Tests du script d'émission de token de développement."""

from __future__ import annotations

import sys

from cms_backend.core.settings import get_settings
from cms_backend.domain.auth import decode_token
from cms_backend.domain.permissions import Permission
from scripts.issue_token import main


def _run(monkeypatch, capsys, *argv: str):
    monkeypatch.setattr(sys, "argv", ["issue_token.py", *argv])
    main()
    token = capsys.readouterr().out.strip()
    settings = get_settings()
    return decode_token(token, settings.JWT_SECRET, settings.JWT_ALG)


def test_default_token_carries_every_permission(monkeypatch, capsys) -> None:
    data = _run(monkeypatch, capsys, "alice")
    assert data.sub == "alice"
    assert data.to_actor().permissions == frozenset(Permission)


def test_admin_and_scoped_tokens(monkeypatch, capsys) -> None:
    admin = _run(monkeypatch, capsys, "bob", "--admin", "--profile", "p-bob")
    assert admin.to_actor().is_admin
    assert admin.to_actor().audit_id == "p-bob"

    scoped = _run(monkeypatch, capsys, "carol", "--permission", "content:read")
    assert scoped.to_actor().permissions == frozenset({Permission.CONTENT_READ})
