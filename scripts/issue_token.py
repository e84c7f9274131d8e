"""
Émission d'un token d'accès pour le développement local.

Signe un JWT avec `JWT_SECRET` / `JWT_ALG` des settings courants, utilisable ensuite en
`Authorization: Bearer <token>` ou dans le cookie d'authentification.
"""

from __future__ import annotations

import argparse

from cms_backend.core.settings import get_settings
from cms_backend.domain.auth import create_access_token
from cms_backend.domain.permissions import Permission


def main() -> None:
    """
    Point d'entrée principal pour l'émission d'un token.

    Sans `--permission`, le token porte toutes les permissions connues ; `--admin` pose le rôle
    administrateur à la place.
    """
    parser = argparse.ArgumentParser()
    parser.add_argument("subject", help="User identifier (JWT `sub`)")
    parser.add_argument("--profile", help="Profile identifier used for audit fields")
    parser.add_argument("--admin", action="store_true", help="Grant the admin role")
    parser.add_argument(
        "--permission",
        action="append",
        choices=[p.value for p in Permission],
        help="Permission to grant (repeatable)",
    )
    parser.add_argument("--expires", type=int, default=60, help="Lifetime in minutes")
    args = parser.parse_args()

    payload: dict = {"sub": args.subject}
    if args.profile:
        payload["profile"] = args.profile
    if args.admin:
        payload["role"] = "admin"
    else:
        payload["permissions"] = args.permission or [p.value for p in Permission]

    settings = get_settings()
    print(create_access_token(settings.JWT_SECRET, settings.JWT_ALG, args.expires, payload))


if __name__ == "__main__":  # pragma: no cover - script entry
    main()
