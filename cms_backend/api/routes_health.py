"""
Endpoint de santé pour vérifier la disponibilité de l'API et du stockage.

Expose `/health` pour signaler l'état général de l'application et le backend de stockage actif.
"""

from fastapi import APIRouter, Depends

from cms_backend.api.deps import get_container
from cms_backend.core.container import Container

router = APIRouter(tags=["health"])


@router.get("/health")
def health(container: Container = Depends(get_container)):
    """Vérifie la disponibilité de l'API et le backend de stockage."""
    return {
        "status": "ok",
        "storage": container.storage_backend,
        "env": container.settings.APP_ENV,
    }
