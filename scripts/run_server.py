"""
Script de serveur de développement.

Lance l'application FastAPI avec uvicorn. Sans `DATABASE_URL`, les stores en mémoire sont utilisés
et les données disparaissent à l'arrêt du process.
"""

import os

import uvicorn

from cms_backend.app.main import app


def main():
    """Point d'entrée principal du serveur de développement."""
    port = int(os.environ.get("PORT", "8000"))
    uvicorn.run(app, host="0.0.0.0", port=port, reload=False)


if __name__ == "__main__":
    main()
