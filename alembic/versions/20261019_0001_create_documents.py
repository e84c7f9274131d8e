# mypy: ignore-errors
"""
Migration Alembic pour créer la table documents.

Une ligne par document (collection, attribut, composant, contenu, traduction, locale), identifiée
par `(kind, id)`, avec un corps JSON et une clé d'unicité optionnelle par famille.
"""

from __future__ import annotations

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "documents",
        sa.Column("kind", sa.String(length=64), primary_key=True),
        sa.Column("id", sa.String(length=32), primary_key=True),
        sa.Column("body", sa.JSON(), nullable=False),
        sa.Column("unique_key", sa.String(length=512), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("kind", "unique_key", name="uq_documents_kind_unique_key"),
    )
    op.create_index("ix_documents_kind", "documents", ["kind"])


def downgrade() -> None:
    op.drop_index("ix_documents_kind", table_name="documents")
    op.drop_table("documents")
