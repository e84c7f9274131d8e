"""SQLAlchemy models for the persistence layer (JSON documents)."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Index,
    MetaData,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Classe de base pour tous les modèles SQLAlchemy."""

    metadata = MetaData()


class DocumentORM(Base):
    """Un document JSON d'une famille donnée (`kind`).

    `unique_key` porte la clé composite déclarée par le store (ex. `content_id|locale` pour les
    traductions) ; la contrainte d'unicité est appliquée par la base.
    """

    __tablename__ = "documents"

    kind = Column(String(64), primary_key=True)
    id = Column(String(32), primary_key=True)
    body = Column(JSON, nullable=False, default=dict)
    unique_key = Column(String(512), nullable=True)
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(UTC))

    __table_args__ = (
        UniqueConstraint("kind", "unique_key", name="uq_documents_kind_unique_key"),
        Index("ix_documents_kind", "kind"),
    )
