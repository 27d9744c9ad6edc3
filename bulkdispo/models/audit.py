"""Modèle Historique des réservations / Booking audit trail model."""

from sqlalchemy import Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from bulkdispo.database import Base


class AuditLog(Base):
    __tablename__ = "audit_logs"
    __table_args__ = (Index("ix_audit_entity", "entity_type", "entity_id"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    entity_type: Mapped[str] = mapped_column(String(20), nullable=False)  # order, tour
    entity_id: Mapped[int] = mapped_column(Integer, nullable=False)
    action: Mapped[str] = mapped_column(String(20), nullable=False)  # BOOK, RESIZE, UNBOOK, REBOOK, MOVE, ...
    changes: Mapped[str | None] = mapped_column(Text)  # JSON
    dispatcher: Mapped[str | None] = mapped_column(String(100))
    timestamp: Mapped[str] = mapped_column(String(32), nullable=False)  # ISO 8601 UTC

    def __repr__(self) -> str:
        return f"<AuditLog {self.action} {self.entity_type}:{self.entity_id} by {self.dispatcher or '-'}>"
