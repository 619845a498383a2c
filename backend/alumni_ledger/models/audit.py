from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from alumni_ledger.db.base import Base
from alumni_ledger.models.enums import AuditAction, EntryKind


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    # No foreign key: the trail outlives deleted expenses.
    ledger_entry_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    entity_type: Mapped[EntryKind] = mapped_column(
        Enum(EntryKind, name="entry_kind"),
        nullable=False,
    )
    action: Mapped[AuditAction] = mapped_column(
        Enum(AuditAction, name="audit_action"),
        nullable=False,
    )
    actor_user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    changes: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    actor_user: Mapped["User"] = relationship("User", back_populates="audit_logs")
