from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from alumni_ledger.db.base import Base
from alumni_ledger.models.enums import Bucket, ContributionType, EntryKind, EntryStatus


class LedgerEntryRecord(Base):
    __tablename__ = "ledger_entries"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    kind: Mapped[EntryKind] = mapped_column(
        Enum(EntryKind, name="entry_kind"),
        nullable=False,
        index=True,
    )
    contribution_type: Mapped[ContributionType | None] = mapped_column(
        Enum(ContributionType, name="contribution_type"),
        nullable=True,
    )
    # NULL only for BASIC contributions, which are split across both buckets.
    bucket: Mapped[Bucket | None] = mapped_column(Enum(Bucket, name="bucket"), nullable=True)
    status: Mapped[EntryStatus] = mapped_column(
        Enum(EntryStatus, name="entry_status"),
        nullable=False,
        default=EntryStatus.pending,
        index=True,
    )

    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    lift_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    aa_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    lift_pct: Mapped[Decimal | None] = mapped_column(Numeric(9, 6), nullable=True)
    aa_pct: Mapped[Decimal | None] = mapped_column(Numeric(9, 6), nullable=True)

    entry_date: Mapped[date] = mapped_column(nullable=False, index=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    purpose: Mapped[str | None] = mapped_column(String(255), nullable=True)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    vendor: Mapped[str | None] = mapped_column(String(255), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    member_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    submitted_by_user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    submitted_by_user: Mapped["User"] = relationship(
        "User",
        back_populates="submitted_entries",
        foreign_keys=[submitted_by_user_id],
    )
    member: Mapped["User | None"] = relationship("User", foreign_keys=[member_id])
