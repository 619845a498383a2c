from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy.orm import Session

from alumni_ledger.core.errors import NotFoundError, ValidationError
from alumni_ledger.models.enums import EntryKind, EntryStatus
from alumni_ledger.models.user import User
from alumni_ledger.services.approval import ActingUser, approve, edit, reject
from alumni_ledger.services.entries import EntryDraft, LedgerEntry, create_ledger_entry
from alumni_ledger.services.settings import get_split_ratio
from alumni_ledger.services.store import LedgerStore


logger = logging.getLogger("alumni_ledger.workflow")


def require_member(db: Session, member_id: int | None) -> None:
    if member_id is None:
        return
    member = db.get(User, member_id)
    if member is None or not member.is_active:
        raise NotFoundError("Member not found.", member_id=member_id)


def submit_entry(db: Session, draft: EntryDraft) -> LedgerEntry:
    """Create and store a PENDING entry, splitting with the ratio in force now."""
    require_member(db, draft.member_id)
    entry = create_ledger_entry(draft, get_split_ratio(db))
    stored = LedgerStore(db).save(entry)
    logger.info(
        "%s %s submitted by user %s for %s",
        stored.kind.value.title(),
        stored.id,
        stored.submitted_by,
        stored.total_amount,
    )
    return stored


def decide_entry(
    db: Session,
    *,
    entry_id: str,
    kind: EntryKind,
    actor: ActingUser,
    decision: EntryStatus,
    notes: str | None = None,
) -> LedgerEntry:
    if decision not in {EntryStatus.approved, EntryStatus.rejected}:
        raise ValidationError("Decision must be APPROVED or REJECTED.", decision=decision)
    store = LedgerStore(db)
    entry = store.load(entry_id, kind=kind)
    transition = approve if decision == EntryStatus.approved else reject
    decided = store.save(transition(entry, actor, store, notes=notes))
    logger.info("%s %s %s by user %s", kind.value.title(), entry_id, decision.value, actor.id)
    return decided


def edit_entry(
    db: Session,
    *,
    entry_id: str,
    kind: EntryKind,
    actor: ActingUser,
    updates: Mapping[str, Any],
    loaded: LedgerEntry | None = None,
) -> LedgerEntry:
    store = LedgerStore(db)
    entry = loaded or store.load(entry_id, kind=kind)
    if "member_id" in updates:
        require_member(db, updates["member_id"])
    edited = edit(entry, updates, actor, store, ratio=get_split_ratio(db))
    return store.save(edited)


def submit_and_approve(db: Session, draft: EntryDraft, actor: ActingUser) -> LedgerEntry:
    """Entries recorded by an admin are approved in the same transaction."""
    entry = submit_entry(db, draft)
    return decide_entry(
        db,
        entry_id=entry.id,
        kind=entry.kind,
        actor=actor,
        decision=EntryStatus.approved,
        notes=f"Recorded and approved by {actor.display_name}",
    )
