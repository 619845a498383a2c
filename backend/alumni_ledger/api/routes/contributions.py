from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from alumni_ledger.api.deps import get_current_user, get_db
from alumni_ledger.core.security import (
    APPROVER_ROLES,
    acting_user_for,
    is_approver,
    require_entry_editable,
    require_entry_visible,
    require_roles,
)
from alumni_ledger.models.enums import Bucket, ContributionType, EntryKind, EntryStatus, RoleName
from alumni_ledger.models.user import User
from alumni_ledger.schemas.audit import AuditLogOut
from alumni_ledger.schemas.common import CountResponse
from alumni_ledger.schemas.ledger import (
    ContributionBulkRequest,
    ContributionCreateRequest,
    ContributionUpdateRequest,
    DecisionRequest,
    LedgerEntryOut,
    MemberLedgerResponse,
)
from alumni_ledger.services.aggregation import member_totals
from alumni_ledger.services.entries import EntryDraft
from alumni_ledger.services.store import LedgerStore
from alumni_ledger.services.workflow import decide_entry, edit_entry, submit_and_approve, submit_entry


router = APIRouter(tags=["contributions"])


def _draft(payload: ContributionCreateRequest, current_user: User) -> EntryDraft:
    return EntryDraft(
        kind=EntryKind.contribution,
        amount=payload.amount,
        entry_date=payload.entry_date or date.today(),
        submitted_by=current_user.id,
        contribution_type=payload.contribution_type,
        bucket=payload.bucket,
        notes=payload.notes,
        member_id=payload.member_id,
    )


@router.get("/contributions", response_model=list[LedgerEntryOut])
def list_contributions(
    entry_status: EntryStatus | None = Query(default=None, alias="status"),
    contribution_type: ContributionType | None = Query(default=None, alias="type"),
    bucket: Bucket | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[LedgerEntryOut]:
    entries = LedgerStore(db).query(
        kind=EntryKind.contribution,
        status=entry_status,
        contribution_type=contribution_type,
        bucket=bucket,
        member_id=None if is_approver(current_user) else current_user.id,
        date_from=date_from,
        date_to=date_to,
    )
    return [LedgerEntryOut.from_entry(entry) for entry in entries]


@router.post("/contributions", response_model=LedgerEntryOut, status_code=status.HTTP_201_CREATED)
def create_contribution(
    payload: ContributionCreateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> LedgerEntryOut:
    recorded_by_admin = current_user.role == RoleName.admin
    if payload.member_id not in (None, current_user.id) and not recorded_by_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only admins can record contributions for other members.",
        )
    draft = _draft(payload, current_user)
    if recorded_by_admin:
        entry = submit_and_approve(db, draft, acting_user_for(current_user))
    else:
        entry = submit_entry(db, draft)
    db.commit()
    return LedgerEntryOut.from_entry(entry)


@router.post("/contributions/bulk", response_model=list[LedgerEntryOut], status_code=status.HTTP_201_CREATED)
def create_contributions_bulk(
    payload: ContributionBulkRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[LedgerEntryOut]:
    require_roles(current_user, [RoleName.admin])
    actor = acting_user_for(current_user)
    # One transaction: a single invalid row rejects the whole batch.
    created = [submit_and_approve(db, _draft(item, current_user), actor) for item in payload.contributions]
    db.commit()
    return [LedgerEntryOut.from_entry(entry) for entry in created]


@router.get("/contributions/pending/count", response_model=CountResponse)
def count_pending_contributions(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> CountResponse:
    require_roles(current_user, APPROVER_ROLES)
    return CountResponse(count=LedgerStore(db).pending_count(EntryKind.contribution))


@router.get("/me/contributions", response_model=MemberLedgerResponse)
def my_contributions(
    contribution_type: ContributionType | None = Query(default=None, alias="type"),
    bucket: Bucket | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MemberLedgerResponse:
    entries = list(
        LedgerStore(db).query(
            kind=EntryKind.contribution,
            contribution_type=contribution_type,
            bucket=bucket,
            member_id=current_user.id,
        )
    )
    totals = member_totals(entries)
    return MemberLedgerResponse(
        approved_total=totals.approved_total,
        pending_total=totals.pending_total,
        rejected_total=totals.rejected_total,
        lift_total=totals.lift_total,
        aa_total=totals.aa_total,
        entries=[LedgerEntryOut.from_entry(entry) for entry in entries],
    )


@router.get("/contributions/{entry_id}", response_model=LedgerEntryOut)
def get_contribution(
    entry_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> LedgerEntryOut:
    entry = LedgerStore(db).load(entry_id, kind=EntryKind.contribution)
    require_entry_visible(current_user, entry)
    return LedgerEntryOut.from_entry(entry)


@router.patch("/contributions/{entry_id}", response_model=LedgerEntryOut)
def update_contribution(
    entry_id: str,
    payload: ContributionUpdateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> LedgerEntryOut:
    entry = LedgerStore(db).load(entry_id, kind=EntryKind.contribution)
    require_entry_editable(current_user, entry)
    updated = edit_entry(
        db,
        entry_id=entry_id,
        kind=EntryKind.contribution,
        actor=acting_user_for(current_user),
        updates=payload.model_dump(exclude_unset=True),
        loaded=entry,
    )
    db.commit()
    return LedgerEntryOut.from_entry(updated)


@router.post("/contributions/{entry_id}/approve", response_model=LedgerEntryOut)
def approve_contribution(
    entry_id: str,
    payload: DecisionRequest | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> LedgerEntryOut:
    require_roles(current_user, APPROVER_ROLES)
    entry = decide_entry(
        db,
        entry_id=entry_id,
        kind=EntryKind.contribution,
        actor=acting_user_for(current_user),
        decision=EntryStatus.approved,
        notes=payload.notes if payload else None,
    )
    db.commit()
    return LedgerEntryOut.from_entry(entry)


@router.post("/contributions/{entry_id}/reject", response_model=LedgerEntryOut)
def reject_contribution(
    entry_id: str,
    payload: DecisionRequest | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> LedgerEntryOut:
    require_roles(current_user, APPROVER_ROLES)
    entry = decide_entry(
        db,
        entry_id=entry_id,
        kind=EntryKind.contribution,
        actor=acting_user_for(current_user),
        decision=EntryStatus.rejected,
        notes=payload.notes if payload else None,
    )
    db.commit()
    return LedgerEntryOut.from_entry(entry)


@router.get("/contributions/{entry_id}/audit-logs", response_model=list[AuditLogOut])
def list_contribution_audit_logs(
    entry_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[AuditLogOut]:
    require_roles(current_user, APPROVER_ROLES)
    store = LedgerStore(db)
    store.load(entry_id, kind=EntryKind.contribution)
    return [
        AuditLogOut(
            ledger_entry_id=record.ledger_entry_id,
            entity_type=record.entity_type,
            action=record.action,
            acting_user_id=record.acting_user_id,
            notes=record.notes,
            changes=record.changes,
            timestamp=record.timestamp,
        )
        for record in store.audit_log_for(entry_id, kind=EntryKind.contribution)
    ]
