from datetime import date

from fastapi import APIRouter, Depends, Query, status
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
from alumni_ledger.models.enums import Bucket, EntryKind, EntryStatus, RoleName
from alumni_ledger.models.user import User
from alumni_ledger.schemas.audit import AuditLogOut
from alumni_ledger.schemas.common import CountResponse
from alumni_ledger.schemas.ledger import (
    DecisionRequest,
    ExpenseBulkRequest,
    ExpenseCreateRequest,
    ExpenseUpdateRequest,
    LedgerEntryOut,
    MemberLedgerResponse,
)
from alumni_ledger.services.aggregation import member_totals
from alumni_ledger.services.entries import EntryDraft
from alumni_ledger.services.store import LedgerStore
from alumni_ledger.services.workflow import decide_entry, edit_entry, submit_and_approve, submit_entry


router = APIRouter(tags=["expenses"])


def _draft(payload: ExpenseCreateRequest, current_user: User) -> EntryDraft:
    return EntryDraft(
        kind=EntryKind.expense,
        amount=payload.amount,
        entry_date=payload.entry_date,
        submitted_by=current_user.id,
        bucket=payload.bucket,
        notes=payload.notes,
        purpose=payload.purpose,
        category=payload.category,
        vendor=payload.vendor,
        description=payload.description,
    )


@router.get("/expenses", response_model=list[LedgerEntryOut])
def list_expenses(
    entry_status: EntryStatus | None = Query(default=None, alias="status"),
    bucket: Bucket | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[LedgerEntryOut]:
    entries = LedgerStore(db).query(
        kind=EntryKind.expense,
        status=entry_status,
        bucket=bucket,
        submitted_by=None if is_approver(current_user) else current_user.id,
        date_from=date_from,
        date_to=date_to,
    )
    return [LedgerEntryOut.from_entry(entry) for entry in entries]


@router.post("/expenses", response_model=LedgerEntryOut, status_code=status.HTTP_201_CREATED)
def create_expense(
    payload: ExpenseCreateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> LedgerEntryOut:
    draft = _draft(payload, current_user)
    if current_user.role == RoleName.admin:
        entry = submit_and_approve(db, draft, acting_user_for(current_user))
    else:
        entry = submit_entry(db, draft)
    db.commit()
    return LedgerEntryOut.from_entry(entry)


@router.post("/expenses/bulk", response_model=list[LedgerEntryOut], status_code=status.HTTP_201_CREATED)
def create_expenses_bulk(
    payload: ExpenseBulkRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[LedgerEntryOut]:
    require_roles(current_user, [RoleName.admin])
    actor = acting_user_for(current_user)
    # One transaction: a single invalid row rejects the whole batch.
    created = [submit_and_approve(db, _draft(item, current_user), actor) for item in payload.expenses]
    db.commit()
    return [LedgerEntryOut.from_entry(entry) for entry in created]


@router.get("/expenses/pending/count", response_model=CountResponse)
def count_pending_expenses(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> CountResponse:
    require_roles(current_user, APPROVER_ROLES)
    return CountResponse(count=LedgerStore(db).pending_count(EntryKind.expense))


@router.get("/me/expenses", response_model=MemberLedgerResponse)
def my_expenses(
    bucket: Bucket | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MemberLedgerResponse:
    entries = list(
        LedgerStore(db).query(kind=EntryKind.expense, bucket=bucket, submitted_by=current_user.id)
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


@router.get("/expenses/{entry_id}", response_model=LedgerEntryOut)
def get_expense(
    entry_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> LedgerEntryOut:
    entry = LedgerStore(db).load(entry_id, kind=EntryKind.expense)
    require_entry_visible(current_user, entry)
    return LedgerEntryOut.from_entry(entry)


@router.patch("/expenses/{entry_id}", response_model=LedgerEntryOut)
def update_expense(
    entry_id: str,
    payload: ExpenseUpdateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> LedgerEntryOut:
    entry = LedgerStore(db).load(entry_id, kind=EntryKind.expense)
    require_entry_editable(current_user, entry)
    updated = edit_entry(
        db,
        entry_id=entry_id,
        kind=EntryKind.expense,
        actor=acting_user_for(current_user),
        updates=payload.model_dump(exclude_unset=True),
        loaded=entry,
    )
    db.commit()
    return LedgerEntryOut.from_entry(updated)


@router.delete("/expenses/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_expense(
    entry_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> None:
    require_roles(current_user, [RoleName.admin])
    store = LedgerStore(db)
    store.load(entry_id, kind=EntryKind.expense)
    store.delete(entry_id)
    db.commit()
    return None


@router.post("/expenses/{entry_id}/approve", response_model=LedgerEntryOut)
def approve_expense(
    entry_id: str,
    payload: DecisionRequest | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> LedgerEntryOut:
    require_roles(current_user, APPROVER_ROLES)
    entry = decide_entry(
        db,
        entry_id=entry_id,
        kind=EntryKind.expense,
        actor=acting_user_for(current_user),
        decision=EntryStatus.approved,
        notes=payload.notes if payload else None,
    )
    db.commit()
    return LedgerEntryOut.from_entry(entry)


@router.post("/expenses/{entry_id}/reject", response_model=LedgerEntryOut)
def reject_expense(
    entry_id: str,
    payload: DecisionRequest | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> LedgerEntryOut:
    require_roles(current_user, APPROVER_ROLES)
    entry = decide_entry(
        db,
        entry_id=entry_id,
        kind=EntryKind.expense,
        actor=acting_user_for(current_user),
        decision=EntryStatus.rejected,
        notes=payload.notes if payload else None,
    )
    db.commit()
    return LedgerEntryOut.from_entry(entry)


@router.get("/expenses/{entry_id}/audit-logs", response_model=list[AuditLogOut])
def list_expense_audit_logs(
    entry_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[AuditLogOut]:
    require_roles(current_user, APPROVER_ROLES)
    store = LedgerStore(db)
    records = store.audit_log_for(entry_id, kind=EntryKind.expense)
    if not records:
        # Deleted expenses stay readable through their audit rows; anything
        # else must still exist as an expense.
        store.load(entry_id, kind=EntryKind.expense)
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
        for record in records
    ]
