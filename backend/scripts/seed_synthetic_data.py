from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy import select

from alumni_ledger.core.security import acting_user_for
from alumni_ledger.db.session import SessionLocal
from alumni_ledger.models.enums import Bucket, ContributionType, EntryKind, EntryStatus, RoleName
from alumni_ledger.models.ledger import LedgerEntryRecord
from alumni_ledger.models.user import User
from alumni_ledger.services.entries import EntryDraft
from alumni_ledger.services.seed import seed_demo_data
from alumni_ledger.services.workflow import decide_entry, submit_and_approve, submit_entry
from alumni_ledger.utils.decimal_math import money


SYNTHETIC_NOTE = "Synthetic dataset"


def _user_with_role(db, role: RoleName) -> User:
    user = db.scalar(select(User).where(User.role == role, User.is_active.is_(True)).limit(1))
    if user is None:
        raise RuntimeError(f"No active {role.value} user. Start the backend once to seed base users.")
    return user


def _already_seeded(db) -> bool:
    existing = db.scalar(select(LedgerEntryRecord.id).where(LedgerEntryRecord.notes == SYNTHETIC_NOTE).limit(1))
    return existing is not None


def _member_contributions(db, *, member: User, treasurer: User) -> None:
    treasurer_actor = acting_user_for(treasurer)
    monthly: list[tuple[date, Decimal, EntryStatus | None]] = [
        (date(2026, 1, 5), money("1000.00"), EntryStatus.approved),
        (date(2026, 2, 5), money("1000.00"), EntryStatus.approved),
        (date(2026, 3, 5), money("1000.00"), EntryStatus.rejected),
        (date(2026, 3, 7), money("1000.00"), None),
    ]
    for entry_date, amount, decision in monthly:
        entry = submit_entry(
            db,
            EntryDraft(
                kind=EntryKind.contribution,
                amount=amount,
                entry_date=entry_date,
                submitted_by=member.id,
                contribution_type=ContributionType.basic,
                notes=SYNTHETIC_NOTE,
            ),
        )
        if decision is not None:
            decide_entry(
                db,
                entry_id=entry.id,
                kind=entry.kind,
                actor=treasurer_actor,
                decision=decision,
            )

    top_up = submit_entry(
        db,
        EntryDraft(
            kind=EntryKind.contribution,
            amount=money("250.00"),
            entry_date=date(2026, 2, 14),
            submitted_by=member.id,
            contribution_type=ContributionType.additional,
            bucket=Bucket.lift,
            notes=SYNTHETIC_NOTE,
        ),
    )
    decide_entry(
        db,
        entry_id=top_up.id,
        kind=top_up.kind,
        actor=treasurer_actor,
        decision=EntryStatus.approved,
    )


def _association_expenses(db, *, admin: User) -> None:
    admin_actor = acting_user_for(admin)
    expenses = [
        (date(2026, 1, 20), money("320.00"), Bucket.lift, "Scholarship fund", "scholarships", "University bursary"),
        (date(2026, 2, 11), money("145.50"), Bucket.alumni_association, "Reunion venue deposit", "events", "Hall Ltd"),
        (date(2026, 3, 2), money("60.00"), Bucket.alumni_association, "Mailing list hosting", "operations", None),
    ]
    for entry_date, amount, bucket, purpose, category, vendor in expenses:
        submit_and_approve(
            db,
            EntryDraft(
                kind=EntryKind.expense,
                amount=amount,
                entry_date=entry_date,
                submitted_by=admin.id,
                bucket=bucket,
                notes=SYNTHETIC_NOTE,
                purpose=purpose,
                category=category,
                vendor=vendor,
            ),
            admin_actor,
        )


def main() -> None:
    with SessionLocal() as db:
        seed_demo_data(db)
        if _already_seeded(db):
            print("Synthetic data already present.")
            return
        admin = _user_with_role(db, RoleName.admin)
        treasurer = _user_with_role(db, RoleName.treasurer)
        member = _user_with_role(db, RoleName.alumni)
        _member_contributions(db, member=member, treasurer=treasurer)
        _association_expenses(db, admin=admin)
        db.commit()
        print("Synthetic data seeded successfully.")


if __name__ == "__main__":
    main()
