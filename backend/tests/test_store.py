from dataclasses import replace
from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from alumni_ledger.core.errors import InvalidStateError, NotFoundError, ValidationError
from alumni_ledger.core.security import acting_user_for
from alumni_ledger.db.base import Base
from alumni_ledger.models.enums import AuditAction, Bucket, ContributionType, EntryKind, EntryStatus, RoleName
from alumni_ledger.models.user import User
from alumni_ledger.services.aggregation import aggregate
from alumni_ledger.services.approval import approve
from alumni_ledger.services.entries import EntryDraft
from alumni_ledger.services.settings import SPLIT_SETTING_KEY, get_split_ratio, update_setting
from alumni_ledger.services.split_policy import SplitRatio
from alumni_ledger.services.store import LedgerStore
from alumni_ledger.services.workflow import decide_entry, edit_entry, submit_and_approve, submit_entry
from alumni_ledger.utils.decimal_math import money, pct


def _session() -> Session:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)()


def _users(db: Session) -> tuple[User, User, User]:
    admin = User(email="admin@test.com", full_name="Admin", role=RoleName.admin, is_active=True)
    treasurer = User(email="treasurer@test.com", full_name="Treasurer", role=RoleName.treasurer, is_active=True)
    member = User(email="member@test.com", full_name="Member", role=RoleName.alumni, is_active=True)
    db.add_all([admin, treasurer, member])
    db.flush()
    return admin, treasurer, member


def _basic_draft(member: User, amount: str = "1000.00", on: date = date(2026, 6, 1)) -> EntryDraft:
    return EntryDraft(
        kind=EntryKind.contribution,
        amount=amount,
        entry_date=on,
        submitted_by=member.id,
        contribution_type=ContributionType.basic,
    )


def test_submit_uses_configured_ratio_and_round_trips() -> None:
    db = _session()
    admin, _, member = _users(db)
    update_setting(db, key=SPLIT_SETTING_KEY, value="60", description=None, actor=acting_user_for(admin))

    entry = submit_entry(db, _basic_draft(member))
    loaded = LedgerStore(db).load(entry.id)

    assert loaded == entry
    assert loaded.version == 1
    assert loaded.status == EntryStatus.pending
    assert loaded.lift_amount == money("600.00")
    assert loaded.aa_amount == money("400.00")
    assert loaded.lift_pct == pct(60)
    assert loaded.member_id == member.id


def test_default_ratio_applies_without_stored_setting() -> None:
    db = _session()
    assert get_split_ratio(db) == SplitRatio(50)


def test_ratio_change_does_not_resplit_existing_entries() -> None:
    db = _session()
    admin, _, member = _users(db)
    actor = acting_user_for(admin)
    update_setting(db, key=SPLIT_SETTING_KEY, value="60", description=None, actor=actor)
    entry = submit_entry(db, _basic_draft(member))

    update_setting(db, key=SPLIT_SETTING_KEY, value="20", description=None, actor=actor)
    edited = edit_entry(db, entry_id=entry.id, kind=EntryKind.contribution, actor=actor, updates={"amount": "500"})

    assert edited.lift_amount == money("300.00")
    assert edited.lift_pct == pct(60)
    assert edited.version == 2


@pytest.mark.parametrize("value", ["abc", "101", "-1", "   "])
def test_invalid_split_setting_is_rejected(value: str) -> None:
    db = _session()
    admin, _, _ = _users(db)
    with pytest.raises(ValidationError):
        update_setting(db, key=SPLIT_SETTING_KEY, value=value, description=None, actor=acting_user_for(admin))


def test_split_setting_is_normalised() -> None:
    db = _session()
    admin, _, _ = _users(db)
    setting = update_setting(db, key=SPLIT_SETTING_KEY, value=" 75 ", description=None, actor=acting_user_for(admin))
    assert setting.value == "75.000000"
    assert setting.updated_by_user_id == admin.id


def test_decision_persists_status_and_audit_log() -> None:
    db = _session()
    _, treasurer, member = _users(db)
    entry = submit_entry(db, _basic_draft(member))
    store = LedgerStore(db)

    decided = decide_entry(
        db,
        entry_id=entry.id,
        kind=EntryKind.contribution,
        actor=acting_user_for(treasurer),
        decision=EntryStatus.rejected,
        notes="Bounced transfer",
    )

    assert decided.status == EntryStatus.rejected
    assert store.load(entry.id).status == EntryStatus.rejected
    [log] = store.audit_log_for(entry.id)
    assert log.action == AuditAction.rejected
    assert log.acting_user_id == treasurer.id
    assert log.notes == "Bounced transfer"

    with pytest.raises(InvalidStateError):
        decide_entry(
            db,
            entry_id=entry.id,
            kind=EntryKind.contribution,
            actor=acting_user_for(treasurer),
            decision=EntryStatus.approved,
        )
    assert len(store.audit_log_for(entry.id)) == 1


def test_stale_save_is_rejected() -> None:
    db = _session()
    admin, treasurer, member = _users(db)
    store = LedgerStore(db)
    entry = submit_entry(db, _basic_draft(member))
    stale = store.load(entry.id)

    decide_entry(
        db,
        entry_id=entry.id,
        kind=EntryKind.contribution,
        actor=acting_user_for(treasurer),
        decision=EntryStatus.approved,
    )

    with pytest.raises(InvalidStateError):
        store.save(approve(stale, acting_user_for(admin), store))
    assert store.load(entry.id).version == 2


def test_load_missing_or_wrong_kind_raises_not_found() -> None:
    db = _session()
    _, _, member = _users(db)
    store = LedgerStore(db)
    entry = submit_entry(db, _basic_draft(member))

    with pytest.raises(NotFoundError):
        store.load("missing")
    with pytest.raises(NotFoundError):
        store.load(entry.id, kind=EntryKind.expense)
    with pytest.raises(NotFoundError):
        store.save(replace(entry, id="missing"))


def test_unknown_member_is_rejected() -> None:
    db = _session()
    _, _, member = _users(db)
    with pytest.raises(NotFoundError):
        submit_entry(db, replace(_basic_draft(member), member_id=999))


def test_query_filters_and_feeds_aggregation() -> None:
    db = _session()
    admin, treasurer, member = _users(db)
    admin_actor = acting_user_for(admin)
    submit_and_approve(db, _basic_draft(member, on=date(2026, 1, 10)), admin_actor)
    submit_and_approve(
        db,
        EntryDraft(
            kind=EntryKind.contribution,
            amount="300",
            entry_date=date(2026, 2, 10),
            submitted_by=member.id,
            contribution_type=ContributionType.additional,
            bucket=Bucket.alumni_association,
        ),
        admin_actor,
    )
    submit_and_approve(
        db,
        EntryDraft(
            kind=EntryKind.expense,
            amount="125.50",
            entry_date=date(2026, 2, 11),
            submitted_by=admin.id,
            bucket=Bucket.lift,
            purpose="Bursary",
            category="scholarships",
        ),
        admin_actor,
    )
    submit_entry(db, _basic_draft(member, amount="800", on=date(2026, 2, 12)))
    store = LedgerStore(db)

    approved = list(store.query(status=EntryStatus.approved))
    assert len(approved) == 3
    assert [entry.entry_date for entry in approved] == sorted(
        (entry.entry_date for entry in approved), reverse=True
    )
    lift_side = list(store.query(bucket=Bucket.lift))
    assert {entry.kind for entry in lift_side} == {EntryKind.contribution, EntryKind.expense}
    assert all(entry.bucket in (None, Bucket.lift) for entry in lift_side)
    assert len(list(store.query(member_id=member.id, date_from=date(2026, 2, 1)))) == 2
    assert store.pending_count(EntryKind.contribution) == 1
    assert store.pending_count(EntryKind.expense) == 0

    summaries = aggregate(store.query(status=EntryStatus.approved))
    assert summaries[Bucket.lift].balance == money("374.50")
    assert summaries[Bucket.alumni_association].balance == money("800.00")
    assert len(store.audit_log_for(approved[0].id)) == 1


def test_only_expenses_can_be_deleted_and_audit_survives() -> None:
    db = _session()
    admin, _, member = _users(db)
    admin_actor = acting_user_for(admin)
    contribution = submit_entry(db, _basic_draft(member))
    expense = submit_and_approve(
        db,
        EntryDraft(
            kind=EntryKind.expense,
            amount="40",
            entry_date=date(2026, 6, 2),
            submitted_by=admin.id,
            bucket=Bucket.alumni_association,
            purpose="Postage",
            category="operations",
        ),
        admin_actor,
    )
    store = LedgerStore(db)

    with pytest.raises(ValidationError):
        store.delete(contribution.id)
    store.delete(expense.id)

    with pytest.raises(NotFoundError):
        store.load(expense.id)
    assert [log.action for log in store.audit_log_for(expense.id)] == [AuditAction.approved]
