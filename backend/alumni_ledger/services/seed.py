from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from alumni_ledger.core.config import get_settings
from alumni_ledger.models.enums import RoleName
from alumni_ledger.models.setting import Setting
from alumni_ledger.models.user import User
from alumni_ledger.services.settings import SPLIT_SETTING_DESCRIPTION, SPLIT_SETTING_KEY
from alumni_ledger.services.split_policy import SplitRatio


def _get_or_create_user(
    db: Session,
    *,
    email: str,
    full_name: str,
    role: RoleName,
) -> User:
    user = db.scalar(select(User).where(User.email == email))
    if user is not None:
        return user

    user = User(
        email=email,
        full_name=full_name,
        role=role,
        is_active=True,
    )
    db.add(user)
    db.flush()
    return user


def _ensure_split_setting(db: Session, *, admin: User) -> Setting:
    setting = db.get(Setting, SPLIT_SETTING_KEY)
    if setting is not None:
        return setting
    setting = Setting(
        key=SPLIT_SETTING_KEY,
        value=str(SplitRatio(get_settings().default_lift_split_pct).lift_pct),
        description=SPLIT_SETTING_DESCRIPTION,
        updated_by_user_id=admin.id,
    )
    db.add(setting)
    db.flush()
    return setting


def seed_demo_data(db: Session) -> None:
    """Idempotent: base users and the default split ratio."""
    admin = _get_or_create_user(
        db,
        email=get_settings().dev_admin_email,
        full_name="Association Admin",
        role=RoleName.admin,
    )
    _get_or_create_user(
        db,
        email="treasurer@alumni.local",
        full_name="Association Treasurer",
        role=RoleName.treasurer,
    )
    _get_or_create_user(
        db,
        email="member@alumni.local",
        full_name="Demo Member",
        role=RoleName.alumni,
    )
    _ensure_split_setting(db, admin=admin)
    db.commit()
