from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from alumni_ledger.core.config import get_settings
from alumni_ledger.core.errors import NotFoundError, ValidationError
from alumni_ledger.models.setting import Setting
from alumni_ledger.services.approval import ActingUser
from alumni_ledger.services.split_policy import SplitRatio


SPLIT_SETTING_KEY = "basic_contribution_split_lift"
SPLIT_SETTING_DESCRIPTION = "Percentage of BASIC contributions allocated to LIFT."

logger = logging.getLogger("alumni_ledger.settings")


def get_split_ratio(db: Session) -> SplitRatio:
    """Current ratio for new BASIC contributions; stored entries keep their own."""
    setting = db.get(Setting, SPLIT_SETTING_KEY)
    if setting is None:
        return SplitRatio(get_settings().default_lift_split_pct)
    return SplitRatio(setting.value)


def list_settings(db: Session) -> list[Setting]:
    return list(db.scalars(select(Setting).order_by(Setting.key)).all())


def get_setting_or_404(db: Session, key: str) -> Setting:
    setting = db.get(Setting, key)
    if setting is None:
        raise NotFoundError("Setting not found.", key=key)
    return setting


def _validate_value(key: str, value: str) -> str:
    value = value.strip()
    if not value:
        raise ValidationError("Setting value is required.", key=key)
    if key == SPLIT_SETTING_KEY:
        # Normalises the stored text, e.g. "60" -> "60.000000".
        return str(SplitRatio(value).lift_pct)
    return value


def update_setting(
    db: Session,
    *,
    key: str,
    value: str,
    description: str | None,
    actor: ActingUser,
) -> Setting:
    value = _validate_value(key, value)
    setting = db.get(Setting, key)
    if setting is None:
        setting = Setting(key=key, value=value, description=description, updated_by_user_id=actor.id)
        db.add(setting)
    else:
        setting.value = value
        if description is not None:
            setting.description = description
        setting.updated_by_user_id = actor.id
    db.flush()
    logger.info("Setting %s set to %s by user %s", key, value, actor.id)
    return setting
