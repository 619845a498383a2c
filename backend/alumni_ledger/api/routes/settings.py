from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from alumni_ledger.api.deps import get_current_user, get_db
from alumni_ledger.core.security import acting_user_for, require_roles
from alumni_ledger.models.enums import RoleName
from alumni_ledger.models.user import User
from alumni_ledger.schemas.settings import SettingOut, SettingUpdateRequest
from alumni_ledger.services.settings import get_setting_or_404, list_settings, update_setting


router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("", response_model=list[SettingOut])
def read_settings(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_roles(current_user, [RoleName.admin])
    return list_settings(db)


@router.get("/{key}", response_model=SettingOut)
def read_setting(
    key: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_roles(current_user, [RoleName.admin])
    return get_setting_or_404(db, key)


@router.put("/{key}", response_model=SettingOut)
def write_setting(
    key: str,
    payload: SettingUpdateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_roles(current_user, [RoleName.admin])
    setting = update_setting(
        db,
        key=key,
        value=payload.value,
        description=payload.description,
        actor=acting_user_for(current_user),
    )
    db.commit()
    db.refresh(setting)
    return setting
