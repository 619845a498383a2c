from datetime import datetime

from pydantic import BaseModel, Field

from alumni_ledger.schemas.common import ORMModel


class SettingOut(ORMModel):
    key: str
    value: str
    description: str | None = None
    updated_by_user_id: int | None = None
    updated_at: datetime | None = None


class SettingUpdateRequest(BaseModel):
    value: str = Field(min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=1000)
