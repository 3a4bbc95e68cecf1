from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from signdesk.schemas.base import CamelModel, ensure_utc


class SignatureSnapshot(CamelModel):
    id: str
    user_id: Optional[str] = None
    signature_data: str
    signature_text: Optional[str] = None
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, value):
        return ensure_utc(value)


class SignatureCreate(CamelModel):
    user_id: Optional[str] = None
    signature_data: str = Field(min_length=1)
    signature_text: Optional[str] = None
