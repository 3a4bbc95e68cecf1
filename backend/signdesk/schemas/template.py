from datetime import datetime
from typing import Optional

from pydantic import field_validator

from signdesk.models.template import TemplateCategory
from signdesk.schemas.base import CamelModel, ensure_utc


class TemplateSnapshot(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    category: TemplateCategory
    file_path: str
    thumbnail_path: Optional[str] = None
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, value):
        return ensure_utc(value)


class UseTemplateRequest(CamelModel):
    title: Optional[str] = None
    client_email: Optional[str] = None
