from datetime import datetime
from typing import Any, Optional

from pydantic import ConfigDict, Field, field_validator

from signdesk.models.document import DocumentStatus
from signdesk.schemas.base import CamelModel, ensure_utc


class DocumentSnapshot(CamelModel):
    """Point-in-time copy of a stored document."""

    id: str
    title: str
    original_filename: str
    file_path: str
    file_size: int = Field(ge=0)
    status: DocumentStatus
    client_email: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    signed_at: Optional[datetime] = None
    signature_data: Optional[Any] = None
    secure_token: Optional[str] = None
    template_id: Optional[str] = None

    @field_validator("created_at", "updated_at", "signed_at")
    @classmethod
    def _assume_utc(cls, value):
        return ensure_utc(value)


class DocumentPatch(CamelModel):
    # Unknown fields are kept so the service can reject them by name
    model_config = ConfigDict(extra="allow")

    title: Optional[str] = None
    client_email: Optional[str] = None


class GenerateLinkRequest(CamelModel):
    client_email: str


class SigningLinkResponse(CamelModel):
    signing_url: str
    document: DocumentSnapshot


class SignDocumentRequest(CamelModel):
    signature_data: Optional[Any] = None
