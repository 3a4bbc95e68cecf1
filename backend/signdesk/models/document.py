from datetime import datetime, timezone
import enum
import uuid

from sqlalchemy import Column, DateTime, Integer, JSON, String, Text

from signdesk.db.base import Base


class DocumentStatus(str, enum.Enum):
    """Lifecycle states for documents sent out for signature."""
    DRAFT = "draft"
    PENDING = "pending"
    SIGNED = "signed"


class Document(Base):
    """A PDF moving through draft -> pending -> signed."""
    __tablename__ = "documents"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(Text, nullable=False)
    original_filename = Column(Text, nullable=False)
    file_path = Column(Text, nullable=False)
    file_size = Column(Integer, nullable=False, default=0)
    status = Column(String(16), nullable=False, default=DocumentStatus.DRAFT.value, index=True)
    client_email = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)
    signed_at = Column(DateTime(timezone=True), nullable=True)
    signature_data = Column(JSON, nullable=True)

    # Bearer credential for the client signing link; the unique index doubles
    # as the token -> document lookup table.
    secure_token = Column(String(64), nullable=True, unique=True, index=True)
    template_id = Column(String(36), nullable=True)
