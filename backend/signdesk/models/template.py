from datetime import datetime, timezone
import enum
import uuid

from sqlalchemy import Column, DateTime, String, Text

from signdesk.db.base import Base


class TemplateCategory(str, enum.Enum):
    CONTRACTS = "contracts"
    INVOICES = "invoices"
    PROPOSALS = "proposals"
    NDAS = "ndas"
    RECEIPTS = "receipts"
    OTHER = "other"


class Template(Base):
    """Read-only reference document that new drafts can be created from."""
    __tablename__ = "templates"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(32), nullable=False, index=True)
    file_path = Column(Text, nullable=False)
    thumbnail_path = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)
