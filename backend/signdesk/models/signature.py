from datetime import datetime, timezone
import uuid

from sqlalchemy import Column, DateTime, String, Text

from signdesk.db.base import Base


class Signature(Base):
    __tablename__ = "signatures"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), nullable=True, index=True)
    signature_data = Column(Text, nullable=False)  # Base64 encoded signature image
    signature_text = Column(Text, nullable=True)  # Typed signature
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)
