import uuid

from sqlalchemy import Column, String, Text

from signdesk.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    username = Column(String(255), unique=True, nullable=False, index=True)
    password = Column(Text, nullable=False)
