from __future__ import annotations

from typing import Any, List, Mapping, Optional
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine

from signdesk.core.exceptions import ConflictError
from signdesk.core.logging import get_logger
from signdesk.db.base import Base
from signdesk.db.session import build_sessionmaker
from signdesk.models.document import Document
from signdesk.models.signature import Signature
from signdesk.models.template import Template
from signdesk.models.user import User
from signdesk.schemas.document import DocumentSnapshot
from signdesk.schemas.signature import SignatureSnapshot
from signdesk.schemas.template import TemplateSnapshot
from signdesk.schemas.user import UserSnapshot
from signdesk.services.storage.base import (
    DocumentMutation,
    document_defaults,
    merge_document,
    utcnow,
)

logger = get_logger(__name__)

_DOCUMENT_COLUMNS = (
    "title",
    "original_filename",
    "file_path",
    "file_size",
    "status",
    "client_email",
    "created_at",
    "updated_at",
    "signed_at",
    "signature_data",
    "secure_token",
    "template_id",
)


def _row_values(doc: DocumentSnapshot) -> dict:
    values = {name: getattr(doc, name) for name in _DOCUMENT_COLUMNS}
    values["status"] = doc.status.value
    return values


class SqlDocumentStore:
    """SQLAlchemy-backed store.

    The unique index on ``documents.secure_token`` is the token lookup table,
    so issuing a new token and retiring the old one happen in the same row
    update. Read-check-write cycles lock the row with ``SELECT ... FOR UPDATE``.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine
        self._session_factory = build_sessionmaker(engine)

    async def create_tables(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables ensured")

    async def close(self) -> None:
        await self.engine.dispose()

    # Documents

    async def get_document(self, document_id: str) -> Optional[DocumentSnapshot]:
        async with self._session_factory() as db:
            row = await db.get(Document, document_id)
            return DocumentSnapshot.model_validate(row) if row else None

    async def get_document_by_token(self, token: str) -> Optional[DocumentSnapshot]:
        async with self._session_factory() as db:
            stmt = select(Document).where(Document.secure_token == token)
            row = (await db.execute(stmt)).scalar_one_or_none()
            return DocumentSnapshot.model_validate(row) if row else None

    async def list_documents(self) -> List[DocumentSnapshot]:
        async with self._session_factory() as db:
            stmt = select(Document).order_by(Document.created_at.desc())
            rows = (await db.execute(stmt)).scalars().all()
            return [DocumentSnapshot.model_validate(row) for row in rows]

    async def create_document(self, fields: Mapping[str, Any]) -> DocumentSnapshot:
        now = utcnow()
        data = document_defaults(fields)
        data.update(id=str(uuid4()), created_at=now, updated_at=now)
        # Validate through the snapshot so both backends accept the same input
        doc = DocumentSnapshot.model_validate(data)

        async with self._session_factory() as db:
            db.add(Document(id=doc.id, **_row_values(doc)))
            try:
                await db.commit()
            except IntegrityError as exc:
                await db.rollback()
                raise ConflictError("Secure token already in use") from exc
        return doc

    async def update_document(
        self, document_id: str, changes: Mapping[str, Any]
    ) -> Optional[DocumentSnapshot]:
        return await self.mutate_document(document_id, lambda _current: changes)

    async def mutate_document(
        self, document_id: str, mutation: DocumentMutation
    ) -> Optional[DocumentSnapshot]:
        async with self._session_factory() as db:
            try:
                async with db.begin():
                    stmt = select(Document).where(Document.id == document_id).with_for_update()
                    row = (await db.execute(stmt)).scalar_one_or_none()
                    if row is None:
                        return None
                    current = DocumentSnapshot.model_validate(row)
                    updated = merge_document(current, mutation(current))
                    for name, value in _row_values(updated).items():
                        setattr(row, name, value)
            except IntegrityError as exc:
                raise ConflictError("Secure token already in use") from exc
        return updated

    async def delete_document(self, document_id: str) -> bool:
        async with self._session_factory() as db:
            async with db.begin():
                row = await db.get(Document, document_id, with_for_update=True)
                if row is None:
                    return False
                await db.delete(row)
        return True

    # Templates

    async def list_templates(self) -> List[TemplateSnapshot]:
        async with self._session_factory() as db:
            stmt = select(Template).order_by(Template.created_at)
            rows = (await db.execute(stmt)).scalars().all()
            return [TemplateSnapshot.model_validate(row) for row in rows]

    async def list_templates_by_category(self, category: str) -> List[TemplateSnapshot]:
        async with self._session_factory() as db:
            stmt = (
                select(Template)
                .where(Template.category == category)
                .order_by(Template.created_at)
            )
            rows = (await db.execute(stmt)).scalars().all()
            return [TemplateSnapshot.model_validate(row) for row in rows]

    async def get_template(self, template_id: str) -> Optional[TemplateSnapshot]:
        async with self._session_factory() as db:
            row = await db.get(Template, template_id)
            return TemplateSnapshot.model_validate(row) if row else None

    async def create_template(self, fields: Mapping[str, Any]) -> TemplateSnapshot:
        data = {"description": None, "thumbnail_path": None, **fields}
        data.update(id=str(uuid4()), created_at=utcnow())
        template = TemplateSnapshot.model_validate(data)

        async with self._session_factory() as db:
            db.add(
                Template(
                    id=template.id,
                    title=template.title,
                    description=template.description,
                    category=template.category.value,
                    file_path=template.file_path,
                    thumbnail_path=template.thumbnail_path,
                    created_at=template.created_at,
                )
            )
            await db.commit()
        return template

    # Signatures

    async def create_signature(self, fields: Mapping[str, Any]) -> SignatureSnapshot:
        data = {"user_id": None, "signature_text": None, **fields}
        data.update(id=str(uuid4()), created_at=utcnow())
        signature = SignatureSnapshot.model_validate(data)

        async with self._session_factory() as db:
            db.add(Signature(**signature.model_dump()))
            await db.commit()
        return signature

    async def get_signature(self, signature_id: str) -> Optional[SignatureSnapshot]:
        async with self._session_factory() as db:
            row = await db.get(Signature, signature_id)
            return SignatureSnapshot.model_validate(row) if row else None

    async def list_signatures_by_user(self, user_id: str) -> List[SignatureSnapshot]:
        async with self._session_factory() as db:
            stmt = (
                select(Signature)
                .where(Signature.user_id == user_id)
                .order_by(Signature.created_at)
            )
            rows = (await db.execute(stmt)).scalars().all()
            return [SignatureSnapshot.model_validate(row) for row in rows]

    # Users

    async def create_user(self, fields: Mapping[str, Any]) -> UserSnapshot:
        user = UserSnapshot.model_validate({**fields, "id": str(uuid4())})
        async with self._session_factory() as db:
            db.add(User(**user.model_dump()))
            try:
                await db.commit()
            except IntegrityError as exc:
                await db.rollback()
                raise ConflictError("Username already exists") from exc
        return user

    async def get_user(self, user_id: str) -> Optional[UserSnapshot]:
        async with self._session_factory() as db:
            row = await db.get(User, user_id)
            return UserSnapshot.model_validate(row) if row else None

    async def get_user_by_username(self, username: str) -> Optional[UserSnapshot]:
        async with self._session_factory() as db:
            stmt = select(User).where(User.username == username)
            row = (await db.execute(stmt)).scalar_one_or_none()
            return UserSnapshot.model_validate(row) if row else None
