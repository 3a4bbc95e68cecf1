from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Mapping, Optional
from uuid import uuid4

from signdesk.core.exceptions import ConflictError
from signdesk.core.logging import get_logger
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


class MemoryDocumentStore:
    """In-process store backed by dicts.

    Writes to a document run under that document's own ``asyncio.Lock``. The
    token index is updated in the same critical section as the record it
    points to, with no await in between, so readers never see a token that
    resolves to a record that no longer holds it.
    """

    def __init__(self) -> None:
        self._documents: Dict[str, DocumentSnapshot] = {}
        self._token_index: Dict[str, str] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._templates: Dict[str, TemplateSnapshot] = {}
        self._signatures: Dict[str, SignatureSnapshot] = {}
        self._users: Dict[str, UserSnapshot] = {}
        self._users_lock = asyncio.Lock()

    def _lock_for(self, document_id: str) -> asyncio.Lock:
        lock = self._locks.get(document_id)
        if lock is None:
            lock = self._locks[document_id] = asyncio.Lock()
        return lock

    def _replace(self, current: Optional[DocumentSnapshot], updated: DocumentSnapshot) -> None:
        old_token = current.secure_token if current else None
        new_token = updated.secure_token
        if new_token and new_token != old_token:
            owner = self._token_index.get(new_token)
            if owner is not None and owner != updated.id:
                raise ConflictError("Secure token already in use")

        if old_token and old_token != new_token:
            self._token_index.pop(old_token, None)
        if new_token:
            self._token_index[new_token] = updated.id
        self._documents[updated.id] = updated

    # Documents

    async def get_document(self, document_id: str) -> Optional[DocumentSnapshot]:
        doc = self._documents.get(document_id)
        return doc.model_copy(deep=True) if doc else None

    async def get_document_by_token(self, token: str) -> Optional[DocumentSnapshot]:
        document_id = self._token_index.get(token)
        if document_id is None:
            return None
        doc = self._documents.get(document_id)
        if doc is None or doc.secure_token != token:
            return None
        return doc.model_copy(deep=True)

    async def list_documents(self) -> List[DocumentSnapshot]:
        docs = sorted(self._documents.values(), key=lambda d: d.created_at, reverse=True)
        return [d.model_copy(deep=True) for d in docs]

    async def create_document(self, fields: Mapping[str, Any]) -> DocumentSnapshot:
        now = utcnow()
        data = document_defaults(fields)
        data.update(id=str(uuid4()), created_at=now, updated_at=now)
        doc = DocumentSnapshot.model_validate(data)

        async with self._lock_for(doc.id):
            self._replace(None, doc)
        return doc.model_copy(deep=True)

    async def update_document(
        self, document_id: str, changes: Mapping[str, Any]
    ) -> Optional[DocumentSnapshot]:
        return await self.mutate_document(document_id, lambda _current: changes)

    async def mutate_document(
        self, document_id: str, mutation: DocumentMutation
    ) -> Optional[DocumentSnapshot]:
        # Only existing documents get a lock entry
        if document_id not in self._documents:
            return None
        async with self._lock_for(document_id):
            current = self._documents.get(document_id)
            if current is None:
                return None
            changes = mutation(current.model_copy(deep=True))
            updated = merge_document(current, changes)
            self._replace(current, updated)
            return updated.model_copy(deep=True)

    async def delete_document(self, document_id: str) -> bool:
        if document_id not in self._documents:
            return False
        async with self._lock_for(document_id):
            doc = self._documents.pop(document_id, None)
            if doc is not None and doc.secure_token:
                self._token_index.pop(doc.secure_token, None)
        # Waiters still hold the old lock and will find the record gone
        self._locks.pop(document_id, None)
        return doc is not None

    # Templates

    async def list_templates(self) -> List[TemplateSnapshot]:
        return [t.model_copy() for t in self._templates.values()]

    async def list_templates_by_category(self, category: str) -> List[TemplateSnapshot]:
        return [t.model_copy() for t in self._templates.values() if t.category.value == category]

    async def get_template(self, template_id: str) -> Optional[TemplateSnapshot]:
        template = self._templates.get(template_id)
        return template.model_copy() if template else None

    async def create_template(self, fields: Mapping[str, Any]) -> TemplateSnapshot:
        data = {"description": None, "thumbnail_path": None, **fields}
        data.update(id=str(uuid4()), created_at=utcnow())
        template = TemplateSnapshot.model_validate(data)
        self._templates[template.id] = template
        return template.model_copy()

    # Signatures

    async def create_signature(self, fields: Mapping[str, Any]) -> SignatureSnapshot:
        data = {"user_id": None, "signature_text": None, **fields}
        data.update(id=str(uuid4()), created_at=utcnow())
        signature = SignatureSnapshot.model_validate(data)
        self._signatures[signature.id] = signature
        return signature.model_copy()

    async def get_signature(self, signature_id: str) -> Optional[SignatureSnapshot]:
        signature = self._signatures.get(signature_id)
        return signature.model_copy() if signature else None

    async def list_signatures_by_user(self, user_id: str) -> List[SignatureSnapshot]:
        return [s.model_copy() for s in self._signatures.values() if s.user_id == user_id]

    # Users

    async def create_user(self, fields: Mapping[str, Any]) -> UserSnapshot:
        async with self._users_lock:
            username = fields.get("username")
            if any(u.username == username for u in self._users.values()):
                raise ConflictError("Username already exists")
            user = UserSnapshot.model_validate({**fields, "id": str(uuid4())})
            self._users[user.id] = user
        return user.model_copy()

    async def get_user(self, user_id: str) -> Optional[UserSnapshot]:
        user = self._users.get(user_id)
        return user.model_copy() if user else None

    async def get_user_by_username(self, username: str) -> Optional[UserSnapshot]:
        for user in self._users.values():
            if user.username == username:
                return user.model_copy()
        return None

    async def close(self) -> None:
        logger.info(f"Memory store closed with {len(self._documents)} documents")
