from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol

from signdesk.schemas.document import DocumentSnapshot
from signdesk.schemas.signature import SignatureSnapshot
from signdesk.schemas.template import TemplateSnapshot
from signdesk.schemas.user import UserSnapshot

# Receives the current record, returns the changes to apply or raises to abort.
DocumentMutation = Callable[[DocumentSnapshot], Mapping[str, Any]]

IMMUTABLE_DOCUMENT_FIELDS = frozenset({"id", "created_at", "updated_at"})


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def merge_document(current: DocumentSnapshot, changes: Mapping[str, Any]) -> DocumentSnapshot:
    """Build the replacement record for ``current`` with ``changes`` applied.

    Identity and creation time are preserved and ``updated_at`` is bumped,
    never moving backwards even if the wall clock does.
    """
    data = current.model_dump()
    data.update({k: v for k, v in changes.items() if k not in IMMUTABLE_DOCUMENT_FIELDS})
    data["updated_at"] = max(utcnow(), current.updated_at)
    return DocumentSnapshot.model_validate(data)


class DocumentStore(Protocol):
    """Persistence contract used by the service layer.

    Every method returns snapshots. Lookups for missing ids return ``None``;
    writes replace whole records.
    """

    # Documents
    async def get_document(self, document_id: str) -> Optional[DocumentSnapshot]:
        ...

    async def get_document_by_token(self, token: str) -> Optional[DocumentSnapshot]:
        ...

    async def list_documents(self) -> List[DocumentSnapshot]:
        ...

    async def create_document(self, fields: Mapping[str, Any]) -> DocumentSnapshot:
        ...

    async def update_document(
        self, document_id: str, changes: Mapping[str, Any]
    ) -> Optional[DocumentSnapshot]:
        ...

    async def mutate_document(
        self, document_id: str, mutation: DocumentMutation
    ) -> Optional[DocumentSnapshot]:
        ...

    async def delete_document(self, document_id: str) -> bool:
        ...

    # Templates
    async def list_templates(self) -> List[TemplateSnapshot]:
        ...

    async def list_templates_by_category(self, category: str) -> List[TemplateSnapshot]:
        ...

    async def get_template(self, template_id: str) -> Optional[TemplateSnapshot]:
        ...

    async def create_template(self, fields: Mapping[str, Any]) -> TemplateSnapshot:
        ...

    # Signatures
    async def create_signature(self, fields: Mapping[str, Any]) -> SignatureSnapshot:
        ...

    async def get_signature(self, signature_id: str) -> Optional[SignatureSnapshot]:
        ...

    async def list_signatures_by_user(self, user_id: str) -> List[SignatureSnapshot]:
        ...

    # Users
    async def create_user(self, fields: Mapping[str, Any]) -> UserSnapshot:
        ...

    async def get_user(self, user_id: str) -> Optional[UserSnapshot]:
        ...

    async def get_user_by_username(self, username: str) -> Optional[UserSnapshot]:
        ...

    async def close(self) -> None:
        ...


def document_defaults(fields: Mapping[str, Any]) -> Dict[str, Any]:
    """Fill the columns every new document starts with."""
    data: Dict[str, Any] = {
        "status": "draft",
        "client_email": None,
        "signed_at": None,
        "signature_data": None,
        "secure_token": None,
        "template_id": None,
    }
    data.update(fields)
    return data
