from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional
from uuid import uuid4

from pydantic import ValidationError

from signdesk.core.exceptions import (
    DocumentNotFoundError,
    InvalidInputError,
    InvalidStateError,
    TemplateNotFoundError,
    TokenNotFoundError,
)
from signdesk.core.logging import get_logger
from signdesk.models.document import DocumentStatus
from signdesk.schemas.document import DocumentSnapshot
from signdesk.services.storage.base import DocumentStore, utcnow

logger = get_logger(__name__)

# Fields an external caller may change directly; everything else goes through
# the guarded transitions below.
PATCHABLE_FIELDS = frozenset({"title", "client_email"})


@dataclass(frozen=True)
class SigningLink:
    signing_url: str
    document: DocumentSnapshot


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def _is_empty_payload(value: Any) -> bool:
    """True unless ``value`` is a non-empty string, mapping or list."""
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (dict, list, tuple)):
        return len(value) == 0
    return True


def _check_status_pairing(doc: DocumentSnapshot) -> None:
    if (doc.status == DocumentStatus.SIGNED) != (doc.signed_at is not None):
        raise InvalidStateError("signed_at must be set exactly when the document is signed")


class DocumentLifecycleService:
    """Owns the document state machine and the signing-link protocol.

    ``draft --generate link--> pending --sign--> signed``. Generating a new
    link on a pending document rotates its token. ``signed`` is terminal.

    The service keeps no entity state; every read and write goes through the
    injected store and callers only ever receive snapshots.
    """

    def __init__(self, store: DocumentStore, base_url: str, signing_path: str = "/sign") -> None:
        self.store = store
        self.base_url = base_url.rstrip("/")
        self.signing_path = "/" + signing_path.strip("/")

    def build_signing_url(self, token: str) -> str:
        return f"{self.base_url}{self.signing_path}/{token}"

    # Creation

    async def create_from_upload(
        self,
        *,
        original_filename: str,
        file_path: str,
        file_size: int,
        title: Optional[str] = None,
        client_email: Optional[str] = None,
    ) -> DocumentSnapshot:
        if _is_blank(original_filename):
            raise InvalidInputError("Original filename is required")
        if _is_blank(file_path):
            raise InvalidInputError("File path is required")
        if file_size is None or file_size < 0:
            raise InvalidInputError("File size must be a non-negative integer")

        doc = await self.store.create_document(
            {
                "title": original_filename if _is_blank(title) else title.strip(),
                "original_filename": original_filename,
                "file_path": file_path,
                "file_size": file_size,
                "status": DocumentStatus.DRAFT,
                "client_email": None if _is_blank(client_email) else client_email.strip(),
            }
        )
        logger.info(f"Document {doc.id} created from upload ({doc.file_size} bytes)")
        return doc

    async def create_from_template(
        self,
        template_id: str,
        *,
        title: Optional[str] = None,
        client_email: Optional[str] = None,
    ) -> DocumentSnapshot:
        template = await self.store.get_template(template_id)
        if template is None:
            raise TemplateNotFoundError()

        doc = await self.store.create_document(
            {
                "title": template.title if _is_blank(title) else title.strip(),
                "original_filename": f"{template.title}.pdf",
                "file_path": template.file_path,
                # Template content is not materialized into the document yet
                "file_size": 0,
                "status": DocumentStatus.DRAFT,
                "client_email": None if _is_blank(client_email) else client_email.strip(),
                "template_id": template.id,
            }
        )
        logger.info(f"Document {doc.id} created from template {template.id}")
        return doc

    # Reads

    async def get_document(self, document_id: str) -> DocumentSnapshot:
        doc = await self.store.get_document(document_id)
        if doc is None:
            raise DocumentNotFoundError()
        return doc

    async def list_documents(self) -> List[DocumentSnapshot]:
        return await self.store.list_documents()

    async def resolve_token(self, token: str) -> DocumentSnapshot:
        """Return the document currently holding ``token``."""
        if _is_blank(token):
            raise TokenNotFoundError()
        doc = await self.store.get_document_by_token(token)
        if doc is None:
            raise TokenNotFoundError()
        return doc

    # Transitions

    async def generate_signing_link(self, document_id: str, client_email: str) -> SigningLink:
        """Issue a fresh signing token, replacing any earlier one."""
        if _is_blank(client_email):
            raise InvalidInputError("Client email is required")

        token = str(uuid4())

        def issue(current: DocumentSnapshot) -> Dict[str, Any]:
            if current.status == DocumentStatus.SIGNED:
                logger.warning(f"Refused signing link for already signed document {current.id}")
                raise InvalidStateError("Document is already signed")
            return {
                "secure_token": token,
                "client_email": client_email.strip(),
                "status": DocumentStatus.PENDING,
            }

        doc = await self.store.mutate_document(document_id, issue)
        if doc is None:
            raise DocumentNotFoundError()

        logger.info(f"Signing link issued for document {doc.id}; status={doc.status.value}")
        return SigningLink(signing_url=self.build_signing_url(token), document=doc)

    async def sign_document(self, token: str, signature_data: Any) -> DocumentSnapshot:
        if _is_empty_payload(signature_data):
            raise InvalidInputError("Signature data is required")

        target = await self.resolve_token(token)

        def sign(current: DocumentSnapshot) -> Dict[str, Any]:
            # The link may have been rotated between lookup and lock
            if current.secure_token != token:
                raise TokenNotFoundError()
            if current.status == DocumentStatus.SIGNED:
                logger.warning(f"Refused second signature for document {current.id}")
                raise InvalidStateError("Document is already signed")
            return {
                "signature_data": signature_data,
                "status": DocumentStatus.SIGNED,
                "signed_at": utcnow(),
            }

        doc = await self.store.mutate_document(target.id, sign)
        if doc is None:
            raise TokenNotFoundError()

        logger.info(f"Document {doc.id} signed")
        return doc

    # Patching

    async def update_document(self, document_id: str, changes: Mapping[str, Any]) -> DocumentSnapshot:
        """Trusted patch used inside the service layer.

        Merges ``changes`` as given, but still refuses results that break the
        status/``signed_at`` pairing or take a document out of ``signed``.
        """

        def apply(current: DocumentSnapshot) -> Mapping[str, Any]:
            candidate = current.model_copy(update=dict(changes))
            try:
                candidate = DocumentSnapshot.model_validate(candidate.model_dump())
            except ValidationError as exc:
                raise InvalidInputError(f"Invalid document fields: {exc.error_count()} error(s)") from exc
            if current.status == DocumentStatus.SIGNED and candidate.status != DocumentStatus.SIGNED:
                logger.warning(f"Refused to move signed document {current.id} to {candidate.status.value}")
                raise InvalidStateError("Signed documents cannot change status")
            _check_status_pairing(candidate)
            return changes

        doc = await self.store.mutate_document(document_id, apply)
        if doc is None:
            raise DocumentNotFoundError()
        return doc

    async def patch_document(self, document_id: str, patch: Mapping[str, Any]) -> DocumentSnapshot:
        """External patch: only descriptive fields may change."""
        rejected = sorted(set(patch) - PATCHABLE_FIELDS)
        if rejected:
            raise InvalidInputError(f"Fields cannot be updated directly: {', '.join(rejected)}")

        changes: Dict[str, Any] = {}
        if "title" in patch:
            if _is_blank(patch["title"]):
                raise InvalidInputError("Title cannot be blank")
            changes["title"] = patch["title"].strip()
        if "client_email" in patch:
            email = patch["client_email"]
            changes["client_email"] = None if _is_blank(email) else email.strip()

        return await self.update_document(document_id, changes)

    async def delete_document(self, document_id: str) -> None:
        if not await self.store.delete_document(document_id):
            raise DocumentNotFoundError()
        logger.info(f"Document {document_id} deleted")
