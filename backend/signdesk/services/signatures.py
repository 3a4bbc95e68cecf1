from typing import List, Optional

from signdesk.core.exceptions import InvalidInputError, NotFoundError
from signdesk.core.logging import get_logger
from signdesk.schemas.signature import SignatureSnapshot
from signdesk.services.storage.base import DocumentStore

logger = get_logger(__name__)


class SignatureService:
    """Standalone signature records, kept apart from the signature embedded in a document."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    async def record_signature(
        self,
        signature_data: str,
        signature_text: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> SignatureSnapshot:
        if not signature_data or not signature_data.strip():
            raise InvalidInputError("Invalid signature data")
        signature = await self.store.create_signature(
            {
                "signature_data": signature_data,
                "signature_text": signature_text or None,
                "user_id": user_id or None,
            }
        )
        logger.info(f"Signature {signature.id} recorded")
        return signature

    async def get_signature(self, signature_id: str) -> SignatureSnapshot:
        signature = await self.store.get_signature(signature_id)
        if signature is None:
            raise NotFoundError("Signature not found")
        return signature

    async def list_by_user(self, user_id: str) -> List[SignatureSnapshot]:
        return await self.store.list_signatures_by_user(user_id)
