from typing import List

from fastapi import APIRouter, Depends

from signdesk.api.deps import get_signature_service
from signdesk.schemas.signature import SignatureCreate, SignatureSnapshot
from signdesk.services.signatures import SignatureService

router = APIRouter()


@router.post("", response_model=SignatureSnapshot)
async def create_signature(
    body: SignatureCreate,
    signatures: SignatureService = Depends(get_signature_service),
):
    return await signatures.record_signature(
        body.signature_data,
        signature_text=body.signature_text,
        user_id=body.user_id,
    )


@router.get("/user/{user_id}", response_model=List[SignatureSnapshot])
async def list_user_signatures(
    user_id: str,
    signatures: SignatureService = Depends(get_signature_service),
):
    return await signatures.list_by_user(user_id)
