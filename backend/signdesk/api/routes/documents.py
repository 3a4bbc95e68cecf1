from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile

from signdesk.api.deps import get_lifecycle, get_upload_storage
from signdesk.core.exceptions import InvalidInputError
from signdesk.schemas.document import (
    DocumentPatch,
    DocumentSnapshot,
    GenerateLinkRequest,
    SignDocumentRequest,
    SigningLinkResponse,
)
from signdesk.services.lifecycle import DocumentLifecycleService
from signdesk.services.uploads import UploadStorage

router = APIRouter()


@router.get("", response_model=List[DocumentSnapshot])
async def list_documents(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=500),
    lifecycle: DocumentLifecycleService = Depends(get_lifecycle),
):
    """List documents, newest first."""
    documents = await lifecycle.list_documents()
    return documents[skip : skip + limit]


@router.post("/upload", response_model=DocumentSnapshot)
async def upload_document(
    pdf: Optional[UploadFile] = File(None),
    title: Optional[str] = Form(None),
    clientEmail: Optional[str] = Form(None),
    lifecycle: DocumentLifecycleService = Depends(get_lifecycle),
    uploads: UploadStorage = Depends(get_upload_storage),
):
    """Store an uploaded PDF and create a draft document for it."""
    if pdf is None:
        raise InvalidInputError("No file uploaded")

    stored = await uploads.save(pdf)
    return await lifecycle.create_from_upload(
        original_filename=stored.original_filename,
        file_path=stored.file_path,
        file_size=stored.file_size,
        title=title,
        client_email=clientEmail,
    )


@router.get("/sign/{token}", response_model=DocumentSnapshot)
async def get_document_for_signing(
    token: str,
    lifecycle: DocumentLifecycleService = Depends(get_lifecycle),
):
    """Resolve a signing link."""
    return await lifecycle.resolve_token(token)


@router.post("/sign/{token}", response_model=DocumentSnapshot)
async def sign_document(
    token: str,
    body: SignDocumentRequest,
    lifecycle: DocumentLifecycleService = Depends(get_lifecycle),
):
    """Attach the client's signature through a signing link."""
    return await lifecycle.sign_document(token, body.signature_data)


@router.get("/{document_id}", response_model=DocumentSnapshot)
async def get_document(
    document_id: str,
    lifecycle: DocumentLifecycleService = Depends(get_lifecycle),
):
    return await lifecycle.get_document(document_id)


@router.patch("/{document_id}", response_model=DocumentSnapshot)
async def patch_document(
    document_id: str,
    body: DocumentPatch,
    lifecycle: DocumentLifecycleService = Depends(get_lifecycle),
):
    """Update descriptive fields (title, client email)."""
    patch = body.model_dump(exclude_unset=True)
    return await lifecycle.patch_document(document_id, patch)


@router.delete("/{document_id}", status_code=204)
async def delete_document(
    document_id: str,
    lifecycle: DocumentLifecycleService = Depends(get_lifecycle),
):
    await lifecycle.delete_document(document_id)
    return Response(status_code=204)


@router.post("/{document_id}/generate-link", response_model=SigningLinkResponse)
async def generate_link(
    document_id: str,
    body: GenerateLinkRequest,
    lifecycle: DocumentLifecycleService = Depends(get_lifecycle),
):
    """Issue a signing link; any earlier link for the document stops working."""
    link = await lifecycle.generate_signing_link(document_id, body.client_email)
    return SigningLinkResponse(signing_url=link.signing_url, document=link.document)
