from __future__ import annotations

import asyncio

import pytest

from signdesk.core.exceptions import (
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
    TemplateNotFoundError,
    TokenNotFoundError,
)
from signdesk.models.document import DocumentStatus
from signdesk.services.lifecycle import DocumentLifecycleService

SIGNATURE = {"imageData": "data:image/png;base64,iVBORw0KGgo=", "position": {"x": 10, "y": 20, "page": 1}}


def _assert_signed_pairing(doc) -> None:
    assert (doc.status == DocumentStatus.SIGNED) == (doc.signed_at is not None)


@pytest.mark.asyncio
async def test_upload_creates_draft_and_falls_back_to_filename(make_document) -> None:
    doc = await make_document("lease.pdf", title="   ", client_email="client@example.com")

    assert doc.title == "lease.pdf"
    assert doc.original_filename == "lease.pdf"
    assert doc.status == DocumentStatus.DRAFT
    assert doc.secure_token is None
    assert doc.signature_data is None
    assert doc.signed_at is None
    assert doc.client_email == "client@example.com"
    assert doc.created_at == doc.updated_at


@pytest.mark.asyncio
async def test_upload_keeps_explicit_title(make_document) -> None:
    doc = await make_document("lease.pdf", title="Office Lease 2026")
    assert doc.title == "Office Lease 2026"


@pytest.mark.asyncio
async def test_upload_rejects_negative_size(make_document) -> None:
    with pytest.raises(InvalidInputError):
        await make_document(file_size=-1)


@pytest.mark.asyncio
async def test_generate_link_moves_draft_to_pending(lifecycle: DocumentLifecycleService, make_document) -> None:
    doc = await make_document(client_email="old@example.com")

    link = await lifecycle.generate_signing_link(doc.id, "new@example.com")

    assert link.document.status == DocumentStatus.PENDING
    assert link.document.client_email == "new@example.com"
    assert link.document.secure_token
    assert link.signing_url == f"https://sign.example.com/sign/{link.document.secure_token}"
    assert link.document.updated_at >= doc.updated_at


@pytest.mark.asyncio
async def test_generate_link_for_missing_document(lifecycle: DocumentLifecycleService) -> None:
    with pytest.raises(NotFoundError):
        await lifecycle.generate_signing_link("does-not-exist", "client@example.com")


@pytest.mark.asyncio
async def test_repeated_misses_leave_no_lock_behind(lifecycle: DocumentLifecycleService, store) -> None:
    for i in range(1000):
        with pytest.raises(NotFoundError):
            await lifecycle.generate_signing_link(f"missing-{i}", "client@example.com")

    assert len(store._locks) == 0


@pytest.mark.asyncio
async def test_generate_link_requires_email(lifecycle: DocumentLifecycleService, make_document) -> None:
    doc = await make_document()
    with pytest.raises(InvalidInputError):
        await lifecycle.generate_signing_link(doc.id, " ")

    unchanged = await lifecycle.get_document(doc.id)
    assert unchanged.status == DocumentStatus.DRAFT


@pytest.mark.asyncio
async def test_regenerating_link_invalidates_previous_token(
    lifecycle: DocumentLifecycleService, make_document
) -> None:
    doc = await make_document()
    first = await lifecycle.generate_signing_link(doc.id, "client@example.com")
    second = await lifecycle.generate_signing_link(doc.id, "client@example.com")

    assert first.document.secure_token != second.document.secure_token
    with pytest.raises(TokenNotFoundError):
        await lifecycle.resolve_token(first.document.secure_token)
    resolved = await lifecycle.resolve_token(second.document.secure_token)
    assert resolved.id == doc.id


@pytest.mark.asyncio
async def test_sign_round_trip_preserves_signature(lifecycle: DocumentLifecycleService, make_document) -> None:
    doc = await make_document()
    link = await lifecycle.generate_signing_link(doc.id, "client@example.com")

    for_signing = await lifecycle.resolve_token(link.document.secure_token)
    assert for_signing.status == DocumentStatus.PENDING

    signed = await lifecycle.sign_document(link.document.secure_token, SIGNATURE)
    fetched = await lifecycle.get_document(doc.id)

    assert signed.status == DocumentStatus.SIGNED
    assert fetched.signature_data == SIGNATURE
    assert fetched.signed_at is not None
    _assert_signed_pairing(fetched)


@pytest.mark.asyncio
async def test_second_signature_is_rejected(lifecycle: DocumentLifecycleService, make_document) -> None:
    doc = await make_document()
    link = await lifecycle.generate_signing_link(doc.id, "client@example.com")
    token = link.document.secure_token
    first = await lifecycle.sign_document(token, SIGNATURE)

    with pytest.raises(InvalidStateError):
        await lifecycle.sign_document(token, "data:image/png;base64,other")

    after = await lifecycle.get_document(doc.id)
    assert after.signature_data == SIGNATURE
    assert after.signed_at == first.signed_at


@pytest.mark.asyncio
async def test_sign_with_rotated_token_fails(lifecycle: DocumentLifecycleService, make_document) -> None:
    doc = await make_document()
    stale = await lifecycle.generate_signing_link(doc.id, "client@example.com")
    await lifecycle.generate_signing_link(doc.id, "client@example.com")

    with pytest.raises(TokenNotFoundError):
        await lifecycle.sign_document(stale.document.secure_token, SIGNATURE)

    assert (await lifecycle.get_document(doc.id)).status == DocumentStatus.PENDING


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [None, "", "   ", {}, [], 0, False, 3.5])
async def test_sign_requires_signature_payload(
    lifecycle: DocumentLifecycleService, make_document, payload
) -> None:
    doc = await make_document()
    link = await lifecycle.generate_signing_link(doc.id, "client@example.com")

    with pytest.raises(InvalidInputError):
        await lifecycle.sign_document(link.document.secure_token, payload)


@pytest.mark.asyncio
async def test_signed_document_cannot_get_new_link(lifecycle: DocumentLifecycleService, make_document) -> None:
    doc = await make_document()
    link = await lifecycle.generate_signing_link(doc.id, "client@example.com")
    await lifecycle.sign_document(link.document.secure_token, SIGNATURE)

    with pytest.raises(InvalidStateError):
        await lifecycle.generate_signing_link(doc.id, "someone@example.com")

    after = await lifecycle.get_document(doc.id)
    assert after.status == DocumentStatus.SIGNED
    assert after.secure_token == link.document.secure_token


@pytest.mark.asyncio
async def test_unknown_token_does_not_resolve(lifecycle: DocumentLifecycleService) -> None:
    with pytest.raises(TokenNotFoundError):
        await lifecycle.resolve_token("nope")
    with pytest.raises(TokenNotFoundError):
        await lifecycle.sign_document("nope", SIGNATURE)


@pytest.mark.asyncio
async def test_patch_accepts_only_descriptive_fields(lifecycle: DocumentLifecycleService, make_document) -> None:
    doc = await make_document()

    patched = await lifecycle.patch_document(doc.id, {"title": "Renamed", "client_email": "c@example.com"})
    assert patched.title == "Renamed"
    assert patched.client_email == "c@example.com"
    assert patched.updated_at >= doc.updated_at

    with pytest.raises(InvalidInputError):
        await lifecycle.patch_document(doc.id, {"status": "signed"})
    with pytest.raises(InvalidInputError):
        await lifecycle.patch_document(doc.id, {"title": ""})
    assert (await lifecycle.get_document(doc.id)).status == DocumentStatus.DRAFT


@pytest.mark.asyncio
async def test_patch_missing_document(lifecycle: DocumentLifecycleService) -> None:
    with pytest.raises(NotFoundError):
        await lifecycle.patch_document("missing", {"title": "x"})


@pytest.mark.asyncio
async def test_internal_update_guards_signed_pairing(lifecycle: DocumentLifecycleService, make_document) -> None:
    doc = await make_document()

    with pytest.raises(InvalidStateError):
        await lifecycle.update_document(doc.id, {"status": DocumentStatus.SIGNED})

    updated = await lifecycle.update_document(doc.id, {"file_size": 4096})
    assert updated.file_size == 4096
    _assert_signed_pairing(updated)


@pytest.mark.asyncio
async def test_internal_update_cannot_leave_signed(lifecycle: DocumentLifecycleService, make_document) -> None:
    doc = await make_document()
    link = await lifecycle.generate_signing_link(doc.id, "client@example.com")
    signed = await lifecycle.sign_document(link.document.secure_token, SIGNATURE)

    with pytest.raises(InvalidStateError):
        await lifecycle.update_document(signed.id, {"status": DocumentStatus.DRAFT, "signed_at": None})
    with pytest.raises(InvalidStateError):
        await lifecycle.update_document(signed.id, {"status": "pending", "signed_at": None})

    current = await lifecycle.get_document(signed.id)
    assert current.status == DocumentStatus.SIGNED
    assert current.signed_at == signed.signed_at


@pytest.mark.asyncio
async def test_internal_update_rejects_invalid_values(lifecycle: DocumentLifecycleService, make_document) -> None:
    doc = await make_document()
    with pytest.raises(InvalidInputError):
        await lifecycle.update_document(doc.id, {"status": "archived"})


@pytest.mark.asyncio
async def test_returned_snapshots_are_copies(lifecycle: DocumentLifecycleService, make_document) -> None:
    doc = await make_document(title="Original")
    doc.title = "Mutated by caller"

    assert (await lifecycle.get_document(doc.id)).title == "Original"


@pytest.mark.asyncio
async def test_delete_document_drops_token(lifecycle: DocumentLifecycleService, make_document) -> None:
    doc = await make_document()
    link = await lifecycle.generate_signing_link(doc.id, "client@example.com")

    await lifecycle.delete_document(doc.id)

    with pytest.raises(NotFoundError):
        await lifecycle.get_document(doc.id)
    with pytest.raises(TokenNotFoundError):
        await lifecycle.resolve_token(link.document.secure_token)
    with pytest.raises(NotFoundError):
        await lifecycle.delete_document(doc.id)


@pytest.mark.asyncio
async def test_create_from_template_copies_template(lifecycle: DocumentLifecycleService, store) -> None:
    template = await store.create_template(
        {"title": "NDA", "category": "ndas", "file_path": "/templates/nda.pdf"}
    )

    doc = await lifecycle.create_from_template(template.id)

    assert doc.title == "NDA"
    assert doc.original_filename == "NDA.pdf"
    assert doc.file_path == "/templates/nda.pdf"
    assert doc.file_size == 0
    assert doc.template_id == template.id
    assert doc.status == DocumentStatus.DRAFT


@pytest.mark.asyncio
async def test_create_from_missing_template(lifecycle: DocumentLifecycleService) -> None:
    with pytest.raises(TemplateNotFoundError):
        await lifecycle.create_from_template("missing")


@pytest.mark.asyncio
async def test_concurrent_links_on_different_documents_are_independent(
    lifecycle: DocumentLifecycleService, make_document
) -> None:
    docs = [await make_document(f"doc-{i}.pdf") for i in range(5)]

    links = await asyncio.gather(
        *(lifecycle.generate_signing_link(d.id, f"client{i}@example.com") for i, d in enumerate(docs))
    )

    tokens = {link.document.secure_token for link in links}
    assert len(tokens) == len(docs)
    for i, (doc, link) in enumerate(zip(docs, links)):
        resolved = await lifecycle.resolve_token(link.document.secure_token)
        assert resolved.id == doc.id
        assert resolved.client_email == f"client{i}@example.com"
        assert resolved.status == DocumentStatus.PENDING


@pytest.mark.asyncio
async def test_concurrent_sign_and_regenerate_stay_consistent(
    lifecycle: DocumentLifecycleService, make_document
) -> None:
    doc = await make_document()
    link = await lifecycle.generate_signing_link(doc.id, "client@example.com")

    sign_result, regen_result = await asyncio.gather(
        lifecycle.sign_document(link.document.secure_token, SIGNATURE),
        lifecycle.generate_signing_link(doc.id, "client@example.com"),
        return_exceptions=True,
    )

    final = await lifecycle.get_document(doc.id)
    _assert_signed_pairing(final)
    if isinstance(sign_result, Exception):
        # Link rotated first: the old token lost the race
        assert isinstance(sign_result, TokenNotFoundError)
        assert final.status == DocumentStatus.PENDING
        assert final.secure_token == regen_result.document.secure_token
    else:
        assert isinstance(regen_result, InvalidStateError)
        assert final.status == DocumentStatus.SIGNED
        assert final.signature_data == SIGNATURE


@pytest.mark.asyncio
async def test_signed_pairing_holds_across_collection(lifecycle: DocumentLifecycleService, make_document) -> None:
    drafts = [await make_document(f"d{i}.pdf") for i in range(3)]
    pending = await lifecycle.generate_signing_link(drafts[1].id, "a@example.com")
    signed = await lifecycle.generate_signing_link(drafts[2].id, "b@example.com")
    await lifecycle.sign_document(signed.document.secure_token, "data:image/png;base64,AAA")

    for doc in await lifecycle.list_documents():
        _assert_signed_pairing(doc)
    assert pending.document.signed_at is None
