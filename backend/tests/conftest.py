from __future__ import annotations

import pytest
import pytest_asyncio

from signdesk.core.config import Settings
from signdesk.services.lifecycle import DocumentLifecycleService
from signdesk.services.storage.memory import MemoryDocumentStore
from signdesk.services.templates import seed_default_templates

BASE_URL = "https://sign.example.com"


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        PUBLIC_BASE_URL=BASE_URL,
        STORAGE_BACKEND="memory",
        UPLOAD_DIR=str(tmp_path / "uploads"),
        LOG_FILE=None,
    )


@pytest.fixture
def store() -> MemoryDocumentStore:
    return MemoryDocumentStore()


@pytest_asyncio.fixture
async def seeded_store(store: MemoryDocumentStore) -> MemoryDocumentStore:
    await seed_default_templates(store)
    return store


@pytest.fixture
def lifecycle(store: MemoryDocumentStore) -> DocumentLifecycleService:
    return DocumentLifecycleService(store, base_url=BASE_URL)


@pytest.fixture
def make_document(lifecycle: DocumentLifecycleService):
    """Factory creating draft documents as if uploaded."""

    async def _make(name: str = "contract.pdf", **kwargs):
        params = {
            "original_filename": name,
            "file_path": f"uploads/documents/{name}",
            "file_size": 2048,
        }
        params.update(kwargs)
        return await lifecycle.create_from_upload(**params)

    return _make
