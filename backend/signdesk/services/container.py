from __future__ import annotations

from dataclasses import dataclass

from signdesk.core.config import Settings
from signdesk.db.session import build_engine
from signdesk.services.dashboard import DashboardService
from signdesk.services.lifecycle import DocumentLifecycleService
from signdesk.services.signatures import SignatureService
from signdesk.services.storage.base import DocumentStore
from signdesk.services.storage.memory import MemoryDocumentStore
from signdesk.services.storage.sql import SqlDocumentStore
from signdesk.services.templates import TemplateService, seed_default_templates
from signdesk.services.uploads import UploadStorage
from signdesk.services.users import UserService


@dataclass
class ServiceContainer:
    """Everything the API layer needs, wired around a single store instance."""

    store: DocumentStore
    lifecycle: DocumentLifecycleService
    templates: TemplateService
    dashboard: DashboardService
    signatures: SignatureService
    users: UserService
    uploads: UploadStorage

    @classmethod
    def build(cls, settings: Settings, store: DocumentStore) -> "ServiceContainer":
        lifecycle = DocumentLifecycleService(
            store,
            base_url=settings.PUBLIC_BASE_URL,
            signing_path=settings.SIGNING_PATH,
        )
        return cls(
            store=store,
            lifecycle=lifecycle,
            templates=TemplateService(store, lifecycle),
            dashboard=DashboardService(store),
            signatures=SignatureService(store),
            users=UserService(store),
            uploads=UploadStorage.from_settings(settings),
        )


def build_store(settings: Settings) -> DocumentStore:
    if settings.STORAGE_BACKEND == "sql":
        return SqlDocumentStore(build_engine(settings))
    return MemoryDocumentStore()


async def init_store(settings: Settings, store: DocumentStore) -> None:
    """Prepare a freshly built store: create tables, seed the catalog."""
    if isinstance(store, SqlDocumentStore):
        await store.create_tables()
    if settings.SEED_TEMPLATES:
        await seed_default_templates(store)
