from typing import Iterable

from signdesk.models.document import DocumentStatus
from signdesk.schemas.dashboard import DashboardStats
from signdesk.schemas.document import DocumentSnapshot
from signdesk.services.storage.base import DocumentStore


def compute_dashboard_stats(documents: Iterable[DocumentSnapshot]) -> DashboardStats:
    """Summary counts over a document collection."""
    total = pending = completed = from_templates = 0
    for doc in documents:
        total += 1
        if doc.status == DocumentStatus.PENDING:
            pending += 1
        elif doc.status == DocumentStatus.SIGNED:
            completed += 1
        if doc.template_id is not None:
            from_templates += 1

    return DashboardStats(
        totalDocuments=total,
        pendingSignatures=pending,
        completed=completed,
        templatesUsed=from_templates,
    )


class DashboardService:
    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    async def get_stats(self) -> DashboardStats:
        # Recomputed on every call; the collection is small and in memory
        return compute_dashboard_stats(await self.store.list_documents())
