from __future__ import annotations

import pytest

from signdesk.services.dashboard import DashboardService, compute_dashboard_stats


def test_empty_collection_has_zero_counts() -> None:
    stats = compute_dashboard_stats([])
    assert stats.model_dump() == {
        "totalDocuments": 0,
        "pendingSignatures": 0,
        "completed": 0,
        "templatesUsed": 0,
    }


@pytest.mark.asyncio
async def test_stats_follow_each_mutation(store, lifecycle, make_document) -> None:
    dashboard = DashboardService(store)
    docs = [await make_document(f"doc-{i}.pdf") for i in range(3)]

    stats = await dashboard.get_stats()
    assert (stats.totalDocuments, stats.pendingSignatures, stats.completed) == (3, 0, 0)

    link = await lifecycle.generate_signing_link(docs[0].id, "client@example.com")
    stats = await dashboard.get_stats()
    assert (stats.totalDocuments, stats.pendingSignatures, stats.completed) == (3, 1, 0)

    await lifecycle.sign_document(link.document.secure_token, "data:image/png;base64,AAA")
    stats = await dashboard.get_stats()
    assert (stats.totalDocuments, stats.pendingSignatures, stats.completed) == (3, 0, 1)
    assert stats.pendingSignatures + stats.completed <= stats.totalDocuments


@pytest.mark.asyncio
async def test_templates_used_counts_template_documents(seeded_store, lifecycle, make_document) -> None:
    templates = await seeded_store.list_templates()
    await lifecycle.create_from_template(templates[0].id)
    await lifecycle.create_from_template(templates[1].id, title="Custom")
    await make_document()

    stats = await DashboardService(seeded_store).get_stats()

    assert stats.totalDocuments == 3
    assert stats.templatesUsed == 2
