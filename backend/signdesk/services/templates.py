from typing import Dict, List, Optional

from signdesk.core.exceptions import TemplateNotFoundError
from signdesk.core.logging import get_logger
from signdesk.models.template import TemplateCategory
from signdesk.schemas.document import DocumentSnapshot
from signdesk.schemas.template import TemplateSnapshot
from signdesk.services.lifecycle import DocumentLifecycleService
from signdesk.services.storage.base import DocumentStore

logger = get_logger(__name__)

DEFAULT_TEMPLATES: List[Dict[str, str]] = [
    {
        "title": "Service Agreement",
        "description": "Professional service contract template with signature fields",
        "category": TemplateCategory.CONTRACTS.value,
        "file_path": "/templates/service-agreement.pdf",
        "thumbnail_path": "/templates/thumbs/service-agreement.png",
    },
    {
        "title": "Non-Disclosure Agreement",
        "description": "Standard NDA template for confidential business relationships",
        "category": TemplateCategory.NDAS.value,
        "file_path": "/templates/nda.pdf",
        "thumbnail_path": "/templates/thumbs/nda.png",
    },
    {
        "title": "Employment Contract",
        "description": "Comprehensive employment agreement with terms and conditions",
        "category": TemplateCategory.CONTRACTS.value,
        "file_path": "/templates/employment-contract.pdf",
        "thumbnail_path": "/templates/thumbs/employment-contract.png",
    },
    {
        "title": "Freelance Contract",
        "description": "Independent contractor agreement for project-based work",
        "category": TemplateCategory.CONTRACTS.value,
        "file_path": "/templates/freelance-contract.pdf",
        "thumbnail_path": "/templates/thumbs/freelance-contract.png",
    },
    {
        "title": "Partnership Agreement",
        "description": "Business partnership contract with profit sharing terms",
        "category": TemplateCategory.CONTRACTS.value,
        "file_path": "/templates/partnership-agreement.pdf",
        "thumbnail_path": "/templates/thumbs/partnership-agreement.png",
    },
    {
        "title": "Consulting Agreement",
        "description": "Professional consulting services contract template",
        "category": TemplateCategory.CONTRACTS.value,
        "file_path": "/templates/consulting-agreement.pdf",
        "thumbnail_path": "/templates/thumbs/consulting-agreement.png",
    },
]


async def seed_default_templates(store: DocumentStore) -> int:
    """Load the built-in templates into an empty store. Returns how many were added."""
    if await store.list_templates():
        return 0
    for fields in DEFAULT_TEMPLATES:
        await store.create_template(fields)
    logger.info(f"Seeded {len(DEFAULT_TEMPLATES)} default templates")
    return len(DEFAULT_TEMPLATES)


class TemplateService:
    """Read access to the template catalog plus document instantiation."""

    def __init__(self, store: DocumentStore, lifecycle: DocumentLifecycleService) -> None:
        self.store = store
        self.lifecycle = lifecycle

    async def list_templates(self, category: Optional[str] = None) -> List[TemplateSnapshot]:
        if category:
            return await self.store.list_templates_by_category(category)
        return await self.store.list_templates()

    async def get_template(self, template_id: str) -> TemplateSnapshot:
        template = await self.store.get_template(template_id)
        if template is None:
            raise TemplateNotFoundError()
        return template

    async def use_template(
        self,
        template_id: str,
        title: Optional[str] = None,
        client_email: Optional[str] = None,
    ) -> DocumentSnapshot:
        return await self.lifecycle.create_from_template(
            template_id, title=title, client_email=client_email
        )
