from typing import List, Optional

from fastapi import APIRouter, Body, Depends

from signdesk.api.deps import get_template_service
from signdesk.schemas.document import DocumentSnapshot
from signdesk.schemas.template import TemplateSnapshot, UseTemplateRequest
from signdesk.services.templates import TemplateService

router = APIRouter()


@router.get("", response_model=List[TemplateSnapshot])
async def list_templates(
    category: Optional[str] = None,
    templates: TemplateService = Depends(get_template_service),
):
    return await templates.list_templates(category)


@router.get("/{template_id}", response_model=TemplateSnapshot)
async def get_template(
    template_id: str,
    templates: TemplateService = Depends(get_template_service),
):
    return await templates.get_template(template_id)


@router.post("/{template_id}/use", response_model=DocumentSnapshot)
async def use_template(
    template_id: str,
    body: Optional[UseTemplateRequest] = Body(None),
    templates: TemplateService = Depends(get_template_service),
):
    """Create a draft document from a template."""
    body = body or UseTemplateRequest()
    return await templates.use_template(template_id, title=body.title, client_email=body.client_email)
