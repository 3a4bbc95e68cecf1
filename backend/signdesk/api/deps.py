from fastapi import Request

from signdesk.services.container import ServiceContainer
from signdesk.services.dashboard import DashboardService
from signdesk.services.lifecycle import DocumentLifecycleService
from signdesk.services.signatures import SignatureService
from signdesk.services.templates import TemplateService
from signdesk.services.uploads import UploadStorage


def get_services(request: Request) -> ServiceContainer:
    """Dependency returning the container built by the app factory."""
    return request.app.state.services


def get_lifecycle(request: Request) -> DocumentLifecycleService:
    return get_services(request).lifecycle


def get_template_service(request: Request) -> TemplateService:
    return get_services(request).templates


def get_dashboard_service(request: Request) -> DashboardService:
    return get_services(request).dashboard


def get_signature_service(request: Request) -> SignatureService:
    return get_services(request).signatures


def get_upload_storage(request: Request) -> UploadStorage:
    return get_services(request).uploads
