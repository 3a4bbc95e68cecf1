from typing import Optional


class SignDeskError(Exception):
    """Base class for errors reported by the service layer.

    Each subclass carries a stable ``kind`` tag and the HTTP status the API
    layer answers with.
    """

    kind = "error"
    status_code = 500
    default_detail = "Internal error"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)

    def to_dict(self) -> dict:
        return {"error": self.detail, "kind": self.kind}


class NotFoundError(SignDeskError):
    kind = "not_found"
    status_code = 404
    default_detail = "Not found"


class InvalidInputError(SignDeskError):
    kind = "invalid_input"
    status_code = 400
    default_detail = "Invalid input"


class InvalidStateError(SignDeskError):
    kind = "invalid_state"
    status_code = 409
    default_detail = "Operation not allowed in the current state"


class ConflictError(SignDeskError):
    kind = "conflict"
    status_code = 409
    default_detail = "Resource already exists"


class DocumentNotFoundError(NotFoundError):
    def __init__(self, detail: str = "Document not found"):
        super().__init__(detail)


class TokenNotFoundError(NotFoundError):
    def __init__(self, detail: str = "Document not found or link expired"):
        super().__init__(detail)


class TemplateNotFoundError(NotFoundError):
    def __init__(self, detail: str = "Template not found"):
        super().__init__(detail)
