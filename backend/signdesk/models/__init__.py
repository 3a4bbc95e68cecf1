from .document import Document, DocumentStatus
from .template import Template, TemplateCategory
from .signature import Signature
from .user import User
