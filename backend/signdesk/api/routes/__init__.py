from .dashboard import router as dashboard
from .documents import router as documents
from .health import router as health
from .signatures import router as signatures
from .templates import router as templates
