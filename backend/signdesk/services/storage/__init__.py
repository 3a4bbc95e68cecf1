from .base import DocumentMutation, DocumentStore, merge_document
from .memory import MemoryDocumentStore
from .sql import SqlDocumentStore
