from pydantic import BaseModel


class DashboardStats(BaseModel):
    totalDocuments: int
    pendingSignatures: int
    completed: int
    templatesUsed: int
