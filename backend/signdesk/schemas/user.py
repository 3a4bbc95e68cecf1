from signdesk.schemas.base import CamelModel


class UserSnapshot(CamelModel):
    id: str
    username: str
    password: str
