from signdesk.core.exceptions import InvalidInputError, NotFoundError
from signdesk.core.logging import get_logger
from signdesk.schemas.user import UserSnapshot
from signdesk.services.storage.base import DocumentStore

logger = get_logger(__name__)


class UserService:
    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    async def create_user(self, username: str, password: str) -> UserSnapshot:
        if not username or not username.strip():
            raise InvalidInputError("Username is required")
        if not password:
            raise InvalidInputError("Password is required")
        user = await self.store.create_user({"username": username.strip(), "password": password})
        logger.info(f"Created user: {user.id} - {user.username}")
        return user

    async def get_user(self, user_id: str) -> UserSnapshot:
        user = await self.store.get_user(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def get_user_by_username(self, username: str) -> UserSnapshot:
        user = await self.store.get_user_by_username(username)
        if user is None:
            raise NotFoundError("User not found")
        return user
