from typing import Any
from ..errors import NotFound, ValidationError
from ..globals import logger
from ..records import Role, UserRecord
from ..sessions import SessionRegistry
from ..settings import SettingsStore
from ..storage import Storage
from .auth import AuthService
from .files import FileService


class AdminService:
    def __init__(self, storage: Storage, auth: AuthService, files: FileService,
                 sessions: SessionRegistry, settings: SettingsStore) -> None:
        self.storage = storage
        self.auth = auth
        self.files = files
        self.sessions = sessions
        self.settings = settings

    async def list_users(self, page: int = 1, limit: int = 10, search: str = "") -> tuple[list[UserRecord], int]:
        return await self.storage.list_users(max(page, 1), min(max(limit, 1), 100), search)

    async def create_user(self, name: str, email: str, password: str, role: Role = Role.USER,
                          quota: int | None = None) -> UserRecord:
        user = await self.auth.create_account(name, email, password, role=role, quota=quota)
        logger.info(f"Admin created user {user.id} ({user.email})")
        return user

    async def _update(self, user_id: int, **fields: Any) -> UserRecord:
        user = await self.storage.update_user(user_id, **fields)
        if not user:
            raise NotFound("User not found")
        return user

    async def set_quota(self, user_id: int, quota: int) -> UserRecord:
        if quota <= 0:
            raise ValidationError("Invalid quota value")
        return await self._update(user_id, quota=quota)

    async def set_blocked(self, user_id: int, is_blocked: bool) -> UserRecord:
        user = await self._update(user_id, is_blocked=is_blocked)
        if is_blocked:
            self.sessions.drop_user(user_id)
        logger.info(f"User {user_id} {'blocked' if is_blocked else 'unblocked'}")
        return user

    async def set_role(self, user_id: int, role: Role) -> UserRecord:
        return await self._update(user_id, role=role)

    async def delete_user(self, acting: UserRecord, user_id: int) -> None:
        if user_id == acting.id:
            raise ValidationError("You cannot delete your own account")
        if not await self.storage.get_user(user_id):
            raise NotFound("User not found")
        await self.files.remove_user_blobs(user_id)
        await self.storage.delete_user(user_id)
        self.sessions.drop_user(user_id)
        logger.info(f"Admin {acting.id} deleted user {user_id}")

    async def get_settings(self) -> dict[str, Any]:
        return {
            **self.settings.load(),
            "used_space": await self.storage.total_used_space(),
            "available_space": self.files.blobs.free_space(),
        }

    async def update_settings(self, total_quota: int, default_quota: int) -> dict[str, Any]:
        if total_quota <= 0 or default_quota <= 0:
            raise ValidationError("Invalid settings data")
        if default_quota > total_quota:
            raise ValidationError("Default quota cannot exceed the total quota")
        self.settings.save(total_quota=total_quota, default_quota=default_quota)
        logger.info(f"Settings updated: total={total_quota} default={default_quota}")
        return await self.get_settings()
