from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any
from ..records import FileRecord, Role, TokenType, UserRecord, VerificationTokenRecord


class Storage(ABC):
    """
    Persistence for users, the file tree and verification tokens.

    Implementations hand out plain records, never ORM rows. `create_file` and
    `delete_file` keep the owner's used-space counter in step with the rows
    they touch; callers never adjust it directly.
    """

    # users

    @abstractmethod
    async def get_user(self, user_id: int) -> UserRecord | None: ...

    @abstractmethod
    async def get_user_by_email(self, email: str) -> UserRecord | None:
        """Case-insensitive lookup."""

    @abstractmethod
    async def create_user(self, *, name: str, email: str, password: str, role: Role = Role.USER,
                          quota: int, is_email_verified: bool = False) -> UserRecord: ...

    @abstractmethod
    async def update_user(self, user_id: int, **fields: Any) -> UserRecord | None: ...

    @abstractmethod
    async def delete_user(self, user_id: int) -> bool:
        """Deletes the user together with every file row they own."""

    @abstractmethod
    async def list_users(self, page: int = 1, limit: int = 10, search: str = "") -> tuple[list[UserRecord], int]: ...

    @abstractmethod
    async def total_used_space(self) -> int: ...

    # files

    @abstractmethod
    async def get_file(self, file_id: int) -> FileRecord | None: ...

    @abstractmethod
    async def get_file_by_token(self, token: str) -> FileRecord | None:
        """Only returns rows that are currently public."""

    @abstractmethod
    async def list_children(self, user_id: int, parent_id: int | None) -> list[FileRecord]:
        """Folders first, then by name."""

    @abstractmethod
    async def search_files(self, user_id: int, query: str) -> list[FileRecord]: ...

    @abstractmethod
    async def find_folder(self, user_id: int, parent_id: int | None, name: str) -> FileRecord | None: ...

    @abstractmethod
    async def get_children(self, folder_id: int) -> list[FileRecord]: ...

    @abstractmethod
    async def list_user_files(self, user_id: int) -> list[FileRecord]:
        """Every non-folder row owned by the user."""

    @abstractmethod
    async def create_file(self, *, name: str, path: str, type: str, size: int, is_folder: bool,
                          parent_id: int | None, user_id: int) -> FileRecord: ...

    @abstractmethod
    async def update_file(self, file_id: int, **fields: Any) -> FileRecord | None: ...

    @abstractmethod
    async def delete_file(self, file_id: int) -> FileRecord | None:
        """Deletes one row (no recursion) and releases its size, clamped at zero."""

    # verification tokens

    @abstractmethod
    async def create_verification_token(self, user_id: int, type: TokenType, token: str,
                                        expires_at: datetime) -> VerificationTokenRecord: ...

    @abstractmethod
    async def get_verification_token(self, token: str) -> VerificationTokenRecord | None: ...

    @abstractmethod
    async def delete_verification_token(self, token_id: int) -> None: ...
