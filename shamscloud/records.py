from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


class ShareType(str, Enum):
    DIRECT = "direct"
    PAGE = "page"
    BROWSE = "browse"


class TokenType(str, Enum):
    EMAIL = "email"
    PASSWORD_RESET = "password_reset"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class UserRecord:
    id: int
    email: str
    name: str
    password: str
    role: Role = Role.USER
    quota: int = 0
    used_space: int = 0
    is_blocked: bool = False
    is_email_verified: bool = False
    created_at: datetime = field(default_factory=utcnow)

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


@dataclass
class FileRecord:
    id: int
    name: str
    path: str
    type: str
    size: int
    is_folder: bool
    parent_id: int | None
    user_id: int
    is_public: bool = False
    public_token: str | None = None
    share_type: ShareType | None = None
    is_password_protected: bool = False
    share_password: str | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


@dataclass
class VerificationTokenRecord:
    id: int
    token: str
    user_id: int
    type: TokenType
    expires_at: datetime

    @property
    def expired(self) -> bool:
        return utcnow() > self.expires_at
