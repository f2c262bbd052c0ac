from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel
from .records import Role, ShareType

class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

# requests

class Signup(CamelModel):
    name: str = ""
    email: str
    password: str = Field(min_length=6)
    confirm_password: Optional[str] = None

    @model_validator(mode="after")
    def passwords_match(self):
        if self.confirm_password is not None and self.confirm_password != self.password:
            raise ValueError("Passwords do not match")
        return self

class Login(CamelModel):
    email: str
    password: str

class ResetPassword(CamelModel):
    email: str

class ConfirmReset(CamelModel):
    token: str
    password: str = Field(min_length=6)

class CreateFolder(CamelModel):
    name: str = Field(min_length=1)
    parent_id: Optional[int] = None

class Rename(CamelModel):
    name: str = Field(min_length=1)

class ShareSettings(CamelModel):
    share_type: ShareType
    is_password_protected: bool = False
    password: Optional[str] = None

class PasswordBody(CamelModel):
    password: Optional[str] = None

class BrowseBody(CamelModel):
    password: Optional[str] = None
    folder_id: Optional[int] = None

class CreateUser(CamelModel):
    name: str = ""
    email: str
    password: str = Field(min_length=6)
    role: Role = Role.USER
    quota: Optional[int] = Field(default=None, gt=0)

class QuotaUpdate(CamelModel):
    quota: int = Field(gt=0)

class BlockUpdate(CamelModel):
    is_blocked: bool

class RoleUpdate(CamelModel):
    role: Role

class SettingsUpdate(CamelModel):
    total_quota: int = Field(gt=0)
    default_quota: int = Field(gt=0)

# responses

class UserOut(CamelModel):
    id: int
    email: str
    name: str
    role: Role
    quota: int
    used_space: int
    is_blocked: bool
    is_email_verified: bool
    created_at: datetime

class RegisteredUser(UserOut):
    verification_url: str
    message: str

class FileOut(CamelModel):
    id: int
    name: str
    type: str
    size: int
    is_folder: bool
    parent_id: Optional[int]
    user_id: int
    is_public: bool
    public_token: Optional[str]
    share_type: Optional[ShareType]
    is_password_protected: bool
    created_at: datetime
    updated_at: datetime

class PublicFileInfo(CamelModel):
    id: int
    name: str
    type: str
    size: int
    is_password_protected: bool
    share_type: Optional[ShareType]
    created_at: datetime

class PublicEntry(CamelModel):
    id: int
    name: str
    type: str
    size: int
    is_folder: bool

class FolderListingOut(CamelModel):
    name: str
    folder_id: int
    root_id: int
    files: list[PublicEntry]
    is_password_protected: bool

class ShareLinkOut(CamelModel):
    success: bool = True
    share_link: str
    public_token: str
    share_type: ShareType
    is_password_protected: bool

class UserPage(CamelModel):
    users: list[UserOut]
    total: int

class SettingsOut(CamelModel):
    total_quota: int
    default_quota: int
    last_updated: Optional[str]
    used_space: int
    available_space: int

class Message(CamelModel):
    message: str
    details: Optional[dict[str, Any]] = None
