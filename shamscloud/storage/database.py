from datetime import datetime, timezone
from typing import Any
from tortoise.expressions import F, Q
from tortoise.transactions import in_transaction
from ..models import File, User, VerificationToken
from ..records import FileRecord, Role, TokenType, UserRecord, VerificationTokenRecord
from .base import Storage


def _aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _user_record(user: User) -> UserRecord:
    return UserRecord(
        id=user.id,
        email=user.email,
        name=user.name,
        password=user.password,
        role=Role(user.role),
        quota=user.quota,
        used_space=user.used_space,
        is_blocked=user.is_blocked,
        is_email_verified=user.is_email_verified,
        created_at=_aware(user.created_at),
    )


def _file_record(file: File) -> FileRecord:
    return FileRecord(
        id=file.id,
        name=file.name,
        path=file.path,
        type=file.type,
        size=file.size,
        is_folder=file.is_folder,
        parent_id=file.parent_id,
        user_id=file.user_id,  # type: ignore[attr-defined]
        is_public=file.is_public,
        public_token=file.public_token,
        share_type=file.share_type,
        is_password_protected=file.is_password_protected,
        share_password=file.share_password,
        created_at=_aware(file.created_at),
        updated_at=_aware(file.updated_at),
    )


def _token_record(token: VerificationToken) -> VerificationTokenRecord:
    return VerificationTokenRecord(
        id=token.id,
        token=token.token,
        user_id=token.user_id,  # type: ignore[attr-defined]
        type=TokenType(token.type),
        expires_at=_aware(token.expires_at),
    )


class TortoiseStorage(Storage):
    """Storage backed by the Tortoise models; requires an initialised Tortoise."""

    async def get_user(self, user_id: int) -> UserRecord | None:
        user = await User.get_or_none(id=user_id)
        return _user_record(user) if user else None

    async def get_user_by_email(self, email: str) -> UserRecord | None:
        user = await User.filter(email__iexact=email).first()
        return _user_record(user) if user else None

    async def create_user(self, *, name: str, email: str, password: str, role: Role = Role.USER,
                          quota: int, is_email_verified: bool = False) -> UserRecord:
        user = await User.create(name=name, email=email, password=password, role=role, quota=quota,
                                 is_email_verified=is_email_verified)
        return _user_record(user)

    async def update_user(self, user_id: int, **fields: Any) -> UserRecord | None:
        user = await User.get_or_none(id=user_id)
        if not user:
            return None
        user.update_from_dict(fields)
        await user.save(update_fields=list(fields))
        return _user_record(user)

    async def delete_user(self, user_id: int) -> bool:
        async with in_transaction() as conn:
            await File.filter(user_id=user_id).using_db(conn).delete()
            await VerificationToken.filter(user_id=user_id).using_db(conn).delete()
            deleted = await User.filter(id=user_id).using_db(conn).delete()
        return bool(deleted)

    async def list_users(self, page: int = 1, limit: int = 10, search: str = "") -> tuple[list[UserRecord], int]:
        query = User.all()
        if search:
            query = query.filter(Q(name__icontains=search) | Q(email__icontains=search))
        total = await query.count()
        users = await query.order_by("id").offset((page - 1) * limit).limit(limit)
        return [_user_record(u) for u in users], total

    async def total_used_space(self) -> int:
        return sum(await User.all().values_list("used_space", flat=True))

    async def get_file(self, file_id: int) -> FileRecord | None:
        file = await File.get_or_none(id=file_id)
        return _file_record(file) if file else None

    async def get_file_by_token(self, token: str) -> FileRecord | None:
        file = await File.filter(public_token=token, is_public=True).first()
        return _file_record(file) if file else None

    async def list_children(self, user_id: int, parent_id: int | None) -> list[FileRecord]:
        query = File.filter(user_id=user_id)
        query = query.filter(parent_id__isnull=True) if parent_id is None else query.filter(parent_id=parent_id)
        return [_file_record(f) for f in await query.order_by("-is_folder", "name")]

    async def search_files(self, user_id: int, query: str) -> list[FileRecord]:
        files = await File.filter(user_id=user_id, name__icontains=query).order_by("-is_folder", "name")
        return [_file_record(f) for f in files]

    async def find_folder(self, user_id: int, parent_id: int | None, name: str) -> FileRecord | None:
        query = File.filter(user_id=user_id, name=name, is_folder=True)
        query = query.filter(parent_id__isnull=True) if parent_id is None else query.filter(parent_id=parent_id)
        folder = await query.first()
        return _file_record(folder) if folder else None

    async def get_children(self, folder_id: int) -> list[FileRecord]:
        return [_file_record(f) for f in await File.filter(parent_id=folder_id).order_by("-is_folder", "name")]

    async def list_user_files(self, user_id: int) -> list[FileRecord]:
        return [_file_record(f) for f in await File.filter(user_id=user_id, is_folder=False)]

    async def create_file(self, *, name: str, path: str, type: str, size: int, is_folder: bool,
                          parent_id: int | None, user_id: int) -> FileRecord:
        async with in_transaction() as conn:
            file = await File.create(name=name, path=path, type=type, size=size, is_folder=is_folder,
                                     parent_id=parent_id, user_id=user_id, using_db=conn)
            if not is_folder:
                await User.filter(id=user_id).using_db(conn).update(used_space=F("used_space") + size)
        return _file_record(file)

    async def update_file(self, file_id: int, **fields: Any) -> FileRecord | None:
        file = await File.get_or_none(id=file_id)
        if not file:
            return None
        file.update_from_dict(fields)
        await file.save()
        return _file_record(file)

    async def delete_file(self, file_id: int) -> FileRecord | None:
        async with in_transaction() as conn:
            file = await File.filter(id=file_id).using_db(conn).first()
            if not file:
                return None
            record = _file_record(file)
            await file.delete(using_db=conn)
            if not record.is_folder and record.size:
                user = await User.filter(id=record.user_id).using_db(conn).first()
                if user:
                    remaining = max(0, user.used_space - record.size)
                    await User.filter(id=user.id).using_db(conn).update(used_space=remaining)
        return record

    async def create_verification_token(self, user_id: int, type: TokenType, token: str,
                                        expires_at: datetime) -> VerificationTokenRecord:
        row = await VerificationToken.create(user_id=user_id, type=type, token=token, expires_at=expires_at)
        return _token_record(row)

    async def get_verification_token(self, token: str) -> VerificationTokenRecord | None:
        row = await VerificationToken.get_or_none(token=token)
        return _token_record(row) if row else None

    async def delete_verification_token(self, token_id: int) -> None:
        await VerificationToken.filter(id=token_id).delete()
