from pathlib import Path
from fastapi import UploadFile
from ..blobs import BlobStore
from ..errors import (DuplicateName, Forbidden, IsAFolder, NotAFolder, NotFound, NotFoundOnDisk,
                      ParentNotFound, QuotaExceeded, ValidationError)
from ..globals import logger
from ..records import FileRecord, UserRecord
from ..storage import Storage
from ..utils import clean_name, get_ancestors, guess_type

FOLDER_TYPE = "folder"


def upload_size(upload: UploadFile) -> int:
    if upload.size is not None:
        return upload.size
    f = upload.file
    position = f.tell()
    f.seek(0, 2)
    size = f.tell()
    f.seek(position)
    return size


class FileService:
    """File tree operations, always on behalf of one owner."""

    def __init__(self, storage: Storage, blobs: BlobStore, max_file_size: int | None = None) -> None:
        self.storage = storage
        self.blobs = blobs
        self.max_file_size = max_file_size

    async def get_file(self, user: UserRecord, file_id: int) -> FileRecord:
        file = await self.storage.get_file(file_id)
        if not file:
            raise NotFound()
        if file.user_id != user.id:
            logger.warning(f"User {user.id} tried to access file {file_id} owned by {file.user_id}")
            raise Forbidden()
        return file

    async def get_parent(self, user: UserRecord, parent_id: int | None) -> FileRecord | None:
        if parent_id is None:
            return None
        parent = await self.storage.get_file(parent_id)
        if not parent:
            raise ParentNotFound()
        if parent.user_id != user.id:
            logger.warning(f"User {user.id} tried to use folder {parent_id} owned by {parent.user_id}")
            raise Forbidden("You don't have permission to access this folder")
        if not parent.is_folder:
            raise NotAFolder()
        return parent

    async def list_children(self, user: UserRecord, parent_id: int | None = None,
                            search: str | None = None) -> list[FileRecord]:
        if search:
            return await self.storage.search_files(user.id, search)
        await self.get_parent(user, parent_id)
        return await self.storage.list_children(user.id, parent_id)

    async def hierarchy(self, user: UserRecord, file_id: int) -> list[FileRecord]:
        """Breadcrumbs: every folder from the root down to and including the file."""
        file = await self.get_file(user, file_id)
        ancestors = await get_ancestors(self.storage, file)
        return [*reversed(ancestors), file]

    async def create_folder(self, user: UserRecord, name: str, parent_id: int | None = None) -> FileRecord:
        name = clean_name(name)
        if not name:
            raise ValidationError("Folder name is required")
        await self.get_parent(user, parent_id)
        if await self.storage.find_folder(user.id, parent_id, name):
            raise DuplicateName(f'A folder with the name "{name}" already exists')
        folder = await self.storage.create_file(name=name, path="", type=FOLDER_TYPE, size=0, is_folder=True,
                                                parent_id=parent_id, user_id=user.id)
        logger.info(f"User {user.id} created folder {folder.id} ({folder.name})")
        return folder

    async def upload_files(self, user: UserRecord, uploads: list[UploadFile],
                           parent_id: int | None = None) -> list[FileRecord]:
        if not uploads:
            raise ValidationError("No files uploaded")
        await self.get_parent(user, parent_id)

        sizes = [upload_size(upload) for upload in uploads]
        if self.max_file_size is not None:
            for upload, size in zip(uploads, sizes):
                if size > self.max_file_size:
                    raise ValidationError(f"{upload.filename} exceeds the maximum file size of {self.max_file_size} bytes")

        # re-read the owner so the check sees uploads from earlier requests
        owner = await self.storage.get_user(user.id) or user
        incoming = sum(sizes)
        if owner.used_space + incoming > owner.quota:
            raise QuotaExceeded(details={
                "available": max(0, owner.quota - owner.used_space),
                "required": incoming,
                "used": owner.used_space,
                "total": owner.quota,
            })

        created: list[FileRecord] = []
        for upload in uploads:
            name = clean_name(upload.filename or "") or "untitled"
            blob, size = await self.blobs.save(upload)
            try:
                record = await self.storage.create_file(
                    name=name, path=blob, type=guess_type(name, upload.content_type), size=size,
                    is_folder=False, parent_id=parent_id, user_id=user.id,
                )
            except Exception:
                self.blobs.remove(blob)
                raise
            created.append(record)
        logger.info(f"User {user.id} uploaded {len(created)} file(s), {incoming} bytes")
        return created

    async def rename_file(self, user: UserRecord, file_id: int, new_name: str) -> FileRecord:
        file = await self.get_file(user, file_id)
        name = clean_name(new_name)
        if not name:
            raise ValidationError("Name is required")
        updated = await self.storage.update_file(file.id, name=name)
        if not updated:
            raise NotFound()
        return updated

    async def delete_file(self, user: UserRecord, file_id: int) -> int:
        """Deletes a file or a whole folder subtree; returns the number of rows removed."""
        file = await self.get_file(user, file_id)
        deleted = await self._delete_tree(file)
        logger.info(f"User {user.id} deleted {file.name} ({deleted} item(s))")
        return deleted

    async def _delete_tree(self, file: FileRecord) -> int:
        deleted = 0
        if file.is_folder:
            for child in await self.storage.get_children(file.id):
                deleted += await self._delete_tree(child)
        elif file.path:
            self.blobs.remove(file.path)
        if await self.storage.delete_file(file.id):
            deleted += 1
        return deleted

    def blob_path(self, file: FileRecord) -> Path:
        if file.is_folder:
            raise IsAFolder()
        if not self.blobs.exists(file.path):
            logger.warning(f"Blob for file {file.id} is missing on disk")
            raise NotFoundOnDisk()
        return self.blobs.path(file.path)

    async def download_file(self, user: UserRecord, file_id: int) -> tuple[FileRecord, Path]:
        file = await self.get_file(user, file_id)
        return file, self.blob_path(file)

    async def remove_user_blobs(self, user_id: int) -> int:
        """Removes every blob a user owns; rows are left to the caller."""
        removed = 0
        for file in await self.storage.list_user_files(user_id):
            if file.path and self.blobs.remove(file.path):
                removed += 1
        return removed
