from dataclasses import dataclass
from pathlib import Path
from ..errors import InvalidPassword, IsAFolder, NotAFolder, NotFound, PasswordRequired, ValidationError
from ..globals import logger
from ..records import FileRecord, ShareType, UserRecord
from ..storage import Storage
from ..utils import get_ancestors
from ..utils.crypto import generate_token, hash_password, verify_password
from .auth import check_password_size
from .files import FileService

SHARE_PATHS = {
    ShareType.DIRECT: "/api/public/download/{token}",
    ShareType.PAGE: "/shared/{token}",
    ShareType.BROWSE: "/browse/{token}",
}


@dataclass
class ShareLink:
    share_link: str
    public_token: str
    share_type: ShareType
    is_password_protected: bool


@dataclass
class FolderListing:
    root: FileRecord
    folder: FileRecord
    files: list[FileRecord]


class SharingService:
    """
    Public access to a single file or folder subtree through an opaque token.
    The token lives on the owner's own row; revoking clears it for good.
    """

    def __init__(self, storage: Storage, files: FileService) -> None:
        self.storage = storage
        self.files = files

    async def share(self, user: UserRecord, file_id: int, share_type: ShareType, is_password_protected: bool,
                    password: str | None = None, base_url: str = "") -> ShareLink:
        file = await self.files.get_file(user, file_id)
        if share_type is ShareType.BROWSE and not file.is_folder:
            raise NotAFolder("Only folders can be shared for browsing")
        if share_type is not ShareType.BROWSE and file.is_folder:
            raise IsAFolder("Folders can only be shared for browsing")
        if is_password_protected:
            if share_type is ShareType.DIRECT:
                raise ValidationError("Direct links cannot be password protected")
            if not password:
                raise ValidationError("A password is required for protected links")
            check_password_size(password)

        token = generate_token()
        await self.storage.update_file(
            file.id,
            is_public=True,
            public_token=token,
            share_type=share_type,
            is_password_protected=is_password_protected,
            share_password=hash_password(password) if is_password_protected and password else None,
        )
        logger.info(f"User {user.id} shared file {file.id} as {share_type.value}")
        return ShareLink(
            share_link=base_url.rstrip("/") + SHARE_PATHS[share_type].format(token=token),
            public_token=token,
            share_type=share_type,
            is_password_protected=is_password_protected,
        )

    async def unshare(self, user: UserRecord, file_id: int) -> FileRecord:
        file = await self.files.get_file(user, file_id)
        updated = await self.storage.update_file(
            file.id,
            is_public=False,
            public_token=None,
            share_type=None,
            is_password_protected=False,
            share_password=None,
        )
        if not updated:
            raise NotFound()
        logger.info(f"User {user.id} revoked public access to file {file.id}")
        return updated

    async def get_public_info(self, token: str) -> FileRecord:
        file = await self.storage.get_file_by_token(token)
        if not file:
            raise NotFound("File not found or not public")
        return file

    def check_password(self, file: FileRecord, password: str | None) -> None:
        if not file.is_password_protected:
            return
        if not password:
            raise PasswordRequired()
        if not verify_password(password, file.share_password):
            raise InvalidPassword()

    async def public_download(self, token: str, password: str | None = None) -> tuple[FileRecord, Path]:
        file = await self.get_public_info(token)
        self.check_password(file, password)
        return file, self.files.blob_path(file)

    async def _shared_folder(self, token: str, password: str | None) -> FileRecord:
        root = await self.get_public_info(token)
        if not root.is_folder or root.share_type is not ShareType.BROWSE:
            raise NotFound("Shared folder not found")
        self.check_password(root, password)
        return root

    async def _inside(self, root: FileRecord, file_id: int) -> FileRecord:
        file = await self.storage.get_file(file_id)
        if not file or file.user_id != root.user_id:
            raise NotFound()
        ancestors = await get_ancestors(self.storage, file)
        if not any(a.id == root.id for a in ancestors):
            logger.warning(f"Rejected access to file {file_id} outside shared folder {root.id}")
            raise NotFound()
        return file

    async def browse_folder(self, token: str, password: str | None = None,
                            folder_id: int | None = None) -> FolderListing:
        root = await self._shared_folder(token, password)
        folder = root
        if folder_id is not None and folder_id != root.id:
            folder = await self._inside(root, folder_id)
            if not folder.is_folder:
                raise NotAFolder("Not a folder")
        return FolderListing(root=root, folder=folder, files=await self.storage.get_children(folder.id))

    async def download_from_browsed_folder(self, token: str, file_id: int,
                                           password: str | None = None) -> tuple[FileRecord, Path]:
        root = await self._shared_folder(token, password)
        file = await self._inside(root, file_id)
        return file, self.files.blob_path(file)
