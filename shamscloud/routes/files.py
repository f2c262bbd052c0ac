from typing import Optional
from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile
from fastapi.responses import FileResponse
from ..api_models import CreateFolder, FileOut, Message, Rename, ShareLinkOut, ShareSettings
from ..errors import ValidationError
from ..middleware import file_service, require_auth, sharing_service
from ..records import UserRecord
from ..services import FileService, SharingService

router = APIRouter(prefix="/api/files", tags=["Files"])


def parse_parent_id(raw: Optional[str]) -> Optional[int]:
    """The client sends `parentId=null` for the root folder."""
    if raw is None or raw in ("", "null", "undefined"):
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValidationError("Invalid parent folder ID format")


@router.get("", response_model=list[FileOut])
async def list_files(parent_id: Optional[str] = Query(None, alias="parentId"), search: Optional[str] = None,
                     user: UserRecord = Depends(require_auth), files: FileService = Depends(file_service)):
    records = await files.list_children(user, parse_parent_id(parent_id), search)
    return [FileOut.model_validate(r) for r in records]

@router.post("/folder", status_code=201, response_model=FileOut)
async def create_folder(body: CreateFolder, user: UserRecord = Depends(require_auth),
                        files: FileService = Depends(file_service)):
    return FileOut.model_validate(await files.create_folder(user, body.name, body.parent_id))

@router.post("/upload", status_code=201, response_model=list[FileOut])
async def upload(uploads: list[UploadFile] = File(default=[], alias="files"),
                 parent_id: Optional[str] = Form(None, alias="parentId"),
                 user: UserRecord = Depends(require_auth), files: FileService = Depends(file_service)):
    records = await files.upload_files(user, uploads, parse_parent_id(parent_id))
    return [FileOut.model_validate(r) for r in records]

@router.get("/{file_id}", response_model=FileOut)
async def get_file(file_id: int, user: UserRecord = Depends(require_auth), files: FileService = Depends(file_service)):
    return FileOut.model_validate(await files.get_file(user, file_id))

@router.get("/{file_id}/hierarchy", response_model=list[FileOut])
async def hierarchy(file_id: int, user: UserRecord = Depends(require_auth), files: FileService = Depends(file_service)):
    return [FileOut.model_validate(r) for r in await files.hierarchy(user, file_id)]

@router.get("/{file_id}/download")
async def download(file_id: int, user: UserRecord = Depends(require_auth), files: FileService = Depends(file_service)):
    file, path = await files.download_file(user, file_id)
    return FileResponse(path, filename=file.name, media_type=file.type)

@router.patch("/{file_id}/rename", response_model=FileOut)
async def rename(file_id: int, body: Rename, user: UserRecord = Depends(require_auth),
                 files: FileService = Depends(file_service)):
    return FileOut.model_validate(await files.rename_file(user, file_id, body.name))

@router.delete("/{file_id}", response_model=Message)
async def delete(file_id: int, user: UserRecord = Depends(require_auth), files: FileService = Depends(file_service)):
    await files.delete_file(user, file_id)
    return Message(message="File deleted successfully")

@router.post("/{file_id}/share", response_model=ShareLinkOut)
async def share(request: Request, file_id: int, body: ShareSettings, user: UserRecord = Depends(require_auth),
                sharing: SharingService = Depends(sharing_service)):
    link = await sharing.share(user, file_id, body.share_type, body.is_password_protected, body.password,
                               base_url=str(request.base_url))
    return ShareLinkOut.model_validate(link)

@router.delete("/{file_id}/share", response_model=Message)
async def unshare(file_id: int, user: UserRecord = Depends(require_auth),
                  sharing: SharingService = Depends(sharing_service)):
    await sharing.unshare(user, file_id)
    return Message(message="Public access disabled")
