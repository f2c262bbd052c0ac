from typing import Optional
from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import FileResponse
from ..api_models import BrowseBody, FolderListingOut, PasswordBody, PublicEntry, PublicFileInfo
from ..middleware import sharing_service
from ..services import SharingService
from ..services.sharing import FolderListing

router = APIRouter(prefix="/api/public", tags=["Public"])


def listing_out(listing: FolderListing) -> FolderListingOut:
    return FolderListingOut(
        name=listing.folder.name,
        folder_id=listing.folder.id,
        root_id=listing.root.id,
        files=[PublicEntry.model_validate(f) for f in listing.files],
        is_password_protected=listing.root.is_password_protected,
    )


@router.get("/info/{token}", response_model=PublicFileInfo)
async def info(token: str, sharing: SharingService = Depends(sharing_service)):
    return PublicFileInfo.model_validate(await sharing.get_public_info(token))

@router.get("/download/{token}")
async def direct_download(token: str, sharing: SharingService = Depends(sharing_service)):
    file, path = await sharing.public_download(token)
    return FileResponse(path, filename=file.name, media_type=file.type)

@router.post("/download/{token}")
async def protected_download(token: str, body: Optional[PasswordBody] = Body(None),
                             sharing: SharingService = Depends(sharing_service)):
    file, path = await sharing.public_download(token, body.password if body else None)
    return FileResponse(path, filename=file.name, media_type=file.type)

@router.get("/browse/{token}", response_model=FolderListingOut)
async def browse(token: str, folder_id: Optional[int] = Query(None, alias="folderId"),
                 sharing: SharingService = Depends(sharing_service)):
    return listing_out(await sharing.browse_folder(token, None, folder_id))

@router.post("/browse/{token}", response_model=FolderListingOut)
async def browse_with_password(token: str, body: Optional[BrowseBody] = Body(None),
                               sharing: SharingService = Depends(sharing_service)):
    body = body or BrowseBody()
    return listing_out(await sharing.browse_folder(token, body.password, body.folder_id))

@router.post("/download-file/{token}/{file_id}")
async def browsed_download(token: str, file_id: int, body: Optional[PasswordBody] = Body(None),
                           sharing: SharingService = Depends(sharing_service)):
    file, path = await sharing.download_from_browsed_folder(token, file_id, body.password if body else None)
    return FileResponse(path, filename=file.name, media_type=file.type)
