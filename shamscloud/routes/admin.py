from fastapi import APIRouter, Depends
from ..api_models import (BlockUpdate, CreateUser, Message, QuotaUpdate, RoleUpdate, SettingsOut, SettingsUpdate,
                          UserOut, UserPage)
from ..middleware import admin_service, require_admin
from ..records import UserRecord
from ..services import AdminService

router = APIRouter(prefix="/api/admin", tags=["Admin"], dependencies=[Depends(require_admin)])


@router.get("/users", response_model=UserPage)
async def list_users(page: int = 1, limit: int = 10, search: str = "", admin: AdminService = Depends(admin_service)):
    users, total = await admin.list_users(page, limit, search)
    return UserPage(users=[UserOut.model_validate(u) for u in users], total=total)

@router.post("/users", status_code=201, response_model=UserOut)
async def create_user(body: CreateUser, admin: AdminService = Depends(admin_service)):
    user = await admin.create_user(body.name, body.email, body.password, body.role, body.quota)
    return UserOut.model_validate(user)

@router.patch("/users/{user_id}/quota", response_model=UserOut)
async def update_quota(user_id: int, body: QuotaUpdate, admin: AdminService = Depends(admin_service)):
    return UserOut.model_validate(await admin.set_quota(user_id, body.quota))

@router.patch("/users/{user_id}/block", response_model=UserOut)
async def update_block(user_id: int, body: BlockUpdate, admin: AdminService = Depends(admin_service)):
    return UserOut.model_validate(await admin.set_blocked(user_id, body.is_blocked))

@router.patch("/users/{user_id}/role", response_model=UserOut)
async def update_role(user_id: int, body: RoleUpdate, admin: AdminService = Depends(admin_service)):
    return UserOut.model_validate(await admin.set_role(user_id, body.role))

@router.delete("/users/{user_id}", response_model=Message)
async def delete_user(user_id: int, acting: UserRecord = Depends(require_admin),
                      admin: AdminService = Depends(admin_service)):
    await admin.delete_user(acting, user_id)
    return Message(message="User deleted successfully")

@router.get("/settings", response_model=SettingsOut)
async def get_settings(admin: AdminService = Depends(admin_service)):
    return SettingsOut.model_validate(await admin.get_settings())

@router.post("/settings", response_model=SettingsOut)
async def update_settings(body: SettingsUpdate, admin: AdminService = Depends(admin_service)):
    return SettingsOut.model_validate(await admin.update_settings(body.total_quota, body.default_quota))
