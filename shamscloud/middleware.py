from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from .errors import AccountBlocked, Forbidden, ServiceError
from .globals import logger
from .records import UserRecord
from .services import AdminService, AuthService, FileService, SharingService


def auth_service(request: Request) -> AuthService:
    return request.app.state.auth

def file_service(request: Request) -> FileService:
    return request.app.state.files

def sharing_service(request: Request) -> SharingService:
    return request.app.state.sharing

def admin_service(request: Request) -> AdminService:
    return request.app.state.admin


async def require_auth(request: Request, auth: AuthService = Depends(auth_service)) -> UserRecord:
    user = await auth.current_user(request.session.get("token"))
    if user.is_blocked:
        raise AccountBlocked()
    request.state.user = user
    return user

async def require_admin(user: UserRecord = Depends(require_auth)) -> UserRecord:
    if not user.is_admin:
        raise Forbidden("Forbidden: Admin access required")
    return user


def _error_body(message: str, details: dict | None = None) -> dict:
    body: dict = {"message": message}
    if details:
        body["details"] = details
    return body

async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(_error_body(exc.message, exc.details), status_code=exc.status_code)

async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    parts = []
    for error in exc.errors():
        location = ".".join(str(p) for p in error.get("loc", ()) if p not in ("body", "query", "path"))
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return JSONResponse(_error_body("; ".join(parts) or "Invalid request"), status_code=400)

async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"{request.method} {request.url.path} crashed: {exc}", exc_info=exc)
    return JSONResponse(_error_body("Internal server error"), status_code=500)

def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, service_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_error_handler)
