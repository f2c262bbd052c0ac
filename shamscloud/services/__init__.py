from .admin import AdminService
from .auth import AuthService
from .files import FileService
from .sharing import SharingService

__all__ = ["AdminService", "AuthService", "FileService", "SharingService"]
