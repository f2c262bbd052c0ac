from fastapi import FastAPI
from starlette.middleware.sessions import SessionMiddleware
from .blobs import BlobStore
from .globals import SESSIONS
from .middleware import install_error_handlers
from .routes import routers
from .services import AdminService, AuthService, FileService, SharingService
from .sessions import SessionRegistry
from .settings import SettingsStore
from .storage import Storage, TortoiseStorage
from . import __version__, config


def create_app(storage: Storage | None = None, blobs: BlobStore | None = None,
               settings: SettingsStore | None = None, sessions: SessionRegistry | None = None) -> FastAPI:
    """
    Wires the services together. Everything defaults to the configured
    production pieces; tests pass their own storage and directories.
    Tortoise itself is initialised by the caller.
    """
    storage = storage or TortoiseStorage()
    blobs = blobs or BlobStore(config.Storage.UPLOAD_DIR, config.Storage.CHUNK_SIZE)
    settings = settings or SettingsStore(config.Storage.DATA_DIR, config.Storage.TOTAL_QUOTA, config.Storage.DEFAULT_QUOTA)
    sessions = sessions or SESSIONS

    app = FastAPI(title="ShamsCloud", version=__version__)
    app.add_middleware(SessionMiddleware, secret_key=config.SESSION_SECRET, max_age=config.Auth.SESSION_MAX_AGE)
    install_error_handlers(app)

    auth = AuthService(storage, sessions, settings)
    files = FileService(storage, blobs, config.Storage.MAX_FILE_SIZE)
    app.state.storage = storage
    app.state.auth = auth
    app.state.files = files
    app.state.sharing = SharingService(storage, files)
    app.state.admin = AdminService(storage, auth, files, sessions, settings)

    for router in routers:
        app.include_router(router)

    @app.get("/api/health")
    async def health():
        return {"status": "ok"}

    return app
