import io
import os
from types import SimpleNamespace

os.environ.setdefault("SESSION_SECRET", "test-session-secret")
os.environ.setdefault("SHAMSCLOUD_CONFIG", os.path.join(os.path.dirname(__file__), "missing-config.toml"))

import httpx
import pytest
from starlette.datastructures import Headers, UploadFile
from tortoise import Tortoise

from shamscloud import config
from shamscloud.app import create_app
from shamscloud.blobs import BlobStore
from shamscloud.records import Role
from shamscloud.services import AdminService, AuthService, FileService, SharingService
from shamscloud.sessions import SessionRegistry
from shamscloud.settings import SettingsStore
from shamscloud.storage import TortoiseStorage
from shamscloud.utils.crypto import hash_password
from .memory_storage import MemoryStorage

config.Auth.BCRYPT_ROUNDS = 4

KIB = 1024
MIB = 1024 * KIB


def make_upload(name: str, data: bytes, content_type: str = "text/plain") -> UploadFile:
    return UploadFile(io.BytesIO(data), size=len(data), filename=name,
                      headers=Headers({"content-type": content_type}))


@pytest.fixture
def blobs(tmp_path):
    return BlobStore(tmp_path / "uploads", chunk_size=4 * KIB)


@pytest.fixture
def settings(tmp_path):
    return SettingsStore(tmp_path / "data", total_quota=100 * MIB, default_quota=MIB)


@pytest.fixture
def sessions():
    return SessionRegistry(max_age=3600)


@pytest.fixture
def memory():
    return MemoryStorage()


@pytest.fixture
def services(memory, blobs, settings, sessions):
    auth = AuthService(memory, sessions, settings)
    files = FileService(memory, blobs, max_file_size=MIB)
    return SimpleNamespace(
        storage=memory,
        auth=auth,
        files=files,
        sharing=SharingService(memory, files),
        admin=AdminService(memory, auth, files, sessions, settings),
        sessions=sessions,
        blobs=blobs,
    )


@pytest.fixture
def user_factory(memory):
    async def create(email: str = "alice@example.com", quota: int = MIB, role: Role = Role.USER, password: str = "secret123"):
        return await memory.create_user(name=email.split("@")[0], email=email, password=hash_password(password),
                                        role=role, quota=quota)
    return create


@pytest.fixture
async def db():
    await Tortoise.init(db_url="sqlite://:memory:", modules={"models": ["shamscloud.models"]})
    await Tortoise.generate_schemas()
    yield
    await Tortoise.close_connections()


@pytest.fixture
def app(db, blobs, settings, sessions):
    return create_app(TortoiseStorage(), blobs, settings, sessions)


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c


@pytest.fixture
async def other_client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c


async def register(client: httpx.AsyncClient, email: str = "alice@example.com", password: str = "secret123",
                   name: str = "Alice") -> dict:
    response = await client.post("/api/auth/register", json={"name": name, "email": email, "password": password})
    assert response.status_code == 201, response.text
    return response.json()
