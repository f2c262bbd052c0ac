import os
from typing import cast
from dotenv import load_dotenv
from pathlib import Path
import toml

load_dotenv()
CONFIG_PATH = Path(os.getenv("SHAMSCLOUD_CONFIG", "config.toml"))
config = toml.loads(CONFIG_PATH.read_text()) if CONFIG_PATH.exists() else {}

for section in ("network", "database", "storage", "auth", "logging"):
    if not config.get(section): config[section] = {}

SESSION_SECRET: str = cast(str, os.getenv("SESSION_SECRET"))

GIB = 1024 ** 3

class Network:
    HOST: str = config["network"].get("host", "0.0.0.0")
    PORT: int = int(config["network"].get("port", 8080))

class Database:
    URL: str = os.getenv("DATABASE_URL") or config["database"].get("url", "sqlite://db.sqlite3")

class Storage:
    UPLOAD_DIR: str = config["storage"].get("upload_dir", "uploads")
    DATA_DIR: str = config["storage"].get("data_dir", "data")
    CHUNK_SIZE: int = cast(int, config["storage"].get("chunk_size", 1048576))
    MAX_FILE_SIZE: int = cast(int, config["storage"].get("max_file_size", 50 * 1024 * 1024))
    DEFAULT_QUOTA: int = cast(int, config["storage"].get("default_quota", 10 * GIB))
    TOTAL_QUOTA: int = cast(int, config["storage"].get("total_quota", 100 * GIB))

class Auth:
    REGISTRATION_ENABLED: bool = config["auth"].get("registration_enabled", True)
    SESSION_MAX_AGE: int = config["auth"].get("session_max_age", 60 * 60 * 24)
    BCRYPT_ROUNDS: int = config["auth"].get("bcrypt_rounds", 10)
    VERIFICATION_TTL_HOURS: int = config["auth"].get("verification_ttl_hours", 24)
    RESET_TTL_HOURS: int = config["auth"].get("reset_ttl_hours", 1)
    ADMIN_EMAIL: str | None = os.getenv("ADMIN_EMAIL")
    ADMIN_PASSWORD: str | None = os.getenv("ADMIN_PASSWORD")

class Logging:
    LEVEL: str = config["logging"].get("level", "INFO")

if not SESSION_SECRET: raise RuntimeError("Missing SESSION_SECRET in .env")
