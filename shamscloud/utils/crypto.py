import secrets
import bcrypt
from .. import config

def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=config.Auth.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

def verify_password(password: str, hashed: str | None) -> bool:
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # not a bcrypt hash
        return False

def generate_token(nbytes: int = 24) -> str:
    """URL-safe random token; 24 bytes encode to 32 characters."""
    return secrets.token_urlsafe(nbytes)
