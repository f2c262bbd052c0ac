from datetime import timedelta
from ..errors import AccountBlocked, EmailTaken, Forbidden, InvalidCredentials, Unauthenticated, ValidationError
from ..globals import logger
from ..records import Role, TokenType, UserRecord, VerificationTokenRecord, utcnow
from ..sessions import SessionRegistry
from ..settings import SettingsStore
from ..storage import Storage
from ..utils import validate_email
from ..utils.crypto import generate_token, hash_password, verify_password
from .. import config

MIN_PASSWORD_LENGTH = 6
# bcrypt only accepts this many bytes
MAX_PASSWORD_BYTES = 72


def check_password_size(password: str) -> None:
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")


def check_password_strength(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    check_password_size(password)


class AuthService:
    def __init__(self, storage: Storage, sessions: SessionRegistry, settings: SettingsStore) -> None:
        self.storage = storage
        self.sessions = sessions
        self.settings = settings

    async def create_account(self, name: str, email: str, password: str, role: Role = Role.USER,
                             quota: int | None = None, is_email_verified: bool = False) -> UserRecord:
        email = email.strip()
        if not validate_email(email):
            raise ValidationError("Email must be a valid email")
        check_password_strength(password)
        if await self.storage.get_user_by_email(email):
            raise EmailTaken()
        return await self.storage.create_user(
            name=name.strip() or email.split("@")[0],
            email=email,
            password=hash_password(password),
            role=role,
            quota=quota if quota is not None else self.settings.default_quota,
            is_email_verified=is_email_verified,
        )

    async def register(self, name: str, email: str, password: str) -> tuple[UserRecord, VerificationTokenRecord, str]:
        """Creates a regular account and logs it in. Returns (user, email token, session token)."""
        if not config.Auth.REGISTRATION_ENABLED:
            raise Forbidden("Registration is disabled.")
        user = await self.create_account(name, email, password)
        token = await self.storage.create_verification_token(
            user.id, TokenType.EMAIL, generate_token(),
            utcnow() + timedelta(hours=config.Auth.VERIFICATION_TTL_HOURS),
        )
        logger.info(f"Registered user {user.id} ({user.email})")
        return user, token, self.sessions.open(user.id)

    async def login(self, email: str, password: str) -> tuple[UserRecord, str]:
        user = await self.storage.get_user_by_email(email.strip())
        if not user or not verify_password(password, user.password):
            raise InvalidCredentials()
        if user.is_blocked:
            logger.warning(f"Blocked user {user.id} attempted to log in")
            raise AccountBlocked()
        logger.info(f"User {user.id} logged in")
        return user, self.sessions.open(user.id)

    def logout(self, session_token: str | None) -> None:
        self.sessions.destroy(session_token)

    async def current_user(self, session_token: str | None) -> UserRecord:
        user_id = self.sessions.resolve(session_token)
        if user_id is None:
            raise Unauthenticated()
        user = await self.storage.get_user(user_id)
        if not user:
            self.sessions.destroy(session_token)
            raise Unauthenticated()
        return user

    async def reset_password(self, email: str) -> None:
        """
        Always succeeds so callers cannot probe which emails are registered.
        A reset token is stored for known accounts, but there is no mail
        transport to deliver it yet.
        """
        user = await self.storage.get_user_by_email(email.strip())
        if not user:
            return
        await self.storage.create_verification_token(
            user.id, TokenType.PASSWORD_RESET, generate_token(),
            utcnow() + timedelta(hours=config.Auth.RESET_TTL_HOURS),
        )
        logger.warning(f"Password reset requested for user {user.id}, but no mail transport is configured")

    async def _consume_token(self, token: str, type: TokenType) -> VerificationTokenRecord:
        record = await self.storage.get_verification_token(token)
        if not record or record.type is not type:
            raise ValidationError("Invalid or expired token")
        await self.storage.delete_verification_token(record.id)
        if record.expired:
            raise ValidationError("Token has expired")
        return record

    async def confirm_password_reset(self, token: str, password: str) -> UserRecord:
        check_password_strength(password)
        record = await self._consume_token(token, TokenType.PASSWORD_RESET)
        user = await self.storage.update_user(record.user_id, password=hash_password(password))
        if not user:
            raise ValidationError("Invalid or expired token")
        self.sessions.drop_user(user.id)
        logger.info(f"Password reset for user {user.id}")
        return user

    async def verify_email(self, token: str) -> tuple[UserRecord, str]:
        record = await self._consume_token(token, TokenType.EMAIL)
        user = await self.storage.update_user(record.user_id, is_email_verified=True)
        if not user:
            raise ValidationError("Invalid or expired token")
        return user, self.sessions.open(user.id)

    async def ensure_admin(self, email: str | None, password: str | None) -> UserRecord | None:
        """Creates the configured admin account on first start."""
        if not email or not password:
            return None
        if user := await self.storage.get_user_by_email(email):
            return user
        user = await self.create_account("Admin", email, password, role=Role.ADMIN, is_email_verified=True)
        logger.info(f"Created admin account {user.email}")
        return user
