from datetime import timedelta

import pytest

from shamscloud import config
from shamscloud.errors import (AccountBlocked, EmailTaken, Forbidden, InvalidCredentials, Unauthenticated,
                               ValidationError)
from shamscloud.records import Role, TokenType, utcnow
from shamscloud.sessions import SessionRegistry


async def test_register_creates_user_and_session(services, settings):
    user, token, session = await services.auth.register("Alice", "alice@example.com", "secret123")

    assert user.role is Role.USER
    assert user.quota == settings.default_quota
    assert user.used_space == 0
    assert user.password != "secret123"
    assert token.type is TokenType.EMAIL
    assert (await services.auth.current_user(session)).id == user.id


async def test_register_rejects_taken_email(services):
    await services.auth.register("Alice", "alice@example.com", "secret123")
    with pytest.raises(EmailTaken):
        await services.auth.register("Other", "ALICE@example.com", "secret456")


async def test_register_validates_input(services):
    with pytest.raises(ValidationError):
        await services.auth.register("Bad", "not-an-email", "secret123")
    with pytest.raises(ValidationError):
        await services.auth.register("Short", "short@example.com", "123")


async def test_passwords_longer_than_bcrypt_limit_are_rejected(services):
    with pytest.raises(ValidationError):
        await services.auth.register("Long", "long@example.com", "p" * 80)
    with pytest.raises(ValidationError):
        await services.auth.create_account("Wide", "wide@example.com", "é" * 40)
    assert not services.storage.users

    await services.auth.register("Alice", "alice@example.com", "secret123")
    await services.auth.reset_password("alice@example.com")
    [reset] = [t for t in services.storage.tokens.values() if t.type is TokenType.PASSWORD_RESET]
    with pytest.raises(ValidationError):
        await services.auth.confirm_password_reset(reset.token, "p" * 80)
    with pytest.raises(InvalidCredentials):
        await services.auth.login("alice@example.com", "p" * 80)


async def test_register_can_be_disabled(services, monkeypatch):
    monkeypatch.setattr(config.Auth, "REGISTRATION_ENABLED", False)
    with pytest.raises(Forbidden):
        await services.auth.register("Alice", "alice@example.com", "secret123")


async def test_login(services):
    user, _, _ = await services.auth.register("Alice", "alice@example.com", "secret123")

    logged_in, session = await services.auth.login("alice@example.com", "secret123")
    assert logged_in.id == user.id
    assert services.sessions.resolve(session) == user.id

    with pytest.raises(InvalidCredentials):
        await services.auth.login("alice@example.com", "wrong-password")
    with pytest.raises(InvalidCredentials):
        await services.auth.login("nobody@example.com", "secret123")


async def test_blocked_user_cannot_login(services):
    user, _, _ = await services.auth.register("Alice", "alice@example.com", "secret123")
    await services.storage.update_user(user.id, is_blocked=True)

    with pytest.raises(AccountBlocked):
        await services.auth.login("alice@example.com", "secret123")
    with pytest.raises(InvalidCredentials):
        await services.auth.login("alice@example.com", "wrong-password")


async def test_logout_destroys_session(services):
    _, _, session = await services.auth.register("Alice", "alice@example.com", "secret123")
    services.auth.logout(session)
    with pytest.raises(Unauthenticated):
        await services.auth.current_user(session)
    services.auth.logout(session)
    services.auth.logout(None)


async def test_current_user_without_session(services):
    with pytest.raises(Unauthenticated):
        await services.auth.current_user(None)
    with pytest.raises(Unauthenticated):
        await services.auth.current_user("made-up")


async def test_reset_password_never_reveals_accounts(services):
    await services.auth.reset_password("nobody@example.com")
    assert not services.storage.tokens

    user, _, _ = await services.auth.register("Alice", "alice@example.com", "secret123")
    await services.auth.reset_password("alice@example.com")
    reset = [t for t in services.storage.tokens.values() if t.type is TokenType.PASSWORD_RESET]
    assert [t.user_id for t in reset] == [user.id]


async def test_confirm_password_reset(services):
    user, _, session = await services.auth.register("Alice", "alice@example.com", "secret123")
    await services.auth.reset_password("alice@example.com")
    [reset] = [t for t in services.storage.tokens.values() if t.type is TokenType.PASSWORD_RESET]

    await services.auth.confirm_password_reset(reset.token, "new-secret")

    with pytest.raises(Unauthenticated):
        await services.auth.current_user(session)
    with pytest.raises(InvalidCredentials):
        await services.auth.login("alice@example.com", "secret123")
    assert (await services.auth.login("alice@example.com", "new-secret"))[0].id == user.id
    with pytest.raises(ValidationError):
        await services.auth.confirm_password_reset(reset.token, "another-one")


async def test_verify_email_consumes_token(services):
    user, token, _ = await services.auth.register("Alice", "alice@example.com", "secret123")
    assert not user.is_email_verified

    verified, session = await services.auth.verify_email(token.token)
    assert verified.is_email_verified
    assert services.sessions.resolve(session) == user.id

    with pytest.raises(ValidationError):
        await services.auth.verify_email(token.token)


async def test_expired_token_is_rejected_and_removed(services):
    user, _, _ = await services.auth.register("Alice", "alice@example.com", "secret123")
    stale = await services.storage.create_verification_token(user.id, TokenType.EMAIL, "stale-token",
                                                             utcnow() - timedelta(minutes=1))
    with pytest.raises(ValidationError):
        await services.auth.verify_email("stale-token")
    assert stale.id not in services.storage.tokens


async def test_reset_token_cannot_verify_email(services):
    await services.auth.register("Alice", "alice@example.com", "secret123")
    await services.auth.reset_password("alice@example.com")
    [reset] = [t for t in services.storage.tokens.values() if t.type is TokenType.PASSWORD_RESET]
    with pytest.raises(ValidationError):
        await services.auth.verify_email(reset.token)


async def test_ensure_admin_is_idempotent(services):
    admin = await services.auth.ensure_admin("root@example.com", "admin123")
    assert admin.role is Role.ADMIN
    again = await services.auth.ensure_admin("root@example.com", "admin123")
    assert again.id == admin.id
    assert await services.auth.ensure_admin(None, None) is None


def test_session_registry_expiry():
    registry = SessionRegistry(max_age=-1)
    token = registry.open(7)
    assert registry.resolve(token) is None


def test_session_registry_drop_user():
    registry = SessionRegistry(max_age=60)
    a, b, c = registry.open(1), registry.open(1), registry.open(2)
    assert registry.drop_user(1) == 2
    assert registry.resolve(a) is None and registry.resolve(b) is None
    assert registry.resolve(c) == 2


def test_opening_a_session_forgets_expired_ones():
    registry = SessionRegistry(max_age=-1)
    registry.open(1)
    registry.open(2)
    registry.max_age = 60
    live = registry.open(3)
    assert len(registry) == 1
    assert registry.resolve(live) == 3
