import secrets
import time


class SessionRegistry:
    """
    Server-side session state. The signed session cookie only carries the
    opaque token handed out by `open`; the user id stays on the server.
    """

    def __init__(self, max_age: int) -> None:
        self.max_age = max_age
        self._sessions: dict[str, tuple[int, float]] = {}

    def open(self, user_id: int) -> str:
        now = time.monotonic()
        self.purge(now)
        token = secrets.token_hex(32)
        self._sessions[token] = (user_id, now + self.max_age)
        return token

    def purge(self, now: float | None = None) -> int:
        """Forgets expired sessions whose cookies were never presented again."""
        now = time.monotonic() if now is None else now
        expired = [token for token, (_, expires) in self._sessions.items() if expires < now]
        for token in expired:
            del self._sessions[token]
        return len(expired)

    def __len__(self) -> int:
        return len(self._sessions)

    def resolve(self, token: str | None) -> int | None:
        if not token or not (entry := self._sessions.get(token)):
            return None
        user_id, expires = entry
        if expires < time.monotonic():
            del self._sessions[token]
            return None
        return user_id

    def destroy(self, token: str | None) -> None:
        if token:
            self._sessions.pop(token, None)

    def drop_user(self, user_id: int) -> int:
        stale = [token for token, (uid, _) in self._sessions.items() if uid == user_id]
        for token in stale:
            del self._sessions[token]
        return len(stale)
