import logging
import secrets
import time
from collections.abc import Callable
from dataclasses import dataclass
from threading import Lock

import bcrypt

logger = logging.getLogger(__name__)

BCRYPT_ROUNDS = 10

DEMO_USERNAME = "student"
DEMO_PASSWORD = "password123"


def hash_password(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """Hash a password with bcrypt and a random salt."""
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=rounds)).decode()


def verify_password(password: str, encoded: str) -> bool:
    """Check a password against a bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode(), encoded.encode())
    except ValueError:
        # Raised for a corrupt stored hash and, on newer bcrypt releases, for
        # passwords longer than 72 bytes
        logger.warning("Password check failed: input or stored hash not usable by bcrypt")
        return False


@dataclass(frozen=True)
class User:
    id: int
    username: str
    password_hash: str


class UserStore:
    """In-memory user table for the auth lab."""

    def __init__(self, users: list[User] | None = None, rounds: int = BCRYPT_ROUNDS):
        self._users = {user.username: user for user in users or []}
        # Unknown usernames are checked against this so both failure paths cost the same
        self._dummy_hash = hash_password(secrets.token_urlsafe(16), rounds=rounds)

    @classmethod
    def with_demo_user(cls) -> "UserStore":
        return cls([User(id=1, username=DEMO_USERNAME, password_hash=hash_password(DEMO_PASSWORD))])

    def get(self, user_id: int) -> User | None:
        for user in self._users.values():
            if user.id == user_id:
                return user
        return None

    def authenticate(self, username: str, password: str) -> User | None:
        """Return the user if the credentials match, otherwise None."""
        user = self._users.get(username)
        if user is None:
            verify_password(password, self._dummy_hash)
            return None
        if not verify_password(password, user.password_hash):
            return None
        return user


@dataclass(frozen=True)
class Session:
    user_id: int
    expires_at: float


class SessionStore:
    """Server-side session table keyed by random token.

    All reads and writes go through a single lock. Nothing is persisted.
    """

    def __init__(self, ttl: int = 3600, clock: Callable[[], float] = time.time):
        self.ttl = ttl
        self._clock = clock
        self._sessions: dict[str, Session] = {}
        self._lock = Lock()

    def create(self, user_id: int) -> str:
        token = secrets.token_urlsafe(32)
        with self._lock:
            self._sessions[token] = Session(user_id=user_id, expires_at=self._clock() + self.ttl)
        return token

    def get(self, token: str) -> Session | None:
        """Get a live session, deleting it if it has expired."""
        with self._lock:
            session = self._sessions.get(token)
            if session is None:
                return None
            if self._clock() > session.expires_at:
                del self._sessions[token]
                return None
            return session

    def delete(self, token: str) -> bool:
        with self._lock:
            return self._sessions.pop(token, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
