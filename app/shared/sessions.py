# app/shared/sessions.py
import asyncio
import logging
import secrets
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict

from jose import jwt  # python-jose[cryptography]

from app.shared.errors import InvalidOrExpired

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class SessionEntry:
    user_id: str
    expires_at: datetime


class SessionRegistry:
    """
    Issues bearer tokens and answers "which user is this token for?".

    Tokens are HS256 JWTs carrying the user id and expiry, but the in-memory
    table is the only thing consulted on validation: an unregistered token is
    rejected even if its signature is good, and expiry is checked against the
    stored ``expires_at``, not the token's ``exp`` claim.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        ttl: timedelta = timedelta(hours=24),
        sweep_threshold: int = 1000,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._secret = secret
        self._algorithm = algorithm
        self._ttl = ttl
        self._sweep_threshold = sweep_threshold
        self._clock = clock
        self._sessions: Dict[str, SessionEntry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def create_session(self, user_id: str) -> str:
        now = self._clock()
        expires_at = now + self._ttl
        token = jwt.encode(
            {
                "user_id": user_id,
                "sub": user_id,
                "iat": int(now.timestamp()),
                "exp": int(expires_at.timestamp()),
                "jti": secrets.token_hex(8),
            },
            self._secret,
            algorithm=self._algorithm,
        )
        with self._lock:
            self._sessions[token] = SessionEntry(user_id=user_id, expires_at=expires_at)
        logger.info("session issued for %s (expires %s)", user_id, expires_at.isoformat())
        return token

    def validate_token(self, token: str) -> str:
        with self._lock:
            if len(self._sessions) > self._sweep_threshold:
                self._sweep_locked()

            entry = self._sessions.get(token)
            if entry is None:
                raise InvalidOrExpired("invalid or expired session")
            if self._clock() > entry.expires_at:
                del self._sessions[token]
                raise InvalidOrExpired("invalid or expired session")
            return entry.user_id

    def sweep(self) -> int:
        """Drop every expired entry; returns how many were removed."""
        with self._lock:
            return self._sweep_locked()

    def _sweep_locked(self) -> int:
        now = self._clock()
        expired = [t for t, e in self._sessions.items() if now > e.expires_at]
        for t in expired:
            del self._sessions[t]
        if expired:
            logger.info("swept %d expired sessions (%d left)", len(expired), len(self._sessions))
        return len(expired)


async def sweep_periodically(registry: SessionRegistry, interval: float) -> None:
    """Run ``registry.sweep()`` every ``interval`` seconds until cancelled."""
    while True:
        await asyncio.sleep(interval)
        registry.sweep()
