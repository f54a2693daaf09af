"""In-Memory Identity Provider"""
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional, Tuple
from uuid import uuid4

from domain.auth import AdminSession, AdminUser, AdminUserInDB
from domain.enums import AuthErrorCode
from domain.exceptions import AuthError
from domain.repositories import IdentityProvider
from infrastructure.logging_config import get_logger
from infrastructure.security import (
    create_access_token, decode_access_token, get_password_hash, verify_password
)

logger = get_logger("identity")


class InMemoryIdentityProvider(IdentityProvider):
    """Email/password sign-in for admin users with per-email lockout.

    Failed attempts are counted inside a window of ``lockout_minutes`` that
    starts at the first failure; once the window passes the count starts over
    and the entry is dropped. Revoked token ids are kept only until the token
    would have expired anyway.
    """

    def __init__(
        self,
        max_failed_attempts: int = 5,
        lockout_minutes: int = 15,
        token_expire_minutes: int = 30
    ):
        self.max_failed_attempts = max_failed_attempts
        self.lockout = timedelta(minutes=lockout_minutes)
        self.token_expiry = timedelta(minutes=token_expire_minutes)
        self._users: Dict[str, AdminUserInDB] = {}
        # email -> (failure count, time of first failure in the window)
        self._failed_attempts: Dict[str, Tuple[int, datetime]] = {}
        self._locked_until: Dict[str, datetime] = {}
        # jti -> token expiry
        self._revoked: Dict[str, datetime] = {}

    @staticmethod
    def _key(email: str) -> str:
        return email.strip().lower()

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)

    def add_user(self, email: str, password: str, display_name: Optional[str] = None,
                 disabled: bool = False) -> AdminUser:
        """Register an admin account"""
        user = AdminUserInDB(
            email=self._key(email),
            display_name=display_name,
            disabled=disabled,
            hashed_password=get_password_hash(password)
        )
        self._users[user.email] = user
        return AdminUser(**user.model_dump(exclude={"hashed_password"}))

    # ==================== THROTTLING ====================
    def _prune_attempts(self, now: datetime) -> None:
        """Forget expired lockouts and failure windows"""
        for key in [k for k, until in self._locked_until.items() if now >= until]:
            del self._locked_until[key]
            self._failed_attempts.pop(key, None)
        for key in [k for k, (_, first) in self._failed_attempts.items()
                    if now - first >= self.lockout and k not in self._locked_until]:
            del self._failed_attempts[key]

    def _is_locked(self, key: str) -> bool:
        return key in self._locked_until

    def _record_failure(self, key: str, now: datetime) -> None:
        attempts, first = self._failed_attempts.get(key, (0, now))
        attempts += 1
        self._failed_attempts[key] = (attempts, first)
        if attempts >= self.max_failed_attempts:
            self._locked_until[key] = now + self.lockout
            logger.warning("Locking out %s after %d failed sign-in attempts", key, attempts)

    # ==================== REVOCATION ====================
    def _prune_revoked(self, now: datetime) -> None:
        for jti in [j for j, expires in self._revoked.items() if expires <= now]:
            del self._revoked[jti]

    # ==================== IDENTITY PROVIDER ====================
    async def sign_in(self, email: str, password: str) -> AdminSession:
        key = self._key(email)
        now = self._now()
        self._prune_attempts(now)
        if self._is_locked(key):
            raise AuthError(AuthErrorCode.TOO_MANY_REQUESTS)

        user = self._users.get(key)
        if user is None:
            self._record_failure(key, now)
            raise AuthError(AuthErrorCode.USER_NOT_FOUND)
        if user.disabled:
            raise AuthError(AuthErrorCode.INVALID_CREDENTIAL)
        if not verify_password(password, user.hashed_password):
            self._record_failure(key, now)
            raise AuthError(AuthErrorCode.WRONG_PASSWORD)

        self._failed_attempts.pop(key, None)
        expires_at = now + self.token_expiry
        token = create_access_token(
            data={"sub": user.email, "jti": uuid4().hex},
            expires_delta=self.token_expiry
        )
        logger.info("Admin %s signed in", user.email)
        return AdminSession(
            access_token=token,
            expires_at=expires_at,
            user=AdminUser(**user.model_dump(exclude={"hashed_password"}))
        )

    async def sign_out(self, token: str) -> None:
        now = self._now()
        self._prune_revoked(now)
        payload = decode_access_token(token)
        if payload is None:
            return
        expires = now + self.token_expiry
        if "exp" in payload:
            expires = datetime.fromtimestamp(payload["exp"], timezone.utc)
        self._revoked[payload.get("jti", token)] = expires
        logger.info("Admin %s signed out", payload.get("sub"))

    async def verify_token(self, token: str) -> Optional[AdminUser]:
        self._prune_revoked(self._now())
        payload = decode_access_token(token)
        if payload is None or payload.get("jti", token) in self._revoked:
            return None
        user = self._users.get(self._key(payload.get("sub") or ""))
        if user is None:
            return None
        return AdminUser(**user.model_dump(exclude={"hashed_password"}))
