import logging
import time
import uuid
from datetime import datetime, timezone

from sqlalchemy import text
from sqlalchemy.orm import Session

from jobmarket.config import settings
from jobmarket.errors import AuthenticationError, ThrottledError, ValidationError
from jobmarket.models.account import Account
from jobmarket.utils.security import generate_token, hash_password, verify_password

logger = logging.getLogger(__name__)


class IdentityService:
    """Credentials and bearer sessions.

    Accounts are persisted; session tokens live in memory only and are lost on
    restart, after which clients sign in again.
    """

    def __init__(self):
        self._active_tokens: dict[str, tuple[str, float]] = {}  # token -> (user_id, expires_at)

    def _cleanup_expired(self):
        now = time.time()
        self._active_tokens = {
            t: (uid, exp) for t, (uid, exp) in self._active_tokens.items() if exp > now
        }

    def _issue_token(self, user_id: str) -> str:
        token = generate_token()
        self._active_tokens[token] = (user_id, time.time() + settings.session_ttl_seconds)
        return token

    def create_account(self, db: Session, email: str, password: str) -> str:
        """Stage a new account on ``db`` and return its id. The caller commits."""
        email = email.strip().lower()
        if db.query(Account).filter_by(email=email).first():
            raise ValidationError("email", "A user with this email address has already been registered")

        now = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        account = Account(
            id=str(uuid.uuid4()),
            email=email,
            password_hash=hash_password(password),
            created_at=now,
        )
        db.add(account)
        db.flush()
        return account.id

    def start_session(self, user_id: str) -> str:
        return self._issue_token(user_id)

    def sign_in(self, db: Session, email: str, password: str, throttle_key: str) -> tuple[str, str]:
        """Return ``(user_id, token)`` for valid credentials."""
        delay = self._get_throttle_delay(db, throttle_key)
        if delay > 0:
            raise ThrottledError(delay)

        account = db.query(Account).filter_by(email=email.strip().lower()).first()
        if account is None or not verify_password(account.password_hash, password):
            logger.warning("Failed sign-in for %s", throttle_key)
            self._record_failed_attempt(db, throttle_key)
            raise AuthenticationError("Invalid login credentials")

        self._reset_failed_attempts(db, throttle_key)
        return account.id, self._issue_token(account.id)

    def verify(self, token: str) -> str | None:
        """Resolve ``token`` to a user id and slide its expiry forward."""
        self._cleanup_expired()
        session = self._active_tokens.get(token)
        if session is None:
            return None
        user_id, _ = session
        self._active_tokens[token] = (user_id, time.time() + settings.session_ttl_seconds)
        return user_id

    def sign_out(self, token: str):
        self._active_tokens.pop(token, None)

    def revoke_all(self):
        self._active_tokens.clear()

    def _get_throttle_delay(self, db: Session, key: str) -> float:
        row = db.execute(
            text("SELECT failed_attempts, last_failed_at FROM auth_throttle WHERE key = :key"),
            {"key": key},
        ).fetchone()
        if not row:
            return 0
        failed_attempts = int(row[0])
        last_failed_at = float(row[1])

        if failed_attempts < 3:
            return 0
        if failed_attempts < 5:
            delay = 5.0
        elif failed_attempts < 10:
            delay = 30.0
        else:
            delay = 300.0
        remaining = delay - (time.time() - last_failed_at)
        return max(0, remaining)

    def _record_failed_attempt(self, db: Session, key: str):
        db.execute(
            text(
                """
                INSERT INTO auth_throttle (key, failed_attempts, last_failed_at)
                VALUES (:key, 1, :now)
                ON CONFLICT(key) DO UPDATE SET
                    failed_attempts = failed_attempts + 1,
                    last_failed_at = :now
                """
            ),
            {"key": key, "now": time.time()},
        )
        db.commit()

    def _reset_failed_attempts(self, db: Session, key: str):
        db.execute(
            text(
                """
                INSERT INTO auth_throttle (key, failed_attempts, last_failed_at)
                VALUES (:key, 0, :now)
                ON CONFLICT(key) DO UPDATE SET
                    failed_attempts = 0,
                    last_failed_at = :now
                """
            ),
            {"key": key, "now": time.time()},
        )
        db.commit()


identity_service = IdentityService()
