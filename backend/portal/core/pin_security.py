"""Producer PIN gate: hashing, attempt rate limiting and session marker.

Security model:
- PINs are stored as bcrypt hashes (cost 10) and only ever compared through
  bcrypt's own verify routine
- After PIN_MAX_ATTEMPTS failures the client is locked out for
  PIN_LOCKOUT_MINUTES; while locked, no hash comparison is performed at all
- A successful verification sets an 8 hour session marker and clears the
  attempt record

State lives in a KeyValueStore scoped to one browser client (see
portal.core.storage). Timestamps are stored in epoch milliseconds.
"""

import hashlib
import hmac
import json
import logging
import math
import re
import time
from dataclasses import dataclass
from typing import Callable

from passlib.context import CryptContext

from portal.core.config import settings
from portal.core.logging_config import format_security_event
from portal.core.storage import KeyValueStore

logger = logging.getLogger("security.auth")

pin_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.PIN_BCRYPT_ROUNDS,
)

ATTEMPTS_KEY = "pin_attempts"
SESSION_KEY = "pin_authenticated"

# Attempt records outlive a full lockout window by this much, then expire
ATTEMPT_RECORD_MARGIN_SECONDS = 60 * 60

LEGACY_HASH_PATTERN = re.compile(r"^[a-fA-F0-9]{32}$")

Clock = Callable[[], float]


def _now_ms(clock: Clock) -> int:
    return int(clock() * 1000)


def hash_pin(pin: str) -> str:
    """Hash a PIN with bcrypt."""
    return pin_context.hash(pin)


def verify_pin(pin: str, pin_hash: str) -> bool:
    """Verify a PIN against a bcrypt hash.

    Malformed or unrecognised hashes verify as False instead of raising.
    """
    if not pin or not pin_hash:
        return False
    try:
        return pin_context.verify(pin, pin_hash)
    except (ValueError, TypeError):
        logger.error("PIN hash could not be parsed", extra={"event_type": "security.auth.pin_hash_invalid"})
        return False


def is_legacy_hash(pin_hash: str) -> bool:
    """Check whether a stored hash is a legacy 32-hex MD5 digest."""
    return bool(pin_hash) and LEGACY_HASH_PATTERN.match(pin_hash) is not None


def verify_pin_with_migration(pin: str, pin_hash: str, allow_legacy: bool = False) -> bool:
    """Verify a PIN against either a bcrypt hash or a legacy MD5 digest.

    Legacy digests only verify when allow_legacy is set; otherwise they are
    treated as invalid, forcing the PIN to be re-hashed with bcrypt.

    Deprecated: drop the MD5 branch once ADMIN_PIN_HASH is bcrypt everywhere.
    """
    if is_legacy_hash(pin_hash):
        if not allow_legacy:
            logger.warning(
                "Legacy MD5 PIN hash rejected; regenerate ADMIN_PIN_HASH with scripts/hash_pin.py",
                extra={"event_type": "security.auth.legacy_pin_hash_rejected"},
            )
            return False
        logger.warning(
            "Using legacy MD5 PIN verification; migrate ADMIN_PIN_HASH to bcrypt",
            extra={"event_type": "security.auth.legacy_pin_hash_used"},
        )
        digest = hashlib.md5(pin.encode("utf-8")).hexdigest()
        return hmac.compare_digest(digest, pin_hash.lower())

    return verify_pin(pin, pin_hash)


@dataclass
class AttemptRecord:
    """Failed PIN attempts for one client."""

    count: int
    last_attempt: int
    locked_until: int | None = None

    def to_json(self) -> str:
        data = {"count": self.count, "lastAttempt": self.last_attempt}
        if self.locked_until is not None:
            data["lockedUntil"] = self.locked_until
        return json.dumps(data)


@dataclass
class LockoutStatus:
    is_locked: bool
    remaining_seconds: int | None = None


@dataclass
class FailedAttemptResult:
    locked: bool
    remaining_attempts: int | None = None
    lockout_seconds: int | None = None


@dataclass
class PinVerification:
    """Outcome of one PIN verification through the gate."""

    ok: bool
    locked: bool = False
    remaining_attempts: int | None = None
    lockout_seconds: int | None = None


class PinRateLimiter:
    """Counts failed PIN attempts and enforces the timed lockout."""

    def __init__(
        self,
        store: KeyValueStore,
        max_attempts: int | None = None,
        lockout_minutes: int | None = None,
        clock: Clock = time.time,
    ):
        self.store = store
        self.max_attempts = max_attempts or settings.PIN_MAX_ATTEMPTS
        self.lockout_ms = (lockout_minutes or settings.PIN_LOCKOUT_MINUTES) * 60 * 1000
        self.clock = clock

    @property
    def record_ttl_seconds(self) -> float:
        return self.lockout_ms / 1000 + ATTEMPT_RECORD_MARGIN_SECONDS

    def _load(self) -> AttemptRecord:
        raw = self.store.get(ATTEMPTS_KEY)
        if not raw:
            return AttemptRecord(count=0, last_attempt=_now_ms(self.clock))
        try:
            data = json.loads(raw)
            return AttemptRecord(
                count=int(data.get("count", 0)),
                last_attempt=int(data.get("lastAttempt", 0)),
                locked_until=data.get("lockedUntil"),
            )
        except (ValueError, TypeError, AttributeError):
            return AttemptRecord(count=0, last_attempt=_now_ms(self.clock))

    def _save(self, record: AttemptRecord) -> None:
        self.store.set(ATTEMPTS_KEY, record.to_json(), ttl_seconds=self.record_ttl_seconds)

    def check_lockout(self) -> LockoutStatus:
        """Report whether the client is locked out.

        An elapsed lockout is cleared (attempt record reset) before
        reporting "not locked".
        """
        record = self._load()
        if not record.locked_until:
            return LockoutStatus(is_locked=False)

        now = _now_ms(self.clock)
        if now < record.locked_until:
            remaining_seconds = math.ceil((record.locked_until - now) / 1000)
            return LockoutStatus(is_locked=True, remaining_seconds=remaining_seconds)

        self.reset_attempts()
        return LockoutStatus(is_locked=False)

    def record_failed_attempt(self) -> FailedAttemptResult:
        """Record a failure, locking the client once the threshold is reached."""
        record = self._load()
        record.count += 1
        record.last_attempt = _now_ms(self.clock)

        if record.count >= self.max_attempts:
            record.locked_until = record.last_attempt + self.lockout_ms
            self._save(record)
            return FailedAttemptResult(
                locked=True,
                lockout_seconds=math.ceil(self.lockout_ms / 1000),
            )

        self._save(record)
        return FailedAttemptResult(
            locked=False,
            remaining_attempts=self.max_attempts - record.count,
        )

    def reset_attempts(self) -> None:
        self.store.remove(ATTEMPTS_KEY)

    def get_remaining_attempts(self) -> int:
        return max(0, self.max_attempts - self._load().count)


class PinSession:
    """Session marker set after a successful PIN entry."""

    def __init__(
        self,
        store: KeyValueStore,
        duration_hours: int | None = None,
        clock: Clock = time.time,
    ):
        self.store = store
        self.duration_ms = (duration_hours or settings.PIN_SESSION_HOURS) * 60 * 60 * 1000
        self.clock = clock

    def set_authenticated(self) -> int:
        """Mark the client authenticated; returns the expiry in epoch ms."""
        expires_at = _now_ms(self.clock) + self.duration_ms
        self.store.set(SESSION_KEY, str(expires_at), ttl_seconds=self.duration_ms / 1000)
        self.store.remove(ATTEMPTS_KEY)
        return expires_at

    def is_authenticated(self) -> bool:
        """True while the marker exists and has not expired.

        An expired or unreadable marker is removed and reads as no session.
        """
        raw = self.store.get(SESSION_KEY)
        if not raw:
            return False
        try:
            expires_at = int(raw)
        except ValueError:
            self.clear_authentication()
            return False

        if _now_ms(self.clock) > expires_at:
            self.clear_authentication()
            return False
        return True

    def expires_at(self) -> int | None:
        raw = self.store.get(SESSION_KEY)
        return int(raw) if raw and raw.isdigit() else None

    def clear_authentication(self) -> None:
        self.store.remove(SESSION_KEY)


class PinGate:
    """Lockout check, PIN verification and session handling for one client."""

    def __init__(
        self,
        store: KeyValueStore,
        pin_hash: str | None = None,
        allow_legacy: bool | None = None,
        clock: Clock = time.time,
    ):
        self.pin_hash = settings.ADMIN_PIN_HASH if pin_hash is None else pin_hash
        self.allow_legacy = settings.ALLOW_LEGACY_PIN_HASH if allow_legacy is None else allow_legacy
        self.limiter = PinRateLimiter(store, clock=clock)
        self.session = PinSession(store, clock=clock)

    def verify(self, pin: str, ip_address: str | None = None) -> PinVerification:
        """Verify a PIN entry.

        A locked-out client is rejected before any hash work is done.
        """
        lockout = self.limiter.check_lockout()
        if lockout.is_locked:
            logger.warning(
                "PIN attempt rejected during lockout",
                extra=format_security_event(
                    event_type="security.auth.pin_locked",
                    severity="warning",
                    description="PIN attempt during active lockout",
                    ip_address=ip_address,
                    metadata={"remaining_seconds": lockout.remaining_seconds},
                ),
            )
            return PinVerification(ok=False, locked=True, lockout_seconds=lockout.remaining_seconds)

        if verify_pin_with_migration(pin, self.pin_hash, allow_legacy=self.allow_legacy):
            self.session.set_authenticated()
            logger.info(
                "PIN authentication successful",
                extra=format_security_event(
                    event_type="security.auth.pin_success",
                    severity="info",
                    description="Producer PIN accepted",
                    ip_address=ip_address,
                ),
            )
            return PinVerification(ok=True, remaining_attempts=self.limiter.max_attempts)

        result = self.limiter.record_failed_attempt()
        logger.warning(
            "PIN authentication failed",
            extra=format_security_event(
                event_type="security.auth.pin_failure",
                severity="high" if result.locked else "warning",
                description="Producer PIN rejected" + (" - lockout started" if result.locked else ""),
                ip_address=ip_address,
                metadata={"remaining_attempts": result.remaining_attempts},
            ),
        )
        return PinVerification(
            ok=False,
            locked=result.locked,
            remaining_attempts=result.remaining_attempts,
            lockout_seconds=result.lockout_seconds,
        )

    def is_authenticated(self) -> bool:
        return self.session.is_authenticated()

    def logout(self) -> None:
        self.session.clear_authentication()
