"""OtpVerifier: check a submitted TOTP code and enable 2FA on first success."""

import enum
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime, timezone

from twofa.core.config import settings
from twofa.core.errors import NotEnrolled
from twofa.core.logging import get_logger
from twofa.core.totp import generate_totp_secret, matching_timecode
from twofa.services.store import TwoFactorStore

logger = get_logger(__name__)

# compared against when the account has no secret, so that path costs the same
_DECOY_SECRET = generate_totp_secret()
_CAS_ATTEMPTS = 3


class VerificationStatus(str, enum.Enum):
    SUCCESS = "success"
    INVALID_CODE = "invalid_code"


@dataclass(frozen=True)
class VerificationResult:
    status: VerificationStatus
    # True only on the call that moved the account from pending to enabled
    newly_enabled: bool = False

    @property
    def ok(self) -> bool:
        return self.status is VerificationStatus.SUCCESS


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class OtpVerifier:
    def __init__(
        self,
        store: TwoFactorStore,
        clock: Callable[[], datetime] = _utcnow,
        window: int | None = None,
    ):
        self.store = store
        self.clock = clock
        self.window = settings.TOTP_VALID_WINDOW if window is None else window

    async def verify(self, account_id: str, submitted_code: str) -> VerificationResult:
        """Validate `submitted_code` against the account's stored secret.

        A match on a pending account enables it; a match on an enabled account
        is a plain login check. Steps at or before the last accepted one are
        replays and fail like a wrong code. Mismatches never touch the store.

        The accepting write is conditional on the record read at the start, so
        a secret replaced by a concurrent enroll is never marked verified. On a
        lost race the whole check is redone against the fresh record.
        """
        for _ in range(_CAS_ATTEMPTS):
            record = await self.store.get(account_id)
            now = self.clock()

            if record.totp_secret is None:
                matching_timecode(_DECOY_SECRET, submitted_code, now, self.window)
                self._log_failure(account_id, "not_enrolled")
                raise NotEnrolled(account_id)

            timecode = matching_timecode(record.totp_secret, submitted_code, now, self.window)
            if timecode is None:
                return self._reject(account_id, "invalid_code")
            if record.last_timecode is not None and timecode <= record.last_timecode:
                return self._reject(account_id, "replay")

            accepted = replace(
                record,
                totp_verified=True,
                last_timecode=timecode,
                verified_at=record.verified_at or now,
            )
            if await self.store.set(account_id, accepted, expected=record):
                if not record.totp_verified:
                    logger.info("TOTP enabled", extra={"account_id": account_id})
                return VerificationResult(VerificationStatus.SUCCESS, newly_enabled=not record.totp_verified)

            logger.info("2FA record changed during verification, retrying", extra={"account_id": account_id})

        return self._reject(account_id, "conflict")

    def _reject(self, account_id: str, reason: str) -> VerificationResult:
        self._log_failure(account_id, reason)
        return VerificationResult(VerificationStatus.INVALID_CODE)

    @staticmethod
    def _log_failure(account_id: str, reason: str) -> None:
        logger.warning("TOTP verification failed", extra={"account_id": account_id, "reason": reason})
