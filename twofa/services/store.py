"""Per-account 2FA record and the store the core reads and writes it through."""

import asyncio
import enum
from collections.abc import Awaitable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol, TypeVar

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from twofa.core.config import settings
from twofa.core.errors import AccountNotFound, StoreUnavailable
from twofa.core.logging import get_logger
from twofa.models.user import User

logger = get_logger(__name__)

T = TypeVar("T")


class TwoFactorState(str, enum.Enum):
    UNENROLLED = "unenrolled"
    PENDING = "pending"
    ENABLED = "enabled"


@dataclass(frozen=True)
class TwoFactorRecord:
    totp_secret: str | None = field(default=None, repr=False)
    totp_verified: bool = False
    last_timecode: int | None = None
    verified_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.totp_verified and self.totp_secret is None:
            raise ValueError("a verified 2FA record must carry a secret")

    @property
    def state(self) -> TwoFactorState:
        if self.totp_secret is None:
            return TwoFactorState.UNENROLLED
        return TwoFactorState.ENABLED if self.totp_verified else TwoFactorState.PENDING


class TwoFactorStore(Protocol):
    async def get(self, account_id: str) -> TwoFactorRecord:
        """Raise AccountNotFound when the account does not exist."""
        ...

    async def set(self, account_id: str, record: TwoFactorRecord,
                  expected: TwoFactorRecord | None = None) -> bool:
        """Write every field of `record` in one atomic step.

        With `expected`, the write only applies if the stored record still
        equals it; the return value says whether it applied. Without it the
        write is unconditional and always returns True.
        """
        ...


class SqlAlchemyTwoFactorStore:
    """TwoFactorStore over the `users` table.

    Each write is a single UPDATE followed by a commit. A conditional write adds
    the previously read column values to the WHERE clause, so it only lands
    if nobody changed the row in between.
    """

    def __init__(self, db: AsyncSession, timeout: float | None = None):
        self.db = db
        self.timeout = settings.STORE_TIMEOUT_SECONDS if timeout is None else timeout

    async def get(self, account_id: str) -> TwoFactorRecord:
        row = await self._bounded(self._read(account_id))
        if row is None:
            raise AccountNotFound(account_id)
        return TwoFactorRecord(
            totp_secret=row.totp_secret,
            totp_verified=bool(row.totp_verified),
            last_timecode=row.totp_last_timecode,
            verified_at=row.totp_verified_at,
        )

    async def set(self, account_id: str, record: TwoFactorRecord,
                  expected: TwoFactorRecord | None = None) -> bool:
        applied = await self._bounded(self._write(account_id, record, expected))
        if not applied and expected is None:
            raise AccountNotFound(account_id)
        return applied

    async def _read(self, account_id: str):
        res = await self.db.execute(
            select(User.totp_secret, User.totp_verified, User.totp_last_timecode, User.totp_verified_at)
            .where(User.id == account_id)
        )
        return res.one_or_none()

    async def _write(self, account_id: str, record: TwoFactorRecord,
                     expected: TwoFactorRecord | None) -> bool:
        stmt = update(User).where(User.id == account_id)
        if expected is not None:
            stmt = stmt.where(
                User.totp_secret == expected.totp_secret,
                User.totp_verified == expected.totp_verified,
                User.totp_last_timecode == expected.last_timecode,
            )
        stmt = stmt.values(
            totp_secret=record.totp_secret,
            totp_verified=record.totp_verified,
            totp_last_timecode=record.last_timecode,
            totp_verified_at=record.verified_at,
        ).execution_options(synchronize_session=False)
        res = await self.db.execute(stmt)
        if res.rowcount != 1:
            # close the transaction so a retry reads fresh data
            await self.db.rollback()
            return False
        await self.db.commit()
        return True

    async def _bounded(self, aw: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(aw, timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            logger.error("2FA store timed out", extra={"timeout": self.timeout})
            await self._rollback_quietly()
            raise StoreUnavailable("2FA store round-trip timed out") from exc
        except (SQLAlchemyError, OSError) as exc:
            logger.error("2FA store failure", extra={"error": type(exc).__name__})
            await self._rollback_quietly()
            raise StoreUnavailable("2FA store is unavailable") from exc

    async def _rollback_quietly(self) -> None:
        try:
            await self.db.rollback()
        except (SQLAlchemyError, OSError) as exc:
            # the first failure is what the caller needs to see
            logger.warning("rollback after store failure also failed", extra={"error": type(exc).__name__})
