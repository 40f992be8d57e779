"""Shared test constants and helpers."""

from collections.abc import Callable
from datetime import datetime, timedelta
from itertools import permutations

import pyotp

ACCOUNT_ID = "A1"
ACCOUNT_EMAIL = "a@example.com"
ACCOUNT_PASSWORD = "correct horse battery staple"

# fixed 160-bit secrets; with a frozen clock every code they produce is fixed too
SECRETS = (
    "JBSWY3DPEHPK3PXPJBSWY3DPEHPK3PXP",
    "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ",
    "MFRGGZDFMZTWQ2LKMFRGGZDFMZTWQ2LK",
    "KRSXG5CTMVRXEZLUKRSXG5CTMVRXEZLU",
    "ONSWG4TFOQYTEMZUONSWG4TFOQYTEMZU",
)


class FrozenClock:
    """Injectable clock; tests move it explicitly."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


def code_for(secret: str, when: datetime, steps: int = 0) -> str:
    return pyotp.TOTP(secret).at(when + timedelta(seconds=30 * steps))


def in_window(secret: str, when: datetime) -> set[str]:
    """Codes accepted at `when` with the default window of one step."""
    return {code_for(secret, when, k) for k in (-1, 0, 1)}


def pick_secret(accept: Callable[[str], bool]) -> str:
    """First fixed secret satisfying `accept`."""
    return next(s for s in SECRETS if accept(s))


def pick_pair(accept: Callable[[str, str], bool]) -> tuple[str, str]:
    return next(pair for pair in permutations(SECRETS, 2) if accept(*pair))
