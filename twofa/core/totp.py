"""RFC 6238 helpers: secret generation, Key URI construction, code matching."""

import hashlib
from datetime import datetime

import pyotp
from pyotp.utils import strings_equal

from twofa.core.config import settings

# 32 base32 chars = 160 bits
SECRET_LENGTH = 32


def generate_totp_secret() -> str:
    return pyotp.random_base32(length=SECRET_LENGTH)


def build_totp(secret: str) -> pyotp.TOTP:
    return pyotp.TOTP(
        secret,
        digits=settings.TOTP_DIGITS,
        digest=getattr(hashlib, settings.TOTP_DIGEST),
        interval=settings.TOTP_INTERVAL,
        issuer=settings.TOTP_ISSUER,
    )


def provisioning_uri(secret: str, email: str, issuer: str | None = None) -> str:
    """otpauth://totp/{issuer}:{email}?secret=...&issuer=... (Key URI format)."""
    return build_totp(secret).provisioning_uri(name=email, issuer_name=issuer or settings.TOTP_ISSUER)


def normalize_code(code: str) -> str:
    return "".join(str(code).split())


def matching_timecode(secret: str, code: str, for_time: datetime, window: int | None = None) -> int | None:
    """Return the time-step counter the code belongs to, or None.

    Every step in [current - window, current + window] is compared in constant
    time, with no early exit, so a miss costs the same as a hit. When more than
    one step matches, the earliest wins.
    """
    if window is None:
        window = settings.TOTP_VALID_WINDOW
    totp = build_totp(secret)
    code = normalize_code(code)
    # ASCII only: strings_equal normaliza NFKC y aceptaría dígitos fullwidth
    well_formed = len(code) == totp.digits and code.isascii() and code.isdigit()

    current = totp.timecode(for_time)
    matched: int | None = None
    for counter in range(current - window, current + window + 1):
        if counter < 0:
            continue
        hit = strings_equal(code, totp.generate_otp(counter))
        if hit and well_formed and matched is None:
            matched = counter
    return matched
