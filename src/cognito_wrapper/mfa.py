"""TOTP helpers for software-token MFA."""
from __future__ import annotations

import pyotp


def new_totp_secret() -> str:
    """Generate a random base32 TOTP seed."""
    return pyotp.random_base32()


def totp_code(secret: str) -> str:
    """Return the current 6-digit code for a base32 seed."""
    return pyotp.TOTP(secret).now()


def verify_totp(secret: str, code: str | None) -> bool:
    """Check a code against the seed, tolerating one step of clock drift."""
    if not code:
        return False
    return pyotp.TOTP(secret).verify(code, valid_window=1)
