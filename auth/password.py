"""
Password hashing and verification.

bcrypt embeds a fresh random salt and the work factor in every digest,
so ``hash_password`` never returns the same string twice and
``verify_password`` needs nothing but the stored hash.
"""

from __future__ import annotations

from functools import lru_cache

import bcrypt

from config.settings import config

# bcrypt only reads the first 72 bytes of its input; 5.x rejects longer ones.
MAX_PASSWORD_BYTES = 72


def hash_password(password: str) -> str:
    """Hash with bcrypt at ``config.bcrypt_rounds``."""
    return bcrypt.hashpw(
        password.encode(), bcrypt.gensalt(rounds=config.bcrypt_rounds)
    ).decode()


def verify_password(password: str, password_hash: str) -> bool:
    """Check ``password`` against a stored digest; malformed digests never match."""
    try:
        return bcrypt.checkpw(password.encode(), password_hash.encode())
    except (ValueError, TypeError):
        return False


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return hash_password("dummy-password-for-unknown-accounts")


def burn_verification(password: str) -> None:
    """
    Spend one verification's worth of work for an unknown account so a
    missing email costs the same time as a wrong password.
    """
    verify_password(password, _dummy_hash())
