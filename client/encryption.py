"""
Secret encryption: encrypt / decrypt client-side secrets at rest.

Uses Fernet (AES-128-CBC + HMAC-SHA256) from the ``cryptography`` library.
The key is loaded from ``config.client_encryption_key``
(env var: ``CLIENT_ENCRYPTION_KEY``).

If no key is configured, encryption is **disabled** and the pending
registration password is stored as plaintext (with a warning).  Callers
record which of the two they wrote next to the value; the ciphertext
itself carries no marker.  Generate a key with::

    python -c "from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())"
"""

from __future__ import annotations

import logging
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken

from config.settings import config

logger = logging.getLogger(__name__)

FORMAT_FERNET = "fernet"
FORMAT_PLAIN = "plain"


class SecretCipher:
    """Fernet wrapper that degrades to plaintext when no key is set."""

    def __init__(self, key: Optional[str] = None) -> None:
        key = key if key is not None else config.client_encryption_key
        self._fernet: Optional[Fernet] = None
        if not key:
            logger.warning(
                "CLIENT_ENCRYPTION_KEY not set; the pending registration password "
                "will be stored as plaintext."
            )
            return
        self._fernet = Fernet(key.encode() if isinstance(key, str) else key)

    @property
    def enabled(self) -> bool:
        return self._fernet is not None

    @property
    def format(self) -> str:
        """Format tag for values produced by ``encrypt``."""
        return FORMAT_FERNET if self.enabled else FORMAT_PLAIN

    def encrypt(self, plaintext: str) -> str:
        if self._fernet is None:
            return plaintext
        return self._fernet.encrypt(plaintext.encode()).decode()

    def decrypt(self, stored: str, fmt: str = FORMAT_FERNET) -> Optional[str]:
        """
        Return the plaintext of a value written in format ``fmt``, or None
        when it cannot be decrypted with the current key.
        """
        if fmt == FORMAT_PLAIN:
            return stored
        if self._fernet is None:
            logger.error("Encrypted secret found but no CLIENT_ENCRYPTION_KEY is set")
            return None
        try:
            return self._fernet.decrypt(stored.encode()).decode()
        except InvalidToken:
            logger.error("Failed to decrypt stored secret with the configured key")
            return None
