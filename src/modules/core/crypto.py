"""Password hashing service.

Wraps Django's password hashers behind the two-argument contract the
customer handlers depend on: ``hash(plaintext, secondary_key)``.

New hashes always come from the first entry of ``PASSWORD_HASHERS``.  The
secondary key only matters when *checking*: accounts imported from the
legacy shop still carry ``md5(secondary_key + plaintext)`` digests, which
are accepted until the customer's password is re-hashed on the next edit.
"""

from __future__ import annotations

import hashlib

import structlog
from django.contrib.auth.hashers import check_password, identify_hasher, make_password
from django.utils.crypto import constant_time_compare

logger = structlog.get_logger(__name__)


class PasswordHashing:
    """Hashes and verifies customer passwords."""

    def hash(self, plaintext: str, secondary_key: str = "") -> str:
        """Hash ``plaintext`` with the first configured Django hasher.

        ``secondary_key`` is accepted for the legacy call contract but does
        not take part in new hashes; it is only used by ``check_hash`` to
        verify legacy md5 digests.
        """
        if not plaintext:
            raise ValueError("Cannot hash an empty password.")
        return make_password(plaintext)

    def check_hash(self, plaintext: str, hashed: str, secondary_key: str = "") -> bool:
        """Return ``True`` when ``plaintext`` matches ``hashed``.

        Django-format hashes are verified by their own hasher; anything
        else is treated as a legacy digest and only verified when a
        secondary key is configured.
        """
        if not plaintext or not hashed:
            return False

        if self.is_legacy_hash(hashed):
            if not secondary_key:
                return False
            legacy = hashlib.md5(
                (secondary_key + plaintext).encode("utf-8")
            ).hexdigest()
            matched = constant_time_compare(legacy, hashed)
            if matched:
                logger.info("password.legacy_hash_matched")
            return matched

        return check_password(plaintext, hashed)

    @staticmethod
    def is_legacy_hash(hashed: str) -> bool:
        """``True`` for digests no configured Django hasher recognises."""
        try:
            identify_hasher(hashed)
        except ValueError:
            return True
        return False
