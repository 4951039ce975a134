"""
Copyright (C) 2025  Sede Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Sede. See the LICENSE file in the project
root for full license details.
"""
import typing
from passlib.hash import bcrypt

DEFAULT_BCRYPT_ROUNDS: int = 12


class CredentialHasher:
    """
    One-way password hashing with bcrypt.

    Every call to ``hash`` uses a fresh random salt; ``verify`` relies on
    passlib's constant-time comparison.
    """

    def __init__(self, rounds: int = DEFAULT_BCRYPT_ROUNDS) -> None:
        self._hasher = bcrypt.using(rounds=rounds)

    def hash(self, plaintext: str) -> str:
        """ Return the salted bcrypt hash of a plaintext password. """
        return self._hasher.hash(plaintext)

    def verify(self, plaintext: typing.Optional[str],
               hashed_secret: typing.Optional[str]) -> bool:
        """
        Check a plaintext password against a stored hash.

        Returns False on mismatch, when either value is missing and when the
        stored hash is malformed.
        """
        if not plaintext or not hashed_secret:
            return False

        try:
            return self._hasher.verify(plaintext, hashed_secret)

        except (ValueError, TypeError):
            return False
