"""
Copyright (C) 2025  Sede Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Sede. See the LICENSE file in the project
root for full license details.
"""
from datetime import datetime, timedelta, timezone
import logging
import typing
import jwt
from accounts.data_services.service_result import ErrorKind, ServiceResult
from accounts.service_settings import SessionSettings

UNAUTHENTICATED_MESSAGE: str = "Unauthenticated"


class SessionTokenService:
    """
    Issues and verifies the signed, time-bounded session tokens (JWT).

    Tokens carry the account id in ``sub`` plus ``iat`` and ``exp``; they are
    not stored anywhere and stay valid until they expire.
    """

    def __init__(self, settings: SessionSettings,
                 logger: logging.Logger) -> None:
        self._settings = settings
        self._logger = logger.getChild(__name__)

    def issue(self, subject_id: typing.Any,
              now: typing.Optional[datetime] = None) -> str:
        """
        Sign a session token for the given account id.

        Args:
            subject_id: Account id, stored as a string claim.
            now: Issue time, defaults to the current UTC time.

        Returns:
            str: The encoded token.
        """
        issued_at = now or datetime.now(timezone.utc)
        expires_at = issued_at + timedelta(minutes=self._settings.ttl_minutes)

        claims: dict = {
            "sub": str(subject_id),
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        return jwt.encode(claims,
                          self._settings.secret,
                          algorithm=self._settings.algorithm)

    def verify(self, token: typing.Optional[str]) -> ServiceResult:
        """
        Check signature and expiry of a token.

        Every failure gives the same AUTHORIZATION result so callers cannot
        tell which check failed.
        """
        if not token:
            return ServiceResult.failure(ErrorKind.AUTHORIZATION,
                                         UNAUTHENTICATED_MESSAGE)

        try:
            claims = jwt.decode(token,
                                self._settings.secret,
                                algorithms=[self._settings.algorithm],
                                options={"require": ["exp", "sub"]})

        except jwt.PyJWTError as ex:
            self._logger.debug("Session token rejected: %s",
                               type(ex).__name__)
            return ServiceResult.failure(ErrorKind.AUTHORIZATION,
                                         UNAUTHENTICATED_MESSAGE)

        return ServiceResult.success({"subject_id": claims["sub"]})
