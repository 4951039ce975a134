"""
Copyright (C) 2025  Sede Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Sede. See the LICENSE file in the project
root for full license details.
"""
import typing
import uuid
from accounts.data_services.service_result import ServiceResult

CONFIRMATION_CODE_FIELD: str = "confirmation_code"


class ConfirmationCodeIssuer:
    """ Issues and structurally checks registration confirmation codes. """

    @staticmethod
    def issue() -> str:
        """ New opaque code: the 36 character form of a random v4 UUID. """
        return str(uuid.uuid4())

    @staticmethod
    def validate(code: typing.Any) -> ServiceResult:
        """
        Check that a code has the shape of an issued code. The store is
        never consulted here.
        """
        if not code or not isinstance(code, str):
            return ServiceResult.validation_failure(
                {CONFIRMATION_CODE_FIELD: "Confirmation code is required"})

        try:
            parsed = uuid.UUID(code)

        except ValueError:
            parsed = None

        # uuid.UUID() also accepts braces, urn prefixes and missing hyphens.
        if parsed is None or parsed.version != 4 or str(parsed) != code.lower():
            return ServiceResult.validation_failure(
                {CONFIRMATION_CODE_FIELD: "Confirmation code is not valid"})

        return ServiceResult.success(code.lower())
