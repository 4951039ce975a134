"""
Copyright (C) 2025  Sede Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Sede. See the LICENSE file in the project
root for full license details.
"""
from dataclasses import dataclass, field
import enum
import typing


class ErrorKind(enum.Enum):
    """ Kinds of expected failure returned by the account operations. """

    # Field-level, user-correctable input problem
    VALIDATION = "validation"

    # Lookup by email / code / id found nothing
    NOT_FOUND = "not_found"

    # Password mismatch, inactive account or invalid session
    AUTHORIZATION = "authorization"

    # Identity provider answered with a failure
    UPSTREAM = "upstream"

    # Unexpected failure that was nevertheless caught
    INTERNAL = "internal"


@dataclass(frozen=True)
class ErrorDetail:
    """
    Description of a failed operation.

    Attributes:
        kind (ErrorKind): Category of the failure.
        message (str): Human readable summary.
        fields (dict): Field name to first error message, for validation
            failures.
    """
    kind: ErrorKind
    message: str
    fields: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        """ Serialisable form of the error, used as response payload. """
        if self.fields:
            return dict(self.fields)
        return {"error": self.message}


@dataclass(frozen=True)
class ServiceResult:
    """
    Uniform ``{valid, payload}`` outcome of every account operation.

    ``payload`` is the operation value when ``valid`` is True, otherwise an
    ``ErrorDetail``.
    """
    valid: bool
    payload: typing.Any = None

    @classmethod
    def success(cls, payload: typing.Any = None) -> "ServiceResult":
        return cls(True, payload)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str,
                fields: typing.Optional[dict] = None) -> "ServiceResult":
        return cls(False, ErrorDetail(kind, message, fields or {}))

    @classmethod
    def validation_failure(cls, fields: dict) -> "ServiceResult":
        """ Validation failure naming the offending field(s). """
        return cls.failure(ErrorKind.VALIDATION, "Validation failed", fields)

    @property
    def error(self) -> typing.Optional[ErrorDetail]:
        return None if self.valid else self.payload
