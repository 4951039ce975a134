"""
Copyright (C) 2025  Sede Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Sede. See the LICENSE file in the project
root for full license details.
"""
from dataclasses import dataclass, field
from datetime import datetime
import json
import typing
import uuid


@dataclass(frozen=True)
class AccountEvent:
    """ Entry of the append-only account event log. """
    timestamp: datetime
    description: str
    origin: str

    def to_document(self) -> dict:
        return {"timestamp": self.timestamp.isoformat(),
                "description": self.description,
                "origin": self.origin}

    @classmethod
    def from_document(cls, document: dict) -> "AccountEvent":
        timestamp = document["timestamp"]
        if isinstance(timestamp, str):
            timestamp = datetime.fromisoformat(timestamp)
        return cls(timestamp, document["description"], document["origin"])


@dataclass
class Account:
    """
    Stored user account.

    ``password_hash`` is None for accounts created from an identity
    provider profile; ``provider`` / ``provider_user_id`` are None for local
    accounts.
    """
    # pylint: disable=too-many-instance-attributes
    id: uuid.UUID
    name: str
    surname: str
    full_name: str
    email: str
    password_hash: typing.Optional[str] = None
    provider: typing.Optional[str] = None
    provider_user_id: typing.Optional[str] = None
    avatar_url: typing.Optional[str] = None
    serialized_key: typing.Optional[int] = None
    confirmed: bool = False
    active: bool = False
    confirmation_code: typing.Optional[str] = None
    created_at: typing.Optional[datetime] = None
    last_modified: typing.Optional[datetime] = None
    last_login: typing.Optional[datetime] = None
    event_log: typing.List[AccountEvent] = field(default_factory=list)

    @classmethod
    def from_record(cls, record: typing.Mapping) -> "Account":
        """
        Build an account from a database row. The event log column may be
        returned as JSON text or as an already decoded list.
        """
        event_log = record["event_log"] or []
        if isinstance(event_log, str):
            event_log = json.loads(event_log)

        return cls(
            id=record["id"],
            name=record["name"],
            surname=record["surname"],
            full_name=record["full_name"],
            email=record["email"],
            password_hash=record["password_hash"],
            provider=record["provider"],
            provider_user_id=record["provider_user_id"],
            avatar_url=record["avatar_url"],
            serialized_key=record["serialized_key"],
            confirmed=record["confirmed"],
            active=record["active"],
            confirmation_code=record["confirmation_code"],
            created_at=record["created_at"],
            last_modified=record["last_modified"],
            last_login=record["last_login"],
            event_log=[AccountEvent.from_document(entry)
                       for entry in event_log])

    def to_public_dict(self) -> dict:
        """ JSON-friendly view of the account without credentials. """
        return {
            "id": str(self.id),
            "name": self.name,
            "surname": self.surname,
            "full_name": self.full_name,
            "email": self.email,
            "provider": self.provider,
            "provider_user_id": self.provider_user_id,
            "avatar_url": self.avatar_url,
            "confirmed": self.confirmed,
            "active": self.active,
            "created_at": _isoformat(self.created_at),
            "last_modified": _isoformat(self.last_modified),
            "last_login": _isoformat(self.last_login),
            "event_log": [event.to_document() for event in self.event_log],
        }


def _isoformat(value: typing.Optional[datetime]) -> typing.Optional[str]:
    return value.isoformat() if value else None
