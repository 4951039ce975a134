"""
Copyright (C) 2025  Sede Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Sede. See the LICENSE file in the project
root for full license details.
"""
import uuid
from sqlalchemy import (BigInteger, Boolean, Column, Index, String, Text,
                        text)
from sqlalchemy.dialects.postgresql import JSONB, UUID
from .base import Base
from .timestamp_mixin import TimestampMixin


class AccountRecord(TimestampMixin, Base):
    """
    SQLAlchemy declaration of the ``accounts`` table.

    Each row is one account document; its event log is kept in a JSONB
    array that is only ever appended to.

    Attributes:
        id (UUID): Primary key, unique identifier for the account.
        name (str): Given name.
        surname (str): Family name.
        full_name (str): Derived "name surname", or the provider display
            name for accounts created from an identity provider.
        email (str): Unique e-mail address.
        password_hash (str): bcrypt hash, null for provider-only accounts.
        provider (str): Identity provider name, e.g. "Google".
        provider_user_id (str): The provider's id for the user, unique when
            present.
        avatar_url (str): Picture URL reported by the provider.
        serialized_key (int): Numeric session key, unique when present.
        confirmed (bool): The registration was confirmed.
        active (bool): The account may be used for authenticated actions.
        confirmation_code (str): v4 UUID sent by e-mail on registration.
        event_log (list): Entries of {timestamp, description, origin}.

    Table constraints:
        The unique indexes on email, provider_user_id, serialized_key and
        confirmation_code are the race-free enforcement of uniqueness; any
        application-level check before an insert is only a fast path.
    """
    # pylint: disable=too-few-public-methods
    __tablename__ = "accounts"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(128), nullable=False)
    surname = Column(String(128), nullable=False)
    full_name = Column(String(256), nullable=False)
    email = Column(String(255), nullable=False)
    password_hash = Column(String(128))  # nullable if only external auth
    provider = Column(String(32))
    provider_user_id = Column(String(255))
    avatar_url = Column(Text)
    serialized_key = Column(BigInteger)
    confirmed = Column(Boolean, nullable=False, default=False,
                       server_default=text("false"))
    active = Column(Boolean, nullable=False, default=False,
                    server_default=text("false"))
    confirmation_code = Column(String(36))
    event_log = Column(JSONB, nullable=False, default=list,
                       server_default=text("'[]'::jsonb"))

    __table_args__ = (
        Index("uq_accounts_email", "email", unique=True),
        Index("uq_accounts_provider_user_id", "provider_user_id",
              unique=True),
        Index("uq_accounts_serialized_key", "serialized_key", unique=True),
        Index("uq_accounts_confirmation_code", "confirmation_code",
              unique=True),
    )
