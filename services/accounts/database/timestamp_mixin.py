"""
Copyright (C) 2025  Sede Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Sede. See the LICENSE file in the project
root for full license details.
"""
from datetime import datetime, timezone
from sqlalchemy import Column, DateTime, func


class TimestampMixin:
    """
    SQLAlchemy mixin that adds the account timestamp fields to a model.

    All fields are timezone-aware. ``created_at`` and ``last_modified`` also
    carry a server default so rows inserted with raw SQL get them too.

    Attributes:
        created_at (datetime): Timestamp when the record was created.
        last_modified (datetime): Timestamp of the last change made to the
            record (confirmation, profile refresh).
        last_login (datetime): Timestamp of the most recent login, null until
            the first one.
    """
    # pylint: disable=too-few-public-methods
    created_at = Column(DateTime(timezone=True),
                        default=lambda: datetime.now(timezone.utc),
                        server_default=func.now(),
                        nullable=False)
    last_modified = Column(DateTime(timezone=True),
                           default=lambda: datetime.now(timezone.utc),
                           onupdate=lambda: datetime.now(timezone.utc),
                           server_default=func.now(),
                           nullable=False)
    last_login = Column(DateTime(timezone=True))
