"""
Copyright (C) 2025  Sede Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Sede. See the LICENSE file in the project
root for full license details.
"""
from .base import Base
from .account_record import AccountRecord
from .schema import account_schema_statements, ensure_account_schema

__all__ = ["Base", "AccountRecord", "account_schema_statements",
           "ensure_account_schema"]
