"""
Copyright (C) 2025  Sede Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Sede. See the LICENSE file in the project
root for full license details.
"""
import logging
from sqlalchemy.dialects import postgresql
from sqlalchemy.schema import CreateIndex, CreateTable
from .account_record import AccountRecord


def account_schema_statements() -> list[str]:
    """
    DDL for the accounts table and its unique indexes, compiled for
    PostgreSQL. Every statement is idempotent (IF NOT EXISTS).
    """
    dialect = postgresql.dialect()
    table = AccountRecord.__table__

    statements: list[str] = [
        str(CreateTable(table, if_not_exists=True).compile(dialect=dialect))
    ]

    for index in sorted(table.indexes, key=lambda idx: idx.name):
        statements.append(
            str(CreateIndex(index, if_not_exists=True).compile(
                dialect=dialect)))

    return statements


async def ensure_account_schema(pool, logger: logging.Logger) -> None:
    """
    Create the accounts table and indexes if they do not exist yet.

    Args:
        pool (asyncpg.pool.Pool): Connection pool of the accounts database.
        logger (logging.Logger): Logger instance.
    """
    async with pool.acquire() as connection:
        async with connection.transaction():
            for statement in account_schema_statements():
                await connection.execute(statement)

    logger.info("Account schema ready (table '%s')",
                AccountRecord.__tablename__)
