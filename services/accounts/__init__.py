"""
Copyright (C) 2025  Sede Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Sede. See the LICENSE file in the project
root for full license details.
"""
import asyncio
import os
import random
from quart import g, Quart, request
import asyncpg
from sede_common.service_health_enums import ComponentDegradationLevel
from accounts.application import Application
from accounts.database import ensure_account_schema


# Quart application instance
app = Quart(__name__)

SERVICE_APP: Application = Application(app)


class DatabaseConfig:
    """
    Configuration container for database connection settings.

    The values are loaded from environment variables and provide
    fallbacks if the variables are not set.

    Attributes:
        DB_USER (str): Database username, `SEDE_ACCOUNTS_DB_USER`.
            Defaults to "__INVALID__".
        DB_PASSWORD (str): Database password, `SEDE_ACCOUNTS_DB_PASSWORD`.
            Defaults to "__INVALID__".
        DB_NAME (str): Database name, `SEDE_ACCOUNTS_DB_NAME`.
            Defaults to "__INVALID__".
        DB_HOST (str): Database host address, `SEDE_ACCOUNTS_DB_HOST`.
            Defaults to "127.0.0.1".
        DB_PORT (int): Database port number, `SEDE_ACCOUNTS_DB_PORT`.
            Defaults to 5432.
    """
    # pylint: disable=too-few-public-methods
    DB_USER = os.getenv("SEDE_ACCOUNTS_DB_USER", "__INVALID__")
    DB_PASSWORD = os.getenv("SEDE_ACCOUNTS_DB_PASSWORD", "__INVALID__")
    DB_NAME = os.getenv("SEDE_ACCOUNTS_DB_NAME", "__INVALID__")
    DB_HOST = os.getenv("SEDE_ACCOUNTS_DB_HOST", "127.0.0.1")
    DB_PORT = int(os.getenv("SEDE_ACCOUNTS_DB_PORT", "5432"))


async def cancel_background_tasks():
    """
    Cancel and await the application's background task, if it exists.

    The task is stored on the global ``app`` object under the attribute
    ``background_task``. Its ``asyncio.CancelledError`` is suppressed.
    """
    task = getattr(app, "background_task", None)
    if task:
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass


@app.before_serving
async def startup() -> None:
    """
    Code executed before Quart has begun serving http requests: initialise
    the service, connect to the database and make sure the account schema
    exists.
    """
    if not await SERVICE_APP.initialise():
        os._exit(1)

    app.db_pool = await create_db_pool(DatabaseConfig)

    try:
        await ensure_account_schema(app.db_pool, SERVICE_APP.logger)
        SERVICE_APP.state_object.schema_ready = True

    except (asyncpg.PostgresError, OSError) as ex:
        SERVICE_APP.logger.critical("Unable to create account schema: %s",
                                    ex)
        SERVICE_APP.state_object.database_health = \
            ComponentDegradationLevel.FULLY_DEGRADED
        SERVICE_APP.state_object.database_health_state_str = \
            "Account schema could not be created"

    app.background_task = asyncio.create_task(SERVICE_APP.run())


@app.after_serving
async def shutdown() -> None:
    """
    Code executed after Quart has stopped serving http requests.
    """
    SERVICE_APP.shutdown_event.set()

    await cancel_background_tasks()

    db_pool = getattr(app, "db_pool", None)
    if db_pool is not None:
        await db_pool.close()


@app.before_request
async def acquire_connection():
    """
    Acquire a database connection from the pool before handling a request
    and store it in the request context (``g.db``).

    Views marked with ``route_not_using_db`` skip the acquisition.

    Returns:
        tuple | None: A 503 JSON error if acquiring a connection timed out,
            otherwise None to continue request processing.
    """
    view_func = app.view_functions.get(request.endpoint)
    if getattr(view_func, "_no_db", False):
        return None

    try:
        g.db = await app.db_pool.acquire(timeout=2.0)

    except asyncio.TimeoutError:
        return {"message": "Service unavailable"}, 503

    return None


@app.after_request
async def release_connection(response):
    """
    Release the request's database connection back to the pool.

    Args:
        response (quart.wrappers.Response): The response object generated
            by the request handler.

    Returns:
        quart.wrappers.Response: The same response object, unchanged.
    """
    db = getattr(g, "db", None)
    if db is not None:
        await app.db_pool.release(db)
        g.db = None
    return response


async def create_db_pool(config,
                         retries: int = 5,
                         base_delay: float = 1.0
                         ) -> asyncpg.pool.Pool:
    """
    Create and return an asyncpg connection pool with retries and error
    handling.

    Retry-able errors back off exponentially with jitter. If the pool cannot
    be created the background tasks are cancelled and the process exits.

    Args:
        config (DatabaseConfig): Database connection parameters.
        retries (int, optional): Maximum number of attempts. Defaults to 5.
        base_delay (float, optional): Base delay (in seconds) for exponential
            backoff. Defaults to 1.0.

    Returns:
        asyncpg.pool.Pool: A connection pool instance if successfully created.
    """
    for attempt in range(1, retries + 1):
        try:
            pool = await asyncpg.create_pool(
                user=config.DB_USER,
                password=config.DB_PASSWORD,
                database=config.DB_NAME,
                host=config.DB_HOST,
                port=config.DB_PORT,
                min_size=1,
                max_size=10,
                timeout=5.0
            )

            print(f"[INFO] Connected to database {config.DB_NAME} "
                  f"on {config.DB_HOST}:{config.DB_PORT} (attempt {attempt})",
                  flush=True)

            return pool

        except asyncpg.InvalidPasswordError:
            print("[FATAL] Database authentication failed (check user/"
                  "password).", flush=True)
            break

        except asyncpg.InvalidCatalogNameError:
            print(f"[FATAL] Database '{config.DB_NAME}' does not exist.",
                  flush=True)
            break

        except asyncpg.CannotConnectNowError:
            print("[ERROR] Database is starting up or cannot accept "
                  "connections right now.", flush=True)

        except asyncio.TimeoutError:
            print("[ERROR] Database connection timed out.", flush=True)

        except OSError as ex:
            print(f"[ERROR] Database network/connection error: {ex}",
                  flush=True)

        except asyncpg.PostgresError as ex:
            print(f"[ERROR] Database general Postgres error: {ex}", flush=True)

        # Retry-able errors
        delay = base_delay * (2 ** (attempt - 1))
        jitter = random.uniform(0, 0.3 * delay)
        wait_time = delay + jitter

        if attempt < retries:
            print(f"[INFO] Retrying database connection in "
                  f"{wait_time:.1f}s...", flush=True)
            await asyncio.sleep(wait_time)
            continue

        print("[FATAL] All database retries exhausted. Could not connect!",
              flush=True)

    if app is not None:
        await cancel_background_tasks()

    os._exit(1)  # exit on failure
