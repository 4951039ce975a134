"""
Copyright (C) 2025  Sede Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Sede. See the LICENSE file in the project
root for full license details.
"""
from datetime import datetime, timezone
import json
import logging
import typing
import uuid
import asyncpg
from sede_common.base_data_access_layer import (BaseDataAccessLayer,
                                                DataStoreError)
from sede_common.service_health_enums import ComponentDegradationLevel
from accounts.data_access_layer.account_document import (Account,
                                                         AccountEvent)
from accounts.data_services.account_models import (AccountCandidate,
                                                   LocalRegistrationRequest,
                                                   OAuthProfile,
                                                   normalise_email,
                                                   parse_model)
from accounts.data_services.confirmation_code import ConfirmationCodeIssuer
from accounts.data_services.credential_hasher import CredentialHasher
from accounts.data_services.service_result import ErrorKind, ServiceResult
from accounts.state_object import StateObject

ACCOUNT_COLUMNS: str = (
    "id, name, surname, full_name, email, password_hash, provider, "
    "provider_user_id, avatar_url, serialized_key, confirmed, active, "
    "confirmation_code, created_at, last_modified, last_login, event_log")

DUPLICATE_EMAIL_MESSAGE: str = "Email already exists"

# Unique index name -> (field, message) reported on a violation.
UNIQUE_INDEX_FIELDS: dict = {
    "uq_accounts_email": ("email", DUPLICATE_EMAIL_MESSAGE),
    "uq_accounts_provider_user_id": (
        "provider_user_id", "Provider account is already linked"),
    "uq_accounts_serialized_key": (
        "serialized_key", "Serialized key is already in use"),
    "uq_accounts_confirmation_code": (
        "confirmation_code", "Confirmation code is already in use"),
}


class AccountStoreError(DataStoreError):
    """ The accounts store failed in an unexpected way. """


class AccountDataAccessLayer(BaseDataAccessLayer):
    """
    Repository of accounts, one pooled asyncpg connection per instance.

    Expected outcomes (invalid input, duplicates, no match) are returned as
    ``ServiceResult`` values; database failures update the database health on
    the state object and are raised as ``AccountStoreError``.
    """

    def __init__(self, db, logger: logging.Logger,
                 state_object: StateObject,
                 hasher: CredentialHasher,
                 code_issuer: typing.Optional[ConfirmationCodeIssuer] = None):
        # pylint: disable=too-many-arguments, too-many-positional-arguments
        super().__init__(db, logger, state_object)
        self._hasher = hasher
        self._code_issuer = code_issuer or ConfirmationCodeIssuer()

    async def create_local(self, candidate: typing.Any,
                           oauth: bool = False) -> ServiceResult:
        """
        Validate and insert a new unconfirmed, inactive account.

        Args:
            candidate: Raw registration data (name, surname, email,
                password).
            oauth: The password is optional when True.

        Returns:
            ServiceResult: The stored ``Account`` or a VALIDATION error.
        """
        model_cls = AccountCandidate if oauth else LocalRegistrationRequest
        request, errors = parse_model(model_cls, candidate)
        if errors:
            return ServiceResult.validation_failure(errors)

        if await self._email_exists(request.email):
            self._logger.debug("Registration rejected, duplicate email")
            return ServiceResult.validation_failure(
                {"email": DUPLICATE_EMAIL_MESSAGE})

        password = getattr(request, "password", None)
        password_hash = self._hasher.hash(password) if password else None
        now = datetime.now(timezone.utc)

        try:
            record = await self._fetchrow(
                "account creation",
                f"""
                INSERT INTO accounts (id, name, surname, full_name, email,
                                      password_hash, confirmed, active,
                                      confirmation_code, created_at,
                                      last_modified, event_log)
                VALUES ($1, $2, $3, $4, $5, $6, FALSE, FALSE, $7, $8, $8,
                        '[]'::jsonb)
                RETURNING {ACCOUNT_COLUMNS}
                """,
                uuid.uuid4(), request.name, request.surname,
                f"{request.name} {request.surname}", request.email,
                password_hash, self._code_issuer.issue(), now)

        except asyncpg.UniqueViolationError as ex:
            return self._unique_violation(ex)

        account = Account.from_record(record)
        self._logger.info("Created account %s", account.id)
        return ServiceResult.success(account)

    async def upsert_by_email(self, profile: typing.Any) -> ServiceResult:
        """
        Insert or refresh the account of an identity provider profile,
        matched by email. Exactly one account per email exists afterwards.

        The provider verified the email, so the account ends up confirmed
        and active; the activation is logged once.
        """
        if isinstance(profile, OAuthProfile):
            profile = profile.model_dump()

        request, errors = parse_model(OAuthProfile, profile)
        if errors:
            return ServiceResult.validation_failure(errors)

        now = datetime.now(timezone.utc)
        event = AccountEvent(now, f"Email verified by {request.provider}",
                             request.provider)

        try:
            record = await self._fetchrow(
                "account upsert",
                f"""
                INSERT INTO accounts (id, name, surname, full_name, email,
                                      provider, provider_user_id, avatar_url,
                                      serialized_key, confirmed, active,
                                      created_at, last_modified, event_log)
                VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, TRUE, TRUE,
                        $10, $10, $11::jsonb)
                ON CONFLICT (email) DO UPDATE SET
                    name = EXCLUDED.name,
                    surname = EXCLUDED.surname,
                    full_name = EXCLUDED.full_name,
                    provider = EXCLUDED.provider,
                    provider_user_id = EXCLUDED.provider_user_id,
                    avatar_url = EXCLUDED.avatar_url,
                    serialized_key = COALESCE(EXCLUDED.serialized_key,
                                              accounts.serialized_key),
                    event_log = CASE WHEN accounts.confirmed
                                     THEN accounts.event_log
                                     ELSE accounts.event_log
                                          || EXCLUDED.event_log END,
                    confirmed = TRUE,
                    active = TRUE,
                    confirmation_code = NULL,
                    last_modified = EXCLUDED.last_modified
                RETURNING {ACCOUNT_COLUMNS}
                """,
                uuid.uuid4(), request.name, request.surname,
                request.full_name, request.email, request.provider,
                request.provider_user_id, request.avatar_url,
                request.serialized_key, now,
                json.dumps([event.to_document()]))

        except asyncpg.UniqueViolationError as ex:
            return self._unique_violation(ex)

        account = Account.from_record(record)
        self._logger.info("Upserted %s account %s", request.provider,
                          account.id)
        return ServiceResult.success(account)

    async def find_by_id(self, account_id: typing.Any) -> ServiceResult:
        """ Look up an account by id, the id shape is checked first. """
        if not account_id or not isinstance(account_id, str):
            return ServiceResult.validation_failure({"id": "Id is required"})

        try:
            if len(account_id) != 36:
                raise ValueError(account_id)
            parsed_id = uuid.UUID(account_id)

        except ValueError:
            return ServiceResult.validation_failure({"id": "Id is not valid"})

        record = await self._fetchrow(
            "account lookup by id",
            f"SELECT {ACCOUNT_COLUMNS} FROM accounts WHERE id = $1",
            parsed_id)

        return self._found(record, "Account does not exist")

    async def find_by_email(self, email: typing.Any) -> ServiceResult:
        """
        Look up an account by email, in the normalised form registration
        stores.
        """
        if not email or not isinstance(email, str):
            return ServiceResult.validation_failure(
                {"email": "Email is required"})

        record = await self._fetchrow(
            "account lookup by email",
            f"SELECT {ACCOUNT_COLUMNS} FROM accounts WHERE email = $1",
            normalise_email(email))

        return self._found(record, "Email does not exist",
                           {"email": "Email does not exist"})

    async def find_by_serialized_key(self, key: typing.Any) -> ServiceResult:
        """ Look up an account by its numeric serialized session key. """
        if key is None or key == "":
            return ServiceResult.validation_failure(
                {"serialized_key": "Serialized key is required"})

        if isinstance(key, bool) or not str(key).isdigit():
            return ServiceResult.validation_failure(
                {"serialized_key": "Serialized key must be numeric"})

        record = await self._fetchrow(
            "account lookup by serialized key",
            f"SELECT {ACCOUNT_COLUMNS} FROM accounts "
            "WHERE serialized_key = $1",
            int(key))

        return self._found(record, "Account does not exist")

    async def mark_confirmed(self, code: typing.Any,
                             change_description: str,
                             origin: str) -> ServiceResult:
        """
        Confirm and activate the account holding a confirmation code.

        The code shape is checked before the store is queried. On a match
        one event is appended to the log, the account becomes confirmed and
        active and the code is cleared so it cannot be replayed.
        """
        validation = self._code_issuer.validate(code)
        if not validation.valid:
            return validation

        now = datetime.now(timezone.utc)
        event = AccountEvent(now, change_description, origin)

        record = await self._fetchrow(
            "account confirmation",
            f"""
            UPDATE accounts
            SET event_log = event_log || $2::jsonb,
                confirmed = TRUE,
                active = TRUE,
                confirmation_code = NULL,
                last_modified = $3
            WHERE confirmation_code = $1
            RETURNING {ACCOUNT_COLUMNS}
            """,
            validation.payload, json.dumps([event.to_document()]), now)

        if record:
            self._logger.info("Confirmed account %s", record["id"])

        return self._found(record, "Confirmation code does not exist")

    async def record_login(self, account_id: uuid.UUID) -> ServiceResult:
        """ Stamp the time of a successful login. """
        record = await self._fetchrow(
            "login timestamp update",
            f"""
            UPDATE accounts SET last_login = $2
            WHERE id = $1
            RETURNING {ACCOUNT_COLUMNS}
            """,
            account_id, datetime.now(timezone.utc))

        return self._found(record, "Account does not exist")

    async def _email_exists(self, email: str) -> bool:
        existing = await self._fetchrow(
            "email uniqueness check",
            "SELECT id FROM accounts WHERE email = $1",
            email)
        return existing is not None

    async def _fetchrow(self, operation: str, query: str,
                        *args) -> typing.Optional[typing.Mapping]:
        try:
            record = await self._db.fetchrow(query, *args)

        except asyncpg.UniqueViolationError:
            self._mark_database_operational()
            raise

        except (asyncpg.InterfaceError, OSError) as ex:
            self._logger.exception("Database connection error during %s.",
                                   operation)
            self._mark_database_degraded(
                ComponentDegradationLevel.FULLY_DEGRADED,
                "Database unreachable")
            raise AccountStoreError(
                f"Database unreachable during {operation}") from ex

        except asyncpg.PostgresError as ex:
            self._logger.exception("Database error during %s: %s",
                                   operation, ex)
            self._mark_database_degraded(
                ComponentDegradationLevel.PART_DEGRADED,
                "Database operation failed")
            raise AccountStoreError(
                f"Database operation failed during {operation}") from ex

        self._mark_database_operational()
        return record

    def _found(self, record: typing.Optional[typing.Mapping],
               message: str,
               fields: typing.Optional[dict] = None) -> ServiceResult:
        if record is None:
            return ServiceResult.failure(ErrorKind.NOT_FOUND, message,
                                         fields)
        return ServiceResult.success(Account.from_record(record))

    def _unique_violation(self,
                          ex: asyncpg.UniqueViolationError) -> ServiceResult:
        constraint = getattr(ex, "constraint_name", None)
        field_name, message = UNIQUE_INDEX_FIELDS.get(
            constraint, ("email", DUPLICATE_EMAIL_MESSAGE))
        self._logger.warning("Unique index '%s' rejected a write",
                             constraint)
        return ServiceResult.validation_failure({field_name: message})
