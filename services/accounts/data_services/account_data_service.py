"""
Copyright (C) 2025  Sede Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Sede. See the LICENSE file in the project
root for full license details.
"""
from datetime import datetime, timedelta, timezone
import logging
import secrets
import typing
from accounts.data_access_layer.account_data_access_layer import \
    AccountDataAccessLayer
from accounts.data_access_layer.account_document import Account
from accounts.data_services.account_models import (GoogleAuthUrlRequest,
                                                   GoogleLoginRequest,
                                                   LoginRequest,
                                                   parse_model)
from accounts.data_services.credential_hasher import CredentialHasher
from accounts.data_services.google_oauth_client import GoogleOAuthClient
from accounts.data_services.notification_sender import (Notification,
                                                        NotificationSender)
from accounts.data_services.service_result import ErrorKind, ServiceResult
from accounts.data_services.session_token_service import SessionTokenService
from accounts.service_settings import AccountsSettings

CONFIRMATION_TITLE: str = "Your account has been created"
CONFIRMATION_NOTIFICATION_TTL = timedelta(days=7)
CONFIRMATION_BODY: str = """Dear {full_name},

Your registration request has been processed successfully.

To prevent abuse of this site you need to activate your account by
following this link:

<a href='{link}'>Confirm registration</a>

Thank you for joining us."""

SERIALIZED_KEY_UPPER_BOUND: int = 1_000_000_000


class AccountDataService:
    """
    Account workflows: registration, confirmation, password login, Google
    sign-in and session resolution.

    Every method returns a ``ServiceResult``; account payloads are public
    views without password hash or confirmation code.
    """
    # pylint: disable=too-many-instance-attributes

    def __init__(self,
                 account_dal: AccountDataAccessLayer,
                 logger: logging.Logger,
                 settings: AccountsSettings,
                 hasher: CredentialHasher,
                 session_tokens: SessionTokenService,
                 oauth_client: GoogleOAuthClient,
                 notification_sender: NotificationSender):
        # pylint: disable=too-many-arguments, too-many-positional-arguments
        self._account_dal = account_dal
        self._logger = logger.getChild(__name__)
        self._settings = settings
        self._hasher = hasher
        self._session_tokens = session_tokens
        self._oauth_client = oauth_client
        self._notification_sender = notification_sender

    async def register(self, payload: typing.Any) -> ServiceResult:
        """
        Handles local registration:
         - Validates and stores the unconfirmed account
         - Sends the confirmation e-mail (a failed delivery does not undo
           the registration)
        """
        created = await self._account_dal.create_local(payload)
        if not created.valid:
            return created

        account: Account = created.payload
        await self._send_confirmation(account)

        return ServiceResult.success(account.to_public_dict())

    async def confirm(self, code: typing.Any, origin: str) -> ServiceResult:
        """ Exchange a confirmation code for an active account. """
        confirmed = await self._account_dal.mark_confirmed(
            code, self._settings.confirmation_change_description, origin)
        if not confirmed.valid:
            return confirmed

        return ServiceResult.success(confirmed.payload.to_public_dict())

    async def login(self, payload: typing.Any) -> ServiceResult:
        """
        Handles password login:
         - Fetches the account by email
         - Verifies the password, then that the account is active
         - Issues a session token
        """
        request, errors = parse_model(LoginRequest, payload)
        if errors:
            return ServiceResult.validation_failure(errors)

        found = await self._account_dal.find_by_email(request.email)
        if not found.valid:
            return found

        account: Account = found.payload

        if not self._hasher.verify(request.password, account.password_hash):
            return ServiceResult.failure(ErrorKind.AUTHORIZATION,
                                         "Password is incorrect",
                                         {"password": "Password is "
                                                      "incorrect"})

        if not account.active:
            return ServiceResult.failure(ErrorKind.AUTHORIZATION,
                                         "Account is not active")

        await self._account_dal.record_login(account.id)
        self._logger.info("Account %s logged in", account.id)

        return ServiceResult.success(
            {"jwt": self._session_tokens.issue(account.id)})

    def google_authorization_url(self, payload: typing.Any) -> ServiceResult:
        """ URL of the Google consent screen for a redirect URI. """
        request, errors = parse_model(GoogleAuthUrlRequest, payload)
        if errors:
            return ServiceResult.validation_failure(errors)

        return self._oauth_client.build_authorization_url(
            request.redirect_uri)

    async def google_login(self, payload: typing.Any) -> ServiceResult:
        """
        Handles Google sign-in:
         - Exchanges the authorization code for an access token
         - Fetches the verified profile
         - Upserts the account by email
         - Issues a session token
        A failure at any step aborts the flow; nothing is written unless the
        profile was fetched successfully.
        """
        request, errors = parse_model(GoogleLoginRequest, payload)
        if errors:
            return ServiceResult.validation_failure(errors)

        token = await self._oauth_client.exchange_code_for_token(
            request.code, request.redirect_uri)
        if not token.valid:
            return token

        fetched = await self._oauth_client.fetch_profile(
            token.payload["access_token"])
        if not fetched.valid:
            return fetched

        profile = fetched.payload.model_copy(
            update={"serialized_key":
                    secrets.randbelow(SERIALIZED_KEY_UPPER_BOUND)})

        upserted = await self._account_dal.upsert_by_email(profile)
        if not upserted.valid:
            return upserted

        account: Account = upserted.payload
        self._logger.info("Account %s logged in with %s", account.id,
                          account.provider)

        return ServiceResult.success(
            {"jwt": self._session_tokens.issue(account.id)})

    async def current_account(self, token: typing.Optional[str]
                              ) -> ServiceResult:
        """ Account identified by a session token. """
        verified = self._session_tokens.verify(token)
        if not verified.valid:
            return verified

        found = await self._account_dal.find_by_id(
            verified.payload["subject_id"])
        if not found.valid:
            return found

        if not found.payload.active:
            return ServiceResult.failure(ErrorKind.AUTHORIZATION,
                                         "Account is not active")

        return ServiceResult.success(found.payload.to_public_dict())

    async def resolve_serialized_session(self, key: typing.Any
                                         ) -> ServiceResult:
        """ Account holding a serialized session key. """
        found = await self._account_dal.find_by_serialized_key(key)
        if not found.valid:
            return found

        return ServiceResult.success(found.payload.to_public_dict())

    async def _send_confirmation(self, account: Account) -> None:
        link = (f"{self._settings.notifications.confirmation_base_url.rstrip('/')}"
                f"/{account.confirmation_code}")

        notification = Notification(
            title=CONFIRMATION_TITLE,
            recipient=account.email,
            rendered_body=CONFIRMATION_BODY.format(full_name=account.full_name,
                                                   link=link),
            expiry=datetime.now(timezone.utc) + CONFIRMATION_NOTIFICATION_TTL)

        if not await self._notification_sender.send(notification):
            self._logger.warning("Confirmation for account %s was not "
                                 "delivered", account.id)
