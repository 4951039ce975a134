"""
Copyright (C) 2025  Sede Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Sede. See the LICENSE file in the project
root for full license details.
"""
from http import HTTPStatus
import logging
import typing
import quart
from sede_common.base_api_view import BaseApiView
from accounts.data_access_layer.account_data_access_layer import (
    AccountDataAccessLayer,
    AccountStoreError)
from accounts.data_services.account_data_service import AccountDataService
from accounts.data_services.credential_hasher import CredentialHasher
from accounts.data_services.google_oauth_client import GoogleOAuthClient
from accounts.data_services.notification_sender import NotificationSender
from accounts.data_services.service_result import ErrorKind, ServiceResult
from accounts.data_services.session_token_service import SessionTokenService
from accounts.service_settings import AccountsSettings
from accounts.state_object import StateObject

ERROR_KIND_STATUS: dict = {
    ErrorKind.VALIDATION: HTTPStatus.BAD_REQUEST,
    ErrorKind.NOT_FOUND: HTTPStatus.NOT_FOUND,
    ErrorKind.AUTHORIZATION: HTTPStatus.UNAUTHORIZED,
    ErrorKind.UPSTREAM: HTTPStatus.BAD_REQUEST,
    ErrorKind.INTERNAL: HTTPStatus.INTERNAL_SERVER_ERROR,
}

INVALID_BODY_MESSAGE: str = "Invalid or missing JSON body"


class AuthApiView(BaseApiView):
    """
    API view handling registration, confirmation, login and Google sign-in.

    The view only binds requests to ``AccountDataService`` and maps its
    results to HTTP responses; the session token travels in an HTTP-only
    cookie.
    """

    def __init__(self, logger: logging.Logger,
                 state_object: StateObject,
                 settings: AccountsSettings,
                 hasher: typing.Optional[CredentialHasher] = None,
                 oauth_client: typing.Optional[GoogleOAuthClient] = None,
                 notification_sender: typing.Optional[NotificationSender]
                 = None) -> None:
        """
        Initialize the Auth API view with a child logger.

        Args:
            logger (logging.Logger): Base logger instance.
            state_object (StateObject): Shared service state.
            settings (AccountsSettings): Service settings.
            hasher, oauth_client, notification_sender: Optional collaborators,
                built from the settings when not supplied.
        """
        # pylint: disable=too-many-arguments, too-many-positional-arguments
        self._logger = logger.getChild(__name__)
        self._state_object = state_object
        self._settings = settings
        self._hasher = hasher or CredentialHasher()
        self._session_tokens = SessionTokenService(settings.session, logger)
        self._oauth_client = oauth_client or GoogleOAuthClient(
            settings.google_oauth, logger)
        self._notification_sender = notification_sender or \
            NotificationSender(logger, settings.notifications.service_url)

    async def register(self):
        """
        Register a local account and send its confirmation e-mail.

        Returns:
            JSON response with:
                - 201 Created: the new account (without credentials).
                - 400 Bad Request: invalid body or field errors.
        """
        data = await self._get_json_body()
        if data is None:
            return self._json_response(HTTPStatus.BAD_REQUEST,
                                       message=INVALID_BODY_MESSAGE)

        result = await self._perform(lambda service: service.register(data))
        return self._result_response(result, HTTPStatus.CREATED)

    async def confirm(self, code: str):
        """
        Confirm a registration; the caller address is logged as origin.

        Returns:
            JSON response with:
                - 200 OK: the confirmed account.
                - 400 Bad Request: malformed code.
                - 404 Not Found: no account holds the code.
        """
        origin = quart.request.remote_addr or "unknown"
        result = await self._perform(
            lambda service: service.confirm(code, origin))
        return self._result_response(result, HTTPStatus.OK)

    async def login(self):
        """
        Password login. On success the session token is returned and also
        set as an HTTP-only cookie.

        Returns:
            JSON response with:
                - 200 OK: ``{"jwt": ...}``.
                - 400 Bad Request: invalid body.
                - 401 Unauthorized: wrong password or inactive account.
                - 404 Not Found: unknown email.
        """
        data = await self._get_json_body()
        if data is None:
            return self._json_response(HTTPStatus.BAD_REQUEST,
                                       message=INVALID_BODY_MESSAGE)

        result = await self._perform(lambda service: service.login(data))
        return self._session_response(result)

    async def logout(self):
        """
        Clear the session cookie. Tokens are stateless, an already issued
        token stays valid until it expires.
        """
        response = self._json_response(HTTPStatus.OK)
        response.delete_cookie(self._settings.session.cookie_name)
        return response

    async def me(self):
        """ Account identified by the session cookie. """
        token = quart.request.cookies.get(self._settings.session.cookie_name)
        result = await self._perform(
            lambda service: service.current_account(token))
        return self._result_response(result, HTTPStatus.OK)

    async def google_authorization_url(self):
        """ URL of the Google consent screen for the posted redirect URI. """
        data = await self._get_json_body()
        if data is None:
            return self._json_response(HTTPStatus.BAD_REQUEST,
                                       message=INVALID_BODY_MESSAGE)

        result = self._account_service(None).google_authorization_url(data)
        return self._result_response(result, HTTPStatus.OK)

    async def google_login(self):
        """
        Google sign-in with the authorization code posted by the client.
        On success the session cookie is set like a password login.
        """
        data = await self._get_json_body()
        if data is None:
            return self._json_response(HTTPStatus.BAD_REQUEST,
                                       message=INVALID_BODY_MESSAGE)

        result = await self._perform(
            lambda service: service.google_login(data))
        return self._session_response(result)

    def _account_service(self, db) -> AccountDataService:
        account_dal = AccountDataAccessLayer(db, self._logger,
                                             self._state_object, self._hasher)
        return AccountDataService(account_dal,
                                  self._logger,
                                  self._settings,
                                  self._hasher,
                                  self._session_tokens,
                                  self._oauth_client,
                                  self._notification_sender)

    async def _perform(self,
                       operation: typing.Callable[
                           [AccountDataService],
                           typing.Awaitable[ServiceResult]]) -> ServiceResult:
        service = self._account_service(getattr(quart.g, "db", None))

        try:
            return await operation(service)

        except AccountStoreError:
            return ServiceResult.failure(ErrorKind.INTERNAL,
                                         HTTPStatus.INTERNAL_SERVER_ERROR.phrase)

        except Exception:  # pylint: disable=broad-exception-caught
            self._logger.exception("Unexpected error handling %s",
                                   quart.request.path)
            return ServiceResult.failure(ErrorKind.INTERNAL,
                                         HTTPStatus.INTERNAL_SERVER_ERROR.phrase)

    def _result_response(self, result: ServiceResult,
                         success_status: HTTPStatus) -> quart.Response:
        if result.valid:
            return self._json_response(success_status, result.payload)

        return self._json_response(ERROR_KIND_STATUS[result.error.kind],
                                   result.error.to_dict())

    def _session_response(self, result: ServiceResult) -> quart.Response:
        response = self._result_response(result, HTTPStatus.OK)

        if result.valid:
            response.set_cookie(self._settings.session.cookie_name,
                                result.payload["jwt"],
                                httponly=True,
                                samesite="Lax")
        return response
