"""
Copyright (C) 2025  Sede Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Sede. See the LICENSE file in the project
root for full license details.
"""
from http import HTTPStatus
import logging
import typing
from urllib.parse import quote, urlencode
import httpx
from accounts.data_services.account_models import OAuthProfile, parse_model
from accounts.data_services.service_result import ErrorKind, ServiceResult
from accounts.service_settings import GoogleOAuthSettings

PROVIDER_NAME: str = "Google"

TOKEN_FAILURE_MESSAGE: str = "Failed to receive the Google access token"
PROFILE_FAILURE_MESSAGE: str = "Failed to receive the Google user profile"
UNVERIFIED_EMAIL_MESSAGE: str = \
    "Failed to receive the Google user profile, email is not verified"


class GoogleOAuthClient:
    """
    OAuth2 authorization-code client for Google sign-in.

    Each outbound call gets a bounded timeout; transport failures (timeouts,
    refused connections) are retried up to ``settings.retries`` times, HTTP
    error statuses are not. Provider error bodies are only logged at debug
    level and never returned to the caller.
    """

    def __init__(self, settings: GoogleOAuthSettings,
                 logger: logging.Logger,
                 transport: typing.Optional[httpx.AsyncBaseTransport] = None
                 ) -> None:
        self._settings = settings
        self._logger = logger.getChild(__name__)
        self._transport = transport

    def build_authorization_url(self, redirect_uri: typing.Any
                                ) -> ServiceResult:
        """
        Build the URL of the provider consent screen.

        Args:
            redirect_uri: Callback that receives the authorization code.

        Returns:
            ServiceResult: ``{"url": ...}`` or a VALIDATION error when the
            redirect URI is missing.
        """
        if not redirect_uri or not isinstance(redirect_uri, str):
            return ServiceResult.validation_failure(
                {"redirect_uri": "Redirect URI is required"})

        query = urlencode({"client_id": self._settings.client_id,
                           "scope": self._settings.scope,
                           "redirect_uri": redirect_uri,
                           "response_type": self._settings.response_type},
                          quote_via=quote)

        return ServiceResult.success(
            {"url": f"{self._settings.authorization_url}?{query}"})

    async def exchange_code_for_token(self, code: typing.Any,
                                      redirect_uri: typing.Any
                                      ) -> ServiceResult:
        """
        Exchange an authorization code for an access token.

        Returns:
            ServiceResult: ``{"access_token": ...}`` or an UPSTREAM error.
        """
        errors: dict = {}
        if not code or not isinstance(code, str):
            errors["code"] = "Authorization code is required"
        if not redirect_uri or not isinstance(redirect_uri, str):
            errors["redirect_uri"] = "Redirect URI is required"
        if errors:
            return ServiceResult.validation_failure(errors)

        response = await self._send(
            "POST", self._settings.token_url,
            data={"client_id": self._settings.client_id,
                  "client_secret": self._settings.client_secret,
                  "code": code,
                  "redirect_uri": redirect_uri,
                  "grant_type": "authorization_code"})

        if response is None or response.status_code != HTTPStatus.OK:
            self._log_failure("token exchange", response)
            return ServiceResult.failure(ErrorKind.UPSTREAM,
                                         TOKEN_FAILURE_MESSAGE)

        access_token = self._json_body(response).get("access_token")
        if not access_token:
            self._logger.warning("Token endpoint answered without an access "
                                 "token")
            return ServiceResult.failure(ErrorKind.UPSTREAM,
                                         TOKEN_FAILURE_MESSAGE)

        return ServiceResult.success({"access_token": access_token})

    async def fetch_profile(self, access_token: str) -> ServiceResult:
        """
        Fetch the user profile and normalise it to the account shape.

        Returns:
            ServiceResult: An ``OAuthProfile`` or an UPSTREAM error, also
            when the provider reports the email as unverified.
        """
        response = await self._send(
            "GET", self._settings.userinfo_url,
            headers={"Authorization": f"Bearer {access_token}"})

        if response is None or response.status_code != HTTPStatus.OK:
            self._log_failure("profile fetch", response)
            return ServiceResult.failure(ErrorKind.UPSTREAM,
                                         PROFILE_FAILURE_MESSAGE)

        user_info = self._json_body(response)

        if user_info.get("verified_email") is not True:
            self._logger.warning("Google profile rejected, email is not "
                                 "verified")
            return ServiceResult.failure(ErrorKind.UPSTREAM,
                                         UNVERIFIED_EMAIL_MESSAGE)

        profile, errors = parse_model(OAuthProfile, {
            "name": user_info.get("given_name") or user_info.get("name"),
            "surname": user_info.get("family_name") or "",
            "full_name": user_info.get("name"),
            "email": user_info.get("email"),
            "provider": PROVIDER_NAME,
            "provider_user_id": str(user_info.get("id") or ""),
            "avatar_url": user_info.get("picture"),
        })

        if errors:
            self._logger.warning("Google profile incomplete: %s",
                                 sorted(errors))
            return ServiceResult.failure(ErrorKind.UPSTREAM,
                                         PROFILE_FAILURE_MESSAGE, errors)

        return ServiceResult.success(profile)

    async def _send(self, method: str, url: str,
                    **kwargs) -> typing.Optional[httpx.Response]:
        attempts: int = self._settings.retries + 1

        async with httpx.AsyncClient(timeout=self._settings.timeout_seconds,
                                     transport=self._transport) as client:
            for attempt in range(1, attempts + 1):
                try:
                    return await client.request(method, url, **kwargs)

                except httpx.TransportError as ex:
                    self._logger.warning(
                        "%s %s failed (attempt %d/%d): %s", method, url,
                        attempt, attempts, type(ex).__name__)

        return None

    def _log_failure(self, step: str,
                     response: typing.Optional[httpx.Response]) -> None:
        if response is None:
            self._logger.error("Google %s failed: provider unreachable", step)
            return

        self._logger.error("Google %s failed with status %d", step,
                           response.status_code)
        self._logger.debug("Google %s response body: %s", step,
                           response.text)

    @staticmethod
    def _json_body(response: httpx.Response) -> dict:
        try:
            body = response.json()

        except ValueError:
            return {}

        return body if isinstance(body, dict) else {}
