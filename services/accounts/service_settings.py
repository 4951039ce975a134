"""
Copyright (C) 2025  Sede Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Sede. See the LICENSE file in the project
root for full license details.
"""
from dataclasses import dataclass
import typing
from sede_common.configuration.configuration import Configuration


@dataclass(frozen=True)
class SessionSettings:
    """ Signing parameters of the session tokens. """
    secret: str
    algorithm: str = "HS256"
    ttl_minutes: int = 60
    cookie_name: str = "jwt"


@dataclass(frozen=True)
class GoogleOAuthSettings:
    """ Client registration and endpoints of the Google identity provider. """
    # pylint: disable=too-many-instance-attributes
    client_id: str
    client_secret: str
    authorization_url: str
    token_url: str
    userinfo_url: str
    scope: str = "openid email profile"
    response_type: str = "code"
    timeout_seconds: float = 10.0
    retries: int = 1


@dataclass(frozen=True)
class NotificationSettings:
    """ Where notifications go and what the confirmation link points to. """
    confirmation_base_url: str
    service_url: typing.Optional[str] = None


@dataclass(frozen=True)
class AccountsSettings:
    """
    Immutable settings of the accounts service, built once at startup and
    handed to the services that need them.
    """
    session: SessionSettings
    google_oauth: GoogleOAuthSettings
    notifications: NotificationSettings
    confirmation_change_description: str = "Registration confirmation"

    @classmethod
    def from_configuration(cls, config: Configuration) -> "AccountsSettings":
        """ Build the settings from a processed configuration. """
        return cls(
            session=SessionSettings(
                secret=config.get_entry("session", "secret"),
                algorithm=config.get_entry("session", "algorithm"),
                ttl_minutes=config.get_entry("session", "ttl_minutes"),
                cookie_name=config.get_entry("session", "cookie_name")),
            google_oauth=GoogleOAuthSettings(
                client_id=config.get_entry("google_oauth", "client_id"),
                client_secret=config.get_entry("google_oauth",
                                               "client_secret"),
                authorization_url=config.get_entry("google_oauth",
                                                   "authorization_url"),
                token_url=config.get_entry("google_oauth", "token_url"),
                userinfo_url=config.get_entry("google_oauth",
                                              "userinfo_url"),
                scope=config.get_entry("google_oauth", "scope"),
                response_type=config.get_entry("google_oauth",
                                               "response_type"),
                timeout_seconds=config.get_entry("google_oauth",
                                                 "timeout_seconds"),
                retries=config.get_entry("google_oauth", "retries")),
            notifications=NotificationSettings(
                confirmation_base_url=config.get_entry(
                    "notifications", "confirmation_base_url"),
                service_url=config.get_entry("notifications", "service_url")),
            confirmation_change_description=config.get_entry(
                "confirmation", "change_description"))
