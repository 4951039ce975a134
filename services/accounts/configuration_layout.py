"""
Copyright (C) 2025  Sede Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Sede. See the LICENSE file in the project
root for full license details.
"""
from sede_common.configuration import configuration_setup
from sede_common.configuration.configuration_setup import (
    ConfigItemDataType,
    ConfigurationSetupItem)
from sede_common.logging_consts import (LOGGING_CONFIGURABLE_LEVELS,
                                       LOGGING_CONFIGURED_DEFAULT_LEVEL)

GOOGLE_AUTHORIZATION_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://www.googleapis.com/oauth2/v4/token"
GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"

CONFIGURATION_LAYOUT = configuration_setup.ConfigurationSetup(
    {
        "logging": [
            ConfigurationSetupItem(
                "log_level", ConfigItemDataType.STRING,
                valid_values=LOGGING_CONFIGURABLE_LEVELS,
                default_value=LOGGING_CONFIGURED_DEFAULT_LEVEL)
        ],
        "session": [
            ConfigurationSetupItem(
                "secret", ConfigItemDataType.STRING,
                is_required=True, is_secret=True),
            ConfigurationSetupItem(
                "algorithm", ConfigItemDataType.STRING,
                valid_values=['HS256', 'HS384', 'HS512'],
                default_value="HS256"),
            ConfigurationSetupItem(
                "ttl_minutes", ConfigItemDataType.UNSIGNED_INT,
                default_value=60),
            ConfigurationSetupItem(
                "cookie_name", ConfigItemDataType.STRING,
                default_value="jwt"),
        ],
        "google_oauth": [
            ConfigurationSetupItem(
                "client_id", ConfigItemDataType.STRING, is_required=True),
            ConfigurationSetupItem(
                "client_secret", ConfigItemDataType.STRING,
                is_required=True, is_secret=True),
            ConfigurationSetupItem(
                "scope", ConfigItemDataType.STRING,
                default_value="openid email profile"),
            ConfigurationSetupItem(
                "response_type", ConfigItemDataType.STRING,
                default_value="code"),
            ConfigurationSetupItem(
                "authorization_url", ConfigItemDataType.STRING,
                default_value=GOOGLE_AUTHORIZATION_URL),
            ConfigurationSetupItem(
                "token_url", ConfigItemDataType.STRING,
                default_value=GOOGLE_TOKEN_URL),
            ConfigurationSetupItem(
                "userinfo_url", ConfigItemDataType.STRING,
                default_value=GOOGLE_USERINFO_URL),
            ConfigurationSetupItem(
                "timeout_seconds", ConfigItemDataType.FLOAT,
                default_value=10.0),
            ConfigurationSetupItem(
                "retries", ConfigItemDataType.UNSIGNED_INT,
                default_value=1),
        ],
        "notifications": [
            ConfigurationSetupItem(
                "service_url", ConfigItemDataType.STRING),
            ConfigurationSetupItem(
                "confirmation_base_url", ConfigItemDataType.STRING,
                default_value="http://localhost:8000/auth/confirm"),
        ],
        "confirmation": [
            ConfigurationSetupItem(
                "change_description", ConfigItemDataType.STRING,
                default_value="Registration confirmation"),
        ],
    }
)
