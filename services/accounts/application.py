"""
Copyright (C) 2025  Sede Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Sede. See the LICENSE file in the project
root for full license details.
"""
import asyncio
import logging
import os
import sys
import typing
from sede_common import __version__
from sede_common.configuration.configuration import (Configuration,
                                                     FALSY_STRINGS,
                                                     TRUTHY_STRINGS)
from sede_common.base_microservice_application \
    import BaseMicroserviceApplication
from sede_common.logging_consts import LOGGING_DATETIME_FORMAT_STRING, \
                                       LOGGING_DEFAULT_LOG_LEVEL, \
                                       LOGGING_LOG_FORMAT_STRING
from accounts.api import create_routes
from accounts.configuration_layout import CONFIGURATION_LAYOUT
from accounts.service_settings import AccountsSettings
from accounts.state_object import StateObject

# (section, item, label) printed at startup, secrets are masked.
DISPLAYED_CONFIGURATION: list = [
    ("logging", "log_level", "Logging log level"),
    ("session", "secret", "Session secret"),
    ("session", "algorithm", "Session algorithm"),
    ("session", "ttl_minutes", "Session TTL (minutes)"),
    ("session", "cookie_name", "Session cookie name"),
    ("google_oauth", "client_id", "Google client id"),
    ("google_oauth", "client_secret", "Google client secret"),
    ("google_oauth", "scope", "Google scope"),
    ("google_oauth", "timeout_seconds", "Google timeout (seconds)"),
    ("google_oauth", "retries", "Google retries"),
    ("notifications", "service_url", "Notifications service URL"),
    ("notifications", "confirmation_base_url", "Confirmation base URL"),
]


class Application(BaseMicroserviceApplication):
    """ Sede Accounts Service """

    def __init__(self, quart_instance):
        super().__init__()
        self._quart_instance = quart_instance
        self._config: typing.Optional[Configuration] = None
        self._settings: typing.Optional[AccountsSettings] = None
        self._state_object: StateObject = StateObject()

        self._logger = logging.getLogger(__name__)
        log_format = logging.Formatter(LOGGING_LOG_FORMAT_STRING,
                                       LOGGING_DATETIME_FORMAT_STRING)
        console_stream = logging.StreamHandler(sys.stdout)
        console_stream.setFormatter(log_format)
        self._logger.setLevel(LOGGING_DEFAULT_LOG_LEVEL)
        self._logger.propagate = True
        self._logger.addHandler(console_stream)

    @property
    def state_object(self) -> StateObject:
        """ Runtime state shared with the views and data access layers. """
        return self._state_object

    @property
    def settings(self) -> typing.Optional[AccountsSettings]:
        """ Service settings, None until initialised. """
        return self._settings

    async def _initialise(self) -> bool:
        self._logger.info("Sede Accounts Microservice %s", __version__)

        config_file = os.getenv("SEDE_ACCOUNTS_CONFIG_FILE", None)
        raw_required = os.getenv("SEDE_ACCOUNTS_CONFIG_FILE_REQUIRED",
                                 "false").strip().lower()

        if raw_required in TRUTHY_STRINGS:
            config_file_required: bool = True
        elif raw_required in FALSY_STRINGS:
            config_file_required: bool = False
        else:
            print(f"[FATAL ERROR] Invalid value for "
                  f"SEDE_ACCOUNTS_CONFIG_FILE_REQUIRED: '{raw_required}'",
                  flush=True)
            return False

        if not config_file and config_file_required:
            print("[FATAL ERROR] Configuration file missing!", flush=True)
            return False

        self._config = Configuration()
        self._config.configure(CONFIGURATION_LAYOUT,
                               config_file,
                               config_file_required)

        try:
            self._config.process_config()

        except ValueError as ex:
            self._logger.critical("Configuration error : %s", ex)
            return False

        self._logger.setLevel(self._config.get_entry("logging", "log_level"))

        self._display_configuration_details()

        self._settings = AccountsSettings.from_configuration(self._config)

        # Set the version string on state object.
        self._state_object.version = __version__

        self._quart_instance.register_blueprint(
            create_routes(self._logger, self._state_object, self._settings))

        return True

    async def _main_loop(self) -> None:
        """ Abstract method for main application. """
        await asyncio.sleep(0.1)

    async def _shutdown(self):
        """ Shutdown logic. """

    def _display_configuration_details(self):
        self._logger.info("Configuration")
        self._logger.info("=============")

        current_section: typing.Optional[str] = None
        for section, item, label in DISPLAYED_CONFIGURATION:
            if section != current_section:
                self._logger.info("[%s]", section)
                current_section = section

            self._logger.info("=> %-30s : %s", label,
                              self._config.get_display_entry(section, item))
