"""
Copyright (C) 2025  Sede Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Sede. See the LICENSE file in the project
root for full license details.
"""
import logging

LOGGING_DATETIME_FORMAT_STRING = "%Y-%m-%d %H:%M:%S"
LOGGING_LOG_FORMAT_STRING = "%(asctime)s [%(levelname)s] %(message)s"

# Level used until the configuration has been read
LOGGING_DEFAULT_LOG_LEVEL = logging.DEBUG

# Levels accepted by the logging::log_level configuration item
LOGGING_CONFIGURABLE_LEVELS = ["DEBUG", "INFO"]
LOGGING_CONFIGURED_DEFAULT_LEVEL = "INFO"

# Printed in place of secrets in the configuration summary
LOGGING_MASKED_VALUE = "********"
