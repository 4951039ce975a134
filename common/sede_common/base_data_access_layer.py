"""
Copyright (C) 2025  Sede Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Sede. See the LICENSE file in the project
root for full license details.
"""
import abc
import logging
from sede_common.service_health_enums import ComponentDegradationLevel


class DataStoreError(Exception):
    """ Unexpected failure of the underlying data store. """


class BaseDataAccessLayer(abc.ABC):
    """
    Base class for data access layers that run queries on a single pooled
    connection and report the database health on a shared state object.

    The state object is expected to expose ``database_health`` and
    ``database_health_state_str`` attributes.
    """

    def __init__(self, db, logger: logging.Logger, state_object):
        self._db = db
        self._logger: logging.Logger = logger.getChild(__name__)
        self._state_object = state_object

    def _mark_database_operational(self, details: str = "Database operational"
                                   ) -> None:
        # Unreachable stays reported until restart, queries never clear it.
        if self._state_object.database_health != \
                ComponentDegradationLevel.FULLY_DEGRADED:
            self._state_object.database_health = ComponentDegradationLevel.NONE
            self._state_object.database_health_state_str = details

    def _mark_database_degraded(self,
                                level: ComponentDegradationLevel,
                                details: str) -> None:
        self._state_object.database_health = level
        self._state_object.database_health_state_str = details
