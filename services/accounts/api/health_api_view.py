"""
Copyright (C) 2025  Sede Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Sede. See the LICENSE file in the project
root for full license details.
"""
import http
import logging
import time
import quart
from sede_common.base_api_view import BaseApiView
from sede_common.service_health_enums import (ServiceDegradationStatus,
                                              ComponentDegradationLevel)
from accounts.state_object import StateObject


class HealthApiView(BaseApiView):
    """
    A view that provides health check information for the accounts service.

    This includes the health of the accounts database and of the service,
    whether the account schema is in place, uptime and version.
    """

    def __init__(self, logger: logging.Logger,
                 state_object: StateObject) -> None:
        self._logger = logger.getChild(__name__)
        self._state_object = state_object

    async def health(self) -> quart.Response:
        """
        Performs a health check and returns a JSON response with system status.

        A fully degraded component (or a missing schema) makes the service
        critical, any other issue makes it degraded.

        Returns:
            quart.Response: JSON response with overall status, dependency
                statuses, current issues (if any), uptime and version.
        """
        state = self._state_object
        uptime: int = int(time.time()) - state.startup_time
        issues: list = []

        if state.database_health != ComponentDegradationLevel.NONE:
            issues.append({"component": "database",
                           "status": state.database_health.value,
                           "details": state.database_health_state_str})

        if not state.schema_ready:
            issues.append({"component": "schema",
                           "status":
                               ComponentDegradationLevel.FULLY_DEGRADED.value,
                           "details": "Account schema not initialised"})

        if state.service_health != ComponentDegradationLevel.NONE:
            issues.append({"component": "service",
                           "status": state.service_health.value,
                           "details": state.service_health_state_str})

        if not issues:
            status = ServiceDegradationStatus.HEALTHY
        elif any(issue["status"] ==
                 ComponentDegradationLevel.FULLY_DEGRADED.value
                 for issue in issues):
            status = ServiceDegradationStatus.CRITICAL
        else:
            status = ServiceDegradationStatus.DEGRADED

        if status != ServiceDegradationStatus.HEALTHY:
            self._logger.debug("Health check reports %s: %s", status.value,
                               [issue["component"] for issue in issues])

        response = quart.jsonify({
            "status": status.value,
            "dependencies": {
                "database": state.database_health.value,
                "service": state.service_health.value,
            },
            "issues": issues or None,
            "uptime_seconds": uptime,
            "version": state.version,
        })
        response.status_code = http.HTTPStatus.OK
        return response
