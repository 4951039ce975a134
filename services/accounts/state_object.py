"""
Copyright (C) 2025  Sede Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Sede. See the LICENSE file in the project
root for full license details.
"""
import time
from dataclasses import dataclass, field
from sede_common.service_health_enums import ComponentDegradationLevel


@dataclass
class StateObject:
    """
    Runtime state of the accounts service, shared by the views and the data
    access layers.

    Attributes:
        service_health (ComponentDegradationLevel): Health of the service
            itself.
        service_health_state_str (str): Details of the service health.
        database_health (ComponentDegradationLevel): Health of the accounts
            database, updated by every query.
        database_health_state_str (str): Details of the database health.
        schema_ready (bool): The accounts table and its unique indexes were
            ensured at startup.
        version (str): The version of the service.
        startup_time (int): Unix time at which the service started.
    """
    service_health: ComponentDegradationLevel = ComponentDegradationLevel.NONE
    service_health_state_str: str = ""
    database_health: ComponentDegradationLevel = ComponentDegradationLevel.NONE
    database_health_state_str: str = ""
    schema_ready: bool = False
    version: str = ""
    startup_time: int = field(default_factory=lambda: int(time.time()))
