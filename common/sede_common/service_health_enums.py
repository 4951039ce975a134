"""
Copyright (C) 2025  Sede Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Sede. See the LICENSE file in the project
root for full license details.
"""
from enum import Enum


class ServiceDegradationStatus(Enum):
    """ Overall status reported by a service health endpoint """

    # All components report no degradation
    HEALTHY = "healthy"

    # At least one component is partially degraded
    DEGRADED = "degraded"

    # At least one component is down, requests are expected to fail
    CRITICAL = "critical"


class ComponentDegradationLevel(Enum):
    """ Degradation level of a single component (database, service...) """

    # Operational
    NONE = "none"

    # Reachable, but some operations fail
    PART_DEGRADED = "partial"

    # Unreachable or unusable
    FULLY_DEGRADED = "fully_degraded"
