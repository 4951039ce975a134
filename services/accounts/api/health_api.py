"""
Copyright (C) 2025  Sede Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Sede. See the LICENSE file in the project
root for full license details.
"""
import logging
from quart import Blueprint
from sede_common.route_decorators import route_not_using_db
from accounts.api.health_api_view import HealthApiView
from accounts.state_object import StateObject


def create_blueprint(logger: logging.Logger,
                     state_object: StateObject) -> Blueprint:
    """
    Blueprint exposing ``GET /health``.

    The probe never takes a pooled connection: it reports the database
    health recorded by the data access layers, so it keeps answering when
    the pool is exhausted or the database is down.

    Args:
        logger (logging.Logger): Service logger.
        state_object (StateObject): State read by the health view.

    Returns:
        Blueprint: The ``health_api`` blueprint.
    """
    view = HealthApiView(logger, state_object)

    blueprint = Blueprint('health_api', __name__)

    logger.debug("Registering Health Status API:")
    logger.debug("=> /health [GET]")

    @blueprint.route('/health', methods=['GET'])
    @route_not_using_db
    async def health_status_request():
        return await view.health()

    return blueprint
