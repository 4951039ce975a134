"""
Copyright (C) 2025  Sede Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Sede. See the LICENSE file in the project
root for full license details.
"""
import logging
import quart
from accounts.service_settings import AccountsSettings
from accounts.state_object import StateObject
from .auth_api import create_blueprint as create_auth_bp
from .health_api import create_blueprint as create_health_bp


def create_routes(logger: logging.Logger,
                  state_object: StateObject,
                  settings: AccountsSettings) -> quart.Blueprint:
    """
    Build the blueprint holding every route of the accounts service.

    The account routes live under ``/auth``, the health probe sits at the
    root as ``/health``.

    Args:
        logger (logging.Logger): Service logger, handed to the views.
        state_object (StateObject): Health and version state shared with the
            data access layers.
        settings (AccountsSettings): Session, provider and notification
            settings.

    Returns:
        quart.Blueprint: Blueprint named ``api_routes`` ready to be
                         registered on the Quart app.
    """
    api_bp = quart.Blueprint("api_routes", __name__)

    api_bp.register_blueprint(create_auth_bp(logger, state_object, settings),
                              url_prefix="/auth")
    api_bp.register_blueprint(create_health_bp(logger, state_object))

    return api_bp
