"""
Copyright (C) 2025  Sede Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Sede. See the LICENSE file in the project
root for full license details.
"""
import logging
from quart import Blueprint
from sede_common.route_decorators import route_not_using_db
from accounts.api.auth_api_view import AuthApiView
from accounts.service_settings import AccountsSettings
from accounts.state_object import StateObject


def create_blueprint(logger: logging.Logger,
                     state_object: StateObject,
                     settings: AccountsSettings) -> Blueprint:
    """
    Creates and registers a Quart Blueprint for handling authentication.

    This function initializes an `AuthApiView` with the provided logger,
    state object and settings, and then defines the account API endpoints.

    Args:
        logger (logging.Logger): A logger instance for logging messages.
        state_object (StateObject): Shared service state.
        settings (AccountsSettings): Service settings.

    Returns:
        Blueprint: A Quart `Blueprint` object containing the registered routes.
    """
    view = AuthApiView(logger, state_object, settings)

    blueprint = Blueprint('auth_api', __name__)

    logger.debug("Registering Auth API routes:")

    logger.debug("=> /auth/register [POST]")

    @blueprint.route("/register", methods=["POST"])
    async def auth_register_request():
        return await view.register()

    logger.debug("=> /auth/confirm/<code> [GET]")

    @blueprint.route("/confirm/<code>", methods=["GET"])
    async def auth_confirm_request(code: str):
        return await view.confirm(code)

    logger.debug("=> /auth/login [POST]")

    @blueprint.route("/login", methods=["POST"])
    async def auth_login_request():
        return await view.login()

    logger.debug("=> /auth/logout [POST]")

    @blueprint.route("/logout", methods=["POST"])
    @route_not_using_db
    async def auth_logout_request():
        return await view.logout()

    logger.debug("=> /auth/me [GET]")

    @blueprint.route("/me", methods=["GET"])
    async def auth_me_request():
        return await view.me()

    logger.debug("=> /auth/google/url [POST]")

    @blueprint.route("/google/url", methods=["POST"])
    @route_not_using_db
    async def auth_google_url_request():
        return await view.google_authorization_url()

    logger.debug("=> /auth/google/login [POST]")

    @blueprint.route("/google/login", methods=["POST"])
    async def auth_google_login_request():
        return await view.google_login()

    return blueprint
