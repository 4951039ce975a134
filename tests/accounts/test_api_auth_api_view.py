from http import HTTPStatus
import logging
import unittest
from unittest.mock import AsyncMock, MagicMock, patch
from quart import Quart
from accounts.api.auth_api import create_blueprint
from accounts.api.auth_api_view import INVALID_BODY_MESSAGE
from accounts.data_access_layer.account_data_access_layer import \
    AccountStoreError
from accounts.data_services.service_result import ErrorKind, ServiceResult
from accounts.state_object import StateObject
from accounts_test_support import make_logger, make_settings

PUBLIC_ACCOUNT = {"id": "6f1c2a8e-3b0d-4c55-9a57-0c4f1f1b2d3e",
                  "name": "Ana", "surname": "Ruiz", "full_name": "Ana Ruiz",
                  "email": "ana@example.com", "confirmed": False,
                  "active": False}


class TestAuthApiView(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.logger = make_logger()
        self.settings = make_settings()

        self.service = MagicMock()
        for method in ("register", "confirm", "login", "google_login",
                       "current_account"):
            setattr(self.service, method, AsyncMock())

        patcher = patch("accounts.api.auth_api_view.AccountDataService",
                        return_value=self.service)
        self.service_cls = patcher.start()
        self.addCleanup(patcher.stop)

        self.app = Quart(__name__)
        self.app.register_blueprint(
            create_blueprint(self.logger, StateObject(), self.settings),
            url_prefix="/auth")
        self.client = self.app.test_client()

    # ---------- register ----------
    async def test_register_created(self):
        self.service.register.return_value = \
            ServiceResult.success(PUBLIC_ACCOUNT)
        payload = {"name": "Ana", "surname": "Ruiz",
                   "email": "ana@example.com", "password": "Secr3t!"}

        response = await self.client.post("/auth/register", json=payload)

        self.assertEqual(response.status_code, HTTPStatus.CREATED)
        body = await response.get_json()
        self.assertEqual(body["data"], PUBLIC_ACCOUNT)
        self.service.register.assert_awaited_once_with(payload)

    async def test_register_validation_errors(self):
        self.service.register.return_value = \
            ServiceResult.validation_failure(
                {"email": "Email already exists"})

        response = await self.client.post(
            "/auth/register", json={"name": "Ana", "surname": "Ruiz",
                                    "email": "ana@example.com",
                                    "password": "x"})

        self.assertEqual(response.status_code, HTTPStatus.BAD_REQUEST)
        body = await response.get_json()
        self.assertEqual(body["data"], {"email": "Email already exists"})

    async def test_register_without_json_body(self):
        response = await self.client.post("/auth/register", data="not json")

        self.assertEqual(response.status_code, HTTPStatus.BAD_REQUEST)
        body = await response.get_json()
        self.assertEqual(body["message"], INVALID_BODY_MESSAGE)
        self.service.register.assert_not_awaited()

    async def test_register_with_json_array_body(self):
        response = await self.client.post("/auth/register", json=[1, 2])

        self.assertEqual(response.status_code, HTTPStatus.BAD_REQUEST)

    # ---------- confirm ----------
    async def test_confirm_success(self):
        confirmed = dict(PUBLIC_ACCOUNT, confirmed=True, active=True)
        self.service.confirm.return_value = ServiceResult.success(confirmed)
        code = "0b8a2e4c-7d1f-4a3b-9c6e-5f2d1a0b9c8d"

        response = await self.client.get(f"/auth/confirm/{code}")

        self.assertEqual(response.status_code, HTTPStatus.OK)
        body = await response.get_json()
        self.assertTrue(body["data"]["active"])
        called_code, origin = self.service.confirm.await_args.args
        self.assertEqual(called_code, code)
        self.assertIsInstance(origin, str)

    async def test_confirm_unknown_code(self):
        self.service.confirm.return_value = ServiceResult.failure(
            ErrorKind.NOT_FOUND, "Confirmation code does not exist")

        response = await self.client.get(
            "/auth/confirm/0b8a2e4c-7d1f-4a3b-9c6e-5f2d1a0b9c8d")

        self.assertEqual(response.status_code, HTTPStatus.NOT_FOUND)
        body = await response.get_json()
        self.assertEqual(body["data"],
                         {"error": "Confirmation code does not exist"})

    # ---------- login / logout ----------
    async def test_login_sets_http_only_cookie(self):
        self.service.login.return_value = \
            ServiceResult.success({"jwt": "signed.token.value"})

        response = await self.client.post(
            "/auth/login", json={"email": "ana@example.com",
                                 "password": "Secr3t!"})

        self.assertEqual(response.status_code, HTTPStatus.OK)
        body = await response.get_json()
        self.assertEqual(body["data"], {"jwt": "signed.token.value"})

        cookie = response.headers.get("Set-Cookie")
        self.assertIn("jwt=signed.token.value", cookie)
        self.assertIn("HttpOnly", cookie)
        self.assertIn("SameSite=Lax", cookie)

    async def test_login_wrong_password_is_unauthorized_without_cookie(self):
        self.service.login.return_value = ServiceResult.failure(
            ErrorKind.AUTHORIZATION, "Password is incorrect",
            {"password": "Password is incorrect"})

        response = await self.client.post(
            "/auth/login", json={"email": "ana@example.com",
                                 "password": "wrong"})

        self.assertEqual(response.status_code, HTTPStatus.UNAUTHORIZED)
        self.assertIsNone(response.headers.get("Set-Cookie"))

    async def test_login_unknown_email_is_not_found(self):
        self.service.login.return_value = ServiceResult.failure(
            ErrorKind.NOT_FOUND, "Email does not exist",
            {"email": "Email does not exist"})

        response = await self.client.post(
            "/auth/login", json={"email": "nobody@example.com",
                                 "password": "Secr3t!"})

        self.assertEqual(response.status_code, HTTPStatus.NOT_FOUND)
        self.assertEqual(await response.get_json(),
                         {"email": "Email does not exist"})

    async def test_logout_clears_cookie(self):
        response = await self.client.post("/auth/logout")

        self.assertEqual(response.status_code, HTTPStatus.OK)
        cookie = response.headers.get("Set-Cookie")
        self.assertTrue(cookie.startswith("jwt=;"))

    # ---------- me ----------
    async def test_me_reads_token_from_cookie(self):
        self.service.current_account.return_value = \
            ServiceResult.success(PUBLIC_ACCOUNT)

        response = await self.client.get(
            "/auth/me", headers={"Cookie": "jwt=signed.token.value"})

        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.service.current_account.assert_awaited_once_with(
            "signed.token.value")

    async def test_me_without_cookie_is_unauthorized(self):
        self.service.current_account.return_value = ServiceResult.failure(
            ErrorKind.AUTHORIZATION, "Unauthenticated")

        response = await self.client.get("/auth/me")

        self.assertEqual(response.status_code, HTTPStatus.UNAUTHORIZED)
        self.service.current_account.assert_awaited_once_with(None)

    # ---------- google ----------
    async def test_google_url(self):
        self.service.google_authorization_url.return_value = \
            ServiceResult.success({"url": "https://consent.example.com"})

        response = await self.client.post(
            "/auth/google/url",
            json={"redirectUri": "https://app.example.com/callback"})

        self.assertEqual(response.status_code, HTTPStatus.OK)
        body = await response.get_json()
        self.assertEqual(body["data"], {"url": "https://consent.example.com"})

    async def test_google_login_sets_cookie(self):
        self.service.google_login.return_value = \
            ServiceResult.success({"jwt": "google.session.token"})

        response = await self.client.post(
            "/auth/google/login",
            json={"code": "4/abc", "redirectUri": "https://a.example"})

        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertIn("jwt=google.session.token",
                      response.headers.get("Set-Cookie"))

    async def test_google_login_upstream_failure(self):
        self.service.google_login.return_value = ServiceResult.failure(
            ErrorKind.UPSTREAM, "Failed to receive the Google access token")

        response = await self.client.post(
            "/auth/google/login",
            json={"code": "4/abc", "redirectUri": "https://a.example"})

        self.assertEqual(response.status_code, HTTPStatus.BAD_REQUEST)
        self.assertIsNone(response.headers.get("Set-Cookie"))

    # ---------- failures ----------
    async def test_store_error_is_internal_server_error(self):
        self.service.login.side_effect = AccountStoreError("unreachable")

        response = await self.client.post(
            "/auth/login", json={"email": "ana@example.com",
                                 "password": "Secr3t!"})

        self.assertEqual(response.status_code,
                         HTTPStatus.INTERNAL_SERVER_ERROR)
        body = await response.get_json()
        self.assertEqual(body["data"], {"error": "Internal Server Error"})

    async def test_unexpected_error_is_logged(self):
        self.service.register.side_effect = RuntimeError("boom")

        with self.assertLogs(self.logger.name, level=logging.ERROR):
            response = await self.client.post(
                "/auth/register", json={"name": "Ana"})

        self.assertEqual(response.status_code,
                         HTTPStatus.INTERNAL_SERVER_ERROR)


class TestCreateAuthBlueprint(unittest.IsolatedAsyncioTestCase):
    async def test_routes_are_logged(self):
        logger = make_logger("test_auth_routes")

        with self.assertLogs("test_auth_routes", level=logging.DEBUG) as logs:
            create_blueprint(logger, StateObject(), make_settings())

        messages = [record.getMessage() for record in logs.records]
        self.assertIn("Registering Auth API routes:", messages)
        self.assertIn("=> /auth/register [POST]", messages)
        self.assertIn("=> /auth/google/login [POST]", messages)
