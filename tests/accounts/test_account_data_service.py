from datetime import datetime, timezone
import unittest
import uuid
from unittest.mock import AsyncMock, MagicMock
from accounts.data_access_layer.account_document import Account, AccountEvent
from accounts.data_services.account_data_service import (AccountDataService,
                                                         CONFIRMATION_TITLE)
from accounts.data_services.account_models import (LocalRegistrationRequest,
                                                   OAuthProfile,
                                                   parse_model)
from accounts.data_services.credential_hasher import CredentialHasher
from accounts.data_services.confirmation_code import ConfirmationCodeIssuer
from accounts.data_services.service_result import ErrorKind, ServiceResult
from accounts.data_services.session_token_service import SessionTokenService
from accounts_test_support import make_logger, make_settings

REGISTRATION = {"name": "Ana", "surname": "Ruiz",
                "email": "ana@example.com", "password": "Secr3t!"}


class InMemoryAccountStore:
    """ Stand-in for AccountDataAccessLayer keeping accounts in a dict. """

    def __init__(self, hasher: CredentialHasher):
        self.hasher = hasher
        self.accounts: dict = {}
        self.upserts: list = []

    async def create_local(self, candidate, oauth=False):
        request, errors = parse_model(LocalRegistrationRequest, candidate)
        if errors:
            return ServiceResult.validation_failure(errors)
        if any(account.email == request.email
               for account in self.accounts.values()):
            return ServiceResult.validation_failure(
                {"email": "Email already exists"})

        account = Account(id=uuid.uuid4(), name=request.name,
                          surname=request.surname,
                          full_name=f"{request.name} {request.surname}",
                          email=request.email,
                          password_hash=self.hasher.hash(request.password),
                          confirmation_code=ConfirmationCodeIssuer.issue())
        self.accounts[account.id] = account
        return ServiceResult.success(account)

    async def mark_confirmed(self, code, change_description, origin):
        validation = ConfirmationCodeIssuer.validate(code)
        if not validation.valid:
            return validation
        for account in self.accounts.values():
            if account.confirmation_code == validation.payload:
                account.confirmed = True
                account.active = True
                account.confirmation_code = None
                account.event_log.append(AccountEvent(
                    datetime.now(timezone.utc), change_description, origin))
                return ServiceResult.success(account)
        return ServiceResult.failure(ErrorKind.NOT_FOUND,
                                     "Confirmation code does not exist")

    async def find_by_email(self, email):
        for account in self.accounts.values():
            if account.email == email:
                return ServiceResult.success(account)
        return ServiceResult.failure(ErrorKind.NOT_FOUND,
                                     "Email does not exist",
                                     {"email": "Email does not exist"})

    async def find_by_id(self, account_id):
        account = self.accounts.get(uuid.UUID(account_id))
        if account is None:
            return ServiceResult.failure(ErrorKind.NOT_FOUND,
                                         "Account does not exist")
        return ServiceResult.success(account)

    async def find_by_serialized_key(self, key):
        for account in self.accounts.values():
            if account.serialized_key == int(key):
                return ServiceResult.success(account)
        return ServiceResult.failure(ErrorKind.NOT_FOUND,
                                     "Account does not exist")

    async def record_login(self, account_id):
        account = self.accounts[account_id]
        account.last_login = datetime.now(timezone.utc)
        return ServiceResult.success(account)

    async def upsert_by_email(self, profile: OAuthProfile):
        self.upserts.append(profile)
        found = await self.find_by_email(profile.email)
        account = found.payload if found.valid else Account(
            id=uuid.uuid4(), name=profile.name, surname=profile.surname,
            full_name=profile.full_name, email=profile.email)
        if not account.confirmed:
            account.event_log.append(AccountEvent(
                datetime.now(timezone.utc),
                f"Email verified by {profile.provider}", profile.provider))
        account.provider = profile.provider
        account.provider_user_id = profile.provider_user_id
        account.serialized_key = profile.serialized_key
        account.confirmed = True
        account.active = True
        account.confirmation_code = None
        self.accounts[account.id] = account
        return ServiceResult.success(account)


class TestAccountDataService(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.settings = make_settings()
        self.hasher = CredentialHasher(rounds=4)
        self.store = InMemoryAccountStore(self.hasher)
        self.tokens = SessionTokenService(self.settings.session,
                                          make_logger())
        self.oauth_client = MagicMock()
        self.oauth_client.exchange_code_for_token = AsyncMock(
            return_value=ServiceResult.success({"access_token": "ya29"}))
        self.oauth_client.fetch_profile = AsyncMock(
            return_value=ServiceResult.success(OAuthProfile(
                name="Ana", surname="Ruiz", full_name="Ana Ruiz",
                email="ana@example.com", provider="Google",
                provider_user_id="109876543210")))
        self.notifications = MagicMock()
        self.notifications.send = AsyncMock(return_value=True)

        self.service = AccountDataService(self.store, make_logger(),
                                          self.settings, self.hasher,
                                          self.tokens, self.oauth_client,
                                          self.notifications)

    async def register_and_get_code(self) -> str:
        result = await self.service.register(dict(REGISTRATION))
        self.assertTrue(result.valid)
        account = next(iter(self.store.accounts.values()))
        return account.confirmation_code

    # ---------- register ----------
    async def test_register_returns_public_account_and_sends_link(self):
        result = await self.service.register(dict(REGISTRATION))

        self.assertTrue(result.valid)
        self.assertEqual(result.payload["full_name"], "Ana Ruiz")
        self.assertFalse(result.payload["confirmed"])
        self.assertFalse(result.payload["active"])
        self.assertNotIn("password_hash", result.payload)
        self.assertNotIn("confirmation_code", result.payload)

        code = next(iter(self.store.accounts.values())).confirmation_code
        notification = self.notifications.send.await_args.args[0]
        self.assertEqual(notification.title, CONFIRMATION_TITLE)
        self.assertEqual(notification.recipient, "ana@example.com")
        self.assertIn(f"http://localhost:8000/auth/confirm/{code}",
                      notification.rendered_body)
        self.assertIn("Ana Ruiz", notification.rendered_body)

    async def test_register_duplicate_email(self):
        await self.service.register(dict(REGISTRATION))
        result = await self.service.register(dict(REGISTRATION,
                                                  name="Other"))

        self.assertEqual(result.error.kind, ErrorKind.VALIDATION)
        self.assertEqual(result.error.fields,
                         {"email": "Email already exists"})
        self.assertEqual(len(self.store.accounts), 1)
        self.notifications.send.assert_awaited_once()

    async def test_register_survives_failed_notification(self):
        self.notifications.send.return_value = False

        result = await self.service.register(dict(REGISTRATION))

        self.assertTrue(result.valid)

    async def test_register_rejects_oversized_password(self):
        result = await self.service.register(dict(REGISTRATION,
                                                  password="x" * 5000))

        self.assertEqual(result.error.kind, ErrorKind.VALIDATION)
        self.assertEqual(result.error.fields,
                         {"password": "Password is too long"})
        self.assertEqual(self.store.accounts, {})
        self.notifications.send.assert_not_awaited()

    # ---------- confirm ----------
    async def test_full_registration_flow(self):
        code = await self.register_and_get_code()

        login = await self.service.login({"email": "ana@example.com",
                                          "password": "Secr3t!"})
        self.assertEqual(login.error.kind, ErrorKind.AUTHORIZATION)
        self.assertEqual(login.error.message, "Account is not active")

        confirmed = await self.service.confirm(code, "203.0.113.7")
        self.assertTrue(confirmed.valid)
        self.assertTrue(confirmed.payload["confirmed"])
        self.assertTrue(confirmed.payload["active"])
        self.assertEqual(confirmed.payload["event_log"][0]["description"],
                         "Registration confirmation")
        self.assertEqual(confirmed.payload["event_log"][0]["origin"],
                         "203.0.113.7")

        login = await self.service.login({"email": "ana@example.com",
                                          "password": "Secr3t!"})
        self.assertTrue(login.valid)

        current = await self.service.current_account(login.payload["jwt"])
        self.assertEqual(current.payload["email"], "ana@example.com")
        self.assertIsNotNone(current.payload["last_login"])

    async def test_confirmation_code_cannot_be_replayed(self):
        code = await self.register_and_get_code()
        await self.service.confirm(code, "203.0.113.7")

        replay = await self.service.confirm(code, "203.0.113.7")

        self.assertEqual(replay.error.kind, ErrorKind.NOT_FOUND)

    async def test_confirm_malformed_code(self):
        result = await self.service.confirm("not-a-code", "203.0.113.7")
        self.assertEqual(result.error.kind, ErrorKind.VALIDATION)

    # ---------- login ----------
    async def test_login_wrong_password_gives_no_token(self):
        code = await self.register_and_get_code()
        await self.service.confirm(code, "203.0.113.7")

        result = await self.service.login({"email": "ana@example.com",
                                           "password": "wrong"})

        self.assertEqual(result.error.kind, ErrorKind.AUTHORIZATION)
        self.assertIn("password", result.error.fields)
        self.assertNotIn("jwt", result.error.to_dict())

    async def test_login_unknown_email(self):
        result = await self.service.login({"email": "nobody@example.com",
                                           "password": "Secr3t!"})

        self.assertEqual(result.error.kind, ErrorKind.NOT_FOUND)
        self.assertEqual(result.error.to_dict(),
                         {"email": "Email does not exist"})

    async def test_login_with_mixed_case_domain(self):
        await self.service.register(dict(REGISTRATION,
                                         email="Ana@Example.COM"))
        account = next(iter(self.store.accounts.values()))
        self.assertEqual(account.email, "Ana@example.com")
        await self.service.confirm(account.confirmation_code, "203.0.113.7")

        result = await self.service.login({"email": "Ana@Example.COM",
                                           "password": "Secr3t!"})

        self.assertTrue(result.valid)
        self.assertIn("jwt", result.payload)

    async def test_login_rejects_oversized_password(self):
        result = await self.service.login({"email": "ana@example.com",
                                           "password": "x" * 5000})

        self.assertEqual(result.error.kind, ErrorKind.VALIDATION)
        self.assertEqual(result.error.fields,
                         {"password": "Password is too long"})

    async def test_login_missing_fields(self):
        result = await self.service.login({"email": "ana@example.com"})

        self.assertEqual(result.error.kind, ErrorKind.VALIDATION)
        self.assertEqual(result.error.fields,
                         {"password": "Password is required"})

    async def test_login_oauth_only_account_has_no_password(self):
        await self.service.google_login({"code": "4/abc",
                                         "redirectUri": "https://a.example"})

        result = await self.service.login({"email": "ana@example.com",
                                           "password": "anything"})

        self.assertEqual(result.error.kind, ErrorKind.AUTHORIZATION)

    # ---------- google ----------
    def test_google_authorization_url_requires_redirect_uri(self):
        result = self.service.google_authorization_url({})

        self.assertEqual(result.error.kind, ErrorKind.VALIDATION)
        self.assertIn("redirect_uri", result.error.fields)

    def test_google_authorization_url_delegates_to_client(self):
        self.oauth_client.build_authorization_url.return_value = \
            ServiceResult.success({"url": "https://consent"})

        result = self.service.google_authorization_url(
            {"redirectUri": "https://a.example/callback"})

        self.assertEqual(result.payload, {"url": "https://consent"})
        self.oauth_client.build_authorization_url.assert_called_once_with(
            "https://a.example/callback")

    async def test_google_login_creates_confirmed_account(self):
        result = await self.service.google_login(
            {"code": "4/abc", "redirectUri": "https://a.example"})

        self.assertTrue(result.valid)
        account = next(iter(self.store.accounts.values()))
        self.assertTrue(account.confirmed)
        self.assertTrue(account.active)
        self.assertIsInstance(account.serialized_key, int)
        self.assertEqual(account.event_log[0].description,
                         "Email verified by Google")

        self.oauth_client.exchange_code_for_token.assert_awaited_once_with(
            "4/abc", "https://a.example")
        self.oauth_client.fetch_profile.assert_awaited_once_with("ya29")

        current = await self.service.current_account(result.payload["jwt"])
        self.assertEqual(current.payload["provider"], "Google")

        by_key = await self.service.resolve_serialized_session(
            account.serialized_key)
        self.assertEqual(by_key.payload["email"], "ana@example.com")

    async def test_google_login_bypasses_pending_confirmation(self):
        await self.register_and_get_code()

        result = await self.service.google_login(
            {"code": "4/abc", "redirectUri": "https://a.example"})

        self.assertTrue(result.valid)
        self.assertEqual(len(self.store.accounts), 1)
        account = next(iter(self.store.accounts.values()))
        self.assertTrue(account.active)
        self.assertIsNone(account.confirmation_code)

    async def test_google_login_unverified_email_writes_nothing(self):
        self.oauth_client.fetch_profile.return_value = ServiceResult.failure(
            ErrorKind.UPSTREAM, "email is not verified")

        result = await self.service.google_login(
            {"code": "4/abc", "redirectUri": "https://a.example"})

        self.assertEqual(result.error.kind, ErrorKind.UPSTREAM)
        self.assertEqual(self.store.upserts, [])

    async def test_google_login_token_failure_stops_flow(self):
        self.oauth_client.exchange_code_for_token.return_value = \
            ServiceResult.failure(ErrorKind.UPSTREAM, "no token")

        result = await self.service.google_login(
            {"code": "4/abc", "redirectUri": "https://a.example"})

        self.assertEqual(result.error.kind, ErrorKind.UPSTREAM)
        self.oauth_client.fetch_profile.assert_not_awaited()
        self.assertEqual(self.store.upserts, [])

    async def test_google_login_requires_code(self):
        result = await self.service.google_login(
            {"redirectUri": "https://a.example"})

        self.assertEqual(result.error.kind, ErrorKind.VALIDATION)
        self.assertEqual(result.error.fields,
                         {"code": "Authorization code is required"})

    # ---------- sessions ----------
    async def test_current_account_rejects_invalid_token(self):
        result = await self.service.current_account("garbage")
        self.assertEqual(result.error.kind, ErrorKind.AUTHORIZATION)

    async def test_current_account_rejects_inactive_account(self):
        await self.register_and_get_code()
        account = next(iter(self.store.accounts.values()))

        result = await self.service.current_account(
            self.tokens.issue(account.id))

        self.assertEqual(result.error.kind, ErrorKind.AUTHORIZATION)
