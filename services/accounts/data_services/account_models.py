"""
Copyright (C) 2025  Sede Development Team
SPDX-License-Identifier: AGPL-3.0-or-later

This file is part of Sede. See the LICENSE file in the project
root for full license details.
"""
import typing
from pydantic import BaseModel, EmailStr, Field, TypeAdapter, ValidationError

# Keeps any UTF-8 password within passlib's 4096 byte limit.
PASSWORD_MAX_LENGTH: int = 1024

NonEmptyStr = typing.Annotated[str, Field(min_length=1)]
PasswordStr = typing.Annotated[str, Field(min_length=1,
                                          max_length=PASSWORD_MAX_LENGTH)]


# --- Input Models ---
class AccountCandidate(BaseModel):
    """
    Shape shared by every account written to the store.

    Attributes:
        name (str): Given name.
        surname (str): Family name.
        email (EmailStr): E-mail address, unique across accounts.
    """
    name: NonEmptyStr
    surname: NonEmptyStr
    email: EmailStr


class LocalRegistrationRequest(AccountCandidate):
    """ Registration of a password-based account. """
    password: PasswordStr


class OAuthProfile(AccountCandidate):
    """
    Profile returned by an identity provider, normalised to the account
    shape.

    Attributes:
        surname (str): Family name, may be empty as not every provider
            account has one.
        full_name (str): Display name reported by the provider.
        provider (str): Identity provider name, e.g. "Google".
        provider_user_id (str): The provider's own id for the user.
        avatar_url (Optional[str]): Picture URL, when the provider has one.
        serialized_key (Optional[int]): Numeric session key assigned on
            login.
    """
    surname: str = ""
    full_name: NonEmptyStr
    provider: NonEmptyStr
    provider_user_id: NonEmptyStr
    avatar_url: typing.Optional[str] = None
    serialized_key: typing.Optional[int] = None


class LoginRequest(BaseModel):
    """ Password login. """
    email: EmailStr
    password: PasswordStr


class GoogleAuthUrlRequest(BaseModel):
    """ Request for the provider consent screen URL. """
    redirect_uri: NonEmptyStr = Field(alias="redirectUri")

    model_config = {"populate_by_name": True}


class GoogleLoginRequest(BaseModel):
    """ Authorization code returned to the redirect URI by the provider. """
    code: NonEmptyStr
    redirect_uri: NonEmptyStr = Field(alias="redirectUri")

    model_config = {"populate_by_name": True}


FIELD_LABELS: dict = {
    "name": "Name",
    "surname": "Surname",
    "email": "Email",
    "password": "Password",
    "full_name": "Full name",
    "provider": "Provider",
    "provider_user_id": "Provider user id",
    "avatar_url": "Avatar URL",
    "serialized_key": "Serialized key",
    "code": "Authorization code",
    "redirect_uri": "Redirect URI",
    "redirectUri": "Redirect URI",
}

ModelType = typing.TypeVar("ModelType", bound=BaseModel)


def _error_message(field_name: str, error: dict) -> str:
    label = FIELD_LABELS.get(field_name, field_name)

    if error["type"] in ("missing", "string_too_short"):
        return f"{label} is required"

    if error["type"] == "string_too_long":
        return f"{label} is too long"

    if field_name == "email":
        return f"{label} does not have a valid format"

    return f"{label} is not valid"


def parse_model(model_cls: typing.Type[ModelType],
                data: typing.Any
                ) -> typing.Tuple[typing.Optional[ModelType], dict]:
    """
    Validate raw input against a request model.

    Extra keys are ignored.

    Returns:
        tuple: (model instance or None, {field: first error message}).
    """
    if not isinstance(data, dict):
        return None, {"body": "Request body must be a JSON object"}

    try:
        return model_cls.model_validate(data), {}

    except ValidationError as ex:
        errors: dict = {}
        for error in ex.errors():
            field_name = str(error["loc"][0]) if error["loc"] else "body"
            field_name = "redirect_uri" if field_name == "redirectUri" \
                else field_name
            errors.setdefault(field_name, _error_message(field_name, error))
        return None, errors


_EMAIL_ADAPTER = TypeAdapter(EmailStr)


def normalise_email(email: str) -> str:
    """
    Email in the form registration stores it (the domain is lowercased).
    Values that are not valid addresses are returned unchanged.
    """
    try:
        return _EMAIL_ADAPTER.validate_python(email)

    except ValidationError:
        return email
