# dashboard/services/credentials.py
"""
Sign-in through the credentials provider.

The provider signals failures with AuthError subclasses carrying a ``type``
discriminator. sign_in() folds every outcome into a SignInResult:

    SIGNED_IN            user is logged in (Flask-Login session)
    INVALID_CREDENTIALS  discriminator "CredentialsSignin"
    REJECTED             any other discriminator
    FAILED               anything unclassified; the original exception is kept

authenticate() is what the login form calls: None on success, a short
message for the two recovered outcomes, and FAILED is raised again.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

from flask import current_app
from flask_login import login_user
from sqlalchemy.exc import SQLAlchemyError

from dashboard.extensions import db
from dashboard.models import User
from dashboard.utils.passwords import MIN_PASSWORD_LENGTH, verify_password


CREDENTIALS_STRATEGY = "credentials"

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


# =========================================================
# Provider errors
# =========================================================
class AuthError(Exception):
    type = "AuthError"


class CredentialsSignin(AuthError):
    type = "CredentialsSignin"


class AccessDenied(AuthError):
    type = "AccessDenied"


# =========================================================
# Provider
# =========================================================
class CredentialsProvider:
    name = CREDENTIALS_STRATEGY

    def authorize(self, form: Mapping[str, Any]) -> User:
        email = (form.get("email") or "").strip().lower()
        password = form.get("password") or ""

        if not _EMAIL_RE.match(email) or len(password) < MIN_PASSWORD_LENGTH:
            raise CredentialsSignin()

        user = User.query.filter(db.func.lower(User.email) == email).first()
        if not user or not verify_password(user.password, password):
            raise CredentialsSignin()

        if user.is_active is False:
            raise AccessDenied()

        return user


PROVIDERS = {CREDENTIALS_STRATEGY: CredentialsProvider()}


# =========================================================
# Sign-in result
# =========================================================
class SignInOutcome(enum.Enum):
    SIGNED_IN = "signed_in"
    INVALID_CREDENTIALS = "invalid_credentials"
    REJECTED = "rejected"
    FAILED = "failed"


_MESSAGES = {
    SignInOutcome.INVALID_CREDENTIALS: "Invalid credentials.",
    SignInOutcome.REJECTED: "Something went wrong.",
}


@dataclass(frozen=True)
class SignInResult:
    outcome: SignInOutcome
    user: Optional[User] = None
    error: Optional[BaseException] = None

    @property
    def message(self) -> Optional[str]:
        return _MESSAGES.get(self.outcome)


def _classify(error_type: str) -> SignInOutcome:
    if error_type == CredentialsSignin.type:
        return SignInOutcome.INVALID_CREDENTIALS
    return SignInOutcome.REJECTED


def sign_in(strategy: str, form: Mapping[str, Any], remember: bool = False) -> SignInResult:
    provider = PROVIDERS.get(strategy)
    if provider is None:
        return SignInResult(SignInOutcome.FAILED, error=ValueError(f"Unknown sign-in strategy: {strategy}"))

    try:
        user = provider.authorize(form)
    except AuthError as exc:
        current_app.logger.warning("Sign-in refused (%s)", exc.type)
        return SignInResult(_classify(exc.type), error=exc)
    except Exception as exc:
        return SignInResult(SignInOutcome.FAILED, error=exc)

    login_user(user, remember=remember)

    try:
        user.last_login_at = datetime.utcnow()
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()

    current_app.logger.info("User %s signed in", user.id)
    return SignInResult(SignInOutcome.SIGNED_IN, user=user)


def authenticate(form: Mapping[str, Any]) -> Optional[str]:
    result = sign_in(CREDENTIALS_STRATEGY, form, remember=bool(form.get("remember")))
    if result.outcome is SignInOutcome.FAILED:
        raise result.error
    return result.message
