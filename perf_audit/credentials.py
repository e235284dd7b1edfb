"""
Test-account credentials for authenticated page collection.

Environment variables win; the OS keyring is the fallback store.
"""

from __future__ import annotations

import dataclasses
import os
from typing import Optional

import keyring


EMAIL_ENV = "PERF_AUDIT_EMAIL"
PASSWORD_ENV = "PERF_AUDIT_PASSWORD"

# Service name for keyring
SERVICE_NAME = "perf_audit"


class MissingCredentialsError(RuntimeError):
    pass


@dataclasses.dataclass(frozen=True)
class LoginCredentials:
    email: str
    password: str

    def __repr__(self) -> str:
        return f"LoginCredentials(email={self.email!r}, password='***')"


def _from_keyring(field: str) -> Optional[str]:
    try:
        return keyring.get_password(SERVICE_NAME, field)
    except Exception:
        # Keyring might fail (no backend available)
        return None


def set_login_credentials(email: str, password: str) -> None:
    """
    Store test-account credentials in the OS keyring.

    Raises:
        RuntimeError: If keyring storage fails
    """
    try:
        keyring.set_password(SERVICE_NAME, "email", email)
        keyring.set_password(SERVICE_NAME, "password", password)
    except Exception as e:
        raise RuntimeError(f"Failed to store credentials: {e}") from e


def get_login_credentials() -> LoginCredentials:
    """
    Resolve the test account used to log in before measuring.

    Returns:
        LoginCredentials from the environment, else from keyring

    Raises:
        MissingCredentialsError: If either value is unavailable
    """
    email = os.environ.get(EMAIL_ENV) or _from_keyring("email")
    password = os.environ.get(PASSWORD_ENV) or _from_keyring("password")
    if not email or not password:
        raise MissingCredentialsError(
            f"Authenticated mode needs {EMAIL_ENV} and {PASSWORD_ENV} "
            f"(or keyring service '{SERVICE_NAME}')"
        )
    return LoginCredentials(email=email, password=password)
