# -*- coding: utf-8 -*-
"""
Tests for test-account credential lookup (environment first, keyring fallback).
"""

from __future__ import annotations

import pytest

from perf_audit import credentials
from perf_audit.credentials import (
    EMAIL_ENV,
    PASSWORD_ENV,
    LoginCredentials,
    MissingCredentialsError,
    get_login_credentials,
)


@pytest.fixture
def fake_keyring(monkeypatch):
    store: dict[tuple[str, str], str] = {}

    def get_password(service, username):
        return store.get((service, username))

    def set_password(service, username, password):
        store[(service, username)] = password

    monkeypatch.setattr(credentials.keyring, "get_password", get_password)
    monkeypatch.setattr(credentials.keyring, "set_password", set_password)
    monkeypatch.delenv(EMAIL_ENV, raising=False)
    monkeypatch.delenv(PASSWORD_ENV, raising=False)
    return store


class TestLoginCredentials:
    def test_environment(self, fake_keyring, monkeypatch):
        monkeypatch.setenv(EMAIL_ENV, "qa@example.com")
        monkeypatch.setenv(PASSWORD_ENV, "hunter2")
        assert get_login_credentials() == LoginCredentials("qa@example.com", "hunter2")

    def test_keyring_fallback(self, fake_keyring):
        credentials.set_login_credentials("ring@example.com", "s3cret")
        creds = get_login_credentials()
        assert creds.email == "ring@example.com"
        assert creds.password == "s3cret"

    def test_environment_wins_over_keyring(self, fake_keyring, monkeypatch):
        credentials.set_login_credentials("ring@example.com", "s3cret")
        monkeypatch.setenv(EMAIL_ENV, "env@example.com")
        creds = get_login_credentials()
        assert creds.email == "env@example.com"
        assert creds.password == "s3cret"

    def test_missing_raises(self, fake_keyring):
        with pytest.raises(MissingCredentialsError) as exc:
            get_login_credentials()
        assert EMAIL_ENV in str(exc.value)
        assert PASSWORD_ENV in str(exc.value)

    def test_keyring_backend_failure_counts_as_missing(self, fake_keyring, monkeypatch):
        def broken(service, username):
            raise RuntimeError("no backend")

        monkeypatch.setattr(credentials.keyring, "get_password", broken)
        monkeypatch.setenv(EMAIL_ENV, "qa@example.com")
        with pytest.raises(MissingCredentialsError):
            get_login_credentials()

    def test_repr_hides_password(self):
        assert "hunter2" not in repr(LoginCredentials("qa@example.com", "hunter2"))
