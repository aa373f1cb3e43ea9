# ruff: noqa: INP001
"""Settings validation tests for auth-mode and delete-policy configuration."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from taskflow.core.auth_mode import AuthMode
from taskflow.core.config import Settings
from taskflow.core.delete_policy import ProjectDeletePolicy

LOCAL_TOKEN_ERROR = (
    "LOCAL_AUTH_TOKEN must be at least 50 characters and non-placeholder when AUTH_MODE=local"
)


def test_local_mode_requires_non_empty_token() -> None:
    with pytest.raises(ValidationError, match=LOCAL_TOKEN_ERROR):
        Settings(
            _env_file=None,
            auth_mode=AuthMode.LOCAL,
            local_auth_token="",
        )


def test_local_mode_requires_minimum_length() -> None:
    with pytest.raises(ValidationError, match=LOCAL_TOKEN_ERROR):
        Settings(
            _env_file=None,
            auth_mode=AuthMode.LOCAL,
            local_auth_token="x" * 49,
        )


def test_local_mode_rejects_placeholder_token() -> None:
    with pytest.raises(ValidationError, match=LOCAL_TOKEN_ERROR):
        Settings(
            _env_file=None,
            auth_mode=AuthMode.LOCAL,
            local_auth_token="change-me",
        )


def test_local_mode_accepts_real_token() -> None:
    token = "a" * 50
    settings = Settings(
        _env_file=None,
        auth_mode=AuthMode.LOCAL,
        local_auth_token=token,
    )

    assert settings.auth_mode == AuthMode.LOCAL
    assert settings.local_auth_token == token


def test_clerk_mode_requires_secret_key() -> None:
    with pytest.raises(
        ValidationError,
        match="CLERK_SECRET_KEY must be set and non-empty when AUTH_MODE=clerk",
    ):
        Settings(
            _env_file=None,
            auth_mode=AuthMode.CLERK,
            clerk_secret_key="",
        )


def test_project_delete_policy_defaults_to_leaving_references(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.delenv("PROJECT_DELETE_POLICY", raising=False)
    settings = Settings(_env_file=None, auth_mode=AuthMode.LOCAL, local_auth_token="a" * 50)

    assert settings.project_delete_policy == ProjectDeletePolicy.LEAVE_DANGLING


def test_project_delete_policy_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PROJECT_DELETE_POLICY", "cascade")
    settings = Settings(_env_file=None, auth_mode=AuthMode.LOCAL, local_auth_token="a" * 50)

    assert settings.project_delete_policy == ProjectDeletePolicy.CASCADE


def test_db_auto_migrate_defaults_on_in_dev_only(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DB_AUTO_MIGRATE", raising=False)
    dev = Settings(
        _env_file=None,
        environment="dev",
        auth_mode=AuthMode.LOCAL,
        local_auth_token="a" * 50,
    )
    prod = Settings(
        _env_file=None,
        environment="production",
        auth_mode=AuthMode.LOCAL,
        local_auth_token="a" * 50,
    )

    assert dev.db_auto_migrate is True
    assert prod.db_auto_migrate is False
