"""Tests for environment-backed configuration."""

import pytest

from src.utils.config import (
    DEFAULT_BITBUCKET_API_BASE_URL,
    get_bitbucket_access_token,
    get_bitbucket_api_base_url,
    get_bitbucket_strict_status,
    get_bitbucket_timeout_seconds,
    get_config_value,
    get_reviewer_environment,
    get_reviewer_model,
    parse_config_value,
)

CONFIG_KEYS = (
    "BITBUCKET_ACCESS_TOKEN",
    "BITBUCKET_API_BASE_URL",
    "BITBUCKET_STRICT_STATUS",
    "BITBUCKET_TIMEOUT_SECONDS",
    "REVIEWER_MODEL",
    "REVIEWER_ENVIRONMENT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in CONFIG_KEYS:
        monkeypatch.delenv(key, raising=False)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("true", True),
        ("FALSE", False),
        ("42", 42),
        ("2.5", 2.5),
        ("o4-mini", "o4-mini"),
    ],
)
def test_parse_config_value(raw, expected):
    assert parse_config_value(raw) == expected


def test_get_config_value_default(monkeypatch):
    assert get_config_value("BITBUCKET_TIMEOUT_SECONDS", 5) == 5
    monkeypatch.setenv("BITBUCKET_TIMEOUT_SECONDS", "12")
    assert get_config_value("BITBUCKET_TIMEOUT_SECONDS", 5) == 12


class TestBitbucketConfig:
    def test_access_token_kept_as_string(self, monkeypatch):
        assert get_bitbucket_access_token() is None
        monkeypatch.setenv("BITBUCKET_ACCESS_TOKEN", "12345")
        assert get_bitbucket_access_token() == "12345"

    def test_empty_access_token_is_unset(self, monkeypatch):
        monkeypatch.setenv("BITBUCKET_ACCESS_TOKEN", "")
        assert get_bitbucket_access_token() is None

    def test_api_base_url(self, monkeypatch):
        assert get_bitbucket_api_base_url() == DEFAULT_BITBUCKET_API_BASE_URL
        monkeypatch.setenv("BITBUCKET_API_BASE_URL", "http://localhost:8080/")
        assert get_bitbucket_api_base_url() == "http://localhost:8080/"

    @pytest.mark.parametrize(
        ("raw", "expected"), [(None, False), ("true", True), ("false", False), ("1", False)]
    )
    def test_strict_status(self, monkeypatch, raw, expected):
        if raw is not None:
            monkeypatch.setenv("BITBUCKET_STRICT_STATUS", raw)
        assert get_bitbucket_strict_status() is expected

    def test_timeout_seconds(self, monkeypatch):
        assert get_bitbucket_timeout_seconds() == 30.0
        monkeypatch.setenv("BITBUCKET_TIMEOUT_SECONDS", "5")
        assert get_bitbucket_timeout_seconds() == 5.0

    @pytest.mark.parametrize("raw", ["soon", "true"])
    def test_timeout_seconds_must_be_numeric(self, monkeypatch, raw):
        monkeypatch.setenv("BITBUCKET_TIMEOUT_SECONDS", raw)
        with pytest.raises(ValueError, match="BITBUCKET_TIMEOUT_SECONDS"):
            get_bitbucket_timeout_seconds()


class TestReviewerConfig:
    def test_model_default_and_override(self, monkeypatch):
        assert get_reviewer_model() == "o4-mini"
        monkeypatch.setenv("REVIEWER_MODEL", "gpt-5-mini")
        assert get_reviewer_model() == "gpt-5-mini"

    def test_environment_default_and_override(self, monkeypatch):
        assert get_reviewer_environment() == "local"
        monkeypatch.setenv("REVIEWER_ENVIRONMENT", "ci")
        assert get_reviewer_environment() == "ci"
