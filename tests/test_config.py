"""
Tests for environment-driven configuration.
"""

import pytest

from mental_reset.config import load_settings

ENV_VARS = (
    "SUPABASE_URL",
    "SUPABASE_ANON_KEY",
    "MENTAL_RESET_TABLE",
    "MENTAL_RESET_ACTIVITY_LIMIT",
    "MENTAL_RESET_LOG_LEVEL",
    "MENTAL_RESET_HOST",
    "MENTAL_RESET_PORT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = load_settings()
    assert settings.table == "mental_reset_entries"
    assert settings.activity_limit == 3
    assert settings.log_level == "INFO"
    assert settings.port == 8000
    assert not settings.use_supabase


def test_overrides(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "https://project.supabase.co")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon-key")
    monkeypatch.setenv("MENTAL_RESET_ACTIVITY_LIMIT", "0")
    monkeypatch.setenv("MENTAL_RESET_LOG_LEVEL", "debug")

    settings = load_settings()

    assert settings.use_supabase
    assert settings.activity_limit == 0
    assert settings.log_level == "DEBUG"


def test_negative_limit(monkeypatch):
    monkeypatch.setenv("MENTAL_RESET_ACTIVITY_LIMIT", "-1")
    with pytest.raises(ValueError):
        load_settings()
