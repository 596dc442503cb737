"""Tests for justdo/config.py: construct Settings directly, bypassing module singleton."""

import pytest
from pydantic import ValidationError

from justdo.config import Settings, get_settings, reset_settings, settings


def make_settings(monkeypatch, **overrides):
    """Apply env overrides then construct a fresh Settings instance."""
    for k, v in overrides.items():
        monkeypatch.setenv(k.upper(), str(v))
    return Settings()


def test_defaults(monkeypatch):
    s = make_settings(monkeypatch)
    assert s.confidence_threshold == 0.6
    assert s.guardrail_enabled is True
    assert s.resolution_message_window == 3
    assert s.resolution_search_limit == 5
    assert s.timezone == "UTC"


def test_threshold_from_env(monkeypatch):
    s = make_settings(monkeypatch, CONFIDENCE_THRESHOLD="0.75")
    assert s.confidence_threshold == 0.75


def test_threshold_out_of_range_rejected(monkeypatch):
    with pytest.raises(ValidationError):
        make_settings(monkeypatch, CONFIDENCE_THRESHOLD="1.5")


def test_guardrail_can_be_disabled(monkeypatch):
    s = make_settings(monkeypatch, GUARDRAIL_ENABLED="false")
    assert s.guardrail_enabled is False


def test_derived_paths_use_data_dir(monkeypatch, tmp_path):
    s = make_settings(monkeypatch, DATA_DIR=str(tmp_path))
    assert s.logs_dir.startswith(str(tmp_path))
    assert s.queue_db_path.startswith(str(tmp_path))
    assert s.queue_db_path.endswith("offline_queue.db")


def test_proxy_reads_fresh_settings_after_reset(monkeypatch):
    monkeypatch.setenv("RESOLUTION_SEARCH_LIMIT", "9")
    reset_settings()
    assert settings.resolution_search_limit == 9
    assert get_settings() is get_settings()


def test_unknown_timezone_rejected(monkeypatch):
    with pytest.raises(ValidationError):
        make_settings(monkeypatch, TIMEZONE="Mars/Olympus_Mons")
