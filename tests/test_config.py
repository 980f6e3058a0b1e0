"""Tests for settings validation."""

import pytest
from pydantic import ValidationError

from bpmprobe.config import Settings


@pytest.mark.parametrize("field", ["sample_rate", "channels", "frame_size", "hop_size"])
def test_sizes_must_be_positive(field):
    with pytest.raises(ValidationError):
        Settings(**{field: 0})


def test_hop_size_from_env(monkeypatch):
    monkeypatch.setenv("BPMPROBE_HOP_SIZE", "0")
    with pytest.raises(ValidationError):
        Settings()


def test_storage_url_env_alias(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "https://project.supabase.co")
    assert Settings().storage_url == "https://project.supabase.co"
