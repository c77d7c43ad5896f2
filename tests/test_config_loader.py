"""Tests for updatestream.settings — TOML config loading and env overrides."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from updatestream.schemas.config import StreamingConfig
from updatestream.settings import (
    SMOOTH_UPDATES_ENV,
    apply_env_overrides,
    load_streaming_config,
)

# Path to the real config file shipped with the package
_CONFIG_DIR = Path(__file__).parent.parent / "updatestream" / "config"


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch):
    monkeypatch.delenv(SMOOTH_UPDATES_ENV, raising=False)


class TestLoadStreamingConfig:
    def test_loads_real_defaults(self):
        config = load_streaming_config(_CONFIG_DIR / "defaults.toml")
        assert config.smooth_updates is True
        assert config.frame_interval_ms == 16
        assert config.start_speed == 30.0
        assert config.idle_timeout_ms == 100
        assert config.max_merge == 5

    def test_default_path(self):
        config = load_streaming_config()
        assert isinstance(config, StreamingConfig)

    def test_missing_file_raises(self):
        with pytest.raises(FileNotFoundError):
            load_streaming_config(Path("/nonexistent/defaults.toml"))

    def test_missing_section_uses_model_defaults(self, tmp_path):
        path = tmp_path / "empty.toml"
        path.write_text('[other]\nfoo = "bar"\n')
        config = load_streaming_config(path)
        assert config == StreamingConfig()

    def test_non_table_section_raises(self, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text('streaming = "yes"\n')
        with pytest.raises(ValueError, match="must be a table"):
            load_streaming_config(path)

    def test_custom_toml(self, tmp_path):
        path = tmp_path / "custom.toml"
        path.write_text(
            "[streaming]\n"
            "smooth_updates = false\n"
            "frame_interval_ms = 33\n"
            "max_merge = 3\n"
        )
        config = load_streaming_config(path)
        assert config.smooth_updates is False
        assert config.frame_interval == pytest.approx(0.033)
        assert config.max_merge == 3

    def test_invalid_value_rejected(self, tmp_path):
        path = tmp_path / "invalid.toml"
        path.write_text("[streaming]\nmax_merge = 0\n")
        with pytest.raises(ValidationError):
            load_streaming_config(path)


class TestEnvOverrides:
    def test_no_env_keeps_config(self):
        config = StreamingConfig(smooth_updates=False)
        assert apply_env_overrides(config) is config

    def test_true_enables(self, monkeypatch):
        monkeypatch.setenv(SMOOTH_UPDATES_ENV, "true")
        config = apply_env_overrides(StreamingConfig(smooth_updates=False))
        assert config.smooth_updates is True

    def test_other_values_disable(self, monkeypatch):
        monkeypatch.setenv(SMOOTH_UPDATES_ENV, "1")
        config = apply_env_overrides(StreamingConfig(smooth_updates=True))
        assert config.smooth_updates is False

    def test_loader_applies_env(self, monkeypatch):
        monkeypatch.setenv(SMOOTH_UPDATES_ENV, "false")
        config = load_streaming_config(_CONFIG_DIR / "defaults.toml")
        assert config.smooth_updates is False

    def test_seconds_properties(self):
        config = StreamingConfig(frame_interval_ms=16, idle_timeout_ms=100)
        assert config.frame_interval == pytest.approx(0.016)
        assert config.idle_timeout == pytest.approx(0.1)
