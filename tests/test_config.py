"""Tests for configuration loading."""

import os
import tempfile

import pytest
import yaml

from cv_blueprint.config import AppConfig, MergeSettings, load_config, validate_config


@pytest.fixture
def config_file():
    """Create a temporary config file."""
    config_data = {
        "database_url": "sqlite:///tmp/test.db",
        "log_dir": "test-logs",
        "merging": {
            "similarity_threshold": 0.6,
            "max_attempts": 5,
        },
    }

    with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        yaml.dump(config_data, f)
        path = f.name

    yield path
    os.unlink(path)


class TestLoadConfig:
    def test_loads_valid_config(self, config_file, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        config = load_config(config_file)
        assert config.database_url == "sqlite:///tmp/test.db"
        assert config.log_dir == "test-logs"
        assert config.merging.similarity_threshold == 0.6
        assert config.merging.max_attempts == 5

    def test_missing_file_raises(self):
        with pytest.raises(FileNotFoundError):
            load_config("nonexistent.yaml")

    def test_defaults_applied(self, config_file):
        config = load_config(config_file)
        assert config.merging.baseline_confidence == 0.6
        assert config.merging.confidence_increment == 0.15
        assert config.log_level == "INFO"

    def test_env_overrides_database_url(self, config_file, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql://db/blueprints")
        config = load_config(config_file)
        assert config.database_url == "postgresql://db/blueprints"


class TestValidateConfig:
    def test_defaults_are_valid(self):
        assert validate_config(AppConfig()) == []

    def test_bad_threshold_warns(self):
        config = AppConfig(merging=MergeSettings(similarity_threshold=1.5))
        warnings = validate_config(config)
        assert any("similarity_threshold" in w for w in warnings)

    def test_zero_attempts_warns(self):
        config = AppConfig(merging=MergeSettings(max_attempts=0))
        warnings = validate_config(config)
        assert any("max_attempts" in w for w in warnings)

    def test_unknown_log_level_warns(self):
        warnings = validate_config(AppConfig(log_level="chatty"))
        assert any("log_level" in w for w in warnings)

    def test_ceiling_at_one_warns(self):
        config = AppConfig(merging=MergeSettings(max_confidence=1.0))
        warnings = validate_config(config)
        assert any("max_confidence" in w for w in warnings)
