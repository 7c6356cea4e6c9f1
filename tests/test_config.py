"""
Tests for configuration loading.
"""

import json
import pytest
from pathlib import Path

from agromatch.config import DEFAULT_WEIGHTS, MatchConfig, load_config, parse_weights
from agromatch.env import load_env
from agromatch.errors import ConfigurationError


class TestMatchConfig:
    """Test config validation at construction time."""

    def test_defaults_are_valid(self):
        config = MatchConfig()
        assert config.weights == DEFAULT_WEIGHTS
        assert sum(config.weights.values()) == pytest.approx(1.0)

    def test_bad_weights_fail_at_load(self):
        with pytest.raises(ConfigurationError):
            MatchConfig(weights={"skill": 0.7, "experience": 0.2})

    def test_bad_lead_weights_fail_at_load(self):
        with pytest.raises(ConfigurationError):
            MatchConfig(lead_weights={"financial_health": 2.0})

    @pytest.mark.parametrize("field,value", [
        ("fetch_timeout", 0),
        ("fetch_retries", -1),
        ("cache_ttl", -5),
        ("max_workers", 0),
    ])
    def test_bad_settings(self, field, value):
        with pytest.raises(ConfigurationError):
            MatchConfig(**{field: value})


class TestParseWeights:
    def test_parses_pairs(self):
        assert parse_weights("skill=0.5, experience=0.5") == {"skill": 0.5, "experience": 0.5}

    def test_rejects_missing_equals(self):
        with pytest.raises(ConfigurationError):
            parse_weights("skill:0.5")

    def test_rejects_bad_number(self):
        with pytest.raises(ConfigurationError):
            parse_weights("skill=half")


class TestLoadConfig:
    """Test layering of defaults, file and environment."""

    def test_defaults_without_file_or_env(self):
        config = load_config(environ={})
        assert config == MatchConfig()

    def test_file_values(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({
            "weights": {"skill": 0.5, "experience": 0.3, "location": 0.1, "language": 0.1},
            "fetch_timeout": 2.5,
            "db_path": str(tmp_path / "x.db"),
        }))
        config = load_config(path, environ={})
        assert config.weights["skill"] == 0.5
        assert config.fetch_timeout == 2.5
        assert config.db_path == tmp_path / "x.db"

    def test_env_overrides_file(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"fetch_timeout": 2.5}))
        env = {
            "AGROMATCH_FETCH_TIMEOUT": "9",
            "AGROMATCH_WEIGHTS": "skill=0.25,experience=0.25,location=0.25,language=0.25",
            "AGROMATCH_DB": "/tmp/other.db",
        }
        config = load_config(path, environ=env)
        assert config.fetch_timeout == 9.0
        assert config.weights == {"skill": 0.25, "experience": 0.25, "location": 0.25, "language": 0.25}
        assert config.db_path == Path("/tmp/other.db")

    def test_env_weights_must_sum_to_one(self):
        with pytest.raises(ConfigurationError):
            load_config(environ={"AGROMATCH_WEIGHTS": "skill=0.5,experience=0.2"})

    def test_unknown_file_key(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"colour": "green"}))
        with pytest.raises(ConfigurationError, match="Unknown config key"):
            load_config(path, environ={})

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_config(tmp_path / "missing.json", environ={})

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json")
        with pytest.raises(ConfigurationError):
            load_config(path, environ={})

    def test_bad_env_number(self):
        with pytest.raises(ConfigurationError):
            load_config(environ={"AGROMATCH_MAX_WORKERS": "many"})


class TestLoadEnv:
    def test_missing_file(self, tmp_path):
        assert load_env(tmp_path / ".env") is False

    def test_loads_without_overriding(self, tmp_path, monkeypatch):
        env_file = tmp_path / ".env"
        env_file.write_text("AGROMATCH_TEST_VALUE=from-file\nAGROMATCH_TEST_KEEP=from-file\n")
        monkeypatch.delenv("AGROMATCH_TEST_VALUE", raising=False)
        monkeypatch.setenv("AGROMATCH_TEST_KEEP", "from-env")

        assert load_env(env_file) is True

        import os
        assert os.environ["AGROMATCH_TEST_VALUE"] == "from-file"
        assert os.environ["AGROMATCH_TEST_KEEP"] == "from-env"
        monkeypatch.delenv("AGROMATCH_TEST_VALUE", raising=False)
