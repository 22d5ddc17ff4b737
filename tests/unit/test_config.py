"""
Unit tests for configuration loading, env overrides and logging setup.
"""

import json
import logging

import pytest
import yaml

from fim.core.config import (
    DEFAULT_MAX_FILES,
    FIMConfig,
    IndexingConfig,
    LoggingConfig,
    WatchConfig,
    configure_logging,
    load_config,
)
from fim.core.errors import InvalidArgumentError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in [
        "FIM_INDEXING_MAX_FILES",
        "FIM_INDEXING_IGNORE_PATTERNS",
        "FIM_WATCH_ENABLED",
        "FIM_WATCH_IGNORE_PATTERNS",
        "FIM_LOGGING_LEVEL",
        "FIM_LOGGING_FORMAT",
    ]:
        monkeypatch.delenv(var, raising=False)


class TestDefaults:
    def test_packaged_defaults(self):
        config = FIMConfig()

        assert config.indexing.max_files == DEFAULT_MAX_FILES == 10000
        assert config.indexing.ignore_patterns == []
        assert config.watch.enabled is False
        assert ".git/" in config.watch.ignore_patterns
        assert config.logging.level == "INFO"

    def test_default_lists_are_not_shared(self):
        first = FIMConfig()
        second = FIMConfig()

        first.watch.ignore_patterns.append("dist/")

        assert "dist/" not in second.watch.ignore_patterns

    @pytest.mark.parametrize("max_files", [0, -1, "many"])
    def test_invalid_max_files_rejected(self, max_files):
        with pytest.raises(InvalidArgumentError):
            IndexingConfig(max_files=max_files)

    @pytest.mark.parametrize("patterns", ["node_modules/", [".git/", 3], None])
    def test_ignore_patterns_must_be_string_list(self, patterns):
        with pytest.raises(InvalidArgumentError):
            IndexingConfig(ignore_patterns=patterns)
        with pytest.raises(InvalidArgumentError):
            WatchConfig(ignore_patterns=patterns)


class TestFromFile:
    def test_yaml_file(self, tmp_path):
        path = tmp_path / "fim.yaml"
        path.write_text(
            "indexing:\n"
            "  max_files: 500\n"
            "  ignore_patterns:\n"
            "    - node_modules/\n"
            "logging:\n"
            "  level: DEBUG\n"
        )

        config = FIMConfig.from_file(path)

        assert config.indexing.max_files == 500
        assert config.indexing.ignore_patterns == ["node_modules/"]
        assert config.logging.level == "DEBUG"
        assert config.watch.enabled is False

    def test_json_file(self, tmp_path):
        path = tmp_path / "fim.json"
        path.write_text(json.dumps({"watch": {"enabled": True, "ignore_patterns": []}}))

        config = FIMConfig.from_file(path)

        assert config.watch.enabled is True
        assert config.watch.ignore_patterns == []
        assert config.indexing.max_files == DEFAULT_MAX_FILES

    def test_empty_yaml_uses_defaults(self, tmp_path):
        path = tmp_path / "empty.yml"
        path.write_text("")

        assert FIMConfig.from_file(path) == FIMConfig()

    def test_invalid_max_files_in_file(self, tmp_path):
        path = tmp_path / "fim.yaml"
        path.write_text("indexing:\n  max_files: 0\n")

        with pytest.raises(InvalidArgumentError):
            FIMConfig.from_file(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            FIMConfig.from_file(tmp_path / "missing.yaml")

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "fim.toml"
        path.write_text("")

        with pytest.raises(ValueError, match="Unsupported"):
            FIMConfig.from_file(path)

    def test_unknown_key_rejected(self, tmp_path):
        path = tmp_path / "fim.yaml"
        path.write_text("indexing:\n  max_file: 5\n")

        with pytest.raises(InvalidArgumentError, match="max_file"):
            FIMConfig.from_file(path)

    def test_unknown_section_rejected(self, tmp_path):
        path = tmp_path / "fim.json"
        path.write_text(json.dumps({"search": {}}))

        with pytest.raises(InvalidArgumentError, match="search"):
            FIMConfig.from_file(path)

    def test_malformed_yaml_rejected(self, tmp_path):
        path = tmp_path / "fim.yaml"
        path.write_text("indexing: [unclosed\n")

        with pytest.raises(InvalidArgumentError, match="Cannot parse"):
            FIMConfig.from_file(path)

    def test_malformed_json_rejected(self, tmp_path):
        path = tmp_path / "fim.json"
        path.write_text("{\"indexing\": ")

        with pytest.raises(InvalidArgumentError, match="Cannot parse"):
            FIMConfig.from_file(path)

    def test_scalar_ignore_patterns_rejected(self, tmp_path):
        path = tmp_path / "fim.yaml"
        path.write_text("indexing:\n  ignore_patterns: node_modules/\n")

        with pytest.raises(InvalidArgumentError, match="list of strings"):
            FIMConfig.from_file(path)

    def test_section_must_be_mapping(self, tmp_path):
        path = tmp_path / "fim.yaml"
        path.write_text("watch:\n  - .git/\n")

        with pytest.raises(InvalidArgumentError, match="mapping"):
            FIMConfig.from_file(path)

    def test_save_and_reload(self, tmp_path):
        config = FIMConfig()
        config.indexing.max_files = 42
        config.indexing.ignore_patterns = ["*.log"]
        path = tmp_path / "nested" / "fim.yaml"

        config.save(path)

        assert FIMConfig.from_file(path) == config


class TestSerialization:
    def test_to_yaml_round_trips_through_loader(self):
        config = FIMConfig()
        config.watch.enabled = True

        assert FIMConfig.from_dict(yaml.safe_load(config.to_yaml())) == config

    def test_to_json_has_every_section(self):
        data = json.loads(FIMConfig().to_json())

        assert set(data) == {"indexing", "watch", "logging"}
        assert data["indexing"]["max_files"] == DEFAULT_MAX_FILES


class TestEnvOverrides:
    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("FIM_INDEXING_MAX_FILES", "250")
        monkeypatch.setenv("FIM_INDEXING_IGNORE_PATTERNS", "build/, *.log ,")
        monkeypatch.setenv("FIM_WATCH_ENABLED", "yes")
        monkeypatch.setenv("FIM_LOGGING_LEVEL", "WARNING")

        config = load_config()

        assert config.indexing.max_files == 250
        assert config.indexing.ignore_patterns == ["build/", "*.log"]
        assert config.watch.enabled is True
        assert config.logging.level == "WARNING"

    def test_env_skipped_when_disabled(self, monkeypatch):
        monkeypatch.setenv("FIM_INDEXING_MAX_FILES", "250")

        assert load_config(apply_env=False).indexing.max_files == DEFAULT_MAX_FILES

    @pytest.mark.parametrize("value", ["0", "-3", "lots"])
    def test_invalid_env_max_files(self, monkeypatch, value):
        monkeypatch.setenv("FIM_INDEXING_MAX_FILES", value)

        with pytest.raises(InvalidArgumentError):
            load_config()

    def test_env_applies_over_file(self, tmp_path, monkeypatch):
        path = tmp_path / "fim.yaml"
        path.write_text("indexing:\n  max_files: 500\n")
        monkeypatch.setenv("FIM_INDEXING_MAX_FILES", "7")

        assert load_config(path).indexing.max_files == 7


class TestConfigureLogging:
    def test_unknown_level_rejected(self):
        with pytest.raises(InvalidArgumentError):
            configure_logging(LoggingConfig(level="LOUD"))

    def test_level_and_format_applied(self, monkeypatch):
        calls = []
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))

        configure_logging(LoggingConfig(level="debug", format="%(message)s"))

        assert calls == [{"level": logging.DEBUG, "format": "%(message)s", "force": True}]
