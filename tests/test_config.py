"""Tests for runtime configuration loading and validation."""

import logging
from unittest.mock import patch

import pytest

from sync_documenter.config import (
    DEFAULT_MAX_PARALLEL_CONNECTORS,
    DEFAULT_REPORT_TITLE,
    Config,
    load_config,
    load_from_files,
    validate_config,
)
from sync_documenter.logger import setup_logging


class TestValidateConfig:
    def test_defaults_valid(self):
        validate_config(Config())

    def test_title_stripped(self):
        config = Config(report_title="  Q3  ")
        validate_config(config)
        assert config.report_title == "Q3"

    def test_empty_title(self):
        with pytest.raises(ValueError, match="Report title cannot be empty"):
            validate_config(Config(report_title="   "))

    @pytest.mark.parametrize("value", [0, -1, 65])
    def test_parallelism_out_of_range(self, value):
        with pytest.raises(ValueError, match="max_parallel_connectors"):
            validate_config(Config(max_parallel_connectors=value))

    @pytest.mark.parametrize("value", [1, 64])
    def test_parallelism_bounds_valid(self, value):
        validate_config(Config(max_parallel_connectors=value))

    def test_facet_override_must_be_list(self):
        with pytest.raises(ValueError, match="connector_facets"):
            validate_config(Config(connector_facets={"AD": "properties"}))


class TestLoadConfig:
    def test_defaults(self):
        config = load_config()
        assert config.report_title == DEFAULT_REPORT_TITLE
        assert config.max_parallel_connectors == DEFAULT_MAX_PARALLEL_CONNECTORS
        assert config.connector_facets == {}
        assert config.debug is False

    def test_yaml_fallbacks(self):
        config = load_config(
            yaml_fallbacks={
                "report_title": "From YAML",
                "max_parallel_connectors": 8,
                "connector_facets": {"AD": ["properties"]},
                "debug": True,
            }
        )
        assert config.report_title == "From YAML"
        assert config.max_parallel_connectors == 8
        assert config.connector_facets == {"AD": ["properties"]}
        assert config.debug is True

    def test_env_beats_yaml(self, monkeypatch):
        monkeypatch.setenv("SYNC_DOCUMENTER_REPORT_TITLE", "From env")
        monkeypatch.setenv("SYNC_DOCUMENTER_MAX_PARALLEL_CONNECTORS", "3")
        config = load_config(
            yaml_fallbacks={"report_title": "From YAML", "max_parallel_connectors": 8}
        )
        assert config.report_title == "From env"
        assert config.max_parallel_connectors == 3

    def test_args_beat_env(self, monkeypatch):
        monkeypatch.setenv("SYNC_DOCUMENTER_REPORT_TITLE", "From env")
        monkeypatch.setenv("SYNC_DOCUMENTER_MAX_PARALLEL_CONNECTORS", "3")
        config = load_config(report_title="From arg", max_parallel_connectors=2)
        assert config.report_title == "From arg"
        assert config.max_parallel_connectors == 2

    def test_non_numeric_parallelism(self, monkeypatch):
        monkeypatch.setenv("SYNC_DOCUMENTER_MAX_PARALLEL_CONNECTORS", "many")
        with pytest.raises(ValueError, match="must be a number"):
            load_config()

    def test_out_of_range_parallelism(self, monkeypatch):
        monkeypatch.setenv("SYNC_DOCUMENTER_MAX_PARALLEL_CONNECTORS", "100")
        with pytest.raises(ValueError):
            load_config()

    @pytest.mark.parametrize("value", ["true", "1", "yes", "on", "TRUE"])
    def test_debug_truthy_env(self, monkeypatch, value):
        monkeypatch.setenv("SYNC_DOCUMENTER_DEBUG", value)
        assert load_config().debug is True

    @pytest.mark.parametrize("value", ["false", "0", "no", "off"])
    def test_debug_falsy_env_beats_yaml(self, monkeypatch, value):
        monkeypatch.setenv("SYNC_DOCUMENTER_DEBUG", value)
        assert load_config(yaml_fallbacks={"debug": True}).debug is False

    def test_debug_arg_beats_env(self, monkeypatch):
        monkeypatch.setenv("SYNC_DOCUMENTER_DEBUG", "false")
        assert load_config(debug=True).debug is True


class TestLoadFromFiles:
    @pytest.fixture(autouse=True)
    def setup_logging_mock(self):
        with patch("sync_documenter.config.setup_logging") as mock_setup:
            yield mock_setup

    def test_zero_config(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HOME", str(tmp_path))
        config, logging_config = load_from_files()
        assert config.report_title == DEFAULT_REPORT_TITLE
        assert logging_config.level == "INFO"

    def test_reads_project_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HOME", str(tmp_path / "home"))
        cfg = tmp_path / ".sync_documenter" / "config.yml"
        cfg.parent.mkdir()
        cfg.write_text(
            "documenter:\n"
            "  report_title: Project title\n"
            "  max_parallel_connectors: 6\n"
            "logging:\n"
            "  level: DEBUG\n"
            "  format: json\n"
        )
        config, logging_config = load_from_files(max_parallel_connectors=2)
        assert config.report_title == "Project title"
        assert config.max_parallel_connectors == 2
        assert logging_config.level == "DEBUG"
        assert logging_config.format == "json"

    def test_no_warning_on_defaults(self, tmp_path, monkeypatch, caplog):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HOME", str(tmp_path))
        with caplog.at_level(logging.WARNING):
            load_from_files()
        assert caplog.records == []

    def test_dotenv_in_working_directory(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HOME", str(tmp_path))
        # registered so teardown removes what load_dotenv sets
        monkeypatch.setenv("SYNC_DOCUMENTER_REPORT_TITLE", "")
        monkeypatch.delenv("SYNC_DOCUMENTER_REPORT_TITLE")
        (tmp_path / ".env").write_text("SYNC_DOCUMENTER_REPORT_TITLE=From dotenv\n")
        config, _ = load_from_files()
        assert config.report_title == "From dotenv"

    def test_debug_env_reaches_logging_setup(
        self, tmp_path, monkeypatch, setup_logging_mock
    ):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HOME", str(tmp_path))
        monkeypatch.setenv("SYNC_DOCUMENTER_DEBUG", "true")
        config, _ = load_from_files()
        assert config.debug is True
        setup_logging_mock.assert_called_once_with(
            debug=True, log_file=None, debug_format="text", level="INFO"
        )

    def test_logging_section_reaches_logging_setup(
        self, tmp_path, monkeypatch, setup_logging_mock
    ):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HOME", str(tmp_path))
        cfg = tmp_path / ".sync_documenter" / "config.yml"
        cfg.parent.mkdir()
        cfg.write_text(
            "logging:\n"
            "  level: WARNING\n"
            "  format: json\n"
            f"  file: {tmp_path / 'run.log'}\n"
        )
        load_from_files()
        setup_logging_mock.assert_called_once_with(
            debug=False,
            log_file=str(tmp_path / "run.log"),
            debug_format="json",
            level="WARNING",
        )

    def test_init_logging_off(self, tmp_path, monkeypatch, setup_logging_mock):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HOME", str(tmp_path))
        load_from_files(init_logging=False)
        setup_logging_mock.assert_not_called()

    @patch("logging.basicConfig")
    def test_debug_forces_debug_level(self, mock_basic, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HOME", str(tmp_path))
        with patch("sync_documenter.config.setup_logging", wraps=setup_logging):
            load_from_files(debug=True)
        assert mock_basic.call_args[1]["level"] == logging.DEBUG
