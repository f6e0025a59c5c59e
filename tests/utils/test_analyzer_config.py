"""
Unit tests for ConfigManager, ParserConfig and LoggingConfig
"""

from pathlib import Path

import pytest

from log_analyzer.core.exceptions import ConfigurationError
from log_analyzer.utils.config import (
    DEFAULT_KNOWN_ASSETS,
    DEFAULT_QUOTE_SUFFIXES,
    ConfigManager,
    LoggingConfig,
    ParserConfig,
)

INI = """
[parser]
known_assets = eth, btc ,SOL
quote_suffixes = USDT,USDC

[logging]
log_level = DEBUG
log_dir = /tmp/analyzer-logs
"""

YAML = """
parser:
  known_assets: [ETH, FOO]
logging:
  log_level: WARNING
"""


@pytest.fixture(autouse=True)
def clear_env(monkeypatch):
    monkeypatch.delenv(ConfigManager.LOG_LEVEL_ENV, raising=False)


class TestParserConfig:
    def test_defaults(self):
        config = ParserConfig()

        assert config.known_assets == list(DEFAULT_KNOWN_ASSETS)
        assert config.quote_suffixes == list(DEFAULT_QUOTE_SUFFIXES)
        assert "ETH" in config.known_assets

    def test_empty_assets_rejected(self):
        with pytest.raises(ConfigurationError, match="known_assets"):
            ParserConfig(known_assets=[])

    def test_empty_suffixes_rejected(self):
        with pytest.raises(ConfigurationError, match="quote_suffixes"):
            ParserConfig(quote_suffixes=[])

    def test_invalid_ticker_rejected(self):
        with pytest.raises(ConfigurationError, match="Invalid asset ticker"):
            ParserConfig(known_assets=["ETH", "BAD-1"])


class TestLoggingConfig:
    def test_defaults(self):
        config = LoggingConfig()

        assert config.log_level == "INFO"
        assert config.log_dir == "logs"

    def test_invalid_level(self):
        with pytest.raises(ConfigurationError, match="Invalid log level"):
            LoggingConfig(log_level="LOUD")


class TestConfigManager:
    """Config file loading and precedence"""

    def test_missing_directory_uses_defaults(self, tmp_path):
        manager = ConfigManager(config_dir=str(tmp_path / "nowhere"))

        assert manager.parser_config == ParserConfig()
        assert manager.logging_config == LoggingConfig()

    def test_ini(self, tmp_path):
        (tmp_path / "analyzer_config.ini").write_text(INI)

        manager = ConfigManager(config_dir=str(tmp_path))

        assert manager.parser_config.known_assets == ["ETH", "BTC", "SOL"]
        assert manager.parser_config.quote_suffixes == ["USDT", "USDC"]
        assert manager.logging_config.log_level == "DEBUG"
        assert manager.logging_config.log_dir == "/tmp/analyzer-logs"

    def test_yaml_takes_precedence(self, tmp_path):
        (tmp_path / "analyzer_config.ini").write_text(INI)
        (tmp_path / "analyzer_config.yaml").write_text(YAML)

        manager = ConfigManager(config_dir=str(tmp_path))

        assert manager.parser_config.known_assets == ["ETH", "FOO"]
        assert manager.parser_config.quote_suffixes == list(DEFAULT_QUOTE_SUFFIXES)
        assert manager.logging_config.log_level == "WARNING"

    def test_invalid_yaml_falls_back_to_ini(self, tmp_path):
        (tmp_path / "analyzer_config.ini").write_text(INI)
        (tmp_path / "analyzer_config.yaml").write_text("parser: [unclosed\n")

        manager = ConfigManager(config_dir=str(tmp_path))

        assert manager.parser_config.known_assets == ["ETH", "BTC", "SOL"]

    def test_env_overrides_log_level(self, tmp_path, monkeypatch):
        (tmp_path / "analyzer_config.ini").write_text(INI)
        monkeypatch.setenv(ConfigManager.LOG_LEVEL_ENV, "ERROR")

        manager = ConfigManager(config_dir=str(tmp_path))

        assert manager.logging_config.log_level == "ERROR"

    def test_empty_asset_list_in_file(self, tmp_path):
        (tmp_path / "analyzer_config.ini").write_text("[parser]\nknown_assets =\n")

        with pytest.raises(ConfigurationError):
            ConfigManager(config_dir=str(tmp_path))

    def test_non_list_value_in_yaml(self, tmp_path):
        (tmp_path / "analyzer_config.yaml").write_text("parser:\n  known_assets: 5\n")

        with pytest.raises(ConfigurationError, match="known_assets"):
            ConfigManager(config_dir=str(tmp_path))

    def test_shipped_config(self):
        """configs/analyzer_config.ini matches the built-in defaults"""
        config_dir = Path(__file__).resolve().parents[2] / "configs"
        manager = ConfigManager(config_dir=str(config_dir))

        assert manager.parser_config == ParserConfig()
