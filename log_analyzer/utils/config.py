"""
Configuration management with INI/YAML files and environment overrides
"""

import logging
import os
from configparser import ConfigParser
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from log_analyzer.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_KNOWN_ASSETS: Tuple[str, ...] = (
    "BTC", "ETH", "SOL", "BNB", "XRP", "ADA", "DOGE", "AVAX", "DOT", "MATIC",
    "LINK", "LTC", "UNI", "ATOM", "TRX", "APT", "ARB", "OP", "SUI", "PEPE",
    "SHIB", "WLD", "FIL", "NEAR", "INJ",
)

# Checked in this order when deriving an asset from a symbol
DEFAULT_QUOTE_SUFFIXES: Tuple[str, ...] = ("USDT", "USDC", "BUSD")

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _split_list(raw: str) -> List[str]:
    return [item.strip().upper() for item in raw.split(",") if item.strip()]


@dataclass
class ParserConfig:
    """Ticker allow-list and quote suffixes used by the line parser"""
    known_assets: List[str] = field(default_factory=lambda: list(DEFAULT_KNOWN_ASSETS))
    quote_suffixes: List[str] = field(default_factory=lambda: list(DEFAULT_QUOTE_SUFFIXES))

    def __post_init__(self):
        if not self.known_assets:
            raise ConfigurationError("known_assets must not be empty")
        if not self.quote_suffixes:
            raise ConfigurationError("quote_suffixes must not be empty")
        for asset in self.known_assets:
            if not asset.isalnum():
                raise ConfigurationError(f"Invalid asset ticker: {asset!r}")


@dataclass
class LoggingConfig:
    """Logging system configuration"""
    log_level: str = "INFO"
    log_dir: str = "logs"

    def __post_init__(self):
        if self.log_level.upper() not in VALID_LOG_LEVELS:
            raise ConfigurationError(
                f"Invalid log level: {self.log_level}. "
                f"Must be one of {VALID_LOG_LEVELS}"
            )


class ConfigManager:
    """
    Loads analyzer configuration from the config directory.

    Priority: ENV > analyzer_config.yaml > analyzer_config.ini > defaults
    """

    INI_FILE = "analyzer_config.ini"
    YAML_FILE = "analyzer_config.yaml"
    LOG_LEVEL_ENV = "LOG_ANALYZER_LOG_LEVEL"

    def __init__(self, config_dir: str = "configs"):
        self.config_dir = Path(config_dir)
        self._parser_config: Optional[ParserConfig] = None
        self._logging_config: Optional[LoggingConfig] = None

        self._load_configs()

    def _load_configs(self):
        """Load all configuration sections"""
        sections = self._load_yaml() or self._load_ini()

        parser_section = sections.get("parser", {})
        self._parser_config = self._build_parser_config(parser_section)

        logging_section = dict(sections.get("logging", {}))
        level_env = os.getenv(self.LOG_LEVEL_ENV)
        if level_env:
            logging_section["log_level"] = level_env
        self._logging_config = LoggingConfig(
            log_level=str(logging_section.get("log_level", "INFO")),
            log_dir=str(logging_section.get("log_dir", "logs")),
        )

    def _load_yaml(self) -> Optional[Dict[str, Dict[str, Any]]]:
        """Read analyzer_config.yaml; None when absent or unreadable."""
        yaml_file = self.config_dir / self.YAML_FILE
        if not yaml_file.exists():
            return None

        try:
            with open(yaml_file, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error(f"Failed to parse YAML config {yaml_file}: {e}")
            return None

        if not isinstance(data, dict):
            logger.warning(f"YAML config {yaml_file} is empty, using INI fallback")
            return None

        return {
            name: section
            for name, section in data.items()
            if isinstance(section, dict)
        }

    def _load_ini(self) -> Dict[str, Dict[str, Any]]:
        """Read analyzer_config.ini; empty mapping when absent."""
        config_file = self.config_dir / self.INI_FILE
        if not config_file.exists():
            return {}

        config = ConfigParser()
        config.read(config_file, encoding="utf-8")
        return {name: dict(config[name]) for name in config.sections()}

    @staticmethod
    def _build_parser_config(section: Dict[str, Any]) -> ParserConfig:
        kwargs = {}
        for key in ("known_assets", "quote_suffixes"):
            raw = section.get(key)
            if raw is None:
                continue
            if isinstance(raw, str):
                kwargs[key] = _split_list(raw)
            elif isinstance(raw, list):
                kwargs[key] = [str(item).strip().upper() for item in raw]
            else:
                raise ConfigurationError(f"{key} must be a list or comma separated string")
        return ParserConfig(**kwargs)

    @property
    def parser_config(self) -> ParserConfig:
        """Get parser configuration"""
        return self._parser_config

    @property
    def logging_config(self) -> LoggingConfig:
        """Get logging configuration"""
        return self._logging_config
