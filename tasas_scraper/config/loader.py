"""
YAML configuration loader.

Loads updater settings from YAML files with:
- Environment variable substitution
- Default values
- Validation of bank identifiers
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import structlog
import yaml

from tasas_scraper.core.http_client import DEFAULT_USER_AGENT
from tasas_scraper.core.models import BankId

logger = structlog.get_logger(__name__)

DEFAULT_BANKS = [
    BankId.BANCOLOMBIA,
    BankId.BBVA,
    BankId.SCOTIABANK_COLPATRIA,
    BankId.BANCO_CAJA_SOCIAL,
    BankId.AVVILLAS,
    BankId.ITAU,
    BankId.BANCO_POPULAR,
    BankId.BANCO_DE_OCCIDENTE,
]

DEFAULT_FIXTURES_DIR = "tests/fixtures"


class ConfigError(ValueError):
    """Raised when configuration is missing or invalid."""


def substitute_env_vars(text: str) -> str:
    """
    Substitute environment variables in text.

    Supports formats:
    - ${VAR_NAME} - required, warns and substitutes "" if missing
    - ${VAR_NAME:-default} - optional with default

    Args:
        text: Text with env var placeholders

    Returns:
        Text with substituted values
    """
    def replace(match):
        var_expr = match.group(1)
        if ":-" in var_expr:
            var_name, default = var_expr.split(":-", 1)
            return os.getenv(var_name, default)

        value = os.getenv(var_expr)
        if value is None:
            logger.warning("env_var_not_set", var=var_expr)
            return ""
        return value

    return re.sub(r"\$\{([^}]+)\}", replace, text)


def _as_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def parse_bank_ids(values) -> list[BankId]:
    """
    Convert bank id strings to BankId, keeping their order.

    Raises:
        ConfigError: If an id is not in the catalog
    """
    banks = []
    for value in values or []:
        try:
            bank = BankId(str(value).strip())
        except ValueError as e:
            known = ", ".join(b.value for b in BankId)
            raise ConfigError(f"Unknown bank id {value!r} (known: {known})") from e
        if bank not in banks:
            banks.append(bank)
    return banks


@dataclass
class ParserConfig:
    """
    Source toggle shared by every parser.

    In fixture mode parsers read `<fixtures_dir>/<bank_id>/<file>` (or
    the single file `fixtures_path`) instead of fetching the live URL.
    """
    use_fixtures: bool = False
    fixtures_dir: str = DEFAULT_FIXTURES_DIR
    fixtures_path: Optional[str] = None

    def fixture_file(self, bank_id: str, filename: str) -> Path:
        if self.fixtures_path:
            return Path(self.fixtures_path)
        return Path(self.fixtures_dir) / getattr(bank_id, "value", bank_id) / filename


@dataclass
class UpdaterSettings:
    """Settings of one update run."""
    timeout: float = 30.0
    max_retries: int = 3
    requests_per_second: float = 2.0
    user_agent: str = DEFAULT_USER_AGENT
    data_dir: str = "data"
    use_fixtures: bool = False
    fixtures_dir: str = DEFAULT_FIXTURES_DIR
    banks: list[BankId] = field(default_factory=lambda: list(DEFAULT_BANKS))

    @classmethod
    def from_dict(cls, data: dict) -> "UpdaterSettings":
        """
        Build settings from a parsed settings.yml document.

        Raises:
            ConfigError: If a value has the wrong type or a bank is unknown
        """
        http = data.get("http") or {}
        output = data.get("output") or {}
        fixtures = data.get("fixtures") or {}

        try:
            settings = cls(
                timeout=float(http.get("timeout", 30.0)),
                max_retries=int(http.get("max_retries", 3)),
                requests_per_second=float(http.get("requests_per_second", 2.0)),
                user_agent=http.get("user_agent") or DEFAULT_USER_AGENT,
                data_dir=str(output.get("data_dir") or "data"),
                use_fixtures=_as_bool(fixtures.get("enabled", False)),
                fixtures_dir=str(fixtures.get("dir") or DEFAULT_FIXTURES_DIR),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid settings: {e}") from e

        if "banks" in data:
            settings.banks = parse_bank_ids(data["banks"])

        if settings.timeout <= 0:
            raise ConfigError("http.timeout must be positive")
        if settings.max_retries < 1:
            raise ConfigError("http.max_retries must be at least 1")
        if settings.requests_per_second <= 0:
            raise ConfigError("http.requests_per_second must be positive")

        return settings

    def parser_config(self) -> ParserConfig:
        return ParserConfig(
            use_fixtures=self.use_fixtures,
            fixtures_dir=self.fixtures_dir,
        )


class ConfigLoader:
    """
    Configuration loader for updater settings.

    Loads YAML config files from a directory, bundled settings by default.
    """

    def __init__(self, config_dir: Optional[str] = None):
        """
        Initialize config loader.

        Args:
            config_dir: Directory containing config files
                       (defaults to package config directory)
        """
        if config_dir:
            self.config_dir = Path(config_dir)
        else:
            self.config_dir = Path(__file__).parent

    def load_file(self, filename: str) -> dict:
        """
        Load YAML config file.

        Args:
            filename: Config file name (relative to config_dir)

        Returns:
            Parsed config dict

        Raises:
            ConfigError: If the file is missing or not valid YAML
        """
        filepath = self.config_dir / filename

        if not filepath.exists():
            raise ConfigError(f"Config file not found: {filepath}")

        logger.info("loading_config", file=str(filepath))

        with open(filepath, "r", encoding="utf-8") as f:
            content = f.read()

        content = substitute_env_vars(content)

        try:
            config = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {filepath}: {e}") from e

        if config is not None and not isinstance(config, dict):
            raise ConfigError(f"Config root must be a mapping: {filepath}")

        return config or {}

    def load_settings(self, filename: str = "settings.yml") -> UpdaterSettings:
        """Load and validate updater settings."""
        settings = UpdaterSettings.from_dict(self.load_file(filename))
        logger.info(
            "settings_loaded",
            banks=[b.value for b in settings.banks],
            fixtures=settings.use_fixtures,
        )
        return settings


def load_settings(config_path: Optional[str] = None) -> UpdaterSettings:
    """
    Convenience function to load updater settings.

    Args:
        config_path: Optional path to a settings YAML file

    Returns:
        UpdaterSettings
    """
    if config_path:
        path = Path(config_path)
        return ConfigLoader(str(path.parent)).load_settings(path.name)
    return ConfigLoader().load_settings()
