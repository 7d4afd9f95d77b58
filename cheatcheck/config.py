"""
Configuration management for cheatcheck runs.

Settings come from, in increasing precedence: built-in defaults, a YAML
config file, ``CHEATCHECK_*`` environment variables and command-line options.
"""

import logging
import os
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax

from .core.models import UNBOUNDED
from .core.scorer import Metric
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

# Accepted YAML value types per key, and whether the key may be null
_FIELD_TYPES = {
    "sensitivity": ((int, float), True),
    "max_sensitivity": ((int, float), False),
    "jobs": ((int,), False),
    "damerau": ((bool,), False),
    "trim": ((bool,), False),
    "formatter": ((str,), True),
    "template": ((str,), True),
    "log_file": ((str,), True),
    "precision": ((int,), False),
    "progress": ((bool,), False),
    "verbose": ((bool,), False),
}


def _check_value(key: str, value: Any) -> Any:
    """Check a config file value against the type of its field."""
    accepted, nullable = _FIELD_TYPES[key]
    if value is None:
        if nullable:
            return None
    elif isinstance(value, accepted) and (bool in accepted or not isinstance(value, bool)):
        return float(value) if float in accepted else value

    expected = " or ".join(t.__name__ for t in accepted)
    if nullable:
        expected += " or null"
    raise ConfigurationError(
        f"Invalid value for {key}: expected {expected}, got {value!r}",
        {"key": key, "value": value},
    )


@dataclass
class CheckConfig:
    """Settings for one comparison run."""

    # Reporting range
    sensitivity: Optional[float] = None  # Lower bound, required
    max_sensitivity: float = UNBOUNDED  # 2.0 = no upper bound

    # Execution
    jobs: int = 0  # 0 = one worker per CPU
    damerau: bool = False

    # Preprocessing
    trim: bool = False
    formatter: Optional[str] = None
    template: Optional[str] = None

    # Output
    log_file: Optional[str] = None
    precision: int = 6
    progress: bool = True
    verbose: bool = False

    @property
    def metric(self) -> Metric:
        return Metric.from_flag(self.damerau)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CheckConfig":
        """
        Create from dictionary.

        Raises:
            ConfigurationError: On unknown keys or mistyped values
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown configuration keys: {', '.join(unknown)}",
                {"unknown": unknown},
            )
        return cls(**{key: _check_value(key, value) for key, value in data.items()})

    def merge(self, **overrides: Any) -> "CheckConfig":
        """Return a copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def errors(self) -> list:
        """List every validation problem, empty when valid."""
        errors = []

        if self.sensitivity is None:
            errors.append("sensitivity is required")
        elif not 0.0 <= self.sensitivity <= self.max_sensitivity:
            errors.append(
                f"sensitivity must be between 0 and max_sensitivity ({self.max_sensitivity}), "
                f"got {self.sensitivity}"
            )

        if self.max_sensitivity < 0.0:
            errors.append(f"max_sensitivity must be non-negative, got {self.max_sensitivity}")

        if self.jobs < 0:
            errors.append(f"jobs must be 0 (autodetect) or positive, got {self.jobs}")

        if not 0 <= self.precision <= 17:
            errors.append(f"precision must be between 0 and 17, got {self.precision}")

        return errors

    def validate(self) -> bool:
        """Validate configuration parameters, printing any errors."""
        errors = self.errors()
        if errors:
            console = Console(stderr=True)
            console.print("[red]Configuration validation errors:[/red]")
            for error in errors:
                console.print(f"  • {error}")
        return not errors


class ConfigManager:
    """Loads, saves and displays cheatcheck configuration files."""

    DEFAULT_CONFIG_FILE = ".cheatcheck.yml"
    ENV_PREFIX = "CHEATCHECK_"

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize config manager.

        Args:
            config_path: Path to configuration file
        """
        self.console = Console(stderr=True)
        self.config_path = Path(config_path) if config_path else Path(self.DEFAULT_CONFIG_FILE)

    def load(self) -> CheckConfig:
        """
        Load configuration from file, or defaults when there is none.

        Returns:
            Loaded configuration with environment overrides applied

        Raises:
            ConfigurationError: If the file exists but cannot be parsed
        """
        if self.config_path.exists():
            try:
                with open(self.config_path, "r", encoding="utf-8") as f:
                    data = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                raise ConfigurationError(f"Error loading config {self.config_path}: {e}") from e
            if not isinstance(data, dict):
                raise ConfigurationError(f"Config {self.config_path} must be a mapping")
            config = CheckConfig.from_dict(data)
            logger.debug(f"Loaded config from {self.config_path}")
        else:
            config = CheckConfig()

        return self._apply_env_overrides(config)

    def save(self, config: CheckConfig) -> bool:
        """
        Save configuration to file.

        Returns:
            True if successful
        """
        try:
            with open(self.config_path, "w", encoding="utf-8") as f:
                yaml.dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)
        except OSError as e:
            logger.error(f"Error saving config: {e}")
            return False
        logger.info(f"Saved config to {self.config_path}")
        return True

    def display(self, config: CheckConfig):
        """Display configuration in a formatted panel."""
        yaml_str = yaml.dump(config.to_dict(), default_flow_style=False, sort_keys=False)
        syntax = Syntax(yaml_str, "yaml", theme="monokai", line_numbers=True)
        panel = Panel(
            syntax,
            title="[bold cyan]cheatcheck configuration[/bold cyan]",
            border_style="cyan",
        )
        self.console.print(panel)

    def _apply_env_overrides(self, config: CheckConfig) -> CheckConfig:
        """Apply environment variable overrides."""
        overrides: Dict[str, Any] = {}

        for name, cast in (("sensitivity", float), ("max_sensitivity", float), ("jobs", int)):
            env_value = os.getenv(f"{self.ENV_PREFIX}{name.upper()}")
            if env_value is None:
                continue
            try:
                overrides[name] = cast(env_value)
                logger.debug(f"Applied env override: {name}={overrides[name]}")
            except ValueError:
                logger.warning(f"Invalid env value for {name}: {env_value!r}, ignoring it")

        return config.merge(**overrides)


def load_config(config_path: Optional[Path] = None) -> CheckConfig:
    """Load configuration from ``config_path`` or the default file."""
    return ConfigManager(config_path).load()
