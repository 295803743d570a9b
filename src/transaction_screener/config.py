"""Configuration loading and validation for the transaction screener."""

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional

import yaml

from transaction_screener.utils.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_SETTINGS_PATH = Path("config") / "settings.yaml"


class ConfigError(Exception):
    """Exception raised for configuration errors."""

    pass


@dataclass(frozen=True)
class ScoringConfig:
    """Thresholds and point values for risk scoring.

    Attributes:
        zscore_moderate: |z| above this adds the moderate deviation signal.
        zscore_extreme: |z| above this adds the extreme signal instead.
        points_zscore_moderate: Points for moderate deviation.
        points_zscore_extreme: Points for extreme deviation.
        points_high_value: Points for amounts above high_value_multiplier * mean.
        points_unusual_hour: Points for transactions outside peak hours.
        points_category_spike: Points for categories above the spike threshold.
        points_frequency_spike: Points when the latest week is unusually busy.
        high_value_multiplier: Multiple of the mean that counts as high value.
        category_spike_percent: Fraction above average category spend that flags.
        frequency_spike_percent: Fraction above average weekly count that flags.
        risk_medium_min: Lowest score classified as Medium.
        risk_high_min: Lowest score classified as High.
    """

    zscore_moderate: float = 2.0
    zscore_extreme: float = 3.0

    points_zscore_moderate: int = 25
    points_zscore_extreme: int = 40
    points_high_value: int = 30
    points_unusual_hour: int = 15
    points_category_spike: int = 20
    points_frequency_spike: int = 20

    high_value_multiplier: float = 2.0
    category_spike_percent: float = 0.40
    frequency_spike_percent: float = 0.30

    risk_medium_min: int = 30
    risk_high_min: int = 60

    def __post_init__(self) -> None:
        if self.zscore_extreme < self.zscore_moderate:
            raise ConfigError("zscore_extreme must not be below zscore_moderate")
        if self.risk_high_min < self.risk_medium_min:
            raise ConfigError("risk_high_min must not be below risk_medium_min")
        for f in fields(self):
            if getattr(self, f.name) < 0:
                raise ConfigError(f"{f.name} must not be negative")

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "ScoringConfig":
        """Create from dictionary, keeping defaults for absent keys."""
        known = {f.name: f for f in fields(cls)}
        unknown = set(data) - set(known)
        if unknown:
            raise ConfigError(f"Unknown scoring settings: {', '.join(sorted(unknown))}")

        values: dict[str, object] = {}
        for name, value in data.items():
            try:
                if known[name].type in (int, "int"):
                    values[name] = int(value)  # type: ignore[call-overload]
                else:
                    values[name] = float(value)  # type: ignore[arg-type]
            except (TypeError, ValueError) as e:
                raise ConfigError(f"Invalid value for scoring.{name}: {value!r}") from e
        return cls(**values)  # type: ignore[arg-type]


@dataclass
class OutputConfig:
    """Configuration for output generation.

    Attributes:
        include_normal: Whether exports include transactions scored Normal.
        top_flagged: Number of flagged transactions listed by the CLI.
    """

    include_normal: bool = True
    top_flagged: int = 10

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "OutputConfig":
        """Create from dictionary."""
        return cls(
            include_normal=bool(data.get("include_normal", True)),
            top_flagged=int(data.get("top_flagged", 10)),  # type: ignore[arg-type]
        )


@dataclass
class LoggingConfig:
    """Configuration for logging.

    Attributes:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file: Path to log file.
    """

    level: str = "INFO"
    file: str = "transaction_screener.log"

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "LoggingConfig":
        """Create from dictionary."""
        return cls(
            level=str(data.get("level", "INFO")),
            file=str(data.get("file", "transaction_screener.log")),
        )


@dataclass
class Config:
    """Main configuration container."""

    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_yaml_file(path: Path) -> dict[str, object]:
    """Load a YAML file.

    Args:
        path: Path to the YAML file.

    Returns:
        Parsed YAML content.

    Raises:
        FileNotFoundError: If file doesn't exist.
        ConfigError: If the file is not valid YAML or not a mapping.
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            content = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ConfigError(f"{path} must contain a mapping, got {type(content).__name__}")
    return content


def _section(data: dict[str, object], name: str) -> dict[str, object]:
    section = data.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{name}' must be a mapping, got {type(section).__name__}")
    return section


def load_config(settings_path: Optional[Path] = None) -> Config:
    """Load configuration from settings.yaml.

    A missing file is not an error: defaults are used and a warning logged.

    Args:
        settings_path: Path to settings.yaml (or None to use the default).

    Returns:
        Complete Config object.

    Raises:
        ConfigError: If the file exists but is malformed.
    """
    if settings_path is None:
        settings_path = DEFAULT_SETTINGS_PATH

    if not settings_path.exists():
        logger.warning(f"Settings file not found: {settings_path}, using defaults")
        return Config()

    data = load_yaml_file(settings_path)
    config = Config(
        scoring=ScoringConfig.from_dict(_section(data, "scoring")),
        output=OutputConfig.from_dict(_section(data, "output")),
        logging=LoggingConfig.from_dict(_section(data, "logging")),
    )
    logger.info(f"Loaded settings from {settings_path}")
    return config
