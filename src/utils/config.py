"""
Configuration for stream-diff

Typed configuration objects and a YAML loader. Every component receives the
piece of configuration it needs through its constructor; nothing here is
cached or global.
"""

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_SIZE = 1000

PATTERN_MODES = ("disabled", "offline", "online")


class ConfigError(ValueError):
    """Raised when configuration is missing, malformed or unsupported."""
    pass


@dataclass
class ParserConfig:
    json_in_string: bool = False
    delimiter: str = ","


@dataclass
class SourceConfig:
    type: str = "json"
    path: str = ""
    parser_config: ParserConfig = field(default_factory=ParserConfig)


@dataclass
class SamplerConfig:
    sample_size: int = DEFAULT_SAMPLE_SIZE


@dataclass
class OnlineAPIConfig:
    """Credentials and endpoint for the AI-assisted pattern detector."""

    provider: str = "claude"
    api_key: str = ""
    api_key_env: str = "ANTHROPIC_API_KEY"
    vault_secret_path: Optional[str] = None
    model: str = ""
    endpoint: str = ""
    timeout_seconds: float = 30.0


@dataclass
class PatternDetectionConfig:
    enabled: bool = False
    mode: str = "disabled"
    online_api: Optional[OnlineAPIConfig] = None


@dataclass
class PeriodicConfig:
    enabled: bool = False
    time_interval_seconds: float = 0
    record_interval: int = 0


@dataclass
class ComparisonConfig:
    key_field: str = ""
    ignore_fields: List[str] = field(default_factory=list)
    periodic: PeriodicConfig = field(default_factory=PeriodicConfig)


@dataclass
class ReportConfig:
    output_dir: str = "reports"
    format: str = "yaml"


@dataclass
class LoggingConfig:
    level: str = "INFO"
    json: bool = False


@dataclass
class MetricsConfig:
    enabled: bool = False
    pushgateway_url: Optional[str] = None
    job_name: str = "stream_diff"


@dataclass
class StreamDiffConfig:
    source1: SourceConfig
    source2: SourceConfig
    sampler: SamplerConfig = field(default_factory=SamplerConfig)
    pattern_detection: PatternDetectionConfig = field(default_factory=PatternDetectionConfig)
    comparison: ComparisonConfig = field(default_factory=ComparisonConfig)
    report: ReportConfig = field(default_factory=ReportConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    metrics: MetricsConfig = field(default_factory=MetricsConfig)


def _build(cls, data: Any, section: str):
    """
    Build a flat dataclass from a mapping, rejecting unknown keys.

    Args:
        cls: Dataclass type
        data: Parsed YAML value (None means defaults)
        section: Section name used in error messages

    Returns:
        Dataclass instance

    Raises:
        ConfigError: If the section is not a mapping or has unknown keys
    """
    if data is None:
        return cls()

    if not isinstance(data, dict):
        raise ConfigError(f"Section '{section}' must be a mapping, got {type(data).__name__}")

    known = {f.name for f in fields(cls)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown keys in section '{section}': {unknown}")

    try:
        return cls(**data)
    except TypeError as e:
        raise ConfigError(f"Invalid section '{section}': {e}") from e


def _build_source(data: Any, section: str, base_dir: Optional[Path]) -> SourceConfig:
    if data is None:
        raise ConfigError(f"Missing required section '{section}'")
    if not isinstance(data, dict):
        raise ConfigError(f"Section '{section}' must be a mapping")

    data = dict(data)
    parser_config = _build(ParserConfig, data.pop("parser_config", None), f"{section}.parser_config")
    source = _build(SourceConfig, data, section)
    source.parser_config = parser_config

    if not source.path:
        raise ConfigError(f"Section '{section}' requires a 'path'")

    if base_dir is not None and not Path(source.path).is_absolute():
        source.path = str(base_dir / source.path)

    return source


def parse_config(data: Dict[str, Any], base_dir: Optional[Path] = None) -> StreamDiffConfig:
    """
    Build a StreamDiffConfig from an already-parsed mapping.

    Args:
        data: Parsed configuration document
        base_dir: Directory that relative source paths are resolved against

    Returns:
        StreamDiffConfig

    Raises:
        ConfigError: If the document is invalid
    """
    if not isinstance(data, dict):
        raise ConfigError("Configuration document must be a mapping")

    pattern_data = data.get("pattern_detection")
    online_api = None
    if isinstance(pattern_data, dict):
        pattern_data = dict(pattern_data)
        online_api = pattern_data.pop("online_api", None)
    pattern_detection = _build(PatternDetectionConfig, pattern_data, "pattern_detection")
    if online_api is not None:
        pattern_detection.online_api = _build(OnlineAPIConfig, online_api, "pattern_detection.online_api")

    if pattern_detection.mode not in PATTERN_MODES:
        raise ConfigError(
            f"Unsupported pattern detection mode: {pattern_detection.mode} "
            f"(supported: {', '.join(PATTERN_MODES)})"
        )

    comparison_data = data.get("comparison")
    periodic = None
    if isinstance(comparison_data, dict):
        comparison_data = dict(comparison_data)
        periodic = comparison_data.pop("periodic", None)
    comparison = _build(ComparisonConfig, comparison_data, "comparison")
    comparison.periodic = _build(PeriodicConfig, periodic, "comparison.periodic")

    config = StreamDiffConfig(
        source1=_build_source(data.get("source1"), "source1", base_dir),
        source2=_build_source(data.get("source2"), "source2", base_dir),
        sampler=_build(SamplerConfig, data.get("sampler"), "sampler"),
        pattern_detection=pattern_detection,
        comparison=comparison,
        report=_build(ReportConfig, data.get("report"), "report"),
        logging=_build(LoggingConfig, data.get("logging"), "logging"),
        metrics=_build(MetricsConfig, data.get("metrics"), "metrics"),
    )

    if config.sampler.sample_size <= 0:
        config.sampler.sample_size = DEFAULT_SAMPLE_SIZE

    return config


def load_config(path: Union[str, Path]) -> StreamDiffConfig:
    """
    Load a YAML configuration file.

    Args:
        path: Path to the YAML file

    Returns:
        StreamDiffConfig with source paths resolved against the file's directory

    Raises:
        ConfigError: If the file cannot be read or parsed
    """
    path = Path(path)

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Failed to read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse yaml from {path}: {e}") from e

    config = parse_config(data, base_dir=path.parent)
    logger.info(f"Loaded configuration from {path}")
    return config


def resolve_api_key(online_api: OnlineAPIConfig, vault_client=None) -> str:
    """
    Resolve the online detector's API key.

    Lookup order: literal api_key, the api_key_env environment variable,
    then the 'api_key' entry of the Vault secret at vault_secret_path.

    Args:
        online_api: Online API configuration
        vault_client: Optional VaultClient; one is created on demand when a
            Vault path is configured

    Returns:
        The API key, or an empty string when none is configured
    """
    if online_api.api_key:
        return online_api.api_key

    if online_api.api_key_env:
        value = os.getenv(online_api.api_key_env, "")
        if value:
            logger.debug(f"Using API key from environment variable {online_api.api_key_env}")
            return value

    if online_api.vault_secret_path:
        if vault_client is None:
            from src.utils.vault_client import VaultClient
            vault_client = VaultClient()
        key = vault_client.get_api_key(online_api.vault_secret_path)
        logger.info(f"Using API key from Vault secret {online_api.vault_secret_path}")
        return key

    return ""
