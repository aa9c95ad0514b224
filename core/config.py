import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from core.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = ".restcov.yaml"
REPORT_FORMATS = ("terminal", "json", "markdown", "html", "csv")


class CoverageConfig(BaseModel):
    filter: str = Field("", description="Only count paths starting with this prefix")
    format: str = Field("terminal", description="Report format")
    fail_under: Optional[float] = Field(None, description="Minimum overall coverage percentage")
    color: bool = True
    output: Optional[str] = None

    @field_validator("format")
    @classmethod
    def validate_format(cls, v):
        if v not in REPORT_FORMATS:
            raise ValueError(f"Unknown report format '{v}', expected one of {', '.join(REPORT_FORMATS)}")
        return v

    @field_validator("fail_under")
    @classmethod
    def validate_fail_under(cls, v):
        if v is not None and not 0 <= v <= 100:
            raise ValueError(f"fail_under must be between 0 and 100, got {v}")
        return v

    @field_validator("filter")
    @classmethod
    def normalize_filter(cls, v):
        # Paths are compared lower-cased
        return v.lower()


def load_config(
    config_path: Optional[Union[str, Path]] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> CoverageConfig:
    """
    Load configuration from YAML and apply command-line overrides.

    Without an explicit path, .restcov.yaml in the working directory is used
    when it exists. Overrides set to None are ignored.
    """
    data: Dict[str, Any] = {}

    if config_path is None and Path(DEFAULT_CONFIG_FILE).is_file():
        config_path = DEFAULT_CONFIG_FILE

    if config_path is not None:
        config_path = Path(config_path)
        if not config_path.is_file():
            raise ConfigError(f"Config file not found: {config_path}")
        try:
            with config_path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse config file {config_path}: {e}")
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {config_path} must contain a mapping")
        logger.debug(f"Loaded config from {config_path}")

    data.update({k: v for k, v in (overrides or {}).items() if v is not None})

    try:
        return CoverageConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration:\n{e}")
