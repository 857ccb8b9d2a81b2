"""Resilience configuration.

Parses the JSON options that control reconnection backoff, health checks and
the connectivity probe. All durations are expressed in milliseconds.

Example configuration file (options may also sit at top level):

    {
        "browsermcp": {
            "maxRetries": 5,
            "initialDelay": 1000,
            "maxDelay": 30000,
            "backoffMultiplier": 2
        }
    }
"""

import json
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from browsermcp_resilience.logger import get_logger

logger = get_logger("config")

CONFIG_SECTION = "browsermcp"
DEFAULT_CONFIG_FILENAME = "browsermcp_resilience.json"


class RetryPolicy(BaseModel):
    """Immutable backoff policy shared by every session of the process."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    max_retries: int = Field(5, gt=0, alias="maxRetries", description="Reconnection attempts before giving up")
    initial_delay: float = Field(1000, gt=0, alias="initialDelay", description="Delay before the first attempt (ms)")
    max_delay: float = Field(30000, gt=0, alias="maxDelay", description="Upper bound for any delay (ms)")
    backoff_multiplier: float = Field(
        2, gt=1, alias="backoffMultiplier", description="Growth factor applied per attempt"
    )

    @model_validator(mode="after")
    def _check_delay_bounds(self) -> "RetryPolicy":
        if self.max_delay < self.initial_delay:
            raise ValueError(
                f"maxDelay ({self.max_delay}) must be >= initialDelay ({self.initial_delay})"
            )
        return self


class ResilienceConfig(BaseModel):
    """Full set of options recognized by the resilience layer."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    retry: RetryPolicy = Field(default_factory=RetryPolicy, description="Backoff policy")
    health_check_interval: float = Field(
        30000, gt=0, alias="healthCheckInterval", description="Period of the health-check timer (ms)"
    )
    probe_tool: str = Field(
        "browsermcp_browser_snapshot", alias="probeTool", description="Lightweight tool used as connectivity probe"
    )
    probe_arguments: dict[str, Any] = Field(
        default_factory=dict, alias="probeArguments", description="Arguments passed to the probe tool"
    )
    probe_timeout: float = Field(10000, gt=0, alias="probeTimeout", description="Probe time limit (ms)")
    tool_prefix: str = Field("browsermcp_", alias="toolPrefix", description="Prefix of tools guarded by the controller")
    notification_prefix: str = Field(
        "[Browser MCP]", alias="notificationPrefix", description="Prefix prepended to every notification"
    )

    @model_validator(mode="before")
    @classmethod
    def _collect_retry_options(cls, data: Any) -> Any:
        """Accept the retry options flat, next to the other keys."""
        if not isinstance(data, dict) or "retry" in data:
            return data
        retry_keys = set()
        for name, field in RetryPolicy.model_fields.items():
            retry_keys.update({name, field.alias})
        retry = {k: v for k, v in data.items() if k in retry_keys}
        rest = {k: v for k, v in data.items() if k not in retry_keys}
        return {**rest, "retry": retry}

    def is_guarded_tool(self, tool_name: str) -> bool:
        """Whether a tool belongs to the upstream this layer watches."""
        return tool_name.startswith(self.tool_prefix)


def default_config_path() -> Path:
    """Location searched when no explicit configuration path is given."""
    return Path.cwd() / DEFAULT_CONFIG_FILENAME


def load_config(config_path: Optional[str | Path] = None) -> ResilienceConfig:
    """
    Load resilience configuration from a JSON file.

    Args:
        config_path: Path to the JSON configuration file. If None, looks for
            'browsermcp_resilience.json' in the working directory and falls
            back to the defaults when it does not exist.

    Returns:
        ResilienceConfig: Parsed configuration object

    Raises:
        FileNotFoundError: If an explicit configuration file doesn't exist
        json.JSONDecodeError: If the JSON file is invalid
        ValidationError: If an option is out of range
    """
    if config_path is None:
        config_path = default_config_path()
        if not config_path.exists():
            logger.info(f"No configuration at {config_path}, using defaults")
            return ResilienceConfig()
    else:
        config_path = Path(config_path)

    if not config_path.exists():
        error_msg = f"Resilience configuration file not found: {config_path}"
        logger.error(error_msg)
        raise FileNotFoundError(error_msg)

    logger.info(f"Loading resilience configuration from: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in configuration file {config_path}: {e}")
        raise

    return parse_config(data, source=str(config_path))


def parse_config(data: Any, source: str = "<memory>") -> ResilienceConfig:
    """
    Validate already-decoded options.

    Args:
        data: Decoded JSON document; the options may be nested under "browsermcp"
        source: Where the data came from, for log messages

    Raises:
        ValidationError: If the options are invalid
    """
    if isinstance(data, dict) and isinstance(data.get(CONFIG_SECTION), dict):
        data = data[CONFIG_SECTION]

    try:
        config = ResilienceConfig.model_validate(data or {})
    except ValidationError as e:
        logger.error(f"Invalid resilience configuration in {source}: {e}")
        raise

    retry = config.retry
    logger.debug(
        f"Retry policy: max_retries={retry.max_retries}, initial_delay={retry.initial_delay}ms, "
        f"max_delay={retry.max_delay}ms, multiplier={retry.backoff_multiplier}"
    )
    return config
