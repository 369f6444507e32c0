"""Configuration and logging setup for applications using the hub client."""

import json
import logging
import os
import pathlib

import pydantic
import structlog

from . import hubapi

CONFIG_ENV_VAR = "STELLAR_HUB_CONFIG_PATH"
DEFAULT_CONFIG_PATH = "hub_client.json"
logger = structlog.get_logger(__name__)


class HubClientConfig(pydantic.BaseModel):
    """Connection settings for the Stellar Bit Hub."""

    base_url: str = pydantic.Field(
        hubapi.DEFAULT_BASE_URL,
        description="Base URL of the hub",
        min_length=1,
    )
    username: str = pydantic.Field(description="Hub account name", min_length=1)
    password: str = pydantic.Field(description="Hub account password", repr=False)
    timeout: float = pydantic.Field(
        hubapi.DEFAULT_TIMEOUT,
        description="Request timeout in seconds",
        gt=0,
    )
    log_level: str = pydantic.Field("INFO", description="Logging level")


def configure_logging(log_level_name: str) -> None:
    """Configure structlog for logfmt output."""
    log_level = getattr(logging, log_level_name.upper(), logging.INFO)
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.EventRenamer("msg"),
            structlog.processors.format_exc_info,
            structlog.processors.LogfmtRenderer(
                key_order=("timestamp", "level", "msg"),
            ),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def load_config(config_path: str) -> HubClientConfig:
    """Load configuration from JSON file."""
    path = pathlib.Path(config_path)
    if not path.exists():
        msg = f"Configuration file not found: {config_path}"
        raise FileNotFoundError(msg)

    with path.open("r") as f:
        data = json.load(f)

    return HubClientConfig(**data)


def resolve_config(config_path: str | None = None) -> HubClientConfig:
    """Load configuration from a path, the environment, or the default file."""
    resolved_path = config_path or os.environ.get(CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH)
    return load_config(resolved_path)


async def connect_from_config(config: HubClientConfig) -> hubapi.HubApiClient:
    """Configure logging and return a client logged in with the configured account."""
    configure_logging(config.log_level)
    logger.info("Connecting to hub", base_url=config.base_url, username=config.username)
    return await hubapi.HubApiClient.connect(
        config.username,
        config.password,
        base_url=config.base_url,
        timeout=config.timeout,
    )
