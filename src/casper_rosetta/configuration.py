"""
Environment-driven configuration.

``MODE``, ``NETWORK`` and ``PORT`` are required; everything else has a
default. The chain constants are derived once from the network and shared
by reference with every component that needs them.
"""

from __future__ import annotations
import logging
from enum import Enum
from functools import cached_property
from typing import Any

from pydantic import AliasChoices, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .casper.constants import ChainConstants
from .casper.rpc import DEFAULT_NODE_URL
from .rosetta.types import BlockIdentifier, NetworkIdentifier
from .runtime.errors import ConfigurationError

MAINNET = "MAINNET"
TESTNET = "TESTNET"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class Mode(str, Enum):
    """Whether the middleware may talk to a node."""
    ONLINE = "ONLINE"
    OFFLINE = "OFFLINE"


class Configuration(BaseSettings):
    """Middleware settings read from the environment."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore",
                                      populate_by_name=True)

    mode: Mode
    network: str
    port: int = Field(gt=0)
    node_url: str = Field(default=DEFAULT_NODE_URL, validation_alias=AliasChoices("NODE", "node_url"))
    rpc_timeout: float = Field(default=120.0, gt=0)
    max_concurrency: int = Field(default=16, ge=1)
    log_level: str = "INFO"

    @field_validator("network")
    @classmethod
    def check_network(cls, value: str) -> str:
        value = value.upper()
        if value not in (MAINNET, TESTNET):
            raise ValueError(f"{value} is not a valid network")
        return value

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, value: str) -> str:
        value = value.upper()
        if not isinstance(logging.getLevelName(value), int):
            raise ValueError(f"{value} is not a logging level")
        return value

    @property
    def online(self) -> bool:
        return self.mode is Mode.ONLINE

    @property
    def remote_node(self) -> bool:
        """True when the node URL came from the environment."""
        return "node_url" in self.model_fields_set

    @cached_property
    def constants(self) -> ChainConstants:
        if self.network == TESTNET:
            return ChainConstants.testnet()
        return ChainConstants.mainnet()

    @property
    def network_identifier(self) -> NetworkIdentifier:
        return self.constants.network_identifier

    @property
    def genesis_block_identifier(self) -> BlockIdentifier:
        return self.constants.genesis_block_identifier


def load_configuration(**overrides: Any) -> Configuration:
    """
    Build the configuration from the environment.

    Args:
        overrides: Field values taking precedence over the environment

    Raises:
        ConfigurationError: A required variable is missing or invalid
    """
    try:
        return Configuration(**overrides)
    except ValidationError as e:
        problems = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
        raise ConfigurationError("Invalid configuration", details={"errors": problems}, cause=e) from e


def configure_logging(level: str = "INFO") -> None:
    """Set the process log format and level once at startup."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
