#!/usr/bin/env python3
"""Configuration management for the Ethereum observer.

This module provides type-safe configuration dataclasses with validation
for the observer service. Configuration is loaded from environment variables
with sensible defaults where appropriate.
"""

import logging
import os
from dataclasses import dataclass, field
from urllib.parse import urlparse

from web3 import Web3

# Get logger for this module
logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RpcConfig:
    """Configuration for the Ethereum node connection.

    Attributes:
        rpc_url: HTTP(S) JSON-RPC endpoint of the node
        request_timeout: HTTP request timeout in seconds
    """

    rpc_url: str
    request_timeout: int = 30

    def __post_init__(self) -> None:
        """Validate RPC configuration."""
        if not self.rpc_url:
            raise ValueError("RPC URL is required (RPC_URL)")

        parsed = urlparse(self.rpc_url)
        if parsed.scheme not in ('http', 'https'):
            raise ValueError(
                f"Invalid RPC URL scheme: {parsed.scheme}. "
                "Expected http or https"
            )

        if self.request_timeout <= 0:
            raise ValueError(f"Request timeout must be positive, got {self.request_timeout}")
        if self.request_timeout > 120:
            raise ValueError(f"Request timeout too long (max 120s), got {self.request_timeout}")


@dataclass(frozen=True, slots=True)
class MonitoringConfig:
    """Configuration for chain polling."""
    poll_interval: float = 10  # seconds to wait when no blocks are left to read
    retry_delay: float = 0.0  # seconds to wait before retrying a failed head read

    def __post_init__(self) -> None:
        """Validate monitoring configuration."""
        if self.poll_interval <= 0:
            raise ValueError(f"Poll interval must be positive, got {self.poll_interval}")
        if self.poll_interval > 300:
            raise ValueError(f"Poll interval too long (max 300s), got {self.poll_interval}")

        if self.retry_delay < 0:
            raise ValueError(f"Retry delay must be non-negative, got {self.retry_delay}")
        if self.retry_delay > 60:
            raise ValueError(f"Retry delay too long (max 60s), got {self.retry_delay}")


@dataclass(frozen=True, slots=True)
class ApiConfig:
    """Configuration for the HTTP API."""
    host: str = "0.0.0.0"
    port: int = 8081

    def __post_init__(self) -> None:
        """Validate API configuration."""
        if not 0 < self.port < 65536:
            raise ValueError(f"API port must be between 1 and 65535, got {self.port}")


@dataclass(frozen=True, slots=True)
class ObserverConfig:
    """Main configuration for the observer service.

    Attributes:
        rpc: Configuration for the node connection
        monitoring: Configuration for chain polling
        api: Configuration for the HTTP API
        subscriptions: Addresses subscribed on startup (lowercase)
    """

    rpc: RpcConfig
    monitoring: MonitoringConfig = field(default_factory=MonitoringConfig)
    api: ApiConfig = field(default_factory=ApiConfig)
    subscriptions: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        """Validate observer configuration."""
        for address in self.subscriptions:
            if not Web3.is_address(address):
                raise ValueError(f"Invalid subscription address: {address}")

        # Use object.__setattr__ since dataclass is frozen
        object.__setattr__(
            self, 'subscriptions', tuple(address.lower() for address in self.subscriptions)
        )

    @classmethod
    def from_env(cls) -> "ObserverConfig":
        """Load configuration from environment variables.

        Returns:
            ObserverConfig instance with loaded values

        Raises:
            ValueError: If environment variables are invalid
        """
        rpc_config = RpcConfig(
            rpc_url=os.environ.get(
                "RPC_URL",
                "https://cloudflare-eth.com"  # Default public RPC
            ),
            request_timeout=int(os.environ.get("REQUEST_TIMEOUT", "30"))
        )

        monitoring_config = MonitoringConfig(
            poll_interval=float(os.environ.get("POLL_INTERVAL", "10")),
            retry_delay=float(os.environ.get("RETRY_DELAY", "0"))
        )

        api_config = ApiConfig(
            host=os.environ.get("API_HOST", "0.0.0.0"),
            port=int(os.environ.get("API_PORT", "8081"))
        )

        raw_subscriptions = os.environ.get("SUBSCRIBE_ADDRESSES", "")
        subscriptions = tuple(
            address.strip() for address in raw_subscriptions.split(",") if address.strip()
        )

        return cls(
            rpc=rpc_config,
            monitoring=monitoring_config,
            api=api_config,
            subscriptions=subscriptions
        )

    def log_config(self) -> None:
        """Log the configuration in a readable format for debugging."""
        logger.info("=" * 60)
        logger.info("Ethereum Observer Configuration")
        logger.info("=" * 60)

        logger.info("Node:")
        logger.info(f"  RPC URL: {self.rpc.rpc_url}")
        logger.info(f"  Request Timeout: {self.rpc.request_timeout} seconds")

        logger.info("Monitoring Settings:")
        logger.info(f"  Poll Interval: {self.monitoring.poll_interval} seconds")
        logger.info(f"  Retry Delay: {self.monitoring.retry_delay} seconds")

        logger.info("API:")
        logger.info(f"  Listening on: {self.api.host}:{self.api.port}")

        logger.info(f"Initial Subscriptions: {len(self.subscriptions)}")
        for address in self.subscriptions:
            logger.info(f"  {address}")

        logger.info("=" * 60)
