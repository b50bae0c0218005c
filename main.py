#!/usr/bin/env python3
"""Entry point for the Ethereum observer service.

Starts the chain observer in the background and serves its HTTP API.
"""

import argparse
import asyncio
import logging
import os
import sys

import uvicorn


# Configure logging before any other imports create loggers
def setup_logging(level: str = "INFO") -> None:
    """Configure logging for the application.

    Args:
        level: Logging level as string (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    log_level: int = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

# Get logger for this module
logger = logging.getLogger(__name__)

from src.eth_observer.api import create_app
from src.eth_observer.block_fetcher import BlockFetcher
from src.eth_observer.config import ObserverConfig
from src.eth_observer.memory_store import MemoryTransactionsStore
from src.eth_observer.observer import EthereumObserver
from src.eth_observer.utils.rpc_client import HttpRpcClient


async def main() -> None:
    """Main entry point for the Ethereum observer service.

    Parses startup arguments, loads configuration from environment,
    and runs the observer alongside its HTTP API.

    Raises:
        SystemExit: On configuration or runtime errors
    """
    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        description="Ethereum Observer - Track transactions of subscribed addresses",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""Environment Variables:
  RPC_URL              - JSON-RPC endpoint of the Ethereum node
  REQUEST_TIMEOUT      - HTTP request timeout (default: 30)
  POLL_INTERVAL        - Seconds to wait when caught up (default: 10)
  RETRY_DELAY          - Seconds to wait after a failed head read (default: 0)
  API_HOST             - API listen address (default: 0.0.0.0)
  API_PORT             - API listen port (default: 8081)
  SUBSCRIBE_ADDRESSES  - Comma-separated addresses to watch from startup
  LOG_LEVEL            - Logging level (can be overridden with --log-level)
        """
    )
    parser.add_argument(
        "--log-level",
        default=os.environ.get("LOG_LEVEL", "INFO"),
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging level (default: INFO)"
    )
    args: argparse.Namespace = parser.parse_args()

    setup_logging(args.log_level)
    logger.info("=== Ethereum Observer Starting ===")

    try:
        config: ObserverConfig = ObserverConfig.from_env()
    except ValueError as e:
        logger.error(f"Configuration Error: {e}")
        logger.error("Please check your environment variables:")
        logger.error("  - RPC_URL: JSON-RPC endpoint of the Ethereum node")
        logger.error("  - POLL_INTERVAL / RETRY_DELAY / REQUEST_TIMEOUT: numeric values")
        logger.error("  - API_PORT: port between 1 and 65535")
        logger.error("  - SUBSCRIBE_ADDRESSES: comma-separated Ethereum addresses")
        sys.exit(1)

    config.log_config()

    try:
        async with HttpRpcClient(config.rpc.rpc_url, timeout=config.rpc.request_timeout) as rpc_client:
            observer = EthereumObserver(
                block_fetcher=BlockFetcher(rpc_client),
                transactions_store=MemoryTransactionsStore(),
                poll_interval=config.monitoring.poll_interval,
                retry_delay=config.monitoring.retry_delay
            )
            for address in config.subscriptions:
                await observer.subscribe(address)

            server = uvicorn.Server(uvicorn.Config(
                create_app(observer),
                host=config.api.host,
                port=config.api.port,
                log_level=args.log_level.lower()
            ))
            await server.serve()

    except KeyboardInterrupt:
        logger.info("\nReceived interrupt signal, shutting down gracefully...")
        sys.exit(0)

    except Exception as e:
        logger.error(f"Fatal Error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
