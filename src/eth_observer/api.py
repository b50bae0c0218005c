"""
HTTP API for the Ethereum observer.

Exposes the observer's subscribe, latest block and transactions operations
over HTTP.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel, Field
from web3 import Web3

from .observer import EthereumObserver

logger = logging.getLogger(__name__)


class SubscribeRequest(BaseModel):
    address: str = Field(..., description="Address to watch", examples=["0x742d35cc6634c0532925a3b844bc9e7595f0bEb7"])


class SubscribeResponse(BaseModel):
    address: str
    subscribed: bool


class LatestBlockResponse(BaseModel):
    latestBlock: int


class TransactionsResponse(BaseModel):
    transactions: list[dict[str, Any]]


def create_app(observer: EthereumObserver, observe: bool = True) -> FastAPI:
    """
    Build the FastAPI application around an observer.

    Args:
        observer: Observer served by the API
        observe: Start the observer's background loop with the app

    Returns:
        Configured FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if observe:
            observer.start()
            logger.info("Chain observer started with the API")
        try:
            yield
        finally:
            if observe:
                await observer.shutdown()

    app = FastAPI(title="Ethereum Observer", lifespan=lifespan)

    @app.get("/getLatestBlock", response_model=LatestBlockResponse)
    async def get_latest_block() -> LatestBlockResponse:
        """Return the latest block processed by the observer."""
        return LatestBlockResponse(latestBlock=await observer.current_block())

    @app.get("/getTransactions", response_model=TransactionsResponse)
    async def get_transactions(address: str = Query(..., description="Address to look up")) -> TransactionsResponse:
        """Return the recorded transactions of an address, empty if none."""
        transactions = observer.get_transactions(address)
        return TransactionsResponse(transactions=[tx.to_dict() for tx in transactions])

    @app.post("/subscribe", response_model=SubscribeResponse)
    async def subscribe(request: SubscribeRequest) -> SubscribeResponse:
        """Subscribe to an address."""
        if not Web3.is_address(request.address):
            logger.warning(f"Rejected subscription for invalid address {request.address}")
            raise HTTPException(status_code=400, detail=f"Invalid address: {request.address}")

        subscribed = await observer.subscribe(request.address)
        return SubscribeResponse(address=request.address.lower(), subscribed=subscribed)

    @app.get("/status")
    async def status() -> dict[str, Any]:
        """Return the observer's status counters."""
        return await observer.get_status()

    return app
