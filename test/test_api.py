#!/usr/bin/env python3
"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from src.eth_observer.api import create_app
from src.eth_observer.memory_store import MemoryTransactionsStore
from src.eth_observer.models import Transaction
from src.eth_observer.observer import EthereumObserver

CHECKSUM_ADDRESS = "0x742d35Cc6634C0532925a3b844Bc9e7595f0bEb7"
ADDRESS = CHECKSUM_ADDRESS.lower()


class IdleFetcher:
    """Fetcher that always reports the same head and empty blocks."""

    async def get_current_block_number(self) -> str:
        return "0x64"

    async def get_block_by_number(self, block_number: str) -> list[Transaction]:
        return []


@pytest.fixture
def store():
    return MemoryTransactionsStore()


@pytest.fixture
def observer(store):
    return EthereumObserver(IdleFetcher(), store, poll_interval=0.01)


@pytest.fixture
def client(observer):
    """API client that does not run the observer loop."""
    return TestClient(create_app(observer, observe=False))


class TestApi:
    """Test suite for the API routes."""

    def test_subscribe(self, client):
        """Test subscribing to a new and an existing address."""
        response = client.post("/subscribe", json={"address": CHECKSUM_ADDRESS})
        assert response.status_code == 200
        assert response.json() == {"address": ADDRESS, "subscribed": True}

        response = client.post("/subscribe", json={"address": ADDRESS})
        assert response.json() == {"address": ADDRESS, "subscribed": False}

    def test_subscribe_invalid_address(self, client):
        """Test that invalid addresses are rejected."""
        response = client.post("/subscribe", json={"address": "not-an-address"})

        assert response.status_code == 400

    def test_subscribe_missing_body(self, client):
        """Test that a request without an address fails validation."""
        response = client.post("/subscribe", json={})

        assert response.status_code == 422

    def test_latest_block(self, client):
        """Test reading the latest block before any processing."""
        response = client.get("/getLatestBlock")

        assert response.status_code == 200
        assert response.json() == {"latestBlock": 0}

    def test_get_transactions(self, client, store):
        """Test that recorded transactions are returned in node format."""
        tx = Transaction(hash="0x1", from_address=ADDRESS, to_address="0x3", value="0x4")
        store.add_transactions(ADDRESS, [tx])

        response = client.get("/getTransactions", params={"address": CHECKSUM_ADDRESS})

        assert response.status_code == 200
        assert response.json() == {"transactions": [tx.to_dict()]}

    def test_get_transactions_unknown_address(self, client):
        """Test that unknown addresses yield an empty list."""
        response = client.get("/getTransactions", params={"address": ADDRESS})

        assert response.json() == {"transactions": []}

    def test_status(self, client):
        """Test the status route."""
        response = client.get("/status")

        assert response.status_code == 200
        assert response.json()["latest_block"] == 0
        assert response.json()["is_running"] is False


class TestApiLifespan:
    """Tests for starting the observer with the app."""

    def test_observer_runs_with_app(self, observer):
        """Test that the observer seeds while the app is up and stops after."""
        with TestClient(create_app(observer)) as client:
            for _ in range(200):
                if client.get("/getLatestBlock").json()["latestBlock"] == 100:
                    break
            assert client.get("/getLatestBlock").json() == {"latestBlock": 100}

        assert observer.running is False
