"""
Solana JSON-RPC account reader.

Public API
----------
AccountDataSource(rpc_url=None, timeout=REQUEST_TIMEOUT)
    get_account_data(address) -> bytes
        Raw account data; raises AccountNotFound when the account is absent.
    get_multiple_account_data(addresses) -> dict[str, bytes | None]
        Batched getMultipleAccounts, fanned out over a thread pool;
        missing accounts map to None.

Failures are raised as AccountFetchError and never retried.
"""
from __future__ import annotations

import base64
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Optional, Sequence

import requests

from clmm_tickmap.config.network import REQUEST_TIMEOUT, RPC_BATCH_SIZE, RPC_THREADS, get_rpc_url
from clmm_tickmap.helpers.errors import AccountFetchError, AccountNotFound
from clmm_tickmap.helpers.tracing import trace_rpc_call

__all__ = ["AccountDataSource"]

logger = logging.getLogger(__name__)


def _decode_account(value: Optional[dict[str, Any]]) -> Optional[bytes]:
    if value is None:
        return None
    data, encoding = value["data"]
    if encoding != "base64":
        raise AccountFetchError(f"Unexpected account encoding: {encoding}")
    return base64.b64decode(data)


class AccountDataSource:
    """Fetches raw account bytes over Solana JSON-RPC."""

    def __init__(
        self,
        rpc_url: Optional[str] = None,
        timeout: float = REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
        threads: int = RPC_THREADS,
    ):
        """
        Args:
            rpc_url: Endpoint URL (resolved from the environment when omitted)
            timeout: Per-request timeout in seconds
            session: Optional pre-configured requests session
            threads: Parallel requests for batched reads
        """
        self.rpc_url = get_rpc_url(rpc_url)
        self.timeout = timeout
        self.session = session or requests.Session()
        self.threads = max(1, threads)

    def _call(self, method: str, params: list, **trace_attrs) -> Any:
        payload = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params}
        with trace_rpc_call(method, self.rpc_url, **trace_attrs):
            try:
                resp = self.session.post(self.rpc_url, json=payload, timeout=self.timeout)
                resp.raise_for_status()
                body = resp.json()
            except requests.RequestException as e:
                raise AccountFetchError(f"{method} request to {self.rpc_url} failed: {e}") from e
            except ValueError as e:
                raise AccountFetchError(f"{method} returned invalid JSON: {e}") from e
        if body.get("error"):
            raise AccountFetchError(f"{method} error: {body['error']}")
        return body.get("result")

    def get_account_data(self, address: str) -> bytes:
        """Raw data of one account."""
        logger.info(f"Fetching account {address}")
        result = self._call(
            "getAccountInfo",
            [address, {"encoding": "base64"}],
            address=address,
        )
        data = _decode_account((result or {}).get("value"))
        if data is None:
            raise AccountNotFound(address)
        logger.debug(f"Account {address}: {len(data)} bytes")
        return data

    def _fetch_batch(self, batch: Sequence[str]) -> dict[str, Optional[bytes]]:
        result = self._call(
            "getMultipleAccounts",
            [list(batch), {"encoding": "base64"}],
            count=len(batch),
        )
        values = (result or {}).get("value") or []
        if len(values) != len(batch):
            raise AccountFetchError(f"Expected {len(batch)} accounts, got {len(values)}")
        return {address: _decode_account(value) for address, value in zip(batch, values)}

    def get_multiple_account_data(self, addresses: Sequence[str]) -> dict[str, Optional[bytes]]:
        """Raw data for many accounts; absent accounts map to None."""
        batches = [addresses[i:i + RPC_BATCH_SIZE] for i in range(0, len(addresses), RPC_BATCH_SIZE)]
        logger.info(f"Fetching {len(addresses)} accounts in {len(batches)} batch(es)")

        accounts: dict[str, Optional[bytes]] = {}
        if len(batches) <= 1:
            for batch in batches:
                accounts.update(self._fetch_batch(batch))
            return accounts

        with ThreadPoolExecutor(max_workers=min(self.threads, len(batches))) as ex:
            futures = [ex.submit(self._fetch_batch, batch) for batch in batches]
            for fut in as_completed(futures):
                accounts.update(fut.result())
        return accounts
