"""
JSON-RPC 2.0 client for the ledger endpoint.
Request:  {"jsonrpc": "2.0", "method": ..., "params": [...], "id": n}
Response: {"jsonrpc": "2.0", "id": n, "result": ...} or {"error": {"code", "message", "data"}}
"""
import itertools
import logging
from typing import Any, List, Optional

import httpx

from ledgersync.errors import RpcError

logger = logging.getLogger(__name__)


class JsonRpcClient:
    def __init__(
        self,
        url: str,
        timeout: float = 15.0,
        verify: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url
        self.timeout = timeout
        self.verify = verify
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._ids = itertools.count(1)

    # ── Connection ──────────────────────────────────────────────────────────

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    async def connect(self) -> None:
        if self._client is not None:
            return
        self._client = httpx.AsyncClient(
            timeout=self.timeout, verify=self.verify, transport=self._transport
        )
        logger.info("JSON-RPC endpoint %s opened", self.url)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("JSON-RPC endpoint %s closed", self.url)

    # ── Calls ───────────────────────────────────────────────────────────────

    async def request(self, method: str, params: Optional[List[Any]] = None) -> Any:
        """
        Execute one JSON-RPC call and return its `result`.
        Raises RpcError for JSON-RPC error objects, httpx.HTTPError on transport failure.
        """
        await self.connect()
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params if params is not None else [],
            "id": next(self._ids),
        }
        resp = await self._client.post(self.url, json=payload)
        resp.raise_for_status()
        data = resp.json()

        if "error" in data and data["error"] is not None:
            err = data["error"]
            if isinstance(err, dict):
                raise RpcError(err.get("code"), err.get("message", "unknown error"), err.get("data"))
            raise RpcError(None, str(err))

        return data.get("result")
