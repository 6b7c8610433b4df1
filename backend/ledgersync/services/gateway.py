"""
Ledger gateway.

Single point of contact with the ledger contract.  Holds the active signing
identity and the endpoint connection, and nothing else.

Reads (query) are plain eth_call and may run concurrently.  Writes (submit)
are sent through the signing provider and only return once the transaction
receipt shows the write included, so anything read afterwards already sees it.
Writes from one gateway are serialized.
"""
import asyncio
import logging
import time
from decimal import Decimal
from typing import Any, Dict, Optional

from eth_utils import from_wei

from ledgersync.errors import (
    ConfirmationTimeout, NotInitialized, ProviderUnavailable, RpcError, WriteRejected,
)
from ledgersync.schemas.ledger import NetworkDescriptor, TransactionResult
from ledgersync.services.contract_codec import ContractCodec
from ledgersync.services.network_negotiator import NetworkNegotiator
from ledgersync.services.rpc_client import JsonRpcClient
from ledgersync.services.signing import SigningProvider

logger = logging.getLogger(__name__)


class LedgerGateway:
    def __init__(
        self,
        provider: Optional[SigningProvider],
        rpc: JsonRpcClient,
        contract_address: str,
        network: NetworkDescriptor,
        codec: Optional[ContractCodec] = None,
        receipt_timeout: float = 120.0,
        poll_interval: float = 2.0,
    ):
        self.provider = provider
        self.rpc = rpc
        self.contract_address = contract_address
        self.network = network
        self.codec = codec or ContractCodec()
        self.receipt_timeout = receipt_timeout
        self.poll_interval = poll_interval

        self._identity: Optional[str] = None
        self._ready = False
        self._write_lock = asyncio.Lock()

    # ── Lifecycle ───────────────────────────────────────────────────────────

    @property
    def identity(self) -> Optional[str]:
        return self._identity

    @property
    def is_ready(self) -> bool:
        return self._ready

    async def initialize(self, prompt: bool = True) -> str:
        """
        Connect the endpoint, resolve the caller's identity and negotiate the
        network.  Returns the identity.  On any failure the gateway stays
        unusable (NotInitialized for every later call).

        With prompt=False only already-authorized accounts are used, so the
        provider never asks the user.
        """
        self.reset()
        if self.provider is None:
            raise ProviderUnavailable("No signing provider available")

        await self.rpc.connect()

        try:
            if prompt:
                accounts = await self.provider.request_accounts()
            else:
                accounts = await self.provider.existing_accounts()
        except RpcError as e:
            raise ProviderUnavailable(f"Signing provider refused account access: {e}") from e
        if not accounts:
            raise ProviderUnavailable("Signing provider exposed no accounts")

        identity = accounts[0]
        await NetworkNegotiator(self.provider, self.network).negotiate()

        self._identity = identity
        self._ready = True
        logger.info("Ledger gateway ready for %s on %s", identity, self.network.name)
        return identity

    def reset(self) -> None:
        if self._ready:
            logger.info("Ledger gateway reset (was %s)", self._identity)
        self._identity = None
        self._ready = False

    async def aclose(self) -> None:
        self.reset()
        await self.rpc.aclose()

    def _require_ready(self) -> None:
        if not self._ready:
            raise NotInitialized("Ledger gateway not initialized")

    # ── Reads ───────────────────────────────────────────────────────────────

    async def query(self, operation: str, *args: Any) -> Any:
        self._require_ready()
        data = self.codec.encode_call(operation, args)
        raw = await self.rpc.request(
            "eth_call", [{"to": self.contract_address, "data": data}, "latest"]
        )
        return self.codec.decode_result(operation, raw)

    # ── Writes ──────────────────────────────────────────────────────────────

    async def submit(self, operation: str, *args: Any) -> TransactionResult:
        """Send a state-changing call and block until the ledger includes it."""
        self._require_ready()
        data = self.codec.encode_call(operation, args)
        tx = {"from": self._identity, "to": self.contract_address, "data": data}

        async with self._write_lock:
            try:
                tx_hash = await self.provider.send_transaction(tx)
            except RpcError as e:
                reason = self.codec.decode_revert_reason(e.data) or e.message
                logger.warning("%s rejected: %s", operation, reason)
                raise WriteRejected(reason) from e

            logger.info("%s sent as %s, waiting for confirmation", operation, tx_hash)
            receipt = await self._wait_for_receipt(tx_hash)

        status = _to_int(receipt.get("status"), default=1)
        block_number = _to_int(receipt.get("blockNumber"))
        if status != 1:
            logger.warning("%s reverted in block %s (%s)", operation, block_number, tx_hash)
            raise WriteRejected(f"Transaction reverted: {operation}", tx_hash=tx_hash)

        logger.info("%s confirmed in block %s (%s)", operation, block_number, tx_hash)
        return TransactionResult(tx_hash=tx_hash, block_number=block_number, status=status)

    async def _wait_for_receipt(self, tx_hash: str) -> Dict[str, Any]:
        deadline = time.monotonic() + self.receipt_timeout
        while True:
            receipt = await self.rpc.request("eth_getTransactionReceipt", [tx_hash])
            if receipt and receipt.get("blockNumber") is not None:
                return receipt
            if time.monotonic() >= deadline:
                raise ConfirmationTimeout(tx_hash, self.receipt_timeout)
            await asyncio.sleep(self.poll_interval)

    # ── Transaction / account helpers ───────────────────────────────────────

    async def get_transaction_receipt(self, tx_hash: str) -> Optional[Dict[str, Any]]:
        self._require_ready()
        return await self.rpc.request("eth_getTransactionReceipt", [tx_hash])

    async def wait_for_transaction(self, tx_hash: str) -> Dict[str, Any]:
        self._require_ready()
        return await self._wait_for_receipt(tx_hash)

    async def get_balance_wei(self) -> int:
        self._require_ready()
        raw = await self.rpc.request("eth_getBalance", [self._identity, "latest"])
        return _to_int(raw, default=0)

    async def get_balance(self) -> Decimal:
        """Balance of the active identity, in ether."""
        return Decimal(from_wei(await self.get_balance_wei(), "ether"))


def _to_int(value: Any, default: Optional[int] = None) -> Optional[int]:
    if value is None:
        return default
    if isinstance(value, str):
        return int(value, 16)
    return int(value)
