"""
Signing provider capability.

The gateway never signs anything itself: it asks an external signing identity
(wallet, node-managed account, remote signer) for the active account, network
switches and transaction submission.  The provider is passed in explicitly;
there is no process-wide provider object.

Change notifications (accountsChanged / chainChanged) are pushed into the
provider with emit() and fanned out to subscribers.  subscribe() returns a
Subscription handle whose cancel() detaches the callback.
"""
import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol, Union

from ledgersync.errors import RpcError
from ledgersync.services.rpc_client import JsonRpcClient

logger = logging.getLogger(__name__)

ACCOUNTS_CHANGED = "accountsChanged"
CHAIN_CHANGED = "chainChanged"
PROVIDER_EVENTS = (ACCOUNTS_CHANGED, CHAIN_CHANGED)

# EIP-1193 / EIP-3085 provider error codes
USER_REJECTED_REQUEST = 4001
UNRECOGNIZED_CHAIN = 4902

Listener = Callable[[Any], Union[None, Awaitable[None]]]


class Subscription:
    """Handle returned by subscribe(); cancel() is idempotent."""

    def __init__(self, hub: "EventHub", event: str, listener: Listener):
        self._hub = hub
        self.event = event
        self.listener = listener
        self.active = True

    def cancel(self) -> None:
        if self.active:
            self._hub._remove(self)
            self.active = False


class EventHub:
    def __init__(self) -> None:
        self._subs: Dict[str, List[Subscription]] = {e: [] for e in PROVIDER_EVENTS}

    def subscribe(self, event: str, listener: Listener) -> Subscription:
        if event not in self._subs:
            raise ValueError(f"Unknown provider event: {event!r}")
        sub = Subscription(self, event, listener)
        self._subs[event].append(sub)
        return sub

    def _remove(self, sub: Subscription) -> None:
        try:
            self._subs[sub.event].remove(sub)
        except ValueError:
            pass

    def listener_count(self, event: str) -> int:
        return len(self._subs.get(event, []))

    async def emit(self, event: str, payload: Any) -> None:
        """Deliver a notification to every current subscriber, in subscription order."""
        if event not in self._subs:
            raise ValueError(f"Unknown provider event: {event!r}")
        for sub in list(self._subs[event]):
            result = sub.listener(payload)
            if inspect.isawaitable(result):
                await result


class SigningProvider(Protocol):
    async def request_accounts(self) -> List[str]:
        ...

    async def existing_accounts(self) -> List[str]:
        ...

    async def request_identity_switch(self) -> List[str]:
        ...

    async def chain_id(self) -> int:
        ...

    async def switch_network(self, chain_id_hex: str) -> None:
        ...

    async def register_network(self, descriptor: Dict[str, Any]) -> None:
        ...

    async def send_transaction(self, tx: Dict[str, Any]) -> str:
        ...

    def subscribe(self, event: str, listener: Listener) -> Subscription:
        ...

    async def emit(self, event: str, payload: Any) -> None:
        ...


class JsonRpcSigningProvider:
    """
    SigningProvider backed by a JSON-RPC endpoint that manages accounts itself
    (browser-wallet bridge, remote signer, dev node with unlocked accounts).
    """

    def __init__(self, rpc: JsonRpcClient):
        self.rpc = rpc
        self._events = EventHub()

    async def request_accounts(self) -> List[str]:
        accounts = await self.rpc.request("eth_requestAccounts")
        return list(accounts or [])

    async def existing_accounts(self) -> List[str]:
        """Accounts already authorized; never prompts."""
        accounts = await self.rpc.request("eth_accounts")
        return list(accounts or [])

    async def request_identity_switch(self) -> List[str]:
        await self.rpc.request("wallet_requestPermissions", [{"eth_accounts": {}}])
        return await self.request_accounts()

    async def chain_id(self) -> int:
        raw = await self.rpc.request("eth_chainId")
        return int(raw, 16) if isinstance(raw, str) else int(raw)

    async def switch_network(self, chain_id_hex: str) -> None:
        await self.rpc.request("wallet_switchEthereumChain", [{"chainId": chain_id_hex}])

    async def register_network(self, descriptor: Dict[str, Any]) -> None:
        await self.rpc.request("wallet_addEthereumChain", [descriptor])

    async def send_transaction(self, tx: Dict[str, Any]) -> str:
        tx_hash = await self.rpc.request("eth_sendTransaction", [tx])
        if not tx_hash:
            raise RpcError(None, "Provider returned no transaction hash")
        return tx_hash

    def subscribe(self, event: str, listener: Listener) -> Subscription:
        return self._events.subscribe(event, listener)

    async def emit(self, event: str, payload: Any) -> None:
        logger.info("Provider notification %s: %s", event, payload)
        await self._events.emit(event, payload)


def build_provider(rpc: Optional[JsonRpcClient]) -> Optional[JsonRpcSigningProvider]:
    """No endpoint configured means no signing provider at all."""
    if rpc is None or not rpc.url:
        return None
    return JsonRpcSigningProvider(rpc)
