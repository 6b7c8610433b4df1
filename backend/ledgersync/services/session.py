"""
Ledger session lifecycle.

Owns one gateway plus the scanners and device service bound to it, and keeps
them in step with the signing provider:

  - accountsChanged with no accounts  -> disconnect
  - accountsChanged with accounts     -> full reconnect
  - chainChanged                      -> full reconnect

A reconnect always re-runs gateway.initialize() (identity + negotiation);
nothing is patched incrementally.
"""
import logging
from typing import List, Optional

import httpx

from ledgersync.errors import LedgerError, NotInitialized, ProviderUnavailable, RpcError
from ledgersync.schemas.ledger import DashboardSummary
from ledgersync.services.dashboard import load_dashboard
from ledgersync.services.device_service import DeviceService
from ledgersync.services.gateway import LedgerGateway
from ledgersync.services.record_scanner import RecordScanner
from ledgersync.services.registry_scanner import RegistryScanner
from ledgersync.services.signing import ACCOUNTS_CHANGED, CHAIN_CHANGED, Subscription

logger = logging.getLogger(__name__)


class LedgerSession:
    def __init__(self, gateway: LedgerGateway, scan_concurrency: int = 1):
        self.gateway = gateway
        self.devices = DeviceService(gateway)
        self.registry = RegistryScanner(gateway, concurrency=scan_concurrency)
        self.records = RecordScanner(gateway, concurrency=scan_concurrency)
        self.last_error: Optional[str] = None
        self._subscriptions: List[Subscription] = []

    @property
    def identity(self) -> Optional[str]:
        return self.gateway.identity

    @property
    def is_connected(self) -> bool:
        return self.gateway.is_ready

    def require_identity(self) -> str:
        if not self.gateway.is_ready:
            raise NotInitialized("Not connected. Connect a signing identity first")
        return self.gateway.identity

    # ── Connect / disconnect ────────────────────────────────────────────────

    async def connect(self, prompt: bool = True) -> str:
        try:
            identity = await self.gateway.initialize(prompt=prompt)
        except (LedgerError, httpx.HTTPError) as e:
            self.last_error = str(e)
            raise
        self.last_error = None
        self._subscribe()
        logger.info("Session connected as %s", identity)
        return identity

    async def switch_identity(self) -> str:
        """Ask the provider to let the user pick another account, then reconnect."""
        provider = self.gateway.provider
        if provider is None:
            raise ProviderUnavailable("No signing provider available")
        try:
            await provider.request_identity_switch()
        except RpcError as e:
            raise ProviderUnavailable(f"Identity switch refused: {e}") from e
        self.gateway.reset()
        return await self.connect()

    def disconnect(self) -> None:
        self.gateway.reset()
        logger.info("Session disconnected")

    async def close(self) -> None:
        for sub in self._subscriptions:
            sub.cancel()
        self._subscriptions = []
        await self.gateway.aclose()

    def _subscribe(self) -> None:
        if self._subscriptions or self.gateway.provider is None:
            return
        provider = self.gateway.provider
        self._subscriptions = [
            provider.subscribe(ACCOUNTS_CHANGED, self._on_accounts_changed),
            provider.subscribe(CHAIN_CHANGED, self._on_chain_changed),
        ]

    # ── Provider notifications ──────────────────────────────────────────────

    async def _on_accounts_changed(self, accounts) -> None:
        if not accounts:
            self.disconnect()
            return
        await self._reconnect("identity changed")

    async def _on_chain_changed(self, chain_id) -> None:
        await self._reconnect(f"network changed to {chain_id}")

    async def _reconnect(self, reason: str) -> None:
        logger.info("Reconnecting: %s", reason)
        self.gateway.reset()
        try:
            await self.connect()
        except (LedgerError, httpx.HTTPError) as e:
            logger.warning("Reconnect failed: %s", e)

    # ── Views ───────────────────────────────────────────────────────────────

    async def dashboard(self) -> DashboardSummary:
        identity = self.require_identity()
        return await load_dashboard(self.gateway, self.registry, identity)

    def status(self) -> dict:
        return {
            "connected": self.is_connected,
            "identity": self.identity,
            "network": self.gateway.network.name,
            "chain_id": self.gateway.network.chain_id,
            "last_error": self.last_error,
        }
