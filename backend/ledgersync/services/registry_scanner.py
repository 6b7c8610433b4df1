"""Owned-device listing built from a full scan of the device index space."""
import logging
from typing import List

from ledgersync.schemas.ledger import Device
from ledgersync.services.scan import collect, failed_indices, fold

logger = logging.getLogger(__name__)


class RegistryScanner:
    def __init__(self, gateway, concurrency: int = 1):
        self.gateway = gateway
        self.concurrency = concurrency

    async def _device_at(self, index: int) -> Device:
        raw = await self.gateway.query("getDeviceInfo", index)
        return Device.from_ledger(index, raw)

    async def list_owned(self, caller_identity: str) -> List[Device]:
        """
        Devices owned by `caller_identity`, ascending by index.
        Snapshot of the device count read at the start; devices registered
        during the scan are not included.
        """
        total = int(await self.gateway.query("getTotalDevices"))
        outcomes = await collect(total, self._device_at, self.concurrency)
        devices = fold(outcomes, "device")
        owned = [d for d in devices if d.is_owned_by(caller_identity)]
        logger.info(
            "Device scan: %d total, %d owned by %s, skipped %s",
            total, len(owned), caller_identity, failed_indices(outcomes) or "none",
        )
        return owned
