"""Dashboard summary: owned device counts plus the ledger-wide record count."""
import asyncio

from ledgersync.schemas.ledger import DashboardSummary
from ledgersync.services.registry_scanner import RegistryScanner


async def load_dashboard(gateway, scanner: RegistryScanner, identity: str) -> DashboardSummary:
    total_records, devices = await asyncio.gather(
        gateway.query("getTotalDataRecords"),
        scanner.list_owned(identity),
    )
    return DashboardSummary(
        identity=identity,
        total_devices=len(devices),
        active_devices=sum(1 for d in devices if d.is_active),
        total_records=int(total_records),
        devices=devices,
    )
