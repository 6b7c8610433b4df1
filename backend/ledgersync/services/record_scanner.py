"""Data-record listing built from a full scan of the record index space."""
import logging
from typing import List, Optional

from ledgersync.schemas.ledger import DataRecord
from ledgersync.services.scan import collect, failed_indices, fold

logger = logging.getLogger(__name__)


class RecordScanner:
    def __init__(self, gateway, concurrency: int = 1):
        self.gateway = gateway
        self.concurrency = concurrency

    async def _record_at(self, record_id: int) -> DataRecord:
        raw = await self.gateway.query("getDataRecord", record_id)
        return DataRecord.from_ledger(record_id, raw)

    async def list_records(self, device_filter: Optional[int] = None) -> List[DataRecord]:
        """All records (or one device's records), newest first."""
        total = int(await self.gateway.query("getTotalDataRecords"))
        outcomes = await collect(total, self._record_at, self.concurrency)
        records = fold(outcomes, "record")
        if device_filter is not None:
            records = [r for r in records if r.device_index == device_filter]
        records.reverse()
        logger.info(
            "Record scan: %d total, %d returned (device filter: %s, skipped %s)",
            total, len(records), device_filter, failed_indices(outcomes) or "none",
        )
        return records
