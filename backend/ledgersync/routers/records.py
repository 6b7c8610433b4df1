from typing import List, Optional

from fastapi import APIRouter, Depends

from ledgersync.dependencies import get_ledger_session
from ledgersync.errors import DeviceNotFound
from ledgersync.schemas.ledger import TransactionResult
from ledgersync.schemas.requests import SubmitDataByIdRequest
from ledgersync.schemas.views import RecordView
from ledgersync.services.session import LedgerSession

router = APIRouter(prefix="/api/records", tags=["Records"])


@router.get("/", response_model=List[RecordView])
async def list_records(
    device_id: Optional[str] = None,
    session: LedgerSession = Depends(get_ledger_session),
):
    """All data records, newest first; optionally only those of one device."""
    device_filter = None
    if device_id and device_id.strip():
        lookup = await session.devices.resolve_index_by_string_id(device_id)
        if not lookup.exists:
            raise DeviceNotFound(lookup.device_id)
        device_filter = lookup.index

    records = await session.records.list_records(device_filter)
    return [RecordView.from_record(r) for r in records]


@router.post("/", response_model=TransactionResult)
async def submit_data(
    payload: SubmitDataByIdRequest,
    session: LedgerSession = Depends(get_ledger_session),
):
    return await session.devices.submit_data_for(payload.device_id, payload.value, payload.data_type)
