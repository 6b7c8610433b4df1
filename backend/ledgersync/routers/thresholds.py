from fastapi import APIRouter, Depends

from ledgersync.dependencies import get_ledger_session
from ledgersync.formatting import data_type_name
from ledgersync.schemas.requests import ThresholdByIdRequest
from ledgersync.schemas.views import ThresholdChange
from ledgersync.services.session import LedgerSession

router = APIRouter(prefix="/api/thresholds", tags=["Thresholds"])


@router.put("/", response_model=ThresholdChange)
async def set_threshold(
    payload: ThresholdByIdRequest,
    session: LedgerSession = Depends(get_ledger_session),
):
    threshold, result = await session.devices.set_threshold_for(
        payload.device_id, payload.data_type, payload.min_value, payload.max_value
    )
    return ThresholdChange(
        threshold=threshold,
        data_type_name=data_type_name(threshold.data_type),
        transaction=result,
    )


@router.get("/{device_index}/{data_type}")
async def get_threshold_status(
    device_index: int,
    data_type: int,
    session: LedgerSession = Depends(get_ledger_session),
):
    is_set = await session.devices.is_threshold_set(device_index, data_type)
    return {"device_index": device_index, "data_type": data_type, "is_set": is_set}
