from typing import List

from fastapi import APIRouter, Depends

from ledgersync.dependencies import get_ledger_session, require_identity
from ledgersync.schemas.ledger import DeviceLookup, TransactionResult
from ledgersync.schemas.requests import RegisterDeviceRequest
from ledgersync.schemas.views import DeviceView
from ledgersync.services.session import LedgerSession

router = APIRouter(prefix="/api/devices", tags=["Devices"])


@router.get("/mine", response_model=List[DeviceView])
async def list_my_devices(
    identity: str = Depends(require_identity),
    session: LedgerSession = Depends(get_ledger_session),
):
    devices = await session.registry.list_owned(identity)
    return [DeviceView.from_device(d) for d in devices]


@router.post("/", response_model=TransactionResult)
async def register_device(
    payload: RegisterDeviceRequest,
    session: LedgerSession = Depends(get_ledger_session),
):
    return await session.devices.register_device(payload.device_id)


@router.get("/resolve/{device_id}", response_model=DeviceLookup)
async def resolve_device(
    device_id: str,
    session: LedgerSession = Depends(get_ledger_session),
):
    return await session.devices.resolve_index_by_string_id(device_id)


@router.get("/{device_index}", response_model=DeviceView)
async def get_device(
    device_index: int,
    session: LedgerSession = Depends(get_ledger_session),
):
    device = await session.devices.device_info(device_index)
    return DeviceView.from_device(device)


@router.get("/{device_index}/data-count")
async def get_device_data_count(
    device_index: int,
    session: LedgerSession = Depends(get_ledger_session),
):
    count = await session.devices.device_data_count(device_index)
    return {"device_index": device_index, "count": count}


@router.post("/{device_index}/deactivate", response_model=TransactionResult)
async def deactivate_device(
    device_index: int,
    session: LedgerSession = Depends(get_ledger_session),
):
    return await session.devices.deactivate_device(device_index)
