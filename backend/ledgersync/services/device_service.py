"""
Device operations.

Validated write operations (register, submit data, set threshold, deactivate)
and point lookups.  Input is checked against the request schemas before the
gateway is touched, so invalid input never costs a network call.  Ledger
rejections are surfaced as-is; writes are never retried.
"""
import logging
from typing import Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ledgersync.errors import DeviceNotFound, InvalidInput
from ledgersync.schemas.ledger import Device, DeviceLookup, Threshold, TransactionResult
from ledgersync.schemas.requests import (
    DeviceIndexRequest, RegisterDeviceRequest, SubmitDataRequest, ThresholdRequest,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def validate_input(model: Type[M], **values) -> M:
    try:
        return model(**values)
    except ValidationError as e:
        messages = "; ".join(err["msg"] for err in e.errors())
        raise InvalidInput(messages, errors=e.errors(include_url=False)) from e


class DeviceService:
    def __init__(self, gateway):
        self.gateway = gateway

    # ── Writes ──────────────────────────────────────────────────────────────

    async def register_device(self, device_id: str) -> TransactionResult:
        req = validate_input(RegisterDeviceRequest, device_id=device_id)
        result = await self.gateway.submit("registerDevice", req.device_id)
        logger.info("Registered device %r (%s)", req.device_id, result.tx_hash)
        return result

    async def submit_data(self, device_index: int, value: int, data_type: int) -> TransactionResult:
        req = validate_input(
            SubmitDataRequest, device_index=device_index, value=value, data_type=data_type
        )
        return await self.gateway.submit("submitData", req.device_index, req.value, req.data_type)

    async def set_threshold(
        self, device_index: int, data_type: int, min_value: int, max_value: int
    ) -> TransactionResult:
        req = validate_input(
            ThresholdRequest,
            device_index=device_index,
            data_type=data_type,
            min_value=min_value,
            max_value=max_value,
        )
        return await self.gateway.submit(
            "setThreshold", req.device_index, req.data_type, req.min_value, req.max_value
        )

    async def deactivate_device(self, device_index: int) -> TransactionResult:
        req = validate_input(DeviceIndexRequest, device_index=device_index)
        result = await self.gateway.submit("deactivateDevice", req.device_index)
        logger.info("Deactivated device #%d (%s)", req.device_index, result.tx_hash)
        return result

    # ── Flows addressed by the human-chosen device id ───────────────────────

    async def _require_index(self, device_id: str) -> int:
        lookup = await self.resolve_index_by_string_id(device_id)
        if not lookup.exists:
            raise DeviceNotFound(lookup.device_id)
        return lookup.index

    async def submit_data_for(self, device_id: str, value: int, data_type: int) -> TransactionResult:
        # Validate everything except the index before resolving it
        validate_input(SubmitDataRequest, device_index=0, value=value, data_type=data_type)
        index = await self._require_index(device_id)
        return await self.submit_data(index, value, data_type)

    async def set_threshold_for(
        self, device_id: str, data_type: int, min_value: int, max_value: int
    ) -> Tuple[Threshold, TransactionResult]:
        """Returns the threshold as written (with its resolved index) and the confirmed write."""
        req = validate_input(
            ThresholdRequest,
            device_index=0,
            data_type=data_type,
            min_value=min_value,
            max_value=max_value,
        )
        index = await self._require_index(device_id)
        result = await self.set_threshold(index, data_type, min_value, max_value)
        threshold = Threshold(
            device_index=index,
            data_type=req.data_type,
            min_value=req.min_value,
            max_value=req.max_value,
        )
        return threshold, result

    # ── Reads ───────────────────────────────────────────────────────────────

    async def resolve_index_by_string_id(self, device_id: str) -> DeviceLookup:
        """
        Translate a device string id to its ledger index.  Non-existence is a
        normal result (exists=False), not an error.
        """
        req = validate_input(RegisterDeviceRequest, device_id=device_id)
        index, exists = await self.gateway.query("getDeviceByString", req.device_id)
        if not exists:
            return DeviceLookup(device_id=req.device_id, exists=False)
        return DeviceLookup(device_id=req.device_id, index=int(index), exists=True)

    async def device_info(self, device_index: int) -> Device:
        req = validate_input(DeviceIndexRequest, device_index=device_index)
        raw = await self.gateway.query("getDeviceInfo", req.device_index)
        return Device.from_ledger(req.device_index, raw)

    async def device_data_count(self, device_index: int) -> int:
        req = validate_input(DeviceIndexRequest, device_index=device_index)
        return int(await self.gateway.query("getDeviceDataCount", req.device_index))

    async def is_threshold_set(self, device_index: int, data_type: int) -> bool:
        req = validate_input(
            ThresholdRequest, device_index=device_index, data_type=data_type,
            min_value=0, max_value=0,
        )
        return bool(await self.gateway.query("isThresholdSet", req.device_index, req.data_type))
