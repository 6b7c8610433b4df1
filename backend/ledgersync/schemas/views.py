from pydantic import BaseModel
from typing import List, Optional

from ledgersync.formatting import data_type_name, format_address, format_timestamp
from ledgersync.schemas.ledger import DashboardSummary, DataRecord, Device, Threshold, TransactionResult


class DeviceView(Device):
    owner_short: str
    registered_at: str
    last_update: str

    @classmethod
    def from_device(cls, device: Device) -> "DeviceView":
        return cls(
            **device.model_dump(),
            owner_short=format_address(device.owner),
            registered_at=format_timestamp(device.registration_time),
            last_update=format_timestamp(device.last_update_time, never_label="Never"),
        )


class RecordView(DataRecord):
    data_type_name: str
    submitter_short: str
    recorded_at: str

    @classmethod
    def from_record(cls, record: DataRecord) -> "RecordView":
        return cls(
            **record.model_dump(),
            data_type_name=data_type_name(record.data_type),
            submitter_short=format_address(record.submitter),
            recorded_at=format_timestamp(record.timestamp),
        )


class DashboardView(BaseModel):
    identity: str
    identity_short: str
    total_devices: int
    active_devices: int
    total_records: int
    devices: List[DeviceView]

    @classmethod
    def from_summary(cls, summary: DashboardSummary) -> "DashboardView":
        return cls(
            identity=summary.identity,
            identity_short=format_address(summary.identity),
            total_devices=summary.total_devices,
            active_devices=summary.active_devices,
            total_records=summary.total_records,
            devices=[DeviceView.from_device(d) for d in summary.devices],
        )


class SessionStatus(BaseModel):
    connected: bool
    identity: Optional[str] = None
    network: str
    chain_id: int
    last_error: Optional[str] = None


class BalanceView(BaseModel):
    identity: str
    wei: str
    ether: str


class ThresholdChange(BaseModel):
    threshold: Threshold
    data_type_name: str
    transaction: TransactionResult


class ReceiptView(BaseModel):
    tx_hash: str
    confirmed: bool
    result: Optional[TransactionResult] = None
