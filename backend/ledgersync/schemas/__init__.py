from ledgersync.schemas.ledger import (
    DataType, Device, DataRecord, Threshold, NetworkDescriptor,
    DeviceLookup, TransactionResult, DashboardSummary,
)
from ledgersync.schemas.requests import (
    RegisterDeviceRequest, DeviceIndexRequest, SubmitDataRequest, ThresholdRequest,
    SubmitDataByIdRequest, ThresholdByIdRequest, ProviderEventRequest,
)

__all__ = [
    "DataType", "Device", "DataRecord", "Threshold", "NetworkDescriptor",
    "DeviceLookup", "TransactionResult", "DashboardSummary",
    "RegisterDeviceRequest", "DeviceIndexRequest", "SubmitDataRequest", "ThresholdRequest",
    "SubmitDataByIdRequest", "ThresholdByIdRequest", "ProviderEventRequest",
]
