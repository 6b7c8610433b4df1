from pydantic import BaseModel, Field, StrictInt, field_validator, model_validator
from typing import Any, Optional

from ledgersync.schemas.ledger import DataType
from ledgersync.services.signing import PROVIDER_EVENTS

UINT32_MAX = 2 ** 32 - 1


def _validate_data_type(v: int) -> int:
    try:
        DataType(v)
    except ValueError:
        raise ValueError(f"Unknown data type: {v}")
    return v


class RegisterDeviceRequest(BaseModel):
    device_id: str

    @field_validator("device_id")
    @classmethod
    def validate_device_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Device ID must not be empty")
        return v


class DeviceIndexRequest(BaseModel):
    device_index: StrictInt = Field(ge=0)


class SubmitDataRequest(BaseModel):
    device_index: StrictInt = Field(ge=0)
    value: StrictInt = Field(ge=0, le=UINT32_MAX)
    data_type: StrictInt

    @field_validator("data_type")
    @classmethod
    def validate_data_type(cls, v: int) -> int:
        return _validate_data_type(v)


class ThresholdRequest(BaseModel):
    device_index: StrictInt = Field(ge=0)
    data_type: StrictInt
    min_value: StrictInt = Field(ge=0, le=UINT32_MAX)
    max_value: StrictInt = Field(ge=0, le=UINT32_MAX)

    @field_validator("data_type")
    @classmethod
    def validate_data_type(cls, v: int) -> int:
        return _validate_data_type(v)

    @model_validator(mode="after")
    def min_not_above_max(self):
        if self.min_value > self.max_value:
            raise ValueError("Minimum value cannot be greater than maximum value")
        return self


# ── HTTP payloads that address a device by its human-chosen id ──────────────

class SubmitDataByIdRequest(BaseModel):
    device_id: str
    value: int
    data_type: int


class ThresholdByIdRequest(BaseModel):
    device_id: str
    data_type: int
    min_value: int
    max_value: int


class ProviderEventRequest(BaseModel):
    event: str
    payload: Optional[Any] = None

    @field_validator("event")
    @classmethod
    def validate_event(cls, v: str) -> str:
        if v not in PROVIDER_EVENTS:
            raise ValueError(f"Unknown provider event: {v}")
        return v
