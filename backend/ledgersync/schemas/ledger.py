from enum import IntEnum
from pydantic import BaseModel
from typing import Any, Dict, List, Optional, Sequence

from eth_utils import to_checksum_address


class DataType(IntEnum):
    TEMPERATURE = 0
    HUMIDITY = 1
    PRESSURE = 2
    MOTION = 3
    LIGHT = 4
    SOUND = 5


def same_identity(a: Optional[str], b: Optional[str]) -> bool:
    """Identities are hex strings; checksum casing must not matter."""
    if not a or not b:
        return False
    return a.lower() == b.lower()


class Device(BaseModel):
    index: int
    device_id: str
    owner: str
    is_active: bool
    registration_time: int
    last_update_time: int = 0   # 0 = never updated

    @classmethod
    def from_ledger(cls, index: int, raw: Sequence[Any]) -> "Device":
        """Build from getDeviceInfo output: (deviceId, deviceOwner, isActive, registrationTime, lastUpdateTime)."""
        device_id, owner, is_active, registration_time, last_update_time = raw
        return cls(
            index=index,
            device_id=device_id,
            owner=to_checksum_address(owner),
            is_active=bool(is_active),
            registration_time=int(registration_time),
            last_update_time=int(last_update_time),
        )

    def is_owned_by(self, identity: str) -> bool:
        return same_identity(self.owner, identity)


class DataRecord(BaseModel):
    record_id: int
    device_index: int
    data_type: int
    timestamp: int
    submitter: str

    @classmethod
    def from_ledger(cls, record_id: int, raw: Sequence[Any]) -> "DataRecord":
        """Build from getDataRecord output: (deviceIndex, dataType, timestamp, submitter)."""
        device_index, data_type, timestamp, submitter = raw
        return cls(
            record_id=record_id,
            device_index=int(device_index),
            data_type=int(data_type),
            timestamp=int(timestamp),
            submitter=to_checksum_address(submitter),
        )


class Threshold(BaseModel):
    device_index: int
    data_type: int
    min_value: int
    max_value: int


class NetworkDescriptor(BaseModel):
    chain_id: int
    name: str
    rpc_endpoints: List[str] = []
    explorer_endpoints: List[str] = []

    @property
    def chain_id_hex(self) -> str:
        return hex(self.chain_id)

    def matches(self, chain_id: int) -> bool:
        # Descriptors are compared by chain id only
        return int(chain_id) == self.chain_id

    def to_provider_params(self) -> Dict[str, Any]:
        """wallet_addEthereumChain parameter object."""
        return {
            "chainId": self.chain_id_hex,
            "chainName": self.name,
            "rpcUrls": list(self.rpc_endpoints),
            "blockExplorerUrls": list(self.explorer_endpoints),
        }

    @classmethod
    def from_settings(cls, settings) -> "NetworkDescriptor":
        return cls(
            chain_id=settings.CHAIN_ID,
            name=settings.CHAIN_NAME,
            rpc_endpoints=settings.split_urls(settings.CHAIN_RPC_URLS),
            explorer_endpoints=settings.split_urls(settings.CHAIN_EXPLORER_URLS),
        )


class DeviceLookup(BaseModel):
    device_id: str
    index: Optional[int] = None
    exists: bool = False


class TransactionResult(BaseModel):
    tx_hash: str
    block_number: Optional[int] = None
    status: int = 1

    @classmethod
    def from_receipt(cls, receipt: Dict[str, Any]) -> "TransactionResult":
        block_number = receipt.get("blockNumber")
        status = receipt.get("status", "0x1")
        return cls(
            tx_hash=receipt["transactionHash"],
            block_number=int(block_number, 16) if isinstance(block_number, str) else block_number,
            status=int(status, 16) if isinstance(status, str) else int(status),
        )


class DashboardSummary(BaseModel):
    identity: str
    total_devices: int
    active_devices: int
    total_records: int
    devices: List[Device]
