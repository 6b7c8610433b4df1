import asyncio

import pytest
from conftest import ALICE, BOB

from ledgersync.errors import DeviceNotFound, InvalidInput, WriteRejected
from ledgersync.schemas.requests import UINT32_MAX
from ledgersync.services.device_service import DeviceService


@pytest.fixture
def service(fake_gateway):
    return DeviceService(fake_gateway)


# ---- input validation happens before any ledger call ----

def test_threshold_min_above_max_is_rejected_locally(service, fake_gateway, ledger):
    with pytest.raises(InvalidInput) as exc_info:
        asyncio.run(service.set_threshold(0, 0, min_value=10, max_value=5))

    assert "Minimum value cannot be greater than maximum value" in str(exc_info.value)
    assert fake_gateway.submitted == []
    assert ledger.calls == []


def test_threshold_by_id_validates_before_resolving(service, ledger):
    ledger.add_device("sensor-1", ALICE)

    with pytest.raises(InvalidInput):
        asyncio.run(service.set_threshold_for("sensor-1", 0, min_value=10, max_value=5))

    assert ledger.calls == []


@pytest.mark.parametrize("device_id", ["", "   ", "\t\n"])
def test_blank_device_id_is_rejected(service, fake_gateway, device_id):
    with pytest.raises(InvalidInput) as exc_info:
        asyncio.run(service.register_device(device_id))

    assert "Device ID must not be empty" in str(exc_info.value)
    assert fake_gateway.submitted == []


def test_device_id_is_trimmed_before_submit(service, fake_gateway, ledger):
    asyncio.run(service.register_device("  sensor-7  "))

    assert fake_gateway.submitted == [("registerDevice", ("sensor-7",))]
    assert ledger.devices[0]["device_id"] == "sensor-7"


@pytest.mark.parametrize("value", ["12", 1.5, -1, UINT32_MAX + 1])
def test_submit_data_rejects_bad_values(service, fake_gateway, value):
    with pytest.raises(InvalidInput):
        asyncio.run(service.submit_data(0, value, 0))

    assert fake_gateway.submitted == []


def test_submit_data_rejects_unknown_data_type(service, fake_gateway):
    with pytest.raises(InvalidInput) as exc_info:
        asyncio.run(service.submit_data(0, 20, 9))

    assert "Unknown data type" in str(exc_info.value)
    assert fake_gateway.submitted == []


def test_invalid_input_carries_field_errors(service):
    with pytest.raises(InvalidInput) as exc_info:
        asyncio.run(service.submit_data(-1, 20, 0))

    assert exc_info.value.errors[0]["loc"] == ("device_index",)


# ---- writes ----

def test_submit_data_success(service, fake_gateway, ledger):
    ledger.add_device("sensor-1", ALICE)

    result = asyncio.run(service.submit_data(0, 2150, 0))

    assert result.tx_hash.startswith("0x")
    assert fake_gateway.submitted == [("submitData", (0, 2150, 0))]
    assert ledger.records[0]["device_index"] == 0


def test_submit_to_inactive_device_surfaces_ledger_reason(service, ledger):
    ledger.add_device("sensor-1", ALICE, is_active=False)

    with pytest.raises(WriteRejected) as exc_info:
        asyncio.run(service.submit_data(0, 1, 0))

    assert "Device not active" in str(exc_info.value)


def test_duplicate_registration_is_rejected_by_ledger(service, ledger):
    ledger.add_device("sensor-1", BOB)

    with pytest.raises(WriteRejected) as exc_info:
        asyncio.run(service.register_device("sensor-1"))

    assert "Device already registered" in str(exc_info.value)
    assert len(ledger.devices) == 1


def test_deactivating_inactive_device_still_reaches_ledger(service, fake_gateway, ledger):
    ledger.add_device("sensor-1", ALICE, is_active=False)

    asyncio.run(service.deactivate_device(0))

    assert fake_gateway.submitted == [("deactivateDevice", (0,))]


def test_deactivate_foreign_device_is_rejected(service, ledger):
    ledger.add_device("sensor-1", BOB)

    with pytest.raises(WriteRejected) as exc_info:
        asyncio.run(service.deactivate_device(0))

    assert "Not device owner" in str(exc_info.value)
    assert ledger.devices[0]["is_active"] is True


def test_set_threshold_success(service, fake_gateway, ledger):
    ledger.add_device("sensor-1", ALICE)

    asyncio.run(service.set_threshold(0, 1, 20, 80))

    assert ledger.thresholds[(0, 1)] == (20, 80)
    assert asyncio.run(service.is_threshold_set(0, 1)) is True
    assert asyncio.run(service.is_threshold_set(0, 2)) is False


# ---- string id flows ----

def test_resolve_unknown_id_is_not_an_error(service):
    lookup = asyncio.run(service.resolve_index_by_string_id("ghost"))

    assert lookup.exists is False
    assert lookup.index is None


def test_resolve_known_id(service, ledger):
    ledger.add_device("a", ALICE)
    ledger.add_device("b", ALICE)

    lookup = asyncio.run(service.resolve_index_by_string_id(" b "))

    assert lookup.exists is True
    assert lookup.index == 1
    assert lookup.device_id == "b"


def test_submit_for_unknown_id_never_submits(service, fake_gateway):
    with pytest.raises(DeviceNotFound):
        asyncio.run(service.submit_data_for("ghost", 10, 0))

    assert fake_gateway.submitted == []


def test_submit_for_known_id(service, fake_gateway, ledger):
    ledger.add_device("a", ALICE)
    ledger.add_device("b", ALICE)

    asyncio.run(service.submit_data_for("b", 42, 3))

    assert fake_gateway.submitted == [("submitData", (1, 42, 3))]


# ---- point reads ----

def test_device_info_and_data_count(service, ledger):
    ledger.add_device("sensor-1", ALICE, last_update_time=0)
    ledger.add_record(0)
    ledger.add_record(0)

    device = asyncio.run(service.device_info(0))
    count = asyncio.run(service.device_data_count(0))

    assert device.device_id == "sensor-1"
    assert device.is_owned_by(ALICE)
    assert device.last_update_time == 0
    assert count == 2


def test_set_threshold_for_returns_written_threshold(service, fake_gateway, ledger):
    ledger.add_device("a", ALICE)
    ledger.add_device("b", ALICE)

    threshold, result = asyncio.run(service.set_threshold_for("b", 2, 5, 9))

    assert (threshold.device_index, threshold.data_type) == (1, 2)
    assert (threshold.min_value, threshold.max_value) == (5, 9)
    assert fake_gateway.submitted == [("setThreshold", (1, 2, 5, 9))]
    assert result.tx_hash.startswith("0x")
