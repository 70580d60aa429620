from __future__ import annotations

import pytest

from fakes import DriverFactory, FakeBattery, ScannerFactory
from sbchargelimit.core.errors import DeviceNotFoundError, ProtocolError
from sbchargelimit.core.model import BatteryState, Config, Decision, DeviceConfig, DeviceKind, Thresholds
from sbchargelimit.core.scanner import Scanner
from sbchargelimit.core.service import ChargeLimitService

PLUG = DeviceConfig(kind=DeviceKind.PLUG_MINI, address="AA:AA:AA:00:00:01", search_timeout=0.05)
CONFIG = Config(devices=(PLUG,), thresholds=Thresholds(0.5, 0.6), response_timeout_s=2.0, connect_timeout_s=3.0)


def _service(visible=("AA:AA:AA:00:00:01",), samples=None) -> tuple[ChargeLimitService, DriverFactory]:
    drivers = DriverFactory()
    service = ChargeLimitService(
        config=CONFIG,
        scanner=Scanner(scanner_factory=ScannerFactory(visible=visible)),
        battery=FakeBattery(samples or [(BatteryState.DISCHARGING, 0.3)]),
        driver_factory=drivers,
    )
    return service, drivers


def test_switch_connects_switches_and_disconnects() -> None:
    service, drivers = _service()

    used = service.switch(True)

    assert used is PLUG
    driver = drivers.drivers[0]
    assert driver.calls == [True]
    assert driver.disconnects == 1
    assert driver.options == {"response_timeout_s": 2.0, "connect_timeout_s": 3.0}


def test_switch_raises_when_device_missing() -> None:
    service, _ = _service(visible=())

    with pytest.raises(DeviceNotFoundError):
        service.switch(False)


def test_switch_raises_device_error() -> None:
    service, drivers = _service()
    original = drivers.__call__

    def failing(kind, device, **options):
        driver = original(kind, device, **options)
        driver.set_error = ProtocolError("bad response")
        return driver

    service._driver_factory = failing
    with pytest.raises(ProtocolError):
        service.switch(True)


def test_status_reports_decision() -> None:
    service, _ = _service(samples=[(BatteryState.CHARGING, 0.7)])

    sample, decision = service.status()
    assert sample.state is BatteryState.CHARGING
    assert decision is Decision.OFF


def test_list_devices_marks_configured() -> None:
    service, _ = _service(visible=("AA:AA:AA:00:00:01", "CC:CC:CC:00:00:03"))

    devices = service.list_devices(0.01)
    assert [(d.address, c) for d, c in devices] == [
        ("AA:AA:AA:00:00:01", PLUG),
        ("CC:CC:CC:00:00:03", None),
    ]


def test_list_devices_without_config(tmp_path) -> None:
    service = ChargeLimitService(
        config_file=tmp_path / "absent.yaml",
        scanner=Scanner(scanner_factory=ScannerFactory(visible=("CC:CC:CC:00:00:03",))),
    )

    devices = service.list_devices(0.01)
    assert [(d.address, c) for d, c in devices] == [("CC:CC:CC:00:00:03", None)]


def test_build_loop_uses_configured_interval() -> None:
    service, _ = _service()

    loop = service.build_loop()
    assert loop._interval_s == CONFIG.interval_s
