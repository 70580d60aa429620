from __future__ import annotations

import asyncio

from fakes import DriverFactory, ScannerFactory
from sbchargelimit.core.connection import ConnectionManager, LinkState
from sbchargelimit.core.errors import DeviceNotFoundError, ProtocolError, ServiceNotFoundError, TransportError
from sbchargelimit.core.model import DeviceConfig, DeviceKind
from sbchargelimit.core.scanner import Scanner

PLUG = DeviceConfig(kind=DeviceKind.PLUG_MINI, address="AA:AA:AA:00:00:01", search_timeout=0.05)


def _manager(visible: tuple[str, ...] = ("AA:AA:AA:00:00:01",)) -> tuple[ConnectionManager, ScannerFactory, DriverFactory]:
    scanner_factory = ScannerFactory(visible=visible)
    drivers = DriverFactory()
    manager = ConnectionManager(
        [PLUG],
        scanner=Scanner(scanner_factory=scanner_factory),
        driver_factory=drivers,
        driver_options={"response_timeout_s": 1.0},
    )
    return manager, scanner_factory, drivers


def test_connects_on_first_call_and_reuses_link() -> None:
    manager, scanner_factory, drivers = _manager()

    async def scenario() -> None:
        assert await manager.ensure_connected()
        assert await manager.ensure_connected()

    asyncio.run(scenario())
    assert manager.state is LinkState.CONNECTED
    assert manager.device_config is PLUG
    assert scanner_factory.started == 1
    assert len(drivers.drivers) == 1
    assert drivers.drivers[0].kind is DeviceKind.PLUG_MINI
    assert drivers.drivers[0].options == {"response_timeout_s": 1.0}


def test_dead_link_is_dropped_and_restored_in_one_call() -> None:
    manager, scanner_factory, drivers = _manager()

    async def scenario() -> bool:
        await manager.ensure_connected()
        drivers.drivers[0].connected = False
        return await manager.ensure_connected()

    assert asyncio.run(scenario()) is True
    assert manager.state is LinkState.CONNECTED
    assert drivers.drivers[0].disconnects == 1
    assert manager.device is drivers.drivers[1]
    assert scanner_factory.started == 2


def test_search_failure_stays_disconnected_and_skips_switch() -> None:
    manager, _, drivers = _manager(visible=())

    assert asyncio.run(manager.switch(True)) is False
    assert manager.state is LinkState.DISCONNECTED
    assert manager.device is None
    assert drivers.drivers == []
    assert isinstance(manager.last_error, DeviceNotFoundError)


def test_connect_failure_is_reported_and_retried_next_call() -> None:
    manager, _, drivers = _manager()
    drivers.connect_errors = [ServiceNotFoundError("Plug Mini service missing")]

    async def scenario() -> tuple[bool, bool]:
        first = await manager.ensure_connected()
        second = await manager.ensure_connected()
        return first, second

    assert asyncio.run(scenario()) == (False, True)
    assert drivers.drivers[0].disconnects == 1
    assert manager.state is LinkState.CONNECTED
    assert manager.last_error is None


def test_switch_sends_state_to_connected_device() -> None:
    manager, _, drivers = _manager()

    async def scenario() -> None:
        assert await manager.switch(True)
        assert await manager.switch(False)

    asyncio.run(scenario())
    assert drivers.drivers[0].calls == [True, False]


def test_switch_error_forces_reconnect_next_time() -> None:
    manager, _, drivers = _manager()

    async def scenario() -> tuple[bool, bool]:
        await manager.ensure_connected()
        drivers.drivers[0].set_error = ProtocolError("bad response")
        failed = await manager.switch(True)
        assert manager.state is LinkState.DISCONNECTED
        assert isinstance(manager.last_error, ProtocolError)
        recovered = await manager.switch(True)
        return failed, recovered

    assert asyncio.run(scenario()) == (False, True)
    assert drivers.drivers[0].disconnects == 1
    assert drivers.drivers[1].calls == [True]


def test_disconnect_tolerates_transport_errors() -> None:
    manager, _, drivers = _manager()

    async def failing_disconnect() -> None:
        raise TransportError("already gone")

    async def scenario() -> None:
        await manager.ensure_connected()
        drivers.drivers[0].disconnect = failing_disconnect
        await manager.disconnect()

    asyncio.run(scenario())
    assert manager.state is LinkState.DISCONNECTED
    assert manager.device is None
