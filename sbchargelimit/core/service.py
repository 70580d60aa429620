"""Service layer used by the CLI and any outer UI."""

from __future__ import annotations

import asyncio
import logging
import signal
from collections.abc import Callable
from pathlib import Path

from sbchargelimit.core.battery import BatteryMonitor, PsutilBattery, sample_battery
from sbchargelimit.core.config_loader import load_config
from sbchargelimit.core.connection import ConnectionManager
from sbchargelimit.core.control import ControlLoop, decide
from sbchargelimit.core.errors import ConfigError, DeviceNotFoundError
from sbchargelimit.core.model import BatterySample, Config, Decision, DeviceConfig, DiscoveredDevice
from sbchargelimit.core.scanner import Scanner
from sbchargelimit.drivers import SwitchDevice, create_driver

LOGGER = logging.getLogger(__name__)


class ChargeLimitService:
    def __init__(
        self,
        *,
        config_file: Path | None = None,
        config: Config | None = None,
        scanner: Scanner | None = None,
        battery: BatteryMonitor | None = None,
        driver_factory: Callable[..., SwitchDevice] = create_driver,
    ) -> None:
        self._config_file = config_file
        self._config = config
        self.scanner = scanner or Scanner()
        self._battery = battery
        self._driver_factory = driver_factory

    @property
    def config(self) -> Config:
        if self._config is None:
            self._config = load_config(self._config_file)
        return self._config

    @property
    def battery(self) -> BatteryMonitor:
        if self._battery is None:
            self._battery = PsutilBattery()
        return self._battery

    def build_manager(self) -> ConnectionManager:
        return ConnectionManager(
            self.config.devices,
            scanner=self.scanner,
            driver_factory=self._driver_factory,
            driver_options={
                "response_timeout_s": self.config.response_timeout_s,
                "connect_timeout_s": self.config.connect_timeout_s,
            },
        )

    def build_loop(self) -> ControlLoop:
        return ControlLoop(
            self.battery,
            self.build_manager(),
            self.config.thresholds,
            interval_s=self.config.interval_s,
        )

    def run(self, loop: ControlLoop | None = None) -> None:
        control = loop or self.build_loop()
        asyncio.run(_run_until_signalled(control))

    def status(self) -> tuple[BatterySample, Decision]:
        sample = sample_battery(self.battery)
        return sample, decide(sample, self.config.thresholds)

    def switch(self, on: bool) -> DeviceConfig:
        """Connect, switch once, and disconnect; returns the device that was used."""
        return asyncio.run(self._switch(on))

    async def _switch(self, on: bool) -> DeviceConfig:
        manager = self.build_manager()
        try:
            if not await manager.ensure_connected() or manager.device_config is None:
                raise manager.last_error or DeviceNotFoundError("No configured device found")
            used = manager.device_config
            if not await manager.switch(on):
                raise manager.last_error or DeviceNotFoundError("Switch request was not delivered")
            return used
        finally:
            await manager.disconnect()

    def list_devices(self, timeout_s: float) -> list[tuple[DiscoveredDevice, DeviceConfig | None]]:
        try:
            configured = {d.address: d for d in self.config.devices}
        except ConfigError as exc:
            LOGGER.warning("Listing without configured devices: %s", exc)
            configured = {}
        found = asyncio.run(self.scanner.discover(timeout_s))
        return [(device, configured.get(device.address)) for device in found]


async def _run_until_signalled(control: ControlLoop) -> None:
    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(signum, control.stop)
        except (NotImplementedError, RuntimeError):
            # Windows event loops have no signal handler support
            LOGGER.debug("Signal %s handler unavailable", signum)
    await control.run()
