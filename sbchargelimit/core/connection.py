"""Connection lifecycle for the single controlled switch device."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from enum import Enum
from typing import Any

from sbchargelimit.core.errors import SbChargeLimitError
from sbchargelimit.core.model import DeviceConfig
from sbchargelimit.core.scanner import Scanner
from sbchargelimit.drivers import SwitchDevice, create_driver

LOGGER = logging.getLogger(__name__)


class LinkState(str, Enum):
    DISCONNECTED = "disconnected"
    SEARCHING = "searching"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class ConnectionManager:
    """Owns the connected device and recovers it when the link drops.

    Discovery and connect failures are logged and reported as `False`; the
    caller skips the tick and the next call retries from scratch.
    """

    def __init__(
        self,
        configs: Sequence[DeviceConfig],
        *,
        scanner: Scanner | None = None,
        driver_factory: Callable[..., SwitchDevice] = create_driver,
        driver_options: dict[str, Any] | None = None,
    ) -> None:
        self._configs = tuple(configs)
        self._scanner = scanner or Scanner()
        self._driver_factory = driver_factory
        self._driver_options = dict(driver_options or {})
        self.state = LinkState.DISCONNECTED
        self.device: SwitchDevice | None = None
        self.device_config: DeviceConfig | None = None
        self.last_error: SbChargeLimitError | None = None

    async def ensure_connected(self) -> bool:
        if self.state is LinkState.CONNECTED and self.device is not None:
            if await self._is_alive(self.device):
                return True
            LOGGER.warning("Device %s is no longer connected", self._describe())
            await self.disconnect()

        return await self._establish()

    async def switch(self, on: bool) -> bool:
        """Turn the device on or off; False if the action was not carried out."""
        if not await self.ensure_connected() or self.device is None:
            return False

        try:
            await self.device.set_on_off(on)
        except SbChargeLimitError as exc:
            self.last_error = exc
            LOGGER.error("Switching %s %s failed: %s", self._describe(), "on" if on else "off", exc)
            await self.disconnect()
            return False
        return True

    async def disconnect(self) -> None:
        device, self.device = self.device, None
        self.device_config = None
        self.state = LinkState.DISCONNECTED
        if device is None:
            return
        try:
            await device.disconnect()
        except SbChargeLimitError as exc:
            LOGGER.warning("Disconnect failed: %s", exc)

    async def _establish(self) -> bool:
        self.state = LinkState.SEARCHING
        try:
            config, ble_device = await self._scanner.search(self._configs)
        except SbChargeLimitError as exc:
            return self._fail("Search", exc)

        self.state = LinkState.CONNECTING
        device = self._driver_factory(config.kind, ble_device, **self._driver_options)
        try:
            await device.connect()
        except SbChargeLimitError as exc:
            try:
                await device.disconnect()
            except SbChargeLimitError as cleanup_exc:
                LOGGER.debug("Cleanup after failed connect: %s", cleanup_exc)
            return self._fail("Connect", exc)

        self.device = device
        self.device_config = config
        self.state = LinkState.CONNECTED
        self.last_error = None
        LOGGER.info("Connected to %s %s", config.kind.value, config.address)
        return True

    async def _is_alive(self, device: SwitchDevice) -> bool:
        try:
            return await device.is_connected()
        except SbChargeLimitError as exc:
            LOGGER.warning("Liveness check failed: %s", exc)
            return False

    def _fail(self, stage: str, exc: SbChargeLimitError) -> bool:
        self.state = LinkState.DISCONNECTED
        self.last_error = exc
        LOGGER.error("%s failed: %s", stage, exc)
        return False

    def _describe(self) -> str:
        if self.device_config is None:
            return "<none>"
        return f"{self.device_config.kind.value} {self.device_config.address}"
