"""Time-bounded BLE discovery of configured switch devices."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from typing import Any

from bleak import BleakScanner

from sbchargelimit.core.errors import DeviceNotFoundError, SearchTimeoutError, TransportError
from sbchargelimit.core.model import DeviceConfig, DiscoveredDevice, normalize_address
from sbchargelimit.drivers.base import TRANSPORT_ERRORS

LOGGER = logging.getLogger(__name__)


class Scanner:
    def __init__(self, *, scanner_factory: Callable[..., Any] = BleakScanner) -> None:
        self._scanner_factory = scanner_factory

    async def search(self, configs: Sequence[DeviceConfig]) -> tuple[DeviceConfig, Any]:
        """Return the first configured device that advertises, in config order."""
        if not configs:
            raise DeviceNotFoundError("No devices configured")

        failures: list[str] = []
        for config in configs:
            try:
                device = await self.search_one(config)
            except SearchTimeoutError as exc:
                LOGGER.info("%s", exc)
                failures.append(f"{config.kind.value} {config.address}")
                continue
            LOGGER.info("Found %s %s", config.kind.value, config.address)
            return config, device

        raise DeviceNotFoundError(f"None of the configured devices were found: {', '.join(failures)}")

    async def search_one(self, config: DeviceConfig) -> Any:
        target = normalize_address(config.address)
        loop = asyncio.get_running_loop()
        found: asyncio.Future[Any] = loop.create_future()

        def _on_advertisement(device: Any, _advertisement: Any) -> None:
            if not found.done() and normalize_address(device.address) == target:
                found.set_result(device)

        LOGGER.info("Searching for %s %s...", config.kind.value, config.address)
        scanner = self._scanner_factory(detection_callback=_on_advertisement)
        try:
            await scanner.start()
        except TRANSPORT_ERRORS as exc:
            raise TransportError(f"BLE scan could not start: {exc}") from exc

        try:
            return await asyncio.wait_for(found, timeout=config.search_timeout)
        except asyncio.TimeoutError as exc:
            raise SearchTimeoutError(
                f"{config.kind.value} {config.address} not seen within {config.search_timeout:g}s"
            ) from exc
        finally:
            try:
                await scanner.stop()
            except TRANSPORT_ERRORS as exc:
                LOGGER.warning("BLE scan did not stop cleanly: %s", exc)

    async def discover(self, timeout_s: float) -> list[DiscoveredDevice]:
        """List every advertiser seen within `timeout_s`, first sighting order."""
        seen: dict[str, DiscoveredDevice] = {}

        def _on_advertisement(device: Any, advertisement: Any) -> None:
            address = normalize_address(device.address)
            if address in seen:
                return
            name = getattr(advertisement, "local_name", None) or device.name or "<unknown-device>"
            seen[address] = DiscoveredDevice(address=address, name=name)

        scanner = self._scanner_factory(detection_callback=_on_advertisement)
        try:
            await scanner.start()
        except TRANSPORT_ERRORS as exc:
            raise TransportError(f"BLE scan could not start: {exc}") from exc

        try:
            await asyncio.sleep(timeout_s)
        finally:
            try:
                await scanner.stop()
            except TRANSPORT_ERRORS as exc:
                LOGGER.warning("BLE scan did not stop cleanly: %s", exc)
        return list(seen.values())
