"""Switch device interface and GATT helpers shared by the drivers."""

from __future__ import annotations

import asyncio
from typing import Any, Protocol

from bleak.exc import BleakError

from sbchargelimit.core.errors import (
    CharacteristicNotFoundError,
    ServiceNotFoundError,
    TransportError,
)

TRANSPORT_ERRORS = (BleakError, OSError, asyncio.TimeoutError)


class SwitchDevice(Protocol):
    async def connect(self) -> None:
        """Open the link, resolve characteristics, and subscribe if needed."""

    async def set_on_off(self, on: bool) -> None:
        """Switch the device output."""

    async def is_connected(self) -> bool:
        """Return True only when the link is up and the device is initialized."""

    async def disconnect(self) -> None:
        """Tear down the link."""


def device_address(device: Any) -> str:
    return str(getattr(device, "address", device))


async def connect_client(client: Any, address: str) -> None:
    try:
        await client.connect()
    except TRANSPORT_ERRORS as exc:
        raise TransportError(f"BLE connect failed for {address}: {exc}") from exc
    if not client.is_connected:
        raise TransportError(f"BLE connect failed for {address}")


async def disconnect_client(client: Any, address: str) -> None:
    try:
        await client.disconnect()
    except TRANSPORT_ERRORS as exc:
        raise TransportError(f"BLE disconnect failed for {address}: {exc}") from exc


async def write_with_response(client: Any, characteristic: Any, packet: bytes) -> None:
    try:
        await client.write_gatt_char(characteristic, packet, response=True)
    except TRANSPORT_ERRORS as exc:
        raise TransportError(f"BLE GATT write failed: {exc}") from exc


def find_service(client: Any, service_uuid: str, *, label: str) -> Any:
    service = client.services.get_service(service_uuid)
    if service is None:
        raise ServiceNotFoundError(f"{label} service {service_uuid} not found")
    return service


def find_characteristic(service: Any, char_uuid: str, *, label: str) -> Any:
    characteristic = service.get_characteristic(char_uuid)
    if characteristic is None:
        raise CharacteristicNotFoundError(f"{label} characteristic {char_uuid} not found")
    return characteristic
