"""Driver for the DIY Type-C switch device."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from bleak import BleakClient

from sbchargelimit.core.errors import DeviceNotConnectedError
from sbchargelimit.core.protocol import (
    TYPE_C_SWITCH_SERVICE_UUID,
    TYPE_C_SWITCH_STATE_CHAR_UUID,
    encode_type_c_switch_state,
)
from sbchargelimit.drivers.base import (
    connect_client,
    device_address,
    disconnect_client,
    find_characteristic,
    find_service,
    write_with_response,
)

LOGGER = logging.getLogger(__name__)


class TypeCSwitchDriver:
    def __init__(
        self,
        device: Any,
        *,
        response_timeout_s: float = 5.0,
        connect_timeout_s: float = 10.0,
        client_factory: Callable[..., Any] = BleakClient,
    ) -> None:
        # No response characteristic; the write acknowledgement is the only reply.
        del response_timeout_s
        self.address = device_address(device)
        self._client = client_factory(
            device,
            disconnected_callback=self._on_disconnected,
            timeout=connect_timeout_s,
        )
        self._state_char: Any = None
        self._initialized = False

    async def connect(self) -> None:
        await connect_client(self._client, self.address)

        service = find_service(self._client, TYPE_C_SWITCH_SERVICE_UUID, label="Type-C switch")
        self._state_char = find_characteristic(service, TYPE_C_SWITCH_STATE_CHAR_UUID, label="State")

        self._initialized = True
        LOGGER.debug("Type-C switch %s state characteristic resolved", self.address)

    async def set_on_off(self, on: bool) -> None:
        if not self._initialized:
            raise DeviceNotConnectedError(f"Type-C switch {self.address} is not connected")
        await write_with_response(self._client, self._state_char, encode_type_c_switch_state(on))

    async def is_connected(self) -> bool:
        return bool(self._client.is_connected) and self._initialized

    async def disconnect(self) -> None:
        self._initialized = False
        await disconnect_client(self._client, self.address)
        LOGGER.debug("Disconnected from Type-C switch %s", self.address)

    def _on_disconnected(self, _client: Any) -> None:
        if self._initialized:
            LOGGER.warning("Type-C switch %s dropped the connection", self.address)
        self._initialized = False
