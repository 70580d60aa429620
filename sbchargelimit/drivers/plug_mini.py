"""Driver for the SwitchBot Plug Mini smart plug."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from bleak import BleakClient

from sbchargelimit.core.errors import DeviceNotConnectedError, RequestInProgressError, TransportError
from sbchargelimit.core.protocol import (
    PLUG_MINI_RX_CHAR_UUID,
    PLUG_MINI_SERVICE_UUID,
    PLUG_MINI_TX_CHAR_UUID,
    SetStateOperation,
    decode_plug_mini_set_state,
    encode_plug_mini_set_state,
)
from sbchargelimit.drivers.base import (
    TRANSPORT_ERRORS,
    connect_client,
    device_address,
    disconnect_client,
    find_characteristic,
    find_service,
    write_with_response,
)
from sbchargelimit.drivers.channel import ResponseChannel

LOGGER = logging.getLogger(__name__)


class PlugMiniDriver:
    """Request/response driver: commands go to RX, answers arrive as TX notifications.

    Only one request may be outstanding at a time; a second call while the
    first is waiting raises `RequestInProgressError`.
    """

    def __init__(
        self,
        device: Any,
        *,
        response_timeout_s: float = 5.0,
        connect_timeout_s: float = 10.0,
        client_factory: Callable[..., Any] = BleakClient,
    ) -> None:
        self.address = device_address(device)
        self._client = client_factory(
            device,
            disconnected_callback=self._on_disconnected,
            timeout=connect_timeout_s,
        )
        self._response_timeout_s = response_timeout_s
        self._rx_char: Any = None
        self._tx_char: Any = None
        self._channel: ResponseChannel | None = None
        self._initialized = False
        self._request_in_flight = False

    async def connect(self) -> None:
        await connect_client(self._client, self.address)

        service = find_service(self._client, PLUG_MINI_SERVICE_UUID, label="Plug Mini")
        tx_char = find_characteristic(service, PLUG_MINI_TX_CHAR_UUID, label="TX")
        rx_char = find_characteristic(service, PLUG_MINI_RX_CHAR_UUID, label="RX")

        channel = ResponseChannel()
        self._channel = channel
        try:
            await self._client.start_notify(tx_char, self._on_notification)
        except TRANSPORT_ERRORS as exc:
            channel.close()
            raise TransportError(f"Could not subscribe to {PLUG_MINI_TX_CHAR_UUID}: {exc}") from exc

        self._tx_char = tx_char
        self._rx_char = rx_char
        self._initialized = True
        LOGGER.debug("Plug Mini %s subscribed to %s", self.address, PLUG_MINI_TX_CHAR_UUID)

    async def set_on_off(self, on: bool) -> None:
        reported = await self.set_state(SetStateOperation.for_state(on))
        if reported != on:
            LOGGER.warning(
                "Plug Mini %s reports relay %s after turning it %s",
                self.address,
                "on" if reported else "off",
                "on" if on else "off",
            )

    async def set_state(self, operation: SetStateOperation) -> bool:
        """Apply `operation` and return the relay state the plug reports."""
        response = await self._send_request(encode_plug_mini_set_state(operation))
        return decode_plug_mini_set_state(response)

    async def is_connected(self) -> bool:
        return bool(self._client.is_connected) and self._initialized

    async def disconnect(self) -> None:
        self._initialized = False
        if self._channel is not None:
            self._channel.close()
        await disconnect_client(self._client, self.address)
        LOGGER.debug("Disconnected from Plug Mini %s", self.address)

    async def _send_request(self, packet: bytes) -> bytes:
        if not self._initialized or self._channel is None:
            raise DeviceNotConnectedError(f"Plug Mini {self.address} is not connected")
        if self._request_in_flight:
            raise RequestInProgressError(f"Plug Mini {self.address} is still waiting for a response")

        self._request_in_flight = True
        try:
            self._channel.clear()
            LOGGER.debug("Plug Mini %s <- %s", self.address, packet.hex())
            await write_with_response(self._client, self._rx_char, packet)
            response = await self._channel.receive(self._response_timeout_s)
            LOGGER.debug("Plug Mini %s -> %s", self.address, response.hex())
            return response
        finally:
            self._request_in_flight = False

    def _on_notification(self, sender: Any, data: bytearray) -> None:
        if str(getattr(sender, "uuid", sender)).lower() != PLUG_MINI_TX_CHAR_UUID:
            return
        channel = self._channel
        if channel is None or not channel.send_nowait(bytes(data)):
            LOGGER.warning("Dropped unsolicited Plug Mini notification %s", bytes(data).hex())

    def _on_disconnected(self, _client: Any) -> None:
        if self._initialized:
            LOGGER.warning("Plug Mini %s dropped the connection", self.address)
        self._initialized = False
        if self._channel is not None:
            self._channel.close()
