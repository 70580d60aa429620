"""Wire formats of the supported switch devices.

Pure encode/decode helpers; all I/O lives in the drivers.

SwitchBot Plug Mini reference:
https://github.com/OpenWonderLabs/SwitchBotAPI-BLE/blob/latest/devicetypes/plugmini.md
"""

from __future__ import annotations

from enum import Enum

from sbchargelimit.core.errors import ProtocolError

PLUG_MINI_SERVICE_UUID = "cba20d00-224d-11e6-9fb8-0002a5d5c51b"
# RX/TX are named from the device's point of view: we write to RX, it notifies on TX.
PLUG_MINI_RX_CHAR_UUID = "cba20002-224d-11e6-9fb8-0002a5d5c51b"
PLUG_MINI_TX_CHAR_UUID = "cba20003-224d-11e6-9fb8-0002a5d5c51b"

TYPE_C_SWITCH_SERVICE_UUID = "a6302557-c9ae-44b2-b987-73072a0e6d84"
TYPE_C_SWITCH_STATE_CHAR_UUID = "e612f461-7a74-4946-bc25-03968fbdecda"

_MAGIC = 0x57
CMD_EXPANSION = 0x0F
_RESULT_OK = 0x01
_STATE_OFF = 0x00
_STATE_ON = 0x80


class SetStateOperation(Enum):
    TURN_ON = bytes((0x50, 0x01, 0x01, 0x80))
    TURN_OFF = bytes((0x50, 0x01, 0x01, 0x00))
    TOGGLE = bytes((0x50, 0x01, 0x02, 0x80))

    @classmethod
    def for_state(cls, on: bool) -> SetStateOperation:
        return cls.TURN_ON if on else cls.TURN_OFF


def encode_plug_mini_request(cmd: int, payload: bytes = b"") -> bytes:
    header = (0b00 << 6) | (cmd & 0b1111)
    return bytes((_MAGIC, header)) + bytes(payload)


def encode_plug_mini_set_state(operation: SetStateOperation) -> bytes:
    return encode_plug_mini_request(CMD_EXPANSION, operation.value)


def decode_plug_mini_set_state(response: bytes) -> bool:
    """Return the relay state reported in a set-state response."""
    if len(response) < 2:
        raise ProtocolError(f"Plug Mini response too short: {response.hex() or '<empty>'}")
    if response[0] != _RESULT_OK:
        raise ProtocolError(f"Plug Mini rejected request (status 0x{response[0]:02x})")
    if response[1] == _STATE_ON:
        return True
    if response[1] == _STATE_OFF:
        return False
    raise ProtocolError(f"Unexpected Plug Mini relay state 0x{response[1]:02x}")


def encode_type_c_switch_state(on: bool) -> bytes:
    return bytes((1 if on else 0,))
