"""Switch device drivers keyed by configured device kind."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from sbchargelimit.core.model import DeviceKind
from sbchargelimit.drivers.base import SwitchDevice
from sbchargelimit.drivers.plug_mini import PlugMiniDriver
from sbchargelimit.drivers.type_c_switch import TypeCSwitchDriver

DRIVERS: dict[DeviceKind, Callable[..., SwitchDevice]] = {
    DeviceKind.PLUG_MINI: PlugMiniDriver,
    DeviceKind.TYPE_C_SWITCH: TypeCSwitchDriver,
}


def create_driver(kind: DeviceKind, device: Any, **options: Any) -> SwitchDevice:
    return DRIVERS[kind](device, **options)


__all__ = ["DRIVERS", "PlugMiniDriver", "SwitchDevice", "TypeCSwitchDriver", "create_driver"]
