"""Core data models used across config, drivers, and the control loop."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


def normalize_address(address: str) -> str:
    """Canonical `AA:BB:CC:DD:EE:FF` form used for config and advertisement matching."""
    return address.strip().upper().replace("-", ":")


class DeviceKind(str, Enum):
    PLUG_MINI = "PlugMini"
    TYPE_C_SWITCH = "TypeCSwitch"


class BatteryState(str, Enum):
    CHARGING = "Charging"
    FULL = "Full"
    DISCHARGING = "Discharging"
    EMPTY = "Empty"
    UNKNOWN = "Unknown"


class Decision(str, Enum):
    ON = "on"
    OFF = "off"
    NONE = "none"


@dataclass(frozen=True)
class DeviceConfig:
    kind: DeviceKind
    address: str
    search_timeout: float = 10.0


@dataclass(frozen=True)
class Thresholds:
    start_thresh: float = 0.5
    stop_thresh: float = 0.6


@dataclass(frozen=True)
class Config:
    devices: tuple[DeviceConfig, ...]
    thresholds: Thresholds = Thresholds()
    interval_s: float = 60.0
    response_timeout_s: float = 5.0
    connect_timeout_s: float = 10.0


@dataclass(frozen=True)
class BatterySample:
    state: BatteryState
    fraction: float


@dataclass(frozen=True)
class DiscoveredDevice:
    address: str
    name: str
