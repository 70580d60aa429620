"""Stable public API for building tooling on top of sbchargelimit.

An outer UI (tray icon, menu bar app) needs only what is exported here: the
log file path from `setup_logging`, `ControlLoop.stop` as the quit signal,
and the service that wires configuration, battery and BLE together.
"""

from __future__ import annotations

from sbchargelimit.core.battery import BatteryMonitor, PsutilBattery
from sbchargelimit.core.connection import ConnectionManager, LinkState
from sbchargelimit.core.control import ControlLoop, decide
from sbchargelimit.core.errors import (
    BatteryError,
    ChannelClosedError,
    CharacteristicNotFoundError,
    ConfigError,
    ConfigValidationError,
    DeviceNotConnectedError,
    DeviceNotFoundError,
    ProtocolError,
    RequestInProgressError,
    ResponseTimeoutError,
    SbChargeLimitError,
    SearchTimeoutError,
    ServiceNotFoundError,
    TransportError,
)
from sbchargelimit.core.logging_setup import setup_logging
from sbchargelimit.core.model import (
    BatterySample,
    BatteryState,
    Config,
    Decision,
    DeviceConfig,
    DeviceKind,
    Thresholds,
)
from sbchargelimit.core.scanner import Scanner
from sbchargelimit.core.service import ChargeLimitService
from sbchargelimit.drivers import PlugMiniDriver, SwitchDevice, TypeCSwitchDriver

__all__ = [
    "SbChargeLimitError",
    "BatteryError",
    "ChannelClosedError",
    "CharacteristicNotFoundError",
    "ConfigError",
    "ConfigValidationError",
    "DeviceNotConnectedError",
    "DeviceNotFoundError",
    "ProtocolError",
    "RequestInProgressError",
    "ResponseTimeoutError",
    "SearchTimeoutError",
    "ServiceNotFoundError",
    "TransportError",
    "BatterySample",
    "BatteryState",
    "Config",
    "Decision",
    "DeviceConfig",
    "DeviceKind",
    "Thresholds",
    "BatteryMonitor",
    "PsutilBattery",
    "ChargeLimitService",
    "ConnectionManager",
    "ControlLoop",
    "LinkState",
    "PlugMiniDriver",
    "Scanner",
    "SwitchDevice",
    "TypeCSwitchDriver",
    "decide",
    "setup_logging",
]
