"""Battery telemetry backed by psutil."""

from __future__ import annotations

from typing import Any, Protocol

import psutil

from sbchargelimit.core.errors import BatteryError
from sbchargelimit.core.model import BatterySample, BatteryState


class BatteryMonitor(Protocol):
    def refresh(self) -> None:
        """Re-read the battery."""

    def state_of_charge(self) -> float:
        """Charge as a fraction in [0, 1]."""

    def state(self) -> BatteryState:
        """Coarse charging state."""


def sample_battery(battery: BatteryMonitor) -> BatterySample:
    battery.refresh()
    return BatterySample(state=battery.state(), fraction=battery.state_of_charge())


def _classify(percent: float, power_plugged: bool | None) -> BatteryState:
    if power_plugged is None:
        return BatteryState.UNKNOWN
    if power_plugged:
        return BatteryState.FULL if percent >= 100 else BatteryState.CHARGING
    return BatteryState.EMPTY if percent <= 0 else BatteryState.DISCHARGING


class PsutilBattery:
    def __init__(self) -> None:
        self._reading: Any = None
        self.refresh()

    def refresh(self) -> None:
        reading = psutil.sensors_battery()
        if reading is None:
            raise BatteryError("No battery found")
        self._reading = reading

    def state_of_charge(self) -> float:
        return min(max(float(self._reading.percent) / 100.0, 0.0), 1.0)

    def state(self) -> BatteryState:
        return _classify(float(self._reading.percent), self._reading.power_plugged)
