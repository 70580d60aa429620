"""Hysteresis control loop driving the switch from battery telemetry."""

from __future__ import annotations

import asyncio
import logging

from sbchargelimit.core.battery import BatteryMonitor, sample_battery
from sbchargelimit.core.connection import ConnectionManager
from sbchargelimit.core.errors import BatteryError
from sbchargelimit.core.model import BatterySample, BatteryState, Decision, Thresholds

LOGGER = logging.getLogger(__name__)

_CHARGING_STATES = frozenset({BatteryState.CHARGING, BatteryState.FULL})
_DRAINING_STATES = frozenset({BatteryState.DISCHARGING, BatteryState.EMPTY, BatteryState.UNKNOWN})


def decide(sample: BatterySample, thresholds: Thresholds) -> Decision:
    """Both thresholds are exclusive: a sample exactly on one yields no action."""
    if sample.state in _CHARGING_STATES and sample.fraction > thresholds.stop_thresh:
        return Decision.OFF
    if sample.state in _DRAINING_STATES and sample.fraction < thresholds.start_thresh:
        return Decision.ON
    return Decision.NONE


class ControlLoop:
    def __init__(
        self,
        battery: BatteryMonitor,
        manager: ConnectionManager,
        thresholds: Thresholds,
        *,
        interval_s: float = 60.0,
    ) -> None:
        self._battery = battery
        self._manager = manager
        self._thresholds = thresholds
        self._interval_s = interval_s
        self._quit = asyncio.Event()

    def stop(self) -> None:
        self._quit.set()

    @property
    def stopped(self) -> bool:
        return self._quit.is_set()

    async def tick(self) -> Decision:
        """Sample the battery and act on it; returns the decision that was taken."""
        sample = sample_battery(self._battery)
        LOGGER.debug("%s %.3f", sample.state.value, sample.fraction)

        decision = decide(sample, self._thresholds)

        # Liveness is checked every tick, even when no action is due.
        if not await self._manager.ensure_connected():
            if decision is not Decision.NONE:
                LOGGER.error("Skipped turning %s this tick: %s", decision.value, self._manager.last_error)
            return Decision.NONE
        if decision is Decision.NONE:
            return decision

        LOGGER.info("Turn%s (%s at %.0f%%)", decision.value.capitalize(), sample.state.value, sample.fraction * 100)
        if not await self._manager.switch(decision is Decision.ON):
            LOGGER.error("Skipped turning %s this tick: %s", decision.value, self._manager.last_error)
            return Decision.NONE
        return decision

    async def run(self) -> None:
        """Tick at a fixed monotonic rate until `stop()` is called."""
        loop = asyncio.get_running_loop()
        next_tick = loop.time()
        try:
            while not self._quit.is_set():
                try:
                    await self.tick()
                except BatteryError as exc:
                    LOGGER.error("Battery read failed: %s", exc)

                next_tick += self._interval_s
                # Missed ticks are skipped, not replayed.
                while next_tick <= loop.time():
                    next_tick += self._interval_s
                try:
                    await asyncio.wait_for(self._quit.wait(), timeout=next_tick - loop.time())
                except asyncio.TimeoutError:
                    continue
        finally:
            await self._manager.disconnect()
