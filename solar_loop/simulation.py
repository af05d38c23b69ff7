"""
Fixed-cadence orchestration of the solar loop.

One tick advances every component in a fixed order:

  1. read irradiance/ambient at the current clock time
  2. pump decision on the previous tick's collector and tank-bottom temperatures
  3. collector update with the (possibly new) pump state
  4. inject delivered heat into the tank bottom layer
  5. tank losses and stratification
  6. advance and wrap the 24 h clock, record history, publish a snapshot

Reordering these steps changes the energy accounting and pump response.
"""

import logging
import threading
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Deque, List, Optional, Tuple

from solar_loop.components import SolarCollector, SolarCollectorParams, ThermalStorageTank, StorageTankParams
from solar_loop.control import Pump, PumpParams
from solar_loop.models import EnvironmentalConditions, EnvironmentParams

_LOGGER = logging.getLogger(__name__)

J_PER_KWH = 3_600_000.0


@dataclass
class SimulationParams:
    """Clock, speed and history settings for the orchestrator."""
    tick_interval: float = 0.1            # s of wall-clock time per tick (10 Hz)
    start_hour: float = 6.0               # h
    initial_temperature: float = 20.0     # °C for collector and every tank layer
    default_speed: float = 60.0           # simulated seconds per real second
    min_speed: float = 1.0
    max_speed: float = 1000.0
    history_capacity: int = 500           # samples kept for charting
    history_interval_hours: float = 0.1   # simulated hours between samples


@dataclass(frozen=True)
class TemperatureDataPoint:
    """One charting sample."""
    time_hours: float
    collector_temp: float
    tank_top_temp: float
    tank_bottom_temp: float
    ambient_temp: float
    irradiance: float


@dataclass(frozen=True)
class SimulationSnapshot:
    """Read-only view of the simulation published after every tick."""
    time_hours: float
    formatted_time: str
    collector_temp: float
    tank_top_temp: float
    tank_bottom_temp: float
    tank_average_temp: float
    tank_layer_temps: Tuple[float, ...]
    ambient_temp: float
    irradiance: float
    pump_on: bool
    pump_automatic: bool
    energy_collected_kwh: float
    speed_multiplier: float
    is_running: bool
    tick_count: int
    history: Tuple[TemperatureDataPoint, ...] = field(repr=False, default=())


def format_time(time_hours: float) -> str:
    """HH:MM:SS for a time-of-day in hours."""
    total_seconds = time_hours * 3600.0
    hours = int(total_seconds / 3600)
    minutes = int((total_seconds % 3600) / 60)
    seconds = int(total_seconds % 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


class SolarThermalSimulation:
    """
    Owns the environment, collector, tank and pump and advances them together.

    tick() is the only mutator of simulation state. It can be called directly
    (headless runs, tests) or by the background scheduler started with
    start(). Overlapping ticks are refused rather than interleaved. Observers
    read the immutable snapshot or subscribe to receive each new one.
    """

    def __init__(
        self,
        environment_params: EnvironmentParams = None,
        collector_params: SolarCollectorParams = None,
        tank_params: StorageTankParams = None,
        pump_params: PumpParams = None,
        params: SimulationParams = None,
    ):
        self.params = params or SimulationParams()
        T0 = self.params.initial_temperature

        self.environment = EnvironmentalConditions(environment_params)
        self.collector = SolarCollector("Collector", collector_params, initial_temp=T0)
        self.tank = ThermalStorageTank("Tank", tank_params, initial_temp=T0)
        self.pump = Pump("SolarPump", pump_params)

        self.speed_multiplier = self._clamp_speed(self.params.default_speed)
        self.current_time_hours = self.params.start_hour % 24.0
        self.cumulative_energy_joules = 0.0
        self.tick_count = 0
        self._history: Deque[TemperatureDataPoint] = deque(maxlen=self.params.history_capacity)
        # Immutable copy shared by every snapshot until the next sample
        self._history_view: Tuple[TemperatureDataPoint, ...] = ()

        self._tick_lock = threading.Lock()
        self._state_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._subscribers: List[Callable[[SimulationSnapshot], None]] = []

        self._record_data_point()
        self._snapshot = self._build_snapshot()

    @classmethod
    def from_config(cls, config) -> "SolarThermalSimulation":
        """Build from a solar_loop.config.SimulationConfig."""
        return cls(
            environment_params=config.environment,
            collector_params=config.collector,
            tank_params=config.tank,
            pump_params=config.pump,
            params=config.simulation,
        )

    # ------------------------------------------------------------------
    # Published state
    # ------------------------------------------------------------------

    @property
    def snapshot(self) -> SimulationSnapshot:
        with self._state_lock:
            return self._snapshot

    @property
    def history(self) -> Tuple[TemperatureDataPoint, ...]:
        with self._state_lock:
            return self._history_view

    @property
    def energy_collected_kwh(self) -> float:
        return self.cumulative_energy_joules / J_PER_KWH

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def formatted_time(self) -> str:
        return format_time(self.current_time_hours)

    def subscribe(self, callback: Callable[[SimulationSnapshot], None]):
        """Call callback(snapshot) after every tick and on reset."""
        if callback not in self._subscribers:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: Callable[[SimulationSnapshot], None]):
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    # ------------------------------------------------------------------
    # Controls
    # ------------------------------------------------------------------

    def set_speed(self, multiplier: float):
        with self._tick_lock:
            self.speed_multiplier = self._clamp_speed(multiplier)
            snapshot = self._store_snapshot()
        _LOGGER.info("Speed set to %.0fx", snapshot.speed_multiplier)
        self._notify(snapshot)

    def toggle_automatic_control(self):
        with self._tick_lock:
            self.pump.toggle_control_mode()
            snapshot = self._store_snapshot()
        self._notify(snapshot)

    def toggle_manual_pump(self):
        """Flip the pump; only effective in manual mode."""
        with self._tick_lock:
            self.pump.toggle_manual()
            snapshot = self._store_snapshot()
        self._notify(snapshot)

    def start(self):
        """Begin ticking at the fixed cadence on a background thread."""
        if self.is_running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run_loop, name="solar-loop-scheduler", daemon=True)
        self._thread.start()
        _LOGGER.info("Simulation started at %s (%.0fx)", self.formatted_time(), self.speed_multiplier)
        self._publish()

    def pause(self):
        """Stop scheduling ticks. A tick already in progress completes."""
        thread = self._thread
        if thread is None:
            return
        self._stop_event.set()
        if thread is not threading.current_thread():
            thread.join()
        self._thread = None
        _LOGGER.info("Simulation paused at %s", self.formatted_time())
        self._publish()

    def reset(self):
        """Pause and return every component, the clock and the history to defaults."""
        self.pause()
        with self._tick_lock:
            T0 = self.params.initial_temperature
            self.collector.reset(T0)
            self.tank.reset(T0)
            self.pump.reset()
            self.current_time_hours = self.params.start_hour % 24.0
            self.cumulative_energy_joules = 0.0
            self.tick_count = 0
            with self._state_lock:
                self._history.clear()
            self._record_data_point()
            snapshot = self._store_snapshot()
        _LOGGER.info("Simulation reset")
        self._notify(snapshot)

    # ------------------------------------------------------------------
    # Stepping
    # ------------------------------------------------------------------

    def tick(self) -> Optional[SimulationSnapshot]:
        """
        Advance the simulation by one tick of speed_multiplier * tick_interval
        simulated seconds.

        Returns:
            The new snapshot, or None if another tick was still in progress.
        """
        if not self._tick_lock.acquire(blocking=False):
            _LOGGER.warning("Tick requested while previous tick in progress; skipped")
            return None
        try:
            self._advance()
            snapshot = self._store_snapshot()
        finally:
            self._tick_lock.release()
        self._notify(snapshot)
        _LOGGER.debug("Tick %d at %s: collector %.1f°C, tank bottom %.1f°C, pump %s",
                      snapshot.tick_count, snapshot.formatted_time, snapshot.collector_temp,
                      snapshot.tank_bottom_temp, "on" if snapshot.pump_on else "off")
        return snapshot

    def run_ticks(self, n: int) -> SimulationSnapshot:
        """Run n ticks synchronously, as fast as possible."""
        for _ in range(n):
            self.tick()
        return self.snapshot

    def run_for(self, hours: float) -> SimulationSnapshot:
        """Run synchronously for the given number of simulated hours."""
        sim_dt = self.speed_multiplier * self.params.tick_interval
        n = int(round(hours * 3600.0 / sim_dt))
        return self.run_ticks(n)

    def _advance(self):
        sim_dt = self.speed_multiplier * self.params.tick_interval

        irradiance = self.environment.irradiance(self.current_time_hours)
        T_ambient = self.environment.ambient_temp(self.current_time_hours)

        # Pump sees the temperatures settled at the end of the previous tick
        if self.pump.automatic_control:
            self.pump.update_automatic_control(
                self.collector.temperature,
                self.tank.bottom_temperature,
                sim_dt,
            )

        heat_to_tank = self.collector.update(
            sim_dt, irradiance, T_ambient, self.pump.is_on, self.tank.bottom_temperature,
        )

        if self.pump.is_on and heat_to_tank > 0:
            self.tank.add_heat(heat_to_tank, 0)
            self.cumulative_energy_joules += heat_to_tank

        self.tank.update(sim_dt, T_ambient)

        self.current_time_hours = (self.current_time_hours + sim_dt / 3600.0) % 24.0
        self.tick_count += 1

        self._maybe_record_data_point()

    def _run_loop(self):
        interval = self.params.tick_interval
        next_deadline = time.monotonic()
        while not self._stop_event.is_set():
            self.tick()
            next_deadline += interval
            delay = next_deadline - time.monotonic()
            if delay < 0:
                # Fell behind; drop the missed slots rather than bursting
                _LOGGER.warning("Scheduler behind by %.3f s", -delay)
                next_deadline = time.monotonic()
                delay = 0.0
            self._stop_event.wait(delay)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _clamp_speed(self, multiplier: float) -> float:
        return max(self.params.min_speed, min(float(multiplier), self.params.max_speed))

    def _maybe_record_data_point(self):
        if not self._history:
            self._record_data_point()
            return
        # abs() so the jump back at midnight also counts as elapsed
        since_last = abs(self.current_time_hours - self._history[-1].time_hours)
        if since_last >= self.params.history_interval_hours:
            self._record_data_point()

    def _record_data_point(self):
        t = self.current_time_hours
        point = TemperatureDataPoint(
            time_hours=t,
            collector_temp=self.collector.temperature,
            tank_top_temp=self.tank.top_temperature,
            tank_bottom_temp=self.tank.bottom_temperature,
            ambient_temp=self.environment.ambient_temp(t),
            irradiance=self.environment.irradiance(t),
        )
        # deque(maxlen) evicts the oldest sample
        with self._state_lock:
            self._history.append(point)
            self._history_view = tuple(self._history)

    def _build_snapshot(self) -> SimulationSnapshot:
        t = self.current_time_hours
        return SimulationSnapshot(
            time_hours=t,
            formatted_time=format_time(t),
            collector_temp=self.collector.temperature,
            tank_top_temp=self.tank.top_temperature,
            tank_bottom_temp=self.tank.bottom_temperature,
            tank_average_temp=self.tank.average_temperature,
            tank_layer_temps=tuple(self.tank.layer_temperatures),
            ambient_temp=self.environment.ambient_temp(t),
            irradiance=self.environment.irradiance(t),
            pump_on=self.pump.is_on,
            pump_automatic=self.pump.automatic_control,
            energy_collected_kwh=self.energy_collected_kwh,
            speed_multiplier=self.speed_multiplier,
            is_running=self.is_running,
            tick_count=self.tick_count,
            history=self._history_view,
        )

    def _store_snapshot(self) -> SimulationSnapshot:
        """Build and publish the snapshot. Caller holds _tick_lock."""
        snapshot = self._build_snapshot()
        with self._state_lock:
            self._snapshot = snapshot
        return snapshot

    def _notify(self, snapshot: SimulationSnapshot):
        for callback in list(self._subscribers):
            callback(snapshot)

    def _publish(self) -> SimulationSnapshot:
        with self._tick_lock:
            snapshot = self._store_snapshot()
        self._notify(snapshot)
        return snapshot
