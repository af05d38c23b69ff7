from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from solar_loop.config import load_config
from solar_loop.errors import ConfigError
from solar_loop.simulation import SimulationSnapshot, SolarThermalSimulation, format_time

_LOGGER = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="solar-loop",
        description="Run the solar thermal loop simulation headless and print a summary.",
    )
    p.add_argument("--config", type=Path, default=None, help="YAML file overriding default parameters")
    p.add_argument("--hours", type=float, default=24.0, help="Simulated hours to run (default: 24)")
    p.add_argument("--speed", type=float, default=None,
                   help="Speed multiplier, clamped to the configured range (default: from config)")
    p.add_argument("--log-level", default="WARNING",
                   choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging verbosity")
    return p


class PumpPeriodTracker:
    """Collects (start, end) clock times of every pump ON period from snapshots."""

    def __init__(self):
        self.periods: List[List[Optional[float]]] = []
        self._was_on = False

    def __call__(self, snapshot: SimulationSnapshot):
        if snapshot.pump_on and not self._was_on:
            self.periods.append([snapshot.time_hours, None])
        elif not snapshot.pump_on and self._was_on:
            self.periods[-1][1] = snapshot.time_hours
        self._was_on = snapshot.pump_on


def _print_summary(sim: SolarThermalSimulation, hours: float, tracker: PumpPeriodTracker):
    s = sim.snapshot
    print("=" * 60)
    print(f"SOLAR LOOP SUMMARY ({hours:g} h at {s.speed_multiplier:.0f}x, {s.tick_count} ticks)")
    print("=" * 60)
    print(f"  Clock:              {s.formatted_time}")
    print(f"  Ambient:            {s.ambient_temp:6.1f} °C")
    print(f"  Irradiance:         {s.irradiance:6.0f} W/m²")
    print(f"  Collector:          {s.collector_temp:6.1f} °C")
    print(f"  Tank top / bottom:  {s.tank_top_temp:6.1f} / {s.tank_bottom_temp:.1f} °C")
    print(f"  Tank average:       {s.tank_average_temp:6.1f} °C")
    print(f"  Energy collected:   {s.energy_collected_kwh:6.2f} kWh")
    print(f"  Pump:               {'ON' if s.pump_on else 'OFF'} "
          f"({'automatic' if s.pump_automatic else 'manual'})")
    print(f"\n  Pump ON periods: {len(tracker.periods)}")
    for start, end in tracker.periods:
        end_txt = format_time(end) if end is not None else "still on"
        print(f"    {format_time(start)} -> {end_txt}")
    print("\n  Tank layers (bottom → top):")
    print("    " + "  ".join(f"{T:.1f}" for T in s.tank_layer_temps))


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.hours < 0:
        parser.error(f"--hours must not be negative, got {args.hours:g}")
    logging.basicConfig(level=getattr(logging, args.log_level),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(str(e), file=sys.stderr)
        return 2

    sim = SolarThermalSimulation.from_config(config)
    if args.speed is not None:
        sim.set_speed(args.speed)

    tracker = PumpPeriodTracker()
    sim.subscribe(tracker)

    _LOGGER.info("Running %.1f simulated hours", args.hours)
    sim.run_for(args.hours)

    _print_summary(sim, args.hours, tracker)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
