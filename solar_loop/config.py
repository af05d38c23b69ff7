"""
Simulation configuration.

Every constant lives in a params dataclass with sensible defaults; a YAML
file only needs to name the values it overrides:

    collector:
      area: 4.0
    tank:
      stratification_passes: 8
    simulation:
      default_speed: 300
"""

from __future__ import annotations

import difflib
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from solar_loop.components import SolarCollectorParams, StorageTankParams
from solar_loop.control import PumpParams
from solar_loop.errors import ConfigError
from solar_loop.models import EnvironmentParams
from solar_loop.simulation import SimulationParams


SECTIONS = {
    "environment": EnvironmentParams,
    "collector": SolarCollectorParams,
    "tank": StorageTankParams,
    "pump": PumpParams,
    "simulation": SimulationParams,
}


@dataclass
class SimulationConfig:
    environment: EnvironmentParams = field(default_factory=EnvironmentParams)
    collector: SolarCollectorParams = field(default_factory=SolarCollectorParams)
    tank: StorageTankParams = field(default_factory=StorageTankParams)
    pump: PumpParams = field(default_factory=PumpParams)
    simulation: SimulationParams = field(default_factory=SimulationParams)

    @classmethod
    def from_dict(cls, raw: Optional[Mapping[str, Any]]) -> "SimulationConfig":
        raw = _as_dict(raw, "config")
        sections: Dict[str, Any] = {}
        for name, value in raw.items():
            if name not in SECTIONS:
                raise ConfigError(name, "unknown section", _hint(name, tuple(SECTIONS)))
            sections[name] = _build_section(name, SECTIONS[name], _as_dict(value, name))
        config = cls(**sections)
        validate_config(config)
        return config

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return {name: asdict(getattr(self, name)) for name in SECTIONS}


def _as_dict(obj: Any, path: str) -> Dict[str, Any]:
    if obj is None:
        return {}
    if not isinstance(obj, dict):
        raise ConfigError(path, f"expected a mapping/object, got {type(obj).__name__}")
    return obj


def _hint(bad_key: str, allowed: Tuple[str, ...]) -> Optional[str]:
    close = difflib.get_close_matches(bad_key, allowed, n=1, cutoff=0.7)
    return f"did you mean '{close[0]}'?" if close else None


def _build_section(section: str, params_cls, values: Mapping[str, Any]):
    types = {f.name: f.type for f in fields(params_cls)}
    kwargs = {}
    for key, value in values.items():
        path = f"{section}.{key}"
        if key not in types:
            raise ConfigError(path, "unknown key", _hint(key, tuple(types)))
        # bool is an int subclass; reject it for numeric fields
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigError(path, f"expected a number, got {type(value).__name__}")
        if types[key] in (int, "int"):
            if float(value) != int(value):
                raise ConfigError(path, "expected a whole number")
            value = int(value)
        else:
            value = float(value)
        kwargs[key] = value
    return params_cls(**kwargs)


def _require_positive(value: float, path: str):
    if value <= 0:
        raise ConfigError(path, f"must be positive, got {value}")


def _require_non_negative(value: float, path: str):
    if value < 0:
        raise ConfigError(path, f"must not be negative, got {value}")


def validate_config(config: SimulationConfig):
    """Reject parameter combinations the physics cannot run with."""
    env = config.environment
    if env.sunset_hour <= env.sunrise_hour:
        raise ConfigError("environment.sunset_hour", "must be later than sunrise_hour")
    if not (0.0 <= env.sunrise_hour <= 24.0 and 0.0 <= env.sunset_hour <= 24.0):
        raise ConfigError("environment", "sunrise_hour and sunset_hour must lie within [0, 24]")
    if env.min_ambient_temp > env.max_ambient_temp:
        raise ConfigError("environment.min_ambient_temp", "must not exceed max_ambient_temp")
    _require_non_negative(env.max_irradiance, "environment.max_irradiance")

    col = config.collector
    for name in ("area", "thermal_capacity"):
        _require_positive(getattr(col, name), f"collector.{name}")
    for name in ("efficiency", "heat_loss_coef", "pump_heat_transfer_coef"):
        _require_non_negative(getattr(col, name), f"collector.{name}")
    for name in ("max_transfer_fraction", "available_energy_fraction"):
        value = getattr(col, name)
        if not 0.0 < value <= 1.0:
            raise ConfigError(f"collector.{name}", f"must lie in (0, 1], got {value}")

    tank = config.tank
    for name in ("volume", "water_density", "specific_heat"):
        _require_positive(getattr(tank, name), f"tank.{name}")
    for name in ("heat_loss_coef", "top_loss_factor", "bottom_loss_factor", "stratification_passes"):
        _require_non_negative(getattr(tank, name), f"tank.{name}")
    # k >= 0.5 would overshoot and invert the pair it is correcting
    k = tank.mixing_coefficient * tank.stratification_gain
    if not 0.0 <= k < 0.5:
        raise ConfigError(
            "tank.mixing_coefficient",
            f"mixing_coefficient * stratification_gain must lie in [0, 0.5), got {k}",
        )

    pump = config.pump
    if pump.turn_off_delta >= pump.turn_on_delta:
        raise ConfigError("pump.turn_off_delta", "must be below turn_on_delta",
                          "the gap between the two is the hysteresis band")
    _require_non_negative(pump.minimum_on_time, "pump.minimum_on_time")
    _require_non_negative(pump.minimum_off_time, "pump.minimum_off_time")

    sim = config.simulation
    _require_positive(sim.tick_interval, "simulation.tick_interval")
    _require_positive(sim.history_interval_hours, "simulation.history_interval_hours")
    _require_positive(sim.min_speed, "simulation.min_speed")
    if sim.max_speed < sim.min_speed:
        raise ConfigError("simulation.max_speed", "must not be below min_speed")
    if sim.history_capacity < 1:
        raise ConfigError("simulation.history_capacity", "must be at least 1")


def load_yaml(path: Path) -> Dict[str, Any]:
    try:
        raw = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError("yaml", f"failed to read YAML: {e}") from e
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError("yaml", f"top-level YAML must be a mapping/object, got {type(raw).__name__}")
    return raw


def load_config(path: Optional[Path] = None) -> SimulationConfig:
    """Defaults overlaid with the YAML file at path, if one is given."""
    if path is None:
        return SimulationConfig()
    return SimulationConfig.from_dict(load_yaml(path))
