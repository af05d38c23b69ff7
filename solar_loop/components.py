"""
Component library for a pumped solar water-heating loop.

System architecture:
  Solar loop: [Tank bottom layer] → [Pump] → [Collector] → heat into [Tank bottom layer]

The collector is a single lumped thermal mass; the tank is a column of ten
layers where buoyancy carries heat upward from the injection point.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Any, List
import numpy as np


# ============================================================================
# BASE CLASS
# ============================================================================

class Component(ABC):
    """Base class for all system components"""

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    def get_state(self) -> Dict[str, Any]:
        """Return current component state for monitoring/logging"""
        pass

    @abstractmethod
    def reset(self, temperature: float = None):
        """Return component to its initial (or the given) temperature"""
        pass


# ============================================================================
# SOLAR COLLECTOR COMPONENT
# ============================================================================

@dataclass
class SolarCollectorParams:
    """
    Parameters for a small glazed flat-plate collector.

    The two transfer fractions cap how much of the collector-to-tank energy
    differential C·(T_collector - T_inlet) may leave in a single step. They
    keep large steps (high speed multipliers) from overshooting past the
    inlet temperature. The smaller of the two is the one that binds.
    """
    area: float = 3.0                        # m²
    efficiency: float = 0.75                 # optical efficiency
    heat_loss_coef: float = 8.0              # W/(m²·K)
    thermal_capacity: float = 15000.0        # J/K (absorber + fluid)
    pump_heat_transfer_coef: float = 150.0   # W/K while circulating
    max_transfer_fraction: float = 0.2       # per-step ceiling on differential energy
    available_energy_fraction: float = 0.3   # secondary ceiling, dominated by the 0.2 one


class SolarCollector(Component):
    """
    Lumped-capacitance solar collector.
    Absorbs irradiance, exchanges heat with ambient air in either direction,
    and hands heat to the tank only while the pump runs and the collector is
    hotter than the tank inlet.
    """

    def __init__(self, name: str = "Collector", params: SolarCollectorParams = None,
                 initial_temp: float = 20.0):
        super().__init__(name)
        self.params = params or SolarCollectorParams()
        self.initial_temp = initial_temp
        self.temperature = initial_temp

        # Last-step diagnostics
        self.Q_solar = 0.0
        self.Q_loss = 0.0
        self.Q_to_tank = 0.0

    def heat_transfer(self, dt: float, pump_on: bool, T_inlet: float) -> float:
        """
        Heat (J) handed to the tank over dt.

        Exactly zero unless the pump runs and the collector is strictly hotter
        than the inlet, so heat never flows from cold to hot.
        """
        dT = self.temperature - T_inlet
        if not pump_on or dT <= 0.0:
            return 0.0

        p = self.params
        Q = p.pump_heat_transfer_coef * dT * dt
        Q = min(Q, p.thermal_capacity * dT * p.max_transfer_fraction)
        Q = min(Q, p.thermal_capacity * dT * p.available_energy_fraction)
        return Q

    def update(self, dt: float, irradiance: float, ambient_temp: float,
               pump_on: bool, tank_inlet_temp: float) -> float:
        """
        Advance collector temperature by one step.

        Args:
            dt: Time step in seconds
            irradiance: Plane-of-array irradiance (W/m²)
            ambient_temp: Ambient air temperature (°C)
            pump_on: Whether the circulation pump is running
            tank_inlet_temp: Temperature of the fluid returning from the tank (°C)

        Returns:
            Heat delivered to the tank over dt (J)
        """
        p = self.params

        # Solar gain and ambient exchange (W); loss goes negative when ambient is hotter
        self.Q_solar = irradiance * p.area * p.efficiency
        self.Q_loss = p.heat_loss_coef * p.area * (self.temperature - ambient_temp)

        self.Q_to_tank = self.heat_transfer(dt, pump_on, tank_inlet_temp)

        net_energy = (self.Q_solar - self.Q_loss) * dt - self.Q_to_tank
        self.temperature += net_energy / p.thermal_capacity

        # Never drop below the air around it
        self.temperature = max(self.temperature, ambient_temp)

        return self.Q_to_tank

    def stagnation_temperature(self, irradiance: float, ambient_temp: float) -> float:
        """Equilibrium temperature with no extraction (solar gain = heat loss)."""
        p = self.params
        return ambient_temp + irradiance * p.efficiency / p.heat_loss_coef

    def reset(self, temperature: float = None):
        self.temperature = self.initial_temp if temperature is None else temperature
        self.Q_solar = 0.0
        self.Q_loss = 0.0
        self.Q_to_tank = 0.0

    def get_state(self) -> Dict[str, Any]:
        return {
            'T_collector': self.temperature,
            'Q_solar': self.Q_solar,
            'Q_loss': self.Q_loss,
            'Q_to_tank': self.Q_to_tank,
            'area': self.params.area,
        }


# ============================================================================
# STORAGE TANK COMPONENT
# ============================================================================

NUM_LAYERS = 10


@dataclass
class StorageTankParams:
    """
    Parameters for a 300 L domestic hot water tank.

    The stratification pass is tuned for a visibly layered tank rather than
    derived from a physical diffusivity: stratification_passes sweeps per step,
    each moving (T[i] - T[i+1]) * mixing_coefficient * stratification_gain
    from a warmer lower layer to the layer above.
    """
    volume: float = 300.0             # L
    water_density: float = 1.0        # kg/L
    specific_heat: float = 4184.0     # J/(kg·K)
    heat_loss_coef: float = 4.0       # W/K, whole tank
    mixing_coefficient: float = 0.04  # fraction of inversion moved per sweep
    stratification_passes: int = 5   # sweeps per update
    stratification_gain: float = 3.0  # multiplier on mixing_coefficient
    top_loss_factor: float = 1.5      # lid exposes more surface
    bottom_loss_factor: float = 0.8   # base sits on the floor


class ThermalStorageTank(Component):
    """
    Ten-layer stratified storage tank.

    Layer convention: index 0 = BOTTOM, index 9 = TOP.
    Collector heat is injected at the bottom and rises through buoyancy.
    """

    def __init__(self, name: str = "Tank", params: StorageTankParams = None,
                 initial_temp: float = 20.0):
        super().__init__(name)
        self.params = params or StorageTankParams()
        self.num_layers = NUM_LAYERS
        self.initial_temp = initial_temp

        self.T_layers = np.full(self.num_layers, initial_temp, dtype=float)

        self.total_mass = self.params.volume * self.params.water_density
        self.mass_per_layer = self.total_mass / self.num_layers

        # Per-layer multipliers on the ambient loss
        self._loss_factors = np.ones(self.num_layers)
        self._loss_factors[0] = self.params.bottom_loss_factor
        self._loss_factors[-1] = self.params.top_loss_factor

    # ---- read accessors ----

    @property
    def bottom_temperature(self) -> float:
        return float(self.T_layers[0])

    @property
    def top_temperature(self) -> float:
        return float(self.T_layers[-1])

    @property
    def average_temperature(self) -> float:
        """Arithmetic mean of all layers (layers have equal mass)."""
        return float(np.mean(self.T_layers))

    @property
    def layer_temperatures(self) -> List[float]:
        """Copy of all layer temperatures, bottom to top."""
        return self.T_layers.tolist()

    def temperature_at_height(self, fraction: float) -> float:
        """Temperature at a normalized height (0 = bottom, 1 = top)."""
        fraction = min(max(fraction, 0.0), 1.0)
        index = int(fraction * (self.num_layers - 1))
        return float(self.T_layers[index])

    def thermal_energy(self, above_ambient: float) -> float:
        """Energy stored above the given reference temperature (J), never negative."""
        energy = self.total_mass * self.params.specific_heat * (self.average_temperature - above_ambient)
        return max(0.0, energy)

    def stored_energy(self) -> float:
        """Sum of m·cp·T over all layers (J, relative to 0 °C)."""
        return float(np.sum(self.mass_per_layer * self.params.specific_heat * self.T_layers))

    # ---- mutators ----

    def add_heat(self, heat: float, layer_index: int):
        """Inject heat (J) into one layer; out-of-range indices are ignored."""
        if not 0 <= layer_index < self.num_layers:
            return
        self.T_layers[layer_index] += heat / (self.mass_per_layer * self.params.specific_heat)

    def update(self, dt: float, ambient_temp: float) -> Dict[str, Any]:
        """
        Advance the tank by one step: ambient losses first, then buoyant
        stratification.

        Returns:
            Dictionary with the heat lost this step (J) and the resulting
            top-to-bottom spread.
        """
        Q_loss = self._apply_heat_losses(dt, ambient_temp)
        self._apply_stratification()

        return {
            'Q_loss': Q_loss,
            'T_tank': self.average_temperature,
            'T_tank_top': self.top_temperature,
            'T_tank_bottom': self.bottom_temperature,
            'stratification_dT': self.top_temperature - self.bottom_temperature,
        }

    def _apply_heat_losses(self, dt: float, ambient_temp: float) -> float:
        """Per-layer loss to ambient, clamped at ambient. Returns energy removed (J)."""
        p = self.params
        layer_cap = self.mass_per_layer * p.specific_heat

        E_before = float(np.sum(self.T_layers)) * layer_cap

        loss_rate = p.heat_loss_coef * self._loss_factors * (self.T_layers - ambient_temp) / self.num_layers
        self.T_layers -= loss_rate * dt / layer_cap
        np.maximum(self.T_layers, ambient_temp, out=self.T_layers)

        return E_before - float(np.sum(self.T_layers)) * layer_cap

    def _apply_stratification(self):
        """Move heat upward across every inverted pair; never pushes cold down.
        Each transfer leaves one layer and enters the next, so the sweep
        conserves energy exactly."""
        p = self.params
        k = p.mixing_coefficient * p.stratification_gain
        T = self.T_layers.tolist()

        for _ in range(p.stratification_passes):
            for i in range(self.num_layers - 1):
                if T[i] > T[i + 1]:
                    transfer = (T[i] - T[i + 1]) * k
                    T[i] -= transfer
                    T[i + 1] += transfer

        self.T_layers[:] = T

    def reset(self, temperature: float = None):
        T0 = self.initial_temp if temperature is None else temperature
        self.T_layers[:] = T0

    def get_state(self) -> Dict[str, Any]:
        return {
            'T_tank': self.average_temperature,
            'T_tank_top': self.top_temperature,
            'T_tank_bottom': self.bottom_temperature,
            'T_layers': self.T_layers.copy(),
            'volume': self.params.volume,
            'stratification_dT': self.top_temperature - self.bottom_temperature,
        }
