"""
Solar thermal loop simulator: collector, stratified tank and differential
pump controller advanced together on a fixed-cadence clock.
"""

from solar_loop.components import SolarCollector, SolarCollectorParams, ThermalStorageTank, StorageTankParams
from solar_loop.control import Pump, PumpParams
from solar_loop.errors import ConfigError, SolarLoopError
from solar_loop.models import EnvironmentalConditions, EnvironmentParams
from solar_loop.simulation import (
    SimulationParams,
    SimulationSnapshot,
    SolarThermalSimulation,
    TemperatureDataPoint,
)

__version__ = "1.0.0"
