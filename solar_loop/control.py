"""
Control system for the solar loop.
Switches the circulation pump on the collector-to-tank temperature difference.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Any

_LOGGER = logging.getLogger(__name__)

# Dwell clock preload so the first automatic decision is never held back
DWELL_SENTINEL = 1000.0


class Controller(ABC):
    """Base class for control strategies"""

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    def compute_control(self, system_state: Dict[str, Any]) -> Dict[str, Any]:
        """
        Compute control actions based on system state.

        Args:
            system_state: Dictionary containing current state of all components

        Returns:
            Dictionary of control commands for actuators
        """
        pass


@dataclass
class PumpParams:
    """
    Differential controller thresholds.
    The gap between turn_on_delta and turn_off_delta is the hysteresis band;
    the minimum dwell times stop short-cycling inside it.
    """
    turn_on_delta: float = 8.0       # °C collector above tank bottom to start
    turn_off_delta: float = 2.0      # °C at or below which the pump stops
    minimum_on_time: float = 180.0   # s
    minimum_off_time: float = 120.0  # s


class Pump(Controller):
    """
    On/off circulation pump with differential temperature control.

    States: OFF, ON. The automatic_control flag is orthogonal: when it is
    cleared automatic evaluation is skipped entirely and only manual commands
    change the pump.
    """

    def __init__(self, name: str = "SolarPump", params: PumpParams = None):
        super().__init__(name)
        self.params = params or PumpParams()
        self.is_on = False
        self.automatic_control = True
        self.time_in_current_state = DWELL_SENTINEL

    def update_automatic_control(self, collector_temp: float, tank_bottom_temp: float,
                                 dt: float) -> bool:
        """
        Evaluate the hysteresis rule for one step.

        Returns:
            True if the pump changed state.
        """
        if not self.automatic_control:
            return False

        p = self.params
        dT = collector_temp - tank_bottom_temp
        self.time_in_current_state += dt

        if not self.is_on:
            if dT >= p.turn_on_delta and self.time_in_current_state >= p.minimum_off_time:
                self._transition(True, dT)
                return True
        else:
            if dT <= p.turn_off_delta and self.time_in_current_state >= p.minimum_on_time:
                self._transition(False, dT)
                return True

        return False

    def _transition(self, on: bool, dT: float):
        _LOGGER.debug("%s %s after %.0f s (dT=%.2f°C)", self.name,
                      "ON" if on else "OFF", self.time_in_current_state, dT)
        self.is_on = on
        self.time_in_current_state = 0.0

    def set_manual_state(self, on: bool):
        """Force the pump on or off; ignored while under automatic control."""
        if not self.automatic_control:
            self.is_on = on

    def toggle_manual(self):
        self.set_manual_state(not self.is_on)

    def toggle_control_mode(self):
        self.automatic_control = not self.automatic_control
        _LOGGER.debug("%s control mode: %s", self.name,
                      "automatic" if self.automatic_control else "manual")

    def compute_control(self, system_state: Dict[str, Any]) -> Dict[str, Any]:
        """
        Dictionary interface to the automatic rule.

        System state expected:
            - T_collector: Collector temperature
            - T_tank_bottom: Tank bottom layer temperature
            - dt: Elapsed time since the previous call (s)
        """
        T_collector = system_state.get('T_collector', 20.0)
        T_tank_bottom = system_state.get('T_tank_bottom', 20.0)
        dt = system_state.get('dt', 0.0)

        changed = self.update_automatic_control(T_collector, T_tank_bottom, dt)

        return {
            'pump_on': self.is_on,
            'changed': changed,
            'control_state': {
                'automatic_control': self.automatic_control,
                'time_in_state': self.time_in_current_state,
                'dT_solar': T_collector - T_tank_bottom,
            }
        }

    def reset(self):
        self.is_on = False
        self.automatic_control = True
        self.time_in_current_state = DWELL_SENTINEL

    def get_state(self) -> Dict[str, Any]:
        return {
            'pump_on': self.is_on,
            'automatic_control': self.automatic_control,
            'time_in_state': self.time_in_current_state,
        }
