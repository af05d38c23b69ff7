"""
Environmental forcing for the solar loop:
- Daily solar irradiance on the collector plane
- Diurnal ambient air temperature

Both are pure functions of time-of-day so the simulation can be rewound,
sped up or sampled at arbitrary instants without carrying any state.
"""

from dataclasses import dataclass
import numpy as np


# ============================================================================
# ENVIRONMENTAL CONDITIONS
# ============================================================================

@dataclass
class EnvironmentParams:
    """
    Fixed constants describing a single clear day.
    The ambient peak lags solar noon by three hours (coldest at 03:00,
    warmest at 15:00), mimicking the thermal inertia of the ground and air.
    """
    max_irradiance: float = 1000.0    # W/m² at solar noon
    sunrise_hour: float = 6.0         # h
    sunset_hour: float = 18.0         # h
    min_ambient_temp: float = 15.0    # °C at 03:00
    max_ambient_temp: float = 25.0    # °C at 15:00
    coldest_hour: float = 3.0         # h


class EnvironmentalConditions:
    """
    Sinusoidal 24-hour model of irradiance and ambient temperature.
    Holds no state; every query takes time-of-day modulo 24.
    """

    def __init__(self, params: EnvironmentParams = None):
        self.params = params or EnvironmentParams()

    @staticmethod
    def time_of_day(time_hours: float) -> float:
        """Wrap any time (including negative) onto [0, 24)."""
        return float(time_hours) % 24.0

    def irradiance(self, time_hours: float) -> float:
        """
        Solar irradiance (W/m²).

        Zero outside [sunrise, sunset]; otherwise a half sine wave over the
        daylight window peaking at max_irradiance halfway through.
        """
        p = self.params
        t = self.time_of_day(time_hours)

        if t < p.sunrise_hour or t > p.sunset_hour:
            return 0.0

        day_progress = (t - p.sunrise_hour) / (p.sunset_hour - p.sunrise_hour)
        G = p.max_irradiance * np.sin(np.pi * day_progress)

        # sin(pi) is ~1e-16 rather than 0 at sunset
        return float(max(0.0, G))

    def ambient_temp(self, time_hours: float) -> float:
        """Ambient air temperature (°C), cosine wave with minimum at coldest_hour."""
        p = self.params
        t = self.time_of_day(time_hours)

        midpoint = (p.max_ambient_temp + p.min_ambient_temp) / 2.0
        amplitude = (p.max_ambient_temp - p.min_ambient_temp) / 2.0
        phase = 2.0 * np.pi * (t - p.coldest_hour) / 24.0

        return float(midpoint - amplitude * np.cos(phase))

    def is_daytime(self, time_hours: float) -> bool:
        t = self.time_of_day(time_hours)
        return self.params.sunrise_hour <= t <= self.params.sunset_hour

    def conditions(self, time_hours: float) -> dict:
        """Irradiance and ambient at one instant, keyed like component inputs."""
        return {
            'irradiance': self.irradiance(time_hours),
            'T_ambient': self.ambient_temp(time_hours),
            'is_daytime': self.is_daytime(time_hours),
        }
