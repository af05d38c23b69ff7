"""
Unit tests for the environmental forcing model.
Validates the daylight window, irradiance shape and the diurnal ambient cycle.
"""

import pytest
import numpy as np

from solar_loop.models import EnvironmentalConditions, EnvironmentParams


class TestIrradiance:
    """Test the half-sine daylight irradiance profile"""

    def test_zero_at_night(self):
        env = EnvironmentalConditions()
        for hour in [0.0, 3.0, 5.0, 5.99, 18.01, 19.0, 23.5]:
            assert env.irradiance(hour) == 0.0, f"Irradiance at {hour}h should be zero"

    def test_peak_at_solar_noon(self):
        env = EnvironmentalConditions()
        assert env.irradiance(12.0) == pytest.approx(1000.0)

    def test_afternoon_below_noon(self):
        env = EnvironmentalConditions()
        assert 0.0 < env.irradiance(15.0) < env.irradiance(12.0)

    def test_symmetric_about_noon(self):
        env = EnvironmentalConditions()
        assert env.irradiance(9.0) == pytest.approx(env.irradiance(15.0))

    def test_never_negative_and_zero_outside_daylight(self):
        """Irradiance >= 0 everywhere, and 0 outside [6, 18] modulo 24"""
        env = EnvironmentalConditions()
        for t in np.linspace(-48.0, 48.0, 2001):
            G = env.irradiance(t)
            assert G >= 0.0, f"Negative irradiance {G} at t={t}"
            hour = t % 24.0
            if hour < 6.0 or hour > 18.0:
                assert G == 0.0, f"Irradiance {G} outside daylight at t={t}"

    def test_boundaries_are_not_negative(self):
        env = EnvironmentalConditions()
        assert env.irradiance(6.0) == pytest.approx(0.0, abs=1e-9)
        assert 0.0 <= env.irradiance(18.0) < 1e-9

    def test_wraps_modulo_24(self):
        env = EnvironmentalConditions()
        assert env.irradiance(36.0) == pytest.approx(env.irradiance(12.0))
        assert env.irradiance(-12.0) == pytest.approx(env.irradiance(12.0))

    def test_custom_params(self):
        env = EnvironmentalConditions(EnvironmentParams(max_irradiance=800.0, sunrise_hour=8.0, sunset_hour=16.0))
        assert env.irradiance(12.0) == pytest.approx(800.0)
        assert env.irradiance(7.0) == 0.0


class TestAmbientTemperature:
    """Test the cosine ambient cycle"""

    def test_minimum_at_three(self):
        env = EnvironmentalConditions()
        assert env.ambient_temp(3.0) == pytest.approx(15.0)

    def test_maximum_at_fifteen(self):
        env = EnvironmentalConditions()
        assert env.ambient_temp(15.0) == pytest.approx(25.0)

    def test_bounded(self):
        env = EnvironmentalConditions()
        temps = [env.ambient_temp(t) for t in np.linspace(-30.0, 30.0, 601)]
        assert min(temps) >= 15.0 - 1e-9
        assert max(temps) <= 25.0 + 1e-9

    def test_midpoint_at_nine_and_twentyone(self):
        env = EnvironmentalConditions()
        assert env.ambient_temp(9.0) == pytest.approx(20.0)
        assert env.ambient_temp(21.0) == pytest.approx(20.0)

    def test_negative_time_wraps(self):
        env = EnvironmentalConditions()
        assert env.ambient_temp(-9.0) == pytest.approx(env.ambient_temp(15.0))


class TestDaytime:

    def test_is_daytime(self):
        env = EnvironmentalConditions()
        assert env.is_daytime(12.0)
        assert env.is_daytime(6.0)
        assert env.is_daytime(18.0)
        assert not env.is_daytime(3.0)
        assert not env.is_daytime(20.0)

    def test_conditions_dict(self):
        env = EnvironmentalConditions()
        c = env.conditions(12.0)
        assert c['irradiance'] == pytest.approx(1000.0)
        assert c['T_ambient'] == pytest.approx(env.ambient_temp(12.0))
        assert c['is_daytime'] is True
