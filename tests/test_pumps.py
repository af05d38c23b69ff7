"""
Unit tests for the differential pump controller.
Validates hysteresis thresholds, minimum dwell times and manual override.
"""

import pytest

from solar_loop.control import Pump, PumpParams, DWELL_SENTINEL


def _switch_on(pump):
    """Turn a fresh pump on and return it."""
    pump.update_automatic_control(collector_temp=30.0, tank_bottom_temp=20.0, dt=60.0)
    assert pump.is_on
    return pump


class TestInitialState:

    def test_starts_off_and_automatic(self):
        pump = Pump()
        assert not pump.is_on
        assert pump.automatic_control
        assert pump.time_in_current_state == DWELL_SENTINEL

    def test_first_decision_not_blocked_by_dwell(self):
        """15°C difference switches on immediately on the very first call"""
        pump = Pump()
        changed = pump.update_automatic_control(collector_temp=35.0, tank_bottom_temp=20.0, dt=0.1)
        assert changed
        assert pump.is_on
        assert pump.time_in_current_state == 0.0


class TestHysteresis:

    def test_stays_off_below_turn_on_delta(self):
        pump = Pump()
        pump.update_automatic_control(27.9, 20.0, 60.0)
        assert not pump.is_on

    def test_turns_on_exactly_at_delta(self):
        pump = Pump()
        pump.update_automatic_control(28.0, 20.0, 60.0)
        assert pump.is_on

    def test_stays_on_inside_band(self):
        pump = _switch_on(Pump())
        for _ in range(20):
            pump.update_automatic_control(25.0, 20.0, 60.0)   # 5°C: between off and on
        assert pump.is_on

    def test_turns_off_after_minimum_time_and_low_delta(self):
        pump = _switch_on(Pump())

        pump.update_automatic_control(25.0, 23.0, 60.0)   # 2°C, only 60 s in state
        assert pump.is_on, "Pump should stay on until minimum on-time has elapsed"

        for _ in range(3):
            pump.update_automatic_control(23.0, 22.0, 60.0)
        assert not pump.is_on, "Pump should turn off after minimum time and low delta"


class TestDwellTimes:

    def test_minimum_on_time(self):
        pump = _switch_on(Pump())

        pump.update_automatic_control(21.0, 20.0, 60.0)   # 60 s
        pump.update_automatic_control(21.0, 20.0, 60.0)   # 120 s
        assert pump.is_on

        pump.update_automatic_control(21.0, 20.0, 60.0)   # 180 s
        assert not pump.is_on

    def test_minimum_off_time(self):
        pump = _switch_on(Pump())
        for _ in range(3):
            pump.update_automatic_control(20.0, 20.0, 60.0)
        assert not pump.is_on

        pump.update_automatic_control(40.0, 20.0, 60.0)   # 60 s off
        assert not pump.is_on, "Pump should stay off until minimum off-time has elapsed"

        pump.update_automatic_control(40.0, 20.0, 60.0)   # 120 s off
        assert pump.is_on

    @pytest.mark.parametrize("dt", [1.0, 7.0, 30.0])
    def test_on_period_never_shorter_than_minimum(self, dt):
        pump = _switch_on(Pump())
        elapsed = 0.0
        while pump.is_on:
            pump.update_automatic_control(20.0, 20.0, dt)
            elapsed += dt
        assert elapsed >= pump.params.minimum_on_time

    def test_prevents_rapid_cycling(self):
        pump = Pump()
        cycles = 0
        previous = pump.is_on
        for i in range(30):
            pump.update_automatic_control(25.0 + (i % 5), 20.0, 30.0)
            if pump.is_on != previous:
                cycles += 1
                previous = pump.is_on
        assert cycles < 5

    def test_custom_thresholds(self):
        pump = Pump(params=PumpParams(turn_on_delta=4.0, turn_off_delta=1.0,
                                      minimum_on_time=0.0, minimum_off_time=0.0))
        pump.update_automatic_control(24.0, 20.0, 1.0)
        assert pump.is_on
        pump.update_automatic_control(21.0, 20.0, 1.0)
        assert not pump.is_on


class TestManualControl:

    def test_manual_state(self):
        pump = Pump()
        pump.toggle_control_mode()
        assert not pump.automatic_control

        pump.set_manual_state(True)
        assert pump.is_on

        # Temperatures don't matter in manual mode
        changed = pump.update_automatic_control(20.0, 20.0, 600.0)
        assert not changed
        assert pump.is_on

    def test_manual_ignored_while_automatic(self):
        pump = Pump()
        pump.set_manual_state(True)
        assert not pump.is_on
        pump.toggle_manual()
        assert not pump.is_on

    def test_toggle_manual(self):
        pump = Pump()
        pump.toggle_control_mode()
        pump.toggle_manual()
        assert pump.is_on
        pump.toggle_manual()
        assert not pump.is_on

    def test_automatic_update_does_not_advance_dwell_in_manual(self):
        pump = _switch_on(Pump())
        pump.toggle_control_mode()
        pump.update_automatic_control(20.0, 20.0, 600.0)
        assert pump.time_in_current_state == 0.0

    def test_reset(self):
        pump = _switch_on(Pump())
        pump.toggle_control_mode()
        pump.reset()
        assert not pump.is_on
        assert pump.automatic_control
        assert pump.time_in_current_state == DWELL_SENTINEL


class TestControllerInterface:

    def test_compute_control(self):
        pump = Pump()
        out = pump.compute_control({'T_collector': 40.0, 'T_tank_bottom': 20.0, 'dt': 6.0})
        assert out['pump_on'] is True
        assert out['changed'] is True
        assert out['control_state']['dT_solar'] == pytest.approx(20.0)

    def test_get_state(self):
        pump = Pump()
        state = pump.get_state()
        assert state == {'pump_on': False, 'automatic_control': True, 'time_in_state': DWELL_SENTINEL}
