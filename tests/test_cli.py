"""
Tests for the headless command-line runner.
"""

import re

import pytest

from solar_loop.cli import PumpPeriodTracker, main
from solar_loop.simulation import SolarThermalSimulation


def test_runs_and_prints_summary(capsys):
    assert main(["--hours", "1", "--speed", "600"]) == 0
    out = capsys.readouterr().out
    assert "SOLAR LOOP SUMMARY" in out
    assert "60 ticks" in out
    assert re.search(r"Clock:\s+0[67]:", out)
    assert "Tank layers" in out


def test_full_day_reports_pump_periods(capsys):
    assert main(["--hours", "24", "--speed", "1000"]) == 0
    out = capsys.readouterr().out
    assert "Pump ON periods: 0" not in out


def test_config_file_applied(tmp_path, capsys):
    cfg = tmp_path / "loop.yaml"
    cfg.write_text("simulation:\n  start_hour: 12\n", encoding="utf-8")
    assert main(["--config", str(cfg), "--hours", "0.5", "--speed", "600"]) == 0
    assert re.search(r"Clock:\s+12:", capsys.readouterr().out)


def test_bad_config_exits_with_2(tmp_path, capsys):
    cfg = tmp_path / "bad.yaml"
    cfg.write_text("pump:\n  turn_on_delt: 5\n", encoding="utf-8")
    assert main(["--config", str(cfg)]) == 2
    err = capsys.readouterr().err
    assert "Config error at pump.turn_on_delt:" in err
    assert "did you mean 'turn_on_delta'?" in err


class TestPumpPeriodTracker:

    def test_tracks_on_off_edges(self):
        sim = SolarThermalSimulation()
        tracker = PumpPeriodTracker()
        sim.subscribe(tracker)
        sim.toggle_automatic_control()
        sim.toggle_manual_pump()
        sim.run_ticks(10)
        sim.toggle_manual_pump()

        assert len(tracker.periods) == 1
        start, end = tracker.periods[0]
        assert start == 6.0
        assert end is not None and end > start

    def test_open_period(self):
        sim = SolarThermalSimulation()
        tracker = PumpPeriodTracker()
        sim.subscribe(tracker)
        sim.collector.temperature = 40.0
        sim.tick()
        assert tracker.periods == [[sim.snapshot.time_hours, None]]


def test_negative_hours_rejected(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["--hours=-1"])
    assert exc.value.code == 2
    assert "--hours must not be negative" in capsys.readouterr().err
