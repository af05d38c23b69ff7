"""
Plot one simulated day of the solar loop.

Produces:
  1. daily_temperatures.png  : Collector, tank top/bottom and ambient temps
  2. tank_layers.png         : Per-layer tank temperatures sampled through the day
  3. pump_and_energy.png     : Pump state and cumulative collected energy

Run from project root:
    python examples/daily_cycle.py
"""

import os

import numpy as np
import matplotlib.pyplot as plt

from solar_loop.simulation import SolarThermalSimulation

# ── Style ──────────────────────────────────────────────────────────────────────
plt.rcParams.update({
    'figure.dpi': 150,
    'savefig.dpi': 150,
    'font.size': 11,
    'axes.titlesize': 13,
    'axes.labelsize': 11,
    'legend.fontsize': 9,
    'figure.facecolor': 'white',
    'axes.facecolor': '#fafafa',
    'axes.grid': True,
    'grid.alpha': 0.3,
})

RESULTS_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'results')


def run_simulation(speed: float = 120.0):
    """Run 24 simulated hours from 06:00 and collect every tick."""
    sim = SolarThermalSimulation()
    sim.set_speed(speed)

    ticks = []
    sim.subscribe(ticks.append)
    sim.run_for(24.0)
    sim.unsubscribe(ticks.append)
    return sim, ticks


def elapsed_hours(ticks):
    """Unwrapped hours since the first tick (the clock itself wraps at midnight)."""
    t = np.array([s.time_hours for s in ticks])
    return np.concatenate([[0.0], np.cumsum(np.mod(np.diff(t), 24.0))]) + t[0]


def plot_temperatures(ticks):
    t = elapsed_hours(ticks)

    fig, ax = plt.subplots(figsize=(10, 4.5))
    ax.plot(t, [s.collector_temp for s in ticks], color='#ff7f0e', linewidth=1.5, label='Collector')
    ax.plot(t, [s.tank_top_temp for s in ticks], color='#d62728', linewidth=2.5, label='Tank Top')
    ax.plot(t, [s.tank_bottom_temp for s in ticks], color='#9467bd', linewidth=1.5, label='Tank Bottom')
    ax.plot(t, [s.ambient_temp for s in ticks], color='#1f77b4', linewidth=1.5, alpha=0.7, label='Ambient')

    # Shade nighttime
    ax.axvspan(18, 30, color='#dde', alpha=0.3)

    ax.set_xlabel('Hours since midnight of day 1')
    ax.set_ylabel('Temperature (°C)')
    ax.set_title('Solar Loop Temperatures, One Day')
    ax.legend(loc='upper right', framealpha=0.9)
    fig.tight_layout()
    fig.savefig(os.path.join(RESULTS_DIR, 'daily_temperatures.png'), bbox_inches='tight')
    plt.close(fig)
    print('  Saved daily_temperatures.png')


def plot_tank_layers(ticks):
    t = elapsed_hours(ticks)
    layers = np.array([s.tank_layer_temps for s in ticks])

    fig, ax = plt.subplots(figsize=(10, 4.5))
    im = ax.imshow(layers.T, aspect='auto', origin='lower', cmap='inferno',
                   extent=[t[0], t[-1], -0.5, layers.shape[1] - 0.5])
    fig.colorbar(im, ax=ax, label='°C')
    ax.set_xlabel('Hours since midnight of day 1')
    ax.set_ylabel('Layer (0 = bottom)')
    ax.set_title('Tank Stratification')
    ax.grid(False)
    fig.tight_layout()
    fig.savefig(os.path.join(RESULTS_DIR, 'tank_layers.png'), bbox_inches='tight')
    plt.close(fig)
    print('  Saved tank_layers.png')


def plot_pump_and_energy(ticks):
    t = elapsed_hours(ticks)

    fig, ax1 = plt.subplots(figsize=(10, 4.5))
    ax1.fill_between(t, 0, [s.irradiance for s in ticks], color='#f1c40f', alpha=0.25, label='Irradiance')
    ax1.set_ylabel('Irradiance (W/m²)')
    ax1.set_xlabel('Hours since midnight of day 1')

    ax2 = ax1.twinx()
    ax2.plot(t, [s.energy_collected_kwh for s in ticks], color='#2ca02c', linewidth=2, label='Collected')
    ax2.step(t, [1.0 if s.pump_on else 0.0 for s in ticks], color='#555', linewidth=1,
             where='post', label='Pump ON')
    ax2.set_ylabel('Energy (kWh) / pump state')

    ax1.set_title('Pump Operation and Collected Energy')
    fig.legend(loc='upper left', framealpha=0.9)
    fig.tight_layout()
    fig.savefig(os.path.join(RESULTS_DIR, 'pump_and_energy.png'), bbox_inches='tight')
    plt.close(fig)
    print('  Saved pump_and_energy.png')


def main():
    os.makedirs(RESULTS_DIR, exist_ok=True)
    print('Running one simulated day...')
    sim, ticks = run_simulation()
    print(f'  Collected {sim.energy_collected_kwh:.2f} kWh, tank average {sim.tank.average_temperature:.1f} °C')

    print('\nGenerating plots:')
    plot_temperatures(ticks)
    plot_tank_layers(ticks)
    plot_pump_and_energy(ticks)

    print(f'\nAll plots saved to {RESULTS_DIR}/')


if __name__ == '__main__':
    main()
