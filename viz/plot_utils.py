# viz/plot_utils.py
"""
Utility plotting functions for the garden simulation.

Provides:
- conversion of a list of Snapshots into a dict of traces
- time-series plotting of plant health, soil moisture and air temperature
- a run summary (plots plus a short text file)

Note: uses matplotlib and expects numeric data in sequences.
"""

import os

import matplotlib.pyplot as plt
import numpy as np


def history_from_snapshots(snapshots):
    """
    Flatten snapshots into traces:

    {
        'time': [hours...],
        'health': [mean health of living plants...],
        'min_health': [...],
        'moisture': [...],
        'temp': [...],
        'alive': [...],
        'cloud_cover': [...],
    }
    """
    history = {k: [] for k in ('time', 'health', 'min_health', 'moisture', 'temp', 'alive', 'cloud_cover')}
    for snap in snapshots:
        health = np.asarray(snap.plants.health, dtype=float)
        alive = np.asarray(snap.plants.alive, dtype=bool)
        living = health[alive]
        history['time'].append(snap.hours_elapsed + snap.slice_in_hour / 6.0)
        history['health'].append(float(living.mean()) if living.size else 0.0)
        history['min_health'].append(float(living.min()) if living.size else 0.0)
        history['moisture'].append(float(snap.soil.moisture))
        history['temp'].append(int(snap.air_temperature))
        history['alive'].append(int(snap.alive_plants))
        history['cloud_cover'].append(snap.weather.cloud_cover_pct if snap.weather else 0)
    return history


def plot_time_series(log, out_path=None, title=None):
    """
    Plot basic time-series from a history dictionary (see history_from_snapshots).
    Saves to `out_path` when given, otherwise shows the figure.
    """
    time = log.get('time', list(range(len(log.get('health', [])))))
    health = log.get('health', [])
    min_health = log.get('min_health', [])
    moisture = log.get('moisture', [])
    temp = log.get('temp', [])

    fig = plt.figure(figsize=(12, 8))
    ax1 = plt.gca()
    ax1.plot(time, health, label='Mean health (%)', linewidth=2)
    if min_health:
        ax1.plot(time, min_health, label='Min health (%)', linestyle=':')
    ax1.plot(time, moisture, label='Soil moisture (%)')
    ax1.set_xlabel('Simulated hours')
    ax1.set_ylabel('Health / Moisture (%)')
    ax1.set_ylim(0, 105)
    ax1.legend(loc='upper left')

    ax2 = ax1.twinx()
    if temp:
        ax2.plot(time, temp, label='Air temp (°F)', color='tab:red', linestyle='--')
    ax2.set_ylabel('Temperature (°F)')
    ax2.legend(loc='upper right')

    if title:
        plt.suptitle(title)

    if out_path:
        fig.savefig(out_path, dpi=150)
        plt.close(fig)
    else:
        plt.show()


def plot_run_summary(history, out_dir='plots', prefix='garden'):
    """Create and save a set of plots summarizing a single run"""
    os.makedirs(out_dir, exist_ok=True)
    plot_time_series(history, out_path=os.path.join(out_dir, f'{prefix}_timeseries.png'),
                     title=f'{prefix} summary')

    alive = history.get('alive', [])
    if alive:
        fig = plt.figure(figsize=(8, 3))
        plt.step(history.get('time', list(range(len(alive)))), alive, where='post')
        plt.xlabel('Simulated hours')
        plt.ylabel('Living plants')
        plt.title('Plants alive')
        fig.savefig(os.path.join(out_dir, f'{prefix}_alive.png'), dpi=150)
        plt.close(fig)

    health = history.get('health', [])
    if health:
        with open(os.path.join(out_dir, f'{prefix}_summary.txt'), 'w') as f:
            f.write(f'final_mean_health: {health[-1]:.2f}\n')
            f.write(f'lowest_mean_health: {min(health):.2f}\n')
            f.write(f'final_alive: {alive[-1] if alive else 0}\n')

    print(f'[viz] saved run summary to {out_dir}/{prefix}_*')
