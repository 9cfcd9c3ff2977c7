import numpy as np

from gardensim.clock import SimulationClock
from gardensim.garden import Garden
from gardensim.state import (SNAPSHOT_VERSION, StateManager, health_status, plant_alerts,
                             plant_status_lines, water_status)
from gardensim.weather import WeatherModel, WeatherTelemetry


def _manager(garden=None):
    garden = garden or Garden()
    return StateManager(garden, SimulationClock(), WeatherModel(),
                        WeatherTelemetry(rng=np.random.default_rng(0)))


def test_snapshot_contents():
    g = Garden()
    g.plant_new('Rose-001', 'Rose')
    g.plant_new('Tomato-001', 'Tomato').set_health(0)
    sm = _manager(g)
    sm.clock.advance_hour()
    sm.clock.process_slices(2)
    snap = sm.capture()
    assert snap.version == SNAPSHOT_VERSION
    assert snap.plants.names == ('Rose-001', 'Tomato-001')
    assert snap.plants.alive == (True, False)
    assert snap.alive_plants + snap.dead_plants == snap.total_plants
    assert snap.sim_slice == 8
    assert snap.weather is not None
    assert snap.to_dict()['plants']['names'] == ('Rose-001', 'Tomato-001')


def test_refresh_water_stats_defaults_for_empty_garden():
    sm = _manager()
    assert sm.refresh_water_stats() == (5, 20)
    sm.garden.plant_new('Lettuce-001', 'Lettuce')
    assert sm.refresh_water_stats() == (8, 8)


def test_summary_and_status_lines():
    g = Garden()
    g.plant_new('Rose-001', 'Rose')
    snap = _manager(g).capture()
    assert StateManager.summarize(snap) == "Day 0: 1/1 plants alive."
    assert plant_status_lines(snap) == [
        "Rose-001 (Rose) - ALIVE | Health: 100.0% (Healthy) | Water: 10/10 (Good)"]


def test_alerts():
    g = Garden()
    g.plant_new('Rose-001', 'Rose')
    weak = g.plant_new('Rose-002', 'Rose')
    weak.set_health(15)
    weak.current_water = 1
    weak.infested = True
    g.plant_new('Rose-003', 'Rose').set_health(0)
    alerts = plant_alerts(_manager(g).capture())
    assert alerts == [
        "ALERT: Rose-002 (Rose) - Health CRITICAL: 15.0% | Water CRITICAL: 1/10 | INFESTED by parasites",
        "ALERT: Rose-003 (Rose) has DIED",
    ]


def test_status_words():
    assert health_status(85) == "Healthy"
    assert health_status(50) == "Fair"
    assert health_status(20) == "Sick"
    assert health_status(0.5) == "Dying"
    assert health_status(0) == "Dead"
    assert water_status(5, 0) == "N/A"
    assert water_status(5, 10) == "OK"
    assert water_status(0, 10) == "Dry"
