import numpy as np
import pytest

from gardensim.clock import SimulationClock
from gardensim.errors import ConfigError
from gardensim.events import AutoEventConfig, AutoEventScheduler
from gardensim.garden import Garden
from gardensim.logbook import GardenLogger
from gardensim.slice_processor import RainfallPolicy, SliceProcessor
from gardensim.weather import WeatherModel, WeatherTelemetry


def _processor(**auto):
    rng = np.random.default_rng(5)
    garden = Garden()
    garden.plant_new('Rose-001', 'Rose')
    garden.plant_new('Tomato-001', 'Tomato')
    weather = WeatherModel(rng=rng)
    scheduler = AutoEventScheduler(weather, AutoEventConfig(**auto))
    policy = RainfallPolicy()
    policy.update(*garden.water_requirement_range())
    return SliceProcessor(garden, SimulationClock(), weather, scheduler,
                          WeatherTelemetry(rng=rng), policy, GardenLogger())


def test_policy_bounds_and_clamp():
    policy = RainfallPolicy()
    assert policy.bounds() == (5, 30)
    policy.update(10, 20)
    assert policy.bounds() == (10, 30)
    assert policy.clamp(1) == 10
    assert policy.clamp(100) == 30
    assert policy.clamp(17) == 17
    assert policy.exceeds_recommended(21)
    assert not policy.exceeds_recommended(20)


def test_policy_allowance_never_below_max_requirement():
    policy = RainfallPolicy(allowance_factor=1.0)
    policy.update(8, 15)
    assert policy.max_allowance == 15
    with pytest.raises(ConfigError):
        RainfallPolicy(allowance_factor=0.5)


def test_slice_consumes_one_clock_slice():
    sp = _processor(rain_chance=0.0, parasite_chance=0.0)
    sp.process_slice()
    sp.process_slice_without_events()
    assert sp.clock.slices_this_hour == 2
    assert sp.clock.hours_elapsed == 0


def test_auto_rain_is_clamped_into_bounds():
    sp = _processor(rain_chance=1.0, temperature_chance=0.0, parasite_chance=0.0)
    summary = sp.process_slice()
    low, high = sp.rainfall_policy.bounds()
    assert summary is not None and 'rain=' in summary
    assert low <= sp.telemetry.last_rain_amount <= high
    assert any('[RAIN]' in line for line in sp.event_log.recent_entries())


def test_auto_temperature_is_applied():
    sp = _processor(rain_chance=0.0, temperature_chance=0.0, parasite_chance=0.0)
    summary = sp.process_slice()
    # hour 0 is the coldest point of the default 50-85 band
    assert sp.garden.air_temperature == 50
    assert 'temp=50' in summary


def test_parasite_gate_respects_concurrent_limit():
    sp = _processor(max_concurrent_pests=2)
    sp.garden.soil.add_pest('aphids')
    sp.garden.soil.add_pest('slugs')
    assert sp.can_introduce_parasite('aphids')
    assert not sp.can_introduce_parasite('beetles')
    sp.garden.soil.remove_pest('slugs')
    assert sp.can_introduce_parasite('beetles')


def test_no_event_slice_leaves_garden_weather_alone():
    sp = _processor()
    sp.process_slice_without_events()
    assert sp.garden.air_temperature == 70
    assert sp.garden.soil.pests == []
