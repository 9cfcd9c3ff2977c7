import numpy as np
import pytest

from gardensim.errors import ConfigError
from gardensim.events import ALL_PARASITES, AutoEventConfig, AutoEventScheduler
from gardensim.weather import WeatherModel


def _scheduler(seed=0, **changes):
    weather = WeatherModel(rng=np.random.default_rng(seed))
    return AutoEventScheduler(weather, AutoEventConfig(**changes))


def _drive(scheduler, hours):
    """Yield (hours_elapsed, events) for 6 slices per hour."""
    for h in range(hours):
        for _ in range(6):
            yield h, scheduler.generate(h % 24, h)


def test_parasites_never_closer_than_three_hours():
    scheduler = _scheduler(parasite_chance=1.0, parasite_cooldown_hours=1)
    fired = [h for h, ev in _drive(scheduler, 96) if ev.has_parasite]
    assert len(fired) >= 2
    assert all(b - a >= 3 for a, b in zip(fired, fired[1:]))


def test_parasites_only_during_daytime():
    scheduler = _scheduler(parasite_chance=1.0)
    for h, ev in _drive(scheduler, 48):
        if ev.has_parasite:
            assert 6 <= h % 24 < 20


def test_recent_parasites_are_not_repeated():
    scheduler = _scheduler(parasite_chance=1.0)
    picks = [ev.parasite for _, ev in _drive(scheduler, 48) if ev.has_parasite]
    assert len(picks) >= 6
    assert len(set(picks[:6])) == 6
    assert set(picks) <= set(ALL_PARASITES)


def test_rain_respects_cooldown_and_band():
    scheduler = _scheduler(rain_chance=1.0, rain_cooldown_hours=3)
    rains = [(h, ev.rainfall) for h, ev in _drive(scheduler, 9) if ev.has_rain]
    assert [h for h, _ in rains] == [0, 3, 6]
    assert all(5 <= amount <= 15 for _, amount in rains)


def test_temperature_always_produced():
    scheduler = _scheduler(temperature_chance=0.0, rain_chance=0.0, parasite_chance=0.0)
    ev = scheduler.generate(12, 12)
    assert ev.temperature == scheduler.weather.diurnal_temperature(12)
    assert not ev.has_rain and not ev.has_parasite


def test_set_config_moves_weather_band():
    scheduler = _scheduler()
    scheduler.set_config(AutoEventConfig(min_temperature=60, max_temperature=80, temperature_jitter=0))
    assert scheduler.weather.midpoint == 70
    assert scheduler.weather.temperature_jitter == 0


def test_config_validation():
    with pytest.raises(ConfigError):
        AutoEventConfig(rain_chance=1.5)
    with pytest.raises(ConfigError):
        AutoEventConfig(min_temperature=90, max_temperature=50)
    with pytest.raises(ConfigError):
        AutoEventConfig.from_cfg({'hail_chance': 0.1})
    with pytest.raises(ConfigError):
        AutoEventConfig().with_changes(hail_chance=0.1)


def test_with_changes_returns_new_value():
    base = AutoEventConfig()
    changed = base.with_changes(rain_chance=0.9)
    assert changed.rain_chance == 0.9
    assert base.rain_chance == 0.4


def test_reset_clears_cooldowns():
    scheduler = _scheduler(rain_chance=1.0)
    scheduler.generate(0, 0)
    assert scheduler.next_rain_eligible_hour == 3
    scheduler.reset()
    assert scheduler.next_rain_eligible_hour == 0
    assert scheduler.last_parasite_hour is None
