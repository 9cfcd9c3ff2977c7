import numpy as np

from gardensim.weather import WeatherModel, WeatherTelemetry, describe_condition


def test_diurnal_curve():
    w = WeatherModel()
    assert w.diurnal_temperature(0) == 50
    assert w.diurnal_temperature(6) == 67
    assert w.diurnal_temperature(12) == 84
    assert w.diurnal_temperature(18) == 67


def test_jitter_stays_within_band():
    w = WeatherModel(rng=np.random.default_rng(3))
    base = w.diurnal_temperature(9)
    for _ in range(50):
        assert abs(w.jittered_temperature(9) - base) <= 10


def test_night_hours():
    assert WeatherModel.is_night_hour(20)
    assert WeatherModel.is_night_hour(5)
    assert not WeatherModel.is_night_hour(6)
    assert not WeatherModel.is_night_hour(19)


def test_rainfall_amount_band():
    w = WeatherModel(rng=np.random.default_rng(1))
    amounts = [w.rainfall_amount(5, 15) for _ in range(100)]
    assert min(amounts) >= 5 and max(amounts) <= 15


def test_telemetry_rain_window():
    t = WeatherTelemetry(rng=np.random.default_rng(0))
    t.record_rainfall(12, hours_elapsed=4)
    snap = t.snapshot(is_night=False, hour_of_day=4, hours_elapsed=4)
    assert snap.raining
    assert snap.active_rain_amount == 12
    assert snap.hours_since_rain == 0

    later = t.snapshot(is_night=False, hour_of_day=7, hours_elapsed=7)
    assert not later.raining
    assert later.hours_since_rain == 3
    assert later.last_rain_amount == 12


def test_cloud_cover_stays_clamped():
    t = WeatherTelemetry(rng=np.random.default_rng(0))
    for h in range(200):
        t.nudge_clouds(is_night=WeatherModel.is_night_hour(h % 24), hours_elapsed=h)
        assert 0.05 <= t.cloud_cover <= 1.0


def test_never_rained():
    t = WeatherTelemetry()
    snap = t.snapshot(is_night=True, hour_of_day=2, hours_elapsed=2)
    assert snap.hours_since_rain == -1
    assert snap.day_phase == "Night"


def test_describe_condition():
    assert describe_condition(False, False, 0.1) == "Sunny"
    assert describe_condition(True, False, 0.1) == "Clear Night"
    assert describe_condition(False, True, 0.9) == "Steady Rain"
    assert describe_condition(True, True, 0.5) == "Passing Showers"
    assert describe_condition(False, False, 0.9) == "Overcast"
