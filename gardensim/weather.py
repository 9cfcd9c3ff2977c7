# gardensim/weather.py
"""
WeatherModel
------------
Pure weather helpers: diurnal temperature curve, jittered temperature,
night/day classification, random rainfall amounts and probability rolls.

WeatherTelemetry is a display-only summary (cloud cover, last rain, last
temperature, condition text). It is recomputed every slice and never feeds
back into plant or soil physics.
"""

import math

import numpy as np

from gardensim.state import WeatherSummary

NIGHT_START_HOUR = 20
NIGHT_END_HOUR = 6
ACTIVE_RAIN_WINDOW_HOURS = 1


class WeatherModel:
    def __init__(self, cfg=None, rng=None):
        cfg = cfg or {}
        self.rng = rng if rng is not None else np.random.default_rng(cfg.get('seed'))
        self.set_band(cfg.get('min_temperature', 50), cfg.get('max_temperature', 85))
        self.temperature_jitter = int(cfg.get('temperature_jitter', 10))

    def set_band(self, low, high):
        low, high = int(low), int(high)
        if low > high:
            low, high = high, low
        self.min_temperature = low
        self.max_temperature = high
        # integer midpoint/amplitude so the curve stays on whole degrees
        self.amplitude = (high - low) // 2
        self.midpoint = (high + low) // 2

    # Temperature ----------------------------------------------------------
    def diurnal_temperature(self, hour_of_day):
        """Sinusoid: coldest at midnight, midpoint at 6 AM and 6 PM, warmest at noon."""
        radians = math.radians((hour_of_day - 6) * 15)  # 15 degrees per hour
        return int(self.midpoint + self.amplitude * math.sin(radians))

    def jittered_temperature(self, hour_of_day):
        base = self.diurnal_temperature(hour_of_day)
        if self.temperature_jitter <= 0:
            return base
        jitter = int(self.rng.integers(-self.temperature_jitter, self.temperature_jitter + 1))
        return base + jitter

    # Classification -------------------------------------------------------
    @staticmethod
    def is_night_hour(hour_of_day):
        return hour_of_day >= NIGHT_START_HOUR or hour_of_day < NIGHT_END_HOUR

    # Randomness -------------------------------------------------------------
    def rainfall_amount(self, low=5, high=15):
        if high <= low:
            return int(low)
        return int(self.rng.integers(low, high + 1))

    def should_occur(self, probability):
        return self.rng.random() < probability

    def choice(self, options):
        return options[int(self.rng.integers(len(options)))]


class WeatherTelemetry:
    def __init__(self, rng=None):
        self.rng = rng if rng is not None else np.random.default_rng()
        self.reset()

    def reset(self):
        self.cloud_cover = 0.35
        self.last_temperature = 70
        self.last_rain_amount = 0
        self.last_rain_hour = -1

    def record_rainfall(self, amount, hours_elapsed):
        self.last_rain_amount = int(amount)
        self.last_rain_hour = hours_elapsed
        self.cloud_cover = min(1.0, self.cloud_cover + 0.2)

    def record_temperature(self, temperature):
        self.last_temperature = int(temperature)

    def is_rain_active(self, hours_elapsed):
        return (self.last_rain_hour >= 0
                and hours_elapsed - self.last_rain_hour < ACTIVE_RAIN_WINDOW_HOURS)

    def nudge_clouds(self, is_night, hours_elapsed):
        # exponential smoothing toward a rain/night/day target
        if self.is_rain_active(hours_elapsed):
            target = 0.85
        elif is_night:
            target = 0.35
        else:
            target = 0.45 + self.rng.random() * 0.25
        self.cloud_cover += (target - self.cloud_cover) * 0.2
        self.cloud_cover = float(np.clip(self.cloud_cover, 0.05, 1.0))

    def snapshot(self, is_night, hour_of_day, hours_elapsed):
        raining = self.is_rain_active(hours_elapsed)
        clouds = float(np.clip(self.cloud_cover, 0.0, 1.0))
        if self.last_rain_hour < 0:
            hours_since = -1
        else:
            hours_since = max(0, hours_elapsed - self.last_rain_hour)
        return WeatherSummary(
            is_night=is_night,
            day_phase="Night" if is_night else "Day",
            hour_of_day=hour_of_day,
            cloud_cover_fraction=clouds,
            cloud_cover_pct=int(round(clouds * 100)),
            raining=raining,
            active_rain_amount=self.last_rain_amount if raining else 0,
            last_rain_amount=self.last_rain_amount,
            hours_since_rain=hours_since,
            temperature=self.last_temperature,
            condition=describe_condition(is_night, raining, clouds),
        )


def describe_condition(is_night, raining, clouds):
    if raining:
        if clouds > 0.75:
            return "Heavy Night Rain" if is_night else "Steady Rain"
        return "Passing Showers" if is_night else "Light Rain"
    if clouds > 0.85:
        return "Overcast Night" if is_night else "Overcast"
    if clouds > 0.6:
        return "Mostly Cloudy Night" if is_night else "Mostly Cloudy"
    if clouds > 0.4:
        return "Partly Cloudy Night" if is_night else "Partly Cloudy"
    return "Clear Night" if is_night else "Sunny"
