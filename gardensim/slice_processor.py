# gardensim/slice_processor.py
"""
SliceProcessor
--------------
Runs one tick (one 10-minute slice): advance the garden, ask the scheduler
for automatic events, fit them to the garden, apply them, nudge the weather
telemetry and consume one slice of the clock.

RainfallPolicy is the single rainfall clamp used everywhere rain enters the
garden (manual rain, auto events, irrigation pulses): the floor is the
smallest plant requirement and the ceiling is the largest requirement scaled
by `allowance_factor`.
"""

import logging

import numpy as np

from gardensim.errors import ConfigError, InvalidTemperatureError
from gardensim.garden import MAX_TEMPERATURE_F, MIN_TEMPERATURE_F
from gardensim.logbook import GardenLogger
from gardensim.state import DEFAULT_MAX_REQUIREMENT, DEFAULT_MIN_REQUIREMENT

logger = logging.getLogger(__name__)


class RainfallPolicy:
    def __init__(self, allowance_factor=1.5):
        if allowance_factor < 1.0:
            raise ConfigError(f"allowance_factor must be >= 1.0, got {allowance_factor}")
        self.allowance_factor = float(allowance_factor)
        self.min_requirement = DEFAULT_MIN_REQUIREMENT
        self.max_requirement = DEFAULT_MAX_REQUIREMENT

    def update(self, min_requirement, max_requirement):
        self.min_requirement = int(min_requirement)
        self.max_requirement = int(max(min_requirement, max_requirement))

    @property
    def max_allowance(self):
        return max(self.max_requirement, int(round(self.max_requirement * self.allowance_factor)))

    def bounds(self):
        return self.min_requirement, self.max_allowance

    def clamp(self, amount):
        low, high = self.bounds()
        if not np.isfinite(amount):
            return low
        return int(np.clip(int(amount), low, high))

    def exceeds_recommended(self, amount):
        return amount > self.max_requirement


class SliceProcessor:
    def __init__(self, garden, clock, weather, scheduler, telemetry, rainfall_policy, event_log=None):
        self.garden = garden
        self.clock = clock
        self.weather = weather
        self.scheduler = scheduler
        self.telemetry = telemetry
        self.rainfall_policy = rainfall_policy
        self.event_log = event_log or GardenLogger()

    def process_slice(self):
        """
        One slice with automatic events. Returns a short summary such as
        'rain=12u temp=71°F pest=aphids', or None when nothing fired. The
        summary is for logging only.
        """
        self.garden.advance_slice()

        events = self.scheduler.generate(self.clock.hour_of_day(), self.clock.hours_elapsed)
        parts = self._apply(events)

        self._finish_slice()
        return " ".join(parts) if parts else None

    def process_slice_without_events(self):
        self.garden.advance_slice()
        self._finish_slice()

    def _finish_slice(self):
        is_night = self.weather.is_night_hour(self.clock.hour_of_day())
        self.telemetry.nudge_clouds(is_night, self.clock.hours_elapsed)
        self.clock.process_slices(1)

    def _apply(self, events):
        parts = []
        if events.has_rain:
            rainfall = self.rainfall_policy.clamp(events.rainfall)
            self.garden.apply_rainfall(rainfall)
            self.telemetry.record_rainfall(rainfall, self.clock.hours_elapsed)
            parts.append(f"rain={rainfall}u")
            self.event_log.log("RAIN", f"Auto rainfall: {rainfall} units")

        if events.temperature is not None and events.temperature > 0:
            temp = int(np.clip(events.temperature, MIN_TEMPERATURE_F, MAX_TEMPERATURE_F))
            try:
                self.garden.apply_temperature(temp)
            except InvalidTemperatureError as e:
                self.event_log.log("InvalidTemperatureError", str(e))
            else:
                self.telemetry.record_temperature(temp)
                parts.append(f"temp={temp}°F")

        if events.has_parasite and self.can_introduce_parasite(events.parasite):
            self.garden.trigger_parasite_infestation(events.parasite)
            parts.append(f"pest={events.parasite}")
        elif events.has_parasite:
            logger.debug("pest load limit reached, %s skipped", events.parasite)
        return parts

    def can_introduce_parasite(self, parasite):
        existing = self.garden.soil.pests
        if parasite in existing:
            return True
        return len(existing) < self.scheduler.config.max_concurrent_pests
