# gardensim/events.py
"""
Automatic weather and pest events.

AutoEventScheduler rolls rain, temperature and parasite events for one slice.
Apart from its cooldown trackers it keeps no state between calls:
- rain is gated by `next_rain_eligible_hour`,
- temperature always yields a value (jittered on a successful roll, otherwise
  the plain diurnal baseline),
- parasites need a successful roll, daytime, and at least
  `parasite_cooldown_hours` (never less than 3) since the previous one, and
  avoid recently used pests.

Rainfall amounts are drawn from a fixed 5..15 band; fitting them to the
planted garden is the caller's job.
"""

import logging
from dataclasses import dataclass, fields, replace
from typing import Optional

from gardensim.errors import ConfigError

logger = logging.getLogger(__name__)

ALL_PARASITES = (
    "aphids", "spider_mites", "whiteflies", "hornworms",
    "slugs", "beetles", "fungus_gnats", "mealybugs", "carrot_flies",
)
AUTO_RAIN_MIN = 5
AUTO_RAIN_MAX = 15
MIN_PARASITE_SPACING_HOURS = 3
RECENT_PARASITE_LIMIT = 5


@dataclass(frozen=True)
class AutoEventConfig:
    rain_chance: float = 0.4
    temperature_chance: float = 0.3
    parasite_chance: float = 0.15
    rain_cooldown_hours: int = 3
    parasite_cooldown_hours: int = MIN_PARASITE_SPACING_HOURS
    min_temperature: int = 50
    max_temperature: int = 85
    temperature_jitter: int = 10
    max_concurrent_pests: int = 2

    def __post_init__(self):
        for name in ('rain_chance', 'temperature_chance', 'parasite_chance'):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ConfigError(f"{name} must be within [0, 1], got {value}")
        if self.rain_cooldown_hours < 0:
            raise ConfigError("rain_cooldown_hours must be >= 0")
        if self.max_concurrent_pests < 0:
            raise ConfigError("max_concurrent_pests must be >= 0")
        if self.min_temperature > self.max_temperature:
            raise ConfigError("min_temperature must not exceed max_temperature")

    @classmethod
    def from_cfg(cls, cfg=None):
        cfg = cfg or {}
        cls._check_keys(cfg)
        return cls(**cfg)

    def with_changes(self, **changes):
        self._check_keys(changes)
        return replace(self, **changes)

    @classmethod
    def _check_keys(cls, values):
        unknown = set(values) - {f.name for f in fields(cls)}
        if unknown:
            raise ConfigError(f"Unknown auto_events keys: {sorted(unknown)}")


@dataclass
class AutoEvents:
    temperature: int
    rainfall: Optional[int] = None
    parasite: Optional[str] = None

    @property
    def has_rain(self):
        return self.rainfall is not None

    @property
    def has_parasite(self):
        return self.parasite is not None


class AutoEventScheduler:
    def __init__(self, weather, config=None):
        self.weather = weather
        self.set_config(config or AutoEventConfig())
        self.reset()

    def set_config(self, config):
        """Replace the whole config; the weather band follows it."""
        self.config = config
        self.weather.set_band(config.min_temperature, config.max_temperature)
        self.weather.temperature_jitter = config.temperature_jitter

    def reset(self):
        self.next_rain_eligible_hour = 0
        self.last_parasite_hour = None
        self.recent_parasites = set()

    def generate(self, hour_of_day, hours_elapsed):
        cfg = self.config
        weather = self.weather

        rainfall = None
        if hours_elapsed >= self.next_rain_eligible_hour and weather.should_occur(cfg.rain_chance):
            rainfall = weather.rainfall_amount(AUTO_RAIN_MIN, AUTO_RAIN_MAX)
            self.next_rain_eligible_hour = hours_elapsed + cfg.rain_cooldown_hours

        if weather.should_occur(cfg.temperature_chance):
            temperature = weather.jittered_temperature(hour_of_day)
        else:
            temperature = weather.diurnal_temperature(hour_of_day)

        parasite = None
        if weather.should_occur(cfg.parasite_chance) and not weather.is_night_hour(hour_of_day):
            if self._parasite_spacing_ok(hours_elapsed):
                parasite = self._pick_parasite()
                self.recent_parasites.add(parasite)
                self.last_parasite_hour = hours_elapsed
                if len(self.recent_parasites) > RECENT_PARASITE_LIMIT:
                    self.recent_parasites.clear()

        events = AutoEvents(temperature=temperature, rainfall=rainfall, parasite=parasite)
        logger.debug("auto events hour=%d: %s", hours_elapsed, events)
        return events

    def _parasite_spacing_ok(self, hours_elapsed):
        if self.last_parasite_hour is None:
            return True
        spacing = max(MIN_PARASITE_SPACING_HOURS, self.config.parasite_cooldown_hours)
        return hours_elapsed - self.last_parasite_hour >= spacing

    def _pick_parasite(self):
        available = [p for p in ALL_PARASITES if p not in self.recent_parasites]
        if not available:
            # every pest used recently, start over
            self.recent_parasites.clear()
            available = list(ALL_PARASITES)
        return self.weather.choice(available)
