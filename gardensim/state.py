# gardensim/state.py
"""
Typed, read-only snapshots of the simulation and the StateManager that
assembles them.

A Snapshot is built fresh on demand and never mutated afterwards; controller,
logger and any external display all read the same structure. Per-plant data
is kept as parallel tuples (one entry per plant, in planting order).
"""

from dataclasses import dataclass, asdict
from typing import List, Optional, Tuple

from gardensim.clock import SLICES_PER_HOUR

SNAPSHOT_VERSION = 1
DEFAULT_MIN_REQUIREMENT = 5
DEFAULT_MAX_REQUIREMENT = 20


@dataclass(frozen=True)
class PlantVectors:
    names: Tuple[str, ...] = ()
    types: Tuple[str, ...] = ()
    health: Tuple[float, ...] = ()
    water: Tuple[int, ...] = ()
    water_requirement: Tuple[int, ...] = ()
    age: Tuple[int, ...] = ()
    alive: Tuple[bool, ...] = ()
    infested: Tuple[bool, ...] = ()

    @classmethod
    def from_plants(cls, plants):
        return cls(
            names=tuple(p.name for p in plants),
            types=tuple(p.type for p in plants),
            health=tuple(float(p.health) for p in plants),
            water=tuple(int(p.current_water) for p in plants),
            water_requirement=tuple(int(p.water_requirement) for p in plants),
            age=tuple(int(p.age) for p in plants),
            alive=tuple(bool(p.alive) for p in plants),
            infested=tuple(bool(p.infested) for p in plants),
        )

    def __len__(self):
        return len(self.names)

    def rows(self):
        """Iterate per-plant dicts, handy for logging."""
        for i, name in enumerate(self.names):
            yield {
                'name': name,
                'type': self.types[i],
                'health': self.health[i],
                'water': self.water[i],
                'water_requirement': self.water_requirement[i],
                'age': self.age[i],
                'alive': self.alive[i],
                'infested': self.infested[i],
            }


@dataclass(frozen=True)
class SoilSummary:
    moisture: float
    nutrients: float
    pH: float
    temperature: float
    pests: Tuple[str, ...] = ()


@dataclass(frozen=True)
class GardenState:
    """What the Garden itself knows: plants, soil, day and air temperature."""
    day: int
    air_temperature: int
    plants: PlantVectors
    soil: SoilSummary
    total_plants: int
    alive_plants: int
    dead_plants: int


@dataclass(frozen=True)
class WeatherSummary:
    is_night: bool
    day_phase: str
    hour_of_day: int
    cloud_cover_fraction: float
    cloud_cover_pct: int
    raining: bool
    active_rain_amount: int
    last_rain_amount: int
    hours_since_rain: int  # -1 when it has never rained
    temperature: int
    condition: str


@dataclass(frozen=True)
class Snapshot:
    day: int
    hours_elapsed: int
    hour_of_day: int
    slice_in_hour: int
    air_temperature: int
    plants: PlantVectors
    soil: SoilSummary
    weather: Optional[WeatherSummary]
    total_plants: int
    alive_plants: int
    dead_plants: int
    version: int = SNAPSHOT_VERSION

    @property
    def sim_slice(self):
        return self.hours_elapsed * SLICES_PER_HOUR + self.slice_in_hour

    def to_dict(self):
        return asdict(self)


class StateManager:
    """Builds Snapshots and tracks the requirement range of the planted garden."""

    def __init__(self, garden, clock, weather, telemetry):
        self.garden = garden
        self.clock = clock
        self.weather = weather
        self.telemetry = telemetry
        self.min_water_requirement = DEFAULT_MIN_REQUIREMENT
        self.max_water_requirement = DEFAULT_MAX_REQUIREMENT

    def capture(self):
        gs = self.garden.get_state()
        hour_of_day = self.clock.hour_of_day()
        night = self.weather.is_night_hour(hour_of_day)
        return Snapshot(
            day=gs.day,
            hours_elapsed=self.clock.hours_elapsed,
            hour_of_day=hour_of_day,
            slice_in_hour=self.clock.slices_this_hour,
            air_temperature=gs.air_temperature,
            plants=gs.plants,
            soil=gs.soil,
            weather=self.telemetry.snapshot(night, hour_of_day, self.clock.hours_elapsed),
            total_plants=gs.total_plants,
            alive_plants=gs.alive_plants,
            dead_plants=gs.dead_plants,
        )

    def refresh_water_stats(self):
        low, high = self.garden.water_requirement_range()
        if low is None:
            low, high = DEFAULT_MIN_REQUIREMENT, DEFAULT_MAX_REQUIREMENT
        self.min_water_requirement = low
        self.max_water_requirement = high
        return low, high

    @staticmethod
    def summarize(snapshot):
        return f"Day {snapshot.day}: {snapshot.alive_plants}/{snapshot.total_plants} plants alive."


# Status wording ----------------------------------------------------------------

def health_status(health):
    if health >= 80:
        return "Healthy"
    if health >= 50:
        return "Fair"
    if health >= 20:
        return "Sick"
    if health > 0:
        return "Dying"
    return "Dead"


def water_status(current, requirement):
    if requirement == 0:
        return "N/A"
    ratio = current / requirement
    if ratio >= 1.0:
        return "Good"
    if ratio >= 0.5:
        return "OK"
    if ratio > 0:
        return "Low"
    return "Dry"


def plant_status_lines(snapshot) -> List[str]:
    lines = []
    for row in snapshot.plants.rows():
        lines.append(
            "%s (%s) - %s | Health: %.1f%% (%s) | Water: %d/%d (%s)" % (
                row['name'], row['type'], "ALIVE" if row['alive'] else "DEAD",
                row['health'], health_status(row['health']),
                row['water'], row['water_requirement'],
                water_status(row['water'], row['water_requirement'])))
    return lines


def plant_alerts(snapshot) -> List[str]:
    """Alert lines for dead, weak, critically dry or infested plants."""
    alerts = []
    for row in snapshot.plants.rows():
        name, ptype = row['name'], row['type']
        if not row['alive']:
            alerts.append(f"ALERT: {name} ({ptype}) has DIED")
            continue
        problems = []
        if row['health'] < 20.0:
            problems.append(f"Health CRITICAL: {row['health']:.1f}%")
        elif row['health'] < 50.0:
            problems.append(f"Health LOW: {row['health']:.1f}%")
        req = row['water_requirement']
        if req > 0 and row['water'] / req < 0.2:
            problems.append(f"Water CRITICAL: {row['water']}/{req}")
        if row['infested']:
            problems.append("INFESTED by parasites")
        if problems:
            alerts.append(f"ALERT: {name} ({ptype}) - " + " | ".join(problems))
    return alerts
