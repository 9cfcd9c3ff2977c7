# gardensim/plant.py
"""
Plant
-----
Single-plant state machine for the garden simulation: water buffer and
consumption, temperature stress, parasite infection and treatment.

Health is kept in 0..100 on every mutation and a plant is alive while
health > 0. Death is terminal: a dead plant ignores every further mutation.

Per-slice coefficients are the daily effect divided by 144 slices.
"""

from dataclasses import dataclass, field, fields
from typing import Tuple

import numpy as np

from gardensim.clock import SLICES_PER_DAY

OVERWATER_CAP_RATIO = 1.5
OVERWATER_PENALTY = 5.0
INFECTION_DAMAGE = 3.0
TREATMENT_DAMAGE = 1.0


@dataclass(frozen=True)
class PlantTemplate:
    """Immutable per-type defaults used to create new plants."""
    type: str
    water_requirement: int
    optimal_min: int
    optimal_max: int
    tolerance_min: int
    tolerance_max: int
    vulnerable_parasites: Tuple[str, ...] = ()
    instances: int = 2

    def __post_init__(self):
        # accept any iterable of parasite names, store a de-duplicated tuple
        object.__setattr__(self, 'vulnerable_parasites',
                           tuple(dict.fromkeys(self.vulnerable_parasites)))


DEFAULT_TEMPLATES = (
    PlantTemplate('Rose', 10, 65, 75, 40, 95, ('aphids', 'spider_mites')),
    PlantTemplate('Tomato', 15, 70, 85, 50, 100, ('hornworms', 'spider_mites', 'whiteflies')),
    PlantTemplate('Lettuce', 8, 55, 70, 35, 80, ('aphids', 'slugs')),
    PlantTemplate('Sunflower', 12, 70, 85, 45, 100, ('beetles', 'aphids')),
)


@dataclass(frozen=True)
class StressTunables:
    """Per-slice health deltas. Defaults reproduce the daily constants / 144."""
    intolerable: float = -0.104
    optimal_full_water: float = 0.07
    optimal_ok_water: float = 0.035
    optimal_low_water: float = 0.014
    tolerable_excellent_water: float = 0.035
    tolerable_decent_water: float = 0.007
    tolerable_low_water: float = -0.035
    severe_dehydration: float = -0.21
    moderate_dehydration: float = -0.14
    mild_dehydration: float = -0.07

    @classmethod
    def from_cfg(cls, cfg=None):
        cfg = cfg or {}
        known = {f.name for f in fields(cls)}
        return cls(**{k: float(v) for k, v in cfg.items() if k in known})


class Plant:
    def __init__(self, name, plant_type, water_requirement,
                 optimal_min, optimal_max, tolerance_min, tolerance_max,
                 vulnerable_parasites=(), tunables=None):
        self.name = name
        self.type = plant_type
        self.water_requirement = int(water_requirement)
        self.current_water = self.water_requirement  # starts well watered
        self.health = 100.0
        self.age = 0
        self.alive = True
        self.infested = False
        self.days_since_watering = 0
        self.optimal_min = optimal_min
        self.optimal_max = optimal_max
        self.tolerance_min = tolerance_min
        self.tolerance_max = tolerance_max
        self.vulnerable_parasites = []
        for parasite in vulnerable_parasites:
            self.add_vulnerable_parasite(parasite)
        self.tunables = tunables or StressTunables()

        self._consumption_acc = 0.0
        self._absorption_acc = 0.0

    @classmethod
    def from_template(cls, name, template, tunables=None):
        return cls(name, template.type, template.water_requirement,
                   template.optimal_min, template.optimal_max,
                   template.tolerance_min, template.tolerance_max,
                   template.vulnerable_parasites, tunables=tunables)

    # Health ---------------------------------------------------------------
    def change_health(self, delta):
        if not self.alive:
            return
        if delta > 0 and self.health >= 100.0:
            return
        self.health = float(np.clip(self.health + delta, 0.0, 100.0))
        self.alive = self.health > 0

    def set_health(self, value):
        self.health = float(np.clip(value, 0.0, 100.0))
        self.alive = self.health > 0

    def water_ratio(self):
        if self.water_requirement <= 0:
            return 1.0
        return self.current_water / self.water_requirement

    # Water ----------------------------------------------------------------
    def add_water(self, amount):
        """Direct water delivery. Overfilling past 1.5x requirement costs health."""
        if not self.alive or amount <= 0:
            return
        self.current_water += int(amount)
        self.days_since_watering = 0
        self._consumption_acc = 0.0
        cap = self.water_requirement * OVERWATER_CAP_RATIO
        if self.current_water > cap:
            self.change_health(-OVERWATER_PENALTY)
            self.current_water = int(cap)

    def absorb(self, amount, target):
        """
        Buffer fractional uptake from the soil and credit whole units, never
        past `target`. Returns the whole units actually gained.
        """
        room = int(target) - self.current_water
        if not self.alive or amount <= 0 or room <= 0:
            return 0
        self._absorption_acc += amount
        gained = min(int(self._absorption_acc), room)
        if gained > 0:
            self.current_water += gained
            self._absorption_acc -= gained
        # nothing to gain: don't let the buffer grow without bound
        self._absorption_acc = min(self._absorption_acc, 1.0)
        return gained

    def consume_water_per_slice(self):
        """One slice of consumption (requirement / 144) followed by dehydration stress."""
        if not self.alive:
            return
        self._consumption_acc += self.water_requirement / SLICES_PER_DAY
        if self._consumption_acc >= 1.0:
            to_consume = int(self._consumption_acc)
            self.current_water = max(0, self.current_water - to_consume)
            self._consumption_acc -= to_consume

        ratio = self.water_ratio()
        t = self.tunables
        if ratio < 0.1:
            self.change_health(t.severe_dehydration)
        elif ratio < 0.3:
            self.change_health(t.moderate_dehydration)
        elif ratio < 0.5:
            self.change_health(t.mild_dehydration)

    # Temperature ------------------------------------------------------------
    def apply_temperature_stress(self, temperature):
        """
        Per-slice temperature effect. Water gates the benefit of a good
        temperature, and good water partly offsets a merely tolerable one.
        """
        if not self.alive:
            return
        t = self.tunables
        if temperature < self.tolerance_min or temperature > self.tolerance_max:
            self.change_health(t.intolerable)
            return

        ratio = self.water_ratio()
        if self.optimal_min <= temperature <= self.optimal_max:
            if ratio >= 1.0:
                self.change_health(t.optimal_full_water)
            elif ratio >= 0.75:
                self.change_health(t.optimal_ok_water)
            else:
                self.change_health(t.optimal_low_water)
        else:
            if ratio >= 1.05:
                self.change_health(t.tolerable_excellent_water)
            elif ratio >= 0.9:
                self.change_health(t.tolerable_decent_water)
            else:
                self.change_health(t.tolerable_low_water)

    # Parasites --------------------------------------------------------------
    def add_vulnerable_parasite(self, parasite):
        if parasite not in self.vulnerable_parasites:
            self.vulnerable_parasites.append(parasite)

    def is_vulnerable_to(self, parasite):
        return parasite in self.vulnerable_parasites

    def infect(self, parasite):
        if not self.alive:
            return False
        if self.is_vulnerable_to(parasite):
            self.infested = True
            self.change_health(-INFECTION_DAMAGE)
            return True
        return False

    def treat(self):
        if self.infested:
            self.infested = False
            self.change_health(-TREATMENT_DAMAGE)

    # Time -----------------------------------------------------------------
    def advance_slice(self):
        self.consume_water_per_slice()

    def advance_day(self):
        if not self.alive:
            return
        self.age += 1
        self.days_since_watering += 1

    def __repr__(self):
        return (f"{self.name} ({self.type}) - Age: {self.age}, Health: {self.health:.1f}%, "
                f"Water: {self.current_water}, Alive: {self.alive}, Infested: {self.infested}")
