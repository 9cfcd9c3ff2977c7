# gardensim/garden.py
"""
Garden
------
Aggregate root of the simulation: owns the plants, the shared soil, the
template registry, the simulation day, the air temperature and an
append-only event history.

Every change to a plant or to the soil goes through one of the entry points
here (rainfall, temperature, parasite, treatment, slice/day advance) so that
plant and soil invariants are maintained together.
"""

import logging
import time
from dataclasses import dataclass, field

from gardensim.errors import DuplicatePlantError, InvalidTemperatureError, UnknownPlantTypeError
from gardensim.plant import DEFAULT_TEMPLATES, Plant, StressTunables
from gardensim.soil import Soil
from gardensim.state import GardenState, PlantVectors, SoilSummary

logger = logging.getLogger(__name__)

MIN_TEMPERATURE_F = 40
MAX_TEMPERATURE_F = 120
INITIAL_AIR_TEMPERATURE_F = 70
ABSORPTION_TARGET_RATIO = 1.1


@dataclass(frozen=True)
class GardenEvent:
    day: int
    event_type: str
    description: str
    timestamp: float = field(default_factory=time.time)

    def __str__(self):
        return f"[Day {self.day}] {self.event_type}: {self.description}"


class Garden:
    def __init__(self, cfg=None, templates=None, tunables=None):
        cfg = cfg or {}
        self._soil_cfg = cfg.get('soil', {})
        # root uptake per slice as a fraction of requirement, scaled by moisture
        self.absorption_coeff = float(cfg.get('absorption_coeff', 0.015))
        self.absorption_cap = float(cfg.get('absorption_cap', 0.012))
        # soil moisture points lost per unit of water a plant takes up
        self.soil_loss_fraction = float(cfg.get('soil_loss_fraction', 0.05))
        self.tunables = tunables or StressTunables()

        self._plants = []
        self.soil = Soil(self._soil_cfg)
        self.simulation_day = 0
        self.air_temperature = INITIAL_AIR_TEMPERATURE_F
        self._templates = {}
        self._history = []

        for template in DEFAULT_TEMPLATES:
            self.add_template(template)
        for template in (templates or ()):
            self.add_template(template)

    # Templates --------------------------------------------------------------
    def add_template(self, template):
        self._templates[template.type] = template

    def get_template(self, plant_type):
        return self._templates.get(plant_type)

    @property
    def available_types(self):
        return sorted(self._templates)

    # Planting ---------------------------------------------------------------
    def plant_new(self, name, plant_type):
        """
        Create a plant from the registered template and append it.

        An unregistered type is recorded and logged as an
        UnknownPlantTypeError and returns None. A name already in use raises
        DuplicatePlantError.
        """
        template = self._templates.get(plant_type)
        if template is None:
            err = UnknownPlantTypeError(plant_type, name)
            self._record("PLANT_ERROR", str(err))
            logger.warning("%s", err)
            return None
        if self.find_plant(name) is not None:
            self._record("PLANT_ERROR", f"Cannot plant {name}: name already in use")
            raise DuplicatePlantError(f"Plant name '{name}' already in use")

        plant = Plant.from_template(name, template, tunables=self.tunables)
        self._plants.append(plant)
        self._record("PLANTING", f"{name} ({plant_type}) has been planted")
        return plant

    def find_plant(self, name):
        for plant in self._plants:
            if plant.name == name:
                return plant
        return None

    @property
    def plants(self):
        return list(self._plants)

    def living_plants(self):
        return [p for p in self._plants if p.alive]

    def water_requirement_range(self):
        """(min, max) requirement over all plants, (None, None) for an empty garden."""
        if not self._plants:
            return None, None
        reqs = [p.water_requirement for p in self._plants]
        return min(reqs), max(reqs)

    # Environmental events ---------------------------------------------------------
    def apply_rainfall(self, amount):
        """
        Rain goes into the soil. When it exceeds the largest living plant's
        daily requirement the excess also floods every living plant directly,
        each in proportion to its own requirement.
        """
        amount = int(amount)
        if amount <= 0:
            return
        self.soil.add_water(amount)

        living = self.living_plants()
        flooded = 0
        if living:
            largest = max(p.water_requirement for p in living)
            if largest > 0 and amount > largest:
                excess_ratio = (amount - largest) / largest
                for plant in living:
                    share = int(round(excess_ratio * plant.water_requirement))
                    if share > 0:
                        plant.add_water(share)
                        flooded += 1

        desc = f"Rainfall applied: {amount} units. Soil moisture: {self.soil.moisture:.1f}%"
        if flooded:
            desc += f" (flooded {flooded} plant(s))"
        self._record("RAIN", desc)

    def apply_temperature(self, temperature):
        """Set air temperature. Values outside 40-120°F are rejected without any change."""
        if not (MIN_TEMPERATURE_F <= temperature <= MAX_TEMPERATURE_F):
            err = InvalidTemperatureError(temperature, MIN_TEMPERATURE_F, MAX_TEMPERATURE_F)
            self._record("TEMPERATURE_ERROR", str(err))
            raise err

        self.air_temperature = int(temperature)
        self.soil.update_temperature(self.air_temperature)
        affected = 0
        for plant in self.living_plants():
            plant.apply_temperature_stress(self.air_temperature)
            affected += 1
        self._record("TEMPERATURE",
                     f"Temperature set to {self.air_temperature}°F. Affected {affected} plant(s)")

    def trigger_parasite_infestation(self, parasite):
        self.soil.add_pest(parasite)
        infected = [p.name for p in self.living_plants() if p.infect(parasite)]
        if infected:
            self._record("PARASITE", f"Parasite '{parasite}' infested: {', '.join(infected)}")
        else:
            self._record("PARASITE", f"Parasite '{parasite}' introduced but no vulnerable plants")
        return infected

    def treat_parasite(self, parasite):
        self.soil.remove_pest(parasite)
        treated = 0
        for plant in self.living_plants():
            if plant.infested and plant.is_vulnerable_to(parasite):
                plant.treat()
                treated += 1
        self._record("TREATMENT", f"Treated parasite '{parasite}': {treated} plant(s) treated")
        return treated

    # Time -----------------------------------------------------------------
    def advance_slice(self):
        """
        One 10-minute slice: roots draw from the soil first, then every plant
        consumes its fractional share of the daily requirement.
        """
        for plant in self.living_plants():
            target = int(plant.water_requirement * ABSORPTION_TARGET_RATIO)
            if plant.current_water >= target:
                continue
            rate = min(self.soil.moisture / 100.0 * self.absorption_coeff, self.absorption_cap)
            gained = plant.absorb(rate * plant.water_requirement, target)
            if gained:
                self.soil.draw_water(gained * self.soil_loss_fraction)

        for plant in self.living_plants():
            plant.advance_slice()

    def advance_day(self):
        self.simulation_day += 1
        for plant in self.living_plants():
            plant.advance_day()
        self.soil.advance_day()
        self._record("DAY_ADVANCE", f"Day {self.simulation_day} completed")

    # State ------------------------------------------------------------------
    def get_state(self):
        alive = sum(1 for p in self._plants if p.alive)
        soil = self.soil
        return GardenState(
            day=self.simulation_day,
            air_temperature=self.air_temperature,
            plants=PlantVectors.from_plants(self._plants),
            soil=SoilSummary(soil.moisture, soil.nutrients, soil.pH, soil.temperature,
                             tuple(soil.pests)),
            total_plants=len(self._plants),
            alive_plants=alive,
            dead_plants=len(self._plants) - alive,
        )

    @property
    def event_history(self):
        return list(self._history)

    def reset(self):
        self._plants.clear()
        self.soil = Soil(self._soil_cfg)
        self.simulation_day = 0
        self.air_temperature = INITIAL_AIR_TEMPERATURE_F
        self._history.clear()
        self._record("RESET", "Garden has been reset")

    def _record(self, event_type, description):
        event = GardenEvent(self.simulation_day, event_type, description)
        self._history.append(event)
        logger.debug("%s", event)

    def __repr__(self):
        alive = sum(1 for p in self._plants if p.alive)
        return (f"Garden - Day {self.simulation_day}, Plants: {alive} alive/{len(self._plants)} total, "
                f"Temperature: {self.air_temperature}°F")
