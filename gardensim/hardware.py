# gardensim/hardware.py
"""
Actuator modules for the garden and the ModuleManager that routes commands
to them.

- IrrigationSystem: rainfall pulses scaled by intensity, clamped to the
  garden's rainfall bounds
- HeatingSystem: moves air temperature toward a target, a fraction of the
  gap per update proportional to intensity
- PestControlSystem: picks a pesticide and treats a named pest

Every module calls back into a Garden entry point; none of them touches
plants or soil directly.
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional

import numpy as np

from gardensim.errors import UnknownModuleError
from gardensim.garden import MAX_TEMPERATURE_F, MIN_TEMPERATURE_F
from gardensim.logbook import GardenLogger

IRRIGATION = "irrigation"
HEATING = "heating"
PEST_CONTROL = "pest_control"

PESTICIDES = {
    "aphids": "neem_oil",
    "spider_mites": "miticide",
    "whiteflies": "insecticidal_soap",
    "hornworms": "bacillus_thuringiensis",
    "slugs": "iron_phosphate",
    "beetles": "neem_oil",
    "fungus_gnats": "bacillus_thuringiensis",
    "mealybugs": "pyrethrin",
    "carrot_flies": "spinosad",
}


def sanitize_parasite_name(raw):
    """'Spider Mites ' -> 'spider_mites'"""
    if raw is None:
        return ""
    return raw.strip().lower().replace(" ", "_")


class GardenModule(ABC):
    name = "Garden Module"
    tag = "MODULE"

    def __init__(self, garden, event_log=None):
        self.garden = garden
        self.event_log = event_log or GardenLogger()
        self.active = False

    def activate(self):
        self.active = True
        self.event_log.log(self.tag, "System activated")

    def deactivate(self):
        self.active = False
        self.event_log.log(self.tag, "System deactivated")

    def is_active(self):
        return self.active

    @abstractmethod
    def update(self):
        """Per-step effect while active."""

    def status(self):
        return {'active': self.active, 'name': self.name}


class ControllableModule(GardenModule):
    def __init__(self, garden, event_log=None, intensity=50):
        super().__init__(garden, event_log)
        self.intensity = intensity

    def set_intensity(self, level):
        self.intensity = int(np.clip(level, 0, 100))
        self.event_log.log(self.tag, f"Intensity set to: {self.intensity}")

    def status(self):
        s = super().status()
        s['intensity'] = self.intensity
        return s


class IrrigationSystem(ControllableModule):
    name = "Irrigation System"
    tag = "IRRIGATION"

    def __init__(self, garden, rainfall_policy, event_log=None):
        super().__init__(garden, event_log)
        self.rainfall_policy = rainfall_policy

    def activate(self):
        self.active = True
        self.event_log.log(self.tag, f"System activated with intensity: {self.intensity}")

    def update(self):
        # irrigation only acts through explicit pulses
        pass

    def simulate_rainfall(self, amount):
        """Deliver `amount` scaled by intensity; returns the units applied (0 when idle)."""
        if not self.active:
            self.event_log.log(self.tag, "Warning: Rainfall simulation attempted but system is inactive")
            return 0
        effective = self.rainfall_policy.clamp(int(amount * (self.intensity / 100.0)))
        self.garden.apply_rainfall(effective)
        self.event_log.log("RAIN", f"Irrigation system applied rainfall: {effective} units")
        return effective


class HeatingSystem(ControllableModule):
    name = "Heating System"
    tag = "HEATING"

    def __init__(self, garden, event_log=None):
        super().__init__(garden, event_log)
        self.target_temperature = 70

    def activate(self):
        self.active = True
        self.event_log.log(self.tag, f"System activated. Target: {self.target_temperature}°F, "
                                     f"Intensity: {self.intensity}")

    def set_target_temperature(self, temperature):
        if MIN_TEMPERATURE_F <= temperature <= MAX_TEMPERATURE_F:
            self.target_temperature = int(temperature)
            self.event_log.log(self.tag, f"Target temperature set to: {self.target_temperature}°F")
            return True
        self.event_log.log(self.tag, f"Error: Temperature must be between "
                                     f"{MIN_TEMPERATURE_F}-{MAX_TEMPERATURE_F}°F")
        return False

    def update(self):
        """Apply intensity% of the gap to the target; returns degrees added."""
        if not self.active:
            return 0
        current = self.garden.air_temperature
        diff = self.target_temperature - current
        if diff <= 0:
            return 0
        heat = int(diff * (self.intensity / 100.0))
        if heat > 0:
            self.garden.apply_temperature(current + heat)
            self.event_log.log("TEMPERATURE", f"Heating applied: {heat}°F")
        return heat

    def status(self):
        s = super().status()
        s['target_temperature'] = self.target_temperature
        return s


class PestControlSystem(GardenModule):
    name = "Pest Control System"
    tag = "PEST_CONTROL"

    def update(self):
        # treatment is driven by explicit sweeps
        pass

    def select_pesticide(self, parasite) -> Optional[str]:
        return PESTICIDES.get(parasite)

    def treat_parasite(self, parasite):
        if not self.active:
            self.event_log.log(self.tag, "Warning: Treatment attempted but system is inactive")
            return False
        parasite = sanitize_parasite_name(parasite)
        pesticide = self.select_pesticide(parasite)
        if pesticide is None:
            self.event_log.log(self.tag, f"No suitable pesticide found for: {parasite}")
            return False
        self.garden.treat_parasite(parasite)
        self.event_log.log("PARASITE", f"Treated {parasite} with {pesticide}")
        return True

    def introduce_parasite(self, parasite):
        parasite = sanitize_parasite_name(parasite)
        self.garden.trigger_parasite_infestation(parasite)
        self.event_log.log("PARASITE", f"Parasite introduced: {parasite}")


class ModuleManager:
    """Command router keyed by module name."""

    def __init__(self, garden, rainfall_policy, event_log=None):
        self.garden = garden
        self.event_log = event_log or GardenLogger()
        self._modules: Dict[str, GardenModule] = {}
        self.register(IRRIGATION, IrrigationSystem(garden, rainfall_policy, self.event_log))
        self.register(HEATING, HeatingSystem(garden, self.event_log))
        self.register(PEST_CONTROL, PestControlSystem(garden, self.event_log))
        self.event_log.log("MODULE_MANAGER", "All garden modules initialized successfully")

    def register(self, key, module):
        self._modules[key] = module

    def get(self, key) -> GardenModule:
        try:
            return self._modules[key]
        except KeyError:
            raise UnknownModuleError(key) from None

    # Intents --------------------------------------------------------------
    def handle_rainfall(self, amount):
        return self.get(IRRIGATION).simulate_rainfall(amount)

    def handle_temperature_change(self, temperature):
        heating = self.get(HEATING)
        if not heating.set_target_temperature(temperature):
            return 0
        return heating.update()

    def handle_parasite(self, parasite):
        return self.get(PEST_CONTROL).treat_parasite(parasite)

    def set_module_intensity(self, key, intensity):
        module = self.get(key)
        if not isinstance(module, ControllableModule):
            self.event_log.log("MODULE_MANAGER", f"Module '{key}' has no intensity control")
            return False
        module.set_intensity(intensity)
        return True

    def activate_module(self, key):
        self.get(key).activate()

    def deactivate_module(self, key):
        self.get(key).deactivate()

    def is_active(self, key):
        return self.get(key).is_active()

    def module_status(self):
        return {key: module.status() for key, module in self._modules.items()}

    def update_all_modules(self):
        for module in self._modules.values():
            module.update()
