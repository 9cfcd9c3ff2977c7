# gardensim/sensors.py
"""
SensorController
----------------
Closed-loop, rule-based control over the actuator modules.

Reads a Snapshot after each state-changing call and runs three independent
hysteresis rules:

1. Irrigation: on when soil moisture < 25% or plants are dry (35% of plants
   below a 25% water ratio, or any plant below it); off once moisture >= 45%
   and the average water ratio >= 75%.
2. Heating: on below 52°F, off at 60°F or above.
3. Pest control: on while the soil reports pests; sweeps are spaced by a
   cooldown counted in simulated slices.

`evaluate_and_act` returns True when a rule changed garden state, in which
case the caller must take a fresh snapshot.
"""

from dataclasses import dataclass

import numpy as np

from gardensim.hardware import HEATING, IRRIGATION, PEST_CONTROL
from gardensim.logbook import GardenLogger


@dataclass(frozen=True)
class WaterDemand:
    has_data: bool = False
    avg_ratio: float = 1.0
    min_ratio: float = 1.0
    critical_fraction: float = 0.0


def _clamp(value, low, high):
    return int(np.clip(value, low, high))


class SensorController:
    def __init__(self, modules, event_log=None, cfg=None):
        cfg = cfg or {}
        self.modules = modules
        self.event_log = event_log or GardenLogger()

        self.moisture_low = float(cfg.get('moisture_low', 25.0))
        self.moisture_recovery = float(cfg.get('moisture_recovery', 45.0))
        self.plant_critical_ratio = float(cfg.get('plant_critical_ratio', 0.25))
        self.plant_recovery_ratio = float(cfg.get('plant_recovery_ratio', 0.75))
        self.min_critical_fraction = float(cfg.get('min_critical_fraction', 0.35))
        self.temp_low = int(cfg.get('temp_low', 52))
        self.temp_recovery = int(cfg.get('temp_recovery', 60))
        self.temp_target = int(cfg.get('temp_target', 65))
        self.pest_sweep_cooldown_slices = int(cfg.get('pest_sweep_cooldown_slices', 6))

        self.reset()

    def reset(self):
        self.irrigation_auto_active = False
        self.heating_auto_active = False
        self.pest_control_auto_active = False
        self.last_pest_sweep_slice = None

    def evaluate_and_act(self, snapshot, rainfall_bounds):
        """rainfall_bounds is a (min, max) pair or anything with a `bounds()` method."""
        if hasattr(rainfall_bounds, 'bounds'):
            min_rain, max_rain = rainfall_bounds.bounds()
        else:
            min_rain, max_rain = rainfall_bounds

        acted = self._manage_irrigation(snapshot, min_rain, max_rain)
        acted = self._manage_heating(snapshot) or acted
        acted = self._manage_pests(snapshot) or acted
        return acted

    # Irrigation -------------------------------------------------------------
    def assess_plant_water(self, plants):
        water = np.asarray(plants.water, dtype=float)
        required = np.asarray(plants.water_requirement, dtype=float)
        mask = required > 0
        if not mask.any():
            return WaterDemand()
        ratios = np.clip(np.maximum(water[mask], 0.0) / required[mask], 0.0, 1.5)
        return WaterDemand(
            has_data=True,
            avg_ratio=float(ratios.mean()),
            min_ratio=float(ratios.min()),
            critical_fraction=float(np.mean(ratios < self.plant_critical_ratio)),
        )

    def _manage_irrigation(self, snapshot, min_rain, max_rain):
        moisture = snapshot.soil.moisture if snapshot.soil is not None else None
        demand = self.assess_plant_water(snapshot.plants)

        self.event_log.log("DEBUG", "Sensor check: moisture=%.1f%%, hasData=%s, avgRatio=%.2f, "
                                    "criticalFrac=%.2f, minRatio=%.2f" % (
                                        -1 if moisture is None else moisture, demand.has_data,
                                        demand.avg_ratio if demand.has_data else -1,
                                        demand.critical_fraction if demand.has_data else -1,
                                        demand.min_ratio if demand.has_data else -1))

        soil_dry = moisture is not None and moisture < self.moisture_low
        plants_dry = demand.has_data and (demand.critical_fraction >= self.min_critical_fraction
                                          or demand.min_ratio < self.plant_critical_ratio)

        if soil_dry or plants_dry:
            self.modules.activate_module(IRRIGATION)
            self.irrigation_auto_active = True
            deficit = (self.moisture_low - moisture) if soil_dry else 10
            intensity = _clamp(round(deficit * 4) + 35, 35, 100)
            self.modules.set_module_intensity(IRRIGATION, intensity)
            if demand.has_data:
                severity = min(1.0, max(0.4, 1.0 - demand.avg_ratio + 0.25))
            else:
                severity = 0.8
            pulse = _clamp(round(max_rain * severity), min_rain, max_rain)
            self.modules.handle_rainfall(pulse)
            self.event_log.log("SENSOR", "Irrigation pulse (%du @%d%%): soil %.1f%%, avg water %.0f%%, "
                                         "%.0f%% plants critical" % (
                                             pulse, intensity, -1 if moisture is None else moisture,
                                             demand.avg_ratio * 100 if demand.has_data else -1,
                                             demand.critical_fraction * 100))
            return True

        soil_recovered = moisture is None or moisture >= self.moisture_recovery
        plants_recovered = not demand.has_data or demand.avg_ratio >= self.plant_recovery_ratio
        if self.irrigation_auto_active and soil_recovered and plants_recovered:
            self.modules.deactivate_module(IRRIGATION)
            self.irrigation_auto_active = False
            self.event_log.log("SENSOR", "Irrigation idle: soil and plants hydrated")
        return False

    # Heating ----------------------------------------------------------------
    def _manage_heating(self, snapshot):
        temperature = snapshot.air_temperature
        if temperature is None:
            return False
        if temperature < self.temp_low:
            self.modules.activate_module(HEATING)
            self.heating_auto_active = True
            intensity = _clamp(round((self.temp_low - temperature) * 6) + 40, 40, 100)
            self.modules.set_module_intensity(HEATING, intensity)
            target = max(self.temp_target, int(round(temperature + 5)))
            self.modules.handle_temperature_change(target)
            self.event_log.log("SENSOR", f"Air temp {temperature:.0f}°F low, heating target "
                                         f"{target}°F @{intensity}%")
            return True
        if self.heating_auto_active and temperature >= self.temp_recovery:
            self.modules.deactivate_module(HEATING)
            self.heating_auto_active = False
            self.event_log.log("SENSOR", f"Air temp stabilized at {temperature:.0f}°F, heating idle")
        return False

    # Pests ------------------------------------------------------------------
    def _sweep_due(self, now):
        if self.last_pest_sweep_slice is None:
            return True
        return now - self.last_pest_sweep_slice >= self.pest_sweep_cooldown_slices

    def _manage_pests(self, snapshot):
        pests = [p for p in (snapshot.soil.pests if snapshot.soil is not None else ()) if p and p.strip()]
        now = snapshot.sim_slice
        if pests:
            self.modules.activate_module(PEST_CONTROL)
            self.pest_control_auto_active = True
            if self._sweep_due(now):
                for pest in pests:
                    self.modules.handle_parasite(pest)
                self.last_pest_sweep_slice = now
                self.event_log.log("SENSOR", "Detected pests, automated treatment for " + ", ".join(pests))
                return True
        elif self.pest_control_auto_active and self._sweep_due(now):
            self.modules.deactivate_module(PEST_CONTROL)
            self.pest_control_auto_active = False
            self.event_log.log("SENSOR", "Pest sensors clear, pest control idle")
        return False
