# gardensim/soil.py
"""
Soil shared by every plant in a garden: moisture, nutrients, pH, temperature
and the set of pests currently present.

Moisture and nutrients are percentages (0..100). Rain can lift moisture to at
most 95% to model root-rot avoidance. Soil temperature lags air temperature.
"""

import numpy as np

MOISTURE_CAP = 95.0
OPTIMAL_PH = 7.0


class Soil:
    def __init__(self, cfg=None):
        cfg = cfg or {}
        self.moisture = float(cfg.get('moisture', 60.0))
        self.nutrients = float(cfg.get('nutrients', 80.0))
        self.pH = float(cfg.get('pH', OPTIMAL_PH))
        self.temperature = float(cfg.get('temperature', 70.0))
        # daily rates
        self.evaporation_rate = float(cfg.get('evaporation_rate', 2.0))
        self.nutrient_depletion = float(cfg.get('nutrient_depletion', 0.5))
        self.ph_drift = float(cfg.get('ph_drift', 0.05))
        self.temperature_lag = float(cfg.get('temperature_lag', 0.3))
        self._pests = []

    # Water ----------------------------------------------------------------
    def add_water(self, amount):
        self.moisture = min(MOISTURE_CAP, self.moisture + float(amount))

    def draw_water(self, amount):
        """Remove moisture taken up by roots; returns what was actually removed."""
        taken = min(self.moisture, max(0.0, float(amount)))
        self.moisture -= taken
        return taken

    def evaporate(self):
        self.moisture = max(0.0, self.moisture - self.evaporation_rate)

    def set_moisture(self, value):
        self.moisture = float(np.clip(value, 0.0, 100.0))

    # Nutrients ------------------------------------------------------------
    def add_nutrients(self, amount):
        self.nutrients = min(100.0, self.nutrients + float(amount))

    def deplete_nutrients(self, amount):
        self.nutrients = max(0.0, self.nutrients - float(amount))

    def set_nutrients(self, value):
        self.nutrients = float(np.clip(value, 0.0, 100.0))

    # Temperature ----------------------------------------------------------
    def update_temperature(self, air_temperature):
        self.temperature += (air_temperature - self.temperature) * self.temperature_lag

    # Pests ------------------------------------------------------------------
    def add_pest(self, pest):
        if pest not in self._pests:
            self._pests.append(pest)

    def remove_pest(self, pest):
        if pest in self._pests:
            self._pests.remove(pest)

    def has_pest(self, pest):
        return pest in self._pests

    @property
    def pests(self):
        return list(self._pests)

    def is_pest_present(self):
        return bool(self._pests)

    # Daily ----------------------------------------------------------------
    def advance_day(self):
        self.evaporate()
        self.deplete_nutrients(self.nutrient_depletion)
        # pH drifts toward neutral without overshooting
        if self.pH < OPTIMAL_PH:
            self.pH = min(OPTIMAL_PH, self.pH + self.ph_drift)
        elif self.pH > OPTIMAL_PH:
            self.pH = max(OPTIMAL_PH, self.pH - self.ph_drift)

    def status(self):
        return {
            'moisture': self.moisture,
            'nutrients': self.nutrients,
            'pH': self.pH,
            'temperature': self.temperature,
            'pests': self.pests,
        }

    def __repr__(self):
        return (f"Soil - Moisture: {self.moisture:.1f}%, Nutrients: {self.nutrients:.1f}%, "
                f"pH: {self.pH:.2f}, Temp: {self.temperature:.1f}°F, Pests: {self._pests}")
