# gardensim/errors.py
"""
Error taxonomy for the garden simulation.

Temperature is a hard input boundary and raises; rainfall and pest
concurrency are clamped or gated silently and never raise.
"""


class GardenSimError(Exception):
    """Base class for all simulation errors."""


class UninitializedError(GardenSimError, RuntimeError):
    def __init__(self, message="Call initialize_garden() before running the simulation"):
        super().__init__(message)


class InvalidTemperatureError(GardenSimError, ValueError):
    def __init__(self, temperature, low=40, high=120):
        self.temperature = temperature
        self.low = low
        self.high = high
        super().__init__(f"Invalid temperature: {temperature}°F (range: {low}-{high})")


class UnknownPlantTypeError(GardenSimError, KeyError):
    def __init__(self, plant_type, plant_name=None):
        self.plant_type = plant_type
        self.plant_name = plant_name
        super().__init__(plant_type)

    def __str__(self):
        if self.plant_name:
            return f"Cannot plant {self.plant_name}: unknown type '{self.plant_type}'"
        return f"Unknown plant type '{self.plant_type}'"


# Template registry naming
UnknownTemplateError = UnknownPlantTypeError


class DuplicatePlantError(GardenSimError, ValueError):
    pass


class UnknownModuleError(GardenSimError, KeyError):
    def __str__(self):
        return f"No garden module registered as '{self.args[0]}'"


class ConfigError(GardenSimError, ValueError):
    pass
