# gardensim/config.py
"""
Config loader for the garden simulation.

`load_config(path=None)` reads YAML from `gardensim/defaults.yaml` by default
and returns a nested dict, seeding numpy's global generator when `seed` is
present. `load_plant_templates(cfg)` turns the `plants` section into
PlantTemplate objects.
"""

import os
import random

import numpy as np
import yaml

from gardensim.errors import ConfigError
from gardensim.plant import PlantTemplate

DEFAULT_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), 'defaults.yaml'))

_TEMPLATE_DEFAULTS = {
    'water_requirement': 10,
    'optimal_min': 65,
    'optimal_max': 75,
    'tolerance_min': 40,
    'tolerance_max': 95,
    'instances': 2,
}


def load_config(path=None):
    """Load YAML config and return a dict. Also sets global seeds if `seed` key present."""
    p = path or DEFAULT_PATH
    if not os.path.exists(p):
        raise FileNotFoundError(f"Config file not found: {p}")
    with open(p, 'r') as f:
        cfg = yaml.safe_load(f) or {}
    if not isinstance(cfg, dict):
        raise ConfigError(f"Config root must be a mapping: {p}")

    seed = cfg.get('seed', None)
    if seed is not None:
        _set_seeds(seed)
    return cfg


def get_default_config():
    return load_config(DEFAULT_PATH)


def _set_seeds(seed):
    print(f"[config] Setting global random seed = {seed}")
    random.seed(seed)
    np.random.seed(seed)


def load_plant_templates(cfg):
    """
    Build `{type: PlantTemplate}` from the `plants` section, in file order.

    Each entry may omit any field; missing ones fall back to Rose-like
    defaults. `parasites` accepts a list or a comma separated string.
    """
    section = (cfg or {}).get('plants') or {}
    if not isinstance(section, dict):
        raise ConfigError("'plants' must be a mapping of plant type -> settings")

    templates = {}
    for plant_type, entry in section.items():
        entry = entry or {}
        if not isinstance(entry, dict):
            raise ConfigError(f"Plant '{plant_type}' must be a mapping")
        values = dict(_TEMPLATE_DEFAULTS)
        for key in _TEMPLATE_DEFAULTS:
            if key in entry:
                try:
                    values[key] = int(entry[key])
                except (TypeError, ValueError):
                    raise ConfigError(f"Plant '{plant_type}': {key} must be an integer, "
                                      f"got {entry[key]!r}") from None

        parasites = entry.get('parasites', ())
        if isinstance(parasites, str):
            parasites = [p.strip() for p in parasites.split(',')]
        parasites = tuple(p for p in parasites if p)

        if values['water_requirement'] < 0 or values['instances'] < 0:
            raise ConfigError(f"Plant '{plant_type}': water_requirement and instances must be >= 0")
        if not (values['tolerance_min'] <= values['optimal_min']
                <= values['optimal_max'] <= values['tolerance_max']):
            raise ConfigError(f"Plant '{plant_type}': temperature bands must satisfy "
                              f"tolerance_min <= optimal_min <= optimal_max <= tolerance_max")

        templates[str(plant_type)] = PlantTemplate(
            type=str(plant_type),
            water_requirement=values['water_requirement'],
            optimal_min=values['optimal_min'],
            optimal_max=values['optimal_max'],
            tolerance_min=values['tolerance_min'],
            tolerance_max=values['tolerance_max'],
            vulnerable_parasites=parasites,
            instances=values['instances'],
        )
    return templates


if __name__ == '__main__':
    print(load_config())
