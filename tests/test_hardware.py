import pytest

from gardensim.errors import UnknownModuleError
from gardensim.garden import Garden
from gardensim.hardware import (HEATING, IRRIGATION, PEST_CONTROL, ModuleManager,
                                sanitize_parasite_name)
from gardensim.logbook import GardenLogger
from gardensim.slice_processor import RainfallPolicy


def _manager():
    garden = Garden()
    garden.plant_new('Rose-001', 'Rose')
    return ModuleManager(garden, RainfallPolicy(), GardenLogger())


def test_unknown_module_name():
    m = _manager()
    with pytest.raises(UnknownModuleError):
        m.activate_module('sprinkler')


def test_modules_start_inactive():
    m = _manager()
    status = m.module_status()
    assert set(status) == {IRRIGATION, HEATING, PEST_CONTROL}
    assert not any(s['active'] for s in status.values())
    assert status[IRRIGATION]['intensity'] == 50
    assert status[HEATING]['target_temperature'] == 70


def test_inactive_irrigation_does_nothing():
    m = _manager()
    assert m.handle_rainfall(20) == 0
    assert m.garden.soil.moisture == 60.0


def test_irrigation_scales_by_intensity_and_clamps():
    m = _manager()
    m.activate_module(IRRIGATION)
    assert m.handle_rainfall(20) == 10  # 50% of 20, inside [5, 30]
    assert m.garden.soil.moisture == 70.0
    m.set_module_intensity(IRRIGATION, 10)
    assert m.handle_rainfall(20) == 5  # 2 units, raised to the floor


def test_intensity_is_clamped():
    m = _manager()
    m.set_module_intensity(IRRIGATION, 150)
    assert m.get(IRRIGATION).intensity == 100
    m.set_module_intensity(HEATING, -5)
    assert m.get(HEATING).intensity == 0
    assert not m.set_module_intensity(PEST_CONTROL, 50)


def test_heating_moves_toward_target():
    m = _manager()
    m.activate_module(HEATING)
    assert m.handle_temperature_change(80) == 5
    assert m.garden.air_temperature == 75
    # already above target: nothing to do
    m.get(HEATING).set_target_temperature(60)
    assert m.get(HEATING).update() == 0
    assert m.garden.air_temperature == 75


def test_heating_rejects_out_of_range_target():
    m = _manager()
    m.activate_module(HEATING)
    assert m.handle_temperature_change(130) == 0
    assert m.get(HEATING).target_temperature == 70


def test_inactive_heating_update_is_noop():
    m = _manager()
    m.get(HEATING).set_target_temperature(100)
    m.update_all_modules()
    assert m.garden.air_temperature == 70


def test_pest_control_treats_when_active():
    m = _manager()
    rose = m.garden.find_plant('Rose-001')
    m.get(PEST_CONTROL).introduce_parasite('Aphids')
    assert rose.infested

    assert not m.handle_parasite('aphids')
    assert m.garden.soil.has_pest('aphids')

    m.activate_module(PEST_CONTROL)
    assert m.handle_parasite(' Aphids ')
    assert not m.garden.soil.has_pest('aphids')
    assert not rose.infested


def test_pest_control_without_pesticide():
    m = _manager()
    m.activate_module(PEST_CONTROL)
    assert not m.handle_parasite('locusts')
    assert any('No suitable pesticide' in line for line in m.event_log.recent_entries())


def test_sanitize_parasite_name():
    assert sanitize_parasite_name('  Spider Mites ') == 'spider_mites'
    assert sanitize_parasite_name(None) == ''
