import pytest

from gardensim.config import DEFAULT_PATH, get_default_config, load_config, load_plant_templates
from gardensim.errors import ConfigError
from gardensim.events import AutoEventConfig


def test_default_config_loads():
    cfg = get_default_config()
    assert cfg['seed'] == 42
    assert set(cfg['plants']) == {'Rose', 'Tomato', 'Lettuce', 'Sunflower'}
    # every auto_events key maps onto the dataclass
    assert AutoEventConfig.from_cfg(cfg['auto_events']) == AutoEventConfig()


def test_missing_file():
    with pytest.raises(FileNotFoundError):
        load_config('/nonexistent/garden.yaml')


def test_templates_from_default_config():
    templates = load_plant_templates(load_config(DEFAULT_PATH))
    assert list(templates) == ['Rose', 'Tomato', 'Lettuce', 'Sunflower']
    tomato = templates['Tomato']
    assert tomato.water_requirement == 15
    assert tomato.vulnerable_parasites == ('hornworms', 'spider_mites', 'whiteflies')
    assert tomato.instances == 2


def test_partial_entries_and_comma_parasites(tmp_path):
    p = tmp_path / 'garden.yaml'
    p.write_text("plants:\n"
                 "  Basil:\n"
                 "    water_requirement: 6\n"
                 "    parasites: 'aphids, whiteflies'\n"
                 "    instances: 1\n")
    templates = load_plant_templates(load_config(str(p)))
    basil = templates['Basil']
    assert basil.water_requirement == 6
    assert basil.optimal_min == 65
    assert basil.vulnerable_parasites == ('aphids', 'whiteflies')
    assert basil.instances == 1


def test_no_plants_section():
    assert load_plant_templates({}) == {}


@pytest.mark.parametrize('entry', [
    {'water_requirement': 'lots'},
    {'optimal_min': 90, 'optimal_max': 70},
    {'instances': -1},
])
def test_malformed_entries(entry):
    with pytest.raises(ConfigError):
        load_plant_templates({'plants': {'Bad': entry}})
