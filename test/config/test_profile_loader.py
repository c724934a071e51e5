import json
from pathlib import Path

import pytest

from config import CONFIG_ROOT, load_config, load_config_with_sources, resolve_profile


def _write(path: Path, payload: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload), encoding='utf-8')


def test_network_file_overrides_shared_defaults():
    config = load_config('ens', network='sepolia', profile='off')
    shared = json.loads((CONFIG_ROOT / 'ens.json').read_text(encoding='utf-8'))

    assert config['chainId'] == 11155111
    assert config['valueBufferPct'] == shared['valueBufferPct']


def test_unknown_network_only_loads_shared_defaults():
    config = load_config('ens', network='holesky', profile='off')
    assert 'chainId' not in config
    assert 'valueBufferPct' in config


def test_profile_overrides_apply_when_enabled(monkeypatch):
    monkeypatch.setenv('ENS_AGENT_PROFILE', 'local')
    config, sources = load_config_with_sources('ens', network='sepolia')

    assert config['confirmationTimeoutSeconds'] == 600
    assert config['chainId'] == 11155111
    assert sources[-1] == CONFIG_ROOT / 'local' / 'ens.sepolia.json'


@pytest.mark.parametrize('value', ['0', 'false', 'off', ''])
def test_falsey_profile_values_disable_overrides(monkeypatch, value):
    monkeypatch.setenv('ENS_AGENT_PROFILE', value)
    assert resolve_profile() is None
    assert load_config('ens', network='sepolia')['confirmationTimeoutSeconds'] == 300


def test_truthy_profile_value_selects_default_profile(monkeypatch):
    monkeypatch.setenv('ENS_AGENT_PROFILE', 'yes')
    assert resolve_profile() == CONFIG_ROOT / 'local'


def test_nested_values_are_deep_merged(tmp_path):
    _write(tmp_path / 'demo.json', {'limits': {'a': 1, 'b': 2}})
    _write(tmp_path / 'demo.net.json', {'limits': {'b': 3}})
    _write(tmp_path / 'ops' / 'demo.json', {'limits': {'c': 4}})

    config = load_config('demo', network='net', profile='ops', root=tmp_path)
    assert config == {'limits': {'a': 1, 'b': 3, 'c': 4}}


def test_missing_profile_directory_is_ignored(tmp_path):
    _write(tmp_path / 'demo.json', {'x': 1})
    assert load_config('demo', profile='nowhere', root=tmp_path) == {'x': 1}
