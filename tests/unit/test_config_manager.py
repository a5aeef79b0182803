"""Unit tests for engine settings resolution."""
import pytest

from playlist_engine import config_manager
from playlist_engine.config_manager import ENGINE_DEFAULTS, get_engine_settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for env_key in config_manager.ENV_MAP.values():
        monkeypatch.delenv(env_key, raising=False)


class TestEngineSettings:

    def test_defaults(self):
        assert get_engine_settings({}) == ENGINE_DEFAULTS

    def test_config_values_cast_to_default_type(self):
        settings = get_engine_settings({'export_batch_size': '25', 'min_match_rate': 70})
        assert settings['export_batch_size'] == 25
        assert settings['min_match_rate'] == 70.0
        assert isinstance(settings['min_match_rate'], float)

    def test_bad_values_fall_back(self):
        settings = get_engine_settings({'export_batch_size': 'lots', 'spotify_market': ''})
        assert settings['export_batch_size'] == 50
        assert settings['spotify_market'] == 'US'

    def test_environment_wins(self, monkeypatch):
        monkeypatch.setenv('SPOTIFY_REDIRECT_URI', 'http://localhost:8080/callback')
        settings = get_engine_settings({'spotify_redirect_uri': 'http://example.com/cb'})
        assert settings['spotify_redirect_uri'] == 'http://localhost:8080/callback'


def test_config_round_trip(tmp_path, monkeypatch):
    monkeypatch.setattr(config_manager, 'CONFIG_FILE', str(tmp_path / 'config.json'))
    assert config_manager.load_config() == {}
    config_manager.set_config_value('spotify_client_id', 'abc')
    assert config_manager.get_config_value('spotify_client_id') == 'abc'
    assert not config_manager.is_configured()
    config_manager.set_config_value('spotify_client_secret', 'def')
    config_manager.set_config_value('openai_api_key', 'sk-test')
    assert config_manager.is_configured()
