"""
Settings for the playlist engine.

Spotify and OpenAI credentials come from the environment (or .env) before
config.json. Export and retry tunables (batch size, match-rate threshold,
backoff delays, market, store path) live in ENGINE_DEFAULTS and can be
overridden in config.json.
"""

import os
import json

from dotenv import load_dotenv

_PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

load_dotenv(os.path.join(_PROJECT_ROOT, '.env'))


# Prefer environment variables for secrets. This keeps keys out of git history.
ENV_MAP = {
    'spotify_client_id': 'SPOTIFY_CLIENT_ID',
    'spotify_client_secret': 'SPOTIFY_CLIENT_SECRET',
    'spotify_redirect_uri': 'SPOTIFY_REDIRECT_URI',
    'openai_api_key': 'OPENAI_API_KEY',
}

CONFIG_FILE = os.path.join(_PROJECT_ROOT, 'config.json')

ENGINE_DEFAULTS = {
    'export_batch_size': 50,
    'min_match_rate': 50.0,
    'api_max_retries': 3,
    'api_initial_delay': 1.0,
    'api_max_delay': 30.0,
    'spotify_market': 'US',
    'spotify_redirect_uri': 'http://127.0.0.1:5000/callback',
    'playlist_store_path': os.path.join(_PROJECT_ROOT, 'playlists.json'),
    'preferred_model': 'gpt-5-mini',
}


def load_config():
    """Saved settings from config.json, {} when missing or unreadable."""
    if os.path.exists(CONFIG_FILE):
        try:
            with open(CONFIG_FILE, 'r') as f:
                return json.load(f)
        except (json.JSONDecodeError, IOError):
            return {}
    return {}


def save_config(config):
    """Write the whole settings dict back to config.json."""
    with open(CONFIG_FILE, 'w') as f:
        json.dump(config, f, indent=2)


def is_configured():
    """True once both generation (OpenAI) and export (Spotify app) credentials exist."""
    spotify_ok = get_config_value('spotify_client_id') and get_config_value(
        'spotify_client_secret')
    return bool(spotify_ok and get_config_value('openai_api_key'))


def get_config_value(key, default=None):
    """Return one setting; secrets in ENV_MAP are read from the environment first."""
    env_key = ENV_MAP.get(key)
    if env_key and os.environ.get(env_key):
        return os.environ.get(env_key)
    return load_config().get(key, default)


def set_config_value(key, value):
    """Persist one setting to config.json."""
    config = load_config()
    config[key] = value
    save_config(config)


def get_engine_settings(config=None):
    """Engine tunables: defaults overridden by config.json (environment first for ENV_MAP keys), cast to the default's type."""
    config = load_config() if config is None else config
    settings = {}
    for key, default in ENGINE_DEFAULTS.items():
        env_key = ENV_MAP.get(key)
        value = os.environ.get(env_key) if env_key else None
        if not value:
            value = config.get(key)
        if value is None or value == '':
            settings[key] = default
            continue
        try:
            settings[key] = type(default)(value)
        except (TypeError, ValueError):
            settings[key] = default
    return settings
