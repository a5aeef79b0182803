"""
AI Playlist Engine - Flask Backend
REST endpoints around generation, tempo repair and Spotify export.

Pipeline: prompt → model song list → BPM/duration repair (+ artist cap) →
stored playlist → export (fuzzy catalog resolution, batched adds, match-rate check).
"""

import os
import logging
import random
from flask import Flask, request, jsonify, redirect

from .config_manager import load_config, save_config, is_configured, get_config_value, get_engine_settings
from .spotify_client import SpotifyClient
from .ai_client import AIClient, OPENAI_MODELS
from .exporter import PlaylistExporter
from .generator import PlaylistGenerator, PlaylistGenerationError
from .models import BpmRange, DiversityOptions, GeneratedSong, PlaylistRecord
from .record_store import PlaylistStore
from .tempo import correct_playlist_bpm

logging.basicConfig(level=os.environ.get('LOG_LEVEL', 'INFO').upper())
log = logging.getLogger(__name__)

app = Flask(__name__)
app.secret_key = os.urandom(24)

spotify: SpotifyClient | None = None
ai: AIClient | None = None
store: PlaylistStore | None = None


def init_clients():
    """Initialize Spotify, OpenAI and the playlist store from saved config."""
    global spotify, ai, store
    settings = get_engine_settings()
    store = PlaylistStore(settings['playlist_store_path'])
    cid = get_config_value('spotify_client_id', '')
    csec = get_config_value('spotify_client_secret', '')
    oai = get_config_value('openai_api_key', '')
    if cid and csec:
        spotify = SpotifyClient(
            cid, csec,
            redirect_uri=settings['spotify_redirect_uri'],
            market=settings['spotify_market'],
            max_retries=settings['api_max_retries'],
            initial_delay=settings['api_initial_delay'],
            max_delay=settings['api_max_delay'],
        )
    if oai:
        ai = AIClient(openai_api_key=oai)
        config = load_config()
        ai.update_safety_settings(
            max_output_tokens=config.get('max_output_tokens', 0),
            reasoning_effort=config.get('reasoning_effort', 'low'),
        )


# Initialize on startup if already configured
if is_configured():
    init_clients()


def _get_store():
    global store
    if store is None:
        store = PlaylistStore(get_engine_settings()['playlist_store_path'])
    return store


@app.route('/api/status')
def api_status():
    """Check if app is configured and user is authenticated."""
    configured = is_configured()
    authenticated = False
    user = None

    if configured and spotify:
        try:
            authenticated = spotify.is_authenticated()
            if authenticated:
                u = spotify.get_current_user()
                user = {'display_name': u.get('display_name', 'User'), 'id': u.get('id', '')}
        except Exception as e:
            log.warning(f'Auth check failed: {e}')
            authenticated = False

    return jsonify({
        'configured': configured,
        'authenticated': authenticated,
        'user': user,
        'preferred_model': get_engine_settings()['preferred_model'],
    })


@app.route('/api/setup', methods=['POST'])
def api_setup():
    """Save API keys."""
    data = request.json or {}
    config = load_config()
    for key in ('spotify_client_id', 'spotify_client_secret', 'openai_api_key'):
        if (data.get(key) or '').strip():
            config[key] = data[key].strip()
    save_config(config)
    init_clients()
    return jsonify({'success': True})


@app.route('/api/models')
def api_models():
    return jsonify({'models': OPENAI_MODELS})


@app.route('/api/verify-keys')
def api_verify_keys():
    """Check the OpenAI key and the Spotify session."""
    result = {
        'openai': {'configured': False, 'verified': False, 'error': None},
        'spotify': {'configured': False, 'verified': False, 'error': None},
    }
    if ai:
        result['openai'] = ai.verify_keys()
    if spotify:
        result['spotify']['configured'] = True
        try:
            if spotify.is_authenticated():
                result['spotify']['verified'] = True
            else:
                result['spotify']['error'] = 'Not authenticated'
        except Exception as e:
            result['spotify']['error'] = str(e)[:120]
    return jsonify(result)


@app.route('/api/auth/login')
def api_login():
    """Get Spotify authorization URL."""
    if not spotify:
        return jsonify({'error': 'Spotify not configured'}), 400
    return jsonify({'auth_url': spotify.get_auth_url()})


@app.route('/callback')
def callback():
    """Handle Spotify OAuth callback."""
    code = request.args.get('code')
    error = request.args.get('error')
    if error:
        return redirect('/?error=auth_denied')
    if code and spotify:
        try:
            spotify.handle_callback(code)
        except Exception as e:
            log.error(f'OAuth callback error: {e}')
            return redirect('/?error=auth_failed')
    return redirect('/')


@app.route('/api/auth/logout', methods=['POST'])
def api_logout():
    """Clear Spotify auth token."""
    cache_path = '.spotify_cache'
    if os.path.exists(cache_path):
        os.remove(cache_path)
    return jsonify({'success': True})


@app.route('/api/generate', methods=['POST'])
def api_generate():
    """Generate a playlist from a prompt and store it locally."""
    if not ai:
        return jsonify({'error': 'No AI provider configured'}), 400

    data = request.json or {}
    prompt = (data.get('prompt') or '').strip()
    if not prompt:
        return jsonify({'error': 'Prompt is required'}), 400

    mood = data.get('mood')
    try:
        song_count = max(1, min(int(data.get('song_count', 20)), 100))
    except (TypeError, ValueError):
        return jsonify({'error': 'song_count must be a number'}), 400

    generator = PlaylistGenerator(ai)
    try:
        songs = generator.generate(
            prompt,
            mood=mood,
            song_count=song_count,
            genres=data.get('genres') or [],
            diversity=DiversityOptions.from_dict(data.get('diversity')),
            model=data.get('model') or get_engine_settings()['preferred_model'],
        )
    except PlaylistGenerationError as e:
        log.error(f'Generation failed: {e} ({e.cause})')
        return jsonify({'error': str(e)}), 500

    playlist = PlaylistRecord(
        id='',
        name=(data.get('name') or prompt).strip()[:100],
        description=data.get('description') or f'Generated from: {prompt}',
        mood=mood,
        songs=songs,
    )
    _get_store().insert_playlist(playlist)
    return jsonify(playlist.to_dict())


@app.route('/api/playlists/<playlist_id>')
def api_get_playlist(playlist_id):
    playlist = _get_store().get_playlist(playlist_id)
    if not playlist:
        return jsonify({'error': 'Playlist not found'}), 404
    return jsonify(playlist.to_dict())


@app.route('/api/playlists/<playlist_id>/export', methods=['POST'])
def api_export_playlist(playlist_id):
    """Export a stored playlist to Spotify."""
    if not spotify or not spotify.is_authenticated():
        return jsonify({'error': 'Not authenticated'}), 401

    data = request.json or {}
    settings = get_engine_settings()
    exporter = PlaylistExporter(
        spotify,
        _get_store(),
        batch_size=settings['export_batch_size'],
        min_match_rate=settings['min_match_rate'],
    )
    result = exporter.export_playlist(playlist_id, data.get('platform', 'spotify'),
                                      data.get('options'))
    return jsonify(result.to_dict()), (200 if result.success else 422)


@app.route('/api/bpm/correct', methods=['POST'])
def api_correct_bpm():
    """Repair bpm/duration of a posted song list (no storage, no network)."""
    data = request.json or {}
    songs = [GeneratedSong.from_dict(s) for s in data.get('songs', []) if isinstance(s, dict)]
    rng = random.Random(data['seed']) if data.get('seed') is not None else None
    corrected = correct_playlist_bpm(
        songs,
        BpmRange.from_dict(data.get('bpm_range')),
        diversity_options=DiversityOptions.from_dict(data.get('diversity')),
        mood=data.get('mood'),
        rng=rng,
    )
    return jsonify({'songs': [s.to_dict() for s in corrected]})


def create_app():
    """Application factory for external runners."""
    return app
