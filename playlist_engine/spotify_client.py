"""
Spotify API client wrapper.
Handles authentication, catalog search and playlist writes for the exporter.

Every Web API call goes through _call(): transient failures (429, 5xx,
dropped connections) are retried with exponential backoff, and a 401 gets
one credential refresh before the call is re-issued.
"""

import logging
import threading

import requests
import spotipy
from spotipy import SpotifyException
from spotipy.oauth2 import SpotifyOAuth

from .models import CandidateTrack
from .retry_helper import retry_with_backoff, RateLimitError, ServerError, NetworkError

log = logging.getLogger(__name__)

# Spotify accepts at most 100 items per add-tracks request
MAX_TRACKS_PER_REQUEST = 100


class SpotifyAuthError(Exception):
    """Raised when no usable Spotify credential is available."""


def _parse_retry_after(headers):
    value = (headers or {}).get('Retry-After')
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def translate_spotify_error(e):
    """Map a SpotifyException onto the retryable error hierarchy.

    Returns None for errors that must not be retried.
    """
    status = e.http_status or 0
    if status == 429:
        return RateLimitError(f'Spotify rate limit: {e.msg}',
                              retry_after=_parse_retry_after(e.headers))
    if status >= 500:
        return ServerError(f'Spotify server error {status}: {e.msg}')
    return None


class SpotifyClient:
    def __init__(self, client_id, client_secret, redirect_uri='http://127.0.0.1:5000/callback',
                 market='US', cache_path='.spotify_cache', max_retries=3,
                 initial_delay=1.0, max_delay=30.0):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        # Market for track relinking (auto-detected from user profile on login)
        self.market = market
        self._market_auto_detected = False
        self.scope = (
            'playlist-modify-private '
            'playlist-modify-public '
            'user-read-private'
        )
        self.auth_manager = SpotifyOAuth(
            client_id=client_id,
            client_secret=client_secret,
            redirect_uri=redirect_uri,
            scope=self.scope,
            cache_path=cache_path,
            show_dialog=True
        )
        self.sp = None
        self._refresh_lock = threading.Lock()
        self._request = retry_with_backoff(
            max_retries=max_retries,
            initial_delay=initial_delay,
            max_delay=max_delay,
        )(self._request_once)

    def _build_api(self):
        # Retries are ours; spotipy's urllib3 retry layer is switched off.
        return spotipy.Spotify(auth_manager=self.auth_manager, retries=0,
                               status_retries=0, requests_timeout=10)

    # ─── Auth ───────────────────────────────────────────────────────────

    def get_auth_url(self):
        """Get the Spotify authorization URL."""
        return self.auth_manager.get_authorize_url()

    def handle_callback(self, code):
        """Exchange authorization code for access token."""
        token_info = self.auth_manager.get_access_token(code, as_dict=True)
        self.sp = self._build_api()
        return token_info

    def is_authenticated(self):
        """Check if we have a valid cached token."""
        token_info = self.auth_manager.get_cached_token()
        if token_info:
            if self.sp is None:
                self.sp = self._build_api()
            if not self._market_auto_detected:
                self._detect_user_market()
            return True
        return False

    def _detect_user_market(self):
        """Auto-detect market from user's Spotify account country."""
        try:
            user = self.get_current_user()
            country = (user or {}).get('country')
            if country:
                self.market = country
                self._market_auto_detected = True
                log.info(f'Spotify market auto-detected: {country}')
        except Exception as e:
            log.warning(f'Could not detect user market, defaulting to '
                        f'{self.market}: {e}')

    def _refresh_credentials(self):
        with self._refresh_lock:
            token_info = self.auth_manager.get_cached_token()
            if not token_info or not token_info.get('refresh_token'):
                raise SpotifyAuthError('No Spotify refresh token available')
            self.auth_manager.refresh_access_token(token_info['refresh_token'])
            self.sp = self._build_api()
            log.info('Spotify access token refreshed')

    # ─── Request plumbing ───────────────────────────────────────────────

    def _request_once(self, method, *args, **kwargs):
        try:
            return getattr(self.sp, method)(*args, **kwargs)
        except SpotifyException as e:
            retryable = translate_spotify_error(e)
            if retryable is not None:
                raise retryable from e
            raise
        except requests.exceptions.RequestException as e:
            raise NetworkError(f'Spotify request failed: {e}') from e

    def _call(self, method, *args, **kwargs):
        if self.sp is None:
            raise SpotifyAuthError('Not authenticated with Spotify')
        try:
            return self._request(method, *args, **kwargs)
        except SpotifyException as e:
            if e.http_status != 401:
                raise
            log.warning(f'Spotify rejected {method} with 401, refreshing token')
            self._refresh_credentials()
            return self._request(method, *args, **kwargs)

    # ─── Catalog + playlists ────────────────────────────────────────────

    def get_current_user(self):
        """Get the current user's profile."""
        return self._call('current_user')

    def search_tracks(self, query, limit=20):
        """Search the catalog and return CandidateTracks (at most 50)."""
        limit = max(1, min(int(limit), 50))
        results = self._call('search', q=query, limit=limit, type='track',
                             market=self.market)
        items = (results or {}).get('tracks', {}).get('items', [])
        return [CandidateTrack.from_spotify(t) for t in items if t]

    def create_playlist(self, owner_id, name, description='', is_public=False):
        """Create a playlist owned by owner_id. Returns {'id', 'url'}."""
        # Spotify enforces limits: name ≤ 100 chars, description ≤ 300 chars
        safe_name = (name or '').strip()[:100] or 'AI Playlist'
        safe_desc = (description or '').strip()[:300]
        playlist = self._call('user_playlist_create', owner_id, safe_name,
                              public=bool(is_public), description=safe_desc)
        return {
            'id': playlist['id'],
            'url': playlist.get('external_urls', {}).get('spotify', ''),
        }

    def add_tracks(self, playlist_id, track_uris):
        """Add one batch of track URIs to a playlist in a single request."""
        uris = [u for u in track_uris if u]
        if not uris:
            return None
        if len(uris) > MAX_TRACKS_PER_REQUEST:
            raise ValueError(
                f'Cannot add {len(uris)} tracks in one request '
                f'(limit {MAX_TRACKS_PER_REQUEST})')
        return self._call('playlist_add_items', playlist_id, uris)
