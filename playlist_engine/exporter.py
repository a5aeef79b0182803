"""
Playlist export to Spotify.

Creates the remote playlist, resolves songs batch by batch (each batch is
searched concurrently, batches run one after another), adds the matched
tracks and reports the match rate. Below min_match_rate the export is
reported as failed; the partially filled remote playlist is left in place.
"""

import logging
import re
from concurrent.futures import ThreadPoolExecutor

from .models import ExportOptions, ExportResult, ExportStats
from .track_matcher import TrackResolver, is_valid_spotify_uri

log = logging.getLogger(__name__)

SPOTIFY_DESCRIPTION_LIMIT = 300
# Spotify's per-request limit is 100; 50 keeps each fan-out small.
DEFAULT_BATCH_SIZE = 50
DEFAULT_MIN_MATCH_RATE = 50.0

SUPPORTED_PLATFORMS = ('spotify',)


class ExportError(Exception):
    """Raised when an export cannot proceed or is judged a failure."""


def sanitize_spotify_description(description):
    """Printable ASCII only, at most 300 characters."""
    if not description:
        return ''
    sanitized = re.sub(r'[^\x20-\x7E\s]', '', description).strip()
    if len(sanitized) > SPOTIFY_DESCRIPTION_LIMIT:
        return sanitized[:SPOTIFY_DESCRIPTION_LIMIT - 3] + '...'
    return sanitized


def chunk_list(items, size):
    return [items[i:i + size] for i in range(0, len(items), size)]


class PlaylistExporter:
    def __init__(self, spotify, store, resolver=None, batch_size=DEFAULT_BATCH_SIZE,
                 min_match_rate=DEFAULT_MIN_MATCH_RATE):
        self.spotify = spotify
        self.store = store
        self.resolver = resolver or TrackResolver(spotify.search_tracks)
        self.batch_size = max(1, int(batch_size))
        self.min_match_rate = min_match_rate

    def export_playlist(self, playlist_id, platform='spotify', options=None):
        """Export a stored playlist. Never raises; failures come back in the result."""
        if not isinstance(options, ExportOptions):
            options = ExportOptions.from_dict(options)
        try:
            if platform not in SUPPORTED_PLATFORMS:
                raise ExportError(f'Unsupported platform: {platform}')
            playlist = self.store.get_playlist(playlist_id)
            if not playlist:
                raise ExportError('Playlist not found')
            if not playlist.songs:
                raise ExportError('Playlist has no songs to export')
            return self._export_to_spotify(playlist, options)
        except Exception as e:
            log.error(f'Error exporting playlist {playlist_id} to {platform}: {e}')
            return ExportResult(success=False, error=str(e))

    def _resolve_uri(self, song):
        try:
            uri = self.resolver.resolve(song).uri
        except Exception as e:
            log.warning(f'Failed to find song on Spotify: {song.title}: {e}')
            return None
        return uri if is_valid_spotify_uri(uri) else None

    def _export_to_spotify(self, playlist, options):
        user = self.spotify.get_current_user()
        if options.include_description:
            description = sanitize_spotify_description(
                options.description if options.description is not None else playlist.description)
        else:
            description = ''

        remote = self.spotify.create_playlist(user['id'], playlist.name, description,
                                              options.is_public)
        log.info(f'Created Spotify playlist {remote["id"]} for "{playlist.name}"')

        matched = 0
        total = len(playlist.songs)
        batches = chunk_list(playlist.songs, self.batch_size)
        # sized to the largest batch: every search in a batch runs at once
        with ThreadPoolExecutor(max_workers=len(batches[0])) as executor:
            for number, batch in enumerate(batches, start=1):
                # map() waits for the whole batch before the add call
                uris = [u for u in executor.map(self._resolve_uri, batch) if u]
                matched += len(uris)
                log.info(f'Batch {number}/{len(batches)}: matched {len(uris)}/{len(batch)}')
                if uris:
                    self.spotify.add_tracks(remote['id'], uris)

        stats = ExportStats.from_counts(total, matched)
        log.info(f'Export success rate: {stats.match_rate:.1f}% '
                 f'({stats.matched_songs}/{stats.total_songs} songs)')

        if stats.match_rate < self.min_match_rate:
            # TODO: unfollow the remote playlist once partial exports should be rolled back
            return ExportResult(
                success=False,
                platform_id=remote['id'],
                url=remote['url'],
                error=(f'Low match rate: Only {stats.match_rate:.1f}% of songs '
                       f'were found on Spotify'),
                stats=stats,
            )

        self.store.update_playlist_remote_id(playlist.id, remote['id'], platform='spotify')
        return ExportResult(success=True, platform_id=remote['id'], url=remote['url'],
                            stats=stats)
