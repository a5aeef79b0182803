"""
Artist diversity filter for generated song lists.
"""

import logging
from collections import Counter
from dataclasses import dataclass

from .models import DiversityOptions

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class DiversityReport:
    kept: tuple
    dropped: int
    unique_artists: int
    unique_genres: int
    min_unique_artists_met: bool


def apply_artist_diversity(songs, options=None):
    """Single pass over songs keeping at most max_songs_per_artist per artist.

    Later songs by a capped artist are dropped, order is preserved. A shortfall
    against min_unique_artists is only logged.
    """
    songs = list(songs)
    options = options or DiversityOptions()
    cap = options.max_songs_per_artist
    artist_counts = Counter()
    genre_counts = Counter()
    kept = []

    for song in songs:
        artist = (song.artist or '').lower() or 'unknown'
        genre = (song.genre or '').lower() or 'unknown'
        artist_counts[artist] += 1
        genre_counts[genre] += 1
        if not cap or artist_counts[artist] <= cap:
            kept.append(song)

    met = True
    if options.min_unique_artists and len(artist_counts) < options.min_unique_artists:
        met = False
        log.warning(f'Generated playlist has only {len(artist_counts)} unique artists, '
                    f'which is less than the requested {options.min_unique_artists}')

    log.info(f'Genre distribution in playlist: {len(genre_counts)} genres')
    if len(kept) < len(songs):
        log.info(f'Artist cap of {cap} dropped {len(songs) - len(kept)} songs')

    return DiversityReport(
        kept=tuple(kept),
        dropped=len(songs) - len(kept),
        unique_artists=len(artist_counts),
        unique_genres=len(genre_counts),
        min_unique_artists_met=met,
    )


def enforce_artist_diversity(songs, options=None):
    return list(apply_artist_diversity(songs, options).kept)
