"""Test configuration and fixtures."""

import random
import sys
from pathlib import Path

import pytest

# Add repo root to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from playlist_engine.models import CandidateTrack, GeneratedSong, PlaylistRecord


def track_uri(n):
    """A well-formed Spotify track URI (22 alphanumerics after the prefix)."""
    return 'spotify:track:' + str(n).zfill(22)


def make_track(n, name, artists, popularity=50):
    if isinstance(artists, str):
        artists = (artists,)
    return CandidateTrack(uri=track_uri(n), name=name, artists=tuple(artists),
                          popularity=popularity)


class FakeCatalog:
    """Stands in for SpotifyClient.search_tracks.

    responses: list consumed one per call; an Exception instance is raised,
    anything else is returned. When exhausted, returns [].
    """

    def __init__(self, responses=None):
        self.responses = list(responses or [])
        self.calls = []

    def __call__(self, query, limit):
        self.calls.append((query, limit))
        if not self.responses:
            return []
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakeStore:
    def __init__(self, playlists=None):
        self.playlists = {p.id: p for p in (playlists or [])}
        self.remote_updates = []

    def get_playlist(self, playlist_id):
        return self.playlists.get(playlist_id)

    def update_playlist_remote_id(self, playlist_id, remote_id, platform='spotify'):
        self.remote_updates.append((playlist_id, remote_id, platform))


def make_playlist(count, playlist_id='pl-1', description='Late night jazz'):
    songs = [GeneratedSong(title=f'Song {i}', artist=f'Artist {i}') for i in range(count)]
    return PlaylistRecord(id=playlist_id, name='Night Drive', description=description,
                          songs=songs)


@pytest.fixture()
def rng():
    return random.Random(1234)
