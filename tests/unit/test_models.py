"""Unit tests for tolerant model parsing."""
import math

from playlist_engine.models import (
    BpmRange,
    CandidateTrack,
    DiversityOptions,
    ExportOptions,
    ExportStats,
    GeneratedSong,
)


def test_song_from_dict_keeps_raw_tempo():
    song = GeneratedSong.from_dict({'name': ' So What ', 'artist': 'Miles Davis',
                                    'year': '1959', 'bpm': 'fast', 'duration': None})
    assert song.title == 'So What'
    assert song.year == 1959
    assert song.bpm == 'fast'


def test_candidate_from_spotify():
    track = CandidateTrack.from_spotify({
        'uri': 'spotify:track:abc', 'name': 'So What',
        'artists': [{'name': 'Miles Davis'}, None, {'name': 'John Coltrane'}],
    })
    assert track.artists == ('Miles Davis', 'John Coltrane')
    assert track.popularity is None
    assert track.album is None


class TestExportStats:

    def test_rate(self):
        assert ExportStats.from_counts(10, 3).match_rate == 30.0

    def test_empty(self):
        stats = ExportStats.from_counts(0, 0)
        assert stats.match_rate == 0.0
        assert stats.to_dict() == {'totalSongs': 0, 'matchedSongs': 0, 'matchRate': 0.0}


def test_options_accept_both_key_styles():
    assert ExportOptions.from_dict({'isPublic': True}).is_public is True
    assert ExportOptions.from_dict({'include_description': False}).include_description is False
    assert ExportOptions.from_dict(None) == ExportOptions()


def test_diversity_options():
    assert DiversityOptions.from_dict(None) is None
    options = DiversityOptions.from_dict({'maxSongsPerArtist': 2})
    assert options.max_songs_per_artist == 2
    assert options.is_active()
    assert not DiversityOptions().is_active()


def test_bpm_range_from_dict():
    assert BpmRange.from_dict({'min': 90, 'max': math.nan}) == BpmRange(min=90.0)
    assert BpmRange.from_dict({'min': True}).is_empty()
    assert BpmRange.from_dict(None).is_empty()
