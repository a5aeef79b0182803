"""Unit tests for prompt parsing and the generation pipeline."""
import pytest

from playlist_engine.generator import (
    PlaylistGenerationError,
    PlaylistGenerator,
    build_system_prompt,
    calculate_genre_distribution,
    extract_bpm_range_from_prompt,
)
from playlist_engine.models import BpmRange, DiversityOptions


class FakeAI:
    def __init__(self, songs=None, error=None):
        self.songs = songs or []
        self.error = error
        self.calls = []

    def generate_songs(self, prompt, instructions, count=20, model='gpt-5-mini'):
        self.calls.append({'prompt': prompt, 'instructions': instructions,
                           'count': count, 'model': model})
        if self.error:
            raise self.error
        return self.songs


def _raw_songs(count, artist=None):
    return [{'title': f'Song {i}', 'artist': artist or f'Artist {i}', 'bpm': None,
             'duration': None, 'genre': 'jazz'} for i in range(count)]


class TestPromptBpm:

    @pytest.mark.parametrize('prompt,expected', [
        ('jazz at 120-140 BPM', (120, 140)),
        ('bpm of 90-110 please', (90, 110)),
        ('between 100 and 120 beats per minute', (100, 120)),
        ('slow evening songs', (None, 100)),
        ('medium tempo grooves', (100, 130)),
        ('fast running mix', (130, None)),
        ('songs around 128 bpm', (123, 133)),
        ('songs at 3 bpm', (0, 8)),
        ('a playlist for my cat', (None, None)),
        ('', (None, None)),
    ])
    def test_extraction(self, prompt, expected):
        bpm = extract_bpm_range_from_prompt(prompt)
        assert (bpm.min, bpm.max) == expected

    def test_explicit_range_beats_tempo_words(self):
        bpm = extract_bpm_range_from_prompt('slow jams around 80-95 bpm')
        assert (bpm.min, bpm.max) == (80, 95)


class TestGenreDistribution:

    def test_remainder_goes_to_first_genres(self):
        assert calculate_genre_distribution(['jazz', 'funk', 'soul'], 10) == {
            'jazz': 4, 'funk': 3, 'soul': 3}

    def test_no_genres(self):
        assert calculate_genre_distribution([], 10) == {}


class TestSystemPrompt:

    def test_includes_range_and_count(self):
        text = build_system_prompt('chill', BpmRange(65, 95), 12, genres=['jazz', 'soul'])
        assert 'BPM Range: 65-95 BPM' in text
        assert 'exactly 12 songs' in text
        assert '- jazz: approximately 6 songs' in text
        assert 'DIVERSITY' not in text

    def test_diversity_block(self):
        text = build_system_prompt(None, BpmRange(100, 120), 10,
                                   diversity=DiversityOptions(max_songs_per_artist=1))
        assert 'Maximum 1 songs per artist' in text


class TestPlaylistGenerator:

    def test_mood_range_used_when_prompt_has_none(self, rng):
        ai = FakeAI(_raw_songs(10))
        songs = PlaylistGenerator(ai, rng).generate('gym session', mood='workout', song_count=10)
        assert 'BPM Range: 125-145 BPM' in ai.calls[0]['instructions']
        assert ai.calls[0]['count'] == 10
        assert len(songs) == 10
        assert all(125 <= s.bpm <= 145 for s in songs)
        assert all(180 <= s.duration <= 300 for s in songs)

    def test_prompt_range_overrides_mood(self, rng):
        ai = FakeAI(_raw_songs(5))
        songs = PlaylistGenerator(ai, rng).generate('tunes at 100-110 bpm', mood='workout')
        assert all(100 <= s.bpm <= 110 for s in songs)

    def test_half_open_prompt_range(self, rng):
        ai = FakeAI(_raw_songs(8))
        songs = PlaylistGenerator(ai, rng).generate('fast songs')
        assert 'BPM Range: 130-180 BPM' in ai.calls[0]['instructions']
        assert all(130 <= s.bpm <= 180 for s in songs)

    def test_diversity_cap_applied(self, rng):
        ai = FakeAI(_raw_songs(6, artist='Same'))
        songs = PlaylistGenerator(ai, rng).generate(
            'anything', diversity=DiversityOptions(max_songs_per_artist=2))
        assert len(songs) == 2

    def test_songs_without_title_or_artist_dropped(self, rng):
        raw = [{'title': '', 'artist': 'X'}, {'title': 'Y', 'artist': ''},
               {'title': 'Kept', 'artist': 'Z', 'bpm': 120}]
        songs = PlaylistGenerator(FakeAI(raw), rng).generate('tunes at 100-140 bpm')
        assert [s.title for s in songs] == ['Kept']
        assert songs[0].bpm == 120

    def test_no_usable_songs(self, rng):
        with pytest.raises(PlaylistGenerationError, match='No playlist data'):
            PlaylistGenerator(FakeAI([{'title': '', 'artist': ''}]), rng).generate('anything')

    @pytest.mark.parametrize('prompt', ['', None, 42])
    def test_invalid_prompt(self, rng, prompt):
        ai = FakeAI(_raw_songs(3))
        with pytest.raises(PlaylistGenerationError, match='Invalid prompt'):
            PlaylistGenerator(ai, rng).generate(prompt)
        assert ai.calls == []

    def test_ai_failure_wrapped(self, rng):
        boom = RuntimeError('quota exceeded')
        with pytest.raises(PlaylistGenerationError) as excinfo:
            PlaylistGenerator(FakeAI(error=boom), rng).generate('anything')
        assert excinfo.value.cause is boom
