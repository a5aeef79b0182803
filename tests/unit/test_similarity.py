"""Unit tests for string similarity and composite scoring."""
import pytest

from playlist_engine.context import extract_mood_context, extract_style_context
from playlist_engine.similarity import (
    composite_score,
    context_score,
    levenshtein_distance,
    remix_score,
    score_candidate,
    similarity,
)

from conftest import make_track

SAMPLES = ['Let It Be', 'Midnight City', 'So What', 'Take Five', 'Blue in Green',
           'Strobe (Extended Mix)', 'a']


class TestLevenshtein:

    def test_classic_example(self):
        assert levenshtein_distance('kitten', 'sitting') == 3

    def test_empty_strings(self):
        assert levenshtein_distance('', 'abc') == 3
        assert levenshtein_distance('abc', '') == 3
        assert levenshtein_distance('', '') == 0


class TestSimilarity:

    @pytest.mark.parametrize('text', SAMPLES)
    def test_identity(self, text):
        assert similarity(text, text) == 1.0

    def test_symmetric(self):
        for a in SAMPLES:
            for b in SAMPLES:
                assert similarity(a, b) == similarity(b, a)

    def test_punctuation_and_case_ignored(self):
        assert similarity('Let It Be', 'let it be!!') == pytest.approx(1.0)

    def test_containment(self):
        assert similarity('Midnight', 'Midnight City') == 0.9

    def test_edit_distance_ratio(self):
        assert similarity('kitten', 'sitting') == pytest.approx(1 - 3 / 7)

    def test_range(self):
        for a in SAMPLES:
            for b in SAMPLES:
                assert 0.0 <= similarity(a, b) <= 1.0

    def test_one_side_empty(self):
        assert similarity('Midnight', '!!!') == 0.0


class TestRemixScore:

    def test_neither_remix(self):
        assert remix_score('Midnight', 'Midnight City') == 1.0

    def test_exactly_one_remix(self):
        assert remix_score('Midnight (DJ Kex Remix)', 'Midnight') == 0.3
        assert remix_score('Midnight', 'Midnight (DJ Kex Remix)') == 0.3

    def test_same_remixer(self):
        assert remix_score('Midnight (DJ Kex Remix)', 'Midnight [DJ Kex Remix]') == 1.0

    def test_different_remixers(self):
        assert remix_score('Song (Kex Remix)', 'Song (Zed Remix)') == pytest.approx((1 - 2 / 3) * 0.8)

    def test_remastered_counts_as_variant(self):
        assert remix_score('Let It Be', 'Let It Be - Remastered 2009') == 0.3

    def test_remixed_by_labels_compared(self):
        assert remix_score('Strobe (Remixed by Kex)', 'Strobe (Kex Remix)') == 1.0

    def test_unextractable_remixer(self):
        assert remix_score('Song (Remix)', 'Song (Live)') == 0.5


class TestContextScore:

    def test_all_signals_capped(self):
        style = extract_style_context('Smooth Love')
        mood = extract_mood_context('Smooth Love')
        assert context_score('Smooth Love Operator', style, mood) == 1.0

    def test_style_only(self):
        style = extract_style_context('Smooth Operator')
        mood = extract_mood_context('Smooth Operator')
        assert context_score('Smooth Operator', style, mood) == pytest.approx(0.8)

    def test_no_context(self):
        assert context_score('Anything') == 0.0


class TestCompositeScore:

    def test_weights_sum_to_one(self):
        assert composite_score(1, 1, 1, 1) == pytest.approx(1.0)
        assert composite_score(0, 0, 0, 0) == 0.0

    def test_monotonic_in_each_component(self):
        base = [0.5, 0.5, 0.5, 0.5]
        for i in range(4):
            bumped = list(base)
            bumped[i] = 0.6
            assert composite_score(*bumped) > composite_score(*base)

    def test_artist_similarity_uses_best_credit(self):
        track = make_track(1, 'Midnight', ['Someone Else', 'Nova'])
        breakdown = score_candidate('Midnight', 'Nova', track)
        assert breakdown.artist_similarity == 1.0

    def test_no_artists(self):
        track = make_track(1, 'Midnight', [])
        assert score_candidate('Midnight', 'Nova', track).artist_similarity == 0.0
