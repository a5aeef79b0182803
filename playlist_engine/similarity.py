"""
String similarity and the weighted composite score used to rank catalog hits.
"""

import re
from dataclasses import dataclass

from rapidfuzz.distance import Levenshtein

from .text_utils import is_remix_version, extract_remixer

TITLE_WEIGHT = 0.35
ARTIST_WEIGHT = 0.35
REMIX_WEIGHT = 0.20
CONTEXT_WEIGHT = 0.10


def _normalize(s):
    s = re.sub(r'[^\w\s-]', '', (s or '').lower())
    return ' '.join(s.split())


def levenshtein_distance(a, b):
    """Unit-cost edit distance (insert, delete, substitute)."""
    return Levenshtein.distance(a or '', b or '')


def similarity(a, b):
    """Similarity (0..1) between two strings after normalisation."""
    str_a = _normalize(a)
    str_b = _normalize(b)
    if str_a == str_b:
        return 1.0
    if not str_a or not str_b:
        return 0.0
    if str_a in str_b or str_b in str_a:
        return 0.9
    distance = levenshtein_distance(str_a, str_b)
    return 1.0 - distance / max(len(str_a), len(str_b))


def remix_score(source_title, target_title):
    source_remix = is_remix_version(source_title)
    target_remix = is_remix_version(target_title)
    if not source_remix and not target_remix:
        return 1.0
    if source_remix != target_remix:
        return 0.3

    source_remixer = extract_remixer(source_title)
    target_remixer = extract_remixer(target_title)
    if not source_remixer or not target_remixer:
        return 0.5
    sim = similarity(source_remixer, target_remixer)
    return 1.0 if sim > 0.8 else sim * 0.8


def context_score(track_name, style_context=None, mood_context=None):
    name = (track_name or '').lower()
    score = 0.0
    if style_context is not None:
        if any(term in name for term in style_context.terms):
            score += 0.5
        if any(genre in name for genre in style_context.sub_genres):
            score += 0.3
    if mood_context is not None:
        if any(term in name for term in mood_context.terms):
            score += 0.4
    return min(score, 1.0)


@dataclass(frozen=True)
class ScoreBreakdown:
    title_similarity: float
    artist_similarity: float
    remix_score: float
    context_score: float

    @property
    def total(self):
        return composite_score(self.title_similarity, self.artist_similarity,
                               self.remix_score, self.context_score)

    def as_dict(self):
        return {
            'title_similarity': self.title_similarity,
            'artist_similarity': self.artist_similarity,
            'remix_score': self.remix_score,
            'context_score': self.context_score,
            'score': self.total,
        }


def composite_score(title_similarity, artist_similarity, remix, context):
    return (title_similarity * TITLE_WEIGHT
            + artist_similarity * ARTIST_WEIGHT
            + remix * REMIX_WEIGHT
            + context * CONTEXT_WEIGHT)


def score_candidate(target_title, target_artist, candidate,
                    style_context=None, mood_context=None):
    """Break down how well a CandidateTrack matches a target title/artist."""
    title_sim = similarity(target_title, candidate.name)
    artist_sim = max((similarity(target_artist, a) for a in candidate.artists),
                     default=0.0)
    return ScoreBreakdown(
        title_similarity=title_sim,
        artist_similarity=artist_sim,
        remix_score=remix_score(target_title, candidate.name),
        context_score=context_score(candidate.name, style_context, mood_context),
    )
