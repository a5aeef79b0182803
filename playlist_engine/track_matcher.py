"""
Track Matcher - resolves AI-generated song descriptions to catalog tracks.

The language model gives us title/artist/album text with no identifiers, so
each song goes through up to three searches of decreasing strictness and
the candidates of each search are ranked with the composite score.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, List, Optional

from .context import MoodContext, StyleContext, extract_mood_context, extract_style_context
from .models import CandidateTrack, GeneratedSong, MatchResult
from .similarity import score_candidate
from .text_utils import cleanup_artist, cleanup_title, strip_query_quotes

log = logging.getLogger(__name__)

SPOTIFY_TRACK_URI_RE = re.compile(r'^spotify:track:[a-zA-Z0-9]{22}$')

EXACT_MATCH_THRESHOLD = 0.9
DEFAULT_MIN_SIMILARITY = 0.4


def is_valid_spotify_uri(uri):
    return bool(uri) and bool(SPOTIFY_TRACK_URI_RE.match(uri))


@dataclass
class MatchOptions:
    target_title: str
    target_artist: str
    style_context: Optional[StyleContext] = None
    mood_context: Optional[MoodContext] = None
    min_popularity: Optional[int] = None
    max_popularity: Optional[int] = None
    min_similarity: float = DEFAULT_MIN_SIMILARITY
    require_exact_match: bool = False


def _outside_popularity(track, options):
    # Unknown popularity is never filtered out
    if track.popularity is None:
        return False
    if options.min_popularity is not None and track.popularity < options.min_popularity:
        return True
    if options.max_popularity is not None and track.popularity > options.max_popularity:
        return True
    return False


def find_best_match(candidates: List[CandidateTrack], options: MatchOptions) -> MatchResult:
    """Pick the highest-scoring candidate above options.min_similarity.

    Ties keep the first candidate seen.
    """
    best = MatchResult()
    for track in candidates:
        if _outside_popularity(track, options):
            continue

        breakdown = score_candidate(options.target_title, options.target_artist, track,
                                    options.style_context, options.mood_context)
        score = breakdown.total
        log.debug(f'Candidate "{track.name}" by {", ".join(track.artists)}: '
                  f'{breakdown.as_dict()}')

        if options.require_exact_match and (
                breakdown.title_similarity < EXACT_MATCH_THRESHOLD
                or breakdown.artist_similarity < EXACT_MATCH_THRESHOLD):
            continue

        if score > options.min_similarity and (best.uri is None or score > best.score):
            best = MatchResult(uri=track.uri, score=score, details={
                'track': track.name,
                'artists': list(track.artists),
                **breakdown.as_dict(),
            })
    return best


@dataclass(frozen=True)
class SearchAttempt:
    name: str
    query: str
    limit: int
    require_exact_match: bool = False
    min_popularity: Optional[int] = None
    max_popularity: Optional[int] = None


class TrackResolver:
    """Runs the exact → loose → contextual search sequence for one song.

    search: callable(query, limit) -> list[CandidateTrack], normally
    SpotifyClient.search_tracks.
    """

    def __init__(self, search: Callable[[str, int], List[CandidateTrack]],
                 min_similarity: float = DEFAULT_MIN_SIMILARITY):
        self.search = search
        self.min_similarity = min_similarity

    def build_attempts(self, song: GeneratedSong, style: StyleContext, mood: MoodContext):
        clean_title = cleanup_title(song.title, style.terms + mood.terms)
        clean_artist = cleanup_artist(song.artist)
        context_terms = list(dict.fromkeys(style.terms + mood.terms))[:2]

        # Quoted field query uses the title as written, the cleaned one drops words.
        exact_query = (f'artist:"{strip_query_quotes(song.artist)}" '
                       f'track:"{strip_query_quotes(song.title)}"')
        return [
            SearchAttempt('exact', exact_query, 20, require_exact_match=True),
            SearchAttempt('loose', f'{clean_artist} {clean_title}'.strip(), 20),
            SearchAttempt('contextual', ' '.join([clean_title] + context_terms).strip(), 15,
                          min_popularity=20, max_popularity=90),
        ]

    def resolve(self, song: GeneratedSong) -> MatchResult:
        """Return the accepted match for a song, or a MatchResult with uri=None."""
        style = extract_style_context(song.title)
        mood = extract_mood_context(song.title)
        log.debug(f'Resolving "{song.title}" by {song.artist} '
                  f'(style={style.sub_genres}, mood={mood.primary})')

        for index, attempt in enumerate(self.build_attempts(song, style, mood), start=1):
            if not attempt.query:
                continue
            try:
                candidates = self.search(attempt.query, attempt.limit)
                result = find_best_match(candidates, MatchOptions(
                    target_title=song.title,
                    target_artist=song.artist,
                    style_context=style,
                    mood_context=mood,
                    min_popularity=attempt.min_popularity,
                    max_popularity=attempt.max_popularity,
                    min_similarity=self.min_similarity,
                    require_exact_match=attempt.require_exact_match,
                ))
            except Exception as e:
                log.warning(f'Search attempt {index} ({attempt.name}) failed for '
                            f'"{song.title}": {e}')
                continue

            if result.uri and is_valid_spotify_uri(result.uri):
                result.strategy = attempt.name
                log.debug(f'Found match on attempt {index} ({attempt.name}): '
                          f'{result.uri} score={result.score:.3f}')
                return result
            if result.uri:
                log.debug(f'Rejected malformed track URI {result.uri!r}')

        log.warning(f'Could not find suitable track: {song.title} by {song.artist}')
        return MatchResult()
