"""
Data model shared by the resolution engine, the tempo synthesizer and the exporter.

Songs arrive as loose JSON from the language model, so every type that crosses
that boundary has a tolerant from_dict() and a to_dict() for the Flask layer.
"""

import math
from dataclasses import dataclass, field, asdict
from typing import Optional


def _as_number(value):
    """Return value as a finite float, or None when it is missing or unusable."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None
    return None


def _as_int(value):
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


@dataclass
class GeneratedSong:
    title: str
    artist: str
    album: Optional[str] = None
    year: Optional[int] = None
    bpm: Optional[float] = None
    duration: Optional[float] = None
    genre: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> 'GeneratedSong':
        """Build a song from a model/API dict. bpm and duration are kept raw
        so the tempo synthesizer can tell missing values from bad ones."""
        return cls(
            title=str(data.get('title') or data.get('name') or '').strip(),
            artist=str(data.get('artist') or '').strip(),
            album=(data.get('album') or None),
            year=_as_int(data.get('year')),
            bpm=data.get('bpm'),
            duration=data.get('duration'),
            genre=(data.get('genre') or None),
        )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class CandidateTrack:
    """A track returned by the catalog search. Read-only."""
    uri: str
    name: str
    artists: tuple = ()
    popularity: Optional[int] = None
    duration_ms: Optional[int] = None
    album: Optional[str] = None

    @classmethod
    def from_spotify(cls, t: dict) -> 'CandidateTrack':
        """Format a Spotify track object into a candidate."""
        album = t.get('album') or {}
        return cls(
            uri=t.get('uri', '') or '',
            name=t.get('name', '') or '',
            artists=tuple(a.get('name', '') for a in (t.get('artists') or []) if a),
            popularity=t.get('popularity'),
            duration_ms=t.get('duration_ms'),
            album=album.get('name') or None,
        )


@dataclass
class MatchResult:
    uri: Optional[str] = None
    score: float = 0.0
    strategy: Optional[str] = None
    details: Optional[dict] = None

    @property
    def matched(self) -> bool:
        return bool(self.uri)


@dataclass(frozen=True)
class ExportStats:
    total_songs: int
    matched_songs: int
    match_rate: float

    @classmethod
    def from_counts(cls, total_songs: int, matched_songs: int) -> 'ExportStats':
        if total_songs <= 0:
            return cls(total_songs=0, matched_songs=0, match_rate=0.0)
        matched_songs = max(0, min(matched_songs, total_songs))
        # multiply first so 3/10 gives exactly 30.0
        rate = matched_songs * 100.0 / total_songs
        return cls(total_songs=total_songs, matched_songs=matched_songs,
                   match_rate=rate)

    def to_dict(self) -> dict:
        return {
            'totalSongs': self.total_songs,
            'matchedSongs': self.matched_songs,
            'matchRate': self.match_rate,
        }


@dataclass
class ExportResult:
    success: bool
    platform_id: str = ''
    url: str = ''
    error: Optional[str] = None
    stats: Optional[ExportStats] = None

    def to_dict(self) -> dict:
        result = {
            'success': self.success,
            'platformId': self.platform_id,
            'url': self.url,
        }
        if self.error:
            result['error'] = self.error
        if self.stats:
            result['stats'] = self.stats.to_dict()
        return result


@dataclass
class ExportOptions:
    is_public: bool = False
    include_description: bool = True
    description: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> 'ExportOptions':
        data = data or {}
        return cls(
            is_public=bool(data.get('isPublic', data.get('is_public', False))),
            include_description=bool(data.get(
                'includeDescription', data.get('include_description', True))),
            description=data.get('description'),
        )


@dataclass
class DiversityOptions:
    max_songs_per_artist: Optional[int] = None
    min_unique_artists: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional['DiversityOptions']:
        if not data:
            return None
        return cls(
            max_songs_per_artist=_as_int(
                data.get('maxSongsPerArtist', data.get('max_songs_per_artist'))),
            min_unique_artists=_as_int(
                data.get('minUniqueArtists', data.get('min_unique_artists'))),
        )

    def is_active(self) -> bool:
        return bool(self.max_songs_per_artist or self.min_unique_artists)


@dataclass
class BpmRange:
    min: Optional[float] = None
    max: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> 'BpmRange':
        data = data or {}
        return cls(min=_as_number(data.get('min')), max=_as_number(data.get('max')))

    def is_empty(self) -> bool:
        return not self.min and not self.max

    def to_dict(self) -> dict:
        return {'min': self.min, 'max': self.max}


@dataclass
class PlaylistRecord:
    """A playlist as held by the local record store."""
    id: str
    name: str
    description: str = ''
    mood: Optional[str] = None
    songs: list = field(default_factory=list)
    spotify_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> 'PlaylistRecord':
        return cls(
            id=str(data.get('id', '')),
            name=data.get('name') or '',
            description=data.get('description') or '',
            mood=data.get('mood'),
            songs=[GeneratedSong.from_dict(s) for s in data.get('songs', [])],
            spotify_id=data.get('spotify_id'),
        )

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'mood': self.mood,
            'songs': [s.to_dict() for s in self.songs],
            'spotify_id': self.spotify_id,
        }
