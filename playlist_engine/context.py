"""
Keyword-table classification of a song title into a style and a mood.

The results only bias search queries and scoring; they are never stored as
metadata.
"""

from dataclasses import dataclass

STYLE_KEYWORDS = {
    'smooth': ['smooth', 'easy', 'mellow', 'soft'],
    'bebop': ['bebop', 'bop', 'fast', 'uptempo'],
    'fusion': ['fusion', 'electric', 'modern'],
    'swing': ['swing', 'big band', 'traditional'],
    'latin': ['latin', 'bossa', 'samba', 'brazilian'],
    'contemporary': ['contemporary', 'modern', 'neo'],
    'experimental': ['experimental', 'avant', 'free'],
}

HIGH_ENERGY_STYLES = ('bebop', 'fusion', 'experimental')
MELLOW_STYLES = ('smooth',)

# Declaration order matters: the last matching mood becomes primary.
MOOD_TABLE = {
    'relaxing': {
        'terms': ['relaxing', 'peaceful', 'calm', 'gentle', 'soothing'],
        'energy': 0.3,
        'valence': 0.6,
    },
    'upbeat': {
        'terms': ['upbeat', 'happy', 'joyful', 'energetic', 'lively'],
        'energy': 0.8,
        'valence': 0.8,
    },
    'melancholic': {
        'terms': ['melancholic', 'sad', 'blue', 'moody', 'emotional'],
        'energy': 0.4,
        'valence': 0.3,
    },
    'romantic': {
        'terms': ['romantic', 'love', 'sensual', 'intimate', 'dreamy'],
        'energy': 0.5,
        'valence': 0.7,
    },
    'focused': {
        'terms': ['focused', 'study', 'concentration', 'work', 'deep'],
        'energy': 0.4,
        'valence': 0.5,
    },
}


@dataclass(frozen=True)
class StyleContext:
    primary_genre: str = 'jazz'
    sub_genres: tuple = ()
    terms: tuple = ()
    intensity: float = 0.5


@dataclass(frozen=True)
class MoodContext:
    primary: str = 'neutral'
    terms: tuple = ()
    energy: float = 0.5
    valence: float = 0.5


def _unique(items):
    return tuple(dict.fromkeys(items))


def extract_style_context(title):
    title_lower = (title or '').lower()
    sub_genres = []
    terms = []
    intensity = 0.5

    for style, keywords in STYLE_KEYWORDS.items():
        matched = [k for k in keywords if k in title_lower]
        if not matched:
            continue
        sub_genres.append(style)
        terms.extend(matched)
        if style in HIGH_ENERGY_STYLES:
            intensity += 0.2
        elif style in MELLOW_STYLES:
            intensity -= 0.2

    return StyleContext(
        primary_genre='jazz',
        sub_genres=tuple(sub_genres),
        terms=_unique(terms),
        intensity=max(0.0, min(1.0, intensity)),
    )


def extract_mood_context(title):
    title_lower = (title or '').lower()
    primary = 'neutral'
    terms = []
    energy = 0.5
    valence = 0.5

    for mood, data in MOOD_TABLE.items():
        matched = [t for t in data['terms'] if t in title_lower]
        if not matched:
            continue
        primary = mood
        terms.extend(matched)
        energy = data['energy']
        valence = data['valence']

    return MoodContext(primary=primary, terms=_unique(terms),
                       energy=energy, valence=valence)
