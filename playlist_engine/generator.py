"""
Playlist generation: prompt → BPM range → model song list → tempo repair.
"""

import datetime
import logging
import random
import re

from .models import BpmRange, GeneratedSong
from .tempo import correct_playlist_bpm, get_mood_bpm_range

log = logging.getLogger(__name__)

_BPM_WORD = r'(?:bpm|beats per minute)'

RANGE_PATTERNS = (
    re.compile(r'(\d+)\s*-\s*(\d+)\s*' + _BPM_WORD, re.I),
    re.compile(_BPM_WORD + r'\s*(?:of|at|between)?\s*(\d+)\s*-\s*(\d+)', re.I),
    re.compile(r'(?:between|from)\s*(\d+)\s*(?:and|to)\s*(\d+)\s*' + _BPM_WORD, re.I),
)

SINGLE_PATTERNS = (
    re.compile(r'(\d+)\s*' + _BPM_WORD, re.I),
    re.compile(_BPM_WORD + r'\s*(?:of|at)?\s*(\d+)', re.I),
)

SLOW_RE = re.compile(r'\b(?:slow|relaxing|calm|chill)\b', re.I)
MEDIUM_RE = re.compile(r'\b(?:medium|moderate|average)\s*(?:tempo|pace)\b', re.I)
FAST_RE = re.compile(r'\b(?:fast|upbeat|energetic|high energy|workout|running)\b', re.I)

MOOD_INSTRUCTIONS = {
    'energetic': 'Focus on high-energy songs with strong rhythms and uplifting elements',
    'relaxed': 'Select songs with gentle rhythms and soothing melodies',
    'focused': 'Choose songs with minimal lyrics and consistent rhythms',
    'party': 'Include danceable tracks with strong beats and memorable hooks',
    'workout': 'Select high-energy songs with strong, motivating rhythms',
    'chill': 'Focus on laid-back tracks with smooth progressions',
    'happy': 'Choose uplifting songs with positive lyrics and bright melodies',
    'sad': 'Select emotionally resonant songs with deeper themes',
}


class PlaylistGenerationError(Exception):
    def __init__(self, message, cause=None):
        super().__init__(message)
        self.cause = cause


def extract_bpm_range_from_prompt(prompt):
    """Read a BPM range out of free text. Returns an empty BpmRange if none."""
    if not prompt:
        return BpmRange()

    for pattern in RANGE_PATTERNS:
        match = pattern.search(prompt)
        if match:
            return BpmRange(min=int(match.group(1)), max=int(match.group(2)))

    if SLOW_RE.search(prompt):
        return BpmRange(max=100)
    if MEDIUM_RE.search(prompt):
        return BpmRange(min=100, max=130)
    if FAST_RE.search(prompt):
        return BpmRange(min=130)

    for pattern in SINGLE_PATTERNS:
        match = pattern.search(prompt)
        if match:
            bpm = int(match.group(1))
            return BpmRange(min=max(bpm - 5, 0), max=bpm + 5)

    return BpmRange()


def calculate_genre_distribution(genres, total_songs):
    """Split total_songs across genres; the remainder goes to the first genres."""
    if not genres:
        return {}
    base = total_songs // len(genres)
    distribution = {genre: base for genre in genres}
    for i in range(total_songs - base * len(genres)):
        distribution[genres[i % len(genres)]] += 1
    return distribution


def _diversity_instructions(diversity):
    return (
        '\nDIVERSITY REQUIREMENTS:\n'
        f'- Maximum {diversity.max_songs_per_artist or 2} songs per artist\n'
        f'- Include at least {diversity.min_unique_artists or 5} different artists\n'
        '- Vary release years to include both classic and contemporary tracks\n'
        '- Mix mainstream and underground artists'
    )


def build_system_prompt(mood, bpm_range, song_count, genres=None, diversity=None):
    if genres:
        lines = '\n'.join(f'- {genre}: approximately {count} songs'
                          for genre, count in calculate_genre_distribution(genres, song_count).items())
        genre_text = (f'Genre Distribution Requirements:\n{lines}\n\n'
                      'Maintain this genre balance while ensuring smooth transitions between genres.')
    else:
        genre_text = 'Create a well-balanced mix of genres that work well together.'

    if mood:
        mood_text = f'- Mood Focus: {MOOD_INSTRUCTIONS.get(mood, mood)}'
        transition = f'- Create smooth energy transitions while maintaining the {mood} mood throughout'
    else:
        mood_text = '- Balance different moods while maintaining playlist coherence'
        transition = '- Ensure natural energy flow between songs'

    return (
        f'You are a world-class music curator. Generate an authentic {mood or "versatile"} '
        'playlist that follows these requirements:\n\n'
        'MOOD & TEMPO:\n'
        f'{mood_text}\n'
        f'- BPM Range: {bpm_range.min or 70}-{bpm_range.max or 180} BPM\n'
        f'{transition}\n\n'
        'GENRE REQUIREMENTS:\n'
        f'{genre_text}\n\n'
        'PLAYLIST STRUCTURE:\n'
        f'- Generate exactly {song_count} songs\n'
        '- Create a natural energy flow throughout the playlist'
        f'{_diversity_instructions(diversity) if diversity else ""}\n\n'
        'For every song give the exact title, the primary artist, the album, the release '
        f'year (1920-{datetime.date.today().year}), bpm, duration in seconds (180-300) '
        'and the primary genre. Do not repeat identical BPMs and durations.'
    )


class PlaylistGenerator:
    def __init__(self, ai_client, rng=None):
        self.ai = ai_client
        self.rng = rng or random.Random()

    def generate(self, prompt, mood=None, song_count=20, genres=None, diversity=None,
                 model='gpt-5-mini'):
        """Return a list of GeneratedSong with tempo and duration repaired."""
        if not prompt or not isinstance(prompt, str):
            raise PlaylistGenerationError('Invalid prompt: Must be a non-empty string')

        bpm_range = extract_bpm_range_from_prompt(prompt)
        if bpm_range.is_empty():
            bpm_range = get_mood_bpm_range(mood)

        instructions = build_system_prompt(mood, bpm_range, song_count, genres, diversity)
        try:
            raw_songs = self.ai.generate_songs(prompt, instructions, count=song_count,
                                               model=model)
        except Exception as e:
            raise PlaylistGenerationError('Failed to generate playlist', e) from e

        songs = [GeneratedSong.from_dict(s) for s in raw_songs]
        songs = [s for s in songs if s.title and s.artist]
        if not songs:
            raise PlaylistGenerationError('No playlist data received')

        return correct_playlist_bpm(songs, bpm_range, diversity_options=diversity,
                                    mood=mood, rng=self.rng)
