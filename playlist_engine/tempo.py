"""
BPM and duration repair for generated playlists.

The language model often leaves tempo out, repeats the same value, or ignores
the requested range. correct_playlist_bpm() fills the gaps with values that
move through the playlist in waves rather than a straight ramp, and pulls
out-of-range values back inside without stacking them on the boundary.

All randomness comes from the rng argument (a random.Random), so a seeded
generator gives reproducible output.
"""

import logging
import math
import random
from dataclasses import replace

from .diversity import enforce_artist_diversity
from .models import BpmRange

log = logging.getLogger(__name__)

ABSOLUTE_MIN_BPM = 60
ABSOLUTE_MAX_BPM = 200

DEFAULT_BPM_RANGE = (70, 180)

MOOD_BPM_RANGES = {
    'energetic': (120, 160),
    'relaxed': (60, 90),
    'focused': (70, 110),
    'party': (115, 130),
    'workout': (125, 145),
    'chill': (65, 95),
    'happy': (95, 130),
    'sad': (60, 85),
}

# Weights of the three signals that place a missing BPM inside the range
POSITION_WEIGHT = 0.4
WAVE_WEIGHT = 0.3
RANDOM_WEIGHT = 0.3
WAVE_CYCLES = 2.5

MAX_OUT_OF_RANGE_SPREAD = 15
COLLISION_PROBE_STEPS = 5

BASE_DURATION = 180
DURATION_VARIATION = 120


def _is_number(value):
    return (isinstance(value, (int, float)) and not isinstance(value, bool)
            and math.isfinite(value))


def get_mood_bpm_range(mood=None):
    low, high = MOOD_BPM_RANGES.get((mood or '').lower(), DEFAULT_BPM_RANGE)
    return BpmRange(min=low, max=high)


def resolve_bpm_range(bpm_range=None, mood=None):
    """Return a BpmRange with both bounds set.

    An empty range falls back to the mood band; a half-open one borrows the
    missing bound from it.
    """
    fallback = get_mood_bpm_range(mood)
    if bpm_range is None or bpm_range.is_empty():
        return fallback

    low = bpm_range.min if bpm_range.min is not None else fallback.min
    high = bpm_range.max if bpm_range.max is not None else fallback.max
    if low > high:
        if bpm_range.min is None:
            low = ABSOLUTE_MIN_BPM
        elif bpm_range.max is None:
            high = ABSOLUTE_MAX_BPM
        else:
            low, high = high, low
    return BpmRange(min=int(round(low)), max=int(round(high)))


def _position(index, total):
    return index / (total - 1) if total > 1 else 0.5


def _synthesize_bpm(index, total, low, high, used, rng):
    position = _position(index, total)
    wave = (math.sin(position * math.pi * WAVE_CYCLES) + 1) / 2
    fraction = (position * POSITION_WEIGHT
                + wave * WAVE_WEIGHT
                + rng.random() * RANDOM_WEIGHT)

    bpm = round(low + (high - low) * fraction)
    bpm += rng.randint(-1, 1)
    bpm = max(low, min(high, bpm))

    if bpm in used:
        for step in range(1, COLLISION_PROBE_STEPS + 1):
            if bpm + step <= high and bpm + step not in used:
                return bpm + step
            if bpm - step >= low and bpm - step not in used:
                return bpm - step
        log.debug(f"Couldn't avoid duplicate BPM {bpm}")
    return bpm


def _pull_into_range(bpm, low, high, rng):
    spread = min(MAX_OUT_OF_RANGE_SPREAD, high - low)
    # random() ** 1.5 leans toward 0, i.e. toward the violated boundary
    weight = rng.random() ** 1.5
    if bpm < low:
        return round(low + weight * spread)
    return round(high - weight * spread)


def synthesize_duration(index, total, rng):
    """Duration in seconds, 180-300, mid-range values most likely."""
    position = _position(index, total)
    factor = position * 0.5 + math.sqrt(rng.random()) * 0.5
    return BASE_DURATION + round(DURATION_VARIATION * factor)


def correct_playlist_bpm(songs, bpm_range=None, diversity_options=None, mood=None, rng=None):
    """Return copies of songs with bpm and duration filled in or repaired.

    Args:
        songs: list of GeneratedSong
        bpm_range: requested BpmRange; empty or None means use the mood band
        diversity_options: DiversityOptions applied after repair, if active
        mood: mood name used for the fallback band
        rng: random.Random used for every random draw

    Never raises on bad bpm/duration input. Output bpm is always within
    ABSOLUTE_MIN_BPM..ABSOLUTE_MAX_BPM.
    """
    if not songs:
        return []
    rng = rng or random.Random()
    target = resolve_bpm_range(bpm_range, mood)
    low, high = int(round(target.min)), int(round(target.max))

    used = set()
    total = len(songs)
    corrected = []
    for index, song in enumerate(songs):
        bpm = song.bpm
        if not _is_number(bpm):
            bpm = _synthesize_bpm(index, total, low, high, used, rng)
        elif bpm < low or bpm > high:
            bpm = _pull_into_range(bpm, low, high, rng)

        bpm = max(ABSOLUTE_MIN_BPM, min(ABSOLUTE_MAX_BPM, bpm))
        used.add(bpm)

        duration = song.duration
        if not _is_number(duration) or duration <= 0:
            duration = synthesize_duration(index, total, rng)

        corrected.append(replace(song, bpm=bpm, duration=duration))

    if diversity_options is not None and diversity_options.is_active():
        return enforce_artist_diversity(corrected, diversity_options)
    return corrected
