"""
Text helpers for turning AI-written song descriptions into catalog queries.
"""

import re

STOPWORDS = frozenset({
    'the', 'and', 'or', 'but', 'in', 'on', 'at', 'to', 'for',
    'with', 'by', 'from', 'up', 'about', 'into', 'over', 'after',
})

# Always kept in a cleaned title, they decide which version we get back.
VERSION_TERMS = ('mix', 'version', 'edit')

REMIX_INDICATORS = (
    'remix', 'mix', 'edit', 'version', 'dub',
    'extended', 'radio edit', 'club mix', 'instrumental',
    'remaster', 'live', 'acoustic',
)

_QUALIFIER = r'(?:remix|mix|edit|dub|rework|version|bootleg|flip)'

# Tried in this order; the first capture wins.
REMIXER_PATTERNS = (
    # "Song (DJ Kex Remix)" / "Song [DJ Kex Extended Mix]"
    re.compile(r'[(\[]\s*([^()\[\]]+?)\s+' + _QUALIFIER + r'\s*[)\]]', re.I),
    # "Song (Remix by DJ Kex)" / "Song [Remixed by DJ Kex]"
    re.compile(r'[(\[]\s*(?:remix(?:ed)?|mix(?:ed)?|edit(?:ed)?)\s+by\s+([^()\[\]]+?)\s*[)\]]', re.I),
    # "Song - DJ Kex Remix"
    re.compile(r'\s-\s+([^()\[\]-]+?)\s+' + _QUALIFIER + r'\s*$', re.I),
)

_ARTIST_FILLER_RE = re.compile(
    r'\b(music|band|orchestra|ensemble|trio|quartet|quintet)\b', re.I)


def is_stopword(term):
    return term in STOPWORDS or len(term) < 3


def normalize_tokens(title, preserve=()):
    """Lowercase, strip punctuation and drop stopwords from a title.

    Tokens listed in preserve (style/mood terms, version words) survive even
    when they would count as stopwords.
    """
    keep = set(preserve) | set(VERSION_TERMS)
    text = re.sub(r"[^\w\s'-]", ' ', (title or '').lower())
    return [t for t in text.split() if t in keep or not is_stopword(t)]


def cleanup_title(title, preserve=()):
    return ' '.join(normalize_tokens(title, preserve)).strip()


def cleanup_artist(artist):
    """Drop ensemble words ("Quartet", "Band") and punctuation from an artist."""
    s = _ARTIST_FILLER_RE.sub('', (artist or '').lower())
    s = re.sub(r'[^\w\s-]', '', s)
    return ' '.join(s.split())


def strip_query_quotes(text):
    """Remove characters that would break a quoted field query."""
    return ' '.join((text or '').replace('"', ' ').split())


def is_remix_version(title):
    """True when the title contains any version indicator, even inside a word
    ("Remastered", "Remixed by")."""
    title_lower = (title or '').lower()
    return any(indicator in title_lower for indicator in REMIX_INDICATORS)


def extract_remixer(title):
    """Pull the remixer label out of a version qualifier, or None."""
    if not title:
        return None
    for pattern in REMIXER_PATTERNS:
        match = pattern.search(title)
        if match:
            label = match.group(1).strip()
            if label:
                return label
    return None
