"""
Artist/title sanitization for Radio Now Playing

Radio automation systems send titles full of production noise
("Song (Radio Edit)", "Song [Remastered 2011]") and put featured artists
in the artist field ("Artist (feat. Guest)"). This module turns them into
display-ready values.

Sanitization Rules (in order):
1. Trim both values
2. Move a parenthesized featured artist "(feat. X)" / "(ft. X)" out of the artist
3. Otherwise move an inline trailing "feat. X" / "ft. X" out of the artist
4. Append " (feat. X)" to the title unless it already credits someone
5. Remove bracketed noise tokens from the title (see NOISE_TOKENS)
6. Remove a dangling trailing dash from the title
7. Normalize whitespace in the artist

sanitize_artist_title() is idempotent: sanitizing its own output is a no-op.
"""

import re
import logging
from typing import NamedTuple

logger = logging.getLogger(__name__)


# Only the first marker found is relocated to the title
PAREN_FEAT_PATTERN = re.compile(r'\((feat\.|ft\.)\s*([^)]+)\)', re.IGNORECASE)
INLINE_FEAT_PATTERN = re.compile(r'\b(feat\.|ft\.)\s+(.+)$', re.IGNORECASE)

# "feat." / "ft." anywhere in the title, followed by anything
TITLE_FEAT_PATTERN = re.compile(r'\b(?:feat|ft)\.', re.IGNORECASE)

NOISE_TOKENS = (
    'radio edit',
    'edit',
    r'remaster(?:ed)?(?:\s*\d{4})?',
    'clean',
    'explicit',
    'mono',
    'stereo',
    'extended',
    'extended mix',
    'mix',
    'version',
)

NOISE_PATTERN = re.compile(
    r'\s*[\(\[]\s*(?:' + '|'.join(NOISE_TOKENS) + r')\s*[\)\]]\s*',
    re.IGNORECASE
)

TRAILING_DASH_PATTERN = re.compile(r'(?:\s*[-‐‑‒–—―])+\s*$')


class SanitizedMetadata(NamedTuple):
    artist: str
    title: str


def collapse_whitespace(text):
    """Multiple spaces, tabs, newlines → single space, trimmed"""
    return ' '.join(text.split())


def extract_featured_artist(artist):
    """Split a featured-artist marker off an artist string

    Args:
        artist: Trimmed artist string

    Returns:
        tuple: (artist_without_marker, featured_artist or "")

    Examples:
        >>> extract_featured_artist("Artist (feat. Guest)")
        ('Artist', 'Guest')
        >>> extract_featured_artist("Artist ft. Guest")
        ('Artist', 'Guest')
        >>> extract_featured_artist("Artist")
        ('Artist', '')
    """
    featured = ""

    paren = PAREN_FEAT_PATTERN.search(artist)
    if paren:
        featured = paren.group(2).strip()
        artist = artist.replace(paren.group(0), '', 1).strip()

    inline = INLINE_FEAT_PATTERN.search(artist)
    if inline:
        if not featured:
            featured = inline.group(2).strip()
        else:
            # Second marker is dropped, not relocated
            logger.debug(f"Ignoring second featured-artist marker: {inline.group(0)}")
        artist = artist[:inline.start()].strip()

    return artist, featured


def strip_title_noise(title):
    """Remove bracketed production/edition tokens and trailing dashes

    Examples:
        >>> strip_title_noise("Song (Radio Edit)")
        'Song'
        >>> strip_title_noise("Song [Remastered 2011] -")
        'Song'
        >>> strip_title_noise("Mixed Feelings")
        'Mixed Feelings'
        >>> strip_title_noise("Song ((Edit) Mix)")
        'Song'
    """
    # Removing an inner token can expose an outer one
    count = 1
    while count:
        title, count = NOISE_PATTERN.subn(' ', title)
    title = collapse_whitespace(title)
    return TRAILING_DASH_PATTERN.sub('', title).strip()


def sanitize_artist_title(artist, title):
    """Sanitize an artist/title pair for display and storage

    Args:
        artist: Raw artist (may be None)
        title: Raw title (may be None)

    Returns:
        SanitizedMetadata(artist, title)

    Examples:
        >>> sanitize_artist_title("Artist (feat. X)", "Song")
        SanitizedMetadata(artist='Artist', title='Song (feat. X)')
        >>> sanitize_artist_title("A", "Song (Radio Edit)")
        SanitizedMetadata(artist='A', title='Song')
        >>> sanitize_artist_title("A ft. B", "Song (feat. B)")
        SanitizedMetadata(artist='A', title='Song (feat. B)')
    """
    artist = (artist or "").strip()
    title = (title or "").strip()

    artist, featured = extract_featured_artist(artist)

    if featured and not TITLE_FEAT_PATTERN.search(title):
        title = f"{title} (feat. {featured})"

    title = strip_title_noise(title)
    artist = collapse_whitespace(artist)

    return SanitizedMetadata(artist, title)


def build_sanitise_summary(before_artist, before_title, after_artist, after_title):
    """Describe what sanitization changed

    Args:
        before_artist: Artist before sanitization
        before_title: Title before sanitization
        after_artist: Artist after sanitization
        after_title: Title after sanitization

    Returns:
        list: {'field', 'before', 'after'} dicts, one per changed field
    """
    summary = []

    before_artist = "" if before_artist is None else str(before_artist)
    before_title = "" if before_title is None else str(before_title)
    after_artist = "" if after_artist is None else str(after_artist)
    after_title = "" if after_title is None else str(after_title)

    if before_artist != after_artist:
        summary.append({'field': 'artist', 'before': before_artist, 'after': after_artist})
    if before_title != after_title:
        summary.append({'field': 'title', 'before': before_title, 'after': after_title})

    return summary
