"""
Now-playing extraction for Radio Now Playing

Turns the upstream "now playing" song record into a best-effort
(artist, title, raw) triple. The raw string is the key used for change
detection and override lookups, so it is never empty.

Extraction order:
1. Structured artist + title fields (raw = free text, else "artist - title")
2. Free text split on " - " (first part artist, rest title)
3. "Unknown" fallbacks
"""

import logging
from typing import NamedTuple, Optional

logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"
SEPARATOR = " - "


def _as_text(value):
    """Feed fields may be missing, None or numbers"""
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


class RawFeedItem(NamedTuple):
    """Song record as reported by the upstream feed"""
    artist: str = ""
    title: str = ""
    text: str = ""
    art: Optional[str] = None

    @classmethod
    def from_now_playing(cls, now_playing):
        """Build from the feed's now_playing object (may be None)

        Examples:
            >>> RawFeedItem.from_now_playing({'song': {'artist': 'A', 'title': 'B'}})
            RawFeedItem(artist='A', title='B', text='', art=None)
            >>> RawFeedItem.from_now_playing(None)
            RawFeedItem(artist='', title='', text='', art=None)
        """
        if not isinstance(now_playing, dict):
            now_playing = {}
        song = now_playing.get('song')
        if not isinstance(song, dict):
            song = {}
        art = song.get('art')
        return cls(
            artist=_as_text(song.get('artist')),
            title=_as_text(song.get('title')),
            text=_as_text(song.get('text')),
            art=art if isinstance(art, str) and art else None,
        )


class ExtractedMetadata(NamedTuple):
    artist: str
    title: str
    raw: str


def extract_artist_title(item):
    """Extract artist, title and raw metadata from a feed record

    Never fails: anything that cannot be parsed falls back to "Unknown".

    Args:
        item: RawFeedItem

    Returns:
        ExtractedMetadata

    Examples:
        >>> extract_artist_title(RawFeedItem(artist='A', title='B'))
        ExtractedMetadata(artist='A', title='B', raw='A - B')
        >>> extract_artist_title(RawFeedItem(text='A - B - C'))
        ExtractedMetadata(artist='A', title='B - C', raw='A - B - C')
        >>> extract_artist_title(RawFeedItem())
        ExtractedMetadata(artist='Unknown', title='Unknown', raw='Unknown')
    """
    artist = item.artist or ""
    title = item.title or ""
    text = item.text or ""

    if artist and title:
        return ExtractedMetadata(artist, title, text or f"{artist}{SEPARATOR}{title}")

    parts = text.split(SEPARATOR)
    if len(parts) >= 2:
        logger.debug(f"Split free text into artist/title: {text}")
        return ExtractedMetadata(
            parts[0].strip(),
            SEPARATOR.join(parts[1:]).strip(),
            text,
        )

    return ExtractedMetadata(artist or UNKNOWN, title or UNKNOWN, text or UNKNOWN)
