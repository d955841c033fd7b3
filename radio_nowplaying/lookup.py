"""
Song lookup client for Radio Now Playing

Queries the song lookup service for canonical cover art (and the Spotify ID)
of a sanitized artist/title pair.

Response format:
    {"error": false, "found": true,
     "result": {"spotify_id": "...", "covers": {"big": "https://..."}}}

The lookup is enrichment only: transport errors, non-2xx responses and
malformed bodies are logged and reported as "not found".
"""

import logging

import requests

logger = logging.getLogger(__name__)

DEFAULT_LOOKUP_URL = 'https://tools.liftuphosting.com/api/v2/lookup/song'


def get_cover_art(result):
    """Get the large cover URL from a lookup result (None if absent)"""
    covers = (result or {}).get('covers')
    if not isinstance(covers, dict):
        return None
    return covers.get('big') or None


def get_spotify_id(result):
    """Get the Spotify ID from a lookup result (None if absent)"""
    result = result or {}
    return result.get('spotify_id') or result.get('spotifyId') or None


class SongLookupClient:
    """HTTP client for the song lookup service

    Args:
        url: Lookup endpoint
        timeout: Request timeout in seconds
        session: Optional requests.Session
    """

    def __init__(self, url=DEFAULT_LOOKUP_URL, timeout=15, session=None):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings):
        lookup_config = settings.get('lookup', {})
        return cls(
            url=lookup_config.get('url', DEFAULT_LOOKUP_URL),
            timeout=lookup_config.get('timeout', 15),
        )

    def lookup(self, title, artist):
        """Look up a song

        Args:
            title: Sanitized song title
            artist: Sanitized artist name

        Returns:
            dict: The service's result object if found, else None
        """
        try:
            response = self.session.get(
                self.url,
                params={'title': title, 'artist': artist},
                timeout=self.timeout
            )
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            logger.warning(f"Song lookup failed for '{artist} - {title}': {e}")
            return None
        except ValueError as e:
            logger.warning(f"Song lookup returned invalid JSON for '{artist} - {title}': {e}")
            return None

        if not isinstance(data, dict):
            logger.warning(f"Song lookup returned unexpected response: {type(data).__name__}")
            return None

        result = data.get('result')
        if data.get('error') is False and data.get('found') and isinstance(result, dict):
            logger.debug(f"Song lookup found '{artist} - {title}': {get_spotify_id(result)}")
            return result

        logger.debug(f"Song lookup: no match for '{artist} - {title}'")
        return None
