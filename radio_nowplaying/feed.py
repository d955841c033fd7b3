"""
Upstream now-playing feed client for Radio Now Playing

Fetches the station's now-playing document:
    GET http://dj.upbeat.pw/api/nowplaying/{station_id}

Only now_playing.song.{artist,title,text,art} is used. A failed fetch is
fatal to the request that needed it, so errors are logged and re-raised.
"""

import logging

import requests

logger = logging.getLogger(__name__)

DEFAULT_URL_TEMPLATE = 'http://dj.upbeat.pw/api/nowplaying/{station_id}'


class NowPlayingFeed:
    """HTTP client for the upstream now-playing API

    Args:
        url_template: URL with a {station_id} placeholder
        timeout: Request timeout in seconds
        session: Optional requests.Session
    """

    def __init__(self, url_template=DEFAULT_URL_TEMPLATE, timeout=15, session=None):
        self.url_template = url_template
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings):
        feed_config = settings.get('feed', {})
        return cls(
            url_template=feed_config.get('url_template', DEFAULT_URL_TEMPLATE),
            timeout=feed_config.get('timeout', 15),
        )

    def fetch(self, station_id):
        """Fetch the now_playing object for a station

        Args:
            station_id: Numeric station ID

        Returns:
            dict or None: The document's now_playing object

        Raises:
            requests.RequestException: On transport errors or non-2xx status
            ValueError: If the body is not a JSON object
        """
        url = self.url_template.format(station_id=station_id)

        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            logger.error(f"Now playing fetch failed for station {station_id}: {e}")
            raise

        if not isinstance(data, dict):
            raise ValueError(f"GET {url} returned {type(data).__name__}, expected an object")

        return data.get('now_playing')
