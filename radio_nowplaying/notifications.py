"""
Now-playing notifications for Radio Now Playing

Posts a Discord embed for every newly saved track. The embed color tells
operators how the track was resolved:
- Yellow: override applied (or nothing to report)
- Blue: trial station
- Green: song lookup found the track
- Red: song lookup attempted but found nothing

Notifications are fire-and-forget: NowPlayingNotifier.notify() returns
immediately and delivery runs on a daemon thread. Failures are logged and
never reach the request that triggered them. There are no retries.
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger(__name__)

COLORS = {
    'BLUE': 3447003,
    'GREEN': 3066993,
    'YELLOW': 16776960,
    'RED': 15158332,
}


def pick_embed_color(is_trial=False, override_applied=False,
                     spotify_attempted=False, spotify_found=False):
    """Select the embed color for a resolution outcome

    Examples:
        >>> pick_embed_color(override_applied=True, is_trial=True)
        16776960
        >>> pick_embed_color(spotify_attempted=True, spotify_found=False)
        15158332
    """
    if override_applied:
        return COLORS['YELLOW']
    if is_trial:
        return COLORS['BLUE']

    if spotify_attempted:
        return COLORS['GREEN'] if spotify_found else COLORS['RED']

    return COLORS['YELLOW']


def build_now_playing_embed(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Build the Discord embed for a resolved payload

    Args:
        payload: Resolved payload (see radio_nowplaying.pipeline)

    Returns:
        dict: Discord embed object
    """
    embed = {
        'title': 'Now Playing',
        'description': f"Artist: {payload.get('artist')}\nSong Name: {payload.get('title')}",
        'color': pick_embed_color(
            is_trial=payload.get('isTrial', False),
            override_applied=payload.get('overrideApplied', False),
            spotify_attempted=payload.get('spotifyAttempted', False),
            spotify_found=payload.get('spotifyFound', False),
        ),
        'timestamp': datetime.now(timezone.utc).isoformat(),
    }

    if payload.get('coverArt'):
        embed['thumbnail'] = {'url': payload['coverArt']}

    return embed


class NotificationHandler:
    """Base class for notification handlers"""

    def __init__(self, config: Dict[str, Any]):
        """Initialize handler with configuration

        Args:
            config: Provider-specific configuration
        """
        self.config = config
        self.enabled = config.get('enabled', True)

    def send(self, embed: Dict[str, Any]) -> bool:
        """Send notification

        Returns:
            bool: True if sent successfully, False otherwise
        """
        raise NotImplementedError("Subclasses must implement send()")


class DiscordHandler(NotificationHandler):
    """Discord webhook notifications"""

    def send(self, embed: Dict[str, Any]) -> bool:
        """Send Discord webhook notification

        Args:
            embed: Discord embed object

        Returns:
            bool: True if sent successfully
        """
        webhook_url = self.config.get('webhook_url')
        if not webhook_url:
            logger.debug("Discord webhook URL not configured")
            return False

        payload = {'embeds': [embed]}
        if self.config.get('username'):
            payload['username'] = self.config['username']

        try:
            response = requests.post(
                webhook_url,
                json=payload,
                timeout=self.config.get('timeout', 10)
            )
        except requests.RequestException as e:
            logger.error(f"Failed to send Discord notification: {e}")
            return False

        if 200 <= response.status_code < 300:
            logger.info(f"Discord notification sent: {embed.get('description', '').replace(chr(10), ' / ')}")
            return True

        logger.error(f"Discord webhook returned status {response.status_code}")
        return False


class NowPlayingNotifier:
    """Dispatches now-playing notifications without blocking the caller

    Args:
        handler: NotificationHandler (None disables notifications)
    """

    def __init__(self, handler: Optional[NotificationHandler] = None):
        self.handler = handler

    @classmethod
    def from_settings(cls, settings):
        discord_config = settings.get('notifications', {}).get('discord', {})
        if not discord_config.get('enabled', True) or not discord_config.get('webhook_url'):
            logger.info("Discord notifications disabled (no webhook configured)")
            return cls(None)
        return cls(DiscordHandler(discord_config))

    def send(self, payload: Dict[str, Any]) -> bool:
        """Send synchronously (used by the dispatch thread)

        Returns:
            bool: True if sent successfully
        """
        if not self.handler or not self.handler.enabled:
            return False

        try:
            return self.handler.send(build_now_playing_embed(payload))
        except Exception as e:
            logger.error(f"Notification handler failed: {e}")
            return False

    def notify(self, payload: Dict[str, Any]) -> Optional[threading.Thread]:
        """Dispatch a notification on a detached thread

        Args:
            payload: Resolved payload

        Returns:
            The started thread (tests join it), or None if disabled
        """
        if not self.handler or not self.handler.enabled:
            return None

        thread = threading.Thread(
            target=self.send,
            args=(dict(payload),),
            name='nowplaying-notify',
            daemon=True
        )
        thread.start()
        return thread
