"""
Now-playing resolution pipeline for Radio Now Playing

NowPlayingResolver turns the upstream feed into the payload served by /np
(main station) and / (trial station):

    fetch feed → extract → sanitize → apply override → song lookup
        → change gate → save history → notify

Change gate:
- The raw metadata key of the last processed track is kept in PipelineState
- If a request resolves the same key again, nothing is saved or notified and
  the cached payload is returned
- Main and trial requests share the same state, so either can suppress the
  other's duplicate

Idle track:
- When the station reports its own placeholder artist (between songs), the
  last real track is served instead: in-memory payload, else the last saved
  history row, else a "No history yet" payload. Nothing is saved or notified.

State is only written after every outbound call of a request has finished.
Two requests racing on a new key can both save and notify; duplicate
suppression is best-effort.
"""

import logging
import time
from typing import Any, Dict, Optional

from radio_nowplaying.extractor import RawFeedItem, extract_artist_title
from radio_nowplaying.sanitizer import sanitize_artist_title, build_sanitise_summary
from radio_nowplaying.lookup import get_cover_art, get_spotify_id

logger = logging.getLogger(__name__)

TRIAL_NOTICE = (
    "To access main server Now Playing, use endpoint /np. "
    "This data is for the trial server."
)

DEFAULT_PLACEHOLDER_ARTIST = "UpBeat"
NO_HISTORY_TITLE = "No history yet"


class PipelineState:
    """Last processed raw key and payload

    Created once at startup and shared by every request for the lifetime of
    the process.
    """

    def __init__(self):
        self.last_raw: Optional[str] = None
        self.last_payload: Optional[Dict[str, Any]] = None

    def is_duplicate(self, raw_key: str) -> bool:
        return bool(raw_key) and self.last_raw == raw_key

    def update(self, raw_key: str, payload: Dict[str, Any]) -> None:
        self.last_raw = raw_key
        self.last_payload = payload

    def get_last_payload(self) -> Optional[Dict[str, Any]]:
        return dict(self.last_payload) if self.last_payload else None


def with_trial_notice(payload, is_trial):
    """Prefix trial responses with the notice message"""
    if is_trial:
        return {'message': TRIAL_NOTICE, **payload}
    return payload


def _non_blank(value):
    if value is None:
        return None
    value = str(value).strip()
    return value or None


class NowPlayingResolver:
    """Resolves now-playing metadata for the main and trial stations

    Args:
        feed: NowPlayingFeed (fetch(station_id) -> now_playing dict)
        overrides: OverrideResolver
        lookup_client: SongLookupClient, or None to disable lookups
        history: NowPlayingDatabase (add_song_history, get_last_song)
        notifier: NowPlayingNotifier, or None to disable notifications
        state: PipelineState shared across requests
        placeholder_artist: Artist name the station reports when idle
        main_station_id: Upstream station ID served by /np
        trial_station_id: Upstream station ID served by /
        clock: Time source in seconds (savedAt timestamps)
    """

    def __init__(self, feed, overrides, lookup_client, history, notifier=None,
                 state=None, placeholder_artist=DEFAULT_PLACEHOLDER_ARTIST,
                 main_station_id=1, trial_station_id=2, clock=time.time):
        self.feed = feed
        self.overrides = overrides
        self.lookup_client = lookup_client
        self.history = history
        self.notifier = notifier
        self.state = state if state is not None else PipelineState()
        self.placeholder_artist = placeholder_artist
        self.main_station_id = main_station_id
        self.trial_station_id = trial_station_id
        self.clock = clock

    def resolve_main(self):
        return self.resolve(self.main_station_id, is_trial=False)

    def resolve_trial(self):
        return self.resolve(self.trial_station_id, is_trial=True)

    def is_placeholder(self, artist):
        """True if the station is reporting its own name instead of a track"""
        return (artist or "").strip().lower() == (self.placeholder_artist or "").strip().lower()

    def resolve(self, station_id, is_trial=False):
        """Resolve the current track for a station

        Args:
            station_id: Upstream station ID
            is_trial: Trial requests are never saved and carry TRIAL_NOTICE

        Returns:
            dict: Resolved payload

        Raises:
            requests.RequestException / ValueError: Feed fetch failed
            sqlite3.Error: Override or history store failed
        """
        now_playing = self.feed.fetch(station_id)
        item = RawFeedItem.from_now_playing(now_playing)
        extracted = extract_artist_title(item)
        raw_metadata = (extracted.raw or f"{extracted.artist} - {extracted.title}").strip()

        if self.is_placeholder(extracted.artist):
            logger.debug(f"Station {station_id} is idle ('{extracted.artist}'), serving last track")
            return with_trial_notice(self._idle_payload(raw_metadata), is_trial)

        # First pass: feed values
        base = sanitize_artist_title(extracted.artist, extracted.title)
        final_artist = base.artist
        final_title = base.title
        final_cover_art = item.art or None

        sanitised = build_sanitise_summary(extracted.artist, extracted.title, final_artist, final_title)

        # Second pass: override values are sanitized too
        override = self.overrides.resolve(raw_metadata)
        override_art = None
        if override:
            before_artist = final_artist
            before_title = final_title

            final_artist = _non_blank(override.get('new_artist')) or final_artist
            final_title = _non_blank(override.get('new_name')) or final_title
            override_art = _non_blank(override.get('new_art_url'))
            if override_art:
                final_cover_art = override_art

            again = sanitize_artist_title(final_artist, final_title)
            final_artist = again.artist
            final_title = again.title

            sanitised = sanitised + build_sanitise_summary(before_artist, before_title, final_artist, final_title)

        spotify = None
        spotify_attempted = False

        if not override_art and self.lookup_client is not None:
            spotify_attempted = True
            spotify = self.lookup_client.lookup(final_title, final_artist)

            cover = get_cover_art(spotify)
            if cover:
                final_cover_art = cover

        if self.state.is_duplicate(raw_metadata):
            logger.debug(f"Unchanged track '{raw_metadata}', skipping save")
            cached = self.state.get_last_payload() or {
                'artist': final_artist,
                'title': final_title,
                'coverArt': final_cover_art,
                'rawMetadata': raw_metadata,
                'overrideApplied': bool(override),
                'spotifyFound': bool(spotify),
                'spotifyId': get_spotify_id(spotify),
                'skippedSave': True,
                'sanitised': sanitised,
                'isTrial': is_trial,
                'spotifyAttempted': spotify_attempted,
            }
            return with_trial_notice(cached, is_trial)

        if not is_trial:
            self.history.add_song_history(final_title, final_artist, final_cover_art, raw_metadata)

        payload = {
            'artist': final_artist,
            'title': final_title,
            'coverArt': final_cover_art,
            'rawMetadata': raw_metadata,
            'overrideApplied': bool(override),
            'spotifyFound': bool(spotify),
            'spotifyId': get_spotify_id(spotify),
            'saved': not is_trial,
            'savedAt': int(self.clock() * 1000),
            'sanitised': sanitised,
            'isTrial': is_trial,
            'spotifyAttempted': spotify_attempted,
        }

        self.state.update(raw_metadata, payload)
        logger.info(f"Now playing{' (trial)' if is_trial else ''}: {final_artist} - {final_title}")

        self._dispatch(payload)
        return with_trial_notice(dict(payload), is_trial)

    def _idle_payload(self, raw_metadata):
        """Payload served while the station plays its placeholder"""
        last = self.state.get_last_payload()
        if last:
            return last

        last_song = self.history.get_last_song()
        if last_song:
            return {
                'artist': last_song['artist_name'],
                'title': last_song['song_name'],
                'coverArt': last_song['album_art_url'],
                'rawMetadata': last_song['raw_metadata'],
                'source': 'db_fallback',
                'sanitised': [],
            }

        return {
            'artist': self.placeholder_artist,
            'title': NO_HISTORY_TITLE,
            'coverArt': None,
            'rawMetadata': raw_metadata,
            'source': 'none',
            'sanitised': [],
        }

    def _dispatch(self, payload):
        if self.notifier is None:
            return
        try:
            self.notifier.notify(payload)
        except Exception as e:
            logger.warning(f"Could not dispatch now playing notification: {e}")


def build_resolver(settings, database, state=None, feed=None, lookup_client=None,
                   notifier=None):
    """Wire a NowPlayingResolver from settings

    Args:
        settings: Settings dict (radio_nowplaying.settings)
        database: Connected NowPlayingDatabase (override + history store)
        state: Optional shared PipelineState
        feed / lookup_client / notifier: Optional replacements (tests)

    Returns:
        NowPlayingResolver
    """
    from radio_nowplaying.feed import NowPlayingFeed
    from radio_nowplaying.lookup import SongLookupClient
    from radio_nowplaying.notifications import NowPlayingNotifier
    from radio_nowplaying.overrides import OverrideCache, OverrideResolver

    feed_config = settings.get('feed', {})
    overrides_config = settings.get('overrides', {})

    if lookup_client is None and settings.get('lookup', {}).get('enabled', True):
        lookup_client = SongLookupClient.from_settings(settings)

    return NowPlayingResolver(
        feed=feed or NowPlayingFeed.from_settings(settings),
        overrides=OverrideResolver(database, OverrideCache(ttl=overrides_config.get('cache_ttl', 60))),
        lookup_client=lookup_client,
        history=database,
        notifier=notifier if notifier is not None else NowPlayingNotifier.from_settings(settings),
        state=state,
        placeholder_artist=feed_config.get('placeholder_artist', DEFAULT_PLACEHOLDER_ARTIST),
        main_station_id=feed_config.get('main_station_id', 1),
        trial_station_id=feed_config.get('trial_station_id', 2),
    )
