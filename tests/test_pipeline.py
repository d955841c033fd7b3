"""
Resolution pipeline tests

Tests the change gate, override application, song lookup short-circuit,
idle-track fallbacks and the trial station variant.
"""

import sqlite3

import pytest
import requests

from radio_nowplaying.pipeline import TRIAL_NOTICE, PipelineState
from tests.conftest import now_playing, history_rows


LOOKUP_RESULT = {
    'spotify_id': 'sp-123',
    'covers': {'big': 'https://covers.test/big.jpg'},
}


@pytest.mark.unit
class TestNormalPath:
    """Test a new track flowing through the pipeline"""

    def test_new_track_is_saved_and_notified(self, resolver, fake_feed, fake_notifier, test_db):
        fake_feed.set(1, now_playing('Artist (feat. Guest)', 'Song (Radio Edit)', 'Artist (feat. Guest) - Song (Radio Edit)'))

        payload = resolver.resolve_main()

        assert payload['artist'] == 'Artist'
        assert payload['title'] == 'Song (feat. Guest)'
        assert payload['rawMetadata'] == 'Artist (feat. Guest) - Song (Radio Edit)'
        assert payload['saved'] is True
        assert payload['isTrial'] is False
        assert payload['overrideApplied'] is False
        assert 'message' not in payload

        rows = history_rows(test_db)
        assert len(rows) == 1
        assert rows[0]['artist_name'] == 'Artist'
        assert rows[0]['song_name'] == 'Song (feat. Guest)'
        assert rows[0]['raw_metadata'] == 'Artist (feat. Guest) - Song (Radio Edit)'

        assert len(fake_notifier.payloads) == 1
        assert fake_notifier.payloads[0]['title'] == 'Song (feat. Guest)'

    def test_sanitise_change_log(self, resolver, fake_feed):
        fake_feed.set(1, now_playing('Artist  ft. Guest', 'Song [Explicit]'))

        payload = resolver.resolve_main()

        assert payload['sanitised'] == [
            {'field': 'artist', 'before': 'Artist  ft. Guest', 'after': 'Artist'},
            {'field': 'title', 'before': 'Song [Explicit]', 'after': 'Song (feat. Guest)'},
        ]

    def test_raw_key_synthesized_without_free_text(self, resolver, fake_feed):
        fake_feed.set(1, now_playing('Artist', 'Song'))

        payload = resolver.resolve_main()

        assert payload['rawMetadata'] == 'Artist - Song'
        assert payload['sanitised'] == []

    def test_free_text_only_feed(self, resolver, fake_feed):
        fake_feed.set(1, now_playing(text='A - B - C'))

        payload = resolver.resolve_main()

        assert payload['artist'] == 'A'
        assert payload['title'] == 'B - C'
        assert payload['rawMetadata'] == 'A - B - C'

    def test_feed_cover_art_used_when_lookup_finds_nothing(self, resolver, fake_feed, fake_lookup):
        fake_feed.set(1, now_playing('Artist', 'Song', art='https://feed.test/art.jpg'))
        fake_lookup.result = None

        payload = resolver.resolve_main()

        assert payload['coverArt'] == 'https://feed.test/art.jpg'
        assert payload['spotifyAttempted'] is True
        assert payload['spotifyFound'] is False
        assert payload['spotifyId'] is None

    def test_lookup_cover_art_supersedes_feed_art(self, resolver, fake_feed, fake_lookup):
        fake_feed.set(1, now_playing('Artist', 'Song (Mono)', art='https://feed.test/art.jpg'))
        fake_lookup.result = LOOKUP_RESULT

        payload = resolver.resolve_main()

        assert fake_lookup.calls == [('Song', 'Artist')]
        assert payload['coverArt'] == 'https://covers.test/big.jpg'
        assert payload['spotifyFound'] is True
        assert payload['spotifyId'] == 'sp-123'

    def test_saved_at_uses_clock(self, resolver, fake_feed, clock):
        fake_feed.set(1, now_playing('Artist', 'Song'))

        payload = resolver.resolve_main()

        assert payload['savedAt'] == int(clock.now * 1000)

    def test_lookup_disabled(self, resolver, fake_feed):
        resolver.lookup_client = None
        fake_feed.set(1, now_playing('Artist', 'Song'))

        payload = resolver.resolve_main()

        assert payload['spotifyAttempted'] is False
        assert payload['spotifyFound'] is False


@pytest.mark.unit
class TestChangeGate:
    """Test duplicate suppression"""

    def test_same_track_saved_once(self, resolver, fake_feed, fake_notifier, test_db):
        fake_feed.set(1, now_playing('Artist', 'Song', 'Artist - Song'))

        first = resolver.resolve_main()
        second = resolver.resolve_main()

        assert len(history_rows(test_db)) == 1
        assert len(fake_notifier.payloads) == 1
        assert second == first

    def test_cached_payload_is_a_copy(self, resolver, fake_feed):
        fake_feed.set(1, now_playing('Artist', 'Song'))

        resolver.resolve_main()
        second = resolver.resolve_main()
        second['artist'] = 'Changed'

        assert resolver.state.last_payload['artist'] == 'Artist'

    def test_changed_track_saved_again(self, resolver, fake_feed, fake_notifier, test_db):
        fake_feed.set(1, now_playing('Artist', 'Song 1'))
        resolver.resolve_main()

        fake_feed.set(1, now_playing('Artist', 'Song 2'))
        resolver.resolve_main()

        assert [row['song_name'] for row in history_rows(test_db)] == ['Song 1', 'Song 2']
        assert len(fake_notifier.payloads) == 2
        assert resolver.state.last_raw == 'Artist - Song 2'

    def test_skipped_save_without_cached_payload(self, resolver, fake_feed, fake_notifier, test_db):
        # Key known but no payload cached
        resolver.state.last_raw = 'Artist - Song'
        fake_feed.set(1, now_playing('Artist', 'Song'))

        payload = resolver.resolve_main()

        assert payload['skippedSave'] is True
        assert payload['artist'] == 'Artist'
        assert 'saved' not in payload
        assert history_rows(test_db) == []
        assert fake_notifier.payloads == []

    def test_lookup_still_attempted_for_duplicates(self, resolver, fake_feed, fake_lookup):
        fake_feed.set(1, now_playing('Artist', 'Song'))

        resolver.resolve_main()
        resolver.resolve_main()

        assert len(fake_lookup.calls) == 2

    def test_notifier_errors_do_not_fail_resolution(self, resolver, fake_feed, test_db):
        class BrokenNotifier:
            def notify(self, payload):
                raise RuntimeError("webhook down")

        resolver.notifier = BrokenNotifier()
        fake_feed.set(1, now_playing('Artist', 'Song'))

        payload = resolver.resolve_main()

        assert payload['saved'] is True
        assert len(history_rows(test_db)) == 1


@pytest.mark.unit
class TestOverrides:
    """Test override application"""

    def test_override_fields_replace_sanitized_values(self, resolver, fake_feed, test_db):
        test_db.add_meta_override('ARTIST - SONG', new_artist='Real Artist', new_name='Real Song')
        fake_feed.set(1, now_playing('ARTIST', 'SONG', 'ARTIST - SONG'))

        payload = resolver.resolve_main()

        assert payload['artist'] == 'Real Artist'
        assert payload['title'] == 'Real Song'
        assert payload['overrideApplied'] is True
        assert history_rows(test_db)[0]['artist_name'] == 'Real Artist'

    def test_override_values_are_sanitized(self, resolver, fake_feed):
        resolver.overrides.store.add_meta_override(
            'x - y', new_artist='Real (feat. Guest)', new_name='Real Song (Remastered 2009)'
        )
        fake_feed.set(1, now_playing(text='x - y'))

        payload = resolver.resolve_main()

        assert payload['artist'] == 'Real'
        assert payload['title'] == 'Real Song (feat. Guest)'
        assert payload['sanitised'] == [
            {'field': 'artist', 'before': 'x', 'after': 'Real'},
            {'field': 'title', 'before': 'y', 'after': 'Real Song (feat. Guest)'},
        ]

    def test_blank_override_fields_are_ignored(self, resolver, fake_feed, test_db):
        cursor = test_db.get_cursor()
        cursor.execute("""
            INSERT INTO meta_overrides (raw_metadata, new_name, new_artist, new_art_url)
            VALUES ('Artist - Song', 'Better Song', '   ', '')
        """)
        test_db.conn.commit()
        cursor.close()
        fake_feed.set(1, now_playing('Artist', 'Song'))

        payload = resolver.resolve_main()

        assert payload['artist'] == 'Artist'
        assert payload['title'] == 'Better Song'
        assert payload['spotifyAttempted'] is True

    def test_override_art_skips_lookup(self, resolver, fake_feed, fake_lookup, test_db):
        test_db.add_meta_override('Artist - Song', new_art_url='https://override.test/art.jpg')
        fake_feed.set(1, now_playing('Artist', 'Song', art='https://feed.test/art.jpg'))
        fake_lookup.result = LOOKUP_RESULT

        payload = resolver.resolve_main()

        assert fake_lookup.calls == []
        assert payload['spotifyAttempted'] is False
        assert payload['coverArt'] == 'https://override.test/art.jpg'

    def test_newest_override_wins(self, resolver, fake_feed, test_db):
        test_db.add_meta_override('Artist - Song', new_name='First')
        test_db.add_meta_override('Artist - Song', new_name='Second')
        fake_feed.set(1, now_playing('Artist', 'Song'))

        assert resolver.resolve_main()['title'] == 'Second'

    def test_override_store_failure_is_fatal(self, resolver, fake_feed, test_db):
        fake_feed.set(1, now_playing('Artist', 'Song'))
        cursor = test_db.get_cursor()
        cursor.execute("DROP TABLE meta_overrides")
        test_db.conn.commit()
        cursor.close()

        with pytest.raises(sqlite3.Error):
            resolver.resolve_main()

        assert history_rows(test_db) == []
        assert resolver.state.last_raw is None


@pytest.mark.unit
class TestIdleTrack:
    """Test the placeholder-artist short-circuit"""

    def test_returns_last_payload(self, resolver, fake_feed, fake_lookup, fake_notifier, test_db):
        fake_feed.set(1, now_playing('Artist', 'Song'))
        first = resolver.resolve_main()

        fake_feed.set(1, now_playing('  upbeat ', 'Station ID'))
        payload = resolver.resolve_main()

        assert payload == first
        assert len(fake_lookup.calls) == 1
        assert len(fake_notifier.payloads) == 1
        assert len(history_rows(test_db)) == 1

    def test_falls_back_to_history(self, resolver, fake_feed, test_db):
        test_db.add_song_history('Old Song', 'Old Artist', 'https://art.test/old.jpg', 'Old Artist - Old Song')
        fake_feed.set(1, now_playing('UpBeat', 'Live', 'UpBeat - Live'))

        payload = resolver.resolve_main()

        assert payload == {
            'artist': 'Old Artist',
            'title': 'Old Song',
            'coverArt': 'https://art.test/old.jpg',
            'rawMetadata': 'Old Artist - Old Song',
            'source': 'db_fallback',
            'sanitised': [],
        }

    def test_no_history_yet(self, resolver, fake_feed, fake_lookup, test_db):
        fake_feed.set(1, now_playing('UPBEAT', 'Live', 'UpBeat - Live'))

        payload = resolver.resolve_main()

        assert payload == {
            'artist': 'UpBeat',
            'title': 'No history yet',
            'coverArt': None,
            'rawMetadata': 'UpBeat - Live',
            'source': 'none',
            'sanitised': [],
        }
        assert fake_lookup.calls == []
        assert history_rows(test_db) == []
        assert resolver.state.last_raw is None

    def test_idle_trial_carries_notice(self, resolver, fake_feed):
        fake_feed.set(2, now_playing('UpBeat', 'Live'))

        payload = resolver.resolve_trial()

        assert list(payload)[0] == 'message'
        assert payload['message'] == TRIAL_NOTICE
        assert payload['source'] == 'none'


@pytest.mark.unit
class TestTrialStation:
    """Test the trial station variant"""

    def test_trial_never_saved(self, resolver, fake_feed, fake_notifier, test_db):
        fake_feed.set(2, now_playing('Artist', 'Song'))

        payload = resolver.resolve_trial()

        assert fake_feed.calls == [2]
        assert payload['message'] == TRIAL_NOTICE
        assert list(payload)[0] == 'message'
        assert payload['saved'] is False
        assert payload['isTrial'] is True
        assert history_rows(test_db) == []
        # Trial tracks are still notified
        assert len(fake_notifier.payloads) == 1
        assert 'message' not in fake_notifier.payloads[0]

    def test_main_never_carries_notice(self, resolver, fake_feed):
        fake_feed.set(1, now_playing('Artist', 'Song'))

        assert 'message' not in resolver.resolve_main()
        assert 'message' not in resolver.resolve_main()

    def test_trial_and_main_share_change_gate(self, resolver, fake_feed, test_db):
        fake_feed.set(1, now_playing('Artist', 'Song'))
        fake_feed.set(2, now_playing('Artist', 'Song'))

        trial = resolver.resolve_trial()
        main = resolver.resolve_main()

        # The trial run claimed the key, so the main run skips the save
        assert history_rows(test_db) == []
        assert main['isTrial'] is True
        assert 'message' not in main
        assert trial['message'] == TRIAL_NOTICE

    def test_main_cached_payload_gets_notice_on_trial(self, resolver, fake_feed):
        fake_feed.set(1, now_playing('Artist', 'Song'))
        fake_feed.set(2, now_playing('Artist', 'Song'))

        main = resolver.resolve_main()
        trial = resolver.resolve_trial()

        assert trial == {'message': TRIAL_NOTICE, **main}


@pytest.mark.unit
class TestFeedFailures:
    """Test upstream feed errors"""

    def test_feed_error_propagates(self, resolver, fake_feed, test_db):
        fake_feed.error = requests.ConnectionError("feed down")

        with pytest.raises(requests.ConnectionError):
            resolver.resolve_main()

        assert history_rows(test_db) == []

    def test_missing_song_object(self, resolver, fake_feed):
        fake_feed.set(1, None)

        payload = resolver.resolve_main()

        assert payload['artist'] == 'Unknown'
        assert payload['title'] == 'Unknown'
        assert payload['rawMetadata'] == 'Unknown'

    def test_malformed_song_object(self, resolver, fake_feed, test_db):
        fake_feed.set(1, {'song': 'Artist - Song'})

        payload = resolver.resolve_main()

        assert payload['artist'] == 'Unknown'
        assert payload['rawMetadata'] == 'Unknown'
        assert len(history_rows(test_db)) == 1


@pytest.mark.unit
class TestPipelineState:
    def test_empty_state(self):
        state = PipelineState()
        assert state.last_raw is None
        assert state.get_last_payload() is None
        assert not state.is_duplicate('')

    def test_blank_key_is_never_duplicate(self):
        state = PipelineState()
        state.update('', {'artist': 'A'})
        assert not state.is_duplicate('')
