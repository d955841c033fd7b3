"""
Pytest configuration and fixtures for Radio Now Playing tests

Provides a temporary database, fake collaborators (feed, lookup, notifier),
a wired resolver, and Flask app/client fixtures.
"""

import pytest
import tempfile
import os
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from radio_nowplaying.database import NowPlayingDatabase
from radio_nowplaying.overrides import OverrideCache, OverrideResolver
from radio_nowplaying.pipeline import NowPlayingResolver, PipelineState
from radio_nowplaying.settings import DEFAULT_SETTINGS, merge_settings


def now_playing(artist=None, title=None, text=None, art=None):
    """Build a now_playing object the way the upstream feed sends it"""
    return {'song': {'artist': artist, 'title': title, 'text': text, 'art': art}}


class FakeFeed:
    """Feed returning a fixed (settable) now_playing object per station"""

    def __init__(self):
        self.documents = {}
        self.calls = []
        self.error = None

    def set(self, station_id, document):
        self.documents[station_id] = document

    def fetch(self, station_id):
        self.calls.append(station_id)
        if self.error:
            raise self.error
        return self.documents.get(station_id)


class FakeLookup:
    """Song lookup returning a configurable result"""

    def __init__(self, result=None):
        self.result = result
        self.calls = []

    def lookup(self, title, artist):
        self.calls.append((title, artist))
        return self.result


class FakeNotifier:
    """Notifier recording payloads instead of posting them"""

    def __init__(self):
        self.payloads = []
        self.handler = object()

    def notify(self, payload):
        self.payloads.append(payload)


class FakeClock:
    def __init__(self, now=1_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def test_db_path():
    """Provide a temporary database file path"""
    fd, path = tempfile.mkstemp(suffix='.db')
    os.close(fd)
    yield path
    try:
        os.unlink(path)
    except FileNotFoundError:
        pass


@pytest.fixture
def test_db(test_db_path):
    """Provide a connected database with the schema initialized"""
    db = NowPlayingDatabase(test_db_path)
    db.connect()

    yield db

    db.close()


@pytest.fixture
def test_settings(test_db_path):
    """Settings with file logging and notifications disabled"""
    return merge_settings(DEFAULT_SETTINGS, {
        'database': {'file': test_db_path},
        'logging': {'file': ''},
        'notifications': {'discord': {'webhook_url': ''}},
    })


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_feed():
    return FakeFeed()


@pytest.fixture
def fake_lookup():
    return FakeLookup()


@pytest.fixture
def fake_notifier():
    return FakeNotifier()


@pytest.fixture
def resolver(test_db, fake_feed, fake_lookup, fake_notifier, clock):
    """Resolver wired to the test database and fake collaborators"""
    return NowPlayingResolver(
        feed=fake_feed,
        overrides=OverrideResolver(test_db, OverrideCache(ttl=60, clock=clock)),
        lookup_client=fake_lookup,
        history=test_db,
        notifier=fake_notifier,
        state=PipelineState(),
        placeholder_artist='UpBeat',
        main_station_id=1,
        trial_station_id=2,
        clock=clock,
    )


@pytest.fixture
def test_app(test_db, test_settings, resolver):
    """Provide the Flask app initialized with the test resolver"""
    from radio_nowplaying.web import app, init_app

    init_app(test_db, test_settings, pipeline=resolver, configure_logging=False)
    app.config['TESTING'] = True

    yield app


@pytest.fixture
def test_client(test_app):
    """Provide a Flask test client"""
    return test_app.test_client()


def history_rows(db):
    """All saved history rows, oldest first"""
    return list(reversed(db.get_recent_history(limit=1000)))


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
