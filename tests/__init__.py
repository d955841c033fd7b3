"""
Radio Now Playing Test Suite

Test Files:
- conftest.py: Pytest fixtures, fakes and configuration
- test_extractor.py: Feed record extraction
- test_overrides.py: Override cache and resolver
- test_lookup.py: Song lookup and feed client error handling
- test_notifications.py: Embed colors and fire-and-forget dispatch
- test_pipeline.py: Change gate, overrides, idle track, trial station
- test_database.py: Schema, CRUD and queries
- test_api.py: HTTP endpoints
- test_settings.py: Settings loading and merging
- test_cli.py: Command-line override and history commands
- test_logging_setup.py: Console/file handlers and quieted loggers

Running Tests:
    # Run all tests
    pytest

    # Run only unit tests
    pytest -m unit

"""
