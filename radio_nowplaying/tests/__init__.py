"""Unit tests for radio_nowplaying modules"""
