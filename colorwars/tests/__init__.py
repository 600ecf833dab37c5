"""Tests for the ColorWars engine, bots, sessions and API."""
