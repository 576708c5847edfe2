"""Tests for the component render service."""
