"""Integration tests against the HTTP application."""
