"""Shared infrastructure: configuration, HTTP client, source store, time."""
