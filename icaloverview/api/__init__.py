"""aiohttp server wiring for icaloverview."""
