"""HTTP edge for rss2ical (aiohttp)."""
