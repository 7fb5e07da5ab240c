"""HTTP boundary: aiohttp routes, caller resolution and role policy."""
