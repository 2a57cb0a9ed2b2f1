"""MusicBrainz web-service access: client, transport, rate limiter, URIs."""

from mbgraph.providers.musicbrainz.client import MusicBrainzClient
from mbgraph.providers.musicbrainz.rate_limiter import RateLimiter, RatePolicy
from mbgraph.providers.musicbrainz.transport import Transport

__all__ = ["MusicBrainzClient", "RateLimiter", "RatePolicy", "Transport"]
