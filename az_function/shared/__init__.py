"""Shared code for the Tour Tracker artists proxy function app.

Currently exposes:
    handle_request - CORS, configuration check and routing for /artists.
    ArtistListService - read-modify-write operations over the stored artist list.
    ContentStoreClient - GitHub contents API read and sha-conditioned write.
"""

from .artists import ArtistListService, MutationResult, Outcome
from .config import ProxyConfig, load_config
from .content_store import ContentStoreClient, StoredContent
from .http_api import handle_request

__all__ = [
    "ArtistListService",
    "ContentStoreClient",
    "MutationResult",
    "Outcome",
    "ProxyConfig",
    "StoredContent",
    "handle_request",
    "load_config",
]
