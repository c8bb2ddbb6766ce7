"""Client and payload schemas for the remote VocaSync job API."""

from vocasync.api.client import VocaSyncClient, create_client, get_streaming_urls

__all__ = ["VocaSyncClient", "create_client", "get_streaming_urls"]
