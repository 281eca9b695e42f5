"""Storage access: streaming and signed URL resolution."""
from src.infrastructure.storage.streaming_url_resolver import (
    CachingUrlResolver,
    DirectUrlResolver,
    HttpStreamingUrlResolver,
    SignedUrlProvider,
    StreamingUrlResolver,
)

__all__ = [
    'CachingUrlResolver',
    'DirectUrlResolver',
    'HttpStreamingUrlResolver',
    'SignedUrlProvider',
    'StreamingUrlResolver',
]
