"""
Streaming URL resolution

Turns a TrackRecord into a URL the media backend and the peak extractor can
fetch. Tracks in the backend's own storage get short-lived signed URLs from
a backend function endpoint; everything else plays from its stored URL.

Resolvers never raise: a failed lookup is logged and falls back to the
track's stored URL (or None when there is none).
"""
import time
from typing import Callable, Dict, Optional, Protocol, Tuple, runtime_checkable

import httpx

from src.shared.domain.entities.track import TrackRecord
from src.utils.message import Log


@runtime_checkable
class StreamingUrlResolver(Protocol):
    """Resolves a track to a playable URL; returns None when there is none."""

    async def resolve_streaming_url(self, track: TrackRecord) -> Optional[str]:
        ...


@runtime_checkable
class SignedUrlProvider(Protocol):
    """Creates a short-lived signed URL for a stored track, or None."""

    async def create_signed_url(self, track: TrackRecord) -> Optional[str]:
        ...


class DirectUrlResolver:
    """Uses the track's stored URL as-is (local files, public hosting)."""

    async def resolve_streaming_url(self, track: TrackRecord) -> Optional[str]:
        return track.url

    async def create_signed_url(self, track: TrackRecord) -> Optional[str]:
        return None


class HttpStreamingUrlResolver:
    """
    Resolves streaming URLs through the backend's "get-track-url" function.

    Backend-hosted tracks without a URL, or with a public bucket URL, are
    exchanged for a signed URL by POSTing {"trackId": id} and reading "url"
    from the JSON response. Tracks from other storage providers keep their
    stored URL.
    """

    def __init__(
        self,
        endpoint: str,
        api_key: Optional[str] = None,
        timeout: float = 10.0,
        signed_url_ttl_seconds: int = 3600,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            endpoint: Full URL of the track URL function
            api_key: Optional bearer token sent with each request
            timeout: Request timeout in seconds
            signed_url_ttl_seconds: Requested signed URL lifetime
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self._endpoint = endpoint
        self._api_key = api_key
        self._timeout = timeout
        self._ttl = signed_url_ttl_seconds
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    async def _request_url(self, track: TrackRecord) -> Optional[str]:
        """POST to the endpoint; returns the signed URL or None on any failure."""
        if not self._endpoint:
            return None
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
                response = await client.post(
                    self._endpoint,
                    json={"trackId": track.id, "expiresIn": self._ttl},
                    headers=self._headers(),
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            Log.warning(
                f"HttpStreamingUrlResolver: Error getting secure URL for {track.id}: "
                f"HTTP {e.response.status_code}"
            )
            return None
        except httpx.RequestError as e:
            Log.warning(f"HttpStreamingUrlResolver: Failed to get secure URL for {track.id}: {e}")
            return None
        except ValueError as e:
            Log.warning(f"HttpStreamingUrlResolver: Invalid response for {track.id}: {e}")
            return None

        url = data.get("url") if isinstance(data, dict) else None
        return url or None

    async def resolve_streaming_url(self, track: TrackRecord) -> Optional[str]:
        if not track.is_backend_hosted:
            return track.url

        if not track.url or "/public/" in track.url:
            url = await self._request_url(track)
            if url:
                return url

        return track.url

    async def create_signed_url(self, track: TrackRecord) -> Optional[str]:
        if not track.is_backend_hosted or not track.storage_path:
            return None
        return await self._request_url(track)


class CachingUrlResolver:
    """
    Caches resolved URLs per track id until they expire.

    Signed URLs live for an hour; the default cache lifetime (50 minutes)
    hands out a cached URL only while it still has time left.
    """

    def __init__(
        self,
        inner: StreamingUrlResolver,
        ttl_seconds: float = 3000,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._inner = inner
        self._ttl = ttl_seconds
        self._clock = clock
        self._cache: Dict[str, Tuple[str, float]] = {}
        self._signed_cache: Dict[str, Tuple[str, float]] = {}

    def _lookup(self, cache: Dict[str, Tuple[str, float]], track_id: str) -> Optional[str]:
        entry = cache.get(track_id)
        if entry is None:
            return None
        url, expires = entry
        if expires > self._clock():
            return url
        del cache[track_id]
        return None

    def _store(self, cache: Dict[str, Tuple[str, float]], track_id: str, url: Optional[str]):
        if url and self._ttl > 0:
            cache[track_id] = (url, self._clock() + self._ttl)

    async def resolve_streaming_url(self, track: TrackRecord) -> Optional[str]:
        cached = self._lookup(self._cache, track.id)
        if cached is not None:
            Log.debug(f"CachingUrlResolver: Cache hit for {track.id}")
            return cached

        url = await self._inner.resolve_streaming_url(track)
        self._store(self._cache, track.id, url)
        return url

    async def create_signed_url(self, track: TrackRecord) -> Optional[str]:
        if not isinstance(self._inner, SignedUrlProvider):
            return None

        cached = self._lookup(self._signed_cache, track.id)
        if cached is not None:
            return cached

        url = await self._inner.create_signed_url(track)
        self._store(self._signed_cache, track.id, url)
        return url

    def invalidate(self, track_id: str) -> None:
        self._cache.pop(track_id, None)
        self._signed_cache.pop(track_id, None)

    def clear(self) -> None:
        self._cache.clear()
        self._signed_cache.clear()
