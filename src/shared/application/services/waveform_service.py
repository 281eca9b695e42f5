"""
Waveform Service

Turns an audio resource into min/max peak pairs for waveform rendering.

Design:
- Peaks are an (N, 2) float32 array of (min, max) raw sample extrema, one
  row per output pixel column (detailed view) or per fixed bucket (200 for
  the peak view, 50 for bars).
- Only the first channel is read; other channels are ignored, not averaged.
- Extrema, not RMS, so sharp transients stay visible at low resolution.
- Fetch/decode failures become a recoverable error: the PeakLoader publishes
  a deterministic placeholder with its error field set. Placeholder values
  look like real peaks; only the error field tells them apart.
- Each PeakLoader owns one authoritative result. Every request bumps a
  generation counter and results for older generations are discarded.
"""
import asyncio
import io
import zlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Tuple
from urllib.parse import unquote, urlparse

import httpx
import numpy as np
import soundfile as sf

from src.shared.domain.entities.track import TrackRecord
from src.shared.domain.errors import (
    DecodeError,
    ErrorKind,
    PlaybackCoreError,
    ResourceFetchError,
    StaleResultDiscarded,
)
from src.utils.message import Log


# Placeholder shape: min in [-0.5, -0.2], max in [0.2, 0.5]
PLACEHOLDER_BASE = 0.5
PLACEHOLDER_SPREAD = 0.3


@dataclass(frozen=True, eq=False)
class PeakData:
    """
    Peak pairs for one resource at one output length.

    Attributes:
        peaks: (N, 2) float32 array of (min, max), min <= max, both in [-1, 1]
        duration_seconds: Decoded duration (0 for placeholders)
        error: Human-readable error when this is placeholder data
        error_kind: Tag of the failure that produced the placeholder
    """
    peaks: np.ndarray
    duration_seconds: float = 0.0
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None

    @property
    def is_placeholder(self) -> bool:
        return self.error is not None

    @property
    def mins(self) -> np.ndarray:
        return self.peaks[:, 0]

    @property
    def maxs(self) -> np.ndarray:
        return self.peaks[:, 1]

    def __len__(self) -> int:
        return int(self.peaks.shape[0])


def compute_peaks(samples: np.ndarray, bucket_count: int) -> np.ndarray:
    """
    Partition samples into bucket_count windows and take min/max of each.

    The windows are contiguous and differ in length by at most one sample,
    the longer ones first, so the last window may be shorter and none is
    empty while len >= bucket_count. Shorter inputs give one sample per
    window and the windows past the end come out as (0, 0).

    Args:
        samples: 1D mono samples, or 2D (frames, channels); only the first
            channel of 2D input is used
        bucket_count: Output length N (> 0)

    Returns:
        (N, 2) float32 array of (min, max)
    """
    if bucket_count <= 0:
        raise ValueError(f"bucket_count must be positive, got {bucket_count}")

    data = np.asarray(samples, dtype=np.float32)
    if data.ndim == 2:
        data = data[:, 0]
    elif data.ndim != 1:
        raise ValueError(f"Expected 1D or 2D samples, got shape {data.shape}")

    peaks = np.zeros((bucket_count, 2), dtype=np.float32)
    total = data.shape[0]
    if total == 0:
        return peaks

    filled = min(total, bucket_count)
    base, extra = divmod(total, filled)
    index = np.arange(filled)
    starts = index * base + np.minimum(index, extra)

    peaks[:filled, 0] = np.minimum.reduceat(data, starts)
    peaks[:filled, 1] = np.maximum.reduceat(data, starts)

    return peaks


def placeholder_peaks(bucket_count: int, seed_key: str = "") -> np.ndarray:
    """
    Deterministic stand-in peaks for a resource whose extraction failed.

    The same seed_key and bucket_count always give the same values.
    """
    rng = np.random.default_rng(zlib.crc32(seed_key.encode("utf-8")))
    peaks = np.empty((max(0, bucket_count), 2), dtype=np.float32)
    peaks[:, 0] = -PLACEHOLDER_BASE + rng.random(len(peaks)) * PLACEHOLDER_SPREAD
    peaks[:, 1] = PLACEHOLDER_BASE - rng.random(len(peaks)) * PLACEHOLDER_SPREAD
    return peaks


def placeholder_data(bucket_count: int, seed_key: str, error: PlaybackCoreError) -> PeakData:
    return PeakData(
        peaks=placeholder_peaks(bucket_count, seed_key),
        duration_seconds=0.0,
        error=str(error) or "Failed to load waveform",
        error_kind=error.kind,
    )


def decode_audio_bytes(data: bytes) -> Tuple[np.ndarray, int]:
    """
    Decode an encoded audio payload into float32 PCM.

    Tries soundfile (libsndfile) first and falls back to librosa for codecs
    libsndfile cannot read.

    Returns:
        (samples, sample_rate) with samples shaped (frames, channels)

    Raises:
        DecodeError: Payload is empty, corrupt or in an unsupported format
    """
    if not data:
        raise DecodeError("Failed to decode audio: empty payload")

    try:
        samples, sample_rate = sf.read(io.BytesIO(data), dtype="float32", always_2d=True)
        return samples, int(sample_rate)
    except RuntimeError as sf_error:
        Log.debug(f"PeakExtractor: soundfile could not decode payload ({sf_error}), trying librosa")

    try:
        import librosa
        samples, sample_rate = librosa.load(io.BytesIO(data), sr=None, mono=False)
    except Exception as e:
        raise DecodeError(f"Failed to decode audio: {e}") from e

    samples = np.asarray(samples, dtype=np.float32)
    if samples.ndim == 1:
        samples = samples[:, np.newaxis]
    else:
        samples = samples.T
    return samples, int(sample_rate)


def _decode_and_compute(data: bytes, bucket_count: int) -> Tuple[np.ndarray, float]:
    samples, sample_rate = decode_audio_bytes(data)
    duration = samples.shape[0] / float(sample_rate) if sample_rate > 0 else 0.0
    return compute_peaks(samples, bucket_count), duration


def _local_path(url: str) -> Optional[Path]:
    """Filesystem path for file:// URLs and bare paths, None for remote URLs."""
    parsed = urlparse(url)
    if parsed.scheme == "file":
        return Path(unquote(parsed.path))
    # Windows drive letters parse as one-letter schemes
    if not parsed.scheme or len(parsed.scheme) == 1:
        return Path(url)
    return None


class PeakExtractor:
    """
    Fetches, decodes and reduces an audio resource to peak pairs.

    Network and disk reads are awaited; decoding and reduction run in the
    event loop's default executor so the awaiting loop stays responsive.
    """

    def __init__(
        self,
        signed_url_provider=None,
        timeout: Optional[float] = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            signed_url_provider: Optional object with async create_signed_url(track)
            timeout: Fetch timeout in seconds (None = no timeout)
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self._signed_url_provider = signed_url_provider
        self._timeout = timeout
        self._transport = transport

    async def resolve_url(self, url: Optional[str], track: Optional[TrackRecord] = None) -> Optional[str]:
        """
        Prefer a short-lived signed URL; fall back to the given URL.

        A failing provider is logged and never aborts extraction.
        """
        if self._signed_url_provider is None or track is None:
            return url
        try:
            signed = await self._signed_url_provider.create_signed_url(track)
        except Exception as e:
            Log.warning(f"PeakExtractor: Failed to get signed URL for {track.id}, using original: {e}")
            return url
        return signed or url

    async def fetch_bytes(self, url: str, resource_id: Optional[str] = None) -> bytes:
        """
        Fetch the whole resource.

        Raises:
            ResourceFetchError: Non-2xx status, transport failure, malformed URL
                or unreadable file
        """
        try:
            path = _local_path(url)
        except ValueError as e:
            raise ResourceFetchError(f"Failed to load audio: invalid URL: {e}", resource_id) from e
        if path is not None:
            loop = asyncio.get_running_loop()
            try:
                return await loop.run_in_executor(None, path.read_bytes)
            except OSError as e:
                raise ResourceFetchError(f"Failed to load audio: {e}", resource_id) from e

        try:
            async with httpx.AsyncClient(
                transport=self._transport,
                timeout=self._timeout,
                follow_redirects=True,
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
                return response.content
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise ResourceFetchError(
                f"Failed to load audio: {status} {e.response.reason_phrase}".rstrip(),
                resource_id,
                status_code=status,
            ) from e
        except httpx.RequestError as e:
            raise ResourceFetchError(f"Failed to load audio: {e}", resource_id) from e
        except (httpx.InvalidURL, ValueError) as e:
            # Raised while building the request, before any transport is involved
            raise ResourceFetchError(f"Failed to load audio: invalid URL: {e}", resource_id) from e

    async def extract(
        self,
        resource_id: str,
        url: Optional[str],
        bucket_count: int,
        track: Optional[TrackRecord] = None,
    ) -> PeakData:
        """
        Fetch, decode and reduce one resource.

        Raises:
            ResourceFetchError: No URL, non-2xx response or transport failure
            DecodeError: Payload could not be decoded
        """
        best_url = await self.resolve_url(url, track)
        if not best_url:
            raise ResourceFetchError("Failed to load audio: no URL for track", resource_id)

        Log.debug(f"PeakExtractor: Fetching {resource_id} ({bucket_count} buckets)")
        data = await self.fetch_bytes(best_url, resource_id)

        loop = asyncio.get_running_loop()
        try:
            peaks, duration = await loop.run_in_executor(None, _decode_and_compute, data, bucket_count)
        except DecodeError as e:
            e.resource_id = resource_id
            raise

        Log.debug(f"PeakExtractor: Computed {len(peaks)} peaks for {resource_id} ({duration:.2f}s)")
        return PeakData(peaks=peaks, duration_seconds=duration)


@dataclass(frozen=True)
class PeakRequestKey:
    """What a peak result depends on; a different key means recompute."""
    resource_id: str
    url: Optional[str]
    bucket_count: int


PeakListener = Callable[["PeakLoader"], None]


@dataclass
class _LoaderState:
    key: Optional[PeakRequestKey] = None
    data: Optional[PeakData] = None
    loading: bool = False
    listeners: List[PeakListener] = field(default_factory=list)


class PeakLoader:
    """
    Owns the authoritative PeakData for one renderer.

    begin() starts a request and returns its generation (None on a cache
    hit); complete()/fail() publish a result only if its generation is still
    current. The async load() wraps the three for callers that await the
    extractor directly.
    """

    def __init__(self, extractor: Optional[PeakExtractor] = None, name: str = "PeakLoader"):
        self._extractor = extractor
        self._name = name
        self._generation = 0
        self._state = _LoaderState()

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def key(self) -> Optional[PeakRequestKey]:
        return self._state.key

    @property
    def data(self) -> Optional[PeakData]:
        return self._state.data

    @property
    def loading(self) -> bool:
        return self._state.loading

    @property
    def error(self) -> Optional[str]:
        data = self._state.data
        return data.error if data is not None else None

    def add_listener(self, listener: PeakListener) -> None:
        if listener not in self._state.listeners:
            self._state.listeners.append(listener)

    def remove_listener(self, listener: PeakListener) -> None:
        if listener in self._state.listeners:
            self._state.listeners.remove(listener)

    def _publish(self) -> None:
        for listener in list(self._state.listeners):
            listener(self)

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    def begin(self, key: PeakRequestKey) -> Optional[int]:
        """
        Start a request for key.

        Returns:
            The new generation, or None when key is already loaded or loading
        """
        if key == self._state.key and (self._state.data is not None or self._state.loading):
            Log.debug(f"{self._name}: Cache hit for {key.resource_id} ({key.bucket_count} buckets)")
            return None

        self._generation += 1
        self._state.key = key
        self._state.data = None
        self._state.loading = True
        self._publish()
        return self._generation

    def _check_generation(self, generation: int) -> bool:
        if generation == self._generation:
            return True
        stale = StaleResultDiscarded(self._generation, generation)
        Log.debug(f"{self._name}: {stale}")
        return False

    def complete(self, generation: int, data: PeakData) -> bool:
        """Publish data if generation is current. Returns True when applied."""
        if not self._check_generation(generation):
            return False
        self._state.data = data
        self._state.loading = False
        self._publish()
        return True

    def fail(self, generation: int, error: PlaybackCoreError) -> bool:
        """Publish a placeholder for the current key. Returns True when applied."""
        if not self._check_generation(generation):
            return False
        key = self._state.key
        bucket_count = key.bucket_count if key is not None else 0
        seed = key.resource_id if key is not None else ""
        Log.warning(f"{self._name}: Waveform unavailable for {seed}: {error}")
        self._state.data = placeholder_data(bucket_count, seed, error)
        self._state.loading = False
        self._publish()
        return True

    def invalidate(self) -> None:
        """Drop the current result and make any in-flight request stale."""
        self._generation += 1
        self._state.key = None
        self._state.data = None
        self._state.loading = False
        self._publish()

    async def load(self, key: PeakRequestKey, track: Optional[TrackRecord] = None) -> Optional[PeakData]:
        """
        Request, await and publish peaks for key.

        Returns:
            The data now published (which may belong to a newer request)
        """
        if self._extractor is None:
            raise RuntimeError(f"{self._name}: No extractor configured")

        generation = self.begin(key)
        if generation is None:
            return self._state.data

        try:
            data = await self._extractor.extract(key.resource_id, key.url, key.bucket_count, track)
        except PlaybackCoreError as e:
            self.fail(generation, e)
        except Exception as e:
            Log.error(f"{self._name}: Unexpected extraction failure for {key.resource_id}: {e}")
            self.fail(generation, ResourceFetchError(f"Failed to load audio: {e}", key.resource_id))
        else:
            self.complete(generation, data)

        return self._state.data


# Global instance
_peak_extractor_instance: Optional[PeakExtractor] = None


def get_peak_extractor() -> PeakExtractor:
    """Get PeakExtractor singleton instance."""
    global _peak_extractor_instance
    if _peak_extractor_instance is None:
        _peak_extractor_instance = PeakExtractor()
    return _peak_extractor_instance


def set_peak_extractor(extractor: Optional[PeakExtractor]) -> None:
    """Set PeakExtractor instance (bootstrap and tests)."""
    global _peak_extractor_instance
    _peak_extractor_instance = extractor
