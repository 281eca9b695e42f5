"""
Playback core errors.

Every failure the playback core can produce carries an ErrorKind tag so
callers branch on the kind instead of on exception class or message text.
All of these are caught where the asynchronous operation started and turned
into local state (an error message/flag); none is meant to reach a generic
top-level handler.
"""
from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Tag for playback core failures."""
    RESOURCE_FETCH = "resource_fetch"
    DECODE = "decode"
    PLAYBACK_START = "playback_start"
    STALE_RESULT = "stale_result"

    @property
    def user_visible(self) -> bool:
        """Stale results are an internal consistency guard, never shown."""
        return self is not ErrorKind.STALE_RESULT


class PlaybackCoreError(Exception):
    """Base class for playback core failures."""

    kind: ErrorKind = ErrorKind.RESOURCE_FETCH

    def __init__(self, message: str, resource_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.resource_id = resource_id

    def __str__(self) -> str:
        return self.message


class ResourceFetchError(PlaybackCoreError):
    """Non-2xx HTTP response or network failure while retrieving audio bytes."""

    kind = ErrorKind.RESOURCE_FETCH

    def __init__(self, message: str, resource_id: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message, resource_id)
        self.status_code = status_code


class DecodeError(PlaybackCoreError):
    """The audio decoder rejected the payload (corrupt or unsupported format)."""

    kind = ErrorKind.DECODE


class PlaybackStartError(PlaybackCoreError):
    """The media backend refused to start, or errored during playback."""

    kind = ErrorKind.PLAYBACK_START


class StaleResultDiscarded(PlaybackCoreError):
    """
    An async result arrived for a superseded request.

    Raised/constructed only for logging; it is dropped silently.
    """

    kind = ErrorKind.STALE_RESULT

    def __init__(self, expected_generation: int, received_generation: int, resource_id: Optional[str] = None):
        super().__init__(
            f"Discarded result for generation {received_generation} (current is {expected_generation})",
            resource_id,
        )
        self.expected_generation = expected_generation
        self.received_generation = received_generation
