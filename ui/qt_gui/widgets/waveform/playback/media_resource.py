"""
Qt Multimedia media resource.

Wraps one QMediaPlayer + QAudioOutput pair behind the MediaResource
protocol. Only the PlaybackEngine creates and drives these.
"""

import os
from typing import Callable, Optional

from PyQt6.QtCore import QUrl
from PyQt6.QtMultimedia import QAudioOutput, QMediaDevices, QMediaPlayer

from src.shared.domain.errors import PlaybackStartError

from src.utils.message import Log


def to_qurl(url: str) -> QUrl:
    """QUrl for a remote URL, a file:// URL or a plain filesystem path."""
    if "://" in url:
        return QUrl(url)
    return QUrl.fromLocalFile(os.path.abspath(os.path.normpath(url)))


class QtMediaResource:
    """
    One playable resource backed by Qt Multimedia.

    Metadata is reported when the media status reaches LoadedMedia, time
    updates ride QMediaPlayer.positionChanged, the end is EndOfMedia and
    both errorOccurred and InvalidMedia are reported as errors.
    """

    def __init__(self):
        self._player: Optional[QMediaPlayer] = QMediaPlayer()
        self._audio_output: Optional[QAudioOutput] = QAudioOutput()
        self._player.setAudioOutput(self._audio_output)
        self._url: Optional[str] = None
        self._metadata_sent = False

        self._on_metadata: Optional[Callable[[float], None]] = None
        self._on_time: Optional[Callable[[float], None]] = None
        self._on_ended: Optional[Callable[[], None]] = None
        self._on_error: Optional[Callable[[str], None]] = None

        self._player.mediaStatusChanged.connect(self._handle_media_status)
        self._player.positionChanged.connect(self._handle_position)
        self._player.durationChanged.connect(self._handle_duration)
        self._player.errorOccurred.connect(self._handle_error)

    def bind(self, on_metadata, on_time, on_ended, on_error) -> None:
        self._on_metadata = on_metadata
        self._on_time = on_time
        self._on_ended = on_ended
        self._on_error = on_error

    # =========================================================================
    # Qt signal handlers
    # =========================================================================

    def _send_metadata(self) -> None:
        if self._metadata_sent or self._player is None:
            return
        duration_ms = self._player.duration()
        if duration_ms <= 0:
            return
        self._metadata_sent = True
        if self._on_metadata:
            self._on_metadata(duration_ms / 1000.0)

    def _handle_media_status(self, status) -> None:
        if status in (QMediaPlayer.MediaStatus.LoadedMedia, QMediaPlayer.MediaStatus.BufferedMedia):
            self._send_metadata()
        elif status == QMediaPlayer.MediaStatus.EndOfMedia:
            if self._on_ended:
                self._on_ended()
        elif status == QMediaPlayer.MediaStatus.InvalidMedia:
            if self._on_error:
                self._on_error(f"Unsupported or corrupt media: {self._url}")

    def _handle_duration(self, duration_ms: int) -> None:
        if self._player is not None and self._player.mediaStatus() in (
            QMediaPlayer.MediaStatus.LoadedMedia,
            QMediaPlayer.MediaStatus.BufferedMedia,
        ):
            self._send_metadata()

    def _handle_position(self, position_ms: int) -> None:
        if self._on_time:
            self._on_time(position_ms / 1000.0)

    def _handle_error(self, error, error_string: str) -> None:
        if error == QMediaPlayer.Error.NoError:
            return
        if self._on_error:
            self._on_error(error_string or str(error))

    # =========================================================================
    # MediaResource
    # =========================================================================

    def load(self, url: str) -> None:
        if self._player is None:
            return
        self._url = url
        self._metadata_sent = False
        self._player.setSource(to_qurl(url))
        Log.debug(f"QtMediaResource: Source set to {url}")

    def play(self) -> None:
        if self._player is None:
            raise PlaybackStartError("Media resource already released")
        if not QMediaDevices.audioOutputs():
            raise PlaybackStartError("No audio output device available")
        self._player.play()

    def pause(self) -> None:
        if self._player is not None:
            self._player.pause()

    def set_position(self, seconds: float) -> None:
        if self._player is not None:
            self._player.setPosition(int(seconds * 1000))

    def set_volume(self, volume: float) -> None:
        if self._audio_output is not None:
            self._audio_output.setVolume(float(volume))

    def release(self) -> None:
        """
        Disconnect callbacks first so nothing fires during teardown, then
        pause (stop() can block on a wedged backend) and delete later.
        """
        self._on_metadata = None
        self._on_time = None
        self._on_ended = None
        self._on_error = None

        player = self._player
        audio_output = self._audio_output
        self._player = None
        self._audio_output = None
        if player is None:
            return

        for signal in (
            player.mediaStatusChanged,
            player.positionChanged,
            player.durationChanged,
            player.errorOccurred,
        ):
            try:
                signal.disconnect()
            except TypeError:
                pass  # Nothing connected

        if player.playbackState() == QMediaPlayer.PlaybackState.PlayingState:
            player.pause()
        player.deleteLater()
        if audio_output is not None:
            audio_output.deleteLater()
