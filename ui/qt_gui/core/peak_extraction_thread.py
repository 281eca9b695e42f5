"""
Peak Extraction Thread

Runs one PeakExtractor.extract() coroutine on a background QThread with its
own event loop, and hands the result back to the GUI thread through queued
signals. The thread knows nothing about staleness: it reports the
generation it was started for and the receiving PeakLoader decides whether
the result still applies.
"""
import asyncio
from typing import Optional

from PyQt6.QtCore import QThread, pyqtSignal

from src.shared.application.services.waveform_service import PeakExtractor, PeakRequestKey
from src.shared.domain.entities.track import TrackRecord
from src.shared.domain.errors import PlaybackCoreError, ResourceFetchError
from src.utils.message import Log


class PeakExtractionThread(QThread):
    """
    Extracts peaks for one request key off the GUI thread.

    Signals:
        extraction_complete(generation, PeakData)
        extraction_failed(generation, PlaybackCoreError)
    """

    extraction_complete = pyqtSignal(int, object)
    extraction_failed = pyqtSignal(int, object)

    def __init__(
        self,
        extractor: PeakExtractor,
        key: PeakRequestKey,
        generation: int,
        track: Optional[TrackRecord] = None,
        parent=None,
    ):
        super().__init__(parent)
        self.extractor = extractor
        self.key = key
        self.generation = generation
        self.track = track

    def run(self):
        resource_id = self.key.resource_id
        try:
            data = asyncio.run(
                self.extractor.extract(resource_id, self.key.url, self.key.bucket_count, self.track)
            )
        except PlaybackCoreError as e:
            Log.debug(f"PeakExtractionThread: Extraction failed for {resource_id}: {e}")
            self.extraction_failed.emit(self.generation, e)
            return
        except Exception as e:
            # An exception escaping QThread.run() aborts the process
            Log.error(f"PeakExtractionThread: Unexpected failure for {resource_id}: {e}")
            self.extraction_failed.emit(
                self.generation, ResourceFetchError(f"Failed to load audio: {e}", resource_id)
            )
            return
        self.extraction_complete.emit(self.generation, data)
