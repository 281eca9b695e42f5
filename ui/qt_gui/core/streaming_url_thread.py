"""
Streaming URL Thread

Resolves the streaming URL for one library request on a background QThread,
so a slow signed-URL endpoint never stalls the event loop. The result comes
back through a queued signal and the engine decides whether the request is
still the newest one before playing it.
"""
import asyncio

from PyQt6.QtCore import QThread, pyqtSignal

from src.shared.domain.entities.track import TrackRecord
from src.utils.message import Log


class StreamingUrlThread(QThread):
    """
    Awaits engine.resolve_library_url(track) off the GUI thread.

    Signals:
        url_resolved(request, TrackRecord, url or None)
    """

    url_resolved = pyqtSignal(int, object, object)

    def __init__(self, engine, request: int, track: TrackRecord, parent=None):
        super().__init__(parent)
        self.engine = engine
        self.request = request
        self.track = track

    def run(self):
        try:
            url = asyncio.run(self.engine.resolve_library_url(self.track))
        except Exception as e:
            Log.error(f"StreamingUrlThread: Failed to resolve URL for {self.track.id}: {e}")
            url = None
        self.url_resolved.emit(self.request, self.track, url)


def start_library_playback(engine, resource_id: str, parent=None):
    """
    Begin a library request on engine and resolve its URL in the background.

    The resolved URL is applied on the engine's thread through
    engine.finish_library_request(), which drops superseded requests.

    Returns:
        The started StreamingUrlThread, or None if the track is unknown
    """
    started = engine.begin_library_request(resource_id)
    if started is None:
        return None
    request, track = started
    thread = StreamingUrlThread(engine, request, track, parent)
    thread.url_resolved.connect(engine.finish_library_request)
    thread.start()
    return thread
