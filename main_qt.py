"""
TrackShelf Qt GUI Entry Point

Opens a library window for the audio files given on the command line:

    trackshelf song.wav other.flac --bpm 128
"""
import argparse
import hashlib
import os
import sys
import warnings
from pathlib import Path
from typing import Iterable, List, Optional

# Suppress pkg_resources deprecation warning from librosa (librosa/core/intervals.py).
# Librosa still uses pkg_resources; remove this filter when librosa migrates to importlib.resources.
warnings.filterwarnings(
    "ignore",
    message="pkg_resources is deprecated",
    category=UserWarning,
)

# Load environment variables.
# Priority: app-local .env -> user-data .env (highest).
from dotenv import load_dotenv
from src.utils.paths import get_app_install_dir, get_user_data_dir

_runtime_dirs = []
for _candidate in (get_app_install_dir(), Path(__file__).resolve().parent):
    if _candidate and _candidate not in _runtime_dirs:
        _runtime_dirs.append(_candidate)

for _runtime_dir in _runtime_dirs:
    _runtime_env = _runtime_dir / ".env"
    if _runtime_env.exists():
        load_dotenv(_runtime_env, override=True)
        break

_user_env = get_user_data_dir() / ".env"
if _user_env.exists():
    load_dotenv(_user_env, override=True)

# Set OpenBLAS/MKL threading to single-threaded BEFORE importing NumPy.
# Peak extraction runs NumPy on QThreads; nested BLAS pools crash there.
os.environ['OPENBLAS_NUM_THREADS'] = '1'
os.environ['MKL_NUM_THREADS'] = '1'
os.environ['NUMEXPR_NUM_THREADS'] = '1'
os.environ['OMP_NUM_THREADS'] = '1'
os.environ['VECLIB_MAXIMUM_THREADS'] = '1'

import soundfile as sf
from PyQt6.QtWidgets import QApplication

from src.application.bootstrap import initialize_services
from src.shared.domain.entities.track import TrackRecord
from src.utils.message import Log


def _track_id(path: Path) -> str:
    return hashlib.sha1(str(path).encode("utf-8")).hexdigest()[:16]


def _read_duration(path: Path) -> Optional[float]:
    """Duration from the file header; None when soundfile cannot read it."""
    try:
        return float(sf.info(str(path)).duration)
    except RuntimeError as e:
        Log.warning(f"Could not read header of {path.name}: {e}")
        return None


def tracks_from_paths(paths: Iterable[str], bpm: Optional[float] = None) -> List[TrackRecord]:
    """One TrackRecord per existing file; missing paths are logged and skipped."""
    tracks = []
    for raw in paths:
        path = Path(raw).expanduser().resolve()
        if not path.is_file():
            Log.warning(f"Skipping {raw}: not a file")
            continue
        tracks.append(TrackRecord(
            id=_track_id(path),
            name=path.stem,
            url=path.as_uri(),
            bpm=bpm,
            duration=_read_duration(path),
        ))
    return tracks


def parse_args(argv: List[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="trackshelf", description="TrackShelf music library")
    parser.add_argument("files", nargs="*", help="Audio files to open")
    parser.add_argument("--bpm", type=float, default=None, help="Tempo applied to every opened track")
    parser.add_argument("--log-level", default="INFO", help="DEBUG, INFO, WARNING or ERROR")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None):
    """Main entry point for Qt GUI"""
    args = parse_args(sys.argv[1:] if argv is None else argv)
    Log.set_level(args.log_level)

    if args.bpm is not None and args.bpm <= 0:
        Log.error(f"--bpm must be positive, got {args.bpm}")
        return 2

    app = QApplication(sys.argv[:1])
    app.setApplicationName("TrackShelf")
    app.setOrganizationName("TrackShelf")

    Log.info("=" * 60)
    Log.info("TrackShelf Qt GUI")
    Log.info("=" * 60)

    from ui.qt_gui.main_window import MainWindow

    context = initialize_services()
    context.add_tracks(tracks_from_paths(args.files, args.bpm))
    Log.info(f"Opened {len(context.tracks)} track(s)")

    window = MainWindow(context)
    window.resize(1200, 800)
    window.show()

    exit_code = app.exec()

    Log.info("Shutting down...")
    context.cleanup()
    Log.info("TrackShelf Qt GUI exited successfully")
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
