"""
Setup script for TrackShelf

Installation:
    pip install -e .          # Editable install
    pip install -e .[test]    # Plus pytest

Run:
    trackshelf song.wav other.flac --bpm 128
    python main_qt.py
"""
from pathlib import Path

from setuptools import find_packages, setup

ROOT = Path(__file__).resolve().parent


def _read_requirements():
    path = ROOT / "requirements.txt"
    if not path.exists():
        return []
    lines = (line.strip() for line in path.read_text(encoding="utf-8").splitlines())
    return [line for line in lines if line and not line.startswith("#")]


setup(
    name="trackshelf",
    version="0.1.0",
    description="Music library playback with waveform views and BPM-grid arrangement sections",
    author="TrackShelf",
    packages=find_packages(include=["src", "src.*", "ui", "ui.*"]),
    py_modules=["main_qt"],
    python_requires=">=3.10",
    install_requires=_read_requirements(),
    extras_require={"test": ["pytest>=7.4"]},
    entry_points={"console_scripts": ["trackshelf=main_qt:main"]},
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: End Users/Desktop",
        "Topic :: Multimedia :: Sound/Audio :: Players",
        "Programming Language :: Python :: 3",
    ],
)
