"""Shared services."""
from src.shared.application.services.waveform_service import (
    PeakData,
    PeakExtractor,
    PeakLoader,
    PeakRequestKey,
    compute_peaks,
    get_peak_extractor,
    placeholder_peaks,
    set_peak_extractor,
)

__all__ = [
    'PeakData',
    'PeakExtractor',
    'PeakLoader',
    'PeakRequestKey',
    'compute_peaks',
    'get_peak_extractor',
    'placeholder_peaks',
    'set_peak_extractor',
]
