"""
Shared module containing cross-cutting concerns.

Structure:
    shared/
        application/
            services/       - Peak extraction and loading
            status/         - NotificationCenter for user-facing messages
        domain/
            entities/       - TrackRecord, AudioSection
            errors.py       - Tagged playback-core errors

Usage:
    # Peaks
    from src.shared.application.services.waveform_service import get_peak_extractor

    # Notifications
    from src.shared.application.status import NotificationCenter, Severity

    # Entities
    from src.shared.domain.entities import TrackRecord, AudioSection
"""
