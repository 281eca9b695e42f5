"""
Application Settings Module

Provides standardized settings management across the application.

Classes:
    BaseSettings: Base dataclass for settings schemas
    BaseSettingsManager: Base for settings managers
    PlaybackSettings / PlaybackSettingsManager: Engine, extraction and view settings

Usage:
    from src.application.settings import PlaybackSettingsManager
    # Created in bootstrap and stored on the ApplicationContext
"""

from .base_settings import (
    BaseSettings,
    BaseSettingsManager,
    FieldValidator,
    ValidationResult,
    validated_field,
)
from .playback_settings import PlaybackSettings, PlaybackSettingsManager

__all__ = [
    'BaseSettings',
    'BaseSettingsManager',
    'FieldValidator',
    'ValidationResult',
    'validated_field',
    'PlaybackSettings',
    'PlaybackSettingsManager',
]
