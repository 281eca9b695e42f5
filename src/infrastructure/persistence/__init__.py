"""Persistence implementations."""
from src.infrastructure.persistence.json_preferences_repository import PreferencesRepository

__all__ = ['PreferencesRepository']
