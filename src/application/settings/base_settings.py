"""
Settings Base Classes

Dataclass schemas with per-field validation rules, plus a Qt manager that
loads one schema from the PreferencesRepository, saves changes on a short
debounce, and signals what changed.

Usage:
    @dataclass
    class PlaybackSettings(BaseSettings):
        default_volume: float = validated_field(0.8, min_value=0.0, max_value=1.0)

    class PlaybackSettingsManager(BaseSettingsManager):
        NAMESPACE = "playback"
        SETTINGS_CLASS = PlaybackSettings

Stored data is the schema's to_dict() under "<NAMESPACE>.settings". Keys the
schema no longer has are ignored; keys it gained take their defaults.
"""
import re
from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Type, Union

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from src.utils.message import Log

if TYPE_CHECKING:
    from src.infrastructure.persistence.json_preferences_repository import PreferencesRepository

Number = Union[int, float]
CustomRule = Callable[[Any, str], Optional[str]]


# =============================================================================
# Validation
# =============================================================================

@dataclass
class ValidationResult:
    """Errors make a result invalid; warnings are informational."""
    valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def add_error(self, message: str):
        self.errors.append(message)
        self.valid = False

    def add_warning(self, message: str):
        self.warnings.append(message)

    def merge(self, other: 'ValidationResult'):
        self.valid = self.valid and other.valid
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)

    def __bool__(self) -> bool:
        return self.valid


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


@dataclass
class FieldValidator:
    """
    Rules for one settings field, kept in the field's metadata.

    Numeric bounds only apply to numbers and the pattern only to strings.
    Enum members compare by value, so a stored "bar" satisfies
    choices=list(SnapUnit).
    """
    min_value: Optional[Number] = None
    max_value: Optional[Number] = None
    greater_than: Optional[Number] = None  # exclusive lower bound
    choices: Optional[List[Any]] = None
    pattern: Optional[str] = None
    pattern_message: Optional[str] = None
    allow_none: bool = True
    custom: Optional[CustomRule] = None  # (value, field_name) -> error or None

    def validate(self, value: Any, field_name: str) -> ValidationResult:
        result = ValidationResult()

        if value is None:
            if not self.allow_none:
                result.add_error(f"{field_name}: Cannot be None")
            return result

        if _is_number(value):
            if self.min_value is not None and value < self.min_value:
                result.add_error(f"{field_name}: Value {value} is below minimum {self.min_value}")
            if self.max_value is not None and value > self.max_value:
                result.add_error(f"{field_name}: Value {value} is above maximum {self.max_value}")
            if self.greater_than is not None and value <= self.greater_than:
                result.add_error(f"{field_name}: Value {value} must be greater than {self.greater_than}")

        if self.choices is not None:
            allowed = [_plain(c) for c in self.choices]
            if _plain(value) not in allowed:
                result.add_error(f"{field_name}: Value '{_plain(value)}' not in allowed choices: {allowed}")

        if self.pattern is not None and isinstance(value, str) and not re.match(self.pattern, value):
            result.add_error(f"{field_name}: {self.pattern_message or 'Value does not match required pattern'}")

        if self.custom is not None:
            error = self.custom(value, field_name)
            if error:
                result.add_error(error)

        return result


def validated_field(default: Any = None, **rules):
    """
    Dataclass field carrying a FieldValidator built from the keyword rules.

    Example:
        bpm: float = validated_field(120.0, greater_than=0, allow_none=False)
    """
    return field(default=default, metadata={'validator': FieldValidator(**rules)})


def _validator_of(f) -> Optional[FieldValidator]:
    validator = f.metadata.get('validator') if f.metadata else None
    return validator if isinstance(validator, FieldValidator) else None


# =============================================================================
# Schema base
# =============================================================================

@dataclass
class BaseSettings:
    """Settings schema base. Every field needs a default."""

    def to_dict(self) -> Dict[str, Any]:
        return {key: _plain(value) for key, value in asdict(self).items()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BaseSettings':
        """Build from stored data without validating; unknown keys are dropped."""
        known = {f.name for f in fields(cls)}
        values = asdict(cls())
        values.update({k: v for k, v in data.items() if k in known})
        return cls(**values)

    @classmethod
    def get_field_validators(cls) -> Dict[str, FieldValidator]:
        validators = {}
        for f in fields(cls):
            validator = _validator_of(f)
            if validator is not None:
                validators[f.name] = validator
        return validators

    def validate(self) -> ValidationResult:
        result = ValidationResult()
        for name, validator in self.get_field_validators().items():
            result.merge(validator.validate(getattr(self, name), name))
        return result

    def validate_field(self, field_name: str) -> ValidationResult:
        """Validate one field. Raises AttributeError for unknown names."""
        if field_name not in {f.name for f in fields(self)}:
            raise AttributeError(f"Field '{field_name}' not found in {type(self).__name__}")
        validator = self.get_field_validators().get(field_name)
        if validator is None:
            return ValidationResult()
        return validator.validate(getattr(self, field_name), field_name)

    def is_valid(self) -> bool:
        return self.validate().valid


# =============================================================================
# Manager base
# =============================================================================

class BaseSettingsManager(QObject):
    """
    Owns one settings schema instance and its persistence.

    Signals:
        settings_changed(key): A value changed; a save is queued
        settings_loaded(): Settings were loaded from storage
        validation_failed(ValidationResult): set_validated() rejected a value
        settings_save_failed(message): Writing the preferences store failed
    """

    settings_changed = pyqtSignal(str)
    settings_loaded = pyqtSignal()
    validation_failed = pyqtSignal(object)
    settings_save_failed = pyqtSignal(str)

    NAMESPACE: str = ""
    SETTINGS_CLASS: Type[BaseSettings] = BaseSettings

    SAVE_DEBOUNCE_MS: int = 300

    def __init__(self, preferences_repo: Optional['PreferencesRepository'] = None, parent=None):
        """
        Args:
            preferences_repo: Backing store; None keeps settings in memory
            parent: Parent QObject
        """
        super().__init__(parent)
        if not self.NAMESPACE:
            raise ValueError(f"{type(self).__name__} must define NAMESPACE")

        self._preferences_repo = preferences_repo
        self._settings: BaseSettings = self.SETTINGS_CLASS()
        self._loaded = False
        self._pending_save = False

        self._save_timer = QTimer(self)
        self._save_timer.setSingleShot(True)
        self._save_timer.setInterval(self.SAVE_DEBOUNCE_MS)
        self._save_timer.timeout.connect(self._do_save)

        self._load_from_storage()

    @property
    def _storage_key(self) -> str:
        return f"{self.NAMESPACE}.settings"

    @property
    def settings(self) -> BaseSettings:
        return self._settings

    def set_validated(self, key: str, value: Any) -> ValidationResult:
        """Set only if the field's rules accept value; otherwise keep the old one."""
        if not hasattr(self._settings, key):
            result = ValidationResult()
            result.add_error(f"Unknown setting: {key}")
            return result

        previous = getattr(self._settings, key)
        setattr(self._settings, key, value)
        result = self._settings.validate_field(key)
        if not result.valid:
            setattr(self._settings, key, previous)
            self.validation_failed.emit(result)
        elif previous != value:
            self._save_setting(key)
        return result

    def is_loaded(self) -> bool:
        return self._loaded

    def has_pending_save(self) -> bool:
        return self._pending_save

    # =========================================================================
    # Persistence
    # =========================================================================

    def _load_from_storage(self):
        """Adopt stored settings if they validate, else keep the defaults."""
        if self._preferences_repo is None:
            self._loaded = True
            return

        try:
            stored = self._preferences_repo.get(self._storage_key, {})
            if stored and isinstance(stored, dict):
                loaded = self.SETTINGS_CLASS.from_dict(stored)
                result = loaded.validate()
                if result.valid:
                    self._settings = loaded
                else:
                    Log.warning(
                        f"{type(self).__name__}: Stored settings invalid, using defaults: "
                        f"{'; '.join(result.errors)}"
                    )
        except (TypeError, ValueError, OSError) as e:
            Log.warning(f"{type(self).__name__}: Failed to load settings: {e}")
        self._loaded = True
        self.settings_loaded.emit()

    def _save_setting(self, key: str):
        self._pending_save = True
        self._save_timer.start()
        self.settings_changed.emit(key)

    def _do_save(self):
        if self._preferences_repo is None:
            self._pending_save = False
            return
        try:
            self._preferences_repo.set(self._storage_key, self._settings.to_dict())
        except (TypeError, ValueError, OSError) as e:
            Log.error(f"{type(self).__name__}: Failed to save settings: {e}")
            self.settings_save_failed.emit(str(e))
            return
        self._pending_save = False

    def force_save(self):
        """Write now instead of waiting for the debounce."""
        self._save_timer.stop()
        self._do_save()
