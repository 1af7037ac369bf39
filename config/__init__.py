"""
Configuration Module for Invoice Field Extraction System.

Settings are layered:
    1. config/settings.yaml (the defaults shipped with the package)
    2. an optional override file, given to ConfigurationManager / --config
       or through the INVOICE_EXTRACTOR_CONFIG environment variable

An override file only needs the keys it changes; it is merged key by key
into the defaults, so a file holding just ``extraction.labels.client``
replaces that label set and nothing else.
"""

import os
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from src.utils.exceptions import ConfigurationError

DEFAULT_CONFIG_PATH = Path(__file__).parent / "settings.yaml"
CONFIG_ENV_VAR = "INVOICE_EXTRACTOR_CONFIG"


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge ``override`` into a copy of ``base``; mappings merge, anything else replaces."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ConfigurationManager:
    """
    Process-wide settings for the extraction system.

    Attributes:
        config_path (Optional[Path]): Override file layered on the defaults.

    Example:
        >>> config = ConfigurationManager()
        >>> config.get("validation.amount_tolerance")
        '1.00'
        >>> ConfigurationManager.reset()
        >>> ConfigurationManager("my_labels.yaml").get("extraction.labels.client")
        ['Client', 'Facturé à']
    """

    _instance: Optional['ConfigurationManager'] = None
    _config: Dict[str, Any] = {}

    def __new__(cls, config_path: Optional[str] = None) -> 'ConfigurationManager':
        """Singleton: the first construction wins until reset()."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, config_path: Optional[str] = None) -> None:
        """
        Load the defaults and the optional override file.

        Args:
            config_path: Override YAML file. Falls back to the
                INVOICE_EXTRACTOR_CONFIG environment variable.
        """
        if self._initialized:
            return

        config_path = config_path or os.environ.get(CONFIG_ENV_VAR)
        self.config_path = Path(config_path) if config_path else None

        self._load_config()
        self._initialized = True

    @staticmethod
    def _read_yaml(path: Path) -> Dict[str, Any]:
        """
        Raises:
            FileNotFoundError: If the file doesn't exist.
            ConfigurationError: If the file is not a YAML mapping.
        """
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(str(path), f"Invalid YAML: {e}")

        if not isinstance(data, dict):
            raise ConfigurationError(str(path), "Top level must be a mapping")
        return data

    def _load_config(self) -> None:
        """Read the defaults, merge the override, then check the values."""
        config = self._read_yaml(DEFAULT_CONFIG_PATH)
        if self.config_path is not None:
            config = _deep_merge(config, self._read_yaml(self.config_path))

        self._config = config
        self._resolve_paths()
        self._validate()

    def _resolve_paths(self) -> None:
        """Make relative ``paths.*`` entries absolute from the project root."""
        project_root = Path(__file__).parent.parent

        for key, value in (self._config.get('paths') or {}).items():
            if value and not Path(value).is_absolute():
                self._config['paths'][key] = str(project_root / value)

    def _validate(self) -> None:
        """Reject values the pipeline cannot work with."""
        source = str(self.config_path or DEFAULT_CONFIG_PATH)

        tolerance = self.get("validation.amount_tolerance", "1.00")
        try:
            if Decimal(str(tolerance)) < 0:
                raise ConfigurationError(source, "validation.amount_tolerance must be >= 0")
        except InvalidOperation:
            raise ConfigurationError(
                source, f"validation.amount_tolerance is not a number: {tolerance!r}"
            )

        threshold = self.get("validation.confidence_threshold", 70)
        if not isinstance(threshold, (int, float)) or not 0 <= threshold <= 100:
            raise ConfigurationError(
                source, f"validation.confidence_threshold must be within 0-100: {threshold!r}"
            )

        labels = self.get("extraction.labels") or {}
        if not isinstance(labels, dict):
            raise ConfigurationError(source, "extraction.labels must be a mapping")
        for name, values in labels.items():
            if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
                raise ConfigurationError(
                    source, f"extraction.labels.{name} must be a list of strings"
                )

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Example:
            >>> config.get("ocr.tesseract.psm")
            6
            >>> config.get("nonexistent.key", "default_value")
            'default_value'
        """
        value = self._config
        try:
            for part in key.split('.'):
                value = value[part]
        except (KeyError, TypeError):
            return default
        return value

    def get_all(self) -> Dict[str, Any]:
        return self._config.copy()

    def reload(self) -> None:
        """Reload both layers from disk."""
        self._load_config()

    @classmethod
    def reset(cls) -> None:
        """Forget the current instance; the next construction reloads."""
        cls._instance = None


def get_config(key: str, default: Any = None) -> Any:
    """Shortcut for ``ConfigurationManager().get(key, default)``."""
    return ConfigurationManager().get(key, default)


__all__ = ['ConfigurationManager', 'get_config', 'DEFAULT_CONFIG_PATH', 'CONFIG_ENV_VAR']
