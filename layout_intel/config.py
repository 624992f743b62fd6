"""
Configuration

Defaults for comparison and spatial analysis, optionally loaded from a
YAML file:

    settings:
      tolerance: 0.05
      check_types: [frames, margins, styles, textRegions]
      min_text_region_width: 72
      min_text_region_height: 36
      min_free_region_side: 1
      respect_margins: true

    font_fallbacks:
      Helvetica: [Arial, Helvetica Neue]

Per-call arguments still override these values.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import yaml

from .comparison.engine import DEFAULT_CHECK_TYPES, DEFAULT_TOLERANCE, CheckType
from .errors import ConfigError

logger = logging.getLogger(__name__)


@dataclass
class IntelligenceConfig:
    """Settings shared by the analysis and comparison components."""
    tolerance: float = DEFAULT_TOLERANCE
    check_types: Tuple[CheckType, ...] = DEFAULT_CHECK_TYPES
    font_fallbacks: Dict[str, Tuple[str, ...]] = field(default_factory=dict)
    min_text_region_width: float = 72.0
    min_text_region_height: float = 36.0
    min_free_region_side: float = 1.0
    respect_margins: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            'settings': {
                'tolerance': self.tolerance,
                'check_types': [c.value for c in self.check_types],
                'min_text_region_width': self.min_text_region_width,
                'min_text_region_height': self.min_text_region_height,
                'min_free_region_side': self.min_free_region_side,
                'respect_margins': self.respect_margins,
            },
            'font_fallbacks': {k: list(v) for k, v in self.font_fallbacks.items()},
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'IntelligenceConfig':
        """
        Build a config from the YAML document shape.

        Raises:
            ValueError: If a setting has an invalid value
        """
        settings = dict(data.get('settings') or {})
        known = {f.name for f in fields(cls)} - {'font_fallbacks'}

        kwargs: Dict[str, Any] = {}
        for key, value in settings.items():
            if key not in known:
                logger.warning(f"Ignoring unknown setting: {key}")
                continue
            kwargs[key] = value

        if 'check_types' in kwargs:
            kwargs['check_types'] = tuple(CheckType.parse(c) for c in kwargs['check_types'])
        if 'tolerance' in kwargs:
            kwargs['tolerance'] = float(kwargs['tolerance'])
            if kwargs['tolerance'] < 0:
                raise ValueError("tolerance must not be negative")
        for key in ('min_text_region_width', 'min_text_region_height', 'min_free_region_side'):
            if key in kwargs:
                kwargs[key] = float(kwargs[key])
        if 'respect_margins' in kwargs:
            kwargs['respect_margins'] = bool(kwargs['respect_margins'])

        fallbacks = data.get('font_fallbacks') or {}
        if not isinstance(fallbacks, Mapping):
            raise ValueError("font_fallbacks must be a mapping of family -> substitutes")
        kwargs['font_fallbacks'] = {
            str(family): tuple(str(s) for s in (substitutes or []))
            for family, substitutes in fallbacks.items()
        }

        return cls(**kwargs)


class ConfigLoader:
    """
    Loads IntelligenceConfig from YAML files.
    """

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        """
        Initialize config loader.

        Args:
            config_path: Path to a YAML config file
        """
        self.config_path = Path(config_path) if config_path else None
        self.raw: Dict[str, Any] = {}
        self.config = IntelligenceConfig()

        if self.config_path:
            self.load(self.config_path)

    def load(self, config_path: Union[str, Path]) -> IntelligenceConfig:
        """
        Load configuration from a YAML file.

        Args:
            config_path: Path to YAML config file

        Returns:
            Loaded configuration

        Raises:
            ConfigError: If the file cannot be read or is malformed
        """
        logger.info(f"Loading configuration from: {config_path}")

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                raw = yaml.safe_load(f) or {}
        except OSError as e:
            raise ConfigError(f"Cannot read config {config_path}: {e}")
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}")

        if not isinstance(raw, dict):
            raise ConfigError(f"Config {config_path} must be a mapping")

        unknown: List[str] = [k for k in raw if k not in ('settings', 'font_fallbacks')]
        for key in unknown:
            logger.warning(f"Ignoring unknown config section: {key}")

        try:
            self.config = IntelligenceConfig.from_dict(raw)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid config {config_path}: {e}")

        self.raw = raw
        self.config_path = Path(config_path)
        logger.info(
            f"Loaded config: tolerance={self.config.tolerance}, "
            f"{len(self.config.font_fallbacks)} font fallbacks"
        )
        return self.config


def load_config(config_path: Optional[Union[str, Path]] = None) -> IntelligenceConfig:
    """Load a config file, or return the defaults when no path is given."""
    if config_path is None:
        return IntelligenceConfig()
    return ConfigLoader().load(config_path)
