"""
Configuration management for BloomWatch Atlas.

This module loads the lookup tables (region seeds, species and crop lists,
derived-metric scores, colour tables, region views) from YAML using
OmegaConf, so tables can be swapped or overridden without code changes.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional, Union
from omegaconf import OmegaConf, DictConfig
import yaml
import logging

logger = logging.getLogger(__name__)

DEFAULT_TABLES_PATH = Path(__file__).resolve().parents[1] / "data" / "lookup_tables.yaml"

REQUIRED_SECTIONS = [
    'year',
    'generation.bloom_regions',
    'generation.species_by_country',
    'generation.crops_by_country',
    'derived_metrics.impact_scores',
    'derived_metrics.health_scores',
    'crops.base_yield',
    'styling.intensity_colors',
    'views.regions',
    'playback.speeds',
    'playback.months',
]


class ConfigManager:
    """
    Manage lookup tables and settings for BloomWatch Atlas.

    Supports loading from YAML files, merging overrides from dicts,
    files or environment variables using OmegaConf.
    """

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        """
        Initialize config manager.

        Args:
            config_path: Path to main config file
        """
        self.config_path = config_path
        self.config = None

        if config_path:
            self.load_config(config_path)

    def load_config(self, config_path: Union[str, Path]) -> DictConfig:
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to config file

        Returns:
            DictConfig: Loaded configuration
        """
        config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, 'r', encoding='utf-8') as f:
            config_dict = yaml.safe_load(f)

        self.config = OmegaConf.create(config_dict)

        # Resolve interpolations once so lookups stay plain values
        self.config = OmegaConf.create(OmegaConf.to_container(self.config, resolve=True))

        logger.info(f"Configuration loaded from: {config_path}")
        return self.config

    def merge_config(self, override_config: Union[str, Dict, DictConfig]) -> DictConfig:
        """
        Merge configuration with overrides.

        Args:
            override_config: Override config (file path, dict, or DictConfig)

        Returns:
            DictConfig: Merged configuration
        """
        if isinstance(override_config, (str, Path)):
            with open(override_config, 'r', encoding='utf-8') as f:
                override_dict = yaml.safe_load(f)
            override_config = OmegaConf.create(override_dict)
        elif isinstance(override_config, dict):
            override_config = OmegaConf.create(override_config)

        if self.config is None:
            self.config = override_config
        else:
            self.config = OmegaConf.merge(self.config, override_config)

        return self.config

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by key path.

        Args:
            key: Dot-separated key path (e.g., 'crops.base_yield.Rice')
            default: Default value if key not found

        Returns:
            Configuration value
        """
        if self.config is None:
            return default
        return OmegaConf.select(self.config, key, default=default)

    def set(self, key: str, value: Any):
        """Set configuration value by dot-separated key path."""
        if self.config is None:
            self.config = OmegaConf.create({})

        OmegaConf.update(self.config, key, value, merge=True)

    def save_config(self, save_path: Union[str, Path]):
        """
        Save current configuration to file.

        Args:
            save_path: Path to save config file
        """
        save_path = Path(save_path)
        save_path.parent.mkdir(parents=True, exist_ok=True)

        with open(save_path, 'w', encoding='utf-8') as f:
            OmegaConf.save(config=self.config, f=f)

        logger.info(f"Configuration saved to: {save_path}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        if self.config is None:
            return {}
        return OmegaConf.to_container(self.config, resolve=True)

    def validate_config(self) -> Dict[str, Any]:
        """
        Validate the lookup tables and return a validation report.

        Returns:
            Dict with validation results
        """
        validation_report = {
            'valid': True,
            'errors': [],
            'warnings': []
        }

        if self.config is None:
            validation_report['valid'] = False
            validation_report['errors'].append("No configuration loaded")
            return validation_report

        for field in REQUIRED_SECTIONS:
            if self.get(field) is None:
                validation_report['valid'] = False
                validation_report['errors'].append(f"Missing required field: {field}")

        speeds = self.get('playback.speeds') or []
        if any(speed <= 0 for speed in speeds):
            validation_report['valid'] = False
            validation_report['errors'].append("playback.speeds must all be positive")

        months = self.get('playback.months') or []
        if months and len(months) != 12:
            validation_report['valid'] = False
            validation_report['errors'].append("playback.months must list twelve months")

        for region in self.get('generation.bloom_regions') or []:
            if region.get('radius', 0) <= 0:
                validation_report['warnings'].append(
                    f"Region {region.get('name')} has a non-positive radius"
                )

        default_region = self.get('views.default_region')
        if default_region and default_region not in (self.get('views.regions') or {}):
            validation_report['valid'] = False
            validation_report['errors'].append(f"Unknown default region: {default_region}")

        return validation_report


def load_lookup_tables(
    tables_path: Optional[Union[str, Path]] = None,
    overrides: Optional[Union[str, Dict]] = None
) -> DictConfig:
    """
    Load and validate the lookup tables.

    Args:
        tables_path: YAML file to load (defaults to the bundled tables)
        overrides: Optional overrides merged on top

    Returns:
        DictConfig: Lookup tables
    """
    config_manager = ConfigManager(tables_path or DEFAULT_TABLES_PATH)

    if overrides:
        config_manager.merge_config(overrides)

    report = config_manager.validate_config()
    for warning in report['warnings']:
        logger.warning(warning)
    if not report['valid']:
        raise ValueError(f"Invalid lookup tables: {'; '.join(report['errors'])}")

    return config_manager.config


@lru_cache(maxsize=1)
def get_default_tables() -> DictConfig:
    """Bundled lookup tables, loaded once per process."""
    return load_lookup_tables()


def load_config_from_env(prefix: str = 'BLOOMWATCH_TABLES_') -> Dict[str, Any]:
    """
    Load lookup-table overrides from environment variables.

    Variables use the given prefix and double underscores to separate
    nested keys, so single underscores survive inside key names.

    Example: BLOOMWATCH_TABLES_GENERATION__BLOOM_COUNT_PER_REGION=5

    Returns:
        Dict with configuration overrides
    """
    env_config = {}

    for key, value in os.environ.items():
        if not key.startswith(prefix):
            continue

        keys = key[len(prefix):].lower().split('__')
        current_dict = env_config

        for k in keys[:-1]:
            current_dict = current_dict.setdefault(k, {})

        if value.lower() in ['true', 'false']:
            current_dict[keys[-1]] = value.lower() == 'true'
        elif value.isdigit():
            current_dict[keys[-1]] = int(value)
        elif '.' in value and all(part.isdigit() for part in value.split('.', 1)):
            current_dict[keys[-1]] = float(value)
        else:
            current_dict[keys[-1]] = value

    return env_config

