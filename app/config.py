"""
Configuration management for the FastAPI application.

This module handles loading and managing configuration settings
for the BloomWatch Atlas API and CLI.
"""

import os
from typing import List, Optional, Dict, Any
from pathlib import Path


class AppConfig:
    """
    Application configuration class.

    Manages configuration settings loaded from environment variables.
    """

    def __init__(self):
        """Initialize configuration with default values and load from environment."""
        # API settings
        self.host: str = os.getenv('BLOOMWATCH_HOST', '0.0.0.0')
        self.port: int = int(os.getenv('BLOOMWATCH_PORT', '8000'))
        self.reload: bool = os.getenv('BLOOMWATCH_RELOAD', 'false').lower() == 'true'

        # Data settings
        seed = os.getenv('BLOOMWATCH_SEED')
        self.seed: Optional[int] = int(seed) if seed else None
        self.tables_path: Optional[str] = os.getenv('BLOOMWATCH_TABLES_PATH')
        self.output_dir: str = os.getenv('BLOOMWATCH_OUTPUT_DIR', './outputs')
        self.default_region: Optional[str] = os.getenv('BLOOMWATCH_DEFAULT_REGION')

        # Logging settings
        self.log_level: str = os.getenv('BLOOMWATCH_LOG_LEVEL', 'INFO').upper()
        self.log_dir: Optional[str] = os.getenv('BLOOMWATCH_LOG_DIR')
        self.log_json: bool = os.getenv('BLOOMWATCH_LOG_JSON', 'false').lower() == 'true'

        # CORS settings
        self.cors_origins: List[str] = self._load_cors_origins()
        self.cors_methods: List[str] = ['GET', 'POST', 'OPTIONS']
        self.cors_headers: List[str] = ['*']

        # Validate configuration
        self._validate_config()

    def _load_cors_origins(self) -> List[str]:
        """Load CORS origins from environment variable."""
        origins_str = os.getenv('BLOOMWATCH_CORS_ORIGINS', '*')
        if origins_str == '*':
            return ['*']
        return [origin.strip() for origin in origins_str.split(',') if origin.strip()]

    def _validate_config(self):
        """Validate configuration values."""
        if not (1 <= self.port <= 65535):
            raise ValueError(f"Invalid port number: {self.port}")

        if self.log_level not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            raise ValueError(f"Invalid log level: {self.log_level}")

        if self.seed is not None and self.seed < 0:
            raise ValueError(f"seed must be non-negative: {self.seed}")

        if self.tables_path and not Path(self.tables_path).is_file():
            raise ValueError(f"Lookup tables not found: {self.tables_path}")

        if self.log_dir:
            Path(self.log_dir).mkdir(parents=True, exist_ok=True)

    def table_overrides(self) -> Dict[str, Any]:
        """Lookup-table overrides implied by the environment."""
        overrides: Dict[str, Any] = {}
        if self.default_region:
            overrides['views'] = {'default_region': self.default_region}
        return overrides

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert configuration to dictionary.

        Returns:
            Dict with configuration values
        """
        return {
            'host': self.host,
            'port': self.port,
            'reload': self.reload,
            'seed': self.seed,
            'tables_path': self.tables_path,
            'output_dir': self.output_dir,
            'default_region': self.default_region,
            'log_level': self.log_level,
            'log_dir': self.log_dir,
            'log_json': self.log_json,
            'cors_origins': self.cors_origins,
            'cors_methods': self.cors_methods,
            'cors_headers': self.cors_headers
        }

    def __str__(self) -> str:
        return f"AppConfig({self.to_dict()})"

