"""
Configuration Management

Unified configuration for the survey report console. Consolidates logging,
web server, backend API and report settings with `.config.json` support and
environment variable overrides.

Author: Survey Console Team
"""

import os
import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field
from enum import Enum


class Environment(Enum):
    """Supported environments"""
    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"


class LogLevel(Enum):
    """Supported log levels"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@dataclass
class LoggingConfig:
    """Logging configuration"""
    level: LogLevel = LogLevel.INFO
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"
    file_rotation_size: int = 10 * 1024 * 1024  # 10MB
    file_retention_count: int = 5
    enable_console: bool = True
    enable_file: bool = False
    logs_dir: Path = field(default_factory=lambda: Path("data/logs"))


@dataclass
class WebConfig:
    """Web interface configuration"""
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False
    log_level: str = "info"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])


@dataclass
class BackendConfig:
    """Survey backend API connection settings"""
    base_url: str = "http://localhost:3000/api"
    report_endpoint: str = "/dashboard/002"
    access_token: Optional[str] = None
    timeout_seconds: int = 60


@dataclass
class ReportsConfig:
    """Tabular report settings"""
    per_page: int = 50
    display_timezone: str = "America/Bogota"


class UnifiedConfig:
    """
    Central configuration management system
    Implements singleton pattern and environment-aware configuration
    Loads from .config.json file with environment variable overrides
    """

    _instance: Optional['UnifiedConfig'] = None
    _initialized: bool = False
    _config_file = Path(".config.json")
    _json_config: Optional[Dict[str, Any]] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._load_json_config()

        env_mode = self._get_config_value('environment', 'mode', default='development')
        if not env_mode or not isinstance(env_mode, str):
            env_mode = 'development'
        env_var = os.getenv('SURVEY_ENVIRONMENT')
        if env_var:
            env_mode = env_var
        try:
            self.environment = Environment(env_mode)
        except ValueError:
            logging.getLogger(__name__).warning(f"Unknown environment '{env_mode}'. Using development.")
            self.environment = Environment.DEVELOPMENT

        self.logging = self._load_logging_config()
        self.web = self._load_web_config()
        self.backend = self._load_backend_config()
        self.reports = self._load_reports_config()

        self._initialized = True

    def _load_json_config(self):
        """Load configuration from .config.json file"""
        if self._config_file.exists():
            try:
                with open(self._config_file, 'r', encoding='utf-8') as f:
                    self._json_config = json.load(f)
                logging.getLogger(__name__).info(f"Loaded configuration from {self._config_file}")
            except (json.JSONDecodeError, IOError) as e:
                logging.getLogger(__name__).warning(f"Error loading {self._config_file}: {e}. Using defaults.")
                self._json_config = None
        else:
            logging.getLogger(__name__).debug(f"Config file {self._config_file} not found. Using defaults.")
            self._json_config = None

    def _get_config_value(self, *keys, default=None):
        """
        Get a value from JSON config using nested keys
        Example: _get_config_value('backend', 'base_url', default='http://localhost:3000/api')
        """
        if not self._json_config:
            return default

        value = self._json_config
        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        # Skip documentation keys (keys starting with _)
        if isinstance(value, dict):
            return {k: v for k, v in value.items() if not k.startswith('_')} if value else default

        return value if value is not None else default

    def _load_logging_config(self) -> LoggingConfig:
        """Load logging configuration from JSON and environment overrides"""
        log_config = self._get_config_value('logging', default={})
        config = LoggingConfig()

        log_level = os.getenv('SURVEY_LOG_LEVEL', log_config.get('level', 'INFO'))
        try:
            config.level = LogLevel(log_level.upper())
        except ValueError:
            config.level = LogLevel.INFO

        config.format = os.getenv('SURVEY_LOG_FORMAT', log_config.get('format', config.format))
        config.date_format = log_config.get('date_format', config.date_format)
        rotation_mb = log_config.get('file_rotation_size_mb', 10)
        config.file_rotation_size = rotation_mb * 1024 * 1024
        config.file_retention_count = log_config.get('file_retention_count', 5)
        config.enable_console = log_config.get('enable_console', True)
        config.enable_file = log_config.get('enable_file', False)
        config.logs_dir = Path(os.getenv('SURVEY_LOGS_DIR', log_config.get('logs_dir', 'data/logs')))

        # Explicit env level wins over the environment preset
        if self.environment == Environment.DEVELOPMENT and not os.getenv('SURVEY_LOG_LEVEL'):
            config.level = LogLevel.DEBUG
        elif self.environment == Environment.PRODUCTION:
            config.enable_console = False

        return config

    def _load_web_config(self) -> WebConfig:
        """Load web configuration from JSON and environment overrides"""
        web_config = self._get_config_value('web', default={})
        config = WebConfig()

        config.host = os.getenv('WEB_HOST', web_config.get('host', '0.0.0.0'))
        config.port = int(os.getenv('WEB_PORT', str(web_config.get('port', 8000))))
        config.reload = web_config.get('reload', False)
        config.log_level = os.getenv('WEB_LOG_LEVEL', web_config.get('log_level', 'info'))
        config.cors_origins = web_config.get('cors_origins', ['*'])

        if self.environment == Environment.DEVELOPMENT:
            config.reload = True
            config.log_level = "debug"

        return config

    def _load_backend_config(self) -> BackendConfig:
        """Load survey backend settings. The access token only comes from the environment."""
        backend_config = self._get_config_value('backend', default={})
        config = BackendConfig()

        config.base_url = os.getenv('SURVEY_API_BASE_URL', backend_config.get('base_url', config.base_url)).rstrip('/')
        config.report_endpoint = backend_config.get('report_endpoint', config.report_endpoint)
        config.access_token = os.getenv('SURVEY_API_TOKEN') or None
        config.timeout_seconds = int(os.getenv('SURVEY_API_TIMEOUT', str(backend_config.get('timeout_seconds', 60))))

        return config

    def _load_reports_config(self) -> ReportsConfig:
        """Load report settings from JSON and environment overrides"""
        reports_config = self._get_config_value('reports', default={})
        config = ReportsConfig()

        config.per_page = int(os.getenv('SURVEY_REPORT_PER_PAGE', str(reports_config.get('per_page', 50))))
        if config.per_page < 1:
            logging.getLogger(__name__).warning(f"Invalid per_page {config.per_page}. Using 50.")
            config.per_page = 50
        config.display_timezone = os.getenv(
            'SURVEY_DISPLAY_TIMEZONE',
            reports_config.get('display_timezone', config.display_timezone)
        )

        return config

    def is_development(self) -> bool:
        """Check if running in development mode"""
        return self.environment == Environment.DEVELOPMENT

    def is_production(self) -> bool:
        """Check if running in production mode"""
        return self.environment == Environment.PRODUCTION

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary for serialization"""
        return {
            'environment': self.environment.value,
            'web': {
                'host': self.web.host,
                'port': self.web.port,
                'reload': self.web.reload
            },
            'backend': {
                'base_url': self.backend.base_url,
                'report_endpoint': self.backend.report_endpoint,
                'timeout_seconds': self.backend.timeout_seconds
            },
            'reports': {
                'per_page': self.reports.per_page,
                'display_timezone': self.reports.display_timezone
            }
        }


# Global configuration instance (singleton)
config = UnifiedConfig()


def get_config() -> UnifiedConfig:
    """Get the global configuration instance"""
    return config


def setup_logging():
    """Setup logging configuration based on current config"""
    import logging.handlers
    from datetime import datetime

    log_config = config.logging
    root_logger = logging.getLogger()

    logging.basicConfig(
        level=getattr(logging, log_config.level.value),
        format=log_config.format,
        datefmt=log_config.date_format,
        force=True
    )

    if log_config.enable_file:
        log_config.logs_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_config.logs_dir / f"survey_console_{datetime.now().strftime('%Y%m%d')}.log"

        existing_file_handler = None
        for handler in root_logger.handlers:
            if isinstance(handler, logging.handlers.RotatingFileHandler):
                if handler.baseFilename == str(log_file.resolve()):
                    existing_file_handler = handler
                    break

        if existing_file_handler is None:
            file_handler = logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=log_config.file_rotation_size,
                backupCount=log_config.file_retention_count,
                encoding='utf-8'
            )
            file_handler.setFormatter(logging.Formatter(log_config.format, log_config.date_format))
            root_logger.addHandler(file_handler)

    # Disable console logging in production if configured
    if not log_config.enable_console and config.is_production():
        root_logger.handlers = [h for h in root_logger.handlers
                                if isinstance(h, logging.handlers.RotatingFileHandler)
                                or not isinstance(h, logging.StreamHandler)]
