"""
Global configuration settings for logmongo.

Loads configuration from environment variables and provides
typed access to the persistence target and logging options.
"""

import os
import logging
from typing import Optional, Dict, Any
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


TRUE_VALUES = ("1", "true", "yes", "on")
FALSE_VALUES = ("0", "false", "no", "off")


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    normalized = value.strip().lower()
    if normalized in TRUE_VALUES:
        return True
    if normalized in FALSE_VALUES:
        return False
    logger.warning(f"Ignoring {name}={value!r}: expected one of {TRUE_VALUES + FALSE_VALUES}")
    return default


@dataclass
class Settings:
    """Global settings for logmongo."""
    
    # Persistence target
    mongodb_uri: str = ""
    db_name: str = ""
    collection: str = ""
    
    # Connection
    server_selection_timeout_ms: int = 5000
    
    # Middleware defaults
    log_format: str = "default"
    immediate: bool = False
    
    # Query adapter
    query_limit: int = 1000
    
    # Logging
    log_level: str = "INFO"
    log_line_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    debug_channels: str = ""
    
    def __post_init__(self):
        """Load settings from environment variables."""
        self.mongodb_uri = os.getenv("MONGODB_URI", self.mongodb_uri)
        self.db_name = os.getenv("LOGMONGO_DB_NAME", self.db_name)
        self.collection = os.getenv("LOGMONGO_COLLECTION", self.collection)
        self.log_format = os.getenv("LOGMONGO_FORMAT", self.log_format)
        self.log_level = os.getenv("LOG_LEVEL", self.log_level)
        self.debug_channels = os.getenv("LOGMONGO_DEBUG", self.debug_channels)
        self.immediate = _env_flag("LOGMONGO_IMMEDIATE", self.immediate)
        
        # Load numeric settings if provided
        if os.getenv("LOGMONGO_QUERY_LIMIT"):
            self.query_limit = int(os.getenv("LOGMONGO_QUERY_LIMIT"))
        if os.getenv("LOGMONGO_SERVER_SELECTION_TIMEOUT_MS"):
            self.server_selection_timeout_ms = int(
                os.getenv("LOGMONGO_SERVER_SELECTION_TIMEOUT_MS")
            )
    
    @property
    def target_configured(self) -> bool:
        """Whether url, db and collection are all set."""
        return bool(self.mongodb_uri and self.db_name and self.collection)
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "mongodb_uri": "***" if self.mongodb_uri else "",
            "db_name": self.db_name,
            "collection": self.collection,
            "server_selection_timeout_ms": self.server_selection_timeout_ms,
            "log_format": self.log_format,
            "immediate": self.immediate,
            "query_limit": self.query_limit,
            "log_level": self.log_level,
            "debug_channels": self.debug_channels,
        }


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None


def configure(
    mongodb_uri: str = None,
    db_name: str = None,
    collection: str = None,
    **kwargs
) -> Settings:
    """
    Configure global settings.
    
    Args:
        mongodb_uri: MongoDB connection URI
        db_name: Database name
        collection: Collection that receives request records
        **kwargs: Additional settings
    
    Returns:
        Configured Settings instance
    """
    settings = get_settings()
    
    if mongodb_uri:
        settings.mongodb_uri = mongodb_uri
    if db_name:
        settings.db_name = db_name
    if collection:
        settings.collection = collection
    
    for key, value in kwargs.items():
        if hasattr(settings, key):
            setattr(settings, key, value)
    
    return settings
