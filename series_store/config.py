import os
import json
import logging
from typing import Dict, Any
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

# Server Configuration
HOST = os.getenv("SERIES_SERVER_HOST", "0.0.0.0")
PORT = int(os.getenv("SERIES_SERVER_PORT", "8000"))
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")

# Logging Configuration
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_JSON = os.getenv("LOG_JSON", "false").lower() in ("1", "true", "yes")

# Store Configuration
SEED_PATH = os.getenv(
    "SERIES_SEED_PATH",
    os.path.join(os.path.dirname(os.path.abspath(__file__)), "data", "seed.json"),
)
CATCH_ALL_LISTING = os.getenv("SERIES_CATCH_ALL_LISTING", "Other")
SEARCH_FIELD = os.getenv("SERIES_SEARCH_FIELD", "Description")


# ============================================================================
# Settings Loader for config/settings.json
# ============================================================================

# Cache for loaded settings
_settings_cache = None

DEFAULT_SETTINGS: Dict[str, Any] = {
    "capabilities": {
        "browse": True,
        "search": True,
        "edit_series": True,
        "allow_multiple_series_per_request": True,
        "meta": True,
        "revisions": True,
        "revisions_release": True,
        "revisions_complete_history": True,
    },
}


def get_settings_path() -> str:
    """Get the path to settings.json file."""
    override = os.getenv("SERIES_SETTINGS_PATH")
    if override:
        return override
    # Get the project root directory (parent of series_store)
    current_dir = os.path.dirname(os.path.abspath(__file__))
    project_root = os.path.dirname(current_dir)
    return os.path.join(project_root, 'config', 'settings.json')


def load_settings(force_reload: bool = False) -> Dict[str, Any]:
    """
    Load settings from config/settings.json.

    Sections present in the file are merged over the defaults key by key, so
    a file that only switches one capability off keeps the others.

    Args:
        force_reload: If True, reload from file even if cached

    Returns:
        Dictionary of settings with defaults for missing values
    """
    global _settings_cache

    # Return cached settings if available and not forcing reload
    if _settings_cache is not None and not force_reload:
        return _settings_cache

    settings = {section: dict(values) for section, values in DEFAULT_SETTINGS.items()}
    settings_path = get_settings_path()

    if not os.path.exists(settings_path):
        logger.info(f"Settings file not found at {settings_path}, using defaults")
        _settings_cache = settings
        return settings

    try:
        with open(settings_path, 'r') as f:
            file_settings = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Error loading settings from {settings_path}: {e}, using defaults")
        _settings_cache = settings
        return settings

    # Merge with defaults (file settings override defaults)
    for section, values in file_settings.items():
        if isinstance(values, dict) and isinstance(settings.get(section), dict):
            settings[section].update(values)
        else:
            settings[section] = values

    _settings_cache = settings
    return settings


def get_capabilities_config() -> Dict[str, bool]:
    """
    Get capability flags.

    Returns:
        Dictionary mapping capability name to enabled flag
    """
    settings = load_settings()
    return settings.get('capabilities', DEFAULT_SETTINGS['capabilities'])
