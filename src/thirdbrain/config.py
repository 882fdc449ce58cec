"""Configuration and environment loading for Third Brain."""

from pathlib import Path
from typing import Optional
import os

# Try to load dotenv if available
try:
    from dotenv import load_dotenv
    HAS_DOTENV = True
except ImportError:
    HAS_DOTENV = False


def load_env() -> bool:
    """Load environment variables from .env file.

    Returns:
        True if .env file was found and loaded, False otherwise.
    """
    if not HAS_DOTENV:
        return False

    # Try repo root first (relative to this file)
    repo_root = Path(__file__).parent.parent.parent
    env_file = repo_root / ".env"
    if env_file.exists():
        load_dotenv(env_file)
        return True

    # Try current directory
    if Path(".env").exists():
        load_dotenv()
        return True

    return False


# Third Brain configuration constants
THIRDBRAIN_DIR = ".thirdbrain"
DATABASE_FILE = "notes.db"
CONFIG_FILE = "config.json"
OPENAI_API_KEY_ENV = "OPENAI_API_KEY"

# Import progress is logged every this many pages
IMPORT_LOG_INTERVAL = 256

# Upper bound on outline nesting when walking parent chains
MAX_TREE_DEPTH = 10_000


def get_thirdbrain_path(base_path: Optional[Path] = None) -> Path:
    """Get the .thirdbrain directory path.

    Args:
        base_path: Base path to look for .thirdbrain directory.
                   If None, uses current working directory.

    Returns:
        Path to the .thirdbrain directory.
    """
    if base_path is None:
        base_path = Path.cwd()
    return base_path / THIRDBRAIN_DIR


def get_database_path(base_path: Optional[Path] = None) -> Path:
    """Get the path of the notes database inside .thirdbrain."""
    return get_thirdbrain_path(base_path) / DATABASE_FILE


def load_config(thirdbrain_path: Path):
    """Load the settings stored in config.json.

    Missing files and missing keys fall back to defaults, and keys that are
    not settings are ignored.

    Args:
        thirdbrain_path: Path to the .thirdbrain directory.

    Returns:
        A ThirdBrainConfig instance.
    """
    from .models import ThirdBrainConfig
    from .storage import read_json

    config_file = thirdbrain_path / CONFIG_FILE
    if not config_file.exists():
        return ThirdBrainConfig()

    data = read_json(config_file)
    known = {k: v for k, v in data.items() if k in ThirdBrainConfig.model_fields}
    return ThirdBrainConfig.model_validate(known)


def get_openai_api_key(override: Optional[str] = None) -> Optional[str]:
    """Resolve the OpenAI API key.

    Priority:
    1. Explicit override (e.g. --openai-api-key)
    2. OPENAI_API_KEY environment variable (after .env loading)
    """
    if override:
        return override
    load_env()
    return os.getenv(OPENAI_API_KEY_ENV) or None

