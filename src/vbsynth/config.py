"""Configuration and environment loading for vbsynth."""

from pathlib import Path
from typing import Optional
import os

from .models import VbsynthConfig

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


# vbsynth configuration constants
VBSYNTH_DIR = ".vbsynth"
CONFIG_FILE = "config.json"

# Line terminators by config name. The editor stores code modules with CRLF.
LINE_TERMINATORS = {
    "crlf": "\r\n",
    "lf": "\n",
}

# Environment variables that override config.json
ENV_INDENT_WIDTH = "VBSYNTH_INDENT_WIDTH"
ENV_LINE_TERMINATOR = "VBSYNTH_LINE_TERMINATOR"
ENV_PROPERTY_VALUE_PARAMETER = "VBSYNTH_PROPERTY_VALUE_PARAMETER"


def get_vbsynth_path(base_path: Optional[Path] = None) -> Path:
    """Get the .vbsynth directory path.

    Args:
        base_path: Base path to look for .vbsynth directory.
                   If None, uses current working directory.

    Returns:
        Path to the .vbsynth directory.
    """
    if base_path is None:
        base_path = Path.cwd()
    return base_path / VBSYNTH_DIR


def find_vbsynth_root(start_path: Optional[Path] = None) -> Optional[Path]:
    """Find the root directory containing .vbsynth by walking up.

    Args:
        start_path: Starting path for search. Defaults to cwd.

    Returns:
        Path to directory containing .vbsynth, or None if not found.
    """
    if start_path is None:
        start_path = Path.cwd()

    current = start_path.resolve()

    while current != current.parent:
        if (current / VBSYNTH_DIR).exists():
            return current
        current = current.parent

    # Check root
    if (current / VBSYNTH_DIR).exists():
        return current

    return None


def load_config(base_path: Optional[Path] = None) -> VbsynthConfig:
    """Load the effective configuration.

    Reads .vbsynth/config.json from the nearest initialized root (if any),
    then applies environment overrides.

    Args:
        base_path: Where to start looking for .vbsynth. Defaults to cwd.

    Returns:
        The validated configuration.

    Raises:
        pydantic.ValidationError: If the file or an override holds an invalid value.
    """
    from .storage import read_json

    load_env()

    data: dict = {}
    root = find_vbsynth_root(base_path)
    if root is not None:
        config_file = get_vbsynth_path(root) / CONFIG_FILE
        if config_file.exists():
            data = read_json(config_file)

    if os.environ.get(ENV_INDENT_WIDTH):
        data["indent_width"] = os.environ[ENV_INDENT_WIDTH]
    if os.environ.get(ENV_LINE_TERMINATOR):
        data["line_terminator"] = os.environ[ENV_LINE_TERMINATOR].lower()
    if os.environ.get(ENV_PROPERTY_VALUE_PARAMETER):
        data["property_value_parameter"] = os.environ[ENV_PROPERTY_VALUE_PARAMETER]

    return VbsynthConfig.model_validate(data)
