"""Config file location for layertree.

The view configuration lives under the XDG config home:
$XDG_CONFIG_HOME/layertree/config.toml, or ~/.config/layertree/config.toml
when the variable is unset or empty.
"""

import os
from pathlib import Path

APP_NAME = "layertree"
CONFIG_FILENAME = "config.toml"


def get_config_dir() -> Path:
    """Return the layertree config directory (not created here)."""
    xdg_home = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg_home) if xdg_home else Path.home() / ".config"
    return base / APP_NAME


def get_config_path() -> Path:
    """Return the path of the view config file."""
    return get_config_dir() / CONFIG_FILENAME
