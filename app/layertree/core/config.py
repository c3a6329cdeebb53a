"""View configuration and settings.

This module provides the configuration model and I/O functions that
control how layer trees are displayed: attribute columns, automatic
collapsing, hiding unmodified entries and diff colors.

Configuration is stored in ~/.config/layertree/config.toml
"""

import logging
import os
import re
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

import tomli_w
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
)

from layertree.core.paths import get_config_path
from layertree.filetree import DiffType, FileTree

logger = logging.getLogger(__name__)

_HEX_COLOR = re.compile(r"#(?:[0-9a-fA-F]{3}){1,2}")


class DiffColors(BaseModel):
    """Colors used to render each diff type.

    All colors must be valid hex codes (#RRGGBB or #RGB).
    """

    model_config = ConfigDict(extra="forbid")

    unmodified: str = "#ffffff"
    added: str = "#c1ff62"
    modified: str = "#0e8ac8"
    removed: str = "#f53263"

    @field_validator("*", mode="before")
    @classmethod
    def check_hex(cls, value: object, info: ValidationInfo) -> str:
        """Accept #RGB or #RRGGBB, ignoring surrounding whitespace."""
        color = value.strip() if isinstance(value, str) else ""
        if not _HEX_COLOR.fullmatch(color):
            msg = f"{info.field_name}: expected a #RGB or #RRGGBB color, got {value!r}"
            raise ValueError(msg)
        return color

    def for_diff_type(self, diff_type: DiffType | None) -> str:
        """Return the color for a diff type (unlabelled nodes are unmodified)."""
        if diff_type is None:
            return self.unmodified
        return str(getattr(self, diff_type.value))


class ViewConfig(BaseModel):
    """Configuration for tree display.

    Attributes:
        show_attributes: Prefix rows with permissions, owner and size.
        hide_unmodified: Hide unmodified entries in diff views.
        collapse_depth: Collapse directories at this depth or deeper
            (1 = top-level directories). None disables auto-collapse.
        with_digest: Hash regular files while scanning layers.
        colors: Per diff type colors.
    """

    model_config = ConfigDict(extra="forbid")

    show_attributes: Annotated[
        bool,
        Field(description="Show the attribute column"),
    ] = False
    hide_unmodified: Annotated[
        bool,
        Field(description="Hide unmodified entries in diff views"),
    ] = False
    collapse_depth: Annotated[
        int | None,
        Field(ge=1, description="Collapse directories at this depth or deeper"),
    ] = None
    with_digest: Annotated[
        bool,
        Field(description="Hash regular files while scanning layers"),
    ] = False
    colors: DiffColors = Field(default_factory=DiffColors)


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when the config file is not found."""


class ConfigParseError(ConfigError):
    """Raised when the config file cannot be parsed."""


def load_config(path: Path | None = None) -> ViewConfig:
    """Load view configuration from a TOML file.

    Args:
        path: Path to the config file. If None, uses default config path.

    Returns:
        Validated ViewConfig object.

    Raises:
        ConfigNotFoundError: If the config file doesn't exist.
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the content doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        raise ConfigNotFoundError(f"Config not found: {config_path}")

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config: {e}") from e

    try:
        config = ViewConfig.model_validate(data)
    except (ValueError, ValidationError) as e:
        raise ConfigError(f"Invalid config content: {e}") from e

    logger.debug("Loaded view config from %s", config_path)
    return config


def load_config_or_default(path: Path | None = None) -> ViewConfig:
    """Load the view configuration, falling back to defaults if missing.

    Parse and validation errors still propagate.
    """
    try:
        return load_config(path)
    except ConfigNotFoundError:
        logger.debug("No config file found, using defaults")
        return ViewConfig()


def save_config(config: ViewConfig, path: Path | None = None) -> Path:
    """Save view configuration to a TOML file.

    The TOML is written to a temporary file next to the target and moved
    into place with os.replace(), so readers never see a partial file.

    Args:
        config: The ViewConfig object to save.
        path: Path to save the config. If None, uses default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()

    config_path.parent.mkdir(parents=True, exist_ok=True)
    data = _config_to_dict(config)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path


def _config_to_dict(config: ViewConfig) -> dict[str, object]:
    """Convert ViewConfig to a dictionary for TOML serialization.

    TOML has no null, so an unset collapse_depth is left out.

    Args:
        config: The ViewConfig to convert.

    Returns:
        Dictionary ready for TOML serialization.
    """
    result: dict[str, object] = {
        "show_attributes": config.show_attributes,
        "hide_unmodified": config.hide_unmodified,
        "with_digest": config.with_digest,
    }
    if config.collapse_depth is not None:
        result["collapse_depth"] = config.collapse_depth
    result["colors"] = config.colors.model_dump()
    return result


def dump_config(config: ViewConfig) -> str:
    """Render a config as the TOML text save_config would write."""
    return tomli_w.dumps(_config_to_dict(config))


def apply_view_config(tree: FileTree, config: ViewConfig) -> None:
    """Set collapsed and hidden flags on a tree according to the config.

    Args:
        tree: Tree whose view state is updated in place.
        config: Settings to apply.
    """
    for node in tree.iter_nodes():
        view = node.data.view_info
        if config.collapse_depth is not None and not node.is_leaf:
            depth = node.path.count("/")
            if depth >= config.collapse_depth:
                view.collapsed = True
        if config.hide_unmodified and node.data.diff_type == DiffType.UNMODIFIED:
            view.hidden = True
