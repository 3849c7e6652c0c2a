"""Resource loading utilities for lucide-picker.

Uses importlib.resources for robust package data access that works
whether installed normally, editable, or bundled.
"""

from functools import lru_cache
from importlib.resources import files
from pathlib import Path


@lru_cache
def get_data_file(name: str) -> str:
    """Load a file from lucide_picker/data/.

    Args:
        name: Data filename (e.g., "icons.json")

    Returns:
        File content as string
    """
    return files("lucide_picker.data").joinpath(name).read_text(encoding="utf-8")


def get_default_catalog_json() -> str:
    """Get the bundled icon catalog (name -> tags) as JSON text."""
    return get_data_file("icons.json")


def get_default_sprite() -> str:
    """Get the bundled symbol sprite."""
    return get_data_file("sprite.svg")


def get_default_sprite_path() -> Path:
    """Filesystem path of the bundled sprite, for the sprite loader."""
    return Path(str(files("lucide_picker.data").joinpath("sprite.svg")))
