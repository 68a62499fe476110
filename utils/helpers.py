"""
Helper Utility Module

This module provides various helper functions used throughout the shippost application.
"""

import os
import unicodedata
from typing import Any, Dict, Optional


def count_characters(text: str) -> int:
    """
    Count characters the way the X API does.

    Text is NFC-normalized first so a combining sequence such as "e" + U+0301
    counts the same as the precomposed "é". The result is a count of code
    points, not grapheme clusters: an emoji with a skin-tone modifier or a
    ZWJ sequence counts as two or more.

    Args:
        text: The text to measure

    Returns:
        int: Number of code points after normalization
    """
    if not text:
        return 0
    return len(unicodedata.normalize("NFC", text))


def truncate_text(text: str, max_length: int = 100, add_ellipsis: bool = True) -> str:
    """
    Truncate text to a maximum length.

    Args:
        text: The text to truncate
        max_length: Maximum length, including the ellipsis
        add_ellipsis: Whether to add an ellipsis if text is truncated

    Returns:
        str: Truncated text
    """
    if not text or len(text) <= max_length:
        return text

    if not add_ellipsis:
        return text[:max_length]
    return text[:max(max_length - 3, 0)] + "..."


def safe_get(data: Dict[str, Any], *keys, default: Any = None) -> Any:
    """
    Safely get a value from a nested dictionary.

    Args:
        data: The dictionary to search
        *keys: The keys to follow
        default: Default value if key doesn't exist

    Returns:
        The value at the specified keys or the default value
    """
    for key in keys:
        try:
            data = data[key]
        except (KeyError, TypeError, IndexError):
            return default
    return data


def normalize_media_path(raw: str, home: Optional[str] = None) -> str:
    """
    Turn a pasted or typed file path into a usable local path.

    Handles the forms terminals produce when a file is dragged in:
    surrounding quotes, backslash-escaped spaces and a leading "~".

    Args:
        raw: The text from the path field
        home: Home directory to expand "~" to (defaults to the user's)

    Returns:
        str: The normalized path ("" if nothing was entered)
    """
    path = raw.strip()
    if len(path) >= 2 and path[0] == path[-1] and path[0] in ("'", '"'):
        path = path[1:-1].strip()
    path = path.replace("\\ ", " ")

    if path == "~" or path.startswith("~/"):
        home = home if home is not None else os.path.expanduser("~")
        path = os.path.join(home, path[2:]) if path != "~" else home

    return path


def media_extension(path: str) -> str:
    """Return the lowercase file extension of a path, including the dot."""
    return os.path.splitext(path)[1].lower()


def ensure_dir_exists(directory: str) -> None:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        directory: The directory path to check/create
    """
    if directory and not os.path.exists(directory):
        os.makedirs(directory)
