#!/usr/bin/env python3
"""
Auxiliary utility functions for Kenosis

Byte formatting and path display helpers shared by the scanner report,
the selection table and the deletion summary.
"""

import os
import pathlib
from typing import Optional

_UNITS = ("KiB", "MiB", "GiB", "TiB")


def format_bytes(size_bytes: int) -> str:
    """Format byte size into human-readable string

    Args:
        size_bytes: Size in bytes to format

    Returns:
        Formatted string like "1.2 GiB", "345.0 MiB", "12.0 KiB", or "789 B"
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"

    value = size_bytes / 1024
    for unit in _UNITS[:-1]:
        if value < 1024:
            return f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} {_UNITS[-1]}"


def format_path_for_display(path: str, home_path: Optional[str] = None) -> str:
    """Abbreviate a leading home directory to ~

    Only a true prefix is replaced: ``/home/ann`` abbreviates
    ``/home/ann/src`` but not ``/home/anna/src`` or ``/srv/home/ann``.

    Args:
        path: Absolute path to format
        home_path: Home directory path (defaults to platform home)

    Returns:
        Path with the home directory replaced by ~ if applicable
    """
    if home_path is None:
        home_path = str(pathlib.Path.home())

    home_path = home_path.rstrip(os.sep) or os.sep
    if path == home_path:
        return "~"
    if home_path != os.sep and path.startswith(home_path + os.sep):
        return "~" + path[len(home_path) :]
    return path
