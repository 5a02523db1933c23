"""
Utility functions for the skycast application.
"""

import os


def get_project_root() -> str:
    """
    Get the project root directory (parent of src/skycast).

    Returns:
        Absolute path to the project root directory
    """
    return os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def truncate(text: str, limit: int) -> str:
    """
    Shorten text for log output.

    Args:
        text: Text to shorten
        limit: Maximum number of characters kept

    Returns:
        The text unchanged when short enough, otherwise its first ``limit``
        characters followed by "..."
    """
    if len(text) <= limit:
        return text
    return text[:limit] + "..."
