"""
Enums used across the gitops_sync package.

This module contains enum definitions that are used by multiple modules
to avoid circular import issues.
"""

import enum
from typing import Union


class GitProvider(str, enum.Enum):
    """Supported git hosting providers."""

    GITHUB = "GITHUB"
    GITLAB = "GITLAB"
    AZURE_DEVOPS = "AZURE_DEVOPS"

    @classmethod
    def parse(cls, value: Union[str, "GitProvider"]) -> "GitProvider":
        """Resolve a provider from its name, ignoring case and surrounding whitespace."""
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().upper())
