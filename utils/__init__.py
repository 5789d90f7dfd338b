"""Utility modules for the UI health monitor."""

from utils.string_utils import (
    truncate,
    dedup_key,
    first_match,
)

__all__ = [
    'truncate',
    'dedup_key',
    'first_match',
]
