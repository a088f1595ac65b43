"""Shared utilities."""

from __future__ import annotations

from codestream.utils.markers import (
    CODE_END,
    CODE_START,
    ExtractorMode,
    find_start_marker,
    partial_suffix_match,
)

__all__ = [
    "CODE_END",
    "CODE_START",
    "ExtractorMode",
    "find_start_marker",
    "partial_suffix_match",
]
