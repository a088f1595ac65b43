"""Code artifact marker matching utilities."""

from __future__ import annotations

from codestream.utils.markers.matcher import (
    CODE_END,
    CODE_START,
    TAG_CLOSE,
    StartMarker,
    find_start_marker,
    partial_suffix_match,
)
from codestream.utils.markers.state import ExtractorMode

__all__ = [
    "CODE_END",
    "CODE_START",
    "TAG_CLOSE",
    "ExtractorMode",
    "StartMarker",
    "find_start_marker",
    "partial_suffix_match",
]
