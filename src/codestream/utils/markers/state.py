"""State machine states for artifact extraction."""

from __future__ import annotations

import enum


class ExtractorMode(enum.Enum):
    """State machine states for marker detection."""

    NARRATING = "narrating"
    COLLECTING = "collecting"
