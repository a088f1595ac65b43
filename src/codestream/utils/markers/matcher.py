"""Pure marker matching for streamed text (no state, no I/O).

The producer wraps code in ``[CODE_START:<language>]`` ... ``[CODE_END]``.
Both markers are matched as plain, case-sensitive substrings. There is no
escaping, so a literal marker inside prose or code is read as a real one,
and the first ``]`` after ``[CODE_START:`` always terminates the language
tag.
"""

from __future__ import annotations

from dataclasses import dataclass

CODE_START = "[CODE_START:"
CODE_END = "[CODE_END]"
TAG_CLOSE = "]"


@dataclass(frozen=True)
class StartMarker:
    """Location of a complete start marker inside a buffer."""

    start_index: int  # index of the "[" opening the prefix
    end_index: int  # index of the "]" closing the tag
    tag: str

    @property
    def after(self) -> int:
        """Index of the first character following the marker."""
        return self.end_index + len(TAG_CLOSE)


def partial_suffix_match(buffer: str, marker: str) -> int:
    """Return the length of the longest proper prefix of *marker* ending *buffer*.

    Candidates are tried longest first, so the first hit is the answer.
    A full marker inside *buffer* is not reported here; callers look for
    that with ``str.find`` before asking about partial matches.

    Example:
        partial_suffix_match("some text [CODE_ST", CODE_START)  # -> 8
        partial_suffix_match("unrelated", CODE_START)           # -> 0
    """
    for length in range(len(marker) - 1, 0, -1):
        if buffer.endswith(marker[:length]):
            return length
    return 0


def find_start_marker(buffer: str, prefix: str = CODE_START) -> StartMarker | None:
    """Locate the first complete start marker in *buffer*.

    Returns None when *prefix* does not occur, or when it occurs but the
    closing bracket has not arrived yet.
    """
    start = buffer.find(prefix)
    if start < 0:
        return None
    tag_start = start + len(prefix)
    close = buffer.find(TAG_CLOSE, tag_start)
    if close < 0:
        return None
    return StartMarker(start_index=start, end_index=close, tag=buffer[tag_start:close])
