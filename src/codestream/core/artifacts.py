"""Code artifacts extracted from streamed responses."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Iterator

from codestream.errors import ArtifactClosedError

logger = logging.getLogger(__name__)


def make_title(language: str) -> str:
    """Display label for an artifact, e.g. ``"python"`` -> ``"Python Code"``."""
    if not language:
        return "Code"
    return f"{language[:1].upper()}{language[1:]} Code"


@dataclass(eq=False)
class Artifact:
    """One code block extracted from a response.

    Content grows while ``collecting`` is True and is frozen once the end
    marker closes the block. An artifact whose block was never closed keeps
    ``collecting=True`` for good.
    """

    language: str = ""
    content: str = ""
    collecting: bool = True
    kind: str = "code"
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    title: str = ""

    def __post_init__(self) -> None:
        if not self.title:
            self.title = make_title(self.language)

    def append(self, text: str) -> None:
        """Add *text* to the content of a collecting artifact."""
        if not self.collecting:
            error = f"Artifact {self.id} is closed"
            raise ArtifactClosedError(error)
        self.content += text

    def close(self) -> None:
        """Mark the artifact complete; content is immutable afterwards."""
        self.collecting = False

    @property
    def placeholder(self) -> str:
        """Inline stand-in shown in narration where the block was."""
        return f"[Code: {self.language}]"


class ArtifactStore:
    """Ordered artifact collection plus the artifact currently on display.

    The collection holds the same objects the extractor mutates, so content
    updates are visible here without copying. ``current`` may be changed by
    callers at any time; it is only a display pointer.
    """

    def __init__(self) -> None:
        self._artifacts: list[Artifact] = []
        self._current: Artifact | None = None

    def __iter__(self) -> Iterator[Artifact]:
        return iter(list(self._artifacts))

    def __len__(self) -> int:
        return len(self._artifacts)

    @property
    def artifacts(self) -> list[Artifact]:
        """Copy of the collection in creation order."""
        return list(self._artifacts)

    @property
    def current(self) -> Artifact | None:
        return self._current

    @current.setter
    def current(self, artifact: Artifact | None) -> None:
        if artifact is not None and artifact not in self._artifacts:
            error = f"Artifact {artifact.id} is not in this collection"
            raise ValueError(error)
        self._current = artifact

    @property
    def open_artifacts(self) -> list[Artifact]:
        """Artifacts still marked as collecting."""
        return [a for a in self._artifacts if a.collecting]

    def add(self, artifact: Artifact) -> None:
        """Append a new artifact and make it current."""
        self._artifacts.append(artifact)
        self._current = artifact
        logger.debug("Added artifact %s (%s)", artifact.id, artifact.language)

    def get(self, artifact_id: str) -> Artifact | None:
        for artifact in self._artifacts:
            if artifact.id == artifact_id:
                return artifact
        return None

    def select(self, artifact_id: str) -> Artifact:
        """Make the artifact with *artifact_id* current."""
        artifact = self.get(artifact_id)
        if artifact is None:
            raise KeyError(artifact_id)
        self._current = artifact
        return artifact

    def clear(self) -> None:
        """Drop every artifact."""
        self._artifacts = []
        self._current = None
