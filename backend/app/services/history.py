"""Undo/redo log for a single project.

The history is a flat list of snapshots with a cursor. Committing while the
cursor is behind the tail discards everything after the cursor first, so the
log never branches.
"""
from typing import Any, Dict, List, Sequence, Tuple

from pydantic import ValidationError

from app.schemas.app_state import AppState, HistoryDocument, VersionSummary
from app.utils.exceptions import AtGenesis, AtHead, InvalidArgumentError


class VersionHistory:
    """Ordered, cursor-addressed sequence of AppState snapshots."""

    def __init__(self, versions: Sequence[AppState], current_index: int):
        if not versions:
            raise InvalidArgumentError("History must contain at least one version")
        if not 0 <= current_index < len(versions):
            raise InvalidArgumentError(
                f"currentIndex {current_index} out of range for {len(versions)} versions"
            )
        self._versions: List[AppState] = list(versions)
        self._current_index = current_index

    @classmethod
    def start(cls, genesis: AppState) -> "VersionHistory":
        """New history holding only the genesis state."""
        return cls([genesis.model_copy(deep=True)], 0)

    @property
    def versions(self) -> Tuple[AppState, ...]:
        return tuple(self._versions)

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def can_undo(self) -> bool:
        return self._current_index > 0

    @property
    def can_redo(self) -> bool:
        return self._current_index < len(self._versions) - 1

    def __len__(self) -> int:
        return len(self._versions)

    def current(self) -> AppState:
        return self._versions[self._current_index]

    def commit(self, state: AppState) -> AppState:
        """Append ``state`` after the cursor, dropping any redo tail."""
        del self._versions[self._current_index + 1:]
        self._versions.append(state.model_copy(deep=True))
        self._current_index = len(self._versions) - 1
        return self.current()

    def undo(self) -> AppState:
        if not self.can_undo:
            raise AtGenesis()
        self._current_index -= 1
        return self.current()

    def redo(self) -> AppState:
        if not self.can_redo:
            raise AtHead()
        self._current_index += 1
        return self.current()

    def restore(self, index: int) -> AppState:
        """Jump the cursor to ``index`` without changing the stored versions."""
        if not 0 <= index < len(self._versions):
            raise InvalidArgumentError(
                f"Version {index} does not exist (history has {len(self._versions)} versions)"
            )
        self._current_index = index
        return self.current()

    def summaries(self) -> List[VersionSummary]:
        return [
            VersionSummary(
                index=index,
                projectName=version.projectName,
                fileCount=len(version.files),
                messageCount=len(version.chatMessages),
                isCurrent=index == self._current_index,
            )
            for index, version in enumerate(self._versions)
        ]

    def to_document(self) -> Dict[str, Any]:
        """JSON-ready form stored in the projects table."""
        return {
            "versions": [version.model_dump(mode="json") for version in self._versions],
            "currentIndex": self._current_index,
        }

    @classmethod
    def from_document(cls, document: Any) -> "VersionHistory":
        """Rebuild a history from its stored or submitted JSON form."""
        if isinstance(document, HistoryDocument):
            parsed = document
        else:
            try:
                parsed = HistoryDocument.model_validate(document)
            except ValidationError as e:
                raise InvalidArgumentError(f"Malformed history document: {e.error_count()} error(s)")
        return cls(parsed.versions, parsed.currentIndex)
