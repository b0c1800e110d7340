"""
Unit Tests for the project version history (undo/redo log)
"""
import json

import pytest
from pydantic import ValidationError

from app.schemas.app_state import AppState, Message
from app.services.history import VersionHistory
from app.utils.exceptions import AtGenesis, AtHead, InvalidArgumentError


def make_state(label: str, **fields) -> AppState:
    return AppState(projectName=label, files={f"{label}.html": f"<p>{label}</p>"}, **fields)


def history_with(count: int) -> VersionHistory:
    """History holding versions v0..v{count-1}, cursor at the tail."""
    history = VersionHistory.start(make_state("v0"))
    for i in range(1, count):
        history.commit(make_state(f"v{i}"))
    return history


class TestConstruction:
    """Test history invariants on creation"""

    def test_start_has_single_genesis_version(self):
        genesis = make_state("genesis")
        history = VersionHistory.start(genesis)

        assert len(history) == 1
        assert history.current_index == 0
        assert history.current() == genesis
        assert history.can_undo is False
        assert history.can_redo is False

    def test_empty_versions_rejected(self):
        with pytest.raises(InvalidArgumentError):
            VersionHistory([], 0)

    @pytest.mark.parametrize("index", [-1, 3, 10])
    def test_out_of_range_cursor_rejected(self, index):
        states = [make_state("a"), make_state("b"), make_state("c")]
        with pytest.raises(InvalidArgumentError):
            VersionHistory(states, index)


class TestCommit:
    """Test branch-discarding commits"""

    def test_commit_at_tail_appends(self):
        history = history_with(3)
        new_state = make_state("new")

        result = history.commit(new_state)

        assert result == new_state
        assert len(history) == 4
        assert history.current_index == 3
        assert history.current() == new_state

    def test_commit_behind_tail_discards_future(self):
        history = history_with(5)
        history.undo()
        history.undo()
        history.undo()
        k = history.current_index
        assert k == 1

        new_state = make_state("branch")
        history.commit(new_state)

        assert len(history) == k + 2
        assert history.versions[k + 1] == new_state
        assert history.current_index == k + 1
        assert [v.projectName for v in history.versions] == ["v0", "v1", "branch"]
        assert history.can_redo is False

    def test_commit_stores_a_copy(self):
        history = history_with(1)
        files = {"index.html": "<h1>hi</h1>"}
        state = AppState(projectName="p", files=files)

        history.commit(state)
        files["index.html"] = "changed"

        assert history.current().files["index.html"] == "<h1>hi</h1>"

    def test_stored_states_are_immutable(self):
        history = history_with(2)

        with pytest.raises(ValidationError):
            history.current().projectName = "renamed"


class TestNavigation:
    """Test undo/redo/restore"""

    def test_undo_to_genesis_then_at_genesis(self):
        n = 6
        history = history_with(n)

        for _ in range(n - 1):
            history.undo()

        assert history.current_index == 0
        with pytest.raises(AtGenesis):
            history.undo()
        assert history.current_index == 0

    def test_undo_returns_previous_state(self):
        history = history_with(3)

        assert history.undo().projectName == "v1"
        assert history.undo().projectName == "v0"

    def test_redo_walks_forward(self):
        history = history_with(3)
        history.undo()
        history.undo()

        assert history.redo().projectName == "v1"
        assert history.redo().projectName == "v2"

    def test_redo_at_head_is_idempotent(self):
        history = history_with(3)

        with pytest.raises(AtHead):
            history.redo()
        with pytest.raises(AtHead):
            history.redo()

        assert history.current_index == 2
        assert len(history) == 3
        assert history.current().projectName == "v2"

    def test_single_version_cannot_move(self):
        history = history_with(1)

        with pytest.raises(AtGenesis):
            history.undo()
        with pytest.raises(AtHead):
            history.redo()

    def test_restore_moves_cursor_without_growth(self):
        history = history_with(4)

        restored = history.restore(1)

        assert restored.projectName == "v1"
        assert history.current_index == 1
        assert len(history) == 4
        assert history.can_redo is True

    def test_restore_out_of_range(self):
        history = history_with(2)

        with pytest.raises(InvalidArgumentError):
            history.restore(2)
        assert history.current_index == 1


class TestSerialization:
    """Test the persisted JSON form"""

    def test_round_trip_reproduces_versions_and_cursor(self):
        history = history_with(4)
        history.commit(AppState(
            projectName="chatty",
            chatMessages=[Message(role="user", content="make it blue")],
        ))
        history.undo()
        history.undo()

        document = json.loads(json.dumps(history.to_document()))
        restored = VersionHistory.from_document(document)

        assert restored.versions == history.versions
        assert restored.current_index == history.current_index

    def test_document_uses_camel_case_layout(self):
        document = history_with(2).to_document()

        assert set(document) == {"versions", "currentIndex"}
        assert document["currentIndex"] == 1
        assert "previewHtml" in document["versions"][0]
        assert "chatMessages" in document["versions"][0]

    def test_from_document_rejects_empty_versions(self):
        with pytest.raises(InvalidArgumentError):
            VersionHistory.from_document({"versions": [], "currentIndex": 0})

    def test_from_document_rejects_bad_cursor(self):
        document = history_with(2).to_document()
        document["currentIndex"] = 5

        with pytest.raises(InvalidArgumentError):
            VersionHistory.from_document(document)

    def test_summaries_mark_current(self):
        history = history_with(3)
        history.undo()

        summaries = history.summaries()

        assert [s.index for s in summaries] == [0, 1, 2]
        assert [s.isCurrent for s in summaries] == [False, True, False]
        assert summaries[1].fileCount == 1
