"""Unit tests for the file reconciler."""

import pytest
from unittest.mock import AsyncMock

from ai_editor.editing.planner import plan_edits
from ai_editor.editing.reconciler import FileReconciler
from ai_editor.models.edit import Edit, ReconcileAction
from ai_editor.services.content_store import TransportError, VersionConflictError


def edit(action, line=None, content="", file_name="a.txt"):
    return Edit(file_name=file_name, action=action, line=line, content=content)


class TestFileReconciler:
    """Test suite for FileReconciler."""

    @pytest.mark.asyncio
    async def test_write_creates_file_in_empty_repository(self, empty_store):
        """Test writing README.md into an empty repository creates it."""
        reconciler = FileReconciler(empty_store)

        result = await reconciler.reconcile(
            "README.md",
            [edit("write", 1, "# Hello", file_name="README.md")],
        )

        assert result.success is True
        assert result.action == ReconcileAction.CREATED
        assert result.content == "# Hello"
        assert empty_store.files["README.md"] == "# Hello"
        assert empty_store.commits[0]["base"] is None

    @pytest.mark.asyncio
    async def test_delete_line_updates_file(self, store):
        """Test deleting line 2 of 'one\\ntwo\\nthree'."""
        reconciler = FileReconciler(store)
        base_version = store.versions["a.txt"]

        result = await reconciler.reconcile("a.txt", [edit("delete", 2, "two")])

        assert result.success is True
        assert result.action == ReconcileAction.UPDATED
        assert result.content == "one\nthree"
        assert store.files["a.txt"] == "one\nthree"
        assert store.commits[0]["base"] == base_version
        assert result.version_token == store.versions["a.txt"]

    @pytest.mark.asyncio
    async def test_insert_into_missing_file_creates_it(self, empty_store):
        reconciler = FileReconciler(empty_store)

        result = await reconciler.reconcile("new.txt", [edit("insert", 3, "third", "new.txt")])

        assert result.action == ReconcileAction.CREATED
        assert empty_store.files["new.txt"] == "\n\nthird"

    @pytest.mark.asyncio
    async def test_delete_mismatch_aborts_whole_file(self, store):
        """Test a mismatch anywhere means nothing is committed."""
        reconciler = FileReconciler(store)
        planned = plan_edits([
            edit("delete", 3, "three"),
            edit("delete", 1, "not one"),
            edit("insert", 1, "zero"),
        ])

        result = await reconciler.reconcile("a.txt", planned)

        assert result.success is False
        assert result.error_type == "DeleteMismatchError"
        assert "line 1" in result.error
        assert store.files["a.txt"] == "one\ntwo\nthree"
        assert store.commits == []

    @pytest.mark.asyncio
    async def test_delete_file(self, store):
        reconciler = FileReconciler(store)

        result = await reconciler.reconcile("a.txt", [edit("delete_file")])

        assert result.success is True
        assert result.action == ReconcileAction.DELETED
        assert result.content is None
        assert "a.txt" not in store.files
        assert store.commits[0]["message"] == "AI: delete file a.txt"

    @pytest.mark.asyncio
    async def test_delete_file_wins_over_insert(self, store):
        """Test [insert@1, delete_file] deletes the file without inserting."""
        reconciler = FileReconciler(store)

        planned = plan_edits([edit("insert", 1, "hello"), edit("delete_file")])
        result = await reconciler.reconcile("a.txt", planned)

        assert result.action == ReconcileAction.DELETED
        assert "a.txt" not in store.files
        assert [commit["op"] for commit in store.commits] == ["delete"]

    @pytest.mark.asyncio
    async def test_delete_missing_file_fails(self, empty_store):
        reconciler = FileReconciler(empty_store)

        result = await reconciler.reconcile("ghost.txt", [edit("delete_file", file_name="ghost.txt")])

        assert result.success is False
        assert result.error_type == "FileNotFoundForDeletionError"
        assert empty_store.commits == []

    @pytest.mark.asyncio
    async def test_version_conflict_is_reported_per_file(self, store):
        store.fail_on("a.txt", VersionConflictError("a.txt has been updated by another client"))
        reconciler = FileReconciler(store)

        result = await reconciler.reconcile("a.txt", [edit("insert", 1, "zero")])

        assert result.success is False
        assert result.error_type == "VersionConflictError"
        assert store.files["a.txt"] == "one\ntwo\nthree"

    @pytest.mark.asyncio
    async def test_transport_error_propagates(self):
        failing_store = AsyncMock()
        failing_store.get_file.side_effect = TransportError("connection reset")
        reconciler = FileReconciler(failing_store)

        with pytest.raises(TransportError):
            await reconciler.reconcile("a.txt", [edit("insert", 1, "x")])

    @pytest.mark.asyncio
    async def test_write_followed_by_insert_uses_written_content(self, store):
        """Test ops after a write apply to the freshly written buffer."""
        reconciler = FileReconciler(store)

        result = await reconciler.reconcile("a.txt", [
            edit("write", 1, "alpha\nbeta"),
            edit("insert", 2, "between"),
        ])

        assert result.content == "alpha\nbetween\nbeta"

    @pytest.mark.asyncio
    async def test_commit_message_lists_edits(self, store):
        reconciler = FileReconciler(store)

        await reconciler.reconcile("a.txt", plan_edits([
            edit("insert", 1, "zero"),
            edit("delete", 3, "three"),
        ]))

        assert store.commits[0]["message"] == "AI: a.txt - delete at line 3, insert at line 1"
