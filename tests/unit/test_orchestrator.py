"""Unit tests for the edit batch orchestrator."""

import pytest
from unittest.mock import AsyncMock, Mock

from ai_editor.editing.orchestrator import EditBatchOrchestrator, group_by_file
from ai_editor.models.edit import Edit, FileEditResult, ReconcileAction
from ai_editor.services.content_store import TransportError


def edit(file_name, action, line=None, content=""):
    return Edit(file_name=file_name, action=action, line=line, content=content)


def test_group_by_file_keeps_first_appearance_order():
    edits = [
        edit("b.txt", "insert", 1, "x"),
        edit("a.txt", "insert", 1, "y"),
        edit("b.txt", "delete", 2, "z"),
    ]

    groups = group_by_file(edits)

    assert list(groups) == ["b.txt", "a.txt"]
    assert [e.content for e in groups["b.txt"]] == ["x", "z"]


class TestEditBatchOrchestrator:
    """Test suite for EditBatchOrchestrator."""

    @pytest.mark.asyncio
    async def test_applies_each_file(self, store):
        orchestrator = EditBatchOrchestrator(store)

        results = await orchestrator.apply([
            edit("a.txt", "delete", 2, "two"),
            edit("docs/guide.md", "write", 1, "# Guide"),
            edit("README.md", "delete_file"),
        ])

        assert [(r.file, r.action) for r in results] == [
            ("a.txt", ReconcileAction.UPDATED),
            ("docs/guide.md", ReconcileAction.CREATED),
            ("README.md", ReconcileAction.DELETED),
        ]
        assert store.files["a.txt"] == "one\nthree"
        assert store.files["docs/guide.md"] == "# Guide"
        assert "README.md" not in store.files

    @pytest.mark.asyncio
    async def test_plans_edits_before_applying(self, store):
        """Test unordered deletes are applied highest line first."""
        orchestrator = EditBatchOrchestrator(store)

        results = await orchestrator.apply([
            edit("a.txt", "delete", 1, "one"),
            edit("a.txt", "delete", 3, "three"),
            edit("a.txt", "insert", 1, "first"),
        ])

        assert results[0].success is True
        assert store.files["a.txt"] == "first\ntwo"

    @pytest.mark.asyncio
    async def test_failed_file_does_not_block_others(self, store):
        orchestrator = EditBatchOrchestrator(store)

        results = await orchestrator.apply([
            edit("a.txt", "delete", 1, "wrong"),
            edit("README.md", "insert", 2, "More text"),
        ])

        assert results[0].success is False
        assert results[0].error_type == "DeleteMismatchError"
        assert results[1].success is True
        assert store.files["a.txt"] == "one\ntwo\nthree"
        assert store.files["README.md"] == "# Project\nMore text"

    @pytest.mark.asyncio
    async def test_transport_error_stops_run_without_rollback(self, store):
        """Test a fatal error propagates and earlier commits stay."""
        store.fail_on("README.md", TransportError("rate limited"))
        orchestrator = EditBatchOrchestrator(store)

        with pytest.raises(TransportError):
            await orchestrator.apply([
                edit("a.txt", "insert", 1, "zero"),
                edit("README.md", "insert", 1, "top"),
                edit("src/app.py", "insert", 1, "# comment"),
            ])

        assert store.files["a.txt"] == "zero\none\ntwo\nthree"
        assert store.files["src/app.py"] == "print('hi')\n"

    @pytest.mark.asyncio
    async def test_empty_batch(self, store):
        orchestrator = EditBatchOrchestrator(store)

        assert await orchestrator.apply([]) == []
        assert store.commits == []

    @pytest.mark.asyncio
    async def test_uses_given_reconciler(self, store):
        reconciler = Mock()
        reconciler.reconcile = AsyncMock(return_value=FileEditResult(file="a.txt", success=True))
        orchestrator = EditBatchOrchestrator(store, reconciler=reconciler)

        results = await orchestrator.apply([edit("a.txt", "insert", 1, "zero")])

        assert results[0].file == "a.txt"
        assert reconciler.reconcile.call_args.args[0] == "a.txt"
        assert store.commits == []
