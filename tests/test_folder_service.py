"""Tests for notetree.services.folder_service over the in-memory unit of work."""

from datetime import datetime, timedelta, timezone

import pytest

from notetree.core.exceptions import (
    IntegrityViolationError,
    InvariantError,
    NotFoundError,
    ParentNotFoundError,
    StoreError,
    ValidationError,
)
from notetree.services.folder_service import UNSET, FolderHierarchyManager


def find_node(nodes, folder_id):
    for node in nodes:
        if node.id == folder_id:
            return node
        found = find_node(node.children, folder_id)
        if found:
            return found
    return None


@pytest.fixture
async def chain(memory_manager):
    """A -> B -> C plus an unrelated root D."""
    a = await memory_manager.create_folder("A")
    b = await memory_manager.create_folder("B", a.id)
    c = await memory_manager.create_folder("C", b.id)
    d = await memory_manager.create_folder("D")
    return a, b, c, d


class TestCreateFolder:
    """Tests for FolderHierarchyManager.create_folder."""

    async def test_root_folder_appears_at_root(self, memory_manager):
        folder = await memory_manager.create_folder("Inbox")

        tree = await memory_manager.get_folder_tree()

        assert folder.id is not None
        assert folder.parent_id is None
        assert [node.id for node in tree] == [folder.id]

    async def test_timestamps_are_equal_on_create(self, memory_manager):
        folder = await memory_manager.create_folder("Inbox")

        assert folder.created_at == folder.updated_at

    async def test_child_appears_in_parent_children(self, memory_manager):
        parent = await memory_manager.create_folder("Work")
        child = await memory_manager.create_folder("Projects", parent.id)

        tree = await memory_manager.get_folder_tree()

        assert child.parent_id == parent.id
        assert [node.id for node in tree] == [parent.id]
        assert [node.id for node in tree[0].children] == [child.id]

    async def test_missing_parent_fails_without_write(self, memory_manager, memory_db):
        await memory_manager.create_folder("Existing")

        with pytest.raises(ParentNotFoundError) as exc_info:
            await memory_manager.create_folder("Orphan", 999)

        assert isinstance(exc_info.value, NotFoundError)
        assert exc_info.value.folder_id == 999
        assert len(memory_db.folders) == 1

    @pytest.mark.parametrize("name", ["", "   ", None])
    async def test_empty_name_is_rejected(self, memory_manager, memory_db, name):
        with pytest.raises(ValidationError):
            await memory_manager.create_folder(name)

        assert memory_db.folders == {}

    async def test_too_long_name_is_rejected(self, memory_db):
        manager = FolderHierarchyManager(memory_db, name_max_length=5)

        with pytest.raises(ValidationError):
            await manager.create_folder("abcdef")


class TestUpdateFolder:
    """Tests for FolderHierarchyManager.update_folder."""

    async def test_rename_only_keeps_parent(self, memory_manager, chain):
        a, b, c, d = chain

        updated = await memory_manager.update_folder(b.id, name="Renamed")

        assert updated.name == "Renamed"
        assert updated.parent_id == a.id

    async def test_updated_at_is_refreshed_without_field_changes(self, memory_db):
        ticks = iter(datetime(2026, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=i) for i in range(10))
        manager = FolderHierarchyManager(memory_db, clock=lambda: next(ticks))
        folder = await manager.create_folder("Inbox")
        created_at = folder.created_at

        updated = await manager.update_folder(folder.id)

        assert updated.name == "Inbox"
        assert updated.created_at == created_at
        assert updated.updated_at > created_at

    async def test_self_parent_is_rejected(self, memory_manager, chain):
        a, b, c, d = chain

        with pytest.raises(InvariantError) as exc_info:
            await memory_manager.update_folder(b.id, parent_id=b.id)

        assert exc_info.value.reason == InvariantError.SELF_PARENT
        assert b.parent_id == a.id

    async def test_self_parent_is_rejected_for_unknown_folder(self, memory_manager):
        with pytest.raises(InvariantError):
            await memory_manager.update_folder(42, parent_id=42)

    async def test_descendant_as_parent_is_rejected(self, memory_manager, memory_db, chain):
        a, b, c, d = chain

        with pytest.raises(InvariantError) as exc_info:
            await memory_manager.update_folder(a.id, parent_id=c.id)

        assert exc_info.value.reason == InvariantError.DESCENDANT_AS_PARENT
        assert memory_db.folders[a.id].parent_id is None

    async def test_direct_child_as_parent_is_rejected(self, memory_manager, chain):
        a, b, c, d = chain

        with pytest.raises(InvariantError):
            await memory_manager.update_folder(a.id, parent_id=b.id)

    async def test_move_under_unrelated_folder(self, memory_manager, chain):
        a, b, c, d = chain

        moved = await memory_manager.update_folder(a.id, parent_id=d.id)
        tree = await memory_manager.get_folder_tree()

        assert moved.parent_id == d.id
        assert [node.id for node in tree] == [d.id]
        node_a = tree[0].children[0]
        assert node_a.id == a.id
        assert node_a.children[0].id == b.id
        assert node_a.children[0].children[0].id == c.id

    async def test_move_to_root_with_explicit_none(self, memory_manager, chain):
        a, b, c, d = chain

        moved = await memory_manager.update_folder(c.id, parent_id=None)
        tree = await memory_manager.get_folder_tree()

        assert moved.parent_id is None
        assert c.id in [node.id for node in tree]

    async def test_unset_parent_is_left_alone(self, memory_manager, chain):
        a, b, c, d = chain

        updated = await memory_manager.update_folder(c.id, name="C2", parent_id=UNSET)

        assert updated.parent_id == b.id

    async def test_missing_folder(self, memory_manager):
        with pytest.raises(NotFoundError):
            await memory_manager.update_folder(123, name="x")

    async def test_missing_parent(self, memory_manager, chain):
        a, b, c, d = chain

        with pytest.raises(ParentNotFoundError):
            await memory_manager.update_folder(b.id, parent_id=999)

    async def test_empty_name(self, memory_manager, chain):
        a, b, c, d = chain

        with pytest.raises(ValidationError):
            await memory_manager.update_folder(b.id, name="")

    async def test_corrupt_cycle_in_subtree_terminates(self, memory_manager, memory_db):
        # Y -> Z -> Y, written directly to storage
        y = memory_db.add_folder("Y")
        z = memory_db.add_folder("Z", y.id)
        memory_db.folders[y.id].parent_id = z.id
        target = memory_db.add_folder("T")

        with pytest.raises(InvariantError):
            await memory_manager.update_folder(z.id, parent_id=y.id)
        moved = await memory_manager.update_folder(z.id, parent_id=target.id)

        assert moved.parent_id == target.id

    async def test_depth_limit_rejects_move(self, memory_db):
        manager = FolderHierarchyManager(memory_db, max_depth=2)
        top = memory_db.add_folder("L0")
        parent_id = top.id
        for level in range(1, 5):
            parent_id = memory_db.add_folder(f"L{level}", parent_id).id
        target = memory_db.add_folder("T")

        with pytest.raises(InvariantError) as exc_info:
            await manager.update_folder(top.id, parent_id=target.id)

        assert exc_info.value.reason == InvariantError.DEPTH_EXCEEDED
        assert memory_db.folders[top.id].parent_id is None

    async def test_subtree_exactly_at_depth_limit_can_move(self, memory_db):
        manager = FolderHierarchyManager(memory_db, max_depth=2)
        top = memory_db.add_folder("L0")
        middle = memory_db.add_folder("L1", top.id)
        memory_db.add_folder("L2", middle.id)
        target = memory_db.add_folder("T")

        moved = await manager.update_folder(top.id, parent_id=target.id)

        assert moved.parent_id == target.id

    async def test_one_level_past_depth_limit_is_rejected(self, memory_db):
        manager = FolderHierarchyManager(memory_db, max_depth=2)
        top = memory_db.add_folder("L0")
        parent_id = top.id
        for level in range(1, 4):
            parent_id = memory_db.add_folder(f"L{level}", parent_id).id
        target = memory_db.add_folder("T")

        with pytest.raises(InvariantError) as exc_info:
            await manager.update_folder(top.id, parent_id=target.id)

        assert exc_info.value.reason == InvariantError.DEPTH_EXCEEDED


class TestDeleteFolder:
    """Tests for FolderHierarchyManager.delete_folder."""

    async def test_children_and_notes_move_to_former_parent(self, memory_manager, memory_db):
        root = await memory_manager.create_folder("Root")
        doomed = await memory_manager.create_folder("Doomed", root.id)
        child1 = await memory_manager.create_folder("Child1", doomed.id)
        child2 = await memory_manager.create_folder("Child2", doomed.id)
        note = memory_db.add_note("Note", doomed.id)

        result = await memory_manager.delete_folder(doomed.id)

        assert result.success is True
        assert result.reattached_folders == 2
        assert result.reattached_notes == 1
        assert doomed.id not in memory_db.folders
        assert memory_db.folders[child1.id].parent_id == root.id
        assert memory_db.folders[child2.id].parent_id == root.id
        assert memory_db.notes[note.id].folder_id == root.id

        tree = await memory_manager.get_folder_tree()
        assert find_node(tree, doomed.id) is None
        assert [node.id for node in tree[0].children] == [child1.id, child2.id]

    async def test_deleting_root_promotes_children_to_roots(self, memory_manager, memory_db):
        root = await memory_manager.create_folder("Root")
        child1 = await memory_manager.create_folder("Child1", root.id)
        child2 = await memory_manager.create_folder("Child2", root.id)
        note = memory_db.add_note("Note", root.id)

        await memory_manager.delete_folder(root.id)
        tree = await memory_manager.get_folder_tree()

        assert [node.id for node in tree] == [child1.id, child2.id]
        assert memory_db.notes[note.id].folder_id is None

    async def test_grandchild_is_promoted(self, memory_manager):
        r = await memory_manager.create_folder("R")
        c1 = await memory_manager.create_folder("C1", r.id)
        g = await memory_manager.create_folder("G", c1.id)

        await memory_manager.delete_folder(c1.id)
        tree = await memory_manager.get_folder_tree()

        assert [node.id for node in tree] == [r.id]
        assert [node.id for node in tree[0].children] == [g.id]
        assert tree[0].children[0].parent_id == r.id

    async def test_leaf_delete(self, memory_manager, memory_db):
        leaf = await memory_manager.create_folder("Leaf")

        result = await memory_manager.delete_folder(leaf.id)

        assert result.reattached_folders == 0
        assert result.reattached_notes == 0
        assert memory_db.folders == {}

    async def test_missing_folder_leaves_rows_unchanged(self, memory_manager, memory_db, chain):
        before = dict(memory_db.folders)

        with pytest.raises(NotFoundError):
            await memory_manager.delete_folder(999)

        assert memory_db.folders == before

    async def test_second_delete_fails(self, memory_manager):
        folder = await memory_manager.create_folder("Once")
        await memory_manager.delete_folder(folder.id)

        with pytest.raises(NotFoundError):
            await memory_manager.delete_folder(folder.id)

    async def test_store_failure_rolls_back_cascade(self, memory_manager, memory_db):
        root = await memory_manager.create_folder("Root")
        doomed = await memory_manager.create_folder("Doomed", root.id)
        child = await memory_manager.create_folder("Child", doomed.id)
        note = memory_db.add_note("Note", doomed.id)
        memory_db.fail_on = "reassign_folder"

        with pytest.raises(StoreError):
            await memory_manager.delete_folder(doomed.id)

        assert doomed.id in memory_db.folders
        assert memory_db.folders[child.id].parent_id == doomed.id
        assert memory_db.notes[note.id].folder_id == doomed.id


class TestGetFolderTree:
    """Tests for FolderHierarchyManager.get_folder_tree."""

    async def test_empty(self, memory_manager):
        assert await memory_manager.get_folder_tree() == []

    async def test_notes_count(self, memory_manager, memory_db):
        work = await memory_manager.create_folder("Work")
        home = await memory_manager.create_folder("Home")
        memory_db.add_note("a", work.id)
        memory_db.add_note("b", work.id)
        memory_db.add_note("loose")

        tree = await memory_manager.get_folder_tree()

        counts = {node.id: node.notes_count for node in tree}
        assert counts == {work.id: 2, home.id: 0}

    async def test_siblings_keep_storage_order(self, memory_manager):
        parent = await memory_manager.create_folder("P")
        ids = [(await memory_manager.create_folder(name, parent.id)).id for name in "zyx"]

        tree = await memory_manager.get_folder_tree()

        assert [node.id for node in tree[0].children] == ids

    async def test_orphan_is_excluded(self, memory_manager, memory_db, caplog):
        kept = memory_db.add_folder("Kept")
        orphan = memory_db.add_folder("Orphan", parent_id=404)

        tree = await memory_manager.get_folder_tree()

        assert [node.id for node in tree] == [kept.id]
        assert find_node(tree, orphan.id) is None
        assert "missing parent 404" in caplog.text

    async def test_orphan_raises_in_strict_mode(self, memory_db):
        manager = FolderHierarchyManager(memory_db, strict_tree=True)
        memory_db.add_folder("Orphan", parent_id=404)

        with pytest.raises(IntegrityViolationError):
            await manager.get_folder_tree()

    async def test_stored_cycle_is_excluded_with_warning(self, memory_manager, memory_db, caplog):
        kept = memory_db.add_folder("Kept")
        y = memory_db.add_folder("Y")
        z = memory_db.add_folder("Z", y.id)
        memory_db.folders[y.id].parent_id = z.id

        tree = await memory_manager.get_folder_tree()

        assert [node.id for node in tree] == [kept.id]
        assert "parent cycle" in caplog.text
        assert str(y.id) in caplog.text and str(z.id) in caplog.text

    async def test_stored_cycle_raises_in_strict_mode(self, memory_db):
        manager = FolderHierarchyManager(memory_db, strict_tree=True)
        memory_db.add_folder("Kept")
        y = memory_db.add_folder("Y")
        z = memory_db.add_folder("Z", y.id)
        memory_db.folders[y.id].parent_id = z.id

        with pytest.raises(IntegrityViolationError):
            await manager.get_folder_tree()

    async def test_folders_under_an_orphan_are_not_reported_as_cycle(
        self, memory_manager, memory_db, caplog
    ):
        orphan = memory_db.add_folder("Orphan", parent_id=404)
        memory_db.add_folder("Child", orphan.id)

        tree = await memory_manager.get_folder_tree()

        assert tree == []
        assert "missing parent 404" in caplog.text
        assert "parent cycle" not in caplog.text


class TestGetFolder:
    """Tests for FolderHierarchyManager.get_folder."""

    async def test_existing(self, memory_manager):
        folder = await memory_manager.create_folder("Inbox")

        assert (await memory_manager.get_folder(folder.id)).name == "Inbox"

    async def test_missing(self, memory_manager):
        with pytest.raises(NotFoundError):
            await memory_manager.get_folder(1)
