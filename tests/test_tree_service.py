"""Tests for ancestry checks, breadcrumbs and subtree walks."""

import pytest

from opendrive.core.exceptions import ForbiddenError, StructuralCorruptionError
from opendrive.crud import folder_crud

OWNER = "user-a"


@pytest.fixture
async def chain(drive):
    """root > a > b > c"""
    root = await drive.folders.create_folder(OWNER, "root")
    a = await drive.folders.create_folder(OWNER, "a", str(root.id))
    b = await drive.folders.create_folder(OWNER, "b", str(a.id))
    c = await drive.folders.create_folder(OWNER, "c", str(b.id))
    return root, a, b, c


# ---------------------------------------------------------------------------
# is_descendant
# ---------------------------------------------------------------------------


class TestIsDescendant:
    async def test_folder_is_its_own_descendant(self, drive, chain):
        root = chain[0]
        assert await drive.tree.is_descendant(root.id, root.id) is True

    async def test_deep_descendant(self, drive, chain):
        root, _, _, c = chain
        assert await drive.tree.is_descendant(c.id, root.id) is True

    async def test_ancestor_is_not_descendant(self, drive, chain):
        root, _, _, c = chain
        assert await drive.tree.is_descendant(root.id, c.id) is False

    async def test_sibling_trees(self, drive, chain):
        other = await drive.folders.create_folder(OWNER, "other")
        assert await drive.tree.is_descendant(other.id, chain[0].id) is False

    async def test_malformed_ids(self, drive, chain):
        assert await drive.tree.is_descendant("not-an-id", chain[0].id) is False

    async def test_cycle_answers_false(self, drive, chain):
        root, a, b, _ = chain
        # a > b > a, unreachable from root
        await folder_crud.update(a, {"parent_id": b.id})
        other = await drive.folders.create_folder(OWNER, "other")
        assert await drive.tree.is_descendant(b.id, other.id) is False


# ---------------------------------------------------------------------------
# build_breadcrumb
# ---------------------------------------------------------------------------


class TestBuildBreadcrumb:
    async def test_three_levels_below_root(self, drive, chain):
        root, a, b, c = chain
        breadcrumb = await drive.tree.build_breadcrumb(c.id)
        assert [item.name for item in breadcrumb] == ["root", "a", "b", "c"]
        assert breadcrumb[0].id == str(root.id)
        assert breadcrumb[-1].id == str(c.id)

    async def test_stops_at_given_root(self, drive, chain):
        _, a, _, c = chain
        breadcrumb = await drive.tree.build_breadcrumb(c.id, root_id=a.id)
        assert [item.name for item in breadcrumb] == ["a", "b", "c"]

    async def test_leaf_equal_to_root(self, drive, chain):
        breadcrumb = await drive.tree.build_breadcrumb(chain[1].id, root_id=chain[1].id)
        assert [item.name for item in breadcrumb] == ["a"]

    async def test_outside_root_forbidden(self, drive, chain):
        root, _, _, c = chain
        with pytest.raises(ForbiddenError):
            await drive.tree.build_breadcrumb(root.id, root_id=c.id)

    async def test_other_owner_ends_chain(self, drive, chain):
        _, a, b, c = chain
        await folder_crud.update(a, {"owner_id": "user-b"})
        breadcrumb = await drive.tree.build_breadcrumb(c.id, owner_id=OWNER)
        assert [item.name for item in breadcrumb] == ["b", "c"]

    async def test_cycle_raises_structural_corruption(self, drive, chain):
        root, a, b, c = chain
        await folder_crud.update(root, {"parent_id": c.id})
        with pytest.raises(StructuralCorruptionError):
            await drive.tree.build_breadcrumb(c.id)


# ---------------------------------------------------------------------------
# Subtree walks
# ---------------------------------------------------------------------------


class TestCollectSubtree:
    async def test_collects_all_levels(self, drive, chain):
        root = chain[0]
        subtree = await drive.tree.collect_subtree(root)
        assert subtree[0].id == root.id
        assert {f.name for f in subtree} == {"root", "a", "b", "c"}

    async def test_includes_trashed_descendants(self, drive, chain):
        root, _, b, _ = chain
        await drive.folders.delete_folder(OWNER, str(b.id))
        subtree = await drive.tree.collect_subtree(root)
        assert len(subtree) == 4

    async def test_skips_other_owners(self, drive, chain):
        root, _, _, c = chain
        await folder_crud.update(c, {"owner_id": "user-b"})
        subtree = await drive.tree.collect_subtree(root)
        assert {f.name for f in subtree} == {"root", "a", "b"}

    async def test_cycle_raises(self, drive, chain):
        root, a, _, c = chain
        await folder_crud.update(a, {"parent_id": c.id})
        # root > ... no longer reaches a; walk from a loops a > b > c > a
        with pytest.raises(StructuralCorruptionError):
            await drive.tree.collect_subtree(a)

    async def test_files_of_subtree(self, drive, chain):
        _, a, _, c = chain
        await drive.files.upload_file(OWNER, str(c.id), "deep.txt", b"d")
        await drive.files.upload_file(OWNER, str(a.id), "shallow.txt", b"s")
        subtree = await drive.tree.collect_subtree(a)
        files = await drive.tree.collect_subtree_files(subtree)
        assert {f.original_name for f in files} == {"deep.txt", "shallow.txt"}
