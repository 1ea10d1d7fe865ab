"""Tests for listing and emptying the trash."""

from opendrive.crud import file_crud, folder_crud

OWNER = "user-a"
OTHER = "user-b"


class TestListTrash:
    async def test_lists_only_trashed_of_owner(self, drive, docs_tree):
        docs, projects, a_txt = docs_tree
        theirs = await drive.folders.create_folder(OTHER, "Theirs")
        await drive.folders.delete_folder(OTHER, str(theirs.id))
        await drive.files.delete_file(OWNER, str(a_txt.id))

        listing = await drive.trash.list_trash(OWNER)
        assert listing.folders == []
        assert [f.id for f in listing.files] == [a_txt.id]

    async def test_cascade_lists_every_entity(self, drive, docs_tree):
        docs, projects, a_txt = docs_tree
        await drive.folders.delete_folder(OWNER, str(docs.id))
        listing = await drive.trash.list_trash(OWNER)
        assert {f.id for f in listing.folders} == {docs.id, projects.id}
        assert [f.id for f in listing.files] == [a_txt.id]


class TestEmptyTrash:
    async def test_empty_trash(self, drive, docs_tree, storage):
        docs, projects, a_txt = docs_tree
        loose_folder = await drive.folders.create_folder(OWNER, "Loose")
        loose = await drive.files.upload_file(OWNER, str(loose_folder.id), "loose.txt", b"l")
        await drive.files.delete_file(OWNER, str(loose.id))
        await drive.folders.delete_folder(OWNER, str(docs.id))

        result = await drive.trash.empty_trash(OWNER)
        assert (result.folders, result.files, result.storage_failures) == (2, 2, 0)

        listing = await drive.trash.list_trash(OWNER)
        assert listing.folders == [] and listing.files == []
        assert await folder_crud.get_by_id(loose_folder.id) is not None
        assert await file_crud.get_by_id(loose.id) is None
        assert await storage.exists(a_txt.storage_key) is False
        assert await storage.exists(loose.storage_key) is False

    async def test_leaves_other_owners_alone(self, drive):
        theirs = await drive.folders.create_folder(OTHER, "Theirs")
        await drive.folders.delete_folder(OTHER, str(theirs.id))
        result = await drive.trash.empty_trash(OWNER)
        assert (result.folders, result.files) == (0, 0)
        assert await folder_crud.get_by_id(theirs.id) is not None

    async def test_empty_trash_is_idempotent(self, drive, docs_tree):
        await drive.folders.delete_folder(OWNER, str(docs_tree[0].id))
        await drive.trash.empty_trash(OWNER)
        result = await drive.trash.empty_trash(OWNER)
        assert (result.folders, result.files) == (0, 0)
