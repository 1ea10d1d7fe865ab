from typing import Optional

from opendrive.core.exceptions import InvalidInputError
from opendrive.crud.file import FileCRUD, file_crud as default_file_crud
from opendrive.crud.folder import FolderCRUD, folder_crud as default_folder_crud
from opendrive.schemas import SearchResults

SEARCH_KINDS = ("all", "files", "folders")


class SearchService:
    """Case-insensitive name search over a user's active files and folders"""

    def __init__(self, folder_crud: Optional[FolderCRUD] = None, file_crud: Optional[FileCRUD] = None):
        self.folder_crud = folder_crud or default_folder_crud
        self.file_crud = file_crud or default_file_crud

    async def search(self, user_id: str, query: str, kind: str = "all") -> SearchResults:
        query = (query or "").strip()
        if not query:
            raise InvalidInputError("Search query is required", field="q")
        if kind not in SEARCH_KINDS:
            raise InvalidInputError(f"Unknown search type: {kind}", field="type")

        # One kind gets the whole page, "all" splits it
        limit = 25 if kind == "all" else 50
        results = SearchResults()
        if kind in ("all", "files"):
            results.files = await self.file_crud.search_files_by_name(user_id, query, limit=limit)
        if kind in ("all", "folders"):
            results.folders = await self.folder_crud.search_folders_by_name(user_id, query, limit=limit)
        return results
