"""
Repository browsing REST API endpoints.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from ai_editor.api.dependencies import get_store
from ai_editor.api.edits import error_response
from ai_editor.models.repository import (
    FileContentResponse,
    InitRepositoryRequest,
    RepositoryStatus,
    TreeNode,
)
from ai_editor.models.edit import ErrorResponse
from ai_editor.services.content_store import (
    ContentStore,
    ContentStoreError,
    NotFoundError,
    VersionConflictError,
)
from ai_editor.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/files", tags=["files"])


@router.get("/tree", response_model=List[TreeNode], responses={500: {"model": ErrorResponse}})
async def get_tree(store: ContentStore = Depends(get_store)):
    """Return the repository file tree; empty for an empty repository."""
    try:
        return await store.get_tree()
    except ContentStoreError as e:
        logger.error(f"Failed to get file tree: {e}")
        return error_response("Failed to get file tree", str(e))


@router.get(
    "/content/{path:path}",
    response_model=FileContentResponse,
    responses={500: {"model": ErrorResponse}},
)
async def get_content(path: str, store: ContentStore = Depends(get_store)):
    """
    Return the content of one file.

    Raises:
        HTTPException: 404 if the file does not exist
    """
    try:
        stored = await store.get_file(path)
    except NotFoundError:
        logger.warning(f"File not found: {path}")
        raise HTTPException(status_code=404, detail=f"File not found: {path}")
    except ContentStoreError as e:
        logger.error(f"Failed to get file content for {path}: {e}")
        return error_response("Failed to get file content", str(e))

    return FileContentResponse(content=stored.content, path=stored.path, size=stored.size)


@router.get("/repo-status", response_model=RepositoryStatus, responses={500: {"model": ErrorResponse}})
async def get_repo_status(store: ContentStore = Depends(get_store)):
    """Report whether the repository exists and whether it is empty."""
    try:
        return await store.get_status()
    except ContentStoreError as e:
        logger.error(f"Failed to check repository status: {e}")
        return error_response("Failed to check repository status", str(e))


@router.post("/init", responses={500: {"model": ErrorResponse}})
async def init_repository(
    request: InitRepositoryRequest,
    store: ContentStore = Depends(get_store),
) -> dict:
    """
    Create the first file of an empty repository.

    Raises:
        HTTPException: 409 if the file already exists
    """
    try:
        logger.info(f"Initializing repository with {request.filename}")
        commit = await store.put_file(
            request.filename,
            request.content,
            None,
            message=f"AI: initialize repository with {request.filename}",
        )
    except VersionConflictError as e:
        logger.warning(f"Repository already initialized: {e}")
        raise HTTPException(status_code=409, detail=f"{request.filename} already exists")
    except ContentStoreError as e:
        logger.error(f"Failed to initialize repository: {e}")
        return error_response("Failed to initialize repository", str(e))

    return {"success": True, "file": commit.path, "version_token": commit.version_token}
