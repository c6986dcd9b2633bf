"""
Edit application REST API endpoint.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ai_editor.api.dependencies import get_orchestrator
from ai_editor.editing.orchestrator import EditBatchOrchestrator
from ai_editor.models.edit import ApplyEditsRequest, ApplyEditsResponse, ErrorResponse
from ai_editor.services.content_store import ContentStoreError
from ai_editor.utils.logging import get_logger, log_error_with_context

logger = get_logger(__name__)

router = APIRouter(tags=["edits"])


def error_response(error: str, details: str, status_code: int = 500) -> JSONResponse:
    """Build the ``{error, details}`` body used for request-level failures."""
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, details=details).model_dump(),
    )


@router.post(
    "/apply-edits",
    response_model=ApplyEditsResponse,
    responses={500: {"model": ErrorResponse}},
)
async def apply_edits(
    request: ApplyEditsRequest,
    orchestrator: EditBatchOrchestrator = Depends(get_orchestrator),
):
    """
    Apply proposed edits to the repository, one commit per file.

    Per-file failures (delete mismatch, missing file, stale version) are
    reported in ``results`` and do not fail the request. A store failure that
    is not specific to one file aborts the request with a 500; files
    committed before it stay committed.
    """
    try:
        results = await orchestrator.apply(request.edits)
    except ContentStoreError as e:
        log_error_with_context(logger, f"Failed to apply edits: {e}", e, edit_count=len(request.edits))
        return error_response("Failed to apply edits", str(e))
    except Exception as e:
        log_error_with_context(logger, f"Unexpected error applying edits: {e}", e)
        return error_response("Failed to apply edits", "Internal server error")

    return ApplyEditsResponse(success=True, results=results)
