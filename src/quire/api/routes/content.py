"""Content REST endpoints.

Handlers are plain functions so FastAPI runs each request on its worker
thread pool; the store serializes access to SQLite itself.
"""

from typing import Any

import structlog
from fastapi import APIRouter, Body, Depends, Query, status
from fastapi.responses import JSONResponse

from quire.api.dependencies import get_manager
from quire.api.responses import envelope_response
from quire.domain import ContentManager

logger = structlog.get_logger()

router = APIRouter(tags=["content"])


@router.get("/api/content/search")
def search_content(
    q: str | None = None,
    query: str | None = None,
    page: str | None = None,
    page_size: str | None = None,
    manager: ContentManager = Depends(get_manager),  # noqa: B008
) -> JSONResponse:
    """Full-text search. Accepts the query as `q` or `query`."""
    text = q if q is not None else query
    envelope = manager.search_content(text or "", page, page_size)
    if envelope.success:
        logger.info("content_searched", query=text, result_count=len(envelope.data["items"]))
    return envelope_response(envelope)


@router.get("/api/content/recent")
def recent_content(
    limit: str | None = None,
    manager: ContentManager = Depends(get_manager),  # noqa: B008
) -> JSONResponse:
    """Most recently updated items."""
    return envelope_response(manager.get_recent_content(limit))


@router.post("/api/content/bulk")
def bulk_create(
    payload: Any = Body(None),  # noqa: B008
    manager: ContentManager = Depends(get_manager),  # noqa: B008
) -> JSONResponse:
    """Create many items. The body is a list, or an object with an `items` list."""
    items = payload.get("items") if isinstance(payload, dict) else payload
    return envelope_response(manager.bulk_create(items))


@router.post("/api/content/bulk-delete")
def bulk_delete(
    payload: Any = Body(None),  # noqa: B008
    manager: ContentManager = Depends(get_manager),  # noqa: B008
) -> JSONResponse:
    ids = payload.get("ids") if isinstance(payload, dict) else payload
    return envelope_response(manager.bulk_delete(ids))


@router.get("/api/content")
def list_content(
    page: str | None = None,
    page_size: str | None = None,
    tags: str | None = None,
    manager: ContentManager = Depends(get_manager),  # noqa: B008
) -> JSONResponse:
    """List items newest first, or only those carrying `tags` when given."""
    if tags is not None:
        return envelope_response(manager.get_content_by_tag(tags, page, page_size))
    return envelope_response(manager.list_content(page, page_size))


@router.post("/api/content")
def create_content(
    payload: Any = Body(None),  # noqa: B008
    manager: ContentManager = Depends(get_manager),  # noqa: B008
) -> JSONResponse:
    envelope = manager.create_content(payload)
    if envelope.success:
        logger.info("content_created", content_id=envelope.data["id"])
    return envelope_response(envelope, success_status=status.HTTP_201_CREATED)


@router.get("/api/content/{content_id:int}")
def get_content(
    content_id: int,
    manager: ContentManager = Depends(get_manager),  # noqa: B008
) -> JSONResponse:
    return envelope_response(manager.get_content(content_id))


@router.put("/api/content/{content_id:int}")
def update_content(
    content_id: int,
    payload: Any = Body(None),  # noqa: B008
    manager: ContentManager = Depends(get_manager),  # noqa: B008
) -> JSONResponse:
    envelope = manager.update_content(content_id, payload)
    if envelope.success:
        logger.info("content_updated", content_id=content_id)
    return envelope_response(envelope)


@router.delete("/api/content/{content_id:int}")
def delete_content(
    content_id: int,
    manager: ContentManager = Depends(get_manager),  # noqa: B008
) -> JSONResponse:
    envelope = manager.delete_content(content_id)
    if envelope.success:
        logger.info("content_deleted", content_id=content_id)
    return envelope_response(envelope)


@router.get("/api/tags")
def get_tags(manager: ContentManager = Depends(get_manager)) -> JSONResponse:  # noqa: B008
    return envelope_response(manager.get_tags())


@router.get("/api/statistics")
def get_statistics(manager: ContentManager = Depends(get_manager)) -> JSONResponse:  # noqa: B008
    return envelope_response(manager.get_statistics())


@router.get("/api/export")
def export_content(
    export_format: str = Query("json", alias="format"),
    manager: ContentManager = Depends(get_manager),  # noqa: B008
) -> JSONResponse:
    """Dump every item in the import format."""
    return envelope_response(manager.export_content(export_format))


@router.post("/api/import")
def import_content(
    payload: Any = Body(None),  # noqa: B008
    manager: ContentManager = Depends(get_manager),  # noqa: B008
) -> JSONResponse:
    envelope = manager.import_content(payload)
    if envelope.success:
        logger.info("content_imported", created_count=envelope.data["created_count"])
    return envelope_response(envelope)
