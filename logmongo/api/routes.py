"""
Stored request record endpoints.

Read-only access to the records written by the logging middleware.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException, Query, Request, status
from pymongo.errors import PyMongoError

from logmongo.api.schemas import LogListResponse

logger = logging.getLogger(__name__)


router = APIRouter(prefix="/logs", tags=["logs"])


def _serialize(document: Dict[str, Any]) -> Dict[str, Any]:
    """Make a stored document JSON friendly (ObjectId -> str)."""
    result = dict(document)
    if "_id" in result:
        result["_id"] = str(result["_id"])
    return result


@router.get(
    "",
    response_model=LogListResponse,
    summary="List stored request records",
)
async def list_logs(
    request: Request,
    method: Optional[str] = Query(None, description="Filter by HTTP method"),
    status_code: Optional[int] = Query(None, alias="status", description="Filter by status code"),
    url: Optional[str] = Query(None, description="Filter by URL"),
    sort: Optional[str] = Query(None, description="Field to sort by"),
    order: str = Query("desc", pattern="^(asc|desc)$"),
    limit: Optional[int] = Query(None, ge=1, le=10000, description="Defaults to the configured query limit"),
    skip: int = Query(0, ge=0),
):
    """
    Query stored records.
    
    Filters are exact matches on the record fields of the same name.
    """
    if limit is None:
        limit = request.app.state.settings.query_limit
    
    find: Dict[str, Any] = {}
    if method:
        find["method"] = method.upper()
    if status_code is not None:
        find["status"] = status_code
    if url:
        find["url"] = url
    
    sort_spec = [(sort, -1 if order == "desc" else 1)] if sort else None
    
    sink = request.app.state.sink
    try:
        records = await sink.query(find=find, sort=sort_spec, limit=limit, skip=skip)
    except PyMongoError as e:
        logger.error(f"Record query failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Record store unavailable",
        )
    
    return LogListResponse(
        records=[_serialize(doc) for doc in records],
        count=len(records),
        limit=limit,
        skip=skip,
    )
