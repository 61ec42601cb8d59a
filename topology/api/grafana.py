"""
Dashboard data-source API

JSON endpoints for a generic tabular dashboard data source.

Endpoints:
- GET|POST /: Connection test, empty 200
- POST /query, /topology.json: Volume table, optionally filtered by targets
- POST /search: Distinct values of one display field
"""

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Request, Response
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from topology.errors import RequestDecodeError
from topology.models import QueryRequest, SearchRequest, VolumeInfo
from topology.services.projector import build_table, distinct_values
from topology.services.volume_filter import filter_volumes

logger = logging.getLogger(__name__)

router = APIRouter(tags=["grafana"])

JSON_MEDIA_TYPE = "application/json; charset=UTF-8"


async def _discover(request: Request) -> List[VolumeInfo]:
    finder = request.app.state.volume_finder
    volumes = await run_in_threadpool(finder.get_persistent_volumes)
    logger.debug(f"volumefinder returned {len(volumes)} persistent volumes")
    return volumes


def _validate(model, body: Any):
    try:
        return model.model_validate(body)
    except ValidationError as e:
        raise RequestDecodeError(f"decoding body: {e}") from e


def _json_response(request: Request, payload: Any) -> Response:
    content = request.app.state.codec.encode(payload)
    return Response(content=content, media_type=JSON_MEDIA_TYPE)


@router.api_route("/", methods=["GET", "POST"])
def root():
    return Response(status_code=200)


@router.api_route("/query", methods=["GET", "POST"])
@router.api_route("/topology.json", methods=["GET", "POST"])
async def query_table(request: Request) -> Response:
    """
    Volume table for the dashboard.

    Each target's `target` is a JSON-encoded {field: substring} map; all
    targets must match. No body, or null targets, means no filtering.
    """
    codec = request.app.state.codec
    with request.app.state.tracing.start_span("queryRequest"):
        volumes = await _discover(request)

        body = codec.decode_body(await request.body())
        query = _validate(QueryRequest, body if body is not None else {})
        predicates: List[Dict[str, str]] = [codec.decode_target(t.target) for t in query.targets or []]

        table = build_table(filter_volumes(volumes, predicates))
        logger.debug(f"generating table response with {len(table.rows)} rows")

        return _json_response(request, [table.model_dump()])


@router.post("/search")
async def search_values(request: Request) -> Response:
    """Distinct values of the display field named by `target`; no body returns []."""
    codec = request.app.state.codec
    volumes = await _discover(request)

    body = codec.decode_body(await request.body())
    if body is None:
        return _json_response(request, [])

    search = _validate(SearchRequest, body)
    values = distinct_values(volumes, search.target or "")
    logger.debug(f"search on '{search.target}' returned {len(values)} values")

    return _json_response(request, values)
