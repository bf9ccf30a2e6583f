"""
HTTP Pipeline Adapter

Exposes a Pipeline as a FastAPI endpoint. The JSON request body becomes the
context payload; headers, query parameters, method and path are placed in
metadata. Pipeline outcomes map to status codes:

- abort-on-error failure: 500 with ``{"error": "..."}``
- failures collected under continue-on-error: 422 with ``{"errors": [...]}``
- success: 200 with the final payload as JSON
"""

import json
import logging
from typing import Any, Dict, Iterable, Sequence, Tuple

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from plugpipe.core.exceptions import PipelineStageError
from plugpipe.core.pipeline import Pipeline, PluginContext


logger = logging.getLogger("plugpipe.http")


def collapse_multi_items(items: Iterable[Tuple[str, str]]) -> Dict[str, Any]:
    """Group repeated keys: single values stay strings, repeated ones become lists."""
    grouped: Dict[str, list] = {}
    for key, value in items:
        grouped.setdefault(key, []).append(value)
    return {key: values[0] if len(values) == 1 else values for key, values in grouped.items()}


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def read_json_object(request: Request) -> Dict[str, Any]:
    """
    Decode the request body as a JSON object; an empty body is ``{}``.

    Raises:
        ValueError: If the body is not valid JSON or not an object
    """
    body = await request.body()
    if not body:
        return {}
    data = json.loads(body)
    if not isinstance(data, dict):
        raise ValueError("request body must be a JSON object")
    return data


class PipelineEndpoint:
    """
    Request handler running one pipeline per request.

    Every request gets its own PluginContext, so one endpoint can serve
    concurrent requests as long as the pipeline's plugins keep no shared
    mutable state.
    """

    def __init__(self, pipeline: Pipeline):
        self.pipeline = pipeline

    def build_context(self, request: Request, data: Dict[str, Any]) -> PluginContext:
        context = PluginContext(data)
        context.set("headers", collapse_multi_items(request.headers.items()))
        context.set("query", collapse_multi_items(request.query_params.multi_items()))
        context.set("method", request.method)
        context.set("path", request.url.path)
        return context

    async def handle(self, request: Request) -> JSONResponse:
        try:
            data = await read_json_object(request)
        except ValueError:
            return error_response(400, "Invalid JSON in request body")

        context = self.build_context(request, data)

        try:
            await run_in_threadpool(self.pipeline.execute, context)
        except PipelineStageError as e:
            logger.error(f"{request.method} {request.url.path} failed: {e}")
            return error_response(500, str(e))

        if context.has_errors:
            logger.warning(f"{request.method} {request.url.path} completed with {len(context.errors)} errors")
            return JSONResponse(
                status_code=422,
                content={"errors": [str(error) for error in context.errors]}
            )

        try:
            content = jsonable_encoder(context.get_data())
        except (TypeError, ValueError) as e:
            logger.error(f"{request.method} {request.url.path} returned an unencodable payload: {e}")
            return error_response(500, "Failed to encode response")

        return JSONResponse(status_code=200, content=content)


def create_pipeline_app(pipeline: Pipeline, path: str = "/",
                        methods: Sequence[str] = ("POST",)) -> FastAPI:
    """Create a FastAPI application serving ``pipeline`` at ``path``."""
    endpoint = PipelineEndpoint(pipeline)

    async def run_pipeline(request: Request) -> JSONResponse:
        return await endpoint.handle(request)

    app = FastAPI(title="plugpipe")
    app.add_api_route(path, run_pipeline, methods=list(methods))
    return app
