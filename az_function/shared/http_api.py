import json
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlparse

import azure.functions as func
import httpx

from .artists import ArtistListService, MutationResult
from .config import ProxyConfig, load_config
from .content_store import ContentStoreClient
from .errors import ProxyError, ValidationError

logger = logging.getLogger("tourtracker_proxy")

ARTISTS_PATH = "/artists"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

_SENSITIVE_HEADERS = ("authorization", "x-api-key", "cookie")


@dataclass(frozen=True)
class ArtistNameRequest:
    """Body of POST/DELETE /artists: exactly ``{"name": <string>}``."""

    name: str

    @classmethod
    def from_request(cls, req: func.HttpRequest) -> "ArtistNameRequest":
        # Unparseable JSON propagates and is reported as a 500.
        data = json.loads(req.get_body())
        if not isinstance(data, dict):
            raise ValidationError("Invalid request body")
        unknown = sorted(k for k in data if k != "name")
        if unknown:
            raise ValidationError("Unexpected field(s): " + ", ".join(unknown))
        name = data.get("name")
        if not isinstance(name, str):
            raise ValidationError("Missing name")
        return cls(name=name)


def _sanitize_headers(h: Mapping[str, str]) -> Dict[str, str]:
    return {k: ("***" if k.lower() in _SENSITIVE_HEADERS else v) for k, v in h.items()}


def _response_headers(trace_id: str) -> Dict[str, str]:
    return {**CORS_HEADERS, "X-Trace-Id": trace_id}


def _json_response(payload: Any, trace_id: str, status_code: int = 200) -> func.HttpResponse:
    body = json.dumps(payload, ensure_ascii=False).encode("utf-8")
    return func.HttpResponse(
        status_code=status_code,
        mimetype="application/json",
        body=body,
        headers=_response_headers(trace_id),
    )


def _mutation_response(result: MutationResult, trace_id: str) -> func.HttpResponse:
    return _json_response({"artists": result.artists, "message": result.message}, trace_id)


async def _dispatch(req: func.HttpRequest, service: ArtistListService, trace_id: str) -> func.HttpResponse:
    method = req.method.upper()
    path = urlparse(req.url).path

    if path == ARTISTS_PATH:
        if method == "GET":
            return _json_response(await service.list_artists(), trace_id)
        if method == "POST":
            body = ArtistNameRequest.from_request(req)
            return _mutation_response(await service.add_artist(body.name), trace_id)
        if method == "DELETE":
            body = ArtistNameRequest.from_request(req)
            return _mutation_response(await service.remove_artist(body.name), trace_id)

    return _json_response({"error": "Not found"}, trace_id, status_code=404)


async def handle_request(
    req: func.HttpRequest,
    config: Optional[ProxyConfig] = None,
    transport: Optional[httpx.BaseTransport] = None,
) -> func.HttpResponse:
    """Entry point shared by every function in the app.

    ``config`` defaults to the current app settings; ``transport`` lets callers
    substitute the HTTP transport used to reach GitHub.
    """
    trace_id = str(uuid.uuid4())
    if config is None:
        config = load_config()

    if config.debug_request_log:
        debug_payload = {
            "method": req.method,
            "url": req.url,
            "headers": _sanitize_headers(dict(req.headers) if req.headers else {}),
            "trace_id": trace_id,
        }
        logger.info("http_request_debug: " + json.dumps(debug_payload))

    if req.method.upper() == "OPTIONS":
        return func.HttpResponse(status_code=204, headers=_response_headers(trace_id))

    try:
        config.require_token()
        store = ContentStoreClient(config, transport=transport)
        service = ArtistListService(store, config.file_path)
        return await _dispatch(req, service, trace_id)
    except ProxyError as e:
        if e.status_code >= 500:
            logger.warning("request_failed", extra={"error_type": type(e).__name__, "trace_id": trace_id})
        return _json_response(e.payload(), trace_id, status_code=e.status_code)
    except Exception as e:
        logger.exception("Unexpected error handling artists request", extra={"trace_id": trace_id})
        return _json_response({"error": str(e)}, trace_id, status_code=500)
