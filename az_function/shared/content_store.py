import base64
import json
import time
import asyncio
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from .config import ProxyConfig
from .errors import StoreConflictError, StoreReadError, StoreWriteError

logger = logging.getLogger("tourtracker_proxy.store")

# GitHub answers a stale blob sha with 409; some paths report it as 422.
CONFLICT_STATUSES = (409, 422)


def decode_content(encoded: str) -> str:
    """Decode the contents API payload (base64 of UTF-8, wrapped with newlines)."""
    raw = base64.b64decode(encoded.replace("\n", ""))
    return raw.decode("utf-8")


def encode_content(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


@dataclass(frozen=True)
class StoredContent:
    text: str
    sha: str


class ContentStoreClient:
    """Read and conditional-write access to one repository's files via the GitHub contents API.

    Each call is a single round trip: no retries, no caching. The sha returned by
    ``read`` must be handed back to ``write``; GitHub rejects the write if the file
    changed in between.
    """

    def __init__(self, config: ProxyConfig, transport: Optional[httpx.BaseTransport] = None):
        self._config = config
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._config.require_token()}",
            "User-Agent": self._config.user_agent,
            "Accept": "application/vnd.github.v3+json",
        }

    def _contents_url(self, path: str) -> str:
        return f"{self._config.api_base_url}/repos/{self._config.repo}/contents/{path}"

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        url = self._contents_url(path)
        headers = self._headers()
        trace_id = str(uuid.uuid4())
        started = time.perf_counter()

        def _do_sync():
            with httpx.Client(timeout=self._config.timeout_s, transport=self._transport) as client:
                return client.request(method, url, headers=headers, **kwargs)

        resp = await asyncio.to_thread(_do_sync)
        elapsed_ms = (time.perf_counter() - started) * 1000
        telemetry = {
            "event": "github_contents_call",
            "method": method,
            "path": path,
            "status": resp.status_code,
            "elapsed_ms": round(elapsed_ms, 2),
            "trace_id": trace_id,
        }
        logger.info("github_store: " + json.dumps(telemetry))
        return resp

    async def read(self, path: str) -> StoredContent:
        resp = await self._request("GET", path, params={"ref": self._config.branch})
        if not resp.is_success:
            raise StoreReadError(f"GitHub GET failed: {resp.status_code}", resp.status_code)
        data = resp.json()
        content = data.get("content") if isinstance(data, dict) else None
        sha = data.get("sha") if isinstance(data, dict) else None
        if content is None or not sha:
            raise StoreReadError(f"GitHub GET returned no file content for {path}", resp.status_code)
        return StoredContent(text=decode_content(content), sha=sha)

    async def write(self, path: str, text: str, sha: str, message: str) -> None:
        body = {
            "message": message,
            "content": encode_content(text),
            "sha": sha,
            "branch": self._config.branch,
        }
        resp = await self._request("PUT", path, json=body)
        if resp.is_success:
            return
        if resp.status_code in CONFLICT_STATUSES:
            logger.warning("write_conflict", extra={"path": path, "status": resp.status_code, "sha": sha})
            raise StoreConflictError(f"GitHub PUT failed: {resp.status_code}", resp.status_code)
        raise StoreWriteError(f"GitHub PUT failed: {resp.status_code}", resp.status_code)
