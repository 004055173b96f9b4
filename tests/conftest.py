"""Test configuration: repository on sys.path plus an in-memory GitHub contents API."""
from __future__ import annotations

import base64
import hashlib
import json
import sys
from pathlib import Path

import httpx
import pytest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from az_function.shared.config import ProxyConfig  # noqa: E402

CONTENTS_PREFIX = "/repos/belk714/tourtracker/contents/"


def _sha(text):
    return hashlib.sha1(text.encode("utf-8")).hexdigest()


class FakeGitHub:
    """Serves GET/PUT on the contents API and enforces the sha precondition on PUT."""

    def __init__(self, files=None):
        self.files = {}
        for path, text in (files or {}).items():
            self.files[path] = (text, _sha(text))
        self.reads = 0
        self.writes = []
        self.requests = []
        self.fail_status = {}

    def text(self, path="artists.json"):
        return self.files[path][0]

    def sha(self, path="artists.json"):
        return self.files[path][1]

    def commit(self, path, text):
        self.files[path] = (text, _sha(text))

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not request.url.path.startswith(CONTENTS_PREFIX):
            return httpx.Response(404, json={"message": "Not Found"})
        path = request.url.path[len(CONTENTS_PREFIX):]
        forced = self.fail_status.get(request.method)
        if forced:
            return httpx.Response(forced, json={"message": "forced failure"})
        if request.method == "GET":
            self.reads += 1
            if path not in self.files:
                return httpx.Response(404, json={"message": "Not Found"})
            text, sha = self.files[path]
            encoded = base64.b64encode(text.encode("utf-8")).decode("ascii")
            # The real API wraps base64 content at 60 characters.
            wrapped = "\n".join(encoded[i:i + 60] for i in range(0, len(encoded), 60)) + "\n"
            return httpx.Response(200, json={"path": path, "sha": sha, "encoding": "base64", "content": wrapped})
        if request.method == "PUT":
            body = json.loads(request.content)
            current = self.files.get(path)
            if current is None or body.get("sha") != current[1]:
                return httpx.Response(409, json={"message": f"{path} does not match {body.get('sha')}"})
            text = base64.b64decode(body["content"]).decode("utf-8")
            self.commit(path, text)
            self.writes.append(body)
            return httpx.Response(200, json={"content": {"path": path, "sha": self.sha(path)}})
        return httpx.Response(405, json={"message": "Method Not Allowed"})


@pytest.fixture
def github():
    return FakeGitHub({"artists.json": json.dumps(["Muse", "Radiohead"], indent=2)})


@pytest.fixture
def transport(github):
    return httpx.MockTransport(github.handle)


@pytest.fixture
def config():
    return ProxyConfig(github_token="test-token")
