import json
import re

import httpx

from assistant_chat.transport import create_client

_RUN_PATH = re.compile(r"^/beta/threads/(?P<thread>[^/]+)/runs/(?P<run>[^/]+)$")
_RUN_CANCEL_PATH = re.compile(r"^/beta/threads/(?P<thread>[^/]+)/runs/(?P<run>[^/]+)/cancel$")
_RUNS_PATH = re.compile(r"^/beta/threads/(?P<thread>[^/]+)/runs$")
_MESSAGES_PATH = re.compile(r"^/beta/threads/(?P<thread>[^/]+)/messages$")


def text_message(message_id: str, role: str, value: str) -> dict:
    return {
        "id": message_id,
        "object": "thread.message",
        "role": role,
        "content": [{"type": "text", "text": {"value": value, "annotations": []}}],
    }


class FakeAssistantsServer:
    """In-memory stand-in for the Assistants REST API, served through httpx.MockTransport."""

    def __init__(self, run_statuses: list[str] | None = None):
        self.run_statuses = list(run_statuses or ["completed"])
        self.requests: list[httpx.Request] = []
        self.thread_messages: list[dict] = []
        self._failures: dict[tuple[str, str], tuple[int, str]] = {}
        self._run_count = 0
        self._status_index: dict[str, int] = {}
        self._answered_runs: set[str] = set()

    def fail(self, method: str, path_suffix: str, status_code: int = 500, message: str = "boom") -> None:
        self._failures[(method, path_suffix)] = (status_code, message)

    def client_factory(self, api_key: str, **kwargs) -> httpx.AsyncClient:
        return create_client(api_key, transport=httpx.MockTransport(self.handler), **kwargs)

    def calls(self) -> list[tuple[str, str]]:
        return [(r.method, self._api_path(r)) for r in self.requests]

    def count(self, method: str, pattern: str) -> int:
        return sum(1 for m, p in self.calls() if m == method and re.fullmatch(pattern, p))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = self._api_path(request)

        for (method, suffix), (status_code, message) in self._failures.items():
            if request.method == method and path.endswith(suffix):
                return httpx.Response(status_code, json={"error": {"message": message}})

        body = json.loads(request.content) if request.content else {}

        if request.method == "POST" and path == "/beta/assistants":
            return httpx.Response(200, json={"id": "asst_1", "object": "assistant", **body})
        if request.method == "POST" and path == "/beta/threads":
            return httpx.Response(200, json={"id": "thread_1", "object": "thread"})

        m = _MESSAGES_PATH.match(path)
        if m and request.method == "POST":
            message = text_message(f"msg_{len(self.thread_messages) + 1}", body["role"], body["content"])
            self.thread_messages.append(message)
            return httpx.Response(200, json=message)
        if m and request.method == "GET":
            return httpx.Response(200, json={"object": "list", "data": list(reversed(self.thread_messages))})

        m = _RUNS_PATH.match(path)
        if m and request.method == "POST":
            self._run_count += 1
            run_id = f"run_{self._run_count}"
            self._status_index[run_id] = 0
            return httpx.Response(200, json={"id": run_id, "status": "queued", **body})

        m = _RUN_CANCEL_PATH.match(path)
        if m and request.method == "POST":
            return httpx.Response(200, json={"id": m.group("run"), "status": "cancelling"})

        m = _RUN_PATH.match(path)
        if m and request.method == "GET":
            return httpx.Response(200, json={"id": m.group("run"), "status": self._next_status(m.group("run"))})

        return httpx.Response(404, json={"error": {"message": f"no route for {request.method} {path}"}})

    def _next_status(self, run_id: str) -> str:
        index = self._status_index.get(run_id, 0)
        status = self.run_statuses[min(index, len(self.run_statuses) - 1)]
        self._status_index[run_id] = index + 1
        if status == "completed" and run_id not in self._answered_runs:
            self._answered_runs.add(run_id)
            self.thread_messages.append(
                text_message(f"msg_{len(self.thread_messages) + 1}", "assistant", f"answer from {run_id}")
            )
        return status

    @staticmethod
    def _api_path(request: httpx.Request) -> str:
        path = request.url.path
        return path[len("/v1"):] if path.startswith("/v1") else path
