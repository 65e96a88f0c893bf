from __future__ import annotations

from typing import Iterable

import httpx


class RecordingSleep:
    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.calls.append(delay)


class ScriptedTransport(httpx.AsyncBaseTransport):
    """Answers requests with a fixed sequence of status codes.

    An entry may also be an exception instance, which is raised instead of
    returning a response. Requests past the end of the script get 200.
    """

    def __init__(self, script: Iterable[int | Exception]) -> None:
        self.script = list(script)
        self.requests: list[httpx.Request] = []

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        index = len(self.requests)
        self.requests.append(request)
        item = self.script[index] if index < len(self.script) else 200
        if isinstance(item, Exception):
            raise item
        return httpx.Response(item, json={"ok": item == 200}, request=request)
