"""Shared fixtures: a scripted stand-in for the Memobird HTTP API."""

import inspect
import json

import httpx
import pytest


class FakeMemobirdApi:
    """Answers requests from a per-path script and records what was sent.

    ``routes`` maps an endpoint path (e.g. "/printpaper") to either a dict
    (sent as a 200 JSON body), an ``httpx.Response``, or a callable taking
    the request and returning (or awaiting to) one of those.
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.requests = []

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/home")
        reply = self.routes.get(path)
        if reply is None:
            return httpx.Response(404, text=f"no route for {path}")
        if callable(reply):
            reply = reply(request)
            if inspect.isawaitable(reply):
                reply = await reply
        if isinstance(reply, httpx.Response):
            return reply
        return httpx.Response(200, json=reply)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def body(self, index=-1) -> dict:
        return json.loads(self.requests[index].content)

    def params(self, index=-1) -> dict:
        return dict(self.requests[index].url.params)


@pytest.fixture
def fake_api():
    return FakeMemobirdApi({
        "/setuserbind": {"showapi_res_code": 1, "showapi_userid": "12345"},
        "/printpaper": {"showapi_res_code": 1, "printcontentid": 987},
        "/printpaperFromUrl": {"showapi_res_code": 1, "printcontentid": 654},
        "/getprintstatus": {"showapi_res_code": 1, "printflag": 1},
    })
