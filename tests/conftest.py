import asyncio
import json
from typing import Any, Callable, List, Optional, Tuple, Union
import pytest
from podcontext.core.transport import HttpResponse, RequestOptions

Reply = Union[HttpResponse, Exception, Callable[[str, RequestOptions], Any]]


class FakeTransport:
    """In-memory transport: the first route whose substring occurs in the URL answers."""

    def __init__(self):
        self.routes: List[Tuple[str, Optional[str], Reply]] = []
        self.calls: List[Tuple[str, RequestOptions]] = []

    def add(self, match: str, reply: Reply, method: Optional[str] = None) -> "FakeTransport":
        self.routes.append((match, method, reply))
        return self

    def text(self, match: str, body: str, status: int = 200, method: Optional[str] = None) -> "FakeTransport":
        return self.add(match, HttpResponse(status=status, body=body), method)

    def json(self, match: str, payload: Any, status: int = 200, method: Optional[str] = None) -> "FakeTransport":
        return self.text(match, json.dumps(payload), status, method)

    def urls(self) -> List[str]:
        return [url for url, _ in self.calls]

    async def __call__(self, url: str, options: RequestOptions) -> HttpResponse:
        self.calls.append((url, options))
        await asyncio.sleep(0)
        for match, method, reply in self.routes:
            if match in url and (method is None or method == options.method):
                if isinstance(reply, Exception):
                    raise reply
                if callable(reply):
                    result = reply(url, options)
                    if asyncio.iscoroutine(result):
                        result = await result
                    return result
                return reply
        return HttpResponse(status=404, body="")


@pytest.fixture
def transport():
    return FakeTransport()


def player_page(tracks, prefix: str = "", suffix: str = "") -> str:
    player = {
        "videoDetails": {"title": "A {braced} \"quoted\" title"},
        "captions": {"playerCaptionsTracklistRenderer": {"captionTracks": tracks}},
    }
    return (
        "<html><script>" + prefix
        + "var ytInitialPlayerResponse = " + json.dumps(player) + ";"
        + suffix + "</script></html>"
    )


def json3_body(*events) -> str:
    return json.dumps({"events": [
        {"tStartMs": start, "dDurationMs": dur, "segs": [{"utf8": text}]}
        for start, dur, text in events
    ]})


def envelope(*segments) -> dict:
    initial = [
        {"transcriptSegmentRenderer": {
            "startMs": str(start), "endMs": str(end),
            "snippet": {"runs": [{"text": text}]},
        }}
        for start, end, text in segments
    ]
    return {"actions": [{"updateEngagementPanelAction": {"content": {"transcriptRenderer": {"content": {
        "transcriptSearchPanelRenderer": {"body": {"transcriptSegmentListRenderer": {
            "initialSegments": initial,
        }}}
    }}}}}]}
