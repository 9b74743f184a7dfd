import asyncio
import json
from typing import Any, Awaitable, Dict, Optional, Protocol, TypeVar
import httpx
from pydantic import BaseModel
from podcontext.config import settings
from podcontext.core.errors import AcquisitionCancelled, HttpError
from podcontext.utils.logger import logger

T = TypeVar("T")

class RequestOptions(BaseModel):
    method: str = "GET"
    headers: Dict[str, str] = {}
    body: Optional[str] = None
    cookies: Dict[str, str] = {}

class HttpResponse(BaseModel):
    status: int
    body: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def parse_json(self) -> Any:
        return json.loads(self.body)

class Transport(Protocol):
    async def __call__(self, url: str, options: RequestOptions) -> HttpResponse: ...

class CancellationToken:
    """Cooperative cancellation shared by one acquisition call."""

    def __init__(self):
        self._event = asyncio.Event()
        self.reason: Optional[str] = None

    def cancel(self, reason: Optional[str] = None) -> None:
        self.reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise AcquisitionCancelled(detail=self.reason)

    async def wait(self) -> None:
        await self._event.wait()

async def run_cancellable(awaitable: Awaitable[T], token: Optional[CancellationToken]) -> T:
    """Await ``awaitable`` unless ``token`` fires first, in which case the request task is cancelled."""
    if token is None:
        return await awaitable
    request = asyncio.ensure_future(awaitable)
    watcher = asyncio.ensure_future(token.wait())
    try:
        done, _ = await asyncio.wait({request, watcher}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        watcher.cancel()
        if not request.done():
            request.cancel()
    if request in done:
        return request.result()
    # let the transport unwind before reporting
    await asyncio.gather(request, return_exceptions=True)
    raise AcquisitionCancelled(detail=token.reason)

class HttpxTransport:
    """Default transport backed by a shared ``httpx.AsyncClient``."""

    def __init__(self, client: Optional[httpx.AsyncClient] = None, timeout: Optional[float] = None):
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout if timeout is not None else settings.HTTP_TIMEOUT

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                follow_redirects=True,
                headers={"User-Agent": settings.USER_AGENT},
            )
        return self._client

    async def __call__(self, url: str, options: RequestOptions) -> HttpResponse:
        headers = dict(options.headers)
        if options.cookies:
            headers["Cookie"] = "; ".join(f"{k}={v}" for k, v in options.cookies.items())
        try:
            resp = await self._get_client().request(
                options.method,
                url,
                headers=headers,
                content=options.body.encode("utf-8") if options.body is not None else None,
            )
        except httpx.HTTPError as e:
            logger.debug(f"Transport error for {url}: {e}")
            raise HttpError(None, "Network request failed", detail=str(e)) from e
        return HttpResponse(status=resp.status_code, body=resp.text)

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "HttpxTransport":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

class HttpClient:
    """Binds a transport to one call's cancellation token."""

    def __init__(self, transport: Transport, cancel_token: Optional[CancellationToken] = None):
        self.transport = transport
        self.cancel_token = cancel_token

    async def get(self, url: str, headers: Optional[Dict[str, str]] = None,
                  cookies: Optional[Dict[str, str]] = None) -> HttpResponse:
        options = RequestOptions(method="GET", headers=headers or {}, cookies=cookies or {})
        return await self._send(url, options)

    async def post_json(self, url: str, payload: Dict[str, Any], headers: Optional[Dict[str, str]] = None,
                        cookies: Optional[Dict[str, str]] = None) -> HttpResponse:
        options = RequestOptions(
            method="POST",
            headers=headers or {},
            body=json.dumps(payload),
            cookies=cookies or {},
        )
        return await self._send(url, options)

    async def _send(self, url: str, options: RequestOptions) -> HttpResponse:
        if self.cancel_token is not None:
            self.cancel_token.raise_if_cancelled()
        return await run_cancellable(self.transport(url, options), self.cancel_token)
