"""Request execution over httpx.

``RequestExecutor`` turns a ``RequestOptions`` value into a single HTTP
exchange: serialize the body, build the request, inject headers, dispatch,
read the body and optionally decode it into the caller's target.
``AsyncRequestExecutor`` does the same over ``httpx.AsyncClient``.
"""

import re
from typing import Any

import httpx

from core.codecs import decode_into, encode_body
from core.config import Config
from core.exceptions import RequestConstructionError, ResponseReadError
from core.headers import HeaderBuilder
from core.protocols import TraceSink
from core.request_types import ApiResponse, RequestOptions, mock_response
from ui.trace import ConsoleTraceSink, build_trace_sink

DEFAULT_TIMEOUT = 30.0

# RFC 9110 token
_METHOD_TOKEN = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")


class _BaseExecutor:
    """Steps shared by the sync and async executors."""

    def __init__(
        self,
        *,
        debug: bool = False,
        mock_mode: bool = False,
        trace_sink: TraceSink | None = None,
        header_builder: HeaderBuilder | None = None,
    ) -> None:
        self.debug = debug
        self.mock_mode = mock_mode
        self._trace = trace_sink
        self._headers = header_builder or HeaderBuilder()

    @property
    def trace_sink(self) -> TraceSink:
        if self._trace is None:
            self._trace = ConsoleTraceSink()
        return self._trace

    def _prepare_body(self, options: RequestOptions) -> bytes | None:
        if options.body is None:
            return None
        return encode_body(options.body, options.content_type)

    def _build_request(
        self,
        client: httpx.Client | httpx.AsyncClient,
        options: RequestOptions,
        body: bytes | None,
        timeout: float | None,
    ) -> httpx.Request:
        method = options.method or "GET"
        if not _METHOD_TOKEN.match(method):
            raise RequestConstructionError(
                "error create request", ValueError(f"invalid method {method!r}")
            )
        try:
            headers = self._headers.build_request_headers(
                options.content_type, options.headers, options.basic_auth
            )
            return client.build_request(
                method,
                options.url,
                headers=headers,
                content=body,
                timeout=httpx.USE_CLIENT_DEFAULT if timeout is None else timeout,
            )
        except (httpx.InvalidURL, TypeError, ValueError) as e:
            raise RequestConstructionError("error create request", e) from e

    def _trace_request(self, request: httpx.Request, body: bytes | None) -> None:
        if self.debug:
            self.trace_sink.log_request(
                request.method, str(request.url), self._headers.flatten(request.headers), body
            )

    def _finish(self, options: RequestOptions, response: httpx.Response, content: bytes) -> ApiResponse:
        headers, header_values = self._headers.capture_response_headers(response.headers)
        if self.debug:
            self.trace_sink.log_response(
                response.status_code, self._headers.flatten(response.headers), content
            )

        if options.response_target is not None:
            content_type = options.content_type or response.headers.get("content-type", "")
            decode_into(options.response_target, content, content_type)

        return ApiResponse(
            status_code=response.status_code,
            body=content,
            headers=headers,
            header_values=header_values,
        )


def _read_error(e: Exception) -> ResponseReadError:
    return ResponseReadError("error read response body", e)


class RequestExecutor(_BaseExecutor):
    """Execute declarative requests with a synchronous httpx client."""

    def __init__(
        self,
        client: httpx.Client | None = None,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        follow_redirects: bool = True,
        user_agent: str | None = None,
        debug: bool = False,
        mock_mode: bool = False,
        trace_sink: TraceSink | None = None,
        header_builder: HeaderBuilder | None = None,
    ) -> None:
        super().__init__(
            debug=debug,
            mock_mode=mock_mode,
            trace_sink=trace_sink,
            header_builder=header_builder,
        )
        self._owns_client = client is None
        if client is None:
            client = httpx.Client(
                timeout=timeout,
                follow_redirects=follow_redirects,
                headers={"User-Agent": user_agent} if user_agent else None,
            )
        self.client = client

    def execute(self, options: RequestOptions, *, timeout: float | None = None) -> ApiResponse:
        """Execute one request.

        Args:
            options: What to send and where to decode the response.
            timeout: Per-call timeout in seconds. Defaults to the client's.

        Returns:
            Status code, raw body and captured headers.

        Raises:
            HttpInstantError subclasses for preparation, read and decode
            failures; httpx transport errors unchanged.
        """
        if self.mock_mode:
            return mock_response()

        body = self._prepare_body(options)
        request = self._build_request(self.client, options, body, timeout)
        self._trace_request(request, body)

        response = self.client.send(request, stream=True)
        try:
            content = response.read()
        except httpx.TimeoutException:
            raise
        except (httpx.HTTPError, httpx.StreamError) as e:
            raise _read_error(e) from e
        finally:
            response.close()

        return self._finish(options, response, content)

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "RequestExecutor":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


class AsyncRequestExecutor(_BaseExecutor):
    """Execute declarative requests with an asynchronous httpx client."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        follow_redirects: bool = True,
        user_agent: str | None = None,
        debug: bool = False,
        mock_mode: bool = False,
        trace_sink: TraceSink | None = None,
        header_builder: HeaderBuilder | None = None,
    ) -> None:
        super().__init__(
            debug=debug,
            mock_mode=mock_mode,
            trace_sink=trace_sink,
            header_builder=header_builder,
        )
        self._owns_client = client is None
        if client is None:
            client = httpx.AsyncClient(
                timeout=timeout,
                follow_redirects=follow_redirects,
                headers={"User-Agent": user_agent} if user_agent else None,
            )
        self.client = client

    async def execute(self, options: RequestOptions, *, timeout: float | None = None) -> ApiResponse:
        """Execute one request (see ``RequestExecutor.execute``)."""
        if self.mock_mode:
            return mock_response()

        body = self._prepare_body(options)
        request = self._build_request(self.client, options, body, timeout)
        self._trace_request(request, body)

        response = await self.client.send(request, stream=True)
        try:
            content = await response.aread()
        except httpx.TimeoutException:
            raise
        except (httpx.HTTPError, httpx.StreamError) as e:
            raise _read_error(e) from e
        finally:
            await response.aclose()

        return self._finish(options, response, content)

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> "AsyncRequestExecutor":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()


def build_executor(
    config: Config,
    *,
    trace_sink: TraceSink | None = None,
    client: httpx.Client | None = None,
) -> RequestExecutor:
    """Create a ``RequestExecutor`` from configuration."""
    settings = config.executor
    if trace_sink is None and settings.debug:
        trace_sink = build_trace_sink(config.trace)
    return RequestExecutor(
        client,
        timeout=settings.timeout,
        follow_redirects=settings.follow_redirects,
        user_agent=settings.user_agent,
        debug=settings.debug,
        mock_mode=settings.mock_mode,
        trace_sink=trace_sink,
    )
