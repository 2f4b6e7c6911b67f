"""HTTP client for the Winnipeg Transit API.

Builds authenticated requests relative to a versioned base URL, dispatches
them over a pooled httpx connection, and decodes JSON responses. Errors
surfaced from this module never carry the API key.
"""

import threading
import time
from collections.abc import Callable, Mapping
from concurrent.futures import Future, ThreadPoolExecutor
from functools import cached_property
from types import TracebackType
from typing import TYPE_CHECKING, Any, TypeVar

import httpx
import structlog
from pydantic import ValidationError

from winnipeg_transit.transport.config import ClientConfig
from winnipeg_transit.transport.constants import (
    API_KEY_PARAM,
    DEFAULT_CHUNK_SIZE,
    HTTP_STATUS_OK_MAX,
    HTTP_STATUS_OK_MIN,
    JSON_CONTENT_TYPE,
    JSON_SUFFIX,
    MAX_BODY_SLURP_SIZE,
    REDACTED_API_KEY,
)
from winnipeg_transit.transport.context import RequestContext
from winnipeg_transit.transport.errors import (
    ConfigurationError,
    DeadlineExceededError,
    ErrorBody,
    ErrorResponse,
    MissingContextError,
    RequestCancelledError,
    RequestPathError,
    ResponseDecodeError,
    TransitErrorClass,
    TransportError,
)
from winnipeg_transit.transport.metrics import DispatchMetrics
from winnipeg_transit.transport.models import (
    ApiRequest,
    DecodeTarget,
    RawSink,
    StructuredTarget,
)
from winnipeg_transit.transport.redact import redact_headers, sanitize_url
from winnipeg_transit.transport.state_machine import RequestStateMachine


if TYPE_CHECKING:
    from winnipeg_transit.settings.app import AppSettings
    from winnipeg_transit.stops.service import StopsService


logger = structlog.get_logger()

QueryParams = Mapping[str, str | int | float | bool]

_R = TypeVar("_R")


class TransitClient:
    """Client for the Winnipeg Transit API.

    The configuration is read-only after construction and the client can be
    shared between threads. Each call to do() performs exactly one
    round-trip; nothing is retried or cached.
    """

    def __init__(
        self,
        config: ClientConfig,
        http_client: httpx.Client | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Client configuration.
            http_client: Optional pre-built httpx client (e.g. with a mock
                transport). When omitted the client creates and owns one.

        Raises:
            ConfigurationError: If the base URL cannot be parsed.
        """
        try:
            base_url = httpx.URL(config.base_url)
        except httpx.InvalidURL as e:
            msg = f"invalid base URL {config.base_url!r}: {e}"
            raise ConfigurationError(msg) from e
        if not base_url.is_absolute_url:
            msg = f"base URL must be absolute, got {config.base_url!r}"
            raise ConfigurationError(msg)

        self._config = config
        self._base_url = base_url
        self._owns_http = http_client is None
        self._http = http_client or httpx.Client(
            timeout=config.timeout_seconds,
            follow_redirects=True,
        )
        self._executor = ThreadPoolExecutor(
            max_workers=config.max_dispatch_workers,
            thread_name_prefix="transit-dispatch",
        )
        self._log = logger.bind(component="transport")

    @classmethod
    def from_settings(cls, settings: "AppSettings | None" = None) -> "TransitClient":
        """Create a client from environment settings.

        Args:
            settings: Settings to use; loaded from the environment if None.

        Raises:
            ConfigurationError: If no API key is configured.
        """
        from winnipeg_transit.settings.app import get_settings  # noqa: PLC0415

        settings = settings or get_settings()
        return cls(settings.to_client_config())

    @property
    def config(self) -> ClientConfig:
        """Get the client configuration."""
        return self._config

    @property
    def base_url(self) -> httpx.URL:
        """Get the parsed base URL."""
        return self._base_url

    @cached_property
    def stops(self) -> "StopsService":
        """Stop search and listing endpoints."""
        from winnipeg_transit.stops.service import StopsService  # noqa: PLC0415

        return StopsService(self)

    def close(self) -> None:
        """Release pooled connections and the dispatch executor."""
        if self._owns_http:
            self._http.close()
        self._executor.shutdown(wait=False, cancel_futures=True)

    def __enter__(self) -> "TransitClient":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def new_request(
        self,
        ctx: RequestContext | None,
        method: str,
        path: str,
        params: QueryParams | None = None,
    ) -> ApiRequest:
        """Create an API request for a path relative to the base URL.

        Relative paths must be given without a preceding slash. The path is
        suffixed with ``.json`` and the API key is added to the query.

        Args:
            ctx: Request context; must not be None.
            method: HTTP method.
            path: Relative endpoint path.
            params: Extra query parameters.

        Returns:
            A freshly built request.

        Raises:
            MissingContextError: If ctx is None.
            ConfigurationError: If the base URL lacks a trailing slash.
            RequestPathError: If the path is absolute or cannot be resolved.
        """
        if ctx is None:
            raise MissingContextError

        if not self._base_url.path.endswith("/"):
            msg = (
                "BaseURL must have a trailing slash, "
                f"but {str(sanitize_url(self._base_url))!r} does not"
            )
            raise ConfigurationError(msg)

        if path.startswith("/"):
            msg = f"relative path must not begin with '/', got {path!r}"
            raise RequestPathError(msg, path)

        try:
            url = self._base_url.join(path + JSON_SUFFIX)
        except httpx.InvalidURL as e:
            msg = f"parse {path!r}: {e}"
            raise RequestPathError(msg, path) from e

        if url.scheme != self._base_url.scheme or url.host != self._base_url.host:
            msg = f"path {path!r} does not resolve under the base URL"
            raise RequestPathError(msg, path)

        query: dict[str, str | int | float | bool] = dict(params or {})
        query[API_KEY_PARAM] = self._config.api_key.get_secret_value()
        url = url.copy_merge_params(query)

        headers = {"Content-Type": JSON_CONTENT_TYPE}
        if self._config.user_agent:
            headers["User-Agent"] = self._config.user_agent

        request = ApiRequest(context=ctx, method=method, url=url, headers=headers)
        self._log.debug(
            "request_built",
            method=method,
            url=str(sanitize_url(url)),
            headers=redact_headers(headers),
        )
        return request

    def bare_do(self, request: ApiRequest) -> httpx.Response:
        """Send a request and return the raw, still-open response.

        The response body is not read. The caller owns the response and must
        close it (``with client.bare_do(req) as resp: ...``).

        If the request context is canceled or times out, its error is raised
        in place of whatever the transport reports.

        Args:
            request: Request built by new_request().

        Returns:
            Streaming httpx response.

        Raises:
            ContextCanceledError: If the context was canceled.
            DeadlineExceededError: If the context deadline passed.
            TransportError: On network, TLS, or redirect failure.
        """
        ctx = request.context
        log = self._log.bind(
            method=request.method,
            url=str(sanitize_url(request.url)),
        )

        ctx_error = ctx.err()
        if ctx_error is not None:
            self._record_cancellation(log, ctx_error)
            raise ctx_error

        timeout = self._timeout_for(ctx)
        http_request = self._http.build_request(
            request.method,
            request.url,
            headers=request.headers,
            timeout=httpx.USE_CLIENT_DEFAULT if timeout is None else timeout,
        )

        start_time_ns = time.perf_counter_ns()
        try:
            response = self._send(http_request, ctx)
        except RequestCancelledError as e:
            self._record_cancellation(log, e)
            raise
        except httpx.RequestError as e:
            # Context state is authoritative over the transport's view.
            ctx_error = ctx.err()
            if ctx_error is not None:
                self._record_cancellation(log, ctx_error)
                raise ctx_error from e

            error = self._sanitize_transport_error(e, request)
            DispatchMetrics.get_instance().record_failure(TransitErrorClass.TRANSPORT)
            log.warning(
                "transport_failed",
                error_type=type(e).__name__,
                error=str(error),
            )
            raise error from e

        duration_ms = (time.perf_counter_ns() - start_time_ns) / 1_000_000
        DispatchMetrics.get_instance().record_response(
            response.status_code, duration_ms
        )
        log.debug(
            "dispatch_complete",
            status_code=response.status_code,
            duration_ms=round(duration_ms, 2),
        )
        return response

    def do(
        self,
        request: ApiRequest,
        target: DecodeTarget | None = None,
    ) -> httpx.Response:
        """Send a request and decode the response into target.

        With a StructuredTarget the JSON body is validated into
        ``target.value``; an empty body is not an error. With a RawSink the
        body is copied verbatim. In every case the body is drained and
        closed before this method returns.

        Body reads run on the dispatch executor and are bounded by the request
        context like the round-trip itself. When the context finishes during
        a read, its error is raised at once and the response is released by
        the worker when the read ends.

        Args:
            request: Request built by new_request().
            target: Optional decode target.

        Returns:
            The (closed) httpx response.

        Raises:
            ErrorResponse: On a non-2xx status; ``.response`` is set.
            ResponseDecodeError: On a malformed body; ``.response`` is set.
            RequestCancelledError: If the context finished first.
            TransportError: On network failure.
        """
        machine = RequestStateMachine(request.method, str(sanitize_url(request.url)))
        log = self._log.bind(
            method=request.method,
            url=str(sanitize_url(request.url)),
        )

        try:
            response = self.bare_do(request)
        except RequestCancelledError:
            machine.to_cancelled()
            raise
        except TransportError:
            machine.to_transport_failed()
            raise
        machine.to_dispatched()

        ctx = request.context
        abandoned = False

        def read_body(read: Callable[..., _R], *args: Any) -> _R:
            """Run a body read off this thread, giving up once ctx is done."""
            nonlocal abandoned
            future = self._run_until_done(ctx, read, *args)
            if future.done():
                return future.result()
            abandoned = True
            future.cancel()
            # The worker releases the response once its read ends.
            future.add_done_callback(lambda _: drain_and_close(response))
            raise ctx.err() or DeadlineExceededError()

        try:
            try:
                if is_success_status(response.status_code):
                    check_response(response)
                else:
                    # Error bodies are read in full.
                    read_body(check_response, response)
            except ErrorResponse as e:
                machine.to_status_rejected()
                DispatchMetrics.get_instance().record_failure(TransitErrorClass.STATUS)
                log.info(
                    "status_rejected",
                    status_code=e.status_code,
                    message=e.message,
                )
                raise

            if target is None:
                machine.to_decoded()
                return response

            ctx_error = ctx.err()
            if ctx_error is not None:
                raise ctx_error

            if isinstance(target, RawSink):
                read_body(self._copy_raw, response, target, ctx)
                machine.to_raw_copied()
            else:
                self._decode(read_body(response.read), response, target)
                machine.to_decoded()
        except ResponseDecodeError as e:
            machine.to_decode_failed()
            DispatchMetrics.get_instance().record_failure(TransitErrorClass.DECODE)
            log.warning("decode_failed", error=e.message)
            raise
        except RequestCancelledError as e:
            machine.to_cancelled()
            self._record_cancellation(log, e)
            raise
        except httpx.RequestError as e:
            # Context state is authoritative over the transport's view.
            ctx_error = ctx.err()
            if ctx_error is not None:
                machine.to_cancelled()
                self._record_cancellation(log, ctx_error)
                raise ctx_error from e

            machine.to_transport_failed()
            error = self._sanitize_transport_error(e, request)
            DispatchMetrics.get_instance().record_failure(TransitErrorClass.TRANSPORT)
            log.warning("body_read_failed", error=str(error))
            raise error from e
        finally:
            if not abandoned:
                drain_and_close(response)

        return response

    def _send(self, http_request: httpx.Request, ctx: RequestContext) -> httpx.Response:
        """Run the round-trip on the executor, returning early if ctx finishes.

        Raises:
            RequestCancelledError: If ctx finished before the response arrived.
        """
        future = self._run_until_done(ctx, self._http.send, http_request, stream=True)
        if future.done():
            return future.result()

        # Abandoned: make sure a late response does not hold a connection.
        future.cancel()
        future.add_done_callback(_close_abandoned)
        raise ctx.err() or DeadlineExceededError()

    def _run_until_done(
        self,
        ctx: RequestContext,
        fn: Callable[..., _R],
        *args: Any,
        **kwargs: Any,
    ) -> "Future[_R]":
        """Submit fn to the dispatch executor and wait for it or for ctx.

        Returns:
            The future, which is still pending if ctx finished first.
        """
        future = self._executor.submit(fn, *args, **kwargs)
        wake = threading.Event()
        future.add_done_callback(lambda _: wake.set())
        unregister = ctx.on_cancel(wake.set)
        try:
            wake.wait(timeout=ctx.remaining())
        finally:
            unregister()
        return future

    def _timeout_for(self, ctx: RequestContext) -> float | None:
        """Cap the request timeout at the context deadline, if there is one."""
        remaining = ctx.remaining()
        if remaining is None:
            return None
        return max(0.001, min(self._config.timeout_seconds, remaining))

    def _sanitize_transport_error(
        self,
        error: httpx.RequestError,
        request: ApiRequest,
    ) -> TransportError:
        """Build a TransportError whose text cannot reveal the API key."""
        failed_url = request.url
        try:
            failed_url = error.request.url
        except RuntimeError:
            # httpx raises when the error was created without a request
            pass

        message = str(error) or type(error).__name__
        for raw in {str(failed_url), str(request.url)}:
            message = message.replace(raw, str(sanitize_url(raw)))
        api_key = self._config.api_key.get_secret_value()
        if api_key:
            message = message.replace(api_key, REDACTED_API_KEY)

        return TransportError(
            message,
            method=request.method,
            url=str(sanitize_url(failed_url)),
        )

    def _record_cancellation(
        self,
        log: structlog.stdlib.BoundLogger,
        error: RequestCancelledError,
    ) -> None:
        DispatchMetrics.get_instance().record_failure(TransitErrorClass.CANCELLED)
        log.info("request_cancelled", reason=str(error))

    def _copy_raw(
        self,
        response: httpx.Response,
        sink: RawSink,
        ctx: RequestContext,
    ) -> None:
        for chunk in response.iter_bytes(chunk_size=DEFAULT_CHUNK_SIZE):
            # Nothing reaches the sink after the caller has given up.
            ctx_error = ctx.err()
            if ctx_error is not None:
                raise ctx_error
            sink.write(chunk)

    def _decode(
        self,
        body: bytes,
        response: httpx.Response,
        target: StructuredTarget[Any],
    ) -> None:
        # An empty body is legitimate on some success statuses (e.g. 204).
        if not body.strip():
            return
        try:
            target.decode(body)
        except ValidationError as e:
            msg = f"decode response body into {target.target_type!r}: {e}"
            raise ResponseDecodeError(msg, response) from e


def is_success_status(status_code: int) -> bool:
    """Whether a status code is in the 2xx range."""
    return HTTP_STATUS_OK_MIN <= status_code < HTTP_STATUS_OK_MAX


def check_response(response: httpx.Response) -> None:
    """Raise ErrorResponse if the response status is not 2xx.

    The error body is read in full and decoded on a best-effort basis; a
    body that is not the expected JSON leaves the message empty.

    Args:
        response: HTTP response to check.

    Raises:
        ErrorResponse: If the status is outside 200-299.
    """
    if is_success_status(response.status_code):
        return

    message = ""
    try:
        data = response.read()
    except httpx.HTTPError as e:
        logger.debug("error_body_unreadable", error_type=type(e).__name__)
        data = b""
    if data:
        try:
            message = ErrorBody.model_validate_json(data).message
        except ValidationError:
            logger.debug("error_body_undecodable", status_code=response.status_code)
    raise ErrorResponse(response, message)


def drain_and_close(response: httpx.Response) -> None:
    """Drain a bounded amount of the body, then close the response.

    Reading a small remainder lets the connection pool reuse the
    underlying connection. Bodies with a known length above
    MAX_BODY_SLURP_SIZE are closed without reading.

    Args:
        response: Response to release.
    """
    try:
        if not response.is_stream_consumed and not response.is_closed:
            content_length = response.headers.get("content-length")
            if content_length is None or _parse_length(content_length) <= (
                MAX_BODY_SLURP_SIZE
            ):
                drained = 0
                for chunk in response.iter_raw(chunk_size=MAX_BODY_SLURP_SIZE):
                    drained += len(chunk)
                    if drained >= MAX_BODY_SLURP_SIZE:
                        break
    except httpx.HTTPError as e:
        # The pool will not reuse a connection that failed to drain.
        logger.debug("drain_failed", error_type=type(e).__name__)
    finally:
        response.close()


def _parse_length(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        return -1


def _close_abandoned(future: "Future[httpx.Response]") -> None:
    if future.cancelled() or future.exception() is not None:
        return
    future.result().close()
