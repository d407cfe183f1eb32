"""
Streamable HTTP transport for MCP.

A single endpoint handles three verbs:
- POST: JSON-RPC requests. ``initialize`` opens a session and returns its id
  in the ``Mcp-Session-Id`` header.
- GET: opens a server-sent events stream for a session, used for
  notifications and for responses to later POSTs.
- DELETE: closes a session.

In stateless mode there are no sessions: every POST is answered inline and
GET is not allowed.

The transport is an ASGI application built on Starlette. Requests are
dispatched to the (synchronous) server in Starlette's threadpool; SSE writes
from any thread are handed to the event loop that owns the stream.

Usage:
    transport = StreamableHTTPTransport(server)
    app = transport.build_app()  # mount anywhere, or:
    transport.run(host="127.0.0.1", port=8000)
"""

import asyncio
import contextlib
import json
import logging
import threading
import uuid
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import uvicorn
from starlette.applications import Starlette
from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import JSONResponse, Response, StreamingResponse
from starlette.routing import Route
from starlette.types import Receive, Scope, Send

from switchboard.server.context import RequestContext
from switchboard.server.transport import Transport

logger = logging.getLogger(__name__)

SESSION_HEADER = "Mcp-Session-Id"
REQUIRED_POST_ACCEPT_TYPES = ("application/json", "text/event-stream")
REQUIRED_GET_ACCEPT_TYPES = ("text/event-stream",)
DEFAULT_KEEPALIVE_INTERVAL = 30.0


class SSEStream:
    """A server-sent events stream writable from any thread.

    Writes are queued onto the event loop serving the response. Writing to a
    closed stream raises BrokenPipeError.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop
        self._queue: asyncio.Queue[str | None] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, chunk: str) -> None:
        if self._closed:
            msg = "SSE stream is closed"
            raise BrokenPipeError(msg)
        try:
            self._loop.call_soon_threadsafe(self._queue.put_nowait, chunk)
        except RuntimeError as e:
            # Event loop is gone, so is the client
            self._closed = True
            msg = "SSE stream is closed"
            raise BrokenPipeError(msg) from e

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        with contextlib.suppress(RuntimeError):
            self._loop.call_soon_threadsafe(self._queue.put_nowait, None)

    async def chunks(self) -> AsyncIterator[str]:
        try:
            while True:
                chunk = await self._queue.get()
                if chunk is None:
                    break
                yield chunk
        finally:
            self._closed = True


@dataclass
class Session:
    """Transport-level session state."""

    session_id: str
    context: RequestContext
    stream: SSEStream | None = None
    keepalive_stop: threading.Event = field(default_factory=threading.Event)


def format_sse_event(message: Any) -> str:
    data = message if isinstance(message, str) else json.dumps(message, separators=(",", ":"))
    return f"data: {data}\n\n"


def format_sse_ping() -> str:
    return f": ping {datetime.now(timezone.utc).isoformat()}\n\n"


def parse_accept_header(header: str) -> list[str]:
    return [part.split(";")[0].strip() for part in header.split(",")]


def _error_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


class StreamableHTTPTransport(Transport):
    """Session-aware HTTP + SSE transport.

    Args:
        server: Server to dispatch to
        stateless: Disable sessions and streaming
        keepalive_interval: Seconds between SSE keepalive pings
    """

    def __init__(
        self,
        server: Any,
        stateless: bool = False,
        keepalive_interval: float = DEFAULT_KEEPALIVE_INTERVAL,
    ) -> None:
        super().__init__(server)
        self.stateless = stateless
        self.keepalive_interval = keepalive_interval
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # ASGI
    # ------------------------------------------------------------------

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope, receive)
        response = await self.handle_request(request)
        await response(scope, receive, send)

    def build_app(self, path: str = "/mcp") -> Starlette:
        """Build a Starlette app serving this transport at ``path``."""

        @contextlib.asynccontextmanager
        async def lifespan(app: Starlette) -> AsyncIterator[None]:
            yield
            self.close()

        return Starlette(routes=[Route(path, endpoint=self)], lifespan=lifespan)

    def run(self, host: str = "127.0.0.1", port: int = 8000, path: str = "/mcp") -> None:
        """Serve with uvicorn until interrupted."""
        logger.info("Starting streamable HTTP transport on http://%s:%s%s", host, port, path)
        config = uvicorn.Config(self.build_app(path), host=host, port=port, log_level="info")
        uvicorn.Server(config).run()

    async def handle_request(self, request: Request) -> Response:
        if request.method == "POST":
            return await self._handle_post(request)
        if request.method == "GET":
            return self._handle_get(request)
        if request.method == "DELETE":
            return self._handle_delete(request)
        return _error_response("Method not allowed", 405)

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    @property
    def session_ids(self) -> list[str]:
        with self._lock:
            return list(self._sessions)

    def has_session(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._sessions

    def close(self) -> None:
        """Close every session and its stream."""
        with self._lock:
            for session_id in list(self._sessions):
                self._cleanup_session_unsafe(session_id)

    def cleanup_session(self, session_id: str, stream: SSEStream | None = None) -> bool:
        with self._lock:
            return self._cleanup_session_unsafe(session_id, stream)

    def _cleanup_session_unsafe(self, session_id: str, stream: SSEStream | None = None) -> bool:
        # With a stream given, only clean up if the session still owns it
        session = self._sessions.get(session_id)
        if session is None or (stream is not None and session.stream is not stream):
            return False

        del self._sessions[session_id]
        session.keepalive_stop.set()
        if session.stream is not None:
            session.stream.close()
        logger.info("Closed session %s", session_id)
        return True

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def send_notification(
        self, method: str, params: dict[str, Any] | None = None, session_id: str | None = None
    ) -> bool | int:
        """Send a notification to one session, or broadcast to all streams.

        Returns:
            For a targeted send, whether it was delivered; for a broadcast,
            the number of sessions it was delivered to

        Raises:
            RuntimeError: In stateless mode
        """
        if self.stateless:
            msg = "Stateless mode does not support notifications"
            raise RuntimeError(msg)

        event = format_sse_event(self.build_notification(method, params))

        with self._lock:
            if session_id is not None:
                session = self._sessions.get(session_id)
                if session is None or session.stream is None:
                    return False
                try:
                    session.stream.write(event)
                except OSError as e:
                    self._report(e, session_id=session_id, error="Failed to send notification")
                    self._cleanup_session_unsafe(session_id)
                    return False
                return True

            sent_count = 0
            failed_sessions = []
            for sid, session in self._sessions.items():
                if session.stream is None:
                    continue
                try:
                    session.stream.write(event)
                    sent_count += 1
                except OSError as e:
                    self._report(e, session_id=sid, error="Failed to send notification")
                    failed_sessions.append(sid)

            for sid in failed_sessions:
                self._cleanup_session_unsafe(sid)

            return sent_count

    # ------------------------------------------------------------------
    # POST
    # ------------------------------------------------------------------

    async def _handle_post(self, request: Request) -> Response:
        accept_error = self._validate_accept_header(request, REQUIRED_POST_ACCEPT_TYPES)
        if accept_error is not None:
            return accept_error

        body_bytes = b""
        try:
            body_bytes = await request.body()
            try:
                body = json.loads(body_bytes)
            except (json.JSONDecodeError, UnicodeDecodeError):
                return _error_response("Invalid JSON", 400)

            session_id = request.headers.get(SESSION_HEADER)

            if isinstance(body, dict) and body.get("method") == "initialize":
                return await self._handle_initialization(body)
            if isinstance(body, dict) and (_is_notification(body) or _is_response(body)):
                return await self._handle_accepted(body, session_id)
            return await self._handle_regular_request(body, session_id)
        except Exception as e:
            self._report(e, request=body_bytes.decode("utf-8", errors="replace"))
            return _error_response("Internal server error", 500)

    async def _handle_initialization(self, body: dict[str, Any]) -> Response:
        session_id = None
        context = RequestContext()

        if not self.stateless:
            session_id = str(uuid.uuid4())
            context.session_id = session_id
            with self._lock:
                self._sessions[session_id] = Session(session_id=session_id, context=context)
            logger.info("Opened session %s", session_id)

        response = await run_in_threadpool(self.server.handle, body, context)

        headers = {SESSION_HEADER: session_id} if session_id else None
        return JSONResponse(response, headers=headers)

    async def _handle_accepted(self, body: dict[str, Any], session_id: str | None) -> Response:
        # Client notifications still reach the server; nothing is sent back
        if _is_notification(body):
            await run_in_threadpool(self.server.handle, body, self._context_for(session_id))
        return Response(status_code=202)

    async def _handle_regular_request(self, body: Any, session_id: str | None) -> Response:
        if not self.stateless and session_id is not None and not self.has_session(session_id):
            return _error_response("Invalid session ID", 400)

        response = await run_in_threadpool(self.server.handle, body, self._context_for(session_id))
        if response is None:
            return Response(status_code=202)

        stream = None
        if session_id is not None and not self.stateless:
            with self._lock:
                session = self._sessions.get(session_id)
                stream = session.stream if session else None

        if stream is not None:
            try:
                stream.write(format_sse_event(response))
            except OSError as e:
                self._report(e, session_id=session_id, error="Stream closed during response")
                self.cleanup_session(session_id)
                return JSONResponse(response)
            return JSONResponse({"accepted": True})

        return JSONResponse(response)

    def _context_for(self, session_id: str | None) -> RequestContext:
        if session_id is not None:
            with self._lock:
                session = self._sessions.get(session_id)
            if session is not None:
                return session.context
        return RequestContext(session_id=session_id)

    # ------------------------------------------------------------------
    # GET
    # ------------------------------------------------------------------

    def _handle_get(self, request: Request) -> Response:
        if self.stateless:
            return _error_response("Method not allowed", 405)

        accept_error = self._validate_accept_header(request, REQUIRED_GET_ACCEPT_TYPES)
        if accept_error is not None:
            return accept_error

        session_id = request.headers.get(SESSION_HEADER)
        if not session_id:
            return _error_response("Missing session ID", 400)

        stream = SSEStream(asyncio.get_running_loop())
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return _error_response("Session not found", 404)

            # A new stream replaces (and closes) the previous one
            session.keepalive_stop.set()
            if session.stream is not None:
                session.stream.close()
            session.stream = stream
            session.keepalive_stop = threading.Event()
            stop = session.keepalive_stop

        self._start_keepalive(session_id, stream, stop)
        logger.info("Opened SSE stream for session %s", session_id)

        return StreamingResponse(
            self._stream_events(session_id, stream),
            media_type="text/event-stream",
            headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
        )

    async def _stream_events(self, session_id: str, stream: SSEStream) -> AsyncIterator[str]:
        try:
            async for chunk in stream.chunks():
                yield chunk
        finally:
            # Client went away
            self.cleanup_session(session_id, stream)

    def _start_keepalive(self, session_id: str, stream: SSEStream, stop: threading.Event) -> None:
        thread = threading.Thread(
            target=self._keepalive,
            args=(session_id, stream, stop),
            name=f"mcp-keepalive-{session_id}",
            daemon=True,
        )
        thread.start()

    def _keepalive(self, session_id: str, stream: SSEStream, stop: threading.Event) -> None:
        try:
            while not stop.wait(self.keepalive_interval):
                with self._lock:
                    session = self._sessions.get(session_id)
                    if session is None or session.stream is not stream:
                        break
                    stream.write(format_sse_ping())
        except Exception as e:
            self._report(e, session_id=session_id, error="Stream closed")
        finally:
            self.cleanup_session(session_id, stream)

    # ------------------------------------------------------------------
    # DELETE
    # ------------------------------------------------------------------

    def _handle_delete(self, request: Request) -> Response:
        if self.stateless:
            return JSONResponse({"success": True})

        session_id = request.headers.get(SESSION_HEADER)
        if not session_id:
            return _error_response("Missing session ID", 400)

        self.cleanup_session(session_id)
        return JSONResponse({"success": True})

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _validate_accept_header(
        self, request: Request, required_types: tuple[str, ...]
    ) -> Response | None:
        accept_header = request.headers.get("accept")
        if accept_header:
            accepted = parse_accept_header(accept_header)
            if all(required in accepted for required in required_types):
                return None
        return _error_response(
            f"Not Acceptable: Accept header must include {' and '.join(required_types)}", 406
        )

    def _report(self, exception: BaseException, **context: Any) -> None:
        self.server.report_exception(exception, context)


def _is_notification(body: dict[str, Any]) -> bool:
    return body.get("id") is None and bool(body.get("method"))


def _is_response(body: dict[str, Any]) -> bool:
    return body.get("id") is not None and not body.get("method")


__all__ = [
    "SESSION_HEADER",
    "SSEStream",
    "Session",
    "StreamableHTTPTransport",
    "format_sse_event",
    "format_sse_ping",
    "parse_accept_header",
]
