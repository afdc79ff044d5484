import time
from typing import Optional

import aiohttp

from autopilot.main.config import get_settings
from autopilot.main.logging import get_logger

logger = get_logger(__name__)

SLOW_CONNECT_THRESHOLD_MS = 2000


class AioHttpClient:
    """Process-wide aiohttp session shared by outbound action handlers."""

    session: Optional[aiohttp.ClientSession] = None

    def _create_trace_config(self) -> aiohttp.TraceConfig:
        trace = aiohttp.TraceConfig()

        async def on_request_start(session, trace_config_ctx, params):
            trace_config_ctx._request_start_time = time.perf_counter()

        async def on_request_end(session, trace_config_ctx, params):
            start = getattr(trace_config_ctx, "_request_start_time", None)
            if start is None:
                return

            duration_ms = int((time.perf_counter() - start) * 1000)
            logger.debug(
                f"{params.method} {params.url.host} -> {params.response.status}",
                extra={
                    "event": "outbound_request",
                    "host": params.url.host,
                    "status": params.response.status,
                    "duration_ms": duration_ms,
                },
            )

        async def on_conn_start(session, trace_config_ctx, params):
            trace_config_ctx._conn_start_time = time.perf_counter()

        async def on_conn_end(session, trace_config_ctx, params):
            start = getattr(trace_config_ctx, "_conn_start_time", None)
            if start is None:
                return

            duration_ms = int((time.perf_counter() - start) * 1000)
            if duration_ms > SLOW_CONNECT_THRESHOLD_MS:
                logger.warning(
                    "Slow outbound connection",
                    extra={
                        "event": "connection_slow",
                        "duration_ms": duration_ms,
                        "threshold_ms": SLOW_CONNECT_THRESHOLD_MS,
                    },
                )

        trace.on_request_start.append(on_request_start)
        trace.on_request_end.append(on_request_end)
        trace.on_connection_create_start.append(on_conn_start)
        trace.on_connection_create_end.append(on_conn_end)

        return trace

    def start(self):
        settings = get_settings()

        # Handlers pass their own per-request timeout; this is the ceiling
        timeout = aiohttp.ClientTimeout(
            total=settings.automation_webhook_timeout_seconds * 3,
            connect=settings.automation_webhook_timeout_seconds,
        )

        connector = aiohttp.TCPConnector(
            limit=100,
            limit_per_host=20,
            enable_cleanup_closed=True,
            ttl_dns_cache=300,
        )

        self.session = aiohttp.ClientSession(
            timeout=timeout,
            connector=connector,
            headers={"User-Agent": settings.webhook_user_agent},
            trace_configs=[self._create_trace_config()],
        )

    async def stop(self):
        if self.session is not None:
            await self.session.close()
        self.session = None

    @property
    def started(self) -> bool:
        return self.session is not None and not self.session.closed

    def __call__(self) -> aiohttp.ClientSession:
        if not self.started:
            self.start()
        return self.session


aiohttp_client = AioHttpClient()
