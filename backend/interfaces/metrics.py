"""Prometheus request metrics for the HTTP surface."""
from __future__ import annotations

import time
from typing import Awaitable, Callable, Tuple

from fastapi import Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Histogram, generate_latest


class RequestMetrics:
    """Request counters and latencies, one registry per app instance."""

    def __init__(self) -> None:
        self.registry = CollectorRegistry()
        self.requests = Counter(
            "score_requests_total",
            "HTTP requests served, by endpoint and status code.",
            ["method", "endpoint", "status"],
            registry=self.registry,
        )
        self.latency = Histogram(
            "score_request_duration_seconds",
            "Time spent serving HTTP requests.",
            ["method", "endpoint"],
            registry=self.registry,
        )

    async def middleware(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        method, endpoint = request.method, request.url.path
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            self.observe(method, endpoint, 500, time.perf_counter() - start)
            raise
        self.observe(method, endpoint, response.status_code, time.perf_counter() - start)
        return response

    def observe(self, method: str, endpoint: str, status: int, seconds: float) -> None:
        self.requests.labels(method=method, endpoint=endpoint, status=str(status)).inc()
        self.latency.labels(method=method, endpoint=endpoint).observe(seconds)

    def render(self) -> Tuple[bytes, str]:
        return generate_latest(self.registry), CONTENT_TYPE_LATEST
