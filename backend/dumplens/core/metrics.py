"""Prometheus metrics for monitoring ingestion and query health."""
import re
import time

from fastapi import Request, Response
from prometheus_client import (CONTENT_TYPE_LATEST, Counter, Histogram,
                               generate_latest)
from starlette.middleware.base import BaseHTTPMiddleware

# HTTP Request Metrics
http_requests_total = Counter(
    'http_requests_total',
    'Total number of HTTP requests',
    ['method', 'endpoint', 'status_code']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)
)

# Execution Driver Metrics
statements_total = Counter(
    'dump_statements_total',
    'Dump statements processed by the execution driver',
    ['outcome']  # executed | failed | skipped
)

ingest_duration_seconds = Histogram(
    'dump_ingest_duration_seconds',
    'Time spent extracting and executing one uploaded dump',
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 300.0)
)

schemas_extracted_total = Counter(
    'schemas_extracted_total',
    'Schemas extracted from dumps',
    ['strategy']  # ddl | inserts | empty
)

# Query contract metrics
query_requests_total = Counter(
    'query_requests_total',
    'Queries executed against session stores',
    ['kind', 'status']
)

query_duration_seconds = Histogram(
    'query_duration_seconds',
    'Query execution duration in seconds',
    ['kind'],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0)
)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Middleware to collect Prometheus metrics for HTTP requests."""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()

        endpoint = self._normalize_path(request.url.path)

        try:
            response = await call_next(request)
            status_code = response.status_code

            duration = time.time() - start_time
            http_requests_total.labels(
                method=request.method,
                endpoint=endpoint,
                status_code=status_code
            ).inc()
            http_request_duration_seconds.labels(
                method=request.method,
                endpoint=endpoint
            ).observe(duration)

            return response
        except Exception:
            duration = time.time() - start_time
            http_requests_total.labels(
                method=request.method,
                endpoint=endpoint,
                status_code=500
            ).inc()
            http_request_duration_seconds.labels(
                method=request.method,
                endpoint=endpoint
            ).observe(duration)
            raise

    def _normalize_path(self, path: str) -> str:
        """Collapse session tokens and table names so label cardinality stays bounded."""
        path = re.sub(r'/sessions/[^/]+', '/sessions/{session}', path)
        path = re.sub(r'/tables/[^/]+', '/tables/{name}', path)
        return path


def get_metrics_response() -> Response:
    """Get Prometheus metrics in text format."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )
