"""Prometheus metrics for the clearance portal."""

from prometheus_client import Counter, Histogram

# State machine
clearance_transitions_total = Counter(
    "clearance_transitions_total",
    "Clearance state machine actions",
    ["action", "doc_type", "outcome"]  # outcome: applied|noop|illegal|forbidden|error
)

# Uploads
upload_rejections_total = Counter(
    "clearance_upload_rejections_total",
    "Uploads rejected by file validation",
    ["reason"]  # reason: validation error code
)

upload_size_bytes = Histogram(
    "clearance_upload_size_bytes",
    "Size of accepted uploads in bytes",
    buckets=[64 * 1024, 256 * 1024, 1024 ** 2, 2 * 1024 ** 2, 5 * 1024 ** 2, 10 * 1024 ** 2]
)

orphaned_blobs_total = Counter(
    "clearance_orphaned_blobs_total",
    "Blobs left without a referencing record",
    ["event"]  # event: upload_failed|swept
)

# HTTP
http_request_duration_seconds = Histogram(
    "clearance_http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "status_code"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0]
)
