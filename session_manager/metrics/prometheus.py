# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Prometheus metric objects for the HTTP layer, the record store, the sync
engine and the timers. Defined once here and imported where they are updated.
"""

from prometheus_client import Counter, Gauge, Histogram

# ── HTTP Metrics (used by middleware) ──
REQUEST_COUNT = Counter(
    "session_requests_total",
    "Total HTTP requests to the session manager",
    ["method", "endpoint", "status"],
)
REQUEST_LATENCY = Histogram(
    "session_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)
HTTP_ERRORS = Counter(
    "session_http_errors_total",
    "Total HTTP error responses",
    ["method", "endpoint", "status"],
)

# ── Store Metrics (updated by the member store only) ──
STORE_READS = Counter(
    "session_store_reads_total",
    "Roster loads by backend",
    ["backend"],
)
STORE_WRITES = Counter(
    "session_store_writes_total",
    "Roster replace calls by backend and trigger",
    ["backend", "trigger"],
)
STORE_WRITE_FAILURES = Counter(
    "session_store_write_failures_total",
    "Failed roster replace calls",
    ["backend", "trigger"],
)
STORE_LATENCY = Histogram(
    "session_store_request_duration_seconds",
    "Backend round-trip time in seconds",
    ["backend", "operation"],
)

# ── Business Metrics (updated by service layer only) ──
SYNC_COALESCED = Counter(
    "session_sync_flushes_coalesced_total",
    "Ambient changes folded into an already armed debounced flush",
)
ROSTER_MEMBERS = Gauge(
    "session_roster_members",
    "Members in the in-memory working copy",
)
SPEAKER_TICKS = Counter(
    "session_speaker_ticks_total",
    "Seconds counted by the speaker timer",
)
SEED_RUNS = Counter(
    "session_seed_runs_total",
    "Roster seed attempts",
    ["seeded"],
)
