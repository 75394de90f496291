"""Prometheus metrics for the scheduler."""
from prometheus_client import Counter, Histogram, start_http_server

# Session metrics
batches_built = Counter(
    "lexiloop_batches_built_total",
    "Total number of session batches built",
    ["mode"],
)

batch_size = Histogram(
    "lexiloop_batch_size_words",
    "Number of words in a freshly built batch",
    buckets=[0, 1, 5, 7, 10, 20],
)

outcomes_recorded = Counter(
    "lexiloop_outcomes_recorded_total",
    "Total number of challenge outcomes recorded",
    ["signal"],
)

words_graduated = Counter(
    "lexiloop_words_graduated_total",
    "Total number of words marked learned on session completion",
)

# Pool maintenance metrics
words_replenished = Counter(
    "lexiloop_words_replenished_total",
    "Total number of word states created by pool replenishment",
)

maintenance_failures = Counter(
    "lexiloop_maintenance_failures_total",
    "Total number of failed background maintenance runs",
    ["task"],
)

# Store metrics
store_errors = Counter(
    "lexiloop_store_errors_total",
    "Total number of backing store errors",
    ["operation"],
)


def start_monitoring(port: int = 9090) -> None:
    """Start the Prometheus metrics server."""
    start_http_server(port)
