"""Monitoring configuration for the scheduler."""
from prometheus_client import Counter, Histogram, start_http_server

# Session metrics
sessions_started = Counter(
    "lexdrill_sessions_started_total",
    "Total number of practice sessions started",
    ["kind"],  # vocab, grammar
)

words_selected = Histogram(
    "lexdrill_session_words_selected",
    "Number of words selected for a vocabulary session",
    buckets=[0, 5, 10, 15, 20, 30, 50],
)

answers_recorded = Counter(
    "lexdrill_answers_recorded_total",
    "Total number of graded answers persisted",
    ["kind", "outcome"],  # outcome: correct, wrong
)

# Import metrics
import_rows = Counter(
    "lexdrill_import_rows_total",
    "Rows processed by bulk imports",
    ["kind", "result"],  # result: added, skipped
)

# Database metrics
db_operations = Counter(
    "lexdrill_db_operations_total",
    "Total number of database operations",
    ["operation_type"],
)

db_errors = Counter(
    "lexdrill_db_errors_total",
    "Total number of database errors",
    ["error_type"],
)


def outcome_label(correct: bool) -> str:
    return "correct" if correct else "wrong"


def start_monitoring(port: int = 9090) -> None:
    """Start the Prometheus metrics server."""
    start_http_server(port)
