"""Monitoring configuration for the puzzle engine."""
from prometheus_client import Counter, start_http_server

# Puzzle metrics
puzzles_opened = Counter(
    "bwordible_puzzles_opened_total",
    "Total number of puzzles opened",
    ["mode"],
)

puzzles_completed = Counter(
    "bwordible_puzzles_completed_total",
    "Total number of puzzles finished",
    ["mode", "result"],
)

# Guess metrics
guesses_submitted = Counter(
    "bwordible_guesses_submitted_total",
    "Total number of accepted guesses",
)

guesses_rejected = Counter(
    "bwordible_guesses_rejected_total",
    "Total number of rejected submissions",
    ["reason"],
)

# Storage metrics
save_load_failures = Counter(
    "bwordible_save_load_failures_total",
    "Total number of save documents discarded as unreadable",
)


def start_monitoring(port: int = 9090) -> None:
    """Start the Prometheus metrics server."""
    start_http_server(port)
