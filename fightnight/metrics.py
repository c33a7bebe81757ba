"""Prometheus metrics for the notifier.

All custom metrics use the 'fightnight_' prefix to avoid conflicts
with other applications in a shared observability stack.
"""

from prometheus_client import Counter, Gauge

NOTIFY_OUTCOMES_TOTAL = Counter(
    "fightnight_notify_outcomes_total",
    "Per-guild notifier outcomes",
    ["status", "reason"],  # status: posted, skipped, error
)

REMINDERS_CREATED_TOTAL = Counter(
    "fightnight_reminders_created_total",
    "Day-before reminders created",
    ["org"],
)

PROVIDER_ERRORS_TOTAL = Counter(
    "fightnight_provider_errors_total",
    "Provider failures by org and error type",
    ["org", "error_type"],
)

SCHEDULER_LAST_TICK = Gauge(
    "fightnight_scheduler_last_tick_timestamp",
    "Unix timestamp of the last completed notifier tick",
)
